from rich.pretty import pprint

from arbor import *

__prog__ = "zoo"

shell = Shell("| ", colorful=True)


@shell.command
def dog(state, args):
    """a loyal friend"""
    return "woof"


felid = shell.group("felid", help="cats and such")
felid.command(lambda state, args: "roar", name="panther", help="a big cat")
felinae = felid.group("felinae", help="the small cats")
felinae.command(lambda state, args: "meow", name="domestic-cat", help="purrs on request")
felinae.command(lambda state, args: "grr", name="dangerous-tiger", help="do not pet")
shell.register(Leaf(echo))


if __name__ == '__main__':
    pprint(shell.commands)
    shell.run()
