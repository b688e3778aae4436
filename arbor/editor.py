"""
Arbor line editor: the prompt_toolkit side of a shell.

- ShellCompleter: a prompt_toolkit Completer fed by Shell.complete().
- LineEditor: a PromptSession with that completer, history (in memory or in a
  file) and suggestions from history; its readline() is the default reader of
  Shell.run().

Line editing, key handling and history persistence belong to prompt_toolkit;
this module only wires the shell's completion into it.
"""
import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, InMemoryHistory

from .utils import Unset

logger = logging.getLogger(__name__)


class ShellCompleter(Completer):
    """Offer the shell's candidates for the word under the cursor."""

    def __init__(self, shell):
        self._shell = shell

    def get_completions(self, document, complete_event):
        before = document.text_before_cursor
        partial = "" if not before or before[-1].isspace() else before.split()[-1]
        for name in self._shell.complete(document.text, document.cursor_position):
            yield Completion(name, start_position=-len(partial))


class LineEditor:
    """
    Interactive reader for a shell.

    Parameters
    - shell: the Shell providing completion candidates.
    - history_file: path of a file to persist history in; in-memory history when not given.
    """

    def __init__(self, shell, /, history_file=Unset):
        if history_file is Unset:
            history = InMemoryHistory()
        else:
            history = FileHistory(str(history_file))
            logger.debug("history persisted to %s", history_file)
        self._session = PromptSession(
            completer=ShellCompleter(shell),
            history=history,
            auto_suggest=AutoSuggestFromHistory(),
        )

    @property
    def session(self):
        return self._session

    def readline(self, prompt, /):
        """read one line; raises EOFError on Ctrl-D and KeyboardInterrupt on Ctrl-C."""
        return self._session.prompt(prompt)


__all__ = (
    "ShellCompleter",
    "LineEditor",
)
