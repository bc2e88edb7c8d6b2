"""
Directory pick prompt.

Uses prompt_toolkit path completion restricted to directories. Ctrl-C,
Ctrl-D or an empty answer cancel the pick.
"""

import os
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import PathCompleter
from prompt_toolkit.styles import Style

from audioflow.core.errors import NotADirectoryPicked, PickCancelled

PROMPT_STYLE = Style.from_dict({
    'prompt': '#00aa00 bold',
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
})


def normalize_picked_path(raw: str) -> str:
    """Turn a typed or file:// path into an absolute filesystem path."""
    path = raw.strip()
    if path.startswith("file://"):
        path = path[len("file://"):]
    return os.path.abspath(os.path.expanduser(path))


def pick_directory(start_dir: Optional[str] = None) -> str:
    """Prompt for a directory and return its absolute path.

    Raises:
        PickCancelled: If the user cancels or enters nothing
        NotADirectoryPicked: If the answer is not an existing directory
    """
    session = PromptSession(
        completer=PathCompleter(only_directories=True, expanduser=True),
        style=PROMPT_STYLE,
        complete_while_typing=True,
    )

    try:
        answer = session.prompt("📂 Directory: ", default=start_dir or "")
    except (KeyboardInterrupt, EOFError) as e:
        raise PickCancelled() from e

    if not answer.strip():
        raise PickCancelled()

    path = normalize_picked_path(answer)
    if not os.path.isdir(path):
        raise NotADirectoryPicked(path)
    return path
