"""Interactive yes/no confirmation."""

import re
from typing import Callable, Optional

_YES = re.compile(r"[Yy]")


def confirm(question: str, input_func: Optional[Callable[[str], str]] = None) -> bool:
    """
    Ask a yes/no question on the terminal.

    Only a single 'y' or 'Y' counts as yes. End of input counts as no.
    """
    try:
        reply = (input_func or input)(f"{question} (y/n): ")
    except EOFError:
        return False
    return bool(_YES.fullmatch(reply.strip()))


def always_yes(question: str) -> bool:
    """Non-interactive stand-in for confirm() used by --yes."""
    return True
