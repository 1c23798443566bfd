"""The Rich theme and buffered console the renderers draw on.

Renderers never write to the terminal directly: they print into a
``StringIO``-backed console and hand the text back, so the same string
serves the terminal, pipes and CliRunner. Rich emits no colour codes
when the target is not a TTY.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CONSOLE_WIDTH = 120

DOMAIN_THEME = Theme(
    {
        "dom.ok": "bold green",
        "dom.error": "bold red",
        "dom.warning": "bold yellow",
        "dom.op": "bold cyan",
        "dom.key": "dim",
        "dom.name": "bold blue",
        "dom.identity": "magenta",
        "dom.amount": "green",
        "dom.time": "dim",
        "dom.kind.domain": "blue",
        "dom.kind.subdomain": "cyan",
    }
)


def create_console() -> Console:
    return Console(file=StringIO(), theme=DOMAIN_THEME, highlight=False, width=CONSOLE_WIDTH)


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console is not buffered; build it with create_console()")
    return buffer.getvalue()


def style_for_kind(kind: str) -> str:
    """Theme style for an event kind (``DomainRegistered`` and so on)."""
    return {
        "DomainRegistered": "dom.kind.domain",
        "SubdomainRegistered": "dom.kind.subdomain",
    }.get(kind, "")
