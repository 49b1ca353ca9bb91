"""Terminal-safe text and logging setup.

Report and progress output uses a handful of Unicode icons. On terminals
that cannot encode them (legacy Windows code pages, ASCII pipes) they are
swapped for ASCII stand-ins before printing.
"""
import locale
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ICON_MAP = {
    '✓': '[OK]',
    '✔': '[OK]',
    '✗': '[FAIL]',
    '✘': '[FAIL]',
    '⚠': '[WARN]',
    '↺': '[UNDO]',
    '→': '->',
    '←': '<-',
    '•': '*',
    '…': '...',
    '─': '-',
    '│': '|',
    '📦': '[pkg]',
    '📄': '[file]',
    '🔍': '[search]',
    '🧹': '[clean]',
}

UTF8_ENCODINGS = {'utf-8', 'utf8', 'utf_8'}

LOG_FORMAT = "%(message)s"
LOG_DATE_FORMAT = "[%X]"


def detect_terminal_encoding() -> str:
    """Return the lowercased stdout encoding, falling back to the locale."""
    encoding = getattr(sys.stdout, 'encoding', None)
    if encoding:
        return encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding() in UTF8_ENCODINGS


def sanitize_for_terminal(text: str, force: bool = False) -> str:
    """Replace Unicode icons with ASCII equivalents on non-UTF-8 terminals.

    Args:
        text: Text potentially containing icons
        force: Sanitize even if the terminal is UTF-8 capable

    Returns:
        Text safe to write to the current terminal
    """
    if not force and is_utf8_capable():
        return text

    for icon, replacement in ICON_MAP.items():
        text = text.replace(icon, replacement)
    return text


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Route the package's loggers through a RichHandler.

    INFO and above when verbose, otherwise WARNING and above. Calling this
    again replaces the previously installed handler.

    Returns:
        The package root logger
    """
    logger = logging.getLogger('codeguardian')
    level = logging.INFO if verbose else logging.WARNING

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
