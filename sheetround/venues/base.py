"""
Base abstractions for sheet byte sources.

**Conceptual**: The loader only needs a byte sequence and a format tag. Where
the bytes come from (an HTTP URL, a local file, a test fixture) is the job of
a SheetSource. Any object with a `fetch() -> SheetBytes` method qualifies;
no inheritance is required (structural typing via Protocol).

**Testing strategy**: code that needs a source can be handed a tiny stub:
    >>> class StaticSource:
    ...     def fetch(self):
    ...         return SheetBytes(payload=b"Name,Index\\nBill Clinton,42\\n", format_tag="csv", name="stub")
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional, Protocol

from sheetround.data.io import SUPPORTED_FORMATS, normalize_format, sniff_format


class SourceError(Exception):
    """
    Base exception for byte source errors.

    Caller can catch SourceError to handle all fetch failures, or the
    specific subclasses below for fine-grained handling.
    """
    pass


class SourceNotFoundError(SourceError):
    """Raised when the file or URL does not exist (missing path, HTTP 404)."""
    pass


class SourceAccessError(SourceError):
    """Raised when access is refused (HTTP 401/403, unreadable file)."""
    pass


class SourceServerError(SourceError):
    """Raised when the remote server fails (HTTP 5xx). Usually worth a retry."""
    pass


@dataclass(frozen=True)
class SheetBytes:
    """
    Raw spreadsheet contents plus what is known about them.

    Attributes:
        payload: The file bytes.
        format_tag: "xlsx", "csv", ... as reported or guessed by the source.
        name: Human-readable origin (path or URL) for messages.
    """
    payload: bytes
    format_tag: str
    name: str = "sheet"


class SheetSource(Protocol):
    """Anything that can produce sheet bytes on demand."""

    def fetch(self) -> SheetBytes:
        """
        Fetch the current bytes of the sheet.

        Raises:
            SourceError: If the bytes cannot be obtained.
        """
        ...


def format_from_name(name: str) -> Optional[str]:
    """
    Format tag implied by a path or URL path suffix, or None.

    Example:
        >>> format_from_name("data/pres.XLSX")
        'xlsx'
        >>> format_from_name("https://example.com/download") is None
        True
    """
    suffix = PurePosixPath(name).suffix
    if not suffix:
        return None
    fmt = normalize_format(suffix)
    return fmt if fmt in SUPPORTED_FORMATS else None


def resolve_format(name: str, payload: bytes, hint: Optional[str] = None) -> str:
    """Pick a format tag: explicit hint, then name suffix, then byte sniffing."""
    if hint:
        return normalize_format(hint)
    return format_from_name(name) or sniff_format(payload)
