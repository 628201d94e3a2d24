"""
Local file byte source.
"""

import logging
from pathlib import Path
from typing import Optional

from sheetround.venues.base import (
    SheetBytes,
    SourceAccessError,
    SourceNotFoundError,
    resolve_format,
)

logger = logging.getLogger(__name__)


class FileSheetSource:
    """
    Read a spreadsheet from disk.

    Every fetch re-reads the file, so reloading picks up external changes.
    """

    def __init__(self, path: Path | str, format_tag: Optional[str] = None):
        self.path = Path(path)
        self.format_tag = format_tag

    def fetch(self) -> SheetBytes:
        """
        Raises:
            SourceNotFoundError: If the file does not exist.
            SourceAccessError: If the file cannot be read.
        """
        if not self.path.exists():
            raise SourceNotFoundError(
                f"Sheet file not found: {self.path}. "
                f"Ensure the file exists and the path is correct."
            )

        try:
            payload = self.path.read_bytes()
        except OSError as e:
            raise SourceAccessError(f"Failed to read {self.path}. Error: {e}") from e

        format_tag = resolve_format(self.path.name, payload, hint=self.format_tag)
        logger.info("Read %d bytes from %s (%s)", len(payload), self.path, format_tag)
        return SheetBytes(payload=payload, format_tag=format_tag, name=str(self.path))
