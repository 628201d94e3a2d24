"""
sheetround – Main entry point.

Loads the configured sample sheet once and prints its shape, to verify the
project structure and settings are in place. The real work lives in
actions/edit_sheet.py and actions/render_sheet_html.py.
"""

import sys

from sheetround.config.settings import get_settings
from sheetround.data.schemas import SheetError
from sheetround.data.session import SheetSession
from sheetround.utils.log import setup_logging
from sheetround.venues.base import SourceError
from sheetround.venues.http_source import HttpSheetSource


def main() -> int:
    """Fetch the default sheet and print a one-line summary."""
    settings = get_settings()
    setup_logging(settings.log_level)

    session = SheetSession(settings.export)
    with HttpSheetSource(settings.source) as source:
        try:
            table = session.load(source)
        except (SourceError, SheetError) as e:
            print(f"sheetround bootstrap failed: {e}")
            return 2

    print(f"sheetround bootstrap complete: {len(table)} rows, columns {table.headers}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
