#!/usr/bin/env python3
"""
Render a spreadsheet as an editable HTML page.

**Usage**:
    python actions/render_sheet_html.py --output sheet.html
    python actions/render_sheet_html.py --source data/pres.xlsx --output sheet.html

Each cell becomes an `<input>` whose type follows the cell's type (text,
number, date, checkbox).

**Exit codes**:
    - 0: Success
    - 2: Failure (nothing written)
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path so we can import sheetround modules
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from actions.edit_sheet import make_source
from sheetround.config.settings import get_settings
from sheetround.data.schemas import SheetError
from sheetround.data.session import SheetSession
from sheetround.render.html import render_page
from sheetround.utils.log import setup_logging
from sheetround.venues.base import SourceError


def main(argv: Optional[List[str]] = None) -> int:
    """Load the sheet and write the HTML page. Returns the exit code."""
    parser = argparse.ArgumentParser(
        description="Render a spreadsheet as an editable HTML page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="URL or local path of the sheet. Default: SHEETROUND_SOURCE_URL.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="sheet.html",
        help="Output HTML path. Default: sheet.html.",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 2
    setup_logging(settings.log_level)

    location = args.source or settings.source.url
    session = SheetSession(settings.export)
    try:
        table = session.load(make_source(location, settings))
    except (SourceError, SheetError) as e:
        print(f"ERROR: Failed to load sheet: {e}")
        return 2

    output_path = Path(args.output)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(render_page(table, title=location), encoding="utf-8")
    except OSError as e:
        print(f"ERROR: Failed to write {output_path}: {e}")
        return 2

    print(f"✓ Rendered {len(table)} rows x {len(table.headers)} columns to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
