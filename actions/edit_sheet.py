#!/usr/bin/env python3
"""
Load a spreadsheet, apply cell edits, and save the result.

**Conceptual**: Command-line driver for the full round trip. The sheet is
fetched from a URL or a local path, decoded into a typed table, edited cell
by cell (each edit keeps the cell's type), and exported to a new file.

**Usage**:
    # Fetch the default sample sheet and save it unchanged
    python actions/edit_sheet.py --output president.xlsx

    # Edit row 0's Index column and save as xlsx
    python actions/edit_sheet.py --source data/pres.xlsx --edit "0:Index=43" --output out.xlsx

    # Several edits, CSV output
    python actions/edit_sheet.py --source https://sheetjs.com/pres.xlsx \\
        --edit "0:Name=William Clinton" --edit "1:Index=47" --output out.csv

**Edit syntax**: ROW:COLUMN=VALUE, where ROW is a 0-based data row index
(the header row is not counted). VALUE is read according to the cell's
current type: numbers must be numeric, booleans "true"/"false", dates
ISO-8601. Strings accept anything.

**Error handling**:
    - A rejected edit is reported and skipped; the cell keeps its value.
    - Load or export failures stop the script.

**Exit codes**:
    - 0: Success (all edits applied, file written)
    - 1: Partial failure (some edits rejected, file written)
    - 2: Total failure (nothing written)
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

# Add project root to Python path so we can import sheetround modules
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from sheetround.config.settings import Settings, get_settings
from sheetround.data.io import normalize_format
from sheetround.data.schemas import CoercionError, SheetError
from sheetround.data.session import SheetSession
from sheetround.utils.log import setup_logging
from sheetround.venues.base import SheetSource, SourceError, format_from_name
from sheetround.venues.file_source import FileSheetSource
from sheetround.venues.http_source import HttpSheetSource


@dataclass(frozen=True)
class EditSpec:
    """One requested edit: row index, column name, raw input."""
    row_index: int
    column: str
    raw_input: str


def parse_edit_spec(text: str) -> EditSpec:
    """
    Parse "ROW:COLUMN=VALUE" into an EditSpec.

    The first ':' ends the row index and the first '=' after it ends the
    column name, so values may contain ':' and '='.

    Raises:
        ValueError: If the text does not match the syntax.

    Example:
        >>> parse_edit_spec("0:Index=43")
        EditSpec(row_index=0, column='Index', raw_input='43')
    """
    row_part, sep, rest = text.partition(":")
    if not sep:
        raise ValueError(f"Edit {text!r} must look like ROW:COLUMN=VALUE")

    column, sep, raw_input = rest.partition("=")
    if not sep or not column:
        raise ValueError(f"Edit {text!r} must look like ROW:COLUMN=VALUE")

    try:
        row_index = int(row_part)
    except ValueError:
        raise ValueError(f"Edit {text!r}: row {row_part!r} is not an integer")
    if row_index < 0:
        raise ValueError(f"Edit {text!r}: row index must be >= 0")

    return EditSpec(row_index=row_index, column=column, raw_input=raw_input)


def make_source(location: str, settings: Settings, format_tag: Optional[str] = None) -> SheetSource:
    """HTTP source for http(s) URLs, file source for anything else."""
    if location.startswith(("http://", "https://")):
        return HttpSheetSource(settings.source, url=location, format_tag=format_tag)
    return FileSheetSource(location, format_tag=format_tag)


def apply_edits(session: SheetSession, edits: List[EditSpec]) -> int:
    """
    Apply edits in order, printing one line per edit.

    Returns:
        Number of rejected edits.
    """
    rejected = 0
    for spec in edits:
        try:
            value = session.edit(spec.row_index, spec.column, spec.raw_input)
        except CoercionError as e:
            print(f"  ✗ {e}")
            rejected += 1
            continue
        except (IndexError, KeyError) as e:
            print(f"  ✗ Row {spec.row_index}, column {spec.column!r}: {e}")
            rejected += 1
            continue
        print(f"  ✓ Row {spec.row_index}, {spec.column} = {value.display()} ({value.kind.value})")
    return rejected


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the edit script.

    **Workflow**:
      1. Parse arguments and edits
      2. Load settings, fetch and decode the sheet
      3. Apply edits
      4. Export and write the output file

    Returns:
        Exit code (0 success, 1 partial, 2 failure).
    """
    parser = argparse.ArgumentParser(
        description="Load a spreadsheet, apply cell edits, and save the result",
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
        "--source-format",
        type=str,
        default=None,
        help="Force the input format (xlsx or csv). Default: inferred.",
    )
    parser.add_argument(
        "--edit",
        action="append",
        default=[],
        metavar="ROW:COLUMN=VALUE",
        help="Cell edit to apply. May be repeated.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output path. Default: SHEETROUND_EXPORT_FILENAME.",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        help="Output format (xlsx or csv). Default: from the output suffix, else settings.",
    )

    args = parser.parse_args(argv)

    try:
        edits = [parse_edit_spec(text) for text in args.edit]
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 2
    setup_logging(settings.log_level)

    location = args.source or settings.source.url
    output_path = Path(args.output or settings.export.filename)
    if args.format:
        output_format = normalize_format(args.format)
    else:
        output_format = format_from_name(output_path.name) or settings.export.format_tag

    print("=" * 60)
    print("Sheet Edit")
    print("=" * 60)
    print(f"Source: {location}")
    print(f"Edits: {len(edits)}")
    print(f"Output: {output_path} ({output_format})")
    print("=" * 60)

    session = SheetSession(settings.export)
    try:
        table = session.load(make_source(location, settings, args.source_format))
    except (SourceError, SheetError) as e:
        print(f"ERROR: Failed to load sheet: {e}")
        return 2

    print(f"Loaded {len(table)} rows, columns: {', '.join(table.headers)}")

    rejected = apply_edits(session, edits)

    try:
        payload = session.export(format_tag=output_format)
    except SheetError as e:
        print(f"ERROR: Failed to export sheet: {e}")
        return 2

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(payload)
    except OSError as e:
        print(f"ERROR: Failed to write {output_path}: {e}")
        return 2

    print("\n" + "=" * 60)
    print("Edit complete")
    print("=" * 60)
    print(f"Applied: {len(edits) - rejected}/{len(edits)} edits")
    print(f"Wrote {len(payload):,} bytes to {output_path}")
    print("=" * 60)

    return 1 if rejected else 0


if __name__ == "__main__":
    sys.exit(main())
