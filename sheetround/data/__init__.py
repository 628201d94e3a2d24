"""
Sheet data model, codecs, and editing.

Handles decoding spreadsheet bytes into typed tables, type-preserving cell
edits, and encoding tables back into spreadsheet bytes.
"""
