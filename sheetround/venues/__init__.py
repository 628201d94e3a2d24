"""
Byte sources for spreadsheets: HTTP downloads and local files.

Sources only fetch bytes and report a format tag; decoding lives in
sheetround.data.io.
"""
