"""
sheetround: load a spreadsheet, edit it as a typed table, export it back.
"""
