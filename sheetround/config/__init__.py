"""
Configuration loading and validation for sheetround.

Provides strongly typed settings objects for the sheet source, export
format, and logging level, with upfront validation.
"""
