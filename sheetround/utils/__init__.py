"""
Generic utility functions shared across modules.

Currently holds logging setup.
"""
