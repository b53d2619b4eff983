"""
ihexkit Command-Line Interface
==============================

This package provides the ``ihextool`` command, a Click-based application
for inspecting, validating and converting Intel HEX files.
"""

__all__ = ["ihextool"]
