"""
Interface layer package.

Command-line entry point.
"""
