"""
Shared test support.
"""
