"""
Job-board delegated administration service.

Sub-admin grants, permission evaluation and route guards.
"""

__version__ = "0.1.0"
