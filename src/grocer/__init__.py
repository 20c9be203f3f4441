"""
Grocer shopping-list package.

The package derives a shopping list from planned meals and the pantry, and keeps
manual additions, store assignments and checked-off history intact while the list
is regenerated.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
