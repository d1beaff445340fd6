"""testsieve - Category-based test selection.

testsieve decides which nodes of a test description tree should run,
based on the category markers declared on each node and on its enclosing
unit, matched against configured include and exclude category sets.
"""

__version__ = "1.0.0"
