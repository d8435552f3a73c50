"""
Electoral roll browsing and voter search.

Pick a precinct through cascading local body / ward / polling station
filters, then find voters by fuzzy (typo-tolerant, ranked) or exact
(single-field substring) search.
"""

__version__ = "0.1.0"
