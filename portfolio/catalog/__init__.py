"""
Package marker for the resource query core in `portfolio.catalog`.
Entity descriptors, query planning, population, analytics, and permissions live here.
The modules are transport-agnostic; HTTP concerns stay in `portfolio.api`.
"""
