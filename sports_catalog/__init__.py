"""
Sports Catalog.

Canonical catalog of sports reference entities (sports, teams, players,
stadiums) kept in sync with external data providers, with alias-based
identity resolution on top.
"""

__version__ = "1.0.0"
