"""CLI package for querying the postal-code temperature services."""
