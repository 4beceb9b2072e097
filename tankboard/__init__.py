"""Tank status classification and grouping for the fuel tank board."""

__version__ = "1.2.0"
