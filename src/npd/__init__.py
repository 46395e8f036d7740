"""Terminal presentation layer for the npd package manager."""

__version__ = "0.4.0"
