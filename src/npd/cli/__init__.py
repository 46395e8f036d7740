"""Command-line surface for npd rendering."""
