"""Command-line interface for distui."""
