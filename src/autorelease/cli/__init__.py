"""Command-line interface for autorelease."""
