"""Command-line interface for velofit."""
