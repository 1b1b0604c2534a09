"""Command-line entry point for wtd."""
