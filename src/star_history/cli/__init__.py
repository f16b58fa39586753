"""Command-line interface for Star History DB."""
