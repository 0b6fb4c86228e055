"""Command line interface for mosaic."""
