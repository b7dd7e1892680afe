"""Command line interface for the compliance operator."""
