"""Command-line interface for capgains."""
