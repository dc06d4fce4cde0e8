"""Services package for capgains."""
