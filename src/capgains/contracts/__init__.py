"""Wire contracts for capgains."""
