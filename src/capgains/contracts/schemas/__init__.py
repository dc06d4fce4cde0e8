"""JSON Schema documents for transaction records."""
