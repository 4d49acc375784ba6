"""Language Server Protocol wire format: framing, schema records and constants."""
