"""Output layout and artifact writers."""
