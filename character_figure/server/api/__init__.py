"""HTTP API of the character figure server."""
