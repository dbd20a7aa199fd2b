"""Core jq execution, expression building and server wiring."""
