"""HTTP API for the empathy exchange."""
