"""HTTP API for the routing service."""
