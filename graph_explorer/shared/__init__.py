"""Shared infrastructure used by the store adapters and the query service."""
