"""Shared infrastructure: persistence, errors, logging, request context,
pagination, status lifecycle and rate limiting."""
