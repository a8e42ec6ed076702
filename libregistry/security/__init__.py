"""Security — audit trail of registry events."""
