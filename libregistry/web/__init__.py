"""Web — REST API over the library registry."""
