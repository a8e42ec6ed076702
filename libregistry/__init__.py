"""libregistry — a registry of software libraries with access control and licensing."""

__version__ = "0.1.0"
