"""Car Registry: HTTP API over soft-deletable vehicle records."""

__version__ = "0.1.0"
