"""Zero-knowledge paste storage server."""

__version__ = "0.1.0"
