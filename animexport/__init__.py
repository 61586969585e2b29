"""animexport: frame-oriented animation command encoder."""

__version__ = "0.1.0"
