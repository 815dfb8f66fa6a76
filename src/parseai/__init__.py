"""Parse AI - Document & conversation intelligence pipeline."""

__version__ = "0.1.0"
