"""Cylindrical falling-block puzzle engine with a Gymnasium front end."""

__version__ = "0.1.0"
