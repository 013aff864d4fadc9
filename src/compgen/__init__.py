"""Compgen: procedural expansion of composite mechanical structures."""

__version__ = "0.1.0"
