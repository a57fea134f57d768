"""Meme composition engine: templates, word wrap, outlined text and encoding."""

__version__ = "0.1.0"
