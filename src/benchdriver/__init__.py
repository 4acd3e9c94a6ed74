"""benchdriver: run Python snippets under several interpreters and compare them."""

__version__ = "0.1.0"
