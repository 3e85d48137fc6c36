"""distui - release configuration for Go projects from the terminal."""

__version__ = "0.4.0"
