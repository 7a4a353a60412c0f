"""MooseFS Docker volume plugin."""

__version__ = "0.1.0"
