"""Café back-office inventory automation and sale fulfillment engine."""

__version__ = "0.1.0"
