"""Lawdesk: form-driven entry of laws into a relational store"""

__version__ = "0.1.0"
