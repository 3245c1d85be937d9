"""Framecast: frame-overlay video compositing service."""

__version__ = "0.1.0"
