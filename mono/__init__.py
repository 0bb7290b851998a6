"""Countdown and virtual-host web service."""

__version__ = "0.1.0"
