"""Slowkicker: kicks slow uploads off a glftpd server."""

__version__ = "0.2.0"
