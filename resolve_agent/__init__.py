"""Resolve Agent - AI-powered package installation resolver."""

__version__ = "0.1.0"
