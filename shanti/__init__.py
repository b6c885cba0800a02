"""Shanti AI Chat - token authentication API and chat client."""

__version__ = "1.0.0"
