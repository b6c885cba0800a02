"""Channels - front ends for the chat client."""
