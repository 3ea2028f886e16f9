"""Utility modules for acp-identity."""
