"""Utility modules for logging and error handling."""
