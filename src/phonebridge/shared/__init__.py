"""
Shared utilities: logging and application errors.
"""
