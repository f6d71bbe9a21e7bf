"""
Exception handlers for the character figure server.

This package contains the handlers that map raised errors onto the response
envelope and a setup function to register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
