"""
Character Figure Server Package.

This package contains the web server implementation for the character figure generator.
It includes the API definition, configuration, authentication and response helpers.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Mapping of raised errors onto the response envelope.
    middleware: Request tracing middleware.
"""
