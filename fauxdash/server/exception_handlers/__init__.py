"""
Exception handlers for the FauxDash server.

Domain errors raised by services are mapped to client errors; anything else
is logged with its request context and reported as a 500 with an error id.
"""

from .global_handler import (
    domain_error_handler,
    global_exception_handler,
    setup_exception_handlers,
)

__all__ = ["domain_error_handler", "global_exception_handler", "setup_exception_handlers"]
