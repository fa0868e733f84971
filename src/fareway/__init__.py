"""Fareway - read-only golf travel data tools over MCP and REST.

A fixed catalogue of schema-validated lookups (courses, accommodations,
negotiated supplier rates) served from a PostgREST store through one
dispatch engine, with a read-through cache, bearer auth and rate limiting.

Quick Start:
    >>> from fareway.app import Gateway, create_app
    >>> from fareway.foundation.config import get_settings
    >>> app = create_app(Gateway.from_settings(get_settings()))

Run:
    $ fareway --transport http --port 8081
    $ fareway --transport stdio
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
