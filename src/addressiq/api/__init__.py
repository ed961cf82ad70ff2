"""
REST API layer for AddressIQ.

Provides a FastAPI application factory whose endpoints delegate to the
aggregation engine. This package handles only HTTP concerns:
serialisation, parameter validation, error mapping and request context.

Quick start::

    from addressiq.api import create_app

    app = create_app()  # ready for uvicorn

Tags:
    addressiq, api, REST, FastAPI

Doc-Types:
    api-reference
"""

from addressiq.api.app import create_app

__all__ = ["create_app"]
