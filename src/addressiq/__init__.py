"""AddressIQ: aggregated property intelligence for Dutch street addresses.

Given a postcode and house number, AddressIQ resolves the address against the
national address register, fans out to some thirty-five public and commercial
providers concurrently, and returns one composite record with per-source
errors, an optional AI summary and a derived set of investment scores.

Quick start::

    from addressiq.api import create_app

    app = create_app()  # ready for uvicorn

Tags:
    addressiq, property, aggregation, netherlands

Doc-Types:
    api-reference
"""

__version__ = "2.0.0"

__all__ = ["__version__"]
