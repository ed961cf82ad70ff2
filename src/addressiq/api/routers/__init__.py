"""API routers package.

Manifesto:
    Each router module owns one slice of the HTTP surface and delegates
    to the aggregation engine for everything else.

Tags:
    addressiq, api, routers, REST

Doc-Types:
    api-reference
"""
