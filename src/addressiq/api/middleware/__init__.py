"""API middleware package.

Manifesto:
    Cross-cutting concerns (request ids, timing, error mapping) belong in
    middleware so routers stay focused on the aggregation call.

Tags:
    addressiq, api, middleware, cross-cutting

Doc-Types:
    api-reference
"""
