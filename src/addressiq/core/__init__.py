"""AddressIQ core: errors, logging, settings, geometry and caching.

Architecture::

    errors.py      Error hierarchy (ProviderError, AddressNotFoundError, ...)
    logging.py     structlog configuration and context binding
    settings.py    pydantic-settings process configuration
    geo.py         Haversine distance, bounding boxes, ring centroid/area
    cache.py       CacheBackend protocol, in-memory LRU, Redis, ResultCache

Nothing in ``core`` imports from the adapter, engine or API layers.
"""
