"""
Legacy search response.

Older frontends expect one flat document per address with every provider
listed under its pricing category::

    {
      "address": "Dorpsstraat 53, 3541ED Utrecht",
      "coordinates": [5.0693, 52.1083],
      "geojson": "{\\"type\\": \\"Point\\", ...}",
      "apiResults": {
        "free":     [{"name": "BAG Address", "status": "success", "data": {...}, "category": "free"}, ...],
        "freemium": [...],
        "premium":  []
      },
      "aiSummary": {"summary": "...", "generated": true}
    }

An item's ``status`` is ``success`` when the source contributed, ``error``
(with the recorded message) when it failed, and ``not_configured`` otherwise.
"""

from __future__ import annotations

import json
from typing import Any

from addressiq.adapters.registry import FAN_OUT
from addressiq.models.composite import CompositeRecord

ADDRESS_LABEL = "BAG Address"
NOT_CONFIGURED = "API not configured"
CATEGORIES = ("free", "freemium", "premium")


def _item(name: str, status: str, category: str, *, data: Any = None, error: str | None = None) -> dict[str, Any]:
    item: dict[str, Any] = {"name": name, "status": status, "category": category}
    if data is not None:
        item["data"] = data
    if error:
        item["error"] = error
    return item


def build_api_results(record: CompositeRecord) -> dict[str, list[dict[str, Any]]]:
    """Group every source of ``record`` by category, in catalogue order."""
    results: dict[str, list[dict[str, Any]]] = {category: [] for category in CATEGORIES}
    results["free"].append(
        _item(
            ADDRESS_LABEL,
            "success",
            "free",
            data={"address": record.address.display_name, "coordinates": list(record.address.coordinates)},
        )
    )

    dumped = record.to_json()
    for spec in FAN_OUT:
        if record.has(spec.name):
            item = _item(spec.label, "success", spec.category, data=dumped[spec.name])
        elif spec.name in record.errors:
            item = _item(spec.label, "error", spec.category, error=record.errors[spec.name])
        else:
            item = _item(spec.label, "not_configured", spec.category, error=NOT_CONFIGURED)
        results[spec.category].append(item)
    return results


def build_legacy_response(record: CompositeRecord) -> dict[str, Any]:
    address = record.address
    return {
        "address": address.display_name,
        "coordinates": list(address.coordinates),
        "geojson": json.dumps(address.geo_json),
        "apiResults": build_api_results(record),
        "aiSummary": record.ai_summary.to_json(),
    }


__all__ = ["build_api_results", "build_legacy_response"]
