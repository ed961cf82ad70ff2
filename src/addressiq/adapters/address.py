"""Address resolution against the national address service (PDOK Locatieserver).

This is the only adapter whose failure aborts a request: without coordinates
and identifiers there is nothing to fan out on.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from addressiq.core.errors import AddressNotFoundError, AddressResolutionError, ErrorKind, ProviderError
from addressiq.core.logging import get_logger
from addressiq.core.settings import Settings
from addressiq.models.address import AddressKey, AddressRecord, Identifiers
from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline

log = get_logger(__name__)

SOURCE = "address"


class _AddressDoc(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    weergavenaam: str = ""
    straatnaam: str = ""
    huis_nlt: str = ""
    huisnummer: int = 0
    huisletter: str = ""
    huisnummertoevoeging: str = ""
    postcode: str = ""
    woonplaatsnaam: str = ""
    centroide_ll: str = ""
    geometrie_polygoon: str = ""
    nummeraanduiding_id: str = ""
    adresseerbaarobject_id: str = ""
    verblijfsobject_id: str = ""
    pand_id: str | list[str] = ""
    perceel_id: str = ""
    gemeentenaam: str = ""
    gemeentecode: str = ""
    provincienaam: str = ""
    provinciecode: str = ""


class _AddressResponse(BaseModel):
    docs: list[_AddressDoc] = []


class _AddressReply(BaseModel):
    response: _AddressResponse = _AddressResponse()


def parse_wkt_point(wkt: str) -> tuple[float, float]:
    """Parse ``POINT(lon lat)`` into ``(lon, lat)``.

    Raises:
        ValueError: when the text is not a two-coordinate point.
    """
    text = wkt.strip()
    if not text.startswith("POINT(") or not text.endswith(")"):
        raise ValueError(f"not a WKT point: {wkt!r}")
    parts = text[len("POINT(") : -1].split()
    if len(parts) != 2:
        raise ValueError(f"expected two coordinates in {wkt!r}")
    return float(parts[0]), float(parts[1])


def _display_name(doc: _AddressDoc) -> str:
    if doc.weergavenaam.strip():
        return doc.weergavenaam.strip()

    number = doc.huis_nlt.strip()
    if not number and doc.huisnummer > 0:
        number = f"{doc.huisnummer}{doc.huisletter.upper()}{doc.huisnummertoevoeging.upper()}"
    name = f"{doc.straatnaam.strip()} {number}"
    if doc.postcode or doc.woonplaatsnaam:
        name += f", {doc.postcode.strip()} {doc.woonplaatsnaam.strip()}"
    return name.strip()


def _geo_json(doc: _AddressDoc, coordinates: tuple[float, float]) -> dict[str, Any]:
    if doc.geometrie_polygoon.strip():
        try:
            geometry = json.loads(doc.geometrie_polygoon)
        except ValueError:
            geometry = None
        if isinstance(geometry, dict):
            return geometry
    return {"type": "Point", "coordinates": [coordinates[0], coordinates[1]]}


def to_address_record(doc: _AddressDoc, key: AddressKey) -> AddressRecord:
    try:
        coordinates = parse_wkt_point(doc.centroide_ll)
    except ValueError as e:
        raise AddressResolutionError(
            "failed to parse coordinates from address response", kind=ErrorKind.DECODE, cause=e
        ) from e
    if coordinates == (0.0, 0.0):
        raise AddressResolutionError("address response carried null coordinates", kind=ErrorKind.DECODE)

    building_id = doc.pand_id[0] if isinstance(doc.pand_id, list) and doc.pand_id else doc.pand_id
    identifiers = Identifiers(
        accommodation_id=(doc.verblijfsobject_id or doc.adresseerbaarobject_id).strip(),
        address_id=doc.nummeraanduiding_id.strip(),
        building_id=str(building_id or "").strip(),
        parcel_id=doc.perceel_id.strip(),
        record_id=doc.id.strip(),
    )
    if not identifiers.primary:
        raise AddressResolutionError("address response carried no identifiers", kind=ErrorKind.DECODE)

    house_number = doc.huis_nlt.strip() or (str(doc.huisnummer) if doc.huisnummer else key.house_number)
    return AddressRecord(
        display_name=_display_name(doc),
        street=doc.straatnaam.strip(),
        house_number=house_number,
        postcode=doc.postcode or key.postcode,
        city=doc.woonplaatsnaam.strip(),
        coordinates=coordinates,
        geo_json=_geo_json(doc, coordinates),
        identifiers=identifiers,
        municipality=doc.gemeentenaam.strip(),
        municipality_code=doc.gemeentecode.strip(),
        province=doc.provincienaam.strip(),
        province_code=doc.provinciecode.strip(),
    )


async def resolve_address(
    http: HttpClient,
    settings: Settings,
    deadline: Deadline,
    key: AddressKey,
) -> AddressRecord:
    """Resolve a normalised postcode and house number into an :class:`AddressRecord`.

    Raises:
        AddressNotFoundError: the service has no document for this address.
        AddressResolutionError: the service failed or replied with garbage.
    """
    url = settings.require_address_service()
    params = {
        "q": f"postcode:{key.postcode} AND huisnummer:{key.house_number}",
        "fq": "type:adres",
        "rows": "1",
        "wt": "json",
    }

    try:
        reply = await http.get_json(deadline, SOURCE, url, _AddressReply, params=params)
    except ProviderError as e:
        log.warning("address_resolution_failed", error_kind=e.kind.value, error=e.message)
        raise AddressResolutionError(f"address service failed: {e.message}", kind=e.kind, cause=e) from e

    if not reply.response.docs:
        log.info("address_not_found", postcode=key.postcode, house_number=key.house_number)
        raise AddressNotFoundError(key.postcode, key.house_number)

    record = to_address_record(reply.response.docs[0], key)
    log.debug("address_resolved", bag_id=record.bag_id, lat=record.latitude, lon=record.longitude)
    return record


__all__ = ["parse_wkt_point", "resolve_address", "to_address_record"]
