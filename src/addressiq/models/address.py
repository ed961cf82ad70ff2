"""Address key, address record and region codes."""

from __future__ import annotations

from typing import Any

from pydantic import Field, computed_field, field_validator

from addressiq.models.base import CamelModel


def normalise_postcode(postcode: str) -> str:
    """Uppercase and strip all whitespace: ``"3541 ed"`` → ``"3541ED"``."""
    return "".join(postcode.split()).upper()


def normalise_house_number(house_number: str) -> str:
    return house_number.strip()


class AddressKey(CamelModel):
    """Canonical identity of one lookup request. Equality defines cache identity."""

    postcode: str
    house_number: str

    @classmethod
    def of(cls, postcode: str, house_number: str) -> AddressKey:
        return cls(postcode=normalise_postcode(postcode), house_number=normalise_house_number(house_number))

    def cache_key(self) -> str:
        return f"aggregated:{self.postcode}:{self.house_number}"

    def __str__(self) -> str:
        return f"{self.postcode} {self.house_number}"


class Identifiers(CamelModel):
    """BAG identifiers. ``primary`` prefers accommodation, then address, then building, then record id."""

    accommodation_id: str = ""
    address_id: str = ""
    building_id: str = ""
    parcel_id: str = ""
    record_id: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary(self) -> str:
        for candidate in (self.accommodation_id, self.address_id, self.building_id, self.record_id):
            if candidate:
                return candidate
        return ""


class AddressRecord(CamelModel):
    """Canonical identifiers and geometry for one postal address."""

    display_name: str
    street: str = ""
    house_number: str = ""
    postcode: str = ""
    city: str = ""
    coordinates: tuple[float, float] = Field(description="(longitude, latitude) in WGS84")
    geo_json: dict[str, Any] = Field(default_factory=dict, alias="geoJson")
    identifiers: Identifiers = Field(default_factory=Identifiers)
    municipality: str = ""
    municipality_code: str = ""
    province: str = ""
    province_code: str = ""

    @field_validator("postcode")
    @classmethod
    def _upper_postcode(cls, value: str) -> str:
        return normalise_postcode(value)

    @field_validator("coordinates")
    @classmethod
    def _not_null_island(cls, value: tuple[float, float]) -> tuple[float, float]:
        if value == (0.0, 0.0):
            raise ValueError("coordinates must not be (0, 0)")
        return value

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @property
    def bag_id(self) -> str:
        return self.identifiers.primary


class RegionCodes(CamelModel):
    """Administrative codes of the neighbourhood containing an address."""

    neighbourhood_code: str = ""
    neighbourhood_name: str = ""
    district_code: str = ""
    district_name: str = ""
    municipality_code: str = ""
    municipality_name: str = ""


__all__ = [
    "AddressKey",
    "AddressRecord",
    "Identifiers",
    "RegionCodes",
    "normalise_house_number",
    "normalise_postcode",
]
