"""Wire models: address, per-source values, composite record, scores."""

from addressiq.models.address import AddressKey, AddressRecord, Identifiers, RegionCodes
from addressiq.models.composite import CompositeRecord, field_for_source
from addressiq.models.scores import PropertyScores

__all__ = [
    "AddressKey",
    "AddressRecord",
    "CompositeRecord",
    "Identifiers",
    "PropertyScores",
    "RegionCodes",
    "field_for_source",
]
