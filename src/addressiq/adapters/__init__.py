"""Provider adapters: one async function per upstream source, plus the source catalogue."""

from addressiq.adapters.address import resolve_address
from addressiq.adapters.base import Need, ProviderContext, SourceSpec, Target
from addressiq.adapters.region import resolve_region
from addressiq.adapters.summariser import GeminiSummariser

__all__ = [
    "GeminiSummariser",
    "Need",
    "ProviderContext",
    "SourceSpec",
    "Target",
    "resolve_address",
    "resolve_region",
]
