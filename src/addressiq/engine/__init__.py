"""The aggregation engine: one address in, one scored composite record out."""

from addressiq.engine.aggregator import Aggregator, Progress, ProgressCallback, SourceOutcome

__all__ = ["Aggregator", "Progress", "ProgressCallback", "SourceOutcome"]
