"""Investment and sustainability scoring over a composite record."""

from addressiq.scoring.engine import score_property

__all__ = ["score_property"]
