"""Outbound HTTP: deadlines, retries and the shared typed JSON client."""

from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline
from addressiq.transport.retry import with_retry

__all__ = ["Deadline", "HttpClient", "with_retry"]
