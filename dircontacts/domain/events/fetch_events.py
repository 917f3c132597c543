"""Domain Events related to batched contact fetching.

Emitted by the batch workers so retries and failures can be observed
without the workers knowing who is listening.
"""

from dataclasses import dataclass, field
import time
from typing import Optional

@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific Fetch Events ---

@dataclass
class BatchFetchStarted(DomainEvent):
    """Event triggered when a batch-get call is about to be made."""
    batch_index: int
    batch_size: int
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchFetchSucceeded(DomainEvent):
    """Event triggered when a batch-get call returns."""
    batch_index: int
    record_count: int
    address_count: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class QuotaRetryScheduled(DomainEvent):
    """Event triggered when a throttled batch is scheduled for another attempt."""
    batch_index: int
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchFetchFailed(DomainEvent):
    """Event triggered when a batch fails definitively."""
    batch_index: int
    error_type: str
    error_message: str
    attempts: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
