from __future__ import annotations

from collections import Counter
from typing import Iterable

from ..metrics.registry import (
    BATCH_OPERATIONS_TOTAL,
    BATCH_SUBMIT_LATENCY_SECONDS,
    BATCH_SUBMIT_TOTAL,
)
from .models import Operation


def observe_batch(operations: Iterable[Operation], status: str, latency_s: float) -> None:
    """
    Record one batch round trip.

    Args:
        operations: The operations that were submitted
        status: "success" or "error"
        latency_s: Round-trip latency in seconds
    """
    BATCH_SUBMIT_TOTAL.labels(status=status).inc()
    BATCH_SUBMIT_LATENCY_SECONDS.labels(status=status).observe(latency_s)

    per_type = Counter(op.op_type.value for op in operations)
    for op_type, count in per_type.items():
        BATCH_OPERATIONS_TOTAL.labels(op_type=op_type, status=status).inc(count)
