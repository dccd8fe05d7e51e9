"""Normalization of raw stream statistics for display."""

import math
from decimal import ROUND_HALF_UP, Decimal

from .models import StreamStats

SIZE_IN_MB = 1024.0 * 1024.0


def _round_2(value: float) -> float:
    """Round to two decimals, ties away from zero.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    scaled = Decimal(value * 100.0).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(scaled) / 100.0


def normalize_stats(stats: StreamStats) -> StreamStats:
    """Return a copy of ``stats`` with sizes converted from bytes to MiB."""
    return stats.model_copy(
        update={
            "storage_size": _round_2(stats.storage_size / SIZE_IN_MB),
            "compressed_size": _round_2(stats.compressed_size / SIZE_IN_MB),
        }
    )


__all__ = ["normalize_stats", "SIZE_IN_MB"]
