"""RTP metrics and statistical summaries."""

from reelbook.metrics.rtp import (
    hit_rate,
    payout_array,
    payout_confidence_interval,
    rtp,
    summarize_mode,
)

__all__ = [
    "payout_array",
    "rtp",
    "hit_rate",
    "payout_confidence_interval",
    "summarize_mode",
]
