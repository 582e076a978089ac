"""Win evaluators: paylines, clusters and ways."""

from reelbook.wins.base import (
    LineWinCombination,
    WaysWinCombination,
    WinCombination,
    WinResult,
    WinSymbol,
    WinType,
)
from reelbook.wins.cluster import ClusterWinType
from reelbook.wins.lines import LinesWinType
from reelbook.wins.ways import WaysWinType

__all__ = [
    "WinType",
    "WinResult",
    "WinSymbol",
    "WinCombination",
    "LineWinCombination",
    "WaysWinCombination",
    "LinesWinType",
    "ClusterWinType",
    "WaysWinType",
]
