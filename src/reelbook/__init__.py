"""Reelbook: slot game math simulation with reproducible books."""

from reelbook.errors import (
    BoardError,
    ConfigurationError,
    ReelbookError,
    SimulationError,
    WalletConsistencyError,
)
from reelbook.sim.config import GameConfig, GameMode, SimulationConfig
from reelbook.sim.context import GameContext
from reelbook.sim.criteria import ComputedReelWeights, FixedReelWeights, ResultSet
from reelbook.sim.simulation import ModeResult, Simulation
from reelbook.sim.symbols import GameSymbol
from reelbook.wins import ClusterWinType, LinesWinType, WaysWinType

__version__ = "0.1.0"
__all__ = [
    "GameSymbol",
    "GameMode",
    "GameConfig",
    "SimulationConfig",
    "ResultSet",
    "FixedReelWeights",
    "ComputedReelWeights",
    "GameContext",
    "Simulation",
    "ModeResult",
    "LinesWinType",
    "ClusterWinType",
    "WaysWinType",
    "ReelbookError",
    "ConfigurationError",
    "BoardError",
    "WalletConsistencyError",
    "SimulationError",
]
