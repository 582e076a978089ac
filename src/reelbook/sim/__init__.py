"""Simulation engine: board, criteria, game context and orchestration."""

from reelbook.sim.rng import RandomSource
from reelbook.sim.symbols import GameSymbol, ReelSet, ReelStrip
from reelbook.sim.state import BASE_GAME, FREE_SPINS, GameState, StateSnapshot
from reelbook.sim.criteria import (
    ComputedReelWeights,
    FixedReelWeights,
    ResultSet,
    assign_criteria,
    criteria_counts,
)
from reelbook.sim.config import GameConfig, GameMode, SimulationConfig
from reelbook.sim.board import Board, TumbleResult
from reelbook.sim.context import GameContext
from reelbook.sim.simulation import (
    ChunkResult,
    ModeResult,
    Simulation,
    run_chunk,
    run_single_simulation,
    split_ranges,
)

__all__ = [
    "RandomSource",
    "GameSymbol",
    "ReelStrip",
    "ReelSet",
    "BASE_GAME",
    "FREE_SPINS",
    "GameState",
    "StateSnapshot",
    "ResultSet",
    "FixedReelWeights",
    "ComputedReelWeights",
    "criteria_counts",
    "assign_criteria",
    "GameMode",
    "GameConfig",
    "SimulationConfig",
    "Board",
    "TumbleResult",
    "GameContext",
    "Simulation",
    "ModeResult",
    "ChunkResult",
    "run_chunk",
    "run_single_simulation",
    "split_ranges",
]
