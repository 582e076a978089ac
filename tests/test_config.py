"""Tests for symbols and game, mode and simulation configuration."""

import pickle
from dataclasses import replace

import pytest

from reelbook.demo import build_game, game_flow
from reelbook.errors import ConfigurationError
from reelbook.sim.config import GameConfig, GameMode, SimulationConfig
from reelbook.sim.criteria import ResultSet
from reelbook.sim.state import BASE_GAME, FREE_SPINS
from reelbook.sim.symbols import GameSymbol

A = GameSymbol("A", pays={3: 1, 5: 4})
B = GameSymbol("B")
WEIGHTS = {BASE_GAME: {"main": 1}}


def make_mode(**overrides) -> GameMode:
    params = {
        "name": "base",
        "reels_amount": 3,
        "symbols_per_reel": [3, 3, 3],
        "cost": 1.0,
        "reel_sets": {"main": ((A, B), (B, A), (A, A, B))},
        "result_sets": [ResultSet("basegame", 1.0, WEIGHTS)],
    }
    params.update(overrides)
    return GameMode(**params)


def make_game(**overrides) -> GameConfig:
    params = {
        "id": "test_game",
        "name": "Test Game",
        "symbols": {"A": A, "B": B},
        "game_modes": {"base": make_mode()},
        "max_win": 1000,
        "flow": game_flow,
    }
    params.update(overrides)
    return GameConfig(**params)


class TestGameSymbol:
    """Tests for GameSymbol."""

    def test_payout_uses_largest_key_not_above_kind(self) -> None:
        """Test pay table lookup between and below keys."""
        assert A.payout_for(2) == 0.0
        assert A.payout_for(3) == 1.0
        assert A.payout_for(4) == 1.0
        assert A.payout_for(7) == 4.0
        assert B.payout_for(5) == 0.0

    def test_min_pay_kind(self) -> None:
        """Test the smallest paying match length."""
        assert A.min_pay_kind == 3
        assert B.min_pay_kind is None

    def test_compare(self) -> None:
        """Test comparing by id and by properties."""
        wild = GameSymbol("W", properties={"wild": True, "multiplier": 2})
        assert wild.compare(GameSymbol("W"))
        assert not wild.compare(A)
        assert wild.compare({"wild": True})
        assert not wild.compare({"wild": True, "multiplier": 3})
        assert not A.compare({"wild": True})

    def test_empty_pays_raise(self) -> None:
        """Test that a declared pay table cannot be empty."""
        with pytest.raises(ConfigurationError, match="pays"):
            GameSymbol("A", pays={})

    def test_symbols_are_immutable(self) -> None:
        """Test that pay tables cannot be edited after creation."""
        with pytest.raises(TypeError):
            A.pays[3] = 10  # type: ignore[index]

    def test_pickle(self) -> None:
        """Test that symbols survive pickling."""
        wild = GameSymbol("W", pays={3: 2}, properties={"wild": True})
        restored = pickle.loads(pickle.dumps(wild))
        assert restored == wild
        assert restored.compare({"wild": True})


class TestGameMode:
    """Tests for GameMode validation and lookups."""

    def test_rows_must_match_reels(self) -> None:
        """Test that every reel needs a row count."""
        with pytest.raises(ConfigurationError, match="symbols_per_reel"):
            make_mode(symbols_per_reel=[3, 3])

    def test_cost_must_be_positive(self) -> None:
        """Test that a mode must cost something."""
        with pytest.raises(ConfigurationError, match="cost"):
            make_mode(cost=0)

    def test_reel_set_shape(self) -> None:
        """Test that reel sets must have one strip per reel."""
        with pytest.raises(ConfigurationError, match="must have 3 reels"):
            make_mode(reel_sets={"main": ((A,), (B,))})

    def test_empty_strip(self) -> None:
        """Test that strips cannot be empty."""
        with pytest.raises(ConfigurationError, match="empty reel"):
            make_mode(reel_sets={"main": ((A,), (), (B,))})

    def test_duplicate_criteria(self) -> None:
        """Test that criteria labels are unique within a mode."""
        with pytest.raises(ConfigurationError, match="duplicate"):
            make_mode(
                result_sets=[
                    ResultSet("basegame", 0.5, WEIGHTS),
                    ResultSet("basegame", 0.5, WEIGHTS),
                ]
            )

    def test_lookups(self) -> None:
        """Test finding result sets and reel sets."""
        mode = make_mode()
        assert mode.result_set("basegame").quota == 1.0
        assert len(mode.reel_set("main")) == 3
        with pytest.raises(ConfigurationError, match="no criteria"):
            mode.result_set("freespins")
        with pytest.raises(ConfigurationError, match="no reel set"):
            mode.reel_set("other")


class TestGameConfig:
    """Tests for GameConfig validation and lookups."""

    def test_symbol_key_must_match_id(self) -> None:
        """Test mismatched symbol keys."""
        with pytest.raises(ConfigurationError, match="does not match"):
            make_game(symbols={"A": A, "X": B})

    def test_unknown_strip_symbols(self) -> None:
        """Test strips using symbols the game does not declare."""
        with pytest.raises(ConfigurationError, match="unknown symbols"):
            make_game(symbols={"A": A})

    def test_max_win_must_be_positive(self) -> None:
        """Test the win cap."""
        with pytest.raises(ConfigurationError, match="max_win"):
            make_game(max_win=0)

    def test_empty_free_spin_awards(self) -> None:
        """Test that award tables cannot be empty."""
        with pytest.raises(ConfigurationError, match="scatter_to_freespins"):
            make_game(scatter_to_freespins={BASE_GAME: {}})

    def test_anticipation_triggers(self) -> None:
        """Test the scatter count that starts anticipation."""
        game = build_game()
        assert game.anticipation_triggers == {BASE_GAME: 2, FREE_SPINS: 2}

    def test_lookups(self) -> None:
        """Test finding modes and symbols."""
        game = make_game()
        assert game.game_mode("base").name == "base"
        assert game.symbol("A") is A
        with pytest.raises(ConfigurationError, match="no mode"):
            game.game_mode("bonus")
        with pytest.raises(ConfigurationError, match="no symbol"):
            game.symbol("Z")

    def test_demo_game_pickles(self) -> None:
        """Test that a full game configuration can be sent to workers."""
        game = build_game()
        restored = pickle.loads(pickle.dumps(game))
        assert restored.game_mode("base").reel_set("base") == game.game_mode("base").reel_set(
            "base"
        )
        assert restored.flow is game.flow

    def test_replace_revalidates(self) -> None:
        """Test that replacing fields runs validation again."""
        with pytest.raises(ConfigurationError, match="pad_symbols"):
            replace(build_game(), pad_symbols=-1)


class TestSimulationConfig:
    """Tests for SimulationConfig."""

    def test_defaults(self) -> None:
        """Test default workers and seed."""
        config = SimulationConfig(runs={"base": 10})
        assert 1 <= config.workers <= 6
        assert config.assignment_seed == 0

    def test_runs_required(self) -> None:
        """Test that at least one mode must be named."""
        with pytest.raises(ConfigurationError, match="runs"):
            SimulationConfig(runs={})

    def test_negative_runs(self) -> None:
        """Test negative simulation counts."""
        with pytest.raises(ConfigurationError, match="negative"):
            SimulationConfig(runs={"base": -1})

    def test_workers_must_be_positive(self) -> None:
        """Test the worker count."""
        with pytest.raises(ConfigurationError, match="workers"):
            SimulationConfig(runs={"base": 1}, workers=0)
