"""Tests for the board: draws, padding, tumbles and queries."""

import pytest

from reelbook.errors import BoardError
from reelbook.sim.board import Board
from reelbook.sim.rng import RandomSource
from reelbook.sim.symbols import GameSymbol
from reelbook.wins.base import WinCombination, WinSymbol

SYMBOLS = {s: GameSymbol(s) for s in ("A", "B", "C", "S")}

STRIPS = (
    "A C B A A C A B C A",
    "A A C B A B C A B C",
    "B A A C B A B C A B",
    "B C A A B C C C A B",
    "B B C A C C A B C A",
)

ROWS = [5, 5, 5, 5, 5]


def make_reels(rows: tuple[str, ...] = STRIPS) -> tuple[tuple[GameSymbol, ...], ...]:
    return tuple(tuple(SYMBOLS[s] for s in row.split()) for row in rows)


def ids(reels: list[list[GameSymbol]]) -> list[list[str]]:
    return [[symbol.id for symbol in reel] for reel in reels]


def drawn_board() -> Board:
    """Board drawn at stop 5 on every reel, without a random row offset."""
    board = Board()
    board.reset(5)
    board.draw_forced(
        make_reels(),
        {reel: 5 for reel in range(5)},
        ROWS,
        pad_symbols=1,
        rng=RandomSource(0),
        randomize_offset=False,
    )
    return board


class TestDraw:
    """Tests for drawing boards."""

    def test_forced_stops_without_offset(self) -> None:
        """Test that the window starts at the forced position."""
        board = drawn_board()
        assert board.last_drawn_stops == [5, 5, 5, 5, 5]
        assert ids(board.reels) == [
            ["C", "A", "B", "C", "A"],
            ["B", "C", "A", "B", "C"],
            ["A", "B", "C", "A", "B"],
            ["C", "C", "C", "A", "B"],
            ["C", "A", "B", "C", "A"],
        ]

    def test_padding_wraps_around_strip(self) -> None:
        """Test padding above and below the window, wrapping past the strip end."""
        board = drawn_board()
        assert ids(board.padding_top) == [["A"], ["A"], ["B"], ["B"], ["C"]]
        assert ids(board.padding_bottom) == [["A"], ["A"], ["B"], ["B"], ["B"]]

    def test_padding_order(self) -> None:
        """Test top padding is outermost first and bottom padding innermost first."""
        strip = tuple(GameSymbol(str(i)) for i in range(10))
        board = Board()
        board.reset(1)
        board.draw_forced((strip,), {0: 4}, [3], 2, RandomSource(0), randomize_offset=False)

        assert ids(board.reels) == [["4", "5", "6"]]
        assert ids(board.padding_top) == [["2", "3"]]
        assert ids(board.padding_bottom) == [["7", "8"]]
        assert board.padding_top[0].pop().id == "3"

    def test_forced_stop_is_visible_with_offset(self) -> None:
        """Test that a forced position lands on a visible row."""
        strip = tuple(GameSymbol(str(i)) for i in range(10))
        rng = RandomSource(7)
        for _ in range(50):
            board = Board()
            board.reset(1)
            stops = board.draw_forced((strip,), {0: 1}, [3], 1, rng)
            assert 0 <= stops[0] < 10
            assert "1" in ids(board.reels)[0]

    def test_negative_stop_wraps(self) -> None:
        """Test that offsets pulling a stop below zero wrap to the strip end."""
        strip = tuple(GameSymbol(str(i)) for i in range(10))
        rng = RandomSource(3)
        seen = set()
        for _ in range(100):
            board = Board()
            board.reset(1)
            seen.add(board.draw_forced((strip,), {0: 0}, [3], 1, rng)[0])
        assert seen <= {0, 8, 9}
        assert seen & {8, 9}

    def test_random_draw_is_reproducible(self) -> None:
        """Test that the same seed draws the same board."""
        first, second = Board(), Board()
        first.draw_random(make_reels(), ROWS, 1, RandomSource(42))
        second.draw_random(make_reels(), ROWS, 1, RandomSource(42))
        assert ids(first.reels) == ids(second.reels)
        assert first.last_drawn_stops == second.last_drawn_stops

    def test_random_stops_cover_whole_strip(self) -> None:
        """Test that random stops reach the last strip position."""
        strip = tuple(GameSymbol(str(i)) for i in range(4))
        rng = RandomSource(1)
        stops = {Board().draw_random((strip,), [1], 0, rng)[0] for _ in range(200)}
        assert stops == {0, 1, 2, 3}

    def test_locked_reels_keep_their_stop(self) -> None:
        """Test that locked reels stay put across draws."""
        board = drawn_board()
        board.lock_reels([0, 4])
        stops = board.draw_random(make_reels(), ROWS, 1, RandomSource(9))
        assert stops[0] == 5
        assert stops[4] == 5
        assert ids(board.reels)[0] == ["C", "A", "B", "C", "A"]

    def test_locked_reels_before_draw_raise(self) -> None:
        """Test that drawing locked reels before any draw fails."""
        board = Board()
        board.reset(5, locked_reels=[1])
        with pytest.raises(BoardError, match="locked reels"):
            board.draw_random(make_reels(), ROWS, 1, RandomSource(0))

    def test_shape_mismatch_raises(self) -> None:
        """Test that rows per reel must match the reel count."""
        with pytest.raises(BoardError, match="symbols_per_reel"):
            Board().draw_random(make_reels(), [5, 5], 1, RandomSource(0))

    def test_empty_strip_raises(self) -> None:
        """Test that an empty strip is reported as malformed."""
        with pytest.raises(BoardError, match="empty strip"):
            Board().draw_random(((),), [3], 1, RandomSource(0))


class TestTumble:
    """Tests for removing cells and refilling reels."""

    def test_tumble_pulls_symbols_above_padding(self) -> None:
        """Test refill from padding and strip, and the new padding."""
        board = drawn_board()
        cells = [(reel, row) for reel in (1, 2, 3) for row in (1, 2)]

        result = board.tumble(cells, ROWS, 1)

        assert ids(board.reels) == [
            ["C", "A", "B", "C", "A"],
            ["B", "A", "B", "B", "C"],
            ["C", "B", "A", "A", "B"],
            ["A", "B", "C", "A", "B"],
            ["C", "A", "B", "C", "A"],
        ]
        assert ids(board.padding_top) == [["A"], ["C"], ["A"], ["A"], ["C"]]
        assert {r: [s.id for s in syms] for r, syms in result.new_symbols.items()} == {
            1: ["B", "A"],
            2: ["C", "B"],
            3: ["A", "B"],
        }
        assert {r: [s.id for s in syms] for r, syms in result.new_padding_top.items()} == {
            1: ["C"],
            2: ["A"],
            3: ["A"],
        }
        assert board.last_drawn_stops == [5, 3, 3, 3, 5]

    def test_chained_tumbles_continue_backward(self) -> None:
        """Test that a second tumble continues from the first one's new top."""
        board = drawn_board()
        cells = [(reel, row) for reel in range(5) for row in (1, 2)]

        board.tumble(cells, ROWS, 1)
        board.tumble(cells, ROWS, 1)

        assert ids(board.reels) == [
            ["C", "B", "A", "C", "A"],
            ["A", "C", "B", "B", "C"],
            ["A", "A", "C", "A", "B"],
            ["C", "A", "A", "A", "B"],
            ["B", "C", "A", "C", "A"],
        ]
        assert ids(board.padding_top) == [["A"], ["A"], ["B"], ["B"], ["B"]]
        assert board.last_drawn_stops == [1, 1, 1, 1, 1]

    def test_duplicate_cells_removed_once(self) -> None:
        """Test that repeated cells only remove one symbol."""
        board = drawn_board()
        result = board.tumble([(0, 0), (0, 0)], ROWS, 1)
        assert [s.id for s in result.new_symbols[0]] == ["A"]
        assert ids(board.reels)[0] == ["A", "A", "B", "C", "A"]

    def test_untouched_reels_do_not_change(self) -> None:
        """Test that reels without removals keep symbols and padding."""
        board = drawn_board()
        result = board.tumble([(2, 0)], ROWS, 1)
        assert set(result.new_symbols) == {2}
        assert ids(board.reels)[0] == ["C", "A", "B", "C", "A"]
        assert ids(board.padding_top)[0] == ["A"]

    def test_tumble_before_draw_raises(self) -> None:
        """Test that tumbling an undrawn board fails."""
        board = Board()
        board.reset(5)
        with pytest.raises(BoardError, match="before drawing"):
            board.tumble([(0, 0)], ROWS, 1)


class TestQueries:
    """Tests for board queries and helpers."""

    def test_count_on_board(self) -> None:
        """Test counting symbols per reel."""
        board = drawn_board()
        total, per_reel = board.count_on_board(SYMBOLS["C"])
        assert total == 10
        assert per_reel == {0: 2, 1: 2, 2: 1, 3: 3, 4: 2}

    def test_count_by_properties(self) -> None:
        """Test counting by a property subset."""
        scatter = GameSymbol("S", properties={"scatter": True})
        board = Board()
        board.reset(2)
        board.reels = [[scatter, SYMBOLS["A"]], [SYMBOLS["B"], scatter]]
        assert board.count_on_board({"scatter": True}) == (2, {0: 1, 1: 1})
        assert board.count_on_reel({"scatter": True}, 0) == 1

    def test_repeated_symbol_on_reel(self) -> None:
        """Test detection of a symbol shown twice on one reel."""
        board = drawn_board()
        assert board.has_symbol_repeated_on_reel(SYMBOLS["C"])
        assert not board.has_symbol_repeated_on_reel(SYMBOLS["S"])

    def test_get_set_remove_symbol(self) -> None:
        """Test single cell access."""
        board = drawn_board()
        assert board.get_symbol(0, 0).id == "C"
        assert board.get_symbol(9, 0) is None
        board.set_symbol(0, 0, SYMBOLS["S"])
        assert board.get_symbol(0, 0).id == "S"
        board.remove_symbol(0, 0)
        assert len(board.reels[0]) == 4

    def test_stops_for_symbol_and_combine(self) -> None:
        """Test strip positions of a symbol and their combination."""
        reels = make_reels()
        a_stops = Board.stops_for_symbol(reels, SYMBOLS["A"])
        b_stops = Board.stops_for_symbol(reels, SYMBOLS["B"])
        assert a_stops[0] == [0, 3, 4, 6, 9]
        combined = Board.combine_stops(a_stops, b_stops)
        assert combined[0] == [0, 3, 4, 6, 9, 2, 7]

    def test_random_stops_picks_distinct_reels(self) -> None:
        """Test that random stops choose distinct reels holding the symbol."""
        reels = make_reels()
        stops = Board.stops_for_symbol(reels, SYMBOLS["B"])
        chosen = Board.random_stops(reels, stops, 3, RandomSource(5))
        assert len(chosen) == 3
        for reel, position in chosen.items():
            assert reels[reel][position].id == "B"

    def test_cells_to_remove_dedupes(self) -> None:
        """Test collecting the cells of overlapping wins for a tumble."""
        a, w = SYMBOLS["A"], GameSymbol("W")
        first = WinCombination(
            payout=1.0,
            kind=2,
            base_symbol=a,
            symbols=(WinSymbol(a, False, 0, 1), WinSymbol(w, True, 1, 1)),
        )
        second = WinCombination(
            payout=1.0,
            kind=2,
            base_symbol=a,
            symbols=(WinSymbol(w, True, 1, 1), WinSymbol(a, False, 1, 2)),
        )
        assert Board.cells_to_remove([first, second]) == [(0, 1), (1, 1), (1, 2)]

    def test_random_stops_not_enough_reels(self) -> None:
        """Test asking for more reels than hold the symbol."""
        reels = make_reels()
        stops = Board.stops_for_symbol(reels, SYMBOLS["S"])
        with pytest.raises(BoardError, match="cannot place"):
            Board.random_stops(reels, stops, 1, RandomSource(0))
