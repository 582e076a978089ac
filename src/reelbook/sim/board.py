"""Board state: the visible reel window, its padding, draws and tumbles.

Reel strips are cyclic, so every index into a strip is taken modulo its
length. Padding holds the symbols just outside the visible window:
``padding_top[reel]`` is ordered outermost first, so ``pop()`` yields the
symbol directly above row 0, and ``padding_bottom[reel]`` is ordered
innermost first.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from reelbook.errors import BoardError
from reelbook.sim.rng import RandomSource
from reelbook.sim.symbols import GameSymbol, Reels, ReelSet

if TYPE_CHECKING:
    from reelbook.wins.base import WinCombination

Cell = tuple[int, int]


class TumbleResult(NamedTuple):
    """Symbols added to the board by a tumble.

    Attributes:
        new_symbols: Reel index to the symbols dropped into the visible
            window, topmost first.
        new_padding_top: Reel index to the recomputed top padding,
            outermost first.
    """

    new_symbols: dict[int, list[GameSymbol]]
    new_padding_top: dict[int, list[GameSymbol]]


def _matches(symbol: GameSymbol, target: GameSymbol | Mapping[str, Any]) -> bool:
    return symbol.compare(target)


class Board:
    """The visible game board.

    Attributes:
        reels: Visible symbols per reel, row 0 at the top.
        padding_top: Symbols above the window per reel, outermost first.
        padding_bottom: Symbols below the window per reel, innermost first.
        anticipation: Anticipation flag per reel.
        locked_reels: Reels that keep their previous stop on the next draw.
        last_drawn_stops: Strip offset of row 0 per reel, or None before
            the first draw.
        last_used_reels: Reel strips of the last draw.
    """

    def __init__(self) -> None:
        self.reels: Reels = []
        self.padding_top: Reels = []
        self.padding_bottom: Reels = []
        self.anticipation: list[bool] = []
        self.locked_reels: frozenset[int] = frozenset()
        self.last_drawn_stops: list[int] | None = None
        self.last_used_reels: ReelSet | None = None

    def reset(self, reels_amount: int, locked_reels: Iterable[int] | None = None) -> None:
        """Clear the board and forget the last draw."""
        self._clear_window(reels_amount)
        self.locked_reels = frozenset(locked_reels or ())
        self.last_drawn_stops = None
        self.last_used_reels = None

    def _clear_window(self, reels_amount: int) -> None:
        self.reels = [[] for _ in range(reels_amount)]
        self.padding_top = [[] for _ in range(reels_amount)]
        self.padding_bottom = [[] for _ in range(reels_amount)]
        self.anticipation = [False] * reels_amount

    def lock_reels(self, reel_indices: Iterable[int]) -> None:
        """Keep the given reels at their current stop on the next draws."""
        self.locked_reels = frozenset(reel_indices)

    # Drawing

    def draw_random(
        self,
        reels: ReelSet,
        symbols_per_reel: Sequence[int],
        pad_symbols: int,
        rng: RandomSource,
    ) -> list[int]:
        """Draw a board at uniformly random stops.

        Args:
            reels: Reel strips to draw from.
            symbols_per_reel: Visible rows per reel.
            pad_symbols: Padding depth above and below the window.
            rng: Random source.

        Returns:
            Strip offset of row 0 for each reel.
        """
        return self.draw_forced(reels, {}, symbols_per_reel, pad_symbols, rng)

    def draw_forced(
        self,
        reels: ReelSet,
        forced_stops: Mapping[int, int],
        symbols_per_reel: Sequence[int],
        pad_symbols: int,
        rng: RandomSource,
        randomize_offset: bool = True,
    ) -> list[int]:
        """Draw a board with some reels forced to given strip positions.

        A forced position lands on a random visible row unless
        ``randomize_offset`` is False, in which case it becomes row 0.
        Reels without a forced position stop at random.

        Args:
            reels: Reel strips to draw from.
            forced_stops: Reel index to the strip position that must be visible.
            symbols_per_reel: Visible rows per reel.
            pad_symbols: Padding depth above and below the window.
            rng: Random source.
            randomize_offset: Whether to place forced positions on a random row.

        Returns:
            Strip offset of row 0 for each reel.

        Raises:
            BoardError: If the reel set does not fit the board shape, a strip
                is malformed, or locked reels are drawn before any draw.
        """
        reels_amount = len(reels)
        if len(symbols_per_reel) != reels_amount:
            raise BoardError(
                f"symbols_per_reel has {len(symbols_per_reel)} entries "
                f"for {reels_amount} reels"
            )
        for reel_idx in forced_stops:
            if not 0 <= reel_idx < reels_amount:
                raise BoardError(f"forced stop for reel {reel_idx} is out of range")
        previous = self.last_drawn_stops
        if self.locked_reels and previous is None:
            raise BoardError("cannot draw locked reels before drawing the board once")

        stops: list[int] = []
        for reel_idx, strip in enumerate(reels):
            if not strip:
                raise BoardError(f"reel {reel_idx} has an empty strip")
            if reel_idx in self.locked_reels:
                stops.append(previous[reel_idx])
            elif reel_idx in forced_stops:
                stop = forced_stops[reel_idx]
                if randomize_offset:
                    stop -= rng.random_int(0, symbols_per_reel[reel_idx])
                if stop < 0:
                    stop += len(strip)
                stops.append(stop)
            else:
                stops.append(rng.random_int(0, len(strip)))

        self._clear_window(reels_amount)
        for reel_idx, strip in enumerate(reels):
            stop = stops[reel_idx]
            rows = symbols_per_reel[reel_idx]
            self.reels[reel_idx] = [
                _strip_symbol(strip, stop + row, reel_idx) for row in range(rows)
            ]
            self.padding_top[reel_idx] = _padding_above(strip, stop, pad_symbols, reel_idx)
            self.padding_bottom[reel_idx] = [
                _strip_symbol(strip, stop + rows + p, reel_idx) for p in range(pad_symbols)
            ]

        self.last_drawn_stops = stops
        self.last_used_reels = reels
        return list(stops)

    def tumble(
        self,
        cells: Iterable[Cell],
        symbols_per_reel: Sequence[int],
        pad_symbols: int,
    ) -> TumbleResult:
        """Remove cells and let the reels fall down from above.

        Each reel is refilled to its visible height, first from its top
        padding and then from the strip, walking backward from the last
        drawn stop. The top padding is then rebuilt above the new first
        visible symbol, and the stop is moved there so a following tumble
        continues the same walk.

        Args:
            cells: ``(reel, row)`` positions to remove. Duplicates are ignored.
            symbols_per_reel: Visible rows per reel.
            pad_symbols: Padding depth above the window.

        Returns:
            The symbols that were added per reel.

        Raises:
            BoardError: If the board has not been drawn yet.
        """
        if self.last_drawn_stops is None or self.last_used_reels is None:
            raise BoardError("cannot tumble the board before drawing it")

        reels = self.last_used_reels
        for reel_idx, row in sorted(set(cells), key=lambda cell: cell[1], reverse=True):
            try:
                del self.reels[reel_idx][row]
            except IndexError:
                raise BoardError(f"cannot remove cell ({reel_idx}, {row})") from None

        new_symbols: dict[int, list[GameSymbol]] = {}
        new_padding_top: dict[int, list[GameSymbol]] = {}

        for reel_idx, strip in enumerate(reels):
            missing = symbols_per_reel[reel_idx] - len(self.reels[reel_idx])
            if missing <= 0:
                continue

            # Padding is the strip just above the window, so the refill is
            # the ``missing`` positions directly above the previous stop.
            top = self.last_drawn_stops[reel_idx] - missing
            dropped = [_strip_symbol(strip, top + i, reel_idx) for i in range(missing)]
            self.reels[reel_idx][:0] = dropped

            new_top = top % len(strip)
            self.padding_top[reel_idx] = _padding_above(strip, new_top, pad_symbols, reel_idx)
            self.last_drawn_stops[reel_idx] = new_top

            new_symbols[reel_idx] = dropped
            if pad_symbols:
                new_padding_top[reel_idx] = list(self.padding_top[reel_idx])

        return TumbleResult(new_symbols, new_padding_top)

    # Queries

    def get_symbol(self, reel: int, row: int) -> GameSymbol | None:
        """Symbol at a cell, or None when the cell is off the board."""
        if 0 <= reel < len(self.reels) and 0 <= row < len(self.reels[reel]):
            return self.reels[reel][row]
        return None

    def set_symbol(self, reel: int, row: int, symbol: GameSymbol) -> None:
        """Place ``symbol`` at a cell, appending when ``row`` is one past the end."""
        column = self.reels[reel]
        if row == len(column):
            column.append(symbol)
        elif 0 <= row < len(column):
            column[row] = symbol
        else:
            raise BoardError(f"row {row} is out of range on reel {reel}")

    def remove_symbol(self, reel: int, row: int) -> None:
        """Delete the symbol at a cell, shifting the rows below it up."""
        if 0 <= reel < len(self.reels) and 0 <= row < len(self.reels[reel]):
            del self.reels[reel][row]

    def count_on_reel(self, target: GameSymbol | Mapping[str, Any], reel: int) -> int:
        """Count symbols on a reel matching a symbol id or property subset."""
        return sum(1 for symbol in self.reels[reel] if _matches(symbol, target))

    def count_on_board(
        self, target: GameSymbol | Mapping[str, Any]
    ) -> tuple[int, dict[int, int]]:
        """Count matching symbols on the whole board.

        Returns:
            Total count and a mapping of reel index to count, containing
            only reels with at least one match.
        """
        per_reel: dict[int, int] = {}
        for reel_idx, column in enumerate(self.reels):
            count = sum(1 for symbol in column if _matches(symbol, target))
            if count:
                per_reel[reel_idx] = count
        return sum(per_reel.values()), per_reel

    def has_symbol_repeated_on_reel(self, symbol: GameSymbol) -> bool:
        """Whether any reel shows ``symbol`` more than once."""
        return any(self.count_on_reel(symbol, reel) > 1 for reel in range(len(self.reels)))

    def set_anticipation(self, reel: int, value: bool) -> None:
        """Flag whether ``reel`` spins with anticipation."""
        self.anticipation[reel] = value

    def symbol_ids(self) -> list[list[str]]:
        """Visible symbol ids per reel."""
        return [[symbol.id for symbol in column] for column in self.reels]

    # Helpers for building forced draws

    @staticmethod
    def stops_for_symbol(reels: ReelSet, symbol: GameSymbol) -> list[list[int]]:
        """Strip positions of ``symbol`` on each reel."""
        return [
            [pos for pos, sym in enumerate(strip) if sym.id == symbol.id] for strip in reels
        ]

    @staticmethod
    def combine_stops(*stop_lists: Sequence[Sequence[int]]) -> list[list[int]]:
        """Concatenate several per-reel stop lists reel by reel."""
        if not stop_lists:
            return []
        reels_amount = len(stop_lists[0])
        return [
            [stop for stops in stop_lists for stop in stops[reel_idx]]
            for reel_idx in range(reels_amount)
        ]

    @staticmethod
    def random_stops(
        reels: ReelSet,
        stops: Sequence[Sequence[int]],
        amount: int,
        rng: RandomSource,
    ) -> dict[int, int]:
        """Choose one stop on each of ``amount`` distinct reels.

        Reels are drawn without replacement, weighted by how dense the
        stops are on their strip, typically to place scatters.

        Returns:
            Reel index to chosen strip position, usable as forced stops.

        Raises:
            BoardError: If fewer than ``amount`` reels have any stop.
        """
        density = {
            reel_idx: len(stops[reel_idx]) / len(strip)
            for reel_idx, strip in enumerate(reels)
            if stops[reel_idx]
        }
        if len(density) < amount:
            raise BoardError(
                f"cannot place {amount} symbols, only {len(density)} reels have stops"
            )

        chosen: dict[int, int] = {}
        while len(chosen) < amount:
            reel_idx = rng.weighted_choice(density)
            chosen[reel_idx] = rng.choice(stops[reel_idx])
            del density[reel_idx]
        return chosen

    @staticmethod
    def cells_to_remove(combinations: Iterable["WinCombination"]) -> list[Cell]:
        """Distinct cells of the given win combinations, in first-seen order."""
        cells: dict[Cell, None] = {}
        for combination in combinations:
            for win_symbol in combination.symbols:
                cells[(win_symbol.reel, win_symbol.row)] = None
        return list(cells)


def _strip_symbol(strip: Sequence[GameSymbol], position: int, reel_idx: int) -> GameSymbol:
    symbol = strip[position % len(strip)]
    if symbol is None:
        raise BoardError(f"no symbol at position {position} on reel {reel_idx}")
    return symbol


def _padding_above(
    strip: Sequence[GameSymbol], stop: int, pad_symbols: int, reel_idx: int
) -> list[GameSymbol]:
    return [_strip_symbol(strip, stop - p, reel_idx) for p in range(pad_symbols, 0, -1)]
