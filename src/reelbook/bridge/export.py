"""Conversion at the boundary with external tooling.

Builds reel sets from the row-per-position layout reel files use, and the
content of the per-mode outputs downstream tools consume: lookup tables,
the book log, the force records and the mode index. Writing and
compressing the files is left to the caller.
"""

import csv
import io
import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from reelbook.errors import ConfigurationError
from reelbook.ledger.book import Book
from reelbook.ledger.recorder import Recorder
from reelbook.sim.config import GameConfig
from reelbook.sim.symbols import GameSymbol, ReelSet

LookupRow = tuple[int, int, int]
SegmentedRow = tuple[int, str, float, float]


def reel_set_from_ids(
    rows: Iterable[Sequence[str]],
    symbols: Mapping[str, GameSymbol],
    reels_amount: int,
) -> ReelSet:
    """Build reel strips from rows of symbol ids.

    Each row holds one strip position with one column per reel. Blank
    cells are skipped, so strips may differ in length.

    Args:
        rows: Rows of symbol ids, e.g. parsed from a CSV file.
        symbols: Symbol id to symbol.
        reels_amount: Number of reels.

    Returns:
        One strip per reel.

    Raises:
        ConfigurationError: If a row has too many columns or an id is unknown.

    Example:
        >>> rows = csv.reader(io.StringIO("A,B\\nB,A\\n"))
        >>> reel_set_from_ids(rows, symbols, 2)
    """
    reels: list[list[GameSymbol]] = [[] for _ in range(reels_amount)]
    for row_idx, row in enumerate(rows):
        if len(row) > reels_amount:
            raise ConfigurationError(
                f"row {row_idx} has {len(row)} columns for {reels_amount} reels"
            )
        for reel_idx, cell in enumerate(row):
            symbol_id = cell.strip()
            if not symbol_id:
                continue
            if symbol_id not in symbols:
                raise ConfigurationError(f'unknown symbol "{symbol_id}" in row {row_idx}')
            reels[reel_idx].append(symbols[symbol_id])
    return tuple(tuple(strip) for strip in reels)


def lookup_table_rows(library: Mapping[int, Book]) -> list[LookupRow]:
    """``(id, weight, payout x 100)`` per simulation, weight always 1."""
    return [(book.id, 1, book.payout) for book in _sorted_books(library)]


def segmented_lookup_rows(library: Mapping[int, Book]) -> list[SegmentedRow]:
    """``(id, criteria, basegame win, freespins win)`` per simulation."""
    return [
        (book.id, book.criteria, book.basegame_wins, book.freespins_wins)
        for book in _sorted_books(library)
    ]


def rows_to_csv(rows: Iterable[Sequence[Any]]) -> str:
    """Render rows as CSV text with ``\\n`` line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def book_lines(library: Mapping[int, Book]) -> list[str]:
    """The book log: one compact JSON document per simulation."""
    return [
        json.dumps(book.written(), separators=(",", ":")) for book in _sorted_books(library)
    ]


def force_records(recorder: Recorder) -> list[dict[str, Any]]:
    """Merged recorder tallies in their persisted form."""
    return recorder.to_dicts()


def force_keys(recorder: Recorder) -> dict[str, list[str]]:
    """Every recorded property name, sorted, with the values seen for it."""
    keys: dict[str, list[str]] = {}
    for item in recorder.records:
        for name, value in item.search:
            values = keys.setdefault(name, [])
            if value not in values:
                values.append(value)
    return dict(sorted(keys.items()))


def mode_index(config: GameConfig, modes: Iterable[str]) -> dict[str, Any]:
    """Index of the published modes with the names of their output files."""
    entries = []
    for name in modes:
        mode = config.game_mode(name)
        entries.append(
            {
                "name": mode.name,
                "cost": mode.cost,
                "events": f"books_{mode.name}.jsonl.zst",
                "weights": f"lookUpTable_{mode.name}_0.csv",
            }
        )
    return {"modes": entries}


def _sorted_books(library: Mapping[int, Book]) -> list[Book]:
    return [library[sim_id] for sim_id in sorted(library)]
