"""Simulation orchestrator.

Every simulation id of a game mode is assigned a criteria up front. A worker
plays each of its ids, retrying with fresh draws until the attempt meets
its criteria, and returns the accepted books together with its wallet and
recorder. The coordinator merges the partial results of all workers into
one library keyed by simulation id.

Each id draws from a random source seeded with the id itself, so the
library does not depend on how ids are split across workers.
"""

import logging
import time
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from typing import NamedTuple

from reelbook.errors import SimulationError
from reelbook.ledger.book import Book
from reelbook.ledger.recorder import Recorder
from reelbook.ledger.wallet import Wallet, to_cents
from reelbook.metrics.rtp import ModeSummary, summarize_mode
from reelbook.sim.config import GameConfig, GameMode, SimulationConfig
from reelbook.sim.context import GameContext
from reelbook.sim.criteria import assign_criteria
from reelbook.sim.rng import RandomSource

logger = logging.getLogger(__name__)


class SimulationOutcome(NamedTuple):
    """Accepted attempt of one simulation id."""

    book: Book
    wallet: Wallet
    attempts: int


class ChunkResult(NamedTuple):
    """Partial result of one worker."""

    start: int
    stop: int
    books: list[Book]
    wallet: Wallet
    recorder: Recorder
    attempts: dict[str, int]


class ModeResult(NamedTuple):
    """Merged result of a game mode.

    Attributes:
        mode: Game mode name.
        library: Simulation id to book, sorted by id.
        wallet: Cumulative wins of all accepted attempts.
        recorder: Merged statistical tallies.
        attempts: Attempts played per criteria, accepted or not.
        summary: RTP summary of the library.
    """

    mode: str
    library: dict[int, Book]
    wallet: Wallet
    recorder: Recorder
    attempts: dict[str, int]
    summary: ModeSummary


def split_ranges(total: int, chunks: int) -> list[tuple[int, int]]:
    """Split simulation ids ``1..total`` into contiguous near-equal ranges.

    Earlier ranges receive the remainder. Ranges are half-open
    ``(start, stop)`` pairs and empty ranges are left out.

    Example:
        >>> split_ranges(10, 3)
        [(1, 5), (5, 8), (8, 11)]
    """
    if total < 0:
        raise ValueError("total cannot be negative")
    if chunks < 1:
        raise ValueError("chunks must be at least 1")

    chunks = min(chunks, total)
    if chunks == 0:
        return []

    size, remainder = divmod(total, chunks)
    ranges = []
    start = 1
    for idx in range(chunks):
        stop = start + size + (1 if idx < remainder else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


def run_single_simulation(
    config: GameConfig,
    mode: GameMode,
    sim_id: int,
    criteria: str,
    recorder: Recorder | None = None,
) -> SimulationOutcome:
    """Play one simulation id until an attempt meets its criteria.

    There is no retry limit; a criteria the game cannot produce never
    returns.

    Args:
        config: The game configuration.
        mode: The game mode being simulated.
        sim_id: Simulation id, also the seed of its random source.
        criteria: Criteria label assigned to the id.
        recorder: Recorder the accepted records are committed to.

    Returns:
        The accepted book, its confirmed wallet and the attempt count.
    """
    result_set = mode.result_set(criteria)
    ctx = GameContext(config, mode, rng=RandomSource(sim_id), recorder=recorder)

    attempts = 0
    while True:
        attempts += 1
        ctx.start_attempt(sim_id, criteria)
        config.flow(ctx)
        if result_set.meets_criteria(ctx.snapshot(), config.max_win):
            break

    ctx.wallet.write_payout_to_book(ctx.book, config.max_win)
    ctx.wallet.confirm_wins(config.max_win)
    if ctx.book.payout >= to_cents(config.max_win):
        ctx.state.triggered_max_win = True
        if result_set.force_max_win:
            ctx.record({"maxwin": True})
    ctx.record({"criteria": criteria})

    if config.on_simulation_accepted is not None:
        config.on_simulation_accepted(ctx)
    ctx.recorder.confirm()

    return SimulationOutcome(ctx.book, ctx.wallet, attempts)


def run_chunk(
    config: GameConfig,
    mode_name: str,
    start: int,
    stop: int,
    total: int,
    seed: int = 0,
) -> ChunkResult:
    """Simulate ids ``start`` up to ``stop`` (exclusive) of a game mode.

    The criteria table is rebuilt from ``total`` and ``seed``, so every
    worker agrees on the criteria of each id.
    """
    mode = config.game_mode(mode_name)
    table = assign_criteria(mode.result_sets, total, seed)

    wallet = Wallet()
    recorder = Recorder()
    books: list[Book] = []
    attempts = dict.fromkeys((rs.criteria for rs in mode.result_sets), 0)

    for sim_id in range(start, stop):
        criteria = table[sim_id]
        outcome = run_single_simulation(config, mode, sim_id, criteria, recorder)
        books.append(outcome.book)
        wallet.merge(outcome.wallet)
        attempts[criteria] += outcome.attempts

    return ChunkResult(start, stop, books, wallet, recorder, attempts)


class Simulation:
    """Runs the configured simulations of every game mode.

    Game modes run one after the other; the ids of a mode are split across
    worker processes. With a single worker everything runs in the calling
    process.

    Args:
        game_config: The game to simulate.
        sim_config: Simulation counts and worker settings.

    Example:
        >>> results = Simulation(game, SimulationConfig(runs={"base": 1000})).run()
        >>> results["base"].summary.rtp
    """

    def __init__(self, game_config: GameConfig, sim_config: SimulationConfig) -> None:
        self.game_config = game_config
        self.sim_config = sim_config
        for mode_name in sim_config.runs:
            game_config.game_mode(mode_name)

    def run(self) -> dict[str, ModeResult]:
        """Simulate every mode with a positive run count.

        Raises:
            SimulationError: If a worker fails. No result is produced for
                the failing mode.
        """
        results: dict[str, ModeResult] = {}
        for mode_name, total in self.sim_config.runs.items():
            if total == 0:
                logger.info("Skipping mode %s with no simulations", mode_name)
                continue
            results[mode_name] = self.run_mode(mode_name, total)
        return results

    def run_mode(self, mode_name: str, total: int) -> ModeResult:
        """Simulate ``total`` rounds of one game mode and merge the chunks."""
        mode = self.game_config.game_mode(mode_name)
        ranges = split_ranges(total, self.sim_config.workers)
        logger.info(
            "Simulating %d rounds of mode %s with %d workers", total, mode_name, len(ranges)
        )
        started = time.perf_counter()

        if len(ranges) == 1:
            start, stop = ranges[0]
            chunks = [self._run_chunk(mode_name, start, stop, total)]
        else:
            chunks = self._run_parallel(mode_name, ranges, total)

        result = self._merge(mode, chunks)
        logger.info(
            "Finished mode %s in %.2fs: rtp %.4f, hit rate %.4f",
            mode_name,
            time.perf_counter() - started,
            result.summary.rtp,
            result.summary.hit_rate,
        )
        logger.debug("Attempts per criteria for mode %s: %s", mode_name, result.attempts)
        return result

    def _run_chunk(self, mode_name: str, start: int, stop: int, total: int) -> ChunkResult:
        return run_chunk(
            self.game_config, mode_name, start, stop, total, self.sim_config.assignment_seed
        )

    def _run_parallel(
        self, mode_name: str, ranges: list[tuple[int, int]], total: int
    ) -> list[ChunkResult]:
        """Run each id range in its own worker process.

        The first failing chunk aborts the mode at once: pending chunks are
        cancelled and chunks already running are left to finish in the
        background.
        """
        chunks: list[ChunkResult] = []
        executor = ProcessPoolExecutor(max_workers=len(ranges))
        try:
            futures: dict[Future[ChunkResult], tuple[int, int]] = {
                executor.submit(
                    run_chunk,
                    self.game_config,
                    mode_name,
                    start,
                    stop,
                    total,
                    self.sim_config.assignment_seed,
                ): (start, stop)
                for start, stop in ranges
            }
            for future in as_completed(futures):
                start, stop = futures[future]
                try:
                    chunk = future.result()
                except Exception as exc:
                    raise SimulationError(
                        f"worker for ids {start}-{stop - 1} of mode {mode_name} failed: {exc}"
                    ) from exc
                logger.debug("Worker for ids %d-%d of mode %s done", start, stop - 1, mode_name)
                chunks.append(chunk)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown()
        return chunks

    def _merge(self, mode: GameMode, chunks: list[ChunkResult]) -> ModeResult:
        library: dict[int, Book] = {}
        wallet = Wallet()
        recorder = Recorder()
        attempts = dict.fromkeys((rs.criteria for rs in mode.result_sets), 0)

        # Merge in id order so tallies do not depend on completion order
        for chunk in sorted(chunks, key=lambda c: c.start):
            for book in chunk.books:
                if book.id in library:
                    raise SimulationError(f"duplicate book id {book.id} in mode {mode.name}")
                library[book.id] = book
            wallet.merge(chunk.wallet)
            recorder.merge(chunk.recorder)
            for criteria, count in chunk.attempts.items():
                attempts[criteria] += count

        library = dict(sorted(library.items()))
        summary = summarize_mode(library, mode.cost)
        return ModeResult(mode.name, library, wallet, recorder, attempts, summary)
