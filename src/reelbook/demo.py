"""A small 5x3 lines game with scatter-triggered free spins.

Used as a worked example of a game flow and by the test suite:

    >>> from reelbook import Simulation, SimulationConfig
    >>> from reelbook.demo import build_game
    >>> results = Simulation(build_game(), SimulationConfig(runs={"base": 100})).run()
"""

from dataclasses import replace

from reelbook.sim.board import Board
from reelbook.sim.config import GameConfig, GameMode
from reelbook.sim.context import GameContext
from reelbook.sim.criteria import ResultSet
from reelbook.sim.state import BASE_GAME, FREE_SPINS
from reelbook.sim.symbols import GameSymbol, ReelSet
from reelbook.wins.base import WinCombination
from reelbook.wins.lines import LinesWinType

SYMBOLS: dict[str, GameSymbol] = {
    "S": GameSymbol("S", properties={"scatter": True}),
    "W": GameSymbol("W", pays={3: 5, 4: 25, 5: 100}, properties={"wild": True}),
    "H1": GameSymbol("H1", pays={3: 5, 4: 20, 5: 50}),
    "H2": GameSymbol("H2", pays={3: 3, 4: 10, 5: 25}),
    "L1": GameSymbol("L1", pays={3: 0.5, 4: 1, 5: 2.5}),
    "L2": GameSymbol("L2", pays={3: 0.4, 4: 0.8, 5: 2}),
    "L3": GameSymbol("L3", pays={3: 0.2, 4: 0.5, 5: 1}),
}

LINES: dict[int, list[int]] = {
    1: [1, 1, 1, 1, 1],
    2: [0, 0, 0, 0, 0],
    3: [2, 2, 2, 2, 2],
    4: [0, 1, 2, 1, 0],
    5: [2, 1, 0, 1, 2],
    6: [0, 0, 1, 2, 2],
    7: [2, 2, 1, 0, 0],
}

BASE_STRIPS = [
    "H1 L1 L2 S L3 L1 W L2 H2 L3 L1 L2 S L3 H1 L2 L1 L3 H2 L2",
    "L2 H2 L1 L3 S L2 L1 H1 L3 W L2 L1 L3 H2 S L1 L2 L3 H1 L1",
    "L3 L1 S H1 L2 L3 W L1 L2 H2 L3 L1 L2 S L3 H1 L1 L2 L3 H2",
    "L1 L3 H2 L2 L1 S L3 L2 H1 L1 W L3 L2 L1 H2 L3 S L2 L1 H1",
    "L2 L1 L3 H1 S L2 L1 L3 H2 L2 L1 W L3 L2 S L1 H1 L3 L2 H2",
]

FREE_STRIPS = [
    "H1 W L2 S L3 H2 W L2 H2 L3 L1 W S L3 H1 L2 L1 L3 H2 L2",
    "L2 H2 W L3 S L2 L1 H1 L3 W L2 H1 L3 H2 S W L2 L3 H1 L1",
    "L3 W S H1 L2 L3 W L1 H2 H2 L3 L1 W S L3 H1 L1 L2 W H2",
    "L1 L3 H2 W L1 S L3 L2 H1 L1 W L3 H1 L1 H2 W S L2 L1 H1",
    "L2 W L3 H1 S L2 L1 H1 H2 L2 L1 W L3 L2 S L1 H1 W L2 H2",
]

BASE_AWARDS = {3: 8, 4: 12, 5: 15}
RETRIGGER_AWARDS = {3: 3, 4: 5, 5: 8}

# Relative chance of each scatter count on a forced trigger
SCATTER_WEIGHTS = {3: 70, 4: 25, 5: 5}

FREE_SPINS_MULTIPLIER = 2

REEL_WEIGHTS = {BASE_GAME: {"base": 1}, FREE_SPINS: {"free": 1}}


def _strips(rows: list[str]) -> ReelSet:
    return tuple(tuple(SYMBOLS[symbol_id] for symbol_id in row.split()) for row in rows)


def _double(combination: WinCombination) -> WinCombination:
    return replace(combination, payout=combination.payout * FREE_SPINS_MULTIPLIER)


def draw_board(ctx: GameContext) -> None:
    """Draw a board fitting the result set.

    Forced free spins place scatters on random reels. Otherwise base game
    boards are redrawn until they cannot trigger the feature.
    """
    scatter = ctx.config.symbol("S")
    reels = ctx.random_reel_set()
    in_base = ctx.state.spin_type == BASE_GAME
    forced = in_base and ctx.result_set.force_freespins
    trigger = ctx.config.anticipation_triggers[ctx.state.spin_type]

    while True:
        if forced:
            count = ctx.verify_scatter_count(ctx.rng.weighted_choice(SCATTER_WEIGHTS))
            stops = Board.random_stops(
                reels, Board.stops_for_symbol(reels, scatter), count, ctx.rng
            )
            ctx.draw_forced_board(stops, reels)
        else:
            ctx.draw_random_board(reels)

        if ctx.board.has_symbol_repeated_on_reel(scatter):
            continue
        scatters, _ = ctx.board.count_on_board(scatter)
        if in_base and not forced and scatters > trigger:
            continue
        break

    ctx.apply_anticipation(scatter)
    ctx.add_event(
        "reveal",
        {
            "board": ctx.board.symbol_ids(),
            "gameType": ctx.state.spin_type,
            "anticipation": list(ctx.board.anticipation),
        },
    )


def play_spin(ctx: GameContext) -> None:
    """Draw a board and pay its lines, doubled during free spins."""
    draw_board(ctx)

    result = LinesWinType(LINES, wild_symbol={"wild": True}, ctx=ctx).evaluate(ctx.board)
    if ctx.state.spin_type == FREE_SPINS:
        result = result.post_process(_double)

    if result.payout > 0:
        ctx.add_event("winInfo", {"totalWin": result.payout, "wins": result.to_dicts()})
        ctx.add_spin_win(result.payout)
    ctx.confirm_spin_win()


def check_freespins(ctx: GameContext) -> int:
    """Award free spins for the scatters on the board."""
    scatter = ctx.config.symbol("S")
    scatters, _ = ctx.board.count_on_board(scatter)
    awarded = ctx.free_spins_for_scatters(scatters)
    if awarded > 0:
        ctx.award_freespins(awarded)
        ctx.record_symbol_occurrence(scatters, scatter.id)
        ctx.add_event(
            "freeSpinTrigger", {"amount": awarded, "gameType": ctx.state.spin_type}
        )
    return awarded


def game_flow(ctx: GameContext) -> None:
    """Play a base game spin and the free spins it triggers."""
    play_spin(ctx)

    if check_freespins(ctx) > 0:
        ctx.record({"triggeredFreespins": True})
        ctx.state.spin_type = FREE_SPINS
        while ctx.state.current_freespins > 0 and not ctx.max_win_reached:
            ctx.state.current_freespins -= 1
            play_spin(ctx)
            check_freespins(ctx)

    ctx.add_event("finalWin", {"amount": ctx.wallet.current_win})


def build_game() -> GameConfig:
    """The demo game with a base mode and a bonus buy mode."""
    reel_sets = {"base": _strips(BASE_STRIPS), "free": _strips(FREE_STRIPS)}

    base = GameMode(
        name="base",
        reels_amount=5,
        symbols_per_reel=[3, 3, 3, 3, 3],
        cost=1.0,
        reel_sets=reel_sets,
        result_sets=[
            ResultSet("0", quota=0.4, reel_weights=REEL_WEIGHTS, multiplier=0),
            ResultSet("basegame", quota=0.4, reel_weights=REEL_WEIGHTS),
            ResultSet("freespins", quota=0.2, reel_weights=REEL_WEIGHTS, force_freespins=True),
        ],
    )
    bonus = GameMode(
        name="bonus",
        reels_amount=5,
        symbols_per_reel=[3, 3, 3, 3, 3],
        cost=100.0,
        reel_sets=reel_sets,
        result_sets=[
            ResultSet("freespins", quota=1.0, reel_weights=REEL_WEIGHTS, force_freespins=True),
        ],
        is_bonus_buy=True,
    )

    return GameConfig(
        id="demo_lines",
        name="Demo Lines",
        symbols=SYMBOLS,
        game_modes={"base": base, "bonus": bonus},
        max_win=5000,
        flow=game_flow,
        scatter_to_freespins={BASE_GAME: BASE_AWARDS, FREE_SPINS: RETRIGGER_AWARDS},
    )
