"""
CLI Tests
"""

import random

from cyberwar.cli import main, play_demo
from cyberwar.core import GameConfig, GameSession


def test_demo_is_reproducible():
    winners = []
    for _ in range(2):
        session = GameSession(config=GameConfig(search_depth=1))
        play_demo(session, random.Random(7), max_turns=30, quiet=True)
        winners.append((session.state.winner, session.state.turn, session.state.security_level))

    assert winners[0] == winners[1]


def test_main_prints_result(capsys):
    assert main(["--seed", "3", "--depth", "1", "--max-turns", "12"]) == 0

    out = capsys.readouterr().out
    assert "CYBER WARGAME ENGINE" in out
    assert "Winner:" in out
    assert "Win probability:" in out


def test_topology_option(capsys):
    assert main(["--seed", "1", "--depth", "1", "--max-turns", "4", "--topology", "guarded"]) == 0
    out = capsys.readouterr().out
    assert "Database        Critical  protected" in out
