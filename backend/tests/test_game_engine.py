"""
Game Session Tests

Tests for the attacker -> predictor -> AI defender -> odds flow and the
session event system.
"""

import pytest

from cyberwar.core import (
    GameAlreadyOverError, GameConfig, GameEventType, GameSession,
    OutOfTurnError, PlayerRole, UnknownMoveError, create_session
)

CRITICAL_EXPOSED = [
    {"name": "Core DB", "criticality": "Critical", "vulnerabilities": ["network"]},
    {"name": "Web Server", "criticality": "High", "vulnerabilities": ["application"]},
]


@pytest.fixture
def session():
    return GameSession(config=GameConfig(search_depth=2))


def event_types(session):
    return [e.event_type for e in session.event_history]


def test_new_session(session):
    assert session.state.turn == 1
    assert session.state.current_player == PlayerRole.ATTACKER
    assert event_types(session) == [GameEventType.GAME_STARTED]
    assert session.ai.depth == 2


def test_play_turn(session):
    report = session.play_turn("dos")

    assert report.attack.attack.id == "dos"
    assert report.defense is not None
    assert not report.defender_skipped
    assert session.state.current_player == PlayerRole.ATTACKER
    assert session.state.turn == 3
    assert len(session.predictor.attack_history) == 1

    assert len(report.predictions["predictions"]) == 5
    assert report.predictions["stats"]["total_attacks"] == 1
    assert report.win_probability["attacker"] + report.win_probability["defender"] == pytest.approx(100.0)
    assert report.state["turn"] == 3

    data = report.to_dict()
    assert data["attack"]["id"] == "dos"
    assert data["defense"]["id"] == report.defense.defense.id


def test_events_for_a_turn(session):
    session.play_turn("dos")
    assert event_types(session) == [
        GameEventType.GAME_STARTED,
        GameEventType.MOVE_PERFORMED,
        GameEventType.MOVE_PERFORMED,
    ]
    performed = session.get_event_history(GameEventType.MOVE_PERFORMED, limit=1)
    assert performed[0].player_role == PlayerRole.DEFENDER


def test_rejected_move_is_reported(session):
    with pytest.raises(OutOfTurnError):
        session.submit_defense("firewall")
    with pytest.raises(UnknownMoveError):
        session.submit_attack("nope")

    rejected = session.get_event_history(GameEventType.MOVE_REJECTED)
    assert [e.data["code"] for e in rejected] == ["out_of_turn", "unknown_move"]
    assert len(session.predictor.attack_history) == 0
    assert session.state.turn == 1


def test_defender_turn_requires_defender_to_move(session):
    with pytest.raises(OutOfTurnError):
        session.play_defender_turn()


def test_defender_without_moves_skips(session):
    session.submit_attack("dos")
    session.state.defender.resources = 0

    assert session.play_defender_turn() is None
    assert session.state.current_player == PlayerRole.ATTACKER
    assert GameEventType.TURN_SKIPPED in event_types(session)


def test_game_over_stops_the_exchange():
    session = GameSession(topology=CRITICAL_EXPOSED)
    report = session.play_turn("dos")

    assert session.state.game_over
    assert session.state.winner == PlayerRole.ATTACKER
    assert report.defense is None
    assert not report.defender_skipped
    assert report.win_probability["attacker"] == 100.0
    assert GameEventType.GAME_OVER in event_types(session)

    with pytest.raises(GameAlreadyOverError):
        session.submit_attack("dos")
    with pytest.raises(GameAlreadyOverError):
        session.play_defender_turn()


def test_reset(session):
    session.play_turn("dos")
    session.reset()

    assert session.state.turn == 1
    assert session.state.security_level == 10.0
    assert len(session.predictor.attack_history) == 0
    assert event_types(session)[-1] == GameEventType.GAME_RESET


def test_suggest_defense_does_not_play(session):
    assert session.suggest_defense() is None

    session.submit_attack("dos")
    before = session.state.clone()
    defense = session.suggest_defense()

    assert defense is not None
    assert session.state == before


def test_suggestion_with_legacy_hardening_leaves_catalog_alone():
    """Hardening the search explores is not written back to the shared catalog"""
    session = GameSession(config=GameConfig(legacy_catalog_mutation=True))
    session.submit_attack("dos")
    session.submit_defense("firewall")
    session.submit_attack("phishing")
    before = {d.id: dict(d.effectiveness) for d in session.catalog.defenses.values()}

    assert session.suggest_defense() is not None
    assert {d.id: d.effectiveness for d in session.catalog.defenses.values()} == before
    assert session.catalog.defenses["firewall"].effectiveness == {"network": 0.8, "application": 0.2}


def test_queries(session):
    assert [a.id for a in session.available_attacks()] == ["dos", "sql", "phishing", "malware", "brute"]
    assert "detailed_analysis" in session.prediction_analysis()
    assert session.snapshot()["network"]["security_level"] == 10.0


def test_event_listeners(session):
    seen = []

    def broken(event):
        raise RuntimeError("listener failure")

    session.add_event_listener(GameEventType.MOVE_PERFORMED, broken)
    session.add_event_listener(GameEventType.MOVE_PERFORMED, seen.append)
    session.submit_attack("phishing")

    assert len(seen) == 1
    assert seen[0].move_id == "phishing"
    assert seen[0].to_dict()["player"] == "ATTACKER"


def test_create_session():
    session = create_session()
    assert session.config.search_depth == 3
    assert len(session.state.nodes) == 3
