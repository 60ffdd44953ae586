"""
MinMax Agent Tests

Tests for the state evaluator and the alpha-beta search choosing the
defender's move.
"""

import math
import random

import pytest

from cyberwar.ai import MinimaxAI, StateEvaluator, create_minmax_agent
from cyberwar.core import GameConfig, Move, PlayerRole, new_game_state
from cyberwar.core.catalog import GUARDED_TOPOLOGY


def random_defender_state(resolver, catalog, seed, plies, config=None):
    """Play random legal moves on the guarded network, then hand the defender the move"""
    rng = random.Random(seed)
    state = new_game_state(config or GameConfig(), catalog, GUARDED_TOPOLOGY)

    for _ in range(plies):
        if state.game_over:
            break
        moves = resolver.legal_moves(state, state.current_player)
        if not moves:
            resolver.skip_turn(state)
            continue
        definition = rng.choice(moves)
        resolver.apply(state, Move(definition.kind, definition.id))

    if not state.game_over and state.current_player == PlayerRole.ATTACKER:
        moves = resolver.legal_moves(state, PlayerRole.ATTACKER)
        if moves:
            resolver.apply(state, Move.attack(rng.choice(moves).id))
        else:
            resolver.skip_turn(state)
    return state


# =============================================================================
# Evaluation
# =============================================================================

def test_evaluate_initial_state(state):
    """Security 40 + resources -2.5, critical node unprotected"""
    evaluator = StateEvaluator()
    assert evaluator.evaluate(state) == pytest.approx(37.5)


def test_evaluate_penalizes_unanswered_attack(resolver, state):
    resolver.apply(state, Move.attack("dos"))
    evaluator = StateEvaluator()

    # security 9.13 * 4, even resources, no defense against network
    assert evaluator.evaluate(state) == pytest.approx(9.13 * 4 - 10)


def test_evaluate_rewards_coverage_and_variety(resolver, state):
    resolver.apply(state, Move.attack("dos"))
    resolver.apply(state, Move.defense("firewall"))
    evaluator = StateEvaluator()

    score = evaluator.evaluate(state)
    security = state.security_level * 4
    resources = (state.defender.resources - state.attacker.resources) * 0.5
    coverage = 5 * 0.8
    variety = 2
    penalty = 10 * (1 - 0.8)
    assert score == pytest.approx(security + resources + coverage + variety - penalty)


def test_evaluate_terminal_states(state):
    evaluator = StateEvaluator()

    state.declare_winner(PlayerRole.DEFENDER)
    assert evaluator.evaluate(state) == math.inf

    state.declare_winner(PlayerRole.ATTACKER)
    assert evaluator.evaluate(state) == -math.inf


def test_coverage_score_is_capped(catalog):
    evaluator = StateEvaluator()
    defenses = [catalog.defenses["firewall"]] * 4
    assert evaluator.coverage_score(defenses, ["network"] * 3) == 20.0


# =============================================================================
# Search
# =============================================================================

def test_depth_zero_is_evaluate(catalog, resolver):
    ai = MinimaxAI(catalog, depth=3)
    state = random_defender_state(resolver, catalog, seed=1, plies=3)

    assert ai.minimax(state, 0, True) == ai.evaluate(state)
    assert ai.minimax(state, 0, False) == ai.evaluate(state)


@pytest.mark.parametrize("seed", range(12))
def test_pruning_never_changes_the_result(catalog, resolver, seed):
    state = random_defender_state(resolver, catalog, seed=seed, plies=seed % 5)
    if state.game_over:
        pytest.skip("random play ended the game")

    pruned = MinimaxAI(catalog, depth=3, use_pruning=True)
    full = MinimaxAI(catalog, depth=3, use_pruning=False)

    assert pruned.minimax(state, 3, True) == full.minimax(state, 3, True)
    assert pruned.nodes_searched <= full.nodes_searched

    best_pruned = pruned.get_best_move(state)
    best_full = full.get_best_move(state)
    assert (best_pruned and best_pruned.id) == (best_full and best_full.id)


def test_search_does_not_touch_the_state(catalog, state, resolver):
    resolver.apply(state, Move.attack("dos"))
    before = state.clone()

    MinimaxAI(catalog, depth=3).get_best_move(state)
    assert state == before


@pytest.mark.parametrize("seed", range(8))
def test_chosen_move_is_legal(catalog, resolver, seed):
    state = random_defender_state(resolver, catalog, seed=seed, plies=4)
    if state.game_over:
        pytest.skip("random play ended the game")

    ai = create_minmax_agent(catalog, depth=2)
    defense = ai.get_best_move(state)
    legal = [d.id for d in resolver.legal_moves(state, PlayerRole.DEFENDER)]

    if legal:
        assert defense.id in legal
        assert defense.cost <= state.defender.resources
        resolver.apply(state, Move.defense(defense.id))
    else:
        assert defense is None


def test_no_legal_defense_returns_none(catalog, resolver, state):
    resolver.apply(state, Move.attack("dos"))
    state.defender.resources = 0

    ai = MinimaxAI(catalog)
    assert ai.get_best_move(state) is None


def test_no_move_when_not_defender_turn(catalog, state):
    ai = MinimaxAI(catalog)
    assert ai.get_best_move(state) is None

    state.current_player = PlayerRole.DEFENDER
    state.declare_winner(PlayerRole.ATTACKER)
    assert ai.get_best_move(state) is None


def test_no_legal_moves_inside_search_returns_evaluation(catalog, resolver, state):
    resolver.apply(state, Move.attack("dos"))
    state.defender.resources = 0
    ai = MinimaxAI(catalog)

    assert ai.minimax(state, 3, True) == ai.evaluate(state)


def test_tie_break_prefers_coverage_then_variety(catalog, resolver):
    ai = MinimaxAI(catalog)
    state = new_game_state(GameConfig(), catalog, GUARDED_TOPOLOGY)
    resolver.apply(state, Move.attack("sql"))
    tied = [catalog.defenses["firewall"], catalog.defenses["waf"]]

    assert ai._break_tie(state, tied).id == "waf"

    state.defender.history = [catalog.defenses["waf"].clone(), catalog.defenses["waf"].clone()]
    assert ai._break_tie(state, tied).id == "firewall"


def test_search_stats(catalog, resolver, state):
    resolver.apply(state, Move.attack("dos"))
    ai = MinimaxAI(catalog, depth=2)
    defense = ai.get_best_move(state)

    stats = ai.get_search_stats()
    assert stats["best_move"] == defense.id
    assert stats["nodes_searched"] > 0
    assert stats["depth"] == 2
    assert defense.id in stats["tied_moves"]


def test_search_with_legacy_hardening_keeps_catalog(catalog, resolver):
    """Hardening explored by the search stays inside the search tree"""
    config = GameConfig(legacy_catalog_mutation=True)
    state = random_defender_state(resolver, catalog, seed=3, plies=2, config=config)
    if state.game_over:
        pytest.skip("random play ended the game")
    before = {d.id: dict(d.effectiveness) for d in catalog.defenses.values()}

    pruned = MinimaxAI(catalog, depth=3, use_pruning=True)
    full = MinimaxAI(catalog, depth=3, use_pruning=False)
    best_pruned = pruned.get_best_move(state)
    best_full = full.get_best_move(state)

    assert (best_pruned and best_pruned.id) == (best_full and best_full.id)
    assert {d.id: d.effectiveness for d in catalog.defenses.values()} == before
