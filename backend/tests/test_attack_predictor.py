"""
Attack Predictor Tests

Tests for the history window, the factor model and the reporting helpers.
"""

import pytest

from cyberwar.ai import AttackPredictor
from cyberwar.core import AttackDefinition, ConfidenceLevel, PlayerRole


def record(predictor, catalog, state, *attack_ids):
    for attack_id in attack_ids:
        predictor.update_history(catalog.attacks[attack_id], state)


def candidates(catalog, state):
    return catalog.attacks_for(state.attacker.available_moves)


# =============================================================================
# History
# =============================================================================

def test_empty_history_is_uniform(catalog, state):
    predictor = AttackPredictor()
    predictions = predictor.predict_next_attack(candidates(catalog, state), state)

    assert len(predictions) == 5
    for prediction in predictions:
        assert prediction.probability == pytest.approx(0.2)
        assert prediction.confidence == ConfidenceLevel.LOW


def test_no_candidates(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos")
    assert predictor.predict_next_attack([], state) == []

    summary = predictor.get_prediction_summary([], state)
    assert summary["predictions"] == []
    assert summary["summary"]["most_likely"] == "No attacks available"


def test_history_is_capped(catalog, state):
    predictor = AttackPredictor(history_limit=50)
    for i in range(60):
        record(predictor, catalog, state, "dos" if i % 2 else "sql")

    assert len(predictor.attack_history) == 50
    assert sum(predictor.attack_frequency.values()) == 50
    assert sum(predictor.transition_matrix.values()) == 49


def test_eviction_updates_derived_counts(catalog, state):
    predictor = AttackPredictor(history_limit=3)
    record(predictor, catalog, state, "phishing", "dos", "dos", "dos")

    assert predictor.attack_frequency["social"] == 0
    assert predictor.attack_frequency["network"] == 3
    assert predictor.transition_matrix[("social", "network")] == 0


def test_reset(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos", "sql")
    predictor.reset()

    assert len(predictor.attack_history) == 0
    assert not predictor.transition_matrix
    assert not predictor.attack_frequency
    assert predictor.get_most_used_type() == "None"


def test_record_keeps_context(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos")

    entry = predictor.attack_history[-1]
    assert entry.type == "network"
    assert entry.turn == 1
    assert entry.context["attacker_resources"] == 20


# =============================================================================
# Prediction
# =============================================================================

def test_probabilities_sum_to_one(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos", "sql", "dos", "brute")

    predictions = predictor.predict_next_attack(candidates(catalog, state), state)
    assert sum(p.probability for p in predictions) == pytest.approx(1.0)
    assert all(0.0 <= p.probability <= 1.0 for p in predictions)

    ordered = [p.probability for p in predictions]
    assert ordered == sorted(ordered, reverse=True)


def test_transition_factor_follows_last_type(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos", "sql", "dos")

    sql = predictor.calculate_prediction_factors(catalog.attacks["sql"], state)
    dos = predictor.calculate_prediction_factors(catalog.attacks["dos"], state)
    assert sql["transition"] == pytest.approx(1.0)
    assert dos["transition"] == 0.0
    assert dos["frequency"] == pytest.approx(2 / 3)


def test_factor_values(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos")

    factors = predictor.calculate_prediction_factors(catalog.attacks["dos"], state)
    assert factors["resource"] == 1.0
    # 0.7 success plus one exposed node
    assert factors["efficiency"] == pytest.approx(0.8)
    assert factors["recency"] == pytest.approx(0.7)
    assert factors["security"] == pytest.approx(0.3)

    malware = predictor.calculate_prediction_factors(catalog.attacks["malware"], state)
    assert malware["resource"] == pytest.approx(0.8)
    assert malware["recency"] == 1.0


def test_zero_success_rate_counts_as_half(state):
    predictor = AttackPredictor()
    scan = AttackDefinition(id="scan", name="Port Scan", type="recon", cost=0, success_rate=0.0)

    factors = predictor.calculate_prediction_factors(scan, state)
    assert factors["efficiency"] == 0.5
    assert factors["resource"] == 1.0


def test_repeated_type_becomes_most_likely(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "phishing", "phishing", "phishing", "phishing")

    predictions = predictor.predict_next_attack(candidates(catalog, state), state)
    assert predictions[0].attack.id == "phishing"


@pytest.mark.parametrize("probability, factor, expected", [
    (1.0, 1.0, ConfidenceLevel.VERY_HIGH),
    (0.7, 0.7, ConfidenceLevel.HIGH),
    (0.5, 0.4, ConfidenceLevel.MEDIUM),
    (0.3, 0.3, ConfidenceLevel.LOW),
    (0.0, 0.1, ConfidenceLevel.VERY_LOW),
])
def test_confidence_levels(probability, factor, expected):
    factors = {"a": factor, "b": factor}
    assert AttackPredictor.calculate_confidence(probability, factors) == expected


# =============================================================================
# Reporting
# =============================================================================

@pytest.mark.parametrize("attack_ids, pattern", [
    ([], "Insufficient data"),
    (["dos"], "Insufficient data"),
    (["dos", "dos", "mitm"], "Repeating network attacks"),
    (["dos", "sql", "phishing"], "Diverse attack strategy"),
    (["sql", "dos", "sql", "phishing"], "Favoring application attacks"),
])
def test_recent_pattern(catalog, state, attack_ids, pattern):
    predictor = AttackPredictor()
    record(predictor, catalog, state, *attack_ids)
    assert predictor.get_recent_pattern() == pattern


def test_pattern_uses_last_five(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "sql", "phishing", "dos", "dos", "dos", "dos", "dos")
    assert predictor.get_recent_pattern() == "Repeating network attacks"


def test_most_used_type_ties_go_to_first_seen(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "sql", "dos", "dos", "sql")
    assert predictor.get_most_used_type() == "application"


def test_prediction_summary(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos", "dos")

    summary = predictor.get_prediction_summary(candidates(catalog, state), state)
    rows = summary["predictions"]
    assert len(rows) == 5
    assert all(isinstance(row["probability"], int) for row in rows)
    assert summary["summary"]["most_likely"] == rows[0]["attack_name"]
    assert summary["summary"]["total_attacks"] == 2
    assert summary["summary"]["recent_pattern"] == "Repeating network attacks"


def test_detailed_analysis_and_stats(catalog, state):
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos", "sql", "malware")

    analysis = predictor.get_detailed_analysis(candidates(catalog, state), state)
    assert len(analysis["detailed_analysis"]) == 5
    assert set(analysis["detailed_analysis"][0]["factors"]) == {
        "transition", "frequency", "resource", "efficiency", "recency", "security"
    }
    assert analysis["history_stats"]["total_attacks"] == 3
    assert analysis["history_stats"]["unique_types"] == 3
    assert analysis["history_stats"]["avg_cost"] == 4.0

    stats = predictor.get_stats()
    assert stats["transition_count"] == 2
    assert stats["most_used_type"] == "network"


def test_predictor_ignores_state_roles(catalog, state):
    """Predictions read the attacker's pool even when the defender is to move"""
    state.current_player = PlayerRole.DEFENDER
    predictor = AttackPredictor()
    record(predictor, catalog, state, "dos")
    assert predictor.predict_next_attack(candidates(catalog, state), state)
