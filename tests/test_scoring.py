"""
Tests for scoring and ranking
"""
import pytest

from stormimpact.scoring import (
    Scorer,
    full_outer_join,
    rank_scores,
    score_economic,
    score_health,
    top_n,
)


def test_full_outer_join_union_of_keys():
    """Test keys from either side appear once, missing side as 0"""
    left = {"A": 1.0, "B": 2.0}
    right = {"B": 5.0, "C": 7.0}

    joined = list(full_outer_join(left, right))

    assert joined == [
        ("A", 1.0, 0.0),
        ("B", 2.0, 5.0),
        ("C", 0.0, 7.0),
    ]


def test_full_outer_join_empty():
    """Test two empty summaries join to nothing"""
    assert list(full_outer_join({}, {})) == []


def test_health_score_weights_fatalities_twice():
    """Test health score is 2 x fatalities + injuries"""
    fatalities = {"HEAT": 1.5, "TORNADO": 0.5}
    injuries = {"HEAT": 2.0, "TORNADO": 10.0}

    ranked = score_health(fatalities, injuries)

    assert ranked == [("TORNADO", 11.0), ("HEAT", 5.0)]


def test_health_score_one_sided_keys():
    """Test a type present in only one summary uses 0 for the other"""
    ranked = dict(score_health({"ONLY_FATAL": 3.0}, {"ONLY_INJURY": 5.0}))

    assert ranked == {"ONLY_FATAL": 6.0, "ONLY_INJURY": 5.0}


def test_health_score_custom_weight():
    """Test the fatality weight is configurable"""
    ranked = score_health({"HEAT": 1.0}, {"HEAT": 1.0}, fatality_weight=10.0)
    assert ranked == [("HEAT", 11.0)]


def test_economic_score_is_unweighted_sum():
    """Test economic score adds property and crop means"""
    ranked = score_economic(
        {"FLOOD": 200.0, "HAIL": 10.0},
        {"FLOOD": 50.0, "DROUGHT": 400.0},
    )

    assert ranked == [("DROUGHT", 400.0), ("FLOOD", 250.0), ("HAIL", 10.0)]


def test_rank_is_stable_for_ties():
    """Test tied scores keep first-seen order"""
    ranked = score_health(
        {"B_FIRST": 1.0, "A_SECOND": 0.0, "C_TOP": 5.0},
        {"B_FIRST": 0.0, "A_SECOND": 2.0, "C_TOP": 0.0},
    )

    assert ranked == [("C_TOP", 10.0), ("B_FIRST", 2.0), ("A_SECOND", 2.0)]


def test_rank_scores_descending():
    """Test ranking sorts by descending score"""
    ranked = rank_scores([("a", 1.0), ("b", 3.0), ("c", 2.0)])
    assert [score for _, score in ranked] == [3.0, 2.0, 1.0]


def test_empty_summaries_rank_to_empty_list():
    """Test empty inputs are not an error"""
    assert score_health({}, {}) == []
    assert score_economic({}, {}) == []


def test_top_n():
    """Test top_n truncates the ranking"""
    ranked = [("a", 3.0), ("b", 2.0), ("c", 1.0)]

    assert top_n(ranked, 2) == [("a", 3.0), ("b", 2.0)]
    assert top_n(ranked, 10) == ranked
    assert top_n(ranked, 0) == []

    with pytest.raises(ValueError):
        top_n(ranked, -1)


def test_scorer_applies_weight_and_limit():
    """Test Scorer combines scoring and truncation"""
    scorer = Scorer(fatality_weight=2.0, top_n=1)

    health = scorer.health_ranking({"A": 1.0, "B": 3.0}, {"A": 1.0, "B": 0.0})
    economic = scorer.economic_ranking({"A": 1.0}, {"B": 2.0})

    assert health == [("B", 6.0)]
    assert economic == [("B", 2.0)]


def test_scorer_rejects_negative_top_n():
    """Test negative list sizes are rejected"""
    with pytest.raises(ValueError):
        Scorer(top_n=-1)


def test_scorer_full_scores_and_truncate():
    """Test Scorer returns complete ranked lists and truncates separately"""
    scorer = Scorer(fatality_weight=3.0, top_n=2)

    health = scorer.health_scores({"A": 1.0, "B": 2.0}, {"A": 1.0, "C": 4.0})
    economic = scorer.economic_scores({"A": 1.0, "B": 5.0}, {"C": 3.0})

    assert health == [("B", 6.0), ("A", 4.0), ("C", 4.0)]
    assert economic == [("B", 5.0), ("C", 3.0), ("A", 1.0)]
    assert scorer.truncate(health) == [("B", 6.0), ("A", 4.0)]
    assert scorer.truncate([]) == []
