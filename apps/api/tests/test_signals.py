import math
from datetime import timedelta

import pytest

from kinnect_signals.confidence import confidence
from kinnect_signals.decay import half_life_decay, time_decay
from kinnect_signals.geo import extract_state, same_state
from kinnect_signals.numeric import round2
from kinnect_signals.sets import contained_matches, jaccard, substring_matches

from conftest import NOW


def test_jaccard_bounds():
    assert jaccard(set(), set()) == 0.0
    assert jaccard({"a", "b"}, {"a", "b"}) == 1.0
    assert jaccard({"a"}, {"b"}) == 0.0
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)


def test_decay_bounds():
    assert half_life_decay(0, 14) == 1.0
    assert abs(half_life_decay(14, 14) - 0.5) < 1e-6
    assert abs(half_life_decay(3, 3) - 0.5) < 1e-6


def test_decay_clamps_future_timestamps():
    assert time_decay(NOW + timedelta(days=2), NOW, 3) == 1.0


def test_decay_rejects_non_positive_half_life():
    with pytest.raises(ValueError):
        half_life_decay(1, 0)


@pytest.mark.parametrize("reasons", [0, 1, 3, 5, 9])
@pytest.mark.parametrize("primary", [0.0, 0.25, 0.5, 1.0])
def test_confidence_bounds(reasons, primary):
    c = confidence(reasons, primary)
    assert 0.0 <= c <= 1.0


def test_confidence_formula():
    # 2 reasons -> 0.2, primary 0.6 -> 0.3
    assert confidence(2, 0.6) == 0.5
    assert confidence(10, 1.0) == 1.0
    assert confidence(0, 0.0) == 0.0


def test_round2_rounds_half_up():
    assert round2(0.125) == 0.13
    assert round2(0.3349) == 0.33
    assert math.isclose(round2(1 / 3), 0.33)


def test_extract_state_matches_whole_tokens():
    assert extract_state("Parramatta, NSW") == "nsw"
    assert extract_state("Darwin") == ""  # "wa" inside a word is not WA
    assert extract_state(None) == ""


def test_same_state_requires_a_known_state():
    assert same_state("Newcastle NSW", "Dubbo, NSW")
    assert not same_state("Somewhere", "Elsewhere")
    assert not same_state("Perth WA", "Hobart TAS")


def test_substring_and_contained_matches():
    assert substring_matches(["Leadership", "python"], ["leadership coaching", "Py"]) == 2
    assert contained_matches(["python"], ["Python Developers"]) == 1
    assert contained_matches(["python developers"], ["python"]) == 0
