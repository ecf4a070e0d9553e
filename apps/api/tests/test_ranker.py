from kinnect_ranking.ranker import rank_and_paginate
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation


def _recs(*scores):
    return [ScoredRecommendation(item=f"item{i}", score=s) for i, s in enumerate(scores)]


def test_threshold_is_inclusive_and_sorted():
    ranked = rank_and_paginate(_recs(0.2, 0.9, 0.29, 0.3), min_score=0.3)
    assert [r.item for r in ranked] == ["item1", "item3"]


def test_ties_keep_generation_order():
    ranked = rank_and_paginate(_recs(0.5, 0.7, 0.5, 0.5), min_score=0.0)
    assert [r.item for r in ranked] == ["item1", "item0", "item2", "item3"]


def test_pages_concatenate_to_full_ranking():
    recs = _recs(0.1, 0.8, 0.4, 0.6, 0.9, 0.3, 0.7)
    full = rank_and_paginate(recs, min_score=0.0)
    pages = [rank_and_paginate(recs, min_score=0.0, offset=o, limit=3) for o in (0, 3, 6)]
    assert [r.item for page in pages for r in page] == [r.item for r in full]
    assert rank_and_paginate(recs, min_score=0.0, offset=10, limit=3) == []


def test_boosts_scale_only_named_features():
    b = BreakdownBuilder()
    b.add("skills", 0.5, 0.4)
    b.flag("industry", True, 0.1)
    boosted = b.build().boosted({"skills": 2.0, "unknown": 5.0})
    assert boosted.features["skills"].contribution == 0.4
    assert boosted.features["industry"].contribution == 0.1
    assert boosted.features["skills"].weight == 0.4
