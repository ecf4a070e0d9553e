import pytest

from kinnect_candidates.types import ConnectionCandidate
from kinnect_scoring.connections import score_connection
from kinnect_store.schemas import UserRecord

from conftest import SUBJECT_ID, add_user, connect, like


def _user(uid="c", **kw):
    return UserRecord(id=uid, **kw)


def test_skill_overlap_two_of_six():
    subject = _user(SUBJECT_ID, skills=["python", "sql", "design", "writing"])
    other = _user(skills=["Python", "SQL", "rust", "go"])

    rec = score_connection(subject, ConnectionCandidate(user=other))

    skills = rec.breakdown.features["skills"]
    assert skills.value == pytest.approx(2 / 6)
    assert skills.contribution == pytest.approx(0.0833, abs=1e-3)
    assert "Similar skills" in rec.reasons


def test_similar_skills_reason_needs_overlap_above_threshold():
    subject = _user(SUBJECT_ID, skills=["a", "b", "c", "d"])
    other = _user(skills=["a", "e", "f", "g", "h"])  # 1/8
    rec = score_connection(subject, ConnectionCandidate(user=other))
    assert "Similar skills" not in rec.reasons


def test_all_signals_and_reason_order():
    subject = _user(
        SUBJECT_ID, skills=["python"], industry="Tech", location="Sydney NSW", is_indigenous=True
    )
    other = _user(
        skills=["python"], industry="tech", location="sydney nsw", is_indigenous=True
    )
    rec = score_connection(
        subject, ConnectionCandidate(user=other, cf_score=0.6, mutual_count=3)
    )

    assert rec.reasons == [
        "People like you connected with them",
        "Similar skills",
        "Same industry",
        "Same location",
        "Aboriginal/Torres Strait Islander community",
        "3 mutual connections",
    ]
    # 0.21 + 0.25 + 0.15 + 0.10 + 0.10 + 0.06
    assert rec.score == 0.87
    assert rec.confidence == 0.8


def test_region_bonus_only_for_known_shared_state():
    subject = _user(SUBJECT_ID, location="Newcastle NSW")
    rec = score_connection(subject, ConnectionCandidate(user=_user(location="Dubbo, NSW")))
    assert rec.reasons == ["Same region"]
    assert rec.score == 0.05

    nowhere = _user(SUBJECT_ID, location="Somewhere")
    rec = score_connection(nowhere, ConnectionCandidate(user=_user(location="Elsewhere")))
    assert rec.reasons == []
    assert rec.score == 0.0


def test_mutual_connections_cap_and_singular():
    subject = _user(SUBJECT_ID)
    one = score_connection(subject, ConnectionCandidate(user=_user(), mutual_count=1))
    many = score_connection(subject, ConnectionCandidate(user=_user(), mutual_count=12))
    assert one.reasons == ["1 mutual connection"]
    assert one.score == 0.02
    assert many.score == 0.10


def test_diversity_favours_different_skills():
    subject = _user(SUBJECT_ID, skills=["a"])
    rec = score_connection(subject, ConnectionCandidate(user=_user(skills=["b"])), diversity=1.0)
    assert rec.breakdown.features["diversity"].contribution == pytest.approx(0.1)
    assert rec.score == 0.1


def test_boost_scales_only_the_named_feature():
    subject = _user(SUBJECT_ID, industry="Tech", is_indigenous=True)
    cand = ConnectionCandidate(user=_user(industry="Tech", is_indigenous=True))

    plain = score_connection(subject, cand)
    boosted = score_connection(subject, cand, boost_factors={"industry": 2.0, "nope": 9.0})

    assert plain.score == 0.25
    assert boosted.score == 0.40
    assert (
        boosted.breakdown.features["community"].contribution
        == plain.breakdown.features["community"].contribution
    )


@pytest.mark.anyio
async def test_connections_exclude_subject_relations_and_excluded_ids(engine, fake_client):
    add_user(fake_client, SUBJECT_ID, skills=["python", "sql"], industry="Tech")
    for uid in ("friend", "pending", "excluded", "fresh", "inactive"):
        add_user(
            fake_client,
            uid,
            skills=["python", "sql"],
            industry="Tech",
            status="inactive" if uid == "inactive" else "active",
        )
    connect(fake_client, SUBJECT_ID, "friend")
    connect(fake_client, "pending", SUBJECT_ID, status="pending")

    recs = await engine.connections(SUBJECT_ID, {"exclude_ids": ["excluded"]})

    ids = [r.item.id for r in recs]
    assert ids == ["fresh"]
    # skills 1.0 * 0.25 + industry 0.15
    assert recs[0].score == 0.4


@pytest.mark.anyio
async def test_connections_count_mutuals_and_use_similarity(engine, fake_client):
    add_user(fake_client, SUBJECT_ID)
    add_user(fake_client, "m1")
    add_user(fake_client, "m2")
    add_user(fake_client, "cand")
    # subject and cand share two accepted connections, m1 and m2
    for m in ("m1", "m2"):
        connect(fake_client, SUBJECT_ID, m)
        connect(fake_client, m, "cand")
    # and the same liked posts, so cand is a look-alike
    for pid in ("p1", "p2"):
        like(fake_client, SUBJECT_ID, pid)
        like(fake_client, "cand", pid)

    recs = await engine.connections(SUBJECT_ID, {"min_score": 0})
    by_id = {r.item.id: r for r in recs}

    cand = by_id["cand"]
    assert cand.breakdown.features["mutual"].contribution == pytest.approx(0.04)
    assert "2 mutual connections" in cand.reasons
    assert cand.breakdown.features["collaborative"].value > 0.3
    assert "People like you connected with them" in cand.reasons
    assert SUBJECT_ID not in by_id


@pytest.mark.anyio
async def test_unknown_subject_is_not_found(engine):
    from kinnect_core.errors import NotFound

    with pytest.raises(NotFound):
        await engine.connections("ghost")
