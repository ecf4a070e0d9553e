import pytest

from kinnect_candidates.types import MentorCandidate
from kinnect_scoring.mentors import score_mentor
from kinnect_store.schemas import MentorRecord, UserRecord

from conftest import SUBJECT_ID, add_user


def _mentor(mid="m1", **kw):
    return MentorRecord(id=mid, user_id=f"user-{mid}", **kw)


def test_empty_learning_goals_fall_back_to_neutral():
    subject = UserRecord(id=SUBJECT_ID, learning_goals=[])
    rec = score_mentor(subject, MentorCandidate(mentor=_mentor(specializations=["x"])))

    goals = rec.breakdown.features["goals"]
    assert goals.value == 0.5
    assert goals.contribution == pytest.approx(0.175)
    assert "Expertise in your areas of interest" in rec.reasons


def test_goal_match_is_substring_either_way():
    subject = UserRecord(id=SUBJECT_ID, learning_goals=["leadership", "public speaking", "cooking"])
    mentor = _mentor(specializations=["Leadership coaching", "Speaking"])
    rec = score_mentor(subject, MentorCandidate(mentor=mentor))
    assert rec.breakdown.features["goals"].value == pytest.approx(2 / 3)


def test_defaults_for_missing_rating_and_experience():
    subject = UserRecord(id=SUBJECT_ID, learning_goals=["x"])
    rec = score_mentor(subject, MentorCandidate(mentor=_mentor()))

    # no reviews -> average 3
    assert rec.breakdown.features["rating"].value == pytest.approx(0.6)
    # missing years: mentor 10, subject 0 -> gap 10
    assert "Appropriate experience level" in rec.reasons
    assert rec.confidence == pytest.approx(0.4)


def test_full_profile_scores_every_signal():
    subject = UserRecord(
        id=SUBJECT_ID,
        industry="Health",
        is_indigenous=True,
        years_experience=2,
        learning_goals=["nursing"],
    )
    mentor = _mentor(
        industry="Healthcare",
        specializations=["Nursing"],
        review_ratings=[5, 4.5],
        is_indigenous=True,
        years_experience=12,
        response_rate=0.9,
    )
    rec = score_mentor(subject, MentorCandidate(mentor=mentor))

    assert rec.reasons == [
        "Expertise in your areas of interest",
        "Industry expertise",
        "Highly rated mentor",
        "Indigenous mentor",
        "Appropriate experience level",
        "Responsive mentor",
    ]
    # 0.35 + 0.20 + 0.95*0.15 + 0.15 + 0.10 + 0.05
    assert rec.score == 0.99


def test_experience_gap_outside_window():
    subject = UserRecord(id=SUBJECT_ID, years_experience=1)
    rec = score_mentor(subject, MentorCandidate(mentor=_mentor(years_experience=30)))
    assert "Appropriate experience level" not in rec.reasons


def _mentor_row(mid, user_id, **kw):
    row = {
        "id": mid,
        "user_id": user_id,
        "industry": "Tech",
        "years_experience": 10,
        "response_rate": 0.9,
        "is_available": True,
        "status": "approved",
        "country": None,
        "location": None,
        "availability": None,
    }
    row.update(kw)
    return row


@pytest.mark.anyio
async def test_mentor_candidates_respect_capacity_and_exclusions(engine, fake_client):
    add_user(fake_client, SUBJECT_ID, industry="Tech", learning_goals=[])
    fake_client.add(
        "mentors",
        _mentor_row("busy", "u-busy"),
        _mentor_row("open", "u-open"),
        _mentor_row("self", SUBJECT_ID),
        _mentor_row("away", "u-away", is_available=False),
        _mentor_row("pending", "u-pending", status="pending"),
        _mentor_row("by-id", "u-by-id"),
        _mentor_row("by-user", "u-by-user"),
    )
    for _ in range(5):
        fake_client.add("mentor_sessions", {"mentor_id": "busy", "status": "scheduled"})
    for _ in range(4):
        fake_client.add("mentor_sessions", {"mentor_id": "open", "status": "SCHEDULED"})
    fake_client.add("mentor_sessions", {"mentor_id": "open", "status": "completed"})

    recs = await engine.mentors(SUBJECT_ID, {"exclude_ids": ["by-id", "u-by-user"]})

    assert [r.item.id for r in recs] == ["open"]


@pytest.mark.anyio
async def test_mentor_specializations_and_reviews_are_loaded(engine, fake_client):
    add_user(fake_client, SUBJECT_ID, learning_goals=["python"])
    fake_client.add("mentors", _mentor_row("m1", "u1"))
    fake_client.add("mentor_specializations", {"mentor_id": "m1", "name": "Python"})
    fake_client.add(
        "mentor_reviews", {"mentor_id": "m1", "rating": 5}, {"mentor_id": "m1", "rating": 4}
    )

    (rec,) = await engine.mentors(SUBJECT_ID)

    assert rec.item.specializations == ["Python"]
    assert rec.item.average_rating == 4.5
    assert "Highly rated mentor" in rec.reasons
    # 4 reasons -> 0.4, rating 4.5/5 -> 0.45
    assert rec.confidence == pytest.approx(0.85)


@pytest.mark.anyio
async def test_session_counts_are_exact_past_the_row_cap(engine, fake_client):
    fake_client.max_rows = 1000
    add_user(fake_client, SUBJECT_ID, industry="Tech", learning_goals=[])
    fake_client.add(
        "mentors",
        _mentor_row("crowded", "u-crowded"),
        _mentor_row("busy", "u-busy"),
        _mentor_row("open", "u-open"),
    )
    for _ in range(1000):
        fake_client.add("mentor_sessions", {"mentor_id": "crowded", "status": "scheduled"})
    for _ in range(5):
        fake_client.add("mentor_sessions", {"mentor_id": "busy", "status": "scheduled"})

    recs = await engine.mentors(SUBJECT_ID, {"min_score": 0})

    assert [r.item.id for r in recs] == ["open"]
