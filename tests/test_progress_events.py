"""Tests for progress event diffing and the XP level curve."""

from datetime import date

from questlog.schemas.progress import AchievementTier, SubjectConfig, SubjectProgress
from questlog.services.leveling import MAX_LEVEL, level_from_xp, xp_for_level
from questlog.services.progress_events import diff_progress


def progress(level: int = 0, minutes: int = 0) -> SubjectProgress:
    config = SubjectConfig(
        id="math",
        name="Mathematics",
        achievements=[
            AchievementTier(id="start", name="First Step", emoji="🌟", streak_required=0),
            AchievementTier(id="fire", name="On Fire", emoji="🔥", streak_required=3),
            AchievementTier(id="power", name="Power User", emoji="⚡", streak_required=7),
        ],
    )
    return SubjectProgress(
        config=config,
        total_minutes=minutes,
        achievement_level=level,
        current_streak=1,
        longest_streak=1,
        last_study_date=date(2024, 1, 1),
    )


def test_no_change_no_events():
    assert diff_progress(progress(1, 30), progress(1, 45), milestones=[60]) == []


def test_one_event_per_newly_reached_tier():
    events = diff_progress(progress(0), progress(2))
    assert [e.kind for e in events] == ["achievement_unlocked", "achievement_unlocked"]
    assert [e.achievement.id for e in events] == ["fire", "power"]
    assert "On Fire" in events[0].message


def test_level_drop_is_silent():
    assert diff_progress(progress(2), progress(0)) == []


def test_milestones_crossed():
    events = diff_progress(progress(0, 50), progress(0, 310), milestones=[300, 60, 600])
    assert [(e.kind, e.minutes) for e in events] == [("milestone_reached", 60), ("milestone_reached", 300)]
    assert events[1].message == "5h of Mathematics studied"


def test_milestone_hit_exactly_counts_once():
    assert len(diff_progress(progress(0, 0), progress(0, 60), milestones=[60])) == 1
    assert diff_progress(progress(0, 60), progress(0, 90), milestones=[60]) == []


def test_xp_for_level_curve():
    assert xp_for_level(1) == 0
    assert xp_for_level(2) == 100
    assert xp_for_level(3) == 282
    assert xp_for_level(5) == 800


def test_level_from_xp():
    assert level_from_xp(0).model_dump() == {"level": 1, "current_xp": 0, "xp_for_next_level": 100}

    info = level_from_xp(150)
    assert (info.level, info.current_xp, info.xp_for_next_level) == (2, 50, 282)

    assert level_from_xp(382).level == 3


def test_level_caps_at_max():
    info = level_from_xp(10**9)
    assert info.level == MAX_LEVEL
    assert info.xp_for_next_level == 0
