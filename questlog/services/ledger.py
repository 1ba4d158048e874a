"""
Session ledger: the streak / achievement / XP update rule.

Everything here is a pure function of its arguments. The same code runs on
the server (authoritative, against stored progress) and in the client
(optimistic, against cached progress), so it must never read the clock,
touch storage, or raise for well-typed input.

"Today" is always the session's own date; callers decide what that is.
"""

from collections.abc import Callable, Sequence
from datetime import date
from uuid import uuid4

from questlog.schemas.progress import (
    AchievementTier,
    LedgerResult,
    Session,
    SessionDraft,
    SubjectConfig,
    SubjectProgress,
)

PIP_NOTES = "Quick add"
FALLBACK_PIP_QUEST = "easy"


def new_session_id() -> str:
    """Generate an opaque, unique session id."""
    return f"session-{uuid4().hex}"


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from earlier to later (negative if later is before earlier)."""
    return (later - earlier).days


def next_streak(current_streak: int, last_study_date: date | None, session_date: date) -> int:
    """
    Streak after studying on session_date.

    - no previous study: 1
    - same day: unchanged
    - the next day: +1
    - anything else (gap, or a date before the last one): reset to 1
    """
    if last_study_date is None:
        return 1
    delta = days_between(last_study_date, session_date)
    if delta == 0:
        return current_streak
    if delta == 1:
        return current_streak + 1
    return 1


def resolve_xp(config: SubjectConfig, quest_type: str) -> int:
    """XP for a quest type id; unknown ids are free-form entries worth 0."""
    for quest in config.quest_types:
        if quest.id == quest_type:
            return quest.xp
    return 0


def achievement_level_for(
    achievements: Sequence[AchievementTier], streak: int, fallback: int
) -> int:
    """Highest tier index whose streak_required is met, else fallback."""
    for index in range(len(achievements) - 1, -1, -1):
        if achievements[index].streak_required <= streak:
            return index
    return fallback


def apply_session(
    before: SubjectProgress,
    draft: SessionDraft,
    *,
    session_id: str | None = None,
    id_factory: Callable[[], str] = new_session_id,
) -> LedgerResult:
    """Apply one study session to a subject's progress."""
    config = before.config
    streak = next_streak(before.current_streak, before.last_study_date, draft.date)
    xp_earned = resolve_xp(config, draft.quest_type)
    level = achievement_level_for(config.achievements, streak, before.achievement_level)

    after = before.model_copy(
        update={
            "total_minutes": before.total_minutes + draft.duration,
            "current_streak": streak,
            "longest_streak": max(before.longest_streak, streak),
            "achievement_level": level,
            "last_study_date": draft.date,
            "total_xp": before.total_xp + xp_earned,
        }
    )
    session = Session(
        id=session_id or id_factory(),
        subject_id=draft.subject_id,
        duration=draft.duration,
        date=draft.date,
        notes=draft.notes,
        quest_type=draft.quest_type,
        xp_earned=xp_earned,
    )
    return LedgerResult(after=after, session=session)


def lowest_effort_quest(config: SubjectConfig) -> str:
    """Id of the shortest quest type (earliest wins ties)."""
    if not config.quest_types:
        return FALLBACK_PIP_QUEST
    return min(config.quest_types, key=lambda quest: (quest.duration, quest.xp)).id


def pip_draft(config: SubjectConfig, on: date) -> SessionDraft:
    """The session a one-tap pip stands for."""
    return SessionDraft(
        subject_id=config.id,
        duration=config.pip_amount,
        date=on,
        notes=PIP_NOTES,
        quest_type=lowest_effort_quest(config),
    )


def quick_pip(
    before: SubjectProgress,
    on: date,
    *,
    session_id: str | None = None,
    id_factory: Callable[[], str] = new_session_id,
) -> LedgerResult:
    """Record a pip: a pip_draft fed through apply_session."""
    return apply_session(
        before, pip_draft(before.config, on), session_id=session_id, id_factory=id_factory
    )
