"""Notification events derived by diffing two progress snapshots."""

from collections.abc import Iterable

from questlog.schemas.progress import ProgressEvent, SubjectProgress


def _format_minutes(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def diff_progress(
    before: SubjectProgress,
    after: SubjectProgress,
    milestones: Iterable[int] = (),
) -> list[ProgressEvent]:
    """
    Events for tiers newly reached and minute milestones newly crossed.

    Only upward moves produce events; a streak reset that drops the
    achievement level is silent.
    """
    subject = after.config
    events: list[ProgressEvent] = []

    for index in range(before.achievement_level + 1, after.achievement_level + 1):
        if index >= len(subject.achievements):
            break
        tier = subject.achievements[index]
        events.append(
            ProgressEvent(
                kind="achievement_unlocked",
                subject_id=subject.id,
                achievement=tier,
                message=f"{tier.emoji} {tier.name} unlocked in {subject.name}".strip(),
            )
        )

    for threshold in sorted(set(milestones)):
        if before.total_minutes < threshold <= after.total_minutes:
            events.append(
                ProgressEvent(
                    kind="milestone_reached",
                    subject_id=subject.id,
                    minutes=threshold,
                    message=f"{_format_minutes(threshold)} of {subject.name} studied",
                )
            )

    return events
