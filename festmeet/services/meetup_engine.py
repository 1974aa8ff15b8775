"""Meetup discovery across a group's schedules.

Candidates come from two sources, in priority order:

1. **Recommended**: a performance that at least two people hold with the
   same identity.  The group meets during the lead window just before it
   starts; people who are not going are invited when they are free.
2. **General**: only searched when fewer than two recommended candidates
   exist.  Free time between two of one person's sets is intersected with
   another person's, and sufficiently long overlaps are proposed.

The ranked list is rebuilt from scratch on every call; nothing here holds
state between runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from festmeet.models.meetup import Gap, MeetupCandidate, MeetupPolicy
from festmeet.models.performance import (
    ASSUMED_SET_DURATION,
    IdentityKey,
    Performance,
    Schedule,
    normalize_identity_text,
)
from festmeet.services.deduplicator import coerce_performances
from festmeet.services.gap_finder import find_internal_gaps
from festmeet.utils.festival_clock import festival_sort_minutes
from festmeet.utils.logging import get_logger

_logger = get_logger(__name__)

UNKNOWN_STAGE = "Unknown Stage"


@dataclass
class _CommonPerformance:
    """A performance and every owner holding it."""

    performance: Performance
    owners: list[str] = field(default_factory=list)


def _coerce_schedule(entry: Any) -> Schedule | None:
    if isinstance(entry, Schedule):
        return entry
    if not isinstance(entry, Mapping):
        return None
    owner = entry.get("owner_name") or entry.get("name")
    if not owner:
        return None
    raw = entry.get("performances")
    if raw is None:
        raw = entry.get("sets")
    return Schedule(owner_name=owner, performances=coerce_performances(raw))


def coerce_schedules(schedules: Iterable[Any] | None) -> list[Schedule]:
    """Keep the usable schedules, converting mappings to :class:`Schedule`."""
    result: list[Schedule] = []
    for entry in schedules or []:
        schedule = _coerce_schedule(entry)
        if schedule is None:
            _logger.debug("malformed_schedule_skipped", entry=repr(entry)[:120])
            continue
        result.append(schedule)
    return result


def build_identity_index(schedules: list[Schedule]) -> dict[IdentityKey, _CommonPerformance]:
    """Map every identity to its first-seen record and the owners holding it."""
    index: dict[IdentityKey, _CommonPerformance] = {}
    for schedule in schedules:
        for performance in schedule.performances:
            entry = index.setdefault(performance.identity_key, _CommonPerformance(performance))
            if schedule.owner_name not in entry.owners:
                entry.owners.append(schedule.owner_name)
    return index


def find_common_performances(schedules: list[Schedule]) -> list[_CommonPerformance]:
    """Performances held by two or more owners, ordered by start."""
    index = build_identity_index(schedules)
    common = [entry for entry in index.values() if len(entry.owners) >= 2]
    return sorted(common, key=lambda entry: entry.performance.start)


def _is_free(schedule: Schedule, window_start: datetime, window_end: datetime) -> bool:
    """True when none of the owner's one-hour blocks overlaps the window."""
    for performance in schedule.performances:
        busy_start = performance.start
        busy_end = busy_start + ASSUMED_SET_DURATION
        if busy_start < window_end and window_start < busy_end:
            return False
    return True


def _recommended_candidates(
    schedules: list[Schedule],
    common: list[_CommonPerformance],
    policy: MeetupPolicy,
) -> list[MeetupCandidate]:
    candidates: list[MeetupCandidate] = []
    seen: set[tuple[datetime, datetime, str]] = set()

    for entry in common:
        performance = entry.performance
        stage = performance.stage or UNKNOWN_STAGE
        window_end = performance.start
        window_start = window_end - policy.lead_time

        key = (window_start, window_end, normalize_identity_text(stage))
        if key in seen:
            continue
        seen.add(key)

        attendees = frozenset(entry.owners)
        available = {
            schedule.owner_name
            for schedule in schedules
            if schedule.owner_name not in attendees
            and _is_free(schedule, window_start, window_end)
        }
        participants = attendees | available
        if len(participants) < 2:
            continue

        candidates.append(
            MeetupCandidate(
                start=window_start,
                end=window_end,
                participants=participants,
                is_recommended=True,
                anchor_artist=performance.artist,
                anchor_stage=stage,
                attendees=attendees,
            )
        )
    return candidates


def _next_common_after(
    moment: datetime, common: list[_CommonPerformance],
) -> Performance | None:
    upcoming = [entry.performance for entry in common if entry.performance.start >= moment]
    if not upcoming:
        return None
    return min(upcoming, key=lambda performance: performance.start - moment)


def _general_candidates(
    schedules: list[Schedule],
    common: list[_CommonPerformance],
    policy: MeetupPolicy,
) -> list[MeetupCandidate]:
    owned_gaps: list[tuple[str, Gap]] = [
        (schedule.owner_name, gap)
        for schedule in schedules
        for gap in find_internal_gaps(schedule.performances, policy=policy)
    ]

    candidates: list[MeetupCandidate] = []
    for i, (owner_a, gap_a) in enumerate(owned_gaps):
        for owner_b, gap_b in owned_gaps[i + 1:]:
            if owner_a == owner_b:
                continue
            overlap_start = max(gap_a.start, gap_b.start)
            overlap_end = min(gap_a.end, gap_b.end)
            if overlap_end <= overlap_start or overlap_end - overlap_start < policy.min_overlap:
                continue

            anchor = _next_common_after(overlap_end, common)
            # Long overlaps keep their trailing part, closest to what follows.
            if overlap_end - overlap_start > policy.max_window:
                overlap_start = overlap_end - policy.max_window

            candidates.append(
                MeetupCandidate(
                    start=overlap_start,
                    end=overlap_end,
                    participants=frozenset({owner_a, owner_b}),
                    is_recommended=False,
                    anchor_artist=anchor.artist if anchor else None,
                    anchor_stage=anchor.stage if anchor else None,
                )
            )
    return candidates


def rank_candidates(
    candidates: list[MeetupCandidate], policy: MeetupPolicy | None = None,
) -> list[MeetupCandidate]:
    """Recommended first, then by festival clock; stable; truncated."""
    policy = policy or MeetupPolicy()
    ranked = sorted(
        candidates,
        key=lambda candidate: (
            not candidate.is_recommended,
            festival_sort_minutes(candidate.start, policy.clock_day_start_hour),
        ),
    )
    return ranked[:policy.max_candidates]


def find_shared_gaps(
    schedules: Iterable[Any] | None,
    policy: MeetupPolicy | None = None,
) -> list[MeetupCandidate]:
    """Propose ranked meetup windows for a group.

    Args:
        schedules: :class:`Schedule` objects or ``{"name", "sets"}``
            mappings; unusable entries and malformed performances are
            skipped.
        policy: Lead time, overlap bounds and the candidate limit.

    Returns:
        At most ``policy.max_candidates`` candidates, recommended ones
        first, each with at least two participants.  Empty when there is
        nothing to propose.
    """
    policy = policy or MeetupPolicy()
    usable = coerce_schedules(schedules)
    if not usable:
        return []

    common = find_common_performances(usable)
    candidates = _recommended_candidates(usable, common, policy)
    recommended_count = len(candidates)

    if recommended_count < policy.min_recommended:
        candidates.extend(_general_candidates(usable, common, policy))

    ranked = rank_candidates(candidates, policy)
    _logger.info(
        "meetup_candidates_ranked",
        schedules=len(usable),
        common_performances=len(common),
        recommended=recommended_count,
        general=len(candidates) - recommended_count,
        returned=len(ranked),
    )
    return ranked
