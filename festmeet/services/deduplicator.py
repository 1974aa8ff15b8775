"""Performance deduplication across uploads and contributors.

The same set shows up in several screenshots of one schedule, in a manual
correction of an OCR result, and in the schedules of friends.  Records are
collapsed on the identity key (normalized artist, normalized stage, start
truncated to the minute); when two records share a key the later one wins,
so a manual edit replaces the OCR-derived record it corrects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from festmeet.models.performance import IdentityKey, Performance
from festmeet.utils.logging import get_logger

_logger = get_logger(__name__)


def coerce_performance(entry: Any) -> Performance | None:
    """Return *entry* as a Performance, or ``None`` when it is malformed.

    Accepts Performance instances and mappings with ``artist``, ``stage``,
    ``start`` and optional ``end`` keys.  Anything else, or a mapping that
    fails validation (blank artist, unparseable start), yields ``None``.
    """
    if isinstance(entry, Performance):
        return entry
    if not isinstance(entry, Mapping):
        return None
    try:
        return Performance.model_validate(dict(entry))
    except ValidationError:
        return None


def coerce_performances(entries: Iterable[Any] | None) -> list[Performance]:
    """Keep only the well-formed entries of *entries*, as Performances."""
    if entries is None:
        return []
    performances: list[Performance] = []
    for entry in entries:
        performance = coerce_performance(entry)
        if performance is None:
            _logger.debug("malformed_performance_skipped", entry=repr(entry)[:120])
            continue
        performances.append(performance)
    return performances


def deduplicate_performances(
    existing: Iterable[Any] | None = None,
    new: Iterable[Any] | None = None,
) -> list[Any]:
    """Merge two performance collections, one record per identity.

    Args:
        existing: Previously accumulated records.
        new: Newly extracted or typed-in records; these win ties.

    Returns:
        The merged records in first-seen key order.  When one input is
        empty the other is returned unchanged (the same object).
    """
    existing_items = list(existing) if existing is not None and not isinstance(existing, list) else existing
    new_items = list(new) if new is not None and not isinstance(new, list) else new
    existing_items = existing_items or []
    new_items = new_items or []

    if not existing_items and not new_items:
        return []
    if not existing_items:
        return new_items
    if not new_items:
        return existing_items

    result, skipped = _collapse((*existing_items, *new_items))
    _logger.debug(
        "performances_deduplicated",
        existing=len(existing_items),
        new=len(new_items),
        unique=len(result),
        skipped=skipped,
    )
    return result


def unique_by_identity(entries: Iterable[Any] | None) -> list[Performance]:
    """Collapse *entries* to one Performance per identity, later entries winning.

    Unlike :func:`deduplicate_performances` there is no short-circuit: a
    single list that repeats a set (one screenshot showing the same block
    twice) comes back with the repeat removed.
    """
    result, skipped = _collapse(entries or ())
    if skipped:
        _logger.debug("malformed_performance_skipped", count=skipped)
    return result


def _collapse(entries: Iterable[Any]) -> tuple[list[Performance], int]:
    unique: dict[IdentityKey, Performance] = {}
    skipped = 0
    for entry in entries:
        performance = coerce_performance(entry)
        if performance is None:
            skipped += 1
            continue
        unique[performance.identity_key] = performance
    return list(unique.values()), skipped
