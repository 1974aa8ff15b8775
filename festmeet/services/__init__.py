"""Core festmeet services.

- **performance_extractor** / **extraction_strategies** -- normalized text to
  performance records.
- **deduplicator** -- identity-based merging of performance lists.
- **gap_finder** -- one person's free time within a festival day.
- **meetup_engine** -- ranked meetup candidates for a group.
- **manual_entry** -- validated hand-typed performances.
- **reference_lineup** -- optional correction against a known lineup.
- **recognition_service** -- recognition provider fallback chain.
"""

from festmeet.services.deduplicator import deduplicate_performances
from festmeet.services.gap_finder import find_time_gaps
from festmeet.services.manual_entry import add_manual_performance, build_manual_performance
from festmeet.services.meetup_engine import find_shared_gaps
from festmeet.services.performance_extractor import PerformanceExtractor
from festmeet.services.recognition_service import RecognitionService
from festmeet.services.reference_lineup import LineupEntry, ReferenceLineup

__all__ = [
    "LineupEntry",
    "PerformanceExtractor",
    "RecognitionService",
    "ReferenceLineup",
    "add_manual_performance",
    "build_manual_performance",
    "deduplicate_performances",
    "find_shared_gaps",
    "find_time_gaps",
]
