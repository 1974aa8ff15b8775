"""Schedule ingestion pipeline and progress tracking."""

from festmeet.pipeline.ingestion import ScheduleIngestionPipeline
from festmeet.pipeline.progress_tracker import ProgressTracker

__all__ = ["ProgressTracker", "ScheduleIngestionPipeline"]
