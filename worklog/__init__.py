"""Concurrent work-log discovery, fetching and aggregation."""

from .pipeline import PipelineContext, PipelineError, WorklogPipeline, total_worklog_seconds
from .window import WindowError, resolve_window

__all__ = ["PipelineContext", "PipelineError", "WorklogPipeline", "total_worklog_seconds", "WindowError", "resolve_window"]
