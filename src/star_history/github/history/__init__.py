"""Star history reconstruction and batch scraping.

This module provides:
- parse_last_page: page count from a Link header
- SamplingPlanner: which pages to fetch and how to turn them into points
- HistoryAssembler: one repository's series, ending with today's anchor
- BatchScheduler: resumable, paced runs over many repositories
"""

from .assembler import HistoryAssembler
from .links import parse_last_page
from .results import RepoScrapeJob, RunResult
from .sampling import SamplingPlan, SamplingPlanner, SamplingStrategy, round_half_up
from .scheduler import BatchScheduler

__all__ = [
    "BatchScheduler",
    "HistoryAssembler",
    "RepoScrapeJob",
    "RunResult",
    "SamplingPlan",
    "SamplingPlanner",
    "SamplingStrategy",
    "parse_last_page",
    "round_half_up",
]
