"""
Join, scenario arithmetic and snapshot merge engines.
"""

from maxspan.engine.book import ContractBook, PositionRow
from maxspan.engine.join import JoinResult, index_contracts, join
from maxspan.engine.scenarios import (
    PortfolioResult,
    PositionImpact,
    aggregate_portfolio,
    merge_by_max,
    worst_absolute,
)
from maxspan.engine.snapshot_merge import (
    MergeCounters,
    MergeMode,
    SnapshotMergeResult,
    format_span_number,
    merge_snapshots,
)
from maxspan.engine.spreads import SpreadGroup, group_spreads

__all__ = [
    # Join
    "JoinResult",
    "join",
    "index_contracts",
    # Book
    "ContractBook",
    "PositionRow",
    # Scenarios
    "PortfolioResult",
    "PositionImpact",
    "aggregate_portfolio",
    "merge_by_max",
    "worst_absolute",
    # Snapshot merge
    "MergeCounters",
    "MergeMode",
    "SnapshotMergeResult",
    "format_span_number",
    "merge_snapshots",
    # Spreads
    "SpreadGroup",
    "group_spreads",
]
