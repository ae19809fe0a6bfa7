"""
Scenario Arithmetic

Pure operations over scenario arrays: worst absolute value, portfolio
aggregation across signed lot positions, and scenario-wise maximum of two
snapshots.

Length policy:
- Aggregation: the total series is as long as the longest contributing
  contract; shorter contracts contribute 0 beyond their own length.
- merge_by_max: max over the overlap, the later snapshot's extra tail is
  appended unchanged; the result always has the later snapshot's length.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from loguru import logger

from maxspan.core.keys import format_key
from maxspan.core.models import Contract
from maxspan.engine.join import ContractIndex
from maxspan.models.positions import Position


def worst_absolute(values: Iterable[float]) -> float:
    """max(|v|) over the sequence, 0 for an empty one."""
    return max((abs(v) for v in values), default=0.0)


def worst_index(values: Sequence[float]) -> Optional[int]:
    """Index of the largest |v|; ties keep the lowest index. None when empty."""
    best: Optional[int] = None
    best_abs = -1.0
    for i, v in enumerate(values):
        a = abs(v)
        if a > best_abs:
            best, best_abs = i, a
    return best


def scale(values: Sequence[float], lots: float) -> list[float]:
    return [v * lots for v in values]


def merge_by_max(earlier: Sequence[float], later: Sequence[float]) -> list[float]:
    """
    Scenario-wise maximum of two snapshots of the same contract.

    merged[i] == max(earlier[i], later[i]) for i < min(len(earlier), len(later))
    merged[i] == later[i] beyond the overlap.
    """
    overlap = min(len(earlier), len(later))
    merged = [max(earlier[i], later[i]) for i in range(overlap)]
    merged.extend(later[overlap:])
    return merged


@dataclass(slots=True)
class PositionImpact:
    """
    One matched position's contribution to the portfolio.

    Attributes:
        position: The position as entered
        contract: Contract it matched
        scaled_values: Contract scenario values multiplied by lots
        worst_abs: worst_absolute(scaled_values)
    """

    position: Position
    contract: Contract
    scaled_values: list[float]
    worst_abs: float

    @property
    def label(self) -> str:
        return format_key(self.position.key)


@dataclass(slots=True)
class PortfolioResult:
    """
    Aggregated scenario series for a set of positions.

    Attributes:
        series: Per-scenario sum of scaled contract values
        contributors: Matched positions ranked by worst_abs, largest first
        unmatched: Positions whose key matched no contract
        inert: Positions with lots == 0 (excluded)
    """

    series: list[float] = field(default_factory=list)
    contributors: list[PositionImpact] = field(default_factory=list)
    unmatched: list[Position] = field(default_factory=list)
    inert: int = 0

    @property
    def worst_value(self) -> float:
        return worst_absolute(self.series)

    @property
    def worst_scenario_index(self) -> Optional[int]:
        """0-based index of the dominating scenario, None with no matched positions."""
        return worst_index(self.series)

    @property
    def matched_count(self) -> int:
        return len(self.contributors)

    def summary(self) -> str:
        idx = self.worst_scenario_index
        where = f"scenario #{idx + 1}" if idx is not None else "no scenarios"
        return (
            f"worst={self.worst_value:.2f} ({where}), matched={self.matched_count}, "
            f"unmatched={len(self.unmatched)}, inert={self.inert}"
        )


def aggregate_portfolio(
    positions: Iterable[Position], contracts_by_key: ContractIndex
) -> PortfolioResult:
    """
    Sum scaled scenario arrays across positions.

    Args:
        positions: User positions (lots signed)
        contracts_by_key: Contract index, e.g. from join.index_contracts()

    Returns:
        PortfolioResult with the total series, ranked contributors and the
        positions that could not be matched
    """
    result = PortfolioResult()
    totals: list[float] = []

    for position in positions:
        if position.is_inert:
            result.inert += 1
            continue

        contract = contracts_by_key.get(position.lookup_key)
        if contract is None:
            logger.warning(f"Position not found in SPAN: {format_key(position.lookup_key)}")
            result.unmatched.append(position)
            continue

        scaled = scale(contract.scenario_values, position.lots)
        if len(scaled) > len(totals):
            totals.extend([0.0] * (len(scaled) - len(totals)))
        for i, v in enumerate(scaled):
            totals[i] += v

        result.contributors.append(
            PositionImpact(
                position=position,
                contract=contract,
                scaled_values=scaled,
                worst_abs=worst_absolute(scaled),
            )
        )

    result.series = totals
    result.contributors.sort(key=lambda c: c.worst_abs, reverse=True)

    if result.unmatched:
        logger.warning(f"{len(result.unmatched)} positions excluded (no matching contract)")
    logger.info(f"Portfolio: {result.summary()}")
    return result
