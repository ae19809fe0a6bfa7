"""
Spread Grouping

Groups positions into calendar spreads: every future leg of a symbol goes in
one group, option legs group by symbol and strike. Each group reports its
net lots and its legs in month order with close and approximate impact.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from maxspan.core.enums import InstrumentType
from maxspan.core.keys import month_sort_key, strike_label
from maxspan.engine.book import ContractBook, PositionRow
from maxspan.models.positions import Position

GroupKey = tuple[str, ...]


def group_key(position: Position) -> GroupKey:
    if position.instrument_type is InstrumentType.FUTURE:
        return (position.symbol, InstrumentType.FUTURE.label)
    return (position.symbol, InstrumentType.OPTION.label, strike_label(position.instrument_type, position.strike))


@dataclass(slots=True)
class SpreadGroup:
    key: GroupKey
    legs: list[PositionRow] = field(default_factory=list)

    @property
    def label(self) -> str:
        return " ".join(self.key)

    @property
    def net_lots(self) -> int:
        return sum(leg.position.lots for leg in self.legs)

    def describe(self) -> list[str]:
        lines = [f"{self.label}  | legs={len(self.legs)} | netLots={self.net_lots}"]
        for leg in self.legs:
            lines.append(
                f"  - {leg.position.month_key} | lots={leg.position.lots} "
                f"| close={_fmt(leg.close)} | absImpact~{_fmt(leg.approx_impact)}"
            )
        return lines


def _fmt(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}"


def group_spreads(positions: Iterable[Position], book: ContractBook) -> list[SpreadGroup]:
    """
    Group non-inert positions into spreads, in first-seen group order.

    Legs inside a group are sorted chronologically by month.
    """
    groups: dict[GroupKey, SpreadGroup] = {}
    for position in positions:
        if position.is_inert:
            continue
        key = group_key(position)
        group = groups.setdefault(key, SpreadGroup(key=key))
        group.legs.append(PositionRow(position=position, contract=book.find(position)))

    for group in groups.values():
        group.legs.sort(key=lambda leg: month_sort_key(leg.position.month_key))
    return list(groups.values())
