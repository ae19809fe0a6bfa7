"""
Snapshot Merge Engine

Compares two SPAN snapshots of the same trading day (beginning-of-day and a
later intraday capture) and produces one reconciled SPAN document.

Modes:
    earlier-only  output = earlier document unmodified
    later-only    output = later document unmodified
    merge-max     output = later document with every contract also present in
                  the earlier one carrying merge_by_max(earlier, later)

The output always follows the later document's topology: contracts present
only in the earlier snapshot are not added.

Contracts are matched on a document-local key (element tag, contract id,
expiry code, strike, call/put); symbol resolution is not needed here.
The merged document is built from a copy of the later tree, so neither
parsed input is mutated.
"""

import copy
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from loguru import logger
from lxml import etree

from maxspan.core.errors import MissingDocument
from maxspan.core.keys import parse_number
from maxspan.engine.scenarios import merge_by_max
from maxspan.parsers.span_parser import (
    SCENARIO_ARRAY_TAG,
    document_bytes,
    find_underlying_element,
    inherited_text,
    iter_contract_elements,
    parse_xml,
    scenario_nodes,
)

DEFAULT_DECIMALS = 10

SnapshotKey = tuple[str, str, str, str, str]

# Optional BOM, the XML declaration and the whitespace before the next node
_PROLOG = re.compile(rb"^(?:\xef\xbb\xbf)?\s*<\?xml[^>]*\?>\s*")


class MergeMode(str, Enum):
    """Which snapshot(s) the output is built from."""

    EARLIER_ONLY = "earlier-only"
    LATER_ONLY = "later-only"
    MERGE_MAX = "merge-max"


@dataclass(slots=True)
class MergeCounters:
    """Observability counters for one merge run (never used for control flow)."""

    indexed_earlier: int = 0
    processed_later: int = 0
    matched: int = 0
    new_in_later: int = 0

    def summary(self) -> str:
        return (
            f"indexed BOD={self.indexed_earlier}, processed current={self.processed_later}, "
            f"merged={self.matched}, new in current={self.new_in_later}"
        )


@dataclass(slots=True)
class SnapshotMergeResult:
    """Merged SPAN document bytes plus counters."""

    document: bytes
    mode: MergeMode
    counters: MergeCounters = field(default_factory=MergeCounters)


def format_span_number(value: float, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Format a scenario value the way exchange files write them.

    Fixed `decimals` places, then trailing zeros and a trailing point are
    stripped: 1234.5000000000 -> "1234.5", 0.0000000000 -> "0".
    """
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def snapshot_key(element: etree._Element) -> SnapshotKey:
    """Document-local identity of a fut/opt element."""
    contract_id = (element.findtext("cId") or "").strip()
    if not contract_id:
        und = find_underlying_element(element)
        contract_id = (und.findtext("pfId") or "").strip() if und is not None else ""
    expiry_code = inherited_text(element, "pe") or ""
    raw_strike = (element.findtext("k") or "").strip()
    strike_value = parse_number(raw_strike)
    strike = f"{strike_value:.2f}" if strike_value is not None else raw_strike
    right = (element.findtext("o") or "").strip().upper()
    return (element.tag, contract_id, expiry_code, strike, right)


def _values(ra: etree._Element) -> tuple[list[etree._Element], list[float]]:
    nodes = list(scenario_nodes(ra))
    values = [parse_number("".join(n.itertext())) or 0.0 for n in nodes]
    return nodes, values


def index_snapshot(root: etree._Element) -> dict[SnapshotKey, list[float]]:
    """Scenario values of every contract with a non-empty <ra>; first occurrence wins."""
    index: dict[SnapshotKey, list[float]] = {}
    for element in iter_contract_elements(root):
        ra = element.find(f".//{SCENARIO_ARRAY_TAG}")
        if ra is None:
            continue
        _, values = _values(ra)
        if not values:
            continue
        index.setdefault(snapshot_key(element), values)
    return index


def _serialize(tree: etree._ElementTree, source_data: bytes) -> bytes:
    """Serialize `tree`, reusing the prolog bytes of the document it was parsed from."""
    match = _PROLOG.match(source_data)
    prolog = match.group(0) if match else b""
    encoding = tree.docinfo.encoding or "UTF-8"
    return prolog + etree.tostring(tree, xml_declaration=False, encoding=encoding)


def merge_snapshots(
    mode: Union[MergeMode, str],
    earlier: Optional[Union[str, bytes]] = None,
    later: Optional[Union[str, bytes]] = None,
    *,
    decimals: int = DEFAULT_DECIMALS,
) -> SnapshotMergeResult:
    """
    Produce the reconciled SPAN document for the selected mode.

    Args:
        mode: earlier-only, later-only or merge-max
        earlier: Beginning-of-day SPAN document
        later: Intraday SPAN document
        decimals: Fixed precision used when writing merged values

    Returns:
        SnapshotMergeResult with the output document and counters

    Raises:
        MissingDocument: If the mode's required document was not supplied
        MalformedDocument: If a required document is not well-formed XML
    """
    mode = MergeMode(mode)
    counters = MergeCounters()

    if mode is MergeMode.EARLIER_ONLY:
        if earlier is None:
            raise MissingDocument("earlier-only mode needs the BOD SPAN file", source="BOD")
        data = document_bytes(earlier, source="BOD")
        counters.indexed_earlier = len(index_snapshot(parse_xml(data, source="BOD")))
        logger.info(f"Using BOD SPAN only ({counters.indexed_earlier} contracts)")
        return SnapshotMergeResult(document=data, mode=mode, counters=counters)

    if mode is MergeMode.LATER_ONLY:
        if later is None:
            raise MissingDocument("later-only mode needs the current SPAN file", source="Current")
        data = document_bytes(later, source="Current")
        counters.processed_later = len(index_snapshot(parse_xml(data, source="Current")))
        logger.info(f"Using current SPAN only ({counters.processed_later} contracts)")
        return SnapshotMergeResult(document=data, mode=mode, counters=counters)

    missing = [name for name, doc in (("BOD", earlier), ("current", later)) if doc is None]
    if missing:
        raise MissingDocument(f"merge-max mode needs both files, missing {' and '.join(missing)}")

    earlier_index = index_snapshot(parse_xml(document_bytes(earlier, source="BOD"), source="BOD"))
    counters.indexed_earlier = len(earlier_index)

    later_data = document_bytes(later, source="Current")
    later_root = parse_xml(later_data, source="Current")
    output = copy.deepcopy(later_root.getroottree())

    for element in iter_contract_elements(output.getroot()):
        ra = element.find(f".//{SCENARIO_ARRAY_TAG}")
        if ra is None:
            continue
        nodes, values = _values(ra)
        if not values:
            continue
        counters.processed_later += 1

        previous = earlier_index.get(snapshot_key(element))
        if previous is None:
            counters.new_in_later += 1
            continue

        merged = merge_by_max(previous, values)
        for node, value in zip(nodes, merged):
            node.text = format_span_number(value, decimals)
        counters.matched += 1

    logger.info(f"Merged SPAN snapshots: {counters.summary()}")
    document = _serialize(output, later_data)
    return SnapshotMergeResult(document=document, mode=mode, counters=counters)
