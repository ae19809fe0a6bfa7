"""
SPAN Risk-File Parser

Decodes an exchange SPAN XML document into Contract records, each carrying
its ordered risk-array (scenario) values.

Document shape (only what is used here):
    <phyPf|futPf|optPf|oopPf>            portfolio elements
        <pfId>123</pfId>                 internal id
        <pfCode>NIFTY</pfCode>           human-readable underlying code
    <fut> / <opt>                        contract elements, anywhere
        <cId>, <pe>YYYYMMDD</pe>, <k>, <o>C|P</o>
        <undC><pfId>123</pfId></undC>    reference to the underlying portfolio
        <scanRate><priceScan>..</priceScan></scanRate>
        <ra><r/><a>..</a><a>..</a><d/></ra>  scenario array

Fields missing on the contract element itself are looked up on the nearest
enclosing element (NSE files keep <pe> and <undC> on <series>).

Skips (counted, never raised):
- no_underlying: underlying pfId has no pfCode mapping
- no_scenarios: no <ra> element, or an empty one
- duplicate: same (symbol, month, type, strike, call/put) already seen
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union

from loguru import logger
from lxml import etree

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType
from maxspan.core.errors import MalformedDocument
from maxspan.core.keys import month_key_from_expiry_code, normalize_symbol, parse_number
from maxspan.core.models import Contract, ParseStats

PORTFOLIO_TAGS = ("phyPf", "futPf", "optPf", "oopPf")
CONTRACT_TAGS = ("fut", "opt")
SCENARIO_ARRAY_TAG = "ra"

# <ra> children that are bookkeeping, not scenario values
_NON_SCENARIO_CHILDREN = frozenset({"r", "d"})

_TYPE_BY_TAG = {"fut": InstrumentType.FUTURE, "opt": InstrumentType.OPTION}

_DECLARED_ENCODING = re.compile(r"""^\s*<\?xml[^>]*?\bencoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")

Document = Union[str, bytes, etree._Element]


@dataclass(slots=True)
class SpanParseResult:
    """Contracts extracted from one SPAN document plus load counters."""

    contracts: list[Contract]
    stats: ParseStats = field(default_factory=ParseStats)
    portfolio_count: int = 0

    @property
    def dropped_unresolved(self) -> int:
        return self.stats.skipped.get("no_underlying", 0)

    @property
    def dropped_without_scenarios(self) -> int:
        return self.stats.skipped.get("no_scenarios", 0)

    @property
    def duplicates(self) -> int:
        return self.stats.skipped.get("duplicate", 0)


def document_bytes(document: Union[str, bytes], *, source: str = "SPAN") -> bytes:
    """
    Raw bytes of a document.

    Text is encoded with the encoding its XML declaration names (UTF-8 when
    it names none), so the bytes agree with what the declaration says.

    Raises:
        MalformedDocument: If the declared encoding is unknown or cannot
            represent the text
    """
    if isinstance(document, bytes):
        return document
    text = document.lstrip("\ufeff")
    match = _DECLARED_ENCODING.match(text)
    encoding = match.group(1) if match else "utf-8"
    try:
        return text.encode(encoding)
    except (LookupError, UnicodeEncodeError) as e:
        raise MalformedDocument(f"cannot encode text as declared {encoding} ({e})", source=source) from e


def parse_xml(document: Document, *, source: str = "SPAN") -> etree._Element:
    """
    Parse markup text into an lxml root element.

    Raises:
        MalformedDocument: If the text is not well-formed XML
    """
    if isinstance(document, etree._Element):
        return document
    data = document_bytes(document, source=source)
    parser = etree.XMLParser(huge_tree=True, resolve_entities=False)
    try:
        root = etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise MalformedDocument(
            f"XML parse error, ensure the SPAN file is XML text ({e})", source=source
        ) from e
    if root is None:
        raise MalformedDocument("document is empty", source=source)
    return root


def child_text(element: etree._Element, tag: str) -> Optional[str]:
    """
    Stripped text of the first descendant named `tag`.

    Returns None when no such element exists (an expected, non-error case).
    """
    node = element.find(f".//{tag}")
    if node is None:
        return None
    return "".join(node.itertext()).strip()


def inherited_text(element: etree._Element, tag: str) -> Optional[str]:
    """
    Text of `tag` under the element, else a direct child of the nearest
    ancestor that has one.
    """
    text = child_text(element, tag)
    if text:
        return text
    for ancestor in element.iterancestors():
        node = ancestor.find(tag)
        if node is not None:
            value = "".join(node.itertext()).strip()
            if value:
                return value
    return text


def find_underlying_element(element: etree._Element) -> Optional[etree._Element]:
    """The <undC> block for a contract, inherited from enclosing elements if needed."""
    node = element.find(".//undC")
    if node is not None:
        return node
    for ancestor in element.iterancestors():
        node = ancestor.find("undC")
        if node is not None:
            return node
    return None


def scenario_values(element: etree._Element) -> Optional[tuple[float, ...]]:
    """
    Ordered scenario values of a contract's <ra> element.

    Non-numeric or empty value text is coerced to 0. Returns None when the
    contract has no <ra> or the array holds no values.
    """
    ra = element.find(f".//{SCENARIO_ARRAY_TAG}")
    if ra is None:
        return None
    values = []
    for node in scenario_nodes(ra):
        value = parse_number("".join(node.itertext()))
        values.append(0.0 if value is None else value)
    return tuple(values) or None


def scenario_nodes(ra: etree._Element) -> Iterator[etree._Element]:
    """Value-bearing children of a <ra> element, in order."""
    for child in ra:
        if not isinstance(child.tag, str):
            continue
        if child.tag.lower() in _NON_SCENARIO_CHILDREN:
            continue
        yield child


def build_portfolio_index(
    root: etree._Element, portfolio_tags: Iterable[str] = PORTFOLIO_TAGS
) -> Mapping[str, str]:
    """
    Build the immutable pfId -> pfCode lookup for one document.

    Later duplicates of a pfId overwrite earlier ones.
    """
    mapping: dict[str, str] = {}
    for pf in root.iter(*portfolio_tags):
        pf_id = (pf.findtext("pfId") or "").strip()
        pf_code = (pf.findtext("pfCode") or "").strip()
        if pf_id and pf_code:
            mapping[pf_id] = normalize_symbol(pf_code)
    return MappingProxyType(mapping)


def iter_contract_elements(root: etree._Element) -> Iterator[etree._Element]:
    """Every fut/opt element in document order."""
    return root.iter(*CONTRACT_TAGS)


def parse_span_document(
    document: Document,
    *,
    portfolio_tags: Iterable[str] = PORTFOLIO_TAGS,
) -> SpanParseResult:
    """
    Extract all future and option contracts from a SPAN document.

    Args:
        document: XML text/bytes, or an already parsed root element
        portfolio_tags: Element names that carry pfId/pfCode pairs

    Returns:
        SpanParseResult with deduplicated contracts in document order

    Raises:
        MalformedDocument: If the document is not well-formed XML
    """
    root = parse_xml(document)
    pf_index = build_portfolio_index(root, portfolio_tags)
    stats = ParseStats()
    contracts: list[Contract] = []
    seen: set[tuple] = set()

    for element in iter_contract_elements(root):
        stats.seen += 1
        contract = _parse_contract(element, pf_index, stats)
        if contract is None:
            continue

        if contract.right_key in seen:
            stats.skip("duplicate")
            continue
        seen.add(contract.right_key)
        contracts.append(contract)
        stats.parsed += 1

    if stats.skipped.get("no_underlying"):
        logger.warning(
            f"SPAN: dropped {stats.skipped['no_underlying']} contracts with unresolvable underlying pfId"
        )
    logger.info(f"SPAN contracts with ra: {len(contracts)} ({stats.summary()})")

    return SpanParseResult(contracts=contracts, stats=stats, portfolio_count=len(pf_index))


def _parse_contract(
    element: etree._Element, pf_index: Mapping[str, str], stats: ParseStats
) -> Optional[Contract]:
    instrument_type = _TYPE_BY_TAG[element.tag]
    expiry_code = inherited_text(element, "pe") or ""
    month_key = month_key_from_expiry_code(expiry_code) or UNKNOWN_MONTH

    values = scenario_values(element)
    if values is None:
        stats.skip("no_scenarios")
        return None

    und = find_underlying_element(element)
    und_pf_id = (child_text(und, "pfId") or "") if und is not None else ""
    symbol = pf_index.get(und_pf_id.strip(), "")
    if not symbol:
        stats.skip("no_underlying")
        logger.debug(f"SPAN: no pfCode for underlying pfId {und_pf_id!r} ({element.tag} {expiry_code})")
        return None

    scan_rate = element.find(".//scanRate")
    price_scan = parse_number(child_text(scan_rate, "priceScan")) if scan_rate is not None else None

    if instrument_type is InstrumentType.OPTION:
        strike = parse_number(child_text(element, "k")) or 0.0
        option_right = (child_text(element, "o") or "").upper()
    else:
        strike = 0.0
        option_right = ""

    return Contract(
        symbol=symbol,
        month_key=month_key,
        instrument_type=instrument_type,
        strike=strike,
        scenario_values=values,
        option_right=option_right,
        expiry_code=expiry_code,
        price_scan=price_scan,
    )
