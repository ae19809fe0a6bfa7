"""
Contract/Settlement Join

Left join of SPAN contracts onto Bhav settlement rows by composite key.
Contracts decide which entities exist; settlement rows with no contract are
simply unused. Lookups go through a key-indexed dict.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Union

from loguru import logger

from maxspan.core.keys import ContractKey, ContractRightKey
from maxspan.core.models import Contract, Settlement

ContractIndex = Mapping[Union[ContractKey, ContractRightKey], Contract]


@dataclass(slots=True)
class JoinResult:
    """Enriched contracts plus match counters."""

    contracts: list[Contract]
    matched: int = 0
    settlement_rows: int = 0

    @property
    def unmatched(self) -> int:
        return len(self.contracts) - self.matched


def index_settlements(settlements: Iterable[Settlement]) -> dict[ContractKey, Settlement]:
    """Key settlements; when several rows share a key the last one wins."""
    return {s.key: s for s in settlements}


def join(contracts: Iterable[Contract], settlements: Iterable[Settlement]) -> JoinResult:
    """
    Copy close and open interest from matching settlement rows onto contracts.

    Args:
        contracts: Parsed SPAN contracts (authoritative)
        settlements: Parsed Bhav rows

    Returns:
        JoinResult with new Contract records; unmatched ones keep None fields
    """
    index = index_settlements(settlements)
    enriched: list[Contract] = []
    matched = 0

    for contract in contracts:
        hit = index.get(contract.key)
        if hit is None:
            enriched.append(replace(contract, settlement_price=None, open_interest=None))
            continue
        matched += 1
        enriched.append(replace(contract, settlement_price=hit.close, open_interest=hit.open_interest))

    result = JoinResult(contracts=enriched, matched=matched, settlement_rows=len(index))
    logger.info(
        f"Joined {result.matched}/{len(enriched)} contracts to settlement rows "
        f"({result.settlement_rows} distinct Bhav keys)"
    )
    return result


def index_contracts(contracts: Iterable[Contract]) -> ContractIndex:
    """
    Index contracts by composite key and by key + call/put.

    A call and a put at the same strike share the plain composite key; the
    first one listed owns it. The call/put-qualified key is always unique.
    """
    index: dict[Union[ContractKey, ContractRightKey], Contract] = {}
    collisions = 0
    for contract in contracts:
        if contract.key in index:
            collisions += 1
        else:
            index[contract.key] = contract
        index.setdefault(contract.right_key, contract)
    if collisions:
        logger.debug(f"{collisions} contracts share a composite key with an earlier call/put")
    return index
