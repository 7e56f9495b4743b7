"""Ledger invariant checks (INV-1..INV-4)."""

import logging

from src.mk_ledger.domain.ledger import MarketplaceLedger

logger = logging.getLogger(__name__)


def verify_ledger_invariants(ledger: MarketplaceLedger) -> list[str]:
    """Check ledger invariants. Returns list of violation strings (empty = OK).

    INV-1: item ids are exactly 1..next_item_id-1, no gaps
    INV-2: sold_count <= next_item_id - 1
    INV-3: every unsold record is held by the marketplace
    INV-4: accumulated balance is never negative
    """
    violations: list[str] = []
    items = ledger.all_items()
    created = ledger.next_item_id - 1

    ids = [item.item_id for item in items]
    if ids != list(range(1, created + 1)):
        violations.append(
            f"INV-1 violated: item ids {ids[:10]}... are not 1..{created}"
        )

    if ledger.sold_count > created:
        violations.append(
            f"INV-2 violated: sold_count={ledger.sold_count} > items created={created}"
        )

    for item in items:
        if not item.sold and item.holder != ledger.marketplace_id:
            violations.append(
                f"INV-3 violated: unsold item {item.item_id} held by {item.holder!r}"
            )

    if ledger.balance < 0:
        violations.append(f"INV-4 violated: balance={ledger.balance} < 0")

    for msg in violations:
        logger.error(msg)
    if not violations:
        logger.debug("Invariants OK: items=%d, sold=%d", created, ledger.sold_count)
    return violations
