"""Ledger enums; values must match the DB CHECK constraints exactly."""

from enum import Enum


class LedgerEntryType(str, Enum):
    # Money received by the ledger
    LISTING_FEE_IN = "LISTING_FEE_IN"
    SALE_PAYMENT_IN = "SALE_PAYMENT_IN"
    # Money paid out on settlement
    OPERATOR_PAYOUT = "OPERATOR_PAYOUT"
    SELLER_PAYOUT = "SELLER_PAYOUT"


class LedgerEventType(str, Enum):
    MARKET_ITEM_CREATED = "MARKET_ITEM_CREATED"
    MARKET_ITEM_RELISTED = "MARKET_ITEM_RELISTED"
    MARKET_ITEM_SOLD = "MARKET_ITEM_SOLD"
    LISTING_FEE_CHANGED = "LISTING_FEE_CHANGED"
