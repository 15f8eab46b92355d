"""Holdings reducer for manual and transaction-backed positions."""
from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable

from ..models import (
    Holdings,
    ManualPosition,
    PositionBasis,
    Transaction,
    TransactionBackedPosition,
    TransactionType,
)


def replay_transactions(
    transactions: Iterable[Transaction], fallback_price: float = 0.0
) -> Holdings:
    """Recompute shares, invested amount and average price.

    Transactions are replayed in insertion order. The average price divides
    total buy cost by ``remaining + sold`` shares, so a sell leaves it equal
    to the average buy price; when nothing remains ``fallback_price`` is kept.
    """
    bought = 0.0
    sold = 0.0
    invested = 0.0
    for tx in transactions:
        if tx.type == TransactionType.BUY:
            bought += tx.shares
            invested += tx.shares * tx.price
        else:
            sold += tx.shares

    total_shares = bought - sold
    if total_shares > 0:
        avg_price = invested / (total_shares + sold)
    else:
        avg_price = fallback_price

    return Holdings(
        shares=total_shares,
        invested_amount=invested,
        purchase_price=avg_price,
    )


def derive_holdings(basis: PositionBasis) -> Holdings:
    """Display fields for whichever position variant is active."""
    if isinstance(basis, TransactionBackedPosition):
        return replay_transactions(basis.transactions, basis.fallback_price)
    return Holdings(
        shares=basis.shares,
        invested_amount=basis.shares * basis.avg_price,
        purchase_price=basis.avg_price,
    )


def new_transaction(
    type: TransactionType | str,
    shares: float,
    price: float,
    when: date,
    id: str | None = None,
) -> Transaction:
    """Build a validated transaction."""
    if shares <= 0:
        raise ValueError(f"Transaction shares must be positive, got {shares}")
    if price <= 0:
        raise ValueError(f"Transaction price must be positive, got {price}")
    return Transaction(
        id=id or uuid.uuid4().hex,
        type=TransactionType(type),
        shares=float(shares),
        price=float(price),
        date=when,
    )


def add_transaction(
    basis: PositionBasis, transaction: Transaction
) -> TransactionBackedPosition:
    """Append a transaction, converting a manual position on first use."""
    if isinstance(basis, ManualPosition):
        opening: tuple[Transaction, ...] = ()
        if basis.shares > 0 and basis.avg_price > 0:
            opening = (
                new_transaction(
                    TransactionType.BUY, basis.shares, basis.avg_price, transaction.date
                ),
            )
        return TransactionBackedPosition(
            transactions=opening + (transaction,),
            fallback_price=basis.avg_price,
        )
    return replace(basis, transactions=basis.transactions + (transaction,))


def remove_transaction(
    basis: TransactionBackedPosition, transaction_id: str
) -> TransactionBackedPosition:
    """Drop a transaction by id, remembering the current price as fallback."""
    current = replay_transactions(basis.transactions, basis.fallback_price)
    return TransactionBackedPosition(
        transactions=tuple(t for t in basis.transactions if t.id != transaction_id),
        fallback_price=current.purchase_price,
    )
