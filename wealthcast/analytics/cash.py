"""Investable cash ledger."""
from __future__ import annotations

import logging
import uuid
from datetime import date

from ..models import CashLedger, CashTransaction, CashTransactionType

logger = logging.getLogger(__name__)

_CREDITS = {CashTransactionType.DEPOSIT, CashTransactionType.SELL}


class InsufficientFundsError(ValueError):
    """Withdrawal larger than the available balance."""


def record(
    ledger: CashLedger,
    type: CashTransactionType | str,
    amount: float,
    note: str = "",
    when: date | None = None,
    symbol: str | None = None,
    id: str | None = None,
) -> CashLedger:
    """Return a new ledger with the transaction prepended and balance updated."""
    tx_type = CashTransactionType(type)
    if amount <= 0:
        raise ValueError(f"Cash amount must be positive, got {amount}")
    if tx_type == CashTransactionType.WITHDRAWAL and amount > ledger.balance:
        raise InsufficientFundsError(
            f"Cannot withdraw {amount:.2f}; balance is {ledger.balance:.2f}"
        )

    tx = CashTransaction(
        id=id or uuid.uuid4().hex,
        type=tx_type,
        amount=float(amount),
        note=note,
        date=when or date.today(),
        symbol=symbol,
    )
    signed = tx.amount if tx_type in _CREDITS else -tx.amount
    balance = ledger.balance + signed

    logger.info(
        "Cash %s %.2f (%s), balance now %.2f", tx_type.value, amount, note, balance
    )
    return CashLedger(balance=balance, transactions=(tx,) + ledger.transactions)


def deposit(
    ledger: CashLedger,
    amount: float,
    note: str = "Deposit",
    when: date | None = None,
) -> CashLedger:
    return record(ledger, CashTransactionType.DEPOSIT, amount, note, when)


def withdraw(
    ledger: CashLedger,
    amount: float,
    note: str = "Withdrawal",
    when: date | None = None,
) -> CashLedger:
    return record(ledger, CashTransactionType.WITHDRAWAL, amount, note, when)


def record_buy(
    ledger: CashLedger, symbol: str, amount: float, when: date | None = None
) -> CashLedger:
    return record(
        ledger, CashTransactionType.BUY, amount, f"Buy {symbol}", when, symbol
    )


def record_sell(
    ledger: CashLedger, symbol: str, amount: float, when: date | None = None
) -> CashLedger:
    return record(
        ledger, CashTransactionType.SELL, amount, f"Sell {symbol}", when, symbol
    )
