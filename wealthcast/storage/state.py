"""Load/save helpers for the four persisted records.

Each record is stored under its own key. Loads fall back to defaults when a
record is absent or malformed; saves report failure through their return
value and never raise.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from ..interfaces.state_store import StateStore
from ..models import (
    AssetPosition,
    CashLedger,
    CashTransaction,
    CashTransactionType,
    ManualPosition,
    PositionBasis,
    Settings,
    Transaction,
    TransactionBackedPosition,
    TransactionType,
    WatchlistItem,
)

logger = logging.getLogger(__name__)

PORTFOLIO_KEY = "portfolio"
SETTINGS_KEY = "settings"
WATCHLIST_KEY = "watchlist"
CASH_KEY = "cash"


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value[:10]) if value else None


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


def _basis_to_dict(basis: PositionBasis) -> dict[str, Any]:
    if isinstance(basis, TransactionBackedPosition):
        return {
            "kind": "transactions",
            "fallback_price": basis.fallback_price,
            "transactions": [
                {
                    "id": t.id,
                    "type": t.type.value,
                    "shares": t.shares,
                    "price": t.price,
                    "date": t.date.isoformat(),
                }
                for t in basis.transactions
            ],
        }
    return {"kind": "manual", "shares": basis.shares, "avg_price": basis.avg_price}


def _basis_from_dict(raw: dict[str, Any]) -> PositionBasis:
    if raw.get("kind") == "transactions":
        return TransactionBackedPosition(
            transactions=tuple(
                Transaction(
                    id=str(t["id"]),
                    type=TransactionType(t["type"]),
                    shares=float(t["shares"]),
                    price=float(t["price"]),
                    date=date.fromisoformat(t["date"][:10]),
                )
                for t in raw.get("transactions", [])
            ),
            fallback_price=float(raw.get("fallback_price", 0.0)),
        )
    return ManualPosition(
        shares=float(raw.get("shares", 0.0)),
        avg_price=float(raw.get("avg_price", 0.0)),
    )


def position_to_dict(position: AssetPosition) -> dict[str, Any]:
    """Serializable form; history and forecast are refetched, not stored."""
    return {
        "symbol": position.symbol,
        "name": position.name,
        "currency": position.currency,
        "exchange_rate": position.exchange_rate,
        "monthly_contribution": position.monthly_contribution,
        "purchase_date": (
            position.purchase_date.isoformat() if position.purchase_date else None
        ),
        "basis": _basis_to_dict(position.basis),
    }


def position_from_dict(raw: dict[str, Any]) -> AssetPosition:
    return AssetPosition(
        symbol=raw["symbol"],
        name=raw.get("name", ""),
        currency=raw.get("currency") or "USD",
        exchange_rate=float(raw.get("exchange_rate") or 1.0),
        monthly_contribution=float(raw.get("monthly_contribution") or 0.0),
        purchase_date=_parse_date(raw.get("purchase_date")),
        basis=_basis_from_dict(raw.get("basis") or {}),
    )


def save_positions(store: StateStore, positions: list[AssetPosition]) -> bool:
    data = {
        "stocks": [position_to_dict(p) for p in positions],
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }
    return store.save(PORTFOLIO_KEY, data)


def load_positions(store: StateStore) -> list[AssetPosition]:
    data = store.load(PORTFOLIO_KEY) or {}
    try:
        return [position_from_dict(raw) for raw in data.get("stocks", [])]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error("Error loading portfolio: %s", e)
        return []


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def save_settings(store: StateStore, settings: Settings) -> bool:
    return store.save(
        SETTINGS_KEY,
        {
            "monthlyContribution": settings.monthly_contribution,
            "currency": settings.currency,
            "forecastYears": settings.forecast_years,
        },
    )


def load_settings(store: StateStore, default: Settings | None = None) -> Settings:
    default = default or Settings()
    data = store.load(SETTINGS_KEY)
    if not isinstance(data, dict):
        return default
    try:
        return Settings(
            monthly_contribution=float(
                data.get("monthlyContribution", default.monthly_contribution)
            ),
            currency=data.get("currency", default.currency),
            forecast_years=int(data.get("forecastYears", default.forecast_years)),
        )
    except (TypeError, ValueError) as e:
        logger.error("Error loading settings: %s", e)
        return default


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


def save_watchlist(store: StateStore, items: list[WatchlistItem]) -> bool:
    return store.save(
        WATCHLIST_KEY,
        [
            {
                "symbol": i.symbol,
                "name": i.name,
                "addedPrice": i.added_price,
                "addedDate": i.added_date.isoformat(),
            }
            for i in items
        ],
    )


def load_watchlist(store: StateStore) -> list[WatchlistItem]:
    data = store.load(WATCHLIST_KEY) or []
    try:
        return [
            WatchlistItem(
                symbol=raw["symbol"],
                name=raw.get("name", raw["symbol"]),
                added_price=float(raw.get("addedPrice", 0.0)),
                added_date=date.fromisoformat(raw["addedDate"][:10]),
            )
            for raw in data
        ]
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Error loading watchlist: %s", e)
        return []


# ---------------------------------------------------------------------------
# Cash ledger
# ---------------------------------------------------------------------------


def save_cash_ledger(store: StateStore, ledger: CashLedger) -> bool:
    return store.save(
        CASH_KEY,
        {
            "balance": ledger.balance,
            "transactions": [
                {
                    "id": t.id,
                    "type": t.type.value,
                    "amount": t.amount,
                    "note": t.note,
                    "date": t.date.isoformat(),
                    "symbol": t.symbol,
                }
                for t in ledger.transactions
            ],
        },
    )


def load_cash_ledger(store: StateStore) -> CashLedger:
    data = store.load(CASH_KEY)
    if not isinstance(data, dict):
        return CashLedger()
    try:
        return CashLedger(
            balance=float(data.get("balance", 0.0)),
            transactions=tuple(
                CashTransaction(
                    id=str(t["id"]),
                    type=CashTransactionType(t["type"]),
                    amount=float(t["amount"]),
                    note=t.get("note", ""),
                    date=date.fromisoformat(t["date"][:10]),
                    symbol=t.get("symbol"),
                )
                for t in data.get("transactions", [])
            ),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Error loading cash ledger: %s", e)
        return CashLedger()
