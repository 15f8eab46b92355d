"""Command-line interface for the wealth tracker."""
from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import replace
from datetime import date

from .analytics import cash
from .analytics.forecast import generate_forecast
from .analytics.growth import estimate_growth_rates
from .analytics.positions import add_transaction, new_transaction
from .analytics.wealth import contribution_growth
from .config import AppConfig, load_config
from .demo import generate_demo_portfolio
from .fx import FALLBACK_RATES, format_currency
from .logging_setup import configure_logging
from .market import MarketDataError
from .models import AssetPosition, ManualPosition, Settings, TransactionType
from .services import PortfolioTracker, add_to_watchlist, remove_from_watchlist
from .storage import (
    JsonFileStore,
    load_cash_ledger,
    load_positions,
    load_settings,
    load_watchlist,
    save_cash_ledger,
    save_positions,
    save_settings,
    save_watchlist,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="wealthcast",
        description="Portfolio tracker with multi-horizon wealth forecasts",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("report", help="Refresh holdings and print the portfolio report")
    sub.add_parser("demo", help="Print a report for an offline demo portfolio")
    sub.add_parser("rates", help="Show USD conversion rates")

    add_parser = sub.add_parser("add", help="Add a holding")
    add_parser.add_argument("symbol")
    qty = add_parser.add_mutually_exclusive_group(required=True)
    qty.add_argument("--shares", type=float, help="Number of shares")
    qty.add_argument("--amount", type=float, help="Amount invested (USD)")
    add_parser.add_argument("--price", type=float, default=None, help="Purchase price")
    add_parser.add_argument(
        "--contribution", type=float, default=0.0, help="Monthly contribution (USD)"
    )

    remove_parser = sub.add_parser("remove", help="Remove a holding")
    remove_parser.add_argument("symbol")

    trade_parser = sub.add_parser("trade", help="Record a buy or sell transaction")
    trade_parser.add_argument("symbol")
    trade_parser.add_argument("side", choices=[t.value for t in TransactionType])
    trade_parser.add_argument("shares", type=float)
    trade_parser.add_argument("price", type=float)
    trade_parser.add_argument(
        "--date", type=date.fromisoformat, default=None, help="YYYY-MM-DD"
    )
    trade_parser.add_argument(
        "--cash", action="store_true", help="Settle the trade against the cash ledger"
    )

    forecast_parser = sub.add_parser("forecast", help="Forecast a single symbol")
    forecast_parser.add_argument("symbol")
    forecast_parser.add_argument(
        "--months", type=int, default=None, help="Forecast horizon (overrides config)"
    )
    forecast_parser.add_argument(
        "--contribution",
        type=float,
        default=0.0,
        help="Also project a monthly contribution into this symbol (USD)",
    )

    settings_parser = sub.add_parser("settings", help="Show or update saved settings")
    settings_parser.add_argument(
        "--contribution", type=float, default=None, help="Monthly contribution (USD)"
    )
    settings_parser.add_argument(
        "--years", type=int, default=None, help="Projection horizon in years"
    )

    search_parser = sub.add_parser("search", help="Search equity symbols")
    search_parser.add_argument("query")

    cash_parser = sub.add_parser("cash", help="Investable cash ledger")
    cash_sub = cash_parser.add_subparsers(dest="cash_command", required=True)
    for name in ("deposit", "withdraw"):
        p = cash_sub.add_parser(name)
        p.add_argument("amount", type=float)
        p.add_argument("--note", default="")
    cash_sub.add_parser("show")

    watch_parser = sub.add_parser("watch", help="Watchlist")
    watch_sub = watch_parser.add_subparsers(dest="watch_command", required=True)
    watch_add = watch_sub.add_parser("add")
    watch_add.add_argument("symbol")
    watch_remove = watch_sub.add_parser("remove")
    watch_remove.add_argument("symbol")
    watch_sub.add_parser("list")

    return parser


def _settings(config: AppConfig, store: JsonFileStore) -> Settings:
    default = Settings(
        monthly_contribution=config.settings.monthly_contribution,
        currency=config.settings.currency,
        forecast_years=config.settings.forecast_years,
    )
    return load_settings(store, default)


async def _report(
    tracker: PortfolioTracker, config: AppConfig, store: JsonFileStore
) -> None:
    positions = load_positions(store)
    if not positions:
        print("No holdings yet. Add one with: wealthcast add SYMBOL --shares N")
        return
    positions = await tracker.refresh_positions(positions)
    snapshot = tracker.compute(positions, _settings(config, store), date.today())
    print(tracker.build_report(positions, snapshot))


def _update_settings(
    args: argparse.Namespace, config: AppConfig, store: JsonFileStore
) -> None:
    settings = _settings(config, store)
    if args.contribution is not None:
        if args.contribution < 0:
            print("Monthly contribution must not be negative")
            sys.exit(1)
        settings = replace(settings, monthly_contribution=args.contribution)
    if args.years is not None:
        if args.years <= 0:
            print("Projection horizon must be positive")
            sys.exit(1)
        settings = replace(settings, forecast_years=args.years)
    if args.contribution is not None or args.years is not None:
        save_settings(store, settings)

    print(f"Monthly contribution: {format_currency(settings.monthly_contribution)}")
    print(f"Projection horizon:   {settings.forecast_years} years")


def _demo(tracker: PortfolioTracker, config: AppConfig) -> None:
    today = date.today()
    positions = [tracker.with_forecast(p) for p in generate_demo_portfolio(today)]
    settings = Settings(
        monthly_contribution=config.settings.monthly_contribution,
        forecast_years=config.settings.forecast_years,
    )
    snapshot = tracker.compute(positions, settings, today)
    print(tracker.build_report(positions, snapshot))


async def _add(
    tracker: PortfolioTracker, args: argparse.Namespace, store: JsonFileStore
) -> None:
    positions = load_positions(store)
    symbol = args.symbol.upper()
    if any(p.symbol == symbol for p in positions):
        print(f"{symbol} is already in the portfolio")
        return
    try:
        position = await tracker.add_position(
            symbol,
            shares=args.shares,
            invested_amount=args.amount,
            price=args.price,
            monthly_contribution=args.contribution,
            purchase_date=date.today(),
        )
    except (MarketDataError, ValueError) as e:
        print(f"Could not add {symbol}: {e}")
        sys.exit(1)
    save_positions(store, positions + [position])
    print(
        f"Added {position.symbol}: {position.shares:,.4f} sh"
        f" @ {format_currency(position.purchase_price)}"
    )


def _remove(args: argparse.Namespace, store: JsonFileStore) -> None:
    positions = load_positions(store)
    symbol = args.symbol.upper()
    remaining = [p for p in positions if p.symbol != symbol]
    if len(remaining) == len(positions):
        print(f"{symbol} is not in the portfolio")
        return
    save_positions(store, remaining)
    print(f"Removed {symbol}")


def _trade(args: argparse.Namespace, store: JsonFileStore) -> None:
    positions = load_positions(store)
    symbol = args.symbol.upper()
    index = next((i for i, p in enumerate(positions) if p.symbol == symbol), None)
    if index is None:
        print(f"{symbol} is not in the portfolio")
        sys.exit(1)

    when = args.date or date.today()
    tx = new_transaction(args.side, args.shares, args.price, when)
    position = positions[index]
    positions[index] = replace(position, basis=add_transaction(position.basis, tx))
    save_positions(store, positions)

    if args.cash:
        ledger = load_cash_ledger(store)
        amount = tx.shares * tx.price
        if tx.type == TransactionType.BUY:
            ledger = cash.record_buy(ledger, symbol, amount, when)
        else:
            ledger = cash.record_sell(ledger, symbol, amount, when)
        save_cash_ledger(store, ledger)

    h = positions[index].holdings
    print(
        f"{symbol}: {h.shares:,.4f} sh, invested {format_currency(h.invested_amount)},"
        f" avg {format_currency(h.purchase_price)}"
    )


async def _forecast(tracker: PortfolioTracker, args: argparse.Namespace) -> None:
    position = AssetPosition(
        symbol=args.symbol.upper(), basis=ManualPosition(0.0, 0.0)
    )
    [position] = await tracker.refresh_positions([position])
    if position.error:
        print(f"Could not fetch {position.symbol}")
        sys.exit(1)

    if args.months:
        result = generate_forecast(position.history, args.months)
        position = replace(
            position, forecast=result.forecast, confidence=result.confidence
        )

    rates = estimate_growth_rates(position.history)
    print(f"{position.symbol}: {position.name}")
    print(
        f"  History: {len(position.history)} months,"
        f" now {format_currency(position.current_price)}"
    )
    print(
        f"  Growth rates: 6m {rates.six_month:+.1%} · 1y {rates.one_year:+.1%}"
        f" · 5y {rates.five_year:+.1%} · 10y {rates.ten_year:+.1%}"
    )
    if not position.forecast:
        print("  Not enough history for a forecast (need 12 months)")
        return
    last = position.forecast[-1]
    low = position.confidence.low[-1].price
    high = position.confidence.high[-1].price
    print(
        f"  Forecast {last.date:%b %Y}: {format_currency(last.price)}"
        f" (range {format_currency(low)} to {format_currency(high)})"
    )

    plan = contribution_growth(position.history, args.contribution, date.today())
    if plan:
        end = plan[-1]
        print(
            f"  {format_currency(args.contribution)}/month for {end.month} months:"
            f" {format_currency(end.contributions)} paid in, worth"
            f" {format_currency(end.one_year)} / {format_currency(end.five_year)}"
            f" / {format_currency(end.ten_year)} at the 1y / 5y / 10y rates"
        )


async def _search(tracker: PortfolioTracker, args: argparse.Namespace) -> None:
    results = await tracker.market.search(args.query)
    if not results:
        print(f"No matches for '{args.query}'")
        return
    for r in results:
        print(f"  {r.symbol:<10} {r.name} ({r.exchange})")


async def _rates(tracker: PortfolioTracker) -> None:
    await tracker.converter.refresh()
    for code in sorted(FALLBACK_RATES):
        print(f"  {code}: {tracker.converter.rate(code):.6f} USD")


def _cash(args: argparse.Namespace, store: JsonFileStore) -> None:
    ledger = load_cash_ledger(store)
    if args.cash_command == "deposit":
        ledger = cash.deposit(ledger, args.amount, args.note or "Deposit")
        save_cash_ledger(store, ledger)
    elif args.cash_command == "withdraw":
        try:
            ledger = cash.withdraw(ledger, args.amount, args.note or "Withdrawal")
        except cash.InsufficientFundsError as e:
            print(str(e))
            sys.exit(1)
        save_cash_ledger(store, ledger)

    print(f"Cash balance: {format_currency(ledger.balance)}")
    for tx in ledger.transactions[:5]:
        amount = format_currency(tx.amount)
        print(f"  {tx.date} {tx.type.value:<10} {amount:>12}  {tx.note}")


async def _watch(
    tracker: PortfolioTracker, args: argparse.Namespace, store: JsonFileStore
) -> None:
    items = load_watchlist(store)
    if args.watch_command == "add":
        try:
            quote = await tracker.market.fetch_quote(args.symbol)
        except MarketDataError as e:
            print(f"Could not quote {args.symbol.upper()}: {e}")
            sys.exit(1)
        price = tracker.converter.convert_to_usd(quote.price, quote.currency)
        items = add_to_watchlist(items, quote.symbol, quote.name, price, date.today())
        save_watchlist(store, items)
    elif args.watch_command == "remove":
        items = remove_from_watchlist(items, args.symbol)
        save_watchlist(store, items)

    for q in await tracker.refresh_watchlist(items):
        if q.error:
            print(f"  {q.item.symbol}: ⚠️ quote unavailable")
        else:
            print(
                f"  {q.item.symbol}: {format_currency(q.price)}"
                f" ({q.change_since_added_percent:+.1f}% since added)"
            )


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    store = JsonFileStore(config.storage.data_dir)
    tracker = PortfolioTracker(config)

    if args.command == "report":
        await _report(tracker, config, store)
    elif args.command == "demo":
        _demo(tracker, config)
    elif args.command == "add":
        await _add(tracker, args, store)
    elif args.command == "remove":
        _remove(args, store)
    elif args.command == "trade":
        _trade(args, store)
    elif args.command == "forecast":
        await _forecast(tracker, args)
    elif args.command == "settings":
        _update_settings(args, config, store)
    elif args.command == "search":
        await _search(tracker, args)
    elif args.command == "rates":
        await _rates(tracker)
    elif args.command == "cash":
        _cash(args, store)
    elif args.command == "watch":
        await _watch(tracker, args, store)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
