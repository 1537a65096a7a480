"""CLI entrypoint for the treasury oracle."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from .config import resolve_config
from .logger import setup_logging
from .processors.bonding_curve import BondingCurve
from .report import print_quote, print_snapshot
from .scheduler import RefreshScheduler
from .settings import Network, TreasurySettings
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Multi-chain treasury balances and bonding curve pricing.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("treasury_oracle")


def _load_state(init_kwargs: dict[str, Any]) -> AppState:
    """Resolve settings and configuration once for a command."""
    try:
        settings = TreasurySettings(**init_kwargs)
        setup_logging(settings.log_level)
        config = resolve_config(settings)
    except (ValidationError, ValueError) as e:
        raise typer.BadParameter(str(e)) from e
    return AppState(settings=settings, config=config, logger=_build_logger())


def _state_kwargs(ctx: typer.Context, **overrides: Any) -> dict[str, Any]:
    init_kwargs = dict(ctx.obj or {})
    init_kwargs.update({k: v for k, v in overrides.items() if v is not None})
    return init_kwargs


def _snapshot_payload(state: AppState, snapshot) -> dict[str, Any]:
    curve = BondingCurve(state.config.curve)
    payload = snapshot.as_dict()
    payload["quotes"] = {
        chain_id: {
            "price": quote.price,
            "progressPct": quote.progress_pct,
            "capUsd": quote.cap_usd,
            "allocationTokens": quote.allocation_tokens,
        }
        for chain_id, quote in curve.quote_snapshot(snapshot).items()
    }
    return payload


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [treasury_oracle] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option(
            "--network",
            "-n",
            help="Network to query (mainnet or testnet).",
        ),
    ] = None,
    fetch_timeout: Annotated[
        float | None,
        typer.Option(
            "--fetch-timeout",
            help="Deadline in seconds for each balance or price request.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Load configuration shared by every command."""
    if config_path:
        os.environ["TREASURY_ORACLE_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if network is not None:
        init_kwargs["network"] = network
        init_kwargs["testnet"] = network == Network.TESTNET
    if fetch_timeout is not None:
        init_kwargs["fetch_timeout"] = fetch_timeout
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()
    ctx.obj = init_kwargs

    if show_config:
        state = _load_state(init_kwargs)
        typer.echo(json.dumps(state.settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)


@app.command()
def snapshot(
    ctx: typer.Context,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the snapshot as JSON instead of a table."),
    ] = False,
):
    """Fetch every treasury balance once and print the snapshot."""
    state = _load_state(_state_kwargs(ctx))
    scheduler = RefreshScheduler(state.config)
    result = asyncio.run(scheduler.refresh())

    if as_json:
        typer.echo(json.dumps(_snapshot_payload(state, result), indent=2))
    else:
        print_snapshot(result, BondingCurve(state.config.curve))


@app.command()
def watch(
    ctx: typer.Context,
    interval: Annotated[
        float | None,
        typer.Option("--interval", help="Seconds between refreshes."),
    ] = None,
    iterations: Annotated[
        int | None,
        typer.Option(
            "--iterations",
            min=1,
            help="Stop after this many refreshes (runs until interrupted if omitted).",
        ),
    ] = None,
):
    """Refresh the treasury snapshot periodically and print each update."""
    state = _load_state(_state_kwargs(ctx, refresh_interval=interval))
    curve = BondingCurve(state.config.curve)

    async def _watch() -> None:
        done = asyncio.Event()
        count = 0

        def _on_update(updated) -> None:
            nonlocal count
            print_snapshot(updated, curve)
            count += 1
            if iterations is not None and count >= iterations:
                done.set()

        async with RefreshScheduler(state.config, on_update=_on_update):
            await done.wait()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        state.logger.info("Interrupted, stopping refresh")


@app.command()
def quote(
    ctx: typer.Context,
    chain: Annotated[str, typer.Argument(help="Chain id, e.g. ETHEREUM or BASE.")],
    raised_usd: Annotated[
        float, typer.Argument(help="USD raised so far on that chain.")
    ],
    usd: Annotated[
        float | None,
        typer.Option("--usd", help="Also show how many tokens this USD amount buys."),
    ] = None,
):
    """Quote the bonding curve for one chain without touching the network."""
    state = _load_state(_state_kwargs(ctx))
    curve = BondingCurve(state.config.curve)
    chain_quote = curve.quote(raised_usd, curve.resolve_chain(chain))
    tokens = curve.tokens_for_usd(raised_usd, chain, usd) if usd is not None else None
    print_quote(chain_quote, tokens=tokens, usd_amount=usd)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
