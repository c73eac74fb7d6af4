"""Command-line runner for the cross-domain lending scenario."""

import argparse
import logging
from decimal import Decimal
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config.settings import get_settings
from src.core.constants import get_chain_name
from src.sandbox.scenario import UNIT, ScenarioConfig, ScenarioResult, run_cross_domain_scenario

logger = logging.getLogger(__name__)


def _fmt(amount: int) -> str:
    """Format an 18-decimal amount for display."""
    return f"{Decimal(amount) / Decimal(UNIT):,.4f}"


def build_pool_table(result: ScenarioResult) -> Table:
    """Pool totals after every scenario step."""
    table = Table(
        show_header=True,
        header_style="bold orange1",
        border_style="dim",
        expand=True,
        padding=(0, 1),
    )
    table.add_column("Step", style="cyan")
    table.add_column("Supply Assets", justify="right")
    table.add_column("Supply Shares", justify="right")
    table.add_column("Borrow Assets", justify="right")
    table.add_column("Borrow Shares", justify="right")
    table.add_column("Share Price", justify="right")
    table.add_column("Util", justify="right", style="yellow")

    for step in result.steps:
        table.add_row(
            step.label,
            _fmt(step.pool.total_supply_assets),
            _fmt(step.pool.total_supply_shares),
            _fmt(step.pool.total_borrow_assets),
            _fmt(step.pool.total_borrow_shares),
            f"{float(step.pool.supply_share_price):.6f}",
            f"{float(step.pool.utilization) * 100:.1f}%",
        )
    return table


def build_balance_table(result: ScenarioResult) -> Table:
    """Account balances after every scenario step."""
    table = Table(show_header=True, header_style="bold orange1", border_style="dim", expand=True)
    table.add_column("Step", style="cyan")
    columns = list(result.steps[0].balances) if result.steps else []
    for column in columns:
        table.add_column(column, justify="right")

    for step in result.steps:
        table.add_row(step.label, *(_fmt(step.balances[c]) for c in columns))
    return table


def render(result: ScenarioResult, console: Console) -> None:
    config = result.config
    header = Text()
    header.append(f"{get_chain_name(config.origin_domain)}", style="bold cyan")
    header.append(" -> ", style="dim")
    header.append(f"{get_chain_name(config.destination_domain)}", style="bold cyan")
    header.append(f"   borrow {_fmt(config.borrow)} over {config.days} days", style="dim")
    if result.pool_config is not None:
        header.append(f"   LTV {float(result.pool_config.ltv_ratio):.0%}", style="dim")

    console.print(Panel(header, title="[bold orange1]Cross-Domain Lending[/]", border_style="dim"))
    console.print(build_pool_table(result))
    console.print(build_balance_table(result))

    if not result.success:
        console.print(f"[bold red]Scenario failed:[/] {result.error_message}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the cross-domain lending scenario")
    parser.add_argument("--days", type=int, default=30, help="Days of interest to accrue before repaying")
    parser.add_argument("--borrow", type=int, default=1_000, help="Whole units of USDC to borrow")
    parser.add_argument("--collateral", type=int, default=5, help="Whole units of WETH collateral")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level (DEBUG, INFO, ...)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON instead of tables")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ScenarioConfig(
        borrow=args.borrow * UNIT,
        collateral=args.collateral * UNIT,
        days=args.days,
    )
    logger.debug(f"Running scenario: {config}")
    result = run_cross_domain_scenario(config, settings=settings)
    console = Console()
    if args.json:
        console.print_json(data=result.to_dict())
    else:
        render(result, console)
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
