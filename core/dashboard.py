"""Console summaries rendered with rich.

Three views are printed around every batch:

* the configuration summary (enabled tasks, amounts, delays, retry and
  scheduler settings, account / proxy counts) before the run,
* the task summary (one row per account, one column per operation) after
  it,
* a banner announcing each scheduled run.
"""

import logging
from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.config import OPERATION_ORDER, BotSettings
from core.results import BatchSummary, OperationStatus, RunOutcome, TxReceipt

logger = logging.getLogger(__name__)

STATUS_MARKS = {
    OperationStatus.SUCCESS: "[green]✓[/green]",
    OperationStatus.FAILURE: "[red]✗[/red]",
    OperationStatus.NOT_RUN: "[dim]-[/dim]",
}


def short_address(address: Optional[str], width: int = 6) -> str:
    """``0x1234…abcd`` style abbreviation of an account address."""
    if not address:
        return "invalid key"
    if len(address) <= 2 + 2 * width:
        return address
    return f"{address[:2 + width]}…{address[-width:]}"


class RunDashboard:
    """Build and print the rich panels for one bot process."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def build_config_panel(
        self,
        settings: BotSettings,
        account_count: int,
        proxy_count: int,
    ) -> Panel:
        def flag(enabled: bool) -> str:
            return "[green]enabled[/green]" if enabled else "[red]disabled[/red]"

        tasks = settings.tasks
        retry = settings.retry
        scheduler = settings.scheduler
        schedule = (
            f"every {scheduler.interval_hours:g}h" if scheduler.enabled
            else "single run"
        )

        content = (
            f"[cyan]Accounts:[/cyan]          [white]{account_count}[/white]\n"
            f"[cyan]Proxies:[/cyan]           [white]{proxy_count}[/white]\n"
            f"[cyan]Claim native MOVE:[/cyan] {flag(tasks.fund)}\n"
            f"[cyan]Claim hstMOVE:[/cyan]     {flag(tasks.claim)}\n"
            f"[cyan]Stake hstMOVE:[/cyan]     {flag(tasks.stake)} "
            f"[white]({settings.amounts.stake_amount})[/white]\n"
            f"[cyan]Compound:[/cyan]          {flag(tasks.compound)}\n"
            f"[cyan]Unstake:[/cyan]           {flag(tasks.unstake)} "
            f"[white]({settings.amounts.unstake_amount})[/white]\n"
            f"[cyan]Task delay:[/cyan]        "
            f"[white]{settings.delay_between_tasks / 1000:g}s[/white]\n"
            f"[cyan]Account delay:[/cyan]     "
            f"[white]{settings.delay_between_accounts / 1000:g}s[/white]\n"
            f"[cyan]Retries:[/cyan]           "
            f"[white]{retry.max_retries} attempts, "
            f"{retry.initial_delay / 1000:g}s-{retry.max_delay / 1000:g}s "
            f"x{retry.backoff_factor:g}[/white]\n"
            f"[cyan]Schedule:[/cyan]          [white]{schedule}[/white]"
        )
        return Panel(
            content,
            title="[bold]Configuration Summary[/bold]",
            border_style="blue",
            box=box.ROUNDED,
        )

    def build_task_table(self, summary: BatchSummary) -> Table:
        table = Table(
            title="Task Summary",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("#", justify="right")
        table.add_column("Address", style="cyan", no_wrap=True)
        table.add_column("Proxy", justify="center")
        for name in OPERATION_ORDER:
            table.add_column(name.capitalize(), justify="center")
        table.add_column("Result", justify="center")

        for index, outcome in enumerate(summary.outcomes):
            proxy = (
                summary.proxies_assigned[index]
                if index < len(summary.proxies_assigned) else None
            )
            table.add_row(
                str(index + 1),
                short_address(outcome.address),
                "yes" if proxy else "no",
                *[self._status_cell(outcome, name) for name in OPERATION_ORDER],
                "[green]OK[/green]" if outcome.completed_all else "[red]FAILED[/red]",
            )
        if not summary.outcomes:
            table.add_row("-", "No accounts", "-", *["-"] * len(OPERATION_ORDER), "-")
        return table

    @staticmethod
    def _status_cell(outcome: RunOutcome, name: str) -> str:
        result = outcome.record[name]
        mark = STATUS_MARKS[result.status]
        if isinstance(result.payload, TxReceipt) and not result.payload.confirmed:
            # Submitted, lookup failed
            mark = "[yellow]✓?[/yellow]"
        return mark

    def show_config_summary(
        self,
        settings: BotSettings,
        account_count: int,
        proxy_count: int,
    ) -> None:
        self.console.print(
            self.build_config_panel(settings, account_count, proxy_count),
        )

    def show_task_summary(self, summary: BatchSummary) -> None:
        color = "green" if summary.failed == 0 else "yellow"
        self.console.print(self.build_task_table(summary))
        self.console.print(
            f"[{color}]Total: {summary.total} | "
            f"Succeeded: {summary.succeeded} | "
            f"Failed: {summary.failed}[/{color}]",
        )

    def show_run_banner(self, run_number: int) -> None:
        self.console.print("=" * 60)
        self.console.print(
            f"[bold cyan]SCHEDULED RUN #{run_number}[/bold cyan]",
            justify="center",
        )
        self.console.print(
            f"[white]Started: "
            f"{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}[/white]",
            justify="center",
        )
        self.console.print("=" * 60)
