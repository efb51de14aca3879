"""Rich renderer for annual, VO and pay table results.

Transforms SDK JSON output (model_dump(mode="json")) into formatted Rich tables.
"""

from typing import Dict, List

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from pilotpay.sdk.schemas import SEAT_NAMES


def render_annual(console: Console, data: dict) -> None:
    """Render an annual compensation result.

    Args:
        console: Rich Console instance
        data: SDK output from compute_annual()
    """
    inputs = data["inputs"]
    _render_inputs(console, inputs, data["step_jan1"])
    _render_audit(console, data["audit"])
    _render_summary(console, data)


def _render_inputs(console: Console, inputs: dict, step_jan1: int) -> None:
    """Render the inputs panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    seat = inputs["seat"]
    table.add_row("Seat", f"{SEAT_NAMES.get(seat, seat)} ({seat})")
    aircraft = inputs["aircraft"]
    if inputs.get("xlr"):
        aircraft += " [cyan]XLR[/cyan]"
    table.add_row("Aircraft", aircraft)
    table.add_row("Year", str(inputs["year"]))
    step_label = f"{step_jan1}"
    if inputs.get("tie_step_to_year"):
        step_label += " [dim](tied to year)[/dim]"
    table.add_row("Step on Jan 1", step_label)
    table.add_row("Province", inputs["province"])
    if "avg_monthly_hours" in inputs:
        table.add_row("Avg monthly hours", f"{inputs['avg_monthly_hours']:g}")
    if inputs.get("esop_pct"):
        table.add_row("ESOP", f"{inputs['esop_pct']:g}%")

    console.print(Panel(table, title="Inputs", border_style="dim"))


def _render_audit(console: Console, audit: List[dict]) -> None:
    """Render the per-segment audit table."""
    table = Table(title="Pay Segments", box=box.ROUNDED)
    table.add_column("From")
    table.add_column("To")
    table.add_column("Table", justify="right")
    table.add_column("Step", justify="right")
    table.add_column("Hourly", justify="right")
    table.add_column("Days", justify="right")
    table.add_column("Hours", justify="right")
    table.add_column("Gross", justify="right")

    for row in audit:
        table.add_row(
            row["start"],
            row["end"],
            str(row["pay_table_year"]),
            str(row["step"]),
            _fmt(row["hourly"]),
            str(row["days"]),
            f"{row['hours']:,.1f}",
            _fmt(row["segment_gross"]),
        )

    console.print(table)


def _render_summary(console: Console, data: dict) -> None:
    """Render annual and monthly totals side by side."""
    monthly = data["monthly"]

    table = Table(title="Compensation", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=25)
    table.add_column("Annual", justify="right", min_width=12)
    table.add_column("Monthly", justify="right", min_width=12)

    table.add_row("Gross Pay", _fmt(data["gross"]), _fmt(monthly["gross"]))
    table.add_row("  Pension accrual", _fmt(data["pension"]), _fmt(monthly["pension"]), style="dim")
    table.add_row("Taxable Income", _fmt(data["taxable"]), "", style="dim")
    table.add_row("", "", "")

    table.add_row("[bold]DEDUCTIONS[/bold]", "", "")
    table.add_row("  Federal Tax", _fmt(data["federal_tax"]), "")
    table.add_row("  Provincial Tax", _fmt(data["provincial_tax"]), "")
    table.add_row("  [dim]Income Tax[/dim]", f"[dim]{_fmt(data['tax'])}[/dim]", _fmt(monthly["income_tax"]))
    plan = "QPP" if data["inputs"]["province"] == "QC" else "CPP"
    table.add_row(f"  {plan}", _fmt(data["cpp"]), _fmt(monthly["cpp"]))
    table.add_row("  EI", _fmt(data["ei"]), _fmt(monthly["ei"]))
    table.add_row("  Health", _fmt(data["health"]), _fmt(monthly["health"]))
    table.add_row("  Union Dues", _fmt(data["union_dues"]), _fmt(monthly["union_dues"]))
    table.add_row("", "", "")

    if data["esop"]:
        table.add_row("[bold]ESOP[/bold]", "", "")
        table.add_row("  Contribution", _fmt(data["esop"]), _fmt(monthly["esop"]))
        table.add_row("  Match (after tax)", _fmt(data["esop_match_after_tax"]), _fmt(monthly["esop_match_after_tax"]))
        table.add_row("", "", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(data['net'])}[/bold green]",
        f"[bold green]{_fmt(monthly['net'])}[/bold green]",
    )

    console.print(table)


def render_overtime(console: Console, data: dict) -> None:
    """Render a VO estimate.

    Args:
        console: Rich Console instance
        data: SDK output from compute_overtime()
    """
    inputs = data["inputs"]
    seat = inputs["seat"]

    table = Table(
        title=f"VO Estimate: {SEAT_NAMES.get(seat, seat)} {inputs['aircraft']} {inputs['year']}",
        box=box.ROUNDED,
    )
    table.add_column("", style="bold", min_width=22)
    table.add_column("Value", justify="right", min_width=12)

    table.add_row("Step", str(data["step_used"]))
    table.add_row("Hourly rate", _fmt(data["rate"]))
    table.add_row("Duty hours", f"{data['hours']:.2f}")
    table.add_row("Gross", _fmt(data["gross"]))
    table.add_row("Federal marginal", _pct(data["fed_marginal"]), style="dim")
    table.add_row("Provincial marginal", _pct(data["prov_marginal"]), style="dim")
    table.add_row(
        "[bold green]NET[/bold green]",
        f"[bold green]{_fmt(data['net'])}[/bold green]",
    )

    console.print(table)


def render_ladders(console: Console, year: int, seat: str, ladders: Dict[str, List[float]]) -> None:
    """Render one seat's step ladders for a year, one row per aircraft."""
    table = Table(title=f"{year} {SEAT_NAMES.get(seat, seat)} hourly rates", box=box.ROUNDED)
    table.add_column("Aircraft", style="bold")
    for step in range(1, 13):
        table.add_column(str(step), justify="right")

    for aircraft, ladder in ladders.items():
        table.add_row(aircraft, *(f"{rate:,.2f}" for rate in ladder))

    console.print(table)


def _fmt(amount: float | None) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"


def _pct(rate: float) -> str:
    return f"{rate * 100:.2f}%"
