"""Pilot Pay MCP Server - FastMCP implementation for pay calculation tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from pilotpay.sdk import (
    AnnualInputs,
    OvertimeInputs,
    PayTableLookupError,
    compute_annual,
    compute_overtime,
    get_registry,
    step_on_jan1,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("pilot-pay")


# --- Tools ---

@mcp.tool()
async def calculate_annual(
    seat: str = Field(description="Seat: 'CA', 'FO' or 'RP'"),
    aircraft: str = Field(description="Aircraft code, e.g. '777' or '320'"),
    year: int = Field(description="Pay year (e.g. 2026)"),
    step: int = Field(default=1, description="Step held on Jan 1 (1-12)"),
    tie_step_to_year: bool = Field(default=False, description="Derive the Jan 1 step from the year"),
    xlr: bool = Field(default=False, description="Apply the XLR per-hour premium (320 only)"),
    avg_monthly_hours: float = Field(default=75, description="Average monthly duty hours"),
    province: str = Field(default="ON", description="Province of residence (e.g. 'ON', 'QC')"),
    esop_pct: float = Field(default=0, description="ESOP contribution, percent of gross (0-100)"),
) -> dict[str, Any]:
    """Estimate annual and monthly pay, income tax, CPP/QPP, EI, health, union dues and ESOP. Includes a per-segment audit trail."""
    try:
        inputs = AnnualInputs(
            seat=seat.upper(),
            aircraft=aircraft,
            year=year,
            step=step,
            tie_step_to_year=tie_step_to_year,
            xlr=xlr,
            avg_monthly_hours=avg_monthly_hours,
            province=province.upper(),
            esop_pct=esop_pct,
        )
        return compute_annual(inputs).model_dump(mode="json")

    except (ValidationError, PayTableLookupError) as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"Error calculating annual pay: {e}")
        return {"error": str(e)}


@mcp.tool()
async def calculate_overtime(
    seat: str = Field(description="Seat: 'CA', 'FO' or 'RP'"),
    aircraft: str = Field(description="Aircraft code, e.g. '777' or '320'"),
    year: int = Field(description="Pay year (e.g. 2026)"),
    credit_hours: float = Field(description="Credited hours"),
    credit_minutes: float = Field(default=0, description="Credited minutes (0-59)"),
    step: int = Field(default=1, description="Step (1-12)"),
    tie_step_to_year: bool = Field(default=False, description="Derive the step from the year"),
    xlr: bool = Field(default=False, description="Apply the XLR per-hour premium (320 only)"),
    province: str = Field(default="ON", description="Province of residence"),
) -> dict[str, Any]:
    """Estimate gross and net for a VO (overtime) credit. Duty hours are twice the credit; net uses marginal rates only."""
    try:
        inputs = OvertimeInputs(
            seat=seat.upper(),
            aircraft=aircraft,
            year=year,
            step=step,
            tie_step_to_year=tie_step_to_year,
            xlr=xlr,
            province=province.upper(),
            credit_hours=credit_hours,
            credit_minutes=credit_minutes,
        )
        return compute_overtime(inputs).model_dump(mode="json")

    except (ValidationError, PayTableLookupError) as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"Error calculating VO: {e}")
        return {"error": str(e)}


@mcp.tool()
async def get_hourly_rate(
    seat: str = Field(description="Seat: 'CA', 'FO' or 'RP'"),
    aircraft: str = Field(description="Aircraft code, e.g. '777' or '320'"),
    year: int = Field(description="Pay table year"),
    step: int = Field(default=1, description="Step (1-12, clamped)"),
    tie_step_to_year: bool = Field(default=False, description="Derive the step from the year"),
    xlr: bool = Field(default=False, description="Apply the XLR per-hour premium (320 only)"),
) -> dict[str, Any]:
    """Resolve the hourly rate for a seat, aircraft, year and step from contractual or forecast tables."""
    try:
        registry = get_registry()
        seat = seat.upper()
        resolved_step = step_on_jan1(step, tie_step_to_year, year, registry.rules.base_year)
        hourly = registry.rate_for(seat, aircraft, year, resolved_step, xlr)
        return {
            "seat": seat,
            "aircraft": aircraft,
            "year": year,
            "step": resolved_step,
            "xlr": xlr,
            "hourly": hourly,
            "forecast": year not in registry.rules.pay_tables,
        }

    except PayTableLookupError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"Error resolving hourly rate: {e}")
        return {"error": str(e)}


# --- Resources (optional, for browsing) ---

@mcp.resource("pilotpay://aircraft")
async def aircraft_resource() -> str:
    """Aircraft each seat can be rated on, plus available pay table years."""
    try:
        registry = get_registry()
        return json.dumps({
            "aircraft": {seat: registry.allowed_aircraft(seat) for seat in ("CA", "FO", "RP")},
            "years": registry.years(),
        }, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
