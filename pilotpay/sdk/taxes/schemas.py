"""Pydantic schemas for tax rules validation.

These schemas validate the data/tax_rules/*.yaml files and provide typed access
to income tax brackets, basic personal amounts, CPP/QPP and EI parameters.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TaxBracket(BaseModel):
    """Single tax bracket entry."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[float] = Field(default=None, description="Upper bound (None for the top bracket)")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")

    @property
    def ceiling(self) -> float:
        return self.up_to if self.up_to is not None else float("inf")


class FederalRules(BaseModel):
    """Federal brackets and basic personal amount phase-out."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    brackets: List[TaxBracket] = Field(..., min_length=1)
    bpa_base: float = Field(..., ge=0, description="BPA floor after full phase-out")
    bpa_additional: float = Field(..., ge=0, description="Extra BPA phased out at high income")
    bpa_additional_start: float = Field(..., ge=0)
    bpa_additional_end: float = Field(..., ge=0)
    contribution_credit_rate: float = Field(..., ge=0, le=1, description="Credit rate on CPP/QPP + EI")


class ProvincialRules(BaseModel):
    """Provincial brackets and basic personal amount."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    bpa: float = Field(..., ge=0)
    brackets: List[TaxBracket] = Field(..., min_length=1)

    @property
    def lowest_rate(self) -> float:
        return self.brackets[0].rate


class PensionPlanRules(BaseModel):
    """CPP or QPP two-tier contribution parameters."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    ybe: float = Field(..., ge=0, description="Basic exemption")
    ympe: float = Field(..., gt=0, description="First earnings ceiling")
    yampe: float = Field(..., gt=0, description="Second (additional) earnings ceiling")
    base_rate: float = Field(..., ge=0, le=1, description="Tier-1 rate, YBE..YMPE")
    tier2_rate: float = Field(..., ge=0, le=1, description="Tier-2 rate, YMPE..YAMPE")


class InsuranceRules(BaseModel):
    """Employment Insurance premium parameters."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    mie: float = Field(..., gt=0, description="Maximum insurable earnings")
    rate: float = Field(..., ge=0, le=1)
    max_premium: float = Field(..., ge=0)
    rate_qc: float = Field(..., ge=0, le=1)
    max_premium_qc: float = Field(..., ge=0)

    def for_province(self, province: str) -> Tuple[float, float]:
        """Return (rate, max_premium) for a province."""
        if province == "QC":
            return self.rate_qc, self.max_premium_qc
        return self.rate, self.max_premium


class TaxRules(BaseModel):
    """Complete tax and contribution rules for a year."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    federal: FederalRules
    provinces: Dict[str, ProvincialRules]
    cpp: PensionPlanRules
    qpp: PensionPlanRules
    employment_insurance: InsuranceRules

    def province(self, code: str) -> ProvincialRules:
        if code not in self.provinces:
            raise KeyError(f"No tax rules for province '{code}'")
        return self.provinces[code]

    def pension_plan(self, province: str) -> PensionPlanRules:
        """QPP in Quebec, CPP everywhere else."""
        return self.qpp if province == "QC" else self.cpp
