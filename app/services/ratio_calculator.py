"""
Financial ratio calculations for healthcare organisations.

Three ratios are derived from FinancialData and judged against sector
benchmarks:

- Rentabiliteit (ROE): nettowinst / eigenVermogen, shown as a percentage
- Liquiditeit (current ratio): vlottendeActiva / kortlopendeSchulden, shown as a decimal
- Solvabiliteit (equity ratio): eigenVermogen / totaalActiva, shown as a percentage

A ratio whose inputs are missing, whose denominator is zero, or whose value
overflows a float has no value and no health verdict. Health is always judged on the unscaled ratio.
"""
import math
from typing import Dict, Optional

from app.models.financials import (
    BenchmarkRange,
    FinancialData,
    FinancialRatio,
    RatioAnalysis,
    RatioSummary,
)

# Benchmarks for the healthcare sector (unscaled)
HEALTHCARE_BENCHMARKS: Dict[str, Dict[str, float]] = {
    "rentabiliteit": {"min": 0.05, "max": 0.15, "ideal": 0.08},
    "liquiditeit": {"min": 1.0, "max": 3.0, "ideal": 1.5},
    "solvabiliteit": {"min": 0.20, "max": 0.60, "ideal": 0.35},
}

RATIO_DEFINITIONS: Dict[str, Dict[str, str]] = {
    "rentabiliteit": {
        "name": "Rentabiliteit (ROE)",
        "formula": "Nettowinst ÷ Eigen Vermogen",
        "description": "Meet hoe efficiënt het eigen vermogen wordt ingezet om winst te genereren",
    },
    "liquiditeit": {
        "name": "Liquiditeit (Current Ratio)",
        "formula": "Vlottende Activa ÷ Kortlopende Schulden",
        "description": "Meet het vermogen om kortlopende verplichtingen te voldoen",
    },
    "solvabiliteit": {
        "name": "Solvabiliteit (Equity Ratio)",
        "formula": "Eigen Vermogen ÷ Totaal Activa",
        "description": "Meet de financiële stabiliteit en het aandeel eigen vermogen",
    },
}

PERCENTAGE_RATIOS = ("rentabiliteit", "solvabiliteit")

NOT_AVAILABLE = "Niet beschikbaar"


def _round_half_up(scaled: float) -> Optional[float]:
    # Two decimals, halves rounded up (not to even). None once the value overflows.
    if not math.isfinite(scaled):
        return None
    return math.floor(scaled + 0.5) / 100


def _as_percentage(raw: float) -> Optional[float]:
    return _round_half_up(raw * 10000)


def _as_decimal(raw: float) -> Optional[float]:
    return _round_half_up(raw * 100)


def _empty_ratio(key: str) -> FinancialRatio:
    return FinancialRatio(
        **RATIO_DEFINITIONS[key],
        value=None,
        isHealthy=None,
        benchmarkRange=BenchmarkRange(**HEALTHCARE_BENCHMARKS[key]),
    )


def _calculate(key: str, numerator: Optional[float], denominator: Optional[float]) -> FinancialRatio:
    ratio = _empty_ratio(key)
    if numerator is None or denominator is None or denominator == 0:
        return ratio

    raw = numerator / denominator
    value = _as_percentage(raw) if key in PERCENTAGE_RATIOS else _as_decimal(raw)
    if value is None:
        return ratio
    ratio.value = value

    benchmark = HEALTHCARE_BENCHMARKS[key]
    ratio.isHealthy = benchmark["min"] <= raw <= benchmark["max"]
    return ratio


def calculate_rentabiliteit(nettowinst: Optional[float], eigenVermogen: Optional[float]) -> FinancialRatio:
    """Return on equity, as a percentage."""
    return _calculate("rentabiliteit", nettowinst, eigenVermogen)


def calculate_liquiditeit(vlottendeActiva: Optional[float], kortlopendeSchulden: Optional[float]) -> FinancialRatio:
    """Current ratio, as a plain decimal."""
    return _calculate("liquiditeit", vlottendeActiva, kortlopendeSchulden)


def calculate_solvabiliteit(eigenVermogen: Optional[float], totaalActiva: Optional[float]) -> FinancialRatio:
    """Equity ratio, as a percentage."""
    return _calculate("solvabiliteit", eigenVermogen, totaalActiva)


def calculate_all_ratios(data: FinancialData) -> RatioAnalysis:
    """Calculate all three ratios and count how many are available and healthy."""
    rentabiliteit = calculate_rentabiliteit(data.nettowinst, data.eigenVermogen)
    liquiditeit = calculate_liquiditeit(data.vlottendeActiva, data.kortlopendeSchulden)
    solvabiliteit = calculate_solvabiliteit(data.eigenVermogen, data.totaalActiva)

    valid = [r for r in (rentabiliteit, liquiditeit, solvabiliteit) if r.value is not None]
    summary = RatioSummary(
        totalRatios=len(valid),
        healthyRatios=sum(1 for r in valid if r.isHealthy is True),
        warningRatios=sum(1 for r in valid if r.isHealthy is False),
        criticalRatios=0,  # reserved
    )
    return RatioAnalysis(
        rentabiliteit=rentabiliteit,
        liquiditeit=liquiditeit,
        solvabiliteit=solvabiliteit,
        summary=summary,
    )


# --- Display helpers ---

def _format_number(value: float) -> str:
    # 40.0 -> "40", 1.5 -> "1.5"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_ratio_value(ratio: FinancialRatio) -> str:
    if ratio.value is None:
        return NOT_AVAILABLE
    if "Rentabiliteit" in ratio.name or "Solvabiliteit" in ratio.name:
        return f"{_format_number(ratio.value)}%"
    return _format_number(ratio.value)


def ratio_status_color(ratio: FinancialRatio) -> str:
    if ratio.value is None or ratio.isHealthy is None:
        return "gray"
    return "green" if ratio.isHealthy else "red"


def ratio_status_text(ratio: FinancialRatio) -> str:
    if ratio.value is None or ratio.isHealthy is None:
        return "Onvoldoende data"
    return "Gezond" if ratio.isHealthy else "Aandacht vereist"
