from typing import List

from app.models.financials import HealthSummary, RatioAnalysis, RatioSummary

INSUFFICIENT_DATA_INSIGHT = "Onvoldoende financiële data voor complete analyse"
COMPLETE_ANALYSIS_INSIGHT = "Complete financiële analyse beschikbaar"
ALL_RATIOS = 3


def overall_health(summary: RatioSummary) -> str:
    """critical without any ratio, warning if any ratio needs attention, healthy otherwise."""
    if summary.totalRatios == 0:
        return "critical"
    if summary.warningRatios > 0:
        return "warning"
    return "healthy"


def key_insights(summary: RatioSummary) -> List[str]:
    if summary.totalRatios == 0:
        return [INSUFFICIENT_DATA_INSIGHT]

    insights = []
    if summary.healthyRatios > 0:
        insights.append(f"{summary.healthyRatios} van {summary.totalRatios} ratio's zijn gezond")
    if summary.warningRatios > 0:
        insights.append(f"{summary.warningRatios} ratio's vereisen aandacht")
    if summary.totalRatios == ALL_RATIOS:
        insights.append(COMPLETE_ANALYSIS_INSIGHT)
    return insights


def summarize_health(analysis: RatioAnalysis) -> HealthSummary:
    return HealthSummary(
        overallHealth=overall_health(analysis.summary),
        keyInsights=key_insights(analysis.summary),
    )
