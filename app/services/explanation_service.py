import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

from pydantic import ValidationError

from app.models.financials import (
    FinancialAnalysis,
    FinancialData,
    FinancialRatio,
    RatioAnalysis,
    RatioExplanation,
)
from app.services import gemini_service
from app.services.ratio_aggregator import summarize_health
from app.services.ratio_calculator import NOT_AVAILABLE, calculate_all_ratios, format_ratio_value
from app.utils.config import config
from app.utils.logger import logger

TextGenerator = Callable[[str], Awaitable[str]]

EXPLANATION_TIMEOUT = float(config.get("explanations", {}).get("timeout_seconds", 20))

# Concrete example the prompt asks for, per ratio
PROMPT_EXAMPLES = {
    "rentabiliteit": "investering in medische apparatuur",
    "liquiditeit": "betaling van leveranciers of salarissen",
    "solvabiliteit": "financiering van nieuwe zorglocatie of uitbreiding",
}

FALLBACK_EXPLANATIONS = {
    "Rentabiliteit (ROE)": (
        "Rentabiliteit van {waarde} toont hoe efficiënt je organisatie het eigen vermogen inzet. "
        "Voor zorgorganisaties is 5-15% gezond. Een lagere waarde kan duiden op inefficiëntie, "
        "een hogere waarde op mogelijk te weinig investeringen in zorgkwaliteit. Bijvoorbeeld: "
        "bij 8% rentabiliteit genereert elke €100 eigen vermogen €8 winst per jaar."
    ),
    "Liquiditeit (Current Ratio)": (
        "Liquiditeit van {waarde} geeft aan of je organisatie kortlopende verplichtingen kan nakomen. "
        "Een waarde tussen 1,0-3,0 is gezond voor zorgorganisaties. Te laag betekent "
        "liquiditeitsproblemen, te hoog kan inefficiënt gebruik van middelen betekenen. Bijvoorbeeld: "
        "bij 1,5 heb je €1,50 aan vlottende activa voor elke €1 aan kortlopende schulden."
    ),
    "Solvabiliteit (Equity Ratio)": (
        "Solvabiliteit van {waarde} toont de financiële stabiliteit. Voor zorgorganisaties is 20-60% "
        "eigen vermogen gezond. Dit geeft aan hoeveel van de organisatie echt 'van jezelf' is versus "
        "gefinancierd door schulden. Bijvoorbeeld: bij 35% solvabiliteit is €35 van elke €100 activa "
        "gefinancierd met eigen vermogen."
    ),
}

GENERIC_FALLBACK = (
    "Deze ratio heeft een waarde van {waarde}. Raadpleeg een financieel adviseur voor een "
    "gedetailleerde analyse van deze waarde binnen de zorgsector."
)

INSUFFICIENT_DATA_EXPLANATION = (
    "Onvoldoende financiële data om deze ratio te berekenen. Zorg ervoor dat alle benodigde "
    "gegevens beschikbaar zijn in je financiële administratie."
)


class InvalidMetricsError(ValueError):
    """Raised when the analysis input is not a usable set of financial metrics."""


def prompt_for_ratio(key: str, ratio: FinancialRatio, waarde: str) -> str:
    example = PROMPT_EXAMPLES.get(key)
    prompt = f"""Je bent financieel adviseur in de zorg.
Leg in max 120 woorden uit wat {ratio.name} betekent en hoe waarde {waarde}
wordt beoordeeld voor een zorginstelling. De ratio wordt berekend als: {ratio.formula}.
Gebruik eenvoudige taal."""
    if example:
        prompt += f"\nGebruik één concreet voorbeeld (bijv. {example})."
    return prompt


def fallback_explanation(name: str, waarde: str) -> str:
    template = FALLBACK_EXPLANATIONS.get(name, GENERIC_FALLBACK)
    return template.format(waarde=waarde)


async def _explain_ratio(
    key: str,
    ratio: FinancialRatio,
    generate: TextGenerator,
    timeout: float,
) -> RatioExplanation:
    if ratio.value is None:
        return RatioExplanation(ratio=ratio.name, waarde=NOT_AVAILABLE, uitleg=INSUFFICIENT_DATA_EXPLANATION)

    waarde = format_ratio_value(ratio)
    try:
        logger.info(f"🤖 Generating explanation for {key}: {waarde}")
        text = await asyncio.wait_for(generate(prompt_for_ratio(key, ratio, waarde)), timeout=timeout)
        if not isinstance(text, str) or not text.strip():
            raise gemini_service.TextGenerationError("No explanation text received")
        logger.info(f"✅ Explanation generated for {key}")
        return RatioExplanation(ratio=ratio.name, waarde=waarde, uitleg=text.strip())
    except Exception as e:
        logger.error(f"❌ Error generating explanation for {key}, using fallback: {e!r}", exc_info=True)
        return RatioExplanation(ratio=ratio.name, waarde=waarde, uitleg=fallback_explanation(ratio.name, waarde))


async def explain_ratios(
    analysis: RatioAnalysis,
    generate: Optional[TextGenerator] = None,
    timeout: float = EXPLANATION_TIMEOUT,
) -> List[RatioExplanation]:
    """
    Explain every ratio, requesting the available ones concurrently.

    Results follow the fixed ratio order, not completion order. A failing or
    slow request only degrades its own ratio to the fallback text.
    """
    generate = generate or gemini_service.generate
    tasks = [_explain_ratio(key, ratio, generate, timeout) for key, ratio in analysis.ordered_ratios()]
    return list(await asyncio.gather(*tasks))


async def analyze_financials(
    metrics: Union[FinancialData, Mapping[str, Any]],
    generate: Optional[TextGenerator] = None,
) -> FinancialAnalysis:
    """
    Full pipeline: ratios, per-ratio explanations and an overall health summary.

    Raises InvalidMetricsError when metrics is not a mapping of financial figures.
    Missing figures are not an error; they show up as unavailable ratios.
    """
    if isinstance(metrics, FinancialData):
        data = metrics
    elif isinstance(metrics, Mapping):
        try:
            data = FinancialData.model_validate(dict(metrics))
        except ValidationError as e:
            raise InvalidMetricsError(f"Invalid financial metrics: {e}") from e
    else:
        raise InvalidMetricsError(f"Financial metrics must be an object, got {type(metrics).__name__}")

    logger.info(
        "💰 Financial analysis started: "
        + ", ".join(f"{field}={'yes' if value is not None else 'no'}" for field, value in data.model_dump().items())
    )

    ratios = calculate_all_ratios(data)
    explanations = await explain_ratios(ratios, generate)
    summary = summarize_health(ratios)

    logger.info(
        f"✅ Financial analysis completed: {ratios.summary.healthyRatios}/{ratios.summary.totalRatios} healthy, "
        f"{ratios.summary.warningRatios} warning, overall {summary.overallHealth}"
    )
    return FinancialAnalysis(ratios=ratios, explanations=explanations, summary=summary)
