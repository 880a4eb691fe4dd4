from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.models.financials import (
    FinAnalysisRequest,
    FinAnalysisResponse,
    ParsedFinanceData,
    ParseFinRequest,
    ParseFinSummary,
)
from app.services import gemini_service
from app.services.explanation_service import InvalidMetricsError, TextGenerator, analyze_financials
from app.services.tabular_parser import TabularParseError, parse_table
from app.services.value_extractor import match_and_extract
from app.utils.config import config
from app.utils.logger import logger
from app.utils.rate_limit import SlidingWindowRateLimiter

router = APIRouter()

RAW_DATA_PREVIEW_ROWS = 100

rate_cfg = config.get("rate_limit", {})
upload_limiter = SlidingWindowRateLimiter(
    limit=rate_cfg.get("limit", 10),
    window_seconds=rate_cfg.get("window_seconds", 60),
)


# --- Dependencies ---
def get_text_generator() -> TextGenerator:
    return gemini_service.generate


def get_rate_limiter() -> SlidingWindowRateLimiter:
    return upload_limiter


async def enforce_rate_limit(request: Request, limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter)):
    key = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None) or "anon"
    if not limiter.allow(key):
        logger.warning(f"⚠️ Rate limit exceeded for {key}")
        raise HTTPException(status_code=429, detail="Te veel aanvragen, probeer in 1 minuut opnieuw.")


# --- API Endpoints ---
@router.post("/parse-fin", response_model=ParsedFinanceData, dependencies=[Depends(enforce_rate_limit)])
async def parse_fin_api(request: ParseFinRequest):
    """Parse an uploaded CSV/Excel file and extract the canonical financial figures."""
    logger.info(f"📡 Received financial file for parsing: {request.fileName} ({request.fileType or 'unknown'})")

    try:
        table = parse_table(request.fileName, request.fileData)
    except TabularParseError as e:
        logger.warning(f"❌ Could not parse {request.fileName}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    metrics = match_and_extract(table.headers, table.rows)
    matched_fields = [name for name, value in metrics.model_dump().items() if value is not None]
    logger.info(f"✅ Financial metrics extracted from {request.fileName}: {matched_fields}")

    return ParsedFinanceData(
        fileName=request.fileName,
        metrics=metrics,
        rawData=table.rows[:RAW_DATA_PREVIEW_ROWS],
        summary=ParseFinSummary(
            totalRows=len(table.rows),
            totalColumns=len(table.headers),
            detectedColumns=table.headers,
            matchedFields=matched_fields,
        ),
    )


@router.post("/fin-analysis", response_model=FinAnalysisResponse)
async def fin_analysis_api(request: FinAnalysisRequest, generate: TextGenerator = Depends(get_text_generator)):
    """Calculate the ratios for a set of metrics and explain each of them."""
    logger.info("📡 Received request for financial analysis")

    if not isinstance(request.metrics, dict):
        raise HTTPException(
            status_code=400,
            detail="Financiële metrics zijn vereist. Gebruik eerst /parse-fin om financiële data te verwerken.",
        )

    try:
        analysis = await analyze_financials(request.metrics, generate)
    except InvalidMetricsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Fin-analysis error: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Er is een fout opgetreden bij de financiële analyse",
                "details": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return FinAnalysisResponse(**analysis.model_dump())
