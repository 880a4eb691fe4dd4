from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field


class FinancialData(BaseModel):
    """The six canonical inputs. A missing figure is None, never zero."""
    omzet: Optional[float] = None  # Revenue
    nettowinst: Optional[float] = None  # Net profit
    eigenVermogen: Optional[float] = None  # Equity
    vlottendeActiva: Optional[float] = None  # Current assets
    kortlopendeSchulden: Optional[float] = None  # Current liabilities
    totaalActiva: Optional[float] = None  # Total assets


class BenchmarkRange(BaseModel):
    """Sector benchmark, unscaled (0.08 means 8%)."""
    min: float
    max: float
    ideal: float


class FinancialRatio(BaseModel):
    name: str
    value: Optional[float] = None
    formula: str
    description: str
    isHealthy: Optional[bool] = None
    benchmarkRange: BenchmarkRange


class RatioSummary(BaseModel):
    totalRatios: int
    healthyRatios: int
    warningRatios: int
    criticalRatios: int = 0


class RatioAnalysis(BaseModel):
    rentabiliteit: FinancialRatio
    liquiditeit: FinancialRatio
    solvabiliteit: FinancialRatio
    summary: RatioSummary

    def ordered_ratios(self) -> Iterator[Tuple[str, FinancialRatio]]:
        """Yield (key, ratio) pairs in the fixed presentation order."""
        yield "rentabiliteit", self.rentabiliteit
        yield "liquiditeit", self.liquiditeit
        yield "solvabiliteit", self.solvabiliteit


class RatioExplanation(BaseModel):
    ratio: str
    waarde: str
    uitleg: str


class HealthSummary(BaseModel):
    overallHealth: Literal["healthy", "warning", "critical"]
    keyInsights: List[str]


class FinancialAnalysis(BaseModel):
    ratios: RatioAnalysis
    explanations: List[RatioExplanation]
    summary: HealthSummary


# --- HTTP request / response models ---

class ParseFinRequest(BaseModel):
    fileData: str  # CSV text, or base64 for Excel workbooks
    fileName: str
    fileType: Optional[str] = None


class ParseFinSummary(BaseModel):
    totalRows: int
    totalColumns: int
    detectedColumns: List[str]
    matchedFields: List[str]


class ParsedFinanceData(BaseModel):
    success: bool = True
    fileName: str
    metrics: FinancialData
    rawData: List[Dict[str, Any]] = Field(default_factory=list)
    summary: ParseFinSummary


class FinAnalysisRequest(BaseModel):
    # Left untyped so a missing or non-object value gets a descriptive 400
    # instead of a generic validation error.
    metrics: Optional[Any] = None


class FinAnalysisResponse(FinancialAnalysis):
    success: bool = True
