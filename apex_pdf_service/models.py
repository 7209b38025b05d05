"""
Pydantic models for the APEX report payload.

Field names follow the camelCase JSON sent by the analysis frontend.
All models are request-scoped values: image resolution produces
ResolvedCompetitor copies instead of mutating the request.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

REQUIRED_FIELDS = ("finalReport", "clientInfo", "competitorData", "clientUrl")


class AnalysisPoints(BaseModel):
    """Positive and negative findings for one aspect of the analysis."""

    good: Optional[List[str]] = None
    bad: Optional[List[str]] = None


class Deal(BaseModel):
    """A single promoted product/offer from a competitor."""

    name: str = ""
    originalPrice: Optional[float] = None
    salePrice: Optional[float] = None
    percentDiscount: Optional[float] = None


class Competitor(BaseModel):
    """Competitor as scraped by the analysis pipeline."""

    name: str
    url: str = ""
    logoUrl: Optional[str] = None
    creativeUrl: Optional[str] = None
    dealType: Optional[str] = None
    dealDuration: Optional[str] = None
    topDeals: Optional[List[Deal]] = None


class ResolvedCompetitor(Competitor):
    """Competitor with its remote images inlined as data URLs (or absent)."""

    logoDataUrl: Optional[str] = None
    creativeDataUrl: Optional[str] = None


class Recommendation(BaseModel):
    """Overall scorecard for the client."""

    numericScore: float = Field(..., description="Overall score, 0-10")
    rating: str
    summary: str = ""
    discounts: Optional[AnalysisPoints] = None
    messaging: Optional[AnalysisPoints] = None
    competitiveness: Optional[AnalysisPoints] = None
    discountsScore: Optional[float] = None
    messagingScore: Optional[float] = None
    competitivenessScore: Optional[float] = None


class CompetitorReport(BaseModel):
    """Per-competitor comparison, matched to a Competitor by name."""

    competitorName: str
    dealRating: Optional[str] = Field(
        None, description="One of: frosty, luke-warm, hot, pipin-hot"
    )
    analysis: Optional[AnalysisPoints] = None


class FinalReport(BaseModel):
    recommendation: Recommendation
    comparison: List[CompetitorReport] = Field(default_factory=list)

    def report_for(self, competitor_name: str) -> Optional[CompetitorReport]:
        """Return the first comparison entry whose name matches exactly."""
        for report in self.comparison:
            if report.competitorName == competitor_name:
                return report
        return None


class ReportRequest(BaseModel):
    """Request body for POST /generate-pdf."""

    finalReport: FinalReport
    clientInfo: Any
    competitorData: List[Competitor]
    clientUrl: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    active_renders: int
    max_concurrent: int
    playwright_ready: bool = True
    playwright_error: Optional[str] = None


def missing_fields(payload: Dict[str, Any]) -> List[str]:
    """
    List the required top-level fields that are absent or falsy scalars.

    null, false, 0 and blank strings count as missing. Empty lists and
    objects count as present.
    """
    missing = []
    for name in REQUIRED_FIELDS:
        value = payload.get(name)
        if value is None:
            missing.append(name)
        elif isinstance(value, str):
            if not value.strip():
                missing.append(name)
        elif isinstance(value, (bool, int, float)) and not value:
            missing.append(name)
    return missing
