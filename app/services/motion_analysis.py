from typing import Dict, List
from app.models.analysis import AnalysisSession, AnalysisResult
import structlog

logger = structlog.get_logger()

# Placeholder output until a real pose-estimation pipeline exists
PLACEHOLDER_STRENGTHS: Dict[str, List[str]] = {
    "technique": ["Consistent contact point", "Balanced ready position"],
    "footwork": ["Quick first step"],
    "posture": ["Stable base through the stroke"],
}

PLACEHOLDER_IMPROVEMENTS: Dict[str, List[str]] = {
    "technique": ["Follow through higher after contact"],
    "footwork": ["Recover to center faster between shots", "Widen stance on wide balls"],
    "posture": ["Keep the head still at contact"],
}


def build_placeholder_result(session: AnalysisSession, analysis_type: str = "technique") -> AnalysisResult:
    """Build an unsaved AnalysisResult with fixed placeholder content."""
    analysis_type = analysis_type if analysis_type in PLACEHOLDER_STRENGTHS else "technique"

    logger.info(
        "Generating placeholder analysis",
        session_id=session.id,
        analysis_type=analysis_type
    )

    return AnalysisResult(
        session_id=session.id,
        analysis_type=analysis_type,
        score=0.75,
        feedback=f"Automated {analysis_type} review for '{session.title}'. A coach will follow up with detailed notes.",
        strengths=list(PLACEHOLDER_STRENGTHS[analysis_type]),
        areas_of_improvement=list(PLACEHOLDER_IMPROVEMENTS[analysis_type])
    )
