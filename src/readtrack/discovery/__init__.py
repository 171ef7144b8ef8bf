"""AI-backed book discovery: recommendations and reading plans."""

from .llm import ChatCompletionClient
from .parsing import parse_json_lenient, strip_code_fences
from .recommendations import (
    BookCandidate,
    BookSearchResult,
    ReadingPlan,
    ReadingPlanResult,
    RecommendationGateway,
    normalize_candidates,
)

__all__ = [
    "ChatCompletionClient",
    "parse_json_lenient",
    "strip_code_fences",
    "BookCandidate",
    "BookSearchResult",
    "ReadingPlan",
    "ReadingPlanResult",
    "RecommendationGateway",
    "normalize_candidates",
]
