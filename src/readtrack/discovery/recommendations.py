"""AI book recommendations and reading plans.

The gateway builds a prompt, asks the text generation service for JSON,
recovers what it can from the answer and normalizes every record so callers
always get complete book candidates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ValidationError
from .llm import ChatCompletionClient
from .parsing import parse_json_lenient

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Unknown Author"
DEFAULT_CATEGORY = "General"
DEFAULT_RATING = 4.5
DEFAULT_ESTIMATED_TIME = "3-6 months"
DEFAULT_PLAN_DIFFICULTY = "Progressive"
DEFAULT_BOOK_DIFFICULTY = "Beginner"

SEARCH_PROMPT = """
You are a book recommendation assistant.

Given the user query: "{query}"

Return 5-8 **real, existing non-fiction books** that best match the query.
Focus on self-learning / thinking / professional growth.
Output **ONLY** valid JSON, no explanation, no markdown.

JSON format (array only):

[
  {{
    "title": "Book title",
    "author": "Author name",
    "category": "Short category, e.g. Psychology, Business, History",
    "rating": 4.6,
    "description": "1-2 sentence English description of why this book is helpful for the query.",
    "totalPages": 320
  }}
]
""".strip()

PLAN_PROMPT = """
You are a reading-plan generator. For the topic "{topic}", return EXACTLY this JSON format:

{{
 "topic": "{topic}",
 "estimatedTime": "3-6 months",
 "difficulty": "Progressive",
 "subtopics": [
   {{
     "id": 1,
     "title": "Fundamentals",
     "description": "Short English description.",
     "books": [
       {{
         "title": "Book title",
         "author": "Author name",
         "difficulty": "Beginner",
         "totalPages": 300
       }}
     ]
   }}
 ]
}}

Rules:
- Output ONLY pure JSON.
- No markdown, no explanation, no backticks.
""".strip()


def fallback_page_count(index: int) -> int:
    """Deterministic page count for a record that has none."""
    return 280 + (index % 5) * 40


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _page_count(value: Any, index: int) -> int:
    if _is_number(value) and value > 0:
        return int(value)
    return fallback_page_count(index)


def _text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


@dataclass
class BookCandidate:
    """A normalized book suggestion."""

    title: str
    author: str = DEFAULT_AUTHOR
    category: str = DEFAULT_CATEGORY
    rating: float = DEFAULT_RATING
    description: str = ""
    total_pages: int = 280

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "title": self.title,
            "author": self.author,
            "category": self.category,
            "rating": self.rating,
            "description": self.description,
            "totalPages": self.total_pages,
        }


@dataclass
class PlanBook:
    """A book within a reading plan subtopic."""

    title: str
    author: str = DEFAULT_AUTHOR
    difficulty: str = DEFAULT_BOOK_DIFFICULTY
    total_pages: int = 280

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "title": self.title,
            "author": self.author,
            "difficulty": self.difficulty,
            "totalPages": self.total_pages,
        }


@dataclass
class PlanSubtopic:
    """One stage of a reading plan."""

    id: int
    title: str
    description: str = ""
    books: list[PlanBook] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "books": [book.to_dict() for book in self.books],
        }


@dataclass
class ReadingPlan:
    """A topic broken into subtopics, each with books to read."""

    topic: str
    estimated_time: str = DEFAULT_ESTIMATED_TIME
    difficulty: str = DEFAULT_PLAN_DIFFICULTY
    subtopics: list[PlanSubtopic] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "topic": self.topic,
            "estimatedTime": self.estimated_time,
            "difficulty": self.difficulty,
            "subtopics": [subtopic.to_dict() for subtopic in self.subtopics],
        }


@dataclass
class BookSearchResult:
    """Books found for a query, plus the raw text when nothing parsed."""

    books: list[BookCandidate] = field(default_factory=list)
    raw_text: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        data: dict = {"books": [book.to_dict() for book in self.books]}
        if self.raw_text is not None:
            data["rawText"] = self.raw_text
        return data


@dataclass
class ReadingPlanResult:
    """A generated plan, or the raw text when it could not be parsed."""

    plan: Optional[ReadingPlan] = None
    raw_text: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        if self.plan is not None:
            return {"plan": self.plan.to_dict()}
        return {"rawText": self.raw_text or ""}


# ============================================================================
# Normalization
# ============================================================================


def extract_book_records(parsed: Any) -> list:
    """Find the list of book records in a parsed answer.

    Accepts a bare array or an object with a ``books`` array.
    """
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get("books"), list):
        return parsed["books"]
    return []


def normalize_candidate(record: Any, index: int, query: str) -> BookCandidate:
    """Fill in defaults for one book record.

    Args:
        record: Parsed record (non-dict records are treated as empty)
        index: Position in the answer, drives the page count fallback
        query: The user's query, used as the title fallback
    """
    if not isinstance(record, dict):
        record = {}

    description = record.get("description")
    if not isinstance(description, str):
        reason = record.get("reason")
        description = reason if isinstance(reason, str) else f'Recommended book related to "{query}".'

    rating = record.get("rating")

    return BookCandidate(
        title=_text(record.get("title"), query),
        author=_text(record.get("author"), DEFAULT_AUTHOR),
        category=_text(record.get("category"), DEFAULT_CATEGORY),
        rating=rating if _is_number(rating) else DEFAULT_RATING,
        description=description,
        total_pages=_page_count(record.get("totalPages"), index),
    )


def normalize_candidates(records: list, query: str) -> list[BookCandidate]:
    """Normalize every record of an answer."""
    return [normalize_candidate(record, index, query) for index, record in enumerate(records)]


def normalize_plan(parsed: dict, topic: str) -> ReadingPlan:
    """Build a ReadingPlan from a parsed answer, filling in defaults."""
    subtopics = []
    raw_subtopics = parsed.get("subtopics")
    for i, raw in enumerate(raw_subtopics if isinstance(raw_subtopics, list) else []):
        if not isinstance(raw, dict):
            continue
        raw_books = raw.get("books")
        books = [
            PlanBook(
                title=_text(book.get("title"), "Untitled"),
                author=_text(book.get("author"), DEFAULT_AUTHOR),
                difficulty=_text(book.get("difficulty"), DEFAULT_BOOK_DIFFICULTY),
                total_pages=_page_count(book.get("totalPages"), j),
            )
            for j, book in enumerate(raw_books if isinstance(raw_books, list) else [])
            if isinstance(book, dict)
        ]
        subtopic_id = raw.get("id")
        subtopics.append(
            PlanSubtopic(
                id=int(subtopic_id) if _is_number(subtopic_id) else i + 1,
                title=_text(raw.get("title"), f"Part {i + 1}"),
                description=_text(raw.get("description"), ""),
                books=books,
            )
        )

    return ReadingPlan(
        topic=_text(parsed.get("topic"), topic),
        estimated_time=_text(parsed.get("estimatedTime"), DEFAULT_ESTIMATED_TIME),
        difficulty=_text(parsed.get("difficulty"), DEFAULT_PLAN_DIFFICULTY),
        subtopics=subtopics,
    )


# ============================================================================
# Gateway
# ============================================================================


class RecommendationGateway:
    """Asks the text generation service for books and reading plans."""

    def __init__(self, client: Optional[ChatCompletionClient] = None):
        """Initialize gateway.

        Args:
            client: Chat completion client (default: built from config)
        """
        self.client = client or ChatCompletionClient.from_config()

    def search_books(self, query: str) -> BookSearchResult:
        """Find books matching a free-text query.

        Args:
            query: What the user is looking for

        Returns:
            BookSearchResult; when the answer has no usable records the book
            list is empty and ``raw_text`` holds the answer

        Raises:
            ValidationError: If the query is blank
            UpstreamServiceError: If the service call itself fails
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Query is required")
        query = query.strip()

        content = self.client.complete(
            SEARCH_PROMPT.format(query=query), temperature=0.8, max_tokens=1024
        )
        logger.debug("Book search raw content: %s", content)

        if not content:
            return BookSearchResult(books=[], raw_text="")

        parsed = parse_json_lenient(content, container=list)
        if parsed is None:
            logger.warning("Could not parse book search answer for %r", query)

        records = extract_book_records(parsed)
        if not records:
            return BookSearchResult(books=[], raw_text=content)

        return BookSearchResult(books=normalize_candidates(records, query))

    def reading_plan(self, topic: str) -> ReadingPlanResult:
        """Generate a reading plan for a topic.

        Raises:
            ValidationError: If the topic is blank
            UpstreamServiceError: If the service call itself fails
        """
        if not isinstance(topic, str) or not topic.strip():
            raise ValidationError("Topic is required")
        topic = topic.strip()

        content = self.client.complete(PLAN_PROMPT.format(topic=topic), temperature=0.7)
        logger.debug("Reading plan raw content: %s", content)

        parsed = parse_json_lenient(content, container=dict)
        if not isinstance(parsed, dict):
            logger.warning("Could not parse reading plan answer for %r", topic)
            return ReadingPlanResult(plan=None, raw_text=content)

        return ReadingPlanResult(plan=normalize_plan(parsed, topic))
