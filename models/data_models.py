"""
Core data models for the AI Show Marketer application.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any


class ModelTier(Enum):
    """Quality/cost level selecting model capability and augmentation."""
    FAST = "fast"
    PRO = "pro"
    THINKING = "thinking"


class InputMode(Enum):
    """Whether the input describes an existing title or a new concept."""
    EXISTING = "existing"
    CONCEPT = "concept"


class MediaType(Enum):
    TV = "tv"
    MOVIE = "movie"


class ReportType(Enum):
    """General launch marketing or an awards-for-consideration campaign."""
    LAUNCH = "launch"
    AWARDS = "awards"


def _require(data: Dict[str, Any], key: str, kind: type, context: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{context} is not an object")
    if key not in data:
        raise ValueError(f"{context} missing required field: {key}")
    value = data[key]
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{context}.{key} is not a number")
        return float(value)
    if not isinstance(value, kind):
        raise ValueError(f"{context}.{key} is not a {kind.__name__}")
    return value


def _string_list(data: Dict[str, Any], key: str, context: str) -> List[str]:
    values = _require(data, key, list, context)
    return [str(item) for item in values]


def _object_list(data: Dict[str, Any], key: str, context: str) -> List[Dict[str, Any]]:
    values = _require(data, key, list, context)
    for i, item in enumerate(values):
        if not isinstance(item, dict):
            raise ValueError(f"{context}.{key}[{i}] is not an object")
    return values


@dataclass
class ShowInfo:
    """Identity of the show or movie the report is about."""
    title: str
    summary: str
    genre: str
    stars: List[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShowInfo":
        ctx = "show_info"
        return cls(
            title=str(_require(data, "title", str, ctx)),
            summary=str(_require(data, "summary", str, ctx)),
            genre=str(_require(data, "genre", str, ctx)),
            stars=_string_list(data, "stars", ctx),
        )


@dataclass
class AudienceProfile:
    """Target audience (or voter body, for awards reports)."""
    age_range: str
    locations: List[str]
    average_income: str
    interests: List[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudienceProfile":
        ctx = "audience_profile"
        return cls(
            age_range=str(_require(data, "age_range", str, ctx)),
            locations=_string_list(data, "locations", ctx),
            average_income=str(_require(data, "average_income", str, ctx)),
            interests=_string_list(data, "interests", ctx),
        )


@dataclass
class AwardsStrategy:
    """For-your-consideration block, only populated on awards reports."""
    priority_categories: List[str]
    voter_narrative: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AwardsStrategy":
        ctx = "awards_strategy"
        return cls(
            priority_categories=_string_list(data, "priority_categories", ctx),
            voter_narrative=str(_require(data, "voter_narrative", str, ctx)),
        )


@dataclass
class Competitor:
    title: str
    success: str
    reason: str


@dataclass
class BudgetItem:
    """Budget share for one category. Percentages are advisory."""
    category: str
    percentage: float
    tactics: str


@dataclass
class MarketingEvent:
    title: str
    description: str
    category: str


@dataclass
class MarketingPlan:
    """Channel plan, budget split and events."""
    ad_placements: str
    social_strategy: str
    ad_buy_implementation: str
    cross_promotion_shows: List[str]
    budget_breakdown: List[BudgetItem]
    marketing_events: List[MarketingEvent]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketingPlan":
        ctx = "marketing_plan"
        budget = []
        for i, item in enumerate(_object_list(data, "budget_breakdown", ctx)):
            item_ctx = f"{ctx}.budget_breakdown[{i}]"
            budget.append(BudgetItem(
                category=str(_require(item, "category", str, item_ctx)),
                percentage=_require(item, "percentage", float, item_ctx),
                tactics=str(_require(item, "tactics", str, item_ctx)),
            ))
        events = []
        for i, item in enumerate(_object_list(data, "marketing_events", ctx)):
            item_ctx = f"{ctx}.marketing_events[{i}]"
            events.append(MarketingEvent(
                title=str(_require(item, "title", str, item_ctx)),
                description=str(_require(item, "description", str, item_ctx)),
                category=str(_require(item, "category", str, item_ctx)),
            ))
        return cls(
            ad_placements=str(_require(data, "ad_placements", str, ctx)),
            social_strategy=str(_require(data, "social_strategy", str, ctx)),
            ad_buy_implementation=str(_require(data, "ad_buy_implementation", str, ctx)),
            cross_promotion_shows=_string_list(data, "cross_promotion_shows", ctx),
            budget_breakdown=budget,
            marketing_events=events,
        )


@dataclass
class KeyArtConcept:
    """Visual direction with an image prompt and optional rendered image."""
    title: str
    description: str
    prompt: str
    image_url: Optional[str] = None


@dataclass
class MarketingReport:
    """Structured marketing analysis produced for one show/movie query."""
    show_info: ShowInfo
    audience_profile: AudienceProfile
    competitor_analysis: List[Competitor]
    marketing_plan: MarketingPlan
    key_art_concepts: List[KeyArtConcept]
    awards_strategy: Optional[AwardsStrategy] = None
    grounding_urls: List[str] = field(default_factory=list)
    model_used: Optional[ModelTier] = None
    media_type: Optional[MediaType] = None
    report_type: Optional[ReportType] = None
    created_at: Optional[datetime] = None

    def budget_total(self) -> float:
        """Sum of budget percentages. Approximately 100, never guaranteed."""
        return sum(item.percentage for item in self.marketing_plan.budget_breakdown)

    @classmethod
    def _parse_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValueError("report is not an object")

        competitors = []
        for i, item in enumerate(_object_list(data, "competitor_analysis", "report")):
            ctx = f"competitor_analysis[{i}]"
            competitors.append(Competitor(
                title=str(_require(item, "title", str, ctx)),
                success=str(_require(item, "success", str, ctx)),
                reason=str(_require(item, "reason", str, ctx)),
            ))

        concepts = []
        for i, item in enumerate(_object_list(data, "key_art_concepts", "report")):
            ctx = f"key_art_concepts[{i}]"
            concepts.append(KeyArtConcept(
                title=str(_require(item, "title", str, ctx)),
                description=str(_require(item, "description", str, ctx)),
                prompt=str(_require(item, "prompt", str, ctx)),
                image_url=item.get("image_url"),
            ))

        awards = data.get("awards_strategy")
        created_at = data.get("created_at")

        return {
            "show_info": ShowInfo.from_dict(_require(data, "show_info", dict, "report")),
            "audience_profile": AudienceProfile.from_dict(
                _require(data, "audience_profile", dict, "report")
            ),
            "competitor_analysis": competitors,
            "marketing_plan": MarketingPlan.from_dict(
                _require(data, "marketing_plan", dict, "report")
            ),
            "key_art_concepts": concepts,
            "awards_strategy": AwardsStrategy.from_dict(awards) if awards else None,
            "grounding_urls": [str(url) for url in data.get("grounding_urls") or []],
            "model_used": ModelTier(data["model_used"]) if data.get("model_used") else None,
            # Entries saved before media/report types existed are TV launches
            "media_type": MediaType(data.get("media_type") or "tv"),
            "report_type": ReportType(data.get("report_type") or "launch"),
            "created_at": datetime.fromisoformat(created_at) if created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketingReport":
        """
        Build a report from parsed JSON, validating its shape.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        return cls(**cls._parse_fields(data))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe data."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            result[f.name] = _to_plain(getattr(self, f.name))
        return result


@dataclass
class HistoryItem(MarketingReport):
    """A persisted report with its unique identifier."""
    id: str = ""

    @classmethod
    def from_report(cls, report: MarketingReport, item_id: str,
                    created_at: datetime) -> "HistoryItem":
        values = {f.name: getattr(report, f.name) for f in fields(MarketingReport)}
        values["created_at"] = created_at
        return cls(id=item_id, **values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        values = cls._parse_fields(data)
        return cls(id=str(_require(data, "id", str, "history item")), **values)


@dataclass
class ChatMessage:
    """One ephemeral chat turn."""
    role: str  # "user" or "model"
    text: str


def _to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    return value
