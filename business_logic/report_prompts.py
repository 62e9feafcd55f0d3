"""
Prompt and response-schema construction for marketing report generation.

Prompts are assembled from small tables keyed by input mode, media type and
report type so each axis can vary independently.
"""

from typing import Any, Dict

from models.data_models import InputMode, MediaType, ReportType


def _string() -> Dict[str, Any]:
    return {"type": "string"}


def _string_array() -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}}


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    # Strict structured outputs require every property listed as required
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties.keys()),
        "additionalProperties": False,
    }


def _array_of(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": _object(properties)}


RESPONSE_SCHEMA: Dict[str, Any] = _object({
    "show_info": _object({
        "title": _string(),
        "summary": _string(),
        "genre": _string(),
        "stars": _string_array(),
    }),
    "audience_profile": _object({
        "age_range": _string(),
        "locations": _string_array(),
        "average_income": _string(),
        "interests": _string_array(),
    }),
    "awards_strategy": {
        "anyOf": [
            _object({
                "priority_categories": _string_array(),
                "voter_narrative": _string(),
            }),
            {"type": "null"},
        ]
    },
    "competitor_analysis": _array_of({
        "title": _string(),
        "success": _string(),
        "reason": _string(),
    }),
    "marketing_plan": _object({
        "ad_placements": _string(),
        "social_strategy": _string(),
        "ad_buy_implementation": _string(),
        "cross_promotion_shows": _string_array(),
        "budget_breakdown": _array_of({
            "category": _string(),
            "percentage": {"type": "number"},
            "tactics": _string(),
        }),
        "marketing_events": _array_of({
            "title": _string(),
            "description": _string(),
            "category": _string(),
        }),
    }),
    "key_art_concepts": _array_of({
        "title": _string(),
        "description": _string(),
        "prompt": _string(),
    }),
})

RESPONSE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "name": "marketing_report",
    "schema": RESPONSE_SCHEMA,
    "strict": True,
}

MEDIA_NOUNS = {
    MediaType.TV: ("TV", "TV show"),
    MediaType.MOVIE: ("Film", "movie"),
}

MODE_INSTRUCTIONS = {
    InputMode.EXISTING: "Verify facts about the {noun} using web search. Use real cast, release and performance data.",
    InputMode.CONCEPT: "This is a new concept. Be creative and inventive.",
}

REPORT_INSTRUCTIONS = {
    ReportType.LAUNCH: """Your task is to generate a comprehensive launch marketing report for a {noun}.
Set 'awards_strategy' to null.""",
    ReportType.AWARDS: """Your task is to generate a For Your Consideration (FYC) awards campaign for a {noun}.
- In 'audience_profile', describe the awards VOTERS (guild and academy members) rather than consumers.
- In 'competitor_analysis', list the other contenders competing in the same categories this season.
- 'awards_strategy' is REQUIRED: give the priority categories to campaign in and a persuasive narrative for voters.
- Focus the marketing plan on screenings, trade ads, guild events and voter outreach.""",
}

PERSONAS = {
    ReportType.LAUNCH: "Marketing Executive",
    ReportType.AWARDS: "Awards Strategist",
}


def persona(media_type: MediaType, report_type: ReportType) -> str:
    """Executive persona, e.g. 'Film Awards Strategist'."""
    return f"{MEDIA_NOUNS[media_type][0]} {PERSONAS[report_type]}"


def build_system_prompt(input_mode: InputMode, media_type: MediaType,
                        report_type: ReportType) -> str:
    """
    Create the system instructions for a report.

    Args:
        input_mode: Whether facts should be verified or invented
        media_type: TV show or movie
        report_type: Launch campaign or awards campaign

    Returns:
        Formatted system prompt string
    """
    noun = MEDIA_NOUNS[media_type][1]
    return f"""You are a world-class {persona(media_type, report_type)}.
{REPORT_INSTRUCTIONS[report_type].format(noun=noun)}
{MODE_INSTRUCTIONS[input_mode].format(noun=noun)}

Output MUST be valid JSON matching the schema provided.
For 'budget_breakdown', ensure percentages sum to roughly 100.
For 'key_art_concepts', provide 3 distinct visual directions with detailed image generation prompts."""


def build_user_prompt(user_input: str, input_mode: InputMode, media_type: MediaType,
                      report_type: ReportType) -> str:
    noun = MEDIA_NOUNS[media_type][1]
    subject = f"existing {noun}" if input_mode == InputMode.EXISTING else f"new {noun} concept"
    goal = "an awards campaign" if report_type == ReportType.AWARDS else "a marketing strategy"
    return f"""Generate {goal} for the following {subject}:
"{user_input}"
"""
