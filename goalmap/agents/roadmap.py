# goalmap/agents/roadmap.py
import json
import math
import re
from typing import Any

from pydantic import ValidationError

from goalmap.agents.llm.base import LLMClient
from goalmap.agents.schemas import RoadmapDraft, StrictRoadmap
from goalmap.errors import MalformedOutput
from goalmap.logging import get_logger

logger = get_logger(__name__)

ROADMAP_WEEKS = 12

_LEADING_FENCE = re.compile(r"^```json\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```\s*$", re.IGNORECASE)


def build_roadmap_prompt(goal: str) -> str:
    # goal is embedded verbatim; nothing guards against instructions hidden in it
    return (
        f'Generate a {ROADMAP_WEEKS}-week learning roadmap for the goal: "{goal}". '
        'Return a valid JSON object with the structure: '
        '{"level":"beginner|intermediate|advanced","weeks":[{"week":1,"topics":["topic1","topic2"]},'
        f'...,{{"week":{ROADMAP_WEEKS},"topics":["topicN"]}}]}} as plain text. '
        "Do not include markdown, code fences (like ```json or ```), or any additional "
        "text before or after the JSON object."
    )


def request_roadmap(llm: LLMClient, prompt: str, temperature: float = 0.2) -> str:
    """Single user message in, raw provider text out. Provider errors propagate."""
    return llm.generate_text(
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
    )


def sanitize_output(raw: str) -> str:
    cleaned = raw.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _reject_constant(name: str) -> Any:
    # JSON has no NaN or Infinity literals
    raise ValueError(f"Unexpected token {name} in JSON")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def parse_roadmap(raw: str) -> RoadmapDraft:
    """Sanitize provider text and check it has the roadmap shape.

    Raises MalformedOutput carrying the json error message when the text does
    not parse, or "Invalid JSON structure" when level/weeks are missing or
    wrong-shaped.
    """
    cleaned = sanitize_output(raw)

    try:
        parsed = json.loads(cleaned, parse_constant=_reject_constant, parse_float=_parse_float)
    except (ValueError, RecursionError) as e:
        # ValueError also covers JSONDecodeError and over-long integer literals
        logger.warning("Roadmap output is not JSON", error=str(e), content_preview=cleaned[:200])
        raise MalformedOutput(str(e)) from e

    if not isinstance(parsed, dict):
        raise MalformedOutput("Invalid JSON structure")

    try:
        return RoadmapDraft.model_validate(
            {"level": parsed.get("level"), "weeks": parsed.get("weeks")}
        )
    except ValidationError as e:
        logger.warning("Roadmap output has wrong shape", errors=e.errors(include_url=False))
        raise MalformedOutput("Invalid JSON structure") from e


def validate_strict(draft: RoadmapDraft) -> StrictRoadmap:
    """Full schema check: 12 weeks numbered 1..12, known level, non-empty topics.

    Not part of the generation pipeline; callers opt in explicitly.
    """
    try:
        roadmap = StrictRoadmap.model_validate(draft.model_dump())
    except ValidationError as e:
        raise MalformedOutput(f"Roadmap does not match schema: {e.error_count()} errors") from e

    nums = [w.week for w in roadmap.weeks]
    if nums != list(range(1, ROADMAP_WEEKS + 1)):
        raise MalformedOutput(f"Week numbers must be exactly 1..{ROADMAP_WEEKS} in order, got {nums}")
    return roadmap
