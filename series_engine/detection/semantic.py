"""
Semantic series detection using a local LLM via Ollama.

Groups the titles the pattern detector could not place into implicit
series (shared theme, format or subject) and maps the model's index-based
answer back to VideoRecords.
"""
import asyncio
import logging
import math
from typing import List, Optional, Sequence

import ollama
from pydantic import BaseModel, Field

from ..analysis.models import SeriesGroup, VideoRecord

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "qwen2.5:7b"
MIN_UNCATEGORIZED = 5
MAX_PROMPT_VIDEOS = 100
MIN_SEMANTIC_SERIES_SIZE = 3

SYSTEM_PROMPT = (
    "You are a YouTube content analyst. Given a list of video titles from one "
    "channel, identify recurring content series or thematic groupings. "
    "A series is 3+ videos that share a common theme, format, or subject that "
    "the creator treats as a recurring concept, even if they don't formally name it. "
    "Only include groupings with 3+ videos, use clear descriptive series names, "
    "put each video in at most one series, and focus on recurring intent rather "
    "than keyword overlap. Respond in the exact JSON format requested."
)

DETECT_PROMPT_TEMPLATE = """\
Here are {count} video titles from a YouTube channel that don't match obvious title patterns.

Already-detected series (via pattern matching): {existing}

Videos:
{videos}

Identify implicit series/themes. Respond with JSON:
{{
  "series": [
    {{
      "name": "<descriptive series name>",
      "video_indices": [<index>, <index>, <index>],
      "confidence": "high" | "medium"
    }}
  ]
}}"""


class SemanticSeries(BaseModel):
    """One LLM-proposed series, referencing prompt line indices."""
    name: str
    video_indices: list[int]
    confidence: str = "medium"


class SemanticDetectionResult(BaseModel):
    """Structured LLM reply."""
    series: list[SemanticSeries] = Field(default_factory=list)


class SemanticDetectionError(Exception):
    """Raised when the LLM call or its reply parsing fails."""


def estimate_prompt_tokens(video_count: int) -> int:
    """Rough input token count for a detection prompt (~50 chars per title line)."""
    capped = min(video_count, MAX_PROMPT_VIDEOS)
    return math.ceil((400 + capped * 50) / 4)


def build_prompt(videos: Sequence[VideoRecord], existing_names: Sequence[str]) -> str:
    lines = "\n".join(
        f'{i}. "{v.title}" ({int(v.views or 0):,} views)' for i, v in enumerate(videos)
    )
    return DETECT_PROMPT_TEMPLATE.format(
        count=len(videos),
        existing=", ".join(existing_names) if existing_names else "None",
        videos=lines,
    )


def groups_from_result(
    result: SemanticDetectionResult, videos: Sequence[VideoRecord]
) -> List[SeriesGroup]:
    """Map index-based series back to records, dropping groups under 3 videos."""
    groups = []
    for s in result.series:
        resolved = [videos[i] for i in s.video_indices if 0 <= i < len(videos)]
        if len(resolved) < MIN_SEMANTIC_SERIES_SIZE:
            continue
        groups.append(SeriesGroup(
            name=s.name,
            videos=resolved,
            detection_method="semantic",
            confidence=s.confidence or "medium",
        ))
    return groups


class SemanticDetector:
    """Detects implicit series in uncategorized videos using a local LLM."""

    def __init__(self, model: str = DEFAULT_MODEL):
        self.model = model
        self.available = self.check_model()

    def check_model(self) -> bool:
        """Whether Ollama answers and lists this model (any tag of it counts)."""
        try:
            installed = [m.model for m in ollama.list().models]
        except Exception as e:
            logger.warning("Ollama unreachable at start-up: %s", e)
            return False

        family = self.model.split(":")[0]
        if self.model in installed or any(name.startswith(family) for name in installed):
            return True
        logger.warning("Model %s is not installed (have: %s)", self.model, installed)
        return False

    def _request(self, prompt: str) -> SemanticDetectionResult:
        response = ollama.chat(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            format=SemanticDetectionResult.model_json_schema(),
        )
        return SemanticDetectionResult.model_validate_json(response.message.content)

    async def detect(
        self,
        uncategorized: Sequence[VideoRecord],
        existing_names: Optional[Sequence[str]] = None,
    ) -> List[SeriesGroup]:
        """Propose semantic series for videos the pattern pass left over.

        Args:
            uncategorized: Videos with no pattern series.
            existing_names: Names of pattern series, given to the model as context.

        Returns:
            Semantic SeriesGroups of 3+ videos; [] when fewer than 5 videos.

        Raises:
            SemanticDetectionError: If the LLM call fails or returns invalid JSON.
        """
        if len(uncategorized) < MIN_UNCATEGORIZED:
            logger.info(
                "Skipping semantic detection: only %d uncategorized videos",
                len(uncategorized),
            )
            return []

        capped = list(uncategorized[:MAX_PROMPT_VIDEOS])
        prompt = build_prompt(capped, existing_names or [])
        if not self.available:
            logger.info("Model %s was not confirmed at start-up; trying anyway", self.model)

        try:
            result = await asyncio.to_thread(self._request, prompt)
        except Exception as e:
            raise SemanticDetectionError(f"Semantic detection failed: {e}") from e

        groups = groups_from_result(result, capped)
        logger.info(
            "Semantic detection: %d series from %d videos (model=%s)",
            len(groups), len(capped), self.model,
        )
        return groups
