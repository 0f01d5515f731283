"""
Title pattern series detection.

Three passes over the titles, each only seeing videos the earlier passes
left unassigned:
  1. Episode markers: "Name | Ep 5", "Ep 5 - Name", "Name Part 3", "Name #12"
  2. Bracketed prefixes: "[Name] ...", "(Name) ..."
  3. Recurring 2-5 word prefixes shared by 3+ videos (longest prefix first)

Groups that end up with fewer than 3 videos are dissolved back into the
uncategorized set, which feeds the semantic detector.
"""
import logging
import re
from typing import Dict, List, Sequence, Set, Tuple

from ..analysis.models import PatternDetectionResult, SeriesGroup, VideoRecord

logger = logging.getLogger(__name__)

MIN_PATTERN_SERIES_SIZE = 3
MIN_NAME_LENGTH = 3
PREFIX_WORDS = (2, 5)

_MARKER = r"(?:ep(?:isode)?\.?\s*\d+|part\s*\d+|#\d+)"

EPISODE_PATTERNS = [
    # "Series Name | Ep 5", "Title - Part 3", "Name - #12"
    re.compile(r"^(.+?)\s*[|\-–—]\s*" + _MARKER, re.IGNORECASE),
    # "Ep 5: Topic", "#12 - Topic"
    re.compile(r"^" + _MARKER + r"\s*[|\-–—:]\s*(.+)", re.IGNORECASE),
    # "Weekly Q&A #12", "Build Log Part 4"
    re.compile(r"^(.{5,}?)\s+" + _MARKER + r"\s*$", re.IGNORECASE),
]

BRACKET_PATTERN = re.compile(r"^\[([^\]]{3,})\]|^\(([^)]{3,})\)")


def clean_series_name(raw: str) -> str:
    """Strip dangling separators and collapse whitespace."""
    name = re.sub(r"[:\-–—|]\s*$", "", raw)
    name = re.sub(r"^\s*[:\-–—|]", "", name)
    return re.sub(r"\s+", " ", name).strip()


def _match_episode(title: str) -> Tuple[str, str]:
    """Return (series name, pattern source) for an episode-style title, or ('', '')."""
    for regex in EPISODE_PATTERNS:
        match = regex.match(title)
        if match:
            name = clean_series_name(match.group(1))
            if len(name) >= MIN_NAME_LENGTH:
                return name, regex.pattern
    return "", ""


def _prefix_candidates(
    videos: Sequence[VideoRecord], indices: Sequence[int]
) -> List[Tuple[str, List[int]]]:
    """Word prefixes shared by 3+ videos, longest first, then most shared."""
    prefixes: Dict[str, List[int]] = {}
    low, high = PREFIX_WORDS
    for idx in indices:
        words = videos[idx].title.split()[:6]
        for length in range(low, min(len(words), high) + 1):
            prefixes.setdefault(" ".join(words[:length]), []).append(idx)

    candidates = [
        (prefix, ids) for prefix, ids in prefixes.items()
        if len(ids) >= MIN_PATTERN_SERIES_SIZE
    ]
    candidates.sort(key=lambda item: (-len(item[0].split()), -len(item[1])))
    return candidates


def detect_series_by_pattern(videos: Sequence[VideoRecord]) -> PatternDetectionResult:
    """Group videos into series by title structure.

    Args:
        videos: Full video set.

    Returns:
        PatternDetectionResult with groups of 3+ videos and the uncategorized
        remainder, both in input order.
    """
    series: Dict[str, Dict] = {}
    assigned: Set[int] = set()

    def claim(name: str, pattern: str, idx: int) -> None:
        entry = series.setdefault(name, {"indices": [], "pattern": pattern})
        entry["indices"].append(idx)
        assigned.add(idx)

    titled = [i for i, v in enumerate(videos) if v.title]

    # Pass 1: explicit episode markers
    for idx in titled:
        name, pattern = _match_episode(videos[idx].title)
        if name:
            claim(name, pattern, idx)

    # Pass 2: bracketed prefixes
    for idx in titled:
        if idx in assigned:
            continue
        match = BRACKET_PATTERN.match(videos[idx].title)
        if match:
            claim(clean_series_name(match.group(1) or match.group(2)), "bracket_prefix", idx)

    # Pass 3: recurring title prefixes
    unassigned = [i for i in titled if i not in assigned]
    for prefix, ids in _prefix_candidates(videos, unassigned):
        free = [i for i in ids if i not in assigned]
        if len(free) >= MIN_PATTERN_SERIES_SIZE:
            for idx in free:
                claim(clean_series_name(prefix), f'prefix: "{prefix}"', idx)

    groups = []
    kept: Set[int] = set()
    for name, entry in series.items():
        if len(entry["indices"]) < MIN_PATTERN_SERIES_SIZE:
            continue
        kept.update(entry["indices"])
        groups.append(SeriesGroup(
            name=name,
            videos=[videos[i] for i in entry["indices"]],
            detection_method="pattern",
            pattern=entry["pattern"],
        ))

    uncategorized = [v for i, v in enumerate(videos) if i not in kept]
    logger.info(
        "Pattern detection: %d series covering %d videos, %d uncategorized",
        len(groups), len(kept), len(uncategorized),
    )
    return PatternDetectionResult(pattern_series=groups, uncategorized=uncategorized)
