"""
Merge pattern-detected and semantic series groups.

Pattern groups are authoritative. A semantic group is accepted only when at
most half of its videos are already claimed by an accepted group; a redundant
group is discarded outright, never unioned into the group it overlaps.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Set

from .models import SeriesGroup

logger = logging.getLogger(__name__)

MERGE_SETTINGS = {
    "max_overlap": 0.5,        # discard semantic groups above this share
    "min_series_size": 2,
    "max_series_share": 0.75,  # of the whole channel
}


@dataclass
class MergeResult:
    """Retained groups plus the semantic groups accepted before size filtering."""
    groups: List[SeriesGroup] = field(default_factory=list)
    accepted_semantic: List[SeriesGroup] = field(default_factory=list)
    discarded_semantic: List[SeriesGroup] = field(default_factory=list)


def overlap_fraction(group: SeriesGroup, claimed_titles: Set[str]) -> float:
    """Share of a group's videos whose titles are already claimed."""
    if not group.videos:
        return 0.0
    overlap = sum(1 for v in group.videos if v.title in claimed_titles)
    return overlap / len(group.videos)


def is_valid_series_size(size: int, total_video_count: int) -> bool:
    """Check the size bounds that separate a series from a singleton or the whole channel."""
    return (
        size >= MERGE_SETTINGS["min_series_size"]
        and size <= total_video_count * MERGE_SETTINGS["max_series_share"]
    )


def merge_series_groups(
    pattern_groups: Sequence[SeriesGroup],
    semantic_groups: Sequence[SeriesGroup],
    total_video_count: int,
) -> MergeResult:
    """Combine detector outputs into one deduplicated, size-filtered list.

    Semantic groups are tested in input order against everything accepted so
    far, so an earlier semantic group can make a later one redundant.

    Args:
        pattern_groups: Groups from the title pattern detector (always kept).
        semantic_groups: Candidate groups from the semantic detector.
        total_video_count: Size of the full dataset, for the upper size bound.

    Returns:
        MergeResult with retained groups in deterministic order.
    """
    merged: List[SeriesGroup] = list(pattern_groups)
    claimed: Set[str] = {title for g in merged for title in g.titles}
    result = MergeResult()

    for group in semantic_groups:
        fraction = overlap_fraction(group, claimed)
        if fraction > MERGE_SETTINGS["max_overlap"]:
            logger.debug(
                "Discarding semantic group '%s' (overlap=%.0f%%)",
                group.name, fraction * 100,
            )
            result.discarded_semantic.append(group)
            continue
        merged.append(group)
        result.accepted_semantic.append(group)
        claimed.update(group.titles)

    result.groups = [
        g for g in merged if is_valid_series_size(len(g.videos), total_video_count)
    ]

    logger.info(
        "Merged %d pattern + %d semantic groups -> %d retained (%d semantic discarded)",
        len(pattern_groups),
        len(semantic_groups),
        len(result.groups),
        len(result.discarded_semantic),
    )
    return result
