"""
Load video performance exports (CSV or JSON) into VideoRecords.

Accepts the column names of common analytics exports and normalizes
percent-scale CTR/retention to fractions. Missing metrics stay None so
they never count as zero in the channel baseline.
"""
import logging
import os
from typing import Dict, List, Optional

import pandas as pd

from ..analysis.models import VideoRecord

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, List[str]] = {
    "title": ["title", "video_title", "Video title"],
    "views": ["views", "view_count", "Views"],
    "ctr": ["ctr", "impressions_ctr", "Impressions click-through rate (%)"],
    "retention": ["retention", "avg_view_percentage", "Average percentage viewed (%)"],
    "subscribers": ["subscribers", "subscribers_gained", "Subscribers"],
    "publish_date": ["publishDate", "publish_date", "published_at", "Video publish time"],
    "video_id": ["video_id", "youtubeVideoId", "Content"],
}


def _resolve_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename the first matching alias of each field to its canonical name."""
    renames = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in df.columns:
                renames[alias] = canonical
                break
    return df.rename(columns=renames)


def _fraction(series: pd.Series) -> pd.Series:
    """Coerce to numeric and scale percent values (> 1) down to fractions."""
    values = pd.to_numeric(series, errors="coerce")
    return values.where(values <= 1, values / 100)


def _optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def read_table(path: str) -> pd.DataFrame:
    """Read a CSV or JSON export into a DataFrame."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        return pd.read_csv(path)
    if ext == ".json":
        return pd.read_json(path)
    raise ValueError(f"Unsupported input format '{ext}' (expected .csv or .json)")


def frame_to_videos(df: pd.DataFrame) -> List[VideoRecord]:
    """Convert an export DataFrame to VideoRecords."""
    df = _resolve_columns(df)
    if "title" not in df.columns:
        raise ValueError("Input has no title column")

    df = df[df["title"].notna() & (df["title"].astype(str).str.strip() != "")].copy()

    if "views" in df:
        df["views"] = pd.to_numeric(df["views"], errors="coerce").fillna(0).clip(lower=0)
    else:
        df["views"] = 0.0
    df["ctr"] = _fraction(df["ctr"]) if "ctr" in df else None
    df["retention"] = _fraction(df["retention"]) if "retention" in df else None
    if "subscribers" in df:
        df["subscribers"] = pd.to_numeric(df["subscribers"], errors="coerce").fillna(0)
    else:
        df["subscribers"] = 0
    if "publish_date" in df:
        dates = pd.to_datetime(df["publish_date"], errors="coerce", utc=True)
        df["publish_date"] = dates.dt.tz_convert(None)
    else:
        df["publish_date"] = pd.NaT

    videos = []
    for row in df.to_dict("records"):
        publish_date = row.get("publish_date")
        video_id = row.get("video_id")
        videos.append(VideoRecord(
            title=str(row["title"]).strip(),
            views=float(row["views"]),
            ctr=_optional_float(row.get("ctr")),
            retention=_optional_float(row.get("retention")),
            subscribers=int(row["subscribers"]),
            publish_date=None if pd.isna(publish_date) else publish_date.to_pydatetime(),
            video_id=None if video_id is None or pd.isna(video_id) else str(video_id),
        ))
    return videos


def load_videos(path: str) -> List[VideoRecord]:
    """
    Load a video export file.

    Args:
        path: Path to a .csv or .json file

    Returns:
        List of VideoRecords in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported or there is no title column
    """
    videos = frame_to_videos(read_table(path))
    logger.info("Loaded %d videos from %s", len(videos), path)
    return videos
