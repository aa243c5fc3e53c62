from __future__ import annotations

from .score import (
    Announcement,
    RawScore,
    ScoreBeatmap,
    ScoreBeatmapset,
    ScoreCursor,
    ScoreMod,
)

__all__ = [
    "Announcement",
    "RawScore",
    "ScoreBeatmap",
    "ScoreBeatmapset",
    "ScoreCursor",
    "ScoreMod",
]
