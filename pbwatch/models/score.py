"""Score models consumed from the osu! API and persisted between runs.

Only the subset of the API score object that the watcher reads is modelled;
every other field is ignored on validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ScoreMod(BaseModel):
    acronym: str


class ScoreBeatmap(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    beatmapset_id: int | None = None
    version: str = ""


class ScoreBeatmapset(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    artist: str = ""
    title: str = ""
    creator: str = ""


class RawScore(BaseModel):
    """One play as returned by the `scores/recent` or `scores/best` endpoints.

    Both the current score shape (`ended_at`, `mods: [{"acronym": ...}]`,
    `classic_total_score`) and the legacy one (`created_at`, `mods: [str]`,
    `score`) are accepted.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    pp: float | None = None
    ended_at: datetime = Field(validation_alias=AliasChoices("ended_at", "created_at"))
    rank: str = ""
    mods: list[ScoreMod] = Field(default_factory=list)
    total_score: int | None = Field(default=None, validation_alias=AliasChoices("classic_total_score", "score"))
    beatmap_id: int | None = None
    beatmap: ScoreBeatmap | None = None
    beatmapset: ScoreBeatmapset | None = None

    @field_validator("mods", mode="before")
    @classmethod
    def normalize_mods(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"acronym": mod} if isinstance(mod, str) else mod for mod in v]
        return v

    @property
    def mod_acronyms(self) -> list[str]:
        return [mod.acronym for mod in self.mods]

    @property
    def resolved_beatmap_id(self) -> int | None:
        if self.beatmap is not None:
            return self.beatmap.id
        return self.beatmap_id

    @property
    def resolved_beatmapset_id(self) -> int | None:
        if self.beatmap is not None and self.beatmap.beatmapset_id is not None:
            return self.beatmap.beatmapset_id
        if self.beatmapset is not None:
            return self.beatmapset.id
        return None

    @property
    def title(self) -> str:
        return self.beatmapset.title if self.beatmapset else ""

    @property
    def artist(self) -> str:
        return self.beatmapset.artist if self.beatmapset else ""

    @property
    def creator(self) -> str:
        return self.beatmapset.creator if self.beatmapset else ""

    @property
    def diff_name(self) -> str:
        return self.beatmap.version if self.beatmap else ""


class ScoreCursor(BaseModel):
    """The last seen score, stored as JSON under the cursor key.

    The field names are kept compatible with cursors written by earlier
    deployments. Every field is optional so a cursor that only carries a
    timestamp still loads.
    """

    model_config = ConfigDict(extra="ignore")

    created_at: datetime | None = None
    score: int | None = None
    mod_acronyms: list[str] = Field(default_factory=list)
    rank: str = ""
    id: int | None = None
    pp: float | None = None
    beatmap_id: int | None = None
    beatmapset_id: int | None = None
    diff_name: str = ""
    artist: str = ""
    set_mapper: str = ""
    title: str = ""
    digest: str | None = None

    @classmethod
    def from_score(cls, score: RawScore) -> ScoreCursor:
        return cls(
            created_at=score.ended_at,
            score=score.total_score,
            mod_acronyms=score.mod_acronyms,
            rank=score.rank,
            id=score.id,
            pp=score.pp,
            beatmap_id=score.resolved_beatmap_id,
            beatmapset_id=score.resolved_beatmapset_id,
            diff_name=score.diff_name,
            artist=score.artist,
            set_mapper=score.creator,
            title=score.title,
        )


class Announcement(BaseModel):
    """A score confirmed as a personal best, with its 1-based rank.

    `content` and `delivered` are filled in by the announcer.
    """

    score: RawScore
    rank: int
    content: str | None = None
    delivered: bool = False
