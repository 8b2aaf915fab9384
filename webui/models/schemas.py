"""Pydantic schemas for API request/response models"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from model import Direction, ParsedEpisode


# Message schemas
class MessageRequest(BaseModel):
    type: str = Field(..., description="Message type, e.g. SCAN_SOURCE_PAGE")
    payload: Optional[Dict[str, Any]] = Field(default=None, description="Message payload")
    sender_tab_id: Optional[int] = Field(default=None, description="Tab the message originates from")


# Episode schemas
class EpisodeSchema(BaseModel):
    url: str
    title: str
    series_name: str
    season: Optional[int] = None
    episode: int
    quality: Optional[str] = None
    original_filename: str

    @classmethod
    def from_episode(cls, episode: ParsedEpisode) -> 'EpisodeSchema':
        return cls(
            url=episode.url,
            title=episode.title,
            series_name=episode.series_name,
            season=episode.season,
            episode=episode.episode,
            quality=episode.quality,
            original_filename=episode.original_filename
        )


class ParseEpisodeRequest(BaseModel):
    url: str = Field(..., description="Video URL")


class ParseEpisodeResponse(BaseModel):
    success: bool
    episode: Optional[EpisodeSchema] = None


class RelatedEpisodesRequest(BaseModel):
    current_url: str = Field(..., description="URL of the reference episode")
    candidate_urls: List[str] = Field(default_factory=list, description="Candidate video URLs")
    direction: Direction = Field(default=Direction.ALL, description="next, previous or all")


class RelatedEpisodesResponse(BaseModel):
    episodes: List[EpisodeSchema]


class AdjacentEpisodeRequest(BaseModel):
    current_url: str = Field(..., description="URL of the reference episode")
    candidate_urls: List[str] = Field(default_factory=list, description="Candidate video URLs")
    offset: int = Field(default=1, description="Episode offset, negative for earlier episodes")


class AdjacentEpisodeResponse(BaseModel):
    found: bool
    episode: Optional[EpisodeSchema] = None


# Tab schemas
class OpenTabRequest(BaseModel):
    url: str = Field(..., description="Page URL")
    html: Optional[str] = Field(default=None, description="Page HTML; fetched when omitted")
    title: str = Field(default="", description="Page title")
    referrer: str = Field(default="", description="Page referrer")
    detector_installed: bool = Field(default=True, description="Whether the page detector is already running")


class TabSchema(BaseModel):
    id: int
    url: str
    title: str = ""
    detector_installed: bool = False


class PlayLinkRequest(BaseModel):
    link_url: str = Field(..., description="Video link clicked in the tab")
