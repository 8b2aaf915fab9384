#!/usr/bin/env python3
"""
Data models for StreamWatch
Defines the structures exchanged between the episode parser, the page detector
and the background scan orchestrator.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class Direction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    ALL = "all"


@dataclass
class ParsedEpisode:
    """Structural episode metadata extracted from a single video URL"""
    url: str
    series_name: str
    episode: int
    original_filename: str
    season: Optional[int] = None
    quality: Optional[str] = None
    title: str = ""

    def __post_init__(self):
        if not self.title:
            if self.season is not None:
                self.title = f"{self.series_name} S{self.season:02d}E{self.episode:02d}"
            else:
                self.title = f"{self.series_name} E{self.episode:02d}"

    @property
    def sort_key(self):
        return (self.season or 0, self.episode)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'title': self.title,
            'seriesName': self.series_name,
            'season': self.season,
            'episode': self.episode,
            'quality': self.quality,
            'originalFilename': self.original_filename,
        }


@dataclass
class VideoSourceRecord:
    """Where a video link was discovered (kept in memory for the process lifetime)"""
    source_url: str
    registered_at: int  # epoch milliseconds
    source_tab_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sourceUrl': self.source_url,
            'sourceTabId': self.source_tab_id,
            'timestamp': self.registered_at,
        }


@dataclass
class VideoLinkInfo:
    """One video-like anchor found on a page"""
    url: str
    text: str = ""
    title: str = ""
    filename: str = ""
    nearby_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'text': self.text,
            'title': self.title,
            'filename': self.filename,
            'nearbyText': self.nearby_text,
        }


@dataclass
class PageInfo:
    """Descriptor of a page as seen by the in-page detector"""
    url: str
    title: str = ""
    referrer: str = ""


@dataclass
class Tab:
    """A browser tab known to the host"""
    id: int
    url: str
    title: str = ""


@dataclass
class ScanResult:
    """Outcome of scanning the source page of a video"""
    success: bool
    video_url: str
    all_links: List[Dict[str, Any]] = field(default_factory=list)
    page_url: Optional[str] = None
    page_title: Optional[str] = None
    source_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def link_urls(self) -> List[str]:
        return [link['url'] for link in self.all_links if link.get('url')]

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            data = {'success': False, 'error': self.error, 'videoUrl': self.video_url}
            if self.source_url:
                data['sourceUrl'] = self.source_url
            return data
        return {
            'success': True,
            'videoUrl': self.video_url,
            'allLinks': self.all_links,
            'pageUrl': self.page_url,
            'pageTitle': self.page_title,
        }
