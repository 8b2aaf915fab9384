#!/usr/bin/env python3
"""
Thread-safe in-memory registry of video source pages
Remembers on which page (and tab) each opened video link was found, so the page
can be scanned again later for sibling episodes.
"""

import threading
import time
from typing import Dict, Optional

from model import VideoSourceRecord


class VideoSourceRegistry:
    """Maps a video URL to the page it was discovered on"""

    def __init__(self):
        """
        Initialize the registry

        Entries never expire; the registry lives as long as the process.
        """
        self._records: Dict[str, VideoSourceRecord] = {}
        self._lock = threading.Lock()

    def register(self, video_url: str, source_url: str,
                 source_tab_id: Optional[int] = None) -> VideoSourceRecord:
        """
        Store (or overwrite) the source page of a video

        Args:
            video_url: URL of the video file
            source_url: URL of the page the link was found on
            source_tab_id: Tab hosting that page, if known

        Returns:
            The freshly stored record
        """
        record = VideoSourceRecord(
            source_url=source_url,
            source_tab_id=source_tab_id,
            registered_at=int(time.time() * 1000),
        )
        with self._lock:
            self._records[video_url] = record
        return record

    def lookup(self, video_url: str) -> Optional[VideoSourceRecord]:
        """Get the source record of a video, None if it was never registered"""
        with self._lock:
            return self._records.get(video_url)

    def clear(self) -> None:
        """Clear all records"""
        with self._lock:
            self._records.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, video_url: str) -> bool:
        with self._lock:
            return video_url in self._records
