#!/usr/bin/env python3
"""
Tests for the video source registry
"""

import sys
import threading
import time
from pathlib import Path

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from registry import VideoSourceRegistry


VIDEO_URL = "https://example.com/files/Show.S01E01.mkv"


class TestVideoSourceRegistry:
    """Tests for VideoSourceRegistry"""

    def setup_method(self):
        self.registry = VideoSourceRegistry()

    def test_lookup_missing(self):
        assert self.registry.lookup(VIDEO_URL) is None
        assert VIDEO_URL not in self.registry

    def test_register_and_lookup(self):
        before = int(time.time() * 1000)
        record = self.registry.register(VIDEO_URL, "https://example.com/show", 4)

        stored = self.registry.lookup(VIDEO_URL)
        assert stored == record
        assert stored.source_url == "https://example.com/show"
        assert stored.source_tab_id == 4
        assert stored.registered_at >= before
        assert VIDEO_URL in self.registry

    def test_register_without_tab(self):
        self.registry.register(VIDEO_URL, "https://example.com/show")
        assert self.registry.lookup(VIDEO_URL).source_tab_id is None

    def test_register_overwrites(self):
        self.registry.register(VIDEO_URL, "https://example.com/old", 1)
        self.registry.register(VIDEO_URL, "https://example.com/new", 2)

        record = self.registry.lookup(VIDEO_URL)
        assert (record.source_url, record.source_tab_id) == ("https://example.com/new", 2)
        assert self.registry.size() == 1

    def test_keys_are_exact(self):
        self.registry.register(VIDEO_URL, "https://example.com/show")
        assert self.registry.lookup(VIDEO_URL + "?t=1") is None
        assert self.registry.lookup(VIDEO_URL.upper()) is None

    def test_clear(self):
        self.registry.register(VIDEO_URL, "https://example.com/show")
        self.registry.clear()
        assert self.registry.size() == 0

    def test_to_dict(self):
        record = self.registry.register(VIDEO_URL, "https://example.com/show", 9)
        assert record.to_dict() == {
            'sourceUrl': "https://example.com/show",
            'sourceTabId': 9,
            'timestamp': record.registered_at,
        }

    def test_concurrent_registration(self):
        def worker(start):
            for i in range(start, start + 100):
                self.registry.register(f"https://example.com/v{i}.mp4", "https://example.com/list", i)

        threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert self.registry.size() == 400


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
