#!/usr/bin/env python3
"""
Series matching tests.

Tests the functions from matcher.py:
- levenshtein_similarity / is_same_series: series name comparison
- find_related_episodes: filtering and ordering of sibling episodes
- find_adjacent_episode: neighbour lookup through generated patterns
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from matcher import (
    levenshtein_similarity,
    normalize_series_key,
    is_same_series,
    find_related_episodes,
    find_adjacent_episode,
)
from model import Direction
from pattern import normalize_series_name


BASE = "https://cdn.example.com/tv/"


def urls(*filenames):
    return [BASE + name for name in filenames]


class TestSimilarity:
    """Tests for levenshtein_similarity and is_same_series"""

    def test_same_name_different_separators(self):
        a = normalize_series_key("the office")
        b = normalize_series_key(normalize_series_name("The.Office"))
        assert levenshtein_similarity(a, b) == pytest.approx(1.0)

    def test_different_series(self):
        assert levenshtein_similarity("the office", "breaking bad") < 0.3

    def test_edge_values(self):
        assert levenshtein_similarity("", "") == 1.0
        assert levenshtein_similarity("abc", "") == 0.0
        assert levenshtein_similarity("", "abc") == 0.0
        assert levenshtein_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_symmetric(self):
        assert levenshtein_similarity("breakingbad", "brakingbad") == levenshtein_similarity("brakingbad", "breakingbad")

    @pytest.mark.parametrize("a,b,expected", [
        ("My Show", "my  show", True),
        ("Show", "The Show", True),
        ("Breaking Bad", "Braking Bad", True),
        ("My Show", "Other Show", False),
        ("Unknown Series", "Unknown Series", True),
        ("", "Show", False),
    ])
    def test_is_same_series(self, a, b, expected):
        assert is_same_series(a, b) is expected


class TestFindRelatedEpisodes:
    """Tests for find_related_episodes"""

    def setup_method(self):
        self.current = BASE + "My.Show.S01E03.mkv"
        self.candidates = urls(
            "My.Show.S01E04.mkv",
            "My.Show.S01E02.mkv",
            "My.Show.S02E01.mkv",
            "OtherShow.S01E04.mkv",
        )

    def test_next(self):
        related = find_related_episodes(self.current, self.candidates, 'next')
        assert [e.url for e in related] == [BASE + "My.Show.S01E04.mkv"]

    def test_previous(self):
        related = find_related_episodes(self.current, self.candidates, Direction.PREVIOUS)
        assert [e.url for e in related] == [BASE + "My.Show.S01E02.mkv"]

    def test_all_sorted(self):
        related = find_related_episodes(self.current, self.candidates + [self.current], 'all')
        assert [(e.season, e.episode) for e in related] == [(1, 2), (1, 4)]

    def test_direction_never_crosses_reference(self):
        candidates = urls(*[f"My.Show.S01E{n:02d}.mkv" for n in range(1, 8)])
        for episode in find_related_episodes(self.current, candidates, 'next'):
            assert episode.episode > 3
        for episode in find_related_episodes(self.current, candidates, 'previous'):
            assert episode.episode < 3

    def test_season_only_filters_when_both_known(self):
        current = BASE + "Show.E05.mkv"
        candidates = urls("Show.S02E01.mkv", "Show.S01E07.mkv", "Show.E09.mkv", "Show.E02.mkv")

        related = find_related_episodes(current, candidates, 'all')

        assert [(e.season, e.episode) for e in related] == [(None, 2), (None, 9), (1, 7), (2, 1)]

    def test_quality_mismatch_excluded(self):
        current = BASE + "Show.S01E01.1080p.mkv"
        candidates = urls("Show.S01E02.720p.mkv", "Show.S01E03.1080P.mkv", "Show.S01E04.mkv")

        related = find_related_episodes(current, candidates, 'next')

        assert [e.episode for e in related] == [3, 4]

    def test_glued_episode_marker(self):
        current = BASE + "MyShowEp05.mp4"
        candidates = urls("MyShowEp06.mp4", "MyShowEp04.mp4")

        related = find_related_episodes(current, candidates, 'next')

        assert [e.episode for e in related] == [6]

    def test_source_tag_shares_definition_quality(self):
        current = BASE + "Show.S01E01.HDTV.mkv"
        candidates = urls("Show.S01E02.HD.mkv", "Show.S01E03.SD.mkv")

        related = find_related_episodes(current, candidates, 'next')

        assert [(e.episode, e.quality) for e in related] == [(2, "HD")]

    def test_unparseable_reference(self):
        assert find_related_episodes(BASE + "nothing_here.mp4", self.candidates) == []

    def test_unparseable_candidates_skipped(self):
        candidates = self.candidates + urls("readme.mp4", "") + ["not a url"]
        related = find_related_episodes(self.current, candidates, 'all')
        assert len(related) == 2

    def test_threshold(self):
        current = BASE + "Breaking.Bad.S01E01.mkv"
        candidates = urls("Braking.Bad.S01E02.mkv")

        assert len(find_related_episodes(current, candidates, 'next')) == 1
        assert find_related_episodes(current, candidates, 'next', threshold=0.95) == []


class TestFindAdjacentEpisode:
    """Tests for find_adjacent_episode"""

    def setup_method(self):
        self.current = BASE + "My.Show.S01E03.mkv"
        self.candidates = urls("My.Show.S01E05.mkv", "My.Show.S01E04.mkv", "My.Show.S01E02.mkv")

    def test_next(self):
        assert find_adjacent_episode(self.current, self.candidates, 1).episode == 4

    def test_previous(self):
        assert find_adjacent_episode(self.current, self.candidates, -1).episode == 2

    def test_missing(self):
        assert find_adjacent_episode(self.current, self.candidates, 5) is None
        assert find_adjacent_episode(self.current, self.candidates, -3) is None

    def test_glued_episode_marker(self):
        current = BASE + "BreakingBadE05.mkv"
        candidates = urls("BreakingBadE07.mkv", "BreakingBadE06.mkv")

        assert find_adjacent_episode(current, candidates, 1).url == BASE + "BreakingBadE06.mkv"

    def test_unparseable_reference(self):
        assert find_adjacent_episode(BASE + "nothing_here.mp4", self.candidates) is None


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
