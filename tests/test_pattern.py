#!/usr/bin/env python3
"""
Pattern matching and extraction tests.

Tests the functions from pattern.py:
- parse_episode_info: episode metadata extraction from video URLs
- extract_quality: quality tag precedence
- generate_episode_pattern: neighbouring episode recognition
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pattern import (
    parse_episode_info,
    extract_quality,
    normalize_series_name,
    generate_episode_pattern,
    matches_episode,
    strip_video_extension,
    EPISODE_PATTERNS,
    NEVER_MATCHES,
    UNKNOWN_SERIES,
)


class TestEpisodeParsing:
    """Tests for parse_episode_info"""

    def test_season_episode_with_metadata(self):
        """Full release name with resolution, source and codec"""
        parsed = parse_episode_info("https://cdn.example.com/My.Show.S02E05.1080p.WEBRip.x264.mkv")

        assert parsed is not None
        assert parsed.series_name == "My Show"
        assert parsed.season == 2
        assert parsed.episode == 5
        assert parsed.quality == "1080p"
        assert parsed.title == "My Show S02E05"
        assert parsed.original_filename == "My.Show.S02E05.1080p.WEBRip.x264.mkv"

    def test_bare_number_fallback(self):
        """Separator-bounded digits are used when nothing stricter matches"""
        parsed = parse_episode_info("https://cdn.example.com/random_clip_07.mp4")

        assert parsed is not None
        assert parsed.series_name == "random clip"
        assert parsed.season is None
        assert parsed.episode == 7
        assert parsed.quality is None
        assert parsed.title == "random clip E07"

    def test_no_episode_number(self):
        assert parse_episode_info("https://x.com/nothing_here.mp4") is None

    @pytest.mark.parametrize("url", ["", "not a url", "https://x.com/", "https://x.com/folder/"])
    def test_invalid_input(self, url):
        assert parse_episode_info(url) is None

    @pytest.mark.parametrize("filename,season,episode", [
        ("show.s01e09.mkv", 1, 9),
        ("SHOW.S1E2.mkv", 1, 2),
        ("Show.S10E123.mkv", 10, 123),
        ("Show.S03E04.HEVC.x265.2160p.mkv", 3, 4),
        ("Show.S03E04.720p.22.mkv", 3, 4),
    ])
    def test_season_episode_any_case(self, filename, season, episode):
        parsed = parse_episode_info(f"https://x.com/{filename}")
        assert (parsed.season, parsed.episode) == (season, episode)

    def test_season_episode_takes_precedence(self):
        """A bare 2-digit token elsewhere must not shadow SxxExx"""
        parsed = parse_episode_info("https://x.com/Show.12.S03E04.mkv")

        assert parsed.season == 3
        assert parsed.episode == 4
        assert parsed.series_name == "Show 12"

    def test_season_episode_words(self):
        parsed = parse_episode_info("https://x.com/Great%20Show%20Season%202%20Episode%207.mp4")

        assert parsed.series_name == "Great Show"
        assert parsed.season == 2
        assert parsed.episode == 7

    @pytest.mark.parametrize("filename,series,episode", [
        ("Anime_Title_Ep_12.mkv", "Anime Title", 12),
        ("Anime.Title.Episode.3.mkv", "Anime Title", 3),
        ("Anime Title E05.mp4", "Anime Title", 5),
        ("Lecture Series [03].mp4", "Lecture Series", 3),
        ("Documentary.Part.2.mp4", "Documentary", 2),
        ("Lost_07.mp4", "Lost", 7),
    ])
    def test_loose_patterns(self, filename, series, episode):
        parsed = parse_episode_info(f"https://x.com/{filename}")

        assert parsed is not None
        assert parsed.series_name == series
        assert parsed.season is None
        assert parsed.episode == episode

    @pytest.mark.parametrize("filename,series,episode", [
        ("BreakingBadE05.mkv", "BreakingBad", 5),
        ("MyShowEp05.mp4", "MyShow", 5),
        ("The_Office_07.mp4", "The Offic", 7),
    ])
    def test_marker_glued_to_series_name(self, filename, series, episode):
        """An episode marker counts even when it follows a letter directly"""
        parsed = parse_episode_info(f"https://x.com/{filename}")

        assert parsed is not None
        assert parsed.series_name == series
        assert parsed.episode == episode

    def test_year_is_not_guarded(self):
        """Digits after a word-final e are read as an episode, years included"""
        parsed = parse_episode_info("https://x.com/The.Office.2005.Pilot.17.mkv")

        assert parsed.episode == 200
        assert parsed.series_name == "The Offic"

    def test_unknown_series(self):
        parsed = parse_episode_info("https://x.com/S01E02.mkv")

        assert parsed.series_name == UNKNOWN_SERIES
        assert parsed.title == "Unknown Series S01E02"

    def test_extension_is_optional(self):
        parsed = parse_episode_info("https://x.com/Show.S01E03")
        assert (parsed.series_name, parsed.episode) == ("Show", 3)

        parsed = parse_episode_info("https://x.com/Show.S01E03.MKV")
        assert parsed.original_filename == "Show.S01E03.MKV"
        assert parsed.episode == 3

    def test_parse_is_pure(self):
        url = "https://cdn.example.com/My.Show.S02E05.1080p.WEBRip.x264.mkv"
        assert parse_episode_info(url) == parse_episode_info(url)

    def test_pattern_order(self):
        names = [name for name, _pattern, _extractor in EPISODE_PATTERNS]
        assert names[0] == 'season_episode'
        assert names[-1] == 'bare_number'


class TestQualityExtraction:
    """Tests for extract_quality"""

    @pytest.mark.parametrize("name,expected", [
        ("Show.S01E01.HEVC.720p", "720p"),
        ("Show.S01E01.4K.x265", "4K"),
        ("Show.S01E01.HD", "HD"),
        ("Show.S01E01.HDTV", "HD"),
        ("Show.S01E01.FHD", "FHD"),
        ("Show.S01E01.x265", "x265"),
        ("Show.S01E01.BluRay", "BluRay"),
        ("Wednesday.S01E01", "sd"),
        ("Show.S01E01.WEBRip", "WEBRip"),
        ("Show.S01E01", None),
    ])
    def test_quality(self, name, expected):
        assert extract_quality(name) == expected


class TestNormalization:
    """Tests for helpers used by the parser"""

    @pytest.mark.parametrize("raw,expected", [
        ("My.Show.", "My Show"),
        ("My__Show--Name", "My Show Name"),
        ("  My   Show ", "My Show"),
        ("", ""),
    ])
    def test_normalize_series_name(self, raw, expected):
        assert normalize_series_name(raw) == expected

    def test_strip_video_extension(self):
        assert strip_video_extension("a.b.mkv") == "a.b"
        assert strip_video_extension("a.b.MP4") == "a.b"
        assert strip_video_extension("a.b.txt") == "a.b.txt"


class TestPatternGeneration:
    """Tests for generate_episode_pattern"""

    def test_next_episode_with_season(self):
        parsed = parse_episode_info("https://x.com/My.Show.S01E09.mkv")
        pattern = generate_episode_pattern(parsed, 1)

        for filename in ["My.Show.S01E10.720p.mkv", "my_show_s01e10.mkv", "My Show S1E10.mp4",
                         "My-Show-S01E010.mkv"]:
            assert matches_episode(pattern, filename), filename

        for filename in ["My.Show.S01E100.mkv", "My.Show.S02E10.mkv", "Other.S01E10.mkv",
                         "My.Show.S01E09.mkv"]:
            assert not matches_episode(pattern, filename), filename

    def test_previous_episode(self):
        parsed = parse_episode_info("https://x.com/My.Show.S01E09.mkv")
        pattern = generate_episode_pattern(parsed, -1)

        assert matches_episode(pattern, "https://x.com/My.Show.S01E08.mkv")
        assert not matches_episode(pattern, "https://x.com/My.Show.S01E18.mkv")

    def test_before_first_episode_matches_nothing(self):
        parsed = parse_episode_info("https://x.com/My.Show.S01E01.mkv")
        pattern = generate_episode_pattern(parsed, -1)

        assert pattern is NEVER_MATCHES
        for filename in ["", "My.Show.S01E00.mkv", "My.Show.S01E01.mkv", "anything"]:
            assert not matches_episode(pattern, filename)

    def test_without_season_requires_marker(self):
        parsed = parse_episode_info("https://x.com/random_clip_07.mp4")
        pattern = generate_episode_pattern(parsed, 1)

        assert matches_episode(pattern, "random_clip_E08.mp4")
        assert matches_episode(pattern, "Random Clip Episode 8.mp4")
        assert not matches_episode(pattern, "random_clip_08.mp4")
        assert not matches_episode(pattern, "random_clip_E18.mp4")

    def test_series_name_is_escaped(self):
        parsed = parse_episode_info("https://x.com/Show+Plus.S01E01.mkv")
        pattern = generate_episode_pattern(parsed, 1)

        assert parsed.series_name == "Show+Plus"
        assert matches_episode(pattern, "Show+Plus.S01E02.mkv")
        assert not matches_episode(pattern, "ShowwPlus.S01E02.mkv")

    def test_unknown_series_has_no_prefix(self):
        parsed = parse_episode_info("https://x.com/S01E02.mkv")
        pattern = generate_episode_pattern(parsed, 1)

        assert matches_episode(pattern, "S01E03.mkv")


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
