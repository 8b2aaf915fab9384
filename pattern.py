#!/usr/bin/env python3
"""
Pattern matching and extraction for StreamWatch
Provides functions for parsing episode metadata out of video URLs and for
building regular expressions that recognise neighbouring episodes.
"""

import logging
import re
from typing import Callable, List, Optional, Pattern, Tuple

from model import ParsedEpisode
from util import VIDEO_EXTENSIONS, extract_filename


logger = logging.getLogger('StreamWatch.pattern')

UNKNOWN_SERIES = 'Unknown Series'

# Quality indicators, tried in order; the first one found wins
# Format: (pattern, description)
QUALITY_PATTERNS = [
    (re.compile(r'(\d{3,4}p)', re.IGNORECASE), 'Resolution (720p, 1080p, 2160p)'),
    (re.compile(r'(4K|UHD)', re.IGNORECASE), 'Ultra HD'),
    (re.compile(r'(HD|SD|FHD)', re.IGNORECASE), 'Definition'),
    (re.compile(r'(x264|x265|HEVC|AVC)', re.IGNORECASE), 'Video codecs'),
    (re.compile(r'(BluRay|BRRip|WEBRip|HDTV|DVDRip)', re.IGNORECASE), 'Release source'),
]

EpisodeExtractor = Callable[['re.Match'], Tuple[Optional[int], int]]


def _season_and_episode(match) -> Tuple[Optional[int], int]:
    return int(match.group(1)), int(match.group(2))


def _episode_only(match) -> Tuple[Optional[int], int]:
    return None, int(match.group(1))


# Episode patterns in strict precedence order: (name, pattern, extractor).
# The first pattern found anywhere in the filename is used, so the season/episode
# forms always shadow the looser single-number forms further down.
EPISODE_PATTERNS: List[Tuple[str, Pattern, EpisodeExtractor]] = [
    # S01E01, s1e1
    ('season_episode', re.compile(r'[Ss](\d{1,2})[Ee](\d{1,3})'), _season_and_episode),
    # Season 1 Episode 1
    ('season_episode_words',
     re.compile(r'Season[\s._-]*(\d{1,2})[\s._-]*Episode[\s._-]*(\d{1,3})', re.IGNORECASE),
     _season_and_episode),
    # Episode 01, Ep01, EP_01, E01 (anywhere, also glued to the series name)
    ('episode_marker', re.compile(r'[Ee](?:pisode|p)?[\s._-]*(\d{1,3})'), _episode_only),
    # [01], (01)
    ('bracketed', re.compile(r'[\[(](\d{1,3})[\])]'), _episode_only),
    # Part 1, Part_1
    ('part', re.compile(r'[Pp]art[\s._-]*(\d{1,3})'), _episode_only),
    # -01, _01, .001 bounded by separators or the string edges
    ('bare_number', re.compile(r'(?:^|[\s._-])(\d{2,3})(?=[\s._-]|$)'), _episode_only),
]

# Separators that may appear between words of a series name in a filename
SEPARATOR = r'[\s._-]*'

# Matches nothing at all, not even the empty string
NEVER_MATCHES = re.compile(r'(?!)')


def strip_video_extension(filename: str) -> str:
    """Remove a known video extension from a filename (no-op if none matches)"""
    lowered = filename.lower()
    for ext in VIDEO_EXTENSIONS:
        if lowered.endswith(ext):
            return filename[:-len(ext)]
    return filename


def extract_quality(name: str) -> Optional[str]:
    """Return the first quality token found in a filename, if any"""
    for pattern, _description in QUALITY_PATTERNS:
        match = pattern.search(name)
        if match:
            return match.group(1)
    return None


def normalize_series_name(name: str) -> str:
    """Turn a raw filename prefix into a display series name"""
    name = re.sub(r'[._-]+', ' ', name)
    name = re.sub(r'\s+', ' ', name)
    return name.strip()


def match_episode(name: str) -> Optional[Tuple[str, int, Optional[int], int]]:
    """
    Find the episode token in an extension-less filename

    Returns:
        (pattern_name, match_start, season, episode) for the first pattern that
        matches, or None if no pattern matches
    """
    for pattern_name, pattern, extractor in EPISODE_PATTERNS:
        match = pattern.search(name)
        if match:
            season, episode = extractor(match)
            return pattern_name, match.start(), season, episode
    return None


def parse_episode_info(url: str) -> Optional[ParsedEpisode]:
    """
    Extract episode info from a video URL

    Args:
        url: Absolute URL of the video file

    Returns:
        ParsedEpisode, or None when no episode number can be recognised
    """
    filename = extract_filename(url)
    if not filename:
        logger.debug(f"No filename in URL: {url}")
        return None

    name_without_ext = strip_video_extension(filename)
    quality = extract_quality(name_without_ext)

    found = match_episode(name_without_ext)
    if found is None:
        logger.debug(f"Could not parse episode number: {filename}")
        return None

    pattern_name, start, season, episode = found
    series_name = normalize_series_name(name_without_ext[:start]) or UNKNOWN_SERIES

    parsed = ParsedEpisode(
        url=url,
        series_name=series_name,
        season=season,
        episode=episode,
        quality=quality,
        original_filename=filename,
    )
    logger.debug(f"Parsed '{filename}' via {pattern_name}: {parsed.title} (quality: {quality})")
    return parsed


def escape_series_name(series_name: str) -> str:
    """
    Build the regex fragment for a series name

    Each word is escaped with re.escape; the gaps between words accept any run
    of '.', '_', '-' or whitespace, so "My Show" also matches "My.Show" and "My_Show".
    An unknown series contributes no prefix at all.
    """
    if series_name == UNKNOWN_SERIES:
        return ''
    words = [word for word in re.split(r'[\s._-]+', series_name) if word]
    return SEPARATOR.join(re.escape(word) for word in words)


def generate_episode_pattern(parsed: ParsedEpisode, episode_offset: int) -> Pattern:
    """
    Generate a pattern recognising the filename of the episode at `episode_offset`

    Args:
        parsed: Reference episode
        episode_offset: Relative position of the wanted episode (may be negative)

    Returns:
        Case-insensitive compiled pattern; NEVER_MATCHES when the target episode
        would be before episode 1
    """
    target = parsed.episode + episode_offset
    if target < 1:
        return NEVER_MATCHES

    series = escape_series_name(parsed.series_name)
    forms = dict.fromkeys([str(target), f"{target:02d}", f"{target:03d}"])
    number = '(' + '|'.join(forms) + r')(?!\d)'

    if parsed.season is not None:
        pattern = f"{series}{SEPARATOR}[Ss]0?{parsed.season}[Ee]{number}"
    else:
        pattern = f"{series}{SEPARATOR}[Ee](?:pisode|p)?{SEPARATOR}{number}"

    return re.compile(pattern, re.IGNORECASE)


def matches_episode(pattern: Pattern, url_or_filename: str) -> bool:
    """Test a generated pattern against a URL (its filename) or a bare filename"""
    filename = extract_filename(url_or_filename) or url_or_filename
    return pattern.search(filename) is not None
