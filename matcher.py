#!/usr/bin/env python3
"""
Series matching for StreamWatch
Decides which candidate URLs belong to the same series as a reference episode
and orders them relative to it.
"""

import logging
import re
from typing import Iterable, List, Optional, Union

from rapidfuzz.distance import Levenshtein

from model import Direction, ParsedEpisode
from pattern import parse_episode_info, generate_episode_pattern, matches_episode


logger = logging.getLogger('StreamWatch.matcher')

# Names scoring above this are treated as the same series
SIMILARITY_THRESHOLD = 0.8


def levenshtein_similarity(a: str, b: str) -> float:
    """Normalised edit-distance similarity in [0, 1]: 1 - distance / max(len(a), len(b))"""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len(a), len(b))


def normalize_series_key(name: str) -> str:
    """Lower-case a series name and drop all whitespace"""
    return re.sub(r'\s+', '', name.lower())


def is_same_series(a: str, b: str, threshold: float = SIMILARITY_THRESHOLD) -> bool:
    """
    Check whether two series names refer to the same series

    Names match when equal after normalisation, when one contains the other,
    or when their similarity is above the threshold.
    """
    key_a = normalize_series_key(a)
    key_b = normalize_series_key(b)
    if key_a == key_b:
        return True
    if key_a and key_b and (key_a in key_b or key_b in key_a):
        return True
    return levenshtein_similarity(key_a, key_b) > threshold


def find_related_episodes(current_url: str, all_urls: Iterable[str],
                          direction: Union[Direction, str] = Direction.ALL,
                          threshold: float = SIMILARITY_THRESHOLD) -> List[ParsedEpisode]:
    """
    Find episodes of the same series among a list of URLs

    Args:
        current_url: URL of the reference episode
        all_urls: Candidate URLs (typically every video link on the source page)
        direction: 'next', 'previous' or 'all'
        threshold: Series name similarity threshold

    Returns:
        Matching episodes sorted by (season, episode); empty when the reference
        URL itself cannot be parsed
    """
    direction = Direction(direction)
    current = parse_episode_info(current_url)
    if current is None:
        logger.debug(f"Could not parse current episode: {current_url}")
        return []

    all_urls = list(all_urls)
    logger.info(
        f"Finding related episodes for '{current.series_name}' "
        f"E{current.episode} ({direction.value}, {len(all_urls)} candidates)"
    )

    related: List[ParsedEpisode] = []
    for url in all_urls:
        if url == current_url:
            continue

        parsed = parse_episode_info(url)
        if parsed is None:
            continue

        if not is_same_series(current.series_name, parsed.series_name, threshold):
            continue

        # Season only filters when both sides know it
        if current.season is not None and parsed.season is not None:
            if current.season != parsed.season:
                continue

        if direction is Direction.NEXT and parsed.episode <= current.episode:
            continue
        if direction is Direction.PREVIOUS and parsed.episode >= current.episode:
            continue

        # Prefer the same release quality when both sides carry one
        if current.quality and parsed.quality and current.quality.lower() != parsed.quality.lower():
            continue

        related.append(parsed)

    related.sort(key=lambda episode: episode.sort_key)

    logger.info(
        f"Found {len(related)} related episodes: "
        + ', '.join(f"S{e.season if e.season is not None else '?'}E{e.episode}" for e in related)
    )
    return related


def find_adjacent_episode(current_url: str, all_urls: Iterable[str],
                          offset: int = 1) -> Optional[ParsedEpisode]:
    """
    Find the episode `offset` positions away from the current one

    Candidates are recognised by the generated neighbour pattern, so a file only
    qualifies when its name carries the series name followed by the target
    episode marker.
    """
    current = parse_episode_info(current_url)
    if current is None:
        return None

    pattern = generate_episode_pattern(current, offset)
    for url in all_urls:
        if url == current_url or not matches_episode(pattern, url):
            continue
        parsed = parse_episode_info(url)
        if parsed is not None and parsed.episode == current.episode + offset:
            logger.debug(f"Adjacent episode ({offset:+d}) of {current.title}: {parsed.title}")
            return parsed
    return None
