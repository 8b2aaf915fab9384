"""Episode parsing and matching API endpoints"""

from fastapi import APIRouter

from matcher import find_related_episodes, find_adjacent_episode
from pattern import parse_episode_info
from webui.models.schemas import (
    EpisodeSchema,
    ParseEpisodeRequest,
    ParseEpisodeResponse,
    RelatedEpisodesRequest,
    RelatedEpisodesResponse,
    AdjacentEpisodeRequest,
    AdjacentEpisodeResponse,
)
from webui.services.background_service import get_service

router = APIRouter(prefix="/api/episodes", tags=["episodes"])


@router.post("/parse", response_model=ParseEpisodeResponse)
async def parse_episode(request: ParseEpisodeRequest):
    """Parse episode metadata from a video URL"""
    parsed = parse_episode_info(request.url)
    if parsed is None:
        return ParseEpisodeResponse(success=False)
    return ParseEpisodeResponse(success=True, episode=EpisodeSchema.from_episode(parsed))


@router.post("/related", response_model=RelatedEpisodesResponse)
async def related_episodes(request: RelatedEpisodesRequest):
    """Find episodes of the same series among candidate URLs"""
    threshold = get_service().config.matching.similarity_threshold
    episodes = find_related_episodes(request.current_url, request.candidate_urls, request.direction, threshold)
    return RelatedEpisodesResponse(episodes=[EpisodeSchema.from_episode(e) for e in episodes])


@router.post("/adjacent", response_model=AdjacentEpisodeResponse)
async def adjacent_episode(request: AdjacentEpisodeRequest):
    """Find the episode at an offset from the current one"""
    episode = find_adjacent_episode(request.current_url, request.candidate_urls, request.offset)
    if episode is None:
        return AdjacentEpisodeResponse(found=False)
    return AdjacentEpisodeResponse(found=True, episode=EpisodeSchema.from_episode(episode))
