#!/usr/bin/env python3
"""
Background scan orchestration for StreamWatch
Resolves the tab a video was found on, asks the page detector in that tab for
every video link (injecting the detector when it is not listening), and routes
the background messages of the extension.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlencode

from host import BrowserHost, MessageDeliveryError, ScriptInjectionError, TabNotFoundError, DEFAULT_DETECTOR_SCRIPT
from matcher import SIMILARITY_THRESHOLD, find_related_episodes
from model import Direction, ParsedEpisode, ScanResult, Tab
from registry import VideoSourceRegistry
from util import is_video_url, url_hostname, url_origin


logger = logging.getLogger('StreamWatch.orchestrator')

NO_SOURCE_PAGE = 'No source page found'
SOURCE_TAB_NOT_FOUND = 'Source tab not found'
INVALID_VIDEO_URL = 'Invalid video URL'
INJECTION_FAILED = 'Failed to inject content script'

DEFAULT_INJECTION_DELAY = 0.1  # seconds
DEFAULT_PLAYER_URL = 'chrome-extension://streamwatch/index.html'


class PageScanOrchestrator:
    """Finds the source tab of a video and collects the video links on it"""

    def __init__(self, registry: VideoSourceRegistry, host: BrowserHost,
                 injection_delay: float = DEFAULT_INJECTION_DELAY,
                 detector_script: str = DEFAULT_DETECTOR_SCRIPT,
                 similarity_threshold: float = SIMILARITY_THRESHOLD):
        self.registry = registry
        self.host = host
        self.injection_delay = injection_delay
        self.detector_script = detector_script
        self.similarity_threshold = similarity_threshold

    async def scan_source_page(self, video_url: str) -> ScanResult:
        """
        Scan the page a video was discovered on for all video links

        Never raises: every failure is returned as ScanResult(success=False)
        with a readable error.
        """
        try:
            return await self._scan(video_url)
        except Exception as e:
            logger.error(f"Unexpected error scanning source page of {video_url}: {e}")
            return ScanResult(success=False, video_url=video_url, error=str(e))

    async def _scan(self, video_url: str) -> ScanResult:
        record = self.registry.lookup(video_url)

        if record is None:
            hostname = url_hostname(video_url)
            if hostname is None:
                return self._failure(video_url, INVALID_VIDEO_URL)
            tab = await self._find_tab_by_hostname(hostname)
            if tab is None:
                return self._failure(video_url, NO_SOURCE_PAGE)
            return await self._scan_tab(tab, video_url)

        tab = None
        if record.source_tab_id is not None:
            try:
                tab = await self.host.get_tab(record.source_tab_id)
            except TabNotFoundError:
                logger.info(f"Source tab {record.source_tab_id} is gone, searching by origin of {record.source_url}")

        if tab is None:
            tab = await self._find_tab_by_origin(record.source_url)
            if tab is None:
                return self._failure(video_url, SOURCE_TAB_NOT_FOUND, source_url=record.source_url)

        return await self._scan_tab(tab, video_url)

    async def _find_tab_by_hostname(self, hostname: str) -> Optional[Tab]:
        """First open tab on the video's host or one of its subdomains"""
        for tab in await self.host.query_tabs():
            tab_host = url_hostname(tab.url)
            if tab_host and (tab_host == hostname or tab_host.endswith('.' + hostname)):
                return tab
        return None

    async def _find_tab_by_origin(self, source_url: str) -> Optional[Tab]:
        """Open tab showing the source page, else any tab of the same origin"""
        origin = url_origin(source_url)
        if origin is None:
            return None

        matching = [tab for tab in await self.host.query_tabs() if url_origin(tab.url) == origin]
        if not matching:
            return None
        for tab in matching:
            if tab.url == source_url:
                return tab
        return matching[0]

    async def _scan_tab(self, tab: Tab, video_url: str) -> ScanResult:
        """Ask the tab's detector for links, injecting it once if it does not answer"""
        message = {'type': 'SCAN_FOR_EPISODES', 'payload': {'currentUrl': video_url}}

        try:
            response = await self.host.send_message(tab.id, message)
        except MessageDeliveryError as e:
            logger.info(f"Detector not loaded in tab {tab.id}, injecting: {e}")
            try:
                await self.host.inject_script(tab.id, self.detector_script)
            except ScriptInjectionError as inject_error:
                logger.error(f"Failed to inject detector into tab {tab.id}: {inject_error}")
                return self._failure(video_url, f"{INJECTION_FAILED}: {inject_error}")

            # No readiness signal from the injected script, give it a moment
            await asyncio.sleep(self.injection_delay)

            try:
                response = await self.host.send_message(tab.id, message)
            except MessageDeliveryError as retry_error:
                logger.error(f"Still failed after injection into tab {tab.id}: {retry_error}")
                return self._failure(video_url, str(retry_error))

        if not isinstance(response, dict) or response.get('error'):
            error = response.get('error') if isinstance(response, dict) else 'Invalid response from page'
            return self._failure(video_url, error)

        result = ScanResult(
            success=True,
            video_url=video_url,
            all_links=list(response.get('allLinks') or []),
            page_url=response.get('pageUrl') or tab.url,
            page_title=response.get('pageTitle') or tab.title,
        )
        logger.info(f"Scanned tab {tab.id} ({result.page_url}): {len(result.all_links)} video links")
        return result

    def _failure(self, video_url: str, error: str, source_url: Optional[str] = None) -> ScanResult:
        logger.warning(f"Scan failed for {video_url}: {error}")
        return ScanResult(success=False, video_url=video_url, error=error, source_url=source_url)

    async def find_related_from_source(self, video_url: str,
                                       direction: Direction = Direction.NEXT) -> List[ParsedEpisode]:
        """Scan the source page and keep the links that are episodes of the same series"""
        result = await self.scan_source_page(video_url)
        if not result.success:
            logger.info(f"No additional episodes detected for {video_url}: {result.error}")
            return []
        return find_related_episodes(video_url, result.link_urls, direction, self.similarity_threshold)


class BackgroundService:
    """Routes messages sent to the background context"""

    def __init__(self, registry: VideoSourceRegistry, host: BrowserHost,
                 orchestrator: Optional[PageScanOrchestrator] = None,
                 player_url: str = DEFAULT_PLAYER_URL):
        self.registry = registry
        self.host = host
        self.orchestrator = orchestrator or PageScanOrchestrator(registry, host)
        self.player_url = player_url
        self._handlers: Dict[str, Callable[[Dict[str, Any], Optional[Tab]], Awaitable[Dict[str, Any]]]] = {
            'SCAN_SOURCE_PAGE': self._handle_scan_source_page,
            'REGISTER_VIDEO_SOURCE': self._handle_register_video_source,
            'GET_VIDEO_SOURCE': self._handle_get_video_source,
            'PLAY_VIDEO': self._handle_play_video,
            'FIND_RELATED_EPISODES': self._handle_find_related_episodes,
        }

    async def handle_message(self, message: Dict[str, Any], sender_tab: Optional[Tab] = None) -> Dict[str, Any]:
        """
        Handle one message from the popup, the player or a content script

        Args:
            message: {'type': ..., 'payload': {...}}
            sender_tab: Tab the message came from, if any

        Returns:
            JSON-serialisable response
        """
        message_type = message.get('type')
        logger.debug(f"Message received: {message_type} from {sender_tab.url if sender_tab else 'extension'}")

        handler = self._handlers.get(message_type)
        if handler is None:
            return {'error': 'Unknown message type'}
        return await handler(message.get('payload') or {}, sender_tab)

    def player_url_for(self, video_url: str) -> str:
        return f"{self.player_url}?{urlencode({'url': video_url})}"

    async def open_in_player(self, video_url: str, source_tab: Optional[Tab] = None) -> Tab:
        """Open a video in the player, remembering the page it was found on"""
        if not is_video_url(video_url):
            # The player decides what it can play
            logger.info(f"Not a video URL, opening anyway: {video_url}")
        if source_tab is not None and source_tab.url:
            self.registry.register(video_url, source_tab.url, source_tab.id)
            logger.info(f"Registered video source: {video_url} -> {source_tab.url}")
        tab = await self.host.create_tab(self.player_url_for(video_url), active=True)
        logger.info(f"Opened player tab {tab.id} for video: {video_url}")
        return tab

    @staticmethod
    def _missing(field_name: str) -> Dict[str, Any]:
        return {'success': False, 'error': f"Missing {field_name}"}

    async def _handle_scan_source_page(self, payload: Dict[str, Any], sender_tab: Optional[Tab]) -> Dict[str, Any]:
        video_url = payload.get('videoUrl')
        if not video_url:
            return self._missing('videoUrl')
        result = await self.orchestrator.scan_source_page(video_url)
        return result.to_dict()

    async def _handle_register_video_source(self, payload: Dict[str, Any],
                                            sender_tab: Optional[Tab]) -> Dict[str, Any]:
        video_url = payload.get('videoUrl')
        source_url = payload.get('sourceUrl')
        if not video_url:
            return self._missing('videoUrl')
        if not source_url:
            return self._missing('sourceUrl')
        self.registry.register(video_url, source_url, payload.get('sourceTabId'))
        logger.info(f"Registered video source: {video_url} -> {source_url}")
        return {'success': True}

    async def _handle_get_video_source(self, payload: Dict[str, Any], sender_tab: Optional[Tab]) -> Dict[str, Any]:
        video_url = payload.get('videoUrl')
        if not video_url:
            return self._missing('videoUrl')
        record = self.registry.lookup(video_url)
        if record is None:
            return {'success': False, 'error': 'Source not found'}
        return {'success': True, **record.to_dict()}

    async def _handle_play_video(self, payload: Dict[str, Any], sender_tab: Optional[Tab]) -> Dict[str, Any]:
        video_url = payload.get('url')
        if not video_url:
            return self._missing('url')

        source_url = payload.get('sourceUrl') or (sender_tab.url if sender_tab else None)
        source_tab_id = payload.get('sourceTabId') or (sender_tab.id if sender_tab else None)
        if source_url:
            self.registry.register(video_url, source_url, source_tab_id)
            logger.info(f"Stored video source: {video_url} -> {source_url}")

        tab = await self.host.create_tab(self.player_url_for(video_url), active=True)
        return {'success': True, 'tabId': tab.id}

    async def _handle_find_related_episodes(self, payload: Dict[str, Any],
                                            sender_tab: Optional[Tab]) -> Dict[str, Any]:
        video_url = payload.get('videoUrl')
        if not video_url:
            return self._missing('videoUrl')
        try:
            direction = Direction(payload.get('direction', Direction.NEXT.value))
        except ValueError:
            return {'success': False, 'error': f"Invalid direction: {payload.get('direction')}"}

        episodes = await self.orchestrator.find_related_from_source(video_url, direction)
        return {'success': True, 'videoUrl': video_url, 'episodes': [e.to_dict() for e in episodes]}
