#!/usr/bin/env python3
"""
Browser host boundary for StreamWatch
Defines the awaitable tab operations the scan orchestrator relies on (tab query,
tab lookup, message delivery, script injection) and an in-process host whose
tabs are HTML page snapshots.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from detector import VideoLinkDetector
from model import Tab
from util import url_hostname


logger = logging.getLogger('StreamWatch.host')

DEFAULT_DETECTOR_SCRIPT = 'content.js'

PRIVILEGED_SCHEMES = ('chrome:', 'chrome-extension:', 'moz-extension:', 'edge:', 'about:',
                      'view-source:', 'devtools:')
PRIVILEGED_HOSTS = ('chromewebstore.google.com', 'addons.mozilla.org')

NO_RECEIVER_ERROR = 'Could not establish connection. Receiving end does not exist.'


class HostError(Exception):
    """Base class for browser host failures"""


class TabNotFoundError(HostError):
    """The requested tab does not exist (any more)"""


class MessageDeliveryError(HostError):
    """A message could not be delivered to a tab (no listener)"""


class ScriptInjectionError(HostError):
    """A script could not be injected into a tab"""


def is_privileged_url(url: str) -> bool:
    """Pages the extension is never allowed to script"""
    lowered = (url or '').lower()
    if lowered.startswith(PRIVILEGED_SCHEMES):
        return True
    if url_hostname(lowered) in PRIVILEGED_HOSTS:
        return True
    return lowered.startswith('https://chrome.google.com/webstore')


class BrowserHost(ABC):
    """Tab operations provided by the hosting browser"""

    @abstractmethod
    async def query_tabs(self) -> List[Tab]:
        """All open tabs, most recently opened last"""

    @abstractmethod
    async def get_tab(self, tab_id: int) -> Tab:
        """Raises TabNotFoundError if the tab is gone"""

    @abstractmethod
    async def send_message(self, tab_id: int, message: Dict[str, Any]) -> Dict[str, Any]:
        """Raises MessageDeliveryError if nothing in the tab listens"""

    @abstractmethod
    async def inject_script(self, tab_id: int, script: str) -> None:
        """Raises ScriptInjectionError if the host refuses the injection"""

    @abstractmethod
    async def create_tab(self, url: str, active: bool = True) -> Tab:
        """Open a new tab"""


@dataclass
class _TabState:
    tab: Tab
    html: str
    referrer: str = ''
    detector: Optional[VideoLinkDetector] = None


class SnapshotBrowserHost(BrowserHost):
    """
    In-process browser host backed by HTML snapshots

    A tab answers messages only while a detector is attached to it. Pages opened
    with detector_installed=False behave like pages loaded before the extension:
    the first message fails and the detector has to be injected.
    """

    def __init__(self, detector_script: str = DEFAULT_DETECTOR_SCRIPT, fetch_timeout: float = 10):
        self.detector_script = detector_script
        self.fetch_timeout = fetch_timeout
        self._tabs: Dict[int, _TabState] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _fetch(self, url: str) -> str:
        logger.debug(f"Fetching page snapshot: {url}")
        response = requests.get(url, timeout=self.fetch_timeout)
        response.raise_for_status()
        return response.text

    def _attach_detector(self, state: _TabState) -> None:
        state.detector = VideoLinkDetector(state.html, state.tab.url, title=state.tab.title or None,
                                           referrer=state.referrer)
        if not state.tab.title:
            state.tab.title = state.detector.title

    def open_tab(self, url: str, html: Optional[str] = None, title: str = '',
                 referrer: str = '', detector_installed: bool = True) -> Tab:
        """
        Open a tab showing a page snapshot

        Args:
            url: Page URL
            html: Page HTML; fetched with requests when None
            title: Page title; taken from the HTML when empty
            referrer: Referrer reported by the page
            detector_installed: Whether the detector is already listening in the page

        Returns:
            The new tab
        """
        if html is None:
            html = self._fetch(url)
        with self._lock:
            tab = Tab(id=self._next_id, url=url, title=title)
            self._next_id += 1
            state = _TabState(tab=tab, html=html, referrer=referrer)
            if detector_installed and not is_privileged_url(url):
                self._attach_detector(state)
            self._tabs[tab.id] = state
        logger.debug(f"Opened tab {tab.id}: {url}")
        return Tab(id=tab.id, url=tab.url, title=tab.title)

    def navigate(self, tab_id: int, url: str, html: Optional[str] = None, title: str = '') -> Tab:
        """Load another page in an existing tab; the old detector does not survive"""
        if html is None:
            html = self._fetch(url)
        with self._lock:
            state = self._tabs.get(tab_id)
            if state is None:
                raise TabNotFoundError(f"No tab with id: {tab_id}.")
            state.referrer = state.tab.url
            state.tab = Tab(id=tab_id, url=url, title=title)
            state.html = html
            state.detector = None
            return Tab(id=tab_id, url=url, title=title)

    def close_tab(self, tab_id: int) -> bool:
        with self._lock:
            return self._tabs.pop(tab_id, None) is not None

    def has_detector(self, tab_id: int) -> bool:
        with self._lock:
            state = self._tabs.get(tab_id)
            return state is not None and state.detector is not None

    async def query_tabs(self) -> List[Tab]:
        with self._lock:
            return [Tab(id=s.tab.id, url=s.tab.url, title=s.tab.title) for s in self._tabs.values()]

    async def get_tab(self, tab_id: int) -> Tab:
        with self._lock:
            state = self._tabs.get(tab_id)
            if state is None:
                raise TabNotFoundError(f"No tab with id: {tab_id}.")
            return Tab(id=state.tab.id, url=state.tab.url, title=state.tab.title)

    async def send_message(self, tab_id: int, message: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            state = self._tabs.get(tab_id)
            detector = state.detector if state is not None else None
        if detector is None:
            raise MessageDeliveryError(NO_RECEIVER_ERROR)
        return detector.handle_message(message)

    async def inject_script(self, tab_id: int, script: str) -> None:
        with self._lock:
            state = self._tabs.get(tab_id)
            if state is None:
                raise ScriptInjectionError(f"No tab with id: {tab_id}.")
            if script != self.detector_script:
                raise ScriptInjectionError(f"Could not load file: '{script}'.")
            if is_privileged_url(state.tab.url):
                raise ScriptInjectionError(f"Cannot access contents of the page: {state.tab.url}")
            self._attach_detector(state)
        logger.debug(f"Injected {script} into tab {tab_id}")

    async def create_tab(self, url: str, active: bool = True) -> Tab:
        return self.open_tab(url, html='', detector_installed=False)
