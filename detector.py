#!/usr/bin/env python3
"""
In-page video link detector for StreamWatch
Finds video-file anchors in a page's HTML and answers the page-side messages
of the scan protocol (SCAN_FOR_EPISODES, GET_VIDEO_LINKS, GET_PAGE_INFO ...).
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from model import PageInfo, VideoLinkInfo
from util import is_video_url, extract_filename


logger = logging.getLogger('StreamWatch.detector')

NEARBY_SIBLING_CHARS = 50
NEARBY_TEXT_LIMIT = 100

EPISODE_HINT_PATTERN = re.compile(r'[Ee]p(?:isode)?[\s.:]*(\d+)')
CHAPTER_HINT_PATTERN = re.compile(r'[Cc]h(?:apter)?[\s.:]*(\d+)')


def _node_text(node) -> str:
    if node is None:
        return ''
    if isinstance(node, NavigableString):
        return str(node)
    if isinstance(node, Tag):
        return node.get_text()
    return ''


def get_nearby_text(anchor: Tag) -> str:
    """
    Collect text around a link as a weak episode-ordering hint

    Takes the tail of the previous sibling and the head of the next sibling,
    then appends any "Episode N" / "Chapter N" marker found in the parent.
    """
    parent = anchor.parent
    if parent is None:
        return ''

    text = ''
    prev_text = _node_text(anchor.previous_sibling)
    next_text = _node_text(anchor.next_sibling)
    if prev_text:
        text += prev_text.strip()[-NEARBY_SIBLING_CHARS:] + ' '
    if next_text:
        text += ' ' + next_text.strip()[:NEARBY_SIBLING_CHARS]

    parent_text = parent.get_text()
    episode_match = EPISODE_HINT_PATTERN.search(parent_text)
    chapter_match = CHAPTER_HINT_PATTERN.search(parent_text)
    if episode_match:
        text += f" Episode {episode_match.group(1)}"
    if chapter_match:
        text += f" Chapter {chapter_match.group(1)}"

    return text.strip()[:NEARBY_TEXT_LIMIT]


class VideoLinkDetector:
    """Detector bound to one page snapshot"""

    def __init__(self, html: str, page_url: str, title: Optional[str] = None, referrer: str = ''):
        self.soup = BeautifulSoup(html or '', 'html.parser')
        self.page_url = page_url
        self.referrer = referrer
        if title is None:
            title_tag = self.soup.title
            title = title_tag.get_text().strip() if title_tag else ''
        self.title = title
        self.base_url = self._resolve_base_url()

    def _resolve_base_url(self) -> str:
        base = self.soup.find('base', href=True)
        if base:
            return urljoin(self.page_url, base['href'].strip())
        return self.page_url

    def find_video_links_with_info(self) -> List[VideoLinkInfo]:
        """Find all video links on the page with their context"""
        video_links: List[VideoLinkInfo] = []
        seen_urls = set()

        for anchor in self.soup.find_all('a', href=True):
            href = urljoin(self.base_url, anchor['href'].strip())
            if not is_video_url(href) or href in seen_urls:
                continue
            seen_urls.add(href)

            video_links.append(VideoLinkInfo(
                url=href,
                text=anchor.get_text().strip(),
                title=anchor.get('title', '') or '',
                filename=extract_filename(href),
                nearby_text=get_nearby_text(anchor),
            ))

        logger.debug(f"Found {len(video_links)} video links on {self.page_url}")
        return video_links

    def find_video_links(self) -> List[str]:
        """Find all video links (URLs only)"""
        return [link.url for link in self.find_video_links_with_info()]

    def is_video_link(self, url: str) -> bool:
        return is_video_url(url)

    def get_page_info(self) -> PageInfo:
        return PageInfo(url=self.page_url, title=self.title, referrer=self.referrer)

    def get_page_info_detailed(self, with_info: bool = True) -> Dict[str, Any]:
        """Page descriptor plus its video links (with anchor details unless with_info is False)"""
        info = self.get_page_info()
        if with_info:
            links = [link.to_dict() for link in self.find_video_links_with_info()]
        else:
            links = self.find_video_links()
        return {
            'url': info.url,
            'title': info.title,
            'referrer': info.referrer,
            'videoLinks': links,
        }

    def scan_for_episodes(self, current_url: Optional[str]) -> Dict[str, Any]:
        return {
            'success': True,
            'currentUrl': current_url,
            'allLinks': [link.to_dict() for link in self.find_video_links_with_info()],
            'pageUrl': self.page_url,
            'pageTitle': self.title,
        }

    def handle_message(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """Answer one message from the background service"""
        message_type = message.get('type')
        payload = message.get('payload') or {}

        if message_type == 'PING':
            return {'status': 'ok'}
        if message_type == 'GET_VIDEO_LINKS':
            return {'links': self.find_video_links()}
        if message_type == 'GET_VIDEO_LINKS_WITH_INFO':
            return {'links': [link.to_dict() for link in self.find_video_links_with_info()]}
        if message_type == 'IS_VIDEO_LINK':
            return {'isVideo': self.is_video_link(payload.get('url', ''))}
        if message_type == 'GET_PAGE_INFO':
            return self.get_page_info_detailed(with_info=False)
        if message_type == 'GET_PAGE_INFO_DETAILED':
            return self.get_page_info_detailed()
        if message_type == 'SCAN_FOR_EPISODES':
            return self.scan_for_episodes(payload.get('currentUrl'))

        return {'error': 'Unknown message type'}
