#!/usr/bin/env python3
"""
Utility functions for StreamWatch
Provides helpers for recognising and dissecting video URLs.
"""

from typing import Optional
from urllib.parse import urlsplit, unquote


# Supported video file extensions
VIDEO_EXTENSIONS = (
    '.mp4',
    '.mkv',
    '.webm',
    '.avi',
    '.mov',
    '.m4v',
    '.flv',
    '.wmv',
    '.mpg',
    '.mpeg',
    '.3gp',
    '.ogv',
)

DEFAULT_PORTS = {'http': 80, 'https': 443, 'ws': 80, 'wss': 443, 'ftp': 21}


def _split(url: str):
    """Split an absolute URL, returning None when it has no scheme or host"""
    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except (ValueError, TypeError, AttributeError):
        return None
    if not parts.scheme:
        return None
    return parts


def is_video_url(url: str) -> bool:
    """Check if a URL points to a video file based on extension"""
    parts = _split(url)
    if parts is None:
        return False
    pathname = parts.path.lower()
    return any(pathname.endswith(ext) for ext in VIDEO_EXTENSIONS)


def extract_filename(url: str) -> str:
    """Extract the decoded filename (last path segment) from a URL"""
    parts = _split(url)
    if parts is None:
        return ''
    return unquote(parts.path).split('/')[-1]


def url_hostname(url: str) -> Optional[str]:
    """Lower-cased host name of a URL, or None when there is none"""
    parts = _split(url)
    if parts is None:
        return None
    return parts.hostname or None


def url_origin(url: str) -> Optional[str]:
    """
    Compute the origin (scheme://host[:port]) of a URL

    Default ports are dropped so that "https://a.com:443" and "https://a.com"
    share an origin. URLs without a host (about:blank, data: ...) have no origin.
    """
    parts = _split(url)
    if parts is None or not parts.hostname:
        return None
    scheme = parts.scheme.lower()
    origin = f"{scheme}://{parts.hostname}"
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(scheme):
        origin += f":{parts.port}"
    return origin
