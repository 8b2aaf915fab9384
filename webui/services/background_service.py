"""Background service wiring: registry, browser host, orchestrator"""

import logging
from typing import Optional

from config import Config, load_config
from host import SnapshotBrowserHost
from orchestrator import BackgroundService, PageScanOrchestrator
from registry import VideoSourceRegistry


class StreamWatchService:
    """Owns the process-lifetime state of the background context"""

    def __init__(self, config: Optional[Config] = None):
        self.logger = logging.getLogger('StreamWatch.service')
        self.config = config or load_config()
        self.registry = VideoSourceRegistry()
        self.host = SnapshotBrowserHost(
            detector_script=self.config.scan.detector_script,
            fetch_timeout=self.config.scan.fetch_timeout
        )
        self.orchestrator = PageScanOrchestrator(
            self.registry,
            self.host,
            injection_delay=self.config.scan.injection_delay,
            detector_script=self.config.scan.detector_script,
            similarity_threshold=self.config.matching.similarity_threshold
        )
        self.background = BackgroundService(
            self.registry,
            self.host,
            orchestrator=self.orchestrator,
            player_url=self.config.server.player_url
        )
        self.logger.debug("StreamWatch background service initialized")


# Global service instance
_service_instance: Optional[StreamWatchService] = None


def get_service(config: Optional[Config] = None) -> StreamWatchService:
    """
    Get or create the background service singleton

    Args:
        config: Optional configuration (only used on first call)

    Returns:
        StreamWatchService instance
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = StreamWatchService(config)
    return _service_instance


def reset_service(config: Optional[Config] = None) -> StreamWatchService:
    """Replace the singleton with a fresh service (drops all registered sources and tabs)"""
    global _service_instance
    _service_instance = StreamWatchService(config)
    return _service_instance
