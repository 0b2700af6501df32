# ============================================================================
# FILE: tunetip/services/smart_playlist_scheduler.py
# ============================================================================
import threading
from typing import Callable, Optional
from sqlalchemy.orm import Session
from tunetip.config import settings
from tunetip.services.smart_playlist_service import SmartPlaylistService
import logging

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 60

class SmartPlaylistScheduler:
    """Background thread running refresh_all() every interval_seconds"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        service: SmartPlaylistService,
        interval_seconds: Optional[float] = None,
        enabled: Optional[bool] = None,
    ):
        if interval_seconds is None:
            interval_seconds = settings.SMART_PLAYLIST_REFRESH_INTERVAL_SECONDS
        if enabled is None:
            enabled = settings.SMART_PLAYLIST_REFRESH_ENABLED

        self.session_factory = session_factory
        self.service = service
        self.interval_seconds = max(float(interval_seconds), MIN_INTERVAL_SECONDS)
        self.enabled = enabled
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the refresh loop; returns False when disabled or in the test environment"""
        if settings.is_test or not self.enabled:
            logger.info("Smart playlist refresh scheduler not started")
            return False
        if self._thread is not None:
            return True

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="SmartPlaylistRefresh",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Smart playlist refresh scheduler started (every {self.interval_seconds:.0f}s)")
        return True

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Smart playlist refresh scheduler stopped")

    def run_once(self) -> int:
        """One refresh pass in a fresh session"""
        db = self.session_factory()
        try:
            return self.service.refresh_all(db)
        finally:
            db.close()

    def _run(self) -> None:
        # first tick after one full interval
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                logger.warning(f"Smart playlist refresh failed: {e}")
