# ============================================================================
# FILE: tunetip/services/ranking_service.py
# ============================================================================
import calendar
import enum
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from tunetip.config import settings
from tunetip.core.cache import RankSnapshotCache, rank_snapshots
import logging

logger = logging.getLogger(__name__)

class Timeframe(str, enum.Enum):
    ALL_TIME = "all-time"
    MONTHLY = "monthly"
    WEEKLY = "weekly"

def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)

def _one_month_before(value: datetime) -> datetime:
    year, month = (value.year, value.month - 1) if value.month > 1 else (value.year - 1, 12)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)

class RankingService:
    """
    Decay-based scoring and ranking for time-windowed leaderboards.

    Everything except rank_board() is pure. rank_board() keeps the last
    ranking of a board in Redis so rank changes survive between runs.
    """

    def __init__(self, snapshots: RankSnapshotCache, snapshot_ttl: int = settings.RANKING_SNAPSHOT_TTL_SECONDS):
        self.snapshots = snapshots
        self.snapshot_ttl = snapshot_ttl

    def calculate_momentum_score(self, base_score: float, age_in_days: float, decay_rate: float = 0.1) -> float:
        """Exponential decay: base * e^(-decay_rate * age_in_days)"""
        if age_in_days < 0:
            return base_score
        return base_score * math.exp(-decay_rate * age_in_days)

    def calculate_time_decay_score(self, base_score: float, age_in_hours: float, half_life_hours: float = 168) -> float:
        """Half-life decay, one week by default"""
        if age_in_hours < 0:
            return base_score
        return base_score * math.pow(0.5, age_in_hours / half_life_hours)

    def calculate_growth_score(self, recent_value: float, historical_value: float, time_window: float = 7) -> float:
        """Growth percentage over the baseline, weighted by recent activity per day"""
        if historical_value == 0:
            return recent_value * 2 if recent_value > 0 else 0
        growth_rate = (recent_value - historical_value) / historical_value
        normalized_growth = max(0, growth_rate * 100)
        return normalized_growth * (recent_value / time_window)

    def calculate_trending_score(self, plays: float, tips: float, tip_amount: float, age_in_days: float) -> float:
        play_score = self.calculate_momentum_score(plays, age_in_days, 0.15)
        tip_score = self.calculate_momentum_score(tips * 10, age_in_days, 0.12)
        amount_score = self.calculate_momentum_score(tip_amount * 100, age_in_days, 0.1)
        return play_score + tip_score + amount_score

    def rank_items(
        self,
        items: List[Mapping[str, Any]],
        previous_ranks: Optional[Mapping[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Sort by score descending and attach rank, previous_rank and change.

        Ties keep their input order. Previous ranks are keyed by str(item["id"]).
        """
        previous_ranks = previous_ranks or {}
        ranked = []
        for index, item in enumerate(sorted(items, key=lambda i: i["score"], reverse=True)):
            rank = index + 1
            previous_rank = previous_ranks.get(str(item["id"]))
            ranked.append({
                **item,
                "rank": rank,
                "previous_rank": previous_rank,
                "change": previous_rank - rank if previous_rank is not None else 0,
            })
        return ranked

    def rank_board(self, board_key: str, items: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Rank against the stored snapshot of board_key, then replace the snapshot"""
        previous_ranks = self.snapshots.load_ranks(board_key)
        ranked = self.rank_items(items, previous_ranks)
        self.snapshots.save_ranks(
            board_key,
            {str(item["id"]): item["rank"] for item in ranked},
            ttl=self.snapshot_ttl,
        )
        logger.debug(f"Ranked {len(ranked)} items on board {board_key}")
        return ranked

    def get_date_range(self, timeframe: Union[Timeframe, str], now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """(start, end) for a timeframe; unknown values fall back to all-time"""
        end = now or datetime.utcnow()
        try:
            timeframe = Timeframe(timeframe)
        except ValueError:
            timeframe = Timeframe.ALL_TIME

        if timeframe == Timeframe.WEEKLY:
            start = end - timedelta(days=7)
        elif timeframe == Timeframe.MONTHLY:
            start = _one_month_before(end)
        else:
            start = datetime(1970, 1, 1)
        return start, end

    def get_age_in_days(self, value: Union[date, datetime], now: Optional[datetime] = None) -> int:
        delta = (now or datetime.utcnow()) - _as_datetime(value)
        return math.floor(delta.total_seconds() / 86400)

    def get_age_in_hours(self, value: Union[date, datetime], now: Optional[datetime] = None) -> int:
        delta = (now or datetime.utcnow()) - _as_datetime(value)
        return math.floor(delta.total_seconds() / 3600)

# Create singleton instance
ranking_service = RankingService(snapshots=rank_snapshots)
