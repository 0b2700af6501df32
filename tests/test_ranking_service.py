import math
from datetime import date, datetime

import pytest

from tunetip.core.cache import RankSnapshotCache
from tunetip.services.ranking_service import RankingService, Timeframe


class MemorySnapshots:
    """Stands in for RankSnapshotCache, kept in a dict."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def load_ranks(self, board_key):
        return dict(self.store.get(board_key, {}))

    def save_ranks(self, board_key, ranks, ttl=None):
        self.store[board_key] = dict(ranks)
        self.ttls[board_key] = ttl
        return True


@pytest.fixture
def ranking():
    return RankingService(snapshots=MemorySnapshots(), snapshot_ttl=600)


@pytest.mark.unit
def test_momentum_score(ranking):
    assert ranking.calculate_momentum_score(100, 0) == 100
    assert ranking.calculate_momentum_score(100, 10) == pytest.approx(100 * math.exp(-1))
    assert ranking.calculate_momentum_score(100, -3) == 100


@pytest.mark.unit
def test_time_decay_score(ranking):
    assert ranking.calculate_time_decay_score(80, 168) == pytest.approx(40)
    assert ranking.calculate_time_decay_score(80, 336) == pytest.approx(20)
    assert ranking.calculate_time_decay_score(80, 12, half_life_hours=12) == pytest.approx(40)
    assert ranking.calculate_time_decay_score(80, -1) == 80


@pytest.mark.unit
def test_growth_score(ranking):
    assert ranking.calculate_growth_score(5, 0) == 10
    assert ranking.calculate_growth_score(0, 0) == 0
    assert ranking.calculate_growth_score(14, 7) == pytest.approx(100 * 14 / 7)
    assert ranking.calculate_growth_score(3, 6) == 0


@pytest.mark.unit
def test_trending_score(ranking):
    assert ranking.calculate_trending_score(10, 2, 1.5, 0) == pytest.approx(10 + 20 + 150)
    expected = 10 * math.exp(-0.15 * 2) + 20 * math.exp(-0.12 * 2) + 150 * math.exp(-0.1 * 2)
    assert ranking.calculate_trending_score(10, 2, 1.5, 2) == pytest.approx(expected)


@pytest.mark.unit
def test_rank_items_is_stable_and_tracks_changes(ranking):
    items = [
        {"id": "a", "score": 5},
        {"id": "b", "score": 9},
        {"id": "c", "score": 5},
        {"id": "d", "score": 1},
    ]

    ranked = ranking.rank_items(items, {"a": 1, "b": 3})

    assert [(r["id"], r["rank"]) for r in ranked] == [("b", 1), ("a", 2), ("c", 3), ("d", 4)]
    assert [r["change"] for r in ranked] == [2, -1, 0, 0]
    assert ranked[0]["previous_rank"] == 3
    assert ranked[2]["previous_rank"] is None
    assert items[0] == {"id": "a", "score": 5}


@pytest.mark.unit
def test_rank_board_uses_previous_snapshot(ranking):
    first = ranking.rank_board("tracks:weekly", [{"id": 1, "score": 10}, {"id": 2, "score": 20}])
    second = ranking.rank_board("tracks:weekly", [{"id": 1, "score": 30}, {"id": 2, "score": 20}])

    assert [r["change"] for r in first] == [0, 0]
    assert [(r["id"], r["change"]) for r in second] == [(1, 1), (2, -1)]
    assert ranking.snapshots.store["tracks:weekly"] == {"1": 1, "2": 2}
    assert ranking.snapshots.ttls["tracks:weekly"] == 600


@pytest.mark.unit
def test_rank_board_without_redis_has_no_history():
    snapshots = RankSnapshotCache(url="redis://127.0.0.1:1/0")
    ranking = RankingService(snapshots=snapshots)

    ranking.rank_board("artists", [{"id": 1, "score": 1}])
    ranked = ranking.rank_board("artists", [{"id": 2, "score": 5}, {"id": 1, "score": 1}])

    assert [r["change"] for r in ranked] == [0, 0]
    assert snapshots.enabled is False
    assert snapshots.load_ranks("artists") == {}
    assert snapshots.save_ranks("artists", {"1": 1}) is False


@pytest.mark.unit
def test_date_ranges(ranking):
    now = datetime(2024, 3, 31, 12, 0)

    assert ranking.get_date_range(Timeframe.WEEKLY, now) == (datetime(2024, 3, 24, 12, 0), now)
    assert ranking.get_date_range("monthly", now) == (datetime(2024, 2, 29, 12, 0), now)
    assert ranking.get_date_range(Timeframe.MONTHLY, datetime(2024, 1, 15)) == (datetime(2023, 12, 15), datetime(2024, 1, 15))
    assert ranking.get_date_range("all-time", now) == (datetime(1970, 1, 1), now)
    assert ranking.get_date_range("yearly", now)[0] == datetime(1970, 1, 1)


@pytest.mark.unit
def test_ages_are_floored(ranking):
    now = datetime(2024, 5, 10, 18, 30)

    assert ranking.get_age_in_days(datetime(2024, 5, 8, 19, 0), now) == 1
    assert ranking.get_age_in_days(date(2024, 5, 1), now) == 9
    assert ranking.get_age_in_hours(datetime(2024, 5, 10, 16, 45), now) == 1
    assert ranking.get_age_in_hours(datetime(2024, 5, 10, 19, 0), now) == -1
