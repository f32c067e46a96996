"""Service layer: ledger, ranking, claims and broadcasting."""

from .broadcaster import LeaderboardSnapshot, Subscriber, UpdateBroadcaster
from .claims import ClaimProcessor, ClaimResult, PointsSource, draw_points
from .ledger import LedgerStore
from .locks import MutationLocks
from .ranking import RankingEngine, order_users, ranking_key
from .users import award_to_dict, normalize_user_name, user_to_dict

__all__ = [
    "ClaimProcessor",
    "ClaimResult",
    "LeaderboardSnapshot",
    "LedgerStore",
    "MutationLocks",
    "PointsSource",
    "RankingEngine",
    "Subscriber",
    "UpdateBroadcaster",
    "award_to_dict",
    "draw_points",
    "normalize_user_name",
    "order_users",
    "ranking_key",
    "user_to_dict",
]
