from src.contention_engine.contenders import (
    ContentionCalculator,
    ContentionCapacityError,
    compute_contention,
)
from src.contention_engine.models import (
    ContenderStatus,
    Member,
    Pick,
    RemainingGame,
    Side,
)

__all__ = [
    "ContenderStatus",
    "ContentionCalculator",
    "ContentionCapacityError",
    "Member",
    "Pick",
    "RemainingGame",
    "Side",
    "compute_contention",
]
