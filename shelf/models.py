# shelf/models.py
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

UNKNOWN_NAME = "Unknown"
DEFAULT_MAX_PLAYERS = 99
DEFAULT_COMPLEXITY = 1.0


@dataclass(frozen=True)
class Item:
    """
    One normalized catalog entry built from a single feed row.
    Multi-valued attributes keep source order and may contain duplicates.
    Play times are in minutes.
    """
    item_id: str
    name: str = UNKNOWN_NAME
    min_players: int = 0
    max_players: int = DEFAULT_MAX_PLAYERS
    complexity: float = DEFAULT_COMPLEXITY
    difficulty: int = 0
    min_time: int = 0
    max_time: int = 0
    rank: Optional[int] = None
    rating: Optional[float] = None
    retail_price: Optional[float] = None
    age_range: Optional[str] = None
    min_age: int = 0
    year_published: Optional[int] = None
    item_type: str = ""
    family: Optional[str] = None
    owned_count: int = 0
    image_url: str = ""
    shelf_location: str = ""
    description: str = ""
    curator_name: Optional[str] = None
    curator_note: Optional[str] = None
    categories: Tuple[str, ...] = ()
    mechanisms: Tuple[str, ...] = ()
    designers: Tuple[str, ...] = ()
    artists: Tuple[str, ...] = ()
    publishers: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data
