from enum import Enum
from typing import Optional, List
from dataclasses import dataclass, field
from datetime import datetime, timezone

from common.utils.constants import DEFAULT_POLICIES


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


@dataclass
class Room:
    room_id: str
    name: str
    room_type: str
    price: float
    capacity: Optional[int] = None
    image: Optional[str] = None
    images: List[str] = field(default_factory=list)
    rating: float = 0
    reviews: int = 0
    size: Optional[str] = None
    beds: Optional[str] = None
    amenities: List[str] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    description: Optional[str] = None
    policies: dict = field(default_factory=lambda: dict(DEFAULT_POLICIES))

    status: RoomStatus = RoomStatus.AVAILABLE
    guest: Optional[str] = None
    check_out_date: Optional[str] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_available(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    def occupy(self, guest: str, checkout: datetime):
        """Marks the room as taken by ``guest`` until the checkout day (UTC)."""
        self.status = RoomStatus.OCCUPIED
        self.guest = guest
        self.check_out_date = checkout.astimezone(timezone.utc).date().isoformat()

    def release(self):
        self.status = RoomStatus.AVAILABLE
        self.guest = None
        self.check_out_date = None


# Attributes an admin may edit through the catalog endpoints. Occupancy
# fields are only written by the booking lifecycle.
CATALOG_FIELDS = (
    "name",
    "room_type",
    "price",
    "capacity",
    "image",
    "images",
    "rating",
    "reviews",
    "size",
    "beds",
    "amenities",
    "features",
    "description",
    "policies",
)
