from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from common.models.rooms import Room


class RoomCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    room_type: str = Field(alias="type", min_length=1)
    price: float = Field(ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    rating: float = Field(default=0, ge=0)
    reviews: int = Field(default=0, ge=0)
    size: Optional[str] = None
    beds: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    policies: Optional[dict] = None


class RoomUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1)
    room_type: Optional[str] = Field(default=None, alias="type", min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = None
    images: Optional[List[str]] = None
    rating: Optional[float] = Field(default=None, ge=0)
    reviews: Optional[int] = Field(default=None, ge=0)
    size: Optional[str] = None
    beds: Optional[str] = None
    amenities: Optional[List[str]] = None
    features: Optional[List[str]] = None
    description: Optional[str] = None
    policies: Optional[dict] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


def room_to_dict(room: Room) -> dict:
    return {
        "id": room.room_id,
        "name": room.name,
        "type": room.room_type,
        "price": room.price,
        "capacity": room.capacity,
        "image": room.image,
        "images": room.images,
        "rating": room.rating,
        "reviews": room.reviews,
        "size": room.size,
        "beds": room.beds,
        "amenities": room.amenities,
        "features": room.features,
        "description": room.description,
        "policies": room.policies,
        "status": room.status.value,
        "guest": room.guest,
        "checkOutDate": room.check_out_date,
        "createdAt": room.created_at.isoformat(),
    }
