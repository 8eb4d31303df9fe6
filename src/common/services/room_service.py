import logging
from dataclasses import replace
from typing import List, Optional
from uuid import uuid4

from common.models.rooms import Room
from common.models.users import Actor
from common.repository.room_repo import RoomRepository
from common.schemas.rooms import RoomCreateRequest, RoomUpdateRequest
from common.services import access_policy
from common.utils.custom_exceptions import ConflictException, NotFoundException
from common.utils.constants import DEFAULT_POLICIES

logger = logging.getLogger(__name__)


class RoomService:
    def __init__(self, room_repo: RoomRepository):
        self.room_repo = room_repo

    def add_room(self, req: RoomCreateRequest, actor: Optional[Actor]) -> Room:
        access_policy.require_admin(actor, "add rooms")
        room = Room(
            room_id=str(uuid4()),
            name=req.name,
            room_type=req.room_type,
            price=req.price,
            capacity=req.capacity,
            image=req.image,
            images=req.images,
            rating=req.rating,
            reviews=req.reviews,
            size=req.size,
            beds=req.beds,
            amenities=req.amenities,
            features=req.features,
            description=req.description,
            policies={**DEFAULT_POLICIES, **(req.policies or {})},
        )
        self.room_repo.add_room(room=room)
        logger.info(f"Room {room.name} added with id {room.room_id}")
        return room

    def list_rooms(self) -> List[Room]:
        return self.room_repo.list_rooms()

    def get_room(self, room_id: str) -> Room:
        room = self.room_repo.get_room_by_id(room_id)
        if room is None:
            raise NotFoundException("room", room_id, 404)
        return room

    def update_room(
        self, room_id: str, req: RoomUpdateRequest, actor: Optional[Actor]
    ) -> Room:
        access_policy.require_admin(actor, "update rooms")
        room = self.get_room(room_id)
        changes = req.changes()
        if "policies" in changes:
            changes["policies"] = {**room.policies, **changes["policies"]}

        # an occupied room keeps its name; bookings reference it by name
        if "name" in changes and changes["name"] != room.name and not room.is_available:
            raise ConflictException(f"Room {room.name} is occupied and cannot be renamed")

        updated = replace(room, **changes)
        self.room_repo.update_room(updated, previous_name=room.name)
        return updated

    def delete_room(self, room_id: str, actor: Optional[Actor]) -> Room:
        access_policy.require_admin(actor, "delete rooms")
        room = self.get_room(room_id)
        if not room.is_available:
            raise ConflictException(f"Room {room.name} is occupied and cannot be deleted")
        self.room_repo.delete_room(room)
        logger.info(f"Room {room.name} ({room_id}) deleted")
        return room
