import os

REGION = os.environ.get("AWS_REGION", "ap-south-1")

SECONDS_PER_NIGHT = 24 * 60 * 60

BOOKING_PREFIX = "BOOKING#"
USER_PREFIX = "USER#"
ROOM_PREFIX = "ROOM#"
ROOM_NAME_PREFIX = "ROOMNAME#"
ASSIGNMENT_PREFIX = "ASSIGNMENT#"
DETAILS_SK = "DETAILS"

DEFAULT_POLICIES = {
    "checkIn": "2:00 PM",
    "checkOut": "12:00 PM",
    "cancellation": "Free cancellation up to 24 hours before check-in",
    "smoking": "Non-smoking room",
    "pets": "Pets not allowed",
}
