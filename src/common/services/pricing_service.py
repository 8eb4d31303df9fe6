import math
from datetime import datetime

from common.utils.constants import SECONDS_PER_NIGHT


def count_nights(checkin: datetime, checkout: datetime) -> int:
    """Number of billable nights; any started day counts as a full night."""
    seconds = (checkout - checkin).total_seconds()
    return math.ceil(seconds / SECONDS_PER_NIGHT)


def compute_total_price(checkin: datetime, checkout: datetime, price_per_night: float) -> float:
    nights = count_nights(checkin, checkout)
    return nights * float(price_per_night)
