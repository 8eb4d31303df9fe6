import unittest
from datetime import datetime, timezone, timedelta

from common.services.pricing_service import count_nights, compute_total_price


class TestPricingService(unittest.TestCase):

    def setUp(self):
        self.checkin = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_whole_nights(self):
        checkout = self.checkin + timedelta(days=2)

        self.assertEqual(count_nights(self.checkin, checkout), 2)
        self.assertEqual(compute_total_price(self.checkin, checkout, 100), 200)

    def test_partial_day_rounds_up(self):
        checkout = self.checkin + timedelta(days=1, hours=3)

        self.assertEqual(count_nights(self.checkin, checkout), 2)

    def test_short_stay_is_one_night(self):
        checkout = self.checkin + timedelta(hours=5)

        self.assertEqual(compute_total_price(self.checkin, checkout, 89.5), 89.5)


if __name__ == "__main__":
    unittest.main()
