# cities/tests/test_delivery_fee.py

from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from cities.models import City
from cities.services.delivery_fee import allocate_fee, resolve_fee, resolve_fee_detail


class ResolveFeeTests(TestCase):
    """
    GUARANTEES:
    - Configured cities return their own fee
    - Unknown cities degrade to the default fee (never an error)
    """

    def setUp(self):
        City.objects.create(name="Casablanca", delivery_fee=Decimal("20.00"))

    def test_known_city_returns_configured_fee(self):
        self.assertEqual(resolve_fee("Casablanca"), Decimal("20.00"))

    def test_unknown_city_returns_default_fee(self):
        self.assertEqual(resolve_fee("Unknownville"), Decimal("10.00"))

    def test_lookup_is_exact_match(self):
        quote = resolve_fee_detail("casablanca")
        self.assertTrue(quote.is_default)
        self.assertEqual(quote.fee, Decimal("10.00"))

    def test_blank_city_returns_default_fee(self):
        self.assertEqual(resolve_fee("   "), Decimal("10.00"))
        self.assertEqual(resolve_fee(None), Decimal("10.00"))

    @override_settings(DEFAULT_DELIVERY_FEE=Decimal("15.50"))
    def test_default_fee_is_configurable(self):
        self.assertEqual(resolve_fee("Nowhere"), Decimal("15.50"))


class AllocateFeeTests(TestCase):
    """
    GUARANTEES:
    - Shares always add up to the original fee (no cent drift)
    - Leftover cents go to the earliest lines
    """

    def test_even_split(self):
        self.assertEqual(
            allocate_fee(Decimal("20.00"), 2),
            [Decimal("10.00"), Decimal("10.00")],
        )

    def test_remainder_goes_to_earliest_lines(self):
        shares = allocate_fee(Decimal("10.00"), 3)
        self.assertEqual(shares, [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")])
        self.assertEqual(sum(shares), Decimal("10.00"))

    def test_sum_is_exact_for_many_lines(self):
        for count in range(1, 40):
            shares = allocate_fee(Decimal("17.39"), count)
            self.assertEqual(len(shares), count)
            self.assertEqual(sum(shares), Decimal("17.39"))

    def test_zero_fee(self):
        self.assertEqual(allocate_fee(Decimal("0.00"), 3), [Decimal("0.00")] * 3)

    def test_invalid_line_count(self):
        with self.assertRaises(ValueError):
            allocate_fee(Decimal("10.00"), 0)

    def test_negative_fee_rejected(self):
        with self.assertRaises(ValueError):
            allocate_fee(Decimal("-1.00"), 2)


class DeliveryFeeEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        City.objects.create(name="Rabat", delivery_fee=Decimal("25.00"))

    def test_known_city(self):
        res = self.client.get("/api/cities/delivery-fee/", {"city": "Rabat"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["deliveryFee"], "25.00")
        self.assertNotIn("note", res.data)

    def test_unknown_city_returns_default_with_note(self):
        res = self.client.get("/api/cities/delivery-fee/", {"city": "Unknownville"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["deliveryFee"], "10.00")
        self.assertIn("note", res.data)

    def test_missing_city_param(self):
        res = self.client.get("/api/cities/delivery-fee/")
        self.assertEqual(res.status_code, 400)
