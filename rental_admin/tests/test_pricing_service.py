import unittest

import support  # noqa: F401

from services.pricing_service import compute_total, extra_km_charge, to_amount


class PricingTests(unittest.TestCase):
    def test_surcharge_applies_past_fifty_km(self):
        self.assertEqual(compute_total(10, 3, 60), 60)

    def test_fifty_km_is_free(self):
        for price, quantity in [(10, 3), (7.5, 2), (0, 0), (120, 1)]:
            self.assertEqual(compute_total(price, quantity, 50), compute_total(price, quantity, 0))

    def test_linear_in_quantity_within_free_distance(self):
        for km in (0, 12, 50):
            self.assertEqual(compute_total(12.5, 8, km), 2 * compute_total(12.5, 4, km))

    def test_zero_quantity_charges_only_distance(self):
        self.assertEqual(compute_total(99, 0, 70), 60)

    def test_negative_km_has_no_surcharge(self):
        self.assertEqual(compute_total(10, 2, -40), 20)
        self.assertEqual(extra_km_charge(-5), 0)

    def test_missing_or_garbage_inputs_count_as_zero(self):
        self.assertEqual(compute_total(None, 3, None), 0)
        self.assertEqual(compute_total("abc", 3, 55), 15)
        self.assertEqual(compute_total("10", "2", "51"), 23)
        self.assertEqual(compute_total(float("nan"), 2, float("inf")), 0)

    def test_to_amount_reads_booleans_as_numbers(self):
        self.assertEqual(to_amount(True), 1)
        self.assertEqual(compute_total(10, True, False), 10)
        self.assertEqual(to_amount("4.5"), 4.5)


if __name__ == "__main__":
    unittest.main()
