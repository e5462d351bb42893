"""Tests for datepartition.planner"""

import datetime

from django.test import SimpleTestCase

from datepartition.exceptions import InvalidRangeError
from datepartition.planner import MAXVALUE, PartitionDescriptor, advance, plan


class PlanTest(SimpleTestCase):
    def test_daily_range(self):
        partitions = plan(datetime.date(2024, 1, 1), datetime.date(2024, 1, 3))

        self.assertEqual(
            partitions,
            [
                PartitionDescriptor("p20240101", datetime.date(2024, 1, 2)),
                PartitionDescriptor("p20240102", datetime.date(2024, 1, 3)),
                PartitionDescriptor("p20240103", datetime.date(2024, 1, 4)),
                PartitionDescriptor("p_future", MAXVALUE),
            ],
        )

    def test_single_day(self):
        day = datetime.date(2024, 5, 17)
        partitions = plan(day, day)

        self.assertEqual(len(partitions), 2)
        self.assertEqual(partitions[0].name, "p20240517")
        self.assertTrue(partitions[1].is_catchall)

    def test_start_after_end(self):
        with self.assertRaises(InvalidRangeError):
            plan(datetime.date(2024, 1, 2), datetime.date(2024, 1, 1))

    def test_invalid_range_is_a_value_error(self):
        with self.assertRaises(ValueError):
            plan(datetime.date(2024, 1, 2), datetime.date(2024, 1, 1))

    def test_bounds_strictly_increase_across_year_end(self):
        partitions = plan(datetime.date(2023, 12, 30), datetime.date(2024, 1, 2))

        self.assertEqual(
            [p.name for p in partitions],
            ["p20231230", "p20231231", "p20240101", "p20240102", "p_future"],
        )
        bounds = [p.upper_bound for p in partitions[:-1]]
        self.assertEqual(bounds, sorted(set(bounds)))
        self.assertEqual([p.is_catchall for p in partitions].count(True), 1)
        self.assertTrue(partitions[-1].is_catchall)

    def test_leap_day(self):
        partitions = plan(datetime.date(2024, 2, 28), datetime.date(2024, 3, 1))

        self.assertEqual(
            [(p.name, p.upper_bound) for p in partitions[:-1]],
            [
                ("p20240228", datetime.date(2024, 2, 29)),
                ("p20240229", datetime.date(2024, 3, 1)),
                ("p20240301", datetime.date(2024, 3, 2)),
            ],
        )

    def test_monthly_range_starts_at_month_start(self):
        partitions = plan(
            datetime.date(2024, 1, 15), datetime.date(2024, 3, 1), granularity="month"
        )

        self.assertEqual(
            [(p.name, p.upper_bound) for p in partitions[:-1]],
            [
                ("p202401", datetime.date(2024, 2, 1)),
                ("p202402", datetime.date(2024, 3, 1)),
                ("p202403", datetime.date(2024, 4, 1)),
            ],
        )

    def test_yearly_range(self):
        partitions = plan(
            datetime.date(2023, 6, 1), datetime.date(2024, 2, 1), granularity="year"
        )

        self.assertEqual(
            [(p.name, p.upper_bound) for p in partitions[:-1]],
            [
                ("p2023", datetime.date(2024, 1, 1)),
                ("p2024", datetime.date(2025, 1, 1)),
            ],
        )

    def test_datetimes_are_normalized_to_dates(self):
        self.assertEqual(
            plan(
                datetime.datetime(2024, 1, 1, 13, 5),
                datetime.datetime(2024, 1, 2, 23, 59),
            ),
            plan(datetime.date(2024, 1, 1), datetime.date(2024, 1, 2)),
        )

    def test_deterministic(self):
        start, end = datetime.date(2024, 6, 1), datetime.date(2024, 6, 30)
        self.assertEqual(plan(start, end), plan(start, end))

    def test_custom_catchall_name(self):
        partitions = plan(
            datetime.date(2024, 1, 1), datetime.date(2024, 1, 1), catchall_name="pmax"
        )
        self.assertEqual(partitions[-1], PartitionDescriptor("pmax", MAXVALUE))

    def test_catchall_name_must_not_look_dated(self):
        with self.assertRaises(ValueError):
            plan(
                datetime.date(2024, 1, 1),
                datetime.date(2024, 1, 1),
                catchall_name="p20240102",
            )

    def test_unknown_granularity(self):
        with self.assertRaises(ValueError):
            plan(datetime.date(2024, 1, 1), datetime.date(2024, 1, 2), "week")


class PartitionDescriptorTest(SimpleTestCase):
    def test_bound_literal(self):
        self.assertEqual(
            PartitionDescriptor("p20240101", datetime.date(2024, 1, 2)).bound_literal,
            "'2024-01-02'",
        )
        self.assertEqual(PartitionDescriptor("p_future", MAXVALUE).bound_literal, "MAXVALUE")

    def test_advance(self):
        self.assertEqual(
            advance(datetime.date(2024, 1, 31), "month", 1), datetime.date(2024, 2, 29)
        )
        self.assertEqual(
            advance(datetime.date(2024, 1, 2), "day", 30), datetime.date(2024, 2, 1)
        )
