#!/usr/bin/env python3
"""
Stats aggregation tests — dense weekly/monthly windows and rate bounds.
"""

import unittest
from datetime import date, timedelta

from tests.helpers import DatabaseTestCase

from models.habit_day import HabitDay
from services.goal_service import GoalService
from services.stats_service import (
    StatsService,
    build_weekly,
    clamp_percentage,
    summarise_monthly,
    week_start,
)

TODAY = date(2024, 3, 14)  # a Thursday


def fake_day(d, training=False, nutrition=False, movement=False, meditation=False, steps=0):
    return HabitDay(user_id=1, date=d, training=training, nutrition=nutrition,
                    movement=movement, meditation=meditation, steps=steps)


class TestPureAggregation(unittest.TestCase):
    def test_week_start(self):
        self.assertEqual(week_start(TODAY), date(2024, 3, 8))
        self.assertEqual(week_start(TODAY, calendar_week=True), date(2024, 3, 10))  # Sunday
        sunday = date(2024, 3, 10)
        self.assertEqual(week_start(sunday, calendar_week=True), sunday)

    def test_weekly_always_seven_entries(self):
        start = week_start(TODAY)
        for count in range(8):
            rows = {start + timedelta(days=i): fake_day(start + timedelta(days=i), training=True)
                    for i in range(count)}
            data = build_weekly(rows, start)
            self.assertEqual(len(data), 7)
            self.assertEqual(sum(e["points"] for e in data), count)

    def test_two_active_days_with_three_flags(self):
        start = week_start(TODAY)
        active = [start + timedelta(days=1), start + timedelta(days=5)]
        rows = {d: fake_day(d, training=True, nutrition=True, meditation=True) for d in active}

        data = build_weekly(rows, start)

        self.assertEqual(len(data), 7)
        self.assertEqual([e["points"] for e in data].count(0), 5)
        self.assertEqual([e["points"] for e in data].count(3), 2)
        self.assertEqual(sum(e["points"] for e in data), 6)
        self.assertEqual(data[0]["date"], start.isoformat())

    def test_monthly_rates_use_thirty_day_denominator(self):
        start = TODAY - timedelta(days=29)
        rows = {start + timedelta(days=i): fake_day(start + timedelta(days=i), training=True, steps=1000)
                for i in range(15)}

        summary = summarise_monthly(rows)

        self.assertEqual(summary["habit_completion"]["training"], 50)
        self.assertEqual(summary["habit_completion"]["nutrition"], 0)
        self.assertEqual(summary["total_active_days"], 15)
        self.assertEqual(summary["total_points"], 15)
        # averages divide by active days, not 30
        self.assertEqual(summary["average_daily_points"], 1.0)
        self.assertEqual(summary["average_steps"], 1000)
        self.assertEqual(summary["completion_rate"], 12)

    def test_rates_are_bounded(self):
        start = TODAY - timedelta(days=29)
        full = {start + timedelta(days=i): fake_day(start + timedelta(days=i), True, True, True, True)
                for i in range(30)}
        self.assertEqual(summarise_monthly(full)["habit_completion"],
                         {"training": 100, "nutrition": 100, "movement": 100, "meditation": 100})
        self.assertEqual(summarise_monthly(full)["completion_rate"], 100)

        empty = summarise_monthly({})
        self.assertEqual(empty["completion_rate"], 0)
        self.assertEqual(empty["average_daily_points"], 0)
        self.assertEqual(empty["average_steps"], 0)

        self.assertEqual(clamp_percentage(140), 100)
        self.assertEqual(clamp_percentage(-3), 0)

    def test_points_property(self):
        self.assertEqual(fake_day(TODAY).points, 0)
        self.assertEqual(fake_day(TODAY, True, False, True, False).points, 2)
        self.assertEqual(fake_day(TODAY, True, True, True, True).points, 4)


class TestStatsService(DatabaseTestCase):
    def test_weekly_window_reads_ledger(self):
        user = self.add_user()
        self.add_day(user.id, TODAY, training=True, movement=True, steps=4000)
        self.add_day(user.id, TODAY - timedelta(days=6), meditation=True)
        self.add_day(user.id, TODAY - timedelta(days=7), training=True)  # outside the window

        data = StatsService.weekly_window(self.db, user.id, TODAY)

        self.assertEqual(len(data), 7)
        self.assertEqual(data[-1], {"date": TODAY.isoformat(), "points": 2, "steps": 4000})
        self.assertEqual(StatsService.weekly_points(self.db, user.id, TODAY), 3)

    def test_other_users_not_counted(self):
        user = self.add_user()
        other = self.add_user()
        self.add_day(other.id, TODAY, training=True)
        self.assertEqual(StatsService.weekly_points(self.db, user.id, TODAY), 0)

    def test_user_stats_payload(self):
        user = self.add_user()
        self.add_day(user.id, TODAY, training=True, nutrition=True, steps=6000)
        self.add_day(user.id, TODAY - timedelta(days=20), meditation=True, steps=2000)
        GoalService.upsert(self.db, user.id, {"weekly_points_goal": 10})

        stats = StatsService.get_user_stats(self.db, user.id, TODAY)

        self.assertEqual(stats["weekly_points"], 2)
        self.assertEqual(len(stats["weekly_data"]), 7)
        self.assertEqual(stats["weekly_data"][0]["date"], "2024-03-10")
        self.assertEqual(len(stats["monthly_data"]), 30)
        self.assertEqual(stats["total_active_days"], 2)
        self.assertEqual(stats["average_daily_points"], 1.5)
        self.assertEqual(stats["average_steps"], 4000)
        self.assertEqual(stats["habit_completion"]["training"], 3)
        self.assertEqual(stats["weekly_points_goal"], 10)
        self.assertEqual(stats["daily_steps_goal"], 6500)
        self.assertEqual(stats["weekly_goal_progress"], 20)
        self.assertTrue(0 <= stats["completion_rate"] <= 100)


if __name__ == "__main__":
    unittest.main()
