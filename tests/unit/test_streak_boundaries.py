"""Streak boundary tests — UTC week boundaries and the weekly-goal transition."""

from datetime import date, datetime, timezone

from jgp.progress.streak_service import (
    DEFAULT_STREAK_GOAL,
    StreakState,
    advance_streak,
    get_monday,
    streak_goal_name,
    weekly_goal,
)

MONDAY = date(2026, 2, 23)
WEDNESDAY = date(2026, 2, 25)
SUNDAY = date(2026, 3, 1)
NEXT_MONDAY = date(2026, 3, 2)


def _state(count: int, streak: int = 0, longest: int = 0, week: date = MONDAY) -> StreakState:
    return StreakState(
        current_streak=streak,
        longest_streak=longest,
        weekly_session_count=count,
        week_start_date=week,
        last_session_date=week,
    )


class TestGetMonday:
    """Test Monday calculation."""

    def test_monday_returns_itself(self):
        dt = datetime(2026, 2, 23, 0, 0, 0, tzinfo=timezone.utc)
        assert get_monday(dt) == MONDAY

    def test_sunday_returns_previous_monday(self):
        dt = datetime(2026, 3, 1, 23, 59, 59, tzinfo=timezone.utc)
        assert get_monday(dt) == MONDAY

    def test_wednesday_returns_monday(self):
        assert get_monday(WEDNESDAY) == MONDAY

    def test_sunday_to_monday_boundary(self):
        assert get_monday(SUNDAY) != get_monday(NEXT_MONDAY)
        assert get_monday(NEXT_MONDAY) == NEXT_MONDAY

    def test_year_boundary(self):
        assert get_monday(date(2026, 1, 1)) == date(2025, 12, 29)


class TestWeeklyGoal:
    def test_default_goal(self):
        assert streak_goal_name(None) == DEFAULT_STREAK_GOAL
        assert weekly_goal({}) == 3

    def test_configured_goals(self):
        assert weekly_goal({"streakGoal": "DAILY"}) == 7
        assert weekly_goal({"streakGoal": "FIVE_PER_WEEK"}) == 5
        assert weekly_goal({"streakGoal": "TWO_PER_WEEK"}) == 2

    def test_unknown_goal_falls_back(self):
        assert weekly_goal({"streakGoal": "HOURLY"}) == 3


class TestAdvanceStreak:
    def test_first_session_starts_the_week(self):
        state = advance_streak(None, today=WEDNESDAY, goal=3)
        assert state == StreakState(
            current_streak=0,
            longest_streak=0,
            weekly_session_count=1,
            week_start_date=MONDAY,
            last_session_date=WEDNESDAY,
        )

    def test_same_week_below_goal_only_counts(self):
        state = advance_streak(_state(1), today=WEDNESDAY, goal=3)
        assert state.weekly_session_count == 2
        assert state.current_streak == 0

    def test_reaching_goal_extends_streak_once(self):
        state = advance_streak(_state(2), today=WEDNESDAY, goal=3)
        assert state.weekly_session_count == 3
        assert state.current_streak == 1
        assert state.longest_streak == 1

        state = advance_streak(state, today=SUNDAY, goal=3)
        assert state.weekly_session_count == 4
        assert state.current_streak == 1

    def test_new_week_after_met_goal(self):
        state = advance_streak(_state(3, streak=1, longest=1), today=NEXT_MONDAY, goal=3)
        assert state.current_streak == 2
        assert state.longest_streak == 2
        assert state.weekly_session_count == 1
        assert state.week_start_date == NEXT_MONDAY

    def test_new_week_after_missed_goal_resets(self):
        state = advance_streak(_state(2, streak=4, longest=6), today=NEXT_MONDAY, goal=3)
        assert state.current_streak == 0
        assert state.longest_streak == 6
        assert state.weekly_session_count == 1

    def test_skipped_weeks_judge_last_recorded_week(self):
        state = advance_streak(_state(3, streak=1, longest=1), today=date(2026, 3, 18), goal=3)
        assert state.current_streak == 2
        assert state.week_start_date == date(2026, 3, 16)

    def test_goal_of_one_credits_first_session_of_week(self):
        state = advance_streak(_state(0), today=WEDNESDAY, goal=1)
        assert state.current_streak == 1

    def test_longest_never_decreases(self):
        state = _state(0, streak=0, longest=5)
        for day in (MONDAY, WEDNESDAY, SUNDAY):
            state = advance_streak(state, today=day, goal=2)
            assert state.longest_streak == 5
