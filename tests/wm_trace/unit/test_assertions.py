"""Unit tests for entry assertions."""

import pytest

from sample_traces import (
    CHROME,
    LAUNCHER,
    SPLASH,
    STATUS_BAR,
    TIMESTAMPS,
    app_stack,
    create_display,
    create_snapshot,
    create_window,
    encode,
    launcher_snapshot,
)

from wm_trace.assertions import (
    AssertionResult,
    ErrorCollector,
    FailureReason,
    covers_at_least_region,
    find_windows,
)
from wm_trace.config import CheckerConfig, MatchStrategy, MatchingConfig
from wm_trace.parser import parse_from_dump
from wm_trace.region import Region


def entry_from(containers, timestamp=TIMESTAMPS[0]):
    return parse_from_dump(encode(create_snapshot(containers, timestamp))).first()


@pytest.fixture
def status_bar_over_launcher():
    """StatusBar above the visible launcher, nothing else."""
    containers = [create_display(1), create_window(2, 1, "StatusBar", bounds=[STATUS_BAR])]
    containers += app_stack(10, 1, task_id=2, component="Launcher")
    return entry_from(containers)


class TestCoversAtLeastRegion:
    """Tests for covers_at_least_region."""

    def test_exact_bounds_pass(self, status_bar_over_launcher):
        result = status_bar_over_launcher.covers_at_least_region(
            "StatusBar", Region.from_bounds(0, 0, 1440, 171)
        )
        assert result.passed
        assert result.error is None

    def test_wider_region_reports_uncovered_strip(self, status_bar_over_launcher):
        result = status_bar_over_launcher.covers_at_least_region(
            "StatusBar", Region.from_bounds(0, 0, 1441, 171)
        )

        assert result.failed
        assert result.reason is FailureReason.WRONG_REGION
        assert result.region == Region.from_bounds(1440, 0, 1441, 171)
        assert "Uncovered region: Region((1440,0,1441,171))" in result.message

    def test_uncovered_region_is_exact_difference(self, status_bar_over_launcher):
        wanted = Region.from_bounds(-10, -10, 1500, 100)
        bounds = Region.from_bounds(0, 0, 1440, 171)

        result = status_bar_over_launcher.covers_at_least_region("StatusBar", wanted)

        assert result.region == wanted - bounds

    def test_missing_window(self, status_bar_over_launcher):
        result = status_bar_over_launcher.covers_at_least_region("NavigationBar", Region.from_bounds(0, 0, 1, 1))
        assert result.reason is FailureReason.NOT_FOUND
        assert "cannot be found" in result.message

    def test_invisible_window(self, launcher_entry):
        result = launcher_entry.covers_at_least_region("InputMethod", Region.from_bounds(0, 1800, 1440, 2792))
        assert result.reason is FailureReason.INVISIBLE
        assert "is invisible" in result.message

    def test_module_function_matches_entry_method(self, status_bar_over_launcher):
        region = Region.from_bounds(0, 0, 1441, 171)
        assert covers_at_least_region(status_bar_over_launcher, "StatusBar", region).region == \
            status_bar_over_launcher.covers_at_least_region("StatusBar", region).region


class TestCoversAtMostRegion:
    """Tests for covers_at_most_region."""

    def test_inside_region_passes(self, status_bar_over_launcher):
        result = status_bar_over_launcher.covers_at_most_region("Launcher", Region.from_bounds(0, 0, 1440, 2960))
        assert result.passed

    def test_out_of_bounds_region_is_exact_difference(self, status_bar_over_launcher):
        limit = Region.from_bounds(0, 171, 1440, 2960)

        result = status_bar_over_launcher.covers_at_most_region("Launcher", limit)

        assert result.failed
        assert result.region == Region.from_bounds(0, 0, 1440, 171)
        assert "Out-of-bounds region: Region((0,0,1440,171))" in result.message

    def test_bounds_are_union_of_visible_matches(self):
        containers = [create_display(1)]
        containers += app_stack(10, 1, task_id=1, component=CHROME, bounds=[[0, 0, 100, 100]])
        containers.append(create_window(13, 11, "com.android.chrome popup", bounds=[[100, 0, 200, 100]]))

        entry = entry_from(containers)

        assert entry.covers_at_most_region("com.android.chrome", Region.from_bounds(0, 0, 200, 100)).passed
        assert entry.covers_at_least_region("com.android.chrome", Region.from_bounds(0, 0, 200, 100)).passed


class TestNonAppWindow:
    """Tests for has_non_app_window and is_above_app_window."""

    def test_visible_system_window(self, launcher_entry):
        assert launcher_entry.has_non_app_window("StatusBar").passed
        assert launcher_entry.has_non_app_window("wallpaper").passed
        assert launcher_entry.is_above_app_window("NavigationBar").passed

    def test_invisible_input_method(self, launcher_entry):
        result = launcher_entry.has_non_app_window("InputMethod")

        assert result.failed
        assert result.reason is FailureReason.INVISIBLE
        assert "is invisible" in result.message
        assert result.error.window_token == "8"
        assert result.error.layer_id == 80

    def test_absent_input_method(self, status_bar_over_launcher):
        result = status_bar_over_launcher.has_non_app_window("InputMethod")

        assert result.failed
        assert result.reason is FailureReason.NOT_FOUND
        assert "cannot be found" in result.message

    def test_exact_match_by_default(self, launcher_entry):
        assert launcher_entry.has_non_app_window("Status").failed
        assert launcher_entry.has_non_app_window("ScreenDecorOverlay").passed

    def test_match_by_token(self, launcher_entry):
        assert launcher_entry.has_non_app_window("5").passed

    def test_wallpaper_is_not_above_app(self, launcher_entry):
        result = launcher_entry.is_above_app_window("wallpaper")
        assert result.reason is FailureReason.NOT_FOUND

    def test_app_window_is_not_non_app(self, launcher_entry):
        assert launcher_entry.has_non_app_window(LAUNCHER).failed


class TestAppWindowVisible:
    """Tests for is_app_window_visible."""

    def test_substring_of_package(self, launcher_entry):
        assert launcher_entry.is_app_window_visible("com.google.android.apps.nexuslauncher").passed

    def test_stopped_app_is_invisible(self, launcher_entry):
        result = launcher_entry.is_app_window_visible("com.android.chrome")

        assert result.reason is FailureReason.INVISIBLE
        assert result.error.task_id == 5

    def test_system_window_is_not_app(self, launcher_entry):
        assert launcher_entry.is_app_window_visible("StatusBar").reason is FailureReason.NOT_FOUND


class TestAppWindowOnTop:
    """Tests for is_visible_app_window_on_top."""

    def test_first_listed_app_window_is_on_top(self):
        containers = [create_display(1)]
        containers += app_stack(10, 1, task_id=1, component="A")
        containers += app_stack(20, 1, task_id=2, component="B")
        entry = entry_from(containers)

        assert entry.is_visible_app_window_on_top("A").passed

        result = entry.is_visible_app_window_on_top("B")
        assert result.failed
        assert result.reason is FailureReason.WRONG_Z_ORDER
        assert "wanted=B" in result.message
        assert "found=A" in result.message

    def test_above_app_windows_never_count(self, launcher_entry):
        assert launcher_entry.is_visible_app_window_on_top("nexuslauncher").passed
        assert launcher_entry.is_visible_app_window_on_top("StatusBar").failed

    def test_below_app_windows_never_count(self):
        containers = [create_display(1)]
        containers += app_stack(10, 1, task_id=1, component="A", visible=False)
        containers.append(create_window(20, 1, "wallpaper"))
        entry = entry_from(containers)

        result = entry.is_visible_app_window_on_top("wallpaper")
        assert result.reason is FailureReason.NOT_FOUND
        assert "No visible app window found" in result.message

    def test_splash_screen_on_top(self, chrome_trace):
        entry = chrome_trace.get_entry(TIMESTAMPS[1])

        assert entry.is_visible_app_window_on_top(SPLASH).passed
        assert entry.is_visible_app_window_on_top("com.android.chrome").passed
        assert entry.is_visible_app_window_on_top("nexuslauncher").failed
        assert entry.is_app_window_visible("nexuslauncher").passed


class TestActivityAssertions:
    """Tests for is_activity_visible and has_resumed_activity."""

    def test_visible_activity(self, launcher_entry):
        assert launcher_entry.is_activity_visible("nexuslauncher").passed
        assert launcher_entry.is_activity_visible("com.android.chrome").reason is FailureReason.INVISIBLE
        assert launcher_entry.is_activity_visible("com.example").reason is FailureReason.NOT_FOUND

    def test_resumed_activity(self, chrome_trace):
        first, second, third = chrome_trace

        assert first.has_resumed_activity("nexuslauncher").passed
        result = second.has_resumed_activity("com.android.chrome")
        assert result.reason is FailureReason.WRONG_STATE
        assert "state=INITIALIZING" in result.message
        assert result.error.task_id == 5
        assert third.has_resumed_activity("com.android.chrome").passed


class TestMatchingConfig:
    """Match strategies can be overridden per assertion."""

    def test_substring_for_non_app(self, launcher_entry):
        config = CheckerConfig(matching=MatchingConfig(non_app=MatchStrategy.SUBSTRING))
        assert launcher_entry.has_non_app_window("Status", config).passed

    def test_exact_for_app(self, launcher_entry):
        config = CheckerConfig(matching=MatchingConfig(app=MatchStrategy.EXACT))
        assert launcher_entry.is_app_window_visible("nexuslauncher", config).failed
        assert launcher_entry.is_app_window_visible(LAUNCHER, config).passed

    def test_prefix(self, launcher_entry):
        config = CheckerConfig(matching=MatchingConfig(non_app=MatchStrategy.PREFIX))
        assert launcher_entry.has_non_app_window("Navigation", config).passed
        assert launcher_entry.has_non_app_window("Bar", config).failed

    def test_find_windows_matches_owner_activity(self, launcher_entry):
        windows = find_windows(launcher_entry, "nexuslauncher", MatchStrategy.SUBSTRING)
        assert [w.container_id for w in windows] == [12]


class TestErrorRecord:
    """Failed results carry an ErrorRecord."""

    def test_error_fields(self, launcher_entry):
        result = launcher_entry.has_non_app_window("InputMethod")
        error = result.error

        assert error.assertion_name == "has_non_app_window"
        assert error.message == result.message
        assert error.stacktrace.startswith(f"entry timestamp={TIMESTAMPS[0]}")
        assert error.task_id is None

    def test_to_dict(self, status_bar_over_launcher):
        result = status_bar_over_launcher.covers_at_least_region("StatusBar", Region.from_bounds(0, 0, 1441, 171))
        data = result.to_dict()

        assert data["passed"] is False
        assert data["reason"] == "wrong_region"
        assert data["region"] == [[1440, 0, 1441, 171]]
        assert data["error"]["assertion_name"] == "covers_at_least_region"

    def test_str(self, launcher_entry):
        assert str(launcher_entry.has_non_app_window("StatusBar")) == "✓ has_non_app_window: StatusBar is visible"
        assert str(launcher_entry.has_non_app_window("InputMethod")).startswith("✗ has_non_app_window")


class TestErrorCollector:
    """Tests for ErrorCollector."""

    def test_collects_only_failures(self, launcher_entry):
        collector = ErrorCollector()
        collector.add(launcher_entry.is_above_app_window("StatusBar"))
        collector.add(launcher_entry.has_non_app_window("InputMethod"))
        collector.extend([
            launcher_entry.is_app_window_visible("com.android.chrome"),
            launcher_entry.is_visible_app_window_on_top("nexuslauncher"),
        ])

        assert len(collector.results) == 4
        assert collector.passed_count == 2
        assert collector.failed_count == 2
        assert collector.has_errors
        assert len(collector) == 2
        assert [e.assertion_name for e in collector.errors] == [
            "has_non_app_window",
            "is_app_window_visible",
        ]
        assert str(collector) == "Assertions: 2 passed, 2 failed"

    def test_empty_collector(self):
        collector = ErrorCollector()
        assert not collector.has_errors
        assert collector.to_dict() == {"passed": 0, "failed": 0, "results": [], "errors": []}

    def test_failures_are_logged(self, launcher_entry, caplog):
        collector = ErrorCollector()
        with caplog.at_level("WARNING", logger="wm_trace.assertions"):
            collector.add(launcher_entry.has_non_app_window("InputMethod"))
        assert "InputMethod is invisible" in caplog.text

    def test_add_returns_result(self, launcher_entry):
        result = launcher_entry.has_non_app_window("StatusBar")
        assert ErrorCollector().add(result) is result
        assert isinstance(result, AssertionResult)


def test_launcher_snapshot_round_trip_through_dump():
    entry = parse_from_dump(encode(launcher_snapshot())).first()
    assert entry.is_above_app_window("StatusBar").passed
