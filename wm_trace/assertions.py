"""Assertions over a single trace entry.

Every assertion is a pure function of a TraceEntry that returns an
AssertionResult. A failing assertion is a value, not an exception: the result
carries the reason, a message naming the queried window, and an ErrorRecord
pointing at the window, layer and task involved.

ErrorCollector accumulates the failures of several assertions so that every
violation of a check pass can be reported at once.
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .config import DEFAULT_CONFIG, CheckerConfig, MatchStrategy
from .containers import Activity, WindowState
from .errors import ErrorRecord
from .region import Region

if TYPE_CHECKING:
    from .entry import TraceEntry

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why an assertion failed."""
    NOT_FOUND = "not_found"
    INVISIBLE = "invisible"
    WRONG_REGION = "wrong_region"
    WRONG_Z_ORDER = "wrong_z_order"
    WRONG_STATE = "wrong_state"


@dataclass(frozen=True)
class AssertionResult:
    """Outcome of one assertion."""
    assertion_name: str
    passed: bool
    message: str
    reason: Optional[FailureReason] = None
    region: Optional[Region] = None
    """Uncovered or out-of-bounds region of a failed coverage assertion"""
    error: Optional[ErrorRecord] = None

    @property
    def failed(self) -> bool:
        return not self.passed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "assertion": self.assertion_name,
            "passed": self.passed,
            "message": self.message,
            "reason": self.reason.value if self.reason else None,
            "region": [r.to_list() for r in self.region] if self.region is not None else None,
            "error": self.error.to_dict() if self.error else None,
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        status_symbol = "✓" if self.passed else "✗"
        return f"{status_symbol} {self.assertion_name}: {self.message}"


# ============================================================================
# Helpers
# ============================================================================

def _passed(assertion_name: str, message: str) -> AssertionResult:
    logger.debug(f"{assertion_name} passed: {message}")
    return AssertionResult(assertion_name=assertion_name, passed=True, message=message)


def _failed(
    entry: "TraceEntry",
    assertion_name: str,
    message: str,
    reason: FailureReason,
    window: Optional[WindowState] = None,
    activity: Optional[Activity] = None,
    region: Optional[Region] = None,
) -> AssertionResult:
    """Build a failed result with its ErrorRecord."""
    if activity is None and window is not None:
        activity = entry.window_owner(window)
    task = entry.task_of(activity) if activity is not None else None

    # Omit this helper's own frame
    stack = "".join(traceback.format_stack()[:-1])
    error = ErrorRecord(
        stacktrace=f"entry timestamp={entry.timestamp}\n{stack}",
        message=message,
        layer_id=window.layer_id if window is not None else None,
        window_token=window.token if window is not None else (activity.token if activity else None),
        task_id=task.task_id if task is not None else None,
        assertion_name=assertion_name,
    )
    logger.debug(f"{assertion_name} failed at {entry.timestamp}: {message}")
    return AssertionResult(
        assertion_name=assertion_name,
        passed=False,
        message=message,
        reason=reason,
        region=region,
        error=error,
    )


def _config(config: Optional[CheckerConfig]) -> CheckerConfig:
    return config if config is not None else DEFAULT_CONFIG


def window_matches(
    entry: "TraceEntry",
    window: WindowState,
    name: str,
    strategy: MatchStrategy,
) -> bool:
    """Compare ``name`` to the identifiers of ``window``.

    Identifiers are the window title and, for app windows, the title of the
    owning activity (its package/component name). Exact matching also accepts
    the window token.
    """
    candidates = [window.title]
    owner = entry.window_owner(window)
    if owner is not None:
        candidates.append(owner.title)
    if strategy is MatchStrategy.EXACT:
        candidates.append(window.token)
    return any(strategy.matches(candidate, name) for candidate in candidates if candidate)


def find_windows(
    entry: "TraceEntry",
    name: str,
    strategy: MatchStrategy,
    windows: Optional[Sequence[WindowState]] = None,
) -> List[WindowState]:
    """Windows matching ``name`` in z-order (defaults to every window of the entry)."""
    pool = entry.window_states if windows is None else windows
    return [w for w in pool if window_matches(entry, w, name, strategy)]


def _check_visible_window(
    entry: "TraceEntry",
    assertion_name: str,
    name: str,
    windows: Sequence[WindowState],
    strategy: MatchStrategy,
) -> AssertionResult:
    matches = find_windows(entry, name, strategy, windows)
    if not matches:
        return _failed(entry, assertion_name, f"{name} cannot be found", FailureReason.NOT_FOUND)

    visible = next((w for w in matches if w.is_visible), None)
    if visible is None:
        return _failed(
            entry, assertion_name, f"{name} is invisible", FailureReason.INVISIBLE, window=matches[0]
        )
    return _passed(assertion_name, f"{name} is visible")


# ============================================================================
# Visibility assertions
# ============================================================================

def is_above_app_window(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if a visible above-app window (status bar, navigation bar...) matches ``name``."""
    strategy = _config(config).matching.above_app
    return _check_visible_window(entry, "is_above_app_window", name, entry.above_app_windows, strategy)


def has_non_app_window(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if a visible non-app window (above or below the app band) matches ``name``."""
    strategy = _config(config).matching.non_app
    return _check_visible_window(entry, "has_non_app_window", name, entry.non_app_windows, strategy)


def is_app_window_visible(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if a visible app window matches ``name`` (a package name by default)."""
    strategy = _config(config).matching.app
    return _check_visible_window(entry, "is_app_window_visible", name, entry.app_windows, strategy)


def is_visible_app_window_on_top(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if the top-most visible app window matches ``name``.

    Only the app band is considered: above-app windows such as the status bar
    are always stacked over app windows and never count as the top app window.
    """
    assertion_name = "is_visible_app_window_on_top"
    strategy = _config(config).matching.app_on_top

    top = entry.top_visible_app_window
    if top is None:
        return _failed(
            entry, assertion_name, f"No visible app window found, wanted={name}", FailureReason.NOT_FOUND
        )
    if not window_matches(entry, top, name, strategy):
        return _failed(
            entry,
            assertion_name,
            f"wanted={name} found={top.title}",
            FailureReason.WRONG_Z_ORDER,
            window=top,
        )
    return _passed(assertion_name, f"{name} is the top visible app window")


# ============================================================================
# Region assertions
# ============================================================================

def _resolve_bounds(
    entry: "TraceEntry",
    assertion_name: str,
    name: str,
    strategy: MatchStrategy,
) -> Union[Tuple[Region, List[WindowState]], AssertionResult]:
    """Union of the bounds of the visible windows matching ``name``, or a failure."""
    matches = find_windows(entry, name, strategy)
    if not matches:
        return _failed(entry, assertion_name, f"{name} cannot be found", FailureReason.NOT_FOUND)

    visible = [w for w in matches if w.is_visible]
    if not visible:
        return _failed(
            entry, assertion_name, f"{name} is invisible", FailureReason.INVISIBLE, window=matches[0]
        )

    bounds = Region()
    for window in visible:
        bounds = bounds | window.bounds
    return bounds, visible


def covers_at_least_region(
    entry: "TraceEntry",
    name: str,
    region: Region,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if the visible bounds of ``name`` contain ``region``.

    On failure the result region is exactly ``region`` minus the window bounds.
    """
    assertion_name = "covers_at_least_region"
    resolved = _resolve_bounds(entry, assertion_name, name, _config(config).matching.region)
    if isinstance(resolved, AssertionResult):
        return resolved
    bounds, windows = resolved

    uncovered = region - bounds
    if uncovered.is_empty:
        return _passed(assertion_name, f"{name} covers at least {region}")
    return _failed(
        entry,
        assertion_name,
        f"{name} does not cover {region}. Uncovered region: {uncovered}",
        FailureReason.WRONG_REGION,
        window=windows[0],
        region=uncovered,
    )


def covers_at_most_region(
    entry: "TraceEntry",
    name: str,
    region: Region,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if the visible bounds of ``name`` lie inside ``region``.

    On failure the result region is exactly the window bounds minus ``region``.
    """
    assertion_name = "covers_at_most_region"
    resolved = _resolve_bounds(entry, assertion_name, name, _config(config).matching.region)
    if isinstance(resolved, AssertionResult):
        return resolved
    bounds, windows = resolved

    out_of_bounds = bounds - region
    if out_of_bounds.is_empty:
        return _passed(assertion_name, f"{name} covers at most {region}")
    return _failed(
        entry,
        assertion_name,
        f"{name} exceeds {region}. Out-of-bounds region: {out_of_bounds}",
        FailureReason.WRONG_REGION,
        window=windows[0],
        region=out_of_bounds,
    )


# ============================================================================
# Activity assertions
# ============================================================================

def _find_activities(entry: "TraceEntry", name: str, strategy: MatchStrategy) -> List[Activity]:
    return [a for a in entry.activities if a.title and strategy.matches(a.title, name)]


def is_activity_visible(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if a visible activity matches ``name``."""
    assertion_name = "is_activity_visible"
    matches = _find_activities(entry, name, _config(config).matching.activity)
    if not matches:
        return _failed(entry, assertion_name, f"{name} cannot be found", FailureReason.NOT_FOUND)
    if not any(a.is_visible for a in matches):
        return _failed(
            entry, assertion_name, f"{name} is invisible", FailureReason.INVISIBLE, activity=matches[0]
        )
    return _passed(assertion_name, f"{name} is visible")


def has_resumed_activity(
    entry: "TraceEntry",
    name: str,
    config: Optional[CheckerConfig] = None,
) -> AssertionResult:
    """Pass if an activity matching ``name`` is in the RESUMED state."""
    assertion_name = "has_resumed_activity"
    matches = _find_activities(entry, name, _config(config).matching.activity)
    if not matches:
        return _failed(entry, assertion_name, f"{name} cannot be found", FailureReason.NOT_FOUND)

    resumed = [a for a in matches if a in entry.resumed_activities]
    if not resumed:
        states = ", ".join(a.state or "<none>" for a in matches)
        return _failed(
            entry,
            assertion_name,
            f"{name} is not resumed (state={states})",
            FailureReason.WRONG_STATE,
            activity=matches[0],
        )
    return _passed(assertion_name, f"{name} is resumed")


# ============================================================================
# Error accumulation
# ============================================================================

class ErrorCollector:
    """
    Accumulates assertion results and the errors of the failed ones.

    Example:
        collector = ErrorCollector()
        collector.add(entry.is_above_app_window("StatusBar"))
        collector.add(entry.has_non_app_window("InputMethod"))
        for error in collector.errors:
            print(error.assertion_name, error.message)
    """

    def __init__(self):
        self._results: List[AssertionResult] = []
        self._errors: List[ErrorRecord] = []

    def add(self, result: AssertionResult) -> AssertionResult:
        """Record ``result`` and keep its error if it failed."""
        self._results.append(result)
        if result.failed and result.error is not None:
            self._errors.append(result.error)
            logger.warning(f"Assertion failed: {result.assertion_name}: {result.message}")
        return result

    def extend(self, results: Iterable[AssertionResult]) -> None:
        for result in results:
            self.add(result)

    @property
    def results(self) -> Tuple[AssertionResult, ...]:
        return tuple(self._results)

    @property
    def errors(self) -> Tuple[ErrorRecord, ...]:
        return tuple(self._errors)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self._results if r.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self._results if r.failed)

    def __len__(self) -> int:
        return len(self._errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "passed": self.passed_count,
            "failed": self.failed_count,
            "results": [r.to_dict() for r in self._results],
            "errors": [e.to_dict() for e in self._errors],
        }

    def __str__(self) -> str:
        return f"Assertions: {self.passed_count} passed, {self.failed_count} failed"
