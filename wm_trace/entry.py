"""One snapshot of the window manager state.

A TraceEntry takes ownership of the container tree(s) of one snapshot and
resolves their derived state once:

- effective visibility (explicit flag gated by every ancestor)
- owning activity of every window
- band of every window (above-app, app, below-app)

It then keeps flat, z-ordered views of the windows so that queries and
assertions are plain reads.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .containers import (
    Activity,
    ActivityTask,
    Display,
    WindowBand,
    WindowContainer,
    WindowState,
    check_root_kind,
)
from .region import Region
from . import assertions

if TYPE_CHECKING:
    from .config import CheckerConfig

RESUMED_STATE = "RESUMED"


@dataclass(eq=False)
class TraceEntry:
    """Window manager state at one timestamp."""

    timestamp: int
    roots: Sequence[WindowContainer]
    focused_app: Optional[str] = None
    focused_window: Optional[str] = None

    window_states: Tuple[WindowState, ...] = field(init=False, repr=False)
    """Every window in z-order, top-most first"""

    visible_windows: Tuple[WindowState, ...] = field(init=False, repr=False)
    app_windows: Tuple[WindowState, ...] = field(init=False, repr=False)
    above_app_windows: Tuple[WindowState, ...] = field(init=False, repr=False)
    below_app_windows: Tuple[WindowState, ...] = field(init=False, repr=False)
    non_app_windows: Tuple[WindowState, ...] = field(init=False, repr=False)

    visible_z_stack: Tuple[WindowState, ...] = field(init=False, repr=False)
    """Visible windows ordered by band, then by z-order inside the band"""

    displays: Tuple[Display, ...] = field(init=False, repr=False)
    tasks: Tuple[ActivityTask, ...] = field(init=False, repr=False)
    activities: Tuple[Activity, ...] = field(init=False, repr=False)

    _by_id: Dict[int, WindowContainer] = field(init=False, repr=False)

    def __post_init__(self):
        """Resolve visibility and classification, then build the flat views."""
        self.roots = tuple(self.roots)
        self._by_id = {}

        # (window, display key) in pre-order
        ordered: List[Tuple[WindowState, int]] = []

        for root in self.roots:
            if not root.is_root:
                raise ValueError(
                    f"{root.kind.value} {root.container_id} has parent {root.parent_id} "
                    f"and cannot be a root"
                )
            check_root_kind(root)
            self._resolve_subtree(root, ordered)

        self._classify_bands(ordered)

        windows = [window for window, _ in ordered]
        self.window_states = tuple(windows)
        self.visible_windows = tuple(w for w in windows if w.is_visible)
        self.app_windows = tuple(w for w in windows if w.band is WindowBand.APP)
        self.above_app_windows = tuple(w for w in windows if w.band is WindowBand.ABOVE_APP)
        self.below_app_windows = tuple(w for w in windows if w.band is WindowBand.BELOW_APP)
        self.non_app_windows = self.above_app_windows + self.below_app_windows

        # sorted() is stable, z-order is kept inside each band
        self.visible_z_stack = tuple(sorted(self.visible_windows, key=lambda w: w.band.rank))

        nodes = list(self._by_id.values())
        self.displays = tuple(n for n in nodes if isinstance(n, Display))
        self.tasks = tuple(n for n in nodes if isinstance(n, ActivityTask))
        self.activities = tuple(n for n in nodes if isinstance(n, Activity))

    def _resolve_subtree(
        self,
        root: WindowContainer,
        ordered: List[Tuple[WindowState, int]],
    ) -> None:
        # (node, parent visible, owning activity, display key)
        stack: List[Tuple[WindowContainer, bool, Optional[Activity], int]] = [
            (root, True, None, root.container_id)
        ]
        while stack:
            node, parent_visible, activity, display_key = stack.pop()
            if node.container_id in self._by_id:
                raise ValueError(f"Container {node.container_id} appears twice in entry {self.timestamp}")
            self._by_id[node.container_id] = node

            node.is_visible = node.visible and parent_visible
            if isinstance(node, Display):
                display_key = node.container_id
            if isinstance(node, Activity):
                activity = node
            if isinstance(node, WindowState):
                node.activity_id = activity.container_id if activity is not None else None
                ordered.append((node, display_key))

            for child in reversed(node.children):
                stack.append((child, node.is_visible, activity, display_key))

    @staticmethod
    def _classify_bands(ordered: List[Tuple[WindowState, int]]) -> None:
        """Windows before the first app window of their display are above-app, after it below-app."""
        first_app: Dict[int, int] = {}
        for position, (window, display_key) in enumerate(ordered):
            if window.activity_id is not None and display_key not in first_app:
                first_app[display_key] = position

        for position, (window, display_key) in enumerate(ordered):
            if window.activity_id is not None:
                window.band = WindowBand.APP
            elif display_key not in first_app or position < first_app[display_key]:
                window.band = WindowBand.ABOVE_APP
            else:
                window.band = WindowBand.BELOW_APP

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def root_tasks(self) -> Tuple[ActivityTask, ...]:
        """Tasks not nested in another task."""
        return tuple(
            task for task in self.tasks
            if not isinstance(self._by_id.get(task.parent_id), ActivityTask)
        )

    @property
    def resumed_activities(self) -> Tuple[Activity, ...]:
        return tuple(a for a in self.activities if a.state == RESUMED_STATE)

    @property
    def top_visible_app_window(self) -> Optional[WindowState]:
        return next((w for w in self.visible_z_stack if w.band is WindowBand.APP), None)

    def find_container(self, container_id: int) -> Optional[WindowContainer]:
        return self._by_id.get(container_id)

    def task_of(self, activity: Activity) -> Optional[ActivityTask]:
        """Resolve the task owning ``activity``."""
        task = self._by_id.get(activity.task_container_id)
        return task if isinstance(task, ActivityTask) else None

    def window_owner(self, window: WindowState) -> Optional[Activity]:
        """Activity owning an app window, None for non-app windows."""
        if window.activity_id is None:
            return None
        owner = self._by_id.get(window.activity_id)
        return owner if isinstance(owner, Activity) else None

    def get_task(self, task_id: int) -> Optional[ActivityTask]:
        return next((t for t in self.tasks if t.task_id == task_id), None)

    def get_activity(self, name: str) -> Optional[Activity]:
        """First activity whose title contains ``name``."""
        return next((a for a in self.activities if name in a.title), None)

    def contains_activity(self, name: str) -> bool:
        return self.get_activity(name) is not None

    def windows_in_band(self, band: WindowBand) -> Tuple[WindowState, ...]:
        return tuple(w for w in self.window_states if w.band is band)

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def is_above_app_window(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.is_above_app_window(self, name, config)

    def has_non_app_window(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.has_non_app_window(self, name, config)

    def is_app_window_visible(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.is_app_window_visible(self, name, config)

    def is_visible_app_window_on_top(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.is_visible_app_window_on_top(self, name, config)

    def covers_at_least_region(self, name: str, region: Region, config: Optional["CheckerConfig"] = None):
        return assertions.covers_at_least_region(self, name, region, config)

    def covers_at_most_region(self, name: str, region: Region, config: Optional["CheckerConfig"] = None):
        return assertions.covers_at_most_region(self, name, region, config)

    def is_activity_visible(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.is_activity_visible(self, name, config)

    def has_resumed_activity(self, name: str, config: Optional["CheckerConfig"] = None):
        return assertions.has_resumed_activity(self, name, config)

    def __str__(self) -> str:
        return (
            f"TraceEntry(timestamp={self.timestamp}, windows={len(self.window_states)}, "
            f"visible={len(self.visible_windows)}, app={len(self.app_windows)})"
        )
