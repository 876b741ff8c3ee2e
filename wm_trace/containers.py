"""Window container hierarchy.

The hierarchy is a closed set of container variants:

- Display: root container of one physical display
- ActivityTask: a task, holding activities (and possibly nested tasks)
- Activity: one activity of an application, always directly under a task
- WindowState: one platform window with its on-screen bounds
- GenericContainer: any other grouping node (window tokens, display areas)

Every container owns an ordered list of children. The order is the one of the
source snapshot and is the z-order: earlier children are on top.

Derived state (effective visibility, band classification, owning activity) is
assigned once when a TraceEntry is built over the tree.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Dict, FrozenSet, Iterator, List, Optional, Type, TypeVar

from .errors import ContainerContractError
from .region import Region


class ContainerKind(str, Enum):
    """Kind tag of a window container."""
    DISPLAY = "display"
    TASK = "task"
    ACTIVITY = "activity"
    WINDOW = "window"
    CONTAINER = "container"


class WindowBand(str, Enum):
    """Z-order band of a window. Bands are strictly ordered above > app > below."""
    ABOVE_APP = "above_app"
    APP = "app"
    BELOW_APP = "below_app"

    @property
    def rank(self) -> int:
        """Stacking rank, 0 being the top-most band."""
        return _BAND_RANKS[self]


_BAND_RANKS = {
    WindowBand.ABOVE_APP: 0,
    WindowBand.APP: 1,
    WindowBand.BELOW_APP: 2,
}

# Parent kinds a container kind may be linked under. Kinds not listed accept any parent.
ALLOWED_PARENT_KINDS: Dict[ContainerKind, FrozenSet[ContainerKind]] = {
    ContainerKind.ACTIVITY: frozenset({ContainerKind.TASK}),
}

C = TypeVar("C", bound="WindowContainer")


def check_root_kind(container: "WindowContainer") -> None:
    """Reject kinds that must be linked under a parent.

    Raises:
        ContainerContractError: If ``container`` has a required parent kind
    """
    allowed = ALLOWED_PARENT_KINDS.get(container.kind)
    if allowed is not None:
        expected = ", ".join(sorted(k.value for k in allowed))
        raise ContainerContractError(
            f"{container.kind.value} {container.container_id} parent must be {expected}, "
            f"got no parent"
        )


@dataclass(eq=False)
class WindowContainer:
    """Base of all container variants."""

    kind: ClassVar[ContainerKind] = ContainerKind.CONTAINER

    container_id: int
    title: str = ""
    token: str = ""
    visible: bool = False

    parent_id: Optional[int] = field(default=None, init=False)
    children: List["WindowContainer"] = field(default_factory=list, init=False, repr=False)
    is_visible: bool = field(default=False, init=False)
    """Explicit flag gated by every ancestor; set when the entry is built"""

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def add_child(self, child: "WindowContainer") -> None:
        """Link ``child`` as the bottom-most child of this container.

        Raises:
            ContainerContractError: If the child already has a parent, is this
                container itself, or its kind forbids this parent kind
        """
        if child is self:
            raise ContainerContractError(f"{self.kind.value} {self.container_id} cannot be its own child")
        if child.parent_id is not None:
            raise ContainerContractError(
                f"{child.kind.value} {child.container_id} already has parent {child.parent_id}"
            )
        allowed = ALLOWED_PARENT_KINDS.get(child.kind)
        if allowed is not None and self.kind not in allowed:
            expected = ", ".join(sorted(k.value for k in allowed))
            raise ContainerContractError(
                f"{child.kind.value} {child.container_id} parent must be {expected}, "
                f"got {self.kind.value} {self.container_id}"
            )
        child.parent_id = self.container_id
        self.children.append(child)

    def descendants(self) -> Iterator["WindowContainer"]:
        """All transitive children in pre-order (z-order, top-most first)."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_tree(self) -> Iterator["WindowContainer"]:
        """This container followed by its descendants."""
        yield self
        yield from self.descendants()

    def collect(self, container_type: Type[C]) -> List[C]:
        """Descendants of the given variant, in z-order."""
        return [node for node in self.descendants() if isinstance(node, container_type)]

    def find(self, predicate: Callable[["WindowContainer"], bool]) -> Optional["WindowContainer"]:
        """First container of this subtree matching ``predicate``."""
        return next((node for node in self.iter_tree() if predicate(node)), None)

    def __str__(self) -> str:
        return f"{self.kind.value} {{{self.token} {self.title}}} visible={self.is_visible}"


@dataclass(eq=False)
class Display(WindowContainer):
    """Root container of a physical display."""

    kind: ClassVar[ContainerKind] = ContainerKind.DISPLAY

    display_id: int = 0
    bounds: Region = field(default_factory=Region)


@dataclass(eq=False)
class ActivityTask(WindowContainer):
    """Task grouping activities."""

    kind: ClassVar[ContainerKind] = ContainerKind.TASK

    task_id: int = -1

    @property
    def activities(self) -> List["Activity"]:
        return [child for child in self.children if isinstance(child, Activity)]

    def __str__(self) -> str:
        return f"{self.kind.value} {{{self.token} {self.title}}} id={self.task_id} visible={self.is_visible}"


@dataclass(eq=False)
class Activity(WindowContainer):
    """Activity in the window manager hierarchy.

    Its parent must be an ActivityTask. The task is not owned by the activity;
    ``task_container_id`` is resolved against the entry when needed.
    """

    kind: ClassVar[ContainerKind] = ContainerKind.ACTIVITY

    state: str = ""
    front_of_task: bool = False
    proc_id: int = 0
    is_translucent: bool = False

    @property
    def task_container_id(self) -> Optional[int]:
        return self.parent_id

    def __str__(self) -> str:
        return f"{self.kind.value} {{{self.token} {self.title}}} state={self.state} visible={self.is_visible}"


@dataclass(eq=False)
class WindowState(WindowContainer):
    """One platform window."""

    kind: ClassVar[ContainerKind] = ContainerKind.WINDOW

    bounds: Region = field(default_factory=Region)
    layer_id: Optional[int] = None

    band: WindowBand = field(default=WindowBand.ABOVE_APP, init=False)
    activity_id: Optional[int] = field(default=None, init=False)
    """Container id of the owning activity, None for non-app windows"""

    @property
    def is_app_window(self) -> bool:
        return self.band is WindowBand.APP

    def __str__(self) -> str:
        return (
            f"{self.kind.value} {{{self.token} {self.title}}} band={self.band.value} "
            f"visible={self.is_visible} bounds={self.bounds}"
        )


@dataclass(eq=False)
class GenericContainer(WindowContainer):
    """Any grouping container without kind-specific attributes."""

    kind: ClassVar[ContainerKind] = ContainerKind.CONTAINER


CONTAINER_TYPES: Dict[ContainerKind, Type[WindowContainer]] = {
    ContainerKind.DISPLAY: Display,
    ContainerKind.TASK: ActivityTask,
    ContainerKind.ACTIVITY: Activity,
    ContainerKind.WINDOW: WindowState,
    ContainerKind.CONTAINER: GenericContainer,
}
