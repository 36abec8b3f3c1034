# src/rprelay/runtime/events.py

"""
Framework-neutral descriptions of suites, tests, and the lifecycle events
a test framework emits while running them.
"""

from enum import Enum

from attrs import define, field, mutable

TEST_PASSED = "passed"
TEST_FAILED = "failed"


class EventKind(str, Enum):
    """Lifecycle events, named the way the runner emits them."""

    RUN_START = "start"
    SUITE_START = "suite"
    TEST_START = "test"
    TEST_PASS = "pass"
    TEST_FAIL = "fail"
    TEST_PENDING = "pending"
    TEST_END = "test end"
    SUITE_END = "suite end"
    RUN_END = "end"


def _to_kind(value: "EventKind | str") -> "EventKind | str":
    """Known names become EventKind members; anything else is kept as given."""
    try:
        return EventKind(value)
    except ValueError:
        return value


@mutable(slots=True, eq=False)
class SuiteInfo:
    """
    One grouping of tests.

    ``key`` must be unique for the whole run (the framework's own node id);
    it falls back to the full title when the framework has nothing better.
    ``tests`` holds only the suite's direct tests.
    """

    title: str = field()
    parent: "SuiteInfo | None" = field(default=None, repr=False)
    key: str = field(default="")
    tests: list["TestInfo"] = field(factory=list, repr=False)

    def __attrs_post_init__(self) -> None:
        if not self.key:
            self.key = self.full_title() or self.title

    @property
    def is_root(self) -> bool:
        """True for the anonymous suite wrapping the whole run."""
        return self.title == ""

    def full_title(self) -> str:
        if self.parent is not None:
            parent_title = self.parent.full_title()
            if parent_title:
                return f"{parent_title} {self.title}"
        return self.title


@mutable(slots=True, eq=False)
class TestInfo:
    """
    One executable test case.

    ``state`` is None until the test has a terminal outcome; pending tests
    keep None for their whole life.
    """

    __test__ = False  # keep pytest from collecting this class

    title: str = field()
    parent: SuiteInfo | None = field(default=None, repr=False)
    key: str = field(default="")
    state: str | None = field(default=None)

    def __attrs_post_init__(self) -> None:
        if not self.key:
            self.key = self.full_title()
        if self.parent is not None and self not in self.parent.tests:
            self.parent.tests.append(self)

    def full_title(self) -> str:
        if self.parent is not None:
            parent_title = self.parent.full_title()
            if parent_title:
                return f"{parent_title} {self.title}"
        return self.title


@define(frozen=True, slots=True)
class LifecycleEvent:
    """A single callback from the test framework."""

    kind: EventKind | str = field(converter=_to_kind)
    node: SuiteInfo | TestInfo | None = field(default=None)
    error: str | None = field(default=None)


# 🔼⚙️
