"""Per-test requirement declarations.

A test states what it needs as data: a :class:`TestDeclaration` attached to
the test function when it is defined, either through the decorators in this
module or through pytest markers (see :mod:`featuregate.pytest_plugin`).
Declarations are plain values and round-trip through ``to_dict``.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from featuregate.features.catalog import feature_class_named
from featuregate.features.requirements import (
    FeatureRequirement,
    FeatureRequirementSet,
    requirement_set_named,
)
from featuregate.fixtures import FixtureSpec, fixture_for

F = TypeVar("F", bound=Callable[..., Any])

DECLARATION_ATTR = "__featuregate__"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class TestIdentity:
    """Who is asking for a graph: the test's class (if any) and name.

    ``test_name`` may carry a parametrization suffix such as
    ``test_foo[modern-1]``; :attr:`clean_name` drops it.
    """

    __test__ = False

    test_name: str
    test_class: str | None = None

    @property
    def clean_name(self) -> str:
        """Test name without a trailing ``[...]`` parametrization id."""
        if self.test_name.endswith("]") and "[" in self.test_name:
            return self.test_name[: self.test_name.index("[")]
        return self.test_name

    @property
    def slug(self) -> str:
        """Filesystem-safe form of the full identity, suffix included.

        Ends in a short digest of the unmodified identity, so identities that
        sanitize to the same text (``test_load[1]`` and ``test_load_1``) still
        get distinct slugs.
        """
        digest = hashlib.sha256(str(self).encode()).hexdigest()[:8]
        return f"{_UNSAFE_CHARS.sub('_', str(self)).strip('_')}-{digest}"

    def __str__(self) -> str:
        if self.test_class:
            return f"{self.test_class}.{self.test_name}"
        return self.test_name


@dataclass(frozen=True)
class TestDeclaration:
    """What one test needs from the graph it runs against.

    Attributes:
        name: Test name the declaration belongs to
        requirements: Requirements declared directly on the test
        requirement_sets: Bundles the test references
        fixture: Dataset to load before the test body runs, if any
    """

    __test__ = False

    name: str
    requirements: tuple[FeatureRequirement, ...] = ()
    requirement_sets: tuple[FeatureRequirementSet, ...] = ()
    fixture: FixtureSpec | None = None

    def merged(self, other: TestDeclaration) -> TestDeclaration:
        """Combine two declarations for the same test.

        Raises:
            ValueError: If both declare a different fixture.
        """
        if self.fixture and other.fixture and self.fixture != other.fixture:
            raise ValueError(
                f"Test '{self.name}' declares two fixtures: '{self.fixture.name}' and '{other.fixture.name}'"
            )
        return TestDeclaration(
            name=self.name,
            requirements=self.requirements + other.requirements,
            requirement_sets=self.requirement_sets + other.requirement_sets,
            fixture=self.fixture or other.fixture,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "requirements": [
                {
                    "feature_class": r.feature_class.__name__,
                    "feature": r.feature,
                    "supported": r.supported,
                }
                for r in self.requirements
            ],
            "requirement_sets": [s.name for s in self.requirement_sets],
            "fixture": self.fixture.name if self.fixture else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestDeclaration:
        fixture = data.get("fixture")
        return cls(
            name=data["name"],
            requirements=tuple(
                FeatureRequirement(
                    feature_class_named(r["feature_class"]),
                    r["feature"],
                    r.get("supported", True),
                )
                for r in data.get("requirements", [])
            ),
            requirement_sets=tuple(requirement_set_named(n) for n in data.get("requirement_sets", [])),
            fixture=fixture_for(fixture) if fixture else None,
        )


def declaration_for(func: Callable[..., Any], name: str | None = None) -> TestDeclaration:
    """The declaration attached to ``func``, or an empty one."""
    declared = getattr(func, DECLARATION_ATTR, None)
    test_name = name or getattr(func, "__name__", repr(func))
    if declared is None:
        return TestDeclaration(name=test_name)
    return replace(declared, name=test_name)


def _attach(func: F, addition: TestDeclaration) -> F:
    current = declaration_for(func)
    setattr(func, DECLARATION_ATTR, current.merged(addition))
    return func


def requires(feature_class: type, feature: str, supported: bool = True) -> Callable[[F], F]:
    """Declare that a test needs ``feature`` of ``feature_class`` to be ``supported``."""
    requirement = FeatureRequirement(feature_class, feature, supported)

    def decorator(func: F) -> F:
        return _attach(func, TestDeclaration(name=func.__name__, requirements=(requirement,)))

    return decorator


def requires_set(requirement_set: FeatureRequirementSet | str) -> Callable[[F], F]:
    """Declare that a test needs every requirement in a bundle."""
    if isinstance(requirement_set, str):
        requirement_set = requirement_set_named(requirement_set)

    def decorator(func: F) -> F:
        return _attach(func, TestDeclaration(name=func.__name__, requirement_sets=(requirement_set,)))

    return decorator


def load_graph_with(fixture: FixtureSpec | str) -> Callable[[F], F]:
    """Declare the dataset to load into the graph before the test runs.

    The fixture's own requirements are added to the test's requirements.
    """
    spec = fixture_for(fixture)

    def decorator(func: F) -> F:
        return _attach(func, TestDeclaration(name=func.__name__, fixture=spec))

    return decorator
