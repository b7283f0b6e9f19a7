"""Requirement resolution: merge, deduplicate, apply overrides, decide.

Resolution never mutates anything. It reads the override mapping and asks
the live graph's capability query surface.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from featuregate.exceptions import FeatureDeclarationError, FeatureNotSupported
from featuregate.features.catalog import FeatureSet
from featuregate.features.requirements import FeatureOverride, FeatureRequirement

if TYPE_CHECKING:
    from featuregate.declarations import TestDeclaration
    from featuregate.features.catalog import Features

logger = logging.getLogger(__name__)

OverrideMap = Mapping[tuple[type[FeatureSet], str], FeatureOverride]


@dataclass(frozen=True)
class RequirementOutcome:
    """The decision for one requirement.

    Attributes:
        requirement: The requirement that was checked
        actual: The value the requirement was compared against
        source: "override" if a FeatureOverride decided, else "instance"
        override: The override used, if any
    """

    requirement: FeatureRequirement
    actual: bool
    source: Literal["override", "instance"]
    override: FeatureOverride | None = None

    @property
    def passed(self) -> bool:
        return self.actual == self.requirement.supported

    def describe(self) -> str:
        req = self.requirement
        text = (
            f"{req.feature_class.__name__}.{req.feature} expected "
            f"supported={req.supported} but {self.source} reports {self.actual}"
        )
        if self.override is not None and self.override.reason:
            text += f" ({self.override.reason})"
        return text


@dataclass(frozen=True)
class Resolution:
    """All outcomes for one test, in declaration order."""

    outcomes: tuple[RequirementOutcome, ...] = ()

    @property
    def passed(self) -> bool:
        return all(o.passed for o in self.outcomes)

    @property
    def failures(self) -> list[RequirementOutcome]:
        return [o for o in self.outcomes if not o.passed]

    def reason(self) -> str:
        """Skip reason naming every failing requirement."""
        return "; ".join(o.describe() for o in self.failures)


def collect_requirements(declaration: TestDeclaration) -> tuple[FeatureRequirement, ...]:
    """Union of direct, bundled and fixture requirements, without duplicates.

    Order follows first declaration: direct requirements, then the fixture's,
    then each bundle in turn.
    """
    requirements: list[FeatureRequirement] = list(declaration.requirements)
    if declaration.fixture is not None:
        requirements.extend(declaration.fixture.features_required())
    for requirement_set in declaration.requirement_sets:
        requirements.extend(requirement_set.features_required())
    return tuple(dict.fromkeys(requirements))


def validate_requirements(requirements: Iterable[FeatureRequirement]) -> None:
    """Check every requirement names a real capability.

    Needs no graph instance, so the lifecycle runs it before opening one.

    Raises:
        FeatureDeclarationError: Naming the first offending class/capability.
    """
    for requirement in requirements:
        feature_class = requirement.feature_class
        if not (isinstance(feature_class, type) and issubclass(feature_class, FeatureSet)):
            name = getattr(feature_class, "__name__", repr(feature_class))
            raise FeatureDeclarationError(
                feature_class,
                requirement.feature,
                f"{name} is not a capability class (required by {requirement.feature})",
            )
        if not feature_class.has_feature(requirement.feature):
            raise FeatureDeclarationError(feature_class, requirement.feature)


def resolve_requirement(
    requirement: FeatureRequirement,
    features: Features,
    overrides: OverrideMap,
) -> RequirementOutcome:
    """Decide a single requirement. An override beats the live report."""
    override = overrides.get(requirement.key)
    if override is not None:
        return RequirementOutcome(requirement, override.supported, "override", override)
    actual = features.supports(requirement.feature_class, requirement.feature)
    return RequirementOutcome(requirement, actual, "instance")


def resolve_requirements(
    requirements: Iterable[FeatureRequirement],
    features: Features,
    overrides: OverrideMap | None = None,
) -> Resolution:
    """Decide every requirement against a graph's features and overrides.

    Args:
        requirements: Requirements to check (duplicates are collapsed)
        features: The live graph's capability query surface
        overrides: Mapping from ``(feature_class, feature)`` to override

    Raises:
        FeatureDeclarationError: If a requirement names an unknown capability.
    """
    overrides = overrides or {}
    outcomes = tuple(
        resolve_requirement(requirement, features, overrides)
        for requirement in dict.fromkeys(requirements)
    )
    for outcome in outcomes:
        logger.debug(
            "Requirement %s resolved to %s via %s",
            outcome.requirement,
            outcome.actual,
            outcome.source,
        )
    return Resolution(outcomes)


def assume(resolution: Resolution) -> None:
    """Raise the skip signal if any requirement failed.

    Raises:
        FeatureNotSupported: Carrying the failing outcomes.
    """
    if not resolution.passed:
        raise FeatureNotSupported(resolution.failures, resolution.reason())
