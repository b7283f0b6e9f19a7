"""Exceptions for the featuregate test harness."""

from __future__ import annotations

import unittest
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from featuregate.resolver import RequirementOutcome


class FeatureDeclarationError(Exception):
    """A requirement names a capability its capability class does not expose.

    This is a broken test declaration, never an instance limitation, so it
    is raised instead of skipping.

    Attributes:
        feature_class: The capability class named by the requirement
        feature: The capability name that could not be found
        message: Human-readable error message
    """

    def __init__(
        self,
        feature_class: Any,
        feature: str,
        message: str | None = None,
    ) -> None:
        self.feature_class = feature_class
        self.feature = feature
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        from featuregate.features.catalog import canonical_feature, method_name

        class_name = getattr(self.feature_class, "__name__", repr(self.feature_class))
        msg = f"[{method_name(self.feature)}] is not a valid feature on {class_name}"
        canonical = canonical_feature(self.feature_class, self.feature)
        if canonical:
            msg += f" (did you mean '{canonical}'?)"
        return msg


class FeatureNotSupported(unittest.SkipTest):
    """Skip signal: the graph under test does not meet the declared requirements.

    Subclasses ``unittest.SkipTest`` so pytest and unittest both report the
    test as skipped rather than failed.

    Attributes:
        failures: The requirement outcomes that did not match
        reason: Human-readable explanation naming each failing requirement
    """

    def __init__(self, failures: list[RequirementOutcome], reason: str | None = None) -> None:
        self.failures = list(failures)
        self.reason = reason or self._default_message()
        super().__init__(self.reason)

    def _default_message(self) -> str:
        return "; ".join(outcome.describe() for outcome in self.failures)


class ProvisioningError(Exception):
    """The provider failed to configure, clear, open or populate a graph.

    The test body never ran. Always chained to the provider's exception.

    Attributes:
        stage: Lifecycle stage that failed (e.g. "open", "load")
        test_name: Identity of the test being provisioned
        message: Human-readable error message
    """

    def __init__(self, stage: str, test_name: str, message: str | None = None) -> None:
        self.stage = stage
        self.test_name = test_name
        self.message = message or f"Provider failed during {stage} for test '{test_name}'"
        super().__init__(self.message)


class TeardownError(Exception):
    """The provider failed to clear a graph after the test finished.

    Attributes:
        test_name: Identity of the test being torn down
    """

    def __init__(self, test_name: str, message: str | None = None) -> None:
        self.test_name = test_name
        self.message = message or f"Provider failed to clear graph for test '{test_name}'"
        super().__init__(self.message)


class ElementNotFoundError(LookupError):
    """No graph element matched a name-based lookup.

    Attributes:
        description: What was looked up, e.g. "vertex 'marko'"
    """

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"No {description} found in graph")


class UnsupportedOperationError(Exception):
    """The graph (or a strategy wrapping it) does not allow this operation."""


class FixtureNotFoundError(KeyError):
    """No fixture is registered under the requested name."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        msg = f"Unknown fixture '{name}'"
        if self.available:
            msg += f". Available: {', '.join(self.available)}"
        super().__init__(msg)

    def __str__(self) -> str:
        return self.args[0]


class ProviderNotConfiguredError(RuntimeError):
    """No graph provider has been registered for this process."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No graph provider configured. Pass --featuregate-provider, set "
            "[tool.featuregate] provider in pyproject.toml, or call GraphManager.set_provider()."
        )
