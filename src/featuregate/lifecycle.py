"""Per-test lifecycle: provision, gate on features, load fixtures, tear down.

Each invocation gets its own :class:`TestContext`. The lifecycle object holds
only the provider and settings, so one instance can serve concurrent tests.

State flow::

    IDLE -> PROVISIONING -> GATING -> FIXTURE_LOADING -> READY
                               |                           |
                               v                           v
                            SKIPPED ------------> TEARING_DOWN -> IDLE
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from featuregate.declarations import TestDeclaration, TestIdentity
from featuregate.exceptions import (
    FeatureNotSupported,
    ProvisioningError,
    TeardownError,
)
from featuregate.features.requirements import FeatureRequirement, override_map
from featuregate.resolver import (
    Resolution,
    assume,
    collect_requirements,
    resolve_requirements,
    validate_requirements,
)

if TYPE_CHECKING:
    from featuregate.features.catalog import Features
    from featuregate.provider import Configuration, GraphProvider
    from featuregate.strategy import GraphStrategy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LifecycleState(Enum):
    IDLE = "idle"
    PROVISIONING = "provisioning"
    GATING = "gating"
    FIXTURE_LOADING = "fixture-loading"
    READY = "ready"
    SKIPPED = "skipped"
    TEARING_DOWN = "tearing-down"


@dataclass
class TestContext:
    """State of one test invocation. Never shared between invocations.

    ``graph`` is set only between a successful open and the start of
    teardown; :meth:`release` drops every reference afterwards.
    """

    __test__ = False

    identity: TestIdentity
    declaration: TestDeclaration
    strategy: GraphStrategy | None = None
    requirements: tuple[FeatureRequirement, ...] = ()
    resolution: Resolution | None = None
    configuration: Configuration | None = None
    graph: Any = None
    state: LifecycleState = LifecycleState.IDLE
    torn_down: bool = False

    @property
    def has_graph(self) -> bool:
        return self.graph is not None

    def release(self) -> None:
        self.graph = None
        self.configuration = None
        self.strategy = None
        self.state = LifecycleState.IDLE


class FeatureGatedLifecycle:
    """Runs the setup and teardown halves around a test body.

    Args:
        provider: Source of graph instances
        revalidate_fixture_features: Re-check the fixture's requirements
            against the graph's own report (ignoring overrides) right
            before loading it. Off by default: loading trusts the gate.

    Example:
        >>> lifecycle = FeatureGatedLifecycle(NetworkXGraphProvider())
        >>> with lifecycle.session(TestIdentity("test_names"), declaration) as ctx:
        ...     vertex_id(ctx.graph, "Garcia")
    """

    def __init__(self, provider: GraphProvider, *, revalidate_fixture_features: bool = False) -> None:
        self.provider = provider
        self.revalidate_fixture_features = revalidate_fixture_features

    # === Runner hooks ===

    def before_test(
        self,
        identity: TestIdentity,
        declaration: TestDeclaration | None = None,
        strategy: GraphStrategy | None = None,
    ) -> TestContext:
        """Provision and gate a graph for one test.

        Returns:
            A READY context holding the opened (and populated) graph.

        Raises:
            FeatureDeclarationError: A requirement names an unknown capability.
                Raised before any graph is opened.
            FeatureNotSupported: The graph does not meet the requirements.
            ProvisioningError: The provider failed; chained to its error.
        """
        context = TestContext(
            identity=identity,
            declaration=declaration or TestDeclaration(name=identity.clean_name),
            strategy=strategy,
        )
        context.requirements = collect_requirements(context.declaration)
        validate_requirements(context.requirements)

        self._transition(context, LifecycleState.PROVISIONING)
        context.configuration = self._provision(
            "configure", context, lambda: self.provider.standard_graph_configuration(identity)
        )
        self._provision("clear", context, lambda: self.provider.clear_configuration(context.configuration))

        try:
            context.graph = self._provision(
                "open", context, lambda: self.provider.open_test_graph(context.configuration, strategy)
            )
            self._transition(context, LifecycleState.GATING)
            features = self.provider.features(context.graph)
            context.resolution = resolve_requirements(
                context.requirements,
                features,
                override_map(context.graph),
            )
            if not context.resolution.passed:
                self._transition(context, LifecycleState.SKIPPED)
                logger.info("Skipping %s: %s", identity, context.resolution.reason())
                assume(context.resolution)

            fixture = context.declaration.fixture
            if fixture is not None:
                self._transition(context, LifecycleState.FIXTURE_LOADING)
                if self.revalidate_fixture_features:
                    self._revalidate_fixture(context, features)
                self._provision("load", context, lambda: self.provider.load_graph_data(context.graph, fixture))
            self._provision("prepare", context, lambda: self.prepare_graph(context.graph))

            self._transition(context, LifecycleState.READY)
        except BaseException:
            self._discard(context)
            raise
        return context

    def after_test(self, context: TestContext) -> None:
        """Tear down the context's graph. Safe to call more than once.

        Raises:
            TeardownError: The provider failed to clear the graph. The
                context is released either way.
        """
        error = self._teardown(context)
        if error is not None:
            raise error

    @contextmanager
    def session(
        self,
        identity: TestIdentity,
        declaration: TestDeclaration | None = None,
        strategy: GraphStrategy | None = None,
    ) -> Iterator[TestContext]:
        """``before_test`` / ``after_test`` around a block.

        A teardown failure after a failing block is logged and the block's
        exception propagates; after a passing block it is raised.
        """
        context = self.before_test(identity, declaration, strategy)
        try:
            yield context
        except BaseException:
            self._discard(context)
            raise
        self.after_test(context)

    def prepare_graph(self, graph: Any) -> None:
        """Hook run on every graph after fixture loading and before READY.

        Does nothing by default. Subclasses override it to add per-suite
        setup such as indices or schema.
        """

    # === Internals ===

    def _teardown(self, context: TestContext) -> TeardownError | None:
        if context.torn_down:
            return None
        context.torn_down = True
        self._transition(context, LifecycleState.TEARING_DOWN)

        error = None
        try:
            if context.configuration is not None:
                self.provider.clear(context.graph, context.configuration)
        except Exception as e:
            logger.error("Teardown failed for %s", context.identity, exc_info=True)
            error = TeardownError(str(context.identity))
            error.__cause__ = e
        finally:
            context.release()
        return error

    def _discard(self, context: TestContext) -> None:
        """Tear down after an earlier failure without masking it."""
        error = self._teardown(context)
        if error is not None:
            logger.warning(
                "Teardown error for %s suppressed in favour of the earlier failure: %s",
                context.identity,
                error.__cause__,
            )

    def _provision(self, stage: str, context: TestContext, action: Callable[[], T]) -> T:
        try:
            return action()
        except (FeatureNotSupported, ProvisioningError):
            raise
        except Exception as e:
            raise ProvisioningError(stage, str(context.identity)) from e

    def _revalidate_fixture(self, context: TestContext, features: Features) -> None:
        fixture = context.declaration.fixture
        live = resolve_requirements(fixture.features_required(), features)
        if not live.passed:
            raise ProvisioningError(
                "load",
                str(context.identity),
                f"Fixture '{fixture.name}' cannot be loaded into this graph: {live.reason()}",
            )

    @staticmethod
    def _transition(context: TestContext, state: LifecycleState) -> None:
        logger.debug("%s: %s -> %s", context.identity, context.state.value, state.value)
        context.state = state
