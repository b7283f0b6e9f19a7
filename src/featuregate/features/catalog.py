"""Capability classes and the capability query surface of a graph.

A capability class groups related boolean capabilities. Each capability
``X`` is queried through a ``supports_<x>()`` method on the class, so
``"MetaProperties"`` on ``VertexFeatures`` is answered by
``VertexFeatures.supports_meta_properties()``.

The base classes report every capability as supported. Backends subclass
them and override the methods for what they cannot do.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from featuregate.exceptions import FeatureDeclarationError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def method_name(feature: str) -> str:
    """Name of the query method answering ``feature``.

    Examples:
        >>> method_name("MetaProperties")
        'supports_meta_properties'
        >>> method_name("Transactions")
        'supports_transactions'
    """
    return "supports_" + _CAMEL_BOUNDARY.sub("_", feature).lower()


def canonical_feature(feature_class: Any, feature: str) -> str | None:
    """Declared capability name that ``feature`` is a spelling variant of, if any."""
    if not (isinstance(feature_class, type) and issubclass(feature_class, FeatureSet)):
        return None
    target = method_name(feature)
    for name in feature_class.feature_names():
        if name != feature and method_name(name) == target:
            return name
    return None


class FeatureSet:
    """Base class for every capability class."""

    @classmethod
    def feature_names(cls) -> tuple[str, ...]:
        """All capability names declared as ``FEATURE_*`` constants, in MRO order."""
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                if attr.startswith("FEATURE_") and isinstance(value, str):
                    names.append(value)
        return tuple(dict.fromkeys(names))

    @classmethod
    def has_feature(cls, feature: str) -> bool:
        """True if ``feature`` is one of this class's declared capability names.

        Names are matched exactly. ``"metaProperties"`` and ``"meta_properties"``
        map to the same query method as ``"MetaProperties"`` but are rejected.
        """
        return isinstance(feature, str) and feature in cls.feature_names()

    def supports(self, feature: str) -> bool:
        """Query a single capability of this set by name."""
        if not self.has_feature(feature):
            raise FeatureDeclarationError(type(self), feature)
        return bool(getattr(self, method_name(feature))())


class DataTypeFeatures(FeatureSet):
    """Which value types can be stored."""

    FEATURE_BOOLEAN_VALUES = "BooleanValues"
    FEATURE_INTEGER_VALUES = "IntegerValues"
    FEATURE_LONG_VALUES = "LongValues"
    FEATURE_FLOAT_VALUES = "FloatValues"
    FEATURE_DOUBLE_VALUES = "DoubleValues"
    FEATURE_STRING_VALUES = "StringValues"
    FEATURE_MAP_VALUES = "MapValues"
    FEATURE_MIXED_LIST_VALUES = "MixedListValues"
    FEATURE_UNIFORM_LIST_VALUES = "UniformListValues"
    FEATURE_SERIALIZABLE_VALUES = "SerializableValues"

    def supports_boolean_values(self) -> bool:
        return True

    def supports_integer_values(self) -> bool:
        return True

    def supports_long_values(self) -> bool:
        return True

    def supports_float_values(self) -> bool:
        return True

    def supports_double_values(self) -> bool:
        return True

    def supports_string_values(self) -> bool:
        return True

    def supports_map_values(self) -> bool:
        return True

    def supports_mixed_list_values(self) -> bool:
        return True

    def supports_uniform_list_values(self) -> bool:
        return True

    def supports_serializable_values(self) -> bool:
        """Arbitrary Python objects (anything that is not a plain data type)."""
        return True


class PropertyFeatures(DataTypeFeatures):
    FEATURE_PROPERTIES = "Properties"

    def supports_properties(self) -> bool:
        """True if any value type at all can be stored as a property."""
        return True


class VariableFeatures(DataTypeFeatures):
    """Graph-level variables (key/value pairs stored on the graph itself)."""

    FEATURE_VARIABLES = "Variables"

    def supports_variables(self) -> bool:
        return True


class VertexPropertyFeatures(PropertyFeatures):
    pass


class EdgePropertyFeatures(PropertyFeatures):
    pass


class ElementFeatures(FeatureSet):
    """Capabilities shared by vertices and edges."""

    FEATURE_ADD_PROPERTY = "AddProperty"
    FEATURE_REMOVE_PROPERTY = "RemoveProperty"
    FEATURE_USER_SUPPLIED_IDS = "UserSuppliedIds"
    FEATURE_NUMERIC_IDS = "NumericIds"
    FEATURE_STRING_IDS = "StringIds"
    FEATURE_UUID_IDS = "UuidIds"
    FEATURE_CUSTOM_IDS = "CustomIds"
    FEATURE_ANY_IDS = "AnyIds"

    def supports_add_property(self) -> bool:
        return True

    def supports_remove_property(self) -> bool:
        return True

    def supports_user_supplied_ids(self) -> bool:
        """Whether ids passed to add operations are honored by the graph."""
        return True

    def supports_numeric_ids(self) -> bool:
        return True

    def supports_string_ids(self) -> bool:
        return True

    def supports_uuid_ids(self) -> bool:
        return True

    def supports_custom_ids(self) -> bool:
        return True

    def supports_any_ids(self) -> bool:
        return True


class VertexFeatures(ElementFeatures):
    FEATURE_ADD_VERTICES = "AddVertices"
    FEATURE_REMOVE_VERTICES = "RemoveVertices"
    FEATURE_MULTI_PROPERTIES = "MultiProperties"
    FEATURE_META_PROPERTIES = "MetaProperties"

    def supports_add_vertices(self) -> bool:
        return True

    def supports_remove_vertices(self) -> bool:
        return True

    def supports_multi_properties(self) -> bool:
        """More than one value per property key on a vertex."""
        return True

    def supports_meta_properties(self) -> bool:
        """Properties on vertex properties."""
        return True

    def properties(self) -> VertexPropertyFeatures:
        return VertexPropertyFeatures()


class EdgeFeatures(ElementFeatures):
    FEATURE_ADD_EDGES = "AddEdges"
    FEATURE_REMOVE_EDGES = "RemoveEdges"

    def supports_add_edges(self) -> bool:
        return True

    def supports_remove_edges(self) -> bool:
        return True

    def properties(self) -> EdgePropertyFeatures:
        return EdgePropertyFeatures()


class GraphFeatures(FeatureSet):
    FEATURE_COMPUTER = "Computer"
    FEATURE_PERSISTENCE = "Persistence"
    FEATURE_TRANSACTIONS = "Transactions"
    FEATURE_THREADED_TRANSACTIONS = "ThreadedTransactions"

    def supports_computer(self) -> bool:
        return True

    def supports_persistence(self) -> bool:
        """Data survives closing and reopening the graph."""
        return True

    def supports_transactions(self) -> bool:
        return True

    def supports_threaded_transactions(self) -> bool:
        return True

    def variables(self) -> VariableFeatures:
        return VariableFeatures()


FEATURE_CLASSES: dict[str, type[FeatureSet]] = {
    cls.__name__: cls
    for cls in (
        GraphFeatures,
        VariableFeatures,
        VertexFeatures,
        VertexPropertyFeatures,
        EdgeFeatures,
        EdgePropertyFeatures,
    )
}


def feature_class_named(name: str) -> type[FeatureSet]:
    """Look up one of the queryable capability classes by its class name."""
    try:
        return FEATURE_CLASSES[name]
    except KeyError:
        raise FeatureDeclarationError(name, "", f"Unknown capability class '{name}'") from None


class Features:
    """Capability query surface of one graph instance.

    Holds one instance of each capability class. Backends pass their own
    subclasses; anything omitted falls back to the all-supported defaults.
    """

    def __init__(
        self,
        graph: GraphFeatures | None = None,
        vertex: VertexFeatures | None = None,
        edge: EdgeFeatures | None = None,
    ) -> None:
        self._graph = graph or GraphFeatures()
        self._vertex = vertex or VertexFeatures()
        self._edge = edge or EdgeFeatures()

    def graph(self) -> GraphFeatures:
        return self._graph

    def vertex(self) -> VertexFeatures:
        return self._vertex

    def edge(self) -> EdgeFeatures:
        return self._edge

    def _instance_for(self, feature_class: type) -> FeatureSet:
        # Keyed by the queryable class itself, not by isinstance: a backend's
        # VertexFeatures subclass must not answer for EdgeFeatures.
        if feature_class is GraphFeatures:
            return self._graph
        if feature_class is VariableFeatures:
            return self._graph.variables()
        if feature_class is VertexFeatures:
            return self._vertex
        if feature_class is VertexPropertyFeatures:
            return self._vertex.properties()
        if feature_class is EdgeFeatures:
            return self._edge
        if feature_class is EdgePropertyFeatures:
            return self._edge.properties()
        name = getattr(feature_class, "__name__", repr(feature_class))
        raise FeatureDeclarationError(feature_class, "", f"{name} is not a queryable capability class")

    def supports(self, feature_class: type[FeatureSet], feature: str) -> bool:
        """Whether this graph supports ``feature`` of ``feature_class``.

        Raises:
            FeatureDeclarationError: If the class is not queryable or has no
                such capability.
        """
        instance = self._instance_for(feature_class)
        if not feature_class.has_feature(feature):
            raise FeatureDeclarationError(feature_class, feature)
        return bool(getattr(instance, method_name(feature))())

    def describe(self) -> Iterator[tuple[type[FeatureSet], str, bool]]:
        """Yield ``(feature_class, feature, supported)`` for every capability."""
        for feature_class in FEATURE_CLASSES.values():
            for feature in feature_class.feature_names():
                yield feature_class, feature, self.supports(feature_class, feature)
