"""Lazy object capability.

Application types implement :class:`LazyObject` to bind to one
container, cache decoded field values in memory and persist them back.
:class:`LazyRecord` plus :func:`lazy_field` implement the capability
for declaratively listed fields with read-through on cache miss.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, TypeVar

from core.errors import LazyDBError, NotFoundError
from core.logging_config import get_logger
from core.types import LazyType
from store.container import LazyContainer
from store.data_codec import encode_value

_LOGGER = get_logger(__name__)
_MISSING = object()

LazyObjectT = TypeVar("LazyObjectT", bound="LazyObject")


class LazyObject(ABC):
    """Capability for aggregates persisted lazily under one container.

    Leaving a ``with`` block over an instance flushes the cache with
    :func:`flush_quietly`.
    """

    @abstractmethod
    def as_container(self) -> LazyContainer:
        """Return the container this object is bound to."""

    @abstractmethod
    def store_lazy(self) -> None:
        """Write every populated cached field as a leaf.

        Stops at the first failed write and raises it.
        """

    @classmethod
    @abstractmethod
    def load_lazy(cls: type[LazyObjectT], container: LazyContainer) -> LazyObjectT:
        """Bind a new instance to ``container`` with an empty cache, without reading."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop every cached value without touching storage."""

    def __enter__(self: LazyObjectT) -> LazyObjectT:
        return self

    def __exit__(self, *exc_info: object) -> None:
        flush_quietly(self)


def flush_quietly(lazy_object: LazyObject) -> None:
    """Best-effort ``store_lazy``; storage errors are logged and discarded."""
    try:
        lazy_object.store_lazy()
    except LazyDBError as error:
        _LOGGER.warning(
            "lazy_flush_failed",
            object_type=type(lazy_object).__name__,
            error_type=type(error).__name__,
            error=str(error),
        )


@contextmanager
def lazy_scope(lazy_object: LazyObjectT) -> Iterator[LazyObjectT]:
    """Yield ``lazy_object`` and flush it quietly when the block ends.

    The flush runs even when the block raises; the block's own exception
    still propagates, flush failures never do.
    """
    try:
        yield lazy_object
    finally:
        flush_quietly(lazy_object)


class LazyField:
    """Descriptor for one cached leaf-backed field of a :class:`LazyRecord`."""

    def __init__(
        self,
        lazy_type: LazyType,
        leaf_name: str | None = None,
        element_type: LazyType | None = None,
        default: Any = _MISSING,
    ) -> None:
        self.lazy_type = lazy_type
        self.leaf_name = leaf_name
        self.element_type = element_type
        self.default = default
        self.attr_name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr_name = name
        if self.leaf_name is None:
            self.leaf_name = name

    def __get__(self, instance: "LazyRecord | None", owner: type) -> Any:
        if instance is None:
            return self
        cache = instance._lazy_cache
        if self.attr_name not in cache:
            value = self._read(instance.as_container())
            if value is _MISSING:
                return self.default
            cache[self.attr_name] = value
        return cache[self.attr_name]

    def __set__(self, instance: "LazyRecord", value: Any) -> None:
        encode_value(self.lazy_type, value, self.element_type)
        instance._lazy_cache[self.attr_name] = value

    def __delete__(self, instance: "LazyRecord") -> None:
        instance._lazy_cache.pop(self.attr_name, None)

    def store(self, container: LazyContainer, value: Any) -> None:
        data = encode_value(self.lazy_type, value, self.element_type)
        container.data_writer(str(self.leaf_name)).write(data)

    def _read(self, container: LazyContainer) -> Any:
        try:
            reader = container.data_reader(str(self.leaf_name))
        except NotFoundError:
            if self.default is _MISSING:
                raise
            return _MISSING
        return reader.collect(self.lazy_type, self.element_type)


def lazy_field(
    lazy_type: LazyType,
    leaf_name: str | None = None,
    *,
    element_type: LazyType | None = None,
    default: Any = _MISSING,
) -> Any:
    """Declare a cached field stored as leaf ``leaf_name`` (the attribute name by default).

    When ``default`` is given, reading a field whose leaf does not exist
    returns it without populating the cache.
    """
    return LazyField(lazy_type, leaf_name, element_type=element_type, default=default)


class LazyRecord(LazyObject):
    """LazyObject over the :func:`lazy_field` attributes declared on the class.

    Example::

        class Person(LazyRecord):
            name = lazy_field(LazyType.STRING)
            age = lazy_field(LazyType.U8)

        with Person.load_lazy(container) as person:
            person.age = person.age + 1
    """

    def __init__(self, container: LazyContainer) -> None:
        self._container = container
        self._lazy_cache: dict[str, Any] = {}

    @classmethod
    def load_lazy(cls: type[LazyObjectT], container: LazyContainer) -> LazyObjectT:
        return cls(container)  # type: ignore[call-arg]

    @classmethod
    def lazy_fields(cls) -> tuple[LazyField, ...]:
        """Return declared fields in declaration order, base classes first."""
        fields: dict[str, LazyField] = {}
        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, LazyField):
                    fields[name] = attribute
        return tuple(fields.values())

    def as_container(self) -> LazyContainer:
        return self._container

    def store_lazy(self) -> None:
        for field in self.lazy_fields():
            if field.attr_name in self._lazy_cache:
                field.store(self._container, self._lazy_cache[field.attr_name])

    def clear_cache(self) -> None:
        self._lazy_cache.clear()

    def is_cached(self, name: str) -> bool:
        return name in self._lazy_cache
