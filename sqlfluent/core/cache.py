"""Per-type field descriptor cache used for column to field mapping.

Descriptors are computed once per type, on first access, and kept for the
life of the process. Computation happens under a bounded lock
(:class:`~sqlfluent.utils.locking.LockHolder`), so concurrent first access
computes each type exactly once.
"""

import inspect
from typing import Any, ClassVar, Final, Optional, get_origin

from mypy_extensions import mypyc_attr

from sqlfluent.exceptions import InvalidArgumentError
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT, LockHolder, create_lock
from sqlfluent.utils.logging import get_logger

__all__ = ("FieldDescriptor", "PropertyCache", "get_field", "get_fields", "property_cache")

logger = get_logger("core.cache")

_SKIPPED_SLOTS: Final = frozenset({"__dict__", "__weakref__"})
_VARIADIC_KINDS: Final = frozenset({inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD})


@mypyc_attr(allow_interpreted_subclasses=False)
class FieldDescriptor:
    """One settable member of a type.

    Attributes:
        name: Attribute name.
        annotation: Declared annotation, if any.
        kind: ``"field"``, ``"slot"``, ``"property"``, ``"init"`` or ``"instance"``.
        owner: Class that declares the member.
    """

    __slots__ = ("annotation", "kind", "name", "owner")

    def __init__(self, name: str, owner: type, kind: str, annotation: Any = None) -> None:
        self.name = name
        self.owner = owner
        self.kind = kind
        self.annotation = annotation

    def set_value(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)

    def get_value(self, instance: Any) -> Any:
        return getattr(instance, self.name)

    def __repr__(self) -> str:
        return f"FieldDescriptor(name={self.name!r}, owner={self.owner.__name__}, kind={self.kind!r})"


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar", "t.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _mangle(owner: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{owner.__name__.lstrip('_')}{name}"
    return name


def _collect_fields(type_: type) -> "tuple[FieldDescriptor, ...]":
    """Walk the MRO base-first and collect every settable member, public or not."""
    collected: dict[str, FieldDescriptor] = {}

    def _add(name: str, owner: type, kind: str, annotation: Any = None) -> None:
        if name not in collected:
            collected[name] = FieldDescriptor(name, owner, kind, annotation)

    for klass in reversed(type_.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if not _is_class_var(annotation):
                _add(name, klass, "field", annotation)
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot not in _SKIPPED_SLOTS:
                _add(_mangle(klass, slot), klass, "slot")
        for name, member in klass.__dict__.items():
            if isinstance(member, property) and member.fset is not None:
                _add(name, klass, "property")

    # plain classes that only assign attributes in __init__
    try:
        signature = inspect.signature(type_.__init__)
    except (TypeError, ValueError):
        return tuple(collected.values())
    init_parameters = list(signature.parameters.values())[1:]
    for parameter in init_parameters:
        if parameter.kind in _VARIADIC_KINDS:
            continue
        annotation = None if parameter.annotation is inspect.Parameter.empty else parameter.annotation
        _add(parameter.name, type_, "init", annotation)

    if _is_default_constructible(type_, init_parameters):
        for name, value in getattr(type_(), "__dict__", {}).items():
            _add(name, type_, "instance", None if value is None else type(value))

    return tuple(collected.values())


def _is_default_constructible(type_: type, init_parameters: "list[inspect.Parameter]") -> bool:
    if inspect.isabstract(type_):
        return False
    return all(
        parameter.kind in _VARIADIC_KINDS or parameter.default is not inspect.Parameter.empty
        for parameter in init_parameters
    )


class PropertyCache:
    """Thread-shared mapping of type to its ordered field descriptors.

    Args:
        lock_timeout: Seconds to wait for the cache lock.
    """

    __slots__ = ("_fields", "_lock", "lock_timeout")

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._fields: dict[type, tuple[FieldDescriptor, ...]] = {}
        self._lock = create_lock()
        self.lock_timeout = lock_timeout

    def get_fields(self, type_: type) -> "tuple[FieldDescriptor, ...]":
        """Return every field descriptor of ``type_``, computing them on first use."""
        with LockHolder(self._lock, self.lock_timeout, "property cache"):
            fields = self._fields.get(type_)
            if fields is None:
                fields = _collect_fields(type_)
                self._fields[type_] = fields
                logger.debug("Cached %d fields for %s", len(fields), type_.__qualname__)
            return fields

    def get_field(self, type_: type, name: str) -> "Optional[FieldDescriptor]":
        """Find the first field of ``type_`` whose name matches ``name`` case-insensitively.

        Raises:
            InvalidArgumentError: If ``name`` is empty.

        Returns:
            The descriptor, or ``None`` when the type has no such field.
        """
        if not name:
            raise InvalidArgumentError("name")
        folded = name.casefold()
        for descriptor in self.get_fields(type_):
            if descriptor.name.casefold() == folded:
                return descriptor
        return None

    def is_cached(self, type_: type) -> bool:
        with LockHolder(self._lock, self.lock_timeout, "property cache"):
            return type_ in self._fields

    def __len__(self) -> int:
        with LockHolder(self._lock, self.lock_timeout, "property cache"):
            return len(self._fields)


property_cache = PropertyCache()
"""Process-wide cache used by statement execution."""


def get_fields(type_: type) -> "tuple[FieldDescriptor, ...]":
    return property_cache.get_fields(type_)


def get_field(type_: type, name: str) -> "Optional[FieldDescriptor]":
    return property_cache.get_field(type_, name)
