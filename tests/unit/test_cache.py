"""Unit tests for the per-type field descriptor cache."""

import threading
from dataclasses import dataclass
from typing import ClassVar
from unittest.mock import patch

import pytest

from sqlfluent.core import cache
from sqlfluent.core.cache import PropertyCache
from sqlfluent.exceptions import InvalidArgumentError


class Annotated:
    id: int = 0
    name: str = ""
    registry: ClassVar[dict[str, int]] = {}


class Child(Annotated):
    email: str = ""


class Slotted:
    __slots__ = ("__secret", "value")


class WithProperties:
    def __init__(self) -> None:
        self._amount = 0

    @property
    def amount(self) -> int:
        return self._amount

    @amount.setter
    def amount(self, value: int) -> None:
        self._amount = value

    @property
    def readonly(self) -> int:
        return 1


class InitOnly:
    def __init__(self, title=None, *args, size=1, **kwargs) -> None:  # type: ignore[no-untyped-def]
        self.title = title
        self.size = size


class PlainModel:
    def __init__(self) -> None:
        self.id = 0
        self.name = ""
        self._notes = None


class RequiresArguments:
    def __init__(self, key: str) -> None:
        self.key = key
        self.extra = 1


@dataclass
class Record:
    key: str = ""
    hits: int = 0


@pytest.fixture
def property_cache() -> PropertyCache:
    return PropertyCache()


def _names(property_cache: PropertyCache, type_: type) -> list[str]:
    return [descriptor.name for descriptor in property_cache.get_fields(type_)]


def test_annotated_fields_skip_class_vars(property_cache: PropertyCache) -> None:
    """Test annotated attributes are collected and ClassVars are not."""
    assert _names(property_cache, Annotated) == ["id", "name"]


def test_inherited_fields_are_base_first(property_cache: PropertyCache) -> None:
    """Test fields declared on base classes come first."""
    fields = property_cache.get_fields(Child)

    assert [field.name for field in fields] == ["id", "name", "email"]
    assert fields[0].owner is Annotated
    assert fields[2].owner is Child


def test_slots_include_private_members(property_cache: PropertyCache) -> None:
    """Test slots are collected, including name-mangled private ones."""
    assert _names(property_cache, Slotted) == ["_Slotted__secret", "value"]


def test_only_settable_properties(property_cache: PropertyCache) -> None:
    """Test read-only properties are skipped."""
    fields = property_cache.get_fields(WithProperties)

    assert [(field.name, field.kind) for field in fields] == [("amount", "property"), ("_amount", "instance")]


def test_init_parameters_for_plain_classes(property_cache: PropertyCache) -> None:
    """Test constructor parameters stand in for attributes assigned in __init__."""
    fields = property_cache.get_fields(InitOnly)

    assert [(field.name, field.kind) for field in fields] == [("title", "init"), ("size", "init")]


def test_instance_attributes_of_plain_classes(property_cache: PropertyCache) -> None:
    """Test attributes assigned in a no-argument __init__ are collected with their value types."""
    fields = property_cache.get_fields(PlainModel)

    assert [(field.name, field.kind, field.annotation) for field in fields] == [
        ("id", "instance", int),
        ("name", "instance", str),
        ("_notes", "instance", None),
    ]
    assert property_cache.get_field(PlainModel, "NAME") is fields[1]


def test_types_needing_arguments_are_not_constructed(property_cache: PropertyCache) -> None:
    """Test only constructor parameters are collected when __init__ needs arguments."""
    assert _names(property_cache, RequiresArguments) == ["key"]


def test_dataclass_fields(property_cache: PropertyCache) -> None:
    """Test dataclass fields are collected once."""
    assert _names(property_cache, Record) == ["key", "hits"]


def test_get_field_is_case_insensitive(property_cache: PropertyCache) -> None:
    """Test field lookup ignores case and misses return None."""
    descriptor = property_cache.get_field(Annotated, "NAME")

    assert descriptor is not None
    assert descriptor.name == "name"
    assert property_cache.get_field(Annotated, "missing") is None


def test_get_field_rejects_empty_name(property_cache: PropertyCache) -> None:
    """Test an empty field name is rejected."""
    with pytest.raises(InvalidArgumentError):
        property_cache.get_field(Annotated, "")


def test_descriptor_reads_and_writes(property_cache: PropertyCache) -> None:
    """Test descriptors set and get values, including through properties."""
    instance = WithProperties()
    descriptor = property_cache.get_field(WithProperties, "amount")
    assert descriptor is not None

    descriptor.set_value(instance, 42)

    assert descriptor.get_value(instance) == 42
    assert instance.amount == 42


def test_fields_are_cached(property_cache: PropertyCache) -> None:
    """Test descriptors are computed once and reused."""
    assert not property_cache.is_cached(Record)

    first = property_cache.get_fields(Record)
    second = property_cache.get_fields(Record)

    assert first is second
    assert property_cache.is_cached(Record)
    assert len(property_cache) == 1


def test_concurrent_first_access_computes_once(property_cache: PropertyCache) -> None:
    """Test concurrent first access computes a type exactly once."""
    barrier = threading.Barrier(8)
    results: list[tuple[object, ...]] = []

    def worker() -> None:
        barrier.wait()
        results.append(property_cache.get_fields(Child))

    with patch.object(cache, "_collect_fields", wraps=cache._collect_fields) as collect:
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert collect.call_count == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_module_level_helpers() -> None:
    """Test the module helpers use the process-wide cache."""
    assert cache.get_field(Record, "KEY") is not None
    assert cache.property_cache.is_cached(Record)
    assert [field.name for field in cache.get_fields(Record)] == ["key", "hits"]
