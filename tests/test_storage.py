"""Tests for persistent key-value values."""

import logging

import pytest
from pydantic import TypeAdapter

from calorie_tracker.services.storage import PersistentValue
from tests.conftest import FailingKeyValueStore, InMemoryKeyValueStore


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _goal_value(store) -> PersistentValue[int]:
    return PersistentValue(
        store=store, key="goal", default=2000, adapter=TypeAdapter(int)
    )


@pytest.fixture
def storage_log():
    handler = _RecordingHandler()
    logger = logging.getLogger("calorie_tracker.services.storage")
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


def test_value_is_default_and_uninitialized_before_load() -> None:
    store = InMemoryKeyValueStore(items={"goal": "2500"})
    value = _goal_value(store)

    assert value.get() == (2000, False)

    value.load()

    assert value.get() == (2500, True)


def test_missing_key_keeps_default_after_load() -> None:
    value = _goal_value(InMemoryKeyValueStore())

    assert value.load() == 2000
    assert value.initialized


def test_set_writes_json_once_initialized() -> None:
    store = InMemoryKeyValueStore()
    value = PersistentValue(
        store=store, key="names", default=[], adapter=TypeAdapter(list[str])
    )
    value.load()

    value.set(["rice"])
    value.set(lambda previous: ["salad", *previous])

    assert value.value == ["salad", "rice"]
    assert store.items["names"] == '["salad","rice"]'


def test_set_before_load_does_not_write() -> None:
    store = InMemoryKeyValueStore()
    value = _goal_value(store)

    value.set(1800)

    assert value.value == 1800
    assert "goal" not in store.items


def test_write_failure_is_logged_not_raised(storage_log) -> None:
    store = FailingKeyValueStore()
    value = _goal_value(store)
    value.load()

    value.set(1800)

    assert value.value == 1800
    assert store.write_attempts == 1
    assert any("goal" in record.getMessage() for record in storage_log.records)


def test_corrupt_value_falls_back_to_default(storage_log) -> None:
    store = InMemoryKeyValueStore(items={"goal": "not-json"})
    value = _goal_value(store)

    assert value.load() == 2000
    assert value.initialized
    assert storage_log.records
