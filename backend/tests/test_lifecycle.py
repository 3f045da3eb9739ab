"""Tests for ServiceRegistry and core service wiring."""

import asyncio
import logging

import pytest

from domains.core import (
    ServiceRegistry,
    get_service_registry,
    register_core_services,
    reset_service_registry,
)
from domains.note_hub.core.store import NoteStore
from domains.note_hub.services import NoteService


@pytest.fixture
def fresh_registry():
    reset_service_registry()
    yield get_service_registry()
    reset_service_registry()


class TestServiceRegistry:

    def test_lazy_singleton(self):
        registry = ServiceRegistry()
        calls = []
        registry.register("thing", lambda: calls.append(1) or object())
        first = registry.get("thing")
        assert registry.get("thing") is first
        assert calls == [1]

    def test_unknown_service_raises(self):
        with pytest.raises(KeyError, match="ghost"):
            ServiceRegistry().get("ghost")

    def test_dependencies_initialized_first(self):
        registry = ServiceRegistry()
        registry.register("b", lambda: "b", dependencies=["a"])
        registry.register("a", lambda: "a")
        registry.get("b")
        assert registry.initialized_services == ["a", "b"]

    def test_set_overrides_instance(self):
        registry = ServiceRegistry()
        registry.register("thing", lambda: "real")
        registry.set("thing", "fake")
        assert registry.get("thing") == "fake"

    def test_shutdown_cleans_up_in_reverse_order(self):
        registry = ServiceRegistry()
        cleaned = []
        registry.register("a", lambda: "a", cleanup=cleaned.append)
        registry.register("b", lambda: "b", dependencies=["a"], cleanup=cleaned.append)
        registry.get("b")

        asyncio.run(registry.shutdown())
        assert cleaned == ["b", "a"]
        assert registry.initialized_services == []


class TestCoreServices:

    def test_memory_wiring_shares_one_store(self, fresh_registry):
        registry = register_core_services(storage_backend="memory")
        service = registry.get("note_service")
        assert isinstance(service, NoteService)
        assert isinstance(registry.get("note_store"), NoteStore)
        assert service.store is registry.get("note_store")

    def test_seed_sample_flag(self, fresh_registry):
        registry = register_core_services(storage_backend="memory", seed_sample=True)
        assert registry.get("note_store").count() == 1

    def test_file_wiring_persists_across_registries(self, fresh_registry, tmp_path):
        registry = register_core_services(storage_backend="file", data_dir=tmp_path, seed_sample=False)
        note = registry.get("note_service").create_note("A", "hello")

        reset_service_registry()
        registry = register_core_services(storage_backend="file", data_dir=tmp_path, seed_sample=False)
        assert registry.get("note_service").get_note(note.id).title == "A"

    def test_shutdown_closes_note_store(self, fresh_registry, caplog):
        registry = register_core_services(storage_backend="memory", seed_sample=False)
        registry.get("note_service").create_note("A", "hello")

        with caplog.at_level(logging.INFO, logger="domains.note_hub.core.store"):
            asyncio.run(registry.shutdown())

        assert any("note_store_closed: count=1" in r.getMessage() for r in caplog.records)
        assert registry.initialized_services == []

    def test_ensure_services_registered_keeps_existing_wiring(self, fresh_registry, tmp_path):
        from app.core.deps import ensure_services_registered

        registry = register_core_services(storage_backend="file", data_dir=tmp_path, seed_sample=False)
        assert "note_service" in registry
        store = registry.get("note_store")

        assert ensure_services_registered() is registry
        assert registry.get("note_store") is store
        assert store.medium == "file"
