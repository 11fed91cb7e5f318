"""Tests for nostr_addressing.store.bindings module."""

from __future__ import annotations

import json

import pytest
from conftest import KEY_1, KEY_2, RELAY_A, RELAY_B, make_binding

from nostr_addressing.core.exceptions import ConfigException, StoreException
from nostr_addressing.store.bindings import (
    JsonFileBindingStore,
    MemoryBindingStore,
    get_binding_store,
    reset_binding_store,
)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    """Each backend under the same contract."""
    if request.param == "memory":
        return MemoryBindingStore()
    return JsonFileBindingStore(tmp_path / "bindings.json")


# ============================================================================
# Shared Contract Tests
# ============================================================================


class TestBindingStoreContract:
    """Behaviour every backend must share."""

    def test_get_missing(self, store):
        assert store.get("example.com") is None

    def test_put_then_get(self, store):
        binding = make_binding(relays=(RELAY_A, RELAY_B))
        store.put(binding)
        assert store.get("example.com") == binding

    def test_put_overwrites(self, store):
        store.put(make_binding())
        store.put(make_binding(pubkey=KEY_2, relays=()))
        assert store.get("example.com") == make_binding(pubkey=KEY_2, relays=())
        assert len(store.list_all()) == 1

    def test_domain_is_case_sensitive(self, store):
        store.put(make_binding(domain="example.com"))
        assert store.get("Example.com") is None

    def test_list_by_key_in_insertion_order(self, store):
        store.put(make_binding(domain="b.example"))
        store.put(make_binding(domain="other.example", pubkey=KEY_2))
        store.put(make_binding(domain="a.example"))
        assert [b.domain for b in store.list_by_key(KEY_1)] == ["b.example", "a.example"]
        assert store.list_by_key("f" * 64) == []

    def test_delete(self, store):
        store.put(make_binding())
        assert store.delete("example.com") is True
        assert store.get("example.com") is None
        assert store.delete("example.com") is False


# ============================================================================
# JSON File Tests
# ============================================================================


class TestJsonFileBindingStore:
    """Tests specific to the JSON file backend."""

    def test_file_format(self, tmp_path):
        path = tmp_path / "bindings.json"
        JsonFileBindingStore(path).put(make_binding())
        assert json.loads(path.read_text()) == {"example.com": {"pubkey": KEY_1, "relays": [RELAY_A]}}

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "bindings.json"
        JsonFileBindingStore(path).put(make_binding())
        assert JsonFileBindingStore(path).get("example.com") == make_binding()

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "bindings.json"
        JsonFileBindingStore(path).put(make_binding())
        assert path.exists()
        assert not path.with_name("bindings.json.tmp").exists()

    def test_missing_relays_field(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text(json.dumps({"example.com": {"pubkey": KEY_1}}))
        assert JsonFileBindingStore(path).get("example.com").relays == ()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text("{not json")
        with pytest.raises(StoreException) as exc_info:
            JsonFileBindingStore(path).get("example.com")
        assert exc_info.value.operation == "load"

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text("[]")
        with pytest.raises(StoreException):
            JsonFileBindingStore(path).list_all()

    def test_malformed_entry(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text(json.dumps({"example.com": {"relays": []}}))
        with pytest.raises(StoreException) as exc_info:
            JsonFileBindingStore(path).get("example.com")
        assert exc_info.value.domain == "example.com"

    @pytest.mark.parametrize(
        "entry",
        [
            {"pubkey": "not-a-key", "relays": ["wss://r.example"]},
            {"pubkey": 42},
            {"pubkey": KEY_1, "relays": "wss://relay.example"},
            {"pubkey": KEY_1, "relays": [None]},
        ],
    )
    def test_invalid_entry_rejected(self, tmp_path, entry):
        path = tmp_path / "bindings.json"
        path.write_text(json.dumps({"example.com": entry}))
        with pytest.raises(StoreException) as exc_info:
            JsonFileBindingStore(path).get("example.com")
        assert exc_info.value.operation == "load"

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonFileBindingStore(blocker / "bindings.json")
        with pytest.raises(StoreException) as exc_info:
            store.put(make_binding())
        assert exc_info.value.operation == "save"
        # Failed write leaves the cached state untouched
        assert store.get("example.com") is None


# ============================================================================
# Factory Tests
# ============================================================================


class TestGetBindingStore:
    """Tests for the configured store factory."""

    def test_default_json(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("NOSTR_ADDRESSING_BINDINGS_PATH", str(tmp_path / "b.json"))
        store = get_binding_store()
        assert isinstance(store, JsonFileBindingStore)
        assert store.path == tmp_path / "b.json"

    def test_memory(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOSTR_ADDRESSING_STORE", "memory")
        assert isinstance(get_binding_store(), MemoryBindingStore)

    def test_singleton_and_reset(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOSTR_ADDRESSING_STORE", "memory")
        first = get_binding_store()
        assert get_binding_store() is first
        reset_binding_store()
        assert get_binding_store() is not first

    def test_unknown_backend(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOSTR_ADDRESSING_STORE", "postgres")
        with pytest.raises(ConfigException) as exc_info:
            get_binding_store()
        assert exc_info.value.setting == "NOSTR_ADDRESSING_STORE"
