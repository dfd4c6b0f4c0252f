"""
Unit tests for the JSON-file backed PersistedStore.
"""

import json

from simulado.core.persisted_store import PersistedStore


class TestPersistedStoreValues:
    """get/set/delete behaviour."""

    def test_missing_key_returns_default(self, store):
        assert store.get("nope") is None
        assert store.get("nope", 42) == 42

    def test_set_persists_to_disk(self, store, state_path):
        store.set("simulado-exam-id", "exam-001")

        on_disk = json.loads(state_path.read_text(encoding="utf-8"))
        assert on_disk == {"simulado-exam-id": "exam-001"}

    def test_values_survive_a_new_instance(self, store, state_path):
        store.set("simulado-answers", {"q1": 2})

        reopened = PersistedStore(state_path)

        assert reopened.get("simulado-answers") == {"q1": 2}

    def test_setting_none_removes_key(self, store, state_path):
        store.set("access_token", "abc")
        store.set("access_token", None)

        assert "access_token" not in store
        assert json.loads(state_path.read_text(encoding="utf-8")) == {}

    def test_get_returns_a_copy(self, store):
        store.set("simulado-answers", {"q1": 0})

        answers = store.get("simulado-answers")
        answers["q2"] = 1

        assert store.get("simulado-answers") == {"q1": 0}

    def test_clear_removes_listed_keys_only(self, store):
        store.set("a", 1)
        store.set("b", 2)
        store.set("c", 3)

        store.clear(["a", "b"])

        assert "a" not in store
        assert "b" not in store
        assert store.get("c") == 3

    def test_corrupt_file_starts_empty(self, state_path):
        state_path.write_text("{not json", encoding="utf-8")

        store = PersistedStore(state_path)

        assert store.get("anything") is None

    def test_writes_keep_keys_written_by_other_instances(self, state_path):
        first = PersistedStore(state_path)
        second = PersistedStore(state_path)

        first.set("a", 1)
        second.set("b", 2)

        on_disk = json.loads(state_path.read_text(encoding="utf-8"))
        assert on_disk == {"a": 1, "b": 2}


class TestPersistedStoreNotifications:
    """Listener and refresh behaviour."""

    def test_listener_called_on_change(self, store):
        calls = []
        store.subscribe(lambda key, value: calls.append((key, value)), "simulado-exam-id")

        store.set("simulado-exam-id", "exam-001")
        store.set("other", 1)

        assert calls == [("simulado-exam-id", "exam-001")]

    def test_unchanged_value_does_not_notify(self, store):
        calls = []
        store.set("simulado-answers", {"q1": 1})
        store.subscribe(lambda key, value: calls.append(key))

        store.set("simulado-answers", {"q1": 1})

        assert calls == []

    def test_unsubscribe_stops_notifications(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda key, value: calls.append(key))

        store.set("a", 1)
        unsubscribe()
        store.set("a", 2)

        assert calls == ["a"]

    def test_refresh_picks_up_external_writes(self, state_path):
        ours = PersistedStore(state_path)
        theirs = PersistedStore(state_path)
        ours.set("keep", "same")
        ours.set("removed", True)
        seen = []
        ours.subscribe(lambda key, value: seen.append((key, value)))

        theirs.set("simulado-answers", {"q1": 3})
        theirs.delete("removed")
        changed = ours.refresh()

        assert changed == ["removed", "simulado-answers"]
        assert ours.get("simulado-answers") == {"q1": 3}
        assert "removed" not in ours
        assert ("removed", None) in seen
        assert ("simulado-answers", {"q1": 3}) in seen

    def test_refresh_without_changes_is_quiet(self, store):
        store.set("a", 1)
        seen = []
        store.subscribe(lambda key, value: seen.append(key))

        assert store.refresh() == []
        assert seen == []
