"""Tests for alias-list field resolution."""

from diagnostics_transport.fields import all_of, drop, first_of, value_or_default


class TestValueOrDefault:
    def test_pops_present_key(self):
        record = {"level": "warn", "other": 1}
        assert value_or_default(record, "level", "Info") == "warn"
        assert "level" not in record
        assert record == {"other": 1}

    def test_returns_default_when_absent(self):
        record = {"other": 1}
        assert value_or_default(record, "level", "Info") == "Info"
        assert record == {"other": 1}

    def test_none_value_counts_as_present(self):
        record = {"level": None}
        assert value_or_default(record, "level", "Info") is None
        assert record == {}


class TestFirstOf:
    def test_first_present_alias_wins(self):
        record = {"msg": "second", "message": "first"}
        assert first_of(record, ["message", "msg"]) == "first"

    def test_later_aliases_left_in_record(self):
        record = {"msg": "second", "message": "first"}
        first_of(record, ["message", "msg"])
        assert record == {"msg": "second"}

    def test_falls_through_to_later_alias(self):
        record = {"msg": "only"}
        assert first_of(record, ["message", "msg"]) == "only"
        assert record == {}

    def test_none_when_no_alias_present(self):
        record = {"unrelated": True}
        assert first_of(record, ["message", "msg"]) is None
        assert record == {"unrelated": True}


class TestAllOf:
    def test_collects_every_alias(self):
        record = {"traceTags": [1], "tags": [2], "keep": 3}
        found = all_of(record, ["traceTags", "tags"])
        assert found == {"traceTags": [1], "tags": [2]}
        assert record == {"keep": 3}

    def test_empty_when_none_present(self):
        record = {"keep": 3}
        assert all_of(record, ["traceTags", "tags"]) == {}


class TestDrop:
    def test_discards_present_aliases(self):
        record = {"password": "x", "token": "y", "keep": 1}
        drop(record, ["password", "token", "missing"])
        assert record == {"keep": 1}
