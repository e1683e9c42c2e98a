"""Tests for Session — value store, lifecycle state, and write-once rule."""

import threading
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from flysession.kernel.exceptions import (
    AlreadyWrittenException,
    KeyNotFoundException,
    TypeAssertionException,
)
from flysession.session.codec import SessionRecord, decode_record, encode_record
from flysession.session.session import Session, SessionState, ValueKind


def _session(**values) -> Session:
    return Session("token-1", values)


class TestGetAndPut:
    @pytest.mark.parametrize(
        ("kind", "value"),
        [
            (ValueKind.STRING, "lorem ipsum"),
            (ValueKind.BOOL, True),
            (ValueKind.INT, 42),
            (ValueKind.FLOAT, 1.5),
            (ValueKind.BYTES, b"\x00\xff"),
            (ValueKind.DATETIME, datetime(2026, 3, 1, tzinfo=UTC)),
        ],
    )
    def test_put_then_get_returns_value(self, kind, value):
        session = _session()
        session.put("k", value, kind)
        assert session.get("k", kind) == value

    def test_put_replaces_existing_value(self):
        session = _session(k="old")
        session.put("k", "new")
        assert session.get("k", ValueKind.STRING) == "new"

    def test_put_marks_modified(self):
        session = _session()
        assert session.state is SessionState.CLEAN
        session.put("k", "v")
        assert session.modified is True

    def test_get_missing_key(self):
        with pytest.raises(KeyNotFoundException) as exc_info:
            _session().get("missing", ValueKind.STRING)
        assert str(exc_info.value) == "key not found in session values"
        assert exc_info.value.key == "missing"

    def test_get_wrong_type(self):
        session = _session(k="text")
        with pytest.raises(TypeAssertionException) as exc_info:
            session.get("k", ValueKind.INT)
        assert str(exc_info.value) == "type assertion failed"

    def test_get_does_not_mark_modified(self):
        session = _session(k="v")
        session.get("k", ValueKind.STRING)
        assert session.state is SessionState.CLEAN

    def test_put_rejects_unsupported_type(self):
        with pytest.raises(TypeError):
            _session().put("k", ["a", "list"])

    def test_put_rejects_value_of_other_kind(self):
        with pytest.raises(TypeError):
            _session().put("k", "42", ValueKind.INT)

    def test_bool_is_not_an_int(self):
        session = _session(flag=True)
        with pytest.raises(TypeAssertionException):
            session.get("flag", ValueKind.INT)

    def test_int_is_not_a_bool(self):
        session = _session(n=1)
        with pytest.raises(TypeAssertionException):
            session.get("n", ValueKind.BOOL)


class TestIntegerConversion:
    def test_decimal_number_converts_to_int(self):
        session = _session(n=Decimal("42"))
        value = session.get("n", ValueKind.INT)
        assert value == 42
        assert type(value) is int

    def test_pop_decimal_number_converts_to_int(self):
        session = _session(n=Decimal("42"))
        assert session.pop("n", ValueKind.INT) == 42
        assert session.exists("n") is False

    def test_non_integral_decimal_fails(self):
        session = _session(n=Decimal("4.5"))
        with pytest.raises(TypeAssertionException):
            session.get("n", ValueKind.INT)

    @pytest.mark.parametrize("literal", ["2.0", "1e+16", "1.5E+3"])
    def test_float_literal_is_not_an_int(self, literal):
        session = _session(n=Decimal(literal))
        with pytest.raises(TypeAssertionException):
            session.get("n", ValueKind.INT)

    def test_stored_float_is_not_an_int_after_round_trip(self):
        record = decode_record(encode_record(SessionRecord(values={"price": 2.0})))
        session = _session(**record.values)
        with pytest.raises(TypeAssertionException):
            session.get("price", ValueKind.INT)
        assert session.get("price", ValueKind.FLOAT) == 2.0

    def test_non_numeric_representation_fails(self):
        session = _session(n="forty-two")
        with pytest.raises(TypeAssertionException):
            session.get("n", ValueKind.INT)

    def test_decimal_converts_to_float(self):
        session = _session(x=Decimal("2.25"))
        assert session.get("x", ValueKind.FLOAT) == 2.25


class TestPop:
    def test_pop_returns_and_removes(self):
        session = _session(k="v")
        assert session.pop("k", ValueKind.STRING) == "v"
        with pytest.raises(KeyNotFoundException):
            session.get("k", ValueKind.STRING)
        assert session.modified is True

    def test_pop_missing_key(self):
        session = _session()
        with pytest.raises(KeyNotFoundException):
            session.pop("k", ValueKind.STRING)
        assert session.state is SessionState.CLEAN

    def test_failed_pop_leaves_value_in_place(self):
        session = _session(k="v")
        with pytest.raises(TypeAssertionException):
            session.pop("k", ValueKind.BOOL)
        assert session.get("k", ValueKind.STRING) == "v"
        assert session.state is SessionState.CLEAN


class TestRemoveAndClear:
    def test_remove_deletes_key(self):
        session = _session(k="v")
        session.remove("k")
        assert session.exists("k") is False
        assert session.modified is True

    def test_remove_missing_key_marks_modified(self):
        session = _session()
        session.remove("missing")
        assert session.modified is True

    def test_clear_of_empty_session_marks_modified(self):
        session = _session()
        session.clear()
        assert session.modified is True

    def test_remove_after_destroy_stays_destroyed(self):
        session = _session(k="v")
        session.destroy()
        session.remove("k")
        session.clear()
        assert session.destroyed is True
        assert session.flush().previous_token is None

    def test_clear_removes_all_keys(self):
        session = _session(a="1", b=True, c=3)
        session.clear()
        assert session.keys() == []
        for key in ("a", "b", "c"):
            with pytest.raises(KeyNotFoundException):
                session.get(key, ValueKind.STRING)
        assert session.modified is True

    def test_keys_are_sorted(self):
        assert _session(b=1, a=2).keys() == ["a", "b"]


class TestWriteOnce:
    @pytest.mark.parametrize(
        "mutation",
        [
            lambda s: s.put("k", "v"),
            lambda s: s.pop("k", ValueKind.STRING),
            lambda s: s.remove("k"),
            lambda s: s.clear(),
            lambda s: s.destroy(),
            lambda s: s.renew_token(),
        ],
    )
    def test_mutation_after_flush_fails(self, mutation):
        session = _session(k="v")
        session.flush()
        with pytest.raises(AlreadyWrittenException):
            mutation(session)

    def test_remove_of_missing_key_after_flush_still_fails(self):
        session = _session()
        session.flush()
        with pytest.raises(AlreadyWrittenException):
            session.remove("missing")

    @pytest.mark.parametrize(
        ("value", "kind"),
        [(object(), None), ("text", ValueKind.INT)],
    )
    def test_put_of_bad_value_after_flush_reports_write_once(self, value, kind):
        session = _session()
        session.flush()
        with pytest.raises(AlreadyWrittenException):
            session.put("k", value, kind)

    def test_reads_still_work_after_flush(self):
        session = _session(k="v")
        session.flush()
        assert session.get("k", ValueKind.STRING) == "v"

    def test_flush_happens_once(self):
        session = _session()
        session.flush()
        assert session.written is True
        with pytest.raises(AlreadyWrittenException):
            session.flush()

    def test_flush_snapshot(self):
        session = _session(k="v")
        session.put("n", 1)
        result = session.flush()
        assert result.state is SessionState.MODIFIED
        assert result.token == "token-1"
        assert result.values == {"k": "v", "n": 1}
        assert session.state is SessionState.FLUSHED


class TestDestroyAndRenew:
    def test_destroy_clears_values(self):
        session = _session(k="v")
        session.destroy()
        assert session.destroyed is True
        assert session.keys() == []

    def test_renew_token_changes_token(self):
        session = _session(k="v")
        session.renew_token()
        result = session.flush()
        assert result.token != "token-1"
        assert result.previous_token == "token-1"
        assert result.values == {"k": "v"}

    def test_renew_twice_remembers_original_token(self):
        session = _session()
        session.renew_token()
        session.renew_token()
        assert session.flush().previous_token == "token-1"

    def test_new_session_renew_has_no_previous_token(self):
        session = Session("fresh", is_new=True)
        session.renew_token()
        assert session.flush().previous_token is None

    def test_put_after_destroy_starts_over_under_new_token(self):
        session = _session(old="value")
        session.destroy()
        session.put("k", "v")
        result = session.flush()
        assert result.state is SessionState.MODIFIED
        assert result.previous_token == "token-1"
        assert result.token != "token-1"
        assert result.values == {"k": "v"}


class TestConcurrentAccess:
    def test_concurrent_puts_are_all_applied(self):
        session = _session()

        def worker(n: int) -> None:
            for i in range(100):
                session.put(f"w{n}-{i}", i)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(session.keys()) == 800
