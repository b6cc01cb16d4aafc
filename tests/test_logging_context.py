"""Tests for logging context propagation."""

import contextvars
import threading

import pytest

from app.logging.context import (
    bind_log_context,
    clear_log_context,
    get_log_context,
    log_context,
    reset_log_context,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


def test_empty_context():
    assert get_log_context() == {}


def test_bind_and_reset():
    """Binding adds fields; resetting restores the previous state."""
    token = bind_log_context(run_id="run-1", jurisdiction="OR")
    assert get_log_context() == {"run_id": "run-1", "jurisdiction": "OR"}

    reset_log_context(token)
    assert get_log_context() == {}


def test_nested_binds():
    outer = bind_log_context(run_id="run-1")
    inner = bind_log_context(jurisdiction="OR", provider="Oregon WARN")

    assert get_log_context() == {"run_id": "run-1", "jurisdiction": "OR", "provider": "Oregon WARN"}

    reset_log_context(inner)
    assert get_log_context() == {"run_id": "run-1"}
    reset_log_context(outer)
    assert get_log_context() == {}


def test_inner_value_overrides_outer():
    with log_context(jurisdiction="OR"):
        with log_context(jurisdiction="WA"):
            assert get_log_context()["jurisdiction"] == "WA"
        assert get_log_context()["jurisdiction"] == "OR"


def test_returned_copy_is_detached():
    """Mutating the returned dict does not change the bound context."""
    with log_context(run_id="run-1") as fields:
        fields["run_id"] = "changed"
        get_log_context()["extra"] = True

        assert get_log_context() == {"run_id": "run-1"}


def test_context_manager_restores_on_exception():
    with pytest.raises(RuntimeError):
        with log_context(run_id="run-1"):
            raise RuntimeError("provider exploded")

    assert get_log_context() == {}


def test_clear_context():
    bind_log_context(run_id="run-1", jurisdiction="OR")

    clear_log_context()

    assert get_log_context() == {}


def test_new_thread_starts_empty():
    """Threads do not inherit the context unless it is copied explicitly."""
    seen = {}

    def worker():
        seen["plain"] = get_log_context()

    with log_context(run_id="run-1"):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

    assert seen["plain"] == {}


def test_copied_context_carries_fields_to_thread():
    seen = {}

    def worker():
        with log_context(jurisdiction="ID"):
            seen["worker"] = get_log_context()

    with log_context(run_id="run-1"):
        ctx = contextvars.copy_context()
        thread = threading.Thread(target=ctx.run, args=(worker,))
        thread.start()
        thread.join()
        # Worker bindings stay in the worker
        assert get_log_context() == {"run_id": "run-1"}

    assert seen["worker"] == {"run_id": "run-1", "jurisdiction": "ID"}
