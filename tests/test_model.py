import copy
import threading
import time

import pytest
from hypothesis import given, strategies as st

import config
from paramsync.model import Model
from paramsync.params import NumInput, ParameterTypeError, UnknownParameterError
from paramsync.transport import HttpResponse


def make_transport(status=200, reason="OK", body=""):
    """Fake transport answering every POST with the same response."""
    calls = []

    def transport(url, payload):
        calls.append((url, copy.deepcopy(payload)))
        return HttpResponse(status, reason, body)

    transport.calls = calls
    return transport


def failing_transport(url, payload):
    raise ConnectionRefusedError(111, "Connection refused")


def make_model(transport=None, **params):
    initial = params or {"x": 3, "running": False}
    return Model(initial, "csrfblah", True, transport=transport or make_transport(),
                 base_url="https://fridge.example/")


def record(model, topic):
    seen = []
    model.on(topic, lambda *a: seen.append(a))
    return seen


# -------------------------------
# Construction
# -------------------------------

def test_construct_stores_token_and_flag():
    m = Model({"x": 1}, "token-123", False)
    assert m.auth_token == "token-123"
    assert m.save_allowed is False
    assert m.params == {"x": 1}
    assert m.pending == 0


def test_initial_snapshot_is_independent_of_source():
    source = {"x": 3, "running": True}
    a = Model(source, "", True)
    b = Model(source, "", True)

    a.set("x", 10)
    a.set("running", False)
    source["x"] = 99

    assert a.initial_params == {"x": 3, "running": True}
    assert b.initial_params == {"x": 3, "running": True}
    assert b.params == {"x": 3, "running": True}


def test_params_returns_a_copy():
    m = make_model()
    m.params["x"] = 1000
    assert m.get("x") == 3


def test_descriptor_step_is_used():
    m = Model({"t": 18.0}, "", True, inputs=[NumInput("t", "Setpoint", "°", 0.1, 1)])
    assert m.entry("t").step == 0.1
    assert m.entry("t").digits == 1


# -------------------------------
# set / adjust
# -------------------------------

def test_set_emits_one_edit_and_updates_value():
    m = make_model()
    edits = record(m, "edit")

    m.set("x", 5)

    assert edits == [("x", 5)]
    assert m.get("x") == 5
    assert m.params["x"] == 5


def test_adjust_adds_delta_and_emits():
    m = make_model(x=5)
    edits = record(m, "edit")

    m.adjust("x", -2)

    assert edits == [("x", 3)]
    assert m.get("x") == 3


def test_adjust_float_steps():
    m = make_model(t=18.0)
    m.adjust("t", 0.1)
    m.adjust("t", 0.1)
    assert m.get("t") == pytest.approx(18.2)


def test_set_boolean():
    m = make_model()
    edits = record(m, "edit")
    m.set("running", True)
    assert edits == [("running", True)]
    assert m.get("running") is True


def test_set_unknown_parameter_fails_without_adding_key():
    m = make_model()
    edits = record(m, "edit")
    with pytest.raises(UnknownParameterError):
        m.set("nope", 1)
    with pytest.raises(KeyError):
        m.adjust("nope", 1)
    assert "nope" not in m.params
    assert edits == []


def test_adjust_boolean_is_a_type_error():
    m = make_model()
    with pytest.raises(ParameterTypeError):
        m.adjust("running", 1)
    assert m.get("running") is False


@pytest.mark.parametrize("name,value", [("x", True), ("x", "5"), ("running", 1), ("running", None)])
def test_set_wrong_type_is_rejected(name, value):
    m = make_model()
    before = m.params
    with pytest.raises(ParameterTypeError):
        m.set(name, value)
    assert m.params == before


def test_adjust_with_non_numeric_delta_is_rejected():
    m = make_model()
    with pytest.raises(TypeError):
        m.adjust("x", "1")


@given(
    start=st.integers(-1000, 1000),
    deltas=st.lists(st.integers(-50, 50), max_size=20),
)
def test_key_set_never_changes(start, deltas):
    m = Model({"x": start, "flag": True}, "", True)
    for d in deltas:
        m.adjust("x", d)
        m.set("flag", d > 0)
    assert set(m.params) == {"x", "flag"}
    assert m.get("x") == start + sum(deltas)
    assert m.initial_params == {"x": start, "flag": True}


# -------------------------------
# save
# -------------------------------

def test_save_success_emits_saving_then_saved():
    transport = make_transport(200)
    m = make_model(transport)
    statuses = record(m, "status")

    m.save()
    assert statuses == [(config.SAVING_MESSAGE,)]
    assert m.pending == 1

    assert m.wait(timeout=5)
    assert statuses == [("Saving...",), ("Saved",)]
    assert m.pending == 0


def test_save_posts_full_params_and_token():
    transport = make_transport(200)
    m = make_model(transport)
    m.set("x", 7)

    m.save()
    assert m.wait(timeout=5)

    url, payload = transport.calls[0]
    assert url == "https://fridge.example/update"
    assert payload == {"params": {"x": 7, "running": False}, "csrf_blob": "csrfblah"}


def test_save_failure_message_has_status_reason_and_body():
    transport = make_transport(500, "Internal Server Error", "bad token")
    m = make_model(transport)
    statuses = record(m, "status")

    m.save()
    assert m.wait(timeout=5)

    assert statuses[0] == ("Saving...",)
    assert len(statuses) == 2
    message = statuses[1][0]
    assert "500" in message
    assert "Internal Server Error" in message
    assert "bad token" in message
    assert message.startswith(config.FAILED_PREFIX)


def test_save_without_response_still_reports_failure():
    m = make_model(failing_transport)
    statuses = record(m, "status")

    m.save()
    assert m.wait(timeout=5)

    assert statuses[0] == ("Saving...",)
    assert len(statuses) == 2
    assert statuses[1][0].startswith(config.FAILED_PREFIX)
    assert "Connection refused" in statuses[1][0]


def test_save_snapshot_is_taken_at_call_time():
    transport = make_transport(200)
    m = make_model(transport)
    m.save()
    m.set("x", 42)
    assert m.wait(timeout=5)
    assert transport.calls[0][1]["params"]["x"] == 3


def test_terminal_status_only_emitted_by_pump_or_wait():
    m = make_model(make_transport(200))
    statuses = record(m, "status")

    m.save()
    # let the worker finish; nothing reaches subscribers until pump()
    deadline = time.monotonic() + 5
    while m._results.empty() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert statuses == [("Saving...",)]

    assert m.pump() == 1
    assert statuses == [("Saving...",), ("Saved",)]
    assert m.pump() == 0


def test_overlapping_saves_each_resolve_once():
    transport = make_transport(200)
    m = make_model(transport)
    statuses = record(m, "status")

    m.save()
    m.save()
    assert m.pending == 2
    assert m.wait(timeout=5)

    assert statuses.count(("Saving...",)) == 2
    assert statuses.count(("Saved",)) == 2
    assert len(transport.calls) == 2


def test_wait_with_nothing_pending_returns_immediately():
    assert make_model().wait(timeout=0) is True


def test_wait_times_out_on_slow_transport():
    release = threading.Event()

    def slow(url, payload):
        release.wait(5)
        return HttpResponse(200, "OK", "")

    m = make_model(slow)
    m.save()
    assert m.wait(timeout=0.05) is False
    assert m.pending == 1

    release.set()
    assert m.wait(timeout=5) is True
    assert m.pending == 0


def test_save_allowed_is_advisory_only():
    transport = make_transport(200)
    m = Model({"x": 1}, "", False, transport=transport)
    m.save()
    assert m.wait(timeout=5)
    assert len(transport.calls) == 1


def test_save_reports_failure_when_worker_cannot_start(monkeypatch):
    def refuse(self):
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(threading.Thread, "start", refuse)
    m = make_model(make_transport(200))
    statuses = record(m, "status")

    m.save()
    assert m.wait(timeout=1)

    assert m.pending == 0
    assert statuses[0] == ("Saving...",)
    assert len(statuses) == 2
    assert statuses[1][0].startswith(config.FAILED_PREFIX)
    assert "can't start new thread" in statuses[1][0]
