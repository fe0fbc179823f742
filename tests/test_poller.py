"""Tests for poller.py — the listener-counted polling state machine."""

import asyncio

from cloudfunctions.error import OperationFailedError, decorate_status
from cloudfunctions.events import COMPLETE, ERROR
from cloudfunctions.poller import POLL_INTERVAL_MS, ListenerDrivenPoller, PollState


class ScriptedFetch:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.count = 0

    async def __call__(self):
        self.count += 1
        item = self.responses.pop(0) if self.responses else {"done": False}
        if isinstance(item, Exception):
            raise item
        return item


def _poller(fetch, completed, errors):
    return ListenerDrivenPoller(
        fetch=fetch,
        decorate=decorate_status,
        on_complete=completed.append,
        on_error=errors.append,
        name="operations/p",
    )


# TEST040: Verify the poll interval defaults to 500ms and a new poller starts idle
def test_040_defaults():
    poller = _poller(ScriptedFetch(), [], [])
    assert POLL_INTERVAL_MS == 500
    assert poller.interval_ms == 500
    assert poller.state is PollState.IDLE
    assert poller.complete_listeners == 0
    assert poller.has_active_listeners is False


# TEST041: Report subscriptions to non-complete events and verify no polling starts
async def test_041_other_events_do_not_start_polling():
    fetch = ScriptedFetch()
    poller = _poller(fetch, [], [])
    poller.subscription_changed(ERROR, 1)
    await asyncio.sleep(0)
    assert poller.task is None
    assert fetch.count == 0


# TEST042: Drive the poller to completion through pending responses and verify the payload handed over
async def test_042_completes_after_pending(poll_intervals):
    completed, errors = [], []
    fetch = ScriptedFetch({"done": False}, {"done": False}, {"done": True, "response": {}})
    poller = _poller(fetch, completed, errors)

    poller.subscription_changed(COMPLETE, 1)
    assert poller.state is PollState.POLLING
    await poller.task

    assert fetch.count == 3
    assert poller.fetch_count == 3
    assert completed == [{"done": True, "response": {}}]
    assert errors == []
    assert poll_intervals == [500, 500]
    assert poller.state is PollState.TERMINAL
    assert poller.has_active_listeners is False


# TEST043: Decorate a logical error payload and verify it reaches on_error
async def test_043_logical_error_is_decorated():
    completed, errors = [], []
    fetch = ScriptedFetch({"done": True, "error": {"code": 7, "message": "nope"}})
    poller = _poller(fetch, completed, errors)

    poller.subscription_changed(COMPLETE, 1)
    await poller.task

    assert completed == []
    assert len(errors) == 1
    assert isinstance(errors[0], OperationFailedError)
    assert errors[0].status == "PERMISSION_DENIED"


# TEST044: Drop the count to zero and back after terminal and verify nothing restarts
async def test_044_no_restart_after_terminal():
    fetch = ScriptedFetch({"done": True})
    poller = _poller(fetch, [], [])

    poller.subscription_changed(COMPLETE, 1)
    first_task = poller.task
    await first_task
    poller.subscription_changed(COMPLETE, -1)
    poller.subscription_changed(COMPLETE, 1)
    await asyncio.sleep(0)

    assert poller.task is first_task
    assert fetch.count == 1
    assert poller.state is PollState.TERMINAL


# TEST045: Stop while idle between cycles and start again later with a fresh loop
async def test_045_restart_after_idle():
    completed = []
    fetch = ScriptedFetch({"done": False})
    poller = _poller(fetch, completed, [])

    poller.subscription_changed(COMPLETE, 1)
    first_task = poller.task
    await asyncio.sleep(0)
    poller.subscription_changed(COMPLETE, -1)
    await first_task
    assert poller.state is PollState.IDLE
    stopped_at = fetch.count

    fetch.responses = [{"done": True}]
    poller.subscription_changed(COMPLETE, 1)
    assert poller.task is not first_task
    await poller.task

    assert fetch.count == stopped_at + 1
    assert completed == [{"done": True}]


# TEST046: Verify the repr shows name, state and listener count
def test_046_repr():
    poller = _poller(ScriptedFetch(), [], [])
    assert repr(poller) == "ListenerDrivenPoller(name='operations/p', state=idle, listeners=0)"


# TEST047: Hand a bare string error payload to the default decorator and verify it is terminal
async def test_047_non_mapping_error_payload():
    completed, errors = [], []
    poller = _poller(ScriptedFetch({"done": True, "error": "boom"}), completed, errors)

    poller.subscription_changed(COMPLETE, 1)
    await poller.task

    assert len(errors) == 1
    assert isinstance(errors[0], OperationFailedError)
    assert errors[0].message == "boom"
    assert poller.state is PollState.TERMINAL
    assert poller.has_active_listeners is False


# TEST048: Raise inside the decorate hook and verify that exception is delivered to on_error
async def test_048_decorate_hook_failure_is_terminal():
    errors = []
    failure = ValueError("cannot decorate")

    def broken_decorate(status):
        raise failure

    poller = ListenerDrivenPoller(
        fetch=ScriptedFetch({"done": True, "error": {"code": 3}}),
        decorate=broken_decorate,
        on_complete=lambda payload: None,
        on_error=errors.append,
        name="operations/p",
    )
    poller.subscription_changed(COMPLETE, 1)
    await poller.task

    assert errors == [failure]
    assert poller.state is PollState.TERMINAL
    assert poller.has_active_listeners is False
