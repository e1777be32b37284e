import asyncio

from pawtrail.errors import CollaboratorError, CollaboratorTimeout
from pawtrail.services.collaborator import Deadline, call_collaborator


async def _value(value, delay=0.0):
    if delay:
        await asyncio.sleep(delay)
    return value


async def _boom():
    raise CollaboratorError("down", collaborator="test")


def test_ok_result():
    result = asyncio.run(call_collaborator("test", lambda: _value(42), timeout=1))
    assert result.is_ok
    assert result.value == 42
    assert result.unwrap_or(0) == 42


def test_failure_without_fallback_is_reported_not_raised():
    result = asyncio.run(call_collaborator("test", _boom))
    assert result.is_failed
    assert isinstance(result.error, CollaboratorError)
    assert result.unwrap_or([]) == []


def test_failure_with_fallback_is_degraded():
    result = asyncio.run(
        call_collaborator("test", _boom, fallback=lambda: _value("default"))
    )
    assert result.status == "degraded"
    assert not result.is_ok and not result.is_failed
    assert result.value == "default"


def test_timeout_is_a_collaborator_timeout():
    result = asyncio.run(
        call_collaborator("slow", lambda: _value(1, delay=1), timeout=0.01)
    )
    assert result.is_failed
    assert isinstance(result.error, CollaboratorTimeout)


def test_unbounded_deadline():
    deadline = Deadline(None)
    assert deadline.remaining() is None
    assert not deadline.expired


def test_deadline_counts_down():
    deadline = Deadline(60)
    assert 0 < deadline.remaining() <= 60
    assert not deadline.expired
    assert Deadline(0).expired


def test_cancellation_propagates():
    async def run():
        task = asyncio.ensure_future(
            call_collaborator("slow", lambda: _value(1, delay=5), timeout=10)
        )
        await asyncio.sleep(0.01)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return task.cancelled()

    assert asyncio.run(run()) is True
