"""Tests for the realtime listener registry and lifecycle guards."""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from sitepass.services.realtime_service import RealtimeService


@pytest.fixture
def realtime(offline_db, teamleader_session, logger):
    return RealtimeService(db=offline_db, session=teamleader_session, logger=logger)


@pytest.mark.unit
def test_dispatch_reaches_every_listener(realtime):
    first, second = MagicMock(), MagicMock()
    realtime.add_listener(first)
    realtime.add_listener(second)
    realtime.add_listener(first)

    realtime.dispatch({"eventType": "UPDATE"})

    first.assert_called_once_with({"eventType": "UPDATE"})
    second.assert_called_once_with({"eventType": "UPDATE"})


@pytest.mark.unit
def test_failing_listener_does_not_stop_others(realtime):
    broken = MagicMock(side_effect=RuntimeError("widget destroyed"))
    healthy = MagicMock()
    realtime.add_listener(broken)
    realtime.add_listener(healthy)

    realtime.dispatch({"eventType": "INSERT"})

    healthy.assert_called_once()


@pytest.mark.unit
def test_removed_listener_is_not_called(realtime):
    listener = MagicMock()
    realtime.add_listener(listener)
    realtime.remove_listener(listener)
    realtime.remove_listener(listener)

    realtime.dispatch({})

    listener.assert_not_called()


@pytest.mark.unit
def test_start_is_noop_while_offline(realtime):
    realtime.start()

    assert not realtime.is_running
    assert not realtime.is_connected
    realtime.stop()


@pytest.mark.unit
def test_backoff_grows_and_caps(realtime):
    realtime._consecutive_failures = 1
    first = realtime._calculate_backoff_interval()
    realtime._consecutive_failures = 20
    capped = realtime._calculate_backoff_interval()

    assert first >= RealtimeService._BASE_RETRY_S
    assert capped == RealtimeService._MAX_RETRY_S


@pytest.fixture
def online_realtime(db, teamleader_session, logger, monkeypatch):
    service = RealtimeService(db=db, session=teamleader_session, logger=logger)

    async def idle_subscription(stop_event):
        while not stop_event.is_set():
            await asyncio.sleep(0.01)

    monkeypatch.setattr(service, "_subscribe_once", idle_subscription)
    yield service
    service.stop()


def _listener_threads():
    return [t for t in threading.enumerate() if t.name == "RealtimeListener" and t.is_alive()]


@pytest.mark.unit
def test_start_and_stop_online(online_realtime):
    online_realtime.start()
    online_realtime.start()
    assert online_realtime.is_running
    assert len(_listener_threads()) == 1

    online_realtime.stop()

    assert not online_realtime.is_running
    assert _listener_threads() == []


@pytest.mark.unit
def test_concurrent_restarts_keep_one_listener(online_realtime):
    errors = []

    def restart():
        try:
            online_realtime.restart()
        except Exception as exc:
            errors.append(exc)

    for _ in range(20):
        callers = [threading.Thread(target=restart) for _ in range(2)]
        for caller in callers:
            caller.start()
        for caller in callers:
            caller.join()
        assert len(_listener_threads()) <= 1

    assert errors == []
    assert online_realtime.is_running

    online_realtime.stop()
    assert _listener_threads() == []
