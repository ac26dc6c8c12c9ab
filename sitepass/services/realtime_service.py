"""
Realtime Listener Service.

Background daemon thread that keeps a Supabase realtime subscription on
the contractors table and fans every change notification out to
registered listeners.  Follows the same start/stop daemon-thread lifecycle
as the other background services.

The realtime client is asyncio based, so the thread owns a private event
loop.  Listeners are called **on that thread**; UI listeners must marshal
to the Tk thread with ``widget.after(0, ...)``.  On a dropped connection
the subscription is rebuilt with exponential backoff.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from typing import Any, Callable, Optional

from supabase import AsyncClient, acreate_client

from sitepass.auth import SessionManager
from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger
from sitepass.services.base_service import BaseService

ChangeListener = Callable[[dict[str, Any]], None]


class RealtimeService(BaseService):
    """Daemon thread subscribed to ``postgres_changes`` on one table.

    Parameters
    ----------
    db:
        Supplies the Supabase URL and key; nothing starts when offline.
    session:
        The access token, when present, authenticates the socket so
        row-level security applies to notifications as it does to reads.
    logger:
        Structured JSON logger.
    table:
        Table to watch.
    channel_name:
        Realtime channel name.
    """

    _BASE_RETRY_S: float = 2.0
    _MAX_RETRY_S: float = 60.0

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        logger: StructuredLogger,
        table: str = "contractors",
        channel_name: str = "screen-contractors-db-changes",
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._session = session
        self._table = table
        self._channel_name = channel_name

        self._listeners: list[ChangeListener] = []
        self._listeners_lock: threading.Lock = threading.Lock()
        self._lifecycle_lock = threading.RLock()

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: threading.Event = threading.Event()
        self._wake: Optional[asyncio.Event] = None
        self._connected: bool = False
        self._consecutive_failures: int = 0

    # ------------------------------------------------------------------
    # Listener registry
    # ------------------------------------------------------------------

    def add_listener(self, callback: ChangeListener) -> None:
        with self._listeners_lock:
            if callback not in self._listeners:
                self._listeners.append(callback)

    def remove_listener(self, callback: ChangeListener) -> None:
        with self._listeners_lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def dispatch(self, payload: dict[str, Any]) -> None:
        """Deliver *payload* to every listener.  A failing listener is logged."""
        with self._listeners_lock:
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback(payload)
            except Exception:
                self._logger.error("Realtime listener raised.", exc_info=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the listener thread.  Idempotent; no-op while offline."""
        with self._lifecycle_lock:
            if self._thread is not None and self._thread.is_alive():
                self._logger.debug("Realtime listener already running.")
                return
            if not self._db.is_online:
                self._logger.info("Backend unavailable; realtime listener not started.")
                return

            # Each run owns its stop event so a thread that outlived stop()
            # can never be revived by a later start().
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._consecutive_failures = 0
            self._thread = threading.Thread(
                target=self._run_thread,
                args=(stop_event,),
                name="RealtimeListener",
                daemon=True,
            )
            self._thread.start()
            self._logger.info(
                "Realtime listener started.",
                extra={"channel": self._channel_name, "table": self._table},
            )

    def stop(self) -> None:
        """Signal the thread to unsubscribe and wait up to 5 s."""
        with self._lifecycle_lock:
            thread = self._thread
            if thread is None:
                return

            self._stop_event.set()
            self._wake_loop()
            thread.join(timeout=5.0)

            if thread.is_alive():
                self._logger.warning("Realtime listener did not terminate within 5 s.")
            else:
                self._logger.info("Realtime listener stopped.")
            self._thread = None
            self._connected = False

    def restart(self) -> None:
        """Resubscribe, e.g. after login so the new token is used."""
        with self._lifecycle_lock:
            self.stop()
            self.start()

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Thread body
    # ------------------------------------------------------------------

    def _run_thread(self, stop_event: threading.Event) -> None:
        loop = asyncio.new_event_loop()
        self._loop = loop
        try:
            loop.run_until_complete(self._run_loop(stop_event))
        except Exception:
            self._logger.error(
                "Realtime listener thread terminated due to unhandled exception.",
                exc_info=True,
            )
        finally:
            if self._loop is loop:
                self._loop = None
            loop.close()

    async def _run_loop(self, stop_event: threading.Event) -> None:
        wake = asyncio.Event()
        self._wake = wake
        while not stop_event.is_set():
            try:
                await self._subscribe_once(stop_event)
                self._consecutive_failures = 0
            except Exception:
                self._connected = False
                self._consecutive_failures += 1
                self._logger.warning(
                    "Realtime subscription failed (attempt %d)",
                    self._consecutive_failures,
                    exc_info=True,
                )
            if stop_event.is_set():
                break
            try:
                await asyncio.wait_for(
                    wake.wait(), timeout=self._calculate_backoff_interval(),
                )
            except asyncio.TimeoutError:
                pass
            wake.clear()

    async def _subscribe_once(self, stop_event: threading.Event) -> None:
        """Subscribe and block until stop is requested or the socket drops."""
        client: AsyncClient = await acreate_client(
            self._db.supabase_url, self._db.supabase_key,
        )
        token = self._session.access_token
        if token:
            result = client.realtime.set_auth(token)
            if inspect.isawaitable(result):
                await result

        channel = client.channel(self._channel_name)
        channel.on_postgres_changes(
            event="*",
            schema="public",
            table=self._table,
            callback=self.dispatch,
        )
        await channel.subscribe()
        self._connected = True
        self._logger.info("Realtime channel subscribed: %s", self._channel_name)

        try:
            while not stop_event.is_set():
                if not client.realtime.is_connected:
                    raise ConnectionError("Realtime socket disconnected.")
                await asyncio.sleep(0.5)
        finally:
            self._connected = False
            try:
                await client.remove_channel(channel)
            except Exception:
                self._logger.debug("Realtime channel cleanup failed.", exc_info=True)

    def _wake_loop(self) -> None:
        loop, wake = self._loop, self._wake
        if loop is not None and wake is not None and not loop.is_closed():
            loop.call_soon_threadsafe(wake.set)

    def _calculate_backoff_interval(self) -> float:
        if self._consecutive_failures == 0:
            return self._BASE_RETRY_S
        return min(
            self._BASE_RETRY_S * (2 ** self._consecutive_failures),
            self._MAX_RETRY_S,
        )
