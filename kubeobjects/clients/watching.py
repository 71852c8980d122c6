"""
Watching of the resources for changes, one streaming connection at a time.

The API sends the watch-events as newline-delimited JSON in a long-running
response: each line is an event ``{"type": ..., "object": ...}``. The objects
are decoded by their own apiVersion & kind, so a typed object is delivered
if its shape is registered, or a raw dict otherwise.

A session is consumed either as an async iterator::

    async for event in session:
        print(event.type, event.object)

Or with the callbacks, in which case the session runs in its own task::

    session.start(callback=print, done=lambda error: ...)

In both cases, the next event is read only when the previous one is processed:
there is no read-ahead beyond what the transport itself buffers.

The session never re-connects: when the stream ends, it is over. To continue,
start a new session from the last seen :attr:`WatchSession.resource_version`.
The bookmarks are always delivered so that this version is kept fresh.
"""
import asyncio
import enum
import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Optional, Union

import aiohttp

from kubeobjects.clients import api, auth, errors
from kubeobjects.helpers import typedefs
from kubeobjects.structs import bodies, configuration, serialization

logger = logging.getLogger(__name__)

EventCallback = Callable[[bodies.WatchEvent], Union[None, Awaitable[None]]]
DoneCallback = Callable[[Optional[BaseException]], Union[None, Awaitable[None]]]


class WatchState(str, enum.Enum):
    CONNECTING = 'connecting'
    STREAMING = 'streaming'
    CLOSED = 'closed'
    ERRORED = 'errored'

    @property
    def finished(self) -> bool:
        return self in (WatchState.CLOSED, WatchState.ERRORED)


class WatchSession:
    """
    A single watch-request and the stream of its decoded events.

    The session is created by :meth:`ObjectApi.watch` with everything resolved,
    and connects only when consumed: either iterated or started.
    It can be consumed only once.
    """

    resource_version: Optional[str]
    """ The last seen resource version, including bookmarks, for resuming. """

    def __init__(
            self,
            url: str,
            *,
            context: auth.APIContext,
            settings: configuration.ClientSettings,
            serializer: serialization.Serializer,
            params: Optional[Mapping[str, str]] = None,
            headers: Optional[Mapping[str, str]] = None,
            resource_version: Optional[str] = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.url = url
        self.params = dict(params or {})
        self.headers = dict(headers or {})
        self.context = context
        self.settings = settings
        self.serializer = serializer
        self.logger = logger
        self.resource_version = resource_version
        self.task: Optional[asyncio.Task[None]] = None
        self._state = WatchState.CONNECTING
        self._consumed = False
        self._aborted = False
        self._loop = asyncio.get_running_loop()
        self._stopper: typedefs.Future = self._loop.create_future()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.url!r} {self._state.value}>'

    @property
    def state(self) -> WatchState:
        return self._state

    async def __aenter__(self) -> "WatchSession":
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.abort()
        if self.task is not None:
            await asyncio.wait({self.task})

    def __aiter__(self) -> AsyncIterator[bodies.WatchEvent]:
        return self._iterate()

    def abort(self) -> None:
        """
        Stop the session: close the response and start no more callbacks.

        It is idempotent, and can be called from any task or thread.
        A callback already in progress is not interrupted.
        """
        self._aborted = True
        try:
            running_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None
        if running_loop is self._loop:
            self._stop()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._stop)

    def _stop(self) -> None:
        if not self._stopper.done():
            self._stopper.set_result(None)

    def start(
            self,
            callback: EventCallback,
            done: Optional[DoneCallback] = None,
    ) -> "asyncio.Task[None]":
        """
        Deliver the events to a callback in a background task.

        The ``done`` callback is called exactly once when the session is over:
        with ``None`` on the end of the stream or on abort, or with the error.
        The callbacks can be either regular functions or coroutine functions.
        """
        if self._consumed or self.task is not None:
            raise RuntimeError("The watch-session can be consumed only once.")
        self.task = self._loop.create_task(self._run(callback, done))
        return self.task

    async def wait(self) -> None:
        """ Wait until the background task of :meth:`start` is over. """
        if self.task is None:
            raise RuntimeError("The watch-session is not started.")
        await asyncio.wait({self.task})

    async def _run(self, callback: EventCallback, done: Optional[DoneCallback]) -> None:
        error: Optional[BaseException] = None
        events = self._iterate()
        try:
            async for event in events:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
        except asyncio.CancelledError:
            self._aborted = True
            await events.aclose()
            await _invoke(done, None)
            raise
        except Exception as e:
            if not self._state.finished:
                self.logger.error(f"Watching is interrupted by a callback failure: {e!r}")
                self._state = WatchState.ERRORED
            error = e
        finally:
            await events.aclose()
        await _invoke(done, error)

    async def _iterate(self) -> AsyncIterator[bodies.WatchEvent]:
        if self._consumed:
            raise RuntimeError("The watch-session can be consumed only once.")
        self._consumed = True

        response: Optional[aiohttp.ClientResponse] = None
        response_close_callback = lambda _: response.close() if response is not None else None
        self._stopper.add_done_callback(response_close_callback)
        try:
            response = await self._connect()
            if response is None or self._aborted:
                return

            self._state = WatchState.STREAMING
            self.logger.debug(f"Watching started: {self.url} {self.params}")
            async for line in api.iter_jsonlines(response.content):
                if self._aborted:
                    break
                event = self._decode(line)
                if event.type is not bodies.EventType.ERROR and event.resource_version:
                    self.resource_version = event.resource_version
                yield event
                if self._aborted:
                    break

        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError) as e:
            if self._aborted:
                pass
            else:
                self.logger.warning(f"Watching is interrupted by a connection failure: {e!r}")
                self._state = WatchState.ERRORED
                raise
        except errors.StreamDecodeError as e:
            self.logger.error(f"Watching is interrupted by an undecodable event: {e}")
            self._state = WatchState.ERRORED
            raise
        except Exception:
            self._state = WatchState.ERRORED
            raise
        finally:
            self._stopper.remove_done_callback(response_close_callback)
            if response is not None:
                response.close()
            if not self._state.finished:
                self._state = WatchState.CLOSED
                self.logger.debug(f"Watching stopped: {self.url} at {self.resource_version!r}")

    async def _connect(self) -> Optional[aiohttp.ClientResponse]:
        """ Send the request unless aborted, and abandon it if aborted meanwhile. """
        if self._stopper.done():
            return None

        timeout = aiohttp.ClientTimeout(
            total=self.settings.watching.client_timeout,
            sock_connect=(self.settings.watching.connect_timeout or
                          self.settings.networking.connect_timeout),
        )
        request = self._loop.create_task(api.request(
            method='get',
            url=self.url,
            params=self.params,
            headers=self.headers,
            timeout=timeout,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        ))
        try:
            await asyncio.wait({request, self._stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not request.done():
                request.cancel()
                await asyncio.wait({request})
        if request.cancelled():
            return None
        return request.result()

    def _decode(self, line: bytes) -> bodies.WatchEvent:
        raw = api.parse_jsonline(line)
        if not isinstance(raw, dict) or not isinstance(raw.get('object'), dict):
            raise errors.StreamDecodeError(line, "not a watch-event")
        try:
            event_type = bodies.EventType(raw.get('type'))
        except ValueError as e:
            raise errors.StreamDecodeError(line, f"unknown event type {raw.get('type')!r}") from e
        try:
            obj = self.serializer.decode_object(raw['object'])
        except (ValueError, TypeError, KeyError) as e:
            raise errors.StreamDecodeError(line, f"undecodable object: {e!r}") from e
        return bodies.WatchEvent(type=event_type, object=obj, raw=raw)


async def _invoke(fn: Optional[DoneCallback], error: Optional[BaseException]) -> None:
    if fn is not None:
        result = fn(error)
        if inspect.isawaitable(result):
            await result
