"""
API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the callers.
Hence, we have our own hierarchy of exceptions for the API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
timeouts, etc, are escalated from the client library as is, since they are
related not to the domain of the API, but rather to networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Some selected reasons of the API errors are made into their own classes,
so that they could be intercepted and handled by the callers separately.
All other reasons are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).

Unlike the underlying client library's errors, the API errors contain more
information about the reasons -- as provided by the API in its response bodies,
not guessed only by HTTP statuses alone.

Besides, there are the errors of the client itself: the misaddressed objects
(:class:`InvalidSpec`), the resources absent in the API (:class:`UnknownResource`),
and the broken watch-streams (:class:`StreamDecodeError`).
"""
import collections.abc
import json
from typing import Any, Collection, Optional

import aiohttp
from typing_extensions import Literal, TypedDict

from kubeobjects.models import serializer
from kubeobjects.structs.references import InvalidSpec

__all__ = [
    'InvalidSpec',
    'UnknownResource',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'WatchingError',
    'StreamDecodeError',
    'check_response',
    'parse_response',
]


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/status/
class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class UnknownResource(LookupError):
    """
    The resource kind is not served by the API, even after the re-discovery.
    """

    def __init__(self, group_version: str, kind: str) -> None:
        super().__init__(f"Resource kind {kind!r} is not served in {group_version!r}.")
        self.group_version = group_version
        self.kind = kind


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message, payload)
        self._status = status
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def payload(self) -> Optional[RawStatus]:
        return self._payload

    @property
    def body(self) -> Any:
        """ The status as a typed object (if registered), or as a raw dict. """
        return serializer.decode_object(self._payload) if self._payload else None

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def reason(self) -> Optional[str]:
        return self._payload.get('reason') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class WatchingError(Exception):
    """
    Raised when an unexpected error happens in the watch-stream.
    """


class StreamDecodeError(WatchingError):
    """
    A line of the watch-stream is not a valid watch-event.
    """

    def __init__(self, line: bytes, reason: str) -> None:
        super().__init__(f"Cannot decode a watch-event ({reason}): {line[:200]!r}")
        self.line = line


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised API errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: Optional[RawStatus]
        try:
            payload = await response.json(content_type=None)
        except (ValueError, aiohttp.ClientConnectionError):
            payload = None

        # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
        if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
            payload = None

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            APIError
        )

        # Raise the client-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status) from e


async def parse_response(
        response: aiohttp.ClientResponse,
) -> Any:
    """
    Check the response for errors, and either raise or return the parsed data.
    """
    await check_response(response)
    async with response:
        try:
            return await response.json(content_type=None)
        except json.JSONDecodeError:
            return None  # e.g. an empty body of some deletions
