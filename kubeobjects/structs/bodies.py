"""
All the structures coming from/to the Kubernetes API.

The usage of these classes is spread over the codebase, so they are extracted
into a separate module of such type definitions.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from the API, usually as retrieved in watching or fetching API calls.
The raw bodies are also the "generic objects" of the client: when there is
no typed shape registered for an object's apiVersion & kind, the raw body
is returned to the caller as is.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``). The callers can use
arbitrary fields at runtime, which are not declared in the type definitions.
"""
import dataclasses
import enum
from typing import Any, List, Mapping, Optional

from typing_extensions import Literal, TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    remainingItemCount: int

    # "continue" is a keyword, so it is accessed as `meta.get('continue')` only.


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


# A special payload for type==ERROR (this is not a connection or client error).
class RawError(TypedDict, total=False):
    apiVersion: str     # usually: Literal['v1']
    kind: str           # usually: Literal['Status']
    metadata: Mapping[Any, Any]
    code: int
    reason: str
    status: str
    message: str


RawEventType = Literal['ADDED', 'MODIFIED', 'DELETED', 'BOOKMARK', 'ERROR']


# As received from the stream before any decoding.
class RawEvent(TypedDict, total=True):
    type: RawEventType
    object: RawBody


class EventType(str, enum.Enum):
    """
    The type of a watch-event. The event's object is:

    * ``ADDED`` & ``MODIFIED``: the new state of the object.
    * ``DELETED``: the state of the object immediately before the deletion.
    * ``BOOKMARK``: an object of the watched kind with only its resource
      version set. On a restart of watching from the bookmark's version,
      the client is guaranteed to neither miss nor repeat any events.
    * ``ERROR``: usually a ``Status`` object.
    """
    ADDED = 'ADDED'
    MODIFIED = 'MODIFIED'
    DELETED = 'DELETED'
    BOOKMARK = 'BOOKMARK'
    ERROR = 'ERROR'


@dataclasses.dataclass(frozen=True)
class WatchEvent:
    """
    A decoded watch-event as delivered to the callers.

    The object is typed if there is a shape registered for its apiVersion &
    kind, or a raw body (a dict) otherwise. The original event is kept as is.
    """
    type: EventType
    object: Any
    raw: RawEvent

    @property
    def resource_version(self) -> Optional[str]:
        return get_resource_version(self.raw['object'])


def get_resource_version(body: Mapping[str, Any]) -> Optional[str]:
    metadata = body.get('metadata') or {}
    version: Optional[str] = metadata.get('resourceVersion')
    return version
