"""
All configuration flags, options, settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The client has no intrinsic timeouts: all of them are ``None`` by default,
and the timeout policy is left to the callers. Same for the retries:
there are none, and the failures are escalated to the callers as is.
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = None
    """
    A timeout for the regular (non-streaming) API requests, in seconds.
    ``None`` means no timeout.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the TCP/SSL connection establishment, in seconds.
    ``None`` means no separate connection timeout (the request timeout applies).
    """


@dataclasses.dataclass
class WatchingSettings:

    server_timeout: Optional[float] = None
    """
    The maximum duration of one streaming request. Patched in some tests.
    If ``None``, then obeys the server-side default (usually 5-15 minutes).
    It is sent as ``timeoutSeconds`` with every watch request.
    """

    client_timeout: Optional[float] = None
    """
    An HTTP/HTTPS session timeout to use in watch requests.
    """

    connect_timeout: Optional[float] = None
    """
    An HTTP/HTTPS connection timeout to use in watch requests.
    If not set, the networking connection timeout is used.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    watching: WatchingSettings = dataclasses.field(default_factory=WatchingSettings)
