"""
A generic asynchronous client for the objects of any Kubernetes resource kind.

This file is the public interface of the client. All other modules
are internal and can be changed at any time without notice.
"""
from kubeobjects.clients.auth import (
    APIContext,
)
from kubeobjects.clients.discovery import (
    Resolver,
)
from kubeobjects.clients.errors import (
    APIConflictError,
    APIError,
    APIForbiddenError,
    APINotFoundError,
    APIUnauthorizedError,
    InvalidSpec,
    StreamDecodeError,
    UnknownResource,
    WatchingError,
)
from kubeobjects.clients.login import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from kubeobjects.clients.objects import (
    ObjectApi,
    ObjectResponse,
)
from kubeobjects.clients.watching import (
    WatchSession,
    WatchState,
)
from kubeobjects.engines.loggers import (
    LogFormat,
    ObjectLogger,
    configure,
)
from kubeobjects.helpers.versions import (
    version as __version__,
)
from kubeobjects.models import (
    serializer,
)
from kubeobjects.structs.bodies import (
    EventType,
    RawBody,
    RawEvent,
    WatchEvent,
)
from kubeobjects.structs.configuration import (
    ClientSettings,
    NetworkingSettings,
    WatchingSettings,
)
from kubeobjects.structs.credentials import (
    ConnectionInfo,
    LoginError,
)
from kubeobjects.structs.patches import (
    JSONPatch,
    PatchStrategy,
)
from kubeobjects.structs.references import (
    Action,
    ObjectHeader,
    ResourceDescriptor,
    build_path,
)
from kubeobjects.structs.serialization import (
    Serializer,
    attribute,
)

__all__ = [
    '__version__',
    'ObjectApi', 'ObjectResponse',
    'WatchSession', 'WatchState', 'WatchEvent', 'EventType',
    'Resolver', 'ResourceDescriptor', 'ObjectHeader', 'Action', 'build_path',
    'Serializer', 'attribute', 'serializer',
    'PatchStrategy', 'JSONPatch',
    'RawBody', 'RawEvent',
    'APIContext', 'ConnectionInfo', 'LoginError',
    'login', 'login_with_kubeconfig', 'login_with_service_account',
    'ClientSettings', 'NetworkingSettings', 'WatchingSettings',
    'LogFormat', 'ObjectLogger', 'configure',
    'APIError', 'APIConflictError', 'APIForbiddenError', 'APINotFoundError',
    'APIUnauthorizedError', 'InvalidSpec', 'UnknownResource',
    'WatchingError', 'StreamDecodeError',
]
