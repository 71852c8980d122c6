"""
References to the resource kinds and individual objects, and the API URLs.

The API has no endpoints addressed by kinds: the URLs contain the plural
names of the resources and a few other details known only from the API's
discovery (see :mod:`kubeobjects.clients.discovery`). The discovered details
are kept in :class:`ResourceDescriptor`, while the identities of the objects
requested by the callers are kept in :class:`ObjectHeader`.

Both are combined in :func:`build_path` to form a relative URL of the API.
"""
import dataclasses
import enum
import urllib.parse
from typing import Any, FrozenSet, List, Mapping, Optional, Tuple

DEFAULT_API_VERSION = 'v1'
DEFAULT_NAMESPACE = 'default'


class InvalidSpec(ValueError):
    """
    Raised when the caller-provided object misses the required fields.

    It is never raised after a request is sent: the request is not even started.
    """


class Action(str, enum.Enum):
    """ The API verbs as far as the URLs are concerned. """
    CREATE = 'create'
    READ = 'read'
    REPLACE = 'replace'
    PATCH = 'patch'
    DELETE = 'delete'
    LIST = 'list'

    @property
    def requires_name(self) -> bool:
        return self in (Action.READ, Action.REPLACE, Action.PATCH, Action.DELETE)


def split_api_version(api_version: str) -> Tuple[str, str]:
    """
    Split the api version into a group & a version; the core group is ``""``.

    E.g.: ``"apps/v1"`` -> ``("apps", "v1")``; ``"v1"`` -> ``("", "v1")``.
    """
    group, _, version = api_version.rpartition('/')
    return group, version


@dataclasses.dataclass(frozen=True)
class ResourceDescriptor:
    """
    A resolved resource kind, as discovered in the API.

    Only the plural name & the namespace-scoping flag are needed to build URLs.
    Other fields are informational, as reported by the API's discovery.
    """

    group_version: str
    """ E.g.: ``"v1"``, ``"apps/v1"``, ``"example.com/v1alpha1"``. """

    kind: str
    """ E.g.: ``"Pod"``, ``"Deployment"``. """

    plural: str
    """ E.g.: ``"pods"``, ``"deployments"``. Used as the URL's endpoint. """

    namespaced: bool
    singular: Optional[str] = None
    verbs: FrozenSet[str] = frozenset()
    shortcuts: FrozenSet[str] = frozenset()
    subresources: FrozenSet[str] = frozenset()

    def __repr__(self) -> str:
        group, version = split_api_version(self.group_version)
        return f'{self.plural}.{version}.{group}'.strip('.')

    @property
    def group(self) -> str:
        return split_api_version(self.group_version)[0]

    @property
    def version(self) -> str:
        return split_api_version(self.group_version)[1]


@dataclasses.dataclass(frozen=True)
class ObjectHeader:
    """
    A minimal identity of an object: enough to address it in the API.

    The name is required for the single-object actions (read, replace, patch,
    delete), and is ignored for the listings and creation. The namespace
    is taken from the defaults if it is needed but not set.
    """
    api_version: Optional[str]
    kind: Optional[str]
    namespace: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ObjectHeader":
        metadata = body.get('metadata') or {}
        return cls(
            api_version=body.get('apiVersion'),
            kind=body.get('kind'),
            namespace=metadata.get('namespace'),
            name=metadata.get('name'),
        )


def effective_namespace(
        header: ObjectHeader,
        action: Action,
        descriptor: ResourceDescriptor,
        *,
        default_namespace: str = DEFAULT_NAMESPACE,
) -> Optional[str]:
    """
    Determine the namespace to be used in the URL (and the body, if sent).

    Cluster-scoped resources have no namespaces. Namespaced resources use
    the header's namespace, or the default one for all actions except listing,
    which means cluster-wide listing when the namespace is not set.
    """
    if not descriptor.namespaced:
        return None
    elif header.namespace:
        return header.namespace
    elif action is Action.LIST:
        return None
    else:
        return default_namespace


def validate_header(header: ObjectHeader, action: Action) -> None:
    """ Fail fast if the object cannot be addressed for the action, before any requests. """
    if not header.kind:
        raise InvalidSpec("Required property kind is not set.")
    if action.requires_name and not header.name:
        raise InvalidSpec(f"Required property name is not set for {action.value!r}.")


def build_path(
        header: ObjectHeader,
        action: Action,
        descriptor: ResourceDescriptor,
        *,
        default_namespace: str = DEFAULT_NAMESPACE,
) -> str:
    """
    Build a URL path (relative to the server's root) for an object or a list.

    The whole path is lower-cased, as the API routing is case-insensitive.
    For example, for ``apps/v1`` ``Deployment`` named ``Foo`` in ``Default``::

        /apis/apps/v1/namespaces/default/deployments/foo
    """
    validate_header(header, action)

    api_version = header.api_version or DEFAULT_API_VERSION
    namespace = effective_namespace(header, action, descriptor, default_namespace=default_namespace)

    parts: List[str] = [
        '',  # for the leading slash
        'apis' if '/' in api_version else 'api',
        api_version,
    ]
    if namespace:
        parts.extend(['namespaces', urllib.parse.quote(namespace, safe='')])
    parts.append(descriptor.plural)
    if action.requires_name and header.name:
        parts.append(urllib.parse.quote(header.name, safe=''))

    return '/'.join(parts).lower()


def build_version_path(api_version: str) -> str:
    """ The root of a group-version, as used for the resource discovery. """
    return ('/apis/' if '/' in api_version else '/api/') + api_version
