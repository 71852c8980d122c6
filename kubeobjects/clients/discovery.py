"""
Resolving of the resource kinds to their URL details via the API's discovery.

The objects are addressed by their apiVersion & kind, while the URLs require
the plural names of the resources, and the namespace-scoping must be known.
Both are only known from the discovery endpoints of the group-versions,
e.g. ``/api/v1`` or ``/apis/apps/v1``.

The discovered resources are cached per group-version for the lifetime
of the client. A miss in the cache (either the whole group-version or only
the kind in it) triggers one re-discovery of the whole group-version, which
replaces the cached entry as a whole. This covers the custom resources
defined after the client has started, with no separate invalidation.

There are no locks: the cached entries are immutable tuples, which are replaced
at once; the concurrent re-discoveries are idempotent, the last one wins.
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from kubeobjects.clients import api, auth, errors
from kubeobjects.helpers import typedefs
from kubeobjects.structs import configuration, references

logger = logging.getLogger(__name__)

ResourceCache = Dict[str, Tuple[references.ResourceDescriptor, ...]]


class Resolver:
    """
    A per-client cache of the discovered resources, and its lookups.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            settings: configuration.ClientSettings,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings
        self.logger = logger
        self._cache: ResourceCache = {}

    @property
    def cache(self) -> Mapping[str, Tuple[references.ResourceDescriptor, ...]]:
        return dict(self._cache)

    async def resolve(self, group_version: str, kind: str) -> references.ResourceDescriptor:
        """
        Find the resource for a kind, or fail with :class:`errors.UnknownResource`.

        The cached group-version is used if it has the kind, and is re-discovered
        otherwise. The failures of the discovery itself are escalated as is,
        except when the whole group-version is absent.
        """
        cached = self._cache.get(group_version)
        if cached is not None:
            found = _find(cached, kind)
            if found is not None:
                return found

        try:
            refreshed = await self.refresh(group_version)
        except errors.APINotFoundError as e:
            raise errors.UnknownResource(group_version, kind) from e

        found = _find(refreshed, kind)
        if found is None:
            raise errors.UnknownResource(group_version, kind)
        return found

    async def refresh(self, group_version: str) -> Tuple[references.ResourceDescriptor, ...]:
        """ Re-discover the group-version and replace its cached entry as a whole. """
        self.logger.debug(f"Discovering the resources of {group_version!r}.")
        url = references.build_version_path(group_version)
        rsp = await api.get(url, context=self.context, settings=self.settings, logger=self.logger)
        descriptors = tuple(parse_resources(group_version, rsp.get('resources') or []))
        self._cache[group_version] = descriptors
        return descriptors

    def invalidate(self, group_version: Optional[str] = None) -> None:
        """ Forget one group-version, or all of them if not specified. """
        if group_version is None:
            self._cache.clear()
        else:
            self._cache.pop(group_version, None)


def parse_resources(
        group_version: str,
        resources: Iterable[Mapping[str, Any]],
) -> Iterable[references.ResourceDescriptor]:
    """
    Convert the discovered resources to the descriptors.

    The subresources (e.g. ``pods/status``) are not kinds on their own:
    they are folded into their parent resources.
    """
    resources = list(resources)
    for resource in resources:
        if '/' in resource['name']:
            continue
        yield references.ResourceDescriptor(
            group_version=group_version,
            kind=resource['kind'],
            plural=resource['name'],
            namespaced=bool(resource.get('namespaced')),
            singular=resource.get('singularName') or resource['kind'].lower(),
            verbs=frozenset(resource.get('verbs') or []),
            shortcuts=frozenset(resource.get('shortNames') or []),
            subresources=frozenset(
                subresource['name'].split('/', 1)[-1]
                for subresource in resources
                if subresource['name'].startswith(f'{resource["name"]}/')
            ),
        )


def _find(
        descriptors: Iterable[references.ResourceDescriptor],
        kind: str,
) -> Optional[references.ResourceDescriptor]:
    for descriptor in descriptors:
        if descriptor.kind == kind:
            return descriptor
    return None
