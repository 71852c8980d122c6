"""
The generic CRUD & watch operations on the objects of any resource kind.

The objects are addressed by their apiVersion, kind, namespace, and name,
either as full bodies (typed or raw dicts), or as bare :class:`ObjectHeader`.
The URLs are built from the discovered resources (see :mod:`discovery`),
so there are no compiled-in endpoints per kind.

The responses are decoded by their own apiVersion & kind, not by the requested
ones: e.g. a deletion usually returns a ``Status``, not the deleted object.
Typed objects are returned for the registered shapes, raw dicts otherwise.

All the caller-side errors (:class:`errors.InvalidSpec`,
:class:`errors.UnknownResource`) are raised before the actual request is sent.
"""
import collections.abc
import dataclasses
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import aiohttp

from kubeobjects import models
from kubeobjects.clients import api, auth, discovery, errors, login, watching
from kubeobjects.engines import loggers
from kubeobjects.helpers import typedefs
from kubeobjects.structs import configuration, credentials, patches, references, serialization

logger = logging.getLogger(__name__)

ACCEPT = 'application/json'

# Anything that can identify an object: a typed object, a raw dict, or a header.
ObjectSpec = Union[references.ObjectHeader, Mapping[str, Any], Any]

# Query parameters as the callers pass them, before they are stringified.
QueryValue = Union[None, str, int, bool]


@dataclasses.dataclass(frozen=True)
class ObjectResponse:
    """
    The decoded body of a response, with the response itself for the details.

    The response is already read & closed at this point, but its status,
    headers, and other metadata are still available.
    """
    body: Any
    response: aiohttp.ClientResponse


class ObjectApi:
    """
    A client for the objects of any resource kind.

    Usage::

        async with ObjectApi.login() as client:
            rsp = await client.read({'apiVersion': 'v1', 'kind': 'ConfigMap',
                                     'metadata': {'name': 'cfg'}})
            print(rsp.body.data)
    """

    def __init__(
            self,
            context: auth.APIContext,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            serializer: Optional[serialization.Serializer] = None,
            default_namespace: Optional[str] = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.serializer = serializer if serializer is not None else models.serializer
        self.default_namespace = (default_namespace or
                                  context.default_namespace or
                                  references.DEFAULT_NAMESPACE)
        self.logger = logger
        self.resolver = discovery.Resolver(context=context, settings=self.settings, logger=logger)

    @classmethod
    def from_connection_info(cls, info: credentials.ConnectionInfo, **kwargs: Any) -> "ObjectApi":
        return cls(auth.APIContext(info), **kwargs)

    @classmethod
    def login(cls, *, context: Optional[str] = None, **kwargs: Any) -> "ObjectApi":
        """ Login in-cluster or via kubeconfig, see :func:`login.login`. """
        info = login.login(context=context, logger=kwargs.get('logger', logger))
        return cls.from_connection_info(info, **kwargs)

    async def __aenter__(self) -> "ObjectApi":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.context.close()

    async def resource(self, api_version: Optional[str], kind: str) -> references.ResourceDescriptor:
        """ Resolve the resource kind to its URL details (cached per group-version). """
        if not kind:
            raise errors.InvalidSpec("Required property kind is not set.")
        return await self.resolver.resolve(api_version or references.DEFAULT_API_VERSION, kind)

    async def create(
            self,
            spec: Any,
            *,
            pretty: Optional[str] = None,
            dry_run: Optional[str] = None,
            field_manager: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        body = self.serializer.encode_object(spec)
        header = references.ObjectHeader.from_body(body)
        path, descriptor = await self._locate(header, references.Action.CREATE)
        return await self._call(
            method='post',
            path=path,
            header=header,
            payload=self._fill_defaults(body, header, references.Action.CREATE, descriptor),
            params={'pretty': pretty, 'dryRun': dry_run, 'fieldManager': field_manager},
            headers=headers,
        )

    async def read(
            self,
            spec: ObjectSpec,
            *,
            pretty: Optional[str] = None,
            exact: Optional[bool] = None,
            export: Optional[bool] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        header = self._identify(spec)
        path, _ = await self._locate(header, references.Action.READ)
        return await self._call(
            method='get',
            path=path,
            header=header,
            params={'pretty': pretty, 'exact': exact, 'export': export},
            headers=headers,
        )

    async def replace(
            self,
            spec: Any,
            *,
            pretty: Optional[str] = None,
            dry_run: Optional[str] = None,
            field_manager: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        body = self.serializer.encode_object(spec)
        header = references.ObjectHeader.from_body(body)
        path, descriptor = await self._locate(header, references.Action.REPLACE)
        return await self._call(
            method='put',
            path=path,
            header=header,
            payload=self._fill_defaults(body, header, references.Action.REPLACE, descriptor),
            params={'pretty': pretty, 'dryRun': dry_run, 'fieldManager': field_manager},
            headers=headers,
        )

    async def patch(
            self,
            spec: ObjectSpec,
            patch: Optional[Any] = None,
            *,
            strategy: Optional[patches.PatchStrategy] = None,
            pretty: Optional[str] = None,
            dry_run: Optional[str] = None,
            field_manager: Optional[str] = None,
            force: Optional[bool] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        """
        Patch an object with one of the patch strategies.

        If the patch is not given, the object itself is the patch, i.e. a partial
        body with the identifying fields. Otherwise, the object only identifies
        the patched object, and the patch is sent as is: a JSON-patch list
        or a (partial) body for the merge-patches and the server-side apply.

        The strategy is the strategic merge-patch by default, and can also be
        selected by the Content-Type header (which takes precedence).
        """
        header = self._identify(spec)
        strategy = strategy if strategy is not None else patches.DEFAULT_PATCH_STRATEGY
        headers = _merge_headers(headers, {'content-type': strategy.value})
        effective = patches.PatchStrategy.from_content_type(headers['content-type'])
        if force is not None and (effective is None or not effective.supports_force):
            raise errors.InvalidSpec(f"Forcing is supported only for the apply-patches, "
                                     f"not for {headers['content-type']!r}.")
        if effective is patches.PatchStrategy.APPLY and not field_manager:
            raise errors.InvalidSpec("The apply-patches require a field manager.")

        payload: Any
        if patch is None and isinstance(spec, references.ObjectHeader):
            raise errors.InvalidSpec("The patch is required when the object is addressed by a header.")
        elif patch is None:
            payload = self.serializer.encode_object(spec)
        elif isinstance(patch, (list, tuple)):
            payload = list(patch)
        else:
            payload = self.serializer.encode_object(patch)
        if effective is patches.PatchStrategy.JSON_PATCH and not isinstance(payload, list):
            raise errors.InvalidSpec("The JSON-patches must be lists of operations.")
        if effective is not patches.PatchStrategy.JSON_PATCH and isinstance(payload, list):
            raise errors.InvalidSpec(f"The lists can be sent only as JSON-patches, "
                                     f"not as {headers['content-type']!r}.")

        path, _ = await self._locate(header, references.Action.PATCH)
        return await self._call(
            method='patch',
            path=path,
            header=header,
            payload=payload,
            params={'pretty': pretty, 'dryRun': dry_run, 'fieldManager': field_manager,
                    'force': force},
            headers=headers,
        )

    async def delete(
            self,
            spec: ObjectSpec,
            *,
            pretty: Optional[str] = None,
            dry_run: Optional[str] = None,
            grace_period_seconds: Optional[int] = None,
            orphan_dependents: Optional[bool] = None,
            propagation_policy: Optional[str] = None,
            options: Optional[Union[models.V1DeleteOptions, Mapping[str, Any]]] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        header = self._identify(spec)
        path, _ = await self._locate(header, references.Action.DELETE)
        return await self._call(
            method='delete',
            path=path,
            header=header,
            payload=None if options is None else self.serializer.encode_object(options),
            params={'pretty': pretty, 'dryRun': dry_run,
                    'gracePeriodSeconds': grace_period_seconds,
                    'orphanDependents': orphan_dependents,
                    'propagationPolicy': propagation_policy},
            headers=headers,
        )

    async def list(
            self,
            api_version: Optional[str],
            kind: str,
            namespace: Optional[str] = None,
            *,
            pretty: Optional[str] = None,
            exact: Optional[bool] = None,
            export: Optional[bool] = None,
            field_selector: Optional[str] = None,
            label_selector: Optional[str] = None,
            limit: Optional[int] = None,
            continue_token: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectResponse:
        """
        List the objects of a kind, in one namespace or cluster-wide.

        There is no auto-pagination: to get the next page, pass the continue token
        from the list's metadata of the previous page.
        """
        header = references.ObjectHeader(api_version=api_version, kind=kind, namespace=namespace)
        path, _ = await self._locate(header, references.Action.LIST)
        rsp = await self._call(
            method='get',
            path=path,
            header=header,
            params={'pretty': pretty, 'exact': exact, 'export': export,
                    'fieldSelector': field_selector, 'labelSelector': label_selector,
                    'limit': limit, 'continue': continue_token},
            headers=headers,
            decode=False,
        )
        return dataclasses.replace(rsp, body=self._decode_list(rsp.body))

    async def watch(
            self,
            api_version: Optional[str],
            kind: str,
            namespace: Optional[str] = None,
            *,
            resource_version: Optional[str] = None,
            allow_bookmarks: bool = True,
            label_selector: Optional[str] = None,
            field_selector: Optional[str] = None,
            timeout_seconds: Optional[float] = None,
            callback: Optional[watching.EventCallback] = None,
            done: Optional[watching.DoneCallback] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> watching.WatchSession:
        """
        Prepare a watch-session for the objects of a kind, and start it if requested.

        The resolving errors are raised here. The errors of the stream are either
        raised to the iterating caller, or passed to the ``done`` callback.
        Without a namespace, the objects are watched cluster-wide.
        """
        header = references.ObjectHeader(api_version=api_version, kind=kind, namespace=namespace)
        path, _ = await self._locate(header, references.Action.LIST)
        timeout_seconds = timeout_seconds if timeout_seconds is not None else \
            self.settings.watching.server_timeout
        session = watching.WatchSession(
            path,
            context=self.context,
            settings=self.settings,
            serializer=self.serializer,
            params=_stringify_params({
                'watch': True,
                'resourceVersion': resource_version,
                'allowWatchBookmarks': allow_bookmarks or None,
                'labelSelector': label_selector,
                'fieldSelector': field_selector,
                'timeoutSeconds': None if timeout_seconds is None else int(timeout_seconds),
            }),
            headers=_merge_headers(headers, {'accept': ACCEPT}),
            resource_version=resource_version,
            logger=loggers.ObjectLogger(self.logger, header),
        )
        if callback is not None:
            session.start(callback, done)
        return session

    def _identify(self, spec: ObjectSpec) -> references.ObjectHeader:
        if isinstance(spec, references.ObjectHeader):
            return spec
        return references.ObjectHeader.from_body(self.serializer.encode_object(spec))

    async def _locate(
            self,
            header: references.ObjectHeader,
            action: references.Action,
    ) -> Tuple[str, references.ResourceDescriptor]:
        references.validate_header(header, action)
        descriptor = await self.resource(header.api_version, header.kind or '')
        path = references.build_path(header, action, descriptor,
                                     default_namespace=self.default_namespace)
        return path, descriptor

    def _fill_defaults(
            self,
            body: Dict[str, Any],
            header: references.ObjectHeader,
            action: references.Action,
            descriptor: references.ResourceDescriptor,
    ) -> Dict[str, Any]:
        body = dict(body)
        body.setdefault('apiVersion', references.DEFAULT_API_VERSION)
        namespace = references.effective_namespace(header, action, descriptor,
                                                   default_namespace=self.default_namespace)
        if namespace and not header.namespace:
            body['metadata'] = dict(body.get('metadata') or {}, namespace=namespace)
        return body

    async def _call(
            self,
            *,
            method: str,
            path: str,
            header: references.ObjectHeader,
            params: Mapping[str, QueryValue],
            headers: Optional[Mapping[str, str]],
            payload: Optional[object] = None,
            decode: bool = True,
    ) -> ObjectResponse:
        response = await api.request(
            method=method,
            url=path,
            payload=payload,
            params=_stringify_params(params),
            headers=_merge_headers(headers, {'accept': ACCEPT}),
            context=self.context,
            settings=self.settings,
            logger=loggers.ObjectLogger(self.logger, header),
        )
        async with response:
            raw = await response.json(content_type=None)
        body = self.serializer.decode_object(raw) if decode else raw
        return ObjectResponse(body=body, response=response)

    def _decode_list(self, raw: Any) -> Any:
        """
        Decode the list as a whole if its shape is known, or its items one by one.

        The items of the lists have no apiVersion & kind in the API responses,
        so they are implied from the list's kind (e.g. ``ConfigMapList``).
        """
        if not isinstance(raw, collections.abc.Mapping):
            return raw
        api_version, list_kind = raw.get('apiVersion'), raw.get('kind') or ''
        if self.serializer.shape_name(api_version, list_kind) != serialization.GENERIC:
            return self.serializer.decode_object(raw)

        item_kind = list_kind[:-4] if list_kind.endswith('List') else list_kind
        codec = self.serializer.codec(api_version, item_kind)
        body = dict(raw)
        body['items'] = [codec.decode(item) for item in raw.get('items') or []]
        return body


def _merge_headers(
        headers: Optional[Mapping[str, str]],
        defaults: Mapping[str, str],
) -> Dict[str, str]:
    """ Apply the caller's headers over the defaults, with the names case-insensitive. """
    merged = {key.lower(): val for key, val in defaults.items()}
    merged.update({key.lower(): val for key, val in (headers or {}).items()})
    return merged


def _stringify_params(params: Mapping[str, QueryValue]) -> Dict[str, str]:
    """ Drop the unset query parameters, and format the rest as the API expects. """
    return {
        key: ('true' if val else 'false') if isinstance(val, bool) else str(val)
        for key, val in params.items()
        if val is not None
    }

