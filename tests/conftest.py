import io
import json
import logging
import re
import sys
from unittest.mock import AsyncMock, MagicMock

import aiohttp.web
import pytest

from kubeobjects.clients.auth import APIContext
from kubeobjects.clients.objects import ObjectApi
from kubeobjects.engines.loggers import ObjectPrefixingTextFormatter, configure
from kubeobjects.structs.configuration import ClientSettings
from kubeobjects.structs.credentials import ConnectionInfo
from kubeobjects.structs.references import ResourceDescriptor

CORE_V1_RESOURCES = [
    {'name': 'configmaps', 'singularName': '', 'namespaced': True, 'kind': 'ConfigMap',
     'verbs': ['create', 'delete', 'get', 'list', 'patch', 'update', 'watch'],
     'shortNames': ['cm']},
    {'name': 'namespaces', 'singularName': '', 'namespaced': False, 'kind': 'Namespace',
     'verbs': ['create', 'delete', 'get', 'list', 'patch', 'update', 'watch'],
     'shortNames': ['ns']},
    {'name': 'namespaces/status', 'singularName': '', 'namespaced': False, 'kind': 'Namespace',
     'verbs': ['get', 'patch', 'update']},
    {'name': 'pods', 'singularName': '', 'namespaced': True, 'kind': 'Pod',
     'verbs': ['create', 'delete', 'get', 'list', 'patch', 'update', 'watch'],
     'shortNames': ['po']},
    {'name': 'pods/log', 'singularName': '', 'namespaced': True, 'kind': 'Pod',
     'verbs': ['get']},
    {'name': 'pods/status', 'singularName': '', 'namespaced': True, 'kind': 'Pod',
     'verbs': ['get', 'patch', 'update']},
]

APPS_V1_RESOURCES = [
    {'name': 'deployments', 'singularName': 'deployment', 'namespaced': True, 'kind': 'Deployment',
     'verbs': ['create', 'delete', 'get', 'list', 'patch', 'update', 'watch'],
     'shortNames': ['deploy']},
    {'name': 'deployments/scale', 'singularName': '', 'namespaced': True, 'kind': 'Scale',
     'group': 'autoscaling', 'version': 'v1', 'verbs': ['get', 'patch', 'update']},
]


@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def info(hostname):
    return ConnectionInfo(server=f'https://{hostname}')


@pytest.fixture()
async def context(info):
    context = APIContext(info)
    try:
        yield context
    finally:
        await context.close()


@pytest.fixture()
def client(context, settings):
    return ObjectApi(context, settings=settings)


@pytest.fixture()
def configmaps():
    return ResourceDescriptor(group_version='v1', kind='ConfigMap', plural='configmaps',
                              namespaced=True)


@pytest.fixture()
def namespaces():
    return ResourceDescriptor(group_version='v1', kind='Namespace', plural='namespaces',
                              namespaced=False)


@pytest.fixture()
def deployments():
    return ResourceDescriptor(group_version='apps/v1', kind='Deployment', plural='deployments',
                              namespaced=True)


# Note: Unused `context` is to ensure that the session is closed for every test.
@pytest.fixture()
def resp_mocker(context, aresponses):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The difference from passing the responses directly to `aresponses.add`
    is that it is possible to assert on whether the response was handled
    by that callback at all (i.e. HTTP URL & method matched), especially
    if there are multiple responses registered.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
    """
    def resp_maker(*args, **kwargs):
        actual_response = MagicMock(*args, **kwargs)
        async def resp_mock_effect(request):
            nonlocal actual_response

            # The request's content can be read inside of the handler only. We preserve
            # the data into a conventional field, so that they could be asserted later.
            try:
                request.data = await request.json()
            except json.JSONDecodeError:
                request.data = await request.text()

            # Get a response/error as it was intended (via return_value/side_effect).
            response = actual_response()
            return response

        return AsyncMock(side_effect=resp_mock_effect)
    return resp_maker


@pytest.fixture()
def discovery_api(resp_mocker, aresponses, hostname):
    """
    Serve the discovery of the group-versions as a real API would do.

    Returns the mocks of the discovery endpoints to check the number of calls.
    """
    def serve(group_version, resources, *, repeat=1):
        path = f'/apis/{group_version}' if '/' in group_version else f'/api/{group_version}'
        payload = {'kind': 'APIResourceList', 'apiVersion': 'v1',
                   'groupVersion': group_version, 'resources': resources}
        mock = resp_mocker(return_value=aiohttp.web.json_response(payload))
        aresponses.add(hostname, path, 'get', mock, repeat=repeat)
        return mock
    return serve


@pytest.fixture()
def core_v1_api(discovery_api):
    return discovery_api('v1', CORE_V1_RESOURCES)


@pytest.fixture()
def apps_v1_api(discovery_api):
    return discovery_api('apps/v1', APPS_V1_RESOURCES)


#
# Helpers for the logging checks.
#


@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A sife-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[]):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            if remaining_patterns and re.search(remaining_patterns[0], message):
                remaining_patterns[:1] = []
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")
    return assert_logs_fn
