import aiohttp.web
import pytest


@pytest.fixture()
def configmap_body():
    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': {'namespace': 'ns1', 'name': 'cfg', 'resourceVersion': '100'},
        'data': {'key': 'value'},
    }


@pytest.fixture()
def serve(resp_mocker, aresponses, hostname):
    """ Serve one response for a method & path, and return its spy. """
    def serve_fn(method, path, payload, *, status=200):
        mock = resp_mocker(return_value=aiohttp.web.json_response(payload, status=status))
        aresponses.add(hostname, path, method, mock)
        return mock
    return serve_fn
