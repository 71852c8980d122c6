import json

import pytest

STREAM_PATH = '/api/v1/namespaces/ns1/configmaps'


def _cm(name, rv, **extra):
    return dict({'apiVersion': 'v1', 'kind': 'ConfigMap',
                 'metadata': {'namespace': 'ns1', 'name': name, 'resourceVersion': rv}},
                **extra)


@pytest.fixture()
def events():
    return [
        {'type': 'ADDED', 'object': _cm('a', '1', data={'x': '1'})},
        {'type': 'MODIFIED', 'object': _cm('a', '2', data={'x': '2'})},
        {'type': 'BOOKMARK', 'object': {'apiVersion': 'v1', 'kind': 'ConfigMap',
                                        'metadata': {'resourceVersion': '3'}}},
        {'type': 'DELETED', 'object': _cm('a', '4')},
    ]


@pytest.fixture()
def stream(resp_mocker, aresponses, hostname, core_v1_api):
    """ Serve the watch-stream with the events & raw lines, as they are given. """
    def serve(*items):
        lines = [item if isinstance(item, bytes) else json.dumps(item).encode() for item in items]
        text = b'\n'.join(lines) + b'\n'
        mock = resp_mocker(return_value=aresponses.Response(body=text))
        aresponses.add(hostname, STREAM_PATH, 'get', mock)
        return mock
    return serve
