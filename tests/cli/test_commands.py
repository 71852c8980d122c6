import json

import yaml

from kubeobjects.clients.objects import ObjectResponse
from kubeobjects.models import V1ConfigMap, V1ObjectMeta
from kubeobjects.structs.bodies import EventType, WatchEvent
from kubeobjects.structs.patches import PatchStrategy
from kubeobjects.structs.references import ObjectHeader

CONFIGMAP = V1ConfigMap(metadata=V1ObjectMeta(namespace='ns1', name='cfg'), data={'a': 'b'})


def test_get_as_yaml(invoke, client_login, fake_client):
    fake_client.read.return_value = ObjectResponse(body=CONFIGMAP, response=None)

    result = invoke(['get', 'v1', 'ConfigMap', 'cfg', '-n', 'ns1'])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.stdout) == {
        'apiVersion': 'v1', 'kind': 'ConfigMap',
        'metadata': {'namespace': 'ns1', 'name': 'cfg'},
        'data': {'a': 'b'},
    }
    assert fake_client.read.await_args[0][0] == ObjectHeader(
        api_version='v1', kind='ConfigMap', namespace='ns1', name='cfg')
    assert client_login.call_args[1]['context'] is None
    assert fake_client.__aexit__.called


def test_get_as_json_with_a_kubecontext(invoke, client_login, fake_client):
    fake_client.read.return_value = ObjectResponse(body={'kind': 'Whatever'}, response=None)

    result = invoke(['get', 'example.com/v1', 'Widget', 'w', '--context', 'ctx', '-o', 'json'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {'kind': 'Whatever'}
    assert client_login.call_args[1]['context'] == 'ctx'


def test_list_with_filters(invoke, client_login, fake_client):
    fake_client.list.return_value = ObjectResponse(body={
        'apiVersion': 'v1', 'kind': 'ConfigMapList', 'items': [CONFIGMAP],
    }, response=None)

    result = invoke(['list', 'v1', 'ConfigMap', '-n', 'ns1', '-l', 'app=demo', '--limit', '5',
                     '--continue', 'token', '-o', 'json'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)['items'][0]['metadata']['name'] == 'cfg'
    assert fake_client.list.await_args[0] == ('v1', 'ConfigMap', 'ns1')
    assert fake_client.list.await_args[1] == dict(label_selector='app=demo',
                                                  field_selector=None,
                                                  limit=5,
                                                  continue_token='token')


def test_create_from_a_multi_document_file(invoke, client_login, fake_client, tmp_path):
    path = tmp_path / 'objects.yaml'
    path.write_text(
        'apiVersion: v1\nkind: ConfigMap\nmetadata: {name: a}\n'
        '---\n'
        '---\n'
        'apiVersion: v1\nkind: ConfigMap\nmetadata: {name: b}\n'
    )

    result = invoke(['create', '-f', str(path), '--dry-run', 'All'])

    assert result.exit_code == 0, result.output
    assert fake_client.create.await_count == 2
    assert [c[0][0]['metadata']['name'] for c in fake_client.create.await_args_list] == ['a', 'b']
    assert fake_client.create.await_args[1] == dict(dry_run='All', field_manager=None)
    assert client_login.call_count == 1


def test_replace_from_a_file(invoke, client_login, fake_client, tmp_path):
    path = tmp_path / 'object.json'
    path.write_text('{"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "a"}}')

    result = invoke(['replace', '-f', str(path), '--field-manager', 'me'])

    assert result.exit_code == 0, result.output
    assert fake_client.replace.await_count == 1
    assert fake_client.replace.await_args[1] == dict(dry_run=None, field_manager='me')


def test_patch_with_server_side_apply(invoke, client_login, fake_client):
    result = invoke(['patch', 'v1', 'ConfigMap', 'cfg', '-n', 'ns1',
                     '-p', '{"data": {"a": "c"}}', '--type', 'apply',
                     '--field-manager', 'me', '--force'])

    assert result.exit_code == 0, result.output
    args, kwargs = fake_client.patch.await_args
    assert args == (ObjectHeader(api_version='v1', kind='ConfigMap', namespace='ns1', name='cfg'),
                    {'data': {'a': 'c'}})
    assert kwargs == dict(strategy=PatchStrategy.APPLY, dry_run=None,
                          field_manager='me', force=True)


def test_patch_defaults_to_strategic_merge(invoke, client_login, fake_client):
    result = invoke(['patch', 'v1', 'ConfigMap', 'cfg', '-p', 'data: {a: c}'])

    assert result.exit_code == 0, result.output
    kwargs = fake_client.patch.await_args[1]
    assert kwargs['strategy'] is PatchStrategy.STRATEGIC_MERGE_PATCH
    assert kwargs['force'] is None


def test_patch_failures_exit_with_errors(invoke, client_login, fake_client):
    fake_client.patch.side_effect = ValueError('boo!')

    result = invoke(['patch', 'v1', 'ConfigMap', 'cfg', '-p', '{}'])

    assert result.exit_code != 0
    assert isinstance(result.exception, ValueError)


def test_delete_with_cascading(invoke, client_login, fake_client):
    fake_client.delete.return_value = ObjectResponse(
        body={'apiVersion': 'v1', 'kind': 'Status', 'status': 'Success'}, response=None)

    result = invoke(['delete', 'v1', 'ConfigMap', 'cfg', '--cascade', 'Foreground',
                     '--grace-period', '0'])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.stdout)['status'] == 'Success'
    assert fake_client.delete.await_args[1] == dict(dry_run=None,
                                                    grace_period_seconds=0,
                                                    propagation_policy='Foreground')


def test_watch_prints_the_events(invoke, client_login, fake_client):
    raw_events = [
        {'type': 'ADDED', 'object': {'metadata': {'namespace': 'ns1', 'name': 'a',
                                                  'resourceVersion': '1'}}},
        {'type': 'BOOKMARK', 'object': {'metadata': {'resourceVersion': '2'}}},
        {'type': 'DELETED', 'object': {'metadata': {'name': 'ns', 'resourceVersion': '3'}}},
    ]

    class FakeSession:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *_):
            pass

        async def __aiter__(self):
            for raw in raw_events:
                yield WatchEvent(type=EventType(raw['type']), object=raw['object'], raw=raw)

    fake_client.watch.return_value = FakeSession()

    result = invoke(['watch', 'v1', 'ConfigMap', '--resource-version', '0', '--timeout', '60'])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ['ADDED ns1/a 1', 'BOOKMARK  2', 'DELETED ns 3']
    assert fake_client.watch.await_args[0] == ('v1', 'ConfigMap', None)
    assert fake_client.watch.await_args[1]['resource_version'] == '0'
    assert fake_client.watch.await_args[1]['timeout_seconds'] == 60.0


def test_logging_options_are_accepted(invoke, client_login, fake_client):
    result = invoke(['get', 'v1', 'ConfigMap', 'cfg', '--verbose', '--log-format', 'json',
                     '--log-refkey', 'ref', '--no-log-prefix'])
    assert result.exit_code == 0, result.output


def test_unknown_log_formats_are_rejected(invoke, client_login):
    result = invoke(['get', 'v1', 'ConfigMap', 'cfg', '--log-format', 'xml'])
    assert result.exit_code == 2
    assert not client_login.called
