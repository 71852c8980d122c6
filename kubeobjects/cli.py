import asyncio
import dataclasses
import functools
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
import yaml

from kubeobjects import models
from kubeobjects.clients import objects
from kubeobjects.engines import loggers
from kubeobjects.structs import bodies, configuration, patches, references

_T = TypeVar('_T')

PATCH_TYPES = {
    'json': patches.PatchStrategy.JSON_PATCH,
    'merge': patches.PatchStrategy.MERGE_PATCH,
    'strategic': patches.PatchStrategy.STRATEGIC_MERGE_PATCH,
    'apply': patches.PatchStrategy.APPLY,
}


@dataclasses.dataclass()
class CLIControls:
    """ Controls for the API client, which are impossible to pass via CLI. """
    settings: Optional[configuration.ClientSettings] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = None,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def client_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator for the connection & output options of all commands."""
    fn = click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')(fn)
    fn = click.option('--context', 'kubecontext', type=str, default=None)(fn)
    return fn


@click.version_option(prog_name='kubeobjects')
@click.group(name='kubeobjects', context_settings=dict(
    auto_envvar_prefix='KUBEOBJECTS',
))
def main() -> None:
    pass


@main.command()
@logging_options
@client_options
@click.option('-n', '--namespace', type=str, default=None)
@click.argument('api_version')
@click.argument('kind')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def get(
        __controls: CLIControls,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ Read one object and print it. """
    header = references.ObjectHeader(api_version=api_version, kind=kind,
                                     namespace=namespace, name=name)
    rsp = _run(__controls, kubecontext, lambda client: client.read(header))
    _echo(rsp.body, output)


@main.command(name='list')
@logging_options
@client_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-l', '--selector', 'label_selector', type=str, default=None)
@click.option('--field-selector', type=str, default=None)
@click.option('--limit', type=int, default=None)
@click.option('--continue', 'continue_token', type=str, default=None)
@click.argument('api_version')
@click.argument('kind')
@click.make_pass_decorator(CLIControls, ensure=True)
def list_(
        __controls: CLIControls,
        api_version: str,
        kind: str,
        namespace: Optional[str],
        label_selector: Optional[str],
        field_selector: Optional[str],
        limit: Optional[int],
        continue_token: Optional[str],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ List the objects of a kind, in a namespace or cluster-wide. """
    rsp = _run(__controls, kubecontext, lambda client: client.list(
        api_version, kind, namespace,
        label_selector=label_selector,
        field_selector=field_selector,
        limit=limit,
        continue_token=continue_token,
    ))
    _echo(rsp.body, output)


@main.command()
@logging_options
@client_options
@click.option('-f', '--filename', type=click.File('r'), required=True)
@click.option('--dry-run', type=click.Choice(['All']), default=None)
@click.option('--field-manager', type=str, default=None)
@click.make_pass_decorator(CLIControls, ensure=True)
def create(
        __controls: CLIControls,
        filename: Any,
        dry_run: Optional[str],
        field_manager: Optional[str],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ Create all the objects from a YAML/JSON file. """

    async def create_all(client: objects.ObjectApi) -> None:
        for body in _load_documents(filename):
            rsp = await client.create(body, dry_run=dry_run, field_manager=field_manager)
            _echo(rsp.body, output)

    _run(__controls, kubecontext, create_all)


@main.command()
@logging_options
@client_options
@click.option('-f', '--filename', type=click.File('r'), required=True)
@click.option('--dry-run', type=click.Choice(['All']), default=None)
@click.option('--field-manager', type=str, default=None)
@click.make_pass_decorator(CLIControls, ensure=True)
def replace(
        __controls: CLIControls,
        filename: Any,
        dry_run: Optional[str],
        field_manager: Optional[str],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ Replace all the objects from a YAML/JSON file. """

    async def replace_all(client: objects.ObjectApi) -> None:
        for body in _load_documents(filename):
            rsp = await client.replace(body, dry_run=dry_run, field_manager=field_manager)
            _echo(rsp.body, output)

    _run(__controls, kubecontext, replace_all)


@main.command()
@logging_options
@client_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-p', '--patch', 'patch_text', type=str, required=True)
@click.option('--type', 'patch_type', type=click.Choice(list(PATCH_TYPES)), default='strategic')
@click.option('--dry-run', type=click.Choice(['All']), default=None)
@click.option('--field-manager', type=str, default=None)
@click.option('--force', is_flag=True, default=None)
@click.argument('api_version')
@click.argument('kind')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def patch(
        __controls: CLIControls,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str],
        patch_text: str,
        patch_type: str,
        dry_run: Optional[str],
        field_manager: Optional[str],
        force: Optional[bool],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ Patch one object with a JSON/YAML patch. """
    header = references.ObjectHeader(api_version=api_version, kind=kind,
                                     namespace=namespace, name=name)
    patch_body = yaml.safe_load(patch_text)  # JSON is also YAML
    rsp = _run(__controls, kubecontext, lambda client: client.patch(
        header, patch_body,
        strategy=PATCH_TYPES[patch_type],
        dry_run=dry_run,
        field_manager=field_manager,
        force=force or None,
    ))
    _echo(rsp.body, output)


@main.command()
@logging_options
@client_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('--grace-period', 'grace_period_seconds', type=int, default=None)
@click.option('--cascade', 'propagation_policy',
              type=click.Choice(['Background', 'Foreground', 'Orphan']), default=None)
@click.option('--dry-run', type=click.Choice(['All']), default=None)
@click.argument('api_version')
@click.argument('kind')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def delete(
        __controls: CLIControls,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str],
        grace_period_seconds: Optional[int],
        propagation_policy: Optional[str],
        dry_run: Optional[str],
        kubecontext: Optional[str],
        output: str,
) -> None:
    """ Delete one object. """
    header = references.ObjectHeader(api_version=api_version, kind=kind,
                                     namespace=namespace, name=name)
    rsp = _run(__controls, kubecontext, lambda client: client.delete(
        header,
        dry_run=dry_run,
        grace_period_seconds=grace_period_seconds,
        propagation_policy=propagation_policy,
    ))
    _echo(rsp.body, output)


@main.command()
@logging_options
@click.option('--context', 'kubecontext', type=str, default=None)
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-l', '--selector', 'label_selector', type=str, default=None)
@click.option('--field-selector', type=str, default=None)
@click.option('--resource-version', type=str, default=None)
@click.option('--timeout', 'timeout_seconds', type=float, default=None)
@click.argument('api_version')
@click.argument('kind')
@click.make_pass_decorator(CLIControls, ensure=True)
def watch(
        __controls: CLIControls,
        api_version: str,
        kind: str,
        namespace: Optional[str],
        label_selector: Optional[str],
        field_selector: Optional[str],
        resource_version: Optional[str],
        timeout_seconds: Optional[float],
        kubecontext: Optional[str],
) -> None:
    """ Print the events of a kind, one per line, until the stream ends. """

    async def stream(client: objects.ObjectApi) -> None:
        session = await client.watch(
            api_version, kind, namespace,
            resource_version=resource_version,
            label_selector=label_selector,
            field_selector=field_selector,
            timeout_seconds=timeout_seconds,
        )
        async with session:
            async for event in session:
                click.echo(_describe_event(event))

    _run(__controls, kubecontext, stream)


def _run(
        controls: CLIControls,
        kubecontext: Optional[str],
        fn: Callable[[objects.ObjectApi], Awaitable[_T]],
) -> _T:
    """ Run one operation with a fresh client, and close it afterwards. """

    async def run() -> _T:
        async with objects.ObjectApi.login(context=kubecontext, settings=controls.settings) as client:
            return await fn(client)

    return asyncio.run(run())


def _load_documents(stream: Any) -> Any:
    for body in yaml.safe_load_all(stream):  # JSON is also YAML
        if body:
            yield body


def _to_wire(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return models.serializer.encode_object(value)
    elif isinstance(value, dict):
        return {key: _to_wire(val) for key, val in value.items()}
    elif isinstance(value, list):
        return [_to_wire(item) for item in value]
    else:
        return value


def _echo(body: Any, output: str) -> None:
    data = _to_wire(body)
    if output == 'json':
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())


def _describe_event(event: bodies.WatchEvent) -> str:
    raw = event.raw['object']
    metadata = raw.get('metadata') or {}
    namespace = metadata.get('namespace')
    name = metadata.get('name') or ''
    ident = f"{namespace}/{name}" if namespace else name
    return f"{event.type.value} {ident} {event.resource_version or ''}".rstrip()
