import functools
import logging
from unittest.mock import AsyncMock, MagicMock

import click.testing
import pytest

from kubeobjects.cli import main
from kubeobjects.clients.objects import ObjectApi, ObjectResponse


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    # The CLI configures the logging of the whole process. Do not leak it to other tests.
    logger = logging.getLogger()
    handlers = logger.handlers[:]
    level = logger.level
    try:
        yield
    finally:
        logger.handlers[:] = handlers
        logger.setLevel(level)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def fake_client():
    client = MagicMock()
    client.__aenter__.return_value = client
    for name in ['create', 'read', 'replace', 'patch', 'delete', 'list', 'watch']:
        setattr(client, name, AsyncMock(return_value=ObjectResponse(body={}, response=None)))
    return client


@pytest.fixture()
def client_login(mocker, fake_client):
    return mocker.patch.object(ObjectApi, 'login', return_value=fake_client)
