import json
import logging.handlers

import pytest

from kubeobjects.engines.loggers import ObjectJsonFormatter, ObjectLogger, \
                                        ObjectPrefixingJsonFormatter, \
                                        ObjectPrefixingTextFormatter, ObjectTextFormatter
from kubeobjects.structs.references import ObjectHeader


@pytest.fixture()
def ns_header():
    return ObjectHeader(api_version='api1/v1', kind='kind1', namespace='namespace1', name='name1')


@pytest.fixture()
def cluster_header():
    return ObjectHeader(api_version='api1/v1', kind='kind1', name='name1')


def _record(base_logger, header):
    handler = logging.handlers.BufferingHandler(capacity=100)
    base_logger.addHandler(handler)
    try:
        ObjectLogger(base_logger, header).info("hello")
    finally:
        base_logger.removeHandler(handler)
    return handler.buffer[0]


@pytest.fixture()
def ns_record(base_logger, ns_header):
    return _record(base_logger, ns_header)


@pytest.fixture()
def cluster_record(base_logger, cluster_header):
    return _record(base_logger, cluster_header)


@pytest.fixture()
def plain_record(base_logger):
    handler = logging.handlers.BufferingHandler(capacity=100)
    base_logger.addHandler(handler)
    try:
        base_logger.info("hello")
    finally:
        base_logger.removeHandler(handler)
    return handler.buffer[0]


def test_prefixing_text_formatter_adds_prefixes_when_namespaced(ns_record):
    formatter = ObjectPrefixingTextFormatter()
    formatted = formatter.format(ns_record)
    assert formatted == '[namespace1/name1] hello'


def test_prefixing_text_formatter_adds_prefixes_when_cluster(cluster_record):
    formatter = ObjectPrefixingTextFormatter()
    formatted = formatter.format(cluster_record)
    assert formatted == '[name1] hello'


def test_prefixing_text_formatter_ignores_non_object_records(plain_record):
    formatter = ObjectPrefixingTextFormatter()
    formatted = formatter.format(plain_record)
    assert formatted == 'hello'


def test_prefixing_does_not_alter_the_records(ns_record):
    formatter = ObjectPrefixingTextFormatter()
    formatter.format(ns_record)
    assert ns_record.msg == 'hello'


def test_prefixing_json_formatter_adds_prefixes_when_namespaced(ns_record):
    formatter = ObjectPrefixingJsonFormatter()
    formatted = formatter.format(ns_record)
    decoded = json.loads(formatted)
    assert decoded['message'] == '[namespace1/name1] hello'


def test_prefixing_json_formatter_adds_prefixes_when_clustered(cluster_record):
    formatter = ObjectPrefixingJsonFormatter()
    formatted = formatter.format(cluster_record)
    decoded = json.loads(formatted)
    assert decoded['message'] == '[name1] hello'


def test_regular_text_formatter_omits_prefixes(ns_record):
    formatter = ObjectTextFormatter()
    formatted = formatter.format(ns_record)
    assert formatted == 'hello'


def test_regular_json_formatter_omits_prefixes(ns_record):
    formatter = ObjectJsonFormatter()
    formatted = formatter.format(ns_record)
    decoded = json.loads(formatted)
    assert decoded['message'] == 'hello'
    assert 'obj_ref' not in decoded


@pytest.mark.parametrize('cls', [ObjectJsonFormatter, ObjectPrefixingJsonFormatter])
@pytest.mark.parametrize('levelno, expected_severity', [
    (0,  'debug'),
    (logging.DEBUG, 'debug'),
    (logging.DEBUG + 1, 'info'),
    (logging.INFO, 'info'),
    (logging.INFO + 1, 'warn'),
    (logging.WARNING, 'warn'),
    (logging.WARNING + 1, 'error'),
    (logging.ERROR, 'error'),
    (logging.ERROR + 1, 'fatal'),
    (logging.FATAL, 'fatal'),
    (999, 'fatal'),
])
def test_json_formatters_add_severity(ns_record, cls, levelno, expected_severity):
    ns_record.levelno = levelno
    ns_record.levelname = 'must-be-irrelevant'
    formatter = cls()
    formatted = formatter.format(ns_record)
    decoded = json.loads(formatted)
    assert decoded['severity'] == expected_severity


@pytest.mark.parametrize('cls', [ObjectJsonFormatter, ObjectPrefixingJsonFormatter])
def test_json_formatters_add_refkey_with_default_key(ns_record, cls):
    formatter = cls()
    formatted = formatter.format(ns_record)
    decoded = json.loads(formatted)
    assert decoded['object'] == {
        'apiVersion': 'api1/v1',
        'kind': 'kind1',
        'namespace': 'namespace1',
        'name': 'name1',
    }


@pytest.mark.parametrize('cls', [ObjectJsonFormatter, ObjectPrefixingJsonFormatter])
def test_json_formatters_add_refkey_with_custom_key(ns_record, cls):
    formatter = cls(refkey='k8s-obj')
    formatted = formatter.format(ns_record)
    decoded = json.loads(formatted)
    assert 'object' not in decoded
    assert decoded['k8s-obj'] == {
        'apiVersion': 'api1/v1',
        'kind': 'kind1',
        'namespace': 'namespace1',
        'name': 'name1',
    }


@pytest.mark.parametrize('cls', [ObjectJsonFormatter, ObjectPrefixingJsonFormatter])
def test_json_formatters_omit_refkey_for_non_object_records(plain_record, cls):
    formatter = cls()
    formatted = formatter.format(plain_record)
    decoded = json.loads(formatted)
    assert 'object' not in decoded
