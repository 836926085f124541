"""Unit tests for logging initialization in logging.py"""

import sys
import json
import logging

import pytest

from gitmirror.utils.logging import JsonFormatter, initialize_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord('gitmirror.test', logging.INFO, __file__, 10, 'Proxying %s.', ('download',), None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_extras():
    log = json.loads(JsonFormatter().format(make_record(event='CACHE_HIT', url='https://github.com/a')))

    assert log['level'] == 'INFO'
    assert log['logger'] == 'gitmirror.test'
    assert log['message'] == 'Proxying download.'
    assert log['event'] == 'CACHE_HIT'
    assert log['url'] == 'https://github.com/a'
    assert log['timestamp'].endswith('Z')
    assert 'args' not in log and 'msg' not in log


def test_json_formatter_serializes_unknown_types_and_exceptions():
    try:
        raise ValueError('bad')
    except ValueError:
        record = make_record(payload=object())
        record.exc_info = sys.exc_info()

    log = json.loads(JsonFormatter().format(record))
    assert log['payload'].startswith('<object object')
    assert 'ValueError: bad' in log['exception']


@pytest.mark.parametrize('app_env, formatter_type', [('local', logging.Formatter), ('prod', JsonFormatter)])
def test_initialize_logging(monkeypatch, app_env, formatter_type):
    monkeypatch.setenv('APP_ENV', app_env)
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        initialize_logging()
        assert root.level == logging.DEBUG
        assert type(root.handlers[0].formatter) is formatter_type
        assert logging.getLogger('uvicorn.access').propagate is True
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
