import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import io
import time

import utils
from dawg import DAWG


def test_log_with_time(monkeypatch):
    utils.start_time = 0
    out = io.StringIO()
    monkeypatch.setattr('sys.stdout', out)
    utils.log_with_time('Test message', color='')
    assert 'Test message' in out.getvalue()


def test_vlog_quiet_unless_verbose(monkeypatch):
    out = io.StringIO()
    monkeypatch.setattr('sys.stdout', out)
    monkeypatch.setattr(utils, 'VERBOSE', False)
    utils.vlog('hidden')
    assert out.getvalue() == ''
    monkeypatch.setattr(utils, 'VERBOSE', True)
    utils.vlog('shown', time.time())
    assert 'shown (took' in out.getvalue()


def test_build_logs_when_verbose(monkeypatch):
    out = io.StringIO()
    monkeypatch.setattr('sys.stdout', out)
    monkeypatch.setattr(utils, 'VERBOSE', True)
    DAWG.from_keys(['a', 'b'])
    assert 'DAWG built from 2 pairs (2 states)' in out.getvalue()
