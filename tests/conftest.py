"""Shared test fixtures for the Hush test suite."""

import json

import pytest

from hush.results.enums import Severity
from hush.results.models import FileResult, LintMessage, ResultBatch


def make_message(rule_id, line=1, column=1, severity=Severity.ERROR, message="Problem"):
    """Create a LintMessage; rule_id None gives a non-rule diagnostic."""
    return LintMessage(rule_id=rule_id, severity=severity, message=message, line=line, column=column)


def make_batch(files):
    """
    Build a ResultBatch from {file_path: [rule_id, ...]}.

    Each rule id becomes one message on its own line, in order.
    """
    return ResultBatch(results=[
        FileResult(
            file_path=file_path,
            messages=[make_message(rule_id, line=i + 1) for i, rule_id in enumerate(rules)],
        )
        for file_path, rules in files.items()
    ])


@pytest.fixture(name="make_batch")
def make_batch_fixture():
    """Factory fixture for make_batch."""
    return make_batch


@pytest.fixture(name="make_message")
def make_message_fixture():
    """Factory fixture for make_message."""
    return make_message


@pytest.fixture
def project_root(tmp_path):
    """Create a temporary project root directory."""
    return tmp_path


@pytest.fixture
def write_results(tmp_path):
    """Write an ESLint-style results file and return its path."""

    def _write(batch, name="results.json"):
        path = tmp_path / name
        path.write_text(json.dumps(batch.to_json()), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_ledger(tmp_path):
    """Write raw ledger JSON (dict or text) and return its path."""

    def _write(content, name="hush-suppressions.json"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
