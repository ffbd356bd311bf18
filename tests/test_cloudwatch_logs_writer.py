"""Tests for the buffered CloudWatch Logs writer."""

import pytest

from aws_hygiene.core.aws import cloudwatch_logs
from aws_hygiene.core.aws.cloudwatch_logs import CloudWatchLogsWriter


class FakeLogsClient:
    def __init__(self):
        self.batches = []

    def put_log_events(self, logGroupName, logStreamName, logEvents):
        self.batches.append(logEvents)
        return {}


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    monkeypatch.setattr(cloudwatch_logs, "_now_ms", lambda: 42)


@pytest.fixture
def client():
    return FakeLogsClient()


def test_partial_lines_are_buffered_until_flush(client):
    writer = CloudWatchLogsWriter(client, "group", "stream")

    assert writer.write("first\nsec") == 9
    writer.write("ond\nthird")
    assert client.batches == []

    writer.flush()

    assert client.batches == [[
        {"timestamp": 42, "message": "first"},
        {"timestamp": 42, "message": "second"},
        {"timestamp": 42, "message": "third"},
    ]]
    assert writer.events_sent == 3


def test_context_manager_flushes(client):
    with CloudWatchLogsWriter(client, "group", "stream") as writer:
        writer.write("only line")

    assert client.batches == [[{"timestamp": 42, "message": "only line"}]]


def test_batches_are_capped_by_event_count(client, monkeypatch):
    monkeypatch.setattr(cloudwatch_logs, "CLOUDWATCH_MAX_BATCH_EVENTS", 2)
    writer = CloudWatchLogsWriter(client, "group", "stream")

    writer.write("a\nb\nc\n")
    writer.flush()

    assert [len(batch) for batch in client.batches] == [2, 1]


def test_full_batches_are_sent_while_writing(client, monkeypatch):
    monkeypatch.setattr(cloudwatch_logs, "CLOUDWATCH_MAX_BATCH_EVENTS", 3)
    writer = CloudWatchLogsWriter(client, "group", "stream")

    writer.write("".join(f"line {i}\n" for i in range(7)))

    assert [len(batch) for batch in client.batches] == [3, 3]
    assert writer.events_sent == 6

    writer.flush()

    assert [len(batch) for batch in client.batches] == [3, 3, 1]
    assert client.batches[2][0]["message"] == "line 6"


def test_batches_are_capped_by_size(client, monkeypatch):
    monkeypatch.setattr(cloudwatch_logs, "CLOUDWATCH_MAX_BATCH_BYTES", 60)
    writer = CloudWatchLogsWriter(client, "group", "stream")

    # 26 bytes of overhead plus 10 bytes of message per event
    writer.write("0123456789\n" * 3)
    writer.flush()

    assert [len(batch) for batch in client.batches] == [1, 1, 1]


def test_oversized_messages_are_truncated(client, monkeypatch):
    monkeypatch.setattr(cloudwatch_logs, "CLOUDWATCH_MAX_EVENT_BYTES", 5)
    writer = CloudWatchLogsWriter(client, "group", "stream")

    writer.write("abcdefgh\n")
    writer.flush()

    assert client.batches[0][0]["message"] == "abcde"


def test_flush_without_data_sends_nothing(client):
    CloudWatchLogsWriter(client, "group", "stream").flush()

    assert client.batches == []
