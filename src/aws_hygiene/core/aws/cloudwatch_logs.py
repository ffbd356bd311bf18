"""Buffered writer that streams text into a CloudWatch Logs stream."""

import time
from typing import Dict, List, Any

from aws_hygiene.core.constants import (
    CLOUDWATCH_EVENT_OVERHEAD_BYTES,
    CLOUDWATCH_MAX_BATCH_BYTES,
    CLOUDWATCH_MAX_BATCH_EVENTS,
    CLOUDWATCH_MAX_EVENT_BYTES,
)
from aws_hygiene.utils.logger import setup_logger


def _now_ms() -> int:
    return int(time.time() * 1000)


def _event_size(message: str) -> int:
    return len(message.encode("utf-8")) + CLOUDWATCH_EVENT_OVERHEAD_BYTES


def _truncate(message: str) -> str:
    encoded = message.encode("utf-8")
    if len(encoded) <= CLOUDWATCH_MAX_EVENT_BYTES:
        return message
    return encoded[:CLOUDWATCH_MAX_EVENT_BYTES].decode("utf-8", errors="ignore")


class CloudWatchLogsWriter:
    """File-like writer: every line written becomes one log event.

    Full batches are sent as soon as they fill up, so a large file is
    streamed rather than held in memory. A trailing partial line stays
    buffered until more data arrives or ``flush`` is called. Call ``flush`` (or use the writer as a context
    manager) once the last write is done.
    """

    def __init__(self, logs_client, log_group: str, log_stream: str):
        self.logs_client = logs_client
        self.log_group = log_group
        self.log_stream = log_stream
        self.events_sent = 0
        self._partial = ""
        self._events: List[Dict[str, Any]] = []
        self._pending_bytes = 0
        self.logger = setup_logger(__name__, "cloudwatch_logs.log")

    def __enter__(self) -> "CloudWatchLogsWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()

    def write(self, data: str) -> int:
        text = self._partial + data
        lines = text.split("\n")
        self._partial = lines.pop()
        timestamp = _now_ms()
        for line in lines:
            if line:
                self._append(timestamp, line)
        return len(data)

    def flush(self) -> None:
        """Send every buffered event, including a trailing partial line."""
        if self._partial:
            self._append(_now_ms(), self._partial)
            self._partial = ""

        while self._events:
            self._send(self._next_batch())

    def _append(self, timestamp: int, line: str) -> None:
        """Queue one event; a full batch is sent right away."""
        message = _truncate(line)
        self._events.append({"timestamp": timestamp, "message": message})
        self._pending_bytes += _event_size(message)
        if (
            len(self._events) >= CLOUDWATCH_MAX_BATCH_EVENTS
            or self._pending_bytes >= CLOUDWATCH_MAX_BATCH_BYTES
        ):
            self._send(self._next_batch())

    def _send(self, batch: List[Dict[str, Any]]) -> None:
        self.logs_client.put_log_events(
            logGroupName=self.log_group,
            logStreamName=self.log_stream,
            logEvents=batch,
        )
        self.events_sent += len(batch)
        self.logger.debug(f"Sent {len(batch)} events to {self.log_group}/{self.log_stream}")

    def _next_batch(self) -> List[Dict[str, Any]]:
        batch_bytes = 0
        count = 0
        for event in self._events:
            size = _event_size(event["message"])
            if count >= CLOUDWATCH_MAX_BATCH_EVENTS or (
                count and batch_bytes + size > CLOUDWATCH_MAX_BATCH_BYTES
            ):
                break
            batch_bytes += size
            count += 1

        batch, self._events = self._events[:count], self._events[count:]
        self._pending_bytes -= batch_bytes
        return batch
