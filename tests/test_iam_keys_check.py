"""Tests for the IAM keys check job."""

from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from aws_hygiene.jobs.iam_keys_check import (
    IAMKeysCheckJob,
    build_stale_keys_message,
    find_stale_users,
    parse_timestamp,
)
from aws_hygiene.utils.exceptions import CredentialReportError, ValidationError

GENERATED = datetime(2018, 10, 1, tzinfo=timezone.utc)

REPORT = "\n".join([
    "user,arn,access_key_1_active,access_key_1_last_rotated,access_key_2_active,access_key_2_last_rotated",
    "alice,arn:a,true,2018-01-01T00:00:00+00:00,false,N/A",
    "bob,arn:b,true,2018-09-25T00:00:00+00:00,true,2018-03-01T10:00:00+00:00",
    "carol,arn:c,false,N/A,false,N/A",
    "dave,arn:d,true,2018-09-01T00:00:00+00:00,false,N/A",
])


@pytest.mark.parametrize("value, expected", [
    ("2018-07-11T19:19:08+00:00", datetime(2018, 7, 11, 19, 19, 8, tzinfo=timezone.utc)),
    ("2018-06-25T19:05:23+00:00", datetime(2018, 6, 25, 19, 5, 23, tzinfo=timezone.utc)),
])
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_find_stale_users_checks_both_keys():
    assert find_stale_users(REPORT, GENERATED, 90) == ["alice", "bob"]


def test_find_stale_users_respects_max_days():
    assert find_stale_users(REPORT, GENERATED, 365) == []
    assert find_stale_users(REPORT, GENERATED, 10) == ["alice", "bob", "dave"]


def test_slack_message():
    message = build_stale_keys_message("#ops", ["alice", "bob"], 90)
    assert message == {
        "channel": "#ops",
        "text": "AWS notification",
        "attachments": [{
            "title": "Message",
            "text": "The following users have an active access key over 90 days old: alice, bob",
        }],
    }


@pytest.fixture
def job(make_job):
    return make_job(IAMKeysCheckJob)


@pytest.fixture
def sent(monkeypatch):
    messages = []
    monkeypatch.setattr(
        "aws_hygiene.jobs.iam_keys_check.SlackNotifier.send",
        lambda self, payload: messages.append((self.webhook_url, payload)),
    )
    return messages


def stub_report(aws):
    aws.stub("iam").add_response(
        "get_credential_report",
        {"Content": REPORT.encode("utf-8"), "ReportFormat": "text/csv", "GeneratedTime": GENERATED},
    )


def test_notifies_slack_about_stale_users(aws, job, sent):
    stub_report(aws)

    result = job.execute(days=90, slack_webhook_url="https://hooks.example/x", slack_channel="#ops")

    assert result["users"] == ["alice", "bob"]
    assert result["notified"] is True
    assert sent[0][0] == "https://hooks.example/x"
    assert sent[0][1]["channel"] == "#ops"


def test_no_message_without_stale_users(aws, job, sent):
    stub_report(aws)

    result = job.execute(days=365, slack_webhook_url="https://hooks.example/x", slack_channel="#ops")

    assert result["notified"] is False
    assert sent == []


def test_webhook_from_parameter_store(aws, job, sent):
    aws.stub("ssm").add_response(
        "get_parameter",
        {"Parameter": {"Name": "/slack/webhook", "Value": "https://hooks.example/ssm"}},
        {"Name": "/slack/webhook", "WithDecryption": True},
    )
    stub_report(aws)

    job.execute(ssm_slack_webhook_url="/slack/webhook", slack_channel="#ops")

    assert sent[0][0] == "https://hooks.example/ssm"


@pytest.mark.parametrize("options", [
    {"days": 0, "slack_webhook_url": "https://hooks.example/x", "slack_channel": "#ops"},
    {"slack_channel": "#ops"},
    {"slack_webhook_url": "https://hooks.example/x"},
])
def test_invalid_options(job, options):
    with pytest.raises(ValidationError):
        job.execute(**options)


def test_report_is_generated_when_missing(aws, job, no_sleep):
    iam = aws.stub("iam")
    iam.add_client_error("get_credential_report", service_error_code="ReportNotPresent")
    iam.add_response("generate_credential_report", {"State": "STARTED"})
    iam.add_client_error("get_credential_report", service_error_code="ReportInProgress")
    iam.add_response(
        "get_credential_report",
        {"Content": b"user\n", "GeneratedTime": GENERATED},
    )

    report = job.get_credential_report()

    assert report["GeneratedTime"] == GENERATED
    assert no_sleep == [5.0, 5.0]


def test_generate_limit_exceeded_keeps_polling(aws, job, no_sleep):
    iam = aws.stub("iam")
    iam.add_client_error("get_credential_report", service_error_code="ReportExpired")
    iam.add_client_error("generate_credential_report", service_error_code="LimitExceeded")
    iam.add_response("get_credential_report", {"Content": b"user\n", "GeneratedTime": GENERATED})

    assert job.get_credential_report()["Content"] == b"user\n"


def test_report_tries_are_bounded(aws, job, no_sleep):
    iam = aws.stub("iam")
    for _ in range(2):
        iam.add_client_error("get_credential_report", service_error_code="ReportInProgress")

    with pytest.raises(CredentialReportError):
        job.get_credential_report(tries=2)


def test_unexpected_report_error_propagates(aws, job):
    aws.stub("iam").add_client_error("get_credential_report", service_error_code="AccessDenied")

    with pytest.raises(ClientError):
        job.get_credential_report()
