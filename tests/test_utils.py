"""Tests for configuration, sessions, Parameter Store and Slack helpers."""

from datetime import datetime, timezone

import pytest
import requests

from aws_hygiene.core.aws import SSMManager
from aws_hygiene.utils.config import ConfigManager, to_bool
from aws_hygiene.utils.exceptions import NotificationError, ParameterStoreError, SessionError
from aws_hygiene.utils.session import assume_role, make_session, session_from_credentials
from aws_hygiene.utils.slack import SlackNotifier, build_attachment

SETTINGS = """
aws:
  region: eu-west-1
slack:
  channel: "#ops"
commands:
  ami-cleaner:
    days: 14
    prefix: base-
"""


class TestConfigManager:
    @pytest.fixture
    def config(self, tmp_path):
        (tmp_path / "settings.yaml").write_text(SETTINGS)
        return ConfigManager(config_dir=tmp_path)

    def test_reads_values(self, config):
        assert config.get_aws_region() == "eu-west-1"
        assert config.get_slack_channel() == "#ops"
        assert config.get_logging_level() == "INFO"
        assert config.get_logging_path() == "logs"

    def test_environment_overrides_file(self, config, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "ap-southeast-2")
        assert config.get_aws_region() == "ap-southeast-2"

    def test_command_defaults(self, config):
        assert config.get_command_defaults() == {"ami-cleaner": {"days": 14, "prefix": "base-"}}
        assert config.get_command_option("ami-cleaner", "days", 30, env_var="RETENTION_DAYS") == 14
        assert config.get_command_option("packer-janitor", "timelimit", 4) == 4

    def test_config_dir_from_environment(self, tmp_path, monkeypatch):
        (tmp_path / "settings.yml").write_text("aws:\n  profile: audit\n")
        monkeypatch.setenv("AWS_HYGIENE_CONFIG_DIR", str(tmp_path))
        assert ConfigManager().get_aws_profile() == "audit"

    def test_missing_file_gives_defaults(self, tmp_path):
        assert ConfigManager(config_dir=tmp_path).get_command_defaults() == {}

    def test_reload(self, config, tmp_path):
        assert config.get_aws_region() == "eu-west-1"
        (tmp_path / "settings.yaml").write_text("aws:\n  region: us-west-2\n")
        config.reload_config()
        assert config.get_aws_region() == "us-west-2"


@pytest.mark.parametrize("value, expected", [
    (True, True), ("true", True), ("1", True), ("YES", True),
    ("false", False), ("", False), (None, False), ("0", False),
])
def test_to_bool(value, expected):
    assert to_bool(value) is expected


class TestSSMManager:
    def test_decrypt_value(self, aws):
        aws.stub("ssm").add_response(
            "get_parameter",
            {"Parameter": {"Name": "/a", "Value": "secret"}},
            {"Name": "/a", "WithDecryption": True},
        )
        assert SSMManager(aws).decrypt_value("/a") == "secret"

    @pytest.mark.parametrize("code, message", [
        ("InternalServerError", "internal error"),
        ("ParameterNotFound", "appears to be invalid"),
        ("InvalidKeyId", "appears to be invalid"),
        ("ParameterVersionNotFound", "appears to be invalid"),
        ("AccessDeniedException", "unknown AWS error"),
    ])
    def test_error_classification(self, aws, code, message):
        aws.stub("ssm").add_client_error("get_parameter", service_error_code=code)
        with pytest.raises(ParameterStoreError, match=message):
            SSMManager(aws).decrypt_value("/a")

    def test_empty_value(self, aws):
        aws.stub("ssm").add_response("get_parameter", {"Parameter": {"Name": "/a"}})
        with pytest.raises(ParameterStoreError, match="empty"):
            SSMManager(aws).decrypt_value("/a")


def test_make_session_uses_region():
    assert make_session("eu-central-1").region_name == "eu-central-1"


def test_session_from_credentials():
    session = session_from_credentials(
        {"AccessKeyId": "AKIDEXAMPLE", "SecretAccessKey": "secret", "SessionToken": "token"},
        "ap-south-1",
    )

    assert session.get_credentials().token == "token"
    assert session.region_name == "ap-south-1"


class TestAssumeRole:
    def test_returns_session_with_role_credentials(self, aws):
        aws.stub("sts").add_response(
            "assume_role",
            {"Credentials": {
                "AccessKeyId": "ASIAEXAMPLEKEY123456",
                "SecretAccessKey": "secret",
                "SessionToken": "token",
                "Expiration": datetime(2030, 1, 1, tzinfo=timezone.utc),
            }},
            {"RoleArn": "arn:aws:iam::123456789012:role/Audit", "RoleSessionName": "audit"},
        )

        session = assume_role("123456789012", "Audit", "audit", region="us-east-1", base_session=aws)

        credentials = session.get_credentials()
        assert credentials.access_key == "ASIAEXAMPLEKEY123456"
        assert session.region_name == "us-east-1"

    def test_invalid_account_id(self, aws):
        with pytest.raises(SessionError):
            assume_role("1234", "Audit", "audit", base_session=aws)

    def test_sts_errors_become_session_errors(self, aws):
        aws.stub("sts").add_client_error("assume_role", service_error_code="AccessDenied")
        with pytest.raises(SessionError, match="AccessDenied"):
            assume_role("123456789012", "Audit", "audit", base_session=aws)


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestSlackNotifier:
    def test_posts_json(self, monkeypatch):
        calls = []

        def fake_post(url, json=None, timeout=None):
            calls.append((url, json, timeout))
            return FakeResponse(200)

        monkeypatch.setattr("aws_hygiene.utils.slack.requests.post", fake_post)
        SlackNotifier("https://hooks.example/x").send({"channel": "#ops", "text": "hi"})

        assert calls == [("https://hooks.example/x", {"channel": "#ops", "text": "hi"}, 10)]

    def test_http_errors(self, monkeypatch):
        monkeypatch.setattr(
            "aws_hygiene.utils.slack.requests.post", lambda *args, **kwargs: FakeResponse(500)
        )
        with pytest.raises(NotificationError):
            SlackNotifier("https://hooks.example/x").send({})

    def test_connection_errors(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr("aws_hygiene.utils.slack.requests.post", refuse)
        with pytest.raises(NotificationError, match="refused"):
            SlackNotifier("https://hooks.example/x").send({})

    def test_webhook_required(self):
        with pytest.raises(NotificationError):
            SlackNotifier("")


def test_build_attachment_omits_unset_keys():
    assert build_attachment("Title", text="body") == {"title": "Title", "text": "body"}


def test_utils_package_exports_helpers_only():
    import aws_hygiene.utils as utils

    assert set(utils.__all__) == {
        "ConfigManager", "to_bool", "SessionManager", "assume_role", "make_session",
        "session_from_credentials", "setup_logger", "SlackNotifier", "AWSHygieneError",
        "CLIError", "ValidationError", "ValidationRules",
    }
    assert not hasattr(utils, "get_aws_region")
