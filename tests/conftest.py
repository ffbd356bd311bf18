"""Shared fixtures: stubbed AWS clients and an isolated configuration."""

import os

# Keep test runs from writing log files or reaching real AWS settings
os.environ["LOG_TO_FILE"] = "false"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
for _var in ("AWS_REGION", "AWS_PROFILE", "LOG_LEVEL", "SLACK_CHANNEL", "SSM_SLACK_WEBHOOK_URL"):
    os.environ.pop(_var, None)

import boto3
import pytest
from botocore.stub import Stubber

from aws_hygiene.utils.config import ConfigManager

REGION = "us-east-1"


class StubbedSession:
    """Stands in for a boto3 Session; every client is a real client behind a Stubber."""

    def __init__(self, region: str = REGION):
        self._session = boto3.Session(
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
            aws_session_token="testing",
            region_name=region,
        )
        self.region_name = region
        self.clients = {}
        self.stubbers = {}

    def client(self, service_name, region_name=None):
        if service_name not in self.clients:
            client = self._session.client(
                service_name, region_name=region_name or self.region_name
            )
            stubber = Stubber(client)
            stubber.activate()
            self.clients[service_name] = client
            self.stubbers[service_name] = stubber
        return self.clients[service_name]

    def stub(self, service_name, region_name=None) -> Stubber:
        self.client(service_name, region_name)
        return self.stubbers[service_name]

    def assert_no_pending_responses(self):
        for stubber in self.stubbers.values():
            stubber.assert_no_pending_responses()


@pytest.fixture
def aws():
    session = StubbedSession()
    yield session
    session.assert_no_pending_responses()


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(config_dir=tmp_path)


@pytest.fixture
def make_job(aws, config_manager):
    """Build a job wired to the stubbed session and an empty configuration."""

    def factory(job_class, **kwargs):
        kwargs.setdefault("region", REGION)
        return job_class(config_manager=config_manager, session=aws, **kwargs)

    return factory


@pytest.fixture
def no_sleep(monkeypatch):
    """Record sleeps instead of waiting."""
    sleeps = []
    monkeypatch.setattr("time.sleep", lambda seconds: sleeps.append(seconds))
    return sleeps
