"""Tests for the ECS service deployer job."""

import json

import pytest

from aws_hygiene.jobs.ecs_service_deployer import ECSServiceDeployerJob, parse_container_json
from aws_hygiene.utils.exceptions import DeploymentError, ValidationError

TASK_ARN = "arn:aws:ecs:us-east-1:123456789012:task-definition/web:7"
NEW_TASK_ARN = "arn:aws:ecs:us-east-1:123456789012:task-definition/web:8"

TASK_DEFINITION = {
    "taskDefinitionArn": TASK_ARN,
    "family": "web",
    "taskRoleArn": "arn:aws:iam::123456789012:role/web-task",
    "networkMode": "awsvpc",
    "cpu": "256",
    "memory": "512",
    "requiresCompatibilities": ["FARGATE"],
    "containerDefinitions": [
        {"name": "app", "image": "repo/app:1", "essential": True},
        {"name": "sidecar", "image": "repo/sidecar:1"},
    ],
}

CONTAINERS = {"app": {"image": "repo/app:2"}, "unknown": {"image": "repo/x:1"}}


@pytest.fixture
def job(make_job):
    return make_job(ECSServiceDeployerJob)


def stub_service(aws):
    ecs = aws.stub("ecs")
    ecs.add_response(
        "describe_services",
        {"services": [{"serviceName": "web", "taskDefinition": TASK_ARN}]},
        {"cluster": "main", "services": ["web"]},
    )
    ecs.add_response(
        "describe_task_definition", {"taskDefinition": TASK_DEFINITION}, {"taskDefinition": TASK_ARN}
    )
    return ecs


def test_parse_container_json():
    text = json.dumps({"containers": {"app": {"image": "repo/app:2"}}})
    assert parse_container_json(text) == {"app": {"image": "repo/app:2"}}


@pytest.mark.parametrize("text", ["not json", "[]", '{"containers": []}', '{"containers": {"a": {}}}'])
def test_parse_container_json_rejects_bad_input(text):
    with pytest.raises(ValidationError):
        parse_container_json(text)


def test_deploys_new_revision(aws, job):
    ecs = stub_service(aws)
    ecs.add_response(
        "register_task_definition",
        {"taskDefinition": {"taskDefinitionArn": NEW_TASK_ARN}},
        {
            "family": "web",
            "containerDefinitions": [
                {"name": "app", "image": "repo/app:2", "essential": True},
                {"name": "sidecar", "image": "repo/sidecar:1"},
            ],
            "taskRoleArn": "arn:aws:iam::123456789012:role/web-task",
            "networkMode": "awsvpc",
            "requiresCompatibilities": ["FARGATE"],
            "cpu": "256",
            "memory": "512",
        },
    )
    ecs.add_response(
        "update_service",
        {"service": {"serviceName": "web", "status": "ACTIVE"}},
        {
            "cluster": "main",
            "service": "web",
            "taskDefinition": NEW_TASK_ARN,
            "forceNewDeployment": True,
        },
    )

    result = job.execute(
        ecs_cluster_identifier="main",
        ecs_service_identifier="web",
        containers=json.dumps({"containers": CONTAINERS}),
    )

    assert result["task_definition_arn"] == NEW_TASK_ARN
    # The described task definition is left untouched
    assert TASK_DEFINITION["containerDefinitions"][0]["image"] == "repo/app:1"


def test_dry_run_only_reports_changes(aws, job):
    stub_service(aws)

    result = job.execute(
        ecs_cluster_identifier="main",
        ecs_service_identifier="web",
        containers=CONTAINERS,
        dry_run=True,
    )

    assert result["changes"] == {"app": "repo/app:2"}


def test_missing_service(aws, job):
    aws.stub("ecs").add_response("describe_services", {"services": []})

    with pytest.raises(DeploymentError):
        job.execute(ecs_cluster_identifier="main", ecs_service_identifier="web", containers={})
