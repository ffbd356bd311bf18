#!/usr/bin/env python3
"""
ECS Service Deployer Job

Registers a new revision of an ECS service's task definition with updated
container images and forces a new deployment of the service.
"""

import copy
import json
from typing import Any, Dict, List

from .base import BaseJob
from aws_hygiene.utils.exceptions import DeploymentError, ValidationError

# Task-level settings carried over to the new revision
TASK_DEFINITION_KEYS = (
    "taskRoleArn",
    "executionRoleArn",
    "networkMode",
    "volumes",
    "placementConstraints",
    "requiresCompatibilities",
    "cpu",
    "memory",
    "pidMode",
    "ipcMode",
    "proxyConfiguration",
    "runtimePlatform",
    "ephemeralStorage",
)


def parse_container_json(text: str) -> Dict[str, Dict[str, str]]:
    """Parse ``{"containers": {"<name>": {"image": "<uri>"}}}``."""
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid container JSON: {e}") from e

    containers = document.get("containers") if isinstance(document, dict) else None
    if not isinstance(containers, dict):
        raise ValidationError('container JSON must contain a "containers" object')

    for name, container in containers.items():
        if not isinstance(container, dict) or not container.get("image"):
            raise ValidationError(f"container {name} has no image")
    return containers


class ECSServiceDeployerJob(BaseJob):
    """Job to deploy new container images to an ECS service"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "ecs_service_deployer")
        super().__init__(*args, **kwargs)
        self.cluster = ""
        self.service = ""

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Deploy updated images

        Args:
            **kwargs: ecs_cluster_identifier, ecs_service_identifier,
                containers (dict or JSON string), dry_run

        Returns:
            Dictionary with the new task definition ARN
        """
        self.cluster = kwargs.get("ecs_cluster_identifier") or ""
        self.service = kwargs.get("ecs_service_identifier") or ""
        containers = kwargs.get("containers") or {}
        dry_run = kwargs.get("dry_run", False)

        if not self.cluster or not self.service:
            raise ValidationError("ECS cluster and service identifiers are required")
        if isinstance(containers, str):
            containers = parse_container_json(containers)

        task_definition = self.get_service_task_definition()

        if dry_run:
            changes = self.describe_changes(task_definition, containers)
            for name, (old_image, new_image) in changes.items():
                self.log(f"Would update container {name} image {old_image} -> {new_image}")
            return self.result(
                message=f"DRY RUN: Would update {len(changes)} containers in {self.service}",
                dry_run=True,
                changes={name: new for name, (_, new) in changes.items()},
            )

        new_arn = self.register_updated_task_definition(task_definition, containers)
        self.update_service(new_arn)

        return self.result(
            message=f"Deployed {new_arn} to {self.cluster}/{self.service}",
            task_definition_arn=new_arn,
        )

    def get_service_task_definition(self) -> Dict[str, Any]:
        ecs = self.client("ecs")
        response = ecs.describe_services(cluster=self.cluster, services=[self.service])
        services = response.get("services", [])
        if not services:
            raise DeploymentError(
                f"no ECS service {self.service} found in cluster {self.cluster}"
            )

        task_definition_arn = services[0]["taskDefinition"]
        self.log(f"Service {self.service} runs task definition {task_definition_arn}")
        response = ecs.describe_task_definition(taskDefinition=task_definition_arn)
        return response["taskDefinition"]

    @staticmethod
    def updated_container_definitions(
        task_definition: Dict[str, Any], containers: Dict[str, Dict[str, str]]
    ) -> List[Dict[str, Any]]:
        """Copies of the container definitions with the new images applied."""
        definitions = copy.deepcopy(task_definition.get("containerDefinitions", []))
        for definition in definitions:
            update = containers.get(definition.get("name"))
            if update:
                definition["image"] = update["image"]
        return definitions

    @staticmethod
    def describe_changes(task_definition, containers):
        return {
            definition["name"]: (definition.get("image"), containers[definition["name"]]["image"])
            for definition in task_definition.get("containerDefinitions", [])
            if definition.get("name") in containers
        }

    def register_updated_task_definition(
        self, task_definition: Dict[str, Any], containers: Dict[str, Dict[str, str]]
    ) -> str:
        """Register a new revision and return its ARN."""
        params = {
            "family": task_definition["family"],
            "containerDefinitions": self.updated_container_definitions(
                task_definition, containers
            ),
        }
        for key in TASK_DEFINITION_KEYS:
            if task_definition.get(key) is not None:
                params[key] = task_definition[key]

        response = self.client("ecs").register_task_definition(**params)
        new_arn = response["taskDefinition"]["taskDefinitionArn"]
        self.log(f"Registered task definition {new_arn}")
        return new_arn

    def update_service(self, task_definition_arn: str) -> None:
        self.client("ecs").update_service(
            cluster=self.cluster,
            service=self.service,
            taskDefinition=task_definition_arn,
            forceNewDeployment=True,
        )
        self.log(f"Updated service {self.service} to {task_definition_arn}")
