"""Decorator patterns for AWS hygiene CLI commands."""

import click
import importlib
import json
from functools import wraps
from typing import Any, Callable, Dict, Optional, Type, Union

from botocore.exceptions import BotoCoreError, ClientError

from aws_hygiene.jobs.base import BaseJob
from aws_hygiene.utils.exceptions import AWSHygieneError
from aws_hygiene.utils.logger import set_log_level, setup_logger

# Centralized job registry, keyed by command function name
JOB_REGISTRY = {
    "ami_cleaner": "aws_hygiene.jobs.ami_cleaner.AMICleanerJob",
    "ebs_delete": "aws_hygiene.jobs.ebs_delete.EBSDeleteJob",
    "ebs_snapshot_cleaner": "aws_hygiene.jobs.ebs_snapshot_cleaner.EBSSnapshotCleanerJob",
    "ecr_scan": "aws_hygiene.jobs.ecr_scan.ECRScanJob",
    "ecs_service_deployer": "aws_hygiene.jobs.ecs_service_deployer.ECSServiceDeployerJob",
    "iam_keys_check": "aws_hygiene.jobs.iam_keys_check.IAMKeysCheckJob",
    "packer_janitor": "aws_hygiene.jobs.packer_janitor.PackerJanitorJob",
    "rds_snapshot_cleaner": "aws_hygiene.jobs.rds_snapshot_cleaner.RDSSnapshotCleanerJob",
    "rds_cloudwatch_logs": "aws_hygiene.jobs.rds_cloudwatch_logs.RDSCloudWatchLogsJob",
    "trusted_advisor_refresh": "aws_hygiene.jobs.trusted_advisor_refresh.TrustedAdvisorRefreshJob",
    "s3_bucket_size": "aws_hygiene.jobs.s3_bucket_size.S3BucketSizeJob",
    "aws_health_notifier": "aws_hygiene.jobs.aws_health_notifier.AWSHealthNotifierJob",
}


def get_job_class(func_name: str) -> Type[BaseJob]:
    """Dynamically resolve the job class for a command function.

    Args:
        func_name: Command function name (``ami_cleaner``)

    Returns:
        Job class for the command

    Raises:
        ValueError: If the function name is not registered
    """
    job_path = JOB_REGISTRY.get(func_name)
    if job_path is None:
        raise ValueError(f"Unknown operation: {func_name}")

    module_path, class_name = job_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def handle_operation_error(operation_name: str, error: Exception) -> None:
    """Centralized error handling for operations.

    Args:
        operation_name: Name of the operation that failed
        error: Exception that occurred
    """
    error_msg = f"Error in {operation_name}: {str(error)}"
    click.echo(error_msg, err=True)

    logger = setup_logger("aws_hygiene.errors", "errors.log")
    logger.error(
        error_msg,
        extra={"operation": operation_name, "error_type": type(error).__name__},
    )


def json_output(results: Dict[str, Any], output_path: Optional[str] = None) -> None:
    """Write the result dictionary as JSON to a file, or echo it."""
    text = json.dumps(results, indent=2, default=str)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        click.echo(f"Results saved to {output_path}")
    else:
        click.echo(text)


def value_output(key: str) -> Callable[[Dict[str, Any], Optional[str]], None]:
    """Output handler that prints a single result value."""

    def handler(results: Dict[str, Any], output_path: Optional[str] = None) -> None:
        if output_path:
            json_output(results, output_path)
        else:
            click.echo(results.get(key))

    return handler


def handle_output(
    results: Dict[str, Any],
    output_path: Optional[str] = None,
    output_handler: Optional[Callable] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """Log the outcome of an operation and hand the results to the output handler."""
    logger = setup_logger("aws_hygiene.output", "operations.log")
    logger.info(
        f"[{correlation_id or 'N/A'}] Operation completed with status "
        f"{results.get('status')}: {results.get('message')}"
    )
    if output_path:
        logger.info(f"[{correlation_id or 'N/A'}] Results saved to {output_path}")

    (output_handler or json_output)(results, output_path)


def aws_operation(
    job_class: Type[BaseJob],
    requires_confirmation: Union[bool, Callable[[Dict[str, Any]], bool]] = False,
    output_handler: Optional[Callable] = None,
):
    """Decorator that runs a job with the command's options.

    Args:
        job_class: The job class to execute
        requires_confirmation: Whether to prompt before running; a callable
            receives the command options and decides per invocation
        output_handler: Custom output handler function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ctx, **kwargs):
            operation_name = func.__name__.replace("_", "-")
            verbose = kwargs.pop("verbose", False)
            output = kwargs.pop("output", None)
            assume_yes = kwargs.pop("yes", False)

            needs_confirmation = (
                requires_confirmation(kwargs)
                if callable(requires_confirmation)
                else requires_confirmation
            )
            if needs_confirmation and not assume_yes:
                if not click.confirm(f"Continue with {operation_name}?"):
                    click.echo("Operation cancelled by user.")
                    return

            try:
                job = job_class(
                    region=ctx.obj.get("region"), profile=ctx.obj.get("profile")
                )
                if verbose:
                    set_log_level(job.logger, "DEBUG")
                results = job.execute(**kwargs)
                handle_output(results, output, output_handler, job.correlation_id)
                return results

            except (AWSHygieneError, ClientError, BotoCoreError) as e:
                handle_operation_error(operation_name, e)
                ctx.exit(1)

        return wrapper

    return decorator


def hygiene_operation(
    requires_confirmation: Union[bool, Callable[[Dict[str, Any]], bool]] = False,
    output_handler: Optional[Callable] = None,
):
    """Resolve the job for the decorated command from the registry."""

    def decorator(func: Callable) -> Callable:
        job_class = get_job_class(func.__name__)
        return aws_operation(
            job_class=job_class,
            requires_confirmation=requires_confirmation,
            output_handler=output_handler,
        )(func)

    return decorator
