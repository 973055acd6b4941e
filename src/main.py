"""
AWS Lambda entry points for the CodePipeline drift gate.

drift_check_handler is invoked by the pipeline's Lambda invoke action;
drift_callback_handler is the target of the EventBridge rule matching
CloudFormation drift detection status changes. Both build their AWS clients
per invocation and share state only through the DynamoDB correlation table.
"""

import json

from botocore.exceptions import BotoCoreError

from .config import Config, load_config
from .drift_gate import (
    CorrelationStore,
    PipelineCallbackClient,
    handle_drift_result,
    initiate_drift_check,
)
from .drift_gate.job import InvalidJobParameters, extract_job_id, extract_target_params
from .drift_gate.types import LambdaEvent
from .utils import create_client, describe_error, setup_logging


def _build_pipeline(config: Config) -> PipelineCallbackClient:
    return PipelineCallbackClient(
        create_client(
            "codepipeline",
            region_name=config.aws_region,
            max_retries=config.max_retries,
            timeout_seconds=config.timeout_seconds,
        )
    )


def _build_store(config: Config) -> CorrelationStore:
    return CorrelationStore(
        create_client(
            "dynamodb",
            region_name=config.aws_region,
            max_retries=config.max_retries,
            timeout_seconds=config.timeout_seconds,
        ),
        config.correlation_table,
    )


def drift_check_handler(event: LambdaEvent, context: object) -> None:
    """
    AWS Lambda handler that starts drift detection for a pipeline job.

    Args:
        event: CodePipeline job event
        context: Lambda context

    Returns:
        None; the job is resolved through CodePipeline, not the return value

    Raises:
        ValueError: If configuration is invalid or the event carries no job id
    """
    logger = setup_logging()
    try:
        # Load and validate configuration
        config = load_config()
        logger = setup_logging(config.log_level)
        logger.info(json.dumps(event, default=str))

        job_id = extract_job_id(event)
        pipeline = _build_pipeline(config)

        try:
            target = extract_target_params(event)
        except InvalidJobParameters as e:
            logger.error(f"Invalid job parameters for job {job_id}: {e}")
            pipeline.report_failure(job_id, str(e))
            return

        # The region comes from UserParameters, so a bad value fails the job
        try:
            cfn_client = create_client(
                "cloudformation",
                region_name=target.region,
                max_retries=config.max_retries,
                timeout_seconds=config.timeout_seconds,
            )
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Cannot create CloudFormation client for job {job_id}: {e}")
            pipeline.report_failure(job_id, describe_error(e))
            return

        outcome = initiate_drift_check(
            job_id, target, cfn_client, _build_store(config), pipeline
        )
        logger.info(f"Drift check for job {job_id} finished: {outcome.value}")

    except ValueError as e:
        # Configuration or event validation errors
        logger.error(f"Invalid event or configuration: {str(e)}")
        raise

    except Exception as e:
        # Unexpected errors
        logger.error(f"Unexpected error: {str(e)}")
        raise


def drift_callback_handler(event: LambdaEvent, context: object) -> None:
    """
    AWS Lambda handler that resolves the waiting pipeline job for a drift status event.

    Args:
        event: EventBridge event from CloudFormation
        context: Lambda context

    Returns:
        None

    Raises:
        ValueError: If configuration is invalid
    """
    logger = setup_logging()
    try:
        config = load_config()
        logger = setup_logging(config.log_level)
        logger.info(json.dumps(event, default=str))

        outcome = handle_drift_result(
            event,
            _build_store(config),
            _build_pipeline(config),
            require_scan_id_match=config.require_scan_id_match,
        )
        logger.info(f"Drift status event handled: {outcome.value}")

    except ValueError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise

    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        raise
