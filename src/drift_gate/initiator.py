"""
Scan Initiator.

Invoked by a CodePipeline stage. Starts CloudFormation drift detection for the
stage's stack and records which job is waiting on it. The job is resolved right
away when no scan is needed or the scan cannot be started; otherwise it stays
pending until the drift status event reaches the Completion Handler.
"""

from enum import Enum

from ..utils import describe_error, is_validation_error, setup_logging
from .correlation_store import CorrelationRecord, CorrelationStoreProtocol, build_target_key
from .job import TargetParams
from .pipeline import PipelineCallbackClient
from .stacks import describe_stack, is_drift_detection_allowed, start_drift_detection
from .types import CloudFormationClient

logger = setup_logging()

MISSING_DETECTION_ID_MESSAGE = "Unknown error: Drift detection id missing"


class InitiationOutcome(str, Enum):
    """How a drift check invocation left the pipeline job."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


def initiate_drift_check(
    job_id: str,
    target: TargetParams,
    cfn_client: CloudFormationClient,
    store: CorrelationStoreProtocol,
    pipeline: PipelineCallbackClient,
) -> InitiationOutcome:
    """
    Runs the drift check handshake for one pipeline job.

    Steps:
    1. Describe the stack. A missing stack cannot have drifted: succeed.
    2. Skip stacks whose status does not allow drift detection: succeed.
    3. Start drift detection. ValidationError means it is not permitted: succeed.
    4. Require a drift detection id in the response.
    5. Persist the correlation record and leave the job pending.

    Any other error fails the job with the error detail as the message.

    Args:
        job_id: CodePipeline job id
        target: Stack identity from the job's UserParameters
        cfn_client: CloudFormation client for the stack's region
        store: Correlation store exposing put(CorrelationRecord)
        pipeline: Callback client used to resolve the job

    Returns:
        The resulting state of the job
    """
    stack_name = target.stack_name

    logger.info(f"Checking if stack {stack_name} exists")
    try:
        state = describe_stack(cfn_client, stack_name)
    except Exception as e:
        if is_validation_error(e):
            logger.info(f"Stack {stack_name} does not exist; sending success")
            pipeline.report_success(job_id, summary=f"Stack {stack_name} does not exist")
            return InitiationOutcome.SUCCEEDED
        logger.error(f"Failed to describe stack {stack_name}: {e}")
        pipeline.report_failure(job_id, describe_error(e))
        return InitiationOutcome.FAILED

    if not is_drift_detection_allowed(state):
        logger.info(
            f"Stack {stack_name} status {state.status} does not allow drift detection; "
            f"sending success"
        )
        pipeline.report_success(
            job_id, summary=f"Drift detection skipped for stack status {state.status}"
        )
        return InitiationOutcome.SUCCEEDED

    logger.info(f"Stack {stack_name} status {state.status} allows drift detection")
    try:
        scan_id = start_drift_detection(cfn_client, stack_name)
    except Exception as e:
        if is_validation_error(e):
            logger.info(f"Cannot start drift detection for {stack_name}: {e}; sending success")
            pipeline.report_success(job_id, summary="Drift detection not permitted")
            return InitiationOutcome.SUCCEEDED
        logger.error(f"Failed to start drift detection for {stack_name}: {e}")
        pipeline.report_failure(job_id, describe_error(e))
        return InitiationOutcome.FAILED

    if not scan_id:
        logger.error(MISSING_DETECTION_ID_MESSAGE)
        pipeline.report_failure(job_id, MISSING_DETECTION_ID_MESSAGE)
        return InitiationOutcome.FAILED

    logger.info(f"Drift detection started. DriftDetectionId: {scan_id}")
    record = CorrelationRecord(
        target_key=build_target_key(target.account, target.region, stack_name),
        scan_id=scan_id,
        waiting_job_id=job_id,
    )
    try:
        store.put(record)
    except Exception as e:
        logger.error(f"Failed to persist correlation record for {record.target_key}: {e}")
        pipeline.report_failure(job_id, describe_error(e), external_execution_id=scan_id)
        return InitiationOutcome.FAILED

    logger.info(f"Job {job_id} is waiting on drift detection {scan_id}")
    return InitiationOutcome.PENDING
