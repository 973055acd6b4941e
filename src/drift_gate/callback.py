"""
Completion Handler.

Receives CloudFormation "Drift Detection Status Change" events from
EventBridge, finds the pipeline job waiting on the stack and resolves it:
DRIFTED fails the job, IN_SYNC succeeds it. Events that cannot be matched to a
waiting job are logged and discarded.

Correlation is by target key only unless require_scan_id_match is set, in
which case the stored drift detection id must also equal the event's. Without
it, a result from a superseded scan of the same stack resolves the job of the
most recent scan.
"""

from enum import Enum
from typing import NamedTuple, Optional

from ..utils import setup_logging
from .arn import parse_stack_arn
from .correlation_store import CorrelationStoreProtocol, build_target_key
from .pipeline import PipelineCallbackClient
from .types import DriftStatusEvent

logger = setup_logging()

DRIFT_STATUS_DETAIL_TYPE = "CloudFormation Drift Detection Status Change"
DRIFTED = "DRIFTED"
IN_SYNC = "IN_SYNC"


class CallbackOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IGNORED = "ignored"


class DriftResult(NamedTuple):
    """Fields of a drift status event the handler acts on."""

    stack_arn: str
    target_key: str
    scan_id: Optional[str]
    drift_status: Optional[str]


def drift_failure_message(stack_arn: str) -> str:
    return f"Stack {stack_arn} has {DRIFTED} from its template configuration"


def parse_drift_event(event: DriftStatusEvent) -> DriftResult:
    """
    Extracts the stack identity and drift outcome from a drift status event.

    Account and region come from the event envelope, falling back to the
    values in the stack ARN.

    Raises:
        ValueError: If the event has no detail, malformed status-details, or its stack
            id is not a stack ARN
    """
    detail = event.get("detail")
    if not isinstance(detail, dict):
        raise ValueError("Event has no detail")

    stack_arn = detail.get("stack-id")
    identity = parse_stack_arn(stack_arn)
    account = event.get("account") or identity.account
    region = event.get("region") or identity.region

    status_details = detail.get("status-details") or {}
    if not isinstance(status_details, dict):
        raise ValueError("Event has malformed status-details")

    return DriftResult(
        stack_arn=str(stack_arn),
        target_key=build_target_key(account, region, identity.name),
        scan_id=detail.get("stack-drift-detection-id"),
        drift_status=status_details.get("stack-drift-status"),
    )


def handle_drift_result(
    event: DriftStatusEvent,
    store: CorrelationStoreProtocol,
    pipeline: PipelineCallbackClient,
    require_scan_id_match: bool = False,
) -> CallbackOutcome:
    """
    Resolves the waiting pipeline job for a drift status event.

    Args:
        event: EventBridge event from CloudFormation
        store: Correlation store exposing get(target_key)
        pipeline: Callback client used to resolve the job
        require_scan_id_match: Also match the stored drift detection id

    Returns:
        What was done with the event
    """
    detail_type = event.get("detail-type")
    if detail_type != DRIFT_STATUS_DETAIL_TYPE:
        logger.error(f"Event detail type not supported: {detail_type}")
        return CallbackOutcome.IGNORED

    try:
        result = parse_drift_event(event)
    except ValueError as e:
        logger.error(f"Discarding malformed drift status event: {e}")
        return CallbackOutcome.IGNORED

    logger.info(f"Fetching callback details for {result.target_key}")
    try:
        record = store.get(result.target_key)
    except Exception as e:
        logger.error(f"Failed to read correlation record for {result.target_key}: {e}")
        record = None

    if record is None:
        logger.error(
            f"Drift detection event for {result.target_key} does not match any stored record"
        )
        return CallbackOutcome.IGNORED

    if require_scan_id_match and record.scan_id != result.scan_id:
        logger.error(
            f"Drift detection {result.scan_id} for {result.target_key} does not match "
            f"stored detection {record.scan_id}"
        )
        return CallbackOutcome.IGNORED

    job_id = record.waiting_job_id
    if result.drift_status == DRIFTED:
        message = drift_failure_message(result.stack_arn)
        logger.info(message)
        pipeline.report_failure(job_id, message, external_execution_id=result.scan_id)
        return CallbackOutcome.FAILED

    if result.drift_status == IN_SYNC:
        pipeline.report_success(job_id, summary=f"Stack {result.stack_arn} is {IN_SYNC}")
        return CallbackOutcome.SUCCEEDED

    logger.warning(
        f"Unrecognised drift status {result.drift_status!r} for {result.target_key}; "
        f"leaving job {job_id} pending"
    )
    return CallbackOutcome.IGNORED
