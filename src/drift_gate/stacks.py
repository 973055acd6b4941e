"""
CloudFormation access for the drift check: stack state query and drift detection start.

ClientErrors from CloudFormation are propagated to the caller, which
distinguishes ValidationError (stack missing, or drift detection not allowed in
the current state) from other failures.
"""

from typing import NamedTuple, Optional

from ..utils import setup_logging
from .types import CloudFormationClient

logger = setup_logging()

# Stack statuses in which CloudFormation accepts a drift detection request.
STABLE_STACK_STATUSES = frozenset(
    {
        "CREATE_COMPLETE",
        "UPDATE_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
        "UPDATE_ROLLBACK_FAILED",
    }
)


class StackState(NamedTuple):
    name: str
    status: Optional[str]
    stack_id: Optional[str]


class UnexpectedStackResponse(RuntimeError):
    """DescribeStacks succeeded but did not describe the requested stack."""


def describe_stack(cfn_client: CloudFormationClient, stack_name: str) -> StackState:
    """
    Fetches the current state of a stack.

    Raises:
        botocore.exceptions.ClientError: ValidationError if the stack does not exist
        UnexpectedStackResponse: If the response does not contain the requested stack
    """
    response = cfn_client.describe_stacks(StackName=stack_name)
    logger.debug(f"DescribeStacks response: {response}")

    stacks = response.get("Stacks") or []
    if not stacks or stacks[0].get("StackName") != stack_name:
        raise UnexpectedStackResponse("Unknown error: Check DescribeStacks output")

    stack = stacks[0]
    return StackState(
        name=stack["StackName"],
        status=stack.get("StackStatus"),
        stack_id=stack.get("StackId"),
    )


def is_drift_detection_allowed(state: StackState) -> bool:
    return state.status in STABLE_STACK_STATUSES


def start_drift_detection(cfn_client: CloudFormationClient, stack_name: str) -> str:
    """
    Starts stack drift detection.

    Returns:
        The StackDriftDetectionId, or an empty string if the response carried none

    Raises:
        botocore.exceptions.ClientError: ValidationError if detection is not permitted
    """
    response = cfn_client.detect_stack_drift(StackName=stack_name)
    logger.debug(f"DetectStackDrift response: {response}")
    return response.get("StackDriftDetectionId") or ""
