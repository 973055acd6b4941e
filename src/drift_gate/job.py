"""
Parsing of the CodePipeline job event that invokes the drift check.

The action's UserParameters carry a JSON document naming the stack to check:

    {"account": "123456789012", "region": "eu-west-2", "stackName": "example-stack"}
"""

import json
from dataclasses import dataclass

from .types import PipelineJobEvent, UserParameters

REQUIRED_PARAMETERS = ("account", "region", "stackName")


@dataclass(frozen=True)
class TargetParams:
    """Identity of the stack a pipeline stage wants checked."""

    account: str
    region: str
    stack_name: str


class InvalidJobParameters(ValueError):
    """Raised when a job carries an id but its UserParameters cannot be used."""


def extract_job_id(event: PipelineJobEvent) -> str:
    """
    Returns the CodePipeline job id.

    Raises:
        ValueError: If the event is not a CodePipeline job event
    """
    job = event.get("CodePipeline.job")
    job_id = job.get("id") if isinstance(job, dict) else None
    if not job_id or not isinstance(job_id, str):
        raise ValueError("Event is not a CodePipeline job event: missing CodePipeline.job.id")
    return job_id


def extract_target_params(event: PipelineJobEvent) -> TargetParams:
    """
    Parses the job's UserParameters into TargetParams.

    Raises:
        InvalidJobParameters: If UserParameters is missing, not JSON, or incomplete
    """
    try:
        raw = event["CodePipeline.job"]["data"]["actionConfiguration"]["configuration"][
            "UserParameters"
        ]
    except (KeyError, TypeError):
        raise InvalidJobParameters("UserParameters missing from the action configuration")

    try:
        params: UserParameters = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidJobParameters(f"UserParameters is not valid JSON: {e}")

    if not isinstance(params, dict):
        raise InvalidJobParameters("UserParameters must be a JSON object")

    missing = [key for key in REQUIRED_PARAMETERS if not params.get(key)]
    if missing:
        raise InvalidJobParameters(
            f"UserParameters missing required keys: {', '.join(missing)}"
        )

    return TargetParams(
        account=str(params["account"]),
        region=str(params["region"]),
        stack_name=str(params["stackName"]),
    )
