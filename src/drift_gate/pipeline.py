"""
Pipeline Callback Client.

Reports the outcome of a drift check back to the CodePipeline job that is
waiting on it. Each job should be resolved exactly once; this client does not
guard against repeated calls. A failed callback is logged and not retried.
"""

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..utils import setup_logging
from .types import CodePipelineClient

logger = setup_logging()

# CodePipeline rejects failure messages longer than this.
MAX_MESSAGE_LENGTH = 5000
FAILURE_TYPE = "JobFailed"


def truncate_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(message) <= limit:
        return message
    suffix = "...(truncated)"
    return message[: limit - len(suffix)] + suffix


class PipelineCallbackClient:
    """Thin wrapper over CodePipeline's job result API."""

    def __init__(self, codepipeline_client: CodePipelineClient) -> None:
        self._client = codepipeline_client

    def report_success(self, job_id: str, summary: Optional[str] = None) -> bool:
        """
        Marks the job as succeeded.

        Returns:
            True if CodePipeline accepted the result, False if the call failed
        """
        kwargs: dict = {"jobId": job_id}
        if summary:
            kwargs["executionDetails"] = {"summary": truncate_message(summary, 2048)}

        logger.info(f"Sending success for job {job_id}")
        try:
            response = self._client.put_job_success_result(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send success for job {job_id}: {e}")
            return False
        logger.debug(f"PutJobSuccessResult response: {response}")
        return True

    def report_failure(
        self,
        job_id: str,
        message: str,
        external_execution_id: Optional[str] = None,
    ) -> bool:
        """
        Marks the job as failed with a message shown in the pipeline console.

        Returns:
            True if CodePipeline accepted the result, False if the call failed
        """
        failure_details = {"type": FAILURE_TYPE, "message": truncate_message(message)}
        if external_execution_id:
            failure_details["externalExecutionId"] = external_execution_id

        logger.info(f"Sending failure for job {job_id}: {message}")
        try:
            response = self._client.put_job_failure_result(
                jobId=job_id, failureDetails=failure_details
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send failure for job {job_id}: {e}")
            return False
        logger.debug(f"PutJobFailureResult response: {response}")
        return True
