"""
Utility functions for the drift gate Lambda functions.
"""

import json
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Sets up logging configuration for the Lambda functions.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("drift_gate")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def aws_error_code(error: BaseException) -> Optional[str]:
    """Returns the AWS error code carried by a ClientError, or None."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code") or None
    return None


def is_validation_error(error: BaseException) -> bool:
    """
    CloudFormation reports both "stack does not exist" and "operation not
    allowed in the current stack state" as ValidationError.
    """
    return aws_error_code(error) == "ValidationError"


def describe_error(error: BaseException) -> str:
    """
    Renders an exception as a JSON string suitable for a pipeline failure message.

    Args:
        error: The exception raised by an AWS call or by the core itself

    Returns:
        JSON string with the error class, AWS error code (if any) and message
    """
    return json.dumps(
        {
            "error": type(error).__name__,
            "code": aws_error_code(error),
            "message": str(error),
        }
    )


def create_client(
    service_name: str,
    region_name: Optional[str] = None,
    max_retries: int = 3,
    timeout_seconds: int = 30,
) -> Any:
    """
    Creates a boto3 client with the retry and timeout settings from configuration.

    Args:
        service_name: AWS service name, e.g. 'cloudformation'
        region_name: Region for the client; boto3 default resolution when None
        max_retries: Maximum attempts for the SDK's own retry handler
        timeout_seconds: Connect and read timeout in seconds

    Returns:
        boto3 service client
    """
    boto_config = BotoConfig(
        retries={"max_attempts": max_retries, "mode": "standard"},
        connect_timeout=timeout_seconds,
        read_timeout=timeout_seconds,
    )
    return boto3.client(service_name, region_name=region_name, config=boto_config)
