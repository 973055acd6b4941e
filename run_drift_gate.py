#!/usr/bin/env python3
"""
Command-line interface for invoking the drift gate handlers locally.

Feeds a JSON event file to one of the Lambda handlers using your local AWS
credentials (AWS CLI profile, environment variables, or IAM role). Useful for
replaying a captured CodePipeline job event or drift status event.

Usage:
    python run_drift_gate.py check --event job_event.json --table drift-detect-db
    python run_drift_gate.py callback --event drift_event.json --table drift-detect-db
    python run_drift_gate.py callback --event drift_event.json --table drift-detect-db --require-scan-id-match
"""

import argparse
import json
import os
import sys
from typing import Any, Dict

from src.main import drift_callback_handler, drift_check_handler
from src.utils import setup_logging

HANDLERS = {
    "check": drift_check_handler,
    "callback": drift_callback_handler,
}


def load_event(path: str) -> Dict[str, Any]:
    """Reads a Lambda event from a JSON file."""
    with open(path, "r") as f:
        event = json.load(f)
    if not isinstance(event, dict):
        raise ValueError(f"Event file {path} must contain a JSON object")
    return event


def main() -> None:
    """Main entry point for the command-line drift gate runner."""
    parser = argparse.ArgumentParser(
        description="Invoke a drift gate Lambda handler with a local event file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_drift_gate.py check --event job_event.json --table drift-detect-db
  python run_drift_gate.py callback --event drift_event.json --table drift-detect-db --region eu-west-2
        """
    )

    parser.add_argument(
        "handler",
        choices=sorted(HANDLERS),
        help="Handler to invoke: 'check' starts drift detection, 'callback' resolves a job"
    )

    parser.add_argument(
        "--event",
        required=True,
        help="Path to a JSON file containing the Lambda event"
    )

    parser.add_argument(
        "--table",
        required=True,
        help="DynamoDB correlation table name"
    )

    parser.add_argument(
        "--region",
        default="eu-west-2",
        help="AWS region for DynamoDB and CodePipeline calls (default: eu-west-2)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--require-scan-id-match",
        action="store_true",
        help="Only resolve a job when the event's drift detection id matches the stored one"
    )

    args = parser.parse_args()

    logger = setup_logging(args.log_level)

    # The handlers read their configuration from the environment
    os.environ["DDB_TABLE"] = args.table
    os.environ["AWS_REGION"] = args.region
    os.environ["LOG_LEVEL"] = args.log_level
    os.environ["REQUIRE_SCAN_ID_MATCH"] = "true" if args.require_scan_id_match else "false"

    try:
        event = load_event(args.event)
        logger.info(f"Invoking {args.handler} handler with event from {args.event}")
        HANDLERS[args.handler](event, None)
    except Exception as e:
        logger.error(f"Error running {args.handler} handler: {str(e)}")
        print(f"ERROR: {str(e)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
