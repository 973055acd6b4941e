"""
Unit tests for the drift check initiator.
CloudFormation and CodePipeline are MagicMocks; the correlation store is in memory.
"""

import json
import unittest
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from src.drift_gate import InMemoryCorrelationStore, InitiationOutcome, initiate_drift_check
from src.drift_gate.initiator import MISSING_DETECTION_ID_MESSAGE
from src.drift_gate.job import TargetParams
from src.drift_gate.stacks import STABLE_STACK_STATUSES


def client_error(code: str, message: str = "error", operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def describe_stacks_response(name: str, status: str) -> dict:
    return {
        "Stacks": [
            {
                "StackName": name,
                "StackId": f"arn:aws:cloudformation:eu-west-2:123456789012:stack/{name}/11111111",
                "StackStatus": status,
            }
        ]
    }


class TestInitiateDriftCheck(unittest.TestCase):
    """Scan initiation policy for each stack state and error path."""

    def setUp(self) -> None:
        self.target = TargetParams(account="123456789012", region="eu-west-2", stack_name="app")
        self.cfn = MagicMock()
        self.cfn.describe_stacks.return_value = describe_stacks_response("app", "UPDATE_COMPLETE")
        self.cfn.detect_stack_drift.return_value = {"StackDriftDetectionId": "scan-1"}
        self.store = InMemoryCorrelationStore()
        self.pipeline = MagicMock()

    def run_check(self, job_id: str = "job-1") -> InitiationOutcome:
        return initiate_drift_check(job_id, self.target, self.cfn, self.store, self.pipeline)

    def assert_no_callback(self) -> None:
        self.pipeline.report_success.assert_not_called()
        self.pipeline.report_failure.assert_not_called()

    def test_scan_started_persists_record_and_leaves_job_pending(self) -> None:
        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.PENDING)
        self.cfn.detect_stack_drift.assert_called_once_with(StackName="app")
        self.assertEqual(list(self.store.records), ["123456789012#eu-west-2#app"])
        record = self.store.records["123456789012#eu-west-2#app"]
        self.assertEqual(record.scan_id, "scan-1")
        self.assertEqual(record.waiting_job_id, "job-1")
        self.assert_no_callback()

    def test_missing_stack_reports_success_without_record(self) -> None:
        self.target = TargetParams(account="1", region="us-east-1", stack_name="missing-stack")
        self.cfn.describe_stacks.side_effect = client_error(
            "ValidationError", "Stack with id missing-stack does not exist", "DescribeStacks"
        )

        outcome = self.run_check("job-7")

        self.assertEqual(outcome, InitiationOutcome.SUCCEEDED)
        self.pipeline.report_success.assert_called_once()
        self.assertEqual(self.pipeline.report_success.call_args.args[0], "job-7")
        self.pipeline.report_failure.assert_not_called()
        self.cfn.detect_stack_drift.assert_not_called()
        self.assertEqual(self.store.records, {})

    def test_missing_stack_outcome_is_repeatable(self) -> None:
        """A second run after a benign resolution behaves the same way."""
        self.cfn.describe_stacks.side_effect = client_error("ValidationError")

        first = self.run_check("job-7")
        second = self.run_check("job-8")

        self.assertEqual(first, second)
        self.assertEqual(self.pipeline.report_success.call_count, 2)
        self.assertEqual(self.store.records, {})

    def test_describe_error_reports_failure_with_detail(self) -> None:
        self.cfn.describe_stacks.side_effect = client_error(
            "AccessDenied", "not authorized to perform DescribeStacks", "DescribeStacks"
        )

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.FAILED)
        job_id, message = self.pipeline.report_failure.call_args.args[:2]
        self.assertEqual(job_id, "job-1")
        self.assertEqual(json.loads(message)["code"], "AccessDenied")
        self.pipeline.report_success.assert_not_called()
        self.assertEqual(self.store.records, {})

    def test_unexpected_describe_response_reports_failure(self) -> None:
        self.cfn.describe_stacks.return_value = describe_stacks_response("other", "CREATE_COMPLETE")

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.FAILED)
        message = self.pipeline.report_failure.call_args.args[1]
        self.assertIn("Check DescribeStacks output", message)
        self.cfn.detect_stack_drift.assert_not_called()

    def test_unstable_status_reports_success_without_scan(self) -> None:
        for status in ["CREATE_IN_PROGRESS", "UPDATE_IN_PROGRESS", "ROLLBACK_COMPLETE", "DELETE_FAILED"]:
            with self.subTest(status=status):
                self.setUp()
                self.cfn.describe_stacks.return_value = describe_stacks_response("app", status)

                outcome = self.run_check()

                self.assertEqual(outcome, InitiationOutcome.SUCCEEDED)
                self.pipeline.report_success.assert_called_once()
                self.cfn.detect_stack_drift.assert_not_called()
                self.assertEqual(self.store.records, {})

    def test_every_stable_status_starts_a_scan(self) -> None:
        for status in sorted(STABLE_STACK_STATUSES):
            with self.subTest(status=status):
                self.setUp()
                self.cfn.describe_stacks.return_value = describe_stacks_response("app", status)

                self.assertEqual(self.run_check(), InitiationOutcome.PENDING)
                self.cfn.detect_stack_drift.assert_called_once()

    def test_scan_not_permitted_reports_success(self) -> None:
        self.cfn.detect_stack_drift.side_effect = client_error(
            "ValidationError", "Drift detection is already in progress", "DetectStackDrift"
        )

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.SUCCEEDED)
        self.pipeline.report_success.assert_called_once()
        self.pipeline.report_failure.assert_not_called()
        self.assertEqual(self.store.records, {})

    def test_scan_start_error_reports_failure(self) -> None:
        self.cfn.detect_stack_drift.side_effect = client_error("Throttling", "Rate exceeded")

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.FAILED)
        self.assertIn("Rate exceeded", self.pipeline.report_failure.call_args.args[1])
        self.assertEqual(self.store.records, {})

    def test_missing_detection_id_reports_failure(self) -> None:
        self.cfn.detect_stack_drift.return_value = {"StackDriftDetectionId": ""}

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.FAILED)
        self.pipeline.report_failure.assert_called_once_with("job-1", MISSING_DETECTION_ID_MESSAGE)
        self.assertEqual(self.store.records, {})

    def test_store_write_error_reports_failure(self) -> None:
        store = MagicMock()
        store.put.side_effect = client_error("ProvisionedThroughputExceededException")
        self.store = store

        outcome = self.run_check()

        self.assertEqual(outcome, InitiationOutcome.FAILED)
        self.pipeline.report_failure.assert_called_once()
        self.assertIn(
            "ProvisionedThroughputExceededException",
            self.pipeline.report_failure.call_args.args[1],
        )
        self.pipeline.report_success.assert_not_called()


if __name__ == "__main__":
    unittest.main()
