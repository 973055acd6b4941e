"""
Drift Gate Package.

Gates a CodePipeline stage on CloudFormation drift detection. The handshake has
two halves that share nothing but a DynamoDB correlation table:

1. The drift check (initiator) runs when the pipeline stage starts. It starts
   drift detection for the stage's stack and records which job is waiting.
2. The drift callback (completion handler) runs when CloudFormation publishes
   the drift status event. It looks up the waiting job and reports success for
   IN_SYNC or failure for DRIFTED.
"""

from .callback import CallbackOutcome, handle_drift_result
from .correlation_store import (
    CorrelationRecord,
    CorrelationStore,
    InMemoryCorrelationStore,
    build_target_key,
)
from .initiator import InitiationOutcome, initiate_drift_check
from .pipeline import PipelineCallbackClient

__all__ = [
    'CallbackOutcome',
    'CorrelationRecord',
    'CorrelationStore',
    'InMemoryCorrelationStore',
    'InitiationOutcome',
    'PipelineCallbackClient',
    'build_target_key',
    'handle_drift_result',
    'initiate_drift_check',
]
