"""
Type definitions for the drift gate.

boto3 service clients are generated at runtime and ship without static type
stubs, so the client aliases below are Any and exist for readability.
"""

from typing import Any, Dict, Union

# AWS client types
CloudFormationClient = Any
DynamoDBClient = Any
CodePipelineClient = Any

# Inbound events
LambdaEvent = Dict[str, Any]
PipelineJobEvent = Dict[str, Any]
DriftStatusEvent = Dict[str, Any]

# DynamoDB attribute-value map, e.g. {"pk": {"S": "..."}}
DynamoDBItem = Dict[str, Dict[str, str]]

# Parsed UserParameters payload
UserParameters = Dict[str, Union[str, int, float, bool, None]]
