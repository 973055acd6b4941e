"""
Parsing of CloudFormation stack identifiers.
"""

from typing import NamedTuple


class StackIdentity(NamedTuple):
    """Identity of a stack as carried by its ARN."""

    account: str
    region: str
    name: str


def parse_stack_name(stack_arn: object) -> str:
    """
    Extract the stack name from a stack ARN.

    Example:
        "arn:aws:cloudformation:ap-northeast-2:123456789012:stack/example-stack/11111111"
        -> "example-stack"

    Raises:
        ValueError: If the identifier is not a stack ARN with a non-empty name
    """
    if not isinstance(stack_arn, str) or not stack_arn:
        raise ValueError(f"Stack identifier must be a non-empty string, got {stack_arn!r}")

    resource = stack_arn.split(":")[-1]
    parts = resource.split("/")
    if len(parts) < 3 or parts[0] != "stack" or not parts[1]:
        raise ValueError(f"Malformed stack identifier: {stack_arn!r}")
    return parts[1]


def parse_stack_arn(stack_arn: object) -> StackIdentity:
    """
    Split a full stack ARN into account, region and stack name.

    Raises:
        ValueError: If the ARN does not have the arn:partition:cloudformation:region:account:stack/... shape
    """
    name = parse_stack_name(stack_arn)
    fields = str(stack_arn).split(":")
    if len(fields) < 6 or fields[0] != "arn" or fields[2] != "cloudformation":
        raise ValueError(f"Malformed stack identifier: {stack_arn!r}")
    return StackIdentity(account=fields[4], region=fields[3], name=name)
