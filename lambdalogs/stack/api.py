"""
Utility methods for resolving the Lambda log groups of an AWS CloudFormation stack
----------------------------------------------------------------------------------
"""

import logging
from typing import Dict
from typing import List
from typing import Optional

import mypy_boto3_cloudformation as cloudformation
import mypy_boto3_logs as logs
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
from mypy_boto3_cloudformation.type_defs import StackResourceSummaryTypeDef  # noqa

from lambdalogs.core import ResolutionError

# The CloudFormation resource type of Lambda functions
LAMBDA_RESOURCE_TYPE: str = "AWS::Lambda::Function"

# The prefix of the log group of each Lambda function
LAMBDA_LOG_GROUP_PREFIX: str = "/aws/lambda/"


def list_stack_resources(
    client: cloudformation.Client, stack: str
) -> List[StackResourceSummaryTypeDef]:
    """Lists the resources of a stack.

    Args:
        client: the CloudFormation client
        stack: the name or identifier of the stack

    Returns:
        the summaries of all resources in the stack

    Raises:
        ResolutionError: if the stack could not be described or has no resources
    """
    resources: List[StackResourceSummaryTypeDef] = []
    try:
        paginator = client.get_paginator("list_stack_resources")
        for page in paginator.paginate(StackName=stack):
            resources.extend(page.get("StackResourceSummaries", []))
    except (BotoCoreError, ClientError) as ex:
        raise ResolutionError(stack=stack, reason=str(ex)) from ex

    if len(resources) == 0:
        raise ResolutionError(stack=stack, reason="no resources available in stack")

    return resources


def list_lambda_functions(client: cloudformation.Client, stack: str) -> List[str]:
    """Returns the names (physical resource identifiers) of the Lambda functions in a stack."""
    return [
        resource["PhysicalResourceId"]
        for resource in list_stack_resources(client=client, stack=stack)
        if resource["ResourceType"] == LAMBDA_RESOURCE_TYPE and "PhysicalResourceId" in resource
    ]


def find_log_groups(client: logs.Client, function_name: str) -> List[str]:
    """Returns the names of the log groups of a Lambda function.

    Returns an empty list if the function has not created a log group yet.
    """
    paginator = client.get_paginator("describe_log_groups")
    return [
        group["logGroupName"]
        for page in paginator.paginate(logGroupNamePrefix=LAMBDA_LOG_GROUP_PREFIX + function_name)
        for group in page["logGroups"]
    ]


def resolve_log_groups(
    cloudformation_client: cloudformation.Client,
    logs_client: logs.Client,
    stack: str,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """Resolves the log groups of all Lambda functions in a stack.

    Args:
        cloudformation_client: the CloudFormation client
        logs_client: the logs client
        stack: the name or identifier of the stack
        logger: logger to write status messages

    Returns:
        the log group names, in the order of the functions in the stack, without duplicates

    Raises:
        ResolutionError: if the stack or its log groups could not be described
    """
    functions = list_lambda_functions(client=cloudformation_client, stack=stack)
    if logger is not None:
        logger.info(f"Found {len(functions):,d} Lambda functions in stack '{stack}'")

    # use a dict as an ordered set
    groups: Dict[str, None] = {}
    for function_name in functions:
        try:
            for group in find_log_groups(client=logs_client, function_name=function_name):
                groups[group] = None
        except (BotoCoreError, ClientError) as ex:
            raise ResolutionError(
                stack=stack, reason=f"could not describe log groups of '{function_name}': {ex}"
            ) from ex

    if logger is not None:
        logger.info(f"Found {len(groups):,d} log groups for stack '{stack}'")
    return list(groups.keys())
