"""Testing utilities for :module:`~lambdalogs`"""

from typing import Any
from typing import Dict
from typing import List
from typing import Tuple

import botocore.session
from botocore.client import BaseClient
from botocore.stub import Stubber


def response_metadata() -> Dict[str, Any]:
    """The response metadata returned with every AWS response."""
    return {
        "RequestId": "request-id",
        "HostId": "host-id",
        "HTTPStatusCode": 200,
        "HTTPHeaders": {},
        "RetryAttempts": 0,
    }


def stubbed_client(service_name: str, method: str, service_responses: List[Any]) -> BaseClient:
    """Creates a stubbed client.

    Args:
        service_name: the name of the AWS service (ex. logs, cloudformation) to stub
        method: The name of the client method to stub
        service_responses: one or more service responses to add

    Returns:
        an activated stubbed client with the given responses added
    """
    client, stubber = client_and_stubber(service_name=service_name)
    for service_response in service_responses:
        stubber.add_response(method=method, service_response=service_response)
    stubber.activate()
    return client


def client_and_stubber(service_name: str) -> Tuple[BaseClient, Stubber]:
    """Creates a client and a (not yet activated) stubber for it, for tests that need to add
    errors or expected parameters."""
    client = botocore.session.get_session().create_client(
        service_name,
        region_name="us-east-1",
        aws_access_key_id="access-key",
        aws_secret_access_key="secret-key",
    )
    return client, Stubber(client)
