from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from step_common.events import Action
from step_common.result import OK, ActionError

from app.executors import AwsElbCreator, AwsElbDeleter, executor_for
from app.executors.aws import AwsElbExecutor, elb_client
from app.models.elb import Port
from conftest import make_event


def _stub_client():
    client = MagicMock()
    client.create_load_balancer.return_value = {"DNSName": "test-elb-1.eu-west-1.elb.amazonaws.com"}
    return client


def test_client_uses_event_region_and_credentials(test_event):
    with patch("app.executors.aws.boto3.client") as factory:
        elb_client(test_event, max_attempts=3)

    args, kwargs = factory.call_args
    assert args == ("elb",)
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["aws_access_key_id"] == "key"
    assert kwargs["aws_secret_access_key"] == "token"
    assert kwargs["config"].retries == {"max_attempts": 3, "mode": "standard"}


async def test_delete_calls_delete_load_balancer(test_event):
    client = _stub_client()
    res = await AwsElbDeleter(client_factory=lambda ev: client).execute(test_event)

    assert res is OK
    client.delete_load_balancer.assert_called_once_with(LoadBalancerName="test-elb")


async def test_delete_client_error_becomes_action_error(test_event):
    client = _stub_client()
    client.delete_load_balancer.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "not authorized"}},
        "DeleteLoadBalancer",
    )

    res = await AwsElbDeleter(client_factory=lambda ev: client).execute(test_event)

    assert isinstance(res, ActionError)
    assert "AccessDenied" in res.message
    assert "DeleteLoadBalancer" in res.message


async def test_botocore_error_becomes_action_error(test_event):
    client = _stub_client()
    client.delete_load_balancer.side_effect = EndpointConnectionError(endpoint_url="https://elb.eu-west-1.amazonaws.com")

    res = await AwsElbDeleter(client_factory=lambda ev: client).execute(test_event)

    assert isinstance(res, ActionError)
    assert "elb.eu-west-1.amazonaws.com" in res.message


async def test_create_builds_listeners_and_registers_instances():
    client = _stub_client()
    ev = make_event(
        is_private=True,
        ports=[
            Port(from_port=80, to_port=8080, protocol="HTTP"),
            Port(from_port=443, to_port=8080, protocol="HTTPS", ssl_cert="arn:aws:iam::1:server-certificate/c"),
        ],
    )

    res = await AwsElbCreator(client_factory=lambda e: client).execute(ev)

    assert res is OK
    client.create_load_balancer.assert_called_once_with(
        LoadBalancerName="test-elb",
        Listeners=[
            {"Protocol": "HTTP", "LoadBalancerPort": 80, "InstanceProtocol": "HTTP", "InstancePort": 8080},
            {
                "Protocol": "HTTPS",
                "LoadBalancerPort": 443,
                "InstanceProtocol": "HTTPS",
                "InstancePort": 8080,
                "SSLCertificateId": "arn:aws:iam::1:server-certificate/c",
            },
        ],
        Subnets=["subnet-0000000"],
        SecurityGroups=["sg-0000000"],
        Scheme="internal",
    )
    client.register_instances_with_load_balancer.assert_called_once_with(
        LoadBalancerName="test-elb", Instances=[{"InstanceId": "i-0000000"}]
    )


async def test_create_public_without_instances():
    client = _stub_client()
    ev = make_event(instance_aws_ids=[])

    res = await AwsElbCreator(client_factory=lambda e: client).execute(ev)

    assert res is OK
    assert "Scheme" not in client.create_load_balancer.call_args.kwargs
    client.register_instances_with_load_balancer.assert_not_called()


def test_registry_selects_executor_by_action():
    assert isinstance(executor_for(Action.DELETE, "aws"), AwsElbDeleter)
    assert isinstance(executor_for("create", "aws"), AwsElbCreator)


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError, match="elb.delete.azure"):
        executor_for(Action.DELETE, "azure")


def test_base_executor_is_abstract():
    with pytest.raises(TypeError):
        AwsElbExecutor()
