"""
Tests for the Defender pricing endpoint client.
"""

from unittest.mock import Mock

import pytest
import requests

from defender_plan_auditor.clients.pricing_client import DefenderPricingClient
from defender_plan_auditor.core.exceptions import PricingLookupError

RESOURCE_ID = "/subscriptions/sub-1/resourceGroups/rg/providers/Microsoft.Compute/virtualMachines/vm1"


def make_response(status_code=200, payload=None, text="", reason="OK"):
    response = Mock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.text = text
    response.reason = reason
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return DefenderPricingClient(lambda: "token-123", session=session)


def test_resource_pricing_request(client, session):
    session.get.return_value = make_response(payload={
        "name": "virtualMachines",
        "properties": {"pricingTier": "Standard", "subPlan": "P1", "enablementTime": "2024-01-01"},
    })

    record = client.get_resource_pricing(RESOURCE_ID)

    assert record.sub_plan == "P1"
    assert record.pricing_tier == "Standard"
    url = session.get.call_args[0][0]
    assert url == (
        "https://management.azure.com" + RESOURCE_ID
        + "/providers/Microsoft.Security/pricings/virtualMachines"
    )
    kwargs = session.get.call_args[1]
    assert kwargs["headers"]["Authorization"] == "Bearer token-123"
    assert kwargs["params"] == {"api-version": "2024-01-01"}
    assert "timeout" not in kwargs


def test_subscription_pricing_request(client, session):
    session.get.return_value = make_response(payload={"properties": {"pricingTier": "Free"}})

    record = client.get_subscription_pricing("sub-1")

    assert record.pricing_tier == "Free"
    assert record.sub_plan is None
    assert session.get.call_args[0][0].endswith(
        "/subscriptions/sub-1/providers/Microsoft.Security/pricings/VirtualMachines"
    )


def test_missing_properties_give_empty_record(client, session):
    session.get.return_value = make_response(payload={})

    record = client.get_resource_pricing(RESOURCE_ID)

    assert record.sub_plan is None
    assert record.pricing_tier is None


def test_http_error_carries_arm_message(client, session):
    session.get.return_value = make_response(
        status_code=404,
        payload={"error": {"code": "ResourceNotFound", "message": "The resource was not found."}},
        reason="Not Found",
    )

    with pytest.raises(PricingLookupError) as exc_info:
        client.get_resource_pricing(RESOURCE_ID)

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "HTTP 404: ResourceNotFound: The resource was not found."


def test_http_error_without_json_uses_body_text(client, session):
    session.get.return_value = make_response(
        status_code=502, payload=ValueError("no json"), text="Bad gateway", reason="Bad Gateway"
    )

    with pytest.raises(PricingLookupError, match="HTTP 502: Bad gateway"):
        client.get_resource_pricing(RESOURCE_ID)


def test_transport_error_is_wrapped(client, session):
    session.get.side_effect = requests.exceptions.ConnectionError("connection reset")

    with pytest.raises(PricingLookupError, match="connection reset") as exc_info:
        client.get_resource_pricing(RESOURCE_ID)

    assert exc_info.value.status_code is None


def test_invalid_json_is_reported(client, session):
    session.get.return_value = make_response(payload=ValueError("Expecting value"))

    with pytest.raises(PricingLookupError, match="Invalid JSON"):
        client.get_subscription_pricing("sub-1")


def test_token_is_requested_per_call(session):
    tokens = iter(["first", "second"])
    client = DefenderPricingClient(lambda: next(tokens), session=session, api_version="2023-01-01")
    session.get.return_value = make_response(payload={"properties": {}})

    client.get_subscription_pricing("sub-1")
    client.get_subscription_pricing("sub-1")

    headers = [c[1]["headers"]["Authorization"] for c in session.get.call_args_list]
    assert headers == ["Bearer first", "Bearer second"]
    assert session.get.call_args[1]["params"] == {"api-version": "2023-01-01"}
