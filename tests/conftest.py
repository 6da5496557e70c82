"""
Shared test fixtures - A small CiviCRM in memory.

The custom field records below have the same shape CiviCRM's
CustomField.get returns for our select list, so the resolver sees exactly
what it would see in production.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from civicrm_mcp.custom_fields import CustomFieldResolver


def custom_field(id, name, label, group, extends, data_type="String", html_type="Text"):
    """One CustomField.get record."""
    return {
        "id": id,
        "name": name,
        "label": label,
        "custom_group_id.name": group,
        "custom_group_id.extends": extends,
        "data_type": data_type,
        "html_type": html_type,
    }


@pytest.fixture
def custom_field_records():
    """Custom fields across several entities, in the order CiviCRM returns them."""
    return [
        custom_field(1, "Interest_Area", "Volunteer Interest", "Volunteer_Info", "Contact", html_type="Select"),
        custom_field(2, "Availability", "Available Weekends", "Volunteer_Info", "Contact", "Boolean", "Radio"),
        custom_field(3, "Campaign_Code", "Campaign Code", "Donation_Details", "Contribution"),
        custom_field(4, "Follow_Up", "Follow Up Needed", "Activity_Extras", "Activity", "Boolean", "CheckBox"),
        custom_field(5, "Shirt_Size", "Shirt Size", "Volunteer_Profile", "Individual", html_type="Select"),
    ]


@pytest.fixture
def make_client():
    """Factory for a fake CiviCRMClient whose api_v4 returns responses in order.

    With a single response, every call returns it.
    """
    return _make_client


def _make_client(*responses):
    client = AsyncMock()
    if len(responses) == 1:
        client.api_v4.return_value = responses[0]
    else:
        client.api_v4.side_effect = list(responses)
    return client


@pytest.fixture
def fake_client(custom_field_records):
    """Client that answers CustomField.get with the records above and
    everything else with an empty result."""
    client = AsyncMock()

    async def api_v4(entity, action, params=None):
        if entity == "CustomField":
            return {"values": custom_field_records}
        if action == "create":
            return {"values": [{"id": 101}]}
        return {"values": []}

    client.api_v4.side_effect = api_v4
    return client


@pytest.fixture
def resolver(fake_client):
    """Resolver backed by fake_client. Not loaded yet."""
    return CustomFieldResolver(fake_client)


@pytest.fixture
def calls_for():
    """Helper: params of every api_v4 call for entity/action."""
    return _calls_for


def _calls_for(client, entity, action):
    found = []
    for call in client.api_v4.call_args_list:
        args = call.args
        if args[0] == entity and args[1] == action:
            found.append(args[2] if len(args) > 2 else call.kwargs.get("params"))
    return found
