#!/usr/bin/env python3
"""
Handler Tests

Each handler turns tool arguments into one or more APIv4 calls and the
response into text. The fake client records every call, so these tests
check both what was sent and what came back.
"""

import pytest

from civicrm_mcp.custom_fields import CustomFieldResolver
from civicrm_mcp.errors import CiviCRMAPIError
from civicrm_mcp.handlers import (
    HANDLERS,
    QUERIES,
    Filter,
    build_where,
    parse_arguments,
)


class TestParseArguments:
    """Splitting arguments into declared fields and the extension map."""

    def test_declared_keys_are_standard(self):
        entry = parse_arguments({"first_name": "Jane", "Volunteer Interest": "Housing"}, {"first_name"})

        assert entry.standard == {"first_name": "Jane"}
        assert entry.extra == {"Volunteer Interest": "Housing"}

    def test_nested_custom_fields_go_to_extra(self):
        entry = parse_arguments(
            {"first_name": "Jane", "custom_fields": {"Shirt Size": "M"}},
            {"first_name", "custom_fields"},
        )

        assert entry.standard == {"first_name": "Jane"}
        assert entry.extra == {"Shirt Size": "M"}

    def test_custom_fields_must_be_an_object(self):
        with pytest.raises(ValueError, match="custom_fields"):
            parse_arguments({"custom_fields": ["Shirt Size"]}, {"custom_fields"})

    def test_null_custom_fields_is_ignored(self):
        entry = parse_arguments({"custom_fields": None}, {"custom_fields"})
        assert entry.extra == {}

    def test_integral_float_ids_become_ints(self):
        entry = parse_arguments(
            {"contact_id": 12.0, "total_amount": 50.0, "limit": 5.0},
            {"contact_id", "total_amount", "limit"},
        )

        assert entry.standard["contact_id"] == 12
        assert isinstance(entry.standard["contact_id"], int)
        assert isinstance(entry.standard["total_amount"], float)
        assert entry.standard["limit"] == 5

    def test_no_arguments(self):
        entry = parse_arguments(None, {"contact_id"})
        assert entry.standard == {}
        assert entry.extra == {}


class TestBuildWhere:
    """Optional filters become where clauses."""

    def test_missing_and_empty_values_are_skipped(self):
        filters = (Filter("contact_id", "source_contact_id"), Filter("status", "status_id:name"))

        assert build_where({"contact_id": None, "status": ""}, filters) == []
        assert build_where({"contact_id": 4}, filters) == [["source_contact_id", "=", 4]]

    def test_like_filter_wraps_value(self):
        where = build_where({"group_type": "Mailing"}, [Filter("group_type", "group_type", "LIKE")])
        assert where == [["group_type", "LIKE", "%Mailing%"]]

    def test_false_is_a_value(self):
        where = build_where({"is_active": False}, [Filter("is_active", "is_active")])
        assert where == [["is_active", "=", False]]


class TestGetContacts:
    """get_contacts: selects, joins, search, custom fields."""

    @pytest.mark.asyncio
    async def test_selects_contact_custom_fields(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contacts"](fake_client, resolver, {"limit": 10})

        params = calls_for(fake_client, "Contact", "get")[0]
        assert params["limit"] == 10
        assert "Volunteer_Info.Interest_Area" in params["select"]
        assert "Volunteer_Profile.Shirt_Size" in params["select"]
        # Fields extending other entities stay out
        assert "Donation_Details.Campaign_Code" not in params["select"]
        assert [j[0] for j in params["join"]] == ["Email AS email_primary", "Phone AS phone_primary"]

    @pytest.mark.asyncio
    async def test_include_custom_fields_false_skips_load(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contacts"](fake_client, resolver, {"include_custom_fields": False})

        assert calls_for(fake_client, "CustomField", "get") == []
        params = calls_for(fake_client, "Contact", "get")[0]
        assert not any("." in s and not s.startswith(("email_primary", "phone_primary")) for s in params["select"])

    @pytest.mark.asyncio
    async def test_search_matches_name_or_email(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contacts"](fake_client, resolver, {"search": "jane"})

        where = calls_for(fake_client, "Contact", "get")[0]["where"]
        assert where == [["OR", [
            ["display_name", "LIKE", "%jane%"],
            ["email_primary.email", "LIKE", "%jane%"],
        ]]]

    @pytest.mark.asyncio
    async def test_contact_id_and_type_filters(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contacts"](fake_client, resolver, {"contact_id": 7.0, "contact_type": "Individual"})

        where = calls_for(fake_client, "Contact", "get")[0]["where"]
        assert ["contact_type", "=", "Individual"] in where
        assert ["id", "=", 7] in where

    @pytest.mark.asyncio
    async def test_default_limit(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contacts"](fake_client, resolver, {})
        assert calls_for(fake_client, "Contact", "get")[0]["limit"] == 25

    @pytest.mark.asyncio
    async def test_formats_records(self, make_client, resolver):
        client = make_client({"values": [{
            "id": 3,
            "display_name": "Jane Doe",
            "contact_type": "Individual",
            "email_primary.email": "jane@example.org",
            "phone_primary.phone": None,
            "Volunteer_Info.Interest_Area": "Housing",
        }]})

        text = await HANDLERS["get_contacts"](client, resolver, {"include_custom_fields": False})

        assert text.startswith("Found 1 contact(s):")
        assert "Name: Jane Doe" in text
        assert "Email: jane@example.org" in text
        assert "Phone: N/A" in text
        assert "Volunteer_Info.Interest_Area: Housing" in text
        assert "email_primary.email:" not in text

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, make_client, resolver):
        client = make_client(None)
        client.api_v4.side_effect = CiviCRMAPIError("Authorization failed")

        with pytest.raises(CiviCRMAPIError):
            await HANDLERS["get_contacts"](client, resolver, {"include_custom_fields": False})


class TestGetQueries:
    """Table-driven get tools."""

    @pytest.mark.asyncio
    async def test_activities_filter_by_names(self, fake_client, resolver, calls_for):
        await HANDLERS["get_activities"](fake_client, resolver, {
            "contact_id": 4, "activity_type": "Meeting", "status": "Completed",
        })

        params = calls_for(fake_client, "Activity", "get")[0]
        assert params["where"] == [
            ["source_contact_id", "=", 4],
            ["activity_type_id:name", "=", "Meeting"],
            ["status_id:name", "=", "Completed"],
        ]
        assert params["orderBy"] == {"activity_date_time": "DESC"}
        assert "Activity_Extras.Follow_Up" in params["select"]

    @pytest.mark.asyncio
    async def test_contributions_select_their_custom_fields(self, fake_client, resolver, calls_for):
        await HANDLERS["get_contributions"](fake_client, resolver, {"financial_type": "Donation"})

        params = calls_for(fake_client, "Contribution", "get")[0]
        assert ["financial_type_id.name", "=", "Donation"] in params["where"]
        assert "Donation_Details.Campaign_Code" in params["select"]
        assert "Volunteer_Info.Interest_Area" not in params["select"]

    @pytest.mark.asyncio
    async def test_events_default_to_active(self, fake_client, resolver, calls_for):
        await HANDLERS["get_events"](fake_client, resolver, {})

        params = calls_for(fake_client, "Event", "get")[0]
        assert ["is_active", "=", True] in params["where"]
        assert params["orderBy"] == {"start_date": "ASC"}

    @pytest.mark.asyncio
    async def test_events_active_default_can_be_overridden(self, fake_client, resolver, calls_for):
        await HANDLERS["get_events"](fake_client, resolver, {"is_active": False})

        params = calls_for(fake_client, "Event", "get")[0]
        assert ["is_active", "=", False] in params["where"]

    @pytest.mark.asyncio
    async def test_group_contacts_default_limit(self, fake_client, resolver, calls_for):
        await HANDLERS["get_group_contacts"](fake_client, resolver, {"group_id": 2})

        params = calls_for(fake_client, "GroupContact", "get")[0]
        assert params["limit"] == 50
        assert params["where"] == [["group_id", "=", 2]]

    @pytest.mark.asyncio
    async def test_option_values_by_group_name(self, fake_client, resolver, calls_for):
        await HANDLERS["get_option_values"](fake_client, resolver, {"option_group_name": "activity_type"})

        params = calls_for(fake_client, "OptionValue", "get")[0]
        assert ["option_group_id.name", "=", "activity_type"] in params["where"]

    @pytest.mark.asyncio
    async def test_tables_without_custom_fields_skip_the_load(self, fake_client, resolver, calls_for):
        await HANDLERS["get_tags"](fake_client, resolver, {})

        assert calls_for(fake_client, "CustomField", "get") == []

    @pytest.mark.asyncio
    async def test_empty_result(self, fake_client, resolver):
        text = await HANDLERS["get_groups"](fake_client, resolver, {})
        assert text == "Found 0 group(s):\n\n"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool,message", [
        ("get_cases", "Error accessing cases (CiviCase may not be enabled)"),
        ("get_campaigns", "Error accessing campaigns (CiviCampaign may not be enabled)"),
        ("get_reports", "Error accessing reports"),
    ])
    async def test_optional_components_degrade(self, make_client, resolver, tool, message):
        client = make_client(None)
        client.api_v4.side_effect = CiviCRMAPIError("Entity not found")

        text = await HANDLERS[tool](client, resolver, {})

        assert text.startswith(message + ": ")
        assert "Entity not found" in text

    @pytest.mark.asyncio
    async def test_core_entities_do_not_degrade(self, make_client, resolver):
        client = make_client(None)
        client.api_v4.side_effect = CiviCRMAPIError("boom")

        with pytest.raises(CiviCRMAPIError):
            await HANDLERS["get_tags"](client, resolver, {})

    def test_every_query_has_a_handler(self):
        for name in QUERIES:
            assert name in HANDLERS


class TestCreate:
    """Create tools resolve custom fields on the way in."""

    @pytest.mark.asyncio
    async def test_create_contact_with_custom_field_labels(self, fake_client, resolver, calls_for):
        text = await HANDLERS["create_contact"](fake_client, resolver, {
            "contact_type": "Individual",
            "first_name": "Jane",
            "email": "jane@example.org",
            "custom_fields": {"Volunteer Interest": "Environmental", "shirt_size": "M"},
        })

        assert text == "Successfully created contact with ID: 101"
        values = calls_for(fake_client, "Contact", "create")[0]["values"]
        assert values == {
            "contact_type": "Individual",
            "first_name": "Jane",
            "email_primary.email": "jane@example.org",
            "Volunteer_Info.Interest_Area": "Environmental",
            "Volunteer_Profile.Shirt_Size": "M",
        }

    @pytest.mark.asyncio
    async def test_flat_custom_field_keys_are_accepted(self, fake_client, resolver, calls_for):
        await HANDLERS["create_contact"](fake_client, resolver, {
            "contact_type": "Individual",
            "Available Weekends": True,
        })

        values = calls_for(fake_client, "Contact", "create")[0]["values"]
        assert values["Volunteer_Info.Availability"] is True

    @pytest.mark.asyncio
    async def test_unknown_custom_field_passes_through(self, fake_client, resolver, calls_for):
        await HANDLERS["create_contact"](fake_client, resolver, {
            "contact_type": "Individual",
            "custom_fields": {"Other_Group.Other_Field": "x"},
        })

        values = calls_for(fake_client, "Contact", "create")[0]["values"]
        assert values["Other_Group.Other_Field"] == "x"

    @pytest.mark.asyncio
    async def test_no_custom_fields_skips_load(self, fake_client, resolver, calls_for):
        await HANDLERS["create_contact"](fake_client, resolver, {"contact_type": "Organization", "organization_name": "Acme"})

        assert calls_for(fake_client, "CustomField", "get") == []

    @pytest.mark.asyncio
    async def test_create_activity_maps_contacts(self, fake_client, resolver, calls_for):
        await HANDLERS["create_activity"](fake_client, resolver, {
            "activity_type_id": 1.0,
            "subject": "Called about volunteering",
            "contact_id": 3,
            "target_contact_id": 9,
            "custom_fields": {"Follow Up Needed": True},
        })

        values = calls_for(fake_client, "Activity", "create")[0]["values"]
        assert values["activity_type_id"] == 1
        assert values["source_contact_id"] == 3
        assert values["target_contact_id"] == [9]
        assert "contact_id" not in values
        assert values["Activity_Extras.Follow_Up"] is True

    @pytest.mark.asyncio
    async def test_create_contribution(self, fake_client, resolver, calls_for):
        text = await HANDLERS["create_contribution"](fake_client, resolver, {
            "contact_id": 3,
            "total_amount": 25.5,
            "financial_type_id": 1,
            "custom_fields": {"Campaign Code": "SPRING"},
        })

        assert text == "Successfully created contribution with ID: 101"
        values = calls_for(fake_client, "Contribution", "create")[0]["values"]
        assert values["total_amount"] == 25.5
        assert values["Donation_Details.Campaign_Code"] == "SPRING"

    @pytest.mark.asyncio
    async def test_missing_id_in_response(self, make_client, resolver):
        client = make_client({"values": []})

        text = await HANDLERS["create_email"](client, resolver, {"contact_id": 3, "email": "a@b.org"})

        assert text == "Successfully created email with ID: N/A"

    @pytest.mark.asyncio
    async def test_custom_field_load_failure_still_creates(self, make_client, calls_for):
        client = make_client(None)

        async def api_v4(entity, action, params=None):
            if entity == "CustomField":
                raise CiviCRMAPIError("Permission denied")
            return {"values": [{"id": 55}]}

        client.api_v4.side_effect = api_v4
        failing = CustomFieldResolver(client)

        text = await HANDLERS["create_contact"](client, failing, {
            "contact_type": "Individual",
            "custom_fields": {"Volunteer Interest": "Housing"},
        })

        assert text == "Successfully created contact with ID: 55"
        values = calls_for(client, "Contact", "create")[0]["values"]
        assert values["Volunteer Interest"] == "Housing"


class TestUpdate:
    """Update tools address one record by ID."""

    @pytest.mark.asyncio
    async def test_update_contact(self, fake_client, resolver, calls_for):
        text = await HANDLERS["update_contact"](fake_client, resolver, {
            "contact_id": 12,
            "last_name": "Smith",
            "custom_fields": {"Volunteer Interest": "Housing"},
        })

        assert text == "Successfully updated contact ID: 12"
        params = calls_for(fake_client, "Contact", "update")[0]
        assert params["where"] == [["id", "=", 12]]
        assert params["values"] == {
            "last_name": "Smith",
            "Volunteer_Info.Interest_Area": "Housing",
        }

    @pytest.mark.asyncio
    async def test_missing_id_raises(self, fake_client, resolver):
        with pytest.raises(ValueError, match="contact_id is required"):
            await HANDLERS["update_contact"](fake_client, resolver, {"last_name": "Smith"})

    @pytest.mark.asyncio
    async def test_nothing_to_update_raises(self, fake_client, resolver, calls_for):
        with pytest.raises(ValueError, match="No fields given"):
            await HANDLERS["update_activity"](fake_client, resolver, {"activity_id": 4})

        assert calls_for(fake_client, "Activity", "update") == []

    @pytest.mark.asyncio
    async def test_update_activity_maps_contacts(self, fake_client, resolver, calls_for):
        text = await HANDLERS["update_activity"](fake_client, resolver, {
            "activity_id": 4,
            "contact_id": 3.0,
            "target_contact_id": 9,
            "custom_fields": {"Follow Up Needed": False},
        })

        assert text == "Successfully updated activity ID: 4"
        params = calls_for(fake_client, "Activity", "update")[0]
        assert params["where"] == [["id", "=", 4]]
        assert params["values"] == {
            "source_contact_id": 3,
            "target_contact_id": [9],
            "Activity_Extras.Follow_Up": False,
        }

    @pytest.mark.asyncio
    async def test_update_contribution_custom_field(self, fake_client, resolver, calls_for):
        await HANDLERS["update_contribution"](fake_client, resolver, {
            "contribution_id": 8,
            "custom_fields": {"campaign_code": "FALL"},
        })

        params = calls_for(fake_client, "Contribution", "update")[0]
        assert params["values"] == {"Donation_Details.Campaign_Code": "FALL"}


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_phone(self, fake_client, resolver, calls_for):
        text = await HANDLERS["delete_phone"](fake_client, resolver, {"phone_id": 6.0})

        assert text == "Successfully deleted phone ID: 6"
        assert calls_for(fake_client, "Phone", "delete")[0] == {"where": [["id", "=", 6]]}

    @pytest.mark.asyncio
    async def test_delete_without_id_raises(self, fake_client, resolver):
        with pytest.raises(ValueError):
            await HANDLERS["delete_address"](fake_client, resolver, {})


class TestGroupsAndTags:

    @pytest.mark.asyncio
    async def test_add_contact_to_group_defaults_to_added(self, fake_client, resolver, calls_for):
        text = await HANDLERS["add_contact_to_group"](fake_client, resolver, {"contact_id": 3, "group_id": 2})

        assert text == "Successfully added contact 3 to group 2"
        values = calls_for(fake_client, "GroupContact", "create")[0]["values"]
        assert values == {"status": "Added", "contact_id": 3, "group_id": 2}

    @pytest.mark.asyncio
    async def test_remove_contact_from_group_records_removal(self, fake_client, resolver, calls_for):
        await HANDLERS["remove_contact_from_group"](fake_client, resolver, {"contact_id": 3, "group_id": 2})

        values = calls_for(fake_client, "GroupContact", "create")[0]["values"]
        assert values["status"] == "Removed"
        assert calls_for(fake_client, "GroupContact", "delete") == []

    @pytest.mark.asyncio
    async def test_remove_entity_tag(self, fake_client, resolver, calls_for):
        await HANDLERS["remove_entity_tag"](fake_client, resolver, {
            "entity_table": "civicrm_contact", "entity_id": 3, "tag_id": 5,
        })

        where = calls_for(fake_client, "EntityTag", "delete")[0]["where"]
        assert where == [
            ["entity_table", "=", "civicrm_contact"],
            ["entity_id", "=", 3],
            ["tag_id", "=", 5],
        ]


class TestListCustomFields:

    @pytest.mark.asyncio
    async def test_defaults_to_contact(self, fake_client, resolver):
        text = await HANDLERS["list_custom_fields"](fake_client, resolver, {})

        assert text.startswith("Custom fields for Contact:")
        assert "Label: Volunteer Interest" in text
        assert "API Name: Volunteer_Info.Interest_Area" in text
        assert "Shirt Size" not in text

    @pytest.mark.asyncio
    async def test_no_fields(self, fake_client, resolver):
        text = await HANDLERS["list_custom_fields"](fake_client, resolver, {"entity_type": "Grant"})
        assert text == "No custom fields found for Grant"


class TestCompositeHandlers:
    """Tools that make several calls."""

    @pytest.mark.asyncio
    async def test_contact_summary_sections(self, fake_client, resolver, calls_for):
        text = await HANDLERS["get_contact_summary"](fake_client, resolver, {"contact_id": 3})

        assert text.startswith("=== CONTACT SUMMARY FOR CONTACT 3 ===")
        for section in ("BASIC CONTACT INFO:", "GROUP MEMBERSHIPS:", "RELATIONSHIPS:",
                        "MEMBERSHIPS:", "RECENT CONTRIBUTIONS:"):
            assert section in text
        assert calls_for(fake_client, "Contribution", "get")[0]["limit"] == 5

    @pytest.mark.asyncio
    async def test_contact_summary_degrades(self, make_client, resolver):
        client = make_client(None)
        client.api_v4.side_effect = CiviCRMAPIError("Contact not found")

        text = await HANDLERS["get_contact_summary"](client, resolver, {"contact_id": 3})

        assert text.startswith("Error retrieving contact summary: ")

    @pytest.mark.asyncio
    async def test_search_contacts_by_group_no_match(self, fake_client, resolver):
        text = await HANDLERS["search_contacts_by_group"](fake_client, resolver, {"group_name": "Board"})
        assert text == 'No groups found matching "Board"'

    @pytest.mark.asyncio
    async def test_search_contacts_by_group_lists_members(self, make_client, resolver, calls_for):
        client = make_client(
            {"values": [{"id": 2, "name": "Board_Members", "title": "Board Members"}]},
            {"values": [{"id": 1, "contact_id": 3, "status": "Added"}]},
        )

        text = await HANDLERS["search_contacts_by_group"](client, resolver, {"group_name": "Board"})

        assert 'CONTACTS IN GROUP "Board Members" (Board_Members):' in text
        where = calls_for(client, "GroupContact", "get")[0]["where"]
        assert where == [["group_id", "=", 2], ["status", "=", "Added"]]

    @pytest.mark.asyncio
    async def test_system_info(self, make_client, resolver):
        client = make_client(
            {"values": [{"version": "5.69.0", "uf": "WordPress", "php": {"version": "8.2"}}]},
            {"values": [{"title": "Cron", "severity": "warning", "message": "Cron not running"}]},
        )

        text = await HANDLERS["system_info"](client, resolver, {})

        assert "CiviCRM Version: 5.69.0" in text
        assert "CMS: WordPress" in text
        assert "PHP Version: 8.2" in text
        assert "- Cron: warning" in text

    @pytest.mark.asyncio
    async def test_system_info_degrades(self, make_client, resolver):
        client = make_client(None)
        client.api_v4.side_effect = CiviCRMAPIError("Permission denied")

        text = await HANDLERS["system_info"](client, resolver, {})

        assert text.startswith("Error retrieving system information: ")
