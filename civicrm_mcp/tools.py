"""
Tool Registry - What buttons the agent can press.

Every tool is declared here with its JSON schema. The schema's "properties"
double as the list of standard arguments a handler recognises: anything the
caller sends outside them is treated as a custom field.
"""

from typing import Dict, List, Set

from mcp.types import Tool


CONTACT_TYPES = ["Individual", "Organization", "Household"]


def _number(description: str, **extra) -> dict:
    return {"type": "number", "description": description, **extra}


def _string(description: str, **extra) -> dict:
    return {"type": "string", "description": description, **extra}


def _boolean(description: str, **extra) -> dict:
    return {"type": "boolean", "description": description, **extra}


def _limit(what: str, default: int = 25) -> dict:
    return _number(f"Maximum number of {what} to return (default: {default})", default=default)


def _active(what: str) -> dict:
    return _boolean(f"Filter by active {what} only", default=True)


def _include_custom_fields() -> dict:
    return _boolean("Include custom fields in results (default: true)", default=True)


def _custom_fields(verb: str = "set") -> dict:
    return {
        "type": "object",
        "description": (
            f"Custom fields to {verb} as key-value pairs. Keys may be the field label "
            "(\"Volunteer Interest\"), the field name (\"Interest_Area\") or the API name "
            "(\"Volunteer_Info.Interest_Area\"). Use list_custom_fields to see what exists."
        ),
        "additionalProperties": True,
    }


def _schema(properties: dict, required: List[str] = None) -> dict:
    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


TOOLS: List[Tool] = [
    # ---------------------------------------------------------------------
    # Contacts
    # ---------------------------------------------------------------------
    Tool(
        name="get_contacts",
        description="""Search and retrieve contacts from CiviCRM, including custom fields.

Search matches display name or primary email (substring). Results show
name, type, primary email and phone, then any custom fields.""",
        inputSchema=_schema({
            "limit": _limit("contacts"),
            "search": _string("Search term to filter contacts by name or email"),
            "contact_type": _string("Filter by contact type", enum=CONTACT_TYPES),
            "contact_id": _number("Get specific contact by ID"),
            "include_custom_fields": _include_custom_fields(),
        }),
    ),
    Tool(
        name="create_contact",
        description="Create a new contact in CiviCRM with custom field support",
        inputSchema=_schema({
            "contact_type": _string("Type of contact to create", enum=CONTACT_TYPES),
            "first_name": _string("First name (for Individual contacts)"),
            "last_name": _string("Last name (for Individual contacts)"),
            "organization_name": _string("Organization name (for Organization contacts)"),
            "household_name": _string("Household name (for Household contacts)"),
            "email": _string("Primary email address"),
            "phone": _string("Primary phone number"),
            "custom_fields": _custom_fields(),
        }, required=["contact_type"]),
    ),
    Tool(
        name="update_contact",
        description="Update an existing contact in CiviCRM, including custom fields",
        inputSchema=_schema({
            "contact_id": _number("ID of the contact to update"),
            "first_name": _string("First name"),
            "last_name": _string("Last name"),
            "organization_name": _string("Organization name"),
            "email": _string("Primary email address"),
            "phone": _string("Primary phone number"),
            "custom_fields": _custom_fields("update"),
        }, required=["contact_id"]),
    ),
    Tool(
        name="get_contact_summary",
        description="""Get a complete picture of one contact.

Returns the contact itself, its group memberships, relationships in both
directions, memberships and the five most recent contributions.""",
        inputSchema=_schema({
            "contact_id": _number("Contact ID to summarise"),
        }, required=["contact_id"]),
    ),
    Tool(
        name="search_contacts_by_group",
        description="Find groups whose title or name matches, and list the contacts in the first match",
        inputSchema=_schema({
            "group_name": _string("Group title or name to search for (substring)"),
            "limit": _limit("contacts", 50),
        }, required=["group_name"]),
    ),
    Tool(
        name="get_contact_types",
        description="Retrieve contact types and subtypes from CiviCRM",
        inputSchema=_schema({
            "contact_type_id": _number("Get specific contact type by ID"),
            "name": _string("Filter by name"),
            "parent_id": _number("Filter by parent type (for subtypes)"),
            "is_active": _active("contact types"),
            "limit": _limit("contact types"),
        }),
    ),

    # ---------------------------------------------------------------------
    # Custom fields
    # ---------------------------------------------------------------------
    Tool(
        name="list_custom_fields",
        description="List all available custom fields for an entity type, with their labels and API names",
        inputSchema=_schema({
            "entity_type": _string(
                "Entity type to get custom fields for (Contact, Individual, Activity, Contribution, etc.)",
                default="Contact",
            ),
        }),
    ),

    # ---------------------------------------------------------------------
    # Addresses, emails, phones, websites
    # ---------------------------------------------------------------------
    Tool(
        name="get_addresses",
        description="Retrieve address records from CiviCRM",
        inputSchema=_schema({
            "contact_id": _number("Filter by contact ID"),
            "address_id": _number("Get specific address by ID"),
            "location_type_id": _number("Filter by location type"),
            "is_primary": _boolean("Filter by primary address"),
            "limit": _limit("addresses"),
        }),
    ),
    Tool(
        name="create_address",
        description="Create a new address record",
        inputSchema=_schema({
            "contact_id": _number("Contact ID"),
            "street_address": _string("Street address"),
            "city": _string("City"),
            "postal_code": _string("Postal/ZIP code"),
            "state_province_id": _number("State/Province ID"),
            "country_id": _number("Country ID"),
            "location_type_id": _number("Location type ID", default=1),
            "is_primary": _boolean("Set as primary address", default=False),
        }, required=["contact_id"]),
    ),
    Tool(
        name="update_address",
        description="Update an existing address record",
        inputSchema=_schema({
            "address_id": _number("Address ID to update"),
            "street_address": _string("Street address"),
            "city": _string("City"),
            "postal_code": _string("Postal/ZIP code"),
            "state_province_id": _number("State/Province ID"),
            "country_id": _number("Country ID"),
            "location_type_id": _number("Location type ID"),
            "is_primary": _boolean("Set as primary address"),
        }, required=["address_id"]),
    ),
    Tool(
        name="delete_address",
        description="Delete an address record",
        inputSchema=_schema({"address_id": _number("Address ID to delete")}, required=["address_id"]),
    ),
    Tool(
        name="get_emails",
        description="Retrieve email records from CiviCRM",
        inputSchema=_schema({
            "contact_id": _number("Filter by contact ID"),
            "email_id": _number("Get specific email by ID"),
            "location_type_id": _number("Filter by location type"),
            "is_primary": _boolean("Filter by primary email"),
            "limit": _limit("emails"),
        }),
    ),
    Tool(
        name="create_email",
        description="Create a new email record",
        inputSchema=_schema({
            "contact_id": _number("Contact ID"),
            "email": _string("Email address"),
            "location_type_id": _number("Location type ID", default=1),
            "is_primary": _boolean("Set as primary email", default=False),
        }, required=["contact_id", "email"]),
    ),
    Tool(
        name="update_email",
        description="Update an existing email record",
        inputSchema=_schema({
            "email_id": _number("Email ID to update"),
            "email": _string("Email address"),
            "location_type_id": _number("Location type ID"),
            "is_primary": _boolean("Set as primary email"),
        }, required=["email_id"]),
    ),
    Tool(
        name="delete_email",
        description="Delete an email record",
        inputSchema=_schema({"email_id": _number("Email ID to delete")}, required=["email_id"]),
    ),
    Tool(
        name="get_phones",
        description="Retrieve phone records from CiviCRM",
        inputSchema=_schema({
            "contact_id": _number("Filter by contact ID"),
            "phone_id": _number("Get specific phone by ID"),
            "location_type_id": _number("Filter by location type"),
            "phone_type_id": _number("Filter by phone type"),
            "is_primary": _boolean("Filter by primary phone"),
            "limit": _limit("phones"),
        }),
    ),
    Tool(
        name="create_phone",
        description="Create a new phone record",
        inputSchema=_schema({
            "contact_id": _number("Contact ID"),
            "phone": _string("Phone number"),
            "phone_type_id": _number("Phone type ID", default=1),
            "location_type_id": _number("Location type ID", default=1),
            "is_primary": _boolean("Set as primary phone", default=False),
        }, required=["contact_id", "phone"]),
    ),
    Tool(
        name="update_phone",
        description="Update an existing phone record",
        inputSchema=_schema({
            "phone_id": _number("Phone ID to update"),
            "phone": _string("Phone number"),
            "phone_type_id": _number("Phone type ID"),
            "location_type_id": _number("Location type ID"),
            "is_primary": _boolean("Set as primary phone"),
        }, required=["phone_id"]),
    ),
    Tool(
        name="delete_phone",
        description="Delete a phone record",
        inputSchema=_schema({"phone_id": _number("Phone ID to delete")}, required=["phone_id"]),
    ),
    Tool(
        name="get_websites",
        description="Retrieve website records from CiviCRM",
        inputSchema=_schema({
            "contact_id": _number("Filter by contact ID"),
            "website_id": _number("Get specific website by ID"),
            "website_type_id": _number("Filter by website type"),
            "limit": _limit("websites"),
        }),
    ),
    Tool(
        name="create_website",
        description="Create a new website record",
        inputSchema=_schema({
            "contact_id": _number("Contact ID"),
            "url": _string("Website URL"),
            "website_type_id": _number("Website type ID", default=1),
        }, required=["contact_id", "url"]),
    ),
    Tool(
        name="update_website",
        description="Update an existing website record",
        inputSchema=_schema({
            "website_id": _number("Website ID to update"),
            "url": _string("Website URL"),
            "website_type_id": _number("Website type ID"),
        }, required=["website_id"]),
    ),
    Tool(
        name="delete_website",
        description="Delete a website record",
        inputSchema=_schema({"website_id": _number("Website ID to delete")}, required=["website_id"]),
    ),

    # ---------------------------------------------------------------------
    # Activities
    # ---------------------------------------------------------------------
    Tool(
        name="get_activities",
        description="Retrieve activities from CiviCRM including custom fields, newest first",
        inputSchema=_schema({
            "contact_id": _number("Filter activities by source contact ID"),
            "activity_type": _string("Filter by activity type name (e.g. Meeting, Phone Call)"),
            "status": _string("Filter by activity status name (e.g. Scheduled, Completed)"),
            "limit": _limit("activities"),
            "include_custom_fields": _include_custom_fields(),
        }),
    ),
    Tool(
        name="create_activity",
        description="Create a new activity in CiviCRM with custom fields",
        inputSchema=_schema({
            "activity_type_id": _number("Activity type ID"),
            "subject": _string("Activity subject/title"),
            "details": _string("Activity details/description"),
            "contact_id": _number("Source contact ID for the activity"),
            "target_contact_id": _number("Target contact ID"),
            "activity_date_time": _string("Activity date/time (YYYY-MM-DD HH:MM:SS format)"),
            "status_id": _number("Activity status ID"),
            "custom_fields": _custom_fields(),
        }, required=["activity_type_id", "subject"]),
    ),
    Tool(
        name="update_activity",
        description="Update an existing activity, including custom fields",
        inputSchema=_schema({
            "activity_id": _number("ID of the activity to update"),
            "subject": _string("Activity subject/title"),
            "details": _string("Activity details/description"),
            "contact_id": _number("Source contact ID for the activity"),
            "target_contact_id": _number("Target contact ID"),
            "activity_date_time": _string("Activity date/time (YYYY-MM-DD HH:MM:SS format)"),
            "status_id": _number("Activity status ID"),
            "custom_fields": _custom_fields("update"),
        }, required=["activity_id"]),
    ),

    # ---------------------------------------------------------------------
    # Contributions
    # ---------------------------------------------------------------------
    Tool(
        name="get_contributions",
        description="Retrieve contributions/donations from CiviCRM including custom fields, newest first",
        inputSchema=_schema({
            "contact_id": _number("Filter contributions by contact ID"),
            "contribution_status": _string("Filter by contribution status name (e.g. Completed, Pending)"),
            "financial_type": _string("Filter by financial type name (e.g. Donation)"),
            "limit": _limit("contributions"),
            "include_custom_fields": _include_custom_fields(),
        }),
    ),
    Tool(
        name="create_contribution",
        description="Record a new contribution/donation in CiviCRM with custom fields",
        inputSchema=_schema({
            "contact_id": _number("Contact ID of the donor"),
            "total_amount": _number("Contribution amount"),
            "financial_type_id": _number("Financial type ID"),
            "contribution_status_id": _number("Contribution status ID", default=1),
            "receive_date": _string("Date contribution was received (YYYY-MM-DD format)"),
            "source": _string("Source of the contribution"),
            "payment_instrument_id": _number("Payment method ID"),
            "custom_fields": _custom_fields(),
        }, required=["contact_id", "total_amount", "financial_type_id"]),
    ),
    Tool(
        name="update_contribution",
        description="Update an existing contribution, including custom fields",
        inputSchema=_schema({
            "contribution_id": _number("ID of the contribution to update"),
            "total_amount": _number("Contribution amount"),
            "contribution_status_id": _number("Contribution status ID"),
            "receive_date": _string("Date contribution was received (YYYY-MM-DD format)"),
            "source": _string("Source of the contribution"),
            "custom_fields": _custom_fields("update"),
        }, required=["contribution_id"]),
    ),

    # ---------------------------------------------------------------------
    # Events, memberships
    # ---------------------------------------------------------------------
    Tool(
        name="get_events",
        description="Retrieve events from CiviCRM, soonest first",
        inputSchema=_schema({
            "event_type": _string("Filter by event type name"),
            "is_active": _active("events"),
            "limit": _limit("events"),
            "include_custom_fields": _include_custom_fields(),
        }),
    ),
    Tool(
        name="get_memberships",
        description="Retrieve memberships from CiviCRM, most recent first",
        inputSchema=_schema({
            "contact_id": _number("Filter memberships by contact ID"),
            "membership_type_id": _number("Filter by membership type ID"),
            "status_id": _number("Filter by membership status ID"),
            "limit": _limit("memberships"),
            "include_custom_fields": _include_custom_fields(),
        }),
    ),
    Tool(
        name="create_membership",
        description="Create a membership for a contact, with custom fields",
        inputSchema=_schema({
            "contact_id": _number("Member contact ID"),
            "membership_type_id": _number("Membership type ID"),
            "status_id": _number("Membership status ID (CiviCRM calculates it when omitted)"),
            "join_date": _string("Join date (YYYY-MM-DD)"),
            "start_date": _string("Start date (YYYY-MM-DD)"),
            "end_date": _string("End date (YYYY-MM-DD)"),
            "source": _string("Source of the membership"),
            "custom_fields": _custom_fields(),
        }, required=["contact_id", "membership_type_id"]),
    ),
    Tool(
        name="get_membership_types",
        description="Retrieve membership types from CiviCRM",
        inputSchema=_schema({
            "membership_type_id": _number("Get specific membership type by ID"),
            "name": _string("Filter by name"),
            "member_of_contact_id": _number("Filter by member organization"),
            "is_active": _active("membership types"),
            "limit": _limit("membership types"),
        }),
    ),
    Tool(
        name="get_membership_statuses",
        description="Retrieve membership statuses from CiviCRM",
        inputSchema=_schema({
            "membership_status_id": _number("Get specific membership status by ID"),
            "name": _string("Filter by name"),
            "is_active": _active("membership statuses"),
            "limit": _limit("membership statuses"),
        }),
    ),

    # ---------------------------------------------------------------------
    # Groups and tags
    # ---------------------------------------------------------------------
    Tool(
        name="get_groups",
        description="Retrieve groups from CiviCRM",
        inputSchema=_schema({
            "group_type": _string("Filter by group type"),
            "is_active": _active("groups"),
            "limit": _limit("groups"),
        }),
    ),
    Tool(
        name="get_group_contacts",
        description="Retrieve group membership records from CiviCRM",
        inputSchema=_schema({
            "group_id": _number("Filter by group ID"),
            "contact_id": _number("Filter by contact ID"),
            "status": _string("Filter by status", enum=["Added", "Removed", "Pending"]),
            "limit": _limit("group contacts", 50),
        }),
    ),
    Tool(
        name="add_contact_to_group",
        description="Add a contact to a group",
        inputSchema=_schema({
            "group_id": _number("Group ID"),
            "contact_id": _number("Contact ID"),
            "status": _string("Status (default: Added)", default="Added"),
        }, required=["group_id", "contact_id"]),
    ),
    Tool(
        name="remove_contact_from_group",
        description="Remove a contact from a group (recorded as status Removed, keeping history)",
        inputSchema=_schema({
            "group_id": _number("Group ID"),
            "contact_id": _number("Contact ID"),
        }, required=["group_id", "contact_id"]),
    ),
    Tool(
        name="get_tags",
        description="Retrieve tags from CiviCRM",
        inputSchema=_schema({
            "used_for": _string("Filter by what entity the tag is used for"),
            "is_selectable": _boolean("Filter by selectable tags only"),
            "limit": _limit("tags"),
        }),
    ),
    Tool(
        name="get_entity_tags",
        description="Retrieve which tags are attached to which records",
        inputSchema=_schema({
            "entity_table": _string("Entity table (e.g., civicrm_contact)"),
            "entity_id": _number("Entity ID"),
            "tag_id": _number("Tag ID"),
            "limit": _limit("entity tags", 50),
        }),
    ),
    Tool(
        name="add_entity_tag",
        description="Add a tag to a record",
        inputSchema=_schema({
            "entity_table": _string("Entity table (e.g., civicrm_contact)"),
            "entity_id": _number("Entity ID"),
            "tag_id": _number("Tag ID"),
        }, required=["entity_table", "entity_id", "tag_id"]),
    ),
    Tool(
        name="remove_entity_tag",
        description="Remove a tag from a record",
        inputSchema=_schema({
            "entity_table": _string("Entity table (e.g., civicrm_contact)"),
            "entity_id": _number("Entity ID"),
            "tag_id": _number("Tag ID"),
        }, required=["entity_table", "entity_id", "tag_id"]),
    ),

    # ---------------------------------------------------------------------
    # Relationships
    # ---------------------------------------------------------------------
    Tool(
        name="get_relationships",
        description="Retrieve relationships from CiviCRM",
        inputSchema=_schema({
            "contact_id_a": _number("Filter by first contact ID in relationship"),
            "contact_id_b": _number("Filter by second contact ID in relationship"),
            "relationship_type_id": _number("Filter by relationship type ID"),
            "is_active": _active("relationships"),
            "limit": _limit("relationships"),
        }),
    ),
    Tool(
        name="get_relationship_types",
        description="Retrieve relationship types from CiviCRM",
        inputSchema=_schema({
            "relationship_type_id": _number("Get specific relationship type by ID"),
            "name_a_b": _string("Filter by name A to B"),
            "name_b_a": _string("Filter by name B to A"),
            "is_active": _active("relationship types"),
            "limit": _limit("relationship types"),
        }),
    ),

    # ---------------------------------------------------------------------
    # Optional components
    # ---------------------------------------------------------------------
    Tool(
        name="get_cases",
        description="Retrieve cases from CiviCRM (if CiviCase is enabled)",
        inputSchema=_schema({
            "contact_id": _number("Filter cases by client contact ID"),
            "case_type_id": _number("Filter by case type ID"),
            "status_id": _number("Filter by case status ID"),
            "is_deleted": _boolean("Show deleted cases instead of live ones", default=False),
            "limit": _limit("cases"),
        }),
    ),
    Tool(
        name="get_campaigns",
        description="Retrieve campaigns from CiviCRM (if CiviCampaign is enabled)",
        inputSchema=_schema({
            "campaign_type_id": _number("Filter by campaign type ID"),
            "status_id": _number("Filter by campaign status ID"),
            "is_active": _active("campaigns"),
            "limit": _limit("campaigns"),
        }),
    ),

    # ---------------------------------------------------------------------
    # Options, reports, system
    # ---------------------------------------------------------------------
    Tool(
        name="get_option_values",
        description="Retrieve option values (dropdown choices) from a CiviCRM option group",
        inputSchema=_schema({
            "option_group_id": _number("Option group ID to retrieve values from"),
            "option_group_name": _string("Option group name (alternative to ID)"),
            "is_active": _active("option values"),
            "limit": _limit("option values"),
        }),
    ),
    Tool(
        name="list_option_groups",
        description="List all option groups in CiviCRM",
        inputSchema=_schema({
            "is_active": _active("option groups"),
            "limit": _limit("option groups"),
        }),
    ),
    Tool(
        name="get_reports",
        description="Retrieve available report templates from CiviCRM",
        inputSchema=_schema({
            "component": _string("Filter by CiviCRM component"),
            "is_active": _active("reports"),
            "limit": _limit("reports"),
        }),
    ),
    Tool(
        name="system_info",
        description="Get CiviCRM system information and status checks",
        inputSchema=_schema({}),
    ),
]

TOOLS_BY_NAME: Dict[str, Tool] = {tool.name: tool for tool in TOOLS}


def declared_arguments(tool_name: str) -> Set[str]:
    """Argument names a tool's schema declares."""
    tool = TOOLS_BY_NAME.get(tool_name)
    if tool is None:
        return set()
    return set(tool.inputSchema.get("properties", {}))
