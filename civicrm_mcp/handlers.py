"""
Entity Operation Handlers - What happens when the agent presses a button.

One handler per tool. Each takes (client, resolver, arguments) and returns
the text shown to the agent. Most handlers are built from a small table:

    Query   - entity, select list, filters, ordering for a "get" tool
    create_handler / update_handler / delete_handler - write tools

Arguments are split into the standard ones the tool's schema declares and an
open extension map (the nested "custom_fields" object plus any undeclared
keys). The extension map goes through the custom field resolver, so callers
can say "Volunteer Interest" instead of "Volunteer_Info.Interest_Area".

Errors from CiviCRM propagate to the dispatcher by default. Tools for
optional components (CiviCase, CiviCampaign, reports, system checks) catch
them and answer with a readable message instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from civicrm_mcp.client import CiviCRMClient
from civicrm_mcp.custom_fields import CustomFieldResolver
from civicrm_mcp.errors import CiviCRMAPIError
from civicrm_mcp.formatting import (
    NA,
    created_id,
    format_custom_fields,
    format_results,
)
from civicrm_mcp.tools import declared_arguments

logger = logging.getLogger("civicrm_mcp.handlers")

Handler = Callable[[CiviCRMClient, CustomFieldResolver, Dict[str, Any]], Awaitable[str]]

CONTACT_ENTITIES = ("Contact", "Individual", "Organization", "Household")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

@dataclass
class EntityInput:
    """Tool arguments split into declared fields and custom field candidates."""
    standard: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


def _normalize(key: str, value: Any) -> Any:
    # JSON numbers arrive as floats; CiviCRM IDs and limits are integers.
    if isinstance(value, float) and value.is_integer() and (key.endswith("_id") or "_id_" in key or key == "limit"):
        return int(value)
    return value


def parse_arguments(arguments: Optional[Dict[str, Any]], declared: Iterable[str]) -> EntityInput:
    """Split arguments into standard fields and the extension map.

    The nested "custom_fields" object is the documented way to pass custom
    fields. Undeclared top-level keys are accepted too and land in the same
    extension map.

    Raises:
        ValueError: if custom_fields is present but not an object
    """
    declared = set(declared)
    entry = EntityInput()
    for key, value in (arguments or {}).items():
        if key == "custom_fields":
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValueError("custom_fields must be an object of field name/value pairs")
            entry.extra.update(value)
        elif key in declared:
            entry.standard[key] = _normalize(key, value)
        else:
            entry.extra[key] = value
    return entry


async def _write_values(
    resolver: CustomFieldResolver,
    entry: EntityInput,
) -> Dict[str, Any]:
    """Standard fields plus resolved custom fields, ready for "values"."""
    values = {k: v for k, v in entry.standard.items() if v is not None}
    if entry.extra:
        await resolver.ensure_loaded()
        values.update(resolver.translate(entry.extra))
    return values


# =============================================================================
# QUERIES
# =============================================================================

@dataclass(frozen=True)
class Filter:
    """One optional predicate: argument name -> where clause."""
    argument: str
    field: str
    op: str = "="

    def clause(self, value: Any) -> list:
        if self.op == "LIKE":
            return [self.field, "LIKE", f"%{value}%"]
        return [self.field, self.op, value]


def build_where(arguments: Dict[str, Any], filters: Iterable[Filter]) -> List[list]:
    """Where clauses for every filter whose argument was given."""
    where = []
    for f in filters:
        value = arguments.get(f.argument)
        if value is None or value == "":
            continue
        where.append(f.clause(value))
    return where


@dataclass(frozen=True)
class Query:
    """How one "get" tool reads an entity."""
    entity: str
    format_as: str
    select: Tuple[str, ...]
    filters: Tuple[Filter, ...] = ()
    defaults: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[Dict[str, str]] = None
    join: Optional[Tuple[list, ...]] = None
    limit: int = 25
    custom_field_entities: Tuple[str, ...] = ()


def _limit(value: Any, default: int) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default


async def run_query(
    client: CiviCRMClient,
    resolver: CustomFieldResolver,
    query: Query,
    arguments: Dict[str, Any],
    extra_where: Iterable[list] = (),
) -> Dict[str, Any]:
    """Build and send the APIv4 "get" request for a Query."""
    args = dict(query.defaults)
    args.update({k: _normalize(k, v) for k, v in (arguments or {}).items() if v is not None})

    select = list(query.select)
    if query.custom_field_entities and args.get("include_custom_fields", True):
        await resolver.ensure_loaded()
        for entity_type in query.custom_field_entities:
            select.extend(f.api_name for f in resolver.fields_for_entity(entity_type))

    params: Dict[str, Any] = {
        "select": select,
        "where": build_where(args, query.filters) + list(extra_where),
        "limit": _limit(args.get("limit"), query.limit),
    }
    if query.order_by:
        params["orderBy"] = dict(query.order_by)
    if query.join:
        params["join"] = [list(j) for j in query.join]

    return await client.api_v4(query.entity, "get", params)


CONTACTS = Query(
    entity="Contact",
    format_as="contact",
    select=(
        "id", "display_name", "first_name", "last_name", "organization_name",
        "contact_type", "email_primary.email", "phone_primary.phone",
    ),
    filters=(
        Filter("contact_type", "contact_type"),
        Filter("contact_id", "id"),
    ),
    join=(
        ["Email AS email_primary", "LEFT", ["id", "=", "email_primary.contact_id"], ["email_primary.is_primary", "=", True]],
        ["Phone AS phone_primary", "LEFT", ["id", "=", "phone_primary.contact_id"], ["phone_primary.is_primary", "=", True]],
    ),
    custom_field_entities=CONTACT_ENTITIES,
)

QUERIES: Dict[str, Query] = {
    "get_activities": Query(
        entity="Activity",
        format_as="activity",
        select=(
            "id", "subject", "activity_type_id", "activity_type_id:label", "status_id",
            "status_id:label", "activity_date_time", "source_contact_id", "details",
        ),
        filters=(
            Filter("contact_id", "source_contact_id"),
            Filter("activity_type", "activity_type_id:name"),
            Filter("status", "status_id:name"),
        ),
        order_by={"activity_date_time": "DESC"},
        custom_field_entities=("Activity",),
    ),
    "get_contributions": Query(
        entity="Contribution",
        format_as="contribution",
        select=(
            "id", "contact_id", "total_amount", "financial_type_id", "financial_type_id:label",
            "contribution_status_id", "contribution_status_id:label", "receive_date", "source",
        ),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("contribution_status", "contribution_status_id:name"),
            Filter("financial_type", "financial_type_id.name"),
        ),
        order_by={"receive_date": "DESC"},
        custom_field_entities=("Contribution",),
    ),
    "get_events": Query(
        entity="Event",
        format_as="event",
        select=(
            "id", "title", "event_type_id", "event_type_id:label", "start_date", "end_date",
            "max_participants", "is_active", "is_public",
        ),
        filters=(
            Filter("is_active", "is_active"),
            Filter("event_type", "event_type_id:name"),
        ),
        defaults={"is_active": True},
        order_by={"start_date": "ASC"},
        custom_field_entities=("Event",),
    ),
    "get_memberships": Query(
        entity="Membership",
        format_as="membership",
        select=(
            "id", "contact_id", "membership_type_id", "membership_type_id:label", "status_id",
            "status_id:label", "start_date", "end_date", "source",
        ),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("membership_type_id", "membership_type_id"),
            Filter("status_id", "status_id"),
        ),
        order_by={"start_date": "DESC"},
        custom_field_entities=("Membership",),
    ),
    "get_membership_types": Query(
        entity="MembershipType",
        format_as="membership_type",
        select=(
            "id", "name", "member_of_contact_id", "minimum_fee", "duration_unit",
            "duration_interval", "is_active",
        ),
        filters=(
            Filter("membership_type_id", "id"),
            Filter("name", "name"),
            Filter("member_of_contact_id", "member_of_contact_id"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_membership_statuses": Query(
        entity="MembershipStatus",
        format_as="membership_status",
        select=("id", "name", "label", "is_current_member", "is_active"),
        filters=(
            Filter("membership_status_id", "id"),
            Filter("name", "name"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_groups": Query(
        entity="Group",
        format_as="group",
        select=("id", "name", "title", "description", "group_type", "visibility", "is_active"),
        filters=(
            Filter("is_active", "is_active"),
            Filter("group_type", "group_type", "LIKE"),
        ),
        defaults={"is_active": True},
    ),
    "get_group_contacts": Query(
        entity="GroupContact",
        format_as="group_contact",
        select=("id", "group_id", "contact_id", "status"),
        filters=(
            Filter("group_id", "group_id"),
            Filter("contact_id", "contact_id"),
            Filter("status", "status"),
        ),
        limit=50,
    ),
    "get_tags": Query(
        entity="Tag",
        format_as="tag",
        select=("id", "name", "description", "used_for", "is_selectable", "color"),
        filters=(
            Filter("used_for", "used_for", "LIKE"),
            Filter("is_selectable", "is_selectable"),
        ),
    ),
    "get_entity_tags": Query(
        entity="EntityTag",
        format_as="entity_tag",
        select=("id", "entity_table", "entity_id", "tag_id"),
        filters=(
            Filter("entity_table", "entity_table"),
            Filter("entity_id", "entity_id"),
            Filter("tag_id", "tag_id"),
        ),
        limit=50,
    ),
    "get_relationships": Query(
        entity="Relationship",
        format_as="relationship",
        select=(
            "id", "contact_id_a", "contact_id_b", "relationship_type_id",
            "start_date", "end_date", "is_active",
        ),
        filters=(
            Filter("contact_id_a", "contact_id_a"),
            Filter("contact_id_b", "contact_id_b"),
            Filter("relationship_type_id", "relationship_type_id"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_relationship_types": Query(
        entity="RelationshipType",
        format_as="relationship_type",
        select=("id", "name_a_b", "name_b_a", "label_a_b", "label_b_a", "is_active", "description"),
        filters=(
            Filter("relationship_type_id", "id"),
            Filter("name_a_b", "name_a_b"),
            Filter("name_b_a", "name_b_a"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_contact_types": Query(
        entity="ContactType",
        format_as="contact_type",
        select=("id", "name", "label", "parent_id", "is_active", "description"),
        filters=(
            Filter("contact_type_id", "id"),
            Filter("name", "name"),
            Filter("parent_id", "parent_id"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_addresses": Query(
        entity="Address",
        format_as="address",
        select=(
            "id", "contact_id", "street_address", "city", "postal_code",
            "state_province_id", "country_id", "location_type_id", "is_primary",
        ),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("address_id", "id"),
            Filter("location_type_id", "location_type_id"),
            Filter("is_primary", "is_primary"),
        ),
    ),
    "get_emails": Query(
        entity="Email",
        format_as="email",
        select=("id", "contact_id", "email", "location_type_id", "is_primary"),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("email_id", "id"),
            Filter("location_type_id", "location_type_id"),
            Filter("is_primary", "is_primary"),
        ),
    ),
    "get_phones": Query(
        entity="Phone",
        format_as="phone",
        select=("id", "contact_id", "phone", "phone_type_id", "location_type_id", "is_primary"),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("phone_id", "id"),
            Filter("location_type_id", "location_type_id"),
            Filter("phone_type_id", "phone_type_id"),
            Filter("is_primary", "is_primary"),
        ),
    ),
    "get_websites": Query(
        entity="Website",
        format_as="website",
        select=("id", "contact_id", "url", "website_type_id"),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("website_id", "id"),
            Filter("website_type_id", "website_type_id"),
        ),
    ),
    "get_cases": Query(
        entity="Case",
        format_as="case",
        select=(
            "id", "contact_id", "case_type_id", "case_type_id:label", "status_id",
            "status_id:label", "start_date", "end_date", "subject",
        ),
        filters=(
            Filter("contact_id", "contact_id"),
            Filter("case_type_id", "case_type_id"),
            Filter("status_id", "status_id"),
            Filter("is_deleted", "is_deleted"),
        ),
        defaults={"is_deleted": False},
    ),
    "get_campaigns": Query(
        entity="Campaign",
        format_as="campaign",
        select=(
            "id", "name", "title", "campaign_type_id", "campaign_type_id:label", "status_id",
            "status_id:label", "start_date", "end_date", "goal_revenue",
        ),
        filters=(
            Filter("campaign_type_id", "campaign_type_id"),
            Filter("status_id", "status_id"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
    "get_option_values": Query(
        entity="OptionValue",
        format_as="option_value",
        select=("id", "option_group_id", "label", "value", "name", "description", "weight", "is_active"),
        filters=(
            Filter("option_group_id", "option_group_id"),
            Filter("option_group_name", "option_group_id.name"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
        order_by={"weight": "ASC"},
    ),
    "list_option_groups": Query(
        entity="OptionGroup",
        format_as="option_group",
        select=("id", "name", "title", "description", "data_type", "is_active"),
        filters=(Filter("is_active", "is_active"),),
        defaults={"is_active": True},
        order_by={"title": "ASC"},
    ),
    "get_reports": Query(
        entity="ReportTemplate",
        format_as="report",
        select=("id", "label", "description", "name", "value", "component_id:name", "is_active"),
        filters=(
            Filter("component", "component_id:name"),
            Filter("is_active", "is_active"),
        ),
        defaults={"is_active": True},
    ),
}

# Tools for components that may not be installed answer with these instead of failing.
DEGRADED_MESSAGES = {
    "get_cases": "Error accessing cases (CiviCase may not be enabled)",
    "get_campaigns": "Error accessing campaigns (CiviCampaign may not be enabled)",
    "get_reports": "Error accessing reports",
}


def get_handler(query: Query, degraded: Optional[str] = None) -> Handler:
    """Handler for a plain "get" tool."""

    async def handler(client, resolver, arguments):
        try:
            result = await run_query(client, resolver, query, arguments)
        except CiviCRMAPIError as e:
            if degraded is None:
                raise
            logger.warning(f"{query.entity}.get failed: {e}")
            return f"{degraded}: {e}"
        return format_results(result, query.format_as)

    return handler


# =============================================================================
# WRITES
# =============================================================================

Prepare = Callable[[Dict[str, Any]], Dict[str, Any]]


def create_handler(tool_name: str, entity: str, label: str, prepare: Optional[Prepare] = None) -> Handler:
    """Handler for a "create" tool. Custom fields are resolved on the way in."""

    async def handler(client, resolver, arguments):
        entry = parse_arguments(arguments, declared_arguments(tool_name))
        values = await _write_values(resolver, entry)
        if prepare:
            values = prepare(values)
        result = await client.api_v4(entity, "create", {"values": values})
        return f"Successfully created {label} with ID: {created_id(result)}"

    return handler


def update_handler(
    tool_name: str,
    entity: str,
    id_argument: str,
    label: str,
    prepare: Optional[Prepare] = None,
) -> Handler:
    """Handler for an "update" tool keyed by one ID argument."""

    async def handler(client, resolver, arguments):
        entry = parse_arguments(arguments, declared_arguments(tool_name))
        record_id = entry.standard.pop(id_argument, None)
        if record_id is None:
            raise ValueError(f"{id_argument} is required")

        values = await _write_values(resolver, entry)
        if prepare:
            values = prepare(values)
        if not values:
            raise ValueError(f"No fields given to update {label} {record_id}")

        await client.api_v4(entity, "update", {
            "where": [["id", "=", record_id]],
            "values": values,
        })
        return f"Successfully updated {label} ID: {record_id}"

    return handler


def delete_handler(entity: str, id_argument: str, label: str) -> Handler:
    async def handler(client, resolver, arguments):
        record_id = _normalize(id_argument, (arguments or {}).get(id_argument))
        if record_id is None:
            raise ValueError(f"{id_argument} is required")
        await client.api_v4(entity, "delete", {"where": [["id", "=", record_id]]})
        return f"Successfully deleted {label} ID: {record_id}"

    return handler


def _contact_values(values: Dict[str, Any]) -> Dict[str, Any]:
    # Primary email/phone are written through the same joins get_contacts reads.
    if "email" in values:
        values["email_primary.email"] = values.pop("email")
    if "phone" in values:
        values["phone_primary.phone"] = values.pop("phone")
    return values


def _activity_values(values: Dict[str, Any]) -> Dict[str, Any]:
    if "contact_id" in values:
        values["source_contact_id"] = values.pop("contact_id")
    target = values.get("target_contact_id")
    if target is not None and not isinstance(target, list):
        values["target_contact_id"] = [target]
    return values


# =============================================================================
# HAND-WRITTEN HANDLERS
# =============================================================================

async def get_contacts(client, resolver, arguments):
    extra_where = []
    search = (arguments or {}).get("search")
    if search:
        extra_where.append(["OR", [
            ["display_name", "LIKE", f"%{search}%"],
            ["email_primary.email", "LIKE", f"%{search}%"],
        ]])
    result = await run_query(client, resolver, CONTACTS, arguments, extra_where)
    return format_results(result, "contact")


async def list_custom_fields(client, resolver, arguments):
    entity_type = (arguments or {}).get("entity_type") or "Contact"
    await resolver.ensure_loaded()
    return format_custom_fields(resolver.fields_for_entity(entity_type), entity_type)


async def add_contact_to_group(client, resolver, arguments):
    entry = parse_arguments(arguments, declared_arguments("add_contact_to_group"))
    values = {"status": "Added", **{k: v for k, v in entry.standard.items() if v is not None}}
    await client.api_v4("GroupContact", "create", {"values": values})
    return f"Successfully added contact {values.get('contact_id', NA)} to group {values.get('group_id', NA)}"


async def remove_contact_from_group(client, resolver, arguments):
    # A "Removed" GroupContact keeps the membership history; delete would erase it.
    entry = parse_arguments(arguments, declared_arguments("remove_contact_from_group"))
    group_id = entry.standard.get("group_id")
    contact_id = entry.standard.get("contact_id")
    await client.api_v4("GroupContact", "create", {
        "values": {"group_id": group_id, "contact_id": contact_id, "status": "Removed"},
    })
    return f"Successfully removed contact {contact_id} from group {group_id}"


async def add_entity_tag(client, resolver, arguments):
    entry = parse_arguments(arguments, declared_arguments("add_entity_tag"))
    await client.api_v4("EntityTag", "create", {"values": entry.standard})
    return f"Successfully added tag {entry.standard.get('tag_id', NA)} to entity {entry.standard.get('entity_id', NA)}"


async def remove_entity_tag(client, resolver, arguments):
    entry = parse_arguments(arguments, declared_arguments("remove_entity_tag"))
    tag = entry.standard
    await client.api_v4("EntityTag", "delete", {
        "where": [
            ["entity_table", "=", tag.get("entity_table")],
            ["entity_id", "=", tag.get("entity_id")],
            ["tag_id", "=", tag.get("tag_id")],
        ],
    })
    return f"Successfully removed tag {tag.get('tag_id')} from entity {tag.get('entity_id')}"


async def get_contact_summary(client, resolver, arguments):
    """Everything about one contact in a single answer."""
    contact_id = _normalize("contact_id", (arguments or {}).get("contact_id"))
    if contact_id is None:
        raise ValueError("contact_id is required")

    try:
        contact = await run_query(client, resolver, CONTACTS, {"contact_id": contact_id})
        groups = await client.api_v4("GroupContact", "get", {
            "select": ["group_id", "status"],
            "where": [["contact_id", "=", contact_id]],
            "limit": 50,
        })
        relationship_select = ["id", "contact_id_a", "contact_id_b", "relationship_type_id", "is_active"]
        relationships_a = await client.api_v4("Relationship", "get", {
            "select": relationship_select,
            "where": [["contact_id_a", "=", contact_id]],
            "limit": 25,
        })
        relationships_b = await client.api_v4("Relationship", "get", {
            "select": relationship_select,
            "where": [["contact_id_b", "=", contact_id]],
            "limit": 25,
        })
        memberships = await run_query(
            client, resolver, QUERIES["get_memberships"], {"contact_id": contact_id, "limit": 10},
        )
        contributions = await run_query(
            client, resolver, QUERIES["get_contributions"], {"contact_id": contact_id, "limit": 5},
        )
    except CiviCRMAPIError as e:
        logger.warning(f"Contact summary for {contact_id} failed: {e}")
        return f"Error retrieving contact summary: {e}"

    sections = [
        f"=== CONTACT SUMMARY FOR CONTACT {contact_id} ===\n",
        "BASIC CONTACT INFO:\n" + format_results(contact, "contact"),
        "GROUP MEMBERSHIPS:\n" + format_results(groups, "group_contact"),
        "RELATIONSHIPS:\n"
        + "As Contact A:\n" + format_results(relationships_a, "relationship")
        + "As Contact B:\n" + format_results(relationships_b, "relationship"),
        "MEMBERSHIPS:\n" + format_results(memberships, "membership"),
        "RECENT CONTRIBUTIONS:\n" + format_results(contributions, "contribution"),
    ]
    return "\n".join(sections)


async def search_contacts_by_group(client, resolver, arguments):
    group_name = (arguments or {}).get("group_name")
    if not group_name:
        raise ValueError("group_name is required")
    limit = _limit((arguments or {}).get("limit"), 50)

    try:
        groups = await client.api_v4("Group", "get", {
            "select": ["id", "name", "title"],
            "where": [["OR", [
                ["title", "LIKE", f"%{group_name}%"],
                ["name", "LIKE", f"%{group_name}%"],
            ]]],
            "limit": 10,
        })
        matches = groups.get("values") or []
        if not matches:
            return f'No groups found matching "{group_name}"'

        group = matches[0]
        members = await client.api_v4("GroupContact", "get", {
            "select": ["contact_id", "contact_id.display_name", "status"],
            "where": [["group_id", "=", group["id"]], ["status", "=", "Added"]],
            "limit": limit,
        })
    except CiviCRMAPIError as e:
        logger.warning(f"Group search for {group_name!r} failed: {e}")
        return f"Error searching contacts by group: {e}"

    text = f'GROUPS MATCHING "{group_name}":\n' + format_results(groups, "group") + "\n"
    text += f'CONTACTS IN GROUP "{group.get("title")}" ({group.get("name")}):\n'
    text += format_results(members, "group_contact")
    return text


async def system_info(client, resolver, arguments):
    try:
        info = await client.api_v4("System", "get", {})
        checks = await client.api_v4("System", "check", {})
    except CiviCRMAPIError as e:
        logger.warning(f"System info failed: {e}")
        return f"Error retrieving system information: {e}"

    output = "=== CIVICRM SYSTEM INFORMATION ===\n\n"

    values = info.get("values") or []
    if values:
        system = values[0]
        output += f"CiviCRM Version: {system.get('version') or 'Unknown'}\n"
        output += f"CMS: {system.get('uf') or 'Unknown'}\n"
        php = system.get("php")
        if isinstance(php, dict):
            output += f"PHP Version: {php.get('version') or 'Unknown'}\n"
        output += "\n"

    check_values = checks.get("values") or []
    if check_values:
        output += "SYSTEM STATUS CHECKS:\n"
        for check in check_values:
            output += f"- {check.get('title')}: {check.get('severity')}\n"
            if check.get("message"):
                output += f"  {check['message']}\n"

    return output


# =============================================================================
# HANDLER TABLE
# =============================================================================

HANDLERS: Dict[str, Handler] = {
    "get_contacts": get_contacts,
    "create_contact": create_handler("create_contact", "Contact", "contact", _contact_values),
    "update_contact": update_handler("update_contact", "Contact", "contact_id", "contact", _contact_values),
    "get_contact_summary": get_contact_summary,
    "search_contacts_by_group": search_contacts_by_group,
    "list_custom_fields": list_custom_fields,

    "create_address": create_handler("create_address", "Address", "address"),
    "update_address": update_handler("update_address", "Address", "address_id", "address"),
    "delete_address": delete_handler("Address", "address_id", "address"),
    "create_email": create_handler("create_email", "Email", "email"),
    "update_email": update_handler("update_email", "Email", "email_id", "email"),
    "delete_email": delete_handler("Email", "email_id", "email"),
    "create_phone": create_handler("create_phone", "Phone", "phone"),
    "update_phone": update_handler("update_phone", "Phone", "phone_id", "phone"),
    "delete_phone": delete_handler("Phone", "phone_id", "phone"),
    "create_website": create_handler("create_website", "Website", "website"),
    "update_website": update_handler("update_website", "Website", "website_id", "website"),
    "delete_website": delete_handler("Website", "website_id", "website"),

    "create_activity": create_handler("create_activity", "Activity", "activity", _activity_values),
    "update_activity": update_handler("update_activity", "Activity", "activity_id", "activity", _activity_values),
    "create_contribution": create_handler("create_contribution", "Contribution", "contribution"),
    "update_contribution": update_handler("update_contribution", "Contribution", "contribution_id", "contribution"),
    "create_membership": create_handler("create_membership", "Membership", "membership"),

    "add_contact_to_group": add_contact_to_group,
    "remove_contact_from_group": remove_contact_from_group,
    "add_entity_tag": add_entity_tag,
    "remove_entity_tag": remove_entity_tag,

    "system_info": system_info,
}

for _name, _query in QUERIES.items():
    HANDLERS[_name] = get_handler(_query, DEGRADED_MESSAGES.get(_name))
