"""
Result formatting - turning CiviCRM records into text an agent can read.

Each entity gets a fixed field order. Anything left over with a dot in its
key (custom fields, joined labels) is appended after the fixed fields.
"""

from typing import Any, Dict, List, Tuple

from civicrm_mcp.custom_fields import CustomFieldDescriptor

NA = "N/A"

# Joins used for contact email/phone are already shown in the fixed fields.
_HIDDEN_PREFIXES = ("email_primary.", "phone_primary.")


def _value(item: dict, *keys: str) -> Any:
    """First truthy value among keys, else N/A."""
    for key in keys:
        value = item.get(key)
        if value or value == 0 and not isinstance(value, bool):
            return value
    return NA


def _yes_no(item: dict, key: str) -> str:
    return "Yes" if item.get(key) else "No"


def _duration(item: dict) -> str:
    return f"{_value(item, 'duration_interval')} {_value(item, 'duration_unit')}"


# entity -> [(label, keys or callable)]
ENTITY_LAYOUTS: Dict[str, List[Tuple[str, Any]]] = {
    "contact": [
        ("Name", ("display_name",)),
        ("Type", ("contact_type",)),
        ("Email", ("email_primary.email",)),
        ("Phone", ("phone_primary.phone",)),
    ],
    "activity": [
        ("Subject", ("subject",)),
        ("Type", ("activity_type_id:label", "activity_type_id")),
        ("Status", ("status_id:label", "status_id")),
        ("Date", ("activity_date_time",)),
        ("Contact ID", ("source_contact_id",)),
        ("Details", ("details",)),
    ],
    "contribution": [
        ("Contact ID", ("contact_id",)),
        ("Amount", ("total_amount",)),
        ("Financial Type", ("financial_type_id:label", "financial_type_id")),
        ("Status", ("contribution_status_id:label", "contribution_status_id")),
        ("Receive Date", ("receive_date",)),
        ("Source", ("source",)),
    ],
    "event": [
        ("Title", ("title",)),
        ("Event Type", ("event_type_id:label", "event_type_id")),
        ("Start Date", ("start_date",)),
        ("End Date", ("end_date",)),
        ("Max Participants", ("max_participants",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Public", lambda item: _yes_no(item, "is_public")),
    ],
    "membership": [
        ("Contact ID", ("contact_id",)),
        ("Type", ("membership_type_id:label", "membership_type_id")),
        ("Status", ("status_id:label", "status_id")),
        ("Start Date", ("start_date",)),
        ("End Date", ("end_date",)),
        ("Source", ("source",)),
    ],
    "case": [
        ("Contact ID", ("contact_id",)),
        ("Case Type", ("case_type_id:label", "case_type_id")),
        ("Status", ("status_id:label", "status_id")),
        ("Start Date", ("start_date",)),
        ("End Date", ("end_date",)),
        ("Subject", ("subject",)),
    ],
    "campaign": [
        ("Name", ("name",)),
        ("Title", ("title",)),
        ("Type", ("campaign_type_id:label", "campaign_type_id")),
        ("Status", ("status_id:label", "status_id")),
        ("Start Date", ("start_date",)),
        ("End Date", ("end_date",)),
        ("Goal Revenue", ("goal_revenue",)),
    ],
    "group": [
        ("Name", ("name",)),
        ("Title", ("title",)),
        ("Type", ("group_type",)),
        ("Visibility", ("visibility",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
    "group_contact": [
        ("Group ID", ("group_id",)),
        ("Contact ID", ("contact_id",)),
        ("Status", ("status",)),
    ],
    "tag": [
        ("Name", ("name",)),
        ("Used For", ("used_for",)),
        ("Selectable", lambda item: _yes_no(item, "is_selectable")),
        ("Color", ("color",)),
        ("Description", ("description",)),
    ],
    "entity_tag": [
        ("Entity Table", ("entity_table",)),
        ("Entity ID", ("entity_id",)),
        ("Tag ID", ("tag_id",)),
    ],
    "relationship": [
        ("Contact A ID", ("contact_id_a",)),
        ("Contact B ID", ("contact_id_b",)),
        ("Type ID", ("relationship_type_id",)),
        ("Start Date", ("start_date",)),
        ("End Date", ("end_date",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
    ],
    "relationship_type": [
        ("Name A to B", ("name_a_b",)),
        ("Name B to A", ("name_b_a",)),
        ("Label A to B", ("label_a_b",)),
        ("Label B to A", ("label_b_a",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
    "address": [
        ("Contact ID", ("contact_id",)),
        ("Street", ("street_address",)),
        ("City", ("city",)),
        ("Postal Code", ("postal_code",)),
        ("Primary", lambda item: _yes_no(item, "is_primary")),
    ],
    "email": [
        ("Contact ID", ("contact_id",)),
        ("Email", ("email",)),
        ("Primary", lambda item: _yes_no(item, "is_primary")),
    ],
    "phone": [
        ("Contact ID", ("contact_id",)),
        ("Phone", ("phone",)),
        ("Type", ("phone_type_id",)),
        ("Primary", lambda item: _yes_no(item, "is_primary")),
    ],
    "website": [
        ("Contact ID", ("contact_id",)),
        ("URL", ("url",)),
        ("Type", ("website_type_id",)),
    ],
    "contact_type": [
        ("Name", ("name",)),
        ("Label", ("label",)),
        ("Parent ID", ("parent_id",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
    "membership_type": [
        ("Name", ("name",)),
        ("Member Of", ("member_of_contact_id",)),
        ("Minimum Fee", ("minimum_fee",)),
        ("Duration", _duration),
    ],
    "membership_status": [
        ("Name", ("name",)),
        ("Label", ("label",)),
        ("Current Member", lambda item: _yes_no(item, "is_current_member")),
    ],
    "option_value": [
        ("Label", ("label",)),
        ("Value", ("value",)),
        ("Name", ("name",)),
        ("Group ID", ("option_group_id",)),
        ("Weight", ("weight",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
    "option_group": [
        ("Name", ("name",)),
        ("Title", ("title",)),
        ("Data Type", ("data_type",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
    "report": [
        ("Label", ("label",)),
        ("Component", ("component_id:name",)),
        ("Class", ("name",)),
        ("URL", ("value",)),
        ("Active", lambda item: _yes_no(item, "is_active")),
        ("Description", ("description",)),
    ],
}


def _records(result: Any) -> List[dict]:
    if isinstance(result, dict):
        values = result.get("values", [])
    else:
        values = result
    if values is None:
        return []
    if isinstance(values, dict):
        return [values]
    return list(values)


def format_entity(item: dict, entity_type: str) -> str:
    """One record as a block of "Label: value" lines."""
    lines = [f"ID: {_value(item, 'id')}"]
    layout = ENTITY_LAYOUTS.get(entity_type)
    shown = {"id"}

    if layout is None:
        for key, value in item.items():
            if key != "id" and "." not in key and value is not None:
                lines.append(f"{key}: {value}")
    else:
        for label, source in layout:
            if callable(source):
                lines.append(f"{label}: {source(item)}")
            else:
                lines.append(f"{label}: {_value(item, *source)}")
                shown.update(source)

    for key, value in item.items():
        if key in shown or "." not in key or key.startswith(_HIDDEN_PREFIXES):
            continue
        lines.append(f"{key}: {NA if value in (None, '') else value}")

    return "\n".join(lines) + "\n"


def format_results(result: Any, entity_type: str) -> str:
    """All records with a count header. Zero records gives the header only."""
    items = _records(result)
    text = f"Found {len(items)} {entity_type}(s):\n\n"
    for item in items:
        text += format_entity(item, entity_type) + "\n"
    return text


def format_custom_fields(fields: List[CustomFieldDescriptor], entity_type: str) -> str:
    if not fields:
        return f"No custom fields found for {entity_type}"

    blocks = []
    for field in fields:
        blocks.append(
            f"Label: {field.label}\n"
            f"Field Name: {field.name}\n"
            f"API Name: {field.api_name}\n"
            f"Data Type: {field.data_type or NA}\n"
            f"Input Type: {field.html_type or NA}\n"
            f"Group: {field.group}\n"
        )
    return f"Custom fields for {entity_type}:\n\n" + "\n".join(blocks)


def created_id(result: Any) -> Any:
    """ID of the record a create call returned."""
    values = result.get("values") if isinstance(result, dict) else result
    if isinstance(values, list) and values:
        return values[0].get("id", NA)
    if isinstance(values, dict) and values.get("id") is not None:
        return values["id"]
    if isinstance(result, dict) and result.get("id") is not None:
        return result["id"]
    return NA
