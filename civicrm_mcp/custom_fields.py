"""
Custom Field Resolver - How human field names become CiviCRM field names.

CiviCRM custom fields live in custom groups, and APIv4 only accepts them as
"<group name>.<field name>", e.g. "Volunteer_Info.Interest_Area". People (and
agents) say "Volunteer Interest". The resolver bridges the two:

1. On first need, fetch every active CustomField definition once
2. Index each field by its label AND its short name (both lowercased)
3. Answer lookups from memory for the rest of the process

If the fetch fails, the resolver stays empty and every lookup simply misses,
so tools keep working with standard fields only.
"""

import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List, Tuple

logger = logging.getLogger("civicrm_mcp.custom_fields")

CUSTOM_FIELD_SELECT = [
    "id",
    "name",
    "label",
    "custom_group_id.name",
    "custom_group_id.extends",
    "data_type",
    "html_type",
]


@dataclass(frozen=True)
class CustomFieldDescriptor:
    """One custom field as CiviCRM defines it."""
    id: Any
    name: str                       # short name, e.g. "Interest_Area"
    label: str                      # human label, not unique across groups
    group: str                      # owning custom group name
    extends: Optional[str] = None   # entity type, e.g. "Contact", "Activity"
    data_type: Optional[str] = None
    html_type: Optional[str] = None

    @property
    def api_name(self) -> str:
        """The identifier APIv4 accepts in select/where/values."""
        return f"{self.group}.{self.name}"

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "CustomFieldDescriptor":
        """Build from a CustomField.get record.

        Raises:
            ValueError: if the field or group name is missing or not a string
        """
        name = record.get("name")
        group = record.get("custom_group_id.name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"field name must be a non-empty string, got {name!r}")
        if not isinstance(group, str) or not group:
            raise ValueError(f"group name must be a non-empty string, got {group!r}")

        label = record.get("label")
        return cls(
            id=record.get("id"),
            name=name,
            label=label if isinstance(label, str) and label else name,
            group=group,
            extends=record.get("custom_group_id.extends"),
            data_type=record.get("data_type"),
            html_type=record.get("html_type"),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["api_name"] = self.api_name
        return data


class CustomFieldResolver:
    """Process-wide cache of custom field metadata.

    Owns two maps:
        _fields:  api_name -> CustomFieldDescriptor (in load order)
        _aliases: lowercased label or short name -> api_name

    Usage:
        resolver = CustomFieldResolver(client)
        await resolver.ensure_loaded()
        resolver.resolve("volunteer interest")  # "Volunteer_Info.Interest_Area"
    """

    def __init__(self, client):
        self._client = client
        self._fields: Dict[str, CustomFieldDescriptor] = {}
        self._aliases: Dict[str, str] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._fields)

    async def ensure_loaded(self) -> None:
        """Make sure field metadata has been fetched.

        Best-effort: never raises. A failed fetch leaves the resolver empty
        and the next call tries again. Concurrent callers wait on the same
        fetch instead of issuing their own.
        """
        if self._loaded:
            return
        async with self._lock:
            if self._loaded:
                return
            self._loaded = await self._load()

    async def _load(self) -> bool:
        """Fetch all active custom fields. Returns False on failure."""
        try:
            response = await self._client.api_v4("CustomField", "get", {
                "select": CUSTOM_FIELD_SELECT,
                "where": [["is_active", "=", True]],
                "limit": 0,
            })
            records = response.get("values") or []
        except Exception as e:
            logger.error(f"Failed to load custom fields: {e}")
            return False

        fields: Dict[str, CustomFieldDescriptor] = {}
        aliases: Dict[str, str] = {}
        for record in records:
            try:
                field = CustomFieldDescriptor.from_api(record)
                label_key = field.label.lower()
                name_key = field.name.lower()
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed custom field record {record!r}: {e}")
                continue

            # Labels can repeat across groups; the later field takes the alias.
            aliases[label_key] = field.api_name
            aliases[name_key] = field.api_name
            fields[field.api_name] = field

        self._fields.update(fields)
        self._aliases.update(aliases)
        logger.info(f"Loaded {len(fields)} custom fields")
        return True

    def resolve(self, human_name: str) -> Optional[str]:
        """Look up a label or short name. None if unknown."""
        if not isinstance(human_name, str):
            return None
        return self._aliases.get(human_name.lower())

    def fields_for_entity(self, entity_type: str) -> List[CustomFieldDescriptor]:
        """All known custom fields extending entity_type, in load order."""
        return [f for f in self._fields.values() if f.extends == entity_type]

    def split_standard_and_custom(self, attributes: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Partition a flat key/value map.

        Keys that resolve go into the custom map under their api_name; the
        rest stay in the standard map under their original key. If two keys
        resolve to the same field, the later one wins.
        """
        standard: Dict[str, Any] = {}
        custom: Dict[str, Any] = {}
        for key, value in attributes.items():
            api_name = self.resolve(key)
            if api_name:
                custom[api_name] = value
            else:
                standard[key] = value
        return standard, custom

    def translate(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """Split and merge back into one map ready for a "values" payload."""
        standard, custom = self.split_standard_and_custom(attributes)
        return {**standard, **custom}
