from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Tuple

from ..core.constants import PLACEHOLDER_AVATAR_URL
from ..core.enums import EntityKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TaxonomyDimension:
    """A categorical column whose values are kept in the taxonomy store."""

    name: str
    header: str


@dataclass(frozen=True)
class EntityConfig:
    """Everything the import pipeline needs to know about one record kind.

    Header names are stored normalized (lower-case, no whitespace); each
    optional header maps to the record column it fills.
    """

    kind: EntityKind
    label: str
    table: str
    required_fields: Tuple[str, ...]
    optional_fields: Tuple[Tuple[str, str], ...]
    taxonomy_dimensions: Tuple[TaxonomyDimension, ...]
    status_setting_key: str
    fallback_status: str
    display_headers: Mapping[str, str]
    template_row: Tuple[str, ...]
    avatar_prefix: str = PLACEHOLDER_AVATAR_URL

    @property
    def template_headers(self) -> Tuple[str, ...]:
        names = self.required_fields + tuple(h for h, _ in self.optional_fields)
        return tuple(self.display_headers.get(h, h) for h in names)


PARTICIPANT = EntityConfig(
    kind=EntityKind.PARTICIPANT,
    label="participants",
    table="participants",
    required_fields=("name", "organization", "category"),
    optional_fields=(
        ("country", "country"),
        ("classgrade", "class_grade"),
        ("email", "email"),
        ("phone", "phone"),
        ("notes", "notes"),
        ("additionaldetails", "additional_details"),
    ),
    taxonomy_dimensions=(
        TaxonomyDimension(name="organization", header="organization"),
        TaxonomyDimension(name="category", header="category"),
    ),
    status_setting_key="default_participant_status",
    fallback_status="Absent",
    display_headers={
        "name": "Name",
        "organization": "Organization",
        "category": "Category",
        "country": "Country",
        "classgrade": "Class Grade",
        "email": "Email",
        "phone": "Phone",
        "notes": "Notes",
        "additionaldetails": "Additional Details",
    },
    template_row=(
        "Jane Doe",
        "International School of Example",
        "Security Council",
        "United States",
        "10th Grade",
        "jane.doe@example.com",
        "+1-555-1234",
        "Prefers aisle seat",
        "Vegetarian, no nuts",
    ),
)

STAFF = EntityConfig(
    kind=EntityKind.STAFF,
    label="staff members",
    table="staff_members",
    required_fields=("name", "role"),
    optional_fields=(
        ("department", "department"),
        ("team", "team"),
        ("email", "email"),
        ("phone", "phone"),
        ("contactinfo", "contact_info"),
        ("notes", "notes"),
    ),
    taxonomy_dimensions=(TaxonomyDimension(name="team", header="team"),),
    status_setting_key="default_staff_status",
    fallback_status="Off Duty",
    display_headers={
        "name": "Name",
        "role": "Role",
        "department": "Department",
        "team": "Team",
        "email": "Email",
        "phone": "Phone",
        "contactinfo": "Contact Info",
        "notes": "Notes",
    },
    template_row=(
        "John Smith",
        "Logistics Coordinator",
        "Operations",
        "Venue Team",
        "john.smith@example.com",
        "+1-555-9876",
        "Radio channel 4",
        "Morning shift",
    ),
)

ENTITIES: Mapping[EntityKind, EntityConfig] = {
    EntityKind.PARTICIPANT: PARTICIPANT,
    EntityKind.STAFF: STAFF,
}


def get_entity(kind: str | EntityKind) -> EntityConfig:
    try:
        return ENTITIES[EntityKind(kind)]
    except ValueError:
        raise ValidationError(f"Unknown record type: {kind}")
