"""Profile reconciliation: decide insert vs. update and apply field defaults."""

import logging
from typing import Any, Literal

from mapping import map_id_type
from models import ExtractedFields
from store import ProfileStore

logger = logging.getLogger(__name__)

ProfileAction = Literal["inserted", "updated"]

# Required profile columns are never stored as null
REQUIRED_FIELD_DEFAULTS: dict[str, str] = {
    "id_type": "autre",
    "id_number": "",
    "id_issue_date": "2020-01-01",
    "id_expiry_date": "2030-01-01",
    "first_name": "",
    "last_name": "",
    "birth_date": "1990-01-01",
    "birth_place": "",
    "nationality": "Congolaise (RDC)",
    "country_of_residence": "République Démocratique du Congo",
    "permanent_address": "",
}

# Profile column -> ExtractedFields attribute
REQUIRED_FIELD_SOURCES: dict[str, str] = {
    "id_type": "id_type",
    "id_number": "id_number",
    "id_issue_date": "issue_date",
    "id_expiry_date": "expiry_date",
    "first_name": "first_name",
    "last_name": "last_name",
    "birth_date": "birth_date",
    "birth_place": "birth_place",
    "nationality": "nationality",
    "country_of_residence": "country",
    "permanent_address": "address",
}

# Written only when extraction produced a value
OPTIONAL_FIELD_SOURCES: dict[str, str] = {
    "middle_name": "middle_name",
    "province_of_origin": "province_of_origin",
    "phone_2": "phone",
    "email_2": "email",
}


def build_profile_payload(fields: ExtractedFields) -> dict[str, Any]:
    """Build the column values written to the profile row.

    Required columns get the extracted value or their default; optional
    columns are present only when the extraction produced a non-empty value.
    """
    payload: dict[str, Any] = {}

    for column, source in REQUIRED_FIELD_SOURCES.items():
        value = fields.value_of(source)
        payload[column] = value if value is not None else REQUIRED_FIELD_DEFAULTS[column]

    # The model reports the type in caller vocabulary (passport, national-id, ...)
    payload["id_type"] = map_id_type(payload["id_type"])

    for column, source in OPTIONAL_FIELD_SOURCES.items():
        value = fields.value_of(source)
        if value is not None:
            payload[column] = value

    return payload


def reconcile_profile(
    store: ProfileStore,
    user_id: str,
    fields: ExtractedFields,
    now: str,
) -> tuple[ProfileAction, dict[str, Any]]:
    """Insert the profile for ``user_id`` or update the existing one.

    Returns the action taken and the stored row. Store failures propagate as
    PersistenceError.
    """
    existing = store.get_profile(user_id)

    payload = build_profile_payload(fields)
    payload["updated_at"] = now

    if existing is None:
        row = store.insert_profile({"id": user_id, **payload})
        action: ProfileAction = "inserted"
    else:
        row = store.update_profile(user_id, payload)
        action = "updated"

    logger.info(
        "Personal data %s for user %s (%d optional columns written)",
        action,
        user_id,
        sum(1 for column in OPTIONAL_FIELD_SOURCES if column in payload),
    )
    return action, row
