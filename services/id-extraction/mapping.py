"""Document-type normalization and raw extraction record assembly."""

from typing import Any

from models import ExtractedFields

# Caller aliases and canonical values both resolve to the canonical value
ID_TYPE_MAP: dict[str, str] = {
    "passport": "passeport",
    "driver-license": "permis_conduire",
    "national-id": "carte_identite",
    "voter-card": "carte_electeur",
    "passeport": "passeport",
    "permis_conduire": "permis_conduire",
    "carte_identite": "carte_identite",
    "carte_electeur": "carte_electeur",
}


def map_id_type(id_type: str) -> str:
    """Return the canonical document type; unknown values pass through unchanged."""
    return ID_TYPE_MAP.get(id_type, id_type)


def build_raw_record(
    fields: ExtractedFields,
    id_type: str,
    image_url: str,
    extracted_at: str,
) -> dict[str, Any]:
    """Extraction payload annotated with provenance, stored as-is in the raw table."""
    return {
        **fields.to_payload(),
        "idType": map_id_type(id_type),
        "uploadedImageUrl": image_url,
        "extractedAt": extracted_at,
        "originalIdType": id_type,
    }
