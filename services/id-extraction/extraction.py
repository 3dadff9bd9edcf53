"""Extraction orchestrator — call the vision model, parse JSON, reconcile records.

Linear pipeline: validate -> inference -> parse -> map -> raw upsert ->
profile insert-or-update. Nothing is retried and nothing is rolled back.
"""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from errors import ExtractionParseError
from mapping import build_raw_record
from models import UNMAPPED_KEY, ExtractedFields, ExtractionRequest, ExtractionSuccess
from reconciler import reconcile_profile
from store import ProfileStore, RawDataStore
from vision_client import VisionClient

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def extract_and_reconcile(
    payload: Any,
    vision_client: VisionClient,
    raw_store: RawDataStore,
    profile_store: ProfileStore,
    now: Callable[[], str] = utc_now,
) -> ExtractionSuccess:
    """Run the full pipeline for one request body.

    Raises a ReconciliationError subclass at the first failing stage.
    """
    request = ExtractionRequest.from_payload(payload)
    logger.info(
        "Processing ID extraction for user %s, type: %s",
        request.user_id,
        request.id_type,
    )

    content = vision_client.complete(request.image_url, request.id_type)
    logger.info("Inference response received (%d chars)", len(content))

    fields = parse_extracted_fields(content)
    extracted_at = now()

    record = build_raw_record(fields, request.id_type, request.image_url, extracted_at)
    raw_store.upsert_raw_data(request.user_id, record, extracted_at)
    logger.info("Raw extraction saved for user %s", request.user_id)

    action, row = reconcile_profile(profile_store, request.user_id, fields, extracted_at)

    return ExtractionSuccess(
        data=fields.to_payload(),
        personal_data_action=action,
        personal_data_result=row,
        message=f"ID data extracted successfully and personal data {action}",
    )


def parse_extracted_fields(raw: str) -> ExtractedFields:
    """Read the model's completion text into ExtractedFields."""
    parsed = try_parse_json(raw)
    if parsed is None:
        raise ExtractionParseError("Failed to parse extracted data from OpenAI response")

    fields = ExtractedFields.model_validate(parsed)

    unmapped = fields.to_payload().get(UNMAPPED_KEY)
    if unmapped:
        logger.warning("Moved %d unfit values to %s", len(unmapped), UNMAPPED_KEY)

    logger.info(
        "Parsed %d populated fields",
        sum(1 for value in fields.to_payload().values() if value not in (None, "")),
    )
    return fields


def try_parse_json(raw: str) -> dict | None:
    """Try to extract a JSON object from the model output.

    Handles: direct JSON and markdown fences (```json or bare ```).
    """
    if not raw:
        return None

    cleaned = raw.strip()

    # Try direct parse first
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    # Try to find JSON block in markdown code fences
    match = _FENCE_RE.search(cleaned)
    if match:
        try:
            result = json.loads(match.group(1).strip())
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass

    # Never log the content itself: it holds personal data
    logger.warning("Could not parse JSON from model response (%d chars)", len(cleaned))
    return None
