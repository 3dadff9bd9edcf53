"""FastAPI ID extraction service — reads identity documents into personal data.

Receives a signed image URL, asks the vision model for the document fields,
stores the raw extraction and reconciles the user's personal_data row.
GDPR: image content and extracted personal fields are never logged.
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from config import settings
from errors import ReconciliationError
from extraction import extract_and_reconcile
from models import ExtractionFailure
from store import SupabaseStore
from vision_client import VisionClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

EXTRACT_PATHS = ("/extract-id-data", "/functions/v1/extract-id-data")

_vision_client: VisionClient | None = None
_store: SupabaseStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the inference and database clients from settings."""
    global _vision_client, _store

    _vision_client = VisionClient()
    _store = SupabaseStore()

    if not _vision_client.configured:
        logger.info("OPENAI_API_KEY is empty — ID extraction requests will fail")
    if not _store.configured:
        logger.info("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is empty — persistence disabled")

    yield

    _vision_client.close()
    _store.close()


app = FastAPI(title="ID Extraction Service", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def _failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ExtractionFailure(error=message).model_dump(),
    )


async def preflight():
    """CORS preflight."""
    return PlainTextResponse("ok")


async def extract_id_data(request: Request):
    """Extract ID document fields and reconcile them into personal data."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.error("Error in extract-id-data: request body is not valid JSON")
        return _failure("Request body must be a JSON object")

    try:
        if _vision_client is None or _store is None:
            raise RuntimeError("Service clients are not initialized")

        result = await run_in_threadpool(
            extract_and_reconcile,
            payload,
            _vision_client,
            _store,
            _store,
        )
    except ReconciliationError as e:
        logger.error("Error in extract-id-data (%s stage): %s", e.stage, e)
        return _failure(str(e) or "An error occurred during ID extraction")
    except Exception:
        logger.exception("Unexpected error in extract-id-data")
        return _failure("An error occurred during ID extraction")

    return JSONResponse(status_code=200, content=result.model_dump(by_alias=True))


for _path in EXTRACT_PATHS:
    app.add_api_route(_path, extract_id_data, methods=["POST"])
    app.add_api_route(_path, preflight, methods=["OPTIONS"])


@app.get("/health")
async def health():
    """Return service status and which backends are configured."""
    return {
        "status": "healthy",
        "inference_configured": _vision_client is not None and _vision_client.configured,
        "persistence_configured": _store is not None and _store.configured,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
