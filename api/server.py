"""
EMS Dispatch Allocation API
===========================
FastAPI backend exposing the ambulance allocation contract and the facility
upload parser to the dashboard front end.

Run:
    uvicorn api.server:app --port 8000
"""

import io
import logging
from functools import lru_cache

import uvicorn
from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.schemas import AllocationRequest, AllocationResponse, UploadResponse, ErrorResponse
from config.settings import load_rule_config
from data.loader import parse_allocation_payload, load_facility_upload
from engine.analytics import compute_facility_analytics
from engine.errors import AllocationError, InvalidInputError, UpstreamUnavailableError
from engine.strategies import AllocationStrategy, get_strategy

RULE_CONFIG = load_rule_config()

logging.basicConfig(level=RULE_CONFIG["log_level"])
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Failed to process allocation request"

app = FastAPI(title="EMS Dispatch Allocation API", version="1.0")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ── dependencies ──────────────────────────────────────────────────────────────

def get_rule_config() -> dict:
    return RULE_CONFIG


@lru_cache(maxsize=8)
def _build_strategy(config_items: tuple) -> AllocationStrategy:
    return get_strategy(dict(config_items))


def get_allocation_strategy(rule_config: dict = Depends(get_rule_config)) -> AllocationStrategy:
    """One strategy (and one OpenAI client) per distinct rule config."""
    try:
        return _build_strategy(tuple(sorted(rule_config.items())))
    except ValueError as e:
        logger.error("Invalid allocation strategy configuration: %s", e)
        raise AllocationError(INTERNAL_ERROR) from e


# ── error mapping ─────────────────────────────────────────────────────────────

@app.exception_handler(InvalidInputError)
def invalid_input_handler(request, exc: InvalidInputError):
    logger.info("Rejected %s: %s (%s)", request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=400, content=exc.to_response())


@app.exception_handler(UpstreamUnavailableError)
def upstream_unavailable_handler(request, exc: UpstreamUnavailableError):
    logger.warning("Upstream unavailable on %s: %s (%s)", request.url.path, exc.message, exc.details)
    details = f"{exc.message}: {exc.details}" if exc.details else exc.message
    return JSONResponse(status_code=502, content={"error": "Language model allocation unavailable", "details": details})


@app.exception_handler(AllocationError)
def allocation_error_handler(request, exc: AllocationError):
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body') or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request format", "details": problems})


# ── API endpoints ─────────────────────────────────────────────────────────────

@app.get("/api/health")
def health(rule_config: dict = Depends(get_rule_config)):
    return {"status": "ok", "strategy": rule_config.get("allocation_strategy")}


@app.post("/api/allocate-ambulances", response_model=AllocationResponse, responses=ERROR_RESPONSES)
def allocate_ambulances(
    request: AllocationRequest,
    strategy: AllocationStrategy = Depends(get_allocation_strategy),
):
    """Recommend which facilities (or bookings) receive the available ambulances."""
    try:
        records, available = parse_allocation_payload(request.model_dump())
        logger.info(
            "Processing allocation for %d records with %d ambulances (%s)",
            len(records), available, strategy.name,
        )
        result = strategy.allocate(records, available)
    except AllocationError:
        raise
    except Exception:
        logger.exception("Error in ambulance allocation")
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

    logger.info("Allocation complete. %d records were allocated ambulances", len(result.allocated_ids))
    return result.to_response()


@app.post("/api/facilities/upload", response_model=UploadResponse, responses=ERROR_RESPONSES)
def upload_facilities(file: UploadFile = File(...)):
    """Parse a JSON, CSV or Excel facility file into records plus analytics."""
    filename = file.filename or ""
    try:
        content = io.BytesIO(file.file.read())
        records, available, warnings = load_facility_upload(content, filename=filename)
    except AllocationError:
        raise
    except ValueError as e:
        raise InvalidInputError("Failed to parse facility file", str(e)) from e
    except Exception:
        logger.exception("Error parsing upload %s", filename)
        return JSONResponse(status_code=500, content={"error": "Failed to process facility file"})

    logger.info("Parsed %d facilities from %s", len(records), filename)
    return {
        "facilities": [r.to_dict() for r in records],
        "availableAmbulances": available,
        "analytics": compute_facility_analytics(records),
        "warnings": warnings,
    }


if __name__ == "__main__":
    uvicorn.run(app, host=RULE_CONFIG["api_host"], port=RULE_CONFIG["api_port"])
