"""OpenAI-backed dispatcher: prompt building, the forced tool call, response checks."""

import json
import logging
from typing import List, Optional, Sequence, Tuple

from openai import OpenAI, OpenAIError

from models.facility import FacilityRecord
from engine.errors import UpstreamUnavailableError
from config.defaults import OPENAI_MODEL, LLM_TIMEOUT_SECONDS, LLM_MAX_RETRIES, LLM_TEMPERATURE

logger = logging.getLogger(__name__)

TOOL_NAME = "allocate_ambulances"

SYSTEM_PROMPT = """You are an emergency medical services dispatcher AI. Your job is to allocate ambulances optimally based on priority, operational status, population served, road condition and available resources.

Guidelines:
- Critical priority facilities are served first, then High, Medium and Low
- Within a priority tier prefer Operational over Partially Operational over Grounded facilities
- Then prefer facilities serving a larger population, then better road conditions
- Allocate at most one ambulance per facility
- Allocate no more than the available number of ambulances
- Return only facility IDs taken from the request"""

ALLOCATION_TOOL = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Allocate available ambulances to the most critical facilities",
        "parameters": {
            "type": "object",
            "properties": {
                "allocations": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Facility IDs that should receive an ambulance, in priority order",
                },
                "reasoning": {
                    "type": "string",
                    "description": "Explanation of the allocation decisions",
                },
            },
            "required": ["allocations", "reasoning"],
        },
    },
}


def build_messages(records: Sequence[FacilityRecord], available_ambulances: int) -> List[dict]:
    """Chat messages carrying the ambulance count and the facility snapshot."""
    payload = json.dumps([r.to_dict() for r in records])
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"I have {available_ambulances} ambulances available and these facilities "
                f"awaiting allocation: {payload}"
            ),
        },
    ]


def create_client(rule_config: Optional[dict] = None) -> OpenAI:
    """OpenAI client with the configured timeout and bounded retries (exponential backoff)."""
    cfg = rule_config or {}
    try:
        return OpenAI(
            api_key=cfg.get("openai_api_key"),
            timeout=cfg.get("llm_timeout_seconds", LLM_TIMEOUT_SECONDS),
            max_retries=cfg.get("llm_max_retries", LLM_MAX_RETRIES),
        )
    except OpenAIError as e:
        # Raised when no API key is configured
        raise UpstreamUnavailableError("Language model client is not configured", str(e)) from e


def request_allocation(
    client,
    records: Sequence[FacilityRecord],
    available_ambulances: int,
    rule_config: Optional[dict] = None,
) -> str:
    """Call the chat API with the allocation tool forced. Returns the raw tool arguments."""
    cfg = rule_config or {}
    model = cfg.get("openai_model", OPENAI_MODEL)
    try:
        response = client.chat.completions.create(
            model=model,
            messages=build_messages(records, available_ambulances),
            tools=[ALLOCATION_TOOL],
            tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
            temperature=cfg.get("llm_temperature", LLM_TEMPERATURE),
        )
    except OpenAIError as e:
        logger.warning("Language model call failed (model=%s): %s", model, e)
        raise UpstreamUnavailableError("Language model request failed", str(e)) from e

    if not response.choices:
        raise UpstreamUnavailableError("Failed to get allocation recommendations", "response had no choices")
    tool_calls = response.choices[0].message.tool_calls or []
    for call in tool_calls:
        if call.function.name == TOOL_NAME:
            return call.function.arguments
    raise UpstreamUnavailableError(
        "Failed to get allocation recommendations",
        f"response did not call '{TOOL_NAME}'",
    )


def parse_allocation_arguments(
    raw_arguments: str,
    records: Sequence[FacilityRecord],
    available_ambulances: int,
) -> Tuple[List[str], str]:
    """Decode and check the tool arguments against the request they answer."""
    try:
        arguments = json.loads(raw_arguments)
    except (TypeError, ValueError) as e:
        raise UpstreamUnavailableError("Language model returned unparseable content", str(e)) from e

    if not isinstance(arguments, dict):
        raise UpstreamUnavailableError("Language model returned unparseable content", "arguments are not an object")

    allocations = arguments.get("allocations")
    reasoning = arguments.get("reasoning")
    if not isinstance(allocations, list) or not all(isinstance(a, str) for a in allocations):
        raise UpstreamUnavailableError("Language model response is malformed", "'allocations' must be a list of strings")
    if not isinstance(reasoning, str):
        raise UpstreamUnavailableError("Language model response is malformed", "'reasoning' must be a string")

    known_ids = {r.facility_id for r in records}
    unknown = [a for a in allocations if a not in known_ids]
    if unknown:
        raise UpstreamUnavailableError(
            "Language model response is malformed",
            f"unknown facility IDs: {', '.join(unknown)}",
        )
    if len(set(allocations)) != len(allocations):
        raise UpstreamUnavailableError("Language model response is malformed", "duplicate facility IDs")
    if len(allocations) > available_ambulances:
        raise UpstreamUnavailableError(
            "Language model response is malformed",
            f"{len(allocations)} allocations exceed the {available_ambulances} available ambulances",
        )

    return allocations, reasoning
