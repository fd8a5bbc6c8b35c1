from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import httpx
from langchain_core.messages import BaseMessage

from akinator.errors import ConfigurationError, ParseError, UpstreamTransportError
from akinator.tools.extract import extract_json
from config.settings import Settings


logger = logging.getLogger(__name__)

REPAIR_SYSTEM_PROMPT = "Return only valid JSON, no text outside it."

_WIRE_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


def to_wire_messages(messages: Sequence[BaseMessage]) -> List[Dict[str, str]]:
    wire: List[Dict[str, str]] = []
    for message in messages:
        role = _WIRE_ROLES.get(message.type, "user")
        wire.append({"role": role, "content": str(message.content)})
    return wire


def _upstream_error_message(data: Dict[str, Any]) -> str:
    error = data.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if isinstance(error, str) and error:
        return error
    return "Fireworks error"


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _message_content(data: Dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


def _has_type(obj: Optional[Dict[str, Any]]) -> bool:
    return isinstance(obj, dict) and bool(obj.get("type"))


@contextmanager
def _http_client(settings: Settings, client: Optional[httpx.Client]) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=settings.request_timeout) as owned:
        yield owned


def _post_completion(client: httpx.Client, settings: Settings, payload: Dict[str, Any]) -> httpx.Response:
    return client.post(
        settings.fireworks_api_url,
        json=payload,
        headers={
            "Accept": "application/json",
            "Authorization": f"Bearer {settings.fireworks_api_key}",
        },
    )


def _call_primary(client: httpx.Client, settings: Settings, messages: List[Dict[str, str]]) -> str:
    payload = {
        "model": settings.primary_model,
        "max_tokens": settings.max_tokens,
        "top_p": settings.top_p,
        "top_k": settings.top_k,
        "presence_penalty": 0,
        "frequency_penalty": 0,
        "temperature": settings.temperature,
        "messages": messages,
    }
    try:
        response = _post_completion(client, settings, payload)
    except httpx.HTTPError as exc:
        raise UpstreamTransportError(f"Fireworks API call failed: {exc}") from exc

    data = _json_or_empty(response)
    if response.is_error:
        raise UpstreamTransportError(_upstream_error_message(data), status_code=response.status_code)
    return _message_content(data)


def _call_repair(client: httpx.Client, settings: Settings, raw: str) -> str:
    payload = {
        "model": settings.repair_model,
        "max_tokens": settings.repair_max_tokens,
        "temperature": 0,
        "messages": [
            {"role": "system", "content": REPAIR_SYSTEM_PROMPT},
            {"role": "user", "content": f"Reformat this text to valid JSON only: {raw}"},
        ],
    }
    try:
        response = _post_completion(client, settings, payload)
    except httpx.HTTPError as exc:
        logger.warning("Repair call failed: %s", exc)
        return ""
    if response.is_error:
        logger.warning("Repair call returned status %s", response.status_code)
        return ""
    return _message_content(_json_or_empty(response))


def call_inference(
    messages: Sequence[BaseMessage],
    settings: Settings,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """Ask the primary model for the next action and return it as a raw dict.

    If the completion holds no JSON object with a ``type``, the smaller repair
    model gets one chance to reformat it. Field validation happens in the
    orchestrator.
    """
    if not settings.fireworks_api_key:
        raise ConfigurationError("Server missing FIREWORKS_API_KEY")

    with _http_client(settings, client) as http:
        raw = _call_primary(http, settings, to_wire_messages(messages))
        obj = extract_json(raw)

        if not _has_type(obj):
            logger.error("Fireworks raw output (unparsed): %s", raw)
            obj = extract_json(_call_repair(http, settings, raw))

    if not _has_type(obj):
        raise ParseError()
    return obj
