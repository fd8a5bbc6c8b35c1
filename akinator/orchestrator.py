from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

import httpx
from langchain_core.messages import SystemMessage

from akinator.core.prompt import build_messages
from akinator.core.repeats import is_repeat
from akinator.core.schemas import (
    MAX_GUESS_CHARS,
    MAX_QUESTION_CHARS,
    AskAction,
    FinalAction,
    GameAction,
    GuessAction,
    StepRequest,
)
from akinator.errors import ConfigurationError, InvalidTypeError, MissingFieldError
from akinator.tools.fireworks import call_inference
from config.settings import Settings


logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        # huge integer literals behave like JSON Infinity
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, min(1.0, number))


def _text_field(obj: Dict[str, Any], key: str, limit: int) -> str:
    value = obj.get(key)
    if not value:
        return ""
    text = str(value)[:limit]
    return text if text.strip() else ""


def to_action(obj: Dict[str, Any]) -> GameAction:
    """Validate a raw model reply and coerce it into a game action."""
    action_type = obj.get("type")
    if action_type == "ask":
        question = _text_field(obj, "question", MAX_QUESTION_CHARS)
        if not question:
            raise MissingFieldError("Missing question")
        return AskAction(question=question)

    if action_type in ("guess", "final"):
        guess = _text_field(obj, "guess", MAX_GUESS_CHARS)
        if not guess:
            raise MissingFieldError("Missing guess")
        model = GuessAction if action_type == "guess" else FinalAction
        return model(guess=guess, confidence=coerce_confidence(obj.get("confidence")))

    raise InvalidTypeError("Invalid type")


def repeat_correction(question: str) -> SystemMessage:
    return SystemMessage(
        content=(
            f'You repeated: "{question}". Ask a different, non-redundant question focusing on '
            "a new attribute. Absolutely avoid re-asking about the same topic."
        )
    )


def run_step(
    request: StepRequest,
    settings: Settings,
    client: Optional[httpx.Client] = None,
) -> GameAction:
    """Produce the next game action for one request.

    Duplicate questions are sent back to the model with a corrective system
    message, at most ``MAX_ATTEMPTS`` times in total. When every attempt
    repeats, the last question is returned anyway.
    """
    if not settings.fireworks_api_key:
        raise ConfigurationError("Server missing FIREWORKS_API_KEY")

    messages = build_messages(request)
    action: Optional[GameAction] = None

    for attempt in range(1, MAX_ATTEMPTS + 1):
        action = to_action(call_inference(messages, settings, client=client))
        if isinstance(action, AskAction) and is_repeat(action.question, request.history):
            logger.info("Attempt %s repeated a question: %s", attempt, action.question)
            messages.append(repeat_correction(action.question))
            continue
        return action

    logger.warning(
        "No fresh question after %s attempts, returning repeat: %s",
        MAX_ATTEMPTS,
        action.question,
    )
    return action
