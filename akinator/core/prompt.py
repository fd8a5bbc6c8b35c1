from __future__ import annotations

from typing import List

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from akinator.core.schemas import StepRequest


GUESS_CONFIDENCE = 0.75

STEP_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_prompt}"),
        ("human", "{user_prompt}"),
    ]
)


def build_system_prompt(domain: str) -> str:
    return " ".join(
        [
            "You are an expert reasoning agent playing a 20 Questions (Akinator-style) game.",
            "Your goal is to identify the hidden target by asking strategic yes/no questions.",
            f"Domain: {domain}. Ask ONE question per turn.",
            "Use deductive reasoning based on all previous questions and answers. "
            "Each new question must narrow down the space of possibilities.",
            "Ask questions that explore new dimensions "
            "(occupation, nationality, time period, traits, media type, etc.).",
            "Avoid repeating or rephrasing previous questions.",
            f"When you have enough information (confidence ≥ {GUESS_CONFIDENCE}), propose a guess.",
            "If forced final, give your best guess.",
            "Output ONLY strict JSON (no prose):",
            '{"type":"ask","question":"<short yes/no question>"} OR',
            '{"type":"guess","guess":"<one candidate>","confidence":0.0} OR',
            '{"type":"final","guess":"<best candidate>","confidence":0.0}',
            "Never include explanations, markdown, or comments.",
        ]
    )


def build_user_prompt(context: StepRequest) -> str:
    facts = "\n".join(
        f"Q{i}: {entry.q.lower()} → {entry.a.lower()}"
        for i, entry in enumerate(context.history, start=1)
    ) or "(no previous questions)"

    if context.force_final:
        final_line = "forceFinal=true → make your best final guess."
    else:
        final_line = "forceFinal=false → ask the next question logically."

    return "\n".join(
        [
            f"We are playing 20 Questions. Domain: {context.domain}.",
            "Here are all facts discovered so far:",
            facts,
            "",
            "Based on these facts, reason logically to choose the next most informative question.",
            "Your question should reduce uncertainty the most and move closer to a confident guess.",
            "Focus on attributes not yet covered (e.g. nationality, occupation, historical era, "
            "public role, media type, field of work, notable achievements).",
            final_line,
            f"Player hint: {context.hint}" if context.hint else "(no hint)",
            "Return ONLY strict JSON.",
        ]
    )


def build_messages(context: StepRequest) -> List[BaseMessage]:
    """Render the system and user prompts for one step."""
    return STEP_PROMPT.format_messages(
        system_prompt=build_system_prompt(context.domain),
        user_prompt=build_user_prompt(context),
    )
