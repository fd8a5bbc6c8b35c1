from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


MAX_QUESTION_CHARS = 200
MAX_GUESS_CHARS = 120


class HistoryEntry(BaseModel):
    q: str = Field(..., description="A question that was already asked")
    a: str = Field(..., description="The player's answer to it")


class StepRequest(BaseModel):
    """One game step as sent by the frontend.

    Doubles as the prompt context: it is built per request and never stored.
    """

    model_config = ConfigDict(populate_by_name=True)

    domain: str = Field("character", description="What kind of target is being guessed")
    history: List[HistoryEntry] = Field(default_factory=list)
    turns: Optional[int] = Field(None, description="Defaults to len(history); informational only")
    force_final: bool = Field(False, alias="forceFinal")
    hint: str = ""

    @field_validator("domain", "history", "force_final", "hint", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    @model_validator(mode="after")
    def _default_turns(self) -> "StepRequest":
        if self.turns is None:
            self.turns = len(self.history)
        return self


class AskAction(BaseModel):
    type: Literal["ask"] = "ask"
    question: str = Field(..., min_length=1, max_length=MAX_QUESTION_CHARS)


class GuessAction(BaseModel):
    type: Literal["guess"] = "guess"
    guess: str = Field(..., min_length=1, max_length=MAX_GUESS_CHARS)
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class FinalAction(BaseModel):
    type: Literal["final"] = "final"
    guess: str = Field(..., min_length=1, max_length=MAX_GUESS_CHARS)
    confidence: float = Field(0.0, ge=0.0, le=1.0)


GameAction = Union[AskAction, GuessAction, FinalAction]
