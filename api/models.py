"""Pydantic request/response schemas for the chat API."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Requests ───────────────────────────────────────────────────────────────

class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: str | None = None
    thread_id: str | None = Field(default=None, alias="threadId")

    @field_validator("thread_id", mode="before")
    @classmethod
    def _thread_id_as_str(cls, value):
        # Opaque key: numeric ids are kept as their string form.
        if value is None or isinstance(value, str):
            return value
        return str(value)


# ── Responses ──────────────────────────────────────────────────────────────

class SourceResponse(BaseModel):
    title: str
    path: str


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    thread_id: str = Field(alias="threadId")
    sources: list[SourceResponse]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    search: str  # "up" | "down"
    sessions: int
    llm_configured: bool
