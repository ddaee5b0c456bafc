"""Ticket and ticket history models for the ticketing API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Ticket(BaseModel):
    """A support ticket selected for audit. Immutable once a batch starts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ticket_id: int = Field(alias="ticketId")
    subject: str = ""
    priority: str = ""
    status: str = ""
    client_code: str = Field(default="", alias="ticketClientCode")
    client_name: str = Field(default="", alias="ticketClientName")
    ticket_type: str = Field(default="", alias="ticketType")
    source: str = Field(default="", alias="ticketSource")
    created: str = ""
    updated: str = ""
    resolved: str | None = None
    requester_email: str | None = Field(default=None, alias="requesterEmail")


class HistoryFieldUpdate(BaseModel):
    """A single field change recorded in a ticket history entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    field: str
    id: int | None = None
    old_value: str | None = Field(default=None, alias="oldValue")
    new_value: str | None = Field(default=None, alias="newValue")

    @field_validator("old_value", "new_value", mode="before")
    @classmethod
    def coerce_value_to_text(cls, value: Any) -> str | None:
        """Field values arrive as strings, numbers or null."""
        return None if value is None else str(value)


class HistoryComment(BaseModel):
    """A comment attached to a ticket history entry. Content is HTML."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int | None = None
    content_type: str = Field(default="", alias="contentType")
    content: str = ""
    workflow_choice: str | None = Field(default=None, alias="workflowChoice")


class HistoryItem(BaseModel):
    """One entry of a ticket's history log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int
    created: str
    actor_id: str = Field(default="", alias="actorId")
    actor_name: str | None = Field(default=None, alias="actorName")
    source: str = ""
    comment: HistoryComment | None = None
    field_updates: list[HistoryFieldUpdate] = Field(default_factory=list, alias="fieldUpdates")
    ticket_id: int | None = Field(default=None, alias="ticketId")

    @field_validator("field_updates", mode="before")
    @classmethod
    def default_field_updates(cls, value: Any) -> Any:
        """The API sends null instead of an empty list."""
        return value or []

    @field_validator("actor_id", mode="before")
    @classmethod
    def coerce_actor_id(cls, value: Any) -> str:
        """Actor IDs are sometimes numeric."""
        return "" if value is None else str(value)
