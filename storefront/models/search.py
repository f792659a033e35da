"""Schemas used by the incremental search API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from storefront.models.product import ProductSummary


class SearchStatus(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    ERROR = "error"


class SearchInput(BaseModel):
    """Keystroke payload: the full current contents of the search box."""

    text: str = Field("", max_length=200)


class SearchSessionCreated(BaseModel):
    session_id: str


class SearchSnapshot(BaseModel):
    """Observable state of a search session."""

    query: str
    status: SearchStatus
    loading: bool
    generation: int = Field(..., ge=0)
    results: list[ProductSummary] = Field(default_factory=list)
