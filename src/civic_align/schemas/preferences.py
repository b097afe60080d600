# src/civic_align/schemas/preferences.py
"""Voter preference Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PreferencesUpdate(BaseModel):
    """Schema for replacing a voter's issue preferences.

    Cardinality is checked by the service so the error names the offending field.
    """

    selected_issues: list[str] = Field(default_factory=list)
    dealbreakers: list[str] = Field(default_factory=list)


class PreferencesResponse(BaseModel):
    voter_id: str
    selected_issues: list[str]
    dealbreakers: list[str]

    model_config = ConfigDict(from_attributes=True)
