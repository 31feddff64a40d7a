"""Shared data models for document ingestion."""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """One contiguous, possibly overlapping, slice of a document's text."""

    text: str
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
