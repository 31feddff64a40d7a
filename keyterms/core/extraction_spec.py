"""Extraction Spec: YAML parser, Pydantic models, and field-list hashing."""

import hashlib
import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_SPEC_PATH = (
    Path(__file__).resolve().parent.parent.parent
    / "extraction_specs"
    / "contract_key_terms_v1.yaml"
)


# ── Key-Term Fields ──────────────────────────────────────────────────


class KeyTermField(BaseModel):
    """Single key term to extract from a contract."""

    name: str = Field(min_length=1)
    description: str = ""


# ── Matching Thresholds ──────────────────────────────────────────────


class MatchSettings(BaseModel):
    """Tunable constants for the three-tier span locator."""

    exact_penalty: float = Field(default=0.0, ge=0.0, le=1.0)
    normalized_penalty: float = Field(default=0.1, ge=0.0, le=1.0)
    fuzzy_penalty: float = Field(default=0.2, ge=0.0, le=1.0)
    normalized_end: Literal["estimate", "exact"] = Field(
        default="estimate",
        description="'estimate' guesses the end as start + factor * len(quote); "
        "'exact' walks the original text to the true end boundary",
    )
    normalized_end_factor: int = Field(default=2, ge=1)
    fuzzy_max_quote_length: int = Field(
        default=200, ge=0, description="Fuzzy anchors only for quotes shorter than this"
    )
    anchor_max_length: int = Field(default=50, ge=1)
    anchor_ratio: float = Field(default=0.3, gt=0.0, le=0.5)
    fuzzy_window_factor: int = Field(
        default=2, ge=1, description="Suffix must start within factor * len(quote) of the prefix"
    )

    @model_validator(mode="after")
    def penalties_ordered(self) -> "MatchSettings":
        if not self.exact_penalty <= self.normalized_penalty <= self.fuzzy_penalty:
            raise ValueError(
                "Penalties must satisfy exact <= normalized <= fuzzy "
                f"(got {self.exact_penalty}, {self.normalized_penalty}, {self.fuzzy_penalty})"
            )
        return self


# ── Chunking ─────────────────────────────────────────────────────────


class ChunkSettings(BaseModel):
    """Window sizes for splitting long contracts before extraction."""

    chunk_size: int = Field(default=25000, ge=1, description="~6k tokens")
    overlap: int = Field(default=1000, ge=0, description="~250 tokens")
    page_marker: str = "--- PAGE"
    marker_window_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    paragraph_window: int = Field(default=500, ge=0)

    @model_validator(mode="after")
    def overlap_smaller_than_chunk(self) -> "ChunkSettings":
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"Overlap ({self.overlap}) must be smaller than chunk size ({self.chunk_size})"
            )
        return self


# ── Extraction Spec (top-level) ──────────────────────────────────────


class ExtractionSpec(BaseModel):
    """Top-level model for a key-term extraction run."""

    title: str
    version: str
    fields: list[KeyTermField]
    matching: MatchSettings = Field(default_factory=MatchSettings)
    chunking: ChunkSettings = Field(default_factory=ChunkSettings)

    @field_validator("fields")
    @classmethod
    def unique_field_names(cls, v: list[KeyTermField]) -> list[KeyTermField]:
        if not v:
            raise ValueError("Extraction spec must define at least one field")
        names = [f.name for f in v]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate field names: {', '.join(dupes)}")
        return v

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def fields_hash(self) -> str:
        """SHA-256 of the field list (canonical JSON)."""
        return _canonical_hash({"fields": [f.model_dump() for f in self.fields]})


# ── Helpers ──────────────────────────────────────────────────────────


def _canonical_hash(data: dict) -> str:
    """Deterministic SHA-256 hash of a dict via sorted-key JSON."""
    blob = json.dumps(data, sort_keys=True, default=str).encode()
    return hashlib.sha256(blob).hexdigest()


def load_extraction_spec(path: str | Path = DEFAULT_SPEC_PATH) -> ExtractionSpec:
    """Load a YAML Extraction Spec from disk and return a validated model."""
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)
    return ExtractionSpec.model_validate(raw)
