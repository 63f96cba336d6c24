"""
Pydantic models for detector configuration and the plagiarism report.

The report models define the JSON written by ``detect_plagiarism`` and read
back by ``generate_plagiarism_html``.
"""

from enum import Enum
from typing import FrozenSet, Optional
from pydantic import BaseModel, Field, field_validator


class Verdict(str, Enum):
    """Verdict for one scored pair."""
    HIGH_PLAGIARISM = "HIGH_PLAGIARISM"
    SUSPICIOUS = "SUSPICIOUS"
    NEEDS_REVIEW = "NEEDS_REVIEW"
    likely_clean = "likely_clean"


class DocumentStatus(str, Enum):
    """Outcome of analyzing one source file."""
    ok = "ok"
    syntax_error = "syntax_error"
    too_short = "too_short"
    unreadable = "unreadable"
    too_deep = "too_deep"


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_EXTENSIONS = [".c", ".cc", ".cpp", ".cxx", ".h", ".hpp"]
DEFAULT_SKIP_DIRS = [".git", ".venv", "venv", "node_modules", "__pycache__", "build"]


class DetectorConfig(BaseModel):
    """Detector settings. Loaded from JSON, then overridden by CLI flags."""
    threshold: float = Field(default=70.0, ge=0, le=100, description="Flag pairs scoring at or above this")
    review_margin: float = Field(default=15.0, ge=0, le=100, description="Band below the threshold marked for review")
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    min_tokens: int = Field(default=5, ge=0, description="Shorter documents are skipped")
    workers: int = Field(default=1, ge=1, description="Parallel analysis processes")
    skip_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))

    @field_validator('extensions')
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case and dot-prefix every extension, dropping blanks."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("at least one file extension is required")
        return normalized


# =============================================================================
# Report models
# =============================================================================

class DocumentRecord(BaseModel):
    """One analyzed source file."""
    label: str = Field(..., description="Path relative to the scanned root")
    path: str
    status: DocumentStatus = DocumentStatus.ok
    token_count: int = Field(default=0, ge=0)
    fingerprint_count: int = Field(default=0, ge=0)
    error: Optional[str] = None
    fingerprints: FrozenSet[int] = Field(default_factory=frozenset, exclude=True)

    @property
    def comparable(self) -> bool:
        return self.status == DocumentStatus.ok


class PairResult(BaseModel):
    """Similarity of two documents."""
    document1: str
    document2: str
    similarity: float = Field(..., ge=0, le=100, description="Jaccard similarity, percent")
    shared_fingerprints: int = Field(..., ge=0)
    union_fingerprints: int = Field(..., ge=0)
    flagged: bool
    verdict: Verdict

    @field_validator('similarity')
    def round_similarity(cls, v: float) -> float:
        return round(float(v), 2)


class ReportSummary(BaseModel):
    documents_analyzed: int = Field(..., ge=0)
    documents_skipped: int = Field(..., ge=0)
    pairs_analyzed: int = Field(..., ge=0)
    high_plagiarism: int = Field(default=0, ge=0)
    suspicious: int = Field(default=0, ge=0)
    needs_review: int = Field(default=0, ge=0)
    likely_clean: int = Field(default=0, ge=0)
    threshold: float = Field(..., ge=0, le=100)


class PlagiarismReport(BaseModel):
    """Complete detector output."""
    summary: ReportSummary
    documents: list[DocumentRecord] = Field(default_factory=list)
    flagged_pairs: list[PairResult] = Field(default_factory=list)
    pairs: list[PairResult] = Field(default_factory=list, description="All pairs, highest score first")


def get_json_schema() -> dict:
    """JSON schema of the report file."""
    return PlagiarismReport.model_json_schema()
