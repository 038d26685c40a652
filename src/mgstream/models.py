"""Core data models for the annotation streaming pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

class AnnotationType(str, Enum):
    ORGANISM = "organism"
    FUNCTION = "function"
    ONTOLOGY = "ontology"
    FEATURE = "feature"
    ALL = "all"


class RecordSchema(str, Enum):
    SEQUENCE = "sequence"      # annotated read sequences
    SIMILARITY = "similarity"  # blast m8 rows with annotation


class OutputFormat(str, Enum):
    TAB = "tab"
    FASTA = "fasta"


class SourceCategory(str, Enum):
    PROTEIN = "protein"
    RNA = "rna"
    ONTOLOGY = "ontology"


class StreamState(str, Enum):
    VALIDATING = "validating"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ABORTED = "aborted"


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

class AnnotationSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    category: SourceCategory
    description: str = ""


class CutoffSet(BaseModel):
    """Alignment quality cutoffs; ``None`` disables a cutoff."""

    model_config = ConfigDict(frozen=True)

    evalue: int | None = None      # negative exponent, e.g. 5 -> e-value <= 1e-5
    identity: int | None = None    # minimum percent identity
    length: int | None = None      # minimum alignment length

    @classmethod
    def none(cls) -> CutoffSet:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.evalue is None and self.identity is None and self.length is None


class StreamRequest(BaseModel):
    """Immutable, fully validated request context threaded through the pipeline."""

    model_config = ConfigDict(frozen=True)

    accession: str                 # "mgm4447943.3"
    job_id: int
    record_schema: RecordSchema
    type: AnnotationType
    source: AnnotationSource
    format: OutputFormat = OutputFormat.TAB
    version: int = 1
    cutoffs: CutoffSet = CutoffSet()
    filter: str | None = None
    filter_level: str | None = None
    md5s: tuple[str, ...] = ()

    @property
    def is_fasta_sequence(self) -> bool:
        return self.record_schema == RecordSchema.SEQUENCE and self.format == OutputFormat.FASTA


# ---------------------------------------------------------------------------
# Pipeline values
# ---------------------------------------------------------------------------

class CandidateRow(NamedTuple):
    md5: str
    offset: int | None
    length: int | None


class AnnotationTuple(NamedTuple):
    accession: str = ""
    function: str = ""
    organism: str = ""


@dataclass
class AnnotationRecord:
    """Index-aligned annotation arrays for one md5 in one source."""

    md5: str
    accessions: list[str] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    organisms: list[str] = field(default_factory=list)
