"""Output line rendering for sequence and similarity streams."""

from __future__ import annotations

from mgstream import catalog
from mgstream.models import OutputFormat, RecordSchema, StreamRequest

# Raw sims records: query id, hit md5, 10 m8 columns, query sequence
SIMS_FIELD_COUNT = 13


def header_line(request: StreamRequest) -> str | None:
    """Tab-joined column names, or None for fasta sequence output."""
    if request.is_fasta_sequence:
        return None
    return "\t".join(catalog.column_names(request.record_schema)) + "\n"


def trailer_line(request: StreamRequest, count: int) -> str | None:
    if request.is_fasta_sequence:
        return None
    return f"Download complete. {count} rows retrieved\n"


def record_id(request: StreamRequest, read_id: str) -> str:
    return f"{request.accession}|{read_id}|{request.source.name}"


def format_record(request: StreamRequest, fields: list[str], annotation: str) -> str | None:
    """Render one raw sims record, or None if it does not fit the schema."""
    rid = record_id(request, fields[0])
    if request.record_schema == RecordSchema.SEQUENCE:
        if len(fields) != SIMS_FIELD_COUNT:
            return None
        if request.format == OutputFormat.FASTA:
            return f">{rid}|{fields[1]} {annotation}\n{fields[12]}\n"
        return "\t".join([rid, fields[1], fields[12], annotation]) + "\n"

    columns = [fields[i] if i < len(fields) else "" for i in range(1, 12)]
    return "\t".join([rid, *columns, annotation]) + "\n"
