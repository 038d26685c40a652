"""Annotation API endpoints — resource info plus sequence/similarity streams."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import sessionmaker
from starlette.background import BackgroundTask

from mgstream import catalog
from mgstream.api.deps import get_body, get_session_factory, get_shock, get_user
from mgstream.config import config
from mgstream.models import AnnotationType, RecordSchema
from mgstream.services import sample_service
from mgstream.services.annotation_stream import AnnotationStream
from mgstream.services.blob_store import ShockClient
from mgstream.services.parameters import resolve_request

router = APIRouter(prefix="/annotation", tags=["annotation"])


def _stream_options() -> dict:
    cutoffs = config.annotation
    return {
        "evalue": ["int", f"negative exponent value for maximum e-value cutoff: default is {cutoffs.default_evalue}"],
        "identity": ["int", f"percent value for minimum % identity cutoff: default is {cutoffs.default_identity}"],
        "length": ["int", f"value for minimum alignment length cutoff: default is {cutoffs.default_length}"],
        "version": ["integer", f"M5NR version, default is {cutoffs.m5nr_default_version}"],
        "source": ["cv", [[s.name, s.description] for s in catalog.SOURCES]],
        "type": ["cv", [[t.value, d] for t, d in catalog.TYPE_DESCRIPTIONS.items()]],
        "filter": ["string", "text string to filter annotations by: only return those that contain text"],
        "filter_level": ["string", "hierarchal level to filter annotations by, for organism or ontology only"],
    }


def _post_body() -> dict:
    return {
        "md5s": ["list", ["string", "md5 to get hits for"]],
        "version": ["integer", f"M5NR version, default is {config.annotation.m5nr_default_version}"],
        "source": ["cv", [[s.name, s.description] for s in catalog.SOURCES]],
        "type": ["cv", [[t.value, d] for t, d in catalog.TYPE_DESCRIPTIONS.items()]],
    }


def _columns(schema: RecordSchema) -> dict:
    return {
        f"col_{i:02d}": [kind, label]
        for i, (kind, label) in enumerate(catalog.COLUMNS[schema], start=1)
    }


@router.get("")
def annotation_info(request: Request):
    """Describe the annotation resource: requests, parameters and output columns."""
    base = str(request.url_for("annotation_info"))
    fmt = ["cv", [["tab", "tab-delimited text file"], ["fasta", "fasta format text file"]]]
    required = {"id": ["string", "unique metagenome identifier"]}
    requests = [{
        "name": "info",
        "request": base,
        "description": "Returns description of parameters and attributes.",
        "method": "GET",
        "type": "synchronous",
        "attributes": "self",
        "parameters": {"required": {}, "options": {}, "body": {}},
    }]
    for schema, description in (
        (RecordSchema.SEQUENCE, "tab delimited annotated sequence stream"),
        (RecordSchema.SIMILARITY, "tab delimited blast m8 with annotation"),
    ):
        options = _stream_options()
        body = _post_body()
        if schema == RecordSchema.SEQUENCE:
            options["format"] = fmt
            body["format"] = fmt
        attributes = {"streaming text": ["object", [_columns(schema), description]]}
        requests.append({
            "name": schema.value,
            "request": f"{base}/{schema.value}/{{ID}}",
            "description": description,
            "method": "GET",
            "type": "stream",
            "attributes": attributes,
            "parameters": {"required": required, "options": options, "body": {}},
        })
        requests.append({
            "name": schema.value,
            "request": f"{base}/{schema.value}/{{ID}}",
            "description": description,
            "method": "POST",
            "type": "stream",
            "attributes": attributes,
            "parameters": {"required": required, "options": {}, "body": body},
        })

    return {
        "name": "annotation",
        "url": base,
        "description": "All annotations of a metagenome for a specific annotation type and source",
        "type": "object",
        "hierarchy": {t.value: list(levels) for t, levels in catalog.HIERARCHY.items()},
        "types": [t.value for t in AnnotationType],
        "requests": requests,
    }


@router.api_route("/{schema}/{sample_id}", methods=["GET", "POST"])
def stream_annotations(
    schema: str,
    sample_id: str,
    request: Request,
    body: bytes = Depends(get_body),
    session_factory: sessionmaker = Depends(get_session_factory),
    shock: ShockClient = Depends(get_shock),
    user: str | None = Depends(get_user),
):
    """Stream annotated reads (sequence) or annotated blast m8 rows (similarity)."""
    db = session_factory()
    try:
        sample = sample_service.get_visible_sample(db, sample_id, user)
        stream_request = resolve_request(
            schema,
            sample,
            dict(request.query_params),
            method=request.method,
            body=body,
            content_type=request.headers.get("content-type"),
        )
        stream = AnnotationStream(stream_request, db, shock, owns_session=True).open()
    except Exception:
        db.close()
        raise

    browser = request.query_params.get("browser")
    media_type = "application/octet-stream" if browser else "text/plain"
    return StreamingResponse(
        stream.iter_lines(),
        media_type=media_type,
        headers={"Access-Control-Allow-Origin": "*"},
        background=BackgroundTask(stream.close),
    )
