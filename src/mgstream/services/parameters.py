"""Request parameter resolution -- shared by the API and CLI.

Turns raw query parameters (and, for POST, a JSON or form-encoded body) into
a validated, immutable :class:`StreamRequest`. Every violation raises before
any database or blob store work is done.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs

from mgstream import catalog
from mgstream.config import AnnotationConfig, config
from mgstream.exceptions import CatalogError, InvalidParameterError
from mgstream.models import (
    AnnotationType,
    CutoffSet,
    OutputFormat,
    RecordSchema,
    StreamRequest,
)

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"(mgm)?(\d+\.\d+)")

_FORMAT_ALIASES = {"tabbed": "tab"}

# JSON body keys that override query parameters on POST
_BODY_KEYS = ("format", "type", "version", "source")


def parse_sample_id(text: str) -> str:
    """Return the bare metagenome id from ``mgm4447943.3`` or ``4447943.3``."""
    m = _ID_RE.fullmatch(text or "")
    if not m:
        raise InvalidParameterError(f"invalid id format: {text}")
    return m.group(2)


def _cutoff(params: Mapping[str, Any], name: str, default: int) -> int | None:
    """A cutoff is active only for a non-negative integer value."""
    if name not in params or params[name] is None:
        return default
    value = str(params[name]).strip()
    return int(value) if value.isdigit() else None


def _version(value: Any, default: int) -> int:
    text = str(value).strip() if value is not None else ""
    return int(text) if text.isdigit() else default


def _read_post_body(body: bytes | None, content_type: str | None) -> tuple[dict, list[str]]:
    """Return (json overrides, md5 list) from a POST body.

    JSON bodies may carry ``md5s`` (or ``data``) plus any of format, type,
    version and source. Form bodies carry a ``;``-separated ``md5s`` field.
    """
    raw = (body or b"").strip()
    if not raw:
        raise InvalidParameterError("POST request missing md5s")

    if content_type and content_type.startswith("application/x-www-form-urlencoded"):
        form = parse_qs(raw.decode("utf-8", errors="replace"))
        values = form.get("md5s")
        if not values:
            raise InvalidParameterError("POST request missing md5s")
        md5s = [m.strip() for v in values for m in v.split(";") if m.strip()]
        return {}, md5s

    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidParameterError(f"unable to obtain POSTed data: {e}") from e
    if not isinstance(data, dict):
        raise InvalidParameterError("unable to obtain POSTed data: body must be a JSON object")

    md5s = data.get("md5s", data.get("data", []))
    if not isinstance(md5s, list) or not all(isinstance(m, str) for m in md5s):
        raise InvalidParameterError("unable to obtain POSTed data: md5s must be a list of strings")
    overrides = {k: data[k] for k in _BODY_KEYS if k in data}
    return overrides, [m.strip() for m in md5s if m.strip()]


def _resolve_type(value: Any) -> AnnotationType:
    try:
        return AnnotationType(value)
    except ValueError:
        valid = ", ".join(t.value for t in AnnotationType)
        raise CatalogError(f"Invalid type was entered ({value}). Please use one of: {valid}")


def _resolve_source(value: Any, annotation_type: AnnotationType):
    if value in (None, ""):
        return catalog.default_source(annotation_type)
    source = catalog.get_source(str(value))
    if source is None:
        raise CatalogError(
            f"Invalid source was entered ({value}). "
            f"Please use one of: {', '.join(catalog.source_names())}"
        )
    if not catalog.is_compatible(annotation_type, source):
        valid = ", ".join(s.name for s in catalog.valid_sources_for(annotation_type))
        raise CatalogError(
            f"Invalid {annotation_type.value} source was entered ({value}). "
            f"Please use one of: {valid}"
        )
    return source


def _resolve_format(value: Any) -> OutputFormat:
    text = _FORMAT_ALIASES.get(str(value), str(value))
    try:
        return OutputFormat(text)
    except ValueError:
        raise CatalogError(f"Invalid format was entered ({value}). Please use one of: tab, fasta")


def _resolve_filter_level(
    level: str | None, text: str | None, annotation_type: AnnotationType,
) -> str | None:
    """Drop levels that cannot apply; reject unknown levels when a filter is given."""
    if not level:
        return None
    if level in catalog.LEAF_LEVELS or annotation_type not in catalog.HIERARCHY:
        logger.debug("Ignoring filter_level=%s for type=%s", level, annotation_type.value)
        return None
    if text and level not in catalog.hierarchy_levels(annotation_type):
        organism = ", ".join(catalog.hierarchy_levels(AnnotationType.ORGANISM))
        ontology = ", ".join(catalog.hierarchy_levels(AnnotationType.ONTOLOGY))
        raise CatalogError(
            f"Invalid filter_level was entered ({level}). "
            f"For organism use one of: {organism}. For ontology use one of: {ontology}"
        )
    return level


def resolve_request(
    schema: RecordSchema | str,
    sample,
    params: Mapping[str, Any],
    method: str = "GET",
    body: bytes | None = None,
    content_type: str | None = None,
    defaults: AnnotationConfig | None = None,
) -> StreamRequest:
    """Validate request parameters for one sample and build the stream context.

    ``sample`` is any object with ``accession`` and ``job_id`` attributes
    (normally a :class:`~mgstream.db.models.Sample`).
    """
    defaults = defaults or config.annotation
    try:
        schema = RecordSchema(schema)
    except ValueError:
        raise CatalogError(
            f"Invalid request type ({schema}). Please use one of: sequence, similarity"
        )

    values: dict[str, Any] = {
        "type": params.get("type") or AnnotationType.ORGANISM.value,
        "source": params.get("source") or None,
        "format": params.get("format") or OutputFormat.TAB.value,
        "version": params.get("version"),
    }
    cutoffs = CutoffSet(
        evalue=_cutoff(params, "evalue", defaults.default_evalue),
        identity=_cutoff(params, "identity", defaults.default_identity),
        length=_cutoff(params, "length", defaults.default_length),
    )
    text_filter = params.get("filter") or None
    filter_level = params.get("filter_level") or None
    md5s: list[str] = []

    if method.upper() == "POST":
        overrides, md5s = _read_post_body(body, content_type)
        if not md5s:
            raise InvalidParameterError("unable to obtain POSTed data: no md5s given")
        values.update(overrides)
        # an explicit md5 list is never filtered
        cutoffs = CutoffSet.none()
        text_filter = None
        filter_level = None

    annotation_type = _resolve_type(values["type"])
    source = _resolve_source(values["source"], annotation_type)
    output_format = _resolve_format(values["format"])
    filter_level = _resolve_filter_level(filter_level, text_filter, annotation_type)

    return StreamRequest(
        accession=sample.accession,
        job_id=sample.job_id,
        record_schema=schema,
        type=annotation_type,
        source=source,
        format=output_format,
        version=_version(values["version"], defaults.m5nr_default_version),
        cutoffs=cutoffs,
        filter=text_filter,
        filter_level=filter_level,
        md5s=tuple(dict.fromkeys(md5s)),
    )
