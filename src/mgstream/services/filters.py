"""Annotation filter engine.

Each annotation type maps an :class:`AnnotationRecord` to the list of
(accession, function, organism) tuples it contributes, applying either a
hierarchy filter set (exact name membership) or a case-insensitive text
filter. Records that end up with no tuples produce no output.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from mgstream.models import AnnotationRecord, AnnotationTuple, AnnotationType, StreamRequest
from mgstream.services.annotation_store import AnnotationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSpec:
    text: str | None = None
    names: frozenset[str] = frozenset()  # hierarchy filter set

    def matches_text(self, value: str) -> bool:
        return self.text.lower() in value.lower() if self.text else True


def build_filter_set(store: AnnotationStore, request: StreamRequest) -> frozenset[str]:
    """Names accepted by the request's filter at its filter_level, if both are set."""
    if not (request.filter and request.filter_level):
        return frozenset()
    if request.type == AnnotationType.ORGANISM:
        names = store.organisms_by_taxa(request.filter_level, request.filter)
    elif request.type == AnnotationType.ONTOLOGY:
        names = store.ontology_by_level(request.source.name, request.filter_level, request.filter)
    else:
        return frozenset()
    logger.info(
        "Filter %r at %s matched %d names", request.filter, request.filter_level, len(names)
    )
    return frozenset(names)


def filter_spec_for(request: StreamRequest, names: frozenset[str] = frozenset()) -> FilterSpec:
    return FilterSpec(text=request.filter, names=names)


def _at(values: list[str], i: int) -> str:
    return (values[i] or "") if i < len(values) else ""


def feature_tuples(record: AnnotationRecord, spec: FilterSpec) -> list[AnnotationTuple]:
    return [AnnotationTuple(accession=a) for a in record.accessions if spec.matches_text(a)]


def function_tuples(record: AnnotationRecord, spec: FilterSpec) -> list[AnnotationTuple]:
    return [AnnotationTuple(function=f) for f in record.functions if spec.matches_text(f)]


def organism_tuples(record: AnnotationRecord, spec: FilterSpec) -> list[AnnotationTuple]:
    if spec.names:
        kept = [o for o in record.organisms if o in spec.names]
    else:
        kept = [o for o in record.organisms if spec.matches_text(o)]
    return [AnnotationTuple(organism=o) for o in kept]


def ontology_tuples(record: AnnotationRecord, spec: FilterSpec) -> list[AnnotationTuple]:
    tuples = [
        AnnotationTuple(accession=_at(record.accessions, i), function=_at(record.functions, i))
        for i in range(len(record.accessions))
    ]
    if spec.names:
        return [t for t in tuples if t.accession in spec.names]
    return [t for t in tuples if spec.matches_text(t.accession)]


def all_tuples(record: AnnotationRecord, spec: FilterSpec) -> list[AnnotationTuple]:
    return [
        AnnotationTuple(
            accession=_at(record.accessions, i),
            function=_at(record.functions, i),
            organism=_at(record.organisms, i),
        )
        for i in range(len(record.accessions))
    ]


TUPLE_BUILDERS: dict[AnnotationType, Callable[[AnnotationRecord, FilterSpec], list[AnnotationTuple]]] = {
    AnnotationType.FEATURE: feature_tuples,
    AnnotationType.FUNCTION: function_tuples,
    AnnotationType.ORGANISM: organism_tuples,
    AnnotationType.ONTOLOGY: ontology_tuples,
    AnnotationType.ALL: all_tuples,
}


def annotation_tuples(
    record: AnnotationRecord, annotation_type: AnnotationType, spec: FilterSpec,
) -> list[AnnotationTuple]:
    return TUPLE_BUILDERS[annotation_type](record, spec)


def annotation_string(tuples: list[AnnotationTuple]) -> str:
    """``accession=[..];function=[..]`` per tuple, tuples joined by ``||``."""
    parts = []
    for t in tuples:
        fields = []
        if t.accession:
            fields.append(f"accession=[{t.accession}]")
        if t.function:
            fields.append(f"function=[{t.function}]")
        if t.organism:
            fields.append(f"organism=[{t.organism}]")
        if fields:
            parts.append(";".join(fields))
    return "||".join(parts)
