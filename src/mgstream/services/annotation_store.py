"""Bulk md5 annotation lookup and hierarchy-name resolution."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from mgstream.db.models.annotation import Md5Annotation, OntologyTerm, Taxon
from mgstream.exceptions import UpstreamUnavailableError
from mgstream.models import AnnotationRecord

logger = logging.getLogger(__name__)


class AnnotationStore(ABC):
    """Read interface over the M5NR annotation store."""

    @abstractmethod
    def get_records(self, md5s: Sequence[str], source: str) -> list[AnnotationRecord]:
        """Annotation arrays for every md5 present in ``source``.

        md5s without annotation in the source are omitted.
        """

    @abstractmethod
    def organisms_by_taxa(self, level: str, text: str) -> list[str]:
        """Organism names whose ``level`` taxon contains ``text``."""

    @abstractmethod
    def ontology_by_level(self, source: str, level: str, text: str) -> list[str]:
        """Ontology accessions in ``source`` whose ``level`` name contains ``text``."""


def _as_list(value) -> list[str]:
    if not value:
        return []
    return [v if isinstance(v, str) else "" for v in value]


class SqlAnnotationStore(AnnotationStore):
    """AnnotationStore over the md5_annotations / taxa / ontology_terms tables."""

    def __init__(self, db: Session):
        self.db = db

    def get_records(self, md5s: Sequence[str], source: str) -> list[AnnotationRecord]:
        if not md5s:
            return []
        stmt = select(Md5Annotation).where(
            Md5Annotation.source == source,
            Md5Annotation.md5.in_(list(md5s)),
        )
        try:
            rows = self.db.execute(stmt).scalars().all()
        except DBAPIError as e:
            raise UpstreamUnavailableError(f"Annotation lookup failed: {e}") from e

        by_md5 = {
            r.md5: AnnotationRecord(
                md5=r.md5,
                accessions=_as_list(r.accession),
                functions=_as_list(r.function),
                organisms=_as_list(r.organism),
            )
            for r in rows
        }
        return [by_md5[m] for m in md5s if m in by_md5]

    def organisms_by_taxa(self, level: str, text: str) -> list[str]:
        column = Taxon.__table__.c.get(level)
        if column is None:
            return []
        stmt = select(Taxon.name).where(column.ilike(f"%{text}%")).order_by(Taxon.name)
        return self._names(stmt)

    def ontology_by_level(self, source: str, level: str, text: str) -> list[str]:
        column = OntologyTerm.__table__.c.get(level)
        if column is None:
            return []
        stmt = (
            select(OntologyTerm.accession)
            .where(OntologyTerm.source == source, column.ilike(f"%{text}%"))
            .order_by(OntologyTerm.accession)
        )
        return self._names(stmt)

    def _names(self, stmt) -> list[str]:
        try:
            return list(self.db.execute(stmt).scalars().all())
        except DBAPIError as e:
            raise UpstreamUnavailableError(f"Hierarchy lookup failed: {e}") from e


def resolve_batch(store: AnnotationStore, md5s: Sequence[str], source: str) -> list[AnnotationRecord]:
    """One bulk annotation lookup for a batch of md5s."""
    records = store.get_records(md5s, source)
    logger.debug("Resolved %d/%d md5s in %s", len(records), len(md5s), source)
    return records
