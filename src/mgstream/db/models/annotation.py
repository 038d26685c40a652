from typing import Optional

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from mgstream.db.models.base import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONArray = JSON().with_variant(JSONB, "postgresql")


class Md5Annotation(Base):
    """M5NR annotation arrays for one md5 in one source, index-aligned."""

    __tablename__ = "md5_annotations"
    __table_args__ = (UniqueConstraint("md5", "source", name="uq_md5_annotations_md5_source"),)

    annotation_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    md5: Mapped[str] = mapped_column(String(32), index=True)
    source: Mapped[str] = mapped_column(String(50), index=True)
    accession: Mapped[list] = mapped_column(JSONArray, default=list)
    function: Mapped[list] = mapped_column(JSONArray, default=list)
    organism: Mapped[list] = mapped_column(JSONArray, default=list)

    def __repr__(self) -> str:
        return f"<Md5Annotation {self.md5} {self.source}>"


class Taxon(Base):
    """Organism name with its taxonomic lineage."""

    __tablename__ = "taxa"

    taxon_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(300), unique=True, index=True)
    domain: Mapped[Optional[str]] = mapped_column(String(200))
    phylum: Mapped[Optional[str]] = mapped_column(String(200))
    class_: Mapped[Optional[str]] = mapped_column("class", String(200))
    order: Mapped[Optional[str]] = mapped_column(String(200))
    family: Mapped[Optional[str]] = mapped_column(String(200))
    genus: Mapped[Optional[str]] = mapped_column(String(200))
    species: Mapped[Optional[str]] = mapped_column(String(300))
    strain: Mapped[Optional[str]] = mapped_column(String(300))

    def __repr__(self) -> str:
        return f"<Taxon {self.name}>"


class OntologyTerm(Base):
    """Ontology leaf accession with its hierarchy, per source."""

    __tablename__ = "ontology_terms"
    __table_args__ = (
        UniqueConstraint("source", "accession", name="uq_ontology_terms_source_accession"),
    )

    term_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(50), index=True)
    accession: Mapped[str] = mapped_column(String(100))
    level1: Mapped[Optional[str]] = mapped_column(String(300))
    level2: Mapped[Optional[str]] = mapped_column(String(300))
    level3: Mapped[Optional[str]] = mapped_column(String(300))
    function: Mapped[Optional[str]] = mapped_column(String(500))

    def __repr__(self) -> str:
        return f"<OntologyTerm {self.source}:{self.accession}>"
