from mgstream.db.models.base import Base, TimestampMixin
from mgstream.db.models.sample import Sample
from mgstream.db.models.alignment import Md5, JobMd5
from mgstream.db.models.annotation import Md5Annotation, Taxon, OntologyTerm

__all__ = [
    "Base",
    "TimestampMixin",
    "Sample",
    "Md5",
    "JobMd5",
    "Md5Annotation",
    "Taxon",
    "OntologyTerm",
]
