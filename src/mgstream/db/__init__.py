from mgstream.db.engine import get_engine, get_session_factory
from mgstream.db.models import (
    Base,
    Sample,
    Md5,
    JobMd5,
    Md5Annotation,
    Taxon,
    OntologyTerm,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "Base",
    "Sample",
    "Md5",
    "JobMd5",
    "Md5Annotation",
    "Taxon",
    "OntologyTerm",
]
