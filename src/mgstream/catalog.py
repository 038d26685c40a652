"""Fixed vocabularies: annotation sources, types, hierarchy levels and output columns."""

from mgstream.models import AnnotationSource, AnnotationType, RecordSchema, SourceCategory

SOURCES: tuple[AnnotationSource, ...] = (
    AnnotationSource(name="RefSeq", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="GenBank", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="IMG", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="KEGG", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="SEED", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="SwissProt", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="TrEMBL", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="PATRIC", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="eggNOG", category=SourceCategory.PROTEIN,
                     description="protein database, type organism and function annotation"),
    AnnotationSource(name="RDP", category=SourceCategory.RNA,
                     description="RNA database, type organism and function annotation"),
    AnnotationSource(name="Greengenes", category=SourceCategory.RNA,
                     description="RNA database, type organism and function annotation"),
    AnnotationSource(name="LSU", category=SourceCategory.RNA,
                     description="RNA database, type organism and function annotation"),
    AnnotationSource(name="SSU", category=SourceCategory.RNA,
                     description="RNA database, type organism and function annotation"),
    AnnotationSource(name="ITS", category=SourceCategory.RNA,
                     description="RNA database, type organism and function annotation"),
    AnnotationSource(name="Subsystems", category=SourceCategory.ONTOLOGY,
                     description="ontology database, type ontology only"),
    AnnotationSource(name="KO", category=SourceCategory.ONTOLOGY,
                     description="ontology database, type ontology only"),
    AnnotationSource(name="COG", category=SourceCategory.ONTOLOGY,
                     description="ontology database, type ontology only"),
    AnnotationSource(name="NOG", category=SourceCategory.ONTOLOGY,
                     description="ontology database, type ontology only"),
)

_SOURCES_BY_NAME = {s.name: s for s in SOURCES}

TYPE_DESCRIPTIONS: dict[AnnotationType, str] = {
    AnnotationType.ORGANISM: "return organism data",
    AnnotationType.FUNCTION: "return function data",
    AnnotationType.ONTOLOGY: "return ontology data",
    AnnotationType.FEATURE: "return feature data",
    AnnotationType.ALL: "return all data, no filtering done",
}

# Ordered root -> leaf
HIERARCHY: dict[AnnotationType, tuple[str, ...]] = {
    AnnotationType.ORGANISM: (
        "domain", "phylum", "class", "order", "family", "genus", "species", "strain",
    ),
    AnnotationType.ONTOLOGY: ("level1", "level2", "level3", "function"),
}

# Leaf levels name the annotation itself, so a plain text filter already covers them
LEAF_LEVELS = frozenset({"strain", "species", "function"})

DEFAULT_CUTOFFS = {"evalue": 5, "identity": 60, "length": 15}

COLUMNS: dict[RecordSchema, tuple[tuple[str, str], ...]] = {
    RecordSchema.SEQUENCE: (
        ("string", "sequence id"),
        ("string", "m5nr id (md5sum)"),
        ("string", "dna sequence"),
        ("string", "semicolon separated list of annotations"),
    ),
    RecordSchema.SIMILARITY: (
        ("string", "query sequence id"),
        ("string", "hit m5nr id (md5sum)"),
        ("float", "percentage identity"),
        ("int", "alignment length,"),
        ("int", "number of mismatches"),
        ("int", "number of gap openings"),
        ("int", "query start"),
        ("int", "query end"),
        ("int", "hit start"),
        ("int", "hit end"),
        ("float", "e-value"),
        ("float", "bit score"),
        ("string", "semicolon separated list of annotations"),
    ),
}


def get_source(name: str) -> AnnotationSource | None:
    return _SOURCES_BY_NAME.get(name)


def sources_by_category(*categories: SourceCategory) -> list[AnnotationSource]:
    """Sources in catalog order, restricted to ``categories`` when given."""
    if not categories:
        return list(SOURCES)
    return [s for s in SOURCES if s.category in categories]


def source_names(*categories: SourceCategory) -> list[str]:
    return [s.name for s in sources_by_category(*categories)]


def default_source(annotation_type: AnnotationType) -> AnnotationSource:
    if annotation_type == AnnotationType.ONTOLOGY:
        return _SOURCES_BY_NAME["Subsystems"]
    return _SOURCES_BY_NAME["RefSeq"]


def valid_sources_for(annotation_type: AnnotationType) -> list[AnnotationSource]:
    """Sources whose category is compatible with ``annotation_type``."""
    if annotation_type == AnnotationType.ONTOLOGY:
        return sources_by_category(SourceCategory.ONTOLOGY)
    if annotation_type == AnnotationType.ORGANISM:
        return sources_by_category(SourceCategory.PROTEIN, SourceCategory.RNA)
    return sources_by_category()


def is_compatible(annotation_type: AnnotationType, source: AnnotationSource) -> bool:
    return source in valid_sources_for(annotation_type)


def hierarchy_levels(annotation_type: AnnotationType) -> tuple[str, ...]:
    return HIERARCHY.get(annotation_type, ())


def column_names(schema: RecordSchema) -> list[str]:
    return [label for _, label in COLUMNS[schema]]
