"""Tests for request parameter resolution."""

import json
from types import SimpleNamespace

import pytest

from mgstream import catalog
from mgstream.config import AnnotationConfig
from mgstream.exceptions import CatalogError, InvalidParameterError
from mgstream.models import AnnotationType, CutoffSet, OutputFormat, RecordSchema, SourceCategory
from mgstream.services.parameters import parse_sample_id, resolve_request

SAMPLE = SimpleNamespace(accession="mgm4447943.3", job_id=7)
DEFAULTS = AnnotationConfig(m5nr_default_version=1, default_evalue=5, default_identity=60, default_length=15)


def _resolve(params=None, schema="similarity", **kwargs):
    return resolve_request(schema, SAMPLE, params or {}, defaults=DEFAULTS, **kwargs)


def test_parse_sample_id():
    assert parse_sample_id("mgm4447943.3") == "4447943.3"
    assert parse_sample_id("4447943.3") == "4447943.3"


@pytest.mark.parametrize("bad", ["mgm4447943", "abc", "mgx4447943.3", "", "4447943.3.1", "mgm4447943.3\n"])
def test_parse_sample_id_rejects_malformed(bad):
    with pytest.raises(InvalidParameterError, match="invalid id format"):
        parse_sample_id(bad)


def test_defaults():
    req = _resolve()
    assert req.record_schema == RecordSchema.SIMILARITY
    assert req.type == AnnotationType.ORGANISM
    assert req.source.name == "RefSeq"
    assert req.format == OutputFormat.TAB
    assert req.version == 1
    assert req.cutoffs == CutoffSet(evalue=5, identity=60, length=15)
    assert req.md5s == ()
    assert req.accession == "mgm4447943.3"
    assert req.job_id == 7


def test_ontology_defaults_to_subsystems():
    req = _resolve({"type": "ontology"})
    assert req.source.name == "Subsystems"


def test_cutoffs_from_params():
    req = _resolve({"evalue": "10", "identity": "80", "length": "30"})
    assert req.cutoffs == CutoffSet(evalue=10, identity=80, length=30)


def test_non_integer_cutoff_disables_it():
    req = _resolve({"evalue": "", "identity": "high"})
    assert req.cutoffs.evalue is None
    assert req.cutoffs.identity is None
    assert req.cutoffs.length == 15


def test_version_falls_back_to_default():
    assert _resolve({"version": "2"}).version == 2
    assert _resolve({"version": "latest"}).version == 1


def test_every_compatible_type_source_pair_resolves():
    for annotation_type in AnnotationType:
        for source in catalog.valid_sources_for(annotation_type):
            req = _resolve({"type": annotation_type.value, "source": source.name})
            assert req.source == source


def test_unknown_type():
    with pytest.raises(CatalogError, match="Invalid type"):
        _resolve({"type": "taxonomy"})


def test_unknown_source():
    with pytest.raises(CatalogError, match="Invalid source"):
        _resolve({"source": "UniRef"})


def test_ontology_type_requires_ontology_source():
    with pytest.raises(CatalogError, match="Invalid ontology source"):
        _resolve({"type": "ontology", "source": "SwissProt"})


def test_organism_type_rejects_ontology_source():
    with pytest.raises(CatalogError, match="Invalid organism source"):
        _resolve({"type": "organism", "source": "KO"})


def test_function_type_accepts_ontology_source():
    req = _resolve({"type": "function", "source": "KO"})
    assert req.source.category == SourceCategory.ONTOLOGY


def test_unknown_format():
    with pytest.raises(CatalogError, match="Invalid format"):
        _resolve({"format": "json"}, schema="sequence")


def test_unknown_schema():
    with pytest.raises(CatalogError, match="Invalid request type"):
        _resolve(schema="abundance")


def test_filter_level_kept_for_organism():
    req = _resolve({"filter": "Escherichia", "filter_level": "genus"})
    assert req.filter == "Escherichia"
    assert req.filter_level == "genus"


@pytest.mark.parametrize("level", ["species", "strain"])
def test_leaf_filter_level_dropped(level):
    req = _resolve({"filter": "coli", "filter_level": level})
    assert req.filter == "coli"
    assert req.filter_level is None


def test_filter_level_dropped_for_function_type():
    req = _resolve({"type": "function", "filter": "protease", "filter_level": "level1"})
    assert req.filter_level is None


def test_unknown_filter_level_with_filter_rejected():
    with pytest.raises(CatalogError, match="Invalid filter_level"):
        _resolve({"filter": "coli", "filter_level": "kingdom"})


def test_ontology_filter_level():
    req = _resolve({"type": "ontology", "source": "KO", "filter": "Genetic", "filter_level": "level1"})
    assert req.filter_level == "level1"


def test_post_json_overrides_and_disables_cutoffs():
    body = json.dumps({
        "source": "KO", "type": "function", "format": "tab",
        "data": ["000821a2e2f63df1a3873e4b280002a8", "15bf1950bd9867099e72ea6516e3d602"],
    }).encode()
    req = _resolve(
        {"source": "SwissProt", "evalue": "10", "filter": "x", "filter_level": "genus"},
        method="POST", body=body, content_type="application/json",
    )
    assert req.source.name == "KO"
    assert req.type == AnnotationType.FUNCTION
    assert req.cutoffs.is_empty
    assert req.filter is None
    assert req.filter_level is None
    assert req.md5s == ("000821a2e2f63df1a3873e4b280002a8", "15bf1950bd9867099e72ea6516e3d602")


def test_post_md5s_key_and_tabbed_alias():
    body = json.dumps({"md5s": ["a", "a", "b"], "format": "tabbed"}).encode()
    req = _resolve(schema="sequence", method="POST", body=body)
    assert req.md5s == ("a", "b")
    assert req.format == OutputFormat.TAB


def test_post_form_md5s():
    req = _resolve(
        method="POST", body=b"md5s=aaa%3Bbbb", content_type="application/x-www-form-urlencoded",
    )
    assert req.md5s == ("aaa", "bbb")
    assert req.cutoffs.is_empty


def test_post_without_body():
    with pytest.raises(InvalidParameterError, match="missing md5s"):
        _resolve(method="POST", body=b"")


def test_post_invalid_json():
    with pytest.raises(InvalidParameterError, match="unable to obtain POSTed data"):
        _resolve(method="POST", body=b"{not json")


def test_post_empty_md5_list():
    with pytest.raises(InvalidParameterError, match="no md5s"):
        _resolve(method="POST", body=b'{"md5s": []}')


def test_request_is_immutable():
    req = _resolve()
    with pytest.raises(Exception):
        req.filter = "changed"
