from mgstream import catalog
from mgstream.models import AnnotationType, OutputFormat, RecordSchema, StreamRequest
from mgstream.services import formatter

FIELDS = [
    "read_1", "000821a2e2f63df1a3873e4b280002a8", "98.5", "30", "0", "0",
    "1", "30", "5", "34", "1e-20", "55.1", "ATGAAACGC",
]


def _request(schema=RecordSchema.SIMILARITY, fmt=OutputFormat.TAB):
    return StreamRequest(
        accession="mgm4447943.3",
        job_id=1,
        record_schema=schema,
        type=AnnotationType.ORGANISM,
        source=catalog.get_source("SwissProt"),
        format=fmt,
    )


def test_header_and_trailer():
    request = _request()
    assert formatter.header_line(request).startswith("query sequence id\thit m5nr id (md5sum)\t")
    assert formatter.header_line(request).endswith("semicolon separated list of annotations\n")
    assert formatter.trailer_line(request, 3) == "Download complete. 3 rows retrieved\n"


def test_fasta_has_no_header_or_trailer():
    request = _request(RecordSchema.SEQUENCE, OutputFormat.FASTA)
    assert formatter.header_line(request) is None
    assert formatter.trailer_line(request, 3) is None


def test_similarity_line():
    line = formatter.format_record(_request(), FIELDS, "organism=[Escherichia coli]")
    cols = line.rstrip("\n").split("\t")
    assert cols[0] == "mgm4447943.3|read_1|SwissProt"
    assert cols[1:12] == FIELDS[1:12]
    assert cols[12] == "organism=[Escherichia coli]"


def test_similarity_pads_short_records():
    line = formatter.format_record(_request(), FIELDS[:5], "x")
    assert len(line.rstrip("\n").split("\t")) == 13


def test_sequence_tab_line():
    line = formatter.format_record(_request(RecordSchema.SEQUENCE), FIELDS, "ann")
    assert line == f"mgm4447943.3|read_1|SwissProt\t{FIELDS[1]}\tATGAAACGC\tann\n"


def test_sequence_fasta_line():
    request = _request(RecordSchema.SEQUENCE, OutputFormat.FASTA)
    line = formatter.format_record(request, FIELDS, "ann")
    assert line == f">mgm4447943.3|read_1|SwissProt|{FIELDS[1]} ann\nATGAAACGC\n"


def test_sequence_needs_full_record():
    assert formatter.format_record(_request(RecordSchema.SEQUENCE), FIELDS[:12], "ann") is None
