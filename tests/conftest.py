from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from mgstream.db.models import (
    Base,
    JobMd5,
    Md5,
    Md5Annotation,
    OntologyTerm,
    Sample,
    Taxon,
)
from mgstream.services.blob_store import ShockClient

# Use SQLite for tests -- fast, no PG dependency needed
TEST_DATABASE_URL = "sqlite://"

FIXTURES = Path(__file__).parent / "fixtures"
SIMS_PATH = FIXTURES / "mini_sims.tsv"

SHOCK_URL = "https://shock.test"
NODE_ID = "a1b2c3d4-sims"

# md5s in mini_sims.tsv, in file order
MD5_ECOLI = "000821a2e2f63df1a3873e4b280002a8"     # read_1, read_2
MD5_BSUB = "15bf1950bd9867099e72ea6516e3d602"      # read_3, weak hit
MD5_UNANNOTATED = "2b6f9e3e5f4c1d8a7b0c9d2e1f3a4b5c"  # read_4
MD5_O157 = "3c9a1e7d2f6b4c8e0a5d3f1b7e9c2a4d"      # read_5
MD5_NO_SEEK = "4e8d2c6a0b1f3e5d7c9a2b4d6f8e0a1c"   # summary row without file location


def sims_ranges(data: bytes) -> dict[str, tuple[int, int]]:
    """(seek, length) of each md5's contiguous block of lines."""
    ranges: dict[str, tuple[int, int]] = {}
    pos = 0
    for line in data.splitlines(keepends=True):
        md5 = line.split(b"\t")[1].decode()
        if md5 in ranges:
            seek, length = ranges[md5]
            ranges[md5] = (seek, length + len(line))
        else:
            ranges[md5] = (pos, len(line))
        pos += len(line)
    return ranges


def seed_annotation_data(db: Session) -> Sample:
    """Seed one public and one private metagenome plus SwissProt/KO/Subsystems annotations."""
    public = Sample(metagenome_id="4447943.3", name="soil", public=True, owner="bob")
    private = Sample(metagenome_id="4440000.3", name="gut", public=False, owner="alice")
    db.add_all([public, private])
    db.flush()

    md5_rows = {
        m: Md5(md5=m)
        for m in (MD5_ECOLI, MD5_BSUB, MD5_UNANNOTATED, MD5_O157, MD5_NO_SEEK)
    }
    db.add_all(md5_rows.values())
    db.flush()

    ranges = sims_ranges(SIMS_PATH.read_bytes())
    stats = {
        MD5_ECOLI: (-20.0, 95.0, 90.0),
        MD5_BSUB: (-3.0, 70.0, 50.0),
        MD5_UNANNOTATED: (-30.0, 99.0, 120.0),
        MD5_O157: (-12.0, 80.0, 90.0),
    }
    for job in (public, private):
        for m, (exp_avg, ident_avg, len_avg) in stats.items():
            seek, length = ranges[m]
            db.add(JobMd5(
                version=1, job_id=job.job_id, md5_id=md5_rows[m].md5_id, abundance=1,
                exp_avg=exp_avg, ident_avg=ident_avg, len_avg=len_avg,
                seek=seek, length=length,
            ))
        db.add(JobMd5(
            version=1, job_id=job.job_id, md5_id=md5_rows[MD5_NO_SEEK].md5_id, abundance=1,
            exp_avg=-50.0, ident_avg=100.0, len_avg=200.0, seek=None, length=None,
        ))

    db.add_all([
        Md5Annotation(
            md5=MD5_ECOLI, source="SwissProt",
            accession=["P0A9M0", "P0A6Y8"],
            function=["Lon protease", "Chaperone protein DnaK"],
            organism=["Escherichia coli", "Escherichia coli"],
        ),
        Md5Annotation(
            md5=MD5_BSUB, source="SwissProt",
            accession=["P37871"], function=["Sporulation protein"], organism=["Bacillus subtilis"],
        ),
        Md5Annotation(
            md5=MD5_O157, source="SwissProt",
            accession=["Q8X5K1"], function=["Shiga toxin subunit A"],
            organism=["Escherichia coli O157:H7"],
        ),
        Md5Annotation(
            md5=MD5_ECOLI, source="KO",
            accession=["K01338"], function=["ATP-dependent Lon protease"], organism=[],
        ),
        Md5Annotation(
            md5=MD5_O157, source="KO",
            accession=["K11006"], function=["shiga toxin subunit A"], organism=[],
        ),
        Md5Annotation(
            md5=MD5_ECOLI, source="Subsystems",
            accession=["SS00215"], function=["Proteolysis in bacteria, ATP-dependent"], organism=[],
        ),
    ])
    db.add_all([
        Taxon(name="Escherichia coli", domain="Bacteria", phylum="Proteobacteria",
              class_="Gammaproteobacteria", order="Enterobacterales",
              family="Enterobacteriaceae", genus="Escherichia", species="Escherichia coli"),
        Taxon(name="Escherichia coli O157:H7", domain="Bacteria", phylum="Proteobacteria",
              class_="Gammaproteobacteria", order="Enterobacterales",
              family="Enterobacteriaceae", genus="Escherichia", species="Escherichia coli",
              strain="Escherichia coli O157:H7"),
        Taxon(name="Bacillus subtilis", domain="Bacteria", phylum="Firmicutes",
              class_="Bacilli", order="Bacillales", family="Bacillaceae",
              genus="Bacillus", species="Bacillus subtilis"),
    ])
    db.add_all([
        OntologyTerm(source="KO", accession="K01338",
                     level1="Genetic Information Processing",
                     level2="Folding, sorting and degradation",
                     level3="Protein processing", function="ATP-dependent Lon protease"),
        OntologyTerm(source="KO", accession="K11006",
                     level1="Human Diseases", level2="Infectious disease: bacterial",
                     level3="Pathogenic Escherichia coli infection",
                     function="shiga toxin subunit A"),
    ])
    db.commit()
    return public


def shock_handler(request: httpx.Request) -> httpx.Response:
    """Minimal Shock: one sims node, byte-range downloads."""
    data = SIMS_PATH.read_bytes()
    if request.url.path == "/node":
        return httpx.Response(200, json={"data": [{"id": NODE_ID}], "status": 200})
    if request.url.path == f"/node/{NODE_ID}":
        seek = int(request.url.params["seek"])
        length = int(request.url.params["length"])
        return httpx.Response(200, content=data[seek:seek + length])
    return httpx.Response(404, json={"error": ["Node not found"]})


@pytest.fixture(scope="session")
def engine():
    eng = create_engine(TEST_DATABASE_URL)

    # SQLite needs explicit FK enforcement
    @event.listens_for(eng, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)


@pytest.fixture()
def db(engine) -> Session:
    connection = engine.connect()
    transaction = connection.begin()
    session = sessionmaker(bind=connection)()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture()
def sample(db) -> Sample:
    return seed_annotation_data(db)


@pytest.fixture()
def shock_http():
    with httpx.Client(transport=httpx.MockTransport(shock_handler)) as http:
        yield http


@pytest.fixture()
def shock(shock_http) -> ShockClient:
    return ShockClient(shock_http, base_url=SHOCK_URL, token="")
