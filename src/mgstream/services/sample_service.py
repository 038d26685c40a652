"""Sample lookup and visibility check -- shared logic for CLI and API."""

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from mgstream.db.models.sample import Sample
from mgstream.exceptions import AccessDeniedError, SampleNotFoundError, UpstreamUnavailableError
from mgstream.services.parameters import parse_sample_id


def get_sample(db: Session, sample_id: str) -> Sample:
    """Look up a viewable metagenome by ``mgm``-prefixed or bare id."""
    metagenome_id = parse_sample_id(sample_id)
    stmt = select(Sample).where(Sample.metagenome_id == metagenome_id, Sample.viewable.is_(True))
    try:
        sample = db.execute(stmt).scalar_one_or_none()
    except DBAPIError as e:
        raise UpstreamUnavailableError(
            "Unable to connect to metagenomics analysis database"
        ) from e
    if sample is None:
        raise SampleNotFoundError(f"id {metagenome_id} does not exists")
    return sample


def check_access(sample: Sample, user: str | None) -> None:
    """Public samples are visible to all; private ones only to their owner."""
    if sample.public:
        return
    if user and sample.owner == user:
        return
    raise AccessDeniedError("insufficient permissions to view this data")


def get_visible_sample(db: Session, sample_id: str, user: str | None = None) -> Sample:
    sample = get_sample(db, sample_id)
    check_access(sample, user)
    return sample


def create_sample(
    db: Session,
    metagenome_id: str,
    name: str | None = None,
    public: bool = False,
    owner: str | None = None,
) -> Sample:
    """Register a metagenome job."""
    sample = Sample(
        metagenome_id=parse_sample_id(metagenome_id),
        name=name,
        public=public,
        owner=owner,
    )
    db.add(sample)
    db.commit()
    db.refresh(sample)
    return sample
