"""Candidate row cursor over the per-job md5 similarity summary table."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from mgstream.db.models.alignment import JobMd5, Md5
from mgstream.exceptions import UpstreamUnavailableError
from mgstream.models import CandidateRow, StreamRequest

logger = logging.getLogger(__name__)


def resolve_hit_keys(db: Session, md5s: Sequence[str]) -> list[int]:
    """Map md5 checksums to their surrogate keys; unknown md5s are skipped."""
    if not md5s:
        return []
    rows = db.execute(select(Md5.md5_id).where(Md5.md5.in_(list(md5s)))).scalars().all()
    return list(rows)


def build_candidate_query(request: StreamRequest, md5_keys: Sequence[int] | None = None) -> Select:
    """SELECT md5, seek, length for one job under the request's cutoffs, ordered by seek."""
    cutoffs = request.cutoffs
    stmt = (
        select(Md5.md5, JobMd5.seek, JobMd5.length)
        .join(Md5, Md5.md5_id == JobMd5.md5_id)
        .where(
            JobMd5.version == request.version,
            JobMd5.job_id == request.job_id,
            JobMd5.seek.isnot(None),
            JobMd5.length.isnot(None),
        )
    )
    if cutoffs.evalue is not None:
        stmt = stmt.where(JobMd5.exp_avg <= -cutoffs.evalue)
    if cutoffs.identity is not None:
        stmt = stmt.where(JobMd5.ident_avg >= cutoffs.identity)
    if cutoffs.length is not None:
        stmt = stmt.where(JobMd5.len_avg >= cutoffs.length)
    if md5_keys is not None:
        stmt = stmt.where(JobMd5.md5_id.in_(list(md5_keys)))
    return stmt.order_by(JobMd5.seek)


class CandidateCursor:
    """Lazily iterates a server-side result; always close it (or use ``with``)."""

    def __init__(self, result):
        self._result = result
        self.rows_read = 0

    def __iter__(self) -> Iterator[CandidateRow]:
        for md5, seek, length in self._result:
            self.rows_read += 1
            yield CandidateRow(md5, seek, length)

    def close(self) -> None:
        if self._result is not None:
            self._result.close()
            self._result = None

    def __enter__(self) -> CandidateCursor:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_candidate_cursor(db: Session, request: StreamRequest, yield_per: int = 1000) -> CandidateCursor:
    """Execute the candidate query as a streaming cursor.

    Raises UpstreamUnavailableError if the query cannot be opened.
    """
    try:
        md5_keys = resolve_hit_keys(db, request.md5s) if request.md5s else None
        stmt = build_candidate_query(request, md5_keys)
        result = db.execute(stmt.execution_options(stream_results=True, yield_per=yield_per))
    except (OperationalError, DBAPIError) as e:
        logger.error("Candidate query failed for %s: %s", request.accession, e)
        raise UpstreamUnavailableError(
            "Unable to connect to metagenomics analysis database"
        ) from e
    logger.debug("Opened candidate cursor for %s (job %d)", request.accession, request.job_id)
    return CandidateCursor(result)
