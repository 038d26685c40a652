"""Annotation stream -- batches candidate rows, resolves and filters annotations,
fetches raw records and renders output lines.

Lifecycle: VALIDATING -> (open) -> STREAMING -> COMPLETED | ABORTED.
Everything that can fail before the first byte is written happens in
:meth:`AnnotationStream.open`, so callers can still answer with a structured
error. Failures after that are written inline and end the stream without a
trailer; a missing trailer marks the body as incomplete.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TextIO

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from mgstream.config import config
from mgstream.exceptions import BlobFetchError, MGStreamError
from mgstream.models import StreamRequest, StreamState
from mgstream.services import formatter
from mgstream.services.annotation_store import AnnotationStore, SqlAnnotationStore, resolve_batch
from mgstream.services.batcher import Batch, iter_batches
from mgstream.services.blob_store import ShockClient, split_records
from mgstream.services.cursor import CandidateCursor, open_candidate_cursor
from mgstream.services.filters import (
    FilterSpec,
    annotation_string,
    annotation_tuples,
    build_filter_set,
    filter_spec_for,
)

logger = logging.getLogger(__name__)


class AnnotationStream:
    """One request's streaming pipeline. Not reusable; not thread-safe."""

    def __init__(
        self,
        request: StreamRequest,
        db: Session,
        shock: ShockClient,
        store: AnnotationStore | None = None,
        chunk_size: int | None = None,
        yield_per: int | None = None,
        collapse_duplicates: bool | None = None,
        owns_session: bool = False,
    ):
        settings = config.annotation
        self.request = request
        self.db = db
        self.shock = shock
        self.store = store or SqlAnnotationStore(db)
        self.chunk_size = chunk_size or settings.chunk_size
        self.yield_per = yield_per or settings.yield_per
        self.collapse_duplicates = (
            settings.collapse_duplicate_hits if collapse_duplicates is None else collapse_duplicates
        )
        self.owns_session = owns_session

        self.state = StreamState.VALIDATING
        self.rows_emitted = 0
        self.batches = 0
        self.error: str | None = None
        self._node_id: str | None = None
        self._spec = FilterSpec()
        self._cursor: CandidateCursor | None = None

    # -- lifecycle -------------------------------------------------------

    def open(self) -> AnnotationStream:
        """Locate the sims file, build the filter set and open the cursor."""
        if self.state != StreamState.VALIDATING:
            raise RuntimeError(f"stream already {self.state.value}")
        try:
            self._node_id = self.shock.find_node(self.request.accession, self.request.record_schema)
            self._spec = filter_spec_for(self.request, build_filter_set(self.store, self.request))
            self._cursor = open_candidate_cursor(self.db, self.request, yield_per=self.yield_per)
        except Exception:
            self.close()
            raise
        self.state = StreamState.STREAMING
        logger.info(
            "Streaming %s %s for %s (type=%s source=%s)",
            self.request.record_schema.value, self.request.format.value,
            self.request.accession, self.request.type.value, self.request.source.name,
        )
        return self

    def close(self) -> None:
        """Release the cursor (and the session if this stream owns it). Idempotent."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
        if self.owns_session and self.db is not None:
            self.db.close()
            self.db = None

    # -- streaming -------------------------------------------------------

    def iter_lines(self) -> Iterator[str]:
        """Yield header, record lines and trailer as text chunks."""
        if self.state != StreamState.STREAMING:
            raise RuntimeError("stream must be opened before iterating")
        try:
            header = formatter.header_line(self.request)
            if header:
                yield header

            for batch in iter_batches(self._cursor, self.chunk_size, self.collapse_duplicates):
                self.batches += 1
                yield from self._emit_batch(batch)

            self.state = StreamState.COMPLETED
            logger.info(
                "Stream complete for %s: %d rows in %d batches",
                self.request.accession, self.rows_emitted, self.batches,
            )
            trailer = formatter.trailer_line(self.request, self.rows_emitted)
            if trailer:
                yield trailer
        except BlobFetchError as e:
            self._abort(str(e))
            yield f"\nERROR downloading: {e}\n"
        except (MGStreamError, DBAPIError) as e:
            self._abort(str(e))
            yield f"\nERROR: {e}\n"
        except GeneratorExit:
            self._abort("client disconnected")
            raise
        finally:
            self.close()

    def write_to(self, sink: TextIO) -> int:
        """Drain the stream into ``sink``; returns the number of rows written."""
        lines = self.iter_lines()
        try:
            for chunk in lines:
                sink.write(chunk)
        except OSError:
            lines.close()
            raise
        sink.flush()
        return self.rows_emitted

    def _abort(self, reason: str) -> None:
        self.state = StreamState.ABORTED
        self.error = reason
        logger.warning(
            "Stream aborted for %s after %d rows: %s",
            self.request.accession, self.rows_emitted, reason,
        )

    def _emit_batch(self, batch: Batch) -> Iterator[str]:
        request = self.request
        records = resolve_batch(self.store, batch.md5s, request.source.name)

        annotations: dict[str, str] = {}
        for record in records:
            ann = annotation_string(annotation_tuples(record, request.type, self._spec))
            if ann:
                annotations[record.md5] = ann
        logger.debug(
            "Batch %d: %d md5s, %d annotated after filtering",
            self.batches, len(batch), len(annotations),
        )

        for md5, offset, length in batch.entries():
            ann = annotations.get(md5)
            if ann is None:
                continue
            payload = self.shock.read_range(self._node_id, offset, length)
            for fields in split_records(payload):
                line = formatter.format_record(request, fields, ann)
                if line is None:
                    continue
                self.rows_emitted += 1
                yield line
