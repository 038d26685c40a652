"""Group candidate rows into bounded batches of distinct md5s."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class Batch:
    """md5 -> ordered (offset, length) coordinates, in first-seen md5 order.

    With ``collapse_duplicates`` each md5 keeps only its most recent
    coordinate, reproducing one raw-record window per md5.
    """

    def __init__(self, collapse_duplicates: bool = False):
        self.collapse_duplicates = collapse_duplicates
        self._coords: dict[str, list[tuple[int, int]]] = {}

    def add(self, md5: str, offset: int, length: int) -> None:
        if self.collapse_duplicates:
            self._coords[md5] = [(offset, length)]
        else:
            self._coords.setdefault(md5, []).append((offset, length))

    def coordinates(self, md5: str) -> list[tuple[int, int]]:
        return self._coords.get(md5, [])

    def entries(self) -> list[tuple[str, int, int]]:
        """(md5, offset, length) for every kept coordinate, in offset order."""
        flat = [(md5, off, ln) for md5, coords in self._coords.items() for off, ln in coords]
        return sorted(flat, key=lambda e: e[1])

    @property
    def md5s(self) -> list[str]:
        return list(self._coords)

    @property
    def row_count(self) -> int:
        return sum(len(c) for c in self._coords.values())

    def __contains__(self, md5: object) -> bool:
        return md5 in self._coords

    def __len__(self) -> int:
        return len(self._coords)

    def __bool__(self) -> bool:
        return bool(self._coords)

    def __repr__(self) -> str:
        return f"<Batch md5s={len(self)} rows={self.row_count}>"


def iter_batches(
    rows: Iterable[tuple[str, int | None, int | None]],
    chunk_size: int,
    collapse_duplicates: bool = False,
) -> Iterator[Batch]:
    """Yield batches holding at most ``chunk_size`` distinct md5s.

    Rows with a missing offset or length are skipped. A batch is yielded as
    soon as it reaches ``chunk_size`` md5s; the remainder is yielded at the end.

    Only distinct md5s count toward the limit. Without ``collapse_duplicates``
    every row of an md5 already in the batch is kept, so a batch holds
    ``chunk_size`` md5s plus all of their coordinates; memory grows with the
    number of rows per md5 (one per job and version in the summary table).
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    batch = Batch(collapse_duplicates)
    for md5, offset, length in rows:
        if offset is None or length is None:
            continue
        if md5 not in batch and len(batch) >= chunk_size:
            yield batch
            batch = Batch(collapse_duplicates)
        batch.add(md5, offset, length)
    if batch:
        yield batch
