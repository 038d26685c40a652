"""Shock blob store adapter -- node discovery and byte-range reads.

Docs: https://github.com/MG-RAST/Shock
No retries: a failed range read is fatal to the response being streamed.
"""

from __future__ import annotations

import logging

import httpx

from mgstream.config import config
from mgstream.exceptions import BlobFetchError, UpstreamUnavailableError
from mgstream.models import RecordSchema

logger = logging.getLogger(__name__)


class ShockClient:
    """Thin client over a shared ``httpx.Client``."""

    def __init__(self, http: httpx.Client, base_url: str | None = None, token: str | None = None):
        self.http = http
        self.base_url = (base_url or config.shock.url).rstrip("/")
        self.token = config.shock.token if token is None else token

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"OAuth {self.token}"} if self.token else {}

    def find_node(self, accession: str, schema: RecordSchema | str = RecordSchema.SIMILARITY) -> str:
        """Return the node id of a metagenome's filtered similarity file."""
        schema = RecordSchema(schema)
        params = {
            "query": "",
            "type": "metagenome",
            "data_type": "similarity",
            "stage_name": "filter.sims",
            "id": accession,
        }
        try:
            resp = self.http.get(f"{self.base_url}/node", params=params, headers=self._headers())
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Shock node query for %s failed: %s", accession, e)
            raise UpstreamUnavailableError(f"Unable to retrieve {schema.value} file") from e

        nodes = payload.get("data") if isinstance(payload, dict) else None
        first = nodes[0] if isinstance(nodes, list) and nodes else None
        if not isinstance(first, dict) or not first.get("id"):
            raise UpstreamUnavailableError(f"Unable to retrieve {schema.value} file")
        return first["id"]

    def read_range(self, node_id: str, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes starting at ``offset`` from a node's file."""
        try:
            resp = self.http.get(
                f"{self.base_url}/node/{node_id}",
                params={"download": "", "seek": offset, "length": length},
                headers=self._headers(),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BlobFetchError(
                f"node {node_id} seek={offset} length={length}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise BlobFetchError(f"node {node_id} seek={offset} length={length}: {e}") from e
        return resp.content


def split_records(payload: bytes) -> list[list[str]]:
    """Tab-split each line of a range read, skipping lines with no record id."""
    text = payload.decode("utf-8", errors="replace").rstrip("\n")
    records = []
    for line in text.split("\n"):
        fields = line.rstrip("\r").split("\t")
        if not fields[0]:
            continue
        records.append(fields)
    return records
