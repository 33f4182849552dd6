"""Read vendor exports into validated, scored Vendor snapshots.

This is the validation boundary: anything that reaches the scorer has
already passed through the pydantic models here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from vendorscore.analysis.scorer import score_vendors
from vendorscore.errors import IngestError
from vendorscore.models import Vendor

logger = logging.getLogger(__name__)


def parse_vendors(raw: str) -> list[Vendor]:
    """Parse a JSON export: either a list of vendors or ``{"vendors": [...]}``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise IngestError(f"invalid JSON: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("vendors")
    if not isinstance(data, list):
        raise IngestError("expected a list of vendors or an object with a 'vendors' list")

    vendors: list[Vendor] = []
    for i, record in enumerate(data):
        try:
            vendors.append(Vendor.model_validate(record))
        except ValidationError as exc:
            raise IngestError(_describe(exc), index=i) from exc

    logger.debug("parsed %d vendor(s)", len(vendors))
    return score_vendors(vendors)


def load_vendors(path: Path) -> list[Vendor]:
    try:
        raw = path.read_text()
    except OSError as exc:
        raise IngestError(f"cannot read {path}: {exc}") from exc
    return parse_vendors(raw)


async def fetch_vendors(
    url: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Vendor]:
    """Fetch a vendor export from a remote endpoint."""
    try:
        async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            raw = resp.text
    except httpx.HTTPError as exc:
        raise IngestError(f"fetching {url} failed: {exc}") from exc

    logger.info("fetched vendor export from %s (%d bytes)", url, len(raw))
    return parse_vendors(raw)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
