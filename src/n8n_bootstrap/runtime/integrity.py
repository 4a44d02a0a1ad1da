"""Release digest lookup and local file hashing."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


async def fetch_release_sha256(client: httpx.AsyncClient, api_url: str, asset_name: str) -> str | None:
    """Return the published sha256 for *asset_name*, or ``None`` to skip verification.

    Any failure (rate limit, network, unexpected payload) is logged and
    treated as "unknown" rather than fatal.
    """
    try:
        response = await client.get(
            api_url,
            headers={"User-Agent": "n8n-desktop", "Accept": "application/vnd.github.v3+json"},
        )
    except httpx.HTTPError as exc:
        logger.warning("Release lookup failed, skipping sha256 verification: %s", exc)
        return None

    if not response.is_success:
        logger.warning("Release lookup returned HTTP %d, skipping sha256 verification", response.status_code)
        return None

    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning("Release payload is not JSON, skipping sha256 verification: %s", exc)
        return None

    assets = payload.get("assets") if isinstance(payload, dict) else None
    if not isinstance(assets, list):
        logger.warning("Release payload has no assets, skipping sha256 verification")
        return None

    for asset in assets:
        if not isinstance(asset, dict) or asset.get("name") != asset_name:
            continue
        digest = asset.get("digest")
        if not isinstance(digest, str):
            logger.warning("Asset %s has no digest, skipping sha256 verification", asset_name)
            return None
        if not digest.startswith("sha256:"):
            logger.warning("Unrecognised digest format %r, skipping sha256 verification", digest)
            return None
        return digest.removeprefix("sha256:")

    logger.warning("Release has no asset named %s, skipping sha256 verification", asset_name)
    return None
