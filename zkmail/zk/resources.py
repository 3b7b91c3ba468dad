"""
Circuit Artifacts
=================

Locating and fetching the compiled circuit, proving key and
verification key. An artifact location is either an http(s) URL or a
filesystem path; relative paths resolve against the circuits directory.

Version: 0.1.0
"""

import asyncio
import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx

from zkmail.config import settings
from zkmail.exceptions import ResourceError
from zkmail.logging import get_logger


logger = get_logger(__name__)

ArtifactLocation = str | Path


def is_url(location: ArtifactLocation) -> bool:
    """Check whether a location is an http(s) URL."""
    return isinstance(location, str) and urlparse(location).scheme in ("http", "https")


def resolve_artifact(
    location: ArtifactLocation,
    base_dir: Path | None = None,
) -> ArtifactLocation:
    """
    Resolve a configured artifact location.

    URLs are returned unchanged; relative paths are joined to base_dir
    (default: settings.resolved_circuits_dir).
    """
    if is_url(location):
        return location

    path = Path(location)
    if path.is_absolute():
        return path
    return (base_dir or settings.resolved_circuits_dir) / path


async def fetch_bytes(
    location: ArtifactLocation,
    client: httpx.AsyncClient | None = None,
) -> bytes:
    """
    Read an artifact.

    Raises:
        ResourceError: If the artifact is missing or the request fails
    """
    if is_url(location):
        return await _download(str(location), client)

    path = Path(location)
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise ResourceError(f"Artifact not found: {path}") from e


async def fetch_json(
    location: ArtifactLocation,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """
    Read and parse a JSON artifact.

    Raises:
        ResourceError: If the artifact is unavailable or not valid JSON
    """
    data = await fetch_bytes(location, client)
    try:
        return json.loads(data)
    except ValueError as e:
        raise ResourceError(f"Artifact is not valid JSON: {location}") from e


async def materialize(
    location: ArtifactLocation,
    dest_dir: Path,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Make an artifact available as a local file.

    Local paths are checked and returned as-is; URLs are downloaded
    into dest_dir.

    Raises:
        ResourceError: If the artifact is missing or the download fails
    """
    if not is_url(location):
        path = Path(location)
        if not path.exists():
            raise ResourceError(f"Artifact not found: {path}")
        return path

    name = Path(urlparse(str(location)).path).name or "artifact"
    target = dest_dir / name
    data = await _download(str(location), client)
    await asyncio.to_thread(target.write_bytes, data)
    return target


async def _download(url: str, client: httpx.AsyncClient | None) -> bytes:
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(settings.prover.timeout_seconds))

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("artifact_download_failed", url=url, error=str(e))
        raise ResourceError(f"Unable to fetch artifact: {url}") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.debug("artifact_downloaded", url=url, size=len(response.content))
    return response.content
