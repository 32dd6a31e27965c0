"""Helpers for downloading tables and tracking cache metadata."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

METADATA_SUFFIX = ".meta.json"
DEFAULT_TIMEOUT = 60

DEFAULT_RETRY = Retry(
    total=4,
    backoff_factor=2,
    status_forcelist=[429, 500, 502, 503, 504],
    allowed_methods=["GET", "HEAD"],
    raise_on_status=False,
)


def create_session(retry: Optional[Retry] = None) -> requests.Session:
    """Build a session that retries transient failures with exponential backoff."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def sha256sum(path: Path) -> str:
    """Compute the SHA256 checksum for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def metadata_path(path: Path) -> Path:
    """Sidecar metadata location for a cached table."""
    return path.with_name(path.name + METADATA_SUFFIX)


def read_metadata(path: Path) -> Mapping[str, Any]:
    """Load metadata JSON attached to a table, returning an empty mapping on failure."""
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        return {}


def write_metadata(path: Path, payload: Mapping[str, Any]) -> None:
    """Persist metadata next to the table to skip redundant downloads."""
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))


def needs_download(target: Path, expected_sha: Optional[str]) -> bool:
    """Determine whether the table must be re-downloaded."""
    if not target.exists():
        return True
    if not expected_sha:
        return False
    return sha256sum(target) != expected_sha


def download_stream(
    url: str,
    dest: Path,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> None:
    """Stream a remote file to disk atomically."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    client = session or create_session()
    with client.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        with tempfile.NamedTemporaryFile(delete=False, dir=dest.parent) as tmp:
            try:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        tmp.write(chunk)
            except BaseException:
                tmp.close()
                os.unlink(tmp.name)
                raise
    os.replace(tmp.name, dest)


def fetch_cached(
    url: str,
    dest: Path,
    force: bool = False,
    session: Optional[requests.Session] = None,
) -> Path:
    """Download `url` into `dest` unless a checksum-verified copy is already cached."""
    meta_path = metadata_path(dest)
    meta = read_metadata(meta_path)
    expected_sha = meta.get("sha256")
    stale_source = meta.get("url") not in (None, url)

    if force or stale_source or needs_download(dest, expected_sha):
        print(f"[datahub] Downloading {url}")
        download_stream(url, dest, session=session)
        write_metadata(
            meta_path,
            {
                "url": url,
                "sha256": sha256sum(dest),
                "downloaded_at": datetime.now(timezone.utc).isoformat(),
            },
        )
    else:
        print(f"[datahub] {dest.name} present; skipping download.")
    return dest


__all__ = [
    "DEFAULT_RETRY",
    "METADATA_SUFFIX",
    "create_session",
    "download_stream",
    "fetch_cached",
    "metadata_path",
    "needs_download",
    "read_metadata",
    "sha256sum",
    "write_metadata",
]
