from __future__ import annotations

import logging
from typing import Optional

import requests

from navindex.infra.network.common import DEFAULT_TIMEOUT, MAX_ARTIFACT_BYTES, USER_AGENT

logger = logging.getLogger(__name__)


def fetch_remote_artifact(url: str, timeout: int = DEFAULT_TIMEOUT) -> Optional[str]:
    """
    Download a published navigation artifact.

    Network problems are logged and reported as None so that one unreachable
    shard does not abort a merge of many.

    Args:
        url: HTTP(S) location of the artifact.
        timeout: Request timeout in seconds.

    Returns:
        Optional[str]: Artifact text, or None on any transport failure.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/x-ndjson, application/json, text/plain"}
    logger.debug(f"Network: Fetching artifact from {url}")

    try:
        response = requests.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()

        if len(response.content) > MAX_ARTIFACT_BYTES:
            logger.warning(f"Network: Artifact at {url} exceeds {MAX_ARTIFACT_BYTES} bytes. Ignored.")
            return None

        size_kb = len(response.content) / 1024
        logger.info(f"Network: Artifact downloaded from {url} ({size_kb:.1f} KB).")
        return response.content.decode("utf-8")

    except requests.exceptions.Timeout:
        logger.warning(f"Network: Artifact download timed out after {timeout}s ({url}).")
    except requests.exceptions.RequestException as e:
        logger.error(f"Network: Communication error while fetching {url}: {e}")
    except UnicodeDecodeError as e:
        logger.error(f"Network: Artifact at {url} is not valid UTF-8: {e}")

    return None
