from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the HTTP clients used to pull previously published navigation
artifacts into a merge.
"""

from navindex.infra.network.artifact_client import fetch_remote_artifact
from navindex.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

__all__ = [
    "fetch_remote_artifact",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
]
