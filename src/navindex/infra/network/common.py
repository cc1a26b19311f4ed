from __future__ import annotations

USER_AGENT = "NavIndex-Client/1.0.0"
DEFAULT_TIMEOUT = 10
MAX_ARTIFACT_BYTES = 64 * 1024 * 1024
