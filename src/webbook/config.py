"""Local configuration for webbook."""

from __future__ import annotations

import os


DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "webbook/0.1 (+https://github.com/webbook/webbook)"
DEFAULT_IMAGE_CONCURRENCY = 4
DEFAULT_KINDLEGEN = "kindlegen"

WEBBOOK_FETCH_TIMEOUT_S = float(os.getenv("WEBBOOK_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
WEBBOOK_FETCH_MAX_RETRIES = int(os.getenv("WEBBOOK_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
WEBBOOK_FETCH_BACKOFF_S = float(os.getenv("WEBBOOK_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
WEBBOOK_USER_AGENT = os.getenv("WEBBOOK_USER_AGENT", DEFAULT_USER_AGENT)
# Images referenced by one chapter are downloaded at most this many at a time.
WEBBOOK_IMAGE_CONCURRENCY = int(os.getenv("WEBBOOK_IMAGE_CONCURRENCY", str(DEFAULT_IMAGE_CONCURRENCY)))
WEBBOOK_KINDLEGEN = os.getenv("WEBBOOK_KINDLEGEN", DEFAULT_KINDLEGEN)
