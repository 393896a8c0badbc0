"""
HTTP glue to the remote problem bank and scoring log.

The remote side is a plain JSON-over-HTTP script endpoint:
- ``GET  <url>?pool=...&order=...&limit=...&textno=...`` returns problems
- ``POST <url>`` with ``{id, passed, scorePct}`` appends to the scoring log
"""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0

# Everything urllib can raise for an unreachable, misbehaving or malformed
# endpoint. ValueError covers URLs without a scheme.
TRANSPORT_ERRORS = (
    urllib.error.URLError,
    http.client.HTTPException,
    OSError,
    ValueError,
)


class RemoteError(RuntimeError):
    """The remote endpoint could not be reached or answered with an error."""


def post_json(
    url: str,
    item: Dict[str, Any],
    token: str = "",
    timeout: float = DEFAULT_TIMEOUT_S,
) -> bool:
    """
    POST one JSON document.

    Network and HTTP failures are the expected offline case for queued
    events, so they are logged and reported as False rather than raised.

    Args:
        url: Endpoint URL.
        item: JSON-serializable document.
        token: Optional shared secret sent as ``X-Auth-Token``.
        timeout: Socket timeout in seconds.

    Returns:
        True if the server answered with a 2xx status.
    """
    headers = {"Content-Type": "application/json"}
    if token:
        headers["X-Auth-Token"] = token

    try:
        request = urllib.request.Request(
            url,
            data=json.dumps(item, ensure_ascii=False).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        with urllib.request.urlopen(request, timeout=timeout) as response:
            ok = 200 <= response.status < 300
    except TRANSPORT_ERRORS as e:
        logger.warning(f"Remote post failed: {e}")
        return False

    if not ok:
        logger.warning(f"Remote post rejected with status {response.status}")
    return ok


class ProblemClient:
    """
    Client for the problem bank and scoring log.

    Example:
        >>> client = ProblemClient("https://example.org/exec")
        >>> problems = client.fetch_problems(pool="review", limit=10)
        >>> client.save_result(problems[0]["id"], passed=True, score_pct=78)
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT_S):
        if not base_url:
            raise ValueError("base_url must not be empty")
        self.base_url = base_url.strip()
        self.timeout = timeout

    def fetch_problems(
        self,
        pool: str = "all",
        order: str = "seq",
        limit: int = 50,
        textno: str = "",
    ) -> List[Dict[str, Any]]:
        """
        Fetch a list of problems.

        Raises:
            RemoteError: On network failure, HTTP error or a non-list body.
        """
        query = urllib.parse.urlencode(
            {"pool": pool, "order": order, "limit": limit, "textno": textno}
        )
        url = f"{self.base_url}?{query}"
        logger.debug(f"Fetching problems from {url}")

        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                raw = response.read()
        except TRANSPORT_ERRORS as e:
            raise RemoteError(f"Could not fetch problems: {e}") from e

        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RemoteError(f"Problem list is not valid JSON: {e}") from e

        if not isinstance(body, list):
            raise RemoteError(f"Expected a list of problems, got {type(body).__name__}")

        logger.info(f"Fetched {len(body)} problems (pool={pool}, order={order})")
        return body

    def save_result(self, problem_id: Any, passed: bool, score_pct: float) -> None:
        """
        Append one result to the scoring log.

        Sent as ``text/plain`` so browsers and script hosts treat it as a
        simple request without a preflight.

        Raises:
            RemoteError: On network failure or HTTP error.
        """
        payload = {"id": problem_id, "passed": bool(passed), "scorePct": score_pct}
        try:
            request = urllib.request.Request(
                self.base_url,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                method="POST",
            )
            with urllib.request.urlopen(request, timeout=self.timeout):
                pass
        except TRANSPORT_ERRORS as e:
            raise RemoteError(f"Could not save result for {problem_id!r}: {e}") from e

        logger.info(f"Saved result for {problem_id!r}: {score_pct}%")
