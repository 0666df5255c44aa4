"""Azure DevOps pull-request feed.

Fetches completed pull requests from the Azure DevOps REST API. The
endpoint is used as configured, e.g.::

    https://dev.azure.com/{org}/{project}/_apis/git/repositories/{repo}/pullrequests
        ?searchCriteria.status=completed&searchCriteria.targetRefName=refs/heads/release/1.2

There is a single request and no retry; any failure aborts the run.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import requests

import auto_changelog
from auto_changelog.exceptions import FeedError

logger = logging.getLogger(__name__)

USER_AGENT = f"auto-changelog/{auto_changelog.__version__}"


def encode_basic_auth(credential: str) -> str:
    """Build a basic-auth header value from ``username:password``.

    The credential is UTF-8 encoded and then standard base64 encoded.
    An Azure personal access token is passed as ``:token``.

    >>> encode_basic_auth("user:pass")
    'Basic dXNlcjpwYXNz'
    """
    token = base64.b64encode(credential.encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def fetch_pull_requests(
    api_url: str,
    credential: str,
    session: requests.Session | None = None,
) -> list[dict[str, Any]]:
    """Fetch the raw pull-request records from the feed.

    Args:
        api_url: Pull-request endpoint
        credential: ``username:password`` for basic auth
        session: Optional session to issue the request with

    Returns:
        The ``value`` list of the response body

    Raises:
        FeedError: On connection or HTTP errors, or an unexpected body
    """
    headers = {
        "Authorization": encode_basic_auth(credential),
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    get = session.get if session is not None else requests.get
    logger.debug("GET %s", api_url)

    try:
        response = get(api_url, headers=headers)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise FeedError(f"Pull request feed returned HTTP {status}", status_code=status) from e
    except requests.exceptions.RequestException as e:
        raise FeedError(f"Could not reach pull request feed: {e}") from e

    try:
        body = response.json()
    except ValueError as e:
        raise FeedError("Pull request feed did not return JSON") from e

    records = body.get("value") if isinstance(body, dict) else None
    if not isinstance(records, list):
        raise FeedError("Pull request feed response has no 'value' list")

    logger.debug("Fetched %d pull requests", len(records))
    return records
