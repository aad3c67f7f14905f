"""Resolve a git ref of a GitHub repository via smart-HTTP ref discovery.

Only the ``info/refs?service=git-upload-pack`` advertisement is requested; no
objects are fetched. The response is streamed into an
:class:`~gh_resolve_ref.scanner.AdvertisementScanner` and the connection is
closed as soon as the scanner settles, so large advertisements are never
read in full unless the ref is missing.
"""

import logging

import httpx

from .__version__ import __version__
from .models import Outcome, ProtocolError, RefQuery, TransportError, UsageError
from .scanner import AdvertisementScanner
from .settings import get_settings

logger = logging.getLogger(__name__)

UPLOAD_PACK_SERVICE = "git-upload-pack"
# The git transfer protocol accepts basic auth with any user name and the token as password
BASIC_AUTH_USER = "any_user"
USER_AGENT = f"gh-resolve-ref/{__version__}"
USAGE_MESSAGE = "owner and repo are mandatory parameters"


def discovery_url(owner: str, repo: str, host: str | None = None) -> str:
    host = host or get_settings().github_host
    return f"https://{host}/{owner}/{repo}.git/info/refs?service={UPLOAD_PACK_SERVICE}"


def _auth(query: RefQuery) -> httpx.BasicAuth | None:
    if not query.token:
        return None
    return httpx.BasicAuth(BASIC_AUTH_USER, query.token)


def _error_outcome(query: RefQuery, response: httpx.Response) -> ProtocolError:
    status = response.status_code
    # Without credentials GitHub answers 401 for private and missing repos alike
    if (status == 401 and not query.token) or status == 404:
        return ProtocolError(404, f"repository not found: {query.owner}/{query.repo}", not_found=True)
    return ProtocolError(
        status,
        f"failed to fetch git repo info (statusCode: {status}, statusMessage: {response.reason_phrase})",
    )


def _drain(response: httpx.Response, url: str) -> None:
    """Consume and discard an error body to release the connection.

    The status is already known, so a failure while draining is only logged.
    """
    try:
        for _ in response.iter_bytes():
            pass
    except httpx.TransportError as e:
        logger.debug("discarding error body of %s failed: %r", url, e)


async def _adrain(response: httpx.Response, url: str) -> None:
    try:
        async for _ in response.aiter_bytes():
            pass
    except httpx.TransportError as e:
        logger.debug("discarding error body of %s failed: %r", url, e)


def _new_client() -> httpx.Client:
    return httpx.Client(timeout=get_settings().request_timeout)


def _new_async_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_settings().request_timeout)


def _transport_error(url: str, exc: httpx.TransportError) -> TransportError:
    logger.warning("transport failure for %s: %r", url, exc)
    return TransportError(f"failed to fetch git repo info from {url}", exc)


def resolve(query: RefQuery, client: httpx.Client | None = None) -> Outcome:
    """Resolve ``query.ref`` to the SHA-1 of the commit it points to.

    - a branch resolves to its HEAD commit
    - a tag resolves to the object the tag ref points to
    - no ref resolves the repository's default branch

    Args:
        query: owner, repo, optional ref and optional access token.
        client: httpx client to issue the request with. A client built from
            settings is used (and closed) when omitted.

    Returns:
        The outcome of the lookup; never raises for HTTP or network failures.
    """
    if not query.is_valid:
        return UsageError(USAGE_MESSAGE)

    url = discovery_url(query.owner, query.repo)
    owns_client = client is None
    if owns_client:
        client = _new_client()
    try:
        logger.debug("GET %s", url)
        with client.stream(
            "GET", url, auth=_auth(query), headers={"User-Agent": USER_AGENT}
        ) as response:
            if response.status_code != 200:
                logger.warning("GET %s returned %s", url, response.status_code)
                error = _error_outcome(query, response)
                _drain(response, url)
                return error

            scanner = AdvertisementScanner(query.ref)
            for chunk in response.iter_bytes():
                outcome = scanner.feed(chunk)
                if outcome is not None:
                    # leaving the stream context closes the connection mid-body
                    logger.debug("settled after %d ref lines: %s", scanner.lines_scanned, outcome.kind)
                    return outcome
            return scanner.finish()
    except httpx.TransportError as e:
        return _transport_error(url, e)
    finally:
        if owns_client:
            client.close()


async def resolve_async(query: RefQuery, client: httpx.AsyncClient | None = None) -> Outcome:
    """Asyncio variant of :func:`resolve`; yields to the event loop between chunks."""
    if not query.is_valid:
        return UsageError(USAGE_MESSAGE)

    url = discovery_url(query.owner, query.repo)
    owns_client = client is None
    if owns_client:
        client = _new_async_client()
    try:
        logger.debug("GET %s", url)
        async with client.stream(
            "GET", url, auth=_auth(query), headers={"User-Agent": USER_AGENT}
        ) as response:
            if response.status_code != 200:
                logger.warning("GET %s returned %s", url, response.status_code)
                error = _error_outcome(query, response)
                await _adrain(response, url)
                return error

            scanner = AdvertisementScanner(query.ref)
            async for chunk in response.aiter_bytes():
                outcome = scanner.feed(chunk)
                if outcome is not None:
                    logger.debug("settled after %d ref lines: %s", scanner.lines_scanned, outcome.kind)
                    return outcome
            return scanner.finish()
    except httpx.TransportError as e:
        return _transport_error(url, e)
    finally:
        if owns_client:
            await client.aclose()
