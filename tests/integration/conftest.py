"""Fixtures for faking the GitHub smart-HTTP endpoint with httpx.MockTransport."""

import httpx
import pytest

CAPS = "multi_ack thin-pack side-band side-band-64k ofs-delta shallow no-progress include-tag"


def _pkt(payload):
    return f"{len(payload.encode()) + 4:04x}{payload}"


def _build_advertisement(refs, head="refs/heads/main"):
    if head is None:
        first = _pkt(f"{'0' * 40} capabilities^{{}}\0{CAPS} agent=git/github-g\n")
    else:
        head_sha = {name: sha for sha, name in refs}.get(head, "0" * 40)
        first = _pkt(f"{head_sha} HEAD\0{CAPS} symref=HEAD:{head} agent=git/github-g\n")
    body = _pkt("# service=git-upload-pack\n") + "0000" + first
    body += "".join(_pkt(f"{sha} {name}\n") for sha, name in refs)
    return (body + "0000").encode()


@pytest.fixture
def make_advertisement():
    """Build a GitHub-style upload-pack advertisement from ``[(sha, name), ...]``."""
    return _build_advertisement


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def make_client(requests_seen):
    """Build an httpx.Client whose transport answers with ``respond(request)``."""

    def _make(respond):
        def handler(request):
            requests_seen.append(request)
            return respond(request)

        return httpx.Client(transport=httpx.MockTransport(handler))

    return _make
