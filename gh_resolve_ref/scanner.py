"""Incremental scanner for git smart-HTTP ref advertisements.

The body of ``info/refs?service=git-upload-pack`` is a sequence of pkt-lines
(https://git-scm.com/docs/protocol-common#_pkt_line_format)::

    001e# service=git-upload-pack
    0000015a<sha> HEAD\\0<capabilities> symref=HEAD:refs/heads/main ...
    003f<sha> refs/heads/main
    003e<sha> refs/tags/v1.0.0
    0000

Every record ends with a line feed, so the scanner only splits on ``\\n``
instead of framing by pkt-length. The first two lines are the header; the
second carries the ``symref=HEAD:`` token naming the default branch.

Chunks can be cut at any byte offset, including inside the length prefix or
inside a multi-byte character, so lines are reassembled as bytes and only
decoded once complete.
"""

import re
from enum import Enum

from .models import EmptyRepository, NotFound, Outcome, Resolved, Result, search_terms

DEFAULT_BRANCH_RE = re.compile(r"symref=HEAD:(\S+)")
PKT_LEN_SIZE = 4
HEADER_LINES = 2


class ScanState(Enum):
    AWAITING_HEADER = "awaiting_header"
    HEADER_COMPLETE = "header_complete"
    SCANNING = "scanning"
    MATCHED = "matched"
    EXHAUSTED = "exhausted"
    NO_DEFAULT_BRANCH = "no_default_branch"


TERMINAL_STATES = frozenset({ScanState.MATCHED, ScanState.EXHAUSTED, ScanState.NO_DEFAULT_BRANCH})


def parse_ref_line(line: str) -> tuple[str, str] | None:
    """Split a pkt-line into ``(sha, fq_ref)``, or ``None`` if it is not a ref line."""
    if len(line) <= PKT_LEN_SIZE:
        # flush-pkt ("0000") or garbage
        return None
    payload = line[PKT_LEN_SIZE:].split("\0", 1)[0]
    parts = payload.split(" ")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


class AdvertisementScanner:
    """Matches the advertised refs of one discovery response against a ref query.

    Feed body chunks in arrival order with :meth:`feed`. It returns ``None``
    while more data is needed and the terminal outcome as soon as one is
    known. Once terminal, further chunks are ignored. Call :meth:`finish` when
    the body is exhausted.
    """

    def __init__(self, ref: str | None = None):
        self.ref = ref or None
        self.search_terms = search_terms(self.ref)
        self.state = ScanState.AWAITING_HEADER
        self.header: list[str] = []
        self.lines_scanned = 0
        self._partial = b""
        self._outcome: Outcome | None = None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def feed(self, chunk: bytes) -> Outcome | None:
        if self.done:
            return self._outcome

        data = self._partial + chunk
        *lines, self._partial = data.split(b"\n")
        for raw in lines:
            self._process_line(raw.decode("utf-8", errors="replace"))
            if self.done:
                break
        return self._outcome

    def finish(self) -> Outcome:
        """Flush the trailing partial line and settle the outcome."""
        if self.done:
            return self._outcome

        if self._partial:
            raw, self._partial = self._partial, b""
            self._process_line(raw.decode("utf-8", errors="replace"))
            if self.done:
                return self._outcome

        if self.state is ScanState.AWAITING_HEADER and self.ref is None:
            # body ended before the header could name a default branch
            return self._terminate(ScanState.NO_DEFAULT_BRANCH, EmptyRepository())
        return self._terminate(ScanState.EXHAUSTED, NotFound())

    def _terminate(self, state: ScanState, outcome: Outcome) -> Outcome:
        self.state = state
        self._outcome = outcome
        # no lines outlive the scan
        self.header = []
        self._partial = b""
        return outcome

    def _process_line(self, line: str) -> None:
        if self.state is ScanState.AWAITING_HEADER:
            self.header.append(line)
            if len(self.header) == HEADER_LINES:
                self.state = ScanState.HEADER_COMPLETE
                self._process_header()
            return

        self.lines_scanned += 1
        parsed = parse_ref_line(line)
        if parsed is None:
            return
        sha, fq_ref = parsed
        if fq_ref in self.search_terms:
            self._terminate(ScanState.MATCHED, Resolved(Result(sha=sha, fq_ref=fq_ref)))

    def _process_header(self) -> None:
        if self.ref is None:
            match = DEFAULT_BRANCH_RE.search(self.header[1])
            if match is None:
                self._terminate(ScanState.NO_DEFAULT_BRANCH, EmptyRepository())
                return
            self.search_terms.append(match.group(1))
        self.state = ScanState.SCANNING
