"""Query, result and outcome types for ref resolution."""

from dataclasses import dataclass
from typing import ClassVar, Union

FULL_REF_PREFIX = "refs/"
HEADS_PREFIX = "refs/heads/"
TAGS_PREFIX = "refs/tags/"


@dataclass(frozen=True)
class RefQuery:
    """A single resolve request.

    ``ref`` may be a short name (``main``, ``v1.0.0``), a fully qualified name
    (``refs/tags/v1.0.0``) or ``None`` for the repository's default branch.
    ``token`` is only needed for private repositories.
    """

    owner: str
    repo: str
    ref: str | None = None
    token: str | None = None

    @property
    def is_valid(self) -> bool:
        return bool(self.owner) and bool(self.repo)


def search_terms(ref: str | None) -> list[str]:
    """Fully qualified ref names that satisfy ``ref``, branch candidate first."""
    if not ref:
        return []
    if ref.startswith(FULL_REF_PREFIX):
        return [ref]
    # short ref name, potentially ambiguous
    return [f"{HEADS_PREFIX}{ref}", f"{TAGS_PREFIX}{ref}"]


@dataclass(frozen=True)
class Result:
    sha: str
    fq_ref: str

    def to_dict(self) -> dict:
        return {"sha": self.sha, "fqRef": self.fq_ref}


@dataclass(frozen=True)
class Resolved:
    kind: ClassVar[str] = "resolved"

    result: Result


@dataclass(frozen=True)
class NotFound:
    """The repository was read but no advertised ref matched."""

    kind: ClassVar[str] = "not_found"


@dataclass(frozen=True)
class EmptyRepository:
    """The advertisement carries no ``symref=HEAD:`` so there is no default branch."""

    kind: ClassVar[str] = "empty_repository"


@dataclass(frozen=True)
class UsageError:
    kind: ClassVar[str] = "usage_error"

    message: str


@dataclass(frozen=True)
class ProtocolError:
    """The git host answered the discovery request with a non-200 status.

    ``not_found`` marks a repository that does not exist or is not visible
    without credentials; its ``status_code`` is always 404.
    """

    kind: ClassVar[str] = "protocol_error"

    status_code: int
    message: str
    not_found: bool = False


@dataclass(frozen=True)
class TransportError:
    kind: ClassVar[str] = "transport_error"

    message: str
    cause: BaseException | None = None

    def __str__(self) -> str:
        return f"{self.message}: {self.cause}" if self.cause is not None else self.message


Outcome = Union[Resolved, NotFound, EmptyRepository, UsageError, ProtocolError, TransportError]


def failure_message(outcome: Outcome) -> str:
    """Human-readable text for every outcome except :class:`Resolved`."""
    if isinstance(outcome, NotFound):
        return "ref not found"
    if isinstance(outcome, EmptyRepository):
        return "repository is empty (no default branch)"
    if isinstance(outcome, UsageError):
        return outcome.message
    if isinstance(outcome, TransportError):
        # (temporary?) network issue
        return f"failed to fetch git repo info: {outcome}"
    if isinstance(outcome, ProtocolError):
        return f"failed to fetch git repo info (status: {outcome.status_code}, message: {outcome.message})"
    raise TypeError(f"no failure message for outcome: {outcome!r}")
