"""SDK error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from peridio.prn.kinds import ResourceKind


class PeridioError(RuntimeError):
    """Base SDK error."""


class PRNError(PeridioError):
    """A candidate string was rejected as a PRN of the expected kind."""

    def __init__(self, message: str, *, value: str, expected: ResourceKind) -> None:
        super().__init__(message)
        self.value = value
        self.expected = expected


class PRNArityError(PRNError):
    """Segment count is outside of 3, 4 or 5."""


class PRNFormatError(PRNError):
    """First segment is not the literal ``prn``."""


class PRNVersionError(PRNError):
    """Unsupported PRN format version."""


class PRNInvalidUUIDError(PRNError):
    """A UUID-bearing segment is not a syntactically valid UUID."""

    def __init__(
        self,
        message: str,
        *,
        value: str,
        expected: ResourceKind,
        role: str,
    ) -> None:
        super().__init__(message, value=value, expected=expected)
        self.role = role


class PRNUnknownTypeError(PRNError):
    """Type tag does not name any registered resource kind."""

    def __init__(
        self,
        message: str,
        *,
        value: str,
        expected: ResourceKind,
        tag: str,
    ) -> None:
        super().__init__(message, value=value, expected=expected)
        self.tag = tag


class PRNTypeMismatchError(PRNError):
    """Type tag resolves to a kind other than the expected one."""

    def __init__(
        self,
        message: str,
        *,
        value: str,
        expected: ResourceKind,
        found: ResourceKind,
    ) -> None:
        super().__init__(message, value=value, expected=expected)
        self.found = found


class PRNUnsupportedArityError(PRNError):
    """Segment count is valid in general but not for the expected kind."""

    def __init__(
        self,
        message: str,
        *,
        value: str,
        expected: ResourceKind,
        arity: int,
    ) -> None:
        super().__init__(message, value=value, expected=expected)
        self.arity = arity


class APIUnavailableError(PeridioError):
    """API could not be reached."""


class APIRequestError(APIUnavailableError):
    """API returned a structured HTTP error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: object | None = None,
        body: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.body = body
