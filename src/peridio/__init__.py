"""Peridio SDK public surface."""

from peridio.client import APIClient, APIRequest
from peridio.errors import (
    APIRequestError,
    APIUnavailableError,
    PeridioError,
    PRNArityError,
    PRNError,
    PRNFormatError,
    PRNInvalidUUIDError,
    PRNTypeMismatchError,
    PRNUnknownTypeError,
    PRNUnsupportedArityError,
    PRNVersionError,
)
from peridio.prn import (
    PRN,
    ResourceKind,
    is_uuid,
    kind_to_tag,
    parse_prn,
    prn_arity,
    tag_to_kind,
    validate_prn,
)

__all__ = [
    "PeridioError",
    "APIClient",
    "APIRequest",
    "APIRequestError",
    "APIUnavailableError",
    "PRN",
    "PRNError",
    "PRNArityError",
    "PRNFormatError",
    "PRNVersionError",
    "PRNInvalidUUIDError",
    "PRNUnknownTypeError",
    "PRNTypeMismatchError",
    "PRNUnsupportedArityError",
    "ResourceKind",
    "is_uuid",
    "kind_to_tag",
    "tag_to_kind",
    "prn_arity",
    "parse_prn",
    "validate_prn",
]
