"""PRN validation.

A PRN (Permanent Resource Name) takes one of three shapes:

- ``prn:1:<org-uuid>``                          organizations
- ``prn:1:<type-tag>:<resource-uuid>``          users and user tokens
- ``prn:1:<org-uuid>:<type-tag>:<resource-uuid>`` everything else

Validation never rewrites its input; an accepted PRN is returned exactly as
given so it can be forwarded to the API byte for byte.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from peridio.errors import (
    PRNArityError,
    PRNFormatError,
    PRNInvalidUUIDError,
    PRNTypeMismatchError,
    PRNUnknownTypeError,
    PRNUnsupportedArityError,
    PRNVersionError,
)
from peridio.prn.kinds import GLOBAL_KINDS, ORGANIZATION_KINDS, ResourceKind, tag_to_kind

PRN_SCHEME = "prn"
PRN_VERSION = "1"

_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


@dataclass(frozen=True)
class PRN:
    value: str
    kind: ResourceKind
    resource_id: str
    organization_id: str | None = None


def is_uuid(value: str) -> bool:
    return _UUID_RE.fullmatch(value) is not None


def _require_uuid(segment: str, *, role: str, value: str, expected: ResourceKind) -> str:
    if not is_uuid(segment):
        raise PRNInvalidUUIDError(
            f"invalid PRN UUID, expected valid '{role}' UUID in PRN",
            value=value,
            expected=expected,
            role=role,
        )
    return segment


def _resolve_tag(tag: str, *, value: str, expected: ResourceKind) -> ResourceKind:
    kind = tag_to_kind(tag)
    if kind is None:
        raise PRNUnknownTypeError(
            f"invalid PRN type, unknown type '{tag}'",
            value=value,
            expected=expected,
            tag=tag,
        )
    return kind


def _unsupported_arity(
    arity: int,
    *,
    value: str,
    expected: ResourceKind,
) -> PRNUnsupportedArityError:
    return PRNUnsupportedArityError(
        f"invalid PRN type, '{expected.tag}' PRN cannot have {arity} segments",
        value=value,
        expected=expected,
        arity=arity,
    )


def _parse_organization(expected: ResourceKind, body: list[str], value: str) -> PRN:
    if expected not in ORGANIZATION_KINDS:
        raise _unsupported_arity(3, value=value, expected=expected)
    (org_id,) = body
    _require_uuid(org_id, role="organization", value=value, expected=expected)
    return PRN(value=value, kind=expected, resource_id=org_id, organization_id=org_id)


def _parse_global(expected: ResourceKind, body: list[str], value: str) -> PRN:
    if expected not in GLOBAL_KINDS:
        raise _unsupported_arity(4, value=value, expected=expected)
    tag, resource_id = body
    found = _resolve_tag(tag, value=value, expected=expected)
    if found not in GLOBAL_KINDS or found is not expected:
        raise PRNTypeMismatchError(
            f"invalid PRN type, expected '{expected.tag}' PRN, got '{found.tag}'",
            value=value,
            expected=expected,
            found=found,
        )
    _require_uuid(resource_id, role="resource", value=value, expected=expected)
    return PRN(value=value, kind=found, resource_id=resource_id)


def _parse_scoped(expected: ResourceKind, body: list[str], value: str) -> PRN:
    if expected in ORGANIZATION_KINDS or expected in GLOBAL_KINDS:
        raise _unsupported_arity(5, value=value, expected=expected)
    org_id, tag, resource_id = body
    _require_uuid(org_id, role="organization", value=value, expected=expected)
    found = _resolve_tag(tag, value=value, expected=expected)
    if found is not expected:
        raise PRNTypeMismatchError(
            f"invalid PRN type, expected '{expected.tag}' PRN, got '{found.tag}'",
            value=value,
            expected=expected,
            found=found,
        )
    _require_uuid(resource_id, role="resource", value=value, expected=expected)
    return PRN(value=value, kind=found, resource_id=resource_id, organization_id=org_id)


_ARITY_PARSERS: dict[int, Callable[[ResourceKind, list[str], str], PRN]] = {
    3: _parse_organization,
    4: _parse_global,
    5: _parse_scoped,
}


def parse_prn(expected: ResourceKind, candidate: str) -> PRN:
    """Check ``candidate`` against ``expected`` and return its parts.

    Raises the :class:`~peridio.errors.PRNError` subclass for the first rule
    the candidate breaks.
    """
    segments = candidate.split(":")
    parser = _ARITY_PARSERS.get(len(segments))
    if parser is None:
        raise PRNArityError(
            f"invalid PRN, expected 3 to 5 segments, got {len(segments)}",
            value=candidate,
            expected=expected,
        )

    scheme, version, *body = segments
    if scheme != PRN_SCHEME:
        raise PRNFormatError(
            f"invalid PRN, expected '{PRN_SCHEME}' prefix",
            value=candidate,
            expected=expected,
        )
    if version != PRN_VERSION:
        raise PRNVersionError(
            f"invalid PRN, unsupported version '{version}'",
            value=candidate,
            expected=expected,
        )

    return parser(expected, body, candidate)


def validate_prn(expected: ResourceKind, candidate: str) -> str:
    return parse_prn(expected, candidate).value
