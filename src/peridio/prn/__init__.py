"""Permanent Resource Names."""

from peridio.prn.kinds import (
    GLOBAL_KINDS,
    ORGANIZATION_KINDS,
    ResourceKind,
    kind_to_tag,
    prn_arity,
    tag_to_kind,
)
from peridio.prn.validate import PRN, PRN_SCHEME, PRN_VERSION, is_uuid, parse_prn, validate_prn

__all__ = [
    "GLOBAL_KINDS",
    "ORGANIZATION_KINDS",
    "PRN",
    "PRN_SCHEME",
    "PRN_VERSION",
    "ResourceKind",
    "is_uuid",
    "kind_to_tag",
    "parse_prn",
    "prn_arity",
    "tag_to_kind",
    "validate_prn",
]
