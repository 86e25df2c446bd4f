"""Resource kinds addressable by a PRN and their canonical type tags."""

from __future__ import annotations

from enum import Enum, unique


@unique
class ResourceKind(Enum):
    API_KEY = "api_key"
    ARTIFACT = "artifact"
    ARTIFACT_VERSION = "artifact_version"
    AUDIT_LOG = "audit_log"
    BINARY = "binary"
    BINARY_PART = "binary_part"
    BINARY_SIGNATURE = "binary_signature"
    BUNDLE = "bundle"
    BUNDLE_OVERRIDE = "bundle_override"
    CA_CERTIFICATE = "ca_certificate"
    COHORT = "cohort"
    DEPLOYMENT = "deployment"
    DEVICE = "device"
    DEVICE_CERTIFICATE = "device_certificate"
    EVENT = "event"
    FIRMWARE = "firmware"
    ORG_USER = "org_user"
    ORGANIZATION = "organization"
    PRODUCT = "product"
    RELEASE = "release"
    RELEASE_CLAIM = "release_claim"
    SIGNING_KEY = "signing_key"
    TUNNEL = "tunnel"
    USER = "user"
    USER_TOKEN = "user_token"
    WEB_CONSOLE_SHELL = "web_console_shell"
    WEBHOOK = "webhook"

    @property
    def tag(self) -> str:
        return self.value

    @classmethod
    def from_tag(cls, tag: str) -> ResourceKind | None:
        return _TAG_TO_KIND.get(tag)

    def __str__(self) -> str:
        return self.value


_TAG_TO_KIND: dict[str, ResourceKind] = {kind.value: kind for kind in ResourceKind}

# Organization PRNs are bare (prn:1:<org>); users and user tokens live outside
# any organization (prn:1:<tag>:<id>). Everything else is org-scoped.
ORGANIZATION_KINDS: frozenset[ResourceKind] = frozenset({ResourceKind.ORGANIZATION})
GLOBAL_KINDS: frozenset[ResourceKind] = frozenset({ResourceKind.USER, ResourceKind.USER_TOKEN})


def tag_to_kind(tag: str) -> ResourceKind | None:
    """Resolve a type tag exactly as written; tags are case-sensitive."""
    return _TAG_TO_KIND.get(tag)


def kind_to_tag(kind: ResourceKind) -> str:
    return kind.value


def prn_arity(kind: ResourceKind) -> int:
    """Number of colon-delimited segments a PRN of ``kind`` must have."""
    if kind in ORGANIZATION_KINDS:
        return 3
    if kind in GLOBAL_KINDS:
        return 4
    return 5
