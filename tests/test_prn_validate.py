from __future__ import annotations

import pytest

from peridio.errors import (
    PRNArityError,
    PRNError,
    PRNFormatError,
    PRNInvalidUUIDError,
    PRNTypeMismatchError,
    PRNUnknownTypeError,
    PRNUnsupportedArityError,
    PRNVersionError,
)
from peridio.prn import ResourceKind, is_uuid, parse_prn, validate_prn

ORG_ID = "0a3a8b64-2c8f-4f6c-9a5e-6e8f9b1c2d3e"
RES_ID = "7f1b0f5e-1234-4abc-8def-0123456789ab"


def _scoped(tag: str, resource_id: str = RES_ID, org_id: str = ORG_ID) -> str:
    return f"prn:1:{org_id}:{tag}:{resource_id}"


def test_organization_prn_is_returned_unchanged() -> None:
    candidate = f"prn:1:{ORG_ID}"
    assert validate_prn(ResourceKind.ORGANIZATION, candidate) == candidate


def test_uppercase_uuid_is_accepted_without_normalizing() -> None:
    candidate = f"prn:1:{ORG_ID.upper()}"
    assert validate_prn(ResourceKind.ORGANIZATION, candidate) == candidate


def test_organization_rejects_five_segment_form() -> None:
    candidate = _scoped("organization", RES_ID)
    with pytest.raises(PRNUnsupportedArityError) as exc_info:
        validate_prn(ResourceKind.ORGANIZATION, candidate)
    assert exc_info.value.arity == 5


def test_three_segment_form_is_organization_only() -> None:
    with pytest.raises(PRNUnsupportedArityError):
        validate_prn(ResourceKind.DEVICE, f"prn:1:{ORG_ID}")


def test_wrong_version_literal_is_rejected() -> None:
    with pytest.raises(PRNVersionError):
        validate_prn(ResourceKind.DEVICE, f"prn:2:{ORG_ID}:device:{RES_ID}")


def test_wrong_scheme_literal_is_rejected() -> None:
    with pytest.raises(PRNFormatError):
        validate_prn(ResourceKind.ORGANIZATION, f"urn:1:{ORG_ID}")


def test_scheme_is_checked_before_version() -> None:
    with pytest.raises(PRNFormatError):
        validate_prn(ResourceKind.DEVICE, f"xrn:2:{ORG_ID}:device:{RES_ID}")


def test_tag_for_another_kind_is_a_type_mismatch() -> None:
    with pytest.raises(PRNTypeMismatchError) as exc_info:
        validate_prn(ResourceKind.FIRMWARE, _scoped("cohort"))
    assert exc_info.value.expected is ResourceKind.FIRMWARE
    assert exc_info.value.found is ResourceKind.COHORT


def test_malformed_resource_uuid_is_rejected() -> None:
    with pytest.raises(PRNInvalidUUIDError) as exc_info:
        validate_prn(ResourceKind.DEVICE, _scoped("device", "not-a-uuid"))
    assert exc_info.value.role == "resource"


def test_malformed_organization_uuid_is_rejected() -> None:
    with pytest.raises(PRNInvalidUUIDError) as exc_info:
        validate_prn(ResourceKind.DEVICE, _scoped("device", org_id="acme"))
    assert exc_info.value.role == "organization"


def test_malformed_organization_id_in_bare_form_is_rejected() -> None:
    with pytest.raises(PRNInvalidUUIDError) as exc_info:
        validate_prn(ResourceKind.ORGANIZATION, "prn:1:acme")
    assert exc_info.value.role == "organization"


def test_unknown_tag_is_rejected() -> None:
    with pytest.raises(PRNUnknownTypeError) as exc_info:
        validate_prn(ResourceKind.DEVICE, _scoped("gadget"))
    assert exc_info.value.tag == "gadget"


def test_tag_comparison_is_case_sensitive() -> None:
    with pytest.raises(PRNUnknownTypeError):
        validate_prn(ResourceKind.DEVICE, _scoped("Device"))


def test_organization_uuid_checked_before_tag() -> None:
    with pytest.raises(PRNInvalidUUIDError):
        validate_prn(ResourceKind.DEVICE, _scoped("gadget", org_id="acme"))


@pytest.mark.parametrize(
    "kind",
    [kind for kind in ResourceKind if kind not in {
        ResourceKind.ORGANIZATION,
        ResourceKind.USER,
        ResourceKind.USER_TOKEN,
    }],
    ids=lambda kind: kind.tag,
)
def test_scoped_kinds_accept_their_own_tag(kind: ResourceKind) -> None:
    candidate = _scoped(kind.tag)
    assert validate_prn(kind, candidate) == candidate


def test_user_and_user_token_global_forms_are_accepted() -> None:
    user = f"prn:1:user:{RES_ID}"
    token = f"prn:1:user_token:{RES_ID}"
    assert validate_prn(ResourceKind.USER, user) == user
    assert validate_prn(ResourceKind.USER_TOKEN, token) == token


def test_user_rejects_user_token_tag() -> None:
    with pytest.raises(PRNTypeMismatchError) as exc_info:
        validate_prn(ResourceKind.USER, f"prn:1:user_token:{RES_ID}")
    assert exc_info.value.found is ResourceKind.USER_TOKEN


def test_user_token_rejects_user_tag() -> None:
    with pytest.raises(PRNTypeMismatchError):
        validate_prn(ResourceKind.USER_TOKEN, f"prn:1:user:{RES_ID}")


def test_global_form_rejects_known_non_user_tag() -> None:
    # Regression: only user and user_token may appear in the 4-segment form.
    with pytest.raises(PRNTypeMismatchError) as exc_info:
        validate_prn(ResourceKind.USER, f"prn:1:device:{RES_ID}")
    assert exc_info.value.found is ResourceKind.DEVICE


def test_global_form_rejects_unknown_tag() -> None:
    with pytest.raises(PRNUnknownTypeError):
        validate_prn(ResourceKind.USER, f"prn:1:person:{RES_ID}")


def test_global_form_checks_resource_uuid() -> None:
    with pytest.raises(PRNInvalidUUIDError) as exc_info:
        validate_prn(ResourceKind.USER, "prn:1:user:12345")
    assert exc_info.value.role == "resource"


def test_four_segment_form_rejected_for_scoped_kind_before_content_checks() -> None:
    with pytest.raises(PRNUnsupportedArityError) as exc_info:
        validate_prn(ResourceKind.DEVICE, "prn:1:zzz:zzz")
    assert exc_info.value.arity == 4


def test_user_rejects_five_segment_form() -> None:
    with pytest.raises(PRNUnsupportedArityError):
        validate_prn(ResourceKind.USER, _scoped("user"))


@pytest.mark.parametrize("candidate", ["prn:1", "prn:1:a:b:c:d", "prn", "", "prn:1:::::"])
@pytest.mark.parametrize("kind", list(ResourceKind), ids=lambda kind: kind.tag)
def test_segment_count_outside_three_to_five_is_arity_error(
    kind: ResourceKind,
    candidate: str,
) -> None:
    with pytest.raises(PRNArityError):
        validate_prn(kind, candidate)


@pytest.mark.parametrize(
    "resource_id",
    [
        "{" + RES_ID + "}",
        RES_ID.replace("-", ""),
        RES_ID + "\n",
        RES_ID[:-1],
        RES_ID[:-1] + "g",
    ],
)
def test_non_canonical_uuid_text_is_rejected(resource_id: str) -> None:
    with pytest.raises(PRNInvalidUUIDError):
        validate_prn(ResourceKind.DEVICE, _scoped("device", resource_id))


def test_uuid_version_bits_are_not_checked() -> None:
    nil = "00000000-0000-0000-0000-000000000000"
    assert is_uuid(nil)
    candidate = _scoped("device", nil, nil)
    assert validate_prn(ResourceKind.DEVICE, candidate) == candidate


def test_validation_is_repeatable() -> None:
    candidate = _scoped("device")
    first = validate_prn(ResourceKind.DEVICE, candidate)
    second = validate_prn(ResourceKind.DEVICE, candidate)
    assert first == second == candidate


def test_parse_prn_exposes_segments() -> None:
    scoped = parse_prn(ResourceKind.COHORT, _scoped("cohort"))
    assert scoped.kind is ResourceKind.COHORT
    assert scoped.organization_id == ORG_ID
    assert scoped.resource_id == RES_ID

    user = parse_prn(ResourceKind.USER, f"prn:1:user:{RES_ID}")
    assert user.organization_id is None
    assert user.resource_id == RES_ID

    org = parse_prn(ResourceKind.ORGANIZATION, f"prn:1:{ORG_ID}")
    assert org.organization_id == org.resource_id == ORG_ID


def test_errors_carry_value_and_expected_kind() -> None:
    candidate = _scoped("cohort")
    with pytest.raises(PRNError) as exc_info:
        validate_prn(ResourceKind.FIRMWARE, candidate)
    assert exc_info.value.value == candidate
    assert exc_info.value.expected is ResourceKind.FIRMWARE
    assert "expected 'firmware' PRN" in str(exc_info.value)
