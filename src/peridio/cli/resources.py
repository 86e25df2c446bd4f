"""Per-resource command tables for the peridio CLI.

Every API subcommand is declared here as a method, a path template and the
flags it accepts. A flag's location decides where its value ends up:

- ``path``  substituted into the path template (URL-quoted, ``:`` kept)
- ``query`` sent as a query parameter
- ``body``  sent as a key of the JSON body
- ``local`` consumed by the command's prepare hook and never sent

Flags typed as a PRN carry the :class:`ResourceKind` they must name and are
validated before anything else happens.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Literal
from urllib.parse import quote

from pydantic import ValidationError

from peridio.client import APIRequest
from peridio.crypto.signing import (
    SigningKeyError,
    load_private_key,
    load_public_key,
    public_key_pem,
    sign_binary_hash,
)
from peridio.errors import APIUnavailableError, PRNError
from peridio.prn import ResourceKind, validate_prn
from peridio.schemas import BinaryResponse

if TYPE_CHECKING:
    from peridio.client import APIClient

FieldType = Literal["str", "int", "bool", "json", "list", "path"]
Location = Literal["body", "query", "path", "local"]

_BODY_METHODS = {"POST", "PUT", "PATCH"}


class InputError(ValueError):
    """Raised when a flag value cannot be turned into request data."""

    def __init__(self, message: str, *, flag: str | None = None, value: str | None = None) -> None:
        super().__init__(message)
        self.flag = flag
        self.value = value


@dataclass(frozen=True)
class Field:
    name: str
    type: FieldType = "str"
    location: Location = "body"
    required: bool = False
    prn: ResourceKind | None = None
    help: str | None = None

    @property
    def flag(self) -> str:
        return "--" + self.name.replace("_", "-")

    @property
    def metavar(self) -> str:
        return self.name.upper()

    @property
    def display(self) -> str:
        if self.type == "bool":
            return self.flag
        return f"{self.flag} <{self.metavar}>"


Prepare = Callable[[dict[str, Any], "APIClient"], None]


@dataclass(frozen=True)
class Command:
    name: str
    method: str
    path: str
    fields: tuple[Field, ...] = ()
    help: str | None = None
    prepare: Prepare | None = None


@dataclass(frozen=True)
class Resource:
    name: str
    help: str
    commands: tuple[Command, ...]

    def command(self, name: str) -> Command:
        for command in self.commands:
            if command.name == name:
                return command
        raise KeyError(name)


def _prn(
    name: str,
    kind: ResourceKind,
    *,
    location: Location = "body",
    required: bool = False,
) -> Field:
    return Field(name, location=location, required=required, prn=kind, help=f"{kind.tag} PRN")


def _path(name: str, *, type: FieldType = "str") -> Field:
    return Field(name, type=type, location="path", required=True)


_LIST_FIELDS = (
    Field("limit", type="int", location="query", help="Maximum number of results"),
    Field("order", location="query", help="Sort order: asc or desc"),
    Field("search", location="query", help="Search expression"),
    Field("page", location="query", help="Page cursor from a previous list response"),
)


def _crud(
    collection: str,
    kind: ResourceKind,
    *,
    create: tuple[Field, ...],
    update: tuple[Field, ...] | None = None,
    delete: bool = True,
    create_prepare: Prepare | None = None,
) -> tuple[Command, ...]:
    """Standard commands for a collection addressed by PRN."""
    label = kind.tag.replace("_", " ")
    target = _prn("prn", kind, location="path", required=True)
    commands = [
        Command(
            "create",
            "POST",
            f"/{collection}",
            create,
            help=f"Create a {label}",
            prepare=create_prepare,
        ),
        Command("get", "GET", f"/{collection}/{{prn}}", (target,), help=f"Get a {label}"),
        Command("list", "GET", f"/{collection}", _LIST_FIELDS, help=f"List {label}s"),
    ]
    if update is not None:
        commands.append(
            Command(
                "update",
                "PATCH",
                f"/{collection}/{{prn}}",
                (target, *update),
                help=f"Update a {label}",
            )
        )
    if delete:
        commands.append(
            Command(
                "delete",
                "DELETE",
                f"/{collection}/{{prn}}",
                (target,),
                help=f"Delete a {label}",
            )
        )
    return tuple(commands)


def _read_base64(path: str, *, flag: str) -> str:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise InputError(f"cannot read file: {exc.strerror or exc}", flag=flag, value=path) from exc
    return base64.b64encode(data).decode("ascii")


def _encode_files(*pairs: tuple[str, str]) -> Prepare:
    """Replace ``<source>`` path flags with base64 ``<target>`` body values."""

    def prepare(values: dict[str, Any], client: APIClient) -> None:  # noqa: ARG001
        for source, target in pairs:
            path = values.pop(source, None)
            if path is not None:
                values[target] = _read_base64(path, flag=Field(source).flag)
            if not values.get(target):
                raise InputError(
                    f"one of {Field(target).flag} or {Field(source).flag} is required"
                )

    return prepare


def _prepare_signing_key(values: dict[str, Any], client: APIClient) -> None:  # noqa: ARG001
    key_path = values.pop("key_path", None)
    if key_path is not None:
        values["value"] = public_key_pem(load_public_key(key_path))
    if not values.get("value"):
        raise InputError("one of --value or --key-path is required")


def _prepare_binary_signature(values: dict[str, Any], client: APIClient) -> None:
    key_pair_path = values.pop("signing_key_pair", None)
    if key_pair_path is not None:
        private_key = load_private_key(key_pair_path)
        try:
            binary = BinaryResponse.model_validate(client.get_binary(values["binary_prn"])).binary
        except ValidationError as exc:
            raise APIUnavailableError(
                f"unexpected binary response: {exc.error_count()} invalid field(s)"
            ) from exc
        if not binary.hash:
            raise SigningKeyError("binary has no hash yet; set --hash on the binary first")
        values["signature"] = sign_binary_hash(private_key, binary.hash)
    if not values.get("signature"):
        raise InputError("one of --signature or --signing-key-pair is required")


ARTIFACTS = Resource(
    "artifacts",
    "Manage artifacts",
    _crud(
        "artifacts",
        ResourceKind.ARTIFACT,
        create=(
            _prn("organization_prn", ResourceKind.ORGANIZATION, required=True),
            Field("name", required=True),
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
            Field("id", help="Client-chosen UUID for the new artifact"),
        ),
        update=(
            Field("name"),
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
        ),
    ),
)

ARTIFACT_VERSIONS = Resource(
    "artifact-versions",
    "Manage artifact versions",
    _crud(
        "artifact_versions",
        ResourceKind.ARTIFACT_VERSION,
        create=(
            _prn("artifact_prn", ResourceKind.ARTIFACT, required=True),
            Field("version", required=True),
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
            Field("id", help="Client-chosen UUID for the new artifact version"),
        ),
        update=(
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
        ),
    ),
)

BINARIES = Resource(
    "binaries",
    "Manage binaries",
    _crud(
        "binaries",
        ResourceKind.BINARY,
        create=(
            _prn("artifact_version_prn", ResourceKind.ARTIFACT_VERSION, required=True),
            Field("target", required=True),
            Field("hash", help="SHA-256 of the binary, hex encoded"),
            Field("size", type="int", help="Size in bytes"),
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
            Field("id", help="Client-chosen UUID for the new binary"),
        ),
        update=(
            Field("state", help="uploadable, hashable, hashing, signable, signed or destroyed"),
            Field("hash", help="SHA-256 of the binary, hex encoded"),
            Field("size", type="int", help="Size in bytes"),
            Field("description"),
            Field("custom_metadata", type="json", help="JSON object"),
        ),
    ),
)

_binary_target = _prn("binary_prn", ResourceKind.BINARY, location="path", required=True)

BINARY_PARTS = Resource(
    "binary-parts",
    "Manage binary parts",
    (
        Command(
            "create",
            "POST",
            "/binaries/{binary_prn}/parts",
            (
                _binary_target,
                Field("index", type="int", required=True),
                Field("hash", required=True, help="SHA-256 of the part, hex encoded"),
                Field("size", type="int", required=True, help="Size in bytes"),
            ),
            help="Create a binary part",
        ),
        Command(
            "list",
            "GET",
            "/binaries/{binary_prn}/parts",
            (_binary_target,),
            help="List binary parts",
        ),
        Command(
            "delete",
            "DELETE",
            "/binaries/{binary_prn}/parts/{index}",
            (_binary_target, _path("index", type="int")),
            help="Delete a binary part",
        ),
    ),
)

BINARY_SIGNATURES = Resource(
    "binary-signatures",
    "Manage binary signatures",
    (
        Command(
            "create",
            "POST",
            "/binary_signatures",
            (
                _prn("binary_prn", ResourceKind.BINARY, required=True),
                _prn("signing_key_prn", ResourceKind.SIGNING_KEY, required=True),
                Field("signature", help="Hex encoded Ed25519 signature of the binary hash"),
                Field(
                    "signing_key_pair",
                    type="path",
                    location="local",
                    help="Ed25519 private key PEM used to sign the binary hash locally",
                ),
            ),
            help="Create a binary signature",
            prepare=_prepare_binary_signature,
        ),
        Command(
            "delete",
            "DELETE",
            "/binary_signatures/{prn}",
            (_prn("prn", ResourceKind.BINARY_SIGNATURE, location="path", required=True),),
            help="Delete a binary signature",
        ),
    ),
)

_CA_CERTIFICATES = "/orgs/{organization_name}/ca_certificates"

CA_CERTIFICATES = Resource(
    "ca-certificates",
    "Manage CA certificates",
    (
        Command(
            "create",
            "POST",
            _CA_CERTIFICATES,
            (
                Field("certificate", help="Base64 encoded PEM certificate"),
                Field("certificate_path", type="path", location="local"),
                Field("verification_certificate", help="Base64 encoded PEM certificate"),
                Field("verification_certificate_path", type="path", location="local"),
                Field("description"),
            ),
            help="Register a CA certificate",
            prepare=_encode_files(
                ("certificate_path", "certificate"),
                ("verification_certificate_path", "verification_certificate"),
            ),
        ),
        Command(
            "get",
            "GET",
            _CA_CERTIFICATES + "/{ca_certificate_serial}",
            (_path("ca_certificate_serial"),),
            help="Get a CA certificate",
        ),
        Command("list", "GET", _CA_CERTIFICATES, help="List CA certificates"),
        Command(
            "update",
            "PATCH",
            _CA_CERTIFICATES + "/{ca_certificate_serial}",
            (_path("ca_certificate_serial"), Field("description")),
            help="Update a CA certificate",
        ),
        Command(
            "delete",
            "DELETE",
            _CA_CERTIFICATES + "/{ca_certificate_serial}",
            (_path("ca_certificate_serial"),),
            help="Delete a CA certificate",
        ),
        Command(
            "create-verification-code",
            "POST",
            _CA_CERTIFICATES + "/verification_codes",
            help="Create a verification code for proving CA ownership",
        ),
    ),
)

COHORTS = Resource(
    "cohorts",
    "Manage cohorts",
    _crud(
        "cohorts",
        ResourceKind.COHORT,
        create=(
            _prn("organization_prn", ResourceKind.ORGANIZATION, required=True),
            _prn("product_prn", ResourceKind.PRODUCT, required=True),
            Field("name", required=True),
            Field("description"),
        ),
        update=(Field("name"), Field("description")),
    ),
)

_DEPLOYMENTS = "/orgs/{organization_name}/products/{product_name}/deployments"

DEPLOYMENTS = Resource(
    "deployments",
    "Manage deployments",
    (
        Command(
            "create",
            "POST",
            _DEPLOYMENTS,
            (
                _path("product_name"),
                Field("name", required=True),
                Field("firmware", required=True, help="Firmware UUID"),
                Field("conditions", type="json", required=True, help="JSON object"),
                Field("is_active", type="bool"),
            ),
            help="Create a deployment",
        ),
        Command(
            "get",
            "GET",
            _DEPLOYMENTS + "/{deployment_name}",
            (_path("product_name"), _path("deployment_name")),
            help="Get a deployment",
        ),
        Command("list", "GET", _DEPLOYMENTS, (_path("product_name"),), help="List deployments"),
        Command(
            "update",
            "PATCH",
            _DEPLOYMENTS + "/{deployment_name}",
            (
                _path("product_name"),
                _path("deployment_name"),
                Field("name"),
                Field("firmware", help="Firmware UUID"),
                Field("conditions", type="json", help="JSON object"),
                Field("is_active", type="bool"),
            ),
            help="Update a deployment",
        ),
        Command(
            "delete",
            "DELETE",
            _DEPLOYMENTS + "/{deployment_name}",
            (_path("product_name"), _path("deployment_name")),
            help="Delete a deployment",
        ),
    ),
)

_DEVICES = "/orgs/{organization_name}/products/{product_name}/devices"

_device_attributes = (
    Field("description"),
    Field("healthy", type="bool"),
    Field("last_communication", help="ISO 8601 timestamp"),
    Field("tags", type="list", help="Comma separated tags"),
    Field("target"),
    _prn("cohort_prn", ResourceKind.COHORT),
)

DEVICES = Resource(
    "devices",
    "Manage devices",
    (
        Command(
            "create",
            "POST",
            _DEVICES,
            (_path("product_name"), Field("identifier", required=True), *_device_attributes),
            help="Create a device",
        ),
        Command(
            "get",
            "GET",
            _DEVICES + "/{device_identifier}",
            (_path("product_name"), _path("device_identifier")),
            help="Get a device",
        ),
        Command("list", "GET", _DEVICES, (_path("product_name"),), help="List devices"),
        Command(
            "update",
            "PATCH",
            _DEVICES + "/{device_identifier}",
            (_path("product_name"), _path("device_identifier"), *_device_attributes),
            help="Update a device",
        ),
        Command(
            "delete",
            "DELETE",
            _DEVICES + "/{device_identifier}",
            (_path("product_name"), _path("device_identifier")),
            help="Delete a device",
        ),
        Command(
            "authenticate",
            "POST",
            _DEVICES + "/auth",
            (
                _path("product_name"),
                Field("certificate", help="Base64 encoded PEM device certificate"),
                Field("certificate_path", type="path", location="local"),
            ),
            help="Authenticate a device by its certificate",
            prepare=_encode_files(("certificate_path", "certificate")),
        ),
    ),
)

_DEVICE_CERTIFICATES = _DEVICES + "/{device_identifier}/certificates"

DEVICE_CERTIFICATES = Resource(
    "device-certificates",
    "Manage device certificates",
    (
        Command(
            "create",
            "POST",
            _DEVICE_CERTIFICATES,
            (
                _path("product_name"),
                _path("device_identifier"),
                Field("certificate", help="Base64 encoded PEM certificate"),
                Field("certificate_path", type="path", location="local"),
            ),
            help="Add a device certificate",
            prepare=_encode_files(("certificate_path", "certificate")),
        ),
        Command(
            "get",
            "GET",
            _DEVICE_CERTIFICATES + "/{certificate_serial}",
            (_path("product_name"), _path("device_identifier"), _path("certificate_serial")),
            help="Get a device certificate",
        ),
        Command(
            "list",
            "GET",
            _DEVICE_CERTIFICATES,
            (_path("product_name"), _path("device_identifier")),
            help="List device certificates",
        ),
        Command(
            "delete",
            "DELETE",
            _DEVICE_CERTIFICATES + "/{certificate_serial}",
            (_path("product_name"), _path("device_identifier"), _path("certificate_serial")),
            help="Delete a device certificate",
        ),
    ),
)

_FIRMWARES = "/orgs/{organization_name}/products/{product_name}/firmwares"

FIRMWARES = Resource(
    "firmwares",
    "Manage firmwares",
    (
        Command(
            "get",
            "GET",
            _FIRMWARES + "/{firmware_uuid}",
            (_path("product_name"), _path("firmware_uuid")),
            help="Get a firmware",
        ),
        Command("list", "GET", _FIRMWARES, (_path("product_name"),), help="List firmwares"),
        Command(
            "delete",
            "DELETE",
            _FIRMWARES + "/{firmware_uuid}",
            (_path("product_name"), _path("firmware_uuid")),
            help="Delete a firmware",
        ),
    ),
)

_ORG_USERS = "/orgs/{organization_name}/users"

ORGANIZATIONS = Resource(
    "organizations",
    "Manage organization membership",
    (
        Command(
            "add-user",
            "POST",
            _ORG_USERS,
            (Field("username", required=True), Field("role", required=True)),
            help="Add a user to the organization",
        ),
        Command(
            "get-user",
            "GET",
            _ORG_USERS + "/{user_username}",
            (_path("user_username"),),
            help="Get an organization user",
        ),
        Command("list-users", "GET", _ORG_USERS, help="List organization users"),
        Command(
            "update-user",
            "PATCH",
            _ORG_USERS + "/{user_username}",
            (_path("user_username"), Field("role", required=True)),
            help="Change an organization user's role",
        ),
        Command(
            "remove-user",
            "DELETE",
            _ORG_USERS + "/{user_username}",
            (_path("user_username"),),
            help="Remove a user from the organization",
        ),
    ),
)

_PRODUCTS = "/orgs/{organization_name}/products"

PRODUCTS = Resource(
    "products",
    "Manage products",
    (
        Command(
            "create",
            "POST",
            _PRODUCTS,
            (Field("name", required=True), Field("delegated_auth", type="bool")),
            help="Create a product",
        ),
        Command(
            "get",
            "GET",
            _PRODUCTS + "/{product_name}",
            (_path("product_name"),),
            help="Get a product",
        ),
        Command("list", "GET", _PRODUCTS, help="List products"),
        Command(
            "update",
            "PATCH",
            _PRODUCTS + "/{product_name}",
            (_path("product_name"), Field("name"), Field("delegated_auth", type="bool")),
            help="Update a product",
        ),
        Command(
            "delete",
            "DELETE",
            _PRODUCTS + "/{product_name}",
            (_path("product_name"),),
            help="Delete a product",
        ),
    ),
)

SIGNING_KEYS = Resource(
    "signing-keys",
    "Manage signing keys",
    _crud(
        "signing_keys",
        ResourceKind.SIGNING_KEY,
        create=(
            _prn("organization_prn", ResourceKind.ORGANIZATION, required=True),
            Field("name", required=True),
            Field("value", help="PEM encoded Ed25519 public key"),
            Field(
                "key_path",
                type="path",
                location="local",
                help="Ed25519 public or private key PEM file to register",
            ),
        ),
        create_prepare=_prepare_signing_key,
    ),
)

USERS = Resource(
    "users",
    "Inspect users",
    (Command("me", "GET", "/users/me", help="Show the user owning the API key"),),
)

RESOURCES: tuple[Resource, ...] = (
    ARTIFACTS,
    ARTIFACT_VERSIONS,
    BINARIES,
    BINARY_PARTS,
    BINARY_SIGNATURES,
    CA_CERTIFICATES,
    COHORTS,
    DEPLOYMENTS,
    DEVICES,
    DEVICE_CERTIFICATES,
    FIRMWARES,
    ORGANIZATIONS,
    PRODUCTS,
    SIGNING_KEYS,
    USERS,
)

RESOURCES_BY_NAME: dict[str, Resource] = {resource.name: resource for resource in RESOURCES}


def validate_prn_fields(command: Command, raw: dict[str, Any]) -> None:
    """Check every supplied PRN flag, stopping at the first bad one."""
    for field in command.fields:
        value = raw.get(field.name)
        if field.prn is None or value is None:
            continue
        try:
            validate_prn(field.prn, value)
        except PRNError as exc:
            raise InputError(str(exc), flag=field.display, value=value) from exc


def _decode_json(field: Field, raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"invalid JSON: {exc.msg}", flag=field.display, value=raw) from exc
    if not isinstance(value, dict):
        raise InputError("expected a JSON object", flag=field.display, value=raw)
    return value


def decode_values(command: Command, raw: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field in command.fields:
        value = raw.get(field.name)
        if value is None:
            continue
        if field.type == "json":
            value = _decode_json(field, value)
        elif field.type == "list":
            value = [item.strip() for item in value.split(",") if item.strip()]
        values[field.name] = value
    return values


def build_request(
    command: Command,
    values: dict[str, Any],
    *,
    organization_name: str | None = None,
) -> APIRequest:
    path_values: dict[str, str] = {}
    if organization_name is not None:
        path_values["organization_name"] = quote(organization_name, safe="")
    params: dict[str, Any] = {}
    body: dict[str, Any] = {}
    for field in command.fields:
        value = values.get(field.name)
        if value is None:
            continue
        if field.location == "path":
            path_values[field.name] = quote(str(value), safe=":")
        elif field.location == "query":
            params[field.name] = value
        elif field.location == "body":
            body[field.name] = value

    try:
        path = command.path.format(**path_values)
    except KeyError as exc:
        raise InputError(f"missing value for path parameter: {exc.args[0]}") from exc

    json_payload = body if command.method in _BODY_METHODS else None
    return APIRequest(method=command.method, path=path, params=params, json_payload=json_payload)
