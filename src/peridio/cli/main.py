"""Command-line interface for peridio."""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from typing import Any, Sequence, TextIO

from peridio.cli import report
from peridio.cli.config import (
    CLIConfig,
    ConfigError,
    GlobalOptions,
    load_cli_config,
    resolve_global_options,
)
from peridio.cli.exit_codes import (
    EXIT_API_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_DATA_ERROR,
    EXIT_SUCCESS,
    EXIT_UNAVAILABLE,
    EXIT_USAGE,
)
from peridio.cli.resources import (
    RESOURCES,
    RESOURCES_BY_NAME,
    Command,
    Field,
    InputError,
    build_request,
    decode_values,
    validate_prn_fields,
)
from peridio.client import APIClient, sdk_version
from peridio.crypto.signing import SigningKeyError
from peridio.errors import APIRequestError, APIUnavailableError, PRNError
from peridio.prn import ResourceKind, prn_arity, validate_prn

logger = logging.getLogger(__name__)

_SENSITIVE_FIELDS = (
    "api_key",
    "authorization",
    "private_key",
    "secret",
    "token",
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peridio",
        description="Command-line client for the Peridio fleet-management API",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"peridio-cli {sdk_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to CLI config TOML (default: ~/.peridio/config.toml)",
    )
    parser.add_argument("--profile", default=None, help="Config profile to apply")
    parser.add_argument("--api-key", default=None, help="API key (default: $PERIDIO_API_KEY)")
    parser.add_argument("--base-url", default=None, help="API base URL override")
    parser.add_argument(
        "--organization-name",
        default=None,
        help="Organization name (default: $PERIDIO_ORGANIZATION_NAME)",
    )
    parser.add_argument("--ca-path", default=None, help="CA bundle used to verify the API")
    parser.add_argument(
        "--color",
        choices=report.COLOR_CHOICES,
        default=None,
        help="Colorize diagnostics (default: auto)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP requests")

    sub = parser.add_subparsers(dest="command", required=True)

    prn = sub.add_parser("prn", help="Inspect and validate PRNs")
    prn_sub = prn.add_subparsers(dest="prn_command", required=True)
    prn_validate = prn_sub.add_parser("validate", help="Check a PRN against an expected kind")
    prn_validate.add_argument(
        "--kind",
        required=True,
        choices=[kind.tag for kind in ResourceKind],
        metavar="KIND",
        help="Expected resource kind, e.g. device or user_token",
    )
    prn_validate.add_argument("value", help="PRN to check")
    prn_kinds = prn_sub.add_parser("kinds", help="List resource kinds and their PRN shape")
    prn_kinds.add_argument("--json", action="store_true")

    for resource in RESOURCES:
        resource_parser = sub.add_parser(resource.name, help=resource.help)
        resource_sub = resource_parser.add_subparsers(dest="resource_command", required=True)
        for command in resource.commands:
            command_parser = resource_sub.add_parser(command.name, help=command.help)
            for field in command.fields:
                _add_field(command_parser, field)

    return parser


def _add_field(parser: argparse.ArgumentParser, field: Field) -> None:
    kwargs: dict[str, Any] = {
        "dest": field.name,
        "required": field.required,
        "help": field.help,
    }
    if field.type == "bool":
        kwargs["action"] = argparse.BooleanOptionalAction
        kwargs["default"] = None
    else:
        kwargs["metavar"] = field.metavar
        if field.type == "int":
            kwargs["type"] = int
    parser.add_argument(field.flag, **kwargs)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _sanitize_error_text(value: str) -> str:
    redacted = value
    for field in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)({field}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    redacted = re.sub(r"(?i)(\bToken\s+)([^,\s]+)", r"\1[REDACTED]", redacted)
    redacted = re.sub(r"(?i)([?&](?:secret|token|api_key)=)([^&\s]+)", r"\1[REDACTED]", redacted)
    return redacted


def _print_error(stderr: TextIO, prefix: str, message: str, *, code: int, color: bool) -> int:
    report.error(prefix, _sanitize_error_text(message)).print_err(stderr, color=color)
    return code


def _print_input_error(stderr: TextIO, exc: InputError, *, color: bool) -> int:
    if exc.flag is not None:
        styled = report.invalid_value(exc.flag, exc.value or "", str(exc))
    else:
        styled = report.error("input error", str(exc))
    return styled.print_data_err(stderr, color=color)


def _missing_globals(options: GlobalOptions) -> list[str]:
    missing = []
    if not options.api_key:
        missing.append("--api-key")
    if not options.organization_name:
        missing.append("--organization-name")
    return missing


def _run_prn_validate(*, args, stdout: TextIO, stderr: TextIO, color: bool) -> int:
    kind = ResourceKind(args.kind)
    try:
        value = validate_prn(kind, args.value)
    except PRNError as exc:
        styled = report.invalid_value("<VALUE>", args.value, str(exc))
        return styled.print_data_err(stderr, color=color)

    print(value, file=stdout)
    return report.success(f"valid {kind.tag} PRN").print_success(stderr, color=color)


def _run_prn_kinds(*, args, stdout: TextIO) -> int:
    rows = [{"kind": kind.tag, "segments": prn_arity(kind)} for kind in ResourceKind]
    if args.json:
        print(json.dumps(rows, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    width = max(len(row["kind"]) for row in rows)
    for row in rows:
        print(f"{row['kind']:<{width}}  {row['segments']}", file=stdout)
    return EXIT_SUCCESS


def _run_api_command(
    *,
    command: Command,
    args,
    options: GlobalOptions,
    stdout: TextIO,
    stderr: TextIO,
    color: bool,
) -> int:
    raw = vars(args)
    try:
        validate_prn_fields(command, raw)
    except InputError as exc:
        return _print_input_error(stderr, exc, color=color)

    missing = _missing_globals(options)
    if missing:
        return report.missing_globals(missing).print_data_err(stderr, color=color)

    try:
        values = decode_values(command, raw)
    except InputError as exc:
        return _print_input_error(stderr, exc, color=color)

    client = APIClient(
        base_url=options.base_url,
        api_key=options.api_key,
        timeout=options.timeout,
        retries=options.retries,
        ca_path=options.ca_path,
    )
    try:
        if command.prepare is not None:
            command.prepare(values, client)
        api_request = build_request(
            command,
            values,
            organization_name=options.organization_name,
        )
        logger.debug("dispatching %s %s", api_request.method, api_request.path)
        response = client.send(api_request)
    except InputError as exc:
        return _print_input_error(stderr, exc, color=color)
    except SigningKeyError as exc:
        return _print_error(
            stderr, "signing key error", str(exc), code=EXIT_DATA_ERROR, color=color
        )
    except APIRequestError as exc:
        return _print_error(stderr, "api error", str(exc), code=EXIT_API_ERROR, color=color)
    except APIUnavailableError as exc:
        return _print_error(
            stderr,
            "network error",
            str(exc),
            code=EXIT_UNAVAILABLE,
            color=color,
        )

    if response is not None:
        print(json.dumps(response, sort_keys=True, indent=2), file=stdout)
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_cli_config(args.config, profile=args.profile)
    except ConfigError as exc:
        if args.command != "prn":
            color = report.use_color(args.color or "auto", stderr)
            return _print_error(
                stderr, "config error", str(exc), code=EXIT_CONFIG_ERROR, color=color
            )
        # prn commands never touch the API, so they run on defaults.
        logger.warning("ignoring invalid config: %s", exc)
        config = CLIConfig()

    options = resolve_global_options(
        config,
        base_url=args.base_url,
        organization_name=args.organization_name,
        api_key=args.api_key,
        ca_path=args.ca_path,
        color=args.color,
    )
    color = report.use_color(options.color, stderr)

    if args.command == "prn":
        if args.prn_command == "validate":
            return _run_prn_validate(args=args, stdout=stdout, stderr=stderr, color=color)
        return _run_prn_kinds(args=args, stdout=stdout)

    resource = RESOURCES_BY_NAME.get(args.command)
    if resource is None:
        print("unknown command", file=stderr)
        return EXIT_USAGE

    return _run_api_command(
        command=resource.command(args.resource_command),
        args=args,
        options=options,
        stdout=stdout,
        stderr=stderr,
        color=color,
    )


if __name__ == "__main__":
    raise SystemExit(main())
