"""
Command-line interface for the Neostrada registrar adapter.

This module provides the CLI entry point with commands for:
- check: Check a single domain for availability
- list: List the account's domains
- sync: Report expiration dates for given domains
- contacts / contact: Inspect WHOIS holders
- delete: Cancel a domain
- config: Configuration management

Credentials come from a JSON configuration file (--config) or from the
environment, optionally via a .env file.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_HANDLE_KEY,
    AdapterConfig,
    LoggingConfig,
    RegistrarConfig,
)
from .enums import LogLevel, SyncStatus
from .exceptions import ConfigurationError
from .models import OperationResult
from .registrar import NeostradaRegistrar


DEFAULT_CONFIG_PATH = Path.home() / ".neostrada_registrar" / "config.json"


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env(env_file: Optional[Path] = None) -> Optional[AdapterConfig]:
    """
    Load configuration from environment variables.

    Variables: NEOSTRADA_TOKEN (required), NEOSTRADA_BASE_URL,
    NEOSTRADA_TIMEOUT, NEOSTRADA_USERNAME, LOG_LEVEL, LOG_FORMAT.

    Args:
        env_file: Optional .env file; the default lookup is used if omitted

    Returns:
        AdapterConfig if a token is set, None otherwise
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    token = os.getenv("NEOSTRADA_TOKEN", "").strip()
    if not token:
        return None

    return AdapterConfig(
        registrar=RegistrarConfig(
            access_token=token,
            base_url=os.getenv("NEOSTRADA_BASE_URL", DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL,
            timeout=_float_env("NEOSTRADA_TIMEOUT", 30.0),
            username=os.getenv("NEOSTRADA_USERNAME") or None,
        ),
        logging=LoggingConfig(
            level=(os.getenv("LOG_LEVEL", "info") or "info").lower(),
            output_format=(os.getenv("LOG_FORMAT", "text") or "text").lower(),
        ),
    )


def load_config_from_file(config_path: Path) -> Optional[AdapterConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        AdapterConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        registrar_data = data["registrar"]
        registrar = RegistrarConfig(
            access_token=registrar_data["access_token"],
            base_url=registrar_data.get("base_url", DEFAULT_BASE_URL),
            timeout=float(registrar_data.get("timeout", 30.0)),
            username=registrar_data.get("username"),
            handle_key=registrar_data.get("handle_key", DEFAULT_HANDLE_KEY),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return AdapterConfig(registrar=registrar, logging=logging_config)

    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: AdapterConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: AdapterConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "registrar": {
                "access_token": config.registrar.access_token,
                "base_url": config.registrar.base_url,
                "timeout": config.registrar.timeout,
                "username": config.registrar.username,
                "handle_key": config.registrar.handle_key,
            },
            "logging": {
                "level": config.logging.level,
                "output_format": config.logging.output_format,
            },
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def create_logger(config: LoggingConfig, verbose: bool = False) -> AuditLogger:
    """Create an audit logger from the logging configuration."""
    try:
        level = LogLevel(config.level)
    except ValueError:
        level = LogLevel.INFO
    if verbose:
        level = LogLevel.DEBUG
    output_format = config.output_format if config.output_format in ("json", "text", "both") else "text"
    return AuditLogger(output_format=output_format, min_level=level)


def _resolve_config(args: argparse.Namespace) -> Optional[AdapterConfig]:
    if args.config:
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return config

    config = load_config_from_env()
    if config is None:
        config = load_config_from_file(DEFAULT_CONFIG_PATH)
    if config is None:
        print("Error: No access token configured (set NEOSTRADA_TOKEN or use --config)", file=sys.stderr)
    return config


def _create_registrar(args: argparse.Namespace) -> Optional[NeostradaRegistrar]:
    config = _resolve_config(args)
    if config is None:
        return None
    try:
        return NeostradaRegistrar(
            config.registrar,
            logger=create_logger(config.logging, verbose=args.verbose),
        )
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return None


def _report(result: OperationResult) -> int:
    """Print the errors and warnings of a result; return the exit code."""
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    return 0 if result.succeeded else 1


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.check_domain(args.domain)

    print(f"{args.domain}: {'available' if result.value else 'not available'}")
    exit_code = _report(result)
    return exit_code if exit_code else (0 if result.value else 1)


def cmd_list(args: argparse.Namespace) -> int:
    """Handle the 'list' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.get_domain_list()

    if result.value:
        for summary in result.value:
            print(
                f"{summary.domain}  registered {summary.registration_date or '-'}"
                f"  expires {summary.expiration_date or '-'}"
            )
    return _report(result)


def cmd_sync(args: argparse.Namespace) -> int:
    """Handle the 'sync' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.get_sync_data(args.domains)

    failed = False
    for domain in sorted(result.value):
        entry = result.value[domain]
        if entry.status == SyncStatus.SUCCESS:
            print(f"{domain}: expires {entry.expiration_date}")
        else:
            failed = True
            print(f"{domain}: {entry.error_message}")

    exit_code = _report(result)
    return 1 if failed else exit_code


def cmd_contacts(args: argparse.Namespace) -> int:
    """Handle the 'contacts' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.get_contact_list(email=args.email, surname=args.surname)

    for entry in result.value:
        contact = entry.contact
        print(
            f"{entry.handle}  {contact.initials} {contact.surname}"
            f"  <{contact.email_address}>  {contact.country}"
        )
    _report(result)
    return 0 if result.value else 1


def cmd_contact(args: argparse.Namespace) -> int:
    """Handle the 'contact' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.get_contact(args.handle)

    if result.succeeded:
        contact = result.value
        print(f"Handle:   {args.handle}")
        if contact.company_name:
            print(f"Company:  {contact.company_name}")
        print(f"Name:     {contact.initials} {contact.surname}")
        print(f"Address:  {contact.address}, {contact.zip_code} {contact.city}, {contact.country}")
        print(f"Phone:    {contact.phone_number}")
        print(f"E-mail:   {contact.email_address}")
    return _report(result)


def cmd_delete(args: argparse.Namespace) -> int:
    """Handle the 'delete' command."""
    registrar = _create_registrar(args)
    if registrar is None:
        return 1

    with registrar:
        result = registrar.delete_domain(args.domain)

    print(f"{args.domain}: {'cancelled' if result.value else 'could not be cancelled'}")
    return 0 if result.value else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create one.")
            return 1

        token = config.registrar.access_token
        print(f"Configuration from: {config_path}")
        print(f"  Base URL: {config.registrar.base_url}")
        print(f"  Token: ***{token[-4:] if len(token) > 4 else ''}")
        print(f"  Timeout: {config.registrar.timeout}s")
        print(f"  Log level: {config.logging.level}")
        print(f"  Log format: {config.logging.output_format}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        if not args.token:
            print("Error: --token is required for 'config init'", file=sys.stderr)
            return 1

        config = AdapterConfig(registrar=RegistrarConfig(access_token=args.token))
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every registrar request",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="neostrada-registrar",
        description="Neostrada registrar adapter",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser("check", help="Check a domain for availability")
    check_parser.add_argument("domain", help="Domain to check (e.g., example.nl)")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    list_parser = subparsers.add_parser("list", help="List the account's domains")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list)

    sync_parser = subparsers.add_parser("sync", help="Show expiration dates of domains")
    sync_parser.add_argument("domains", nargs="+", help="Domains to synchronize")
    _add_common_arguments(sync_parser)
    sync_parser.set_defaults(func=cmd_sync)

    contacts_parser = subparsers.add_parser("contacts", help="List WHOIS contacts")
    contacts_parser.add_argument("--email", help="Only the contact with this e-mail address")
    contacts_parser.add_argument("--surname", help="Only contacts with this surname")
    _add_common_arguments(contacts_parser)
    contacts_parser.set_defaults(func=cmd_contacts)

    contact_parser = subparsers.add_parser("contact", help="Show a WHOIS contact")
    contact_parser.add_argument("handle", help="Contact handle")
    _add_common_arguments(contact_parser)
    contact_parser.set_defaults(func=cmd_contact)

    delete_parser = subparsers.add_parser("delete", help="Cancel a domain")
    delete_parser.add_argument("domain", help="Domain to cancel")
    _add_common_arguments(delete_parser)
    delete_parser.set_defaults(func=cmd_delete)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument("--path", "-p", help="Path to configuration file")
    config_parser.add_argument("--token", "-t", help="Access token for 'init'")
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
