"""Operator command line for Device Guard.

    device-guard bootstrap --username admin
    device-guard list-devices --username alice
    device-guard reset-devices --username alice
    device-guard set-limit 5
    device-guard test-mail --to ops@example.com
    device-guard serve
"""

import argparse
import sys
from typing import List, Optional

from device_guard.api.service import DeviceGuardService
from device_guard.common.config import get_config
from device_guard.common.exceptions import DeviceGuardException
from device_guard.common.logging import get_logger
from device_guard.data.schemas import Account
from device_guard.devices.identity import InMemoryTokenStore
from device_guard.mail.templates import mail_check_message

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="device-guard",
        description="Manage the per-account device allow-list",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    bootstrap = commands.add_parser(
        "bootstrap", help="Approve the operator's first device without a code"
    )
    bootstrap.add_argument("--username", required=True, help="Operator account")
    bootstrap.add_argument("--device-id", default=None, help="Existing device cookie value")
    bootstrap.add_argument("--user-agent", default=None, help="Browser User-Agent string")
    bootstrap.add_argument("--ip", default=None, help="Client IP address")

    list_devices = commands.add_parser("list-devices", help="Show an account's approved devices")
    list_devices.add_argument("--username", required=True)

    reset = commands.add_parser(
        "reset-devices", help="Remove all devices and any pending code of an account"
    )
    reset.add_argument("--username", required=True)

    set_limit = commands.add_parser("set-limit", help="Set the global device limit")
    set_limit.add_argument("limit", help="Positive integer")

    test_mail = commands.add_parser("test-mail", help="Send a test message through the mail backend")
    test_mail.add_argument("--to", required=True, dest="to_address", help="Recipient address")

    serve = commands.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")

    return parser


def _require_account(service: DeviceGuardService, username: str) -> Account:
    account = service.store.get_by_name(username)
    if account is None:
        raise DeviceGuardException(f"Unknown account: {username}", code="NOT_FOUND")
    return account


def cmd_bootstrap(service: DeviceGuardService, args: argparse.Namespace) -> int:
    account = _require_account(service, args.username)
    token_store = InMemoryTokenStore(args.device_id)
    record = service.bootstrap(
        account, token_store, user_agent=args.user_agent, ip_address=args.ip
    )
    if record is None:
        print("Bootstrap skipped: already completed or account has an approved device")
        return 0
    print(f"Approved device for {account.username}")
    print(f"Set the {service.client_token_name} cookie to: {record.id}")
    return 0


def cmd_list_devices(service: DeviceGuardService, args: argparse.Namespace) -> int:
    account = _require_account(service, args.username)
    devices = service.registry.list(account)
    if not devices:
        print(f"No devices found for {account.username}")
        return 0
    for record in devices:
        print(
            f"{record.id}  {record.device_class.value:<7}  {record.ip_address:<15}  "
            f"{record.approved_at:%Y-%m-%d %H:%M}  {record.agent}"
        )
    return 0


def cmd_reset_devices(service: DeviceGuardService, args: argparse.Namespace) -> int:
    account = _require_account(service, args.username)
    service.registry.reset_all(account)
    service.challenges.consume(account)
    print(f"All devices reset for {account.username}")
    return 0


def cmd_set_limit(service: DeviceGuardService, args: argparse.Namespace) -> int:
    limit = service.policy.set_device_limit(args.limit)
    print(f"Device limit set to {limit}")
    return 0


def cmd_test_mail(service: DeviceGuardService, args: argparse.Namespace) -> int:
    subject, body = mail_check_message()
    if service.mailer.send(args.to_address, subject, body):
        print(f"Test email sent to {args.to_address}")
        return 0
    print(f"Failed to send test email to {args.to_address}", file=sys.stderr)
    return 1


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    config = get_config()
    uvicorn.run(
        "device_guard.api.gateway:app",
        host=args.host or config.api_host,
        port=args.port or config.api_port,
        reload=args.reload,
        log_level=config.log_level.value.lower(),
    )
    return 0


COMMANDS = {
    "bootstrap": cmd_bootstrap,
    "list-devices": cmd_list_devices,
    "reset-devices": cmd_reset_devices,
    "set-limit": cmd_set_limit,
    "test-mail": cmd_test_mail,
}


def main(argv: Optional[List[str]] = None, service: Optional[DeviceGuardService] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        return cmd_serve(args)

    try:
        service = service or DeviceGuardService()
        return COMMANDS[args.command](service, args)
    except DeviceGuardException as e:
        logger.error(f"{args.command} failed: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
