# leadform_cli/cli.py
"""
Operator CLI: run the server and check a deployment.
"""
from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Callable, Dict, Optional

from leadform.core.config import get_settings
from leadform_cli.verification import (
    VerificationResult,
    check_api_health,
    check_config,
    send_test_lead,
)


def _supports_color() -> bool:
    """Check if terminal supports ANSI color codes."""
    if sys.platform == "win32":
        return os.getenv("TERM") == "xterm" or os.getenv("ANSICON") is not None
    return sys.stdout.isatty()


SUPPORTS_COLOR = _supports_color()

GREEN = '\033[92m' if SUPPORTS_COLOR else ''
RED = '\033[91m' if SUPPORTS_COLOR else ''
YELLOW = '\033[93m' if SUPPORTS_COLOR else ''
BLUE = '\033[94m' if SUPPORTS_COLOR else ''
RESET = '\033[0m' if SUPPORTS_COLOR else ''


def print_success(message: str):
    print(f"{GREEN}[✓]{RESET} {message}")


def print_error(message: str):
    print(f"{RED}[✗]{RESET} {message}")


def print_warning(message: str):
    print(f"{YELLOW}[!]{RESET} {message}")


def print_info(message: str):
    print(f"{BLUE}[i]{RESET} {message}")


def _report(result: VerificationResult) -> int:
    if result.success:
        print_success(result.message)
    else:
        print_error(result.message)
    for key, value in result.data.items():
        print_info(f"  {key}: {value}")
    return 0 if result.success else 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Command: run the API under uvicorn."""
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    print_info(f"Starting {settings.service_name} on http://{host}:{port}")
    if not settings.email_configured:
        print_warning("RESEND_API_KEY not set; submissions will fail until it is configured")
    uvicorn.run("leadform.main:app", host=host, port=port, reload=args.reload)
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    """Command: report configuration without printing secrets."""
    print_info("Checking configuration...")
    return _report(check_config(get_settings()))


def cmd_check_health(args: argparse.Namespace) -> int:
    """Command: call the health endpoint of a running instance."""
    print_info(f"Checking API health at {args.api_url}...")
    return _report(asyncio.run(check_api_health(api_url=args.api_url)))


def cmd_send_test_lead(args: argparse.Namespace) -> int:
    """Command: submit a sample lead end to end."""
    print_info(f"Submitting test lead to {args.api_url}...")
    result = asyncio.run(
        send_test_lead(api_url=args.api_url, name=args.name, email=args.email, city=args.city)
    )
    return _report(result)


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    'serve': cmd_serve,
    'check-config': cmd_check_config,
    'check-health': cmd_check_health,
    'send-test-lead': cmd_send_test_lead,
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog='leadform',
        description='Lead form API operator CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    serve_parser = subparsers.add_parser('serve', help='Run the API server')
    serve_parser.add_argument('--host', default=None, help='Bind address (default: HOST setting)')
    serve_parser.add_argument('--port', type=int, default=None, help='Port (default: PORT setting)')
    serve_parser.add_argument('--reload', action='store_true', help='Reload on code changes')

    subparsers.add_parser('check-config', help='Report configuration without secrets')

    health_parser = subparsers.add_parser('check-health', help='Call /api/health')
    health_parser.add_argument('--api-url', default='http://localhost:5000', help='API URL')

    lead_parser = subparsers.add_parser('send-test-lead', help='Submit a sample lead')
    lead_parser.add_argument('--api-url', default='http://localhost:5000', help='API URL')
    lead_parser.add_argument('--name', default='Test Lead')
    lead_parser.add_argument('--email', default='test@example.com')
    lead_parser.add_argument('--city', default='Pune')

    return parser


def main(args: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    command_func = COMMANDS.get(parsed_args.command)
    if not command_func:
        print_error(f"Unknown command: {parsed_args.command}")
        parser.print_help()
        return 1

    try:
        return command_func(parsed_args)
    except KeyboardInterrupt:
        print_error("\nInterrupted by user")
        return 130
    except Exception as e:
        print_error(f"Error executing command: {str(e)}")
        if os.getenv('DEBUG'):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
