#!/usr/bin/env python3
"""
Command-line front end for the IPFS client.
"""

import argparse
import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import after loading env vars to ensure proper configuration
from .client import IpfsClient
from .domain.errors import IpfsError
from .domain.models.upload import FilePart
from .infrastructure.config.settings import ClientSettings
from .utils import setup_logging, format_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ipfs-client',
        description="Talk to an IPFS daemon over its HTTP API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s id                                  # Node identity
  %(prog)s --timeout 20s cat /ipfs/<cid>/readme
  %(prog)s add notes.txt photo.jpg             # Add files
  %(prog)s --host 10.0.0.5 pin-add <cid>
        """
    )

    parser.add_argument('--host', help='Daemon host (or set IPFS_HOST)')
    parser.add_argument('--port', type=int, help='Daemon API port (or set IPFS_PORT)')
    parser.add_argument('--timeout', help='Server-side timeout, e.g. 20s (or set IPFS_TIMEOUT)')
    parser.add_argument('--protocol', choices=['http://', 'https://'], help='URL scheme')
    parser.add_argument('--api-path', help='API path prefix (default: /api/v0)')
    parser.add_argument('--verbose', action='store_true', default=None, help='Trace HTTP exchanges')
    parser.add_argument('--log-level',
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Set logging level (or set IPFS_LOG_LEVEL)')
    parser.add_argument('--version', action='version', version='%(prog)s 0.1.0')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('id', help='Show node identity')
    sub.add_parser('version', help='Show daemon version')
    p = sub.add_parser('config-get', help='Show config (or one key)')
    p.add_argument('key', nargs='?', default='')
    p = sub.add_parser('cat', help='Write the contents of an IPFS path to stdout')
    p.add_argument('path')
    p = sub.add_parser('add', help='Add local files')
    p.add_argument('files', nargs='+')
    p = sub.add_parser('resolve', help='Resolve an IPNS name')
    p.add_argument('name')
    p = sub.add_parser('pin-add', help='Pin an object')
    p.add_argument('cid')
    p = sub.add_parser('pin-ls', help='List pins')
    p.add_argument('cid', nargs='?')
    sub.add_parser('peers', help='List connected swarm peers')
    return parser


def _settings_from_args(args: argparse.Namespace) -> ClientSettings:
    overrides = {
        'host': args.host,
        'port': args.port,
        'timeout': args.timeout,
        'protocol': args.protocol,
        'api_path': args.api_path,
        'verbose': args.verbose,
        'log_level': args.log_level,
    }
    return ClientSettings(**{k: v for k, v in overrides.items() if v is not None})


def run(client: IpfsClient, args: argparse.Namespace) -> None:
    """Execute one sub-command, printing its result to stdout."""
    if args.command == 'cat':
        client.files_get(args.path, sys.stdout.buffer)
        sys.stdout.buffer.flush()
        return

    if args.command == 'id':
        result = client.id()
    elif args.command == 'version':
        result = client.version()
    elif args.command == 'config-get':
        result = client.config_get(args.key)
    elif args.command == 'add':
        result = client.files_add([FilePart.from_path(os.path.basename(f), f) for f in args.files])
    elif args.command == 'resolve':
        result = client.name_resolve(args.name)
    elif args.command == 'pin-add':
        client.pin_add(args.cid)
        result = {'Pinned': args.cid}
    elif args.command == 'pin-ls':
        result = client.pin_ls(args.cid)
    else:
        result = client.swarm_peers()
    print(format_json(result))


def main(argv=None):
    """Main entry point for the IPFS client CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    try:
        with IpfsClient.from_settings(settings) as client:
            logger.info(f"Using IPFS daemon at {client.url_prefix}")
            run(client, args)
    except KeyboardInterrupt:
        sys.exit(130)
    except (IpfsError, ValueError, OSError) as e:
        logger.debug(f"Command {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
