"""
Command line access to site content.

    sitecms get about hero --default '{"title": "About Us"}'
    sitecms save about hero '{"title": "New Title"}'
    sitecms page about
    sitecms clear about
    sitecms stale about hero 2024-01-01T00:00:00Z
    sitecms serve --port 8080
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from sitecms.client import CMSError
from sitecms.config import ClientConfig, build_coordinator

logger = logging.getLogger(__name__)


def _json_arg(value: str):
    try:
        return json.loads(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}")


def _print_json(value) -> None:
    print(json.dumps(value, indent=2, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sitecms', description="Site content tools")
    parser.add_argument('--config', help="Client config file (YAML)")
    parser.add_argument('--api-url', help="Content store URL override")
    sub = parser.add_subparsers(dest='command', required=True)

    get_cmd = sub.add_parser('get', help="Read one section")
    get_cmd.add_argument('page')
    get_cmd.add_argument('section')
    get_cmd.add_argument('--skip-cache', action='store_true',
                         help="Read the local cache without contacting the store")
    get_cmd.add_argument('--default', type=_json_arg, help="Default data as JSON")

    save_cmd = sub.add_parser('save', help="Save one section")
    save_cmd.add_argument('page')
    save_cmd.add_argument('section')
    save_cmd.add_argument('data', type=_json_arg, help="Section data as a JSON object")

    page_cmd = sub.add_parser('page', help="Read every section of a page")
    page_cmd.add_argument('page')

    delete_cmd = sub.add_parser('delete', help="Delete one section")
    delete_cmd.add_argument('page')
    delete_cmd.add_argument('section')

    clear_cmd = sub.add_parser('clear', help="Clear cached content")
    clear_cmd.add_argument('page', nargs='?')
    clear_cmd.add_argument('section', nargs='?')

    stale_cmd = sub.add_parser('stale', help="Compare the cache with a remote timestamp")
    stale_cmd.add_argument('page')
    stale_cmd.add_argument('section')
    stale_cmd.add_argument('timestamp')

    serve_cmd = sub.add_parser('serve', help="Run the content store service")
    serve_cmd.add_argument('--host')
    serve_cmd.add_argument('--port', type=int)
    serve_cmd.add_argument('--env', help="Config name (development, production)")

    return parser


def _serve(args) -> int:
    from sitecms.server.app import create_app

    app = create_app(args.env)
    app.run(
        host=args.host or app.config['HOST'],
        port=args.port or app.config['PORT'],
        debug=app.config.get('DEBUG', False),
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'serve':
        return _serve(args)

    config = ClientConfig(args.config)
    if args.api_url:
        config.set('api.base_url', args.api_url)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    coordinator = build_coordinator(config)

    if args.command == 'get':
        result = coordinator.get_content(
            args.page, args.section,
            skip_cache=args.skip_cache,
            default_value=args.default,
        )
        _print_json(result.to_dict())

    elif args.command == 'save':
        if not isinstance(args.data, dict):
            parser.error("data must be a JSON object")
        try:
            result = coordinator.save_content(args.page, args.section, args.data)
        except CMSError as e:
            print(f"Failed to save changes. {e}", file=sys.stderr)
            return 1
        _print_json(result.to_dict())

    elif args.command == 'page':
        _print_json(coordinator.get_page_content(args.page))

    elif args.command == 'delete':
        try:
            deleted = coordinator.delete_content(args.page, args.section)
        except CMSError as e:
            print(f"Failed to delete. {e}", file=sys.stderr)
            return 1
        _print_json({'deleted': deleted})

    elif args.command == 'clear':
        if args.section and not args.page:
            parser.error("section requires page")
        _print_json({'removed': coordinator.clear_cache(args.page, args.section)})

    elif args.command == 'stale':
        _print_json({'stale': coordinator.is_stale(args.page, args.section, args.timestamp)})

    return 0


if __name__ == "__main__":
    sys.exit(main())
