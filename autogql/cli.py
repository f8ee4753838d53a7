#!/usr/bin/env python3
"""
Command-line interface: print the generated SDL, export artifacts, or serve.
"""

import argparse
import sys

from autogql.config import Settings
from autogql.runtime.data_access import MemoryDataAccess
from autogql.runtime.pipeline import build_api
from autogql.runtime.registry_loader import Registry


def _offline_api(settings: Settings):
    # sdl/export never touch the store; bind throwaway in-memory access
    entities = list(Registry(root=settings.registry_dir).entities())
    return build_api(entities, lambda entity, model: MemoryDataAccess(model.primary_key.name))


def handle_sdl_command(args, settings: Settings):
    """Handle the sdl command"""
    print(_offline_api(settings).sdl)


def handle_export_command(args, settings: Settings):
    """Handle the export command"""
    from autogql.runtime.exporter import export

    paths = export(_offline_api(settings), args.out)
    for kind, path in paths.items():
        print(f"{kind}: {path}")


def handle_serve_command(args, settings: Settings):
    """Handle the serve command"""
    import uvicorn
    from autogql.app import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(description="GraphQL schema and resolvers from entity descriptors")
    parser.add_argument("--registry", help="Registry directory (default: $AUTOGQL_REGISTRY or ./registry)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("sdl", help="Print the generated SDL")

    export_parser = subparsers.add_parser("export", help="Write schema.graphql and manifest.json")
    export_parser.add_argument("--out", default="contracts", help="Output directory (default: contracts)")

    serve_parser = subparsers.add_parser("serve", help="Run the GraphQL service")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = Settings.from_env()
    if args.registry:
        settings.registry_dir = args.registry

    handlers = {
        "sdl": handle_sdl_command,
        "export": handle_export_command,
        "serve": handle_serve_command,
    }
    try:
        handlers[args.command](args, settings)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
