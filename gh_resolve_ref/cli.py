"""CLI commands for ref resolution."""

import argparse
import json
import logging
import sys

from .models import (
    EmptyRepository,
    NotFound,
    ProtocolError,
    RefQuery,
    Resolved,
    TransportError,
    UsageError,
    failure_message,
)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_PROTOCOL = 3
EXIT_TRANSPORT = 4


def _exit_code(outcome) -> int:
    if isinstance(outcome, Resolved):
        return EXIT_OK
    if isinstance(outcome, (NotFound, EmptyRepository)):
        return EXIT_NOT_FOUND
    if isinstance(outcome, UsageError):
        return EXIT_USAGE
    if isinstance(outcome, ProtocolError):
        return EXIT_PROTOCOL
    if isinstance(outcome, TransportError):
        return EXIT_TRANSPORT
    raise TypeError(f"unexpected outcome: {outcome!r}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Resolve git refs of GitHub repositories to commit SHAs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # resolve subcommand
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a branch, tag or the default branch to a commit SHA",
    )
    resolve_parser.add_argument("owner", help="GitHub organization or user")
    resolve_parser.add_argument("repo", help="GitHub repository name")
    resolve_parser.add_argument(
        "ref",
        nargs="?",
        default=None,
        help="Branch or tag name, short or fully qualified (default: the default branch)",
    )
    resolve_parser.add_argument(
        "--token",
        default=None,
        help="GitHub access token for private repositories (default: GITHUB_TOKEN)",
    )

    # serve subcommand
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the resolver over HTTP",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "resolve":
        from .resolver import resolve
        from .settings import get_settings

        token = args.token or get_settings().github_token
        outcome = resolve(RefQuery(owner=args.owner, repo=args.repo, ref=args.ref, token=token))
        if isinstance(outcome, Resolved):
            json.dump(outcome.result.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            sys.stderr.write(f"{failure_message(outcome)}\n")
        return _exit_code(outcome)
    elif args.command == "serve":
        from .web import create_app

        create_app().run(host=args.host, port=args.port)
        return EXIT_OK
    else:
        parser.print_help()
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
