import argparse
import asyncio
import logging
import sys
from pathlib import Path

from quill.lsp.config import ServerConfig, load_server_config
from quill.lsp.protocol.server import serve
from quill.lsp.transport import StreamTransport
from quill.lsp.validation import VALIDATORS, Validator, get_validator

logger = logging.getLogger("quill")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quill-lsp",
        description="Language server that validates documents on every change (stdio)",
    )
    parser.add_argument(
        "--language",
        choices=sorted(VALIDATORS),
        help="Validator to check documents with (default: from config, else python)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Answer unsupported requests with MethodNotFound instead of dropping them",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Directory whose .quill/lsp.json overrides the global config",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Config files first, then command line flags."""
    config = load_server_config(args.workspace)
    overrides = {}
    if args.language is not None:
        overrides["language"] = args.language
    if args.strict is not None:
        overrides["strictRequests"] = args.strict
    return config.merged(overrides)


async def _run(validator: Validator, config: ServerConfig) -> int:
    transport = StreamTransport.stdio()
    return await serve(transport, validator, config)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # stdout carries the protocol, so logs only ever go to stderr
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args)
        validator = get_validator(config.language)
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        return asyncio.run(_run(validator, config))
    except KeyboardInterrupt:
        return 1


if __name__ == "__main__":
    sys.exit(main())
