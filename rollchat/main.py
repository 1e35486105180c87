import argparse
import logging
import sys
from typing import List, Optional

from rollchat.errors import ConfigError, InputIoError
from rollchat.utils.config_parser import load_app_config, load_environment, require_credential
from rollchat.workflows.orchestrator import ChatOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rollchat",
        description="Interactive chat session with a bounded, summarizing conversation memory.",
    )
    parser.add_argument(
        "-m", "--model",
        default=DEFAULT_MODEL,
        help=f"The model to use for the conversation (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Write a context snapshot after every turn and a full transcript at exit.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # Suppress excessively noisy logs from the underlying HTTP libraries
    for noisy in ("httpx", "httpcore", "openai", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    load_environment()

    try:
        app_config = load_app_config()
        require_credential(app_config)
        orchestrator = ChatOrchestrator.from_config(app_config, model=args.model, debug=args.debug)
    except ConfigError as e:
        logger.critical("Failed to start the chat session", exc_info=True)
        print(f"FATAL: {e}", file=sys.stderr)
        return 1

    try:
        with orchestrator.cancel_on_interrupt():
            orchestrator.run()
    except InputIoError as e:
        logger.critical("Input stream failed", exc_info=True)
        print(f"FATAL: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
