"""
Entrypoint: load settings, init logging, run the http-to-hdfs action once
and print the published run arguments.
"""

import argparse
import json
import sys

import structlog
from dotenv import load_dotenv

from http_to_hdfs.action import HTTPToHDFSAction
from http_to_hdfs.config import ActionConfig
from http_to_hdfs.context import RunContext
from http_to_hdfs.errors import HTTPToHDFSError
from http_to_hdfs.log import setup_logging
from http_to_hdfs.settings import Settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Fetch a URL and store the response in HDFS.")
    parser.add_argument("config", nargs="?", default="config.yaml", help="path to the settings file")
    parser.add_argument("--arg", action="append", default=[], metavar="KEY=VALUE",
                        help="runtime argument used to resolve ${KEY} macros (repeatable)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run the action and return the process exit code."""
    load_dotenv()
    args = parse_args(argv)

    settings = Settings(args.config)
    setup_logging(settings.logging)
    logger = structlog.get_logger(__name__)

    arguments = dict(settings.arguments)
    for item in args.arg:
        key, sep, value = item.partition("=")
        if not sep:
            logger.error("invalid_runtime_argument", argument=item)
            return 2
        arguments[key] = value

    context = RunContext(arguments)
    action = HTTPToHDFSAction(ActionConfig(settings.action))

    try:
        action.run(context)
    except HTTPToHDFSError as e:
        logger.error("action_failed", error=str(e))
        return 1

    print(json.dumps(dict(context.arguments), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
