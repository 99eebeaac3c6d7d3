import argparse
import asyncio
import logging
import sys

from swayless import commands
from swayless.daemon import run_swayless
from swayless.sender import send_command
from swayless.settings import load_settings

logger = logging.getLogger("swayless")

_HELP = {
    commands.INIT: "Initialize the workspaces for all the outputs and run the daemon",
    commands.FOCUS_TAG: "Focus another tag on the focused output",
    commands.FOCUS_TAG_ALL_OUTPUTS: "Focus a tag on all the outputs",
    commands.MOVE_CONTAINER_TO_TAG: "Move the focused container to a tag on the same output",
    commands.MOVE_CONTAINER_TO_NEXT_OUTPUT: "Move the focused container to the next output",
    commands.MOVE_CONTAINER_TO_PREVIOUS_OUTPUT: "Move the focused container to the previous output",
    commands.BRING_TAG_HERE: "Bring the containers of a tag to the focused tag, or send them back",
    commands.ALT_TAB: "Toggle between the focused and the previously focused tag",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swayless", description="Better multimonitor handling for sway"
    )
    parser.add_argument("--config", help="path to settings.json")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for verb, takes_tag in commands.VERBS.items():
        subparser = subparsers.add_parser(verb, help=_HELP[verb])
        if takes_tag:
            subparser.add_argument("tag", help="the tag, e.g. 1")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"swayless: could not load settings: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings["log_level"].upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == commands.INIT:
        try:
            run_swayless(settings)
        except OSError as e:
            logger.critical("swayless stopped: %s", e)
            return 1
        return 0

    try:
        command = commands.make_command(args.command, getattr(args, "tag", None))
    except ValueError as e:
        print(f"swayless: {e}", file=sys.stderr)
        return 2

    try:
        asyncio.run(send_command(settings["socket_path"], command))
    except OSError as e:
        print(f"swayless: {e}", file=sys.stderr)
        return 1
    return 0
