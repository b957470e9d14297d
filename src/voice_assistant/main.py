"""Command-line interface for speaker management and action plan inspection."""

import argparse
import asyncio
import json
import logging
import sys
from uuid import UUID

from .actions.exceptions import ActionPlanError
from .actions.models import CallSkills, Respond
from .actions.parser import parse_action_plan
from .audio.logging_utils import TRACE_LEVEL, add_trace_level
from .speaker.config import DEFAULT_SPEAKER_DB_PATH
from .speaker.exceptions import SpeakerError
from .speaker.store import SpeakerStore


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Voice Assistant CLI - manage enrolled speakers and inspect action plans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  voice-assistant speakers list                      # Show enrolled speakers
  voice-assistant speakers remove <speaker-id>       # Remove a speaker
  voice-assistant parse-plan '{"type":"respond","text":"hi"}'
  echo '```json {...} ```' | voice-assistant parse-plan
  voice-assistant --verbose speakers list            # Enable verbose logging
        """,
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and debug information",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (most verbose, includes all debug info)",
    )

    parser.add_argument(
        "--db",
        type=str,
        default=DEFAULT_SPEAKER_DB_PATH,
        metavar="PATH",
        help=f"Speaker database path (default: {DEFAULT_SPEAKER_DB_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command")

    speakers = subparsers.add_parser("speakers", help="Manage enrolled speakers")
    speaker_commands = speakers.add_subparsers(dest="speaker_command")
    speaker_commands.add_parser("list", help="List enrolled speakers")
    remove = speaker_commands.add_parser("remove", help="Remove an enrolled speaker")
    remove.add_argument("speaker_id", type=str, help="Speaker UUID")

    parse_plan = subparsers.add_parser(
        "parse-plan", help="Parse language model output into an action plan"
    )
    parse_plan.add_argument(
        "text", nargs="?", default=None, help="Model output (read from stdin if omitted)"
    )

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Configure logging based on verbose/trace flags."""
    add_trace_level()

    if args.trace:
        logging.basicConfig(
            level=TRACE_LEVEL,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    elif args.verbose:
        logging.basicConfig(
            level="DEBUG", format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        logging.basicConfig(level="WARNING", format="%(asctime)s - %(levelname)s - %(message)s")


async def list_speakers(db_path: str) -> int:
    store = SpeakerStore(db_path)
    await store.initialize()
    try:
        speakers = await store.load_speakers()
    finally:
        await store.close()

    if not speakers:
        print("No speakers enrolled.")
        return 0

    for speaker in speakers:
        threshold = (
            f"{speaker.identification_threshold:.3f}"
            if speaker.identification_threshold is not None
            else "default"
        )
        last_seen = (
            speaker.metadata.last_seen_at.isoformat(timespec="seconds")
            if speaker.metadata.last_seen_at
            else "never"
        )
        print(
            f"{speaker.id}  {speaker.name}  threshold={threshold}  "
            f"commands={speaker.metadata.command_count}  last_seen={last_seen}"
        )
    return 0


async def remove_speaker(db_path: str, speaker_id: str) -> int:
    try:
        target = UUID(speaker_id)
    except ValueError:
        print(f"❌ Invalid speaker id: {speaker_id}")
        return 1

    store = SpeakerStore(db_path)
    await store.initialize()
    try:
        speakers = await store.load_speakers()
        remaining = [s for s in speakers if s.id != target]
        if len(remaining) == len(speakers):
            print(f"❌ Speaker {speaker_id} not found.")
            return 1
        await store.save_speakers(remaining)
    finally:
        await store.close()

    print(f"✅ Removed speaker {speaker_id}.")
    return 0


def parse_plan(text: str) -> int:
    try:
        plan = parse_action_plan(text)
    except ActionPlanError as e:
        print(f"❌ {type(e).__name__}: {e}")
        return 1

    if isinstance(plan, Respond):
        print(f"respond: {plan.text}")
    elif isinstance(plan, CallSkills):
        print(f"call_skills: {len(plan.calls)} call(s)")
        for call in plan.calls:
            print(f"- {call.skill_id} {json.dumps(call.arguments_json(), sort_keys=True)}")
    return 0


def run_command(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """
    Run the selected subcommand.

    Returns:
        Process exit code
    """
    if args.command == "speakers":
        if args.speaker_command == "list":
            return asyncio.run(list_speakers(args.db))
        if args.speaker_command == "remove":
            return asyncio.run(remove_speaker(args.db, args.speaker_id))
        parser.print_help()
        return 2

    if args.command == "parse-plan":
        text = args.text if args.text is not None else sys.stdin.read()
        return parse_plan(text)

    parser.print_help()
    return 2


def cli_entry_with_args(argv: list[str] | None = None) -> None:
    """CLI entry point with argument parsing."""
    parser = create_argument_parser()

    try:
        args = parser.parse_args(argv)
        configure_logging(args)
        sys.exit(run_command(args, parser))

    except KeyboardInterrupt:
        pass  # Graceful shutdown
    except SystemExit:
        # Re-raise SystemExit (from argparse help, etc.)
        raise
    except SpeakerError as e:
        print(f"❌ Speaker store error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry_with_args()
