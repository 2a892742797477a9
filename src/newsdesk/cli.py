"""
Command-line entry point for the Newsdesk automation.

Usage:
    newsdesk roam --count 3
    newsdesk generate "Central bank rate decision" --category Finance --country UK
    newsdesk research "Semiconductor export controls"
    newsdesk maintenance
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from newsdesk.config import settings
from newsdesk.schemas import NewsStatus


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newsdesk",
        description="Autonomous news generation and publishing"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    roam = subparsers.add_parser("roam", help="Run one roaming cycle followed by maintenance")
    roam.add_argument(
        "--count",
        type=int,
        default=None,
        help="Number of ingests for this run, clamped to 1..6 (default: NEWS_AUTO_PUBLISH_COUNT)"
    )

    generate = subparsers.add_parser("generate", help="Generate one article for a topic")
    generate.add_argument("topic", help="Topic or working title")
    generate.add_argument("--category", default="World")
    generate.add_argument("--country", default="Global")
    generate.add_argument(
        "--status",
        choices=[s.value for s in NewsStatus],
        default=NewsStatus.PENDING_APPROVAL.value,
        help="Requested status; published is downgraded when the quality gate disagrees"
    )
    generate.add_argument("--source-url", default=None)

    research = subparsers.add_parser("research", help="Print a context brief for editors")
    research.add_argument("topic", help="Topic to research")

    subparsers.add_parser("maintenance", help="Apply the retention policy")
    return parser


async def run(args: argparse.Namespace) -> int:
    from newsdesk.services.automation import run_maintenance
    from newsdesk.services.scheduler import scheduler_service

    if args.command == "roam":
        result = await scheduler_service.run_automation_cycle(count=args.count)
        print(f"Persisted: {result['persisted']} "
              f"(published {result['published']}, pending {result['pending_approval']})")
        for title in result["titles"]:
            print(f"  - {title}")
        print(f"Deleted by maintenance: {result['deleted']}")
        return 0

    if args.command == "generate":
        roaming = scheduler_service.build_roaming()
        candidate = await roaming.generate_single(
            title=args.topic,
            category=args.category,
            country=args.country,
            status=NewsStatus(args.status),
            source_url=args.source_url,
        )
        if candidate is None:
            print(f"Article already exists: {args.topic}")
            return 1
        mode = candidate.generation_mode.value if candidate.generation_mode else "unknown"
        print(f"Generated: {candidate.title} [{candidate.status.value}, {mode}]")
        return 0

    if args.command == "research":
        from newsdesk.services.switchboard import Switchboard

        brief = await Switchboard.from_settings().research(args.topic)
        print(f"Background: {brief.background}")
        print(f"Key players: {brief.key_players}")
        print(f"What's new: {brief.whats_new}")
        print(f"Why it matters: {brief.why_it_matters}")
        return 0

    deleted = await run_maintenance(scheduler_service.store)
    print(f"Deleted: {deleted}")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point for the console script."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
