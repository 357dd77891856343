"""Summarize deployment workflow events for debugging failed rollouts."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence, TextIO

from pydantic import ValidationError

from rolloutscope.adapters import FleetAPIError, FleetClient, SnapshotError, load_execution_file
from rolloutscope.events import FilterArgumentError, parse_time_window, summarize_execution
from rolloutscope.models import ExecutionSummary, FilterOptions, WorkflowExecution
from rolloutscope.settings import Settings, get_settings

logger = logging.getLogger(__name__)

EVENTS_EPILOG = """\
examples:
  # Show workflow summary with step statuses
  rolloutscope events <workflow-id> -s <service-id> -e <env-id>

  # Show deduplicated events, up to 5 distinct messages per event type
  rolloutscope events <workflow-id> -s <service-id> -e <env-id> --detail --max-events 5

  # Only Bootstrap and Deployment steps of one resource, after a point in time
  rolloutscope events <workflow-id> -s <service-id> -e <env-id> --resource-key mydb \\
      --step-names Bootstrap,Deployment --since 2024-01-15T10:00:00Z
"""


def _split_names(values: Optional[Sequence[str]]) -> List[str]:
    names: List[str] = []
    for value in values or []:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rolloutscope", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    events = subparsers.add_parser(
        "events",
        help="Get workflow execution status and events",
        description=(
            "Show resources, steps and step status for a workflow. Use --detail to include "
            "deduplicated events for each step."
        ),
        epilog=EVENTS_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    events.add_argument("workflow_id", help="Workflow ID")
    events.add_argument("-s", "--service-id", required=True, help="Service ID")
    events.add_argument("-e", "--environment-id", required=True, help="Environment ID")
    events.add_argument("--resource-id", default="", help="Filter to specific resource by ID")
    events.add_argument("--resource-key", default="", help="Filter to specific resource by key")
    events.add_argument(
        "--step-names",
        action="append",
        default=None,
        help="Filter by step names, comma separated (e.g. Bootstrap,Deployment); may be repeated",
    )
    events.add_argument("--detail", action="store_true", help="Show deduplicated events for each step")
    events.add_argument(
        "--max-events",
        type=int,
        default=settings.default_max_events,
        help="Maximum distinct events per event type within each step (0 = unlimited)",
    )
    events.add_argument("--since", default="", help="Show events at or after this time (RFC3339)")
    events.add_argument("--until", default="", help="Show events before this time (RFC3339)")
    events.add_argument(
        "--input",
        default=None,
        help="Read the workflow event tree from a JSON/YAML file instead of the API",
    )
    events.add_argument("-o", "--output", choices=["json", "text"], default="json", help="Output format")
    return parser


def fetch_execution(args: argparse.Namespace, settings: Settings) -> Optional[WorkflowExecution]:
    if args.input:
        return load_execution_file(args.input)

    client = FleetClient(
        settings.api_base_url,
        settings.api_token,
        timeout=settings.request_timeout,
        max_attempts=settings.max_attempts,
    )
    return client.get_workflow_events(args.service_id, args.environment_id, args.workflow_id)


def print_text(summary: ExecutionSummary, stream: TextIO) -> None:
    print(f"Workflow:    {summary.workflow_id}", file=stream)
    print(f"Service:     {summary.service_id}", file=stream)
    print(f"Environment: {summary.environment_id}", file=stream)

    if not summary.resources:
        print("\nNo matching steps", file=stream)

    for resource in summary.resources:
        print(f"\n{resource.resource_key or resource.resource_name} ({resource.resource_id}):", file=stream)
        for step in resource.steps:
            print(
                f"  - {step.step_name}: {step.status} "
                f"[{step.start_time or '-'} -> {step.end_time or '-'}] events: {step.event_count}",
                file=stream,
            )
            for event in step.detail or []:
                repeat = f" (x{event.occurrences}, last {event.last_seen})" if event.occurrences else ""
                print(f"      {event.event_time} {event.event_type}: {event.message}{repeat}", file=stream)

    if summary.stats:
        stats = summary.stats
        print(
            f"\nShowing {stats.filtered_resources}/{stats.total_resources} resources, "
            f"{stats.filtered_steps}/{stats.total_steps} steps, "
            f"{stats.filtered_events}/{stats.total_events} events",
            file=stream,
        )


def run_events(args: argparse.Namespace, settings: Settings, stream: TextIO) -> int:
    options = FilterOptions(
        resource_id=args.resource_id,
        resource_key=args.resource_key,
        step_names=_split_names(args.step_names),
        detail=args.detail,
        max_events=args.max_events,
        since=args.since,
        until=args.until,
    )

    try:
        parse_time_window(options.since, options.until)
    except FilterArgumentError as exc:
        print(f"error: failed to apply filters: {exc}", file=sys.stderr)
        return 2

    try:
        execution = fetch_execution(args, settings)
    except (FleetAPIError, SnapshotError) as exc:
        print(f"error: failed to get workflow events: {exc}", file=sys.stderr)
        return 1

    if execution is None:
        print("No workflow events found", file=stream)
        return 0

    summary = summarize_execution(execution, options)

    if args.output == "text":
        print_text(summary, stream)
    else:
        json.dump(summary.to_payload(), stream, indent=2)
        stream.write("\n")
    return 0


def main(argv: Optional[Sequence[str]] = None, stream: Optional[TextIO] = None) -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    args = build_parser(settings).parse_args(argv)
    if stream is None:
        stream = sys.stdout
    logger.debug("Running %s for workflow %s", args.command, args.workflow_id)

    if args.command == "events":
        return run_events(args, settings, stream)
    return 1


if __name__ == "__main__":
    sys.exit(main())
