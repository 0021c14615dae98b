"""CLI entry point for the Cuidly entitlement and matching core."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from cuidly.core.config import Settings
from cuidly.core.db import init_db
from cuidly.core.schemas import FamilyLookup, NannyLookup, SubscriptionPlan, lookup_from_ids
from cuidly.entitlements import SubscriptionService, get_plan_display_name, get_plan_features
from cuidly.matching import (
    rank_matches,
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cuidly core - plan entitlements and nanny/family matching",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Rank nannies for a job")
    match_parser.add_argument(
        "--input",
        required=True,
        help="JSON file with job, family, children and nannies rows",
    )
    match_parser.add_argument(
        "--limit",
        type=int,
        help="Maximum results (default: matching.default_limit from config)",
    )
    match_parser.add_argument(
        "--min-score",
        type=int,
        default=0,
        help="Drop results below this score (default: 0)",
    )
    match_parser.add_argument(
        "--include-ineligible",
        action="store_true",
        help="Also list eliminated nannies, after the eligible ones",
    )

    # --- plans subcommand ---
    subparsers.add_parser("plans", help="Print the plan feature table as JSON")

    # --- gates subcommand ---
    gates_parser = subparsers.add_parser(
        "gates",
        help="Evaluate entitlement gates for a stored subscription",
    )
    gates_parser.add_argument("--family-id", type=int, help="Family whose gates to check")
    gates_parser.add_argument("--nanny-id", type=int, help="Nanny whose gates to check")
    gates_parser.add_argument("--job-id", type=int, help="Job for conversation/expiry gates")
    gates_parser.add_argument(
        "--recipient-id",
        type=int,
        help="Other side of the conversation (default for nannies: the job's family)",
    )
    gates_parser.add_argument(
        "--conversation-id",
        help="Conversation for the nanny message gate",
    )

    for sub in (match_parser, gates_parser):
        sub.add_argument(
            "--config",
            help="Path to settings YAML file (default: built-in settings)",
        )
    for sub in subparsers.choices.values():
        sub.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose (DEBUG) logging",
        )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings()


def cmd_match(args: argparse.Namespace) -> list[dict[str, Any]]:
    """Handle match subcommand."""
    settings = load_settings(args.config)
    payload = json.loads(Path(args.input).read_text())

    job = to_job_data(payload["job"])
    family = to_family_data(payload["family"])
    children = [to_child_data(row) for row in payload.get("children", [])]
    nannies = [to_nanny_profile(row, row.get("reviewStats")) for row in payload.get("nannies", [])]
    logger.info("Scoring %d nannies for job %d", len(nannies), job.id)

    ranked = rank_matches(
        job,
        family,
        children,
        nannies,
        limit=args.limit,
        min_score=args.min_score,
        include_ineligible=args.include_ineligible,
        config=settings.matching,
    )
    return [
        {"nannyId": m.nanny.id, "name": m.nanny.name, **m.result.model_dump(mode="json", by_alias=True)}
        for m in ranked
    ]


def cmd_plans() -> dict[str, Any]:
    """Handle plans subcommand."""
    return {
        plan.value: {
            "displayName": get_plan_display_name(plan),
            "features": get_plan_features(plan).model_dump(mode="json"),
        }
        for plan in SubscriptionPlan
    }


def cmd_gates(args: argparse.Namespace) -> dict[str, Any]:
    """Handle gates subcommand."""
    settings = load_settings(args.config)
    lookup = lookup_from_ids(nanny_id=args.nanny_id, family_id=args.family_id)

    conn = init_db(settings.database.path)
    try:
        service = SubscriptionService(conn)
        subscription = service.get_subscription(lookup)
        report: dict[str, Any] = {
            "lookup": lookup.model_dump(mode="json"),
            "plan": subscription.plan.value if subscription else None,
            "active": bool(subscription and subscription.is_active),
            "canCreateJob": service.can_create_job(lookup).model_dump(mode="json", by_alias=True),
            "canUseBoost": service.can_use_boost(lookup).model_dump(mode="json", by_alias=True),
            "profileViews": service.get_profile_view_usage(lookup).model_dump(
                mode="json", by_alias=True
            ),
        }

        if args.job_id is not None:
            report["jobExpiration"] = service.is_job_expired(args.job_id).model_dump(
                mode="json", by_alias=True
            )
            recipient: NannyLookup | FamilyLookup | None = None
            if isinstance(lookup, FamilyLookup) and args.recipient_id is not None:
                recipient = NannyLookup(id=args.recipient_id)
            elif isinstance(lookup, NannyLookup):
                family_id = args.recipient_id
                if family_id is None:
                    family_id = service.require_job(args.job_id).family_id
                recipient = FamilyLookup(id=family_id)
            if recipient is not None:
                report["canStartConversation"] = service.can_start_conversation_for_job(
                    lookup, args.job_id, recipient
                ).model_dump(mode="json", by_alias=True)

        if args.conversation_id:
            report["canSendMessage"] = service.can_nanny_send_message(
                lookup, args.conversation_id
            ).model_dump(mode="json", by_alias=True)
    finally:
        conn.close()
    return report


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "match":
            output: Any = cmd_match(args)
        elif args.command == "plans":
            output = cmd_plans()
        else:
            output = cmd_gates(args)
    except (FileNotFoundError, LookupError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
