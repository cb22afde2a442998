"""Command-line entry point for the feedback duplicate-detection engine.

Loads environment variables, validates settings, then runs one of:
  score   – similarity of two texts
  check   – duplicate check of a submission against a JSON export of items
  config  – print the effective detection policy
"""
from dotenv import load_dotenv
import argparse
import json
import sys

# Load environment variables first, before any other imports
load_dotenv()

from feedback_dedup.config import get_config
from feedback_dedup.errors import InputError, UpstreamFetchError
from feedback_dedup.pool import JsonFileCandidatePool
from feedback_dedup.utils.logger import configure_logging, log_error
from feedback_dedup import service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect duplicate feedback submissions.")
    sub = parser.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Score the similarity of two texts (0-100).")
    score.add_argument("text_a")
    score.add_argument("text_b")
    score.add_argument("--algorithm", choices=["levenshtein", "jaccard", "cosine", "multi"], default="multi")

    check = sub.add_parser("check", help="Check a submission against a JSON array of feedback items.")
    check.add_argument("--pool", required=True, help="Path to a JSON array of feedback items.")
    check.add_argument("--title", required=True)
    check.add_argument("--description", required=True)
    check.add_argument("--category", default="general", choices=["general", "bug", "feature", "improvement"])
    check.add_argument("--ip", help="Submitter IP (anonymous submissions only).")
    check.add_argument("--user-id", help="Authenticated submitter id.")

    cfg = sub.add_parser("config", help="Print the effective detection policy.")
    cfg.add_argument("--category", help="Resolve the per-category override.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    if args.command == "score":
        print(f"{service.score_similarity(args.text_a, args.text_b, args.algorithm):.2f}")
        return 0

    if args.command == "config":
        print(json.dumps(service.get_effective_config(args.category).model_dump(), indent=2))
        return 0

    try:
        outcome = service.check_for_duplicates(
            args.title,
            args.description,
            args.category,
            JsonFileCandidatePool(args.pool),
            ip=args.ip,
            user_id=args.user_id,
        )
    except InputError as e:
        print(f"❌ {e.message}")
        return 2
    except UpstreamFetchError as e:
        print(f"❌ Unable to determine duplicate status: {e.cause}")
        return 1

    print(json.dumps({
        "is_duplicate": outcome.is_duplicate,
        "exact_match": outcome.exact_match,
        "threshold": outcome.threshold,
        "similar_feedback": [
            {"id": h.id, "title": h.item.title, "similarity_score": h.similarity_score, **h.similarity_details}
            for h in outcome.similar_feedback
        ],
        "log_ids": outcome.log_ids,
    }, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
