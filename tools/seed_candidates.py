from __future__ import annotations

"""CLI utility to register candidate profiles in the user directory."""

import argparse

from src.app.settings import settings
from src.candidates.store import CandidateStore
from src.candidates.types import CandidateProfile


def main() -> None:
    """Create or update one candidate profile using app settings."""
    parser = argparse.ArgumentParser(description="Register a candidate profile.")
    parser.add_argument("candidate_id", help="Identifier the API key map points at.")
    parser.add_argument("--name", required=True, help="Candidate full name.")
    parser.add_argument("--email", required=True, help="Candidate email address.")
    parser.add_argument(
        "--database-uri",
        default=settings.database_uri,
        help="Database to write to.",
    )
    args = parser.parse_args()

    store = CandidateStore(args.database_uri)
    store.upsert_profile(
        CandidateProfile(candidate_id=args.candidate_id, name=args.name, email=args.email)
    )
    print(f"Registered candidate: {args.candidate_id}")


if __name__ == "__main__":
    main()
