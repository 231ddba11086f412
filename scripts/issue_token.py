"""Mint a bearer token for local testing.

    python scripts/issue_token.py <user_id> [--ttl-minutes 60]
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_admission.attendance_admission.auth.tokens import TokenService


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a development bearer token")
    parser.add_argument("user_id")
    parser.add_argument("--ttl-minutes", type=int, default=None)
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    ttl = args.ttl_minutes or int(getattr(settings, "JWT_TTL_MINUTES", 720))
    tokens = TokenService(settings.JWT_SECRET, algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"), ttl_minutes=ttl)
    print(tokens.issue(args.user_id))


if __name__ == "__main__":
    main()
