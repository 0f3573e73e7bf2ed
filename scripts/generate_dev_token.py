#!/usr/bin/env python3
"""Generate signed tokens for exercising the console API locally."""

from __future__ import annotations

import argparse

from perfeval.core.auth import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", help="Evaluation API user id placed in the sub claim")
    parser.add_argument("--role", default="employee", choices=["admin", "manager", "employee"])
    parser.add_argument("--email")
    args = parser.parse_args()

    token = create_access_token(args.user_id, role=args.role, email=args.email)
    print(f"{args.role.capitalize()} Token:\n{token}")


if __name__ == "__main__":
    main()
