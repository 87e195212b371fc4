#!/usr/bin/env python3
"""Emit the Postgres DDL expected by the relational store."""

from __future__ import annotations

import argparse

from laborportal.services.repository import DROP_SQL, SCHEMA_SQL


def render_sql(*, drop: bool) -> str:
    header = "-- LaborPortal relational store schema\n-- Run in a privileged Postgres session before starting the API.\n"
    body = SCHEMA_SQL.strip() + "\n"
    if drop:
        return header + "\n" + DROP_SQL.strip() + "\n\n" + body
    return header + "\n" + body


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Emit SQL for the LaborPortal Postgres tables.")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Prepend drop statements for a clean rebuild",
    )
    args = parser.parse_args(argv)
    print(render_sql(drop=args.drop))


if __name__ == "__main__":
    main()
