#!/usr/bin/env python3
"""Print all users registered in the stack's Rekognition collection."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional

sys.path.append(str(Path(__file__).resolve().parents[1]))
from facematch.config import Settings
from facematch.errors import FaceMatchError
from facematch.logging_utils import configure_logging
from facematch.rekognition import FaceCollection
from facematch.stack import get_stack_info


def _collect_user_ids(stack_name: str, settings: Settings) -> List[str]:
    """Return a sorted list of user ids in the stack's collection."""
    info = get_stack_info(stack_name, settings.iac_dir)
    collection = FaceCollection(info.collection_id, info.bucket_name, region_name=settings.region_name)
    return sorted(collection.list_user_ids())


def _as_json(user_ids: Iterable[str]) -> str:
    return json.dumps({"users": list(user_ids)}, indent=2)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("-stack", "--stack", dest="stack", default="dev", help="The name of the pulumi stack")
    parser.add_argument(
        "--json", action=argparse.BooleanOptionalAction, help="Output JSON instead of plain text"
    )
    args = parser.parse_args(argv)

    configure_logging()
    try:
        user_ids = _collect_user_ids(args.stack, Settings.load())
    except FaceMatchError as exc:
        print(f"Listing users failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.json:
        print(_as_json(user_ids))
    else:
        for user_id in user_ids:
            print(user_id)


if __name__ == "__main__":
    main()
