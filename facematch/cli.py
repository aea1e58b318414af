"""Index reference faces, then report the known users found in each input image.

Reads ``bucketName`` and ``collectionId`` from the selected Pulumi stack
(``PULUMI_CONFIG_PASSPHRASE`` must be set), indexes every
``reference/<user>_*`` image into the collection, associates the faces with
one user per name and prints the users recognised in every ``input/`` image.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .config import Settings
from .errors import FaceMatchError
from .logging_utils import configure_logging
from .pipeline import MatchingRun
from .schema import MatchResult
from .stack import get_stack_info

logger = logging.getLogger("facematch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="facematch", description=__doc__)
    parser.add_argument(
        "-stack",
        "--stack",
        dest="stack",
        default="dev",
        help="The name of the pulumi stack",
    )
    return parser


def print_result(result: MatchResult, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    out.write(f"\nProcessing image: {result.image} \n")
    for user_id in result:
        out.write(f"Found user: {user_id} \n")
    out.flush()


def run(stack_name: str, settings: Settings, out: Optional[TextIO] = None) -> None:
    stack_info = get_stack_info(stack_name, settings.iac_dir)
    matching = MatchingRun.from_stack(stack_info, settings)
    matching.index_and_associate_faces()
    for result in matching.iter_input_images():
        print_result(result, out)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(1)
    try:
        run(args.stack, Settings.load())
    except FaceMatchError as exc:
        logger.critical("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
