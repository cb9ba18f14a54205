"""
Rewrite the ``allowed_supervisors`` assignment of examples/config.yml.

Run from the repository root::

    python examples/update_config.py

The updated template is written to examples/config-updated.yml; every other
annotation and value is carried over unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from yttkit import AnnotationKind, StringifyOptions, parse, stringify
from yttkit.core.query import find_annotation, format_code_assignment

logger = logging.getLogger(__name__)

EXAMPLES_DIR = Path(__file__).parent

NEW_SUPERVISORS = {
    "us-east-1": ["us-east-1a", "us-east-1b", "us-east-1c"],
    "us-west-1": ["us-west-1a", "us-west-1b"],
    "eu-central-1": "*",
    "ap-south-1": ["ap-south-1a"],
}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    source = EXAMPLES_DIR / "config.yml"
    document = parse(source.read_text(encoding="utf-8"))

    block = find_annotation(document, "allowed_supervisors =", AnnotationKind.CODE)
    if block is None:
        raise SystemExit(f"No allowed_supervisors assignment in {source}")

    block.text = format_code_assignment("allowed_supervisors", NEW_SUPERVISORS)
    logger.info("Updated allowed_supervisors (%d lines)", block.text.count("\n") + 1)

    target = EXAMPLES_DIR / "config-updated.yml"
    target.write_text(stringify(document, StringifyOptions(trailing_newline=True)), encoding="utf-8")
    logger.info("Saved %s", target)


if __name__ == "__main__":
    main()
