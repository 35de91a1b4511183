"""Utility for manually invoking the sandbox pipeline.

Runs a Java source file through the full stage/compile/run pipeline on
the chosen backend and prints the raw ``ExecutionResponse``. Without
``--source`` it uses a built-in program that prints the sum of its two
integer arguments.

Example::

    python tools/manual_runner.py \
        --backend container \
        --source Main.java \
        --input "4 4" --input "1 3" \
        --time-limit 5000
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from judge.config import get_sandbox_config
from judge.constant import Backend, Language
from judge.meta import ExecutionRequest
from judge.pipeline import CodeSandbox

SUM_OF_ARGS = """\
public class Main {
    public static void main(String[] args) {
        int a = Integer.parseInt(args[0]);
        int b = Integer.parseInt(args[1]);
        System.out.println(a + b);
    }
}
"""


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--backend",
        choices=[b.value for b in Backend],
        help="isolation backend (default: from config)",
    )
    parser.add_argument(
        "--source",
        type=Path,
        help="path to Main.java (default: built-in sum program)",
    )
    parser.add_argument(
        "--input",
        action="append",
        dest="inputs",
        help="argument string of one test case, repeatable",
    )
    parser.add_argument(
        "--time-limit",
        type=int,
        help="per-case time limit in milliseconds",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="path to sandbox configuration file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log pipeline progress to stderr",
    )
    return parser.parse_args()


def main() -> None:
    """CLI entry point."""

    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    cfg = get_sandbox_config(args.config)
    if args.backend:
        cfg["backend"] = args.backend
    if args.time_limit:
        cfg["time_limit_ms"] = args.time_limit

    code = args.source.read_text() if args.source else SUM_OF_ARGS
    request = ExecutionRequest(
        language=Language.JAVA,
        code=code,
        inputList=args.inputs or ["4 4", "1 3"],
    )
    response = CodeSandbox.from_config(cfg).execute(request)
    print(json.dumps(response.model_dump(mode="json"), indent=2,
                     ensure_ascii=False))


if __name__ == "__main__":
    main()
