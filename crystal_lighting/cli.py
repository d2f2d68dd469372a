"""Command line entry point: generate a case, grade a candidate, print the score."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import EvaluatorConfig, configure_logging, positive_float, resolve_config
from .errors import EvaluationTimeout
from .evaluation import EvaluationResult, Evaluator, SimulationContext
from .generator import generate
from .scoring import INVALID_SCORE

_logger = logging.getLogger(__name__)


def _seconds(text: str) -> float:
    try:
        return positive_float("value", text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crystal-lighting",
        description="Grade lantern, mirror and obstacle placements on a crystal board.",
    )
    parser.add_argument("--seed", type=int, default=1, help="Test case seed (default: 1).")
    parser.add_argument("--exec", dest="command", help="Candidate command line to run.")
    parser.add_argument("--novis", dest="vis", action="store_false", help="Run without a window.")
    parser.add_argument("--manual", action="store_true", help="Place items by hand before scoring.")
    parser.add_argument("--size", dest="cell_size", type=int, default=0, help="Cell size in pixels (0 fits the screen).")
    parser.add_argument("--debug", action="store_true", help="Print the generated case and debug logs.")
    parser.add_argument("--plain", action="store_true", help="Draw crystals without inner detail.")
    parser.add_argument("--mark", action="store_true", help="Highlight correct and wrong crystals.")
    parser.add_argument("--rays", dest="show_rays", action="store_true", help="Draw light rays.")
    parser.add_argument("--save", action="store_true", help="Save the final board as <seed>.png.")
    parser.add_argument("--timeout", type=_seconds, default=None, help="Seconds to wait for the candidate.")
    parser.add_argument(
        "--manual-timeout",
        dest="manual_timeout",
        type=_seconds,
        default=None,
        help="Seconds to wait for manual play to be submitted.",
    )
    return parser


def evaluate(config: EvaluatorConfig) -> EvaluationResult:
    instance = generate(config.seed)
    if config.debug:
        print(instance.describe())

    evaluator = Evaluator(instance, config)
    if config.command is not None:
        result = evaluator.evaluate_candidate(config.command)
        if not config.manual or result.context is None:
            if config.vis and result.context is not None:
                _show(result.context, config)
            return result
        context = result.context
    else:
        context = SimulationContext(instance)

    session = evaluator.start_manual(context)
    print("Manual play on")
    try:
        _show(context, config, session)
    except EvaluationTimeout as exc:
        _logger.error(str(exc))
        return EvaluationResult(score=INVALID_SCORE, messages=[str(exc)], context=context)
    return evaluator.finish_manual(session, timeout=0)


def _show(context: SimulationContext, config: EvaluatorConfig, session=None) -> None:
    from .ui import run_window

    run_window(context, config, session)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_config(**vars(args))
    configure_logging(config)

    result = evaluate(config)
    for message in result.messages:
        print(message)
    print(f"Score = {result.score}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
