"""Simple command line demo for the evaluator logic."""

from .config import DEFAULT_SOLVER_TIME_LIMIT
from .evaluation import Evaluator
from .generator import generate
from .solver import solve


def main(seed: int = 1) -> None:
    instance = generate(seed)
    lines = solve(instance, time_limit=DEFAULT_SOLVER_TIME_LIMIT)

    evaluator = Evaluator(instance)
    result = evaluator.evaluate_response(lines)

    print("=== Crystal Lighting Demo ===")
    print(f"Seed: {seed} ({instance.height}x{instance.width})")
    print(f"Items placed: {len(lines)}")
    if result.details is not None:
        print(result.details.summary())
    for message in result.messages:
        print(message)
    if result.context is not None:
        print("Result board:")
        for row in result.context.board.result_rows():
            print(f"  {row}")


if __name__ == "__main__":
    main()
