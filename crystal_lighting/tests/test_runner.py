import io
import sys
import textwrap
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crystal_lighting.config import EvaluatorConfig, SOLVER_TIME_LIMIT_ENV_VAR
from crystal_lighting.errors import CandidateError, EvaluationTimeout
from crystal_lighting.evaluation import Evaluator
from crystal_lighting.model import PuzzleInstance
from crystal_lighting.protocol import format_request
from crystal_lighting.runner import CandidateProcess
from crystal_lighting.scoring import INVALID_SCORE
from crystal_lighting import solver


READ_REQUEST = """
import sys
height = int(sys.stdin.readline())
for _ in range(height + 5):
    sys.stdin.readline()
"""


def make_instance() -> PuzzleInstance:
    return PuzzleInstance.from_rows(["...", ".2.", "..."], cost_lantern=3)


def write_candidate(tmp_path: Path, body: str) -> list:
    script = tmp_path / "candidate.py"
    script.write_text(READ_REQUEST + textwrap.dedent(body))
    return [sys.executable, str(script)]


def test_candidate_process_returns_item_lines(tmp_path: Path):
    command = write_candidate(
        tmp_path,
        """
        print("warming up", file=sys.stderr)
        print(1)
        print("1 0 2")
        """,
    )

    with CandidateProcess(command, timeout=10) as candidate:
        lines = candidate.request(make_instance())

    assert lines == ["1 0 2"]


def test_candidate_process_times_out_on_silent_program(tmp_path: Path):
    command = write_candidate(
        tmp_path,
        """
        import time
        time.sleep(30)
        """,
    )

    with CandidateProcess(command, timeout=0.5) as candidate:
        with pytest.raises(EvaluationTimeout, match="did not answer within 0.5 seconds"):
            candidate.request(make_instance())


def test_candidate_process_rejects_empty_command():
    with pytest.raises(CandidateError):
        CandidateProcess("   ")


def test_evaluate_candidate_scores_answer(tmp_path: Path):
    command = write_candidate(
        tmp_path,
        """
        sys.stdout.write("1\\n1 0 2\\n")
        """,
    )

    result = Evaluator(make_instance()).evaluate_candidate(command)

    assert result.ok
    assert result.score == 17


def test_evaluate_candidate_reports_short_answer(tmp_path: Path):
    command = write_candidate(
        tmp_path,
        """
        print(2)
        print("1 0 2")
        """,
    )

    result = Evaluator(make_instance()).evaluate_candidate(command)

    assert result.score == INVALID_SCORE
    assert result.messages[0].startswith("Item 1:")


def test_evaluate_candidate_reports_missing_program(tmp_path: Path):
    missing = str(tmp_path / "no-such-program")

    result = Evaluator(make_instance()).evaluate_candidate([missing])

    assert result.score == INVALID_SCORE
    assert result.messages[0].startswith("Failed to start")


def test_evaluate_candidate_honours_config_timeout(tmp_path: Path):
    command = write_candidate(
        tmp_path,
        """
        import time
        time.sleep(30)
        """,
    )
    config = EvaluatorConfig(command="unused", timeout=0.5)

    result = Evaluator(make_instance(), config).evaluate_candidate(command)

    assert result.score == INVALID_SCORE
    assert "did not answer" in result.messages[0]


def test_solver_finds_single_lantern():
    assert solver.solve(make_instance(), time_limit=5) == ["2 1 2"]


def test_solver_main_speaks_protocol():
    stdout = io.StringIO()

    solver.main(io.StringIO(format_request(make_instance())), stdout)

    assert stdout.getvalue() == "1\n2 1 2\n"


def test_solver_as_subprocess(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PYTHONPATH", str(ROOT))
    monkeypatch.setenv(SOLVER_TIME_LIMIT_ENV_VAR, "2")

    result = Evaluator(make_instance()).evaluate_candidate(
        [sys.executable, "-m", "crystal_lighting.solver"]
    )

    assert result.ok
    assert result.score == 17


@pytest.mark.parametrize("timeout", [0, -1.0])
def test_candidate_process_rejects_non_positive_timeout(timeout):
    with pytest.raises(ValueError, match="must be positive"):
        CandidateProcess([sys.executable, "-c", "pass"], timeout=timeout)
