#!/usr/bin/env python3
import json
import time
from pathlib import Path

from simplex_tutor.lp.simplex import simplex_solve
from simplex_tutor.schemas import LPModel, SolveOptions
from scripts.generate_instances import generate_random_lp


def load_example(name: str) -> LPModel:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return LPModel.model_validate(json.loads(path.read_text()))


def main() -> None:
    cases = [("examples/textbook_lp.json", load_example("textbook_lp.json"))]
    for seed in range(3):
        cases.append((f"random-{seed}", generate_random_lp(4, 4, seed)))

    print("name,rule,status,objective,pivots,time_ms")
    for name, model in cases:
        for rule in ("dantzig", "bland"):
            start = time.perf_counter()
            result = simplex_solve(model, SolveOptions(pivot_rule=rule))
            elapsed_ms = (time.perf_counter() - start) * 1000
            print(
                f"{name},{rule},{result.status.value},{result.optimal_value},{result.iterations},{elapsed_ms:.2f}"
            )


if __name__ == "__main__":
    main()
