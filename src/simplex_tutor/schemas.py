from __future__ import annotations

import logging
import os
from enum import Enum
from typing import List, Literal, Mapping, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

PivotRule = Literal["dantzig", "bland"]


class OptimizationDirection(str, Enum):
    MAXIMIZE = "max"
    MINIMIZE = "min"


class ConstraintRelation(str, Enum):
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="
    EQUAL = "=="


class SolveStatus(str, Enum):
    OPTIMAL = "optimal"
    UNBOUNDED = "unbounded"
    INFEASIBLE = "infeasible"
    ITERATION_LIMIT = "iteration_limit"


def _constraint_id() -> str:
    return f"c-{uuid4().hex[:8]}"


class Constraint(BaseModel):
    id: str = Field(default_factory=_constraint_id)
    coefficients: List[float]
    relation: ConstraintRelation = ConstraintRelation.LESS_OR_EQUAL
    rhs: float


class LPModel(BaseModel):
    name: str = "problem"
    direction: OptimizationDirection
    num_variables: int
    variable_names: List[str] = Field(default_factory=list)
    objective: List[float]
    constraints: List[Constraint] = Field(default_factory=list)

    def variable_name(self, idx: int) -> str:
        if idx < len(self.variable_names):
            return self.variable_names[idx]
        return f"x{idx + 1}"


class SolveOptions(BaseModel):
    max_iters: int = 100
    tol: float = 1e-9
    pivot_rule: PivotRule = "dantzig"


class SimplexStep(BaseModel):
    """Snapshot of the tableau and basis taken before the pivot it describes."""

    model_config = ConfigDict(frozen=True)

    tableau: Tuple[Tuple[float, ...], ...]
    pivot_row: Optional[int] = None
    pivot_col: Optional[int] = None
    basis: Tuple[int, ...]
    description: str
    is_optimal: bool = False


class SimplexResult(BaseModel):
    status: SolveStatus
    optimal_value: Optional[float] = None
    variable_values: List[float] = Field(default_factory=list)
    steps: List[SimplexStep] = Field(default_factory=list)
    iterations: int = 0
    message: str = ""


class AssistantConfig(BaseModel):
    """Settings for the AI formulation/explanation assistant.

    Built once by the host application and handed to ``SimplexAssistant``.
    """

    llm_model: str = "gemini/gemini-2.5-flash"
    api_key: Optional[str] = None
    temperature: float = 0.0
    verbose: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AssistantConfig":
        env = os.environ if environ is None else environ
        values = {}
        if env.get("SIMPLEX_TUTOR_LLM_MODEL"):
            values["llm_model"] = env["SIMPLEX_TUTOR_LLM_MODEL"]
        api_key = env.get("SIMPLEX_TUTOR_API_KEY") or env.get("GEMINI_API_KEY")
        if api_key:
            values["api_key"] = api_key
        if env.get("SIMPLEX_TUTOR_TEMPERATURE"):
            try:
                values["temperature"] = float(env["SIMPLEX_TUTOR_TEMPERATURE"])
            except ValueError:
                logger.warning(
                    "Ignoring malformed SIMPLEX_TUTOR_TEMPERATURE=%r; using %s",
                    env["SIMPLEX_TUTOR_TEMPERATURE"],
                    cls.model_fields["temperature"].default,
                )
        return cls(**values)
