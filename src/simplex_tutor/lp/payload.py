"""Strict conversion of AI-assistant JSON into an ``LPModel``."""

import logging
import re
from typing import Any, List, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr, ValidationError

from .tableau import InvalidModel
from ..schemas import Constraint, ConstraintRelation, LPModel, OptimizationDirection

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)

_RELATIONS = {
    "<=": ConstraintRelation.LESS_OR_EQUAL,
    ">=": ConstraintRelation.GREATER_OR_EQUAL,
    "=": ConstraintRelation.EQUAL,
}


class AssistantConstraint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    coefficients: List[StrictFloat]
    type: Literal["<=", ">=", "="]
    rhs: StrictFloat


class AssistantProblem(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: Literal["MAX", "MIN"]
    variables: List[StrictStr] = Field(min_length=1)
    objective_coefficients: List[StrictFloat] = Field(alias="objectiveCoefficients")
    constraints: List[AssistantConstraint]


# JSON schema handed to the assistant so its output matches what we accept
ASSISTANT_SCHEMA = AssistantProblem.model_json_schema(by_alias=True)


def model_from_assistant_payload(payload: Mapping[str, Any]) -> LPModel:
    try:
        problem = AssistantProblem.model_validate(payload)
    except ValidationError as exc:
        raise InvalidModel(f"Assistant payload rejected: {exc}") from exc
    return _to_model(problem)


def parse_assistant_json(text: str) -> LPModel:
    """Parse raw assistant output, tolerating a surrounding markdown code fence."""

    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        problem = AssistantProblem.model_validate_json(text)
    except ValidationError as exc:
        raise InvalidModel(f"Assistant payload rejected: {exc}") from exc
    return _to_model(problem)


def _to_model(problem: AssistantProblem) -> LPModel:
    n = len(problem.variables)
    if len(problem.objective_coefficients) != n:
        raise InvalidModel(
            f"Assistant returned {len(problem.objective_coefficients)} objective coefficients for {n} variables."
        )

    constraints: List[Constraint] = []
    for idx, raw in enumerate(problem.constraints):
        if len(raw.coefficients) != n:
            raise InvalidModel(
                f"Assistant constraint {idx + 1} has {len(raw.coefficients)} coefficients for {n} variables."
            )
        constraints.append(
            Constraint(
                id=f"c-{idx}",
                coefficients=list(raw.coefficients),
                relation=_RELATIONS[raw.type],
                rhs=raw.rhs,
            )
        )

    logger.debug("Assistant payload mapped to %d variables, %d constraints", n, len(constraints))
    return LPModel(
        name="assistant",
        direction=OptimizationDirection.MINIMIZE if problem.type == "MIN" else OptimizationDirection.MAXIMIZE,
        num_variables=n,
        variable_names=list(problem.variables),
        objective=list(problem.objective_coefficients),
        constraints=constraints,
    )
