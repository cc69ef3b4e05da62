from __future__ import annotations

import json
import logging
from typing import Optional

from crewai import Agent, Crew, Task

from .agents import explainer_agent, formulation_agent
from ..lp.payload import ASSISTANT_SCHEMA, parse_assistant_json
from ..lp.tableau import InvalidModel
from ..schemas import AssistantConfig, LPModel, SimplexResult, SolveStatus

logger = logging.getLogger(__name__)

EXPLANATION_UNAVAILABLE = "Explanation unavailable."

_PARSE_PROMPT = """\
You are a Linear Programming expert. Convert the following problem into a strict JSON object.

Input: "{text}"

Rules:
1. Identify if it is a maximization (MAX) or minimization (MIN).
2. Identify the decision variables and list their names.
3. Give one objective coefficient per variable, in the same order.
4. Give every constraint as coefficients (one per variable), type (<=, >= or =) and rhs.
5. Non-negativity is implicit; do not list it as a constraint.

Answer with JSON only, matching this schema:
{schema}
"""

_EXPLAIN_PROMPT = """\
A linear program was solved with the simplex method. Explain the result in simple business terms.

Problem: {direction} Z for variables {names}.
Objective coefficients: {objective}.
Status: {status}.
{details}

Provide a brief, two-sentence summary of what this means for the user.
"""


class SimplexAssistant:
    """AI collaborator for formulating and explaining problems.

    Every failure degrades to "feature unavailable"; nothing is raised to the caller.
    """

    def __init__(self, config: AssistantConfig) -> None:
        self.config = config

    @property
    def available(self) -> bool:
        return bool(self.config.api_key)

    def parse_problem(self, text: str) -> Optional[LPModel]:
        if not self.available:
            logger.warning("Assistant API key is missing; natural language parsing unavailable")
            return None
        if not text or not text.strip():
            return None

        prompt = _PARSE_PROMPT.format(text=text.strip(), schema=json.dumps(ASSISTANT_SCHEMA))
        try:
            raw = self._kickoff(formulation_agent(self.config), prompt, "A JSON linear program.")
        except Exception:
            logger.exception("Assistant call failed while parsing a problem")
            return None

        try:
            return parse_assistant_json(raw)
        except InvalidModel as exc:
            logger.warning("Discarding malformed assistant output: %s", exc)
            return None

    def explain_solution(self, model: LPModel, result: SimplexResult) -> str:
        if not self.available:
            return EXPLANATION_UNAVAILABLE

        names = [model.variable_name(idx) for idx in range(model.num_variables)]
        if result.status == SolveStatus.OPTIMAL:
            values = ", ".join(f"{name}: {value:g}" for name, value in zip(names, result.variable_values))
            details = f"Total value: {result.optimal_value:g}\nValues: {values}"
        else:
            details = result.message or "No optimal solution was found."

        prompt = _EXPLAIN_PROMPT.format(
            direction=model.direction.name,
            names=", ".join(names),
            objective=", ".join(f"{coef:g}" for coef in model.objective),
            status=result.status.value,
            details=details,
        )
        try:
            text = self._kickoff(explainer_agent(self.config), prompt, "A two-sentence explanation.")
        except Exception:
            logger.exception("Assistant call failed while explaining a solution")
            return EXPLANATION_UNAVAILABLE
        return text.strip() or EXPLANATION_UNAVAILABLE

    def _kickoff(self, agent: Agent, description: str, expected_output: str) -> str:
        task = Task(description=description, expected_output=expected_output, agent=agent)
        crew = Crew(agents=[agent], tasks=[task], verbose=self.config.verbose)
        output = crew.kickoff()
        return output.raw or ""
