from __future__ import annotations

from crewai import LLM, Agent

from ..schemas import AssistantConfig


def build_llm(config: AssistantConfig) -> LLM:
    return LLM(
        model=config.llm_model,
        api_key=config.api_key,
        temperature=config.temperature,
    )


def formulation_agent(config: AssistantConfig) -> Agent:
    return Agent(
        role="Translates natural language problem statements into linear programs",
        goal="Produce a JSON linear program ready for the tableau simplex solver",
        backstory="Enjoys turning ambiguous business briefs into precise textbook LP models.",
        llm=build_llm(config),
        allow_delegation=False,
        verbose=config.verbose,
    )


def explainer_agent(config: AssistantConfig) -> Agent:
    return Agent(
        role="Explains linear programming results to non-specialists",
        goal="Summarise an optimal solution in plain business terms",
        backstory="A patient operations research tutor.",
        llm=build_llm(config),
        allow_delegation=False,
        verbose=config.verbose,
    )
