"""CrewAI-backed assistant that formulates and explains linear programs."""

from .crew import EXPLANATION_UNAVAILABLE, SimplexAssistant

__all__ = ["SimplexAssistant", "EXPLANATION_UNAVAILABLE"]
