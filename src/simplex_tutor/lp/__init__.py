"""Tableau simplex engine and model parsers."""

from .simplex import simplex_solve
from .tableau import InvalidModel, build_initial_tableau, pivot, validate_model
from .parser import parse_natural_language_spec
from .payload import model_from_assistant_payload, parse_assistant_json

__all__ = [
    "simplex_solve",
    "InvalidModel",
    "build_initial_tableau",
    "pivot",
    "validate_model",
    "parse_natural_language_spec",
    "model_from_assistant_payload",
    "parse_assistant_json",
]
