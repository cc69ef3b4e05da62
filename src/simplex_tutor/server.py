from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from .assistant import EXPLANATION_UNAVAILABLE, SimplexAssistant
from .lp.parser import parse_natural_language_spec
from .lp.simplex import simplex_solve
from .lp.tableau import InvalidModel
from .schemas import AssistantConfig, LPModel, SimplexResult, SolveOptions

logger = logging.getLogger(__name__)


def solve_payload(model: LPModel, options: SolveOptions | None = None) -> dict:
    try:
        result = simplex_solve(model, options or SolveOptions())
    except InvalidModel as exc:
        return {"error": str(exc), "result": None}
    return {"result": result.model_dump(mode="json")}


def parse_payload(spec: str) -> dict:
    try:
        model = parse_natural_language_spec(spec)
    except ValueError as exc:
        return {"error": f"Failed to parse problem: {exc}", "model": None}
    return {"model": model.model_dump(mode="json")}


def assistant_parse_payload(assistant: SimplexAssistant | None, text: str) -> dict:
    if assistant is None:
        return {"error": "Assistant is not configured.", "model": None}
    model = assistant.parse_problem(text)
    if model is None:
        return {"error": "Assistant could not produce a model.", "model": None}
    return {"model": model.model_dump(mode="json")}


def explain_payload(assistant: SimplexAssistant | None, model: LPModel, result: SimplexResult) -> dict:
    if assistant is None:
        return {"explanation": EXPLANATION_UNAVAILABLE}
    return {"explanation": assistant.explain_solution(model, result)}


def create_app(assistant: SimplexAssistant | None = None) -> FastMCP:
    """Build the MCP app; the assistant is injected by the host, never looked up globally."""

    app = FastMCP("Simplex Tutor")

    @app.tool()
    def solve_linear_program(model: LPModel, options: SolveOptions | None = None) -> dict:
        """Solve a linear program with the tableau simplex and return the result with its pivot trace."""
        return solve_payload(model, options)

    @app.tool()
    def parse_natural_language(spec: str) -> dict:
        """Parse a compact prompt such as 'maximize 3x + 2y subject to x + y <= 4' into LPModel JSON."""
        return parse_payload(spec)

    @app.tool()
    def parse_with_assistant(text: str) -> dict:
        """Ask the AI assistant to formulate a free-text word problem as LPModel JSON."""
        return assistant_parse_payload(assistant, text)

    @app.tool()
    def explain_solution(model: LPModel, result: SimplexResult) -> dict:
        """Return a short plain-language explanation of a solve result."""
        return explain_payload(assistant, model, result)

    return app


def configure_logging(level_name: str | None = None) -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def main() -> None:
    configure_logging(os.environ.get("LOG_LEVEL"))
    config = AssistantConfig.from_env()
    assistant = SimplexAssistant(config)
    if not assistant.available:
        logger.warning("No assistant API key configured; AI parsing and explanations are disabled")
    app = create_app(assistant)

    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    if transport == "stdio" or "--stdio" in sys.argv:
        app.run(transport="stdio")
    else:
        port = int(os.environ.get("PORT", "8081"))
        logger.info("Serving streamable HTTP on port %d", port)
        app.settings.host = "0.0.0.0"
        app.settings.port = port
        app.settings.streamable_http_path = "/mcp"
        app.settings.transport_security = TransportSecuritySettings(
            enable_dns_rebinding_protection=False,
            allowed_hosts=["*"],
            allowed_origins=["*"],
        )
        app.run(transport="streamable-http")


if __name__ == "__main__":
    main()
