import logging
import re
from collections import OrderedDict
from typing import Dict, List, Tuple

from ..schemas import Constraint, ConstraintRelation, LPModel, OptimizationDirection

logger = logging.getLogger(__name__)

_SECTION_SPLIT = re.compile(r"subject to|such that|s\.t\.", re.IGNORECASE)
_TOKEN_SPLIT = re.compile(r",|;|\band\b", re.IGNORECASE)
_RELATION = re.compile(r"(<=|>=|==|=)")
# "x, y >= 0": commas inside a variable list are masked before splitting
_GROUPED_LIST = re.compile(r"\b[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)+(?=\s*(?:<=|>=))")
_GROUPED_BOUND = re.compile(
    r"^([A-Za-z_]\w*(?:\s*\|\s*[A-Za-z_]\w*)+)\s*(<=|>=)\s*(-?\d+(?:\.\d+)?)$"
)
_TERM = re.compile(r"([+-]?\s*\d*\.?\d*)\s*([A-Za-z_]\w*)")
_NUMBER = re.compile(r"[+-]?\s*\d+(?:\.\d+)?")

_RELATIONS = {
    "<=": ConstraintRelation.LESS_OR_EQUAL,
    ">=": ConstraintRelation.GREATER_OR_EQUAL,
    "=": ConstraintRelation.EQUAL,
    "==": ConstraintRelation.EQUAL,
}

_Row = Tuple[Dict[str, float], ConstraintRelation, float]


def parse_natural_language_spec(spec: str) -> LPModel:
    """
    Small rule-based parser for textbook prompts like:
      "maximize 3x + 2y subject to x + 2y <= 14, 3x - y >= 0, x <= 5, x,y >= 0"
    Non-negativity statements are dropped since every variable is already >= 0.
    """

    if not spec or not spec.strip():
        raise ValueError("Specification is empty.")

    normalized = " ".join(spec.replace("\n", " ").split())
    pieces = _SECTION_SPLIT.split(normalized, maxsplit=1)
    objective_part = pieces[0].strip()
    constraints_part = pieces[1].strip() if len(pieces) > 1 else ""

    match = re.match(r"(maximize|minimize|max|min)\b\s*(?:z\s*=\s*)?(.*)", objective_part, flags=re.IGNORECASE)
    if not match:
        raise ValueError("Objective must start with 'maximize' or 'minimize'.")
    direction = (
        OptimizationDirection.MAXIMIZE
        if match.group(1).lower().startswith("max")
        else OptimizationDirection.MINIMIZE
    )
    objective_str = match.group(2).strip()
    if not objective_str:
        raise ValueError("Objective expression is missing.")

    objective_terms, objective_constant = _parse_linear_expr(objective_str)
    if abs(objective_constant) > 1e-12:
        raise ValueError("Objective constant terms are not supported.")
    names: "OrderedDict[str, None]" = OrderedDict((name, None) for name in objective_terms)

    rows: List[_Row] = []
    masked = _GROUPED_LIST.sub(lambda m: m.group(0).replace(",", "|"), constraints_part)
    tokens = [tok.strip() for tok in _TOKEN_SPLIT.split(masked) if tok.strip()]
    for token in tokens:
        for terms, relation, rhs in _parse_constraint(token):
            for name in terms:
                names.setdefault(name, None)
            if _is_sign_restriction(terms, relation, rhs):
                continue
            rows.append((terms, relation, rhs))

    variable_names = list(names.keys())
    constraints = [
        Constraint(
            id=f"c{idx + 1}",
            coefficients=[terms.get(name, 0.0) for name in variable_names],
            relation=relation,
            rhs=rhs,
        )
        for idx, (terms, relation, rhs) in enumerate(rows)
    ]
    logger.debug("Parsed %d variables and %d constraints", len(variable_names), len(constraints))

    return LPModel(
        name="parsed",
        direction=direction,
        num_variables=len(variable_names),
        variable_names=variable_names,
        objective=[objective_terms.get(name, 0.0) for name in variable_names],
        constraints=constraints,
    )


def _parse_constraint(token: str) -> List[_Row]:
    grouped = _GROUPED_BOUND.match(token)
    if grouped:
        vars_chunk, cmp, rhs_text = grouped.groups()
        return [
            ({name.strip(): 1.0}, _RELATIONS[cmp], float(rhs_text))
            for name in vars_chunk.split("|")
            if name.strip()
        ]

    rel_match = _RELATION.search(token)
    if not rel_match:
        raise ValueError(f"Could not parse constraint segment '{token}'.")
    lhs_str = token[: rel_match.start()].strip()
    rhs_str = token[rel_match.end() :].strip()
    if not lhs_str or not rhs_str:
        raise ValueError(f"Incomplete constraint expression '{token}'.")
    try:
        rhs = float(rhs_str.replace(" ", ""))
    except ValueError as exc:
        raise ValueError(f"Right-hand side '{rhs_str}' is not numeric.") from exc

    terms, constant = _parse_linear_expr(lhs_str)
    if not terms:
        raise ValueError(f"Constraint '{token}' has no variables.")
    return [(terms, _RELATIONS[rel_match.group(1)], rhs - constant)]


def _is_sign_restriction(terms: Dict[str, float], relation: ConstraintRelation, rhs: float) -> bool:
    if relation != ConstraintRelation.GREATER_OR_EQUAL or rhs != 0:
        return False
    return len(terms) == 1 and next(iter(terms.values())) > 0


def _parse_linear_expr(expr_str: str) -> Tuple[Dict[str, float], float]:
    expr_clean = expr_str.replace("*", "")
    coeffs: "OrderedDict[str, float]" = OrderedDict()
    spans: List[Tuple[int, int]] = []

    for match in _TERM.finditer(expr_clean):
        coef_text = match.group(1).replace(" ", "")
        if coef_text in ("", "+"):
            coef = 1.0
        elif coef_text == "-":
            coef = -1.0
        else:
            coef = float(coef_text)
        var_name = match.group(2)
        coeffs[var_name] = coeffs.get(var_name, 0.0) + coef
        spans.append(match.span())

    remaining = list(expr_clean)
    for start, end in spans:
        for idx in range(start, end):
            remaining[idx] = " "

    constant = 0.0
    for num_match in _NUMBER.finditer("".join(remaining)):
        constant += float(num_match.group(0).replace(" ", ""))

    terms = OrderedDict((name, coef) for name, coef in coeffs.items() if abs(coef) > 1e-12)
    return terms, constant
