import numpy as np
import pytest

from simplex_tutor.lp.simplex import simplex_solve
from simplex_tutor.lp.tableau import (
    InvalidModel,
    build_initial_tableau,
    column_label,
    pivot,
    validate_model,
)
from simplex_tutor.schemas import Constraint, ConstraintRelation, LPModel, OptimizationDirection


def make_lp(**overrides) -> LPModel:
    fields = dict(
        direction=OptimizationDirection.MAXIMIZE,
        num_variables=3,
        variable_names=["a", "b", "c"],
        objective=[2.0, 3.0, 4.0],
        constraints=[
            Constraint(id="wood", coefficients=[3.0, 2.0, 1.0], rhs=10.0),
            Constraint(id="labor", coefficients=[2.0, 5.0, 3.0], rhs=15.0),
        ],
    )
    fields.update(overrides)
    return LPModel(**fields)


def assert_basis_is_identity(tableau: np.ndarray, basis) -> None:
    m = len(basis)
    assert len(set(basis)) == m
    np.testing.assert_allclose(tableau[:m, basis], np.eye(m), atol=1e-9)


def test_initial_tableau_layout():
    tableau, basis = build_initial_tableau(make_lp())

    assert tableau.shape == (3, 6)
    assert basis == [3, 4]
    np.testing.assert_array_equal(tableau[0], [3.0, 2.0, 1.0, 1.0, 0.0, 10.0])
    np.testing.assert_array_equal(tableau[1], [2.0, 5.0, 3.0, 0.0, 1.0, 15.0])
    np.testing.assert_array_equal(tableau[2], [-2.0, -3.0, -4.0, 0.0, 0.0, 0.0])


def test_minimize_flips_objective_row():
    tableau, _ = build_initial_tableau(make_lp(direction=OptimizationDirection.MINIMIZE))

    np.testing.assert_array_equal(tableau[-1, :3], [2.0, 3.0, 4.0])


def test_ge_row_with_nonpositive_rhs_is_negated():
    model = make_lp(
        constraints=[
            Constraint(
                id="floor",
                coefficients=[1.0, 1.0, 0.0],
                relation=ConstraintRelation.GREATER_OR_EQUAL,
                rhs=-5.0,
            ),
            Constraint(
                id="balance",
                coefficients=[1.0, -1.0, 0.0],
                relation=ConstraintRelation.GREATER_OR_EQUAL,
                rhs=0.0,
            ),
        ]
    )
    tableau, basis = build_initial_tableau(model)

    np.testing.assert_array_equal(tableau[0, :3], [-1.0, -1.0, 0.0])
    assert tableau[0, -1] == 5.0
    np.testing.assert_array_equal(tableau[1, :3], [-1.0, 1.0, 0.0])
    assert tableau[1, -1] == 0.0
    assert basis == [3, 4]


@pytest.mark.parametrize(
    "relation, rhs",
    [
        (ConstraintRelation.EQUAL, 4.0),
        (ConstraintRelation.EQUAL, 0.0),
        (ConstraintRelation.GREATER_OR_EQUAL, 2.0),
        (ConstraintRelation.LESS_OR_EQUAL, -1.0),
    ],
)
def test_constraints_needing_phase_one_are_rejected(relation, rhs):
    model = make_lp(constraints=[Constraint(id="bad", coefficients=[1.0, 1.0, 1.0], relation=relation, rhs=rhs)])

    with pytest.raises(InvalidModel, match="bad"):
        simplex_solve(model)


def test_validate_rejects_short_constraint():
    model = make_lp(constraints=[Constraint(id="short", coefficients=[1.0, 2.0], rhs=3.0)])

    with pytest.raises(InvalidModel, match="short"):
        validate_model(model)


def test_validate_rejects_long_objective():
    with pytest.raises(InvalidModel, match="Objective"):
        validate_model(make_lp(objective=[1.0, 2.0, 3.0, 4.0]))


def test_validate_rejects_empty_objective():
    with pytest.raises(InvalidModel):
        validate_model(make_lp(objective=[]))


def test_validate_rejects_zero_variables():
    with pytest.raises(InvalidModel, match="at least one"):
        validate_model(make_lp(num_variables=0, variable_names=[], objective=[], constraints=[]))


def test_validate_rejects_name_count_mismatch():
    with pytest.raises(InvalidModel, match="names"):
        validate_model(make_lp(variable_names=["a", "b"]))


def test_validate_rejects_nan():
    model = make_lp(constraints=[Constraint(id="nan", coefficients=[1.0, float("nan"), 1.0], rhs=3.0)])

    with pytest.raises(InvalidModel, match="nan"):
        validate_model(model)


def test_validate_rejects_infinite_objective():
    with pytest.raises(InvalidModel, match="non-finite"):
        validate_model(make_lp(objective=[float("inf"), 3.0, 4.0]))


def test_pivot_normalises_row_and_clears_column():
    tableau, _ = build_initial_tableau(make_lp())
    pivot(tableau, 1, 2)

    assert tableau[1, 2] == pytest.approx(1.0)
    assert tableau[0, 2] == pytest.approx(0.0)
    assert tableau[2, 2] == pytest.approx(0.0)
    assert tableau[2, -1] == pytest.approx(20.0)


def test_column_labels():
    model = make_lp()

    assert column_label(model, 1) == "b"
    assert column_label(model, 3) == "s1"
    assert column_label(make_lp(variable_names=[]), 2) == "x3"


def test_trace_replays_to_final_tableau():
    model = make_lp()
    result = simplex_solve(model)
    tableau, basis = build_initial_tableau(model)

    assert result.steps[-1].is_optimal
    assert result.steps[-1].pivot_row is None and result.steps[-1].pivot_col is None
    for step in result.steps[:-1]:
        assert not step.is_optimal
        assert [list(row) for row in step.tableau] == tableau.tolist()
        assert list(step.basis) == basis
        pivot(tableau, step.pivot_row, step.pivot_col)
        basis[step.pivot_row] = step.pivot_col
        assert len(basis) == len(model.constraints)
        assert_basis_is_identity(tableau, basis)

    assert [list(row) for row in result.steps[-1].tableau] == tableau.tolist()
    assert list(result.steps[-1].basis) == basis
    assert result.optimal_value == pytest.approx(tableau[-1, -1])


def test_steps_are_snapshots():
    result = simplex_solve(make_lp())
    first = result.steps[0]

    assert first.tableau != result.steps[-1].tableau
    assert first.basis == (3, 4)

    with pytest.raises(TypeError):
        first.tableau[0][0] = 99.0  # type: ignore[index]
    with pytest.raises(AttributeError):
        first.basis.append(7)  # type: ignore[attr-defined]
    assert first.basis == (3, 4)
