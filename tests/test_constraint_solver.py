import logging
import pytest

from app.implementations.positioning.constraint_solver import ConstraintSolver
from app.schemas.positioning_schemas import PixelRect

@pytest.fixture
def solver():
    return ConstraintSolver()

@pytest.fixture
def zone():
    return PixelRect(x=100, y=100, width=400, height=300)

def test_constraints_are_symmetric_around_center(solver, zone):
    constraints = solver.compute_constraints(zone, 0.8)

    assert constraints.max_x == pytest.approx(40)
    assert constraints.min_x == pytest.approx(-40)
    assert constraints.max_y == pytest.approx(30)
    assert constraints.min_y == pytest.approx(-30)
    assert not constraints.inverted

def test_full_scale_leaves_only_the_center(solver, zone):
    constraints = solver.compute_constraints(zone, 1.0)

    assert constraints.min_x == constraints.max_x == 0
    assert constraints.min_y == constraints.max_y == 0
    assert not constraints.inverted
    assert solver.apply_constraints(25, -25, constraints) == (0, 0)

def test_oversized_design_inverts_constraints(solver, zone, caplog):
    with caplog.at_level(logging.WARNING):
        constraints = solver.compute_constraints(zone, 1.5)

    assert constraints.inverted
    assert solver.is_overflowing(constraints)
    assert "INVERTED_CONSTRAINTS" in caplog.text
    assert solver.apply_constraints(80, -12, constraints) == (0.0, 0.0)

def test_apply_constraints_clamps(solver, zone):
    constraints = solver.compute_constraints(zone, 0.8)

    assert solver.apply_constraints(100, -100, constraints) == pytest.approx((40, -30))
    assert solver.apply_constraints(10, 5, constraints) == (10, 5)
