"""
Unit tests for the Orbital curve math.

Covers deposit sizing, the tick ladder, the torus invariant and swap steps
along a two-asset path.
"""
from decimal import Decimal

import pytest

from orbital_amm.curve import OrbitalMath, WAD


def relative_residual(math, s, q, r, kb, sb, n):
    return abs(math.invariant_residual(s, q, r, kb, sb, n)) / (Decimal(r) * Decimal(r))


@pytest.fixture
def orbital_math():
    return OrbitalMath()


def test_amount_per_token_four_assets(orbital_math):
    """Test a four-asset deposit needs half the radius of each asset."""
    assert orbital_math.amount_per_token(1000 * WAD, 4) == 500 * WAD


def test_radius_for_amount_inverts_amount_per_token(orbital_math):
    """Test the radius recovered from a deposit amount."""
    assert orbital_math.radius_for_amount(500 * WAD, 4) == 1000 * WAD


def test_radius_for_amounts_uses_smallest_amount(orbital_math):
    """Test the smallest offered amount limits the radius."""
    amounts = [500 * WAD, 400 * WAD, 600 * WAD, 500 * WAD]
    assert orbital_math.radius_for_amounts(amounts, 4) == 800 * WAD


def test_radius_for_amounts_length_mismatch(orbital_math):
    with pytest.raises(ValueError):
        orbital_math.radius_for_amounts([WAD, WAD], 3)


def test_deposit_never_exceeds_offered_amount(orbital_math):
    """Test rounding keeps the deposit within the offered amount."""
    for n in (2, 3, 5, 7):
        amount = 123_456_789_123_456_789_123
        radius = orbital_math.radius_for_amount(amount, n)
        assert orbital_math.amount_per_token(radius, n) <= amount
        assert orbital_math.amount_per_token(radius + 1, n) >= amount


def test_sqrt_n_rejects_single_asset(orbital_math):
    with pytest.raises(ValueError):
        orbital_math.sqrt_n(1)


class TestTickLadder:
    """Test tick to reserves conversions."""

    @pytest.fixture
    def orbital_math(self):
        return OrbitalMath()

    def test_k_norm_at_zero(self, orbital_math):
        assert orbital_math.k_norm(0) == 1

    def test_k_norm_bounds_four_assets(self, orbital_math):
        k_min, k_max = orbital_math.k_norm_bounds(4)
        assert k_min == 1
        assert k_max == Decimal("1.5")

    def test_tick_bounds_four_assets(self, orbital_math):
        """Test the valid tick range starts at the equal-price tick."""
        tick_min, tick_max = orbital_math.tick_bounds(4)
        assert tick_min == 0
        assert orbital_math.k_norm(tick_max) <= Decimal("1.5")
        assert orbital_math.k_norm(tick_max + 1) > Decimal("1.5")
        assert 4000 < tick_max < 4100

    def test_tick_bounds_two_assets_are_negative(self, orbital_math):
        """Test small pools need signed ticks."""
        tick_min, tick_max = orbital_math.tick_bounds(2)
        assert tick_min < tick_max < 0
        assert orbital_math.is_tick_in_range(tick_min, 2)
        assert orbital_math.is_tick_in_range(tick_max, 2)
        assert not orbital_math.is_tick_in_range(0, 2)

    def test_sum_reserves_at_equal_price_tick(self, orbital_math):
        assert orbital_math.sum_reserves_at_tick(0, 1000 * WAD, 4) == 2000 * WAD

    def test_sum_reserves_at_tick_includes_boundary_offset(self, orbital_math):
        plain = orbital_math.sum_reserves_at_tick(500, 600 * WAD, 4)
        offset = orbital_math.sum_reserves_at_tick(500, 600 * WAD, 4, boundary_k=100 * WAD)
        assert offset - plain in (200 * WAD, 200 * WAD + 1)

    def test_sum_reserves_grows_with_tick(self, orbital_math):
        values = [orbital_math.sum_reserves_at_tick(t, 1000 * WAD, 4) for t in (0, 100, 1000, 2000)]
        assert values == sorted(values)
        assert len(set(values)) == 4

    def test_tick_at_sum_reserves_round_trip(self, orbital_math):
        s = orbital_math.sum_reserves_at_tick(2000, 1000 * WAD, 4)
        assert orbital_math.tick_at_sum_reserves(s, 1000 * WAD, 0, 4) in (1999, 2000)
        assert orbital_math.tick_at_sum_reserves(s + 10 ** 13, 1000 * WAD, 0, 4) == 2000

    def test_tick_at_equal_price(self, orbital_math):
        assert orbital_math.tick_at_sum_reserves(2000 * WAD, 1000 * WAD, 0, 4) == 0

    def test_tick_at_sum_reserves_requires_radius(self, orbital_math):
        with pytest.raises(ValueError):
            orbital_math.tick_at_sum_reserves(2000 * WAD, 0, 0, 4)

    def test_boundary_contribution_at_equal_price(self, orbital_math):
        """Test a tick at the equal-price point has no orthogonal extent."""
        assert orbital_math.boundary_contribution(0, 1000 * WAD, 4) == (1000 * WAD, 0)

    def test_boundary_contribution_grows_with_tick(self, orbital_math):
        k_near, s_near = orbital_math.boundary_contribution(100, 400 * WAD, 4)
        k_far, s_far = orbital_math.boundary_contribution(2000, 400 * WAD, 4)
        assert k_far > k_near > 400 * WAD
        assert s_far > s_near > 0


class TestSwapSteps:
    """Test swap steps from the equal-price point of a four-asset pool."""

    RADIUS = 1000 * WAD
    BALANCE = 500 * WAD
    S = 2000 * WAD
    Q = 4 * (500 * WAD) ** 2

    @pytest.fixture
    def orbital_math(self):
        return OrbitalMath()

    def test_equal_price_point_is_on_sphere(self, orbital_math):
        assert orbital_math.invariant_residual(self.S, self.Q, self.RADIUS, 0, 0, 4) == 0

    def test_amount_to_reach_target(self, orbital_math):
        """Test the closed-form step lands on the torus at the target."""
        target = orbital_math.sum_reserves_at_tick(100, self.RADIUS, 4)
        amount_in, amount_out = orbital_math.amount_to_reach_sum_reserves(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE
        )

        assert amount_in > amount_out > 0
        s_next = self.S + amount_in - amount_out
        assert 0 <= s_next - target <= 2

        x_in = self.BALANCE + amount_in
        x_out = self.BALANCE - amount_out
        q_next = self.Q - 2 * self.BALANCE ** 2 + x_in ** 2 + x_out ** 2
        assert relative_residual(orbital_math, s_next, q_next, self.RADIUS, 0, 0, 4) < Decimal("1e-12")

    def test_amount_to_reach_current_is_zero(self, orbital_math):
        assert orbital_math.amount_to_reach_sum_reserves(
            4, self.S, self.S, self.RADIUS, self.Q, self.BALANCE, self.BALANCE
        ) == (0, 0)

    def test_unreachable_target(self, orbital_math):
        """Test a target past the pair path's reach returns None."""
        target = orbital_math.sum_reserves_at_tick(2000, self.RADIUS, 4)
        assert orbital_math.amount_to_reach_sum_reserves(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE
        ) is None

    def test_partial_step(self, orbital_math):
        """Test a small input stays short of the target and stays on the sphere."""
        target = orbital_math.sum_reserves_at_tick(2000, self.RADIUS, 4)
        amount = 9_995 * 10 ** 15
        step = orbital_math.compute_swap_step(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE, amount
        )

        assert step.converged
        assert not step.reached_target
        assert step.amount_in == amount
        assert 0 < step.amount_out < amount
        assert step.sum_reserves_next == self.S + amount - step.amount_out

        x_in = self.BALANCE + amount
        x_out = self.BALANCE - step.amount_out
        q_next = self.Q - 2 * self.BALANCE ** 2 + x_in ** 2 + x_out ** 2
        assert relative_residual(
            orbital_math, step.sum_reserves_next, q_next, self.RADIUS, 0, 0, 4
        ) < Decimal("1e-12")

    def test_step_reaches_target(self, orbital_math):
        """Test a large input is clamped to the target."""
        target = orbital_math.sum_reserves_at_tick(100, self.RADIUS, 4)
        step = orbital_math.compute_swap_step(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE, 400 * WAD
        )

        assert step.reached_target
        assert step.converged
        assert step.amount_in < 400 * WAD
        assert 0 <= step.sum_reserves_next - target <= 2

    def test_partial_step_output_below_target_output(self, orbital_math):
        target = orbital_math.sum_reserves_at_tick(100, self.RADIUS, 4)
        full = orbital_math.compute_swap_step(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE, 400 * WAD
        )
        partial = orbital_math.compute_swap_step(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE, full.amount_in // 2
        )

        assert not partial.reached_target
        assert partial.converged
        assert 0 < partial.amount_out < full.amount_out

    def test_zero_amount_step(self, orbital_math):
        target = orbital_math.sum_reserves_at_tick(100, self.RADIUS, 4)
        step = orbital_math.compute_swap_step(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE, 0
        )
        assert step.amount_in == 0
        assert step.amount_out == 0
        assert not step.reached_target

    def test_balanced_point_returns_to_equal_price(self, orbital_math):
        """Test the pair path bottoms out at the equal-price point on a bare sphere."""
        target = orbital_math.sum_reserves_at_tick(100, self.RADIUS, 4)
        amount_in, amount_out = orbital_math.amount_to_reach_sum_reserves(
            4, self.S, target, self.RADIUS, self.Q, self.BALANCE, self.BALANCE
        )
        x_high = self.BALANCE + amount_in
        x_low = self.BALANCE - amount_out
        s = self.S + amount_in - amount_out
        q = 2 * self.BALANCE ** 2 + x_high ** 2 + x_low ** 2

        balanced = orbital_math.balanced_sum_reserves(4, s, q, self.RADIUS, x_low, x_high)

        assert balanced is not None
        assert abs(balanced - self.S) <= 10


def test_solver_reports_non_convergence():
    """Test an exhausted iteration budget is reported, not hidden."""
    orbital_math = OrbitalMath(max_iterations=1, tolerance=0)
    y, converged, iterations = orbital_math.solve_amount_out(
        4, 2000 * WAD, 4 * (500 * WAD) ** 2, 1000 * WAD, 500 * WAD, 500 * WAD, 10 * WAD
    )
    assert not converged
    assert iterations == 1
    assert 0 < y < 500 * WAD
