"""
Orbital AMM curve math.

Reserves x in R^n sit on a sphere of radius r centred at (r, ..., r):

    sum_i (r - x_i)^2 = r^2

Liquidity is nested into ticks, each a cap of the sphere cut by a plane
orthogonal to the equal-price direction v = (1, ..., 1)/sqrt(n). Ticks the
pool has moved past are pinned to their plane ("boundary" ticks). Interior
and boundary ticks together form a torus that depends on the reserves only
through two aggregates:

    S = sum_i x_i        Q = sum_i x_i^2

so a swap between two assets never needs the full reserve vector.
"""
from decimal import Decimal
from typing import NamedTuple, Optional, Tuple
import logging

from .fixed_point import to_int_floor, to_int_ceil

logger = logging.getLogger(__name__)


class SwapStep(NamedTuple):
    """Outcome of one swap step toward a target sum of reserves."""
    sum_reserves_next: int
    amount_in: int  # Net of fee, rounded up
    amount_out: int  # Rounded down
    reached_target: bool
    converged: bool
    iterations: int


class OrbitalMath:
    """
    Pure functions over the Orbital sphere and consolidated torus.

    Handles:
    - Deposit sizing (amount per token for a radius and its inverse)
    - Tick ladder conversions (k_norm, sum of reserves at a tick, tick at S)
    - Boundary contributions of a tick entering boundary state
    - Swap steps along a two-asset path, closed form to a target and
      Newton-Raphson for partial steps
    """

    def __init__(self,
                 tick_base: Decimal = Decimal("1.0001"),
                 max_iterations: int = 255,
                 tolerance: int = 1):
        """
        Initialize Orbital math.

        Args:
            tick_base: Base of the tick ladder, k_norm = tick_base ** tick
            max_iterations: Fixed Newton-Raphson iteration budget
            tolerance: Convergence threshold in token base units
        """
        self.tick_base = Decimal(tick_base)
        self._ln_base = self.tick_base.ln()
        self.max_iterations = max_iterations
        self.tolerance = Decimal(tolerance)

    @classmethod
    def from_settings(cls, settings) -> "OrbitalMath":
        return cls(
            tick_base=settings.tick_base,
            max_iterations=settings.solver_max_iterations,
            tolerance=settings.solver_tolerance
        )

    @staticmethod
    def sqrt_n(n: int) -> Decimal:
        if n < 2:
            raise ValueError(f"Orbital pools need at least 2 assets, got {n}")
        return Decimal(n).sqrt()

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    def amount_per_token(self, radius: int, n: int) -> int:
        """
        Amount of each asset a radius deposit requires at the equal-price point.

        amount = r * (1 - 1/sqrt(n)), rounded up since it is owed to the pool.

        Args:
            radius: Radius being added
            n: Number of assets in the pool

        Returns:
            Amount of every asset owed for the deposit
        """
        if radius < 0:
            raise ValueError(f"Radius must be non-negative, got {radius}")
        factor = 1 - 1 / self.sqrt_n(n)
        return to_int_ceil(Decimal(radius) * factor)

    def radius_for_amount(self, amount: int, n: int) -> int:
        """Largest radius whose per-token deposit fits in amount."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")
        factor = 1 - 1 / self.sqrt_n(n)
        return to_int_floor(Decimal(amount) / factor)

    def radius_for_amounts(self, amounts, n: int) -> int:
        """The smallest offered amount limits the radius."""
        if len(amounts) != n:
            raise ValueError(f"Expected {n} amounts, got {len(amounts)}")
        return min(self.radius_for_amount(amount, n) for amount in amounts)

    # ------------------------------------------------------------------
    # Tick ladder
    # ------------------------------------------------------------------

    def projection(self, sum_reserves: int, n: int) -> Decimal:
        """Projection of the reserve vector onto the equal-price direction."""
        return Decimal(sum_reserves) / self.sqrt_n(n)

    def k_norm(self, tick: int) -> Decimal:
        return self.tick_base ** tick

    def k_norm_bounds(self, n: int) -> Tuple[Decimal, Decimal]:
        """
        Valid range of the normalized plane constant.

        The lower bound sqrt(n) - 1 is the equal-price point itself, the upper
        bound (n - 1)/sqrt(n) is where a tick's cap degenerates to the whole
        sphere face.
        """
        sqrt_n = self.sqrt_n(n)
        return sqrt_n - 1, Decimal(n - 1) / sqrt_n

    def is_tick_in_range(self, tick: int, n: int) -> bool:
        k_min, k_max = self.k_norm_bounds(n)
        return k_min <= self.k_norm(tick) <= k_max

    def tick_bounds(self, n: int) -> Tuple[int, int]:
        """Smallest and largest tick whose k_norm lies within the bounds."""
        k_min, k_max = self.k_norm_bounds(n)
        tick_min = to_int_ceil(k_min.ln() / self._ln_base)
        tick_max = to_int_floor(k_max.ln() / self._ln_base)

        # Correct for rounding in the logarithms
        while self.k_norm(tick_min) < k_min:
            tick_min += 1
        while self.k_norm(tick_min - 1) >= k_min:
            tick_min -= 1
        while self.k_norm(tick_max) > k_max:
            tick_max -= 1
        while self.k_norm(tick_max + 1) <= k_max:
            tick_max += 1

        return tick_min, tick_max

    def sum_reserves_at_tick(self, tick: int, radius: int, n: int,
                             boundary_k: int = 0) -> int:
        """
        Sum of reserves at which the pool sits exactly on a tick's boundary.

        S = sqrt(n) * (boundary_k + k_norm * radius)

        Args:
            tick: Tick index
            radius: Interior radius
            n: Number of assets
            boundary_k: Sum of plane constants of ticks already in boundary state

        Returns:
            Sum of reserves at the boundary, rounded down
        """
        k_norm = self.k_norm(tick)
        return to_int_floor(self.sqrt_n(n) * (Decimal(boundary_k) + k_norm * Decimal(radius)))

    def sum_reserves_at_k_norm(self, k_norm: Decimal, radius: int, n: int,
                               boundary_k: int = 0) -> int:
        return to_int_floor(self.sqrt_n(n) * (Decimal(boundary_k) + k_norm * Decimal(radius)))

    def tick_at_sum_reserves(self, sum_reserves: int, radius: int,
                             boundary_k: int, n: int) -> int:
        """
        Tick whose boundary sits at or just below the interior projection.

        tick = floor(log_base((S/sqrt(n) - boundary_k) / r))
        """
        if radius <= 0:
            raise ValueError("Interior radius must be positive to locate a tick")
        alpha_norm = (self.projection(sum_reserves, n) - Decimal(boundary_k)) / Decimal(radius)
        if alpha_norm <= 0:
            raise ValueError(f"Sum of reserves {sum_reserves} is below the boundary offset")
        return to_int_floor(alpha_norm.ln() / self._ln_base)

    def boundary_contribution(self, tick: int, radius: int, n: int) -> Tuple[int, int]:
        """
        Contribution of a tick's radius to the boundary aggregates.

        A tick of radius r_i pinned at plane constant k_i = k_norm * r_i keeps a
        circle of radius s_i = r_i * sqrt(1 - (sqrt(n) - k_norm)^2) in the
        subspace orthogonal to the equal-price direction.

        Returns:
            Tuple of (k_i, s_i), both rounded down
        """
        k_norm = self.k_norm(tick)
        gap = self.sqrt_n(n) - k_norm
        inner = 1 - gap * gap
        if inner < 0:
            inner = Decimal(0)
        radius_dec = Decimal(radius)
        return to_int_floor(k_norm * radius_dec), to_int_floor(radius_dec * inner.sqrt())

    # ------------------------------------------------------------------
    # Invariant
    # ------------------------------------------------------------------

    def invariant_residual(self, sum_reserves: int, sum_squares: int, radius: int,
                           boundary_k: int, boundary_s: int, n: int) -> Decimal:
        """
        Residual of the consolidated torus invariant.

        r^2 = (S/sqrt(n) - k_b - r*sqrt(n))^2 + (sqrt(Q - S^2/n) - s_b)^2

        Zero means the point lies on the torus.
        """
        sqrt_n = self.sqrt_n(n)
        s = Decimal(sum_reserves)
        r = Decimal(radius)
        u = s / sqrt_n - Decimal(boundary_k) - r * sqrt_n
        w_squared = Decimal(sum_squares) - s * s / n
        w = w_squared.sqrt() if w_squared > 0 else Decimal(0)
        v = w - Decimal(boundary_s)
        return u * u + v * v - r * r

    def _gradient_terms(self, n: int, sum_reserves: Decimal, sum_squares: Decimal,
                        radius: Decimal, boundary_k: Decimal,
                        boundary_s: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
        sqrt_n = self.sqrt_n(n)
        u = sum_reserves / sqrt_n - boundary_k - radius * sqrt_n
        w_squared = sum_squares - sum_reserves * sum_reserves / n
        w = w_squared.sqrt() if w_squared > 0 else Decimal(0)
        return u / sqrt_n, w - boundary_s, w

    def marginal_price(self,
                       n: int,
                       sum_reserves: int,
                       sum_squares: int,
                       radius: int,
                       balance_in: int,
                       balance_out: int,
                       boundary_k: int = 0,
                       boundary_s: int = 0) -> Decimal:
        """
        Marginal output per unit of input at the current point.

        Ratio of the invariant's partial derivatives in the two assets:

            dF/dx_i = 2 * (u/sqrt(n) + v * (x_i - S/n) / w)

        A non-positive result means the point lies past the region where
        adding input buys output.
        """
        s = Decimal(sum_reserves)
        base, v, w = self._gradient_terms(
            n, s, Decimal(sum_squares), Decimal(radius),
            Decimal(boundary_k), Decimal(boundary_s)
        )
        mean = s / n
        if w > 0:
            grad_in = base + v * (Decimal(balance_in) - mean) / w
            grad_out = base + v * (Decimal(balance_out) - mean) / w
        else:
            grad_in = grad_out = base
        if grad_out >= 0:
            return Decimal(0)
        return grad_in / grad_out

    # ------------------------------------------------------------------
    # Swap steps
    # ------------------------------------------------------------------

    def amount_to_reach_sum_reserves(self,
                                     n: int,
                                     sum_reserves_current: int,
                                     sum_reserves_target: int,
                                     radius: int,
                                     sum_squares_current: int,
                                     balance_in: int,
                                     balance_out: int,
                                     boundary_k: int = 0,
                                     boundary_s: int = 0) -> Optional[Tuple[int, int]]:
        """
        Amounts that move a two-asset swap exactly onto a target sum of reserves.

        The target fixes Q on the torus:

            Q_t = S_t^2/n + (s_b + sqrt(r^2 - u_t^2))^2

        and with x_in + d, x_out - d + (S_t - S) the pair amounts follow from a
        quadratic in d. The smallest non-negative root is the first crossing
        of the target along the path.

        Args:
            n: Number of assets
            sum_reserves_current: Current S
            sum_reserves_target: Target S
            radius: Interior radius
            sum_squares_current: Current Q
            balance_in: Reserve of the input asset
            balance_out: Reserve of the output asset
            boundary_k: Boundary plane constant sum
            boundary_s: Boundary orthogonal radius sum

        Returns:
            Tuple of (amount_in rounded up, amount_out rounded down), or None
            when the path never reaches the target
        """
        if sum_reserves_target == sum_reserves_current:
            return 0, 0

        sqrt_n = self.sqrt_n(n)
        r = Decimal(radius)
        s_target = Decimal(sum_reserves_target)

        u_target = s_target / sqrt_n - Decimal(boundary_k) - r * sqrt_n
        remainder = r * r - u_target * u_target
        if remainder < 0:
            return None

        w_target = Decimal(boundary_s) + remainder.sqrt()
        q_target = s_target * s_target / n + w_target * w_target

        delta_s = s_target - Decimal(sum_reserves_current)
        x_in = Decimal(balance_in)
        x_out = Decimal(balance_out)
        a = x_in
        b = x_out + delta_s
        c = q_target - Decimal(sum_squares_current) + x_in * x_in + x_out * x_out

        discriminant = 2 * c - (a + b) ** 2
        if discriminant < 0:
            if delta_s > 0:
                return None
            # A target at the bottom of the path is tangent to it
            discriminant = Decimal(0)

        root = discriminant.sqrt()
        for d in (((b - a) - root) / 2, ((b - a) + root) / 2):
            if d < 0:
                if d < -self.tolerance:
                    continue
                d = Decimal(0)
            y = d - delta_s
            if y < 0 or y >= x_out:
                continue

            price = self.marginal_price(
                n, sum_reserves_target, to_int_floor(q_target), radius,
                to_int_floor(x_in + d), to_int_floor(x_out - y), boundary_k, boundary_s
            )
            if price <= 0:
                continue
            return to_int_ceil(d), to_int_floor(y)

        return None

    def balanced_sum_reserves(self,
                              n: int,
                              sum_reserves_current: int,
                              sum_squares_current: int,
                              radius: int,
                              balance_in: int,
                              balance_out: int,
                              boundary_k: int = 0,
                              boundary_s: int = 0) -> Optional[int]:
        """
        Sum of reserves where the pair's two balances meet along the path.

        Moving toward the equal-price point lowers S only until x_in == x_out;
        past that point the same swap moves away again. Solved with
        Newton-Raphson on the common balance m.

        Returns:
            S at the balanced point rounded up, or None if the path never
            balances before leaving the torus
        """
        sqrt_n = self.sqrt_n(n)
        r = Decimal(radius)
        k_b = Decimal(boundary_k)
        s_b = Decimal(boundary_s)
        x_in = Decimal(balance_in)
        x_out = Decimal(balance_out)
        low, high = min(x_in, x_out), max(x_in, x_out)

        s_rest = Decimal(sum_reserves_current) - x_in - x_out
        q_rest = Decimal(sum_squares_current) - x_in * x_in - x_out * x_out

        m = (x_in + x_out) / 2
        for _ in range(self.max_iterations):
            s = s_rest + 2 * m
            q = q_rest + 2 * m * m

            u = s / sqrt_n - k_b - r * sqrt_n
            w_squared = q - s * s / n
            w = w_squared.sqrt() if w_squared > 0 else Decimal(0)
            v = w - s_b
            f = u * u + v * v - r * r

            du = 2 / sqrt_n
            dw_squared = 4 * m - 4 * s / n
            dv = dw_squared / (2 * w) if w > 0 else Decimal(0)
            f_prime = 2 * u * du + 2 * v * dv
            if f_prime == 0:
                break

            m_new = m - f / f_prime
            if m_new < low:
                m_new = (m + low) / 2
            elif m_new > high:
                m_new = (m + high) / 2

            if abs(m_new - m) <= self.tolerance:
                return to_int_ceil(s_rest + 2 * m_new)
            m = m_new

        logger.debug(f"Balanced point not found for pair ({balance_in}, {balance_out})")
        return None

    def solve_amount_out(self,
                         n: int,
                         sum_reserves_current: int,
                         sum_squares_current: int,
                         radius: int,
                         balance_in: int,
                         balance_out: int,
                         amount_in: int,
                         boundary_k: int = 0,
                         boundary_s: int = 0,
                         initial_guess: Optional[Decimal] = None,
                         max_amount_out: Optional[int] = None) -> Tuple[Decimal, bool, int]:
        """
        Solve the torus invariant for the output of a fixed input.

        After depositing d of the input and withdrawing y of the output:

            S' = S + d - y
            Q' = Q - x_in^2 - x_out^2 + (x_in + d)^2 + (x_out - y)^2

        Newton-Raphson iterates on y until successive estimates agree within
        the tolerance, damping any step that leaves (0, max_amount_out).

        Args:
            n: Number of assets
            sum_reserves_current: Current S
            sum_squares_current: Current Q
            radius: Interior radius
            balance_in: Reserve of the input asset
            balance_out: Reserve of the output asset
            amount_in: Net input d
            boundary_k: Boundary plane constant sum
            boundary_s: Boundary orthogonal radius sum
            initial_guess: Starting estimate for y, defaults to d
            max_amount_out: Upper bound for y, defaults to balance_out

        Returns:
            Tuple of (best estimate of y, converged flag, iterations used)
        """
        sqrt_n = self.sqrt_n(n)
        r = Decimal(radius)
        k_b = Decimal(boundary_k)
        s_b = Decimal(boundary_s)
        d = Decimal(amount_in)
        x_in = Decimal(balance_in)
        x_out = Decimal(balance_out)
        y_max = Decimal(balance_out if max_amount_out is None else max_amount_out)

        s_after_deposit = Decimal(sum_reserves_current) + d
        q_base = Decimal(sum_squares_current) - x_in * x_in - x_out * x_out + (x_in + d) ** 2

        y = d if initial_guess is None else Decimal(initial_guess)
        if y <= 0 or y >= y_max:
            y = y_max / 2

        for iteration in range(1, self.max_iterations + 1):
            b = x_out - y
            s = s_after_deposit - y
            q = q_base + b * b

            u = s / sqrt_n - k_b - r * sqrt_n
            w_squared = q - s * s / n
            w = w_squared.sqrt() if w_squared > 0 else Decimal(0)
            v = w - s_b
            f = u * u + v * v - r * r

            du = -1 / sqrt_n
            dw_squared = -2 * b + 2 * s / n
            dv = dw_squared / (2 * w) if w > 0 else Decimal(0)
            f_prime = 2 * u * du + 2 * v * dv
            if f_prime == 0:
                break

            y_new = y - f / f_prime
            if y_new < 0:
                y_new = y / 2
            elif y_new > y_max:
                y_new = (y + y_max) / 2

            if abs(y_new - y) <= self.tolerance:
                return y_new, True, iteration
            y = y_new

        logger.warning(
            f"Orbital solver failed to converge after {self.max_iterations} iterations "
            f"(amount_in={amount_in}, balance_out={balance_out})"
        )
        return y, False, self.max_iterations

    def compute_swap_step(self,
                          n: int,
                          sum_reserves_current: int,
                          sum_reserves_target: int,
                          radius: int,
                          sum_squares_current: int,
                          balance_in: int,
                          balance_out: int,
                          amount_remaining: int,
                          boundary_k: int = 0,
                          boundary_s: int = 0) -> SwapStep:
        """
        Compute a single swap step between the current point and a target.

        The direction follows from the target: a target below the current S
        moves toward the equal-price point. When the remaining input covers
        the amount needed to reach the target the step lands on it exactly,
        otherwise the whole input is spent and the output solved for.

        Args:
            n: Number of assets
            sum_reserves_current: Current S
            sum_reserves_target: Target S (tick boundary or caller limit)
            radius: Interior radius
            sum_squares_current: Current Q
            balance_in: Reserve of the input asset
            balance_out: Reserve of the output asset
            amount_remaining: Input available for this step, net of fee
            boundary_k: Boundary plane constant sum
            boundary_s: Boundary orthogonal radius sum

        Returns:
            SwapStep with the amounts and the resulting sum of reserves
        """
        if sum_reserves_target == sum_reserves_current:
            return SwapStep(sum_reserves_current, 0, 0, True, True, 0)
        if amount_remaining <= 0:
            return SwapStep(sum_reserves_current, 0, 0, False, True, 0)

        reach = self.amount_to_reach_sum_reserves(
            n, sum_reserves_current, sum_reserves_target, radius,
            sum_squares_current, balance_in, balance_out, boundary_k, boundary_s
        )

        if reach is not None and reach[0] <= amount_remaining:
            amount_in, amount_out = reach
            return SwapStep(
                sum_reserves_current + amount_in - amount_out,
                amount_in,
                amount_out,
                True,
                True,
                0
            )

        initial_guess = None
        max_amount_out = balance_out
        if reach is not None and reach[0] > 0:
            # The partial output lies below the output at the target
            initial_guess = Decimal(reach[1]) * amount_remaining / reach[0]
            max_amount_out = reach[1]

        y, converged, iterations = self.solve_amount_out(
            n, sum_reserves_current, sum_squares_current, radius,
            balance_in, balance_out, amount_remaining, boundary_k, boundary_s,
            initial_guess, max_amount_out
        )
        amount_out = max(to_int_floor(y), 0)

        return SwapStep(
            sum_reserves_current + amount_remaining - amount_out,
            amount_remaining,
            amount_out,
            False,
            converged,
            iterations
        )
