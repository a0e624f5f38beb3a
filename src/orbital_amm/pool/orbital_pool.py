"""
Orbital pool.

Holds the curve state of one multi-asset pool and exposes its entry points:
initialize, mint, swap, flash and fee collection. Tokens are held in a
TokenLedger; payments are pulled through callbacks on the caller and
verified by balance deltas afterwards.
"""
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, List, Optional, Sequence
import copy
import logging

from ..config import OrbitalSettings, settings as default_settings
from ..config.settings import FEE_DENOMINATOR
from ..curve import OrbitalMath, Q128, mul_div, mul_div_rounding_up
from ..ticks import PositionInfo, TickInfo
from .callbacks import OrbitalFlashCallback, OrbitalMintCallback, OrbitalSwapCallback
from .errors import (
    AlreadyInitializedError,
    InsufficientLiquidityError,
    InvalidInputError,
    InvalidSumReservesLimitError,
    InvalidTickError,
    PoolNotInitializedError,
    ReentrancyError,
    SolverConvergenceError,
    SwapStepLimitError,
    UnfundedCallbackError,
)
from .state import MintResult, PoolState, SwapResult

logger = logging.getLogger(__name__)


class OrbitalPool:
    """
    Multi-asset concentrated-liquidity pool on a sphere.

    Every entry point is atomic: pool state and ledger balances are
    snapshotted on entry and restored if any error escapes.
    """

    def __init__(self,
                 ledger,
                 tokens: Sequence[str],
                 settings: Optional[OrbitalSettings] = None,
                 address: Optional[str] = None):
        """
        Initialize the pool.

        Args:
            ledger: TokenLedger holding the pool's balances
            tokens: Token symbols, their order fixes the token indices
            settings: Pool settings, defaults to the global settings
            address: Ledger account of the pool
        """
        tokens = list(tokens)
        if len(tokens) < 2:
            raise InvalidInputError(f"A pool needs at least 2 tokens, got {len(tokens)}")
        if len(set(tokens)) != len(tokens):
            raise InvalidInputError(f"Duplicate tokens in {tokens}")
        for token in tokens:
            if token not in ledger.decimals:
                raise InvalidInputError(f"Unknown token {token}")

        self.ledger = ledger
        self.tokens = tokens
        self.settings = settings or default_settings
        self.address = address or f"orbital:{'-'.join(tokens)}"

        self.math = OrbitalMath.from_settings(self.settings)
        self.fee_pips = self.settings.fee_pips
        self.fee_protocol = self.settings.fee_protocol
        self.tick_spacing = self.settings.tick_spacing
        self.max_swap_steps = self.settings.max_swap_steps

        n = len(tokens)
        self.k_norm_min, self.k_norm_max = self.math.k_norm_bounds(n)
        self.tick_min, self.tick_max = self.math.tick_bounds(n)

        self._state = PoolState(token_count=n, tick_spacing=self.tick_spacing)
        self._locked = False
        self._flash_locked = False
        self._flash_expected: Optional[List[int]] = None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    def token(self, index: int) -> str:
        self._check_token_index(index)
        return self.tokens[index]

    def token_index(self, token: str) -> int:
        try:
            return self.tokens.index(token)
        except ValueError:
            raise InvalidInputError(f"Token {token} is not in pool", pool=self.address)

    @property
    def is_initialized(self) -> bool:
        return self._state.initialized

    @property
    def sum_reserves(self) -> int:
        return self._state.sum_reserves

    @property
    def sum_squares(self) -> int:
        return self._state.sum_squares

    @property
    def radius(self) -> int:
        return self._state.radius

    @property
    def boundary_k(self) -> int:
        return self._state.boundary_k

    @property
    def boundary_s(self) -> int:
        return self._state.boundary_s

    @property
    def tick(self) -> int:
        return self._state.tick

    @property
    def fee_growth_global(self) -> List[int]:
        return list(self._state.fee_growth_global)

    @property
    def protocol_fees(self) -> List[int]:
        return list(self._state.protocol_fees)

    @property
    def fee_reserves(self) -> List[int]:
        return list(self._state.fee_reserves)

    def spot_price(self, token_in: int, token_out: int) -> Decimal:
        """Marginal amount of token_out paid per unit of token_in."""
        self._check_token_index(token_in)
        self._check_token_index(token_out)
        state = self._state
        reserves = self.reserves()
        return self.math.marginal_price(
            self.token_count, sum(reserves), sum(x * x for x in reserves), state.radius,
            reserves[token_in], reserves[token_out], state.boundary_k, state.boundary_s
        )

    def snapshot(self) -> PoolState:
        """Deep copy of the current state."""
        return copy.deepcopy(self._state)

    def balances(self) -> List[int]:
        return [self.ledger.balance_of(token, self.address) for token in self.tokens]

    def reserves(self) -> List[int]:
        """
        Curve reserves: ledger balances minus fees held for collection.

        During a flash loan the balances owed back are used instead of the
        ledger balances, so lent tokens still count toward the curve.
        """
        balances = self._flash_expected if self._flash_expected is not None else self.balances()
        return [
            balance - held
            for balance, held in zip(balances, self._state.fee_reserves)
        ]

    def tick_info(self, tick: int) -> TickInfo:
        return copy.deepcopy(self._state.ticks.get(tick))

    def position(self, owner: str, tick: int) -> PositionInfo:
        return copy.deepcopy(self._state.positions.peek(owner, tick))

    def fee_growth_inside(self, tick: int) -> List[int]:
        state = self._state
        return state.ticks.get_fee_growth_inside(tick, state.tick, state.fee_growth_global)

    def fork(self) -> "OrbitalPool":
        """Independent copy of the pool and its ledger, for simulation."""
        forked = copy.deepcopy(self)
        forked._locked = False
        forked._flash_locked = False
        forked._flash_expected = None
        return forked

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @contextmanager
    def _lock(self):
        if self._locked:
            raise ReentrancyError("Pool is locked", pool=self.address)
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    @contextmanager
    def _atomic(self):
        state_snapshot = copy.deepcopy(self._state)
        ledger_snapshot = self.ledger.snapshot()
        flash_expected = None if self._flash_expected is None else list(self._flash_expected)
        try:
            yield
        except Exception:
            self._state = state_snapshot
            self.ledger.restore(ledger_snapshot)
            self._flash_expected = flash_expected
            raise

    def _require_initialized(self) -> None:
        if not self._state.initialized:
            raise PoolNotInitializedError("Pool is not initialized", pool=self.address)

    def _check_token_index(self, index: int) -> None:
        if not 0 <= index < len(self.tokens):
            raise InvalidInputError(f"Token index {index} out of range", pool=self.address)

    def _check_tick(self, tick: int) -> None:
        if tick % self.tick_spacing != 0:
            raise InvalidTickError(
                f"Tick {tick} is not a multiple of spacing {self.tick_spacing}",
                pool=self.address
            )
        if not self.tick_min <= tick <= self.tick_max:
            raise InvalidTickError(
                f"Tick {tick} outside valid range [{self.tick_min}, {self.tick_max}]",
                pool=self.address
            )

    def _verify_payment(self, balances_before: List[int], owed: List[int]) -> None:
        balances_after = self.balances()
        for token, before, amount, after in zip(self.tokens, balances_before, owed, balances_after):
            required = before + amount
            if after < required:
                raise UnfundedCallbackError(
                    f"Callback left {token} short by {required - after}",
                    pool=self.address,
                    token=token,
                    shortfall=required - after
                )

    def _record_flash_deltas(self, deltas: List[int]) -> None:
        if self._flash_expected is not None:
            self._flash_expected = [
                expected + delta for expected, delta in zip(self._flash_expected, deltas)
            ]

    def _resync(self) -> None:
        reserves = self.reserves()
        self._state.sum_reserves = sum(reserves)
        self._state.sum_squares = sum(x * x for x in reserves)

    # ------------------------------------------------------------------
    # Initialize
    # ------------------------------------------------------------------

    def initialize(self, sum_reserves: int, tick: int) -> None:
        """
        Seed the pool at the equal-price point.

        Reserves are assumed equal, so Q = S^2/n. The aggregates are
        re-derived from ledger balances by the first mint.

        Args:
            sum_reserves: Initial sum of reserves
            tick: Initial tick pointer
        """
        state = self._state
        if state.initialized:
            raise AlreadyInitializedError("Pool already initialized", pool=self.address)
        if sum_reserves <= 0:
            raise InvalidInputError(f"Sum of reserves must be positive, got {sum_reserves}",
                                    pool=self.address)
        if not self.tick_min <= tick <= self.tick_max:
            raise InvalidTickError(
                f"Tick {tick} outside valid range [{self.tick_min}, {self.tick_max}]",
                pool=self.address
            )

        state.sum_reserves = sum_reserves
        state.sum_squares = sum_reserves * sum_reserves // self.token_count
        state.tick = tick
        state.initialized = True

        logger.info(f"Initialized {self.address} at tick {tick} with S={sum_reserves}")

    # ------------------------------------------------------------------
    # Mint
    # ------------------------------------------------------------------

    def _update_position(self, owner: str, tick: int, radius_delta: int) -> PositionInfo:
        state = self._state
        flipped = state.ticks.update(tick, state.tick, radius_delta, state.fee_growth_global)
        if flipped:
            state.bitmap.flip_tick(tick)

        fee_growth_inside = state.ticks.get_fee_growth_inside(
            tick, state.tick, state.fee_growth_global
        )
        position = state.positions.get(owner, tick)
        state.positions.update(position, radius_delta, fee_growth_inside)
        return position

    def mint(self,
             sender: OrbitalMintCallback,
             owner: str,
             tick: int,
             radius: int,
             data: Any = None) -> MintResult:
        """
        Add radius at a tick.

        The deposit is amount_per_token(radius) of every asset, pulled through
        sender.orbital_mint_callback. Radius at an interior tick deepens the
        curve immediately; radius at a boundary tick joins the boundary
        aggregates and becomes interior once the pool crosses back over it.

        Args:
            sender: Caller that pays the deposit
            owner: Account owning the position
            tick: Tick to add radius at
            radius: Radius to add
            data: Passed through to the callback

        Returns:
            MintResult with the radius and the per-token amounts deposited
        """
        self._require_initialized()
        if radius <= 0:
            raise InvalidInputError(f"Radius must be positive, got {radius}", pool=self.address)
        self._check_tick(tick)

        n = self.token_count
        with self._lock(), self._atomic():
            state = self._state
            amount = self.math.amount_per_token(radius, n)
            amounts = [amount] * n

            tick_radius_before = state.ticks.get(tick).radius_net
            self._update_position(owner, tick, radius)

            if state.tick < tick:
                state.radius += radius
            else:
                k_before, s_before = self.math.boundary_contribution(tick, tick_radius_before, n)
                k_after, s_after = self.math.boundary_contribution(tick, tick_radius_before + radius, n)
                state.boundary_k += k_after - k_before
                state.boundary_s += s_after - s_before

            balances_before = self.balances()
            sender.orbital_mint_callback(self, list(amounts), data)
            self._verify_payment(balances_before, amounts)

            self._record_flash_deltas(amounts)
            self._resync()

        logger.info(
            f"Minted radius {radius} at tick {tick} for {owner} in {self.address} "
            f"({amount} per token, interior radius {state.radius})"
        )
        return MintResult(radius, amounts)

    # ------------------------------------------------------------------
    # Swap
    # ------------------------------------------------------------------

    @staticmethod
    def _limit_reached(sum_reserves: int, sum_reserves_limit: int, limit_toward: bool) -> bool:
        if not sum_reserves_limit:
            return False
        if limit_toward:
            return sum_reserves <= sum_reserves_limit
        return sum_reserves >= sum_reserves_limit

    def _tick_between(self, sum_reserves: int, radius: int, boundary_k: int,
                      low: int, high: int) -> int:
        tick = self.math.tick_at_sum_reserves(sum_reserves, radius, boundary_k, self.token_count)
        return max(low, min(high, tick))

    def swap(self,
             sender: OrbitalSwapCallback,
             recipient: str,
             token_in: int,
             token_out: int,
             amount_specified: int,
             sum_reserves_limit: int = 0,
             data: Any = None) -> SwapResult:
        """
        Swap an exact input of one asset for another.

        Walks tick boundaries along the two-asset path, crossing each
        initialized tick it reaches, until the input is spent or the sum of
        reserves hits the limit. The output is sent to the recipient before
        sender.orbital_swap_callback is asked to pay the input.

        Args:
            sender: Caller that pays the input
            recipient: Account receiving the output
            token_in: Index of the input token
            token_out: Index of the output token
            amount_specified: Exact input amount, fee included
            sum_reserves_limit: Sum of reserves to stop at, 0 for no limit
            data: Passed through to the callback

        Returns:
            SwapResult with amounts, fee and the resulting pool position
        """
        self._require_initialized()
        self._check_token_index(token_in)
        self._check_token_index(token_out)
        if token_in == token_out:
            raise InvalidInputError("Input and output token must differ", pool=self.address)
        if amount_specified <= 0:
            raise InvalidInputError(f"Swap amount must be positive, got {amount_specified}",
                                    pool=self.address)
        if sum_reserves_limit < 0:
            raise InvalidSumReservesLimitError(
                f"Sum of reserves limit must be non-negative, got {sum_reserves_limit}",
                pool=self.address
            )

        n = self.token_count
        with self._lock(), self._atomic():
            state = self._state
            self._resync()
            if state.radius <= 0:
                raise InsufficientLiquidityError("No interior liquidity", pool=self.address)

            reserves = self.reserves()
            x_in = reserves[token_in]
            x_out = reserves[token_out]
            s = state.sum_reserves
            q = state.sum_squares
            radius = state.radius
            boundary_k = state.boundary_k
            boundary_s = state.boundary_s
            tick = state.tick
            fee_growth_global = list(state.fee_growth_global)
            sum_reserves_before = s

            limit_toward = False
            if sum_reserves_limit:
                limit_toward = sum_reserves_limit < s
                if (sum_reserves_limit == s
                        or (limit_toward and x_in >= x_out)
                        or (not limit_toward and x_in < x_out)):
                    raise InvalidSumReservesLimitError(
                        f"Limit {sum_reserves_limit} is on the wrong side of S={s}",
                        pool=self.address
                    )

            remaining = amount_specified
            amount_in_total = 0
            amount_out_total = 0
            fee_total = 0
            protocol_total = 0
            ticks_crossed: List[int] = []
            steps = 0

            while remaining > 0 and not self._limit_reached(s, sum_reserves_limit, limit_toward):
                steps += 1
                if steps > self.max_swap_steps:
                    raise SwapStepLimitError(
                        f"Swap exceeded {self.max_swap_steps} steps", pool=self.address
                    )

                toward = x_in < x_out
                sum_reserves_balanced = None
                if toward:
                    sum_reserves_balanced = self.math.balanced_sum_reserves(
                        n, s, q, radius, x_in, x_out, boundary_k, boundary_s
                    )
                    if sum_reserves_balanced is not None and s - sum_reserves_balanced <= 2:
                        toward = False
                        sum_reserves_balanced = None
                if limit_toward and not toward:
                    break

                next_tick, initialized = state.bitmap.next_initialized_tick_within_one_word(
                    tick, lte=toward
                )

                is_tick_target = True
                at_edge = False
                if toward and next_tick < self.tick_min:
                    tick_target = self.math.sum_reserves_at_k_norm(
                        self.k_norm_min, radius, n, boundary_k
                    )
                    is_tick_target = False
                elif not toward and next_tick > self.tick_max:
                    tick_target = self.math.sum_reserves_at_k_norm(
                        self.k_norm_max, radius, n, boundary_k
                    )
                    is_tick_target = False
                    at_edge = True
                else:
                    tick_target = self.math.sum_reserves_at_tick(next_tick, radius, n, boundary_k)

                if toward:
                    tick_target = min(tick_target, s)
                    target = tick_target
                    if sum_reserves_balanced is not None and sum_reserves_balanced > target:
                        target = sum_reserves_balanced
                    if sum_reserves_limit and sum_reserves_limit > target:
                        target = sum_reserves_limit
                else:
                    tick_target = max(tick_target, s)
                    target = tick_target
                    if sum_reserves_limit and sum_reserves_limit < target:
                        target = sum_reserves_limit

                amount_less_fee = mul_div(
                    remaining, FEE_DENOMINATOR - self.fee_pips, FEE_DENOMINATOR
                )
                step = self.math.compute_swap_step(
                    n, s, target, radius, q, x_in, x_out, amount_less_fee,
                    boundary_k, boundary_s
                )
                if not step.converged:
                    raise SolverConvergenceError(
                        f"Swap step from S={s} toward {target} did not converge",
                        pool=self.address,
                        iterations=step.iterations
                    )

                if step.reached_target:
                    fee = mul_div_rounding_up(
                        step.amount_in, self.fee_pips, FEE_DENOMINATOR - self.fee_pips
                    )
                    fee = min(fee, remaining - step.amount_in)
                else:
                    fee = remaining - step.amount_in

                remaining -= step.amount_in + fee
                amount_in_total += step.amount_in + fee
                amount_out_total += step.amount_out
                fee_total += fee

                if fee > 0:
                    if self.fee_protocol:
                        protocol_share = fee // self.fee_protocol
                        protocol_total += protocol_share
                        fee -= protocol_share
                    fee_growth_global[token_in] += mul_div(fee, Q128, radius)

                x_in_next = x_in + step.amount_in
                x_out_next = x_out - step.amount_out
                q += x_in_next * x_in_next - x_in * x_in + x_out_next * x_out_next - x_out * x_out
                s += step.amount_in - step.amount_out
                x_in, x_out = x_in_next, x_out_next

                if x_out <= 0:
                    raise InsufficientLiquidityError(
                        f"Reserve of {self.tokens[token_out]} exhausted", pool=self.address
                    )
                if not step.reached_target and self.math.marginal_price(
                        n, s, q, radius, x_in, x_out, boundary_k, boundary_s) <= 0:
                    raise InsufficientLiquidityError(
                        f"Input exceeds what {self.tokens[token_out]} liquidity can absorb",
                        pool=self.address
                    )

                logger.debug(
                    f"Swap step {steps}: S={s}, in={step.amount_in}, out={step.amount_out}, "
                    f"fee={fee}, target={target}, reached={step.reached_target}"
                )

                if step.reached_target and target == tick_target:
                    if at_edge and remaining > 0:
                        raise InsufficientLiquidityError(
                            "Swap reached the edge of the valid tick range", pool=self.address
                        )
                    if is_tick_target:
                        if initialized:
                            radius_net = state.ticks.cross(next_tick, fee_growth_global)
                            k_i, s_i = self.math.boundary_contribution(next_tick, radius_net, n)
                            if toward:
                                radius += radius_net
                                boundary_k -= k_i
                                boundary_s -= s_i
                            else:
                                radius -= radius_net
                                boundary_k += k_i
                                boundary_s += s_i
                            if radius <= 0:
                                raise InsufficientLiquidityError(
                                    f"Crossing tick {next_tick} exhausts interior liquidity",
                                    pool=self.address
                                )
                            ticks_crossed.append(next_tick)
                            logger.debug(f"Crossed tick {next_tick}, interior radius {radius}")
                        tick = next_tick - 1 if toward else next_tick
                    elif toward:
                        tick = self._tick_between(s, radius, boundary_k, self.tick_min - 1, tick)
                    else:
                        tick = self._tick_between(s, radius, boundary_k, tick, self.tick_max)
                elif toward:
                    tick = self._tick_between(s, radius, boundary_k, next_tick, tick)
                else:
                    tick = self._tick_between(s, radius, boundary_k, tick, next_tick - 1)

                # Rounding can leave S a unit or two short of the limit
                if step.reached_target and sum_reserves_limit and target == sum_reserves_limit:
                    break

            state.sum_reserves = s
            state.sum_squares = q
            state.radius = radius
            state.boundary_k = boundary_k
            state.boundary_s = boundary_s
            state.tick = tick
            state.fee_growth_global = fee_growth_global
            state.protocol_fees[token_in] += protocol_total
            state.fee_reserves[token_in] += fee_total

            amount_deltas = [0] * n
            amount_deltas[token_in] = amount_in_total
            amount_deltas[token_out] = -amount_out_total

            if amount_out_total > 0:
                self.ledger.transfer(
                    self.tokens[token_out], self.address, recipient, amount_out_total
                )

            balances_before = self.balances()
            sender.orbital_swap_callback(self, list(amount_deltas), data)
            self._verify_payment(balances_before, [max(delta, 0) for delta in amount_deltas])
            self._record_flash_deltas(amount_deltas)

        logger.info(
            f"Swapped {amount_in_total} {self.tokens[token_in]} for {amount_out_total} "
            f"{self.tokens[token_out]} in {self.address} "
            f"(S {sum_reserves_before} -> {s}, tick {tick}, crossed {len(ticks_crossed)})"
        )
        return SwapResult(
            amount_in=amount_in_total,
            amount_out=amount_out_total,
            amount_deltas=amount_deltas,
            fee_amount=fee_total,
            protocol_fee=protocol_total,
            sum_reserves_before=sum_reserves_before,
            sum_reserves_after=s,
            tick_after=tick,
            radius_after=radius,
            ticks_crossed=ticks_crossed
        )

    # ------------------------------------------------------------------
    # Flash
    # ------------------------------------------------------------------

    def flash(self,
              sender: OrbitalFlashCallback,
              recipient: str,
              amounts: Sequence[int],
              data: Any = None) -> None:
        """
        Lend tokens for the duration of a callback.

        The callback may swap or mint on this pool. When it returns, every
        balance must be back to at least its pre-loan level adjusted by the
        deltas of those inner operations. No fee is charged.

        Args:
            sender: Caller that receives the callback and repays
            recipient: Account receiving the loan
            amounts: Amount of each token to lend
            data: Passed through to the callback
        """
        self._require_initialized()
        amounts = list(amounts)
        if len(amounts) != self.token_count:
            raise InvalidInputError(
                f"Expected {self.token_count} flash amounts, got {len(amounts)}",
                pool=self.address
            )
        if any(amount < 0 for amount in amounts):
            raise InvalidInputError("Flash amounts must be non-negative", pool=self.address)
        if self._flash_locked or self._locked:
            raise ReentrancyError("Flash loan re-entered", pool=self.address)

        self._flash_locked = True
        try:
            with self._atomic():
                self._flash_expected = self.balances()
                for token, amount in zip(self.tokens, amounts):
                    if amount:
                        self.ledger.transfer(token, self.address, recipient, amount)

                sender.orbital_flash_callback(self, list(amounts), data)
                self._verify_payment(self._flash_expected, [0] * self.token_count)
        finally:
            self._flash_locked = False
            self._flash_expected = None

        logger.info(f"Flash loan of {amounts} from {self.address} repaid")

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------

    def collect(self,
                owner: str,
                tick: int,
                recipient: str,
                amounts_requested: Optional[Sequence[int]] = None) -> List[int]:
        """
        Pay out fees owed to a position.

        Owed fees are refreshed from the tick's fee growth inside before
        paying, so fees earned up to this call are included.

        Args:
            owner: Position owner
            tick: Position tick
            recipient: Account receiving the fees
            amounts_requested: Per-token caps, defaults to everything owed

        Returns:
            Amount of each token paid out
        """
        self._require_initialized()
        n = self.token_count
        with self._lock(), self._atomic():
            state = self._state
            position = state.positions.peek(owner, tick)
            if position.radius > 0:
                position = self._update_position(owner, tick, 0)

            requested = position.tokens_owed if amounts_requested is None else list(amounts_requested)
            if len(requested) != n:
                raise InvalidInputError(f"Expected {n} amounts, got {len(requested)}",
                                        pool=self.address)
            amounts = [min(max(req, 0), owed) for req, owed in zip(requested, position.tokens_owed)]

            if any(amounts):
                position.tokens_owed = [
                    owed - amount for owed, amount in zip(position.tokens_owed, amounts)
                ]
                self._pay_fees(recipient, amounts)

        if any(amounts):
            logger.info(f"Collected {amounts} for {owner} at tick {tick} from {self.address}")
        return amounts

    def collect_protocol(self,
                         recipient: str,
                         amounts_requested: Optional[Sequence[int]] = None) -> List[int]:
        """Pay out accrued protocol fees."""
        self._require_initialized()
        n = self.token_count
        with self._lock(), self._atomic():
            state = self._state
            requested = state.protocol_fees if amounts_requested is None else list(amounts_requested)
            if len(requested) != n:
                raise InvalidInputError(f"Expected {n} amounts, got {len(requested)}",
                                        pool=self.address)
            amounts = [min(max(req, 0), owed) for req, owed in zip(requested, state.protocol_fees)]

            if any(amounts):
                state.protocol_fees = [
                    owed - amount for owed, amount in zip(state.protocol_fees, amounts)
                ]
                self._pay_fees(recipient, amounts)

        if any(amounts):
            logger.info(f"Collected protocol fees {amounts} from {self.address}")
        return amounts

    def _pay_fees(self, recipient: str, amounts: List[int]) -> None:
        state = self._state
        for i, (token, amount) in enumerate(zip(self.tokens, amounts)):
            if amount:
                state.fee_reserves[i] -= amount
                self.ledger.transfer(token, self.address, recipient, amount)
        self._record_flash_deltas([-amount for amount in amounts])

    def __repr__(self) -> str:
        """String representation of the pool."""
        return (f"OrbitalPool(address={self.address}, "
                f"tokens={self.tokens}, "
                f"radius={self._state.radius}, "
                f"tick={self._state.tick})")
