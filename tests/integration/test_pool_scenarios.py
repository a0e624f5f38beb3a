"""
Integration tests for multi-position pool scenarios.

Pools are driven through the manager with several positions at different
ticks, so swaps walk the tick ladder and cross boundaries in both
directions.
"""
from decimal import Decimal

import pytest

from orbital_amm.config import OrbitalSettings
from orbital_amm.curve import WAD
from orbital_amm.periphery import OrbitalManager, OrbitalQuoter, TokenLedger
from orbital_amm.pool import InsufficientLiquidityError, OrbitalFlashCallback, OrbitalPool

TOKENS = ["USDC", "USDT", "DAI", "FRAX"]


def assert_consistent(pool: OrbitalPool) -> None:
    """Aggregates track the curve reserves and the point stays on the torus."""
    reserves = pool.reserves()
    assert pool.sum_reserves == sum(reserves)
    assert pool.sum_squares == sum(x * x for x in reserves)

    residual = pool.math.invariant_residual(
        pool.sum_reserves, pool.sum_squares, pool.radius,
        pool.boundary_k, pool.boundary_s, pool.token_count
    )
    radius = Decimal(pool.radius)
    assert abs(residual) / (radius * radius) < Decimal("1e-9")


@pytest.fixture
def ledger():
    ledger = TokenLedger()
    for symbol in TOKENS:
        ledger.create_token(symbol)
        ledger.mint(symbol, "alice", 10_000 * WAD)
        ledger.mint(symbol, "bob", 10_000 * WAD)
    return ledger


@pytest.fixture
def manager(ledger):
    return OrbitalManager(ledger)


@pytest.fixture
def make_pool(ledger, manager):
    """Build an initialized pool with the given {tick: radius} positions."""
    def _make(positions, **overrides):
        pool = OrbitalPool(ledger, TOKENS, settings=OrbitalSettings(**overrides))
        pool.initialize(4000 * WAD, 0)
        for tick, radius in positions.items():
            amount = radius // 2
            manager.mint(pool, tick, [amount] * 4, [0] * 4, "alice")
        return pool
    return _make


class TestTickCrossing:
    """Swaps that cross boundaries of nested positions."""

    def test_cross_out_and_back(self, make_pool, manager):
        """Test crossing two ticks away from the center and back again."""
        pool = make_pool({100: 200 * WAD, 300: 300 * WAD, 3000: 500 * WAD})
        start = pool.sum_reserves
        assert start == 2000 * WAD
        assert pool.radius == 1000 * WAD

        result = manager.swap_single(pool, "USDC", "USDT", 400 * WAD, start + 60 * WAD, "bob")

        assert result.ticks_crossed == [100, 300]
        assert result.radius_after == 500 * WAD
        assert pool.radius == 500 * WAD
        assert 300 <= pool.tick < 3000
        assert pool.boundary_k > 0
        assert start + 60 * WAD <= result.sum_reserves_after <= start + 60 * WAD + 2
        assert result.amount_in < 400 * WAD
        assert_consistent(pool)

        back = manager.swap_single(pool, "USDT", "USDC", 1000 * WAD, 2010 * WAD, "bob")

        assert back.ticks_crossed == [300, 100]
        assert pool.radius == 1000 * WAD
        assert 0 <= pool.tick < 100
        assert 2010 * WAD <= back.sum_reserves_after <= 2010 * WAD + 2
        assert_consistent(pool)

    def test_crossing_last_interior_tick(self, make_pool, manager, ledger):
        """Test a swap that would leave no interior radius fails cleanly."""
        pool = make_pool({100: 1000 * WAD})
        state = pool.snapshot()
        balances = pool.balances()

        with pytest.raises(InsufficientLiquidityError):
            manager.swap_single(pool, "USDC", "USDT", 900 * WAD, 0, "bob")

        assert pool.snapshot() == state
        assert pool.balances() == balances
        assert ledger.balance_of("USDC", "bob") == 10_000 * WAD

    def test_partial_crossing_then_exhaustion(self, make_pool, manager):
        pool = make_pool({100: 400 * WAD, 200: 600 * WAD})
        start = pool.sum_reserves

        result = manager.swap_single(pool, "USDC", "USDT", 300 * WAD, start + 25 * WAD, "bob")

        assert result.ticks_crossed == [100]
        assert pool.radius == 600 * WAD
        assert_consistent(pool)

        with pytest.raises(InsufficientLiquidityError):
            manager.swap_single(pool, "USDC", "USDT", 500 * WAD, 0, "bob")
        assert pool.radius == 600 * WAD

    def test_swaps_across_pairs_stay_on_curve(self, make_pool, manager):
        pool = make_pool({500: 600 * WAD, 2000: 400 * WAD})

        manager.swap_single(pool, "USDC", "USDT", 30 * WAD, 0, "bob")
        manager.swap_single(pool, "DAI", "FRAX", 45 * WAD, 0, "bob")
        manager.swap_single(pool, "FRAX", "USDC", 20 * WAD, 0, "bob")
        manager.swap_single(pool, "USDT", "DAI", 15 * WAD, 0, "bob")

        assert_consistent(pool)

    def test_quote_through_crossings(self, make_pool, manager):
        pool = make_pool({100: 200 * WAD, 300: 300 * WAD, 3000: 500 * WAD})
        limit = pool.sum_reserves + 60 * WAD

        quote = OrbitalQuoter().quote(pool, "USDC", "USDT", 400 * WAD, limit)
        result = manager.swap_single(pool, "USDC", "USDT", 400 * WAD, limit, "bob")

        assert quote.ticks_crossed == result.ticks_crossed
        assert quote.amount_out == result.amount_out
        assert quote.radius_after == result.radius_after


class TestFeeAccounting:
    """Fees are shared pro rata and never over-paid."""

    def test_fees_split_between_positions(self, ledger, manager):
        pool = OrbitalPool(ledger, TOKENS)
        pool.initialize(4000 * WAD, 0)
        manager.mint(pool, 2000, [300 * WAD] * 4, [0] * 4, "alice")
        manager.mint(pool, 3000, [200 * WAD] * 4, [0] * 4, "bob")

        forward = manager.swap_single(pool, "USDC", "USDT", 10 * WAD, 0, "bob")
        reverse = manager.swap_single(pool, "USDT", "USDC", 3 * WAD, 0, "bob")
        fees = [forward.fee_amount, reverse.fee_amount, 0, 0]

        alice = pool.collect("alice", 2000, "alice")
        bob = pool.collect("bob", 3000, "bob")
        collected = [a + b for a, b in zip(alice, bob)]

        assert all(c <= f for c, f in zip(collected, fees))
        assert sum(fees) - sum(collected) <= 4
        assert abs(alice[0] - fees[0] * 6 // 10) <= 1
        assert abs(bob[0] - fees[0] * 4 // 10) <= 1
        assert pool.fee_reserves == [f - c for f, c in zip(fees, collected)]
        assert_consistent(pool)

    def test_late_position_earns_only_new_fees(self, ledger, manager):
        pool = OrbitalPool(ledger, TOKENS)
        pool.initialize(4000 * WAD, 0)
        manager.mint(pool, 2000, [500 * WAD] * 4, [0] * 4, "alice")
        manager.swap_single(pool, "USDC", "USDT", 10 * WAD, 0, "bob")

        manager.mint(pool, 2000, [500 * WAD] * 4, [0] * 4, "bob")

        assert pool.collect("bob", 2000, "bob") == [0, 0, 0, 0]
        assert pool.collect("alice", 2000, "alice")[0] > 0

    def test_protocol_share_is_withheld(self, make_pool, manager):
        pool = make_pool({2000: 1000 * WAD}, fee_protocol=4)

        result = manager.swap_single(pool, "USDC", "USDT", 10 * WAD, 0, "bob")
        lp_fees = pool.collect("alice", 2000, "alice")

        assert result.protocol_fee == 1_250_000_000_000_000
        assert lp_fees[0] <= result.fee_amount - result.protocol_fee
        assert pool.collect_protocol("treasury")[0] == result.protocol_fee


class ArbitrageBorrower(OrbitalFlashCallback):
    """Borrows USDC, swaps part of it through the pool, repays in full."""

    address = "arb"

    def __init__(self, ledger, manager):
        self.ledger = ledger
        self.manager = manager

    def orbital_flash_callback(self, pool, amounts, data):
        self.manager.swap_single(pool, "USDC", "DAI", amounts[0] // 2, 0, self.address)
        self.ledger.transfer("USDC", self.address, pool.address, amounts[0])


def test_flash_with_inner_swap_keeps_curve(make_pool, manager, ledger):
    pool = make_pool({500: 1000 * WAD})
    ledger.mint("USDC", "arb", 100 * WAD)
    borrower = ArbitrageBorrower(ledger, manager)

    pool.flash(borrower, borrower.address, [100 * WAD, 0, 0, 0])

    assert pool.balances()[0] == 550 * WAD
    assert ledger.balance_of("DAI", "arb") > 0
    assert_consistent(pool)


class LiquidityBorrower(OrbitalFlashCallback):
    """Borrows USDC, adds liquidity to the same pool, repays in full."""

    address = "lp"

    def __init__(self, ledger, manager):
        self.ledger = ledger
        self.manager = manager

    def orbital_flash_callback(self, pool, amounts, data):
        self.manager.mint(pool, 2000, [100 * WAD] * 4, [0] * 4, self.address)
        self.ledger.transfer("USDC", self.address, pool.address, amounts[0])


def test_flash_with_inner_mint_keeps_aggregates(make_pool, manager, ledger):
    """Test a deposit made during a loan is counted in S and Q."""
    pool = make_pool({2000: 1000 * WAD})
    for symbol in TOKENS:
        ledger.mint(symbol, "lp", 100 * WAD)
    borrower = LiquidityBorrower(ledger, manager)

    pool.flash(borrower, borrower.address, [50 * WAD, 0, 0, 0])

    assert pool.balances() == [600 * WAD] * 4
    assert pool.radius == 1200 * WAD
    assert pool.sum_reserves == 2400 * WAD
    assert pool.position("lp", 2000).radius == 200 * WAD
    assert_consistent(pool)
