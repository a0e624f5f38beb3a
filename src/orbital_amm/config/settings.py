"""Pool settings and configuration."""
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

FEE_DENOMINATOR = 1_000_000


class OrbitalSettings(BaseSettings):
    """Orbital pool settings loaded from environment variables."""

    # Fee settings
    fee_pips: int = Field(
        default=500,
        description="Swap fee in hundredths of a bip (500 = 0.05%)",
        alias="ORBITAL_FEE_PIPS"
    )

    fee_protocol: int = Field(
        default=0,
        description="Protocol fee denominator, 0 disables, otherwise 1/N of each fee",
        alias="ORBITAL_FEE_PROTOCOL"
    )

    # Tick settings
    tick_spacing: int = Field(
        default=10,
        description="Ticks must be multiples of this spacing",
        alias="ORBITAL_TICK_SPACING"
    )

    tick_base: Decimal = Field(
        default=Decimal("1.0001"),
        description="Base of the tick ladder, k_norm = tick_base ** tick",
        alias="ORBITAL_TICK_BASE"
    )

    # Solver settings
    solver_max_iterations: int = Field(
        default=255,
        description="Fixed Newton-Raphson iteration budget",
        alias="ORBITAL_SOLVER_MAX_ITERATIONS"
    )

    solver_tolerance: int = Field(
        default=1,
        description="Newton-Raphson convergence threshold in token base units",
        alias="ORBITAL_SOLVER_TOLERANCE"
    )

    max_swap_steps: int = Field(
        default=1000,
        description="Maximum tick-walk steps in a single swap",
        alias="ORBITAL_MAX_SWAP_STEPS"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore"
    }

    @field_validator("fee_pips")
    @classmethod
    def _check_fee_pips(cls, value: int) -> int:
        if not 0 <= value < FEE_DENOMINATOR:
            raise ValueError(f"fee_pips must be in [0, {FEE_DENOMINATOR}), got {value}")
        return value

    @field_validator("fee_protocol")
    @classmethod
    def _check_fee_protocol(cls, value: int) -> int:
        if value != 0 and not 4 <= value <= 10:
            raise ValueError(f"fee_protocol must be 0 or between 4 and 10, got {value}")
        return value

    @field_validator("tick_spacing", "solver_max_iterations", "max_swap_steps")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value

    @field_validator("solver_tolerance")
    @classmethod
    def _check_tolerance(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"solver_tolerance must be non-negative, got {value}")
        return value

    @field_validator("tick_base")
    @classmethod
    def _check_tick_base(cls, value: Decimal) -> Decimal:
        if value <= 1:
            raise ValueError(f"tick_base must be greater than 1, got {value}")
        return value


# Global settings instance
settings = OrbitalSettings()
