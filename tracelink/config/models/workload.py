"""Simulated workload configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

SimulatorMode = Literal["random", "fixed"]


class WorkloadConfig(BaseModel):
    """Configuration for the simulated /work request."""

    simulator: SimulatorMode = Field(
        default="random",
        description="'random' draws each outcome, 'fixed' always returns fixed_*",
    )
    max_latency_ms: int = Field(
        default=400,
        gt=0,
        description="Exclusive upper bound of the uniform latency draw",
    )
    failure_rate: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Probability that a request fails",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the random source (unseeded when unset)",
    )
    child_spans: list[str] = Field(
        default=["simulate_work", "db_cache_lookup"],
        description="Child spans opened in order around the simulated work",
    )
    fixed_latency_ms: int = Field(
        default=50,
        ge=0,
        description="Latency returned by the fixed simulator",
    )
    fixed_failed: bool = Field(
        default=False,
        description="Outcome returned by the fixed simulator",
    )

    @field_validator("child_spans", mode="before")
    @classmethod
    def parse_child_spans(cls, v: str | list[str]) -> list[str]:
        """Parse child span names from a comma-separated string or list."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v
