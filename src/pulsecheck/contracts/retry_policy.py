from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """
    Capped exponential backoff settings for a probe cycle.

    Attributes:
        max_attempts: Total attempts per cycle, including the first one.
        initial_delay: Delay in seconds before the first retry.
        max_delay: Upper bound in seconds for any single delay.
        backoff_multiplier: Factor applied to the previous delay.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(5, ge=1)
    initial_delay: float = Field(1.0, ge=0.0)
    max_delay: float = Field(30.0, ge=0.0)
    backoff_multiplier: float = Field(2.0, ge=1.0)
