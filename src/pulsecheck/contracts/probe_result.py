from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProbeResult(BaseModel):
    """
    Data model representing the measured outcome of a single probe attempt.

    ``status_code`` is 0 when the attempt never reached a server, in which case
    ``error_message`` describes the transport failure.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    latency: float = Field(ge=0)
    status_code: int = 0
    error_message: str = ""
    observed_at: datetime


class RetryOutcome(BaseModel):
    """
    Verdict of one probe cycle plus the result of the last attempt made.
    """

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    last_result: ProbeResult
    attempts: int = Field(ge=1)
