from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


class Target(BaseModel):
    """
    Data model representing one monitored endpoint and its polling cadence.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    interval: float = Field(gt=0)
    timeout: float = Field(gt=0)
    method: str = "GET"

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        method = value.strip().upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unsupported HTTP method {value!r}. Supported: {list(SUPPORTED_METHODS)}"
            )
        return method
