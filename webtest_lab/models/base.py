"""Base model configuration for records, requests and engine payloads."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model for everything the orchestrator owns."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class EngineModel(BaseModel):
    """Immutable model for payloads produced by external engines.

    Engines add fields between releases, so unknown keys are ignored and the
    camelCase names they emit are accepted as aliases.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
