"""Pydantic base models shared by configuration and the routing table schema."""

from pydantic import BaseModel, ConfigDict


class RouterBaseModel(BaseModel):
    model_config = ConfigDict(protected_namespaces=())


class StrictModel(RouterBaseModel):
    """Rejects unknown keys so a typo in a YAML file fails at load time."""

    model_config = ConfigDict(extra="forbid")
