"""Pydantic models for upstream responses and derived metrics."""

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from feebot.helpers.errors import ValidationError


M = TypeVar("M", bound=BaseModel)


def validate_model(model: type[M], data: Any, label: str) -> M:
    """Validate data into a model, reporting failures as ``ValidationError``."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        msg = f"{label} is malformed: {e.error_count()} validation error(s): {e.errors()[0]['msg']}"
        raise ValidationError(msg) from e


class BtcMempool(BaseModel):
    """mempool.space mempool summary."""

    count: int = Field(default=0, ge=0, description="Unconfirmed transactions")
    vsize: int = Field(default=0, ge=0, description="Total virtual size in vbytes")

    model_config = ConfigDict(extra="allow")


class BtcSnapshot(BaseModel):
    """Recommended fee table and mempool summary read in one run."""

    fees: dict[str, Any]
    mempool: BtcMempool


class MiningFee(BaseModel):
    """Fee amount expressed as satoshis per number of bytes."""

    satoshis: float
    bytes: float


class FeeRecord(BaseModel):
    """One entry of an mAPI fee quote."""

    fee_type: str = Field(..., alias="feeType")
    mining_fee: MiningFee = Field(..., alias="miningFee")
    relay_fee: MiningFee | None = Field(default=None, alias="relayFee")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class BsvMempool(BaseModel):
    """WhatsOnChain mempool info."""

    count: int = Field(default=0, ge=0, description="Unconfirmed transactions")

    model_config = ConfigDict(extra="allow")


class BsvSnapshot(BaseModel):
    """Selected fee records and mempool info read in one run."""

    standard_fee: FeeRecord
    data_fee: FeeRecord
    mempool: BsvMempool


class NetworkMetrics(BaseModel):
    """Figures rendered for one network."""

    simple_fee: int = Field(..., description="Fee for a simple transfer, smallest unit")
    eta_minutes: int
    one_kb_fee: int = Field(..., description="Fee for 1KB of data, smallest unit")
    backlog_count: int
    backlog_blocks: float

    model_config = ConfigDict(frozen=True)


class XUser(BaseModel):
    """Authenticated posting account."""

    id: str
    username: str


__all__ = [
    "BsvMempool",
    "BsvSnapshot",
    "BtcMempool",
    "BtcSnapshot",
    "FeeRecord",
    "MiningFee",
    "NetworkMetrics",
    "XUser",
    "validate_model",
]
