"""Wire models for API responses the CLI reads itself."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

HASH_PATTERN = r"^[0-9a-fA-F]{64}$"


class BinaryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prn: Optional[str] = None
    hash: Optional[str] = Field(default=None, pattern=HASH_PATTERN)
    size: Optional[int] = Field(default=None, ge=0)
    state: Optional[str] = None


class BinaryResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    binary: BinaryRecord
