from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class FilterStateModel(BaseModel):
    years: List[str] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)
    sellers: List[str] = Field(default_factory=list)
    stores: List[str] = Field(default_factory=list)
    cities: List[str] = Field(default_factory=list)
    managers: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    codes: List[str] = Field(default_factory=list)


class UploadSalesResponse(BaseModel):
    records: int
    source: Optional[str] = None


class UploadLookupResponse(BaseModel):
    entries: int
    updated: int


class StatusResponse(BaseModel):
    records: int
    lookup_entries: int
    source: Optional[str] = None
