from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ListItem(BaseModel):
    filmKey: str
    title: str = ""
    addedAt: Optional[str] = None
    priority: bool = False


class ListResponse(BaseModel):
    profile: str
    list_name: str
    items: List[ListItem]


class AddItemRequest(BaseModel):
    film_key: str = Field(..., min_length=1, max_length=200)
    title: str = Field("", max_length=499)
    priority: bool = False


class ToggleResponse(BaseModel):
    film_key: str
    active: bool


class JsonImportRequest(BaseModel):
    data: str


class JsonImportResponse(BaseModel):
    imported: int
