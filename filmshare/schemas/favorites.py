from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ShareRequest(BaseModel):
    film_keys: List[str] = Field(..., max_length=10_000)
    priority_film_keys: List[str] = Field(default_factory=list)
    list_name: Optional[str] = Field(None, max_length=200)


class ProfileShareRequest(BaseModel):
    list_name: Optional[str] = Field(None, max_length=200)


class ShareResponse(BaseModel):
    url: str
    favs: str
    count: int
    priority_count: int


class SharedFavoritesResponse(BaseModel):
    success: bool = True
    name: Optional[str] = None
    film_keys: List[str]
    priorities: Dict[str, bool] = {}
    legacy_format: bool = False
    rejected: Dict[str, int] = {}


class ImportSharedRequest(BaseModel):
    favs: str
    mode: Literal["merge", "replace"] = "merge"


class ImportSharedResponse(BaseModel):
    success: bool = True
    imported: int
    skipped: int = 0
    film_keys: List[str]
    priorities: Dict[str, bool] = {}
