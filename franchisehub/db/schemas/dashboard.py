import datetime as dt
from typing import Dict, List, Optional
from pydantic import BaseModel


class TicketsPerDay(BaseModel):
    date: dt.date
    count: int


class DashboardStats(BaseModel):
    total_documents: int
    docs_this_week: int
    tickets_by_status: Dict[str, int]
    tickets_per_day: List[TicketsPerDay]


class SearchResult(BaseModel):
    id: str
    title: str
    type: str
    description: Optional[str] = None
    created_at: str
    restaurant_name: Optional[str] = None


class SearchResponse(BaseModel):
    documents: List[SearchResult]
    tickets: List[SearchResult]
    announcements: List[SearchResult]
    total: int
