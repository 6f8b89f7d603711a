"""Request/response schemas for the admin API."""

from src.pm_common.schemas import CamelModel


class ResolveRequest(CamelModel):
    outcome: str  # YES | NO | N/A, checked by the service


class PayoutItem(CamelModel):
    username: str
    amount: int


class ResolveResponse(CamelModel):
    market_id: int
    resolution_result: str
    final_resolution_at: str
    entry_type: str
    payouts: list[PayoutItem]
    total_paid: int
