from datetime import datetime
from pydantic import Field
from app.schemas.common import RequestModel, ResponseModel


class IntegrationConfigSave(RequestModel):
    store_id: str = Field(..., min_length=1, max_length=100)
    access_token: str = Field(..., min_length=1, max_length=500)
    sync_enabled: bool = True


class IntegrationSyncToggle(RequestModel):
    enabled: bool


class IntegrationConfigResponse(ResponseModel):
    """The access token is write-only and never returned"""

    id: int
    store_id: str
    sync_enabled: bool
    last_sync_at: datetime | None
    updated_at: datetime
