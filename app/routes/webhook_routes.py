from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.webhook_service import SIGNATURE_HEADER, WebhookService

router = APIRouter()


@router.post("/nuvemshop")
async def receive_nuvemshop_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Receive a Nuvemshop event.

    - 400 when event or store_id is missing
    - 401 on a bad signature when NUVEMSHOP_APP_SECRET is set
    - 200 for unknown stores, disabled sync and unhandled events
    """
    # Raw body is needed for the signature
    body = await request.body()
    service = WebhookService(db, settings.NUVEMSHOP_APP_SECRET)
    return service.handle(body, request.headers.get(SIGNATURE_HEADER))


@router.get("/nuvemshop")
async def nuvemshop_webhook_health():
    return {"status": "ok", "endpoint": "nuvemshop-webhook"}
