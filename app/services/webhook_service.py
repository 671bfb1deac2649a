import hashlib
import hmac
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.exceptions import UnauthenticatedException, ValidationException
from app.models.base import utcnow
from app.models.integration_config import IntegrationConfig
from app.models.shipment import ShipmentStatus
from app.repositories.integration_config_repository import IntegrationConfigRepository
from app.repositories.sale_repository import SaleRepository
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.nuvemshop_schemas import NuvemshopOrder
from app.services.order_import_service import OrderImportService

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Linkedstore-Hmac-Sha256"

ORDER_CREATED = "order/created"
ORDER_PAID = "order/paid"
ORDER_FULFILLED = "order/fulfilled"


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Check the store's HMAC-SHA256 signature of the raw request body.

    Args:
        body: Raw request body bytes
        signature: Hex digest sent in the X-Linkedstore-Hmac-Sha256 header
        secret: App secret shared with the store

    Returns:
        True if the signature matches
    """
    if not signature or not secret:
        return False
    computed = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed, signature.strip().lower())


class WebhookService:
    """
    Ingress for marketplace events.

    There is no session: the tenant is whoever owns the integration config
    for the event's store_id. Events for unknown stores, stores with sync
    disabled and event types we do not model are acknowledged with 200 so
    the store does not retry them.
    """

    def __init__(self, db: Session, secret: str = ""):
        self.db = db
        self.secret = secret
        self.config_repo = IntegrationConfigRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.sale_repo = SaleRepository(db)
        self.shipment_repo = ShipmentRepository(db)

    def handle(self, body: bytes, signature: Optional[str] = None) -> dict[str, Any]:
        """
        Verify (when a secret is configured), parse and dispatch a raw webhook body.

        Raises:
            UnauthenticatedException: If a secret is configured and the signature does not match
            ValidationException: If the body is not a JSON object with event and store_id
        """
        if self.secret and not verify_signature(body, signature, self.secret):
            logger.warning("Webhook signature rejected")
            raise UnauthenticatedException("Invalid webhook signature")

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationException("Invalid payload")
        if not isinstance(payload, dict):
            raise ValidationException("Invalid payload")

        return self.dispatch(payload)

    def dispatch(self, payload: dict[str, Any]) -> dict[str, Any]:
        event = payload.get("event")
        store_id = payload.get("store_id")
        logger.info("Webhook received", extra={"event": event, "store_id": store_id})

        if not event or not store_id:
            raise ValidationException(
                "Invalid payload",
                fields={key: "This field is required" for key in ("event", "store_id") if not payload.get(key)},
            )

        config = self.config_repo.find_enabled_by_store_id(str(store_id))
        if config is None:
            logger.info("Webhook for unknown or disabled store ignored", extra={"store_id": store_id})
            return {"received": True}

        body = {key: value for key, value in payload.items() if key not in ("event", "store_id")}

        if event == ORDER_CREATED:
            order = self._parse_order(config, body)
            if order is None:
                return {"received": True}
            return OrderImportService(self.db).import_order(config, order)
        if event == ORDER_PAID:
            self._mark_paid(config, body)
            return {"received": True}
        if event == ORDER_FULFILLED:
            self._mark_fulfilled(config, body)
            return {"received": True}

        logger.info("Unhandled webhook event ignored", extra={"event": event, "tenant_id": config.user_id})
        return {"received": True, "event": event}

    @staticmethod
    def _parse_order(config: IntegrationConfig, body: dict[str, Any]) -> Optional[NuvemshopOrder]:
        """Malformed orders are dropped, since a non-2xx reply makes the store resend them"""
        try:
            return NuvemshopOrder.model_validate(body)
        except ValidationError as e:
            fields = {".".join(str(part) for part in error["loc"]): error["msg"] for error in e.errors()}
            logger.warning(
                "Malformed order payload dropped",
                extra={"tenant_id": config.user_id, "order_id": body.get("id"), "fields": fields},
            )
            return None

    def _mark_paid(self, config: IntegrationConfig, body: dict[str, Any]) -> None:
        order_id = body.get("id")
        number = body.get("number")
        if order_id is None and number is None:
            return

        updated = self.transaction_repo.mark_order_paid(
            config.user_id,
            str(order_id) if order_id is not None else None,
            str(number) if number is not None else None,
            utcnow(),
        )
        self.transaction_repo.commit()
        logger.info(
            "Order payment applied",
            extra={"tenant_id": config.user_id, "order_id": order_id, "updated": updated},
        )

    def _mark_fulfilled(self, config: IntegrationConfig, body: dict[str, Any]) -> None:
        order_id = body.get("id")
        if order_id is None:
            return

        sale = self.sale_repo.get_by_external_order_id(config.user_id, str(order_id))
        if sale is None:
            logger.info("Fulfilled order has no imported sale", extra={"tenant_id": config.user_id, "order_id": order_id})
            return

        shipment = self.shipment_repo.get_by_sale(config.user_id, sale.id)
        if shipment is None or shipment.status == ShipmentStatus.DELIVERED:
            return

        shipment.status = ShipmentStatus.IN_TRANSIT
        shipment.tracking_code = body.get("shipping_tracking_number") or shipment.tracking_code
        self.shipment_repo.commit()
        logger.info(
            "Shipment marked in transit",
            extra={"tenant_id": config.user_id, "order_id": order_id, "shipment_id": shipment.id},
        )
