from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional

from storefront.db.deps import get_db, get_current_user
from storefront.schemas.auth import CurrentUser
from storefront.schemas.checkout import CheckoutSessionOut, WebhookResult
from storefront.services import checkout_service
from storefront.services.payment_service import get_payment_service

router = APIRouter()

@router.post("/session", response_model=CheckoutSessionOut)
def create_checkout_session(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    payment_service=Depends(get_payment_service),
):
    """Start a hosted payment for the caller's cart; returns the redirect url"""
    return checkout_service.create_checkout_session(db, user, payment_service)

async def raw_body(request: Request) -> bytes:
    return await request.body()

@router.post("/webhook", response_model=WebhookResult)
def payment_webhook(
    payload: bytes = Depends(raw_body),
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
):
    """Payment provider callback; the signature is the only authentication"""
    event = checkout_service.parse_payment_event(payload, stripe_signature)
    return checkout_service.confirm_payment_event(db, event)
