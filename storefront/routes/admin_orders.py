from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.services import admin_service

router = APIRouter()


@router.get("")
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return admin_service.list_orders(session, page=page, limit=limit)


@router.delete("/{order_id}")
def delete_order(order_id: str, session: Session = Depends(get_session)):
    deleted = admin_service.delete_order(session, order_id)
    return {"message": "Order deleted", **deleted}
