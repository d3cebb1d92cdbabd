from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.services import admin_service

router = APIRouter()


@router.get("")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return admin_service.list_users(session, page=page, limit=limit)


@router.delete("/{user_id}")
def delete_user(user_id: str, session: Session = Depends(get_session)):
    deleted = admin_service.delete_user(session, user_id)
    return {"message": "Customer deleted", **deleted}
