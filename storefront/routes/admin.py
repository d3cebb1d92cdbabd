from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.database import get_session
from storefront.services.admin_service import dashboard

router = APIRouter()


@router.get("")
def admin_dashboard(session: Session = Depends(get_session)):
    return dashboard(session)
