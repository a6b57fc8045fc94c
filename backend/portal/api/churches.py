from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from portal.db import get_db
from portal.schemas.churches import ChurchRead
from portal.services.secretaries import list_churches

router = APIRouter(prefix="/churches", tags=["Churches"])


@router.get("/", response_model=List[ChurchRead])
def list_all(db: Session = Depends(get_db)):
    return list_churches(db)
