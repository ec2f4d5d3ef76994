# backend/tandemboard/routers/pilots.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Pilots as DBPilots
from ..schemas.pilots import PilotCreate, PilotRead
from ..services.errors import PilotNotFoundError

router = APIRouter(prefix="/pilots", tags=["pilots"])


@router.get("/", response_model=list[PilotRead])
def list_pilots(db: Session = Depends(get_db)):
    return db.query(DBPilots).order_by(DBPilots.id).all()


@router.get("/{id}", response_model=PilotRead)
def get_pilot(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBPilots, id)
    if not obj:
        raise PilotNotFoundError()
    return obj


@router.post("/", response_model=PilotRead, status_code=status.HTTP_201_CREATED)
def create_pilot(
    data: PilotCreate,
    db: Session = Depends(get_db),
):
    obj = DBPilots(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
