from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..models.sync_run import SyncRun as SyncRunModel
from ..schemas.sync import SyncRun

router = APIRouter()


@router.get("/sync-status", response_model=SyncRun)
def get_sync_status(db: Session = Depends(get_db)):
    """Get the most recent location sync pass"""
    latest = db.query(SyncRunModel).order_by(SyncRunModel.id.desc()).first()
    if latest is None:
        raise NotFoundError("No sync run recorded yet")
    return latest
