from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quoteflow.core.auth_deps import require_admin
from quoteflow.core.deps import get_records
from quoteflow.db.session import get_db
from quoteflow.services.records_service import RecordsService

router = APIRouter(prefix="/dashboard")


@router.get("/stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    _principal=Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    return records.dashboard_stats(db)
