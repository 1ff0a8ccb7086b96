from fastapi import APIRouter, Query
from typing import Optional
from datetime import date
from app.dependencies.dbDependecies import db_dependency
from app.modules.balance.schemas import BalanceList
from app.modules.balance.service import BalanceService

balance_router = APIRouter(prefix="/balance", tags=["Balance"])


@balance_router.get("/", response_model=BalanceList)
def get_balance(
    db: db_dependency,
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None)
):
    """Balance diario, del día más reciente al más antiguo."""
    return BalanceService(db).fetch_balance(date_from, date_to)
