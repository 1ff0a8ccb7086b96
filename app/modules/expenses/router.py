from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from app.database.database import get_db
from app.modules.expenses import service
from app.modules.expenses.schemas import GastoCreate, GastoList, GastoOut, GastoUpdate

expenses_router = APIRouter(prefix="/expenses", tags=["Expenses"])


@expenses_router.get("/", response_model=GastoList)
def list_gastos(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db)
):
    expense_service = service.ExpenseService(db)
    return expense_service.list_gastos(date_from, date_to)


@expenses_router.post("/", response_model=GastoOut, status_code=status.HTTP_201_CREATED)
def create_gasto(gasto: GastoCreate, db: Session = Depends(get_db)):
    expense_service = service.ExpenseService(db)
    return expense_service.create_gasto(gasto)


@expenses_router.get("/{gasto_id}", response_model=GastoOut)
def get_gasto(gasto_id: str, db: Session = Depends(get_db)):
    expense_service = service.ExpenseService(db)
    return expense_service.get_gasto(gasto_id)


@expenses_router.patch("/{gasto_id}", response_model=GastoOut)
def update_gasto(gasto_id: str, update: GastoUpdate, db: Session = Depends(get_db)):
    expense_service = service.ExpenseService(db)
    return expense_service.update_gasto(gasto_id, update)


@expenses_router.delete("/{gasto_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_gasto(gasto_id: str, db: Session = Depends(get_db)):
    expense_service = service.ExpenseService(db)
    expense_service.delete_gasto(gasto_id)
