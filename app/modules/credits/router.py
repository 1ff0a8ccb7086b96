from fastapi import APIRouter, HTTPException, status
from typing import List
from app.dependencies.dbDependecies import db_dependency
from app.modules.credits import service
from app.modules.credits.schemas import CreditMovementIn, EmployeeCreditRecord
from app.modules.employees.service import EmployeeService

credits_router = APIRouter(prefix="/credits", tags=["Credits"])


@credits_router.get("/employees", response_model=List[EmployeeCreditRecord])
def list_employee_credits(db: db_dependency):
    """Saldo de crédito por empleado con el historial de cargos y abonos."""
    credit_service = service.CreditService(db)
    return credit_service.fetch_employee_credits()


@credits_router.post("/employees/payments", status_code=status.HTTP_201_CREATED)
def register_employee_payment(payment: CreditMovementIn, db: db_dependency):
    """Abono directo al saldo de un empleado."""
    EmployeeService(db).get_empleado(payment.empleado_id)
    credit_service = service.CreditService(db)
    entry = credit_service.settle_employee_credit_balance(
        payment.empleado_id, payment.monto, payment.order_id, payment.order_numero
    )
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="El abono debe tener un monto mayor a cero"
        )
    return {"message": "Abono registrado exitosamente", "id": entry.id}
