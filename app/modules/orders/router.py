from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from app.core.config import settings
from app.database.database import get_db
from app.modules.orders import service
from app.modules.orders.models import OrderStatus
from app.modules.orders.schemas import (
    OrderCreate, OrderCreditRequest, OrderCreditSettleRequest, OrderFilters, OrderImportRequest,
    OrderList, OrderOut, OrderPaymentRequest, OrderStatusUpdate, OrderUpdate
)
from app.modules.payments.allocations import (
    CREDIT_PAYMENT_METHODS, merge_allocations, payment_matches_total, sanitize_allocations
)
from app.modules.payments.schemas import PaymentStatus, PaymentSummaryOut

orders_router = APIRouter(prefix="/orders", tags=["Orders"])


@orders_router.get("/", response_model=OrderList)
def list_orders(
    estado: Optional[OrderStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Órdenes filtradas, de la más reciente a la más antigua. total cuenta todas las filtradas."""
    order_service = service.OrderService(db)
    page, total = order_service.fetch_orders_page(OrderFilters(
        estado=estado, payment_status=payment_status, date_from=date_from, date_to=date_to
    ), limit=limit, offset=offset)
    return {"orders": [service.order_to_response(order) for order in page], "total": total}


@orders_router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.create_order(order))


@orders_router.post("/import", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def import_order(request: OrderImportRequest, db: Session = Depends(get_db)):
    """Importa un registro de orden heredado normalizando su pago."""
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.import_order_record(request.record))


@orders_router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.get_order(order_id))


@orders_router.patch("/{order_id}", response_model=OrderOut)
def update_order(order_id: str, update: OrderUpdate, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.update_order(order_id, update))


@orders_router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: str, update: OrderStatusUpdate, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.update_order_status(order_id, update.estado))


@orders_router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: str, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    order_service.delete_order(order_id)


@orders_router.get("/{order_id}/payment", response_model=PaymentSummaryOut)
def get_payment_summary(order_id: str, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return order_service.get_payment_summary(order_id)


@orders_router.post("/{order_id}/payment", response_model=OrderOut)
def record_order_payment(order_id: str, request: OrderPaymentRequest, db: Session = Depends(get_db)):
    """
    Registra el pago de la orden.

    La suma de las asignaciones debe cubrir el total (con holgura de 1 peso)
    salvo que allow_partial sea verdadero.
    """
    order_service = service.OrderService(db)
    order = order_service.get_order(order_id)
    allocations = [entry.model_dump() for entry in request.allocations]

    if not request.allow_partial:
        merged = merge_allocations(sanitize_allocations(allocations, CREDIT_PAYMENT_METHODS))
        if merged and not payment_matches_total(merged, order.total):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="El total de los pagos no coincide con el total de la orden"
            )

    return service.order_to_response(order_service.record_order_payment(order_id, allocations))


@orders_router.post("/{order_id}/credit", response_model=OrderOut)
def assign_order_credit(order_id: str, request: OrderCreditRequest, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    order = order_service.assign_order_credit(
        order_id, request.amount, request.employee_id, request.employee_name
    )
    return service.order_to_response(order)


@orders_router.post("/{order_id}/credit/settle", response_model=OrderOut)
def settle_order_employee_credit(order_id: str, request: OrderCreditSettleRequest, db: Session = Depends(get_db)):
    order_service = service.OrderService(db)
    return service.order_to_response(order_service.settle_order_employee_credit(order_id, request.metodo))
