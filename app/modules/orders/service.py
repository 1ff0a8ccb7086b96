from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from pydantic import TypeAdapter, ValidationError
from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime, time, timedelta
import logging
import math

from app.common.formatters import generate_order_number, round_to_cop, to_number
from app.modules.cart.pricing import (
    calculate_cart_total, calculate_raw_cart_total, extract_student_discount_from_notes,
    get_line_subtotal, get_unit_price, normalize_cart_total
)
from app.modules.cart.schemas import BowlCustomization
from app.modules.credits.service import CreditService
from app.modules.employees.models import Empleado
from app.modules.menu.models import MenuItem
from app.modules.menu.service import ensure_menu_item_shape
from app.modules.orders.models import (
    ORDER_STATUS_FLOW, Order, OrderCreditType, OrderItem, OrderPaymentAllocation, OrderStatus
)
from app.modules.orders.schemas import (
    OrderCreate, OrderFilters, OrderItemIn, OrderPaymentState, OrderUpdate
)
from app.modules.payments.allocations import (
    CREDIT_PAYMENT_METHODS, determine_payment_status, format_payment_summary,
    get_allocations_total, get_order_allocations, get_primary_method, is_order_paid,
    merge_allocations, payment_matches_total, read_field, sanitize_allocations
)
from app.modules.payments.legacy import allocations_from_legacy_record
from app.modules.payments.schemas import PaymentAllocation, PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)

SETTLEMENT_METHODS = (PaymentMethod.EFECTIVO, PaymentMethod.NEQUI, PaymentMethod.TARJETA)

_datetime_adapter = TypeAdapter(datetime)


def _finite_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    number = to_number(value)
    return number if math.isfinite(number) else None


def _bowl_customization(value: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(value, dict):
        return None
    try:
        return BowlCustomization.model_validate(value).model_dump()
    except ValidationError:
        return None


def normalize_settlement_method(metodo: Any) -> PaymentMethod:
    """El crédito se salda en efectivo, Nequi o tarjeta; cualquier otro valor es efectivo."""
    for method in SETTLEMENT_METHODS:
        if metodo == method or metodo == method.value:
            return method
    return PaymentMethod.EFECTIVO


def get_order_payment_state(order: Order) -> OrderPaymentState:
    if order.has_credit:
        return OrderPaymentState.CREDIT_PENDING
    if is_order_paid(order):
        if order.credit_settled_at is not None:
            return OrderPaymentState.CREDIT_SETTLED
        return OrderPaymentState.PAID
    return OrderPaymentState.UNPAID


def order_to_response(order: Order) -> Dict[str, Any]:
    """Convierte una Order al formato OrderOut (pagos resueltos y subtotales)"""
    allocations = get_order_allocations(order)
    payment_status = determine_payment_status(order)

    credit_info = None
    if order.has_credit:
        credit_info = {
            "type": order.credit_type,
            "amount": order.credit_amount if order.credit_amount is not None else order.total,
            "assigned_at": order.credit_assigned_at or order.timestamp,
            "employee_id": order.credit_employee_id,
            "employee_name": order.credit_employee_name,
        }

    return {
        "id": order.id,
        "numero": order.numero,
        "total": order.total,
        "estado": order.estado,
        "timestamp": order.timestamp,
        "cliente": order.cliente,
        "metodo_pago": order.metodo_pago,
        "payment_status": payment_status,
        "is_paid": payment_status == PaymentStatus.PAGADO,
        "payment_state": get_order_payment_state(order),
        "payment_allocations": allocations,
        "payment_summary": format_payment_summary(allocations),
        "credit_info": credit_info,
        "items": [
            {
                "id": line.id,
                "item": line.item,
                "cantidad": line.cantidad,
                "precio_unitario": round_to_cop(get_unit_price(line)),
                "student_discount": line.student_discount,
                "notas": line.notas,
                "custom_key": line.custom_key,
                "bowl_customization": line.bowl_customization,
                "subtotal": round_to_cop(get_line_subtotal(line)),
            }
            for line in order.items
        ],
    }


class OrderService:
    """
    Servicio de órdenes de la caja

    Todas las operaciones retornan la Order actualizada o lanzan
    HTTPException (404 si no existe, 409 por conflicto de estado,
    422 por validación de negocio).
    """

    def __init__(self, db: Session):
        self.db = db
        self.credit_service = CreditService(db)

    # ===== CONSULTAS =====

    def _filtered_query(self, filters: OrderFilters):
        query = self.db.query(Order)
        if filters.estado:
            query = query.filter(Order.estado == filters.estado.value)
        if filters.date_from:
            query = query.filter(Order.timestamp >= datetime.combine(filters.date_from, time.min))
        if filters.date_to:
            query = query.filter(Order.timestamp < datetime.combine(filters.date_to + timedelta(days=1), time.min))
        return query.order_by(Order.timestamp.desc())

    def fetch_orders(self, filters: Optional[OrderFilters] = None) -> List[Order]:
        """
        Listar órdenes, de la más reciente a la más antigua

        El filtro por estado de pago usa el resolvedor de pagos (asignaciones
        registradas primero), no la columna almacenada.
        """
        filters = filters or OrderFilters()
        orders = self._filtered_query(filters).all()
        if filters.payment_status:
            orders = [order for order in orders if determine_payment_status(order) == filters.payment_status]
        return orders

    def fetch_orders_page(self, filters: Optional[OrderFilters] = None, limit: Optional[int] = None,
                          offset: int = 0) -> Tuple[List[Order], int]:
        """
        Página de órdenes y total de órdenes filtradas

        Sin filtro por estado de pago, offset/limit y el conteo se resuelven en
        la consulta; con él, la página se arma sobre el resultado del resolvedor.
        """
        filters = filters or OrderFilters()
        if filters.payment_status:
            orders = self.fetch_orders(filters)
            page = orders[offset:offset + limit] if limit else orders[offset:]
            return page, len(orders)

        query = self._filtered_query(filters)
        total = query.count()
        query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all(), total

    def get_order(self, order_id: str) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Orden no encontrada"
            )
        return order

    def get_payment_summary(self, order_id: str) -> Dict[str, Any]:
        order = self.get_order(order_id)
        allocations = get_order_allocations(order)
        payment_status = determine_payment_status(order)
        paid_total = get_allocations_total(allocations)
        pending_amount = 0 if payment_status == PaymentStatus.PAGADO else max(0, order.total - paid_total)
        return {
            "order_id": order.id,
            "total": order.total,
            "paid_total": paid_total,
            "pending_amount": pending_amount,
            "payment_status": payment_status,
            "primary_method": get_primary_method(allocations),
            "allocations": allocations,
            "summary": format_payment_summary(allocations),
        }

    # ===== LÍNEAS =====

    def _get_menu_items(self, items: List[OrderItemIn]) -> Dict[str, MenuItem]:
        ids = {line.menu_item_id for line in items}
        found = {item.id: item for item in self.db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()} if ids else {}
        missing = ids - set(found)
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Productos no encontrados: {', '.join(sorted(missing))}"
            )
        return found

    def _build_lines(self, items: List[OrderItemIn]) -> List[OrderItem]:
        """Líneas de la orden con el precio unitario capturado al vender."""
        menu_items = self._get_menu_items(items)
        lines = []
        for position, line in enumerate(items):
            menu_item = menu_items[line.menu_item_id]
            lines.append(OrderItem(
                menu_item_id=menu_item.id,
                item=menu_item,
                position=position,
                cantidad=line.cantidad,
                precio_unitario=line.precio_unitario if line.precio_unitario is not None else menu_item.precio,
                student_discount=line.student_discount,
                notas=line.notas,
                custom_key=line.custom_key,
                bowl_customization=line.bowl_customization.model_dump() if line.bowl_customization else None
            ))
        return lines

    def _set_allocations(self, order: Order, allocations: List[PaymentAllocation]) -> None:
        order.payment_allocations = [
            OrderPaymentAllocation(
                position=position,
                metodo=allocation.metodo.value,
                monto=allocation.monto,
                empleado_id=allocation.empleado_id,
                empleado_nombre=allocation.empleado_nombre
            )
            for position, allocation in enumerate(allocations)
        ]

    def _reverse_credit_allocations(self, order: Order) -> None:
        """Abona al libro los cargos de las asignaciones a crédito que se van a descartar."""
        for previous in order.payment_allocations:
            if previous.metodo == PaymentMethod.CREDITO_EMPLEADOS.value:
                self.credit_service.settle_employee_credit_balance(
                    previous.empleado_id, previous.monto, order.id, order.numero, commit=False
                )

    def _clear_credit(self, order: Order) -> None:
        order.credit_type = None
        order.credit_amount = None
        order.credit_assigned_at = None
        order.credit_employee_id = None
        order.credit_employee_name = None

    def _commit(self, order: Order, action: str) -> Order:
        try:
            self.db.commit()
            self.db.refresh(order)
            return order
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Error de integridad en base de datos"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error al {action} la orden {order.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    # ===== OPERACIONES =====

    def create_order(self, order_data: OrderCreate) -> Order:
        """
        Crear orden desde la caja

        El total se calcula con el motor de precios cuando hay líneas (con el
        redondeo de caja); sin líneas se normaliza el total recibido. Los pagos
        iniciales se sanean y el estado de pago se deriva con la holgura de
        ±1 peso salvo que venga explícito.
        """
        lines = self._build_lines(order_data.items)
        if lines:
            total = calculate_cart_total(lines)
        else:
            total = normalize_cart_total(order_data.total or 0)

        allocations = merge_allocations(sanitize_allocations(
            [entry.model_dump() for entry in order_data.payment_allocations]
        ))
        payment_status = order_data.payment_status or (
            PaymentStatus.PAGADO if payment_matches_total(allocations, total) else PaymentStatus.PENDIENTE
        )
        metodo_pago = get_primary_method(allocations) or order_data.metodo_pago

        order = Order(
            numero=order_data.numero if order_data.numero is not None else generate_order_number(),
            total=total,
            estado=OrderStatus.PENDIENTE.value,
            timestamp=order_data.timestamp or datetime.now(),
            cliente=order_data.cliente,
            metodo_pago=metodo_pago.value if metodo_pago else None,
            payment_status=payment_status.value,
            items=lines
        )
        self._set_allocations(order, allocations)
        self.db.add(order)
        order = self._commit(order, "crear")
        logger.info(f"Orden #{order.numero} creada ({order.id}) por {order.total}, pago {order.payment_status}")
        return order

    def update_order(self, order_id: str, update_data: OrderUpdate) -> Order:
        """
        Reemplaza las líneas y/o el total de la orden

        Cualquier cambio invalida el pago registrado: se borran las
        asignaciones y el estado de pago vuelve a 'pendiente'. Los cargos a
        crédito de empleados del pago descartado se reversan.
        """
        order = self.get_order(order_id)

        if update_data.items is not None:
            order.items = self._build_lines(update_data.items)
        if update_data.items:
            order.total = calculate_cart_total(order.items)
        elif update_data.total is not None:
            order.total = normalize_cart_total(update_data.total)

        self._reverse_credit_allocations(order)
        self._set_allocations(order, [])
        order.payment_status = PaymentStatus.PENDIENTE.value
        order.metodo_pago = None
        order = self._commit(order, "actualizar")
        logger.info(f"Orden #{order.numero} actualizada, total {order.total}; pago reiniciado")
        return order

    def update_order_status(self, order_id: str, estado: OrderStatus) -> Order:
        """
        Avanza el estado de preparación (pendiente → preparando → listo → entregado)

        Raises:
            HTTPException: 409 si el cambio retrocede o la orden ya fue entregada
        """
        order = self.get_order(order_id)
        current = OrderStatus(order.estado)
        if current == estado:
            return order

        if ORDER_STATUS_FLOW.index(estado) < ORDER_STATUS_FLOW.index(current):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"No se puede cambiar una orden '{current.value}' a '{estado.value}'"
            )

        order.estado = estado.value
        order = self._commit(order, "cambiar estado de")
        logger.info(f"Orden #{order.numero}: {current.value} -> {estado.value}")
        return order

    def delete_order(self, order_id: str) -> Dict[str, str]:
        order = self.get_order(order_id)
        try:
            self.db.delete(order)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando orden: {str(e)}"
            )
        logger.info(f"Orden eliminada: {order_id}")
        return {"message": "Orden eliminada exitosamente"}

    def record_order_payment(self, order_id: str, allocations: Any) -> Order:
        """
        Registra el pago de una orden con una o varias asignaciones

        Las asignaciones se sanean y consolidan. La orden queda 'pagado' si la
        suma está a ±1 peso del total, si no 'pendiente'. Las asignaciones a
        crédito de empleados generan un cargo en el libro de crédito; los
        cargos de un pago parcial anterior se reversan con un abono.

        Raises:
            HTTPException: 404 si el empleado de una asignación a crédito no
            existe, 409 si la orden ya está pagada o tiene un crédito de
            empleados pendiente, 422 si no queda ninguna asignación válida
        """
        order = self.get_order(order_id)
        if order.has_credit:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="La orden tiene un crédito de empleados pendiente; debe saldarse el crédito."
            )
        if is_order_paid(order):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="La orden ya está pagada."
            )

        merged = merge_allocations(sanitize_allocations(allocations, CREDIT_PAYMENT_METHODS))
        if not merged:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Debe seleccionar al menos un método de pago."
            )

        for allocation in merged:
            if allocation.metodo == PaymentMethod.CREDITO_EMPLEADOS and not self.db.get(Empleado, allocation.empleado_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Empleado no encontrado"
                )

        payment_status = PaymentStatus.PAGADO if payment_matches_total(merged, order.total) else PaymentStatus.PENDIENTE
        primary_method = get_primary_method(merged)

        self._reverse_credit_allocations(order)

        for allocation in merged:
            if allocation.metodo == PaymentMethod.CREDITO_EMPLEADOS:
                self.credit_service.add_employee_credit(
                    allocation.empleado_id, allocation.monto, order.id, order.numero, commit=False
                )

        self._set_allocations(order, merged)
        order.payment_status = payment_status.value
        order.metodo_pago = primary_method.value

        order = self._commit(order, "registrar el pago de")
        logger.info(
            f"Pago registrado en orden #{order.numero}: {get_allocations_total(merged)} de {order.total} "
            f"({payment_status.value})"
        )
        return order

    def assign_order_credit(self, order_id: str, amount: Optional[int] = None,
                            employee_id: Optional[str] = None, employee_name: Optional[str] = None) -> Order:
        """
        Envía la orden a crédito de empleados en lugar de cobrarla

        La orden queda entregada, sin asignaciones y con pago pendiente hasta
        que se salde el crédito. Si se indica empleado, el monto se carga a su
        saldo.

        Raises:
            HTTPException: 404 si el empleado no existe, 409 si la orden ya
            está pagada o ya tiene un crédito pendiente
        """
        order = self.get_order(order_id)
        if order.has_credit:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="La orden ya tiene un crédito de empleados pendiente."
            )
        if is_order_paid(order):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="La orden ya está pagada."
            )

        credit_amount = max(0, round_to_cop(amount if amount is not None else order.total))
        employee_id = (employee_id or "").strip() or None
        employee_name = (employee_name or "").strip() or None

        if employee_id:
            empleado = self.db.get(Empleado, employee_id)
            if not empleado:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Empleado no encontrado"
                )
            employee_name = employee_name or empleado.nombre
            self.credit_service.add_employee_credit(
                employee_id, credit_amount, order.id, order.numero, commit=False
            )

        order.estado = OrderStatus.ENTREGADO.value
        order.metodo_pago = PaymentMethod.CREDITO_EMPLEADOS.value
        order.payment_status = PaymentStatus.PENDIENTE.value
        self._set_allocations(order, [])
        order.credit_type = OrderCreditType.EMPLEADOS.value
        order.credit_amount = credit_amount
        order.credit_assigned_at = datetime.now()
        order.credit_employee_id = employee_id
        order.credit_employee_name = employee_name
        order.credit_settled_at = None

        order = self._commit(order, "asignar crédito a")
        logger.info(f"Orden #{order.numero} enviada a crédito de empleados por {credit_amount} (empleado {employee_id})")
        return order

    def settle_order_employee_credit(self, order_id: str, metodo: Any) -> Order:
        """
        Salda el crédito de empleados de una orden

        El método se normaliza a efectivo, Nequi o tarjeta. Se registra un
        abono en el libro de crédito y la orden queda pagada con una sola
        asignación por el monto del crédito.

        Raises:
            HTTPException: 409 si la orden no tiene crédito pendiente
        """
        order = self.get_order(order_id)
        if not order.has_credit:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="La orden no tiene un crédito de empleados pendiente."
            )

        credit_amount = max(0, round_to_cop(order.credit_amount if order.credit_amount is not None else order.total))
        settlement_method = normalize_settlement_method(metodo)

        if order.credit_employee_id:
            self.credit_service.settle_employee_credit_balance(
                order.credit_employee_id, credit_amount, order.id, order.numero, commit=False
            )

        allocations = [PaymentAllocation(metodo=settlement_method, monto=credit_amount)] if credit_amount > 0 else []
        self._set_allocations(order, allocations)
        order.estado = OrderStatus.ENTREGADO.value
        order.metodo_pago = settlement_method.value
        order.payment_status = PaymentStatus.PAGADO.value
        self._clear_credit(order)
        order.credit_settled_at = datetime.now()

        order = self._commit(order, "saldar el crédito de")
        logger.info(f"Crédito de la orden #{order.numero} saldado con {settlement_method.value} por {credit_amount}")
        return order

    # ===== IMPORTACIÓN =====

    def _parse_timestamp(self, value: Any) -> datetime:
        if value:
            try:
                parsed = _datetime_adapter.validate_python(value)
                # Se guardan en hora local sin zona
                return parsed.astimezone().replace(tzinfo=None) if parsed.tzinfo else parsed
            except ValidationError:
                logger.warning(f"Fecha inválida en registro importado: {value!r}")
        return datetime.now()

    def _resolve_menu_item(self, menu_record: Any) -> Optional[MenuItem]:
        """Busca el producto por id o código; si no existe lo crea desde el registro."""
        if not isinstance(menu_record, dict):
            return None
        item_id = read_field(menu_record, "id")
        codigo = read_field(menu_record, "codigo")
        if item_id:
            existing = self.db.get(MenuItem, str(item_id))
            if existing:
                return existing
        if codigo:
            existing = self.db.query(MenuItem).filter(MenuItem.codigo == str(codigo)).first()
            if existing:
                return existing

        nombre = read_field(menu_record, "nombre")
        if not nombre:
            return None
        data = ensure_menu_item_shape({
            "id": str(item_id) if item_id else None,
            "codigo": str(codigo) if codigo else None,
            "nombre": str(nombre),
            "precio": max(0, round_to_cop(read_field(menu_record, "precio"))),
            "descripcion": read_field(menu_record, "descripcion"),
            "keywords": read_field(menu_record, "keywords"),
            "categoria": str(read_field(menu_record, "categoria") or ""),
            "stock": round_to_cop(read_field(menu_record, "stock")),
            "inventario_categoria": read_field(menu_record, "inventario_categoria", "inventarioCategoria",
                                               "inventariocategoria"),
            "inventario_tipo": read_field(menu_record, "inventario_tipo", "inventarioTipo", "inventariotipo"),
            "unidad_medida": read_field(menu_record, "unidad_medida", "unidadMedida", "unidadmedida"),
        })
        menu_item = MenuItem(**{key: value for key, value in data.items() if value is not None})
        self.db.add(menu_item)
        self.db.flush()
        logger.info(f"Producto creado durante importación: {menu_item.id} ({menu_item.nombre})")
        return menu_item

    def _import_lines(self, record: Dict[str, Any]) -> List[OrderItem]:
        raw_lines = read_field(record, "order_items", "items")
        if not isinstance(raw_lines, list):
            return []

        lines = []
        for raw in raw_lines:
            if not isinstance(raw, dict):
                continue
            menu_record = read_field(raw, "menu_item", "menu_items", "item", "menuItem")
            menu_item = self._resolve_menu_item(menu_record)
            if menu_item is None:
                continue

            cantidad = round_to_cop(raw.get("cantidad"))
            if cantidad <= 0:
                continue

            raw_price = _finite_number(read_field(raw, "precio_unitario", "precioUnitario", "unit_price", "unitPrice"))
            precio_unitario = round_to_cop(raw_price) if raw_price is not None else menu_item.precio

            notas = raw.get("notas") if isinstance(raw.get("notas"), str) else None
            from_notes, cleaned_notes = extract_student_discount_from_notes(notas)
            explicit = read_field(raw, "student_discount", "studentDiscount")
            student_discount = explicit if isinstance(explicit, bool) else from_notes

            lines.append(OrderItem(
                menu_item_id=menu_item.id,
                item=menu_item,
                position=len(lines),
                cantidad=cantidad,
                precio_unitario=precio_unitario,
                student_discount=student_discount,
                notas=cleaned_notes,
                custom_key=read_field(raw, "custom_key", "customKey"),
                bowl_customization=_bowl_customization(read_field(raw, "bowl_customization", "bowlCustomization"))
            ))
        return lines

    def import_order_record(self, record: Dict[str, Any]) -> Order:
        """
        Importa un registro de orden heredado

        Es el único punto donde se leen las representaciones antiguas del pago
        (columnas pago_*, paymentAllocations o metodoPago + paymentStatus).
        Se convierten una vez a asignaciones normalizadas; el total es el de las
        líneas con redondeo de caja o, sin líneas, el total guardado.

        Raises:
            HTTPException: 409 si ya existe una orden con el mismo id
        """
        order_id = read_field(record, "id", "order_id")
        if order_id and self.db.get(Order, str(order_id)):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe una orden con el id '{order_id}'"
            )

        try:
            lines = self._import_lines(record)
            raw_computed = calculate_raw_cart_total(lines)
            stored_total = _finite_number(record.get("total"))
            if raw_computed > 0:
                total = normalize_cart_total(raw_computed)
            elif stored_total is not None and stored_total > 0:
                total = normalize_cart_total(stored_total)
            else:
                total = 0

            state = allocations_from_legacy_record(record, total)
            payment_status = state.payment_status or (
                PaymentStatus.PAGADO if payment_matches_total(state.allocations, total) else PaymentStatus.PENDIENTE
            )

            raw_estado = record.get("estado")
            estado = raw_estado if raw_estado in {s.value for s in OrderStatus} else OrderStatus.PENDIENTE.value
            numero = _finite_number(record.get("numero"))
            customer = record.get("customer")

            order = Order(
                numero=round_to_cop(numero) if numero is not None and numero > 0 else generate_order_number(),
                total=total,
                estado=estado,
                timestamp=self._parse_timestamp(record.get("timestamp")),
                cliente=(customer.get("nombre") if isinstance(customer, dict) else None) or record.get("cliente"),
                metodo_pago=state.metodo_pago.value if state.metodo_pago else None,
                payment_status=payment_status.value,
                items=lines
            )
            if order_id:
                order.id = str(order_id)
            self._set_allocations(order, state.allocations)

            credit = read_field(record, "credit_info", "creditInfo", "credit")
            if isinstance(credit, dict) and credit.get("type") == OrderCreditType.EMPLEADOS.value:
                credit_amount = read_field(credit, "amount")
                order.credit_type = OrderCreditType.EMPLEADOS.value
                order.credit_amount = round_to_cop(credit_amount) if credit_amount is not None else total
                order.credit_assigned_at = self._parse_timestamp(
                    read_field(credit, "assigned_at", "assignedAt") or order.timestamp
                )
                order.credit_employee_id = read_field(credit, "employee_id", "employeeId")
                order.credit_employee_name = read_field(credit, "employee_name", "employeeName")

            self.db.add(order)
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

        order = self._commit(order, "importar")
        logger.info(f"Orden #{order.numero} importada ({order.id}) con {len(order.payment_allocations)} asignaciones")
        return order
