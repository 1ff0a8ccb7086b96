from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, Any, List, Optional
from datetime import date
import logging

from app.modules.expenses.models import Gasto
from app.modules.expenses.schemas import GastoCreate, GastoUpdate

logger = logging.getLogger(__name__)


class ExpenseService:
    """Servicio de gastos (egresos de caja)"""

    def __init__(self, db: Session):
        self.db = db

    def fetch_gastos(self, date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[Gasto]:
        """Gastos del rango de fechas (inclusive), del más reciente al más antiguo."""
        query = self.db.query(Gasto)
        if date_from:
            query = query.filter(Gasto.fecha >= date_from)
        if date_to:
            query = query.filter(Gasto.fecha <= date_to)
        return query.order_by(Gasto.fecha.desc(), Gasto.created_at.desc()).all()

    def list_gastos(self, date_from: Optional[date] = None, date_to: Optional[date] = None) -> Dict[str, Any]:
        gastos = self.fetch_gastos(date_from, date_to)
        return {"gastos": gastos, "total": len(gastos), "total_monto": sum(gasto.monto for gasto in gastos)}

    def get_gasto(self, gasto_id: str) -> Gasto:
        gasto = self.db.query(Gasto).filter(Gasto.id == gasto_id).first()
        if not gasto:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Gasto no encontrado"
            )
        return gasto

    def create_gasto(self, gasto_data: GastoCreate) -> Gasto:
        try:
            data = gasto_data.model_dump()
            data["metodo_pago"] = gasto_data.metodo_pago.value
            gasto = Gasto(**data)
            self.db.add(gasto)
            self.db.commit()
            self.db.refresh(gasto)
            logger.info(f"Gasto registrado: {gasto.descripcion} por {gasto.monto} ({gasto.metodo_pago})")
            return gasto
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    def update_gasto(self, gasto_id: str, update_data: GastoUpdate) -> Gasto:
        try:
            gasto = self.get_gasto(gasto_id)
            for field, value in update_data.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                setattr(gasto, field, value.value if field == "metodo_pago" else value)
            self.db.commit()
            self.db.refresh(gasto)
            return gasto
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando gasto: {str(e)}"
            )

    def delete_gasto(self, gasto_id: str) -> Dict[str, str]:
        try:
            gasto = self.get_gasto(gasto_id)
            self.db.delete(gasto)
            self.db.commit()
            logger.info(f"Gasto eliminado: {gasto_id}")
            return {"message": "Gasto eliminado exitosamente"}
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando gasto: {str(e)}"
            )
