from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, Any, List, Optional
import logging

from app.common.formatters import round_to_cop
from app.modules.employees.hours import (
    WeeklyHoursCache, build_weekly_hours_from_base, ensure_schedule, ensure_weekly_hours_shape,
    ensure_weekly_schedule_shape,
    estimate_monthly_hours, estimate_monthly_salary, format_difference, format_week_range,
    is_valid_week_key, normalize_weekly_hours, normalize_weekly_schedule, summarize_week
)
from app.modules.employees.models import Empleado, EmployeeWeeklyHours
from app.modules.employees.schemas import EmpleadoCreate, EmpleadoUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    """Servicio para empleados, horarios base y horas semanales"""

    def __init__(self, db: Session):
        self.db = db

    # ===== CRUD =====

    def fetch_empleados(self, only_active: bool = False) -> Dict[str, Any]:
        query = self.db.query(Empleado)
        if only_active:
            query = query.filter(Empleado.activo.is_(True))
        empleados = query.order_by(Empleado.nombre).all()
        return {"empleados": empleados, "total": len(empleados)}

    def get_empleado(self, empleado_id: str) -> Empleado:
        empleado = self.db.query(Empleado).filter(Empleado.id == empleado_id).first()
        if not empleado:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Empleado no encontrado"
            )
        return empleado

    def create_empleado(self, empleado_data: EmpleadoCreate) -> Empleado:
        try:
            empleado = Empleado(**empleado_data.model_dump())
            self.db.add(empleado)
            self.db.commit()
            self.db.refresh(empleado)
            logger.info(f"Empleado creado: {empleado.id} ({empleado.nombre})")
            return empleado
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    def update_empleado(self, empleado_id: str, update_data: EmpleadoUpdate) -> Empleado:
        try:
            empleado = self.get_empleado(empleado_id)
            for field, value in update_data.model_dump(exclude_unset=True).items():
                setattr(empleado, field, value)
            self.db.commit()
            self.db.refresh(empleado)
            return empleado
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando empleado: {str(e)}"
            )

    def delete_empleado(self, empleado_id: str) -> Dict[str, str]:
        try:
            empleado = self.get_empleado(empleado_id)
            self.db.delete(empleado)
            self.db.commit()
            logger.info(f"Empleado eliminado: {empleado_id}")
            return {"message": "Empleado eliminado exitosamente"}
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando empleado: {str(e)}"
            )

    # ===== HORARIO BASE =====

    def fetch_base_schedules(self) -> Dict[str, Dict[str, Any]]:
        """Horarios base guardados, por empleado (se omiten los vacíos o inválidos)."""
        result = {}
        for empleado in self.db.query(Empleado).all():
            normalized = normalize_weekly_schedule(empleado.horario_base)
            if normalized:
                result[empleado.id] = normalized
        return result

    def get_base_schedule(self, empleado: Empleado) -> Dict[str, Any]:
        """Horario base guardado o, si no existe, el derivado de horas_dia y dias_semana."""
        return ensure_schedule(empleado, normalize_weekly_schedule(empleado.horario_base))

    def save_base_schedule(self, empleado_id: str, schedule: Dict[str, Any]) -> Empleado:
        try:
            empleado = self.get_empleado(empleado_id)
            empleado.horario_base = ensure_weekly_schedule_shape(schedule)
            self.db.commit()
            self.db.refresh(empleado)
            logger.info(f"Horario base guardado para empleado {empleado_id}")
            return empleado
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    # ===== HORAS SEMANALES =====

    def _validate_week_key(self, week_key: str) -> None:
        if not is_valid_week_key(week_key):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Semana inválida: '{week_key}' (formato esperado 2025-W05)"
            )

    def save_weekly_hours(self, empleado_id: str, week_key: str, horas: Dict[str, Any],
                          cache: Optional[WeeklyHoursCache] = None) -> EmployeeWeeklyHours:
        """
        Guarda (o reemplaza) las horas registradas de un empleado en una semana

        Raises:
            HTTPException: 404 si el empleado no existe, 422 si la semana es inválida
        """
        self._validate_week_key(week_key)
        try:
            self.get_empleado(empleado_id)
            sanitized = ensure_weekly_hours_shape(horas)

            record = self.db.query(EmployeeWeeklyHours).filter(
                EmployeeWeeklyHours.empleado_id == empleado_id,
                EmployeeWeeklyHours.week_key == week_key
            ).first()
            if record:
                record.horas = sanitized
            else:
                record = EmployeeWeeklyHours(empleado_id=empleado_id, week_key=week_key, horas=sanitized)
                self.db.add(record)

            self.db.commit()
            self.db.refresh(record)
            if cache is not None:
                cache.store(empleado_id, week_key, sanitized)
            logger.info(f"Horas semanales guardadas: empleado {empleado_id}, semana {week_key}")
            return record
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    def _load_week(self, week_key: str) -> Dict[str, Dict[str, float]]:
        records = self.db.query(EmployeeWeeklyHours).filter(EmployeeWeeklyHours.week_key == week_key).all()
        result = {}
        for record in records:
            normalized = normalize_weekly_hours(record.horas)
            if normalized:
                result[record.empleado_id] = normalized
        return result

    def fetch_weekly_hours_for_week(self, week_key: str,
                                    cache: Optional[WeeklyHoursCache] = None) -> Dict[str, Dict[str, float]]:
        """Horas registradas de todos los empleados en una semana."""
        self._validate_week_key(week_key)
        if cache is not None:
            return cache.load(week_key, self._load_week)
        return self._load_week(week_key)

    def fetch_weekly_hours(self, empleado_id: str, week_key: str) -> Optional[Dict[str, float]]:
        self._validate_week_key(week_key)
        record = self.db.query(EmployeeWeeklyHours).filter(
            EmployeeWeeklyHours.empleado_id == empleado_id,
            EmployeeWeeklyHours.week_key == week_key
        ).first()
        return normalize_weekly_hours(record.horas) if record else None

    def fetch_weekly_hours_history(self, empleado_id: str) -> Dict[str, Dict[str, float]]:
        """Historial de semanas registradas, de la más reciente a la más antigua."""
        self.get_empleado(empleado_id)
        records = self.db.query(EmployeeWeeklyHours).filter(
            EmployeeWeeklyHours.empleado_id == empleado_id
        ).order_by(EmployeeWeeklyHours.week_key.desc()).all()

        history = {}
        for record in records:
            normalized = normalize_weekly_hours(record.horas)
            if normalized:
                history[record.week_key] = normalized
        return history

    def get_week_summary(self, week_key: str, cache: Optional[WeeklyHoursCache] = None) -> List[Dict[str, Any]]:
        """
        Resumen semanal de los empleados activos: horario base, horas
        registradas (o las del horario base si no hay registro), diferencia
        y estimación mensual de horas y salario.
        """
        week_hours = self.fetch_weekly_hours_for_week(week_key, cache)
        summaries = []
        for empleado in self.fetch_empleados(only_active=True)["empleados"]:
            schedule = self.get_base_schedule(empleado)
            registered = week_hours.get(empleado.id)
            totals = summarize_week(schedule, registered)
            summaries.append({
                "empleado_id": empleado.id,
                "nombre": empleado.nombre,
                "week_key": week_key,
                "week_range": format_week_range(week_key),
                "horario_base": schedule,
                "horas": registered if registered is not None else build_weekly_hours_from_base(schedule),
                "registrado": registered is not None,
                "total_base": totals["total_base"],
                "total_worked": totals["total_worked"],
                "difference": totals["difference"],
                "difference_label": format_difference(totals["difference"]),
                "monthly_hours": estimate_monthly_hours(schedule),
                "monthly_salary": round_to_cop(estimate_monthly_salary(schedule, empleado.salario_hora)),
            })
        return summaries
