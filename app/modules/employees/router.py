from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Dict, List
from app.database.database import get_db
from app.modules.employees import service
from app.modules.employees.hours import get_current_week_key
from app.modules.employees.schemas import (
    BaseScheduleIn, DaySchedule, EmpleadoCreate, EmpleadoList, EmpleadoOut, EmpleadoUpdate,
    WeeklyHoursIn, WeeklyHoursOut, WeekSummaryOut
)

employees_router = APIRouter(prefix="/employees", tags=["Employees"])


@employees_router.get("/", response_model=EmpleadoList)
def list_empleados(
    only_active: bool = Query(False),
    db: Session = Depends(get_db)
):
    employee_service = service.EmployeeService(db)
    return employee_service.fetch_empleados(only_active)


@employees_router.post("/", response_model=EmpleadoOut, status_code=status.HTTP_201_CREATED)
def create_empleado(empleado: EmpleadoCreate, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.create_empleado(empleado)


@employees_router.get("/schedules", response_model=Dict[str, Dict[str, DaySchedule]])
def list_base_schedules(db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.fetch_base_schedules()


@employees_router.get("/weeks/{week_key}", response_model=Dict[str, Dict[str, float]])
def get_week_hours(week_key: str, db: Session = Depends(get_db)):
    """Horas registradas de todos los empleados en la semana (clave ISO, ej: 2025-W05)."""
    employee_service = service.EmployeeService(db)
    return employee_service.fetch_weekly_hours_for_week(week_key)


@employees_router.get("/weeks/{week_key}/summary", response_model=List[WeekSummaryOut])
def get_week_summary(week_key: str, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    if week_key == "current":
        week_key = get_current_week_key()
    return employee_service.get_week_summary(week_key)


@employees_router.get("/{empleado_id}", response_model=EmpleadoOut)
def get_empleado(empleado_id: str, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.get_empleado(empleado_id)


@employees_router.patch("/{empleado_id}", response_model=EmpleadoOut)
def update_empleado(empleado_id: str, update: EmpleadoUpdate, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.update_empleado(empleado_id, update)


@employees_router.delete("/{empleado_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_empleado(empleado_id: str, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    employee_service.delete_empleado(empleado_id)


@employees_router.put("/{empleado_id}/schedule", response_model=EmpleadoOut)
def save_base_schedule(empleado_id: str, request: BaseScheduleIn, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    schedule = {day: entry.model_dump() for day, entry in request.schedule.items()}
    return employee_service.save_base_schedule(empleado_id, schedule)


@employees_router.put("/{empleado_id}/hours/{week_key}", response_model=WeeklyHoursOut)
def save_weekly_hours(empleado_id: str, week_key: str, request: WeeklyHoursIn, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.save_weekly_hours(empleado_id, week_key, request.horas)


@employees_router.get("/{empleado_id}/hours", response_model=Dict[str, Dict[str, float]])
def get_weekly_hours_history(empleado_id: str, db: Session = Depends(get_db)):
    employee_service = service.EmployeeService(db)
    return employee_service.fetch_weekly_hours_history(empleado_id)
