from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class DaySchedule(BaseModel):
    active: bool = False
    hours: float = Field(0, ge=0)


class EmpleadoBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=150)
    telefono: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=150)
    horas_dia: float = Field(8, ge=0, le=24)
    dias_semana: int = Field(5, ge=0, le=7)
    salario_hora: int = Field(0, ge=0, description="Salario por hora en COP")
    activo: bool = True


class EmpleadoCreate(EmpleadoBase):
    pass


class EmpleadoUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=150)
    telefono: Optional[str] = None
    email: Optional[str] = None
    horas_dia: Optional[float] = Field(None, ge=0, le=24)
    dias_semana: Optional[int] = Field(None, ge=0, le=7)
    salario_hora: Optional[int] = Field(None, ge=0)
    activo: Optional[bool] = None


class EmpleadoOut(EmpleadoBase):
    id: str
    horario_base: Optional[Dict[str, DaySchedule]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmpleadoList(BaseModel):
    empleados: List[EmpleadoOut]
    total: int


class BaseScheduleIn(BaseModel):
    schedule: Dict[str, DaySchedule]


class WeeklyHoursIn(BaseModel):
    horas: Dict[str, float]


class WeeklyHoursOut(BaseModel):
    empleado_id: str
    week_key: str
    horas: Dict[str, float]

    class Config:
        from_attributes = True


class WeekSummaryOut(BaseModel):
    """Resumen de una semana por empleado (horas base vs registradas)"""
    empleado_id: str
    nombre: str
    week_key: str
    week_range: str
    horario_base: Dict[str, DaySchedule]
    horas: Dict[str, float]
    registrado: bool = Field(description="Si la semana tiene horas registradas")
    total_base: float
    total_worked: float
    difference: float
    difference_label: str
    monthly_hours: float
    monthly_salary: int
