"""
Horarios y horas semanales de empleados

Un horario base (WeeklySchedule) indica por día si el empleado trabaja y
cuántas horas: {"monday": {"active": True, "hours": 8}, ...}.
Las horas registradas de una semana (WeeklyHours) son solo números por día:
{"monday": 8, "tuesday": 7.5, ...}.

Las semanas se identifican con la clave ISO "2025-W05".
"""

import math
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional

DAY_KEYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

SHORT_MONTHS_ES = ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic")

# Promedio de semanas por mes
WEEKS_PER_MONTH = 4.33

WeeklySchedule = Dict[str, Dict[str, Any]]
WeeklyHours = Dict[str, float]


# ===== SEMANAS =====

def calculate_iso_week_key(value: date) -> str:
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def get_current_week_key() -> str:
    return calculate_iso_week_key(date.today())


def get_start_of_week(week_key: str) -> date:
    """Lunes de la semana ISO indicada."""
    year_str, week_str = week_key.split("-W")
    return date.fromisocalendar(int(year_str), int(week_str), 1)


def get_end_of_week(start: date) -> date:
    return start + timedelta(days=6)


def is_valid_week_key(week_key: str) -> bool:
    try:
        get_start_of_week(week_key)
    except (ValueError, TypeError):
        return False
    return True


def format_week_range(week_key: str) -> str:
    """"3 mar - 9 mar"; si la clave no es válida se retorna tal cual."""
    try:
        start = get_start_of_week(week_key)
    except (ValueError, TypeError):
        return week_key
    end = get_end_of_week(start)
    return f"{start.day} {SHORT_MONTHS_ES[start.month - 1]} - {end.day} {SHORT_MONTHS_ES[end.month - 1]}"


# ===== NORMALIZACIÓN =====

def _to_hours(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def ensure_weekly_schedule_shape(schedule: Optional[Dict[str, Any]]) -> WeeklySchedule:
    """Todos los días presentes; los días inactivos tienen 0 horas."""
    schedule = schedule or {}
    normalized = {}
    for day in DAY_KEYS:
        entry = schedule.get(day) or {}
        active = bool(entry.get("active")) if isinstance(entry, dict) else False
        hours = _to_hours(entry.get("hours")) if active else 0.0
        normalized[day] = {"active": active, "hours": hours}
    return normalized


def ensure_weekly_hours_shape(hours: Optional[Dict[str, Any]]) -> WeeklyHours:
    hours = hours or {}
    return {day: _to_hours(hours.get(day)) for day in DAY_KEYS}


def normalize_weekly_schedule(value: Any) -> Optional[WeeklySchedule]:
    """Como ensure_weekly_schedule_shape, pero None si no hay ningún día válido."""
    if not isinstance(value, dict):
        return None
    if not any(isinstance(value.get(day), dict) for day in DAY_KEYS):
        return None
    return ensure_weekly_schedule_shape(value)


def normalize_weekly_hours(value: Any) -> Optional[WeeklyHours]:
    if not isinstance(value, dict):
        return None
    if all(value.get(day) is None for day in DAY_KEYS):
        return None
    return ensure_weekly_hours_shape(value)


# ===== HORARIOS =====

def schedules_are_equal(a: WeeklySchedule, b: WeeklySchedule) -> bool:
    for day in DAY_KEYS:
        day_a = a.get(day) or {}
        day_b = b.get(day) or {}
        if bool(day_a.get("active")) != bool(day_b.get("active")):
            return False
        if _to_hours(day_a.get("hours")) != _to_hours(day_b.get("hours")):
            return False
    return True


def build_default_schedule(empleado: Any) -> WeeklySchedule:
    """Los primeros dias_semana días (desde el lunes) con horas_dia horas."""
    schedule = {}
    for index, day in enumerate(DAY_KEYS):
        active = index < (empleado.dias_semana or 0)
        schedule[day] = {"active": active, "hours": float(empleado.horas_dia or 0) if active else 0.0}
    return schedule


def ensure_schedule(empleado: Any, stored: Optional[Dict[str, Any]] = None) -> WeeklySchedule:
    """Horario guardado, completando los días faltantes con el horario por defecto."""
    base = build_default_schedule(empleado)
    if not stored:
        return base
    ensured = {}
    for day in DAY_KEYS:
        existing = stored.get(day)
        if isinstance(existing, dict):
            active = bool(existing.get("active"))
            ensured[day] = {"active": active, "hours": _to_hours(existing.get("hours")) if active else 0.0}
        else:
            ensured[day] = base[day]
    return ensured


def build_weekly_hours_from_base(schedule: WeeklySchedule) -> WeeklyHours:
    return {
        day: _to_hours(schedule[day].get("hours")) if schedule[day].get("active") else 0.0
        for day in DAY_KEYS
    }


def sum_weekly_hours(hours: Dict[str, Any]) -> float:
    return sum(_to_hours(hours.get(day)) for day in DAY_KEYS)


def estimate_monthly_hours(schedule: WeeklySchedule) -> float:
    return sum_weekly_hours(build_weekly_hours_from_base(schedule)) * WEEKS_PER_MONTH


def estimate_monthly_salary(schedule: WeeklySchedule, salario_hora: float) -> float:
    return estimate_monthly_hours(schedule) * (salario_hora or 0)


def summarize_week(schedule: WeeklySchedule, hours: Optional[WeeklyHours]) -> Dict[str, float]:
    """
    Compara las horas registradas contra el horario base.
    Sin registro, la semana se asume igual al horario base.
    """
    base_hours = build_weekly_hours_from_base(schedule)
    worked = hours if hours is not None else base_hours
    total_base = sum_weekly_hours(base_hours)
    total_worked = sum_weekly_hours(worked)
    return {
        "total_base": total_base,
        "total_worked": total_worked,
        "difference": total_worked - total_base,
    }


# ===== FORMATO =====

def format_hours(hours: float) -> str:
    """8 -> "8"; 7.5 -> "7,5"; 7.25 -> "7,25"."""
    normalized = 0.0 if hours is None or math.isnan(hours) else hours
    if abs(math.fmod(normalized, 1)) < 0.01:
        return str(math.floor(normalized + 0.5))
    formatted = f"{normalized:.2f}"
    if formatted.endswith("0"):
        formatted = formatted[:-1]
    return formatted.replace(".", ",")


def format_difference(value: float) -> str:
    if abs(value) < 0.01:
        return "Sin variación"
    sign = "+" if value > 0 else "-"
    return f"{sign}{format_hours(abs(value))} h vs base"


# ===== CACHÉ =====

class WeeklyHoursCache:
    """
    Caché de horas semanales que pertenece a quien la usa (una petición,
    una pantalla). Recuerda qué semanas ya se cargaron para no consultarlas
    de nuevo.
    """

    def __init__(self):
        self._weeks: Dict[str, Dict[str, WeeklyHours]] = {}

    def is_loaded(self, week_key: str) -> bool:
        return week_key in self._weeks

    def get_week(self, week_key: str) -> Dict[str, WeeklyHours]:
        return dict(self._weeks.get(week_key, {}))

    def load(self, week_key: str, loader: Callable[[str], Dict[str, WeeklyHours]]) -> Dict[str, WeeklyHours]:
        if week_key not in self._weeks:
            self._weeks[week_key] = dict(loader(week_key))
        return self.get_week(week_key)

    def store(self, empleado_id: str, week_key: str, hours: WeeklyHours) -> None:
        # Una semana no cargada se consultará completa en el próximo load
        if week_key in self._weeks:
            self._weeks[week_key][empleado_id] = hours

    def invalidate(self, week_key: Optional[str] = None) -> None:
        if week_key is None:
            self._weeks.clear()
        else:
            self._weeks.pop(week_key, None)
