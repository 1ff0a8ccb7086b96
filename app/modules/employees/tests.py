"""
Tests para el módulo de Empleados

Cubre:
- Claves de semana ISO y rangos legibles
- Horario base por defecto y normalización
- Resumen semanal (horas base vs registradas) y estimación mensual
- Caché de horas semanales
- Endpoints de empleados, horarios y horas
"""

from datetime import date
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.modules.employees.hours import (
    WeeklyHoursCache, build_default_schedule, calculate_iso_week_key, ensure_schedule,
    ensure_weekly_schedule_shape, estimate_monthly_hours, format_difference, format_hours,
    format_week_range, get_start_of_week, is_valid_week_key, normalize_weekly_hours,
    normalize_weekly_schedule, schedules_are_equal, summarize_week
)
from app.modules.employees.service import EmployeeService


FULL_WEEK_HOURS = {
    "monday": 9, "tuesday": 8, "wednesday": 8, "thursday": 8, "friday": 8, "saturday": 0, "sunday": 0
}


class TestWeekKeys:
    """Tests de claves de semana"""

    def test_iso_week_key(self):
        assert calculate_iso_week_key(date(2025, 1, 29)) == "2025-W05"
        assert calculate_iso_week_key(date(2024, 12, 30)) == "2025-W01"

    def test_start_of_week_is_monday(self):
        assert get_start_of_week("2025-W10") == date(2025, 3, 3)

    def test_week_range(self):
        assert format_week_range("2025-W10") == "3 mar - 9 mar"
        assert format_week_range("2025-W05") == "27 ene - 2 feb"
        assert format_week_range("semana") == "semana"

    def test_valid_week_key(self):
        assert is_valid_week_key("2025-W05")
        assert not is_valid_week_key("2025-W60")
        assert not is_valid_week_key("2025-05")


class TestSchedules:
    """Tests de horarios base"""

    def test_default_schedule_from_employee(self):
        schedule = build_default_schedule(SimpleNamespace(horas_dia=6, dias_semana=3))
        assert schedule["wednesday"] == {"active": True, "hours": 6.0}
        assert schedule["thursday"] == {"active": False, "hours": 0.0}

    def test_inactive_days_have_zero_hours(self):
        shaped = ensure_weekly_schedule_shape({"monday": {"active": False, "hours": 8}, "tuesday": {"active": True}})
        assert shaped["monday"]["hours"] == 0
        assert shaped["tuesday"] == {"active": True, "hours": 0.0}
        assert len(shaped) == 7

    def test_ensure_schedule_fills_missing_days(self):
        empleado = SimpleNamespace(horas_dia=8, dias_semana=5)
        schedule = ensure_schedule(empleado, {"monday": {"active": True, "hours": 4}})
        assert schedule["monday"]["hours"] == 4
        assert schedule["tuesday"]["hours"] == 8

    def test_normalize_rejects_empty(self):
        assert normalize_weekly_schedule({"lunes": {}}) is None
        assert normalize_weekly_schedule("x") is None
        assert normalize_weekly_hours({}) is None
        assert normalize_weekly_hours({"monday": "7.5"})["monday"] == 7.5

    def test_schedules_are_equal(self):
        a = build_default_schedule(SimpleNamespace(horas_dia=8, dias_semana=5))
        b = ensure_weekly_schedule_shape(a)
        assert schedules_are_equal(a, b)
        b["friday"]["hours"] = 7
        assert not schedules_are_equal(a, b)


class TestWeekSummary:
    """Tests de resumen semanal"""

    def test_without_record_matches_base(self):
        schedule = build_default_schedule(SimpleNamespace(horas_dia=8, dias_semana=5))
        assert summarize_week(schedule, None) == {"total_base": 40, "total_worked": 40, "difference": 0}

    def test_with_record(self):
        schedule = build_default_schedule(SimpleNamespace(horas_dia=8, dias_semana=5))
        totals = summarize_week(schedule, FULL_WEEK_HOURS)
        assert totals["difference"] == 1

    def test_monthly_estimate(self):
        schedule = build_default_schedule(SimpleNamespace(horas_dia=8, dias_semana=5))
        assert estimate_monthly_hours(schedule) == pytest.approx(173.2)

    def test_format_hours(self):
        assert format_hours(8) == "8"
        assert format_hours(7.5) == "7,5"
        assert format_hours(7.25) == "7,25"

    def test_format_difference(self):
        assert format_difference(0.001) == "Sin variación"
        assert format_difference(2) == "+2 h vs base"
        assert format_difference(-1.5) == "-1,5 h vs base"


class TestWeeklyHoursCache:
    """Tests de la caché de horas"""

    def test_loads_once(self):
        calls = []

        def loader(week_key):
            calls.append(week_key)
            return {"e-1": {"monday": 8}}

        cache = WeeklyHoursCache()
        cache.load("2025-W05", loader)
        cache.load("2025-W05", loader)
        assert calls == ["2025-W05"]
        assert cache.is_loaded("2025-W05")

    def test_store_only_updates_loaded_weeks(self):
        cache = WeeklyHoursCache()
        cache.store("e-1", "2025-W05", {"monday": 8})
        assert not cache.is_loaded("2025-W05")

        cache.load("2025-W06", lambda week_key: {})
        cache.store("e-1", "2025-W06", {"monday": 8})
        assert cache.get_week("2025-W06") == {"e-1": {"monday": 8}}

        cache.invalidate("2025-W06")
        assert not cache.is_loaded("2025-W06")


class TestEmployeeService:
    """Tests del servicio de empleados"""

    def test_save_weekly_hours_upserts(self, db_session, empleado):
        employee_service = EmployeeService(db_session)
        employee_service.save_weekly_hours(empleado.id, "2025-W05", {"monday": 4})
        employee_service.save_weekly_hours(empleado.id, "2025-W05", FULL_WEEK_HOURS)
        history = employee_service.fetch_weekly_hours_history(empleado.id)
        assert list(history) == ["2025-W05"]
        assert history["2025-W05"]["monday"] == 9

    def test_save_updates_loaded_cache(self, db_session, empleado):
        employee_service = EmployeeService(db_session)
        cache = WeeklyHoursCache()
        assert employee_service.fetch_weekly_hours_for_week("2025-W05", cache) == {}
        employee_service.save_weekly_hours(empleado.id, "2025-W05", FULL_WEEK_HOURS, cache)
        assert cache.get_week("2025-W05")[empleado.id]["monday"] == 9

    def test_invalid_week_key(self, db_session, empleado):
        with pytest.raises(HTTPException) as exc_info:
            EmployeeService(db_session).save_weekly_hours(empleado.id, "2025-13", FULL_WEEK_HOURS)
        assert exc_info.value.status_code == 422

    def test_week_summary(self, db_session, empleado):
        employee_service = EmployeeService(db_session)
        employee_service.save_weekly_hours(empleado.id, "2025-W05", FULL_WEEK_HOURS)
        summary = employee_service.get_week_summary("2025-W05")
        assert len(summary) == 1
        assert summary[0]["registrado"] is True
        assert summary[0]["difference_label"] == "+1 h vs base"
        assert summary[0]["monthly_salary"] == 1212400


class TestEmployeeEndpoints:
    """Tests de los endpoints de empleados"""

    def test_create_and_list(self, client):
        response = client.post("/api/v1/employees/", json={"nombre": "Carlos", "salario_hora": 6500})
        assert response.status_code == 201
        assert response.json()["horas_dia"] == 8

        response = client.get("/api/v1/employees/")
        assert response.json()["total"] == 1

    def test_base_schedule(self, client, empleado):
        response = client.put(f"/api/v1/employees/{empleado.id}/schedule", json={
            "schedule": {"monday": {"active": True, "hours": 6}, "sunday": {"active": True, "hours": 4}}
        })
        assert response.status_code == 200
        schedules = client.get("/api/v1/employees/schedules").json()
        assert schedules[empleado.id]["monday"]["hours"] == 6
        assert schedules[empleado.id]["tuesday"]["active"] is False

    def test_weekly_hours(self, client, empleado):
        response = client.put(f"/api/v1/employees/{empleado.id}/hours/2025-W05", json={"horas": FULL_WEEK_HOURS})
        assert response.status_code == 200
        week = client.get("/api/v1/employees/weeks/2025-W05").json()
        assert week[empleado.id]["monday"] == 9

    def test_current_week_summary(self, client, empleado):
        response = client.get("/api/v1/employees/weeks/current/summary")
        assert response.status_code == 200
        assert response.json()[0]["registrado"] is False

    def test_missing_employee(self, client):
        assert client.get("/api/v1/employees/no-existe").status_code == 404
