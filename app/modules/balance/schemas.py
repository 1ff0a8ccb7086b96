from pydantic import BaseModel
from typing import List
from datetime import date


class BalanceResumen(BaseModel):
    fecha: date
    ingresos_totales: int
    egresos_totales: int
    balance_diario: int
    ingresos_efectivo: int
    egresos_efectivo: int
    ingresos_nequi: int
    egresos_nequi: int
    ingresos_tarjeta: int
    egresos_tarjeta: int
    saldo_efectivo_dia: int
    saldo_nequi_dia: int
    saldo_tarjeta_dia: int
    saldo_total_acumulado: int
    saldo_efectivo_acumulado: int
    saldo_nequi_acumulado: int
    saldo_tarjeta_acumulado: int


class BalanceList(BaseModel):
    dias: List[BalanceResumen]
    total: int
