"""
Módulo de Balance - Savia POS

Balance diario de caja: ingresos de órdenes pagadas menos gastos, por día y
por método (efectivo, Nequi, tarjeta), con saldos acumulados.
"""
