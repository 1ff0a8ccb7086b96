"""
Módulo de Gastos - Savia POS

Egresos de caja con método de pago (efectivo, tarjeta, Nequi o provisión
de caja). Un método desconocido se registra como efectivo.
"""
