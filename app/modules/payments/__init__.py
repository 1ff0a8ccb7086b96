"""
Módulo de Pagos - Savia POS

Modelo de asignación de pagos de las órdenes:

- Saneamiento de asignaciones (método permitido, monto entero positivo)
- Consolidación por método de pago
- Estado de pago de la orden (holgura de ±1 peso)
- Resumen legible para la caja ("Efectivo: $20.000 · Nequi: $5.000")
- Adaptador de registros heredados (metodoPago / columnas pago_*)

Este módulo NO crea tablas: las asignaciones se persisten con la orden
(orders.models.OrderPaymentAllocation).
"""
