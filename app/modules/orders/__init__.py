"""
Módulo de Órdenes - Savia POS

Ciclo de vida de una orden:
    pendiente → preparando → listo → entregado

El pago es independiente del estado de preparación:
- Una orden se paga con una o varias asignaciones (efectivo, tarjeta, Nequi)
- Se considera pagada cuando la suma está a ±1 peso del total
- Alternativamente se envía a crédito de empleados y queda pendiente hasta
  que se salda (abono en efectivo, Nequi o tarjeta)

El total de una orden con líneas siempre se recalcula con el motor de
precios del carrito, incluido el redondeo de caja.

Los registros heredados se importan una sola vez por /orders/import, que
convierte cualquiera de las representaciones antiguas del pago en
asignaciones.
"""
