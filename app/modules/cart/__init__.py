"""
Módulo de Carrito - Savia POS

- Precio unitario / precio efectivo con descuento estudiante (10%, solo sándwiches)
- Subtotales y total con redondeo de caja (terminación en 50 sube 50)
- Edición del carrito de la caja
- Personalización del Bowl salado
"""
