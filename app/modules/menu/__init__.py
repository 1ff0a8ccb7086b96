"""
Módulo de Menú - Savia POS

Catálogo de productos de la cafetería (sándwiches, bowls, bebidas...):
- CRUD de productos con código generado a partir de categoría y nombre
- Búsqueda sin tildes por nombre, código, descripción y keywords
- Inventario por unidades o por peso (mg, g, kg); ajustes de stock que
  nunca dejan el stock en negativo
"""
