"""
Módulo de Empleados - Savia POS

- CRUD de empleados (horas por día, días por semana, salario por hora)
- Horario base semanal por empleado
- Registro de horas trabajadas por semana ISO (2025-W05) con upsert
- Resumen semanal: horas base vs registradas y estimación mensual
  (horas × 4.33 semanas, salario = horas × salario_hora)
"""
