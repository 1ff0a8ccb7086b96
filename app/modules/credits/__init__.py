"""
Módulo de Crédito de Empleados - Savia POS

Los consumos de los empleados pueden cargarse a su crédito en lugar de
pagarse en el momento. Cada movimiento es un cargo (suma al saldo) o un
abono (resta); el saldo se reconstruye recorriendo el historial.
"""
