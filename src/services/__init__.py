# src/services/__init__.py
"""
Компоненты carpool API.

Архитектура:
- Одно FastAPI-приложение (api), роутеры компонентов под /api/v1
- Общая PostgreSQL, Redis для одноразовых токенов сброса пароля
- Каждый компонент: repository (SQL), service (правила), routes, dependencies

Компоненты:
- accounts: пользователи, вход, сброс пароля, статус водителя
- vehicles: автомобили водителей
- rides: жизненный цикл поездки + история событий
- bookings: бронирование мест
- payments: платежи по бронированиям и заработок водителей
- ratings: оценки участников поездки
- messages: сообщения внутри поездки
- drivers: панель водителя
"""

__all__: list[str] = []
