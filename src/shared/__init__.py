# src/shared/__init__.py
"""
Общий код сервисов.

Модули:
- models: DTO и Pydantic-модели запросов/ответов
"""

__all__: list[str] = []
