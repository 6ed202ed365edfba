# src/shared/__init__.py
"""
Общий код HTTP-слоя.

Модули:
- models: DTO запросов/ответов и общий конверт ответа
"""

__all__: list[str] = []
