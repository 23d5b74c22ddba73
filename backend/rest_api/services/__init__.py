"""
Services module for business logic.

- domain/: Application services used by the routers

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    orders = service.list_for_period(establishment.id, "today")
"""
