"""
Centralized HTTP exceptions for consistent error handling.

Every exception logs itself on construction and is rendered by the app's
exception handlers as ``{"error": "<detail>"}`` plus any ``payload`` keys.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Product", product_id)
    raise ValidationError("Price must be positive")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.payload = payload or {}


# =============================================================================
# 401 Authentication
# =============================================================================


class AuthenticationError(AppException):
    """Missing, invalid or expired session (401)."""

    def __init__(self, detail: str = "Not authenticated", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="info",
            **log_context,
        )


# =============================================================================
# 403 Forbidden
# =============================================================================


class ForbiddenError(AppException):
    """
    The request is valid but the current state forbids it (403).

    Usage:
        raise ForbiddenError("Attendance month 3/2026 is closed")
    """

    def __init__(self, detail: str = "Access denied", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Product", 123)
        raise NotFoundError("Order", order_id, establishment_id=establishment_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found in the caller's scope."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Quantity must be positive", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


class TerminalStateError(ValidationError):
    """Entity is in a terminal state and cannot be changed or removed."""

    def __init__(self, entity: str, current_state: str, operation: str, **log_context: Any):
        detail = f"Cannot {operation} {entity.lower()} in status '{current_state}'"
        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("A category with this name already exists")
    """

    def __init__(self, detail: str, payload: dict[str, Any] | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            payload=payload,
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class InsufficientStockError(ConflictError):
    """A quantifiable product has less stock than an order requires."""

    def __init__(self, product_id: int, product_name: str, available: int, requested: int, **log_context: Any):
        detail = (
            f"Insufficient stock for '{product_name}': "
            f"{available} available, {requested} requested"
        )
        super().__init__(
            detail,
            product_id=product_id,
            available=available,
            requested=requested,
            **log_context,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class DuplicateOrderError(ConflictError):
    """An order with the same offline local id was already recorded."""

    code = "DUPLICATE"

    def __init__(self, local_id: str, order: dict[str, Any], **log_context: Any):
        super().__init__(
            "Order already synchronized",
            payload={"code": self.code, "order": order},
            local_id=local_id,
            **log_context,
        )
        self.local_id = local_id
