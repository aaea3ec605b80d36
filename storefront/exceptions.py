"""
Domain exceptions for the storefront service.

Every error carries a human-readable ``message`` and a ``details`` dict with
the entity ids involved. The API layer maps the three families below to
HTTP status codes (see ``storefront.api.errors``).
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class NotFoundError(StorefrontError):
    """Entity is missing or belongs to another user."""
    pass


class ValidationError(StorefrontError):
    """Input rejected before any state was changed."""
    pass


class ConflictError(StorefrontError):
    """Request collided with concurrent work or a uniqueness constraint."""
    pass


# --- not found ---

class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(
            "Product not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class CartItemNotFoundError(NotFoundError):
    def __init__(self, item_id: int):
        super().__init__(
            "Item not found in cart",
            details={'item_id': item_id}
        )
        self.item_id = item_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(
            "Order not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


# --- validation ---

class ProductUnavailableError(ValidationError):
    def __init__(self, product_id: int, status: str):
        super().__init__(
            "Product is not available",
            details={'product_id': product_id, 'status': status}
        )
        self.product_id = product_id
        self.status = status


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds what the product has in stock."""

    def __init__(self, product_id: int, requested: int, available: int, product_name: str | None = None):
        if product_name:
            message = f"Insufficient stock for {product_name}. Only {available} available."
        else:
            message = f"Only {available} items available"
        super().__init__(
            message,
            details={
                'product_id': product_id,
                'product_name': product_name,
                'requested': requested,
                'available': available,
            }
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InvalidQuantityError(ValidationError):
    def __init__(self, quantity):
        super().__init__(
            "Quantity must be at least 1",
            details={'quantity': quantity}
        )
        self.quantity = quantity


class InvalidAmountError(ValidationError):
    def __init__(self, amount):
        super().__init__(
            "Shipping cost must not be negative",
            details={'amount': str(amount)}
        )
        self.amount = amount


class EmptyCartError(ValidationError):
    def __init__(self, user_id: int):
        super().__init__(
            "Cart is empty",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class InvalidStatusError(ValidationError):
    def __init__(self, status, allowed: list[str]):
        super().__init__(
            f"Invalid order status '{status}'. Allowed: {', '.join(allowed)}",
            details={'status': status, 'allowed': allowed}
        )
        self.status = status
        self.allowed = allowed


class InvalidStatusTransitionError(ValidationError):
    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(
            f"Order cannot move from '{current}' to '{requested}'",
            details={'order_id': order_id, 'current': current, 'requested': requested}
        )
        self.order_id = order_id
        self.current = current
        self.requested = requested


# --- conflicts ---

class DuplicateKeyError(ConflictError):
    def __init__(self, field: str, value=None):
        super().__init__(
            f"Duplicate value for {field}",
            details={'field': field, 'value': value}
        )
        self.field = field
        self.value = value


class CartBusyError(ConflictError):
    def __init__(self, user_id: int):
        super().__init__(
            "Cart is being modified by another request, try again",
            details={'user_id': user_id}
        )
        self.user_id = user_id
