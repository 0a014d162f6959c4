"""
Schemas package for API request/response validation.
These models define the structure of data sent to and from the API endpoints.
"""

# Customer schemas
from .customer import (
    LoginRequest,
    LogoutRequest,
    PhoneRequest,
    RefreshRequest,
    RegistrationRequest,
    ResetOtpRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    VerifyOtpRequest,
)

# Catalog schemas
from .product import (
    CategoryRequest,
    CreateProductRequest,
    ProductDetailsFields,
    ProductDetailsRequest,
    SubcategoryRequest,
    UpdateProductRequest,
)

# Cart, wishlist and address schemas
from .cart import AddToCartRequest, AddToWishlistRequest, UpdateCartItemRequest
from .address import AddressRequest

# Order and payment schemas
from .order import (
    CancelOrderRequest,
    PlaceDirectRequest,
    PlaceFromCartRequest,
    PlaceOrderRequest,
    UpdateOrderStatusRequest,
)
from .payment import CreatePaymentOrderRequest, VerifyPaymentRequest

# Admin schemas
from .admin import (
    AdminLoginRequest,
    AssignRoleRequest,
    CreateUserRequest,
    RoleRequest,
    UpdateRoleAssignmentRequest,
    UpdateUserRequest,
)

# Common schemas
from .common import (
    HealthCheckResponse,
    PaginationMeta,
    RootResponse,
    SuccessResponse,
)

__all__ = [
    # Customer schemas
    "LoginRequest",
    "LogoutRequest",
    "PhoneRequest",
    "RefreshRequest",
    "RegistrationRequest",
    "ResetOtpRequest",
    "ResetPasswordRequest",
    "UpdateProfileRequest",
    "VerifyOtpRequest",

    # Catalog schemas
    "CategoryRequest",
    "CreateProductRequest",
    "ProductDetailsFields",
    "ProductDetailsRequest",
    "SubcategoryRequest",
    "UpdateProductRequest",

    # Cart, wishlist and address schemas
    "AddToCartRequest",
    "AddToWishlistRequest",
    "UpdateCartItemRequest",
    "AddressRequest",

    # Order and payment schemas
    "CancelOrderRequest",
    "PlaceDirectRequest",
    "PlaceFromCartRequest",
    "PlaceOrderRequest",
    "UpdateOrderStatusRequest",
    "CreatePaymentOrderRequest",
    "VerifyPaymentRequest",

    # Admin schemas
    "AdminLoginRequest",
    "AssignRoleRequest",
    "CreateUserRequest",
    "RoleRequest",
    "UpdateRoleAssignmentRequest",
    "UpdateUserRequest",

    # Common schemas
    "HealthCheckResponse",
    "PaginationMeta",
    "RootResponse",
    "SuccessResponse",
]
