import uuid
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, EmailStr, Field

from storefront.models.order import OrderStatus, PaymentStatus
from storefront.schemas.base import CamelModel, Money


class OrderItemCreate(CamelModel):
    # Cart clients send the menu item id as plain "id".
    menu_item_id: uuid.UUID = Field(
        validation_alias=AliasChoices("menuItemId", "menu_item_id", "id")
    )
    quantity: int = Field(ge=1)
    customizations: dict[str, Any] = Field(default_factory=dict)
    special_instructions: str = ""


class CustomerInfo(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)

    model_config = {**CamelModel.model_config, "str_strip_whitespace": True}


class DeliveryAddress(CamelModel):
    street: str
    city: str
    state: str
    zip_code: str


class OrderCreate(CamelModel):
    items: list[OrderItemCreate] = Field(min_length=1)
    customer_info: CustomerInfo
    delivery_address: DeliveryAddress | None = None
    payment_method: dict[str, Any]
    special_instructions: str = ""


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderCreatedResponse(CamelModel):
    order_id: uuid.UUID
    order_number: str
    status: OrderStatus
    subtotal: Money
    tax: Money
    delivery_fee: Money
    total: Money
    estimated_delivery_time: datetime
    created_at: datetime
    message: str = "Order placed successfully"


class OrderItemResponse(CamelModel):
    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    quantity: int
    unit_price: Money
    subtotal: Money
    customizations: dict[str, Any]
    special_instructions: str


class OrderResponse(CamelModel):
    id: uuid.UUID
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    status: OrderStatus
    payment_status: PaymentStatus
    subtotal: Money
    tax_amount: Money
    delivery_fee: Money
    total_amount: Money
    delivery_address: dict[str, Any] | None
    special_instructions: str
    payment_method: dict[str, Any]
    estimated_delivery_time: datetime
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemResponse]


class OrderSummary(CamelModel):
    id: uuid.UUID
    order_number: str
    status: OrderStatus
    updated_at: datetime


class OrderStatusResponse(CamelModel):
    message: str
    order: OrderSummary
