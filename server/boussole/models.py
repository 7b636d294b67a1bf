"""Domain records handed to the insight generators by the caller."""

from typing import Literal
from pydantic import BaseModel, Field


class Product(BaseModel):
    """An inventory item."""
    name: str
    cost: float = 0
    price: float = 0
    stock: int = 0
    category: str = ""


class Client(BaseModel):
    """A customer and what they owe the shop."""
    name: str
    debt: float = 0


class Supplier(BaseModel):
    """A supplier and what the shop owes them."""
    name: str
    debt: float = 0


class Expense(BaseModel):
    title: str
    amount: float = 0


class SalesPoint(BaseModel):
    """One row of the dashboard sales chart."""
    period: str = Field(default="", alias="name")
    sales: float = 0

    model_config = {"populate_by_name": True}


class ChatTurn(BaseModel):
    """A prior chat turn replayed as conversation history."""
    role: Literal["user", "model", "assistant"]
    text: str
