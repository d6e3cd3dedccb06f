from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ORDER_ENTRY = "Order Entry"
    KEYING = "Keying"
    SUPERVISOR = "Supervisor"


class CustomerInfo(BaseModel):
    name: str = ""
    email: str = ""
    source: str = ""
    address: str = ""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("name", "email", "source", "address", mode="before")
    @classmethod
    def _text_default(cls, value: object) -> object:
        return "" if value is None else value


class LineItem(BaseModel):
    line_number: str = ""
    page_number: int = 1
    part_number: str = ""
    prefixes: list[str] = Field(default_factory=list)
    quantity: float = 0
    description: str = ""
    unit_price: float | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("line_number", "part_number", "description", mode="before")
    @classmethod
    def _text_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_default(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("page_number", mode="before")
    @classmethod
    def _page_number_default(cls, value: object) -> object:
        return 1 if value is None else value

    @field_validator("prefixes", mode="before")
    @classmethod
    def _prefixes_default(cls, value: object) -> object:
        return [] if value is None else value


class PageItem(BaseModel):
    qty: float = 0
    desc: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    @field_validator("qty", mode="before")
    @classmethod
    def _qty_default(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("desc", mode="before")
    @classmethod
    def _desc_default(cls, value: object) -> object:
        return "" if value is None else value


class Page(BaseModel):
    page_number: int = 1
    type: str = ""
    summary: str = ""
    items_on_page: list[PageItem] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("type", "summary", mode="before")
    @classmethod
    def _text_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("page_number", mode="before")
    @classmethod
    def _page_number_default(cls, value: object) -> object:
        return 1 if value is None else value

    @field_validator("items_on_page", mode="before")
    @classmethod
    def _items_default(cls, value: object) -> object:
        return [] if value is None else value


class ExtractionResult(BaseModel):
    customer_info: CustomerInfo = Field(default_factory=CustomerInfo)
    po_number: str = ""
    order_number: str = ""
    quote_number: str = ""
    page_count: int = Field(default=1, ge=0)
    total_line_count: int | None = Field(default=None, ge=0)
    routing_keywords: list[str] = Field(default_factory=list)
    line_items: list[LineItem] = Field(default_factory=list)
    pages: list[Page] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("customer_info", mode="before")
    @classmethod
    def _customer_default(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("po_number", "order_number", "quote_number", mode="before")
    @classmethod
    def _text_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("page_count", mode="before")
    @classmethod
    def _page_count_default(cls, value: object) -> object:
        return 1 if value is None else value

    @field_validator("routing_keywords", "line_items", "pages", mode="before")
    @classmethod
    def _list_default(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def effective_line_count(self) -> int:
        if self.total_line_count is not None:
            return self.total_line_count
        return len(self.line_items)


class TeamMember(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: Role
    cards: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class RoutingDecision(BaseModel):
    route: str
    flags: list[str]
    reason: str
    evidence: str = ""
    logs: list[str]
    page_count: int = 1
    restricted: bool = False
    assignee_id: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
