from pydantic import BaseModel, Field, field_validator

from storefront.services.pricing import parse_price

# Marker for "no category selected" in category pickers.
ALL_CATEGORIES = None


class MenuItem(BaseModel):
    id: str
    name: str
    price: str
    ingredients: list[str | None] = Field(default_factory=list)
    image_url: str = ""
    category: str = ""

    model_config = {"extra": "ignore", "frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Category documents sometimes carry numeric ids.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _default_ingredients(cls, value):
        return [] if value is None else value

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.id)

    def amount(self) -> float:
        return parse_price(self.price)

    def display_ingredients(self) -> list[str]:
        return [i for i in self.ingredients if i]


class MenuItemResponse(BaseModel):
    id: str
    category: str
    name: str
    price: str
    ingredients: list[str]
    image_url: str

    @classmethod
    def from_item(cls, item: MenuItem) -> "MenuItemResponse":
        return cls(
            id=item.id,
            category=item.category,
            name=item.name,
            price=item.price,
            ingredients=item.display_ingredients(),
            image_url=item.image_url,
        )


def select_category(
    catalog: dict[str, list[MenuItem]], category: str | None
) -> list[MenuItem] | None:
    """Items for ``category``, or ``None`` when nothing (or an unknown name) is selected."""
    if category is ALL_CATEGORIES:
        return None
    return catalog.get(category)
