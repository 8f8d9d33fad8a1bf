from pydantic import BaseModel, Field


class NewsItem(BaseModel):
    title: str
    description: str = Field(default="", validation_alias="Description")
    image_url: str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}
