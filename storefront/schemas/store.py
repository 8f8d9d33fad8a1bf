from pydantic import BaseModel, Field

DEFAULT_LATITUDE = 52.40375
DEFAULT_LONGITUDE = 9.66171
STATUS_DISABLED = "Store Status is Currently disabled"


class StoreInfo(BaseModel):
    name: str | None = Field(default=None, validation_alias="Name")
    address: str | None = Field(default=None, validation_alias="Addres")
    phone: str | None = None
    email: str | None = Field(default=None, validation_alias="E-Mail")

    model_config = {"extra": "ignore", "populate_by_name": True}


class StoreLocation(BaseModel):
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE


class StoreProfile(BaseModel):
    info: StoreInfo | None = None
    status: str = STATUS_DISABLED
    # Day name -> opening hours text
    service: dict[str, str] = Field(default_factory=dict)
    location: StoreLocation = Field(default_factory=StoreLocation)
