from pydantic import BaseModel, Field


class LocationDTO(BaseModel):
    address: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    class Config:
        from_attributes = True


class PointDTO(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
