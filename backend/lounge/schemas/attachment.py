from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    image_url: str = Field(alias="imageUrl")

    model_config = {"populate_by_name": True}
