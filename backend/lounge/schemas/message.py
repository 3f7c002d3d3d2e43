from pydantic import BaseModel, Field, field_validator, model_validator

from lounge.config import settings


class ChatMessage(BaseModel):
    id: str
    username: str
    text: str = ""
    image_url: str | None = Field(default=None, alias="imageUrl")
    timestamp: str

    model_config = {"from_attributes": True, "populate_by_name": True}


class MessageCreate(BaseModel):
    """Payload of a ``send-message`` frame. Any client-supplied username is ignored."""

    text: str = Field("", max_length=settings.MESSAGE_MAX_LENGTH)
    image_url: str | None = Field(default=None, alias="imageUrl")

    model_config = {"populate_by_name": True}

    @field_validator("text", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("image_url", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def require_text_or_image(self) -> "MessageCreate":
        if not self.text.strip() and not self.image_url:
            raise ValueError("Message must have text or an image")
        return self


class MessagePage(BaseModel):
    messages: list[ChatMessage]
    total: int
    has_more: bool = Field(alias="hasMore")

    model_config = {"populate_by_name": True}
