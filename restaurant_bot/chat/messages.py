from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class QuickReply(BaseModel):
    label: str
    text: str = ""
    kind: Literal["message", "location"] = "message"


class UriButton(BaseModel):
    kind: Literal["uri"] = "uri"
    label: str
    uri: str


class PostbackButton(BaseModel):
    kind: Literal["postback"] = "postback"
    label: str
    data: str
    display_text: str | None = None


class MessageButton(BaseModel):
    kind: Literal["message"] = "message"
    label: str
    text: str


Button = Annotated[Union[UriButton, PostbackButton, MessageButton], Field(discriminator="kind")]


class TextMessage(BaseModel):
    kind: Literal["text"] = "text"
    text: str
    quick_replies: list[QuickReply] = Field(default_factory=list)


class Card(BaseModel):
    title: str
    lines: list[str] = Field(default_factory=list)
    image_url: str = ""
    buttons: list[Button] = Field(default_factory=list)


class CarouselMessage(BaseModel):
    kind: Literal["carousel"] = "carousel"
    alt_text: str
    cards: list[Card]


class ButtonsMessage(BaseModel):
    kind: Literal["buttons"] = "buttons"
    alt_text: str
    text: str
    buttons: list[Button]


OutboundMessage = Annotated[
    Union[TextMessage, CarouselMessage, ButtonsMessage], Field(discriminator="kind")
]
