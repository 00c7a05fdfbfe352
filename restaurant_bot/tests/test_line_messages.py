from __future__ import annotations

from linebot.v3.messaging import FlexMessage, TemplateMessage
from linebot.v3.messaging import TextMessage as LineTextMessage

from restaurant_bot.chat import render
from restaurant_bot.chat.messages import Card, PostbackButton, UriButton
from restaurant_bot.messaging.line_messages import card_bubble, to_line_message, to_line_messages
from restaurant_bot.places.models import Coordinates, Restaurant, RestaurantDetails


def _restaurant(image_url=""):
    return Restaurant(
        name="Noodle House",
        place_id="p1",
        address="1 Main St",
        rating=4.5,
        rating_count=120,
        image_url=image_url,
        location=Coordinates(lat=25.0, lng=121.5),
    )


class TestCardBubble:
    def test_hero_only_with_image(self):
        assert "hero" not in card_bubble(render.restaurant_card(1, _restaurant()))
        bubble = card_bubble(render.restaurant_card(1, _restaurant("https://img.example/1.jpg")))
        assert bubble["hero"]["url"] == "https://img.example/1.jpg"

    def test_footer_actions(self):
        card = Card(
            title="Fav",
            buttons=[
                UriButton(label="查看地圖", uri="https://maps.example"),
                PostbackButton(label="刪除", data="action=delete&restaurantId=p1", display_text="刪除 Fav"),
            ],
        )
        actions = [c["action"] for c in card_bubble(card)["footer"]["contents"]]
        assert actions[0] == {"type": "uri", "label": "查看地圖", "uri": "https://maps.example"}
        assert actions[1]["type"] == "postback"
        assert actions[1]["displayText"] == "刪除 Fav"

    def test_blank_lines_dropped(self):
        bubble = card_bubble(Card(title="T", lines=["a", ""]))
        assert len(bubble["body"]["contents"]) == 2


class TestToLineMessage:
    def test_text_with_quick_replies(self):
        line_message = to_line_message(render.help_message())
        assert isinstance(line_message, LineTextMessage)
        assert len(line_message.quick_reply.items) == 3

    def test_text_without_quick_replies(self):
        line_message = to_line_message(render.top_count_prompt())
        assert line_message.quick_reply is None

    def test_location_quick_reply(self):
        line_message = to_line_message(render.location_prompt())
        assert line_message.quick_reply.items[0].action.type == "location"

    def test_carousel_becomes_flex(self):
        carousel, follow_up = render.results_page([_restaurant("https://img.example/1.jpg")], 0, 1, False)
        line_message = to_line_message(carousel)
        assert isinstance(line_message, FlexMessage)
        assert line_message.alt_text == "為你找到 1 間餐廳"

    def test_detail_buttons_become_template(self):
        details = RestaurantDetails(name="Noodle House", formatted_address="1 Main St")
        messages = to_line_messages(render.detail_messages(details, _restaurant()))
        assert isinstance(messages[0], LineTextMessage)
        assert isinstance(messages[1], TemplateMessage)
        assert len(messages[1].template.actions) == 4
