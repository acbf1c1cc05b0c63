"""
CardUpdateBuilder 测试
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from bravo.core.errors import BravoError
from bravo.providers.favro.card_update_builder import CardUpdateBuilder


def _select_field():
    return SimpleNamespace(
        custom_field_id="cf-status",
        custom_field_items=[
            SimpleNamespace(custom_field_item_id="opt-1", name="Open"),
            SimpleNamespace(custom_field_item_id="opt-2", name="Closed"),
            SimpleNamespace(custom_field_item_id="opt-3", name="Blocked"),
        ],
    )


class TestBasicFields:
    def test_empty_body(self):
        assert CardUpdateBuilder().to_body() == {}

    def test_name_description_and_dates(self):
        due = datetime(2026, 1, 1, tzinfo=timezone.utc)
        body = (
            CardUpdateBuilder()
            .set_name("New name")
            .set_description("# Heading")
            .set_due_date(due)
            .unset_start_date()
            .archive()
            .to_body()
        )

        assert body == {
            "name": "New name",
            "detailedDescription": "# Heading",
            "dueDate": "2026-01-01T00:00:00+00:00",
            "startDate": None,
            "archive": True,
        }

    def test_to_body_is_a_copy(self):
        builder = CardUpdateBuilder().assign(["u1"])
        body = builder.to_body()
        body["addAssignmentIds"].append("u2")

        assert builder.to_body()["addAssignmentIds"] == ["u1"]


class TestOpposingLists:
    def test_assign_then_unassign(self):
        builder = CardUpdateBuilder().assign(["u1", "u2"]).unassign(["u2"])

        body = builder.to_body()

        assert body["addAssignmentIds"] == ["u1"]
        assert body["removeAssignmentIds"] == ["u2"]

    def test_accepts_entities(self):
        user = SimpleNamespace(user_id="u9")
        tag = SimpleNamespace(tag_id="t9")

        body = CardUpdateBuilder().assign([user]).add_tags([tag, "t1"]).to_body()

        assert body["addAssignmentIds"] == ["u9"]
        assert body["addTagIds"] == ["t9", "t1"]

    def test_tags_by_name_stay_disjoint(self):
        body = (
            CardUpdateBuilder()
            .add_tags_by_name(["bug", "ui"])
            .remove_tags_by_name(["ui"])
            .add_tags_by_name(["bug"])
            .to_body()
        )

        assert body["addTags"] == ["bug"]
        assert body["removeTags"] == ["ui"]

    def test_completion_latest_wins(self):
        body = (
            CardUpdateBuilder()
            .complete_assignment(["u1"])
            .uncomplete_assignment(["u1"])
            .to_body()
        )

        assert body["completeAssignments"] == [{"userId": "u1", "completed": False}]


class TestMoves:
    def test_add_to_widget_drops_unset_options(self):
        body = CardUpdateBuilder().add_to_widget("w1", column_id="c1").to_body()

        assert body == {"widgetCommonId": "w1", "columnId": "c1"}

    def test_favro_attachments(self):
        body = (
            CardUpdateBuilder()
            .add_favro_attachments([{"itemCommonId": "x", "type": "card"}])
            .add_favro_attachments([{"itemCommonId": "x", "type": "widget"}])
            .remove_favro_attachments_by_id(["y"])
            .to_body()
        )

        assert body["addFavroAttachments"] == [{"itemCommonId": "x", "type": "widget"}]
        assert body["removeFavroAttachmentIds"] == ["y"]


class TestCustomFields:
    def test_one_update_per_field(self):
        body = (
            CardUpdateBuilder()
            .set_custom_text("cf-text", "first")
            .set_custom_text("cf-text", "second")
            .set_custom_number("cf-points", 3)
            .to_body()
        )

        assert body["customFields"] == [
            {"customFieldId": "cf-text", "value": "second"},
            {"customFieldId": "cf-points", "total": 3},
        ]

    def test_invalid_values(self):
        builder = CardUpdateBuilder()

        with pytest.raises(BravoError):
            builder.set_custom_text("cf", "")
        with pytest.raises(BravoError):
            builder.set_custom_number("cf", float("nan"))
        with pytest.raises(BravoError):
            builder.set_custom_rating("cf", 6)

    def test_custom_error_class(self):
        class CardError(BravoError):
            pass

        with pytest.raises(CardError):
            CardUpdateBuilder(error=CardError).set_custom_rating("cf", -1)

    def test_link_defaults_text_to_url(self):
        body = CardUpdateBuilder().set_custom_link("cf", "https://x.dev").to_body()

        assert body["customFields"][0]["link"] == {"url": "https://x.dev", "text": "https://x.dev"}

    def test_single_select_by_name(self):
        body = CardUpdateBuilder().set_custom_single_select_by_name(_select_field(), "Closed").to_body()

        assert body["customFields"] == [{"customFieldId": "cf-status", "value": ["opt-2"]}]

    def test_single_select_unknown_option(self):
        with pytest.raises(BravoError):
            CardUpdateBuilder().set_custom_single_select_by_name(_select_field(), "Nope")

    def test_multiple_select_by_name(self):
        body = (
            CardUpdateBuilder()
            .set_custom_multiple_select_by_name(_select_field(), ["Open", "Blocked"])
            .to_body()
        )

        assert body["customFields"][0]["value"] == ["opt-1", "opt-3"]

    def test_multiple_select_requires_all_names(self):
        with pytest.raises(BravoError):
            CardUpdateBuilder().set_custom_multiple_select_by_name(_select_field(), ["Open", "Nope"])

    def test_custom_members(self):
        body = (
            CardUpdateBuilder()
            .add_custom_members("cf-owners", ["u1"])
            .remove_custom_members("cf-owners", ["u2"])
            .complete_custom_members("cf-owners", ["u1"])
            .uncomplete_custom_members("cf-owners", ["u1"])
            .to_body()
        )

        assert body["customFields"] == [
            {
                "customFieldId": "cf-owners",
                "members": {
                    "addUserIds": ["u1"],
                    "removeUserIds": ["u2"],
                    "completeUsers": [{"userId": "u1", "completed": False}],
                },
            }
        ]
