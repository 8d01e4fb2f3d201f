"""Tests for goblin.naming.

Covers:
- snake_case validation
- Case conversions in both directions
- Pluralisation rules (regular, irregular, uncountable, compound names)
- Folder path to module path conversion
"""

from __future__ import annotations

import pytest

from goblin.naming import (
    folder_to_module,
    is_snake_case,
    pascal_to_snake,
    pluralize,
    snake_to_camel,
    snake_to_pascal,
    to_upper_snake,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestIsSnakeCase:
    @pytest.mark.parametrize("value", ["user", "user_profile", "order_item_2", "v2"])
    def test_accepts_snake_case(self, value: str) -> None:
        assert is_snake_case(value)

    @pytest.mark.parametrize(
        "value",
        ["", "User", "userProfile", "user__profile", "_user", "user_", "user-profile", "user profile"],
    )
    def test_rejects_everything_else(self, value: str) -> None:
        assert not is_snake_case(value)


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


class TestCaseConversion:
    def test_snake_to_pascal(self) -> None:
        assert snake_to_pascal("user_profile") == "UserProfile"
        assert snake_to_pascal("user") == "User"

    def test_snake_to_camel(self) -> None:
        assert snake_to_camel("user_profile") == "userProfile"

    def test_pascal_to_snake(self) -> None:
        assert pascal_to_snake("UserProfile") == "user_profile"
        assert pascal_to_snake("HTTPServer") == "http_server"

    def test_to_upper_snake(self) -> None:
        assert to_upper_snake("send_email") == "SEND_EMAIL"
        assert to_upper_snake("SendEmail") == "SEND_EMAIL"


# ---------------------------------------------------------------------------
# Pluralisation
# ---------------------------------------------------------------------------


class TestPluralize:
    @pytest.mark.parametrize(
        ("word", "plural"),
        [
            ("user", "users"),
            ("category", "categories"),
            ("day", "days"),
            ("box", "boxes"),
            ("address", "addresses"),
            ("branch", "branches"),
            ("knife", "knives"),
            ("leaf", "leaves"),
            ("roof", "roofs"),
            ("person", "people"),
            ("child", "children"),
            ("news", "news"),
            ("metadata", "metadata"),
        ],
    )
    def test_single_words(self, word: str, plural: str) -> None:
        assert pluralize(word) == plural

    def test_only_last_segment_is_pluralised(self) -> None:
        assert pluralize("order_item") == "order_items"
        assert pluralize("sales_person") == "sales_people"

    def test_keeps_pascal_case(self) -> None:
        assert pluralize("Category") == "Categories"
        assert pluralize("Person") == "People"

    def test_empty(self) -> None:
        assert pluralize("") == ""


# ---------------------------------------------------------------------------
# Module paths
# ---------------------------------------------------------------------------


class TestFolderToModule:
    def test_nested_folder(self) -> None:
        assert folder_to_module("app/models") == "app.models"

    def test_ignores_dot_segments_and_backslashes(self) -> None:
        assert folder_to_module("./app\\db/") == "app.db"

    def test_project_root(self) -> None:
        assert folder_to_module(".") == ""
