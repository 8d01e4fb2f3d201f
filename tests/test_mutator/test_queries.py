"""Tests for goblin.mutator.queries.

Covers:
- Classes declaring an annotated field (bare or wrapped annotation)
- Concrete classes defining a method (Protocols excluded)
- Public method listing in source order
- Top-level functions matching a name pattern
- Missing folders yield no results
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from goblin.mutator.queries import (
    find_classes_with_field,
    find_classes_with_method,
    find_functions,
    list_class_methods,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit

Writer = Callable[[str, str], Path]


class TestFindClassesWithField:
    def test_matches_wrapped_and_bare_annotations(self, write_source: Writer, tmp_path: Path) -> None:
        write_source("models/user.py", "class User(Base):\n    uuid: Mapped[str] = mapped_column()\n")
        write_source("models/post.py", "class Post:\n    uuid: str\n")
        write_source("models/counter.py", "class Counter:\n    uuid: int\n")
        write_source("models/__init__.py", "class Hidden:\n    uuid: str\n")

        found = find_classes_with_field(tmp_path / "models", "uuid", "str")

        assert sorted(ref.name for ref in found) == ["Post", "User"]
        assert {ref.module_name for ref in found} == {"post", "user"}

    def test_any_annotation(self, write_source: Writer, tmp_path: Path) -> None:
        write_source("models/counter.py", "class Counter:\n    uuid: int\n")
        assert [r.name for r in find_classes_with_field(tmp_path / "models", "uuid")] == ["Counter"]

    def test_missing_folder(self, tmp_path: Path) -> None:
        assert find_classes_with_field(tmp_path / "nope", "uuid") == []


class TestFindClassesWithMethod:
    def test_protocols_are_excluded(self, write_source: Writer, tmp_path: Path) -> None:
        write_source(
            "repositories/user_repo.py",
            """
            class UserRepoInterface(Protocol):
                def with_tx(self, tx): ...

            class UserRepo:
                def with_tx(self, tx):
                    return UserRepo(tx)

            class CentralRepo:
                db: Session
            """,
        )
        found = find_classes_with_method(tmp_path / "repositories", "with_tx")
        assert [ref.name for ref in found] == ["UserRepo"]


class TestListClassMethods:
    def test_public_methods_in_order(self, write_source: Writer) -> None:
        path = write_source(
            "repo.py",
            """
            class UserRepo:
                def with_tx(self, tx): ...
                def create_user(self, user): ...
                def _helper(self): ...
                async def list_users(self): ...
            """,
        )
        assert list_class_methods(path, "UserRepo", exclude=("with_tx",)) == ["create_user", "list_users"]


class TestFindFunctions:
    def test_full_match_and_exclude(self, write_source: Writer, tmp_path: Path) -> None:
        write_source("services/central_service.py", "def new_central_service(): ...\n")
        write_source("services/user_service.py", "def new_user_service(): ...\ndef new_user_service_v2_helper(): ...\n")
        write_source("services/helpers.py", "def build(): ...\n")

        found = find_functions(tmp_path / "services", r"new_\w+_service", exclude=("new_central_service",))

        assert [ref.name for ref in found] == ["new_user_service"]
