"""Structural editing of generated Python modules.

Quick usage::

    from goblin.mutator import add_struct_field, wire_constructor_return

    add_struct_field("app/repositories/central_repo.py", "CentralRepo",
                     "user_repo", "UserRepoInterface")
    wire_constructor_return("app/repositories/central_repo.py", "new_central_repo",
                            "user_repo", "new_user_repo(db)")
"""

from goblin.mutator.errors import DeclarationNotFoundError, MutationError, SourceParseError
from goblin.mutator.operations import (
    add_constructor_param,
    add_enum_member,
    add_import,
    add_interface_method,
    add_struct_field,
    copy_interface_methods,
    ensure_import,
    merge_mapping_entries,
    wire_constructor_return,
)
from goblin.mutator.source import SourceModule, serialize

__all__ = [
    "DeclarationNotFoundError",
    "MutationError",
    "SourceModule",
    "SourceParseError",
    "add_constructor_param",
    "add_enum_member",
    "add_import",
    "add_interface_method",
    "add_struct_field",
    "copy_interface_methods",
    "ensure_import",
    "merge_mapping_entries",
    "serialize",
    "wire_constructor_return",
]
