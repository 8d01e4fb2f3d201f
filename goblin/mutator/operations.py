"""Structural edits on generated Python modules.

Every public operation follows the same pipeline: parse the target file,
locate the declaration by name, check whether the requested entry already
exists, splice in new nodes, and serialise the tree back to disk.  An
operation returns ``True`` when the file changed and ``False`` when the entry
was already present, in which case the file is not rewritten.

Lookups that fail raise :class:`DeclarationNotFoundError` before anything is
written, so the file on disk stays byte-for-byte unchanged.

Vocabulary used by the generated code:

* struct: a ``@dataclass`` class with annotated attributes
* interface: a ``Protocol`` class with ``...``-bodied methods
* constructor: a module-level factory ``new_<entity>(...)`` whose final
  statement is ``return Entity(key=value, ...)``
"""

from __future__ import annotations

import ast
import copy
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from .errors import MutationError
from .source import SourceModule, parse_expression, parse_function, parse_statements

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


# ---------------------------------------------------------------------------
# Struct fields
# ---------------------------------------------------------------------------


def add_struct_field(
    path: str | Path,
    struct_name: str,
    field_name: str,
    field_type: str,
) -> bool:
    """Append ``field_name: field_type`` to the class *struct_name*.

    The field is placed after the last existing class-level attribute so it
    stays ahead of any methods.

    Returns:
        ``True`` if the field was added, ``False`` if it already existed.
    """
    module = SourceModule.load(path)
    cls = module.find_class(struct_name)
    if field_name in _class_attribute_names(cls):
        return False

    field = parse_statements(f"{field_name}: {field_type}")[0]
    _drop_placeholder(cls)
    cls.body.insert(_attribute_insert_index(cls), field)
    module.save()
    return True


def _class_attribute_names(cls: ast.ClassDef) -> set[str]:
    names: set[str] = set()
    for node in cls.body:
        if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
        elif isinstance(node, ast.Assign):
            names.update(t.id for t in node.targets if isinstance(t, ast.Name))
    return names


def _attribute_insert_index(cls: ast.ClassDef) -> int:
    index = 1 if _has_docstring(cls.body) else 0
    for position, node in enumerate(cls.body):
        if isinstance(node, (ast.AnnAssign, ast.Assign)):
            index = position + 1
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            break
    return index


# ---------------------------------------------------------------------------
# Constructor parameters and return wiring
# ---------------------------------------------------------------------------


def add_constructor_param(
    path: str | Path,
    constructor_name: str,
    param_name: str,
    param_type: str | None = None,
) -> bool:
    """Add a parameter to the function *constructor_name*.

    *constructor_name* may be ``Class.method`` to target ``__init__`` or
    another method.  The parameter is inserted before any parameters with
    default values so the signature stays valid.

    Returns:
        ``True`` if the parameter was added, ``False`` if one with the same
        name already existed.
    """
    module = SourceModule.load(path)
    func = module.find_function(constructor_name)
    if param_name in _parameter_names(func.args):
        return False

    annotation = parse_expression(param_type) if param_type else None
    args = func.args
    insert_at = len(args.args) - len(args.defaults)
    args.args.insert(insert_at, ast.arg(arg=param_name, annotation=annotation))
    module.save()
    return True


def _parameter_names(args: ast.arguments) -> set[str]:
    names = {a.arg for a in (*args.posonlyargs, *args.args, *args.kwonlyargs)}
    if args.vararg is not None:
        names.add(args.vararg.arg)
    if args.kwarg is not None:
        names.add(args.kwarg.arg)
    return names


def wire_constructor_return(
    path: str | Path,
    constructor_name: str,
    field_key: str,
    value_expr: str,
) -> bool:
    """Add ``field_key=value_expr`` to the object built by the constructor's final return.

    The terminal statement must be ``return Entity(...)`` (a keyword argument
    is appended) or ``return {...}`` (a string key is appended).

    Returns:
        ``True`` if the entry was added, ``False`` if the key was already wired.

    Raises:
        MutationError: If the function does not end in a supported return.
    """
    module = SourceModule.load(path)
    func = module.find_function(constructor_name)
    returned = _terminal_return_value(func, module.path)
    value = parse_expression(value_expr)

    if isinstance(returned, ast.Call):
        if any(kw.arg == field_key for kw in returned.keywords):
            return False
        returned.keywords.append(ast.keyword(arg=field_key, value=value))
    elif isinstance(returned, ast.Dict):
        if field_key in _dict_string_keys(returned):
            return False
        returned.keys.append(ast.Constant(value=field_key))
        returned.values.append(value)
    else:
        raise MutationError(
            f"{constructor_name} must return a call or a dict literal",
            module.path,
        )

    module.save()
    return True


def _terminal_return_value(func: FunctionNode, path: Path | None) -> ast.expr:
    last = func.body[-1] if func.body else None
    if not isinstance(last, ast.Return) or last.value is None:
        raise MutationError(f"{func.name} has no terminal return statement", path)
    return last.value


def _dict_string_keys(node: ast.Dict) -> set[str]:
    return {
        k.value for k in node.keys
        if isinstance(k, ast.Constant) and isinstance(k.value, str)
    }


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def add_import(
    path: str | Path,
    module_name: str,
    names: Sequence[str] | None = None,
    alias: str | None = None,
) -> bool:
    """Ensure the file imports *module_name* (or *names* from it).

    ``import module`` is deduplicated on the module path; ``from module
    import a, b`` is deduplicated per name.  Missing names are appended to an
    existing ``from module import`` statement when there is one.  Otherwise a
    new statement goes after the last top-level import, or at the top of the
    module (after its docstring) when there are none.

    Returns:
        ``True`` if the file changed.
    """
    module = SourceModule.load(path)
    changed = ensure_import(module, module_name, names, alias)
    if changed:
        module.save()
    return changed


def ensure_import(
    module: SourceModule,
    module_name: str | None,
    names: Sequence[str] | None = None,
    alias: str | None = None,
    level: int = 0,
) -> bool:
    """In-memory variant of :func:`add_import`; returns ``True`` if the tree changed.

    *level* is the number of leading dots of a relative ``from`` import.
    """
    imports = module.top_level_imports()

    if not names:
        for node in imports:
            if isinstance(node, ast.Import) and any(
                a.name == module_name and a.asname == alias for a in node.names
            ):
                return False
        _insert_import(module, ast.Import(names=[ast.alias(name=module_name, asname=alias)]))
        return True

    requested = [_parse_alias(n) for n in names]
    from_nodes = [
        n for n in imports
        if isinstance(n, ast.ImportFrom) and n.module == module_name and n.level == level
    ]
    present = {(a.name, a.asname) for node in from_nodes for a in node.names}
    missing = [a for a in requested if (a.name, a.asname) not in present]
    if not missing:
        return False

    if from_nodes:
        from_nodes[0].names.extend(missing)
    else:
        _insert_import(module, ast.ImportFrom(module=module_name, names=missing, level=level))
    return True


def _parse_alias(name: str) -> ast.alias:
    target, _, asname = name.partition(" as ")
    return ast.alias(name=target.strip(), asname=asname.strip() or None)


def _insert_import(module: SourceModule, node: ast.stmt) -> None:
    body = module.tree.body
    last_import = None
    for position, stmt in enumerate(body):
        if isinstance(stmt, (ast.Import, ast.ImportFrom)):
            last_import = position
    if last_import is not None:
        body.insert(last_import + 1, node)
    else:
        body.insert(1 if _has_docstring(body) else 0, node)


# ---------------------------------------------------------------------------
# Interface methods
# ---------------------------------------------------------------------------


def add_interface_method(path: str | Path, interface_name: str, method_source: str) -> bool:
    """Append the method defined in *method_source* to the class *interface_name*.

    Used for ``Protocol`` signatures (``...`` bodies) as well as for concrete
    implementations.

    Returns:
        ``True`` if the method was added, ``False`` if a method with the same
        name already existed.
    """
    module = SourceModule.load(path)
    cls = module.find_class(interface_name)
    method = parse_function(method_source)
    if method.name in _method_names(cls):
        return False
    _drop_placeholder(cls)
    cls.body.append(method)
    module.save()
    return True


def copy_interface_methods(
    source_path: str | Path,
    source_interface: str,
    dest_path: str | Path,
    dest_interface: str,
    method_names: Iterable[str],
    *,
    receiver: str | None = None,
    dependency: str | None = None,
) -> list[str]:
    """Copy method signatures from one interface to another.

    The imports that the copied signatures rely on are carried over to the
    destination module.  When *receiver* and *dependency* are given, each
    copied method also gets a forwarding implementation on the *receiver*
    class::

        def create_user(self, user: User) -> User:
            return self.user_repo.create_user(user)

    Returns:
        Names of the methods that were added to *dest_interface*.

    Raises:
        MutationError: If none of *method_names* exist on *source_interface*.
    """
    wanted = list(method_names)
    source = SourceModule.load(source_path)
    source_cls = source.find_class(source_interface)
    methods = [
        node for node in source_cls.body
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name in wanted
    ]
    if not methods:
        raise MutationError(f"no methods found for {source_interface}", source.path)

    dest = SourceModule.load(dest_path)
    dest_cls = dest.find_class(dest_interface)
    receiver_cls = dest.find_class(receiver) if receiver and dependency else None

    changed = False
    for module_name, names, alias, level in _imports_for(source, methods, dest):
        changed |= ensure_import(dest, module_name, names, alias, level)

    added: list[str] = []
    existing = _method_names(dest_cls)
    for method in methods:
        if method.name in existing:
            continue
        _drop_placeholder(dest_cls)
        dest_cls.body.append(_signature_of(method))
        added.append(method.name)
        changed = True

    if receiver_cls is not None:
        implemented = _method_names(receiver_cls)
        for method in methods:
            if method.name in implemented:
                continue
            _drop_placeholder(receiver_cls)
            receiver_cls.body.append(_forwarder_of(method, dependency))
            changed = True

    if changed:
        dest.save()
    return added


def _method_names(cls: ast.ClassDef) -> set[str]:
    return {
        node.name for node in cls.body
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
    }


def _signature_of(method: FunctionNode) -> FunctionNode:
    signature = copy.deepcopy(method)
    docstring = signature.body[0] if _has_docstring(signature.body) else None
    signature.body = [docstring] if docstring is not None else []
    signature.body.append(ast.Expr(value=ast.Constant(value=Ellipsis)))
    return signature


def _forwarder_of(method: FunctionNode, dependency: str) -> FunctionNode:
    forwarder = copy.deepcopy(method)
    forwarder.decorator_list = []
    args = forwarder.args

    positional = [*args.posonlyargs, *args.args]
    if positional and positional[0].arg in ("self", "cls"):
        positional = positional[1:]

    call_args: list[ast.expr] = [ast.Name(id=a.arg, ctx=ast.Load()) for a in positional]
    if args.vararg is not None:
        call_args.append(ast.Starred(value=ast.Name(id=args.vararg.arg, ctx=ast.Load()), ctx=ast.Load()))
    keywords = [
        ast.keyword(arg=a.arg, value=ast.Name(id=a.arg, ctx=ast.Load()))
        for a in args.kwonlyargs
    ]
    if args.kwarg is not None:
        keywords.append(ast.keyword(arg=None, value=ast.Name(id=args.kwarg.arg, ctx=ast.Load())))

    target = ast.Attribute(
        value=ast.Attribute(value=ast.Name(id="self", ctx=ast.Load()), attr=dependency, ctx=ast.Load()),
        attr=method.name,
        ctx=ast.Load(),
    )
    call: ast.expr = ast.Call(func=target, args=call_args, keywords=keywords)
    if isinstance(method, ast.AsyncFunctionDef):
        call = ast.Await(value=call)
    forwarder.body = [ast.Return(value=call)]
    return forwarder


def _imports_for(
    source: SourceModule,
    methods: Sequence[FunctionNode],
    dest: SourceModule,
) -> list[tuple[str | None, list[str] | None, str | None, int]]:
    """Return the imports in *source* that bind names used in *methods*' signatures.

    Each entry is ``(module, names, alias, level)`` as accepted by
    :func:`ensure_import`.  Relative imports are kept as they are when both
    files share a directory and are otherwise rewritten against the source
    file's package.

    Raises:
        MutationError: If a needed relative import cannot be resolved.
    """
    used: set[str] = set()
    for method in methods:
        for node in _signature_nodes(method):
            for sub in ast.walk(node):
                if isinstance(sub, ast.Name):
                    used.add(sub.id)
                elif isinstance(sub, ast.Constant) and isinstance(sub.value, str):
                    # String annotations such as "User | None".
                    try:
                        used.update(
                            n.id for n in ast.walk(ast.parse(sub.value, mode="eval"))
                            if isinstance(n, ast.Name)
                        )
                    except SyntaxError:
                        continue

    specs: list[tuple[str | None, list[str] | None, str | None, int]] = []
    for node in source.top_level_imports():
        if isinstance(node, ast.Import):
            for a in node.names:
                if (a.asname or a.name.split(".")[0]) in used:
                    specs.append((a.name, None, a.asname, 0))
            continue
        if node.module == "__future__":
            continue
        names = [
            a.name if a.asname is None else f"{a.name} as {a.asname}"
            for a in node.names
            if (a.asname or a.name) in used
        ]
        if names:
            module_name, level = _resolve_from_import(node, source, dest)
            specs.append((module_name, names, None, level))
    return specs


def _resolve_from_import(
    node: ast.ImportFrom,
    source: SourceModule,
    dest: SourceModule,
) -> tuple[str | None, int]:
    if node.level == 0:
        return node.module, 0
    if (
        source.path is not None
        and dest.path is not None
        and source.path.resolve().parent == dest.path.resolve().parent
    ):
        return node.module, node.level

    package = _package_parts(source.path)
    if not package or node.level - 1 >= len(package):
        raise MutationError(
            f"cannot resolve relative import {'.' * node.level}{node.module or ''}",
            source.path,
        )
    base = package[: len(package) - (node.level - 1)]
    return ".".join([*base, node.module] if node.module else base), 0


def _package_parts(path: Path | None) -> list[str]:
    """Dotted package of *path*, found by walking up through ``__init__.py`` folders."""
    if path is None:
        return []
    parts: list[str] = []
    directory = path.resolve().parent
    while (directory / "__init__.py").is_file():
        parts.insert(0, directory.name)
        directory = directory.parent
    return parts


def _signature_nodes(method: FunctionNode) -> list[ast.AST]:
    args = method.args
    nodes: list[ast.AST] = []
    for arg in (*args.posonlyargs, *args.args, *args.kwonlyargs, args.vararg, args.kwarg):
        if arg is not None and arg.annotation is not None:
            nodes.append(arg.annotation)
    nodes.extend(d for d in (*args.defaults, *args.kw_defaults) if d is not None)
    if method.returns is not None:
        nodes.append(method.returns)
    return nodes


# ---------------------------------------------------------------------------
# Mapping literals and enum members
# ---------------------------------------------------------------------------


def merge_mapping_entries(
    path: str | Path,
    variable_name: str,
    entries: Mapping[str, str],
) -> bool:
    """Append ``key: value`` entries to the dict literal bound to *variable_name*.

    Keys and values are Python expressions given as source text.  An entry is
    skipped when a key with the same source text is already present.

    Returns:
        ``True`` if at least one entry was added.
    """
    module = SourceModule.load(path)
    assignment = module.find_assignment(variable_name)
    literal = assignment.value
    if not isinstance(literal, ast.Dict):
        raise MutationError(f"{variable_name} is not bound to a dict literal", module.path)

    present = {ast.unparse(k) for k in literal.keys if k is not None}
    changed = False
    for key_src, value_src in entries.items():
        key = parse_expression(key_src)
        if ast.unparse(key) in present:
            continue
        literal.keys.append(key)
        literal.values.append(parse_expression(value_src))
        present.add(ast.unparse(key))
        changed = True

    if changed:
        module.save()
    return changed


def add_enum_member(
    path: str | Path,
    enum_name: str,
    member_name: str,
    value: str | None = None,
) -> bool:
    """Add ``member_name = value`` to the enum class *enum_name*.

    Without an explicit *value* the member gets the next integer after the
    largest integer member.

    Returns:
        ``True`` if the member was added, ``False`` if it already existed.
    """
    module = SourceModule.load(path)
    cls = module.find_class(enum_name)
    if member_name in _class_attribute_names(cls):
        return False

    if value is None:
        numbers = [
            node.value.value for node in cls.body
            if isinstance(node, ast.Assign)
            and isinstance(node.value, ast.Constant)
            and type(node.value.value) is int
        ]
        value = str(max(numbers) + 1 if numbers else 0)

    member = parse_statements(f"{member_name} = {value}")[0]
    _drop_placeholder(cls)
    cls.body.insert(_attribute_insert_index(cls), member)
    module.save()
    return True


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _has_docstring(body: list[ast.stmt]) -> bool:
    return bool(body) and (
        isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    )


def _drop_placeholder(cls: ast.ClassDef) -> None:
    """Remove a lone ``pass`` or ``...`` body so real members can take its place."""
    cls.body[:] = [
        node for node in cls.body
        if not (
            isinstance(node, ast.Pass)
            or (
                isinstance(node, ast.Expr)
                and isinstance(node.value, ast.Constant)
                and node.value.value is Ellipsis
            )
        )
    ]
