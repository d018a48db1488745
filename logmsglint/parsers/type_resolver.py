"""Static type resolution for one Python unit.

Builds the table the log message analyzer consults to tell real logging
calls from look-alikes. Python has no declared types for most names, so the
resolver follows what a reader would:

- imports (``import logging``, ``from structlog import get_logger as gl``)
- logger factories (``logging.getLogger()``, ``structlog.get_logger()``,
  ``logger.getChild()``, ``log.bind()``)
- constructor calls of library and local classes, including local subclasses
  of ``logging.Logger``
- parameter and variable annotations (``logger: logging.Logger``)
- ``self.attr`` assignments made anywhere in a class
- lexical function scopes with ``global``/``nonlocal``

Bindings are flow-insensitive: a name bound to two different types anywhere
in its scope resolves to nothing, so the analyzer stays quiet about it.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from tree_sitter import Node

from logmsglint.analyzers.api_spec import FunctionIdentity, LOGGING_MODULE, STRUCTLOG_MODULE
from logmsglint.analyzers.extractor import is_concatenation, string_prefix
from logmsglint.parsers.python_parser import SourceUnit, strip_parens

logger = logging.getLogger(__name__)

LOCAL_MODULE = "<local>"
BUILTINS_MODULE = "builtins"


@dataclass(frozen=True)
class ModuleType:
    path: str


@dataclass(frozen=True)
class ClassType:
    module: str
    name: str


@dataclass(frozen=True)
class InstanceType:
    module: str
    cls: str


@dataclass(frozen=True)
class FunctionType:
    identity: FunctionIdentity
    returns: Optional["StaticType"] = None


StaticType = Union[ModuleType, ClassType, InstanceType, FunctionType]

STR = InstanceType(BUILTINS_MODULE, "str")

STR_METHODS = frozenset({
    "capitalize", "casefold", "center", "expandtabs", "format", "format_map",
    "join", "ljust", "lower", "lstrip", "removeprefix", "removesuffix",
    "replace", "rjust", "rstrip", "strip", "swapcase", "title", "upper", "zfill",
})

_LOGGER = InstanceType(LOGGING_MODULE, "Logger")
_BOUND_LOGGER = InstanceType(STRUCTLOG_MODULE, "BoundLogger")


def _factory(module: str, name: str, returns: StaticType) -> FunctionType:
    return FunctionType(FunctionIdentity(module, name), returns)


# Library members that are not plain functions, or whose return type matters
LIBRARY_MEMBERS: dict[tuple[str, str], StaticType] = {
    ("logging", "Logger"): ClassType(LOGGING_MODULE, "Logger"),
    ("logging", "RootLogger"): ClassType(LOGGING_MODULE, "RootLogger"),
    ("logging", "LoggerAdapter"): ClassType(LOGGING_MODULE, "LoggerAdapter"),
    ("logging", "root"): InstanceType(LOGGING_MODULE, "RootLogger"),
    ("logging", "getLogger"): _factory(LOGGING_MODULE, "getLogger", _LOGGER),
    ("structlog", "get_logger"): _factory(STRUCTLOG_MODULE, "get_logger", _BOUND_LOGGER),
    ("structlog", "getLogger"): _factory(STRUCTLOG_MODULE, "getLogger", _BOUND_LOGGER),
    ("structlog", "wrap_logger"): _factory(STRUCTLOG_MODULE, "wrap_logger", _BOUND_LOGGER),
    ("structlog", "BoundLogger"): ClassType(STRUCTLOG_MODULE, "BoundLogger"),
    ("structlog", "stdlib"): ModuleType("structlog.stdlib"),
    ("structlog", "typing"): ModuleType("structlog.typing"),
    ("structlog", "types"): ModuleType("structlog.types"),
    ("structlog.stdlib", "get_logger"): _factory(STRUCTLOG_MODULE, "get_logger", _BOUND_LOGGER),
    ("structlog.stdlib", "BoundLogger"): ClassType(STRUCTLOG_MODULE, "BoundLogger"),
    ("structlog.stdlib", "AsyncBoundLogger"): ClassType(STRUCTLOG_MODULE, "AsyncBoundLogger"),
    ("structlog.typing", "FilteringBoundLogger"): ClassType(STRUCTLOG_MODULE, "FilteringBoundLogger"),
    ("structlog.types", "FilteringBoundLogger"): ClassType(STRUCTLOG_MODULE, "FilteringBoundLogger"),
}

# Methods of library instances that return another logger
METHOD_RETURNS: dict[tuple[str, str], StaticType] = {
    (LOGGING_MODULE, "getChild"): _LOGGER,
    (STRUCTLOG_MODULE, "bind"): _BOUND_LOGGER,
    (STRUCTLOG_MODULE, "new"): _BOUND_LOGGER,
    (STRUCTLOG_MODULE, "unbind"): _BOUND_LOGGER,
    (STRUCTLOG_MODULE, "try_unbind"): _BOUND_LOGGER,
}

BUILTINS: dict[str, StaticType] = {
    "str": ClassType(BUILTINS_MODULE, "str"),
}

_SCOPE_NODES = frozenset({"function_definition", "class_definition"})
_UNRESOLVED = object()


@dataclass
class Binding:
    """One place a name (or ``self`` attribute) receives a value."""

    scope: "Scope"
    value: Optional[Node] = None
    annotation: Optional[Node] = None
    fixed: Optional[StaticType] = None


@dataclass(eq=False)
class Scope:
    kind: str  # module | class | function
    parent: Optional["Scope"] = None
    name: str = ""
    bindings: dict[str, list[Binding]] = field(default_factory=dict)
    global_names: set[str] = field(default_factory=set)
    nonlocal_names: set[str] = field(default_factory=set)

    def bind(self, name: str, binding: Binding) -> None:
        self.bindings.setdefault(name, []).append(binding)


@dataclass(eq=False)
class LocalClass:
    name: str
    scope: Scope  # scope the class statement lives in
    bases: list[Node] = field(default_factory=list)
    methods: set[str] = field(default_factory=set)
    attributes: dict[str, list[Binding]] = field(default_factory=dict)


class TypeTable:
    """Type-resolution table for one unit.

    Implements the ``TypeInfo`` protocol the analyzer depends on.
    """

    def __init__(self, unit: SourceUnit):
        self.unit = unit
        self.module_scope = Scope(kind="module")
        self._scopes: dict[tuple[int, int], Scope] = {}
        self._classes: dict[str, LocalClass] = {}
        self._memo: dict[tuple[int, str], object] = {}
        self._in_progress: set[tuple[int, str]] = set()
        self._pending_attributes: list[tuple[LocalClass, str, Scope, str, Binding]] = []
        self._collect(unit.root, self.module_scope, None)
        self._bind_pending_attributes()

    # ------------------------------------------------------------------
    # TypeInfo
    # ------------------------------------------------------------------

    def callee(self, call: Node) -> Optional[FunctionIdentity]:
        function = call.child_by_field_name("function")
        if function is None:
            return None
        resolved = self.type_of(function)
        if isinstance(resolved, FunctionType):
            return resolved.identity
        return None

    def is_string(self, node: Node) -> bool:
        return self.type_of(node) == STR

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def type_of(self, node: Node) -> Optional[StaticType]:
        return self._type_of(node, self.scope_at(node))

    def scope_at(self, node: Node) -> Scope:
        """Innermost scope whose body contains ``node``."""
        child = node
        parent = node.parent
        while parent is not None:
            if parent.type in _SCOPE_NODES and child == parent.child_by_field_name("body"):
                scope = self._scopes.get((parent.start_byte, parent.end_byte))
                if scope is not None:
                    return scope
            child, parent = parent, parent.parent
        return self.module_scope

    def _type_of(self, node: Node, scope: Scope) -> Optional[StaticType]:
        node = strip_parens(node)
        kind = node.type

        if kind == "identifier":
            return self._lookup(self._text(node), scope)

        if kind == "attribute":
            obj = node.child_by_field_name("object")
            attr = node.child_by_field_name("attribute")
            if obj is None or attr is None:
                return None
            return self._member(self._type_of(obj, scope), self._text(attr))

        if kind == "call":
            function = node.child_by_field_name("function")
            if function is None:
                return None
            target = self._type_of(function, scope)
            if isinstance(target, FunctionType):
                return target.returns
            if isinstance(target, ClassType):
                return InstanceType(target.module, target.name)
            return None

        if kind == "string":
            return None if "b" in string_prefix(node) else STR

        if kind == "concatenated_string":
            parts = [child for child in node.named_children if child.type == "string"]
            if parts and all("b" not in string_prefix(part) for part in parts):
                return STR
            return None

        if kind == "binary_operator":
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if left is None or right is None:
                return None
            if is_concatenation(node):
                if STR in (self._type_of(left, scope), self._type_of(right, scope)):
                    return STR
                return None
            operator = node.child_by_field_name("operator")
            if operator is not None and operator.type == "%" and self._type_of(left, scope) == STR:
                return STR
            return None

        if kind == "conditional_expression":
            branches = [child for child in node.named_children if child.type != "comment"]
            if len(branches) == 3:
                # body if condition else alternative
                if self._type_of(branches[0], scope) == STR and self._type_of(branches[2], scope) == STR:
                    return STR
            return None

        return None

    def _lookup(self, name: str, scope: Scope) -> Optional[StaticType]:
        current: Optional[Scope] = scope
        first = True
        while current is not None:
            if name in current.global_names:
                current = self.module_scope
                first = True
                continue
            # class bodies are only visible to code directly inside them
            if (first or current.kind != "class") and name in current.bindings:
                if name in current.nonlocal_names:
                    current = current.parent
                    first = False
                    continue
                return self._resolve_bindings(current.bindings[name], (id(current), name))
            current = current.parent
            first = False
        return BUILTINS.get(name)

    def _resolve_bindings(self, bindings: list[Binding], key: tuple[int, str]) -> Optional[StaticType]:
        cached = self._memo.get(key, _UNRESOLVED)
        if cached is not _UNRESOLVED:
            return cached
        if key in self._in_progress:
            return None

        self._in_progress.add(key)
        try:
            types = {self._binding_type(binding) for binding in bindings}
        finally:
            self._in_progress.discard(key)

        resolved = types.pop() if len(types) == 1 else None
        self._memo[key] = resolved
        return resolved

    def _binding_type(self, binding: Binding) -> Optional[StaticType]:
        if binding.annotation is not None:
            annotated = self._annotation_type(binding.annotation, binding.scope)
            if annotated is not None:
                return annotated
        if binding.value is not None:
            return self._type_of(binding.value, binding.scope)
        return binding.fixed

    def _annotation_type(self, node: Node, scope: Scope) -> Optional[StaticType]:
        if node.type == "type":
            inner = [child for child in node.named_children if child.type != "comment"]
            if len(inner) != 1:
                return None
            node = inner[0]
        resolved = self._type_of(node, scope)
        if isinstance(resolved, ClassType):
            return InstanceType(resolved.module, resolved.name)
        return None

    def _member(self, owner: Optional[StaticType], attr: str) -> Optional[StaticType]:
        if owner is None:
            return None

        if isinstance(owner, ModuleType):
            member = LIBRARY_MEMBERS.get((owner.path, attr))
            if member is not None:
                return member
            return FunctionType(FunctionIdentity(owner.path, attr))

        if owner == STR:
            if attr in STR_METHODS:
                return FunctionType(FunctionIdentity(BUILTINS_MODULE, attr, owner="str"), STR)
            return None

        if isinstance(owner, (InstanceType, ClassType)):
            module = owner.module
            cls = owner.cls if isinstance(owner, InstanceType) else owner.name
            if module == LOCAL_MODULE:
                return self._local_member(cls, attr, set())
            if module == BUILTINS_MODULE:
                return None
            returns = METHOD_RETURNS.get((module, attr))
            return FunctionType(FunctionIdentity(module, attr, owner=cls), returns)

        return None

    def _local_member(self, cls: str, attr: str, seen: set[str]) -> Optional[StaticType]:
        info = self._classes.get(cls)
        if info is None or cls in seen:
            return None
        seen.add(cls)

        if attr in info.attributes:
            return self._resolve_bindings(info.attributes[attr], (id(info), attr))
        if attr in info.methods:
            return FunctionType(FunctionIdentity(LOCAL_MODULE, attr, owner=cls))

        for base_node in info.bases:
            base = self._type_of(base_node, info.scope)
            if not isinstance(base, ClassType):
                continue
            if base.module == LOCAL_MODULE:
                member = self._local_member(base.name, attr, seen)
            else:
                member = self._member(InstanceType(base.module, base.name), attr)
            if member is not None:
                return member
        return None

    # ------------------------------------------------------------------
    # Binding collection
    # ------------------------------------------------------------------

    def _collect(self, node: Node, scope: Scope, cls: Optional[LocalClass]) -> None:
        for child in node.children:
            self._collect_node(child, scope, cls)

    def _collect_node(self, node: Node, scope: Scope, cls: Optional[LocalClass]) -> None:
        kind = node.type

        if kind == "import_statement":
            self._collect_import(node, scope)
            return
        if kind == "import_from_statement":
            self._collect_import_from(node, scope)
            return
        if kind == "function_definition":
            self._collect_function(node, scope, cls)
            return
        if kind == "class_definition":
            self._collect_class(node, scope)
            return
        if kind in ("global_statement", "nonlocal_statement"):
            names = {self._text(child) for child in node.named_children if child.type == "identifier"}
            target = scope.global_names if kind == "global_statement" else scope.nonlocal_names
            target.update(names)
            return
        if kind == "assignment":
            self._collect_assignment(node, scope, cls)
        elif kind == "augmented_assignment":
            left = node.child_by_field_name("left")
            if left is not None:
                self._bind_target(left, Binding(scope), scope, cls)
        elif kind == "named_expression":
            name = node.child_by_field_name("name")
            if name is not None:
                scope.bind(self._text(name), Binding(scope, value=node.child_by_field_name("value")))
        elif kind == "for_statement":
            left = node.child_by_field_name("left")
            if left is not None:
                self._bind_target(left, Binding(scope), scope, cls)
        elif kind == "as_pattern":
            alias = node.child_by_field_name("alias")
            if alias is not None:
                self._bind_target(alias, Binding(scope), scope, cls)

        self._collect(node, scope, cls)

    def _collect_import(self, node: Node, scope: Scope) -> None:
        for child in node.named_children:
            if child.type == "dotted_name":
                # import a.b.c binds a
                module = self._text(child)
                top = module.split(".")[0]
                scope.bind(top, Binding(scope, fixed=ModuleType(top)))
            elif child.type == "aliased_import":
                name_node = child.child_by_field_name("name")
                alias_node = child.child_by_field_name("alias")
                if name_node is not None and alias_node is not None:
                    module = ModuleType(self._text(name_node))
                    scope.bind(self._text(alias_node), Binding(scope, fixed=module))

    def _collect_import_from(self, node: Node, scope: Scope) -> None:
        module_node = node.child_by_field_name("module_name")
        relative = module_node is None or module_node.type == "relative_import"
        module = None if relative else ModuleType(self._text(module_node))

        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                name_node = child.child_by_field_name("name")
                alias_node = child.child_by_field_name("alias")
                if name_node is None or alias_node is None:
                    continue
                member, bound = self._text(name_node), self._text(alias_node)
            else:
                member = bound = self._text(child)

            if module is None or "." in member:
                scope.bind(bound, Binding(scope))
            else:
                scope.bind(bound, Binding(scope, fixed=self._member(module, member)))

    def _collect_function(self, node: Node, scope: Scope, cls: Optional[LocalClass]) -> None:
        name_node = node.child_by_field_name("name")
        name = self._text(name_node)
        owner = cls.name if cls is not None and scope.kind == "class" else None
        identity = FunctionIdentity(LOCAL_MODULE, name, owner=owner)
        if owner is not None:
            cls.methods.add(name)
        else:
            scope.bind(name, Binding(scope, fixed=FunctionType(identity)))

        function_scope = Scope(kind="function", parent=scope, name=name)
        self._scopes[(node.start_byte, node.end_byte)] = function_scope

        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            self._collect_parameters(parameters, function_scope, cls if owner else None, node)

        body = node.child_by_field_name("body")
        if body is not None:
            self._collect(body, function_scope, cls)

    def _collect_parameters(
        self,
        parameters: Node,
        scope: Scope,
        cls: Optional[LocalClass],
        function: Node,
    ) -> None:
        decorators = self._decorators(function)
        first = True
        for param in parameters.named_children:
            name_node, annotation = self._parameter_parts(param)
            if name_node is None:
                continue

            binding = Binding(scope, annotation=annotation)
            if first and cls is not None and "staticmethod" not in decorators:
                receiver = ClassType(LOCAL_MODULE, cls.name)
                if "classmethod" not in decorators:
                    receiver = InstanceType(LOCAL_MODULE, cls.name)
                binding = Binding(scope, fixed=receiver)
            first = False
            scope.bind(self._text(name_node), binding)

    def _parameter_parts(self, param: Node) -> tuple[Optional[Node], Optional[Node]]:
        if param.type == "identifier":
            return param, None
        if param.type in ("default_parameter", "typed_default_parameter"):
            return param.child_by_field_name("name"), param.child_by_field_name("type")
        if param.type == "typed_parameter":
            names = [child for child in param.named_children if child.type == "identifier"]
            return (names[0] if names else None), param.child_by_field_name("type")
        if param.type in ("list_splat_pattern", "dictionary_splat_pattern"):
            names = [child for child in param.named_children if child.type == "identifier"]
            return (names[0] if names else None), None
        return None, None

    def _decorators(self, function: Node) -> set[str]:
        parent = function.parent
        if parent is None or parent.type != "decorated_definition":
            return set()
        names = set()
        for child in parent.named_children:
            if child.type == "decorator":
                names.add(self._text(child).lstrip("@").strip().split("(")[0].split(".")[-1])
        return names

    def _collect_class(self, node: Node, scope: Scope) -> None:
        name = self._text(node.child_by_field_name("name"))
        info = LocalClass(name=name, scope=scope)

        superclasses = node.child_by_field_name("superclasses")
        if superclasses is not None:
            info.bases = [
                child for child in superclasses.named_children
                if child.type not in ("keyword_argument", "comment")
            ]

        if name in self._classes:
            # two classes with one name: callers cannot tell which is meant
            scope.bind(name, Binding(scope))
        self._classes[name] = info
        scope.bind(name, Binding(scope, fixed=ClassType(LOCAL_MODULE, name)))

        class_scope = Scope(kind="class", parent=scope, name=name)
        self._scopes[(node.start_byte, node.end_byte)] = class_scope

        body = node.child_by_field_name("body")
        if body is not None:
            self._collect(body, class_scope, info)

    def _collect_assignment(self, node: Node, scope: Scope, cls: Optional[LocalClass]) -> None:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        annotation = node.child_by_field_name("type")

        # a = b = value
        value = right
        while value is not None and value.type == "assignment":
            value = value.child_by_field_name("right")

        if left is not None:
            self._bind_target(left, Binding(scope, value=value, annotation=annotation), scope, cls)

    def _bind_target(
        self,
        target: Node,
        binding: Binding,
        scope: Scope,
        cls: Optional[LocalClass],
    ) -> None:
        target = strip_parens(target)

        if target.type == "identifier":
            name = self._text(target)
            self._binding_scope(name, scope).bind(name, binding)
            if cls is not None and scope.kind == "class":
                cls.attributes.setdefault(name, []).append(binding)
            return

        if target.type == "attribute":
            obj = target.child_by_field_name("object")
            attr = target.child_by_field_name("attribute")
            if cls is None or obj is None or attr is None or obj.type != "identifier":
                return
            # the receiver can only be resolved once every binding is known
            self._pending_attributes.append((cls, self._text(obj), scope, self._text(attr), binding))
            return

        if target.type == "as_pattern_target":
            for child in target.named_children:
                self._bind_target(child, binding, scope, cls)
            return

        if target.type in ("pattern_list", "tuple_pattern", "list_pattern", "expression_list", "tuple", "list"):
            for child in target.named_children:
                self._bind_target(child, Binding(scope), scope, cls)
        elif target.type in ("list_splat_pattern", "list_splat"):
            for child in target.named_children:
                self._bind_target(child, Binding(scope), scope, cls)

    def _binding_scope(self, name: str, scope: Scope) -> Scope:
        """Scope an assignment to ``name`` in ``scope`` actually binds in."""
        if name in scope.global_names:
            return self.module_scope
        if name in scope.nonlocal_names:
            current = scope.parent
            while current is not None and current.kind != "module":
                if current.kind == "function" and name in current.bindings:
                    return current
                current = current.parent
        return scope

    def _bind_pending_attributes(self) -> None:
        for cls, receiver_name, scope, attr, binding in self._pending_attributes:
            receiver = self._lookup(receiver_name, scope)
            if receiver in (InstanceType(LOCAL_MODULE, cls.name), ClassType(LOCAL_MODULE, cls.name)):
                cls.attributes.setdefault(attr, []).append(binding)
        self._pending_attributes.clear()
        self._memo.clear()

    def _text(self, node: Optional[Node]) -> str:
        return self.unit.text(node)


def resolve_types(unit: SourceUnit) -> TypeTable:
    """Build the type-resolution table for ``unit``."""
    table = TypeTable(unit)
    logger.debug(f"Resolved {len(table._scopes)} scopes and {len(table._classes)} classes in {unit.file_path}")
    return table
