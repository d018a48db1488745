"""Call-site resolution: is this call a logging call, and where is its message?"""

import logging
from typing import Optional, Protocol

from tree_sitter import Node

from logmsglint.analyzers.api_spec import (
    DEFAULT_API_SPEC,
    FunctionIdentity,
    LoggingAPISpec,
    MessageArg,
)

logger = logging.getLogger(__name__)


class TypeInfo(Protocol):
    """Read-only type-resolution table for one compilation unit."""

    def callee(self, call: Node) -> Optional[FunctionIdentity]:
        """Declared identity of the function or method ``call`` invokes."""
        ...

    def is_string(self, node: Node) -> bool:
        """Whether ``node`` statically evaluates to a ``str``."""
        ...


def message_argument(call: Node, arg: MessageArg) -> Optional[Node]:
    """Pick the message argument of ``call`` by position, falling back to keyword."""
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "argument_list":
        return None

    positional: list[Node] = []
    keyword_value: Optional[Node] = None
    splat_seen = False

    for child in arguments.named_children:
        if child.type == "comment":
            continue
        if child.type == "keyword_argument":
            name = child.child_by_field_name("name")
            if name is not None and name.text.decode("utf-8") == arg.keyword:
                keyword_value = child.child_by_field_name("value")
            continue
        if child.type == "dictionary_splat":
            continue
        if child.type == "list_splat":
            # positions from here on are unknown
            splat_seen = True
            continue
        if not splat_seen:
            positional.append(child)

    if arg.index < len(positional):
        return positional[arg.index]
    if splat_seen:
        return None
    return keyword_value


def resolve_message_expr(
    call: Node,
    type_info: TypeInfo,
    api_spec: LoggingAPISpec = DEFAULT_API_SPEC,
) -> Optional[Node]:
    """Return the message expression of a recognised logging call, else ``None``.

    Recognition goes through the declared identity of the callee, never its
    bare name: a project's own ``Reporter.info`` is not a logging call.
    """
    identity = type_info.callee(call)
    if identity is None:
        return None

    message_arg = api_spec.lookup(identity)
    if message_arg is None:
        return None

    expr = message_argument(call, message_arg)
    if expr is None:
        logger.debug(f"No message argument for {identity.qualified_name} at byte {call.start_byte}")
        return None

    if not type_info.is_string(expr):
        return None

    return expr
