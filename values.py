## Tagged literal values
import math
import esprima
from typing import Optional, Union

class JSValue(object):
    """
    This is an abstract class representing a JS value known statically
    """
    def __hash__(self) -> int:
        raise NotImplementedError

class JSPrimitive(JSValue):
    """
    This class represents a number, a string or a boolean.
    """
    def __init__(self, val : Union[float, str, bool]) -> None:
        """
        Class constructor

        :param Union[float, str, bool] val: The concrete value. Integers are stored as floats.
        """
        if type(val) is int:
            val = float(val)
        self.val : Union[float, str, bool] = val
        """The concrete value"""

    def is_number(self) -> bool:
        return type(self.val) is float

    def is_string(self) -> bool:
        return type(self.val) is str

    def is_bool(self) -> bool:
        return type(self.val) is bool

    def __eq__(self, other : JSValue) -> bool:
        if type(self) != type(other) or type(self.val) != type(other.val):
            return False
        if self.is_number() and math.isnan(self.val) and math.isnan(other.val):
            return True
        return self.val == other.val

    def __str__(self) -> str:
        return repr(self.val)

    def __repr__(self) -> str:
        return self.__str__()

    def __hash__(self) -> int:
        return self.val.__hash__()

class JSSpecial(JSValue):
    """
    Represents values that have no Python counterpart
    """
    def __init__(self, name : str) -> None:
        self.name : str = name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return self.__str__()

    def __eq__(self, other : JSValue) -> bool:
        if type(self) != type(other):
            return False
        return self.name == other.name

    def __hash__(self) -> int:
        return self.name.__hash__()

JSNull = JSSpecial("null")

## Literal nodes

def is_literal(node : esprima.nodes.Node) -> bool:
    """
    True for string, number, boolean and null literals. Regular expression
    literals are not values of the literal domain.
    """
    return node is not None and node.type == "Literal" and node.regex is None

def is_string_literal(node : esprima.nodes.Node) -> bool:
    return is_literal(node) and type(node.value) is str

def is_number_literal(node : esprima.nodes.Node) -> bool:
    return is_literal(node) and type(node.value) in (int, float)

def is_boolean_literal(node : esprima.nodes.Node) -> bool:
    return is_literal(node) and type(node.value) is bool

def is_null_literal(node : esprima.nodes.Node) -> bool:
    return is_literal(node) and node.value is None and node.raw == "null"

def literal_value(node : esprima.nodes.Node) -> Optional[JSValue]:
    """
    Get the tagged value of a literal node

    :param esprima.nodes.Node node: The node
    :rtype Optional[JSValue]:
    :return: The value, or None if the node is not a literal of the domain
    """
    if is_null_literal(node):
        return JSNull
    if is_string_literal(node) or is_number_literal(node) or is_boolean_literal(node):
        return JSPrimitive(node.value)
    return None

def value_to_node(value : JSValue, raw : Optional[str] = None) -> esprima.nodes.Node:
    """
    Build a fresh literal node. Without raw text the code generator renders the value canonically.

    :param JSValue value: The value
    :param Optional[str] raw: Source text for the literal, if any
    :rtype esprima.nodes.Node:
    :return: The literal node
    """
    if value == JSNull:
        return esprima.nodes.Literal(None, "null")
    if value.is_bool():
        return esprima.nodes.Literal(value.val, "true" if value.val else "false")
    return esprima.nodes.Literal(value.val, raw)

def string_node(s : str) -> esprima.nodes.Node:
    return value_to_node(JSPrimitive(s))
