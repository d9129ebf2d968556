import esprima

#Node fields that never hold child nodes of the program
NOT_CHILDREN = {"type", "range", "loc", "comments", "tokens", "errors", "leadingComments", "trailingComments", "innerComments"}

#Node type -> name of the field holding a statement list
STATEMENT_LISTS = {"Program": "body", "BlockStatement": "body", "SwitchCase": "consequent"}

def is_node(obj):
    return isinstance(obj, esprima.nodes.Node) and obj.type is not None

def is_statement(node):
    return node.type.endswith("Statement") or node.type.endswith("Declaration")

def field(obj, name, default=None):
    """
    Read a field from a node or from a plain dict (esprima uses both, e.g. for
    template element values and comments). Missing fields give the default.
    """
    if isinstance(obj, dict):
        value = obj.get(name)
    else:
        value = obj.__dict__.get(name)
    if value is None:
        return default
    return value

def get_ann(node, name, default=None):
    try:
        return node.__dict__["notrans_ann"][name]
    except KeyError:
        return default

def set_ann(node, name, value):
    anns = node.__dict__.get("notrans_ann")
    if anns is None:
        anns = {}
        node.__dict__["notrans_ann"] = anns
    anns[name] = value

def iter_child_nodes(node):
    """
    Yield the direct child nodes of a node, in field order (which follows source order).
    """
    for k, v in list(node.__dict__.items()):
        if k in NOT_CHILDREN or k.startswith("notrans_") or k.startswith("noout_"):
            continue
        if is_node(v):
            yield v
        elif isinstance(v, list):
            for e in v:
                if is_node(e):
                    yield e

def node_replace(dst, src):
    """
    Replace dst in place by src: dst keeps its identity (so parents need not be
    known) but takes all the fields of src.
    """
    fields = dict(src.__dict__)
    if "notrans_ann" in fields:
        fields["notrans_ann"] = dict(fields["notrans_ann"])
    dst.__dict__ = fields

def empty_statement():
    return esprima.nodes.EmptyStatement()

def mark_removed(statement):
    """
    Turn a statement into an empty statement flagged for deletion from its statement list.
    """
    node_replace(statement, empty_statement())
    set_ann(statement, "removed", True)

def base_identifier(expr):
    """
    Return the identifier at the root of a member chain (a in a.b[c].d), or None.
    """
    while expr is not None and expr.type == "MemberExpression":
        expr = expr.object
    if expr is not None and expr.type == "Identifier":
        return expr
    return None

def unalias_shorthand(prop):
    """
    The parser uses the same node as key and value of shorthand properties ({a}, {a = 1}).
    Give the value its own identifier so that renaming it leaves the key unchanged.
    """
    if not prop.shorthand or prop.computed:
        return
    if prop.value is prop.key:
        prop.value = esprima.nodes.Identifier(prop.key.name)
    elif prop.value is not None and prop.value.type == "AssignmentPattern" and prop.value.left is prop.key:
        prop.value.left = esprima.nodes.Identifier(prop.key.name)

def pattern_identifiers(pattern):
    """
    Yield the identifiers bound by a declaration or assignment pattern.
    """
    if pattern is None:
        return
    if pattern.type == "Identifier":
        yield pattern
    elif pattern.type == "ObjectPattern":
        for prop in pattern.properties:
            if prop.type == "RestElement":
                yield from pattern_identifiers(prop.argument)
            else:
                unalias_shorthand(prop)
                yield from pattern_identifiers(prop.value)
    elif pattern.type == "ArrayPattern":
        for elem in pattern.elements:
            yield from pattern_identifiers(elem)
    elif pattern.type == "AssignmentPattern":
        yield from pattern_identifiers(pattern.left)
    elif pattern.type == "RestElement":
        yield from pattern_identifiers(pattern.argument)

def is_async(fn):
    return bool(fn.__dict__.get("isAsync") or fn.__dict__.get("async"))

def is_static(method):
    return bool(method.__dict__.get("static") or method.__dict__.get("isStatic"))
