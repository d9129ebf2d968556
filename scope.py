"""
Binding and reference analysis.

Every declared name gets a Binding in the scope that owns it (var and
function-level names in the enclosing function, let/const/class in the
enclosing block). Every identifier reading or writing a variable is resolved
to its Binding once the whole tree has been visited, so hoisted declarations
are found whatever their position.

After ScopeAnalyzer(ast).run(), every visited Identifier carries a "binding"
annotation (None for globals).
"""
import esprima
import config
from typing import Dict, List, Optional, Set, Tuple
from node_tools import set_ann, get_ann, iter_child_nodes, pattern_identifiers, base_identifier, unalias_shorthand

FUNCTIONS = ["FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression"]

class Binding(object):
    """
    A declared name
    """
    def __init__(self, name : str, kind : str, scope : 'Scope') -> None:
        self.name : str = name
        self.kind : str = kind
        """var, let, const, function, param, catch, class or import"""

        self.scope : 'Scope' = scope

        self.identifiers : List[esprima.nodes.Node] = []
        """Declaring identifiers"""

        self.references : List[esprima.nodes.Node] = []
        """Identifiers referring to this binding, in source order"""

        self.pinned : bool = False
        """The name is also visible outside of the scope (block function declarations in sloppy code), it must not be renamed"""

    def is_written(self) -> bool:
        """
        True if the variable is assigned, or if the object it holds is modified through a member
        """
        for ref in self.references:
            if get_ann(ref, "lvalue") or get_ann(ref, "member_lvalue"):
                return True
        return False

    def __repr__(self) -> str:
        return "Binding(" + self.name + ", " + self.kind + ", refs=" + str(len(self.references)) + ")"

class Scope(object):
    """
    A lexical scope
    """
    def __init__(self, kind : str, block : esprima.nodes.Node, parent : Optional['Scope'] = None) -> None:
        """
        Class constructor

        :param str kind: "program", "function", "block" or "catch"
        :param esprima.nodes.Node block: The node that opens the scope
        :param Optional[Scope] parent: The enclosing scope
        """
        self.kind : str = kind
        self.block : esprima.nodes.Node = block
        self.parent : Optional[Scope] = parent
        self.bindings : Dict[str, Binding] = {}
        self.children : List[Scope] = []
        self.names : Set[str] = set()
        """For the program scope: every identifier name used in the program"""
        self.strict : bool = False
        if parent is not None:
            parent.children.append(self)
            self.strict = parent.strict

    def declare(self, name : str, kind : str, identifier : esprima.nodes.Node) -> Binding:
        binding = self.bindings.get(name)
        if binding is None:
            binding = Binding(name, kind, self)
            self.bindings[name] = binding
        binding.identifiers.append(identifier)
        set_ann(identifier, "binding", binding)
        return binding

    def lookup(self, name : str) -> Optional[Binding]:
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None

    def function_scope(self) -> 'Scope':
        scope = self
        while scope.kind not in ("function", "program"):
            scope = scope.parent
        return scope

    def walk(self):
        """
        Yield this scope and all nested scopes, outermost first, in source order
        """
        yield self
        for child in self.children:
            yield from child.walk()

def has_use_strict(body : List[esprima.nodes.Node]) -> bool:
    for statement in body:
        if statement.type != "ExpressionStatement" or statement.directive is None:
            return False
        if statement.directive == "use strict":
            return True
    return False

class ScopeAnalyzer(object):
    def __init__(self, ast : esprima.nodes.Node) -> None:
        self.ast : esprima.nodes.Node = ast
        self.program : Optional[Scope] = None
        self.unresolved : List[Tuple[esprima.nodes.Node, Scope]] = []

        self.block_functions : List[Tuple[Binding, Scope]] = []
        """Function declarations nested in blocks of sloppy code"""

        self.names : Set[str] = set()
        """Every identifier name seen in the program"""

    def run(self) -> Scope:
        """
        Analyze the program

        :rtype Scope:
        :return: The program scope. Its "names" attribute holds every identifier name used in the program
        """
        self.program = Scope("program", self.ast)
        self.program.strict = self.ast.sourceType == "module" or has_use_strict(self.ast.body)
        self.unresolved = []
        self.block_functions = []
        self.names = set()
        for statement in self.ast.body:
            self.visit(statement, self.program)
        for binding, scope in self.block_functions:
            self.hoist_block_function(binding, scope)
        for identifier, scope in self.unresolved:
            binding = scope.lookup(identifier.name)
            set_ann(identifier, "binding", binding)
            if binding is not None:
                binding.references.append(identifier)
        self.program.names = self.names
        return self.program

    def hoist_block_function(self, binding : Binding, scope : Scope) -> None:
        """
        In sloppy code, a function declared in a block is also a var of the enclosing function.
        The function scope gets the same binding, so that references outside of the block resolve to it.
        """
        fscope = scope.function_scope()
        s = scope.parent
        while s is not fscope:
            other = s.bindings.get(binding.name)
            if other is not None and other.kind not in ("var", "function"):
                #Shadowed by a lexical declaration: no var is created
                return
            s = s.parent
        existing = fscope.bindings.get(binding.name)
        if existing is None:
            fscope.bindings[binding.name] = binding
            #Block functions of the program are globals
            binding.pinned = fscope.kind == "program"
        else:
            existing.pinned = True
            binding.pinned = True

    def reference(self, identifier : esprima.nodes.Node, scope : Scope) -> None:
        self.names.add(identifier.name)
        self.unresolved.append((identifier, scope))

    def declare_pattern(self, pattern : esprima.nodes.Node, kind : str, target : Scope, scope : Scope) -> None:
        """
        Declare the names bound by a pattern in target, and visit the
        expressions it contains (default values, computed keys) in scope
        """
        for identifier in pattern_identifiers(pattern):
            self.names.add(identifier.name)
            target.declare(identifier.name, kind, identifier)
        self.visit_pattern_expressions(pattern, scope)

    def visit_pattern_expressions(self, pattern : esprima.nodes.Node, scope : Scope) -> None:
        if pattern is None:
            return
        if pattern.type == "ObjectPattern":
            for prop in pattern.properties:
                if prop.type == "RestElement":
                    self.visit_pattern_expressions(prop.argument, scope)
                else:
                    if prop.computed:
                        self.visit(prop.key, scope)
                    self.visit_pattern_expressions(prop.value, scope)
        elif pattern.type == "ArrayPattern":
            for elem in pattern.elements:
                self.visit_pattern_expressions(elem, scope)
        elif pattern.type == "AssignmentPattern":
            self.visit_pattern_expressions(pattern.left, scope)
            self.visit(pattern.right, scope)
        elif pattern.type == "RestElement":
            self.visit_pattern_expressions(pattern.argument, scope)
        elif pattern.type != "Identifier":
            self.visit(pattern, scope)

    def mark_target(self, target : esprima.nodes.Node) -> None:
        """
        Flag the identifiers written by an assignment target
        """
        if target is None:
            return
        if target.type == "MemberExpression":
            base = base_identifier(target)
            if base is not None:
                set_ann(base, "member_lvalue", True)
        elif target.type in ("Identifier", "ObjectPattern", "ArrayPattern", "AssignmentPattern", "RestElement"):
            for identifier in pattern_identifiers(target):
                set_ann(identifier, "lvalue", True)

    def visit_function(self, fn : esprima.nodes.Node, scope : Scope) -> None:
        if fn.type == "FunctionDeclaration" and fn.id is not None:
            self.names.add(fn.id.name)
            binding = scope.declare(fn.id.name, "function", fn.id)
            if scope.kind not in ("function", "program") and not scope.strict:
                self.block_functions.append((binding, scope))
        fscope = Scope("function", fn, scope)
        if fn.type == "FunctionExpression" and fn.id is not None:
            self.names.add(fn.id.name)
            fscope.declare(fn.id.name, "function", fn.id)
        if fn.body.type == "BlockStatement" and has_use_strict(fn.body.body):
            fscope.strict = True
        for param in fn.params:
            self.declare_pattern(param, "param", fscope, fscope)
        if fn.body.type == "BlockStatement":
            for statement in fn.body.body:
                self.visit(statement, fscope)
        else:
            self.visit(fn.body, fscope)

    def visit_class(self, cls : esprima.nodes.Node, scope : Scope) -> None:
        if cls.id is not None:
            self.names.add(cls.id.name)
            if cls.type == "ClassDeclaration":
                scope.declare(cls.id.name, "class", cls.id)
            else:
                scope = Scope("block", cls, scope)
                scope.declare(cls.id.name, "class", cls.id)
        self.visit(cls.superClass, scope)
        #Class bodies are strict code
        bscope = Scope("block", cls.body, scope)
        bscope.strict = True
        for item in cls.body.body:
            if item.computed:
                self.visit(item.key, bscope)
            self.visit(item.value, bscope)

    def visit(self, node : esprima.nodes.Node, scope : Scope) -> None:
        if node is None:
            return
        t = node.type

        if t == "Identifier":
            self.reference(node, scope)

        elif t in FUNCTIONS:
            self.visit_function(node, scope)

        elif t in ("ClassDeclaration", "ClassExpression"):
            self.visit_class(node, scope)

        elif t == "VariableDeclaration":
            target = scope.function_scope() if node.kind == "var" else scope
            for decl in node.declarations:
                self.declare_pattern(decl.id, node.kind, target, scope)
                self.visit(decl.init, scope)

        elif t == "BlockStatement":
            bscope = Scope("block", node, scope)
            for statement in node.body:
                self.visit(statement, bscope)

        elif t in ("ForStatement", "ForInStatement", "ForOfStatement"):
            head = node.init if t == "ForStatement" else node.left
            if head is not None and head.type == "VariableDeclaration" and head.kind != "var":
                scope = Scope("block", node, scope)
            if t != "ForStatement" and head is not None and head.type != "VariableDeclaration":
                self.mark_target(head)
            for child in iter_child_nodes(node):
                self.visit(child, scope)

        elif t == "SwitchStatement":
            self.visit(node.discriminant, scope)
            sscope = Scope("block", node, scope)
            for case in node.cases:
                self.visit(case.test, sscope)
                for statement in case.consequent:
                    self.visit(statement, sscope)

        elif t == "CatchClause":
            cscope = Scope("catch", node, scope)
            if node.param is not None:
                self.declare_pattern(node.param, "catch", cscope, cscope)
            self.visit(node.body, cscope)

        elif t == "MemberExpression":
            self.visit(node.object, scope)
            if node.computed:
                self.visit(node.property, scope)

        elif t == "Property":
            if node.computed:
                self.visit(node.key, scope)
            unalias_shorthand(node)
            self.visit(node.value, scope)

        elif t == "MethodDefinition":
            if node.computed:
                self.visit(node.key, scope)
            self.visit(node.value, scope)

        elif t == "AssignmentExpression":
            self.mark_target(node.left)
            if node.left.type in ("ObjectPattern", "ArrayPattern"):
                for identifier in pattern_identifiers(node.left):
                    self.reference(identifier, scope)
                self.visit_pattern_expressions(node.left, scope)
            else:
                self.visit(node.left, scope)
            self.visit(node.right, scope)

        elif t == "UpdateExpression":
            self.mark_target(node.argument)
            self.visit(node.argument, scope)

        elif t == "UnaryExpression":
            if node.operator == "delete":
                self.mark_target(node.argument)
            self.visit(node.argument, scope)

        elif t == "CallExpression":
            callee = node.callee
            if callee.type == "MemberExpression" and not callee.computed and callee.property.name in config.array_mutators:
                base = base_identifier(callee.object)
                if base is not None:
                    set_ann(base, "member_lvalue", True)
            for child in iter_child_nodes(node):
                self.visit(child, scope)

        elif t in ("LabeledStatement", "BreakStatement", "ContinueStatement"):
            self.visit(node.body, scope)

        elif t == "MetaProperty":
            pass

        elif t == "ImportDeclaration":
            for spec in node.specifiers:
                self.names.add(spec.local.name)
                self.program.declare(spec.local.name, "import", spec.local)

        elif t == "ExportNamedDeclaration":
            self.visit(node.declaration, scope)
            if node.source is None:
                for spec in node.specifiers:
                    self.reference(spec.local, scope)

        elif t == "ExportAllDeclaration":
            pass

        else:
            for child in iter_child_nodes(node):
                self.visit(child, scope)

def analyze(ast : esprima.nodes.Node) -> Scope:
    """
    Resolve all bindings of a program

    :param esprima.nodes.Node ast: The program
    :rtype Scope:
    :return: The program scope
    """
    return ScopeAnalyzer(ast).run()
