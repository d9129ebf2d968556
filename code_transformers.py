import re
import math
import esprima
import config
from collections import namedtuple
from typing import Dict, List, Optional
from debug import debug
from node_tools import get_ann, set_ann, iter_child_nodes, is_statement, node_replace, mark_removed, empty_statement, is_async, STATEMENT_LISTS
from values import JSPrimitive, literal_value, value_to_node, string_node, is_string_literal, is_number_literal, is_boolean_literal
from jseval import binary_operation, to_bool, decode_escapes, quote_string, decode_base64, DecodeFailure
from scope import analyze, Binding

class CodeTransform(object):
    """
    Helper class for any AST transformation. The methods before_XXXX and after_XXX are meant to be overloaded by subclasses.

    Children are processed before after_XXX is called, so a transformation
    implemented in after_expression sees sub-expressions that are already
    transformed. A node is replaced by assigning another node's fields to it
    (see node_tools.node_replace), which does not require knowing its parent.
    """
    def __init__(self, ast : esprima.nodes.Node = None, name : str = None):
        """
        Class constructor
        """

        self.ast : esprima.nodes.Node = ast
        """The AST on which this transformation operates"""

        self.name : str = name
        """The name of this transformation"""

        self.pass_num : int = 1
        """The number of times this pass has been performed"""

    def before_expression(self, expr : esprima.nodes.Node) -> bool:
        """
        Called before an expression (or any other non-statement node). If the method returns false, the expression is not processed.

        :param esprima.nodes.Node expr: The expression node
        :rtype bool:
        :return: True to process the expression, False otherwise
        """
        return True

    def before_statement(self, statement : esprima.nodes.Node) -> bool:
        """
        Called before a statement. If the method returns false, the statement is not processed.

        :param esprima.nodes.Node statement: The statement node
        :rtype bool:
        :return: True to process the statement, False otherwise
        """
        return True

    def after_expression(self, expr, results):
        return None

    def after_statement(self, statement, results):
        return None

    def after_program(self, results):
        return None

    def on_statement_list(self, owner : esprima.nodes.Node, statements : List[esprima.nodes.Node]) -> None:
        """
        Called once all the statements of a list (program, block, switch case) have been processed.
        The list may be modified in place.

        :param esprima.nodes.Node owner: The node holding the list
        :param List[esprima.nodes.Node] statements: The statement list
        """
        pass

    def do_node(self, node):
        if node is None:
            return None
        if is_statement(node):
            return self.do_statement(node)
        return self.do_expr(node)

    def do_children(self, node):
        results = []
        for child in iter_child_nodes(node):
            results.append(self.do_node(child))
        list_field = STATEMENT_LISTS.get(node.type)
        if list_field is not None:
            self.on_statement_list(node, getattr(node, list_field))
        return results

    def do_expr(self, expr):
        if expr is None:
            return None
        if not self.before_expression(expr):
            return None
        results = self.do_children(expr)
        return self.after_expression(expr, results)

    def do_statement(self, statement):
        if statement is None:
            return None
        if not self.before_statement(statement):
            return None
        results = self.do_children(statement)
        return self.after_statement(statement, results)

    def do_prog(self, prog):
        results = []
        for statement in prog:
            results.append(self.do_statement(statement))
        self.on_statement_list(self.ast, prog)
        self.after_program(results)

    def stats(self) -> Dict[str, int]:
        """
        Counters reported by this transformation
        """
        return {}

    def run(self) -> Dict[str, int]:
        if self.name is not None:
            if self.pass_num > 1:
                debug("Applying code transform: " + str(self.name) + " (pass " + str(self.pass_num) + ")")
            else:
                debug("Applying code transform: " + str(self.name))
        self.do_prog(self.ast.body)
        self.pass_num += 1
        return self.stats()

class StatementCleaner(CodeTransform):
    """
    Drops the statements flagged as removed (see node_tools.mark_removed) from their statement lists
    """
    def __init__(self, ast):
        super().__init__(ast, None)

    def on_statement_list(self, owner, statements):
        statements[:] = [st for st in statements if not get_ann(st, "removed")]

    def after_statement(self, statement, results):
        if statement.type == "ForStatement" and statement.init is not None and get_ann(statement.init, "removed"):
            statement.init = None
        elif statement.type == "IfStatement" and statement.alternate is not None and get_ann(statement.alternate, "removed"):
            statement.alternate = None

## String arrays

StringArrayCandidate = namedtuple("StringArrayCandidate", "name values declarator declaration binding")
Accessor = namedtuple("Accessor", "name candidate offset operator node declarator declaration binding")

HEX_INDEX = re.compile(r'^0x[0-9a-f]+$', re.IGNORECASE)
DEC_INDEX = re.compile(r'^\d+$')

def index_value(node : esprima.nodes.Node) -> Optional[float]:
    """
    Statically resolve an array index: 3, "3", "0x3" or -3 (the latter is never a valid index)

    :rtype Optional[float]:
    :return: The index, or None if the expression is not a recognized index form
    """
    if is_number_literal(node):
        return float(node.value)
    if is_string_literal(node):
        if DEC_INDEX.match(node.value):
            return float(int(node.value))
        if HEX_INDEX.match(node.value):
            return float(int(node.value, 16))
        return None
    if node.type == "UnaryExpression" and node.operator == "-" and is_number_literal(node.argument):
        return -float(node.argument.value)
    return None

def array_index(x : Optional[float], length : int) -> Optional[int]:
    if x is None or math.isnan(x) or math.isinf(x) or x != math.floor(x):
        return None
    if math.copysign(1.0, x) < 0 or x >= length:
        return None
    return int(x)

class StringArrayScanner(CodeTransform):
    """
    Finds variables initialized with an array made only of string literals, and
    the functions that may index them. Expects resolved bindings.
    """
    def __init__(self, ast):
        super().__init__(ast, None)
        self.candidates : Dict[Binding, StringArrayCandidate] = {}
        self.functions = []

    def single_binding(self, identifier):
        binding = get_ann(identifier, "binding")
        if binding is None or len(binding.identifiers) != 1:
            return None
        return binding

    def before_statement(self, st):
        if st.type == "ExportNamedDeclaration" and st.declaration is not None:
            set_ann(st.declaration, "exported", True)

        elif st.type == "VariableDeclaration" and not get_ann(st, "exported"):
            for decl in st.declarations:
                if decl.id.type != "Identifier" or decl.init is None:
                    continue
                binding = self.single_binding(decl.id)
                if binding is None:
                    continue
                init = decl.init
                if init.type == "ArrayExpression" and len(init.elements) > 0 and all(is_string_literal(e) for e in init.elements):
                    if binding.is_written():
                        debug("String array is modified, skipping:", decl.id.name)
                        continue
                    self.candidates[binding] = StringArrayCandidate(decl.id.name, [e.value for e in init.elements], decl, st, binding)
                    debug("Found string array", decl.id.name, len(init.elements))
                elif init.type in ("FunctionExpression", "ArrowFunctionExpression"):
                    self.functions.append((decl.id, init, decl, st))

        elif st.type == "FunctionDeclaration" and st.id is not None and not get_ann(st, "exported"):
            if self.single_binding(st.id) is not None:
                self.functions.append((st.id, st, None, st))
        return True

class StringArrayResolver(CodeTransform):
    """
    Inlines indexed accesses to constant string arrays (var a = ["x", "y"]; a[1] -> "y"),
    and calls to functions that only return such an access (function f(i) { return a[i - 2]; }).
    Arrays and accessors left without references are deleted.
    """
    def __init__(self, ast):
        super().__init__(ast, "String Array Resolver")
        self.candidates : Dict[Binding, StringArrayCandidate] = {}
        self.accessors : Dict[Binding, Accessor] = {}
        self.decoded = 0
        self.inlined = 0
        self.removed_arrays = 0
        self.removed_functions = 0

    def stats(self):
        return {
            "strings_decoded": self.decoded,
            "functions_inlined": self.inlined,
            "removed_arrays": self.removed_arrays,
            "removed_functions": self.removed_functions,
        }

    def make_accessor(self, identifier, fn, declarator, declaration) -> Optional[Accessor]:
        binding = get_ann(identifier, "binding")
        if binding.is_written() or fn.generator or is_async(fn):
            return None
        if len(fn.params) != 1 or fn.params[0].type != "Identifier":
            return None
        body = fn.body
        if body.type == "BlockStatement":
            if len(body.body) != 1 or body.body[0].type != "ReturnStatement":
                return None
            expr = body.body[0].argument
        else:
            expr = body
        if expr is None or expr.type != "MemberExpression" or not expr.computed or expr.object.type != "Identifier":
            return None
        candidate = self.candidates.get(get_ann(expr.object, "binding"))
        if candidate is None:
            return None

        index = expr.property
        offset = 0.0
        operator = None
        if index.type == "BinaryExpression" and index.operator in ("-", "+") and is_number_literal(index.right):
            operator = index.operator
            offset = float(index.right.value)
            if operator == "+":
                offset = -offset
            index = index.left
        if index.type != "Identifier" or get_ann(index, "binding") is not get_ann(fn.params[0], "binding"):
            return None
        debug("Found string array accessor", identifier.name, "for", candidate.name)
        return Accessor(identifier.name, candidate, offset, operator, fn, declarator, declaration, binding)

    def before_expression(self, expr):
        if expr.type == "AssignmentExpression":
            set_ann(expr.left, "is_updated", True)
        elif expr.type == "UpdateExpression" or (expr.type == "UnaryExpression" and expr.operator == "delete"):
            set_ann(expr.argument, "is_updated", True)
        return True

    def after_expression(self, expr, results):
        if expr.type == "MemberExpression" and expr.computed and expr.object.type == "Identifier" and not get_ann(expr, "is_updated"):
            candidate = self.candidates.get(get_ann(expr.object, "binding"))
            if candidate is None:
                return None
            i = array_index(index_value(expr.property), len(candidate.values))
            if i is None:
                return None
            node_replace(expr, string_node(candidate.values[i]))
            self.decoded += 1

        elif expr.type == "CallExpression" and expr.callee.type == "Identifier" and len(expr.arguments) == 1:
            accessor = self.accessors.get(get_ann(expr.callee, "binding"))
            if accessor is None:
                return None
            #i + K concatenates when i is a string
            if accessor.operator == "+" and not is_number_literal(expr.arguments[0]):
                return None
            x = index_value(expr.arguments[0])
            if x is None:
                return None
            values = accessor.candidate.values
            i = array_index(x - accessor.offset, len(values))
            if i is None:
                return None
            node_replace(expr, string_node(values[i]))
            self.decoded += 1
            self.inlined += 1
        return None

    def remove(self, node, declarator, declaration):
        if declarator is None:
            mark_removed(node)
            return
        declaration.declarations = [d for d in declaration.declarations if d is not declarator]
        if len(declaration.declarations) == 0:
            mark_removed(declaration)

    def cleanup(self):
        analyze(self.ast)
        for accessor in self.accessors.values():
            identifier = accessor.node.id if accessor.declarator is None else accessor.declarator.id
            binding = get_ann(identifier, "binding")
            if binding is not None and len(binding.references) == 0:
                debug("Removing unused accessor", accessor.name)
                self.remove(accessor.node, accessor.declarator, accessor.declaration)
                self.removed_functions += 1
        if self.removed_functions > 0:
            analyze(self.ast)

        for candidate in self.candidates.values():
            binding = get_ann(candidate.declarator.id, "binding")
            if binding is not None and len(binding.references) == 0:
                debug("Removing unused string array", candidate.name)
                self.remove(candidate.declarator, candidate.declarator, candidate.declaration)
                self.removed_arrays += 1

    def run(self):
        debug("Applying code transform: " + self.name)
        analyze(self.ast)
        scanner = StringArrayScanner(self.ast)
        scanner.run()
        self.candidates = scanner.candidates
        if len(self.candidates) == 0:
            return self.stats()

        for identifier, fn, declarator, declaration in scanner.functions:
            accessor = self.make_accessor(identifier, fn, declarator, declaration)
            if accessor is not None:
                self.accessors[accessor.binding] = accessor

        self.do_prog(self.ast.body)
        self.cleanup()
        StatementCleaner(self.ast).run()
        return self.stats()

## Encoded literals

class LiteralDecoder(CodeTransform):
    """
    Decodes escaped string literals ("\\x41" -> "A") and base64 payloads
    (atob("QQ==") -> "A", Buffer.from("QQ==", "base64") -> "A").
    Each rule is applied in its own traversal.
    """
    RULES = ["escapes", "atob", "buffer"]

    def __init__(self, ast):
        super().__init__(ast, "Literal Decoder")
        self.rule = None
        self.decoded = 0

    def stats(self):
        return {"strings_decoded": self.decoded}

    def before_statement(self, statement):
        #Directives are only directives when unescaped
        return statement.directive is None

    def before_expression(self, expr):
        #JSX attribute strings have no escape sequences
        return expr.type != "JSXAttribute"

    def decode_literal(self, literal):
        raw = literal.raw
        if raw is None or len(raw) < 2 or raw[0] not in "'\"":
            return
        _, found = decode_escapes(raw[1:-1])
        if not found:
            return
        canonical = quote_string(literal.value, raw[0])
        if canonical == raw:
            return
        node_replace(literal, value_to_node(JSPrimitive(literal.value), canonical))
        self.decoded += 1

    def decode_call(self, call, payload):
        try:
            text = decode_base64(payload)
        except DecodeFailure as e:
            debug("Not decoding base64 payload:", repr(payload), str(e))
            return
        node_replace(call, string_node(text))
        self.decoded += 1

    def after_expression(self, expr, results):
        if self.rule == "escapes":
            if is_string_literal(expr):
                self.decode_literal(expr)

        elif self.rule == "atob":
            if expr.type == "CallExpression" and expr.callee.type == "Identifier" and expr.callee.name == config.base64_call_name:
                if len(expr.arguments) == 1 and is_string_literal(expr.arguments[0]):
                    self.decode_call(expr, expr.arguments[0].value)

        elif self.rule == "buffer":
            if expr.type != "CallExpression" or len(expr.arguments) != 2:
                return None
            callee = expr.callee
            if callee.type != "MemberExpression" or callee.computed or callee.object.type != "Identifier":
                return None
            if callee.property.name != config.buffer_method_name:
                return None
            payload, encoding = expr.arguments
            if is_string_literal(payload) and is_string_literal(encoding) and encoding.value.lower() == "base64":
                self.decode_call(expr, payload.value)
        return None

    def run(self):
        for rule in self.RULES:
            self.rule = rule
            super().run()
        return self.stats()

## Constant folding

class ConstantFolder(CodeTransform):
    """
    Folds binary and logical expressions whose operands are literals (1 + 2 -> 3, "a" + "b" -> "ab", "" || x -> x).
    Nothing but literals is ever evaluated.
    """
    def __init__(self, ast):
        super().__init__(ast, "Constant Folder")
        self.folded = 0

    def stats(self):
        return {"constants_folded": self.folded}

    def before_expression(self, expr):
        if expr.type == "BinaryExpression" and expr.operator == "**":
            set_ann(expr.left, "exponent_base", True)
        return True

    def after_expression(self, expr, results):
        if expr.type == "BinaryExpression":
            left = literal_value(expr.left)
            right = literal_value(expr.right)
            if left is None or right is None:
                return None
            result = binary_operation(expr.operator, left, right)
            if result is None:
                return None
            if result.is_number() and math.isnan(result.val):
                debug("Not folding NaN result:", expr.operator)
                return None
            #A unary minus cannot be the base of **
            if get_ann(expr, "exponent_base") and result.is_number() and math.copysign(1.0, result.val) < 0:
                return None
            node_replace(expr, value_to_node(result))
            self.folded += 1

        elif expr.type == "LogicalExpression" and expr.operator in ("&&", "||"):
            left = literal_value(expr.left)
            if left is None:
                return None
            #The operand that is dropped is not checked for side effects
            if expr.operator == "&&":
                keep_left = not to_bool(left)
            else:
                keep_left = to_bool(left)
            kept = expr.left if keep_left else expr.right
            if get_ann(expr, "exponent_base") and (kept.type in ("UnaryExpression", "AwaitExpression") or (is_number_literal(kept) and math.copysign(1.0, kept.value) < 0)):
                return None
            node_replace(expr, kept)
            self.folded += 1
        return None

## Junk code

def declares_lexical(block : esprima.nodes.Node) -> bool:
    for st in block.body:
        if st.type in ("ClassDeclaration", "FunctionDeclaration"):
            return True
        if st.type == "VariableDeclaration" and st.kind != "var":
            return True
    return False

class JunkEliminator(CodeTransform):
    """
    Removes debugger statements, console calls, empty statements and if statements with a constant test.
    """
    SLOTS = {
        "ForStatement": "body",
        "ForInStatement": "body",
        "ForOfStatement": "body",
        "WhileStatement": "body",
        "DoWhileStatement": "body",
        "WithStatement": "body",
        "LabeledStatement": "body",
    }

    def __init__(self, ast):
        super().__init__(ast, "Junk Eliminator")
        self.removed = 0

    def stats(self):
        return {"dead_blocks_removed": self.removed}

    def is_console_call(self, st):
        if st.type != "ExpressionStatement" or st.expression.type != "CallExpression":
            return False
        callee = st.expression.callee
        return callee.type == "MemberExpression" and callee.object.type == "Identifier" and callee.object.name == config.console_name

    def simplify(self, st, in_list=True):
        """
        Compute what replaces a statement

        :param esprima.nodes.Node st: The statement
        :param bool in_list: True if the statement is in a statement list (empty statements are then dropped)
        :rtype List[esprima.nodes.Node]:
        :return: The statements replacing st
        """
        if st.type == "DebuggerStatement" or self.is_console_call(st):
            self.removed += 1
            return []
        if st.type == "EmptyStatement":
            if in_list:
                self.removed += 1
                return []
            return [st]
        if st.type == "IfStatement" and is_boolean_literal(st.test):
            self.removed += 1
            branch = st.consequent if st.test.value else st.alternate
            if branch is None:
                return []
            if branch.type == "BlockStatement" and not declares_lexical(branch):
                replacement = []
                for b in branch.body:
                    replacement.extend(self.simplify(b))
                return replacement
            return self.simplify(branch, in_list)
        return [st]

    def simplify_slot(self, st):
        """
        Same as simplify, for a statement that is not in a list (if branch, loop body)
        """
        replacement = self.simplify(st, False)
        if len(replacement) == 0:
            return None
        if len(replacement) == 1:
            return replacement[0]
        return esprima.nodes.BlockStatement(replacement)

    def on_statement_list(self, owner, statements):
        result = []
        for st in statements:
            result.extend(self.simplify(st))
        statements[:] = result

    def after_statement(self, st, results):
        if st.type == "IfStatement":
            if is_boolean_literal(st.test):
                return None #Handled by the enclosing statement
            st.consequent = self.simplify_slot(st.consequent) or empty_statement()
            if st.alternate is not None:
                st.alternate = self.simplify_slot(st.alternate)
        elif st.type in self.SLOTS:
            setattr(st, "body", self.simplify_slot(st.body) or empty_statement())
        return None

## Identifiers

class IdentifierRenamer(CodeTransform):
    """
    Renames local variables with obfuscated names (_0x1f2e, a_12) to var_1, var_2, ...
    """
    def __init__(self, ast):
        super().__init__(ast, "Identifier Renamer")
        self.patterns = [re.compile(r) for r in config.regexp_rename]
        self.counter = 1
        self.renamed = 0

    def stats(self):
        return {"identifiers_renamed": self.renamed}

    def is_obfuscated(self, name : str) -> bool:
        if name in config.reserved_names:
            return False
        for r in self.patterns:
            if r.match(name) is not None:
                return True
        return False

    def generate(self, taken):
        while True:
            name = config.rename_prefix + str(self.counter)
            self.counter += 1
            if name not in taken:
                return name

    def rename(self, binding : Binding, newname : str) -> None:
        if binding.scope.lookup(newname) is not None:
            raise ValueError("name already bound: " + newname)
        for identifier in binding.identifiers + binding.references:
            identifier.name = newname

    def run(self):
        debug("Applying code transform: " + self.name)
        program = analyze(self.ast)
        taken = set(program.names)
        for scope in program.walk():
            if scope.kind == "program":
                continue
            for binding in list(scope.bindings.values()):
                #Bindings hoisted out of a block are listed in both scopes
                if binding.scope is not scope or not self.is_obfuscated(binding.name):
                    continue
                if binding.pinned:
                    debug("Not renaming", binding.name, "(visible outside of its block)")
                    continue
                newname = self.generate(taken)
                try:
                    self.rename(binding, newname)
                except Exception as e:
                    debug("rename failed", binding.name, str(e))
                    continue
                taken.add(newname)
                self.renamed += 1
                debug("Renamed", binding.name, "->", newname)
        return self.stats()
