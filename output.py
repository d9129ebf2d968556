import io
import math
import esprima
from tools import call
from debug import debug
from node_tools import field, is_async, is_static
from jseval import quote_string, number_to_string

BINARY_PRECEDENCE = {
    "??": 4, "||": 4,
    "&&": 5,
    "|": 6,
    "^": 7,
    "&": 8,
    "==": 9, "!=": 9, "===": 9, "!==": 9,
    "<": 10, ">": 10, "<=": 10, ">=": 10, "in": 10, "instanceof": 10,
    "<<": 11, ">>": 11, ">>>": 11,
    "+": 12, "-": 12,
    "*": 13, "/": 13, "%": 13,
    "**": 14,
}

PRECEDENCE = {
    "SequenceExpression": 1,
    "AssignmentExpression": 2,
    "ArrowFunctionExpression": 2,
    "YieldExpression": 2,
    "ConditionalExpression": 3,
    "UnaryExpression": 15,
    "AwaitExpression": 15,
    "UpdateExpression": 16,
    "CallExpression": 19,
    "NewExpression": 19,
    "MemberExpression": 19,
    "TaggedTemplateExpression": 19,
}

#Expressions that cannot start an expression statement
STATEMENT_AMBIGUOUS = ["ObjectExpression", "ObjectPattern", "FunctionExpression", "ClassExpression"]

def is_negative_number(expr):
    if expr.type != "Literal" or expr.raw is not None or type(expr.value) not in (int, float):
        return False
    return math.copysign(1.0, float(expr.value)) < 0

def precedence(expr):
    if expr.type in ("BinaryExpression", "LogicalExpression"):
        return BINARY_PRECEDENCE.get(expr.operator, 0)
    if is_negative_number(expr):
        return 15
    return PRECEDENCE.get(expr.type, 20)

def leftmost(expr):
    """
    The expression whose text starts the text of expr (when printed without parentheses)
    """
    while True:
        t = expr.type
        if t == "CallExpression":
            nxt = expr.callee
        elif t == "MemberExpression":
            nxt = expr.object
        elif t in ("BinaryExpression", "LogicalExpression", "AssignmentExpression"):
            nxt = expr.left
        elif t == "ConditionalExpression":
            nxt = expr.test
        elif t == "SequenceExpression":
            nxt = expr.expressions[0]
        elif t == "UpdateExpression" and not expr.prefix:
            nxt = expr.argument
        elif t == "TaggedTemplateExpression":
            nxt = expr.tag
        else:
            return expr
        if precedence(nxt) < precedence(expr):
            #Printed between parentheses
            return expr
        expr = nxt

def has_call(expr):
    while expr.type in ("MemberExpression", "TaggedTemplateExpression"):
        expr = expr.object if expr.type == "MemberExpression" else expr.tag
    return expr.type == "CallExpression"

def open_if(statement):
    """
    True if statement ends with an if without else, which would capture a following else
    """
    while True:
        t = statement.type
        if t == "IfStatement":
            if statement.alternate is None:
                return True
            statement = statement.alternate
        elif t in ("ForStatement", "ForInStatement", "ForOfStatement", "WhileStatement", "WithStatement", "LabeledStatement"):
            statement = statement.body
        else:
            return False

def prologue_strings(body):
    """
    String statements at the start of a program or function body that are not directives.
    Printed as such they would become directives ("use " + "strict" folded to "use strict").
    """
    found = []
    for statement in body:
        if statement.type != "ExpressionStatement":
            break
        expr = statement.expression
        if expr.type != "Literal" or expr.regex is not None or not isinstance(expr.value, str):
            break
        if statement.directive is None:
            found.append(statement)
    return found

class Output(object):
    """
    Prints a program from its AST. Recursive methods are generators run through tools.call,
    so that deeply nested code does not exhaust the Python stack.
    """
    def __init__(self, ast, f, source=""):
        """
        Class constructor

        :param esprima.nodes.Node ast: The program
        :param f: The file object to write to
        :param str source: The original source text, comments are copied from it
        """
        self.INDENT = 2
        self.indent = 0
        self.ast = ast
        self.f = f
        self.source = source
        self.comments = sorted([c for c in (ast.comments or []) if field(c, "range") is not None], key=lambda c: field(c, "range")[0])
        self.next_comment = 0
        self.non_directives = set()
        """ids of the string statements that must not be printed as directives"""

    def out(self, *args, **kwargs):
        kwargs['file'] = self.f
        print(*args, **kwargs)

    def dump(self):
        call(self.do_prog, self.ast.body)
        self.do_comments(None)

    ## Comments

    def comment_text(self, comment):
        start, end = field(comment, "range")
        if self.source:
            return self.source[start:end]
        if field(comment, "type") == "Line":
            return "//" + field(comment, "value", "")
        return "/*" + field(comment, "value", "") + "*/"

    def do_comments(self, upto):
        """
        Print the comments starting before the offset upto (all the remaining ones if upto is None)
        """
        while self.next_comment < len(self.comments):
            comment = self.comments[self.next_comment]
            if upto is not None and field(comment, "range")[0] >= upto:
                break
            self.out(self.indent*" " + self.comment_text(comment))
            self.next_comment += 1

    ## Expressions

    def literal(self, expr):
        if expr.regex is not None:
            if expr.raw is not None:
                return expr.raw
            return "/" + field(expr.regex, "pattern", "") + "/" + field(expr.regex, "flags", "")
        if expr.raw is not None:
            return expr.raw
        v = expr.value
        if v is None:
            return "null"
        if type(v) is bool:
            return "true" if v else "false"
        if type(v) is str:
            return quote_string(v)
        v = float(v)
        if v == 0 and math.copysign(1.0, v) < 0:
            return "-0"
        return number_to_string(v)

    def do_list(self, exprs, sep=", "):
        first = True
        for e in exprs:
            if not first:
                self.out(sep, end="")
            first = False
            if e is not None:
                yield [self.do_expr, e, 2]

    def do_arguments(self, arguments):
        self.out("(", end="")
        yield [self.do_list, arguments]
        self.out(")", end="")

    def do_array(self, elements):
        self.out("[", end="")
        yield [self.do_list, elements]
        if len(elements) > 0 and elements[-1] is None:
            #Trailing hole
            self.out(",", end="")
        self.out("]", end="")

    def do_key(self, prop):
        if prop.computed:
            self.out("[", end="")
            yield [self.do_expr, prop.key, 2]
            self.out("]", end="")
        elif prop.key.type == "Identifier":
            self.out(prop.key.name, end="")
        else:
            yield [self.do_expr, prop.key]

    def do_property(self, prop):
        if prop.type in ("SpreadElement", "RestElement"):
            yield [self.do_expr, prop]
            return
        value = prop.value
        if prop.kind in ("get", "set"):
            self.out(prop.kind + " ", end="")
            yield [self.do_key, prop]
            yield [self.do_function_tail, value]
        elif prop.method:
            if is_async(value):
                self.out("async ", end="")
            if value.generator:
                self.out("*", end="")
            yield [self.do_key, prop]
            yield [self.do_function_tail, value]
        elif prop.shorthand and not prop.computed and value.type == "Identifier" and value.name == prop.key.name:
            self.out(value.name, end="")
        elif prop.shorthand and not prop.computed and value.type == "AssignmentPattern" and value.left.type == "Identifier" and value.left.name == prop.key.name:
            yield [self.do_expr, value, 2]
        else:
            yield [self.do_key, prop]
            self.out(": ", end="")
            yield [self.do_expr, value, 2]

    def do_object(self, expr):
        if len(expr.properties) == 0:
            self.out("{}", end="")
            return
        if expr.type == "ObjectPattern":
            self.out("{", end="")
            first = True
            for prop in expr.properties:
                if not first:
                    self.out(", ", end="")
                first = False
                yield [self.do_property, prop]
            self.out("}", end="")
            return
        self.out("{")
        self.indent += self.INDENT
        first = True
        for prop in expr.properties:
            if not first:
                self.out(",")
            first = False
            self.out(self.indent*" ", end="")
            yield [self.do_property, prop]
        self.indent -= self.INDENT
        self.out("\n" + self.indent*" " + "}", end="")

    def do_params(self, params):
        self.out("(", end="")
        yield [self.do_list, params]
        self.out(")", end="")

    def mark_prologue(self, body):
        for statement in prologue_strings(body):
            self.non_directives.add(id(statement))

    def do_function_tail(self, fn):
        """
        Print "(params) {body}"
        """
        yield [self.do_params, fn.params]
        self.out(" ", end="")
        self.mark_prologue(fn.body.body)
        yield [self.do_block, fn.body]

    def do_function(self, fn):
        if is_async(fn):
            self.out("async ", end="")
        self.out("function", end="")
        if fn.generator:
            self.out("*", end="")
        if fn.id is not None:
            self.out(" " + fn.id.name, end="")
        yield [self.do_function_tail, fn]

    def do_arrow(self, fn):
        if is_async(fn):
            self.out("async ", end="")
        yield [self.do_params, fn.params]
        self.out(" => ", end="")
        if fn.body.type == "BlockStatement":
            self.mark_prologue(fn.body.body)
            yield [self.do_block, fn.body]
        elif leftmost(fn.body).type in STATEMENT_AMBIGUOUS:
            self.out("(", end="")
            yield [self.do_expr, fn.body, 2]
            self.out(")", end="")
        else:
            yield [self.do_expr, fn.body, 2]

    def do_class(self, cls):
        self.out("class", end="")
        if cls.id is not None:
            self.out(" " + cls.id.name, end="")
        if cls.superClass is not None:
            self.out(" extends ", end="")
            yield [self.do_expr, cls.superClass, 19]
        if len(cls.body.body) == 0:
            self.out(" {}", end="")
            return
        self.out(" {")
        self.indent += self.INDENT
        for method in cls.body.body:
            if method.range:
                self.do_comments(method.range[0])
            self.out(self.indent*" ", end="")
            if is_static(method):
                self.out("static ", end="")
            if method.kind in ("get", "set"):
                self.out(method.kind + " ", end="")
            else:
                if is_async(method.value):
                    self.out("async ", end="")
                if method.value.generator:
                    self.out("*", end="")
            yield [self.do_key, method]
            yield [self.do_function_tail, method.value]
            self.out("")
        self.indent -= self.INDENT
        self.out(self.indent*" " + "}", end="")

    def do_template(self, template):
        self.out("`", end="")
        for i, quasi in enumerate(template.quasis):
            self.out(field(quasi.value, "raw", ""), end="")
            if i < len(template.expressions):
                self.out("${", end="")
                yield [self.do_expr, template.expressions[i]]
                self.out("}", end="")
        self.out("`", end="")

    def do_jsx(self, expr):
        t = expr.type
        if t == "JSXElement":
            yield [self.do_jsx, expr.openingElement]
            for child in expr.children:
                yield [self.do_jsx, child]
            if expr.closingElement is not None:
                yield [self.do_jsx, expr.closingElement]
        elif t == "JSXOpeningElement":
            self.out("<", end="")
            yield [self.do_jsx, expr.name]
            for attribute in expr.attributes:
                self.out(" ", end="")
                yield [self.do_jsx, attribute]
            self.out(" />" if expr.selfClosing else ">", end="")
        elif t == "JSXClosingElement":
            self.out("</", end="")
            yield [self.do_jsx, expr.name]
            self.out(">", end="")
        elif t == "JSXAttribute":
            yield [self.do_jsx, expr.name]
            if expr.value is not None:
                self.out("=", end="")
                yield [self.do_jsx, expr.value]
        elif t == "JSXSpreadAttribute":
            self.out("{...", end="")
            yield [self.do_expr, expr.argument, 2]
            self.out("}", end="")
        elif t == "JSXExpressionContainer":
            self.out("{", end="")
            if expr.expression.type != "JSXEmptyExpression":
                yield [self.do_expr, expr.expression]
            self.out("}", end="")
        elif t == "JSXIdentifier":
            self.out(expr.name, end="")
        elif t == "JSXNamespacedName":
            yield [self.do_jsx, expr.namespace]
            self.out(":", end="")
            yield [self.do_jsx, expr.name]
        elif t == "JSXMemberExpression":
            yield [self.do_jsx, expr.object]
            self.out(".", end="")
            yield [self.do_jsx, expr.property]
        elif t == "JSXText":
            self.out(expr.raw if expr.raw is not None else expr.value, end="")
        else:
            yield [self.do_expr, expr]

    def do_expr(self, expr, prec=0):
        """
        Print an expression, between parentheses if its precedence is lower than prec

        :param esprima.nodes.Node expr: The expression
        :param int prec: The minimum precedence allowed without parentheses
        """
        paren = precedence(expr) < prec
        if paren:
            self.out("(", end="")
        yield [self.do_expr_body, expr]
        if paren:
            self.out(")", end="")

    def do_expr_body(self, expr):
        t = expr.type
        if t == "Literal":
            self.out(self.literal(expr), end="")

        elif t == "Identifier":
            self.out(expr.name, end="")

        elif t == "ThisExpression":
            self.out("this", end="")

        elif t == "Super":
            self.out("super", end="")

        elif t == "Import":
            self.out("import", end="")

        elif t == "MetaProperty":
            self.out(expr.meta.name + "." + expr.property.name, end="")

        elif t == "ArrayExpression" or t == "ArrayPattern":
            yield [self.do_array, expr.elements]

        elif t == "ObjectExpression" or t == "ObjectPattern":
            yield [self.do_object, expr]

        elif t == "FunctionExpression":
            yield [self.do_function, expr]

        elif t == "ArrowFunctionExpression":
            yield [self.do_arrow, expr]

        elif t == "ClassExpression":
            yield [self.do_class, expr]

        elif t == "TemplateLiteral":
            yield [self.do_template, expr]

        elif t == "TaggedTemplateExpression":
            yield [self.do_expr, expr.tag, 19]
            yield [self.do_template, expr.quasi]

        elif t == "SequenceExpression":
            yield [self.do_list, expr.expressions]

        elif t == "AssignmentExpression":
            yield [self.do_expr, expr.left, 19]
            self.out(" " + expr.operator + " ", end="")
            yield [self.do_expr, expr.right, 2]

        elif t == "AssignmentPattern":
            yield [self.do_expr, expr.left, 19]
            self.out(" = ", end="")
            yield [self.do_expr, expr.right, 2]

        elif t == "ConditionalExpression":
            yield [self.do_expr, expr.test, 4]
            self.out(" ? ", end="")
            yield [self.do_expr, expr.consequent, 2]
            self.out(" : ", end="")
            yield [self.do_expr, expr.alternate, 2]

        elif t == "BinaryExpression" or t == "LogicalExpression":
            p = precedence(expr)
            if expr.operator == "**":
                yield [self.do_expr, expr.left, p + 2]
                self.out(" ** ", end="")
                yield [self.do_expr, expr.right, p]
            else:
                yield [self.do_expr, expr.left, p]
                self.out(" " + expr.operator + " ", end="")
                yield [self.do_expr, expr.right, p + 1]

        elif t == "UnaryExpression":
            self.out(expr.operator, end="")
            arg = expr.argument
            if expr.operator.isalpha():
                self.out(" ", end="")
            elif expr.operator in ("-", "+"):
                if (arg.type in ("UnaryExpression", "UpdateExpression") and arg.operator[0] == expr.operator) or (expr.operator == "-" and is_negative_number(arg)):
                    self.out(" ", end="")
            yield [self.do_expr, arg, 15]

        elif t == "UpdateExpression":
            if expr.prefix:
                self.out(expr.operator, end="")
                yield [self.do_expr, expr.argument, 16]
            else:
                yield [self.do_expr, expr.argument, 17]
                self.out(expr.operator, end="")

        elif t == "AwaitExpression":
            self.out("await ", end="")
            yield [self.do_expr, expr.argument, 15]

        elif t == "YieldExpression":
            self.out("yield", end="")
            if expr.delegate:
                self.out("*", end="")
            if expr.argument is not None:
                self.out(" ", end="")
                yield [self.do_expr, expr.argument, 2]

        elif t == "SpreadElement" or t == "RestElement":
            self.out("...", end="")
            yield [self.do_expr, expr.argument, 2]

        elif t == "CallExpression":
            yield [self.do_expr, expr.callee, 19]
            yield [self.do_arguments, expr.arguments]

        elif t == "NewExpression":
            self.out("new ", end="")
            if has_call(expr.callee):
                self.out("(", end="")
                yield [self.do_expr, expr.callee]
                self.out(")", end="")
            else:
                yield [self.do_expr, expr.callee, 19]
            yield [self.do_arguments, expr.arguments]

        elif t == "MemberExpression":
            obj = expr.object
            if obj.type == "Literal" and type(obj.value) in (int, float) and not expr.computed:
                self.out("(", end="")
                yield [self.do_expr, obj]
                self.out(")", end="")
            else:
                yield [self.do_expr, obj, 19]
            if expr.computed:
                self.out("[", end="")
                yield [self.do_expr, expr.property]
                self.out("]", end="")
            else:
                self.out("." + expr.property.name, end="")

        elif t.startswith("JSX"):
            yield [self.do_jsx, expr]

        else:
            self.do_unsupported(expr)

    def do_unsupported(self, node):
        debug("WARNING: node type not handled: " + node.type)
        if node.range is not None and self.source:
            self.out(self.source[node.range[0]:node.range[1]], end="")

    ## Statements

    def do_block(self, block):
        """
        Print a block, without leading indentation or trailing newline
        """
        end = block.range[1] if block.range else None
        pending = end is not None and self.next_comment < len(self.comments) and field(self.comments[self.next_comment], "range")[0] < end
        if len(block.body) == 0 and not pending:
            self.out("{}", end="")
            return
        self.out("{")
        self.indent += self.INDENT
        for statement in block.body:
            yield [self.do_statement, statement]
        if end is not None:
            self.do_comments(end)
        self.indent -= self.INDENT
        self.out(self.indent*" " + "}", end="")

    def do_body(self, body):
        """
        Print the body of a compound statement after its header

        :rtype bool:
        :return: True if the body was printed on the header line (the line still has to be ended)
        """
        if body.type == "BlockStatement":
            self.out(" ", end="")
            yield [self.do_block, body]
            return True
        if body.type == "EmptyStatement":
            self.out(";", end="")
            return True
        self.out("")
        self.indent += self.INDENT
        yield [self.do_statement, body]
        self.indent -= self.INDENT
        return False

    def do_declaration(self, statement):
        """
        Print a variable declaration without the final semicolon
        """
        self.out(statement.kind + " ", end="")
        first = True
        for decl in statement.declarations:
            if not first:
                self.out(", ", end="")
            first = False
            yield [self.do_expr, decl.id, 19]
            if decl.init is not None:
                self.out(" = ", end="")
                yield [self.do_expr, decl.init, 2]

    def do_head(self, node):
        """
        Print the init or left part of a for statement
        """
        if node is None:
            return
        if node.type == "VariableDeclaration":
            yield [self.do_declaration, node]
        else:
            yield [self.do_expr, node]

    def import_specifiers(self, specifiers):
        named = []
        parts = []
        for spec in specifiers:
            if spec.type == "ImportDefaultSpecifier":
                parts.append(spec.local.name)
            elif spec.type == "ImportNamespaceSpecifier":
                parts.append("* as " + spec.local.name)
            elif spec.imported.name == spec.local.name:
                named.append(spec.local.name)
            else:
                named.append(spec.imported.name + " as " + spec.local.name)
        if len(named) > 0 or len(parts) == 0:
            parts.append("{" + ", ".join(named) + "}")
        return ", ".join(parts)

    def export_specifiers(self, specifiers):
        named = []
        for spec in specifiers:
            if spec.exported.name == spec.local.name:
                named.append(spec.local.name)
            else:
                named.append(spec.local.name + " as " + spec.exported.name)
        return "{" + ", ".join(named) + "}"

    def do_statement(self, statement, lead=True):
        """
        Print a statement, followed by a newline

        :param esprima.nodes.Node statement: The statement
        :param bool lead: False if the statement continues a line already started (else if, labels, exports)
        """
        if lead:
            if statement.range:
                self.do_comments(statement.range[0])
            self.out(self.indent*" ", end="")
        t = statement.type

        if t == "ExpressionStatement":
            expr = statement.expression
            if statement.directive is None and (leftmost(expr).type in STATEMENT_AMBIGUOUS or id(statement) in self.non_directives):
                self.out("(", end="")
                yield [self.do_expr, expr]
                self.out(");")
            else:
                yield [self.do_expr, expr]
                self.out(";")

        elif t == "VariableDeclaration":
            yield [self.do_declaration, statement]
            self.out(";")

        elif t == "FunctionDeclaration":
            yield [self.do_function, statement]
            self.out("")

        elif t == "ClassDeclaration":
            yield [self.do_class, statement]
            self.out("")

        elif t == "BlockStatement":
            yield [self.do_block, statement]
            self.out("")

        elif t == "EmptyStatement":
            self.out(";")

        elif t == "DebuggerStatement":
            self.out("debugger;")

        elif t == "ReturnStatement" or t == "ThrowStatement":
            self.out("return" if t == "ReturnStatement" else "throw", end="")
            if statement.argument is not None:
                self.out(" ", end="")
                yield [self.do_expr, statement.argument]
            self.out(";")

        elif t == "BreakStatement" or t == "ContinueStatement":
            self.out("break" if t == "BreakStatement" else "continue", end="")
            if statement.label is not None:
                self.out(" " + statement.label.name, end="")
            self.out(";")

        elif t == "IfStatement":
            self.out("if (", end="")
            yield [self.do_expr, statement.test]
            self.out(")", end="")
            consequent = statement.consequent
            if statement.alternate is not None and open_if(consequent):
                consequent = esprima.nodes.BlockStatement([consequent])
            inline = yield [self.do_body, consequent]
            if statement.alternate is None:
                if inline:
                    self.out("")
            else:
                if inline:
                    self.out(" else", end="")
                else:
                    self.out(self.indent*" " + "else", end="")
                if statement.alternate.type == "IfStatement":
                    self.out(" ", end="")
                    yield [self.do_statement, statement.alternate, False]
                else:
                    inline = yield [self.do_body, statement.alternate]
                    if inline:
                        self.out("")

        elif t == "ForStatement":
            self.out("for (", end="")
            yield [self.do_head, statement.init]
            self.out(";", end="")
            if statement.test is not None:
                self.out(" ", end="")
                yield [self.do_expr, statement.test]
            self.out(";", end="")
            if statement.update is not None:
                self.out(" ", end="")
                yield [self.do_expr, statement.update]
            self.out(")", end="")
            if (yield [self.do_body, statement.body]):
                self.out("")

        elif t == "ForInStatement" or t == "ForOfStatement":
            self.out("for " + ("await " if statement.__dict__.get("await") else "") + "(", end="")
            yield [self.do_head, statement.left]
            self.out(" in " if t == "ForInStatement" else " of ", end="")
            yield [self.do_expr, statement.right, 2]
            self.out(")", end="")
            if (yield [self.do_body, statement.body]):
                self.out("")

        elif t == "WhileStatement":
            self.out("while (", end="")
            yield [self.do_expr, statement.test]
            self.out(")", end="")
            if (yield [self.do_body, statement.body]):
                self.out("")

        elif t == "DoWhileStatement":
            self.out("do", end="")
            if (yield [self.do_body, statement.body]):
                self.out(" ", end="")
            else:
                self.out(self.indent*" ", end="")
            self.out("while (", end="")
            yield [self.do_expr, statement.test]
            self.out(");")

        elif t == "WithStatement":
            self.out("with (", end="")
            yield [self.do_expr, statement.object]
            self.out(")", end="")
            if (yield [self.do_body, statement.body]):
                self.out("")

        elif t == "LabeledStatement":
            self.out(statement.label.name + ": ", end="")
            yield [self.do_statement, statement.body, False]

        elif t == "TryStatement":
            self.out("try ", end="")
            yield [self.do_block, statement.block]
            handler = statement.handler
            if handler is not None:
                self.out(" catch ", end="")
                if handler.param is not None:
                    self.out("(", end="")
                    yield [self.do_expr, handler.param]
                    self.out(") ", end="")
                yield [self.do_block, handler.body]
            if statement.finalizer is not None:
                self.out(" finally ", end="")
                yield [self.do_block, statement.finalizer]
            self.out("")

        elif t == "SwitchStatement":
            self.out("switch (", end="")
            yield [self.do_expr, statement.discriminant]
            self.out(") {")
            self.indent += self.INDENT
            for case in statement.cases:
                if case.range:
                    self.do_comments(case.range[0])
                if case.test is None:
                    self.out(self.indent*" " + "default:")
                else:
                    self.out(self.indent*" " + "case ", end="")
                    yield [self.do_expr, case.test]
                    self.out(":")
                self.indent += self.INDENT
                for st in case.consequent:
                    yield [self.do_statement, st]
                self.indent -= self.INDENT
            self.indent -= self.INDENT
            self.out(self.indent*" " + "}")

        elif t == "ImportDeclaration":
            if len(statement.specifiers) == 0:
                self.out("import " + self.literal(statement.source) + ";")
            else:
                self.out("import " + self.import_specifiers(statement.specifiers) + " from " + self.literal(statement.source) + ";")

        elif t == "ExportNamedDeclaration":
            self.out("export ", end="")
            if statement.declaration is not None:
                yield [self.do_statement, statement.declaration, False]
            else:
                self.out(self.export_specifiers(statement.specifiers), end="")
                if statement.source is not None:
                    self.out(" from " + self.literal(statement.source), end="")
                self.out(";")

        elif t == "ExportDefaultDeclaration":
            self.out("export default ", end="")
            declaration = statement.declaration
            if declaration.type in ("FunctionDeclaration", "ClassDeclaration"):
                yield [self.do_statement, declaration, False]
            else:
                yield [self.do_expr, declaration, 2]
                self.out(";")

        elif t == "ExportAllDeclaration":
            self.out("export * from " + self.literal(statement.source) + ";")

        else:
            self.do_unsupported(statement)
            self.out("")

    def do_prog(self, prog):
        self.mark_prologue(prog)
        for statement in prog:
            yield [self.do_statement, statement]

def generate(ast, source=""):
    """
    Print a program

    :param esprima.nodes.Node ast: The program
    :param str source: The source text the program was parsed from, used to copy comments verbatim
    :rtype str:
    :return: The program text, without trailing newline
    """
    buf = io.StringIO()
    Output(ast, buf, source).dump()
    return buf.getvalue().rstrip("\n")
