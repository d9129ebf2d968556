"""
Parses a program, runs the deobfuscation passes over its AST and prints the result.

The tree belongs to deobfuscate(): each pass receives it, mutates it and
returns its counters. A pass that raises does not stop the pipeline; the
failure is recorded in the report and the next pass works on the tree as the
failed pass left it.
"""
import traceback
import esprima
import config
import code_transformers
import output
from collections import namedtuple
from typing import Dict, Iterable, Optional
from esprima.error_handler import Error as EsprimaError
from debug import debug, set_debug
from report import TransformationReport, PassOutcome

#Pass name -> transformation, in execution order
PASSES = [
    ("stringArray", code_transformers.StringArrayResolver),
    ("hexBase64", code_transformers.LiteralDecoder),
    ("constFold", code_transformers.ConstantFolder),
    ("junk", code_transformers.JunkEliminator),
    ("idRename", code_transformers.IdentifierRenamer),
]

#Accepted in config.syntax_extensions, but the parser (ES2017) has no option for them
UNSUPPORTED_EXTENSIONS = ["class_properties", "optional_chaining"]

DeobfuscationResult = namedtuple("DeobfuscationResult", "code report")

class ParseError(Exception):
    """
    The input is not a program esprima can parse
    """
    def __init__(self, message : str, line : Optional[int] = None, column : Optional[int] = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            message = "Line " + str(line) + ", column " + str(column) + ": " + message
        super().__init__(message)

class PassError(Exception):
    """
    A pass failed. The pipeline records it and goes on with the next pass.
    """
    def __init__(self, name : str, message : str) -> None:
        self.name = name
        self.message = message
        super().__init__(name + ": " + message)

def parse(source : str, extensions : Optional[Dict[str, bool]] = None) -> esprima.nodes.Node:
    """
    Parse a program, as a script first and as a module if that fails

    :param str source: The program text
    :param Optional[Dict[str, bool]] extensions: Syntax extensions (defaults to config.syntax_extensions)
    :rtype esprima.nodes.Node:
    :return: The Program node, with ranges and comments
    :raises ParseError: if the program is neither a valid script nor a valid module
    """
    if extensions is None:
        extensions = config.syntax_extensions
    for name in UNSUPPORTED_EXTENSIONS:
        if extensions.get(name, False):
            debug("WARNING: syntax extension not supported by esprima, ignored: " + name)
    options = {'range': True, 'comment': True, 'jsx': bool(extensions.get("jsx", False))}
    try:
        return esprima.parseScript(source, options)
    except EsprimaError as script_error:
        debug("Not a script (" + str(script_error) + "), trying as a module")
        try:
            return esprima.parseModule(source, options)
        except EsprimaError:
            #The script error is usually the relevant one (module goal is stricter)
            raise ParseError(getattr(script_error, "description", None) or str(script_error), getattr(script_error, "lineNumber", None), getattr(script_error, "column", None))

def check_stats(name : str, stats) -> Dict[str, object]:
    if not isinstance(stats, dict):
        raise PassError(name, "pass returned " + type(stats).__name__ + " instead of counters")
    for k, v in stats.items():
        if type(v) is bool or not isinstance(v, (int, float)):
            continue
        if type(v) is not int or v < 0:
            raise PassError(name, "invalid counter " + k + "=" + str(v))
    return stats

def run_pass(name : str, transformation, ast : esprima.nodes.Node) -> PassOutcome:
    """
    Run one pass over the tree

    :param str name: The pass name, used in the report
    :param transformation: A code_transformers.CodeTransform subclass
    :param esprima.nodes.Node ast: The program
    :rtype PassOutcome:
    :return: The counters of the pass, or the error that stopped it
    """
    try:
        stats = transformation(ast).run()
        return PassOutcome(name, check_stats(name, stats), None)
    except PassError as e:
        debug("Pass " + name + " failed: " + e.message)
        return PassOutcome(name, None, e)
    except Exception as e:
        debug("Pass " + name + " failed:")
        debug(traceback.format_exc())
        return PassOutcome(name, None, PassError(name, str(e) or type(e).__name__))

def select_passes(passes : Optional[Iterable[str]], rename : bool):
    if not passes:
        passes = config.default_passes
    requested = set(passes)
    known = set(name for name, _ in PASSES)
    for name in sorted(requested - known):
        debug("Ignoring unknown pass: " + str(name))
    selected = []
    for name, transformation in PASSES:
        if name not in requested:
            continue
        if name == "idRename" and not rename:
            continue
        selected.append((name, transformation))
    return selected

def deobfuscate(source : str, passes : Optional[Iterable[str]] = None, rename : bool = True, verbose : bool = False) -> DeobfuscationResult:
    """
    Deobfuscate a program

    :param str source: The program text
    :param Optional[Iterable[str]] passes: Names of the passes to run (all of them if None or empty). They always run in the order of PASSES.
    :param bool rename: Allow the idRename pass
    :param bool verbose: Print diagnostics on stderr
    :rtype DeobfuscationResult:
    :return: The generated code and the (sealed) report
    :raises ParseError: if the source cannot be parsed
    """
    set_debug(verbose)
    if passes is not None:
        passes = list(passes)

    debug("Parsing file into abstract syntax tree...")
    ast = parse(source)

    report = TransformationReport()
    for name, transformation in select_passes(passes, rename):
        debug("Running pass: " + name)
        outcome = run_pass(name, transformation, ast)
        report.absorb(outcome)
        debug("Pass " + name + ": " + (("error " + outcome.error.message) if outcome.error is not None else str(outcome.stats)))

    report.seal()
    debug("Producing output...")
    code = output.generate(ast, source)
    return DeobfuscationResult(code, report)
