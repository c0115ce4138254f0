import logging
import math
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

LOG = logging.getLogger("manifast")

RUNTIME_ERROR_MARKER = "[ERROR RUNTIME]"
ASSERTION_FAILURE_TAG = "[ASSERT GAGAL]"
ASSERTION_FAILURE_MARKER = "Assertion Failed"
SYNTAX_TAG = "[SINTAKS]"
INTERNAL_TAG = "[internal]"
STACK_OVERFLOW_MESSAGE = "Tumpukan Meluap (Stack Overflow)"

# Python frames used per script call frame, roughly
FRAMES_PER_CALL = 25
# Upper bound for Config.max_depth; deeper Python recursion risks overflowing the C stack
MAX_CALL_DEPTH = 1000


# --- Exceptions ---
class ManifastFlowControl(Exception):
    """Base class for signals that unwind the evaluator without being errors."""
    pass

class ReturnException(ManifastFlowControl):
    """Carries the value of a 'kembali' statement up to the enclosing call frame."""
    def __init__(self, value):
        super().__init__("Return")
        self.value = value

class ExitException(ManifastFlowControl):
    """Raised by os.keluar to stop the script without an error."""
    def __init__(self, code=0):
        super().__init__("Exit")
        self.code = code

class ManifastError(Exception):
    """Error raised by a script, including location information when known."""
    def __init__(self, token, user_message=None):
        if user_message is None:
            token_value = getattr(token, "value", None) if token else None
            user_message = f"kesalahan tidak dikenal pada token: {token_value}"
        super().__init__(user_message)
        self.detail = user_message
        self.token = None
        self.line = 0
        self.column = 0
        self.locate(token)

    def locate(self, token):
        """Attaches the position of token, unless the error already has one."""
        if not self.line and token is not None and getattr(token, "line", 0):
            self.token = token
            self.line = token.line
            self.column = token.column
        return self

    def __str__(self):
        if self.line:
            return f"Baris {self.line}:{self.column}: {self.detail}"
        return self.detail

class LexicalError(ManifastError):
    """A character sequence that no token rule accepts."""
    pass

class ParseError(ManifastError):
    """An unexpected token. 'expected' names what the parser was looking for."""
    def __init__(self, token, user_message=None, expected=None):
        super().__init__(token, user_message)
        self.expected = expected

class ManifastRuntimeError(ManifastError):
    """Type mismatch, undefined name or member, bad index and other evaluation errors."""
    pass

class ArityError(ManifastRuntimeError):
    pass

class RangeError(ManifastRuntimeError):
    pass

class ModuleImportError(ManifastRuntimeError):
    pass

class AssertionFailure(ManifastError):
    """Raised by a falsy 'assert'. The detail is the script-supplied message."""
    pass


# Helper for indentation in __str__ methods
INDENT_STEP = "  "

# --- Tokens and AST Node Base Classes ---
class Token:
    def __init__(self, type, value, line, column):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __str__(self, indent_level=0):
        return f"Token(type='{self.type}', value={self.value!r}, line={self.line}, column={self.column})"

    __repr__ = __str__

class Statement(Token):
    def __init__(self, type, line, column):
        super().__init__(type, None, line, column)

    def __str__(self, indent_level=0):
        return f"{INDENT_STEP * indent_level}[{self.__class__.__name__} Statement]"

class Expression(Token):
    def __init__(self, type, line, column):
        super().__init__(type, None, line, column)

    def __str__(self, indent_level=0):
        return f"[{self.__class__.__name__} Expression]"

def quote_string(text):
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    return f'"{escaped}"'

def render_body(block, indent_level):
    text = block.__str__(indent_level)
    return f"\n{text}" if text else ""

# --- Specific AST Node Classes ---
class Literal(Expression):
    def __init__(self, value, line, column):
        super().__init__("Literal", line, column)
        self.value = value

    def __str__(self, indent_level=0):
        if isinstance(self.value, str):
            return quote_string(self.value)
        return display(self.value)

class Identifier(Expression):
    def __init__(self, name, line, column):
        super().__init__("Identifier", line, column)
        self.name = name

    def __str__(self, indent_level=0):
        return self.name

class ArrayLiteral(Expression):
    def __init__(self, elements, line, column):
        super().__init__("ArrayLiteral", line, column)
        self.elements = elements

    def __str__(self, indent_level=0):
        return "[" + ", ".join(el.__str__(indent_level) for el in self.elements) + "]"

class ObjectLiteral(Expression):
    def __init__(self, entries, line, column):
        super().__init__("ObjectLiteral", line, column)
        self.entries = entries # (key, expression) pairs in source order

    def __str__(self, indent_level=0):
        return "{" + ", ".join(f"{key}: {value.__str__(indent_level)}" for key, value in self.entries) + "}"

class BinaryExpr(Expression):
    def __init__(self, operator, left, right, line, column):
        super().__init__("BinaryOp", line, column)
        self.operator = operator
        self.left = left
        self.right = right

    def __str__(self, indent_level=0):
        # Parenthesized so the text reparses with the same precedence
        return f"({self.left.__str__(indent_level)} {self.operator} {self.right.__str__(indent_level)})"

class LogicalExpr(BinaryExpr):
    def __init__(self, operator, left, right, line, column):
        super().__init__(operator, left, right, line, column)
        self.type = "LogicalOp"

class UnaryExpr(Expression):
    def __init__(self, operator, right, line, column):
        super().__init__("UnaryOp", line, column)
        self.operator = operator
        self.right = right

    def __str__(self, indent_level=0):
        separator = " " if self.operator == "bukan" else ""
        return f"{self.operator}{separator}{self.right.__str__(indent_level)}"

class CallExpr(Expression):
    def __init__(self, callee, arguments, line, column):
        super().__init__("Call", line, column)
        self.callee = callee
        self.arguments = arguments

    def __str__(self, indent_level=0):
        args_str = ", ".join(arg.__str__(indent_level) for arg in self.arguments)
        return f"{self.callee.__str__(indent_level)}({args_str})"

class IndexExpr(Expression):
    def __init__(self, object, index, line, column):
        super().__init__("Index", line, column)
        self.object = object
        self.index = index

    def __str__(self, indent_level=0):
        return f"{self.object.__str__(indent_level)}[{self.index.__str__(indent_level)}]"

class SliceExpr(Expression):
    def __init__(self, object, start, end, line, column):
        super().__init__("Slice", line, column)
        self.object = object
        self.start = start
        self.end = end

    def __str__(self, indent_level=0):
        start = self.start.__str__(indent_level) if self.start else ""
        end = self.end.__str__(indent_level) if self.end else ""
        return f"{self.object.__str__(indent_level)}[{start}:{end}]"

class MemberAccess(Expression):
    def __init__(self, object, name, line, column):
        super().__init__("MemberAccess", line, column)
        self.object = object
        self.name = name

    def __str__(self, indent_level=0):
        return f"{self.object.__str__(indent_level)}.{self.name}"

class AssignmentExpr(Expression):
    def __init__(self, target, value, operator, line, column):
        super().__init__("Assignment", line, column)
        self.target = target
        self.value = value
        self.operator = operator

    def __str__(self, indent_level=0):
        return f"{self.target.__str__(indent_level)} {self.operator} {self.value.__str__(indent_level)}"

class ImportExpr(Expression):
    def __init__(self, name, line, column):
        super().__init__("Import", line, column)
        self.name = name

    def __str__(self, indent_level=0):
        return f"impor({self.name.__str__(indent_level)})"

class FunctionDef(Expression):
    """A named function statement or an anonymous 'fungsi' expression."""
    def __init__(self, name, parameters, body, line, column):
        super().__init__("FunctionDef", line, column)
        self.name = name
        self.parameters = parameters
        self.body = body

    def __str__(self, indent_level=0):
        head = f"fungsi {self.name}" if self.name else "fungsi"
        params_str = ", ".join(self.parameters)
        return f"{head}({params_str}){render_body(self.body, indent_level + 1)}\n{INDENT_STEP * indent_level}tutup"

class Block(Statement):
    def __init__(self, statements, line, column):
        super().__init__("Block", line, column)
        self.statements = statements

    def __str__(self, indent_level=0):
        lines = []
        for stmt in self.statements:
            text = stmt.__str__(indent_level)
            if isinstance(stmt, Expression):
                text = INDENT_STEP * indent_level + text
            lines.append(text)
        return "\n".join(lines)

class ExpressionStmt(Statement):
    def __init__(self, expression, line, column):
        super().__init__("ExpressionStmt", line, column)
        self.expression = expression

    def __str__(self, indent_level=0):
        return f"{INDENT_STEP * indent_level}{self.expression.__str__(indent_level)}"

class LocalDecl(Statement):
    def __init__(self, name, initializer, constant, line, column):
        super().__init__("LocalDecl", line, column)
        self.name = name
        self.initializer = initializer
        self.constant = constant

    def __str__(self, indent_level=0):
        keyword = "tetap" if self.constant else "lokal"
        text = f"{INDENT_STEP * indent_level}{keyword} {self.name}"
        if self.initializer is not None:
            text += f" = {self.initializer.__str__(indent_level)}"
        return text

class IfStmt(Statement):
    def __init__(self, branches, else_block, line, column):
        super().__init__("If", line, column)
        self.branches = branches # list of (condition, Block)
        self.else_block = else_block

    def __str__(self, indent_level=0):
        indent = INDENT_STEP * indent_level
        parts = []
        for i, (condition, body) in enumerate(self.branches):
            keyword = "jika" if i == 0 else "kalau"
            lead = indent if i == 0 else f"\n{indent}"
            parts.append(f"{lead}{keyword} {condition.__str__(indent_level)} maka{render_body(body, indent_level + 1)}")
        if self.else_block is not None:
            parts.append(f"\n{indent}sebaliknya{render_body(self.else_block, indent_level + 1)}")
        parts.append(f"\n{indent}tutup")
        return "".join(parts)

class WhileStmt(Statement):
    def __init__(self, condition, body, line, column):
        super().__init__("While", line, column)
        self.condition = condition
        self.body = body

    def __str__(self, indent_level=0):
        indent = INDENT_STEP * indent_level
        return (f"{indent}selama {self.condition.__str__(indent_level)} lakukan"
                f"{render_body(self.body, indent_level + 1)}\n{indent}tutup")

class ForStmt(Statement):
    def __init__(self, variable, start, end, step, body, line, column):
        super().__init__("For", line, column)
        self.variable = variable
        self.start = start
        self.end = end
        self.step = step
        self.body = body

    def __str__(self, indent_level=0):
        indent = INDENT_STEP * indent_level
        header = f"{indent}untuk {self.variable} = {self.start.__str__(indent_level)} ke {self.end.__str__(indent_level)}"
        if self.step is not None:
            header += f" langkah {self.step.__str__(indent_level)}"
        return f"{header} lakukan{render_body(self.body, indent_level + 1)}\n{indent}tutup"

class ReturnStmt(Statement):
    def __init__(self, expression, line, column):
        super().__init__("Return", line, column)
        self.expression = expression

    def __str__(self, indent_level=0):
        if self.expression is None:
            return f"{INDENT_STEP * indent_level}kembali"
        return f"{INDENT_STEP * indent_level}kembali {self.expression.__str__(indent_level)}"

class ClassDef(Statement):
    def __init__(self, name, methods, line, column):
        super().__init__("ClassDef", line, column)
        self.name = name
        self.methods = methods # list of FunctionDef

    def __str__(self, indent_level=0):
        indent = INDENT_STEP * indent_level
        methods_str = "".join(f"\n{INDENT_STEP * (indent_level + 1)}{m.__str__(indent_level + 1)}" for m in self.methods)
        return f"{indent}kelas {self.name} maka{methods_str}\n{indent}tutup"


# --- Lexer ---
KEYWORDS = {
    "lokal", "tetap", "fungsi", "kembali", "tutup", "jika", "maka", "kalau", "sebaliknya",
    "selama", "untuk", "ke", "langkah", "lakukan", "kelas", "benar", "salah", "nil",
    "dan", "atau", "bukan", "impor", "self",
}
TWO_CHAR_OPERATORS = ["==", "!=", "<=", ">=", "+=", "-=", "*=", "/=", "%="]
SINGLE_CHAR_OPERATORS = "+-*/%<>=!()[]{},:.;"
ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}
NUMBER_PREFIXES = {"x": (16, "0123456789abcdefABCDEF"), "b": (2, "01"), "o": (8, "01234567")}

def is_digit(char):
    return "0" <= char <= "9"

def is_identifier_start(char):
    return char == "_" or "a" <= char <= "z" or "A" <= char <= "Z"

def is_identifier_char(char):
    return is_identifier_start(char) or is_digit(char)

def take_digits(source, i):
    digits = ""
    while i < len(source) and (is_digit(source[i]) or source[i] == "_"):
        if source[i] != "_":
            digits += source[i]
        i += 1
    return digits, i

def scan_number(source, start, line, column):
    """Reads the number literal at start. Returns (value, end index)."""
    length = len(source)
    i = start
    prefix = source[i + 1].lower() if source[i] == "0" and i + 1 < length else ""
    if prefix in NUMBER_PREFIXES:
        base, allowed = NUMBER_PREFIXES[prefix]
        i += 2
        digits = ""
        while i < length and is_identifier_char(source[i]):
            if source[i] != "_":
                if source[i] not in allowed:
                    raise LexicalError(Token("error", source[start:i + 1], line, column),
                                       f"Digit tidak valid untuk angka basis {base}: {source[i]!r}")
                digits += source[i]
            i += 1
        if not digits:
            raise LexicalError(Token("error", source[start:i], line, column), f"Angka tidak lengkap: {source[start:i]}")
        return float(int(digits, base)), i

    text, i = take_digits(source, i)
    if i + 1 < length and source[i] == "." and is_digit(source[i + 1]):
        fraction, i = take_digits(source, i + 1)
        text += "." + fraction
    if i < length and source[i] in "eE":
        j = i + 1
        if j < length and source[j] in "+-":
            j += 1
        if j < length and is_digit(source[j]):
            exponent, end = take_digits(source, j)
            text += "e" + source[i + 1:j] + exponent
            i = end
    if i < length and is_identifier_char(source[i]):
        raise LexicalError(Token("error", source[start:i + 1], line, column), f"Angka tidak valid: {source[start:i + 1]}")
    return float(text), i

def tokenize(source):
    """Lazily yields the tokens of source, ending with a single 'eof' token."""
    i = 0
    line = 1
    col = 1
    length = len(source)

    while i < length:
        char = source[i]
        start_col = col
        next_char = source[i + 1] if i + 1 < length else ""

        if char.isspace():
            if char == "\n":
                line += 1
                col = 1
            else:
                col += 1
            i += 1
            continue

        # --- Comments ---
        if char == "-" and next_char == "-":
            if source.startswith("[[", i + 2):
                end = source.find("]]", i + 4)
                if end == -1:
                    raise LexicalError(Token("error", "--[[", line, start_col), "Komentar blok tidak ditutup")
                comment = source[i:end + 2]
                newlines = comment.count("\n")
                if newlines:
                    line += newlines
                    col = len(comment) - comment.rfind("\n")
                else:
                    col += len(comment)
                i = end + 2
            else:
                while i < length and source[i] != "\n":
                    i += 1
            continue

        if is_digit(char):
            value, end = scan_number(source, i, line, start_col)
            col += end - i
            i = end
            yield Token("number", value, line, start_col)
            continue

        # Strings: delimited by double quotes, may span lines.
        if char == '"':
            start_line = line
            i += 1
            col += 1
            value = ""
            while i < length and source[i] != '"':
                if source[i] == "\\" and i + 1 < length:
                    escaped = source[i + 1]
                    value += ESCAPES.get(escaped, escaped) # unknown escapes keep the character
                    if escaped == "\n":
                        line += 1
                        col = 1
                    else:
                        col += 2
                    i += 2
                    continue
                if source[i] == "\n":
                    line += 1
                    col = 1
                else:
                    col += 1
                value += source[i]
                i += 1
            if i >= length:
                raise LexicalError(Token("error", '"', start_line, start_col), "String tidak ditutup")
            i += 1
            col += 1
            yield Token("string", value, start_line, start_col)
            continue

        if is_identifier_start(char):
            start = i
            while i < length and is_identifier_char(source[i]):
                i += 1
            word = source[start:i]
            col += i - start
            yield Token("keyword" if word in KEYWORDS else "identifier", word, line, start_col)
            continue

        # --- Operators (longer matches first) ---
        if char + next_char in TWO_CHAR_OPERATORS:
            yield Token("operator", char + next_char, line, start_col)
            i += 2
            col += 2
            continue
        if char in SINGLE_CHAR_OPERATORS:
            yield Token("operator", char, line, start_col)
            i += 1
            col += 1
            continue

        raise LexicalError(Token("error", char, line, col), f"Karakter tidak dikenal: {char!r}")

    yield Token("eof", None, line, col)


# --- Parser ---
ASSIGNMENT_OPERATORS = ["=", "+=", "-=", "*=", "/=", "%="]
# Tokens after which a bare 'kembali' has no value
RETURN_TERMINATORS = ["tutup", "kalau", "sebaliknya"]

def describe_token(token):
    if token.type == "eof":
        return "akhir berkas"
    if token.type == "string":
        return quote_string(token.value)
    if token.type == "number":
        return format_number(token.value)
    return f"'{token.value}'"

class Parser:
    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.current = 0

    # --- Token Parser Helpers ---
    def get_next_token(self, offset=0):
        index = min(self.current + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def consume_token(self):
        token = self.get_next_token()
        if token.type != "eof":
            self.current += 1
        return token

    def check(self, value, type_str=None):
        token = self.get_next_token()
        if type_str is None:
            return token.type in ("keyword", "operator") and token.value == value
        return token.type == type_str and token.value == value

    def match_token(self, value):
        if self.check(value):
            return self.consume_token()
        return None

    def expect_type(self, type_str, what=None):
        token = self.get_next_token()
        if token.type != type_str:
            expected = what or type_str
            raise ParseError(token, f"Diharapkan {expected}, ditemukan {describe_token(token)}", expected=expected)
        return self.consume_token()

    def expect_token(self, value):
        token = self.get_next_token()
        if not self.check(value):
            raise ParseError(token, f"Diharapkan '{value}', ditemukan {describe_token(token)}", expected=value)
        return self.consume_token()

    # --- Parsing Helpers ---
    def parse(self):
        first = self.get_next_token()
        statements = self.parse_block_until([])
        token = self.get_next_token()
        if token.type != "eof":
            raise ParseError(token, f"Token tak terduga {describe_token(token)}", expected="pernyataan")
        return Block(statements, first.line, first.column)

    def parse_block_until(self, terminators):
        statements = []
        while True:
            token = self.get_next_token()
            if token.type == "eof":
                break
            if token.type == "keyword" and token.value in terminators:
                break
            if self.match_token(";"):
                continue
            statements.append(self.parse_statement())
        return statements

    def parse_body(self, terminators):
        token = self.get_next_token()
        return Block(self.parse_block_until(terminators), token.line, token.column)

    def parse_statement(self):
        token = self.get_next_token()

        if token.type == "keyword":
            if token.value in ("lokal", "tetap"):
                return self.parse_local_declaration()
            if token.value == "jika":
                return self.parse_if()
            if token.value == "selama":
                return self.parse_while()
            if token.value == "untuk":
                return self.parse_for()
            if token.value == "kelas":
                return self.parse_class_definition()
            if token.value == "kembali":
                return self.parse_return()
            if token.value == "fungsi" and self.get_next_token(1).type == "identifier":
                return self.parse_function()

        # --- Expression statement (fallback) ---
        expr = self.parse_expression()
        return ExpressionStmt(expr, token.line, token.column)

    def parse_local_declaration(self):
        decl_token = self.consume_token()
        name_token = self.expect_type("identifier", "nama variabel")
        initializer = None
        if self.match_token("="):
            initializer = self.parse_expression()
        elif decl_token.value == "tetap":
            raise ParseError(self.get_next_token(), f"Konstanta '{name_token.value}' membutuhkan nilai awal", expected="=")
        return LocalDecl(name_token.value, initializer, decl_token.value == "tetap", decl_token.line, decl_token.column)

    def parse_if(self):
        if_token = self.consume_token() # consume 'jika'
        branches = []
        while True:
            condition = self.parse_expression()
            self.match_token("maka") # optional, 'jika (x < 0) x = 0 - x tutup' is accepted
            body = self.parse_body(["kalau", "sebaliknya", "tutup"])
            branches.append((condition, body))
            if not self.match_token("kalau"):
                break
        else_block = None
        if self.match_token("sebaliknya"):
            else_block = self.parse_body(["tutup"])
        self.expect_token("tutup")
        return IfStmt(branches, else_block, if_token.line, if_token.column)

    def parse_while(self):
        while_token = self.consume_token()
        condition = self.parse_expression()
        self.expect_token("lakukan")
        body = self.parse_body(["tutup"])
        self.expect_token("tutup")
        return WhileStmt(condition, body, while_token.line, while_token.column)

    def parse_for(self):
        for_token = self.consume_token()
        variable = self.expect_type("identifier", "nama variabel").value
        self.expect_token("=")
        start = self.parse_expression()
        self.expect_token("ke")
        end = self.parse_expression()
        step = None
        if self.match_token("langkah"):
            step = self.parse_expression()
        self.expect_token("lakukan")
        body = self.parse_body(["tutup"])
        self.expect_token("tutup")
        return ForStmt(variable, start, end, step, body, for_token.line, for_token.column)

    def parse_function(self):
        func_token = self.expect_token("fungsi")
        name = None
        if self.get_next_token().type == "identifier":
            name = self.consume_token().value
        self.expect_token("(")
        parameters = []
        if not self.check(")"):
            while True:
                param_token = self.expect_type("identifier", "nama parameter")
                if param_token.value in parameters:
                    raise ParseError(param_token, f"Parameter '{param_token.value}' ditulis dua kali")
                parameters.append(param_token.value)
                if not self.match_token(","):
                    break
        self.expect_token(")")
        body = self.parse_body(["tutup"])
        self.expect_token("tutup")
        return FunctionDef(name, parameters, body, func_token.line, func_token.column)

    def parse_class_definition(self):
        class_token = self.consume_token() # consume 'kelas'
        name = self.expect_type("identifier", "nama kelas").value
        self.match_token("maka")
        methods = []
        while not self.check("tutup"):
            if self.match_token(";"):
                continue
            token = self.get_next_token()
            if not (self.check("fungsi") and self.get_next_token(1).type == "identifier"):
                raise ParseError(token, f"Isi kelas '{name}' hanya boleh berisi fungsi bernama, ditemukan {describe_token(token)}",
                                 expected="fungsi")
            methods.append(self.parse_function())
        self.expect_token("tutup")
        return ClassDef(name, methods, class_token.line, class_token.column)

    def parse_return(self):
        return_token = self.consume_token()
        token = self.get_next_token()
        if (token.type == "eof" or self.check(";") or
                (token.type == "keyword" and token.value in RETURN_TERMINATORS)):
            return ReturnStmt(None, return_token.line, return_token.column)
        return ReturnStmt(self.parse_expression(), return_token.line, return_token.column)

    # --- Expression Parsing (Recursive Descent) ---
    def parse_expression(self):
        return self.parse_assignment()

    def parse_assignment(self):
        expr = self.parse_logical_or()
        next_token = self.get_next_token()
        if next_token.type == "operator" and next_token.value in ASSIGNMENT_OPERATORS:
            operator_token = self.consume_token()
            value_expr = self.parse_assignment() # right-associative
            if not isinstance(expr, (Identifier, MemberAccess, IndexExpr)):
                raise ParseError(operator_token, f"Target penugasan tidak valid: {expr}", expected="nama, anggota atau indeks")
            return AssignmentExpr(expr, value_expr, operator_token.value, operator_token.line, operator_token.column)
        return expr

    def parse_logical_or(self):
        expr = self.parse_logical_and()
        while self.check("atau", "keyword"):
            operator_token = self.consume_token()
            right = self.parse_logical_and()
            expr = LogicalExpr("atau", expr, right, operator_token.line, operator_token.column)
        return expr

    def parse_logical_and(self):
        expr = self.parse_equality()
        while self.check("dan", "keyword"):
            operator_token = self.consume_token()
            right = self.parse_equality()
            expr = LogicalExpr("dan", expr, right, operator_token.line, operator_token.column)
        return expr

    def parse_binary_level(self, operators, next_level):
        expr = next_level()
        while self.get_next_token().type == "operator" and self.get_next_token().value in operators:
            operator_token = self.consume_token()
            right = next_level()
            expr = BinaryExpr(operator_token.value, expr, right, operator_token.line, operator_token.column)
        return expr

    def parse_equality(self):
        return self.parse_binary_level(["==", "!="], self.parse_comparison)

    def parse_comparison(self):
        return self.parse_binary_level(["<", "<=", ">", ">="], self.parse_term)

    def parse_term(self):
        return self.parse_binary_level(["+", "-"], self.parse_factor)

    def parse_factor(self):
        return self.parse_binary_level(["*", "/", "%"], self.parse_unary)

    def parse_unary(self):
        if self.check("-", "operator") or self.check("!", "operator") or self.check("bukan", "keyword"):
            operator_token = self.consume_token()
            right = self.parse_unary()
            return UnaryExpr(operator_token.value, right, operator_token.line, operator_token.column)
        return self.parse_call_member_expression()

    def parse_arguments(self):
        args = []
        if not self.check(")"):
            while True:
                args.append(self.parse_expression())
                if not self.match_token(","):
                    break
        self.expect_token(")")
        return args

    def parse_call_member_expression(self):
        expr = self.parse_primary()

        while True:
            if self.check("("):
                paren_token = self.consume_token()
                expr = CallExpr(expr, self.parse_arguments(), paren_token.line, paren_token.column)
            elif self.check("["):
                bracket_token = self.consume_token()
                start = None
                if not self.check(":"):
                    start = self.parse_expression()
                if self.match_token(":"):
                    end = None if self.check("]") else self.parse_expression()
                    expr = SliceExpr(expr, start, end, bracket_token.line, bracket_token.column)
                else:
                    expr = IndexExpr(expr, start, bracket_token.line, bracket_token.column)
                self.expect_token("]")
            elif self.check("."):
                self.consume_token()
                name_token = self.expect_type("identifier", "nama anggota")
                expr = MemberAccess(expr, name_token.value, name_token.line, name_token.column)
            else:
                break # No more chained access/calls
        return expr

    def parse_primary(self):
        token = self.get_next_token()

        if token.type in ("number", "string"):
            self.consume_token()
            return Literal(token.value, token.line, token.column)
        if token.type == "identifier":
            self.consume_token()
            return Identifier(token.value, token.line, token.column)
        if token.type == "keyword":
            if token.value in ("benar", "salah", "nil"):
                self.consume_token()
                value = {"benar": True, "salah": False, "nil": None}[token.value]
                return Literal(value, token.line, token.column)
            if token.value == "self":
                self.consume_token()
                return Identifier("self", token.line, token.column)
            if token.value == "impor":
                self.consume_token()
                self.expect_token("(")
                name = self.parse_expression()
                self.expect_token(")")
                return ImportExpr(name, token.line, token.column)
            if token.value == "fungsi":
                return self.parse_function()
        if token.type == "operator":
            if token.value == "(":
                self.consume_token()
                expr = self.parse_expression()
                self.expect_token(")")
                return expr
            if token.value == "[":
                self.consume_token()
                elements = []
                while not self.check("]"):
                    elements.append(self.parse_expression())
                    if not self.match_token(","):
                        break
                self.expect_token("]")
                return ArrayLiteral(elements, token.line, token.column)
            if token.value == "{":
                self.consume_token()
                entries = []
                while not self.check("}"):
                    key_token = self.expect_type("identifier", "kunci objek")
                    self.expect_token(":")
                    entries.append((key_token.value, self.parse_expression()))
                    if not self.match_token(","):
                        break
                self.expect_token("}")
                return ObjectLiteral(entries, token.line, token.column)
        if token.type == "eof":
            raise ParseError(token, "Akhir berkas tak terduga, diharapkan ekspresi", expected="ekspresi")
        raise ParseError(token, f"Token tak terduga {describe_token(token)}", expected="ekspresi")

def parse(tokens):
    """Builds the program Block from a token iterable."""
    return Parser(tokens).parse()


# --- Runtime Values ---
class Closure:
    def __init__(self, name, params, body, env):
        self.name = name
        self.params = params
        self.body = body
        self.env = env # captured by reference

    def __repr__(self):
        return f"<Closure {self.name or 'anonim'}/{len(self.params)}>"

class BoundMethod:
    def __init__(self, receiver, closure):
        self.receiver = receiver
        self.closure = closure

class NativeFunction:
    """A host function. arity is an exact count, a (min, max) pair, or None for any number."""
    def __init__(self, name, fn, arity=None):
        self.name = name
        self.fn = fn
        self.arity = arity

    def call(self, args, tok):
        if self.arity is not None:
            low, high = self.arity if isinstance(self.arity, tuple) else (self.arity, self.arity)
            if not low <= len(args) <= high:
                expected = str(low) if low == high else f"{low} sampai {high}"
                raise ArityError(tok, f"Fungsi '{self.name}' membutuhkan {expected} argumen, diberikan {len(args)}")
        try:
            return self.fn(*args)
        except ManifastError as err:
            err.locate(tok)
            raise

class ManifastClass:
    def __init__(self, name, methods):
        self.name = name
        self.methods = methods

class Instance:
    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def __repr__(self):
        return f"<Instance of {self.klass.name} {self.fields!r}>"

class NativeModule:
    def __init__(self, name, members):
        self.name = name
        self.members = members

def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def is_truthy(value):
    return value is not None and value is not False

def format_number(n):
    if math.isnan(n):
        return "nan"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    if n == int(n) and abs(n) < 1e16:
        return str(int(n))
    return format(n, ".14g")

# Containers nested deeper than this render as "[...]" or "{...}"
MAX_DISPLAY_DEPTH = 32

def display(value, active=None):
    """Canonical text of a value, as print and string concatenation show it.
    active holds the ids of the arrays and objects being rendered; one that contains itself shows as "[...]" or "{...}".
    """
    if value is None:
        return "nil"
    if value is True:
        return "benar"
    if value is False:
        return "salah"
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        if active is None:
            active = set()
        if id(value) in active or len(active) >= MAX_DISPLAY_DEPTH:
            return "[...]" if isinstance(value, list) else "{...}"
        active.add(id(value))
        try:
            if isinstance(value, list):
                return "[" + ", ".join(display(el, active) for el in value) + "]"
            return "{" + ", ".join(f"{key}: {display(field, active)}" for key, field in value.items()) + "}"
        finally:
            active.discard(id(value))
    if isinstance(value, (Closure, BoundMethod)):
        return "[Fungsi]"
    if isinstance(value, NativeFunction):
        return "[Fungsi Native]"
    if isinstance(value, ManifastClass):
        return f"[Kelas {value.name}]"
    if isinstance(value, Instance):
        return f"[Instance of {value.klass.name}]"
    if isinstance(value, NativeModule):
        return f"[Modul {value.name}]"
    return str(value)

def type_name(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "bool"
    if is_number(value):
        return "angka"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "larik"
    if isinstance(value, dict):
        return "objek"
    if isinstance(value, (Closure, BoundMethod, NativeFunction)):
        return "fungsi"
    if isinstance(value, Instance):
        return value.klass.name
    if isinstance(value, ManifastClass):
        return "kelas"
    if isinstance(value, NativeModule):
        return "modul"
    return type(value).__name__

def values_equal(a, b):
    if a is None or b is None:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b

def to_index(value, tok, what="Indeks"):
    """Checks value is a whole number and returns it as int."""
    if not is_number(value):
        raise ManifastRuntimeError(tok, f"{what} harus berupa angka, diberikan {type_name(value)}")
    if not math.isfinite(value) or value != int(value):
        raise ManifastRuntimeError(tok, f"{what} harus bilangan bulat, diberikan {format_number(value)}")
    return int(value)


# --- Environment for variable scoping ---
class Environment:
    def __init__(self, parent=None):
        self.values = {}
        self.constants = set()
        self.parent = parent

    def define(self, name, value, constant=False):
        self.values[name] = value
        if constant:
            self.constants.add(name)
        else:
            self.constants.discard(name)

    def root(self):
        env = self
        while env.parent is not None:
            env = env.parent
        return env

    def assign(self, name, value, tok):
        env = self
        while env is not None:
            if name in env.values:
                if name in env.constants:
                    raise ManifastRuntimeError(tok, f"Konstanta '{name}' tidak dapat diubah")
                env.values[name] = value
                return
            env = env.parent
        # Undeclared names become globals
        self.root().values[name] = value

    def get(self, name, tok=None):
        if name in self.values:
            return self.values[name]
        elif self.parent:
            return self.parent.get(name, tok)
        else:
            raise ManifastRuntimeError(tok, f"Variabel '{name}' belum didefinisikan")

    def __repr__(self):
        return str(self.values)


# --- Configuration and per-run state ---
@dataclass
class Config:
    max_depth: int = 200
    max_steps: Optional[int] = None
    timeout: Optional[float] = None # seconds

    def __post_init__(self):
        if not 1 <= self.max_depth <= MAX_CALL_DEPTH:
            raise ValueError(f"max_depth must be between 1 and {MAX_CALL_DEPTH}, got {self.max_depth}")

class ExecutionContext:
    """State owned by one run: output buffer, module cache, clock and limits."""
    def __init__(self, config=None):
        self.config = config or Config()
        self.output = []
        self.modules = {}
        self.steps = 0
        self.last_nanos = 0
        self.deadline = None
        if self.config.timeout is not None:
            self.deadline = time.monotonic() + self.config.timeout

    def write(self, text):
        self.output.append(text)

    def clear_output(self):
        self.output.clear()

    def text(self):
        return "".join(self.output)

    def nanos(self):
        now = time.monotonic_ns()
        if now < self.last_nanos:
            now = self.last_nanos
        self.last_nanos = now
        return float(now)

    def tick(self, tok):
        self.steps += 1
        limit = self.config.max_steps
        if limit is not None and self.steps > limit:
            raise ManifastRuntimeError(tok, f"Batas eksekusi tercapai ({limit} langkah)")
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise ManifastRuntimeError(tok, f"Batas waktu eksekusi tercapai ({self.config.timeout} detik)")


# --- Native modules and globals ---
def check_number(fn_name, value, position):
    if not is_number(value):
        raise ManifastRuntimeError(None, f"{fn_name}: argumen ke-{position} harus angka, diberikan {type_name(value)}")
    return value

def check_string(fn_name, value, position):
    if not isinstance(value, str):
        raise ManifastRuntimeError(None, f"{fn_name}: argumen ke-{position} harus string, diberikan {type_name(value)}")
    return value

def check_array(fn_name, value, position):
    if not isinstance(value, list):
        raise ManifastRuntimeError(None, f"{fn_name}: argumen ke-{position} harus larik, diberikan {type_name(value)}")
    return value

def ieee_pow(base, exponent):
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and exponent % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            return math.inf
        return math.nan

def ieee_floor(x):
    return float(math.floor(x)) if math.isfinite(x) else x

def ieee_ceil(x):
    return float(math.ceil(x)) if math.isfinite(x) else x

def numeric_native(name, fn, arity=1):
    full_name = f"math.{name}"

    def native(*args):
        for position, arg in enumerate(args, 1):
            check_number(full_name, arg, position)
        try:
            return float(fn(*args))
        except ValueError: # domain errors follow IEEE and give nan
            return math.nan
    return NativeFunction(full_name, native, arity)

def init_math_module(context):
    return {
        "pi": math.pi,
        "e": math.e,
        "sin": numeric_native("sin", math.sin),
        "cos": numeric_native("cos", math.cos),
        "sqrt": numeric_native("sqrt", math.sqrt),
        "pow": numeric_native("pow", ieee_pow, 2),
        "abs": numeric_native("abs", abs),
        "floor": numeric_native("floor", ieee_floor),
        "ceil": numeric_native("ceil", ieee_ceil),
    }

def init_string_module(context):
    def substring(s, start, end):
        check_string("string.substring", s, 1)
        first = to_index(check_number("string.substring", start, 2), None, "Awal substring")
        last = to_index(check_number("string.substring", end, 3), None, "Akhir substring")
        if not (1 <= first <= len(s) and 1 <= last <= len(s)) or first > last:
            raise RangeError(None, f"substring({first}, {last}) di luar jangkauan string sepanjang {len(s)}")
        return s[first - 1:last]

    def split(s, sep):
        check_string("string.split", s, 1)
        check_string("string.split", sep, 2)
        if sep == "":
            return [s]
        return s.split(sep)

    return {
        "substring": NativeFunction("string.substring", substring, 3),
        "split": NativeFunction("string.split", split, 2),
    }

def init_os_module(context):
    def keluar(code=None):
        if code is not None:
            code = to_index(code, None, "Kode keluar")
        raise ExitException(code or 0)

    def clear_output():
        context.clear_output()

    return {
        "waktuNano": NativeFunction("os.waktuNano", context.nanos, 0),
        "keluar": NativeFunction("os.keluar", keluar, (0, 1)),
        "clearOutput": NativeFunction("os.clearOutput", clear_output, 0),
    }

MODULE_LOADERS = {
    "math": init_math_module,
    "string": init_string_module,
    "os": init_os_module,
}

def init_globals(globals_env, context):
    def print_(*args):
        context.write("\t".join(display(arg) for arg in args))
    globals_env.define("print", NativeFunction("print", print_))

    def println(*args):
        context.write("\t".join(display(arg) for arg in args) + "\n")
    globals_env.define("println", NativeFunction("println", println))

    globals_env.define("tipe", NativeFunction("tipe", type_name, 1))

    def assert_(*args):
        if not args:
            raise ArityError(None, "Fungsi 'assert' membutuhkan setidaknya 1 argumen")
        if is_truthy(args[0]):
            return None
        message = display(args[1]) if len(args) > 1 and args[1] is not None else ""
        raise AssertionFailure(None, message)
    globals_env.define("assert", NativeFunction("assert", assert_))

    def len_(value):
        if isinstance(value, (list, str)):
            return float(len(value))
        raise ManifastRuntimeError(None, f"len: argumen harus larik atau string, diberikan {type_name(value)}")
    globals_env.define("len", NativeFunction("len", len_, 1))

    def push(array, value):
        check_array("push", array, 1).append(value)
    globals_env.define("push", NativeFunction("push", push, 2))

    def pop(array):
        if not check_array("pop", array, 1):
            raise RangeError(None, "pop: larik kosong")
        return array.pop()
    globals_env.define("pop", NativeFunction("pop", pop, 1))


# --- Interpreter ---
OPERATOR_METHODS = {"+": "__jumlah", "-": "__kurang", "*": "__kali", "/": "__bagi"}

class Interpreter:
    def __init__(self, context=None):
        self.context = context or ExecutionContext()
        self.globals = Environment()
        self.depth = 0
        init_globals(self.globals, self.context)

    # --- Evaluation / Execution ---
    def interpret(self, program):
        try:
            self.execute_block(program.statements, self.globals)
        except ReturnException:
            pass # 'kembali' at top level ends the script

    def execute_block(self, statements, env):
        for stmt in statements:
            self.context.tick(stmt)
            self.execute_stmt(stmt, env)

    def execute_stmt(self, stmt, env):
        if stmt.type == "ExpressionStmt":
            self.evaluate_expr(stmt.expression, env)

        elif stmt.type == "LocalDecl":
            value = self.evaluate_expr(stmt.initializer, env) if stmt.initializer is not None else None
            env.define(stmt.name, value, stmt.constant)

        elif stmt.type == "FunctionDef":
            closure = Closure(stmt.name, stmt.parameters, stmt.body, env)
            if stmt.name:
                env.define(stmt.name, closure)

        elif stmt.type == "If":
            for condition, body in stmt.branches:
                if is_truthy(self.evaluate_expr(condition, env)):
                    self.execute_block(body.statements, Environment(env))
                    return
            if stmt.else_block is not None:
                self.execute_block(stmt.else_block.statements, Environment(env))

        elif stmt.type == "While":
            while is_truthy(self.evaluate_expr(stmt.condition, env)):
                self.execute_block(stmt.body.statements, Environment(env))
                self.context.tick(stmt)

        elif stmt.type == "For":
            start = self.evaluate_expr(stmt.start, env)
            end = self.evaluate_expr(stmt.end, env)
            step = self.evaluate_expr(stmt.step, env) if stmt.step is not None else 1.0
            if not (is_number(start) and is_number(end) and is_number(step)):
                raise ManifastRuntimeError(stmt, f"Batas dan langkah 'untuk' harus angka, diberikan {type_name(start)}, "
                                                 f"{type_name(end)} dan {type_name(step)}")
            if step == 0:
                raise ManifastRuntimeError(stmt, "Langkah 'untuk' tidak boleh nol")
            counter = float(start)
            while (step > 0 and counter <= end) or (step < 0 and counter >= end):
                loop_env = Environment(env)
                loop_env.define(stmt.variable, counter)
                self.execute_block(stmt.body.statements, loop_env)
                self.context.tick(stmt)
                counter += step

        elif stmt.type == "Return":
            value = self.evaluate_expr(stmt.expression, env) if stmt.expression is not None else None
            raise ReturnException(value)

        elif stmt.type == "ClassDef":
            methods = {}
            for method in stmt.methods:
                methods[method.name] = Closure(method.name, method.parameters, method.body, env)
            env.define(stmt.name, ManifastClass(stmt.name, methods))

        else:
            raise ManifastRuntimeError(stmt, f"Jenis pernyataan tidak dikenal: {stmt.type}")

    def evaluate_expr(self, expr, env):
        if expr.type == "Literal":
            return expr.value

        elif expr.type == "Identifier":
            return env.get(expr.name, expr)

        elif expr.type == "ArrayLiteral":
            return [self.evaluate_expr(el, env) for el in expr.elements]

        elif expr.type == "ObjectLiteral":
            return {key: self.evaluate_expr(value, env) for key, value in expr.entries}

        elif expr.type == "LogicalOp":
            left = self.evaluate_expr(expr.left, env)
            if expr.operator == "dan":
                return self.evaluate_expr(expr.right, env) if is_truthy(left) else left
            return left if is_truthy(left) else self.evaluate_expr(expr.right, env)

        elif expr.type == "UnaryOp":
            right = self.evaluate_expr(expr.right, env)
            if expr.operator == "-":
                if not is_number(right):
                    raise ManifastRuntimeError(expr, f"Operator '-' membutuhkan angka, diberikan {type_name(right)}")
                return -right
            return not is_truthy(right)

        elif expr.type == "BinaryOp":
            left = self.evaluate_expr(expr.left, env)
            right = self.evaluate_expr(expr.right, env)
            return self.binary_op(expr.operator, left, right, expr)

        elif expr.type == "Call":
            callee = self.evaluate_expr(expr.callee, env)
            args = [self.evaluate_expr(arg, env) for arg in expr.arguments]
            return self.call_value(callee, args, expr)

        elif expr.type == "Index":
            obj = self.evaluate_expr(expr.object, env)
            index = self.evaluate_expr(expr.index, env)
            if not isinstance(obj, (list, str)):
                raise ManifastRuntimeError(expr, f"Nilai bertipe {type_name(obj)} tidak dapat diindeks")
            return obj[self.position(obj, index, expr)]

        elif expr.type == "Slice":
            obj = self.evaluate_expr(expr.object, env)
            start = self.evaluate_expr(expr.start, env) if expr.start is not None else None
            end = self.evaluate_expr(expr.end, env) if expr.end is not None else None
            return self.slice_value(obj, start, end, expr)

        elif expr.type == "MemberAccess":
            obj = self.evaluate_expr(expr.object, env)
            return self.get_member(obj, expr.name, expr)

        elif expr.type == "Assignment":
            return self.assign(expr, env)

        elif expr.type == "Import":
            name = self.evaluate_expr(expr.name, env)
            return self.import_module(name, expr)

        elif expr.type == "FunctionDef":
            return Closure(expr.name, expr.parameters, expr.body, env)

        else:
            raise ManifastRuntimeError(expr, f"Jenis ekspresi tidak dikenal: {expr.type}")

    # --- Operators ---
    def binary_op(self, op, left, right, tok):
        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)

        if op in ("<", "<=", ">", ">="):
            if not ((is_number(left) and is_number(right)) or (isinstance(left, str) and isinstance(right, str))):
                raise ManifastRuntimeError(tok, f"Tidak dapat membandingkan {type_name(left)} dengan {type_name(right)}")
            if op == "<": return left < right
            if op == "<=": return left <= right
            if op == ">": return left > right
            return left >= right

        if op == "+" and (isinstance(left, str) or isinstance(right, str)):
            return display(left) + display(right)

        if isinstance(left, Instance) or isinstance(right, Instance):
            instance = left if isinstance(left, Instance) else right
            method = instance.klass.methods.get(OPERATOR_METHODS.get(op, ""))
            if method is not None:
                other = right if instance is left else left
                return self.call_closure(method, [other], tok, receiver=instance)

        if not (is_number(left) and is_number(right)):
            raise ManifastRuntimeError(tok, f"Operator '{op}' membutuhkan angka, diberikan {type_name(left)} dan {type_name(right)}")
        if op == "+": return left + right
        if op == "-": return left - right
        if op == "*": return left * right
        if op == "/":
            if right == 0:
                raise ManifastRuntimeError(tok, "Pembagian dengan nol")
            return left / right
        if op == "%":
            if right == 0:
                raise ManifastRuntimeError(tok, "Modulo dengan nol")
            return math.fmod(left, right)
        raise ManifastRuntimeError(tok, f"Operator tidak dikenal: {op}")

    # --- Calls ---
    def call_value(self, callee, args, tok):
        if isinstance(callee, NativeFunction):
            return callee.call(args, tok)
        if isinstance(callee, BoundMethod):
            return self.call_closure(callee.closure, args, tok, receiver=callee.receiver)
        if isinstance(callee, Closure):
            return self.call_closure(callee, args, tok)
        if isinstance(callee, ManifastClass):
            return self.instantiate(callee, args, tok)
        raise ManifastRuntimeError(tok, f"Nilai bertipe {type_name(callee)} tidak dapat dipanggil")

    def call_closure(self, closure, args, tok, receiver=None):
        if len(args) != len(closure.params):
            name = closure.name or "anonim"
            raise ArityError(tok, f"Fungsi '{name}' membutuhkan {len(closure.params)} argumen, diberikan {len(args)}")
        if self.depth >= self.context.config.max_depth:
            raise ManifastRuntimeError(tok, STACK_OVERFLOW_MESSAGE)

        call_env = Environment(closure.env)
        if receiver is not None:
            call_env.define("self", receiver)
        for param, arg in zip(closure.params, args):
            call_env.define(param, arg)

        self.depth += 1
        try:
            self.execute_block(closure.body.statements, call_env)
        except ReturnException as ret:
            return ret.value
        finally:
            self.depth -= 1
        return None

    def instantiate(self, klass, args, tok):
        instance = Instance(klass)
        initializer = klass.methods.get("inisiasi")
        if initializer is not None:
            self.call_closure(initializer, args, tok, receiver=instance)
        return instance

    # --- Members, indexing and assignment ---
    def get_member(self, obj, name, tok):
        if isinstance(obj, Instance):
            if name in obj.fields:
                return obj.fields[name]
            method = obj.klass.methods.get(name)
            if method is not None:
                return BoundMethod(obj, method)
            raise ManifastRuntimeError(tok, f"Anggota '{name}' tidak ditemukan pada {display(obj)}")
        if isinstance(obj, dict):
            return obj.get(name) # missing keys read as nil
        if isinstance(obj, NativeModule):
            if name in obj.members:
                return obj.members[name]
            raise ManifastRuntimeError(tok, f"Modul '{obj.name}' tidak memiliki anggota '{name}'")
        if isinstance(obj, ManifastClass):
            if name in obj.methods:
                return obj.methods[name]
            raise ManifastRuntimeError(tok, f"Kelas '{obj.name}' tidak memiliki metode '{name}'")
        raise ManifastRuntimeError(tok, f"Tidak dapat mengakses anggota '{name}' dari nilai bertipe {type_name(obj)}")

    def position(self, seq, index, tok):
        """Translates a 1-based index into a 0-based list position."""
        i = to_index(index, tok)
        if i < 1 or i > len(seq):
            raise RangeError(tok, f"Indeks {i} di luar jangkauan (1..{len(seq)})")
        return i - 1

    def slice_value(self, obj, start, end, tok):
        if not isinstance(obj, (list, str)):
            raise ManifastRuntimeError(tok, f"Nilai bertipe {type_name(obj)} tidak dapat dipotong")
        first = 1 if start is None else to_index(start, tok, "Awal potongan")
        last = len(obj) if end is None else to_index(end, tok, "Akhir potongan")
        # an empty slice is allowed when first == last + 1
        if first < 1 or last > len(obj) or first > last + 1:
            raise RangeError(tok, f"Potongan [{first}:{last}] di luar jangkauan (1..{len(obj)})")
        return obj[first - 1:last]

    def assign(self, expr, env):
        target = expr.target
        op = expr.operator

        if isinstance(target, Identifier):
            current = env.get(target.name, target) if op != "=" else None
            value = self.evaluate_expr(expr.value, env)
            if op != "=":
                value = self.binary_op(op[0], current, value, expr)
            env.assign(target.name, value, target)
            return value

        if isinstance(target, MemberAccess):
            obj = self.evaluate_expr(target.object, env)
            if not isinstance(obj, (Instance, dict)):
                raise ManifastRuntimeError(target, f"Tidak dapat mengubah anggota '{target.name}' dari nilai bertipe {type_name(obj)}")
            current = self.get_member(obj, target.name, target) if op != "=" else None
            value = self.evaluate_expr(expr.value, env)
            if op != "=":
                value = self.binary_op(op[0], current, value, expr)
            fields = obj.fields if isinstance(obj, Instance) else obj
            fields[target.name] = value
            return value

        if isinstance(target, IndexExpr):
            obj = self.evaluate_expr(target.object, env)
            index = self.evaluate_expr(target.index, env)
            if not isinstance(obj, list):
                raise ManifastRuntimeError(target, f"Tidak dapat mengubah indeks dari nilai bertipe {type_name(obj)}")
            pos = self.position(obj, index, target)
            value = self.evaluate_expr(expr.value, env)
            if op != "=":
                value = self.binary_op(op[0], obj[pos], value, expr)
            if pos >= len(obj):
                raise RangeError(target, f"Indeks {pos + 1} di luar jangkauan (1..{len(obj)})")
            obj[pos] = value
            return value

        raise ManifastRuntimeError(target, f"Target penugasan tidak valid: {target}")

    # --- Modules ---
    def import_module(self, name, tok):
        if not isinstance(name, str):
            raise ManifastRuntimeError(tok, f"Nama modul harus string, diberikan {type_name(name)}")
        module = self.context.modules.get(name)
        if module is None:
            loader = MODULE_LOADERS.get(name)
            if loader is None:
                raise ModuleImportError(tok, f"Modul '{name}' tidak ditemukan")
            module = NativeModule(name, loader(self.context))
            self.context.modules[name] = module
            LOG.debug("loaded module %s", name)
        return module


# --- Diagnostics and entry points ---
class Status(Enum):
    OK = "ok"
    RUNTIME_ERROR = "runtime_error"
    ASSERTION_FAILURE = "assertion_failure"

@dataclass
class ExecutionResult:
    output: str = ""
    status: Status = Status.OK
    message: Optional[str] = None
    exit_code: int = 0

    @property
    def ok(self):
        return self.status is Status.OK

    def fail(self, status, message):
        self.status = status
        self.message = message

    def marker_line(self):
        if self.status is Status.RUNTIME_ERROR:
            return f"{RUNTIME_ERROR_MARKER} {self.message}"
        if self.status is Status.ASSERTION_FAILURE:
            if self.message:
                return f"{ASSERTION_FAILURE_TAG} {ASSERTION_FAILURE_MARKER}: {self.message}"
            return f"{ASSERTION_FAILURE_TAG} {ASSERTION_FAILURE_MARKER}"
        return None

    @property
    def text(self):
        """The output with the diagnostic marker line appended, if any."""
        line = self.marker_line()
        if line is None:
            return self.output
        separator = "\n" if self.output and not self.output.endswith("\n") else ""
        return f"{self.output}{separator}{line}\n"

class ErrorHandler:
    """Context manager that records script errors on the result instead of raising them.
    Errors that are not ManifastErrors are internal issues and are logged with their traceback.
    """
    def __init__(self, result):
        self.result = result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or not issubclass(exc_type, Exception):
            return False

        if issubclass(exc_type, ExitException):
            self.result.exit_code = exc_val.code
        elif issubclass(exc_type, AssertionFailure):
            self.result.fail(Status.ASSERTION_FAILURE, exc_val.detail)
        elif issubclass(exc_type, (LexicalError, ParseError)):
            self.result.fail(Status.RUNTIME_ERROR, f"{SYNTAX_TAG} {exc_val}")
        elif issubclass(exc_type, ManifastError):
            self.result.fail(Status.RUNTIME_ERROR, str(exc_val))
        elif issubclass(exc_type, RecursionError):
            self.result.fail(Status.RUNTIME_ERROR, STACK_OVERFLOW_MESSAGE)
        else:
            LOG.error("internal error while running script", exc_info=(exc_type, exc_val, exc_tb))
            self.result.fail(Status.RUNTIME_ERROR, f"{INTERNAL_TAG} {exc_type.__name__}: {exc_val}")
        return True

def run(source, config=None):
    """Runs source and returns an ExecutionResult. Script errors never raise."""
    context = ExecutionContext(config)
    result = ExecutionResult()
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(limit, context.config.max_depth * FRAMES_PER_CALL + 1000))
    try:
        with ErrorHandler(result):
            program = parse(tokenize(source))
            LOG.debug("parsed %d top-level statements", len(program.statements))
            Interpreter(context).interpret(program)
    finally:
        sys.setrecursionlimit(limit)
    result.output = context.text()
    LOG.debug("run finished: %s after %d steps", result.status.name, context.steps)
    return result

def execute(source, config=None):
    """Runs source and returns its output, with a marker line appended on failure."""
    return run(source, config).text
