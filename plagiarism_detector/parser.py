"""Recursive-descent parser for the C-family subset the detector understands.

Consumes the normalized token stream from :mod:`plagiarism_detector.tokenizer`
and builds a :class:`~plagiarism_detector.syntax_tree.Program`. The first
unmet expectation aborts the parse with :class:`SourceSyntaxError`; there is
no recovery and no partial tree.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .syntax_tree import (
    BinaryExpression,
    Block,
    CharLiteral,
    ExpressionStatement,
    For,
    FunctionCall,
    FunctionDefinition,
    Identifier,
    If,
    Node,
    NumberLiteral,
    Parameter,
    Program,
    Return,
    StringLiteral,
    Type,
    UnaryExpression,
    VariableDeclaration,
    While,
)
from .tokenizer import (
    CHAR_LITERAL,
    END_OF_FILE,
    IDENTIFIER,
    NUMBER_LITERAL,
    STRING_LITERAL,
    is_type_start,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Operator tables, lowest precedence first
# ---------------------------------------------------------------------------
ASSIGNMENT_OPERATORS = ("=", "+=", "-=", "*=", "/=")
BINARY_PRECEDENCE = (
    ("||",),
    ("&&",),
    ("==", "!="),
    ("<", ">", "<=", ">="),
    ("<<", ">>"),
    ("+", "-"),
    ("*", "/", "%"),
)
PREFIX_OPERATORS = ("++", "--", "+", "-", "!")
POSTFIX_OPERATORS = ("++", "--")

# Keywords that behave as literal values in expressions.
LITERAL_KEYWORDS = frozenset({"true", "false", "nullptr"})


class SourceSyntaxError(SyntaxError):
    """Raised when the token stream does not match the grammar."""

    def __init__(self, expected: str, found: str, position: int):
        self.expected = expected
        self.found = found
        self.position = position
        super().__init__(
            f"Expected '{expected}' but found '{found}' at token index {position}"
        )


class Parser:
    def __init__(self, tokens: Sequence[str]):
        self.tokens = list(tokens)
        self.pos = 0

    # -- cursor ------------------------------------------------------------
    def peek(self) -> str:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return END_OF_FILE

    def consume(self) -> str:
        token = self.peek()
        if self.pos < len(self.tokens):
            self.pos += 1
        return token

    def check(self, *expected: str) -> bool:
        return self.peek() in expected

    def match(self, expected: str) -> str:
        if self.peek() != expected:
            self.fail(expected)
        return self.consume()

    def fail(self, expected: str) -> None:
        raise SourceSyntaxError(expected, self.peek(), self.pos)

    def _skip_qualified_name(self) -> None:
        while self.check("::"):
            self.consume()
            if self.check(IDENTIFIER):
                self.consume()

    def _looks_like_declaration(self) -> bool:
        """Probe ``[const] type-name [::IDENTIFIER]* IDENTIFIER``; cursor is restored."""
        start = self.pos
        try:
            if self.check("const"):
                self.consume()
            if not is_type_start(self.peek()):
                return False
            self.consume()
            self._skip_qualified_name()
            return self.check(IDENTIFIER)
        finally:
            self.pos = start

    # -- declarations ------------------------------------------------------
    def parse_program(self) -> Program:
        program = Program()
        while not self.check(END_OF_FILE):
            start = self.pos
            self.parse_type()
            if not self.check(IDENTIFIER):
                self.fail(IDENTIFIER)
            self.consume()
            follower, follower_pos = self.peek(), self.pos
            self.pos = start

            if follower == "(":
                program.declarations.append(self.parse_function_definition())
            elif follower in ("=", ";", ","):
                program.declarations.append(self.parse_variable_declaration())
            else:
                raise SourceSyntaxError("(", follower, follower_pos)
        return program

    def parse_function_definition(self) -> FunctionDefinition:
        return_type = self.parse_type()
        self.match(IDENTIFIER)
        self.match("(")
        parameters: List[Parameter] = []
        if not self.check(")"):
            parameters.append(self.parse_parameter())
            while self.check(","):
                self.consume()
                parameters.append(self.parse_parameter())
        self.match(")")
        body = self.parse_block()
        return FunctionDefinition(return_type, Identifier(IDENTIFIER), parameters, body)

    def parse_parameter(self) -> Parameter:
        param_type = self.parse_type()
        self.match(IDENTIFIER)
        return Parameter(param_type, Identifier(IDENTIFIER))

    def parse_type(self) -> Type:
        name = ""
        if self.check("const"):
            name = self.consume() + " "
        if not is_type_start(self.peek()):
            self.fail("type")
        name += self.consume()
        while self.check("::"):
            self.consume()
            self.match(IDENTIFIER)
            name += "::" + IDENTIFIER
        return Type(name)

    def parse_variable_declaration(self) -> VariableDeclaration:
        var_type = self.parse_type()
        self.match(IDENTIFIER)
        initializer = None
        if self.check("="):
            self.consume()
            initializer = self.parse_expression()
        self.match(";")
        return VariableDeclaration(var_type, Identifier(IDENTIFIER), initializer)

    # -- statements --------------------------------------------------------
    def parse_statement(self) -> Node:
        token = self.peek()
        if token == "{":
            return self.parse_block()
        if token == "if":
            return self.parse_if()
        if token == "while":
            return self.parse_while()
        if token == "for":
            return self.parse_for()
        if token == "return":
            return self.parse_return()
        if self._looks_like_declaration():
            return self.parse_variable_declaration()
        return self.parse_expression_statement()

    def parse_block(self) -> Block:
        self.match("{")
        block = Block()
        while not self.check("}"):
            if self.check(END_OF_FILE):
                self.fail("}")
            block.statements.append(self.parse_statement())
        self.match("}")
        return block

    def parse_if(self) -> If:
        self.match("if")
        self.match("(")
        condition = self.parse_expression()
        self.match(")")
        then_branch = self.parse_statement()
        else_branch = None
        if self.check("else"):
            self.consume()
            else_branch = self.parse_statement()
        return If(condition, then_branch, else_branch)

    def parse_while(self) -> While:
        self.match("while")
        self.match("(")
        condition = self.parse_expression()
        self.match(")")
        return While(condition, self.parse_statement())

    def parse_for(self) -> For:
        self.match("for")
        self.match("(")

        initializer: Optional[Node] = None
        if self.check(";"):
            self.consume()
        elif self._looks_like_declaration():
            initializer = self.parse_variable_declaration()
        else:
            initializer = self.parse_expression()
            self.match(";")

        condition = None if self.check(";") else self.parse_expression()
        self.match(";")
        increment = None if self.check(")") else self.parse_expression()
        self.match(")")

        body = self.parse_statement()
        return For(initializer, condition, increment, body)

    def parse_return(self) -> Return:
        self.match("return")
        expression = None if self.check(";") else self.parse_expression()
        self.match(";")
        return Return(expression)

    def parse_expression_statement(self) -> ExpressionStatement:
        expression = self.parse_expression()
        self.match(";")
        return ExpressionStatement(expression)

    # -- expressions -------------------------------------------------------
    def parse_expression(self) -> Node:
        return self.parse_assignment()

    def parse_assignment(self) -> Node:
        target = self.parse_binary(0)
        if self.check(*ASSIGNMENT_OPERATORS):
            operator = self.consume()
            return BinaryExpression(target, operator, self.parse_assignment())
        return target

    def parse_binary(self, level: int) -> Node:
        if level == len(BINARY_PRECEDENCE):
            return self.parse_unary()
        operators = BINARY_PRECEDENCE[level]
        expr = self.parse_binary(level + 1)
        while self.check(*operators):
            operator = self.consume()
            expr = BinaryExpression(expr, operator, self.parse_binary(level + 1))
        return expr

    def parse_unary(self) -> Node:
        if self.check(*PREFIX_OPERATORS):
            operator = self.consume()
            return UnaryExpression(operator, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        expr = self.parse_primary()
        while True:
            if self.check(*POSTFIX_OPERATORS):
                expr = UnaryExpression(self.consume(), expr, postfix=True)
            elif self.check("("):
                self.consume()
                call = FunctionCall(expr)
                if not self.check(")"):
                    call.arguments.append(self.parse_expression())
                    while self.check(","):
                        self.consume()
                        call.arguments.append(self.parse_expression())
                self.match(")")
                expr = call
            else:
                return expr

    def parse_primary(self) -> Node:
        token = self.peek()
        if token == "(":
            self.consume()
            expr = self.parse_expression()
            self.match(")")
            return expr
        if token == IDENTIFIER:
            self.consume()
            name = IDENTIFIER
            while self.check("::"):
                self.consume()
                self.match(IDENTIFIER)
                name += "::" + IDENTIFIER
            return Identifier(name)
        if token == NUMBER_LITERAL or token in LITERAL_KEYWORDS:
            self.consume()
            return NumberLiteral(token)
        if token == STRING_LITERAL:
            self.consume()
            return StringLiteral(token)
        if token == CHAR_LITERAL:
            self.consume()
            return CharLiteral(token)
        raise SourceSyntaxError("expression", token, self.pos)


def parse(tokens: Sequence[str]) -> Program:
    """Parse a token sequence into a Program or raise SourceSyntaxError."""
    logger.debug("Parsing %d tokens", len(tokens))
    program = Parser(tokens).parse_program()
    logger.debug("Parsed %d top-level declarations", len(program.declarations))
    return program
