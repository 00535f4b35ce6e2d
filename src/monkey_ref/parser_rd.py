"""
Recursive Descent Parser for Monkey

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent for statements, Pratt parsing for expressions
- AST: lark Tree/Token nodes, every node positioned (see tree.make_tree)

The parser never stops at the first error: the program loop and every block
loop record the ParseError and skip to the next statement boundary of their
own level.
"""

from enum import IntEnum
from typing import Callable, Dict, List, Optional, Tuple
from lark import Tree, Token

from .token_types import TT, Tok, SourceError, describe
from .tree import Node, make_token, make_tree, tree_label

INT64_MAX = 2**63 - 1

# ============================================================================
# Parser
# ============================================================================

class ParseError(SourceError):
    """Parse error with position info"""

    def __init__(self, message: str, token: Optional[Tok] = None):
        self.token = token
        if token is None:
            super().__init__(message)
        else:
            super().__init__(message, token.line, token.column)


class Prec(IntEnum):
    LOWEST = 0
    EQUALS = 1  # == !=
    COMPARE = 2  # < > <= >=
    SUM = 3  # + -
    PRODUCT = 4  # * / %
    POWER = 5  # ^
    PREFIX = 6  # -x !x
    CALL = 7  # f(x)
    INDEX = 8  # a[i]


PRECEDENCES = {
    TT.EQ: Prec.EQUALS,
    TT.NEQ: Prec.EQUALS,
    TT.LT: Prec.COMPARE,
    TT.GT: Prec.COMPARE,
    TT.LTE: Prec.COMPARE,
    TT.GTE: Prec.COMPARE,
    TT.PLUS: Prec.SUM,
    TT.MINUS: Prec.SUM,
    TT.STAR: Prec.PRODUCT,
    TT.SLASH: Prec.PRODUCT,
    TT.MOD: Prec.PRODUCT,
    TT.CARET: Prec.POWER,
    TT.LPAR: Prec.CALL,
    TT.LSQB: Prec.INDEX,
}

RIGHT_ASSOC = {TT.CARET}

# Expression statements built from these end in '}' and take an optional ';'
SELF_TERMINATING = ('if', 'fn', 'blockexpr')


def _spelling(token_type: TT) -> str:
    from .lexer_rd import Lexer

    for text, tt in Lexer.OPERATORS:
        if tt == token_type:
            return f"'{text}'"
    for text, tt in Lexer.KEYWORDS.items():
        if tt == token_type:
            return f"'{text}'"
    if token_type == TT.IDENT:
        return "identifier"
    return token_type.name


class Parser:
    """
    Recursive descent parser for Monkey.

    Expression precedence (lowest to highest):
    1. equality (==, !=)
    2. compare (<, >, <=, >=)
    3. sum (+, -)
    4. product (*, /, %)
    5. power (^, right associative)
    6. prefix (-, !)
    7. call (f(args))
    8. index (a[i])
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)
        # Open '{' / '#{' delimiters; read by error recovery
        self.depth = 0
        self.errors: List[ParseError] = []

        self.prefix_fns: Dict[TT, Callable[[], Node]] = {
            TT.IDENT: self.parse_literal,
            TT.INT: self.parse_int,
            TT.STRING: self.parse_literal,
            TT.TRUE: self.parse_literal,
            TT.FALSE: self.parse_literal,
            TT.NIL: self.parse_literal,
            TT.MINUS: self.parse_prefix,
            TT.NEG: self.parse_prefix,
            TT.LPAR: self.parse_group,
            TT.LSQB: self.parse_array,
            TT.HASH_OPEN: self.parse_hash,
            TT.LBRACE: self.parse_block_expr,
            TT.IF: self.parse_if,
            TT.FN: self.parse_fn,
        }
        self.infix_fns: Dict[TT, Callable[[Node], Node]] = {
            TT.LPAR: self.parse_call,
            TT.LSQB: self.parse_index,
        }
        for tt in PRECEDENCES:
            self.infix_fns.setdefault(tt, self.parse_infix)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if prev.type == TT.LBRACE or prev.type == TT.HASH_OPEN:
            self.depth += 1
        elif prev.type == TT.RBRACE:
            self.depth -= 1
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, 0, 0)
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"expected {_spelling(token_type)}, found {describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tuple[Tree, List[ParseError]]:
        """Parse entire program, collecting every error"""
        stmts: List[Node] = []
        start = self.current

        while not self.check(TT.EOF):
            try:
                stmts.append(self.parse_statement())
            except ParseError as e:
                self.errors.append(e)
                self.synchronize()
            except RecursionError:
                self.errors.append(ParseError("expression nested too deeply", self.current))
                self.synchronize()

        return make_tree('program', stmts, start), self.errors

    def synchronize(self) -> None:
        """
        Skip to the next top-level statement boundary.

        Stops after a ';' outside any braces, or after the '}' that closes
        every brace open at the error point (plus one optional ';').
        Always consumes at least one token unless at EOF.
        """
        while not self.check(TT.EOF):
            tok = self.advance()
            if self.depth > 0:
                continue
            if tok.type == TT.RBRACE:
                self.match(TT.SEMI)
                break
            if tok.type == TT.SEMI:
                break
        self.depth = 0

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Node:
        """
        Parse a single statement:
        - let NAME = expr;
        - return [expr];
        - { ... } block
        - expression statement
        """
        if self.check(TT.LET):
            return self.parse_let()
        if self.check(TT.RETURN):
            return self.parse_return()
        if self.check(TT.LBRACE):
            block = self.parse_block('block')
            self.match(TT.SEMI)
            return block

        return self.parse_expr_stmt()

    def parse_let(self) -> Tree:
        let_tok = self.advance()
        name = self.expect(TT.IDENT)
        self.expect(TT.ASSIGN)
        value = self.parse_expr()
        self.expect(TT.SEMI)
        return make_tree('let', [make_token(name), value], let_tok)

    def parse_return(self) -> Tree:
        ret_tok = self.advance()
        if self.check(TT.SEMI):
            self.advance()
            return make_tree('return', [], ret_tok)

        value = self.parse_expr()
        self.expect(TT.SEMI)
        return make_tree('return', [value], ret_tok)

    def parse_expr_stmt(self) -> Tree:
        at = self.current
        expr = self.parse_expr()

        if tree_label(expr) in SELF_TERMINATING:
            self.match(TT.SEMI)
        elif not self.check(TT.RBRACE, TT.EOF):
            self.expect(TT.SEMI)

        return make_tree('exprstmt', [expr], at)

    def parse_block(self, label: str) -> Tree:
        """
        Parse `{ stmt* }` into a `block` or `blockexpr` node.

        A failing statement is recorded and parsing resumes inside the same
        block. If skipping runs into end of input the error is re-raised so
        the enclosing level reports it once.
        """
        open_tok = self.expect(TT.LBRACE)
        inner_depth = self.depth
        stmts: List[Node] = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError(f"expected '}}', found {describe(self.current)}", self.current)
            try:
                stmts.append(self.parse_statement())
            except ParseError as e:
                self.synchronize_block(inner_depth)
                if self.check(TT.EOF):
                    raise
                self.errors.append(e)

        self.advance()  # }
        return make_tree(label, stmts, open_tok)

    def synchronize_block(self, depth: int) -> None:
        """Skip past the next ';' at `depth`, or up to the '}' that closes it."""
        while not self.check(TT.EOF):
            if self.check(TT.RBRACE) and self.depth == depth:
                return
            tok = self.advance()
            if tok.type == TT.SEMI and self.depth == depth:
                return

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self, precedence: Prec = Prec.LOWEST) -> Node:
        """Pratt loop: one prefix parse, then infix parses while they bind tighter"""
        prefix_fn = self.prefix_fns.get(self.current.type)
        if prefix_fn is None:
            raise ParseError(f"unexpected {describe(self.current)} in expression", self.current)

        left = prefix_fn()

        while not self.check(TT.SEMI) and precedence < PRECEDENCES.get(self.current.type, Prec.LOWEST):
            left = self.infix_fns[self.current.type](left)

        return left

    def parse_literal(self) -> Token:
        """Identifiers, strings, booleans and nil are leaf tokens"""
        return make_token(self.advance())

    def parse_int(self) -> Token:
        tok = self.advance()
        if int(tok.value) > INT64_MAX:
            raise ParseError(f"integer literal {tok.value} out of range", tok)
        return make_token(tok)

    def parse_prefix(self) -> Tree:
        op = self.advance()
        rhs = self.parse_expr(Prec.PREFIX)
        return make_tree('prefix', [make_token(op), rhs], op)

    def parse_infix(self, left: Node) -> Tree:
        op = self.advance()
        precedence = PRECEDENCES[op.type]
        if op.type in RIGHT_ASSOC:
            precedence = Prec(precedence - 1)
        right = self.parse_expr(precedence)
        return make_tree('infix', [left, make_token(op), right], op)

    def parse_group(self) -> Node:
        self.advance()  # (
        expr = self.parse_expr()
        self.expect(TT.RPAR)
        return expr

    def parse_array(self) -> Tree:
        open_tok = self.advance()
        items = self.parse_expr_list(TT.RSQB)
        return make_tree('array', items, open_tok)

    def parse_hash(self) -> Tree:
        """Parse `#{ key: value, ... }`"""
        open_tok = self.advance()
        pairs: List[Node] = []

        if not self.check(TT.RBRACE):
            pairs.append(self.parse_pair())
            while self.match(TT.COMMA):
                pairs.append(self.parse_pair())

        self.expect(TT.RBRACE)
        return make_tree('hash', pairs, open_tok)

    def parse_pair(self) -> Tree:
        at = self.current
        key = self.parse_expr()
        self.expect(TT.COLON)
        value = self.parse_expr()
        return make_tree('pair', [key, value], at)

    def parse_block_expr(self) -> Tree:
        return self.parse_block('blockexpr')

    def parse_if(self) -> Tree:
        """
        Parse `if cond { ... } [else { ... } | else if ...]`.

        Parentheses around the condition are ordinary grouping. `else if`
        becomes an else block holding a single if expression statement.
        """
        if_tok = self.advance()
        cond = self.parse_expr()
        consequence = self.parse_block('block')
        children: List[Node] = [cond, consequence]

        if self.match(TT.ELSE):
            if self.check(TT.IF):
                at = self.current
                nested = self.parse_if()
                stmt = make_tree('exprstmt', [nested], at)
                children.append(make_tree('block', [stmt], at))
            elif self.check(TT.LBRACE):
                children.append(self.parse_block('block'))
            else:
                raise ParseError(
                    f"expected '{{' or 'if', found {describe(self.current)}", self.current
                )

        return make_tree('if', children, if_tok)

    def parse_fn(self) -> Tree:
        fn_tok = self.advance()
        params_tok = self.expect(TT.LPAR)
        params: List[Node] = []

        if not self.check(TT.RPAR):
            params.append(make_token(self.expect(TT.IDENT)))
            while self.match(TT.COMMA):
                params.append(make_token(self.expect(TT.IDENT)))

        self.expect(TT.RPAR)
        body = self.parse_block('block')
        return make_tree('fn', [make_tree('params', params, params_tok), body], fn_tok)

    def parse_call(self, callee: Node) -> Tree:
        open_tok = self.advance()
        args = self.parse_expr_list(TT.RPAR)
        return make_tree('call', [callee, make_tree('args', args, open_tok)], open_tok)

    def parse_index(self, target: Node) -> Tree:
        open_tok = self.advance()
        index = self.parse_expr()
        self.expect(TT.RSQB)
        return make_tree('index', [target, index], open_tok)

    def parse_expr_list(self, closing: TT) -> List[Node]:
        """Comma separated expressions up to `closing`; no trailing comma"""
        items: List[Node] = []
        if self.match(closing):
            return items

        items.append(self.parse_expr())
        while self.match(TT.COMMA):
            items.append(self.parse_expr())

        self.expect(closing)
        return items


# ============================================================================
# Entry Points
# ============================================================================

def parse_source(source: str) -> Tuple[Tree, List[SourceError]]:
    """
    Parse Monkey source code to AST.

    Returns the `program` tree and every diagnostic found. A lexical error
    stops the pass and is reported as the only diagnostic of an empty
    program.
    """
    from .lexer_rd import LexError, tokenize

    try:
        tokens = tokenize(source)
    except LexError as e:
        return Tree('program', []), [e]

    parser = Parser(tokens)
    program, errors = parser.parse()
    return program, list(errors)


if __name__ == '__main__':
    import sys
    from .tree import render

    if len(sys.argv) > 1 and sys.argv[1] != '-':
        with open(sys.argv[1], 'r') as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    tree, errs = parse_source(source)
    for err in errs:
        print(f"Parse error: {err}", file=sys.stderr)
    for stmt in tree.children:
        print(render(stmt))
    sys.exit(1 if errs else 0)
