"""
Lexer for Monkey - Recursive Descent Parser

Tokenizes Monkey source code into a stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column of the first character)
- `//` line comments, `_` digit separators, escaped strings
"""

from typing import List

from .token_types import TT, Tok, SourceError

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Monkey lexer.

    Whitespace, newlines included, only separates tokens.
    """

    KEYWORDS = {
        'let': TT.LET,
        'return': TT.RETURN,
        'if': TT.IF,
        'else': TT.ELSE,
        'fn': TT.FN,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'nil': TT.NIL,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('#{', TT.HASH_OPEN),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('^', TT.CARET),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
    ]

    ESCAPES = {
        '"': '"',
        '\\': '\\',
        'n': '\n',
        't': '\t',
        'r': '\r',
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.skip_whitespace():
            return

        if self.peek() == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        self.mark()
        ch = self.peek()

        if ch == '"':
            self.scan_string()
            return

        if '0' <= ch <= '9':
            self.scan_number()
            return

        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal and decode its escapes"""
        self.advance()  # opening quote
        chars = []

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() != '\\':
                chars.append(self.advance())
                continue

            esc_line, esc_column = self.line, self.column
            self.advance()
            if self.pos >= len(self.source):
                break
            code = self.advance()
            if code not in self.ESCAPES:
                raise LexError(f"unknown escape sequence '\\{code}'", esc_line, esc_column)
            chars.append(self.ESCAPES[code])

        if self.pos >= len(self.source):
            raise LexError("unterminated string", self.tok_line, self.tok_column)

        self.advance()  # closing quote
        self.emit(TT.STRING, ''.join(chars))

    def scan_number(self):
        """Scan integer literal, `_` separators allowed after the first digit"""
        value = ''
        while '0' <= self.peek() <= '9' or self.peek() == '_':
            ch = self.advance()
            if ch != '_':
                value += ch

        # Keep as text; the parser owns the range check
        self.emit(TT.INT, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"illegal character {ch!r}", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace including newlines, return True if any skipped"""
        skipped = False
        while self.pos < len(self.source) and self.peek() in (' ', '\t', '\n', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def mark(self):
        self.tok_line = self.line
        self.tok_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token positioned at its first character"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column
        )
        self.tokens.append(tok)


class LexError(SourceError):
    """Lexical analysis error"""
    pass


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()
