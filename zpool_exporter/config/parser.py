"""
Recursive descent parser for the configuration syntax.

Grammar:
    document    := (block | directive)*
    block       := IDENTIFIER [STRING] '{' (block | directive)* '}'
    directive   := IDENTIFIER value* ';'
    value       := STRING | NUMBER | DURATION | BOOLEAN | IDENTIFIER
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .lexer import Lexer, Token, TokenType


class ParseError(Exception):
    """Exception raised for parser errors."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"Line {token.line}, column {token.column}: {message}")
        else:
            super().__init__(message)


@dataclass
class Directive:
    """
    A directive with a name and values.

    Examples:
        listen ":9254";   -> Directive(name="listen", values=[":9254"])
        interval 5s;      -> Directive(name="interval", values=[5])
    """

    name: str
    values: list[Any] = field(default_factory=list)
    line: int = 0

    @property
    def value(self) -> Any:
        """First value or None."""
        return self.values[0] if self.values else None


@dataclass
class Block:
    """A block with a type, optional name, directives and nested blocks."""

    type: str
    name: str | None = None
    directives: list[Directive] = field(default_factory=list)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0

    def get_value(self, name: str, default: Any = None) -> Any:
        """Value of the last directive with the given name."""
        for directive in reversed(self.directives):
            if directive.name == name:
                return directive.value
        return default

    def get_all_values(self, name: str) -> list[Any]:
        """
        Values of every directive with the given name.

        For repeatable directives:
            filter "tank*";
            filter "backup";
        Returns: ["tank*", "backup"]
        """
        return [d.value for d in self.directives if d.name == name and d.value is not None]


@dataclass
class ConfigDocument:
    """Root document holding top-level blocks and directives."""

    blocks: list[Block] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    filename: str = "<string>"

    def get_block(self, type_name: str) -> Block | None:
        """First block with the given type."""
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None


class ConfigParser:
    """Parser over a token stream from the Lexer."""

    VALUE_TOKENS = (
        TokenType.STRING,
        TokenType.NUMBER,
        TokenType.DURATION,
        TokenType.BOOLEAN,
        TokenType.IDENTIFIER,
    )

    def __init__(self, source: str, filename: str = "<string>"):
        self.lexer = Lexer(source, filename)
        self.filename = filename
        self.current = self.lexer.next_token()

    def _advance(self) -> Token:
        previous = self.current
        self.current = self.lexer.next_token()
        return previous

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self.current.type != token_type:
            raise ParseError(message, self.current)
        return self._advance()

    def parse(self) -> ConfigDocument:
        """Parse the whole document."""
        doc = ConfigDocument(filename=self.filename)

        while self.current.type != TokenType.EOF:
            item = self._parse_item()
            if isinstance(item, Block):
                doc.blocks.append(item)
            else:
                doc.directives.append(item)

        return doc

    def _parse_item(self) -> Block | Directive:
        name_token = self._expect(TokenType.IDENTIFIER, "Expected block or directive name")
        name = str(name_token.value)

        values: list[Any] = []
        while self.current.type in self.VALUE_TOKENS:
            values.append(self._advance().value)

        if self.current.type == TokenType.SEMICOLON:
            self._advance()
            return Directive(name=name, values=values, line=name_token.line)

        if self.current.type != TokenType.LBRACE:
            raise ParseError(f"Expected '{{' or ';' after '{name}'", self.current)

        if len(values) > 1:
            raise ParseError(f"Block '{name}' takes at most one name", name_token)

        self._advance()
        block = Block(
            type=name,
            name=str(values[0]) if values else None,
            line=name_token.line,
        )

        while self.current.type not in (TokenType.RBRACE, TokenType.EOF):
            item = self._parse_item()
            if isinstance(item, Block):
                block.blocks.append(item)
            else:
                block.directives.append(item)

        self._expect(TokenType.RBRACE, f"Expected '}}' to close '{name}' block")
        return block


def parse_config(source: str, filename: str = "<string>") -> ConfigDocument:
    """Parse a configuration string."""
    return ConfigParser(source, filename).parse()


def parse_config_file(path: str | Path) -> ConfigDocument:
    """Parse a configuration file."""
    path = Path(path)
    return parse_config(path.read_text(), str(path))
