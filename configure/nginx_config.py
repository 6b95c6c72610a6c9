# configure/nginx_config.py
# -*- coding: utf-8 -*-
"""
Minimal structured model of an nginx configuration file.

The parser understands directives, blocks, comments and blank lines. A
comment that contains exactly one simple directive (for example
``##    auth_basic "Restricted";``) is kept as a *disabled* directive, so
that it can be switched on without text substitution. A comment that
follows a directive on the same line (``listen 80; # http``) stays on that
line.

Serialisation is deterministic: four spaces per nesting level, one
directive per line, at most one blank line in a row. Parsing the output
again yields the same output.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Union

INDENT = "    "

_WORD = "word"
_COMMENT = "comment"
_TRAILING_COMMENT = "trailing_comment"
_BLANK = "blank"

_DIRECTIVE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class NginxConfigError(ValueError):
    """The configuration text could not be parsed."""


@dataclass
class Comment:
    # Everything after the leading '#', trailing whitespace removed.
    text: str


@dataclass
class BlankLine:
    pass


@dataclass
class Directive:
    name: str
    args: List[str] = field(default_factory=list)
    # None for simple directives terminated by ';'.
    block: Optional[List["Node"]] = None
    enabled: bool = True
    # Text after a '#' on the directive's own line.
    comment: Optional[str] = None

    @property
    def is_block(self) -> bool:
        return self.block is not None


Node = Union[Directive, Comment, BlankLine]


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    i = 0
    n = len(text)
    line_has_content = False
    while i < n:
        ch = text[i]
        if ch == "\n":
            if not line_has_content:
                tokens.append((_BLANK, ""))
            line_has_content = False
            i += 1
            continue
        if ch.isspace():
            i += 1
            continue
        if ch == "#":
            end = text.find("\n", i)
            if end == -1:
                end = n
            kind = _TRAILING_COMMENT if line_has_content else _COMMENT
            tokens.append((kind, text[i + 1 : end].rstrip()))
            line_has_content = True
            i = end
            continue
        line_has_content = True
        if ch in "{};":
            tokens.append((ch, ch))
            i += 1
            continue
        if ch in "\"'":
            j = i + 1
            while j < n and text[j] != ch:
                if text[j] == "\\":
                    j += 1
                j += 1
            if j >= n:
                raise NginxConfigError("unterminated quoted string")
            tokens.append((_WORD, text[i : j + 1]))
            i = j + 1
            continue
        j = i
        while j < n and not text[j].isspace() and text[j] not in "{};":
            if text[j] == "$" and j + 1 < n and text[j + 1] == "{":
                close = text.find("}", j)
                if close == -1:
                    raise NginxConfigError("unterminated variable")
                j = close + 1
                continue
            j += 1
        tokens.append((_WORD, text[i:j]))
        i = j
    return tokens


class _Parser:
    def __init__(self, tokens: List[Tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0

    def parse(self, depth: int = 0) -> List[Node]:
        nodes: List[Node] = []
        words: List[str] = []
        while self.pos < len(self.tokens):
            kind, value = self.tokens[self.pos]
            self.pos += 1
            if kind == _WORD:
                words.append(value)
            elif kind == ";":
                if not words:
                    raise NginxConfigError("unexpected ';'")
                nodes.append(
                    Directive(words[0], words[1:], comment=self._trailing_comment())
                )
                words = []
            elif kind == "{":
                if not words:
                    raise NginxConfigError("unexpected '{'")
                comment = self._trailing_comment()
                children = self.parse(depth + 1)
                nodes.append(
                    Directive(words[0], words[1:], block=children, comment=comment)
                )
                words = []
            elif kind == "}":
                if depth == 0:
                    raise NginxConfigError("unexpected '}'")
                if words:
                    raise NginxConfigError(
                        f"directive '{words[0]}' is not terminated by ';'"
                    )
                return nodes
            elif kind in (_COMMENT, _TRAILING_COMMENT):
                nodes.append(_comment_node(value))
            elif kind == _BLANK and not words:
                nodes.append(BlankLine())
        if depth > 0:
            raise NginxConfigError("unexpected end of file, expecting '}'")
        if words:
            raise NginxConfigError("unexpected end of file, expecting ';'")
        return nodes

    def _trailing_comment(self) -> Optional[str]:
        if self.pos >= len(self.tokens):
            return None
        kind, value = self.tokens[self.pos]
        if kind != _TRAILING_COMMENT:
            return None
        self.pos += 1
        return value


def _comment_node(text: str) -> Node:
    """Return a disabled Directive for commented-out directives, else a Comment."""
    body = text.lstrip("#").strip()
    if not body:
        return Comment(text)
    first_word = body.split(None, 1)[0]
    if not _DIRECTIVE_NAME_RE.match(first_word):
        return Comment(text)
    try:
        nodes = [
            node
            for node in _Parser(_tokenize(body)).parse()
            if not isinstance(node, BlankLine)
        ]
    except NginxConfigError:
        return Comment(text)
    if len(nodes) != 1 or not isinstance(nodes[0], Directive):
        return Comment(text)
    directive = nodes[0]
    if directive.is_block:
        return Comment(text)
    directive.enabled = False
    return directive


def _listen_port(address: str) -> str:
    if address.startswith("unix:"):
        return ""
    return address.rsplit(":", 1)[-1] if ":" in address else address


def is_tls_listener(directive: Directive) -> bool:
    """True for an enabled listen directive on port 443 or with 'ssl'."""
    if directive.name != "listen" or not directive.enabled or not directive.args:
        return False
    return "ssl" in directive.args[1:] or _listen_port(directive.args[0]) == "443"


class NginxConfig:
    """A parsed nginx configuration file."""

    def __init__(self, nodes: List[Node]):
        self.nodes = nodes

    @classmethod
    def loads(cls, text: str) -> "NginxConfig":
        return cls(_Parser(_tokenize(text)).parse())

    def dumps(self) -> str:
        lines: List[str] = []
        _emit(self.nodes, 0, lines)
        while lines and lines[0] == "":
            lines.pop(0)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""

    def iter_directives(
        self, name: Optional[str] = None, include_disabled: bool = True
    ) -> Iterator[Directive]:
        """Depth-first iteration over directives, optionally filtered by name."""
        for directive in _walk(self.nodes):
            if name is not None and directive.name != name:
                continue
            if not include_disabled and not directive.enabled:
                continue
            yield directive

    def server_blocks(self) -> List[Directive]:
        return [
            d
            for d in self.iter_directives("server", include_disabled=False)
            if d.is_block
        ]

    def has_tls_listener(self) -> bool:
        return any(is_tls_listener(d) for d in self.iter_directives("listen"))

    def add_tls_listener(self, certificate: str, certificate_key: str) -> int:
        """
        Add a TLS listener after the first plaintext listen directive of every
        server block that has no TLS listener yet.

        Returns:
            int: Number of server blocks that were changed.
        """
        changed = 0
        for server in self.server_blocks():
            children = server.block or []
            listeners = [
                node
                for node in children
                if isinstance(node, Directive)
                and node.name == "listen"
                and node.enabled
            ]
            if any(is_tls_listener(d) for d in listeners) or not listeners:
                continue
            index = children.index(listeners[0]) + 1
            children[index:index] = [
                Directive("listen", ["443", "ssl"]),
                Directive("ssl_certificate", [certificate]),
                Directive("ssl_certificate_key", [certificate_key]),
            ]
            changed += 1
        return changed

    def set_enabled(self, names: Iterable[str], enabled: bool = True) -> int:
        """
        Switch the named simple directives on or off.

        Returns:
            int: Number of directives whose state changed.
        """
        wanted = set(names)
        changed = 0
        for directive in self.iter_directives():
            if (
                directive.name in wanted
                and not directive.is_block
                and directive.enabled != enabled
            ):
                directive.enabled = enabled
                changed += 1
        return changed

    def count_enabled(self, name: str) -> int:
        return sum(1 for _ in self.iter_directives(name, include_disabled=False))


def _walk(nodes: List[Node]) -> Iterator[Directive]:
    for node in nodes:
        if isinstance(node, Directive):
            yield node
            if node.block is not None:
                yield from _walk(node.block)


def _suffix(directive: Directive) -> str:
    return f" #{directive.comment}" if directive.comment is not None else ""


def _emit(nodes: List[Node], depth: int, lines: List[str]) -> None:
    pad = INDENT * depth
    for node in nodes:
        if isinstance(node, BlankLine):
            if lines and lines[-1] != "" and not lines[-1].endswith("{"):
                lines.append("")
        elif isinstance(node, Comment):
            lines.append(f"{pad}#{node.text}")
        elif node.block is None:
            head = " ".join([node.name, *node.args])
            prefix = "" if node.enabled else "# "
            lines.append(f"{pad}{prefix}{head};{_suffix(node)}")
        else:
            head = " ".join([node.name, *node.args])
            lines.append(f"{pad}{head} {{{_suffix(node)}")
            _emit(node.block, depth + 1, lines)
            while lines and lines[-1] == "":
                lines.pop()
            lines.append(f"{pad}}}")
