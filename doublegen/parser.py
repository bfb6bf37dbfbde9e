"""doublegen Parser: recursive-descent parser for Rust trait declarations.

Parses a token stream into an InterfaceDeclaration. Only the parts of the
declaration the generators reason about are given structure:

  [attrs] [pub(..)] [unsafe] trait Name<G> [: Supertraits] [where ..] {
      [attrs] [const] [async] [unsafe] [extern "abi"] fn name<G>(params) [-> Type] [where ..] (; | { .. })
      [attrs] type Name<G> [: Bounds] [where ..];
      [attrs] const NAME: Type [= expr];
      [attrs] macro_name! { .. }
  }

Bounds, where clauses and generic defaults are kept as source text. Default
method bodies are kept verbatim.
"""

from __future__ import annotations

import re
from typing import Optional

from doublegen.lexer import Token, TokenType, RESERVED_WORDS, tokenize
from doublegen.ast_nodes import (
    InterfaceDeclaration, InterfaceItem, MethodSignature, AssociatedTypeDeclaration,
    OtherItem, GenericParam, ReceiverParameter, TypedParameter, Parameter,
    Pattern, WildcardPattern, IdentPattern, TuplePattern, RawPattern,
    TypeExpr, TupleType, ParenType, PathType, PathSegment, QualifiedPathType,
    ReferenceType, PointerType, SliceType, ArrayType, BareFnType, NeverType,
    InferType, ImplTraitType, DynTraitType, ParenthesizedArgs,
    GenericArg, LifetimeArg, BindingArg, ConstraintArg, ConstArg,
    TypeBound, TraitBound, LifetimeBound, PreciseCaptureBound, VerbatimBody,
)
from doublegen.errors import SourceLocation, syntax_error, name_error, CompileError


_OPENERS = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACKET: TokenType.RBRACKET,
    TokenType.LBRACE: TokenType.RBRACE,
}
_CLOSERS = {v: k for k, v in _OPENERS.items()}

_PATH_START = (
    TokenType.IDENT, TokenType.SELF_TYPE, TokenType.SELF_VALUE,
    TokenType.CRATE, TokenType.SUPER,
)

_BOUND_START = _PATH_START + (
    TokenType.LIFETIME, TokenType.QUESTION, TokenType.TILDE, TokenType.LPAREN,
    TokenType.FOR, TokenType.DOUBLE_COLON, TokenType.USE,
)

_IDENTIFIER_RE = re.compile(r"^(r#)?[A-Za-z_][A-Za-z0-9_]*$")


def _squash(text: str) -> str:
    return " ".join(text.split())


class Parser:
    """Recursive-descent parser for a single Rust trait declaration."""

    def __init__(self, tokens: list[Token], source: str, filename: str = "<stdin>"):
        self.tokens = tokens
        self.source = source
        self.pos = 0
        self.filename = filename

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF

    def _peek(self) -> TokenType:
        return self._current().type

    def _peek_at(self, offset: int) -> TokenType:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx].type
        return TokenType.EOF

    def _loc(self) -> SourceLocation:
        return self._current().location

    def _advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _expect(self, tt: TokenType) -> Token:
        tok = self._current()
        if tok.type != tt:
            raise CompileError(syntax_error(
                f"Expected {tt.name}, got {tok.type.name} ('{tok.value}')",
                tok.location,
            ))
        return self._advance()

    def _match(self, tt: TokenType) -> Optional[Token]:
        if self._peek() == tt:
            return self._advance()
        return None

    def _slice(self, first: Token, last: Token) -> str:
        return self.source[first.offset:last.end]

    # -------------------------------------------------------------------
    # Token groups
    # -------------------------------------------------------------------

    def _skip_group(self) -> tuple[Token, Token]:
        """Consume a balanced (..), [..] or {..} group."""
        first = self._current()
        if first.type not in _OPENERS:
            raise CompileError(syntax_error(
                f"Expected a delimited group, got '{first.value}'", first.location,
            ))
        stack: list[TokenType] = []
        while True:
            tok = self._current()
            if tok.type == TokenType.EOF:
                raise CompileError(syntax_error("Unclosed delimiter", first.location))
            if tok.type in _OPENERS:
                stack.append(tok.type)
            elif tok.type in _CLOSERS:
                if not stack or stack[-1] != _CLOSERS[tok.type]:
                    raise CompileError(syntax_error(
                        f"Mismatched closing delimiter '{tok.value}'", tok.location,
                    ))
                stack.pop()
            self._advance()
            if not stack:
                return first, tok

    def _capture_span(self, stops: set[TokenType], angles: bool = True) -> Optional[tuple[Token, Token]]:
        """Consume tokens up to a stop token outside any nesting.

        With angles=False the tokens are an expression, where `<` and `>` are
        operators and only brackets nest.
        """
        first = self._current()
        last: Optional[Token] = None
        stack: list[TokenType] = []
        while True:
            tok = self._current()
            if tok.type == TokenType.EOF:
                raise CompileError(syntax_error("Unexpected end of input", tok.location))
            if not stack and tok.type in stops:
                break
            if tok.type in _OPENERS:
                stack.append(tok.type)
            elif angles and tok.type == TokenType.LT and (not stack or stack[-1] == TokenType.LT):
                stack.append(TokenType.LT)
            elif tok.type == TokenType.GT and stack and stack[-1] == TokenType.LT:
                stack.pop()
            elif tok.type in _CLOSERS:
                while stack and stack[-1] == TokenType.LT:
                    stack.pop()
                if not stack or stack[-1] != _CLOSERS[tok.type]:
                    raise CompileError(syntax_error(
                        f"Mismatched closing delimiter '{tok.value}'", tok.location,
                    ))
                stack.pop()
            last = self._advance()
        if last is None:
            return None
        return first, last

    def _capture(self, stops: set[TokenType], angles: bool = True) -> str:
        span = self._capture_span(stops, angles)
        if span is None:
            return ""
        return _squash(self._slice(*span))

    # -------------------------------------------------------------------
    # Top-level
    # -------------------------------------------------------------------

    def parse(self) -> InterfaceDeclaration:
        first = self._current()
        loc = self._loc()
        attrs = self._parse_outer_attrs()
        visibility = self._parse_visibility()
        unsafe = self._match(TokenType.UNSAFE) is not None
        self._expect(TokenType.TRAIT)
        name = self._expect(TokenType.IDENT).value
        generics = self._parse_generic_params()

        supertraits = ""
        if self._match(TokenType.COLON):
            supertraits = self._capture({TokenType.WHERE, TokenType.LBRACE})
        where_clause = self._parse_where_clause({TokenType.LBRACE})

        self._expect(TokenType.LBRACE)
        items: list[InterfaceItem] = []
        while self._peek() != TokenType.RBRACE:
            if self._peek() == TokenType.EOF:
                raise CompileError(syntax_error(f"Unclosed trait '{name}'", loc))
            items.append(self._parse_trait_item())
        last = self._expect(TokenType.RBRACE)

        if self._peek() != TokenType.EOF:
            raise CompileError(syntax_error(
                f"Expected a single trait declaration, found trailing '{self._current().value}'",
                self._loc(),
            ))

        return InterfaceDeclaration(
            name=name, visibility=visibility, generics=generics, items=items,
            attrs=attrs, unsafe=unsafe, supertraits=supertraits,
            where_clause=where_clause, source=self._slice(first, last), location=loc,
        )

    def _parse_outer_attrs(self) -> list[str]:
        attrs: list[str] = []
        while self._peek() in (TokenType.DOC_COMMENT, TokenType.POUND):
            if self._peek() == TokenType.DOC_COMMENT:
                attrs.append(self._advance().value)
                continue
            pound = self._advance()
            if self._peek() == TokenType.BANG:
                raise CompileError(syntax_error(
                    "Inner attributes are not allowed here", pound.location,
                ))
            if self._peek() != TokenType.LBRACKET:
                raise CompileError(syntax_error("Expected '[' after '#'", self._loc()))
            _, last = self._skip_group()
            attrs.append(self._slice(pound, last))
        return attrs

    def _parse_visibility(self) -> str:
        if self._peek() != TokenType.PUB:
            return ""
        first = self._advance()
        if self._peek() == TokenType.LPAREN and self._peek_at(1) in (
            TokenType.CRATE, TokenType.SELF_VALUE, TokenType.SUPER, TokenType.IN,
        ):
            _, last = self._skip_group()
            return _squash(self._slice(first, last))
        return "pub"

    def _parse_where_clause(self, stops: set[TokenType]) -> str:
        if not self._match(TokenType.WHERE):
            return ""
        return self._capture(stops).rstrip(",").strip()

    # -------------------------------------------------------------------
    # Generic parameters: <'a: 'b, T: Clone = u8, const N: usize>
    # -------------------------------------------------------------------

    def _parse_generic_params(self) -> list[GenericParam]:
        params: list[GenericParam] = []
        if not self._match(TokenType.LT):
            return params
        stops = {TokenType.COMMA, TokenType.GT, TokenType.EQ}
        while self._peek() != TokenType.GT:
            self._parse_outer_attrs()
            loc = self._loc()
            if self._peek() == TokenType.LIFETIME:
                name = self._advance().value
                bounds = self._capture(stops) if self._match(TokenType.COLON) else ""
                params.append(GenericParam("lifetime", name, bounds=bounds, location=loc))
            elif self._match(TokenType.CONST):
                name = self._expect(TokenType.IDENT).value
                self._expect(TokenType.COLON)
                const_type = self._capture(stops)
                default = self._capture({TokenType.COMMA, TokenType.GT}) if self._match(TokenType.EQ) else ""
                params.append(GenericParam("const", name, const_type=const_type,
                                           default=default, location=loc))
            else:
                name = self._expect(TokenType.IDENT).value
                bounds = self._capture(stops) if self._match(TokenType.COLON) else ""
                default = self._capture({TokenType.COMMA, TokenType.GT}) if self._match(TokenType.EQ) else ""
                params.append(GenericParam("type", name, bounds=bounds,
                                           default=default, location=loc))
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.GT)
        return params

    # -------------------------------------------------------------------
    # Trait items
    # -------------------------------------------------------------------

    def _parse_trait_item(self) -> InterfaceItem:
        loc = self._loc()
        attrs = self._parse_outer_attrs()
        tt = self._peek()
        fn_start = (TokenType.FN, TokenType.ASYNC, TokenType.UNSAFE, TokenType.EXTERN)

        if tt == TokenType.TYPE:
            return self._parse_associated_type(attrs, loc)
        if tt in fn_start or (tt == TokenType.CONST and self._peek_at(1) in fn_start):
            return self._parse_method(attrs, loc)
        if tt == TokenType.CONST:
            first = self._current()
            self._capture_span({TokenType.SEMICOLON}, angles=False)
            last = self._expect(TokenType.SEMICOLON)
            return OtherItem(attrs=attrs, location=loc, source=self._slice(first, last))
        if tt == TokenType.IDENT and self._peek_at(1) == TokenType.BANG:
            first = self._advance()
            self._advance()
            _, last = self._skip_group()
            if self._peek() == TokenType.SEMICOLON:
                last = self._advance()
            return OtherItem(attrs=attrs, location=loc, source=self._slice(first, last))

        raise CompileError(syntax_error(
            f"Expected trait item (fn, type, const, macro), got '{self._current().value}'",
            loc,
        ))

    def _parse_associated_type(self, attrs: list[str], loc: SourceLocation) -> AssociatedTypeDeclaration:
        self._expect(TokenType.TYPE)
        name = self._expect(TokenType.IDENT).value
        generics = self._parse_generic_params()
        bounds = ""
        if self._match(TokenType.COLON):
            bounds = self._capture({TokenType.WHERE, TokenType.SEMICOLON, TokenType.EQ})
        if self._peek() == TokenType.EQ:
            raise CompileError(syntax_error(
                f"Associated type '{name}' declares a default, which is not supported",
                self._loc(),
            ))
        where_clause = self._parse_where_clause({TokenType.SEMICOLON})
        self._expect(TokenType.SEMICOLON)
        return AssociatedTypeDeclaration(
            attrs=attrs, location=loc, name=name, generics=generics,
            bounds=bounds, where_clause=where_clause,
        )

    def _parse_method(self, attrs: list[str], loc: SourceLocation) -> MethodSignature:
        is_const = self._match(TokenType.CONST) is not None
        is_async = self._match(TokenType.ASYNC) is not None
        is_unsafe = self._match(TokenType.UNSAFE) is not None
        abi: Optional[str] = None
        if self._match(TokenType.EXTERN):
            abi = self._advance().value if self._peek() == TokenType.STRING_LIT else ""
        self._expect(TokenType.FN)
        name = self._expect(TokenType.IDENT).value
        generics = self._parse_generic_params()

        self._expect(TokenType.LPAREN)
        params = self._parse_params()
        self._expect(TokenType.RPAREN)

        return_type: Optional[TypeExpr] = None
        if self._match(TokenType.ARROW):
            return_type = self._parse_type()
        where_clause = self._parse_where_clause({TokenType.LBRACE, TokenType.SEMICOLON})

        default = None
        if not self._match(TokenType.SEMICOLON):
            if self._peek() != TokenType.LBRACE:
                raise CompileError(syntax_error(
                    f"Expected ';' or a body after method '{name}', got '{self._current().value}'",
                    self._loc(),
                ))
            first, last = self._skip_group()
            default = VerbatimBody(source=self._slice(first, last))

        return MethodSignature(
            attrs=attrs, location=loc, name=name, is_async=is_async,
            is_const=is_const, is_unsafe=is_unsafe, abi=abi, generics=generics,
            params=params, return_type=return_type, where_clause=where_clause,
            default=default,
        )

    # -------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------

    def _parse_params(self) -> list[Parameter]:
        params: list[Parameter] = []
        while self._peek() != TokenType.RPAREN:
            attrs = self._parse_outer_attrs()
            if self._is_receiver():
                params.append(self._parse_receiver())
            else:
                loc = self._loc()
                pattern = self._parse_pattern()
                self._expect(TokenType.COLON)
                params.append(TypedParameter(pattern=pattern, type=self._parse_type(),
                                             attrs=attrs, location=loc))
            if not self._match(TokenType.COMMA):
                break
        return params

    def _is_receiver(self) -> bool:
        i = 0
        if self._peek_at(i) == TokenType.AMP:
            i += 1
            if self._peek_at(i) == TokenType.LIFETIME:
                i += 1
        if self._peek_at(i) == TokenType.MUT:
            i += 1
        return self._peek_at(i) == TokenType.SELF_VALUE and self._peek_at(i + 1) != TokenType.DOUBLE_COLON

    def _parse_receiver(self) -> ReceiverParameter:
        loc = self._loc()
        by_ref = self._match(TokenType.AMP) is not None
        lifetime_tok = self._match(TokenType.LIFETIME) if by_ref else None
        mutable = self._match(TokenType.MUT) is not None
        self._expect(TokenType.SELF_VALUE)
        ty = None
        if not by_ref and self._match(TokenType.COLON):
            ty = self._parse_type()
        return ReceiverParameter(
            by_ref=by_ref, lifetime=lifetime_tok.value if lifetime_tok else None,
            mutable=mutable, type=ty, location=loc,
        )

    def _parse_pattern(self) -> Pattern:
        loc = self._loc()
        start = self.pos
        if self._match(TokenType.UNDERSCORE):
            return WildcardPattern(location=loc)
        if self._peek() == TokenType.LPAREN:
            self._advance()
            elements: list[Pattern] = []
            trailing_comma = False
            while self._peek() != TokenType.RPAREN:
                elements.append(self._parse_pattern())
                trailing_comma = self._match(TokenType.COMMA) is not None
                if not trailing_comma:
                    break
            self._expect(TokenType.RPAREN)
            if len(elements) == 1 and not trailing_comma:
                return elements[0]
            return TuplePattern(elements=elements, location=loc)

        by_ref = self._match(TokenType.REF) is not None
        mutable = self._match(TokenType.MUT) is not None
        if self._peek() == TokenType.IDENT and self._peek_at(1) in (
            TokenType.COLON, TokenType.COMMA, TokenType.RPAREN,
        ):
            return IdentPattern(name=self._advance().value, by_ref=by_ref,
                                mutable=mutable, location=loc)

        self.pos = start
        return RawPattern(
            text=self._capture({TokenType.COLON, TokenType.COMMA, TokenType.RPAREN}),
            location=loc,
        )

    # -------------------------------------------------------------------
    # Types
    # -------------------------------------------------------------------

    def _parse_type(self) -> TypeExpr:
        loc = self._loc()
        tt = self._peek()

        if tt == TokenType.LPAREN:
            self._advance()
            if self._match(TokenType.RPAREN):
                return TupleType(elements=[], location=loc)
            first = self._parse_type()
            if self._match(TokenType.COMMA):
                elements = [first]
                while self._peek() != TokenType.RPAREN:
                    elements.append(self._parse_type())
                    if not self._match(TokenType.COMMA):
                        break
                self._expect(TokenType.RPAREN)
                return TupleType(elements=elements, location=loc)
            self._expect(TokenType.RPAREN)
            return ParenType(inner=first, location=loc)

        if tt == TokenType.AMP:
            self._advance()
            lifetime = self._match(TokenType.LIFETIME)
            mutable = self._match(TokenType.MUT) is not None
            return ReferenceType(lifetime=lifetime.value if lifetime else None,
                                 mutable=mutable, inner=self._parse_type(), location=loc)

        if tt == TokenType.STAR:
            self._advance()
            if self._match(TokenType.MUT):
                mutable = True
            else:
                self._expect(TokenType.CONST)
                mutable = False
            return PointerType(mutable=mutable, inner=self._parse_type(), location=loc)

        if tt == TokenType.LBRACKET:
            self._advance()
            inner = self._parse_type()
            if self._match(TokenType.SEMICOLON):
                length = self._capture({TokenType.RBRACKET}, angles=False)
                self._expect(TokenType.RBRACKET)
                return ArrayType(inner=inner, length=length, location=loc)
            self._expect(TokenType.RBRACKET)
            return SliceType(inner=inner, location=loc)

        if tt == TokenType.IMPL:
            self._advance()
            return ImplTraitType(bounds=self._parse_bounds(), location=loc)

        if tt == TokenType.DYN:
            self._advance()
            return DynTraitType(bounds=self._parse_bounds(), location=loc)

        if tt == TokenType.BANG:
            self._advance()
            return NeverType(location=loc)

        if tt == TokenType.UNDERSCORE:
            self._advance()
            return InferType(location=loc)

        if tt in (TokenType.FN, TokenType.UNSAFE, TokenType.EXTERN) or (
            tt == TokenType.FOR and self._peek_at(1) == TokenType.LT
        ):
            return self._parse_bare_fn()

        if tt == TokenType.LT:
            return self._parse_qualified_path()

        if tt in _PATH_START or tt == TokenType.DOUBLE_COLON:
            return self._parse_path()

        raise CompileError(syntax_error(
            f"Expected type, got '{self._current().value}'", loc,
        ))

    def _parse_bare_fn(self) -> BareFnType:
        loc = self._loc()
        prefix: list[str] = []
        if self._match(TokenType.FOR):
            prefix.append(f"for<{', '.join(self._parse_lifetime_list())}>")
        if self._match(TokenType.UNSAFE):
            prefix.append("unsafe")
        if self._match(TokenType.EXTERN):
            prefix.append("extern")
            if self._peek() == TokenType.STRING_LIT:
                prefix.append(self._advance().value)
        self._expect(TokenType.FN)
        self._expect(TokenType.LPAREN)
        inputs: list[TypeExpr] = []
        while self._peek() != TokenType.RPAREN:
            if self._peek() in (TokenType.IDENT, TokenType.UNDERSCORE) and self._peek_at(1) == TokenType.COLON:
                self._advance()
                self._advance()
            inputs.append(self._parse_type())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN)
        output = self._parse_type() if self._match(TokenType.ARROW) else None
        return BareFnType(prefix=" ".join(prefix), inputs=inputs, output=output, location=loc)

    def _parse_lifetime_list(self) -> list[str]:
        self._expect(TokenType.LT)
        names: list[str] = []
        while self._peek() != TokenType.GT:
            names.append(self._expect(TokenType.LIFETIME).value)
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.GT)
        return names

    def _parse_qualified_path(self) -> QualifiedPathType:
        loc = self._loc()
        self._expect(TokenType.LT)
        self_type = self._parse_type()
        trait_path = self._parse_path() if self._match(TokenType.AS) else None
        self._expect(TokenType.GT)
        segments: list[PathSegment] = []
        self._expect(TokenType.DOUBLE_COLON)
        segments.append(self._parse_path_segment())
        while self._peek() == TokenType.DOUBLE_COLON and self._peek_at(1) in _PATH_START:
            self._advance()
            segments.append(self._parse_path_segment())
        return QualifiedPathType(self_type=self_type, trait_path=trait_path,
                                 segments=segments, location=loc)

    def _parse_path(self) -> PathType:
        loc = self._loc()
        leading_colon = self._match(TokenType.DOUBLE_COLON) is not None
        segments = [self._parse_path_segment()]
        while self._peek() == TokenType.DOUBLE_COLON and self._peek_at(1) in _PATH_START:
            self._advance()
            segments.append(self._parse_path_segment())
        return PathType(segments=segments, leading_colon=leading_colon, location=loc)

    def _parse_path_segment(self) -> PathSegment:
        tok = self._current()
        if tok.type not in _PATH_START:
            raise CompileError(syntax_error(
                f"Expected path segment, got '{tok.value}'", tok.location,
            ))
        self._advance()
        segment = PathSegment(name=tok.value)
        if self._peek() == TokenType.DOUBLE_COLON and self._peek_at(1) == TokenType.LT:
            self._advance()
        if self._peek() == TokenType.LT:
            segment.generic_args = self._parse_generic_args()
        elif self._peek() == TokenType.LPAREN:
            segment.parenthesized = self._parse_parenthesized_args()
        return segment

    def _parse_parenthesized_args(self) -> ParenthesizedArgs:
        self._expect(TokenType.LPAREN)
        inputs: list[TypeExpr] = []
        while self._peek() != TokenType.RPAREN:
            inputs.append(self._parse_type())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN)
        output = self._parse_type() if self._match(TokenType.ARROW) else None
        return ParenthesizedArgs(inputs=inputs, output=output)

    def _angle_close(self, offset: int) -> int:
        """Offset of the '>' closing the '<' at the given offset, or -1."""
        depth = 0
        i = offset
        while True:
            tt = self._peek_at(i)
            if tt == TokenType.EOF:
                return -1
            if tt == TokenType.LT:
                depth += 1
            elif tt == TokenType.GT:
                depth -= 1
                if depth == 0:
                    return i
            i += 1

    def _parse_generic_args(self) -> list[GenericArg]:
        self._expect(TokenType.LT)
        args: list[GenericArg] = []
        while self._peek() != TokenType.GT:
            tt = self._peek()
            if tt == TokenType.LIFETIME:
                args.append(LifetimeArg(name=self._advance().value))
            elif tt == TokenType.IDENT and self._peek_at(1) == TokenType.EQ:
                name = self._advance().value
                self._advance()
                args.append(BindingArg(name=name, type=self._parse_type()))
            elif tt == TokenType.IDENT and self._peek_at(1) == TokenType.LT and \
                    self._angle_close(1) > 0 and self._peek_at(self._angle_close(1) + 1) == TokenType.EQ:
                name = self._advance().value
                generic_args = self._parse_generic_args()
                self._expect(TokenType.EQ)
                args.append(BindingArg(name=name, generic_args=generic_args, type=self._parse_type()))
            elif tt == TokenType.IDENT and self._peek_at(1) == TokenType.COLON:
                name = self._advance().value
                self._advance()
                args.append(ConstraintArg(name=name, bounds=self._parse_bounds()))
            elif tt == TokenType.LBRACE:
                first, last = self._skip_group()
                args.append(ConstArg(text=_squash(self._slice(first, last))))
            elif tt in (TokenType.INT_LIT, TokenType.FLOAT_LIT, TokenType.STRING_LIT,
                        TokenType.CHAR_LIT, TokenType.MINUS):
                first = self._advance()
                last = first
                if first.type == TokenType.MINUS:
                    last = self._advance()
                args.append(ConstArg(text=self._slice(first, last)))
            else:
                args.append(self._parse_type())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.GT)
        return args

    # -------------------------------------------------------------------
    # Bounds: Future<Output = T> + Send + 'a
    # -------------------------------------------------------------------

    def _parse_bounds(self) -> list[TypeBound]:
        bounds = [self._parse_bound()]
        while self._peek() == TokenType.PLUS and self._peek_at(1) in _BOUND_START:
            self._advance()
            bounds.append(self._parse_bound())
        return bounds

    def _parse_bound(self) -> TypeBound:
        loc = self._loc()
        if self._peek() == TokenType.LIFETIME:
            return LifetimeBound(name=self._advance().value, location=loc)
        if self._peek() == TokenType.USE and self._peek_at(1) == TokenType.LT:
            self._advance()
            self._advance()
            args: list[str] = []
            while self._peek() != TokenType.GT:
                args.append(self._advance().value)
                if not self._match(TokenType.COMMA):
                    break
            self._expect(TokenType.GT)
            return PreciseCaptureBound(args=args, location=loc)
        if self._match(TokenType.LPAREN):
            bound = self._parse_bound()
            self._expect(TokenType.RPAREN)
            if isinstance(bound, TraitBound):
                bound.parenthesized = True
            return bound

        for_lifetimes: list[str] = []
        if self._match(TokenType.FOR):
            for_lifetimes = self._parse_lifetime_list()
        modifier = ""
        if self._match(TokenType.QUESTION):
            modifier = "?"
        elif self._match(TokenType.TILDE):
            self._expect(TokenType.CONST)
            modifier = "~const "
        return TraitBound(path=self._parse_path(), modifier=modifier,
                          for_lifetimes=for_lifetimes, location=loc)


def parse_trait(source: str, filename: str = "<stdin>") -> InterfaceDeclaration:
    """Parse Rust source holding exactly one trait declaration."""
    tokens = tokenize(source, filename)
    parser = Parser(tokens, source, filename)
    return parser.parse()


def parse_identifier(name: str, location: Optional[SourceLocation] = None) -> str:
    """Validate the name requested for a generated trait."""
    candidate = name.strip()
    if not _IDENTIFIER_RE.match(candidate) or candidate == "_":
        raise CompileError(name_error(name, "not a Rust identifier", location))
    if candidate in RESERVED_WORDS:
        raise CompileError(name_error(name, "reserved word", location))
    return candidate
