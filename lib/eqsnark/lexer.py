from samson.core.base_object import BaseObject
from eqsnark.exceptions import ParseException
from eqsnark.expression import NumExpr, VarExpr, Equation, OPERATORS, INVERSE
from collections import namedtuple
from enum import Enum, auto
import logging
import re

log = logging.getLogger(__name__)

Token = namedtuple('Token', ['kind', 'text', 'pos'])

NAME_RE  = r'[a-zA-Z]+[0-9]*'
NUM_RE   = r'[0-9]+'
TOKEN_RE = re.compile(rf'\s*(?:(?P<name>{NAME_RE})|(?P<num>{NUM_RE})|(?P<eq>==)|(?P<op>[-+*/])|(?P<lparen>\()|(?P<rparen>\)))')
SPACE_RE = re.compile(r'\s*$')

ADD_OPS = ('+', '-')
MUL_OPS = ('*', '/')


class LexerState(Enum):
    ROOT     = auto()
    IN_GROUP = auto()
    IN_RHS   = auto()


class LexerFSM(BaseObject):
    ALLOWED_TRANSITIONS = {
        (LexerState.ROOT, LexerState.IN_GROUP),
        (LexerState.IN_GROUP, LexerState.IN_GROUP),
        (LexerState.ROOT, LexerState.IN_RHS),
    }

    def __init__(self):
        self.stack = [LexerState.ROOT]


    @property
    def state(self):
        return self.stack[-1]


    def push(self, next_state: LexerState, pos: int):
        if (self.state, next_state) not in self.ALLOWED_TRANSITIONS:
            raise ParseException(f"Unexpected {next_state.name} at position {pos}")

        self.stack.append(next_state)


    def pop(self, expected: LexerState, pos: int):
        if self.state != expected:
            raise ParseException(f"Unbalanced ')' at position {pos}")

        self.stack = self.stack[:-1]



class Lexer(BaseObject):
    """
    Parses `<expr> == <number>` into an Equation.

    Operator chains are grouped to the right; every operator node is given
    a signal id, inner chain first and the chain's head last.
    """

    def __init__(self, Fr: 'Ring'):
        self.Fr     = Fr
        self.fsm    = LexerFSM()
        self.ctr    = 0
        self.tokens = []
        self.idx    = 0


    def __reprdir__(self):
        return ['Fr', 'ctr']


    def tokenize(self, source: str):
        tokens = []
        pos    = 0

        while not SPACE_RE.match(source, pos):
            match = TOKEN_RE.match(source, pos)
            if not match:
                bad = source[pos:].lstrip()[:1]
                raise ParseException(f"Unexpected character '{bad}' at position {len(source) - len(source[pos:].lstrip())}")

            kind  = match.lastgroup
            start = match.start(kind)
            tokens.append(Token(kind, match.group(kind), start))
            pos   = match.end()

        return tokens


    def peek(self):
        if self.idx < len(self.tokens):
            return self.tokens[self.idx]


    def next(self):
        token = self.peek()
        if token is None:
            raise ParseException("Unexpected end of input")

        self.idx += 1
        return token


    def expect(self, kind: str):
        token = self.next()
        if token.kind != kind:
            raise ParseException(f"Expected {kind} but found '{token.text}' at position {token.pos}")

        return token


    def next_signal(self):
        self.ctr += 1
        return self.ctr


    def process_number(self, negative: bool=False):
        token = self.expect('num')
        value = self.Fr(int(token.text))
        return -value if negative else value


    def process_operand(self):
        token = self.peek()
        if token is None:
            raise ParseException("Unexpected end of input")

        if token.kind == 'name':
            self.next()
            return VarExpr(token.text)

        elif token.kind == 'num':
            return NumExpr(self.process_number())

        elif token.kind == 'op' and token.text == '-':
            self.next()
            return NumExpr(self.process_number(negative=True))

        elif token.kind == 'lparen':
            self.next()
            self.fsm.push(LexerState.IN_GROUP, token.pos)
            node  = self.process_expr()
            close = self.expect('rparen')
            self.fsm.pop(LexerState.IN_GROUP, close.pos)
            return node

        raise ParseException(f"Unexpected '{token.text}' at position {token.pos}")


    def process_chain(self, operand, ops):
        lhs  = operand()
        rest = []

        while self.peek() and self.peek().kind == 'op' and self.peek().text in ops:
            op = self.next().text
            rest.append((op, operand()))

        if not rest:
            return lhs

        # a - b + c is built as a - (b - c)
        head_op, acc = rest[0]
        flip         = head_op in ('-', '/')

        for op, node in rest[1:]:
            op  = INVERSE[op] if flip else op
            acc = OPERATORS[op](self.next_signal(), acc, node)

        return OPERATORS[head_op](self.next_signal(), lhs, acc)


    def process_term(self):
        return self.process_chain(self.process_operand, MUL_OPS)


    def process_expr(self):
        return self.process_chain(self.process_term, ADD_OPS)


    def lex(self, source: str) -> Equation:
        self.fsm    = LexerFSM()
        self.ctr    = 0
        self.tokens = self.tokenize(source)
        self.idx    = 0

        lhs = self.process_expr()

        token = self.peek()
        if token is None:
            raise ParseException("Missing '==' in equation")

        if token.kind == 'rparen':
            raise ParseException(f"Unbalanced ')' at position {token.pos}")

        eq = self.expect('eq')
        self.fsm.push(LexerState.IN_RHS, eq.pos)

        token = self.peek()
        if token and token.kind == 'op' and token.text == '-':
            self.next()
            rhs = self.process_number(negative=True)
        else:
            rhs = self.process_number()

        trailing = self.peek()
        if trailing is not None:
            raise ParseException(f"Unexpected '{trailing.text}' at position {trailing.pos}")

        log.debug("Parsed %r with %d operator(s)", source, self.ctr)
        return Equation(lhs, rhs)



def parse(Fr: 'Ring', source: str) -> Equation:
    return Lexer(Fr).lex(source)
