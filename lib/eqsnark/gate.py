from samson.core.base_object import BaseObject
from eqsnark.exceptions import CompilerException
from eqsnark.expression import NumExpr, VarExpr, AddExpr, SubExpr, MulExpr, DivExpr, Equation
from eqsnark.term import One, Out, Sum
import logging

log = logging.getLogger(__name__)


class Gate(BaseObject):
    def __init__(self, a: 'Term', b: 'Term', c: 'Term'):
        self.a = a
        self.b = b
        self.c = c

    def __reprdir__(self):
        return ['a', 'b', 'c']

    def __repr__(self):
        return f'{self.c!r} = {self.a!r} * {self.b!r}'

    def __eq__(self, other):
        return type(other) is Gate and (self.a, self.b, self.c) == (other.a, other.b, other.c)

    def __hash__(self):
        return hash((self.a, self.b, self.c))

    def terms(self):
        return self.a, self.b, self.c



class GateCompiler(BaseObject):
    def __init__(self):
        self.gates = []


    def traverse(self, expr: 'Expr'):
        if type(expr) in (NumExpr, VarExpr):
            return expr.to_term()

        elif type(expr) is Equation:
            raise CompilerException("Nested equation found in the left-hand side")

        a = self.traverse(expr.left)
        b = self.traverse(expr.right)
        c = expr.signal

        if type(expr) is AddExpr:
            # a + b = c -> (a + b) * 1 = c
            self.gates.append(Gate(Sum(a, b), One(), c))

        elif type(expr) is MulExpr:
            self.gates.append(Gate(a, b, c))

        elif type(expr) is SubExpr:
            # a - b = c -> (b + c) * 1 = a
            self.gates.append(Gate(Sum(b, c), One(), a))

        elif type(expr) is DivExpr:
            # a / b = c -> b * c = a
            self.gates.append(Gate(b, c, a))

        else:
            raise CompilerException(f"Unknown expression node {type(expr).__name__}")

        return c


    def build(self, eq: Equation):
        self.gates = []
        lhs        = self.traverse(eq.lhs)
        self.gates.append(Gate(lhs, One(), Out()))

        log.debug("Compiled %d gate(s)", len(self.gates))
        return list(self.gates)



def build_gates(eq: Equation):
    return GateCompiler().build(eq)
