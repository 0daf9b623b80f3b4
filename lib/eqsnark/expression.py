from samson.core.base_object import BaseObject
from eqsnark.exceptions import WitnessException
from eqsnark.term import Num, Var, TmpVar

#########
# NODES #
#########

class Expr(BaseObject):
    def evaluate(self, values: dict, signals: dict=None):
        """
        Evaluates the expression over the field.

        Parameters:
            values  (dict): Variable name -> field element.
            signals (dict): If given, receives TmpVar -> value for every operator node.
        """
        raise NotImplementedError

    def num_operators(self) -> int:
        return 0


class NumExpr(Expr):
    def __init__(self, value: 'FieldElement'):
        self.value = value

    def __reprdir__(self):
        return ['value']

    def __eq__(self, other):
        return type(other) is NumExpr and self.value == other.value

    def __hash__(self):
        return hash(int(self.value))

    def to_term(self):
        return Num(self.value)

    def evaluate(self, values, signals=None):
        return self.value


class VarExpr(Expr):
    def __init__(self, name: str):
        self.name = name

    def __reprdir__(self):
        return ['name']

    def __eq__(self, other):
        return type(other) is VarExpr and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def to_term(self):
        return Var(self.name)

    def evaluate(self, values, signals=None):
        try:
            return values[self.name]
        except KeyError:
            raise WitnessException(f"No value given for variable '{self.name}'")


class BinaryOperator(Expr):
    SYMBOL = None

    def __init__(self, signal_id: int, left: Expr, right: Expr):
        self.signal_id = signal_id
        self.left      = left
        self.right     = right

    def __reprdir__(self):
        return ['signal_id', 'left', 'right']

    def __eq__(self, other):
        return type(self) is type(other) and (self.signal_id, self.left, self.right) == (other.signal_id, other.left, other.right)

    def __hash__(self):
        return hash((self.SYMBOL, self.signal_id, self.left, self.right))

    @property
    def signal(self):
        return TmpVar(self.signal_id)

    def num_operators(self):
        return 1 + self.left.num_operators() + self.right.num_operators()

    def apply(self, l, r):
        raise NotImplementedError

    def evaluate(self, values, signals=None):
        l     = self.left.evaluate(values, signals)
        r     = self.right.evaluate(values, signals)
        value = self.apply(l, r)

        if signals is not None:
            signals[self.signal] = value

        return value


class AddExpr(BinaryOperator):
    SYMBOL = '+'

    def apply(self, l, r):
        return l + r


class SubExpr(BinaryOperator):
    SYMBOL = '-'

    def apply(self, l, r):
        return l - r


class MulExpr(BinaryOperator):
    SYMBOL = '*'

    def apply(self, l, r):
        return l * r


class DivExpr(BinaryOperator):
    SYMBOL = '/'

    def apply(self, l, r):
        if int(r) == 0:
            raise WitnessException(f"Division by zero at signal t{self.signal_id}")

        return l / r


class Equation(Expr):
    def __init__(self, lhs: Expr, rhs: 'FieldElement'):
        self.lhs = lhs
        self.rhs = rhs

    def __reprdir__(self):
        return ['lhs', 'rhs']

    def __eq__(self, other):
        return type(other) is Equation and self.lhs == other.lhs and self.rhs == other.rhs

    def __hash__(self):
        return hash((self.lhs, int(self.rhs)))

    def num_operators(self):
        return self.lhs.num_operators()

    def evaluate(self, values, signals=None):
        return self.lhs.evaluate(values, signals)


OPERATORS = {op.SYMBOL: op for op in (AddExpr, SubExpr, MulExpr, DivExpr)}
INVERSE   = {'+': '-', '-': '+', '*': '/', '/': '*'}
