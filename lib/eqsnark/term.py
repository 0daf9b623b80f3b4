from samson.core.base_object import BaseObject

#########
# TERMS #
#########

class Term(BaseObject):
    def __reprdir__(self):
        return []

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self):
        return hash((self.__class__.__name__, self._key()))

    def _key(self):
        return ()

    def is_temporary(self):
        return False


class One(Term):
    def __repr__(self):
        return '1'


class Out(Term):
    def __repr__(self):
        return 'out'


class Num(Term):
    def __init__(self, value: 'FieldElement'):
        self.value = value

    def _key(self):
        return (int(self.value),)

    def __repr__(self):
        return str(int(self.value))


class Var(Term):
    def __init__(self, name: str):
        self.name = name

    def _key(self):
        return (self.name,)

    def __repr__(self):
        return self.name


class TmpVar(Term):
    def __init__(self, signal_id: int):
        self.signal_id = signal_id

    def _key(self):
        return (self.signal_id,)

    def __repr__(self):
        return f't{self.signal_id}'

    def is_temporary(self):
        return True


class Sum(Term):
    """
    Rewrite-only term. Never gets a slot in the witness vector; its operands do.
    """
    def __init__(self, a: Term, b: Term):
        self.a = a
        self.b = b

    def _key(self):
        return (self.a, self.b)

    def __repr__(self):
        return f'({self.a!r} + {self.b!r})'
