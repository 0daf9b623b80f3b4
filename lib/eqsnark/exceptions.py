
class EqSnarkException(Exception):
    pass

class ParseException(EqSnarkException, ValueError):
    pass

class CompilerException(EqSnarkException):
    pass

class IndexOutOfRangeException(EqSnarkException, IndexError):
    pass

class WitnessException(EqSnarkException):
    pass

class ConstraintException(EqSnarkException):
    def __init__(self, index: int, a, b, c):
        self.index = index
        self.a     = a
        self.b     = b
        self.c     = c
        super().__init__(f"Constraint {index}: a ({a}) * b ({b}) = c ({c}) doesn't hold")

class QAPException(EqSnarkException):
    pass

class SetupException(EqSnarkException):
    pass

class TrapdoorConsumedException(SetupException):
    pass

class ProverException(EqSnarkException):
    pass

class ConfigException(EqSnarkException):
    pass

class SerializationException(EqSnarkException, ValueError):
    pass
