from samson.core.base_object import BaseObject
from eqsnark.curves import bls6_6
from eqsnark.exceptions import WitnessException
from eqsnark.gate import build_gates
from eqsnark.lexer import Lexer
from eqsnark.qap import QAPSystem
from eqsnark.r1cs import R1CSTemplate, R1CSSystem
from eqsnark.term import One, Out, Var
from eqsnark.wires import Wires
import logging

log = logging.getLogger(__name__)


def compile(source: str, Fr: 'Ring'=None):
    """
    Parses and compiles `source` into its gates and R1CS template.

    Parameters:
        source (str): Equation text, e.g. '(x*x*x) + x + 5 == 35'.
        Fr    (Ring): Scalar field of the proof system. Defaults to bls6_6's.

    Returns:
        (list, R1CSTemplate): Gates and witness layout.
    """
    if Fr is None:
        Fr = bls6_6().Fr

    eq    = Lexer(Fr).lex(source)
    gates = build_gates(eq)
    return gates, R1CSTemplate.from_gates(Fr, gates)



class Circuit(BaseObject):
    def __init__(self, source: str, params: 'Groth16Parameters', equation: 'Equation', gates: list, template: R1CSTemplate, qap: QAPSystem):
        self.source   = source
        self.params   = params
        self.equation = equation
        self.gates    = gates
        self.template = template
        self.qap      = qap


    def __reprdir__(self):
        return ['source', 'params']


    @staticmethod
    def compile(source: str, params: 'Groth16Parameters') -> 'Circuit':
        log.info("Compiling '%s'", source)
        Fr    = params.Fr
        eq    = Lexer(Fr).lex(source)
        gates = build_gates(eq)
        tmpl  = R1CSTemplate.from_gates(Fr, gates)
        qap   = QAPSystem.from_r1cs_template(Fr, tmpl)

        return Circuit(source, params, eq, gates, tmpl, qap)


    @property
    def variables(self):
        return [term.name for term in self.template.witness if type(term) is Var]


    def solve(self, inputs: dict) -> dict:
        """
        Computes every signal of the circuit from the variable values.

        Parameters:
            inputs (dict): Variable name -> int or field element.

        Returns:
            dict: Witness instance, Term -> field element.
        """
        Fr     = self.params.Fr
        values = {name: Fr(int(v)) for name, v in inputs.items()}

        missing = [name for name in self.variables if name not in values]
        if missing:
            raise WitnessException(f"Missing value for variable(s): {', '.join(missing)}")

        signals = {}
        out     = self.equation.evaluate(values, signals)

        if out != self.equation.rhs:
            raise WitnessException(f"Inputs evaluate to {out}, not {self.equation.rhs}")

        instance = {One(): Fr(1), Out(): out}
        instance.update({Var(name): values[name] for name in self.variables})
        instance.update(signals)
        return instance


    def build_r1cs(self, instance: dict) -> R1CSSystem:
        return R1CSSystem.from_template(self.template, instance)


    def wires(self, r1cs: R1CSSystem) -> Wires:
        return Wires.from_r1cs(r1cs)
