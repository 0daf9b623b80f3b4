from samson.core.base_object import BaseObject
from eqsnark.exceptions import ConstraintException, WitnessException
from eqsnark.sparse_vec import SparseVec
from eqsnark.term import Term, One, Out, Num, Sum
import logging

log = logging.getLogger(__name__)


class R1CSConstraint(BaseObject):
    def __init__(self, ai: SparseVec, bi: SparseVec, ci: SparseVec):
        self.ai = ai
        self.bi = bi
        self.ci = ci

    def evaluate(self, S: SparseVec):
        return self.ai.dot(S), self.bi.dot(S), self.ci.dot(S)

    def is_valid_assignment(self, S: SparseVec):
        A, B, C = self.evaluate(S)
        return A * B == C



class R1CSTemplate(BaseObject):
    """
    Witness layout and constraint rows of a compiled gate list.

    Layout: 1, variables (first appearance), out | temporaries (first appearance)
            +--------- statement: 0..=l --------+  +------ witness: l+1..=m ------+
    """

    def __init__(self, Fr: 'Ring', constraints: list, witness: list, mid_beg: int):
        self.Fr          = Fr
        self.constraints = constraints
        self.witness     = witness
        self.indices     = {term: i for i, term in enumerate(witness)}
        self.mid_beg     = mid_beg


    def __reprdir__(self):
        return ['witness', 'mid_beg']


    @property
    def l(self):
        return self.mid_beg - 1

    @property
    def m(self):
        return len(self.witness) - 1

    @property
    def n(self):
        return len(self.constraints)


    @staticmethod
    def categorize_terms(term: Term, inputs: list, mid: list):
        if type(term) is Sum:
            R1CSTemplate.categorize_terms(term.a, inputs, mid)
            R1CSTemplate.categorize_terms(term.b, inputs, mid)

        elif type(term) in (One, Out, Num):
            return

        elif term.is_temporary():
            if term not in mid:
                mid.append(term)

        elif term not in inputs:
            inputs.append(term)


    def build_constraint_vec(self, term: Term, vec: SparseVec):
        if type(term) is Sum:
            self.build_constraint_vec(term.a, vec)
            self.build_constraint_vec(term.b, vec)

        elif type(term) is Num:
            # Num is n times the One term at index 0
            vec.add(0, term.value)

        else:
            vec.add(self.indices[term], 1)


    @staticmethod
    def from_gates(Fr: 'Ring', gates: list) -> 'R1CSTemplate':
        inputs, mid = [], []
        for gate in gates:
            for term in gate.terms():
                R1CSTemplate.categorize_terms(term, inputs, mid)

        witness = [One(), *inputs, Out(), *mid]
        tmpl    = R1CSTemplate(Fr, [], witness, mid_beg=len(inputs) + 2)
        size    = len(witness)

        for gate in gates:
            a, b, c = [SparseVec(Fr, size) for _ in range(3)]
            tmpl.build_constraint_vec(gate.a, a)
            tmpl.build_constraint_vec(gate.b, b)
            tmpl.build_constraint_vec(gate.c, c)
            tmpl.constraints.append(R1CSConstraint(a, b, c))

        log.debug("R1CS template: %d constraint(s), witness size %d, l=%d", tmpl.n, size, tmpl.l)
        return tmpl



class R1CSSystem(BaseObject):
    def __init__(self, constraints: list, witness: SparseVec, mid_beg: int):
        self.constraints = constraints
        self.witness     = witness
        self.mid_beg     = mid_beg


    def __reprdir__(self):
        return ['witness', 'mid_beg']


    @staticmethod
    def build_witness_vec(tmpl: R1CSTemplate, instance: dict) -> SparseVec:
        witness = SparseVec(tmpl.Fr, len(tmpl.witness))

        for i, term in enumerate(tmpl.witness):
            if term in instance:
                witness[i] = instance[term]
            elif type(term) is One:
                witness[i] = 1
            else:
                raise WitnessException(f"Missing witness for {term!r}")

        if witness[0] != tmpl.Fr(1):
            raise WitnessException(f"Witness for 1 must be 1, got {witness[0]}")

        return witness


    @staticmethod
    def from_template(tmpl: R1CSTemplate, instance: dict) -> 'R1CSSystem':
        witness = R1CSSystem.build_witness_vec(tmpl, instance)
        return R1CSSystem(tmpl.constraints, witness, tmpl.mid_beg)


    def validate(self):
        for i, con in enumerate(self.constraints):
            A, B, C = con.evaluate(self.witness)
            log.debug("r1cs[%d]: %s * %s = %s", i, A, B, C)

            if A * B != C:
                raise ConstraintException(i, A, B, C)


    def is_valid_assignment(self):
        return all(con.is_valid_assignment(self.witness) for con in self.constraints)



def build_r1cs(tmpl: R1CSTemplate, instance: dict) -> R1CSSystem:
    return R1CSSystem.from_template(tmpl, instance)
