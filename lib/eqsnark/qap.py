from samson.core.base_object import BaseObject
from samson.math.symbols import Symbol
from eqsnark.exceptions import QAPException
from eqsnark.sparse_vec import SparseVec
import logging

log = logging.getLogger(__name__)


class QAPSystem(BaseObject):
    """
    Polynomial form of an R1CS template. Constraint k (1-indexed) lives at x = k,
    so column i of A, B and C becomes vi[i], wi[i] and yi[i].
    """

    def __init__(self, Fr: 'Ring', P: 'PolynomialRing', x: Symbol, t, vi: list, wi: list, yi: list, l: int, n: int):
        self.Fr = Fr
        self.P  = P
        self.x  = x
        self.t  = t
        self.vi = vi
        self.wi = wi
        self.yi = yi
        self.l  = l
        self.n  = n


    def __reprdir__(self):
        return ['l', 'm', 'n', 't']


    @property
    def m(self):
        return len(self.vi) - 1


    @staticmethod
    def polynomial_ring(Fr: 'Ring'):
        x = Symbol('x')
        P = Fr[x]
        return P, x


    @staticmethod
    def check_domain(Fr: 'Ring', n: int):
        # Interpolation points 1..n must be distinct, non-zero field elements
        for k in range(1, n+1):
            if Fr(k) == Fr(0):
                raise QAPException(f"{n} constraints do not fit into the scalar field (point {k} wraps to 0)")


    @staticmethod
    def build_polynomial(Fr: 'Ring', P: 'PolynomialRing', x: Symbol, target_vals: SparseVec):
        """
        Lagrange interpolation of `target_vals[k-1]` at x = k for k = 1..n.

        e.g. 3 * (x - 2) * (x - 3) / ((1 - 2) * (1 - 3)) is 3 at x = 1 and 0 at x = 2, 3.
        """
        n    = target_vals.size
        poly = P(0)

        for k0, v in target_vals:
            target_x    = k0 + 1
            numerator   = P(1)
            denominator = Fr(1)

            for k in range(1, n+1):
                if k == target_x:
                    continue

                numerator    = numerator * (x - Fr(k))
                denominator *= Fr(target_x) - Fr(k)

            poly = poly + numerator * (v / denominator)

        return poly


    @staticmethod
    def build_t(Fr: 'Ring', P: 'PolynomialRing', x: Symbol, n: int):
        t = P(1)
        for k in range(1, n+1):
            t = t * (x - Fr(k))

        return t


    @staticmethod
    def transpose(Fr: 'Ring', rows: list, width: int):
        cols = [SparseVec(Fr, len(rows)) for _ in range(width)]
        for k, row in enumerate(rows):
            for i, v in row:
                cols[i][k] = v

        return cols


    @staticmethod
    def from_r1cs_template(Fr: 'Ring', tmpl: 'R1CSTemplate') -> 'QAPSystem':
        # Set up some vars
        n     = len(tmpl.constraints)
        width = len(tmpl.witness)
        QAPSystem.check_domain(Fr, n)

        P, x  = QAPSystem.polynomial_ring(Fr)
        t     = QAPSystem.build_t(Fr, P, x, n)

        A = QAPSystem.transpose(Fr, [con.ai for con in tmpl.constraints], width)
        B = QAPSystem.transpose(Fr, [con.bi for con in tmpl.constraints], width)
        C = QAPSystem.transpose(Fr, [con.ci for con in tmpl.constraints], width)

        vi, wi, yi = [[QAPSystem.build_polynomial(Fr, P, x, col) for col in X] for X in (A, B, C)]

        qap = QAPSystem(Fr, P, x, t, vi, wi, yi, l=tmpl.mid_beg - 1, n=n)

        log.debug("QAP: %d polynomial(s) per matrix over %d constraint(s)", width, n)
        return qap


    def _check_witness(self, S: SparseVec):
        if S.size != self.m + 1:
            raise QAPException(f"Witness has {S.size} entries, expected {self.m + 1}")


    def combine(self, polys: list, S: SparseVec):
        self._check_witness(S)
        return sum([polys[i] * w for i, w in S], self.P(0))


    def build_p(self, S: SparseVec):
        A = self.combine(self.vi, S)
        B = self.combine(self.wi, S)
        C = self.combine(self.yi, S)

        return A * B - C


    def build_h(self, S: SparseVec):
        p = self.build_p(S)
        if p % self.t != self.P(0):
            raise QAPException("p(x) is not divisible by t(x); the witness does not satisfy the constraints")

        return p // self.t


    def is_valid(self, S: SparseVec) -> bool:
        return self.build_p(S) % self.t == self.P(0)
