from samson.core.base_object import BaseObject
from eqsnark.exceptions import ProverException, SerializationException, SetupException, TrapdoorConsumedException
from eqsnark.sparse_vec import SparseVec
from eqsnark.wires import Wires
import logging

log = logging.getLogger(__name__)

# Implementation of protocol 2 (page 5) of https://eprint.iacr.org/2016/260.pdf

class Groth16Parameters(BaseObject):
    def __init__(self, name: str, Fr: 'Ring', r: int, g1, g2, zero1, zero2, gt_one, pairing, codec=None):
        self.name     = name
        self.Fr       = Fr
        self.r        = r
        self.g1       = g1
        self.g2       = g2
        self.zero1    = zero1
        self.zero2    = zero2
        self.gt_one   = gt_one
        self._pairing = pairing
        self.codec    = codec


    def __reprdir__(self):
        return ['name', 'r']


    def e(self, P, Q):
        if P == self.zero1 or Q == self.zero2:
            return self.gt_one

        return self._pairing(P, Q)


    def random_scalar(self) -> 'FieldElement':
        return self.Fr.mul_group().random().val



class Trapdoor(BaseObject):
    """
    The toxic waste of one setup. Can be consumed exactly once.
    """

    def __init__(self, alpha, beta, gamma, delta, x):
        self._scalars = (alpha, beta, gamma, delta, x)

    def __reprdir__(self):
        return ['consumed']

    @property
    def consumed(self):
        return self._scalars is None


    @staticmethod
    def generate(params: Groth16Parameters, qap: 'QAPSystem') -> 'Trapdoor':
        # t(x) vanishes on 1..n, so n >= r - 1 leaves no non-zero x to pick
        if qap.n >= params.r - 1:
            raise SetupException(f"{qap.n} constraints leave no valid trapdoor x on curve '{params.name}' (r = {params.r})")

        alpha, beta, gamma, delta = [params.random_scalar() for _ in range(4)]

        # x must not be a root of t(x)
        x = params.random_scalar()
        while qap.t(x) == params.Fr(0):
            x = params.random_scalar()

        return Trapdoor(alpha, beta, gamma, delta, x)


    def check(self, qap: 'QAPSystem'):
        if self.consumed:
            raise TrapdoorConsumedException("Trapdoor has already been used to build a CRS")

        x = self._scalars[-1]
        if qap.t(qap.Fr(int(x))) == qap.Fr(0):
            raise SetupException("Trapdoor x is a root of t(x)")


    def consume(self):
        if self.consumed:
            raise TrapdoorConsumedException("Trapdoor has already been used to build a CRS")

        scalars       = self._scalars
        self._scalars = None
        return scalars



def eval_in_exponent(P, powers: list, zero):
    """
    Evaluates `P` at the secret x given `powers` = [x^0*g, x^1*g, ...].
    """
    return sum([g_x_j*int(coeff) for coeff, g_x_j in zip(P, powers)], zero)



class CRSG1(BaseObject):
    def __init__(self, alpha, beta, delta, xi: list, uvw_stmt: list, uvw_wit: list, xt_by_delta: list):
        self.alpha       = alpha
        self.beta        = beta
        self.delta       = delta
        self.xi          = xi           # x powers
        self.uvw_stmt    = uvw_stmt     # (beta*v(x) + alpha*w(x) + y(x)) / gamma
        self.uvw_wit     = uvw_wit      # (beta*v(x) + alpha*w(x) + y(x)) / delta
        self.xt_by_delta = xt_by_delta  # x^j * t(x) / delta


class CRSG2(BaseObject):
    def __init__(self, beta, gamma, delta, xi: list):
        self.beta  = beta
        self.gamma = gamma
        self.delta = delta
        self.xi    = xi


class CRSGT(BaseObject):
    def __init__(self, alpha_beta):
        self.alpha_beta = alpha_beta



class CRS(BaseObject):
    def __init__(self, qap: 'QAPSystem', g1: CRSG1, g2: CRSG2, gt: CRSGT, params: Groth16Parameters):
        self.qap    = qap
        self.g1     = g1
        self.g2     = g2
        self.gt     = gt
        self.params = params


    def __reprdir__(self):
        return ['qap', 'params']


    @property
    def l(self):
        return self.qap.l

    @property
    def m(self):
        return self.qap.m

    @property
    def n(self):
        return self.qap.n


    @staticmethod
    def generate(qap: 'QAPSystem', params: Groth16Parameters, st: Trapdoor=None) -> 'CRS':
        log.info("Building CRS for %d constraint(s), l=%d, m=%d", qap.n, qap.l, qap.m)
        if st is None:
            st = Trapdoor.generate(params, qap)

        # Rejected trapdoors stay unconsumed
        st.check(qap)

        g1, g2 = params.g1, params.g2
        l, m, n = qap.l, qap.m, qap.n
        alpha, beta, gamma, delta, x = [params.Fr(int(v)) for v in st.consume()]
        t_x = qap.t(x)

        def uvw(i, div):
            return g1*int((beta*qap.vi[i](x) + alpha*qap.wi[i](x) + qap.yi[i](x)) / div)

        x_pows = [params.Fr(1)]
        for _ in range(1, n):
            x_pows.append(x_pows[-1] * x)

        crs_g1 = CRSG1(
            alpha=g1*int(alpha),
            beta=g1*int(beta),
            delta=g1*int(delta),
            xi=[g1*int(x_j) for x_j in x_pows],
            uvw_stmt=[uvw(i, gamma) for i in range(l+1)],
            uvw_wit=[uvw(i, delta) for i in range(l+1, m+1)],
            xt_by_delta=[g1*int(x_j * t_x / delta) for x_j in x_pows[:n-1]]
        )

        crs_g2 = CRSG2(
            beta=g2*int(beta),
            gamma=g2*int(gamma),
            delta=g2*int(delta),
            xi=[g2*int(x_j) for x_j in x_pows]
        )

        crs_gt = CRSGT(alpha_beta=params.e(crs_g1.alpha, crs_g2.beta))

        return CRS(qap, crs_g1, crs_g2, crs_gt, params)


    def eval_g1_x(self, P):
        return eval_in_exponent(P, self.g1.xi, self.params.zero1)

    def eval_g2_x(self, P):
        return eval_in_exponent(P, self.g2.xi, self.params.zero2)

    def eval_ht_by_delta(self, h):
        return eval_in_exponent(h, self.g1.xt_by_delta, self.params.zero1)



class Groth16Proof(BaseObject):
    def __init__(self, A, B, C):
        self.A = A
        self.B = B
        self.C = C


    def __eq__(self, other):
        return type(other) is Groth16Proof and (self.A, self.B, self.C) == (other.A, other.B, other.C)


    @staticmethod
    def _codec(params: Groth16Parameters):
        if params.codec is None:
            raise SerializationException(f"Curve '{params.name}' has no byte encoding")

        return params.codec


    def to_bytes(self, params: Groth16Parameters) -> bytes:
        """
        Encodes the proof as A || B || C using the curve's point encoding.
        """
        codec = Groth16Proof._codec(params)
        return codec.encode(self.A) + codec.encode(self.B) + codec.encode(self.C)


    @staticmethod
    def from_bytes(data: bytes, params: Groth16Parameters) -> 'Groth16Proof':
        codec  = Groth16Proof._codec(params)
        g1_len = codec.G1_SIZE
        g2_len = codec.G2_SIZE

        if len(data) != 2*g1_len + g2_len:
            raise SerializationException(f"Proof must be {2*g1_len + g2_len} bytes, got {len(data)}")

        A = codec.decode(data[:g1_len], g2=False)
        B = codec.decode(data[g1_len:g1_len + g2_len], g2=True)
        C = codec.decode(data[g1_len + g2_len:], g2=False)
        return Groth16Proof(A, B, C)


    @staticmethod
    def generate(crs: CRS, wires: 'Wires', r: 'FieldElement'=None, s: 'FieldElement'=None) -> 'Groth16Proof':
        log.info("Generating proof")
        params = crs.params
        S      = wires.sv if isinstance(wires, Wires) else wires

        if S.size != crs.m + 1:
            raise ProverException(f"Witness has {S.size} entries, CRS expects {crs.m + 1}")

        # Fresh blinding scalars for every proof
        if r is None:
            r = params.random_scalar()

        if s is None:
            s = params.random_scalar()

        r, s = params.Fr(int(r)), params.Fr(int(s))

        qap = crs.qap
        l   = crs.l
        h   = qap.build_h(S)

        A_x = qap.combine(qap.vi, S)
        B_x = qap.combine(qap.wi, S)

        g1A = crs.g1.alpha + crs.eval_g1_x(A_x) + crs.g1.delta*int(r)
        g2B = crs.g2.beta  + crs.eval_g2_x(B_x) + crs.g2.delta*int(s)
        g1B = crs.g1.beta  + crs.eval_g1_x(B_x) + crs.g1.delta*int(s)
        g1W = sum([g1P*int(S[i]) for i, g1P in enumerate(crs.g1.uvw_wit, l+1)], params.zero1)
        g1C = g1W + crs.eval_ht_by_delta(h) + g1A*int(s) + g1B*int(r) + crs.g1.delta*int(-(r*s))

        return Groth16Proof(g1A, g2B, g1C)


    def verify(self, crs: CRS, statement: SparseVec) -> bool:
        log.info("Verifying proof")
        params = crs.params

        if len(statement) != len(crs.g1.uvw_stmt):
            log.warning("Statement has %d entries, CRS expects %d", len(statement), len(crs.g1.uvw_stmt))
            return False

        g1_I = sum([g1_g*int(statement[i]) for i, g1_g in enumerate(crs.g1.uvw_stmt)], params.zero1)

        lhs = params.e(self.A, self.B)
        rhs = crs.gt.alpha_beta * params.e(g1_I, crs.g2.gamma) * params.e(self.C, crs.g2.delta)

        return lhs == rhs



def setup(qap: 'QAPSystem', params: Groth16Parameters, trapdoor: Trapdoor=None) -> CRS:
    return CRS.generate(qap, params, trapdoor)


def prove(crs: CRS, wires: 'Wires', r: 'FieldElement'=None, s: 'FieldElement'=None) -> Groth16Proof:
    return Groth16Proof.generate(crs, wires, r, s)


def verify(proof: Groth16Proof, crs: CRS, statement: SparseVec) -> bool:
    return proof.verify(crs, statement)
