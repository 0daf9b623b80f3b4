from samson.all import ZZ, FF, EllipticCurve
from samson.core.base_object import BaseObject
from samson.math.symbols import Symbol
from py_ecc.optimized_bn128 import optimized_curve as curve, pairing
from py_ecc.fields import optimized_bn128_FQ as FQ, optimized_bn128_FQ2 as FQ2, optimized_bn128_FQ12 as FQ12
from eqsnark.exceptions import ConfigException, SerializationException
from eqsnark.groth16 import Groth16Parameters
from functools import lru_cache


@lru_cache(maxsize=None)
def bls6_6() -> Groth16Parameters:
    """
    Toy pairing-friendly curve y^2 = x^3 + 6 over F43 with embedding degree 6.
    Both groups have order 13, so circuits are limited to 12 constraints.
    """
    F = ZZ/ZZ(43)
    E = EllipticCurve(F(0), F(6))

    # Build g1, g2 on the extension curve
    y     = Symbol('y')
    P     = F[y]
    F43_6 = FF(43, 6, reducing_poly=y**6 + 6)

    E6 = EllipticCurve(F43_6(E.a), F43_6(E.b))
    g1 = E6(13, 15)
    g2 = E6(7*y**2, 16*y**3)
    r  = 13

    def weil_pairing(P, Q):
        return P.weil_pairing(Q, r)

    return Groth16Parameters(
        name='bls6_6',
        Fr=ZZ/ZZ(r),
        r=r,
        g1=g1,
        g2=g2,
        zero1=E6.zero,
        zero2=E6.zero,
        gt_one=F43_6(1),
        pairing=weil_pairing
    )



class BN128Point(BaseObject):
    """
    Operator wrapper around py_ecc's projective tuples.
    """

    def __init__(self, pt):
        self.pt = pt

    def __reprdir__(self):
        return ['pt']

    def __repr__(self):
        if curve.is_inf(self.pt):
            return '<BN128Point: infinity>'

        return f'<BN128Point: {curve.normalize(self.pt)}>'

    def __add__(self, other):
        return BN128Point(curve.add(self.pt, other.pt))

    def __neg__(self):
        return BN128Point(curve.neg(self.pt))

    def __sub__(self, other):
        return self + (-other)

    def __mul__(self, k):
        return BN128Point(curve.multiply(self.pt, int(k) % curve.curve_order))

    __rmul__ = __mul__

    def __eq__(self, other):
        return type(other) is BN128Point and curve.eq(self.pt, other.pt)



class BN128Codec(object):
    """
    Uncompressed affine encoding. Every base field coordinate is a 32-byte
    big-endian integer; FQ2 coordinates are written c0 then c1.

        G1: x || y                    (64 bytes)
        G2: x.c0 || x.c1 || y.c0 || y.c1  (128 bytes)

    The point at infinity is all zero bytes.
    """
    COORD_SIZE = 32
    G1_SIZE    = 2 * COORD_SIZE
    G2_SIZE    = 4 * COORD_SIZE

    @staticmethod
    def _coeffs(v):
        return v.coeffs if isinstance(v, FQ2) else (v.n,)


    @staticmethod
    def encode(P: BN128Point) -> bytes:
        g2   = isinstance(P.pt[0], FQ2)
        size = BN128Codec.G2_SIZE if g2 else BN128Codec.G1_SIZE

        if curve.is_inf(P.pt):
            return b'\x00' * size

        x, y = curve.normalize(P.pt)
        return b''.join(int(c).to_bytes(BN128Codec.COORD_SIZE, 'big') for c in BN128Codec._coeffs(x) + BN128Codec._coeffs(y))


    @staticmethod
    def decode(data: bytes, g2: bool=False) -> BN128Point:
        size = BN128Codec.G2_SIZE if g2 else BN128Codec.G1_SIZE
        if len(data) != size:
            raise SerializationException(f"Expected {size} bytes for a {'G2' if g2 else 'G1'} point, got {len(data)}")

        if not any(data):
            return BN128Point(curve.Z2 if g2 else curve.Z1)

        coords = [int.from_bytes(data[i:i + BN128Codec.COORD_SIZE], 'big') for i in range(0, size, BN128Codec.COORD_SIZE)]
        if any(c >= FQ.field_modulus for c in coords):
            raise SerializationException("Coordinate is not reduced modulo the field prime")

        if g2:
            pt = (FQ2(coords[:2]), FQ2(coords[2:]), FQ2.one())
            b  = curve.b2
        else:
            pt = (FQ(coords[0]), FQ(coords[1]), FQ.one())
            b  = curve.b

        if not curve.is_on_curve(pt, b):
            raise SerializationException("Point is not on the curve")

        # G2's twist has a cofactor
        if g2 and not curve.is_inf(curve.multiply(pt, curve.curve_order)):
            raise SerializationException("Point is not in the prime-order subgroup")

        return BN128Point(pt)



@lru_cache(maxsize=None)
def bn128() -> Groth16Parameters:
    """
    BN254 (alt_bn128), the curve behind Ethereum's pairing precompiles.
    """
    def optimal_ate(P, Q):
        return pairing(Q.pt, P.pt)

    return Groth16Parameters(
        name='bn128',
        Fr=ZZ/ZZ(curve.curve_order),
        r=curve.curve_order,
        g1=BN128Point(curve.G1),
        g2=BN128Point(curve.G2),
        zero1=BN128Point(curve.Z1),
        zero2=BN128Point(curve.Z2),
        gt_one=FQ12.one(),
        pairing=optimal_ate,
        codec=BN128Codec
    )



CURVES = {
    'bls6_6': bls6_6,
    'bn128': bn128,
}

def get_curve(name: str) -> Groth16Parameters:
    try:
        return CURVES[name]()
    except KeyError:
        raise ConfigException(f"Unknown curve '{name}'; choose one of {', '.join(CURVES)}")
