from eqsnark.exceptions import *
from eqsnark.term import One, Out, Num, Var, TmpVar, Sum
from eqsnark.lexer import Lexer, parse
from eqsnark.gate import Gate, build_gates
from eqsnark.sparse_vec import SparseVec
from eqsnark.r1cs import R1CSConstraint, R1CSTemplate, R1CSSystem, build_r1cs
from eqsnark.wires import Wires
from eqsnark.qap import QAPSystem
from eqsnark.groth16 import Groth16Parameters, Trapdoor, CRS, Groth16Proof, setup, prove, verify
from eqsnark.curves import BN128Codec, bls6_6, bn128, get_curve
from eqsnark.circuit import Circuit, compile
