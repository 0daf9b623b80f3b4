from samson.core.base_object import BaseObject
from eqsnark.sparse_vec import SparseVec

# 0, 1, .., l, l+1, .., m
# +---------+  +--------+
#  statement    witness

class Wires(BaseObject):
    def __init__(self, sv: SparseVec, l: int):
        self.sv          = sv
        self.witness_beg = l + 1


    def __reprdir__(self):
        return ['sv', 'witness_beg']


    @staticmethod
    def from_r1cs(r1cs: 'R1CSSystem') -> 'Wires':
        return Wires(r1cs.witness, r1cs.mid_beg - 1)


    @property
    def l(self):
        return self.witness_beg - 1

    @property
    def m(self):
        return self.sv.size - 1


    def __getitem__(self, index: int):
        return self.sv[index]


    def __len__(self):
        return self.sv.size


    def statement(self) -> SparseVec:
        return self.sv.slice(0, self.witness_beg)


    def witness(self) -> SparseVec:
        return self.sv.slice(self.witness_beg, self.sv.size)
