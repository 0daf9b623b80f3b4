from unittest import TestCase
from samson.all import ZZ
from eqsnark.circuit import Circuit, compile
from eqsnark.curves import BN128Codec, bls6_6, bn128, get_curve
from eqsnark.exceptions import *
from eqsnark.expression import NumExpr, VarExpr, AddExpr, SubExpr, MulExpr
from eqsnark.gate import Gate, build_gates
from eqsnark.groth16 import CRS, Groth16Proof, Trapdoor, setup, prove, verify
from eqsnark.lexer import parse
from eqsnark.qap import QAPSystem
from eqsnark.r1cs import build_r1cs
from eqsnark.sparse_vec import SparseVec
from eqsnark.term import One, Out, Num, Var, TmpVar, Sum
from eqsnark.wires import Wires
from eqsnark.__main__ import main
from py_ecc.optimized_bn128 import optimized_curve
from py_ecc.fields import optimized_bn128_FQ
from contextlib import redirect_stdout, redirect_stderr
import io

CUBIC    = '(x*x*x) + x + 5 == 35'
LIMIT_11 = 'x*x*x*x*x*x*x*x*x*x*x == 1'
LIMIT_12 = 'x*x*x*x*x*x*x*x*x*x*x*x == 1'


def cubic_instance(F):
    return {
        One(): F(1),
        Var('x'): F(3),
        TmpVar(1): F(9),
        TmpVar(2): F(27),
        TmpVar(3): F(8),
        TmpVar(4): F(35),
        Out(): F(35)
    }


def ints(vec):
    return [int(v) for v in vec.to_list()]



class LexerTestCases(TestCase):
    F = ZZ/ZZ(101)

    def test_cubic_ast(self):
        F  = self.F
        eq = parse(F, CUBIC)
        x  = VarExpr('x')

        cube = MulExpr(2, x, MulExpr(1, x, x))
        lhs  = AddExpr(4, cube, AddExpr(3, x, NumExpr(F(5))))

        self.assertEqual(eq.lhs, lhs)
        self.assertEqual(eq.rhs, F(35))
        self.assertEqual(eq.num_operators(), 4)


    def test_chains_keep_their_meaning(self):
        F      = self.F
        values = {'a': F(20), 'b': F(6), 'c': F(2), 'd': F(5)}

        cases = {
            'a - b + c == 0': F(16),
            'a - b - c == 0': F(12),
            'a + b - c + d == 0': F(29),
            'a - b + c - d == 0': F(11),
            'a / c * d == 0': F(50),
            'a / c / d == 0': F(2),
            'a * b / c == 0': F(60),
        }

        for source, expected in cases.items():
            self.assertEqual(parse(F, source).evaluate(values), expected, source)


    def test_right_grouping(self):
        F  = self.F
        eq = parse(F, 'a - b + c == 1')

        self.assertEqual(eq.lhs, SubExpr(2, VarExpr('a'), SubExpr(1, VarExpr('b'), VarExpr('c'))))


    def test_negative_literals(self):
        F  = self.F
        eq = parse(F, 'x * -2 == -4')

        self.assertEqual(eq.lhs, MulExpr(1, VarExpr('x'), NumExpr(F(-2))))
        self.assertEqual(eq.rhs, F(-4))


    def test_whitespace_is_ignored(self):
        F = self.F
        self.assertEqual(parse(F, '(x*x*x)+x+5==35'), parse(F, '  ( x * x * x ) + x + 5   ==  35 '))


    def test_malformed(self):
        for source in ['x + == 3', 'x + 1', '(x + 1 == 3', 'x + 1) == 3', 'x $ 1 == 2', 'x == 3 4', 'x == y', '== 3', '']:
            with self.assertRaises(ParseException, msg=source):
                parse(self.F, source)


    def test_parse_exception_is_value_error(self):
        with self.assertRaises(ValueError):
            parse(self.F, 'x + 1')



class GateTestCases(TestCase):
    F = ZZ/ZZ(101)

    def test_cubic_gates(self):
        F     = self.F
        x     = Var('x')
        gates = build_gates(parse(F, CUBIC))

        self.assertEqual(gates, [
            Gate(x, x, TmpVar(1)),
            Gate(x, TmpVar(1), TmpVar(2)),
            Gate(Sum(x, Num(F(5))), One(), TmpVar(3)),
            Gate(Sum(TmpVar(2), TmpVar(3)), One(), TmpVar(4)),
            Gate(TmpVar(4), One(), Out())
        ])


    def test_gate_count(self):
        # One gate per operator plus the output gate
        for source, count in [('x + 4 == 9', 2), ('(3*x+4)/2 == 11', 4), (CUBIC, 5), ('x == 3', 1)]:
            self.assertEqual(len(compile(source, self.F)[0]), count, source)


    def test_sub_and_div_rewrites(self):
        F = self.F
        a = Var('a')
        b = Var('b')

        self.assertEqual(build_gates(parse(F, 'a - b == 1'))[0], Gate(Sum(b, TmpVar(1)), One(), a))
        self.assertEqual(build_gates(parse(F, 'a / b == 1'))[0], Gate(b, TmpVar(1), a))


    def test_determinism(self):
        gates_a, tmpl_a = compile(CUBIC, self.F)
        gates_b, tmpl_b = compile(CUBIC, self.F)

        self.assertEqual(gates_a, gates_b)
        self.assertEqual(tmpl_a.witness, tmpl_b.witness)

        for con_a, con_b in zip(tmpl_a.constraints, tmpl_b.constraints):
            self.assertEqual((con_a.ai, con_a.bi, con_a.ci), (con_b.ai, con_b.bi, con_b.ci))



class SparseVecTestCases(TestCase):
    F = ZZ/ZZ(101)

    def test_round_trip(self):
        vec = SparseVec.from_list(self.F, [0, 3, 0, 5])

        self.assertEqual(ints(vec), [0, 3, 0, 5])
        self.assertEqual(vec.indices(), [1, 3])
        self.assertEqual(len(vec), 4)


    def test_zero_removes_entry(self):
        vec = SparseVec.from_list(self.F, [0, 3, 0, 5])
        vec[1] = 0

        self.assertEqual(vec.indices(), [3])
        self.assertEqual(vec[1], self.F(0))


    def test_add_accumulates(self):
        vec = SparseVec(self.F, 2)
        vec.add(1, 4)
        vec.add(1, 97)

        self.assertTrue(vec.is_empty())


    def test_out_of_range(self):
        vec = SparseVec(self.F, 4)

        with self.assertRaises(IndexOutOfRangeException):
            vec[4]

        with self.assertRaises(IndexError):
            vec[-1] = 1

        with self.assertRaises(IndexOutOfRangeException):
            vec.dot(SparseVec(self.F, 3))

        with self.assertRaises(IndexOutOfRangeException):
            vec.slice(2, 5)


    def test_dot_and_slice(self):
        F = self.F
        a = SparseVec.from_list(F, [1, 2, 0, 4])
        b = SparseVec.from_list(F, [5, 0, 7, 2])

        self.assertEqual(a.dot(b), F(13))
        self.assertEqual(ints(a.slice(1, 4)), [2, 0, 4])



class R1CSTestCases(TestCase):
    F = ZZ/ZZ(101)

    def test_layout(self):
        _, tmpl = compile(CUBIC, self.F)

        self.assertEqual(tmpl.witness, [One(), Var('x'), Out(), TmpVar(1), TmpVar(2), TmpVar(3), TmpVar(4)])
        self.assertEqual(tmpl.mid_beg, 3)
        self.assertEqual((tmpl.l, tmpl.m, tmpl.n), (2, 6, 5))


    def test_variables_in_order_of_appearance(self):
        _, tmpl = compile('(x / y) * y == 0', self.F)
        self.assertEqual(tmpl.witness[:4], [One(), Var('y'), Var('x'), Out()])


    def test_constraint_rows(self):
        # 1, x, out, t1, t2
        _, tmpl = compile('3 * x + 4 == 11', self.F)
        rows    = [(ints(con.ai), ints(con.bi), ints(con.ci)) for con in tmpl.constraints]

        self.assertEqual(rows, [
            ([3, 0, 0, 0, 0], [0, 1, 0, 0, 0], [0, 0, 0, 1, 0]),
            ([4, 0, 0, 1, 0], [1, 0, 0, 0, 0], [0, 0, 0, 0, 1]),
            ([0, 0, 0, 0, 1], [1, 0, 0, 0, 0], [0, 0, 1, 0, 0])
        ])


    def test_repeated_terms_accumulate(self):
        _, tmpl = compile('x + x == 4', self.F)
        self.assertEqual(ints(tmpl.constraints[0].ai), [0, 2, 0, 0])


    def test_validate(self):
        F       = self.F
        _, tmpl = compile(CUBIC, F)
        r1cs    = build_r1cs(tmpl, cubic_instance(F))

        r1cs.validate()
        self.assertTrue(r1cs.is_valid_assignment())
        self.assertEqual(ints(r1cs.witness), [1, 3, 35, 9, 27, 8, 35])


    def test_mutated_witness_fails(self):
        F        = self.F
        _, tmpl  = compile(CUBIC, F)
        instance = cubic_instance(F)
        instance[Var('x')] = F(4)

        r1cs = build_r1cs(tmpl, instance)
        self.assertFalse(r1cs.is_valid_assignment())

        with self.assertRaises(ConstraintException) as ctx:
            r1cs.validate()

        self.assertEqual(ctx.exception.index, 0)
        self.assertEqual((ctx.exception.a, ctx.exception.b, ctx.exception.c), (F(4), F(4), F(9)))


    def test_missing_witness(self):
        F        = self.F
        _, tmpl  = compile(CUBIC, F)
        instance = cubic_instance(F)
        del instance[TmpVar(2)]

        with self.assertRaisesRegex(WitnessException, 't2'):
            build_r1cs(tmpl, instance)


    def test_one_defaults_and_must_be_one(self):
        F        = self.F
        _, tmpl  = compile(CUBIC, F)
        instance = cubic_instance(F)

        del instance[One()]
        self.assertEqual(build_r1cs(tmpl, instance).witness[0], F(1))

        instance[One()] = F(2)
        with self.assertRaises(WitnessException):
            build_r1cs(tmpl, instance)


    def test_wires(self):
        F       = self.F
        _, tmpl = compile(CUBIC, F)
        wires   = Wires.from_r1cs(build_r1cs(tmpl, cubic_instance(F)))

        self.assertEqual((wires.l, wires.m, len(wires)), (2, 6, 7))
        self.assertEqual(ints(wires.statement()), [1, 3, 35])
        self.assertEqual(ints(wires.witness()), [9, 27, 8, 35])



class QAPTestCases(TestCase):
    F = ZZ/ZZ(101)

    def test_interpolation_matches_rows(self):
        F       = self.F
        _, tmpl = compile(CUBIC, F)
        qap     = QAPSystem.from_r1cs_template(F, tmpl)

        self.assertEqual((qap.l, qap.m, qap.n), (2, 6, 5))

        for k, con in enumerate(tmpl.constraints, 1):
            self.assertEqual(qap.t(F(k)), F(0))

            for i in range(len(tmpl.witness)):
                self.assertEqual(qap.vi[i](F(k)), con.ai[i])
                self.assertEqual(qap.wi[i](F(k)), con.bi[i])
                self.assertEqual(qap.yi[i](F(k)), con.ci[i])


    def test_agrees_with_r1cs(self):
        F       = self.F
        _, tmpl = compile(CUBIC, F)
        qap     = QAPSystem.from_r1cs_template(F, tmpl)

        valid = build_r1cs(tmpl, cubic_instance(F))
        self.assertTrue(qap.is_valid(valid.witness))
        self.assertEqual(qap.build_h(valid.witness) * qap.t, qap.build_p(valid.witness))

        for term, value in [(Var('x'), 4), (TmpVar(3), 7), (Out(), 36)]:
            instance       = cubic_instance(F)
            instance[term] = F(value)
            mutated        = build_r1cs(tmpl, instance)

            self.assertEqual(qap.is_valid(mutated.witness), mutated.is_valid_assignment())
            self.assertFalse(qap.is_valid(mutated.witness))

            with self.assertRaises(QAPException):
                qap.build_h(mutated.witness)


    def test_wrong_witness_size(self):
        F       = self.F
        _, tmpl = compile(CUBIC, F)
        qap     = QAPSystem.from_r1cs_template(F, tmpl)

        with self.assertRaises(QAPException):
            qap.build_p(SparseVec(F, 3))


    def test_domain_too_small(self):
        # 12 multiplications + the output gate need x = 1..13, but 13 == 0 in F13
        F       = ZZ/ZZ(13)
        _, tmpl = compile('x*x*x*x*x*x*x*x*x*x*x*x*x == 1', F)

        with self.assertRaises(QAPException):
            QAPSystem.from_r1cs_template(F, tmpl)



class Groth16TestCases(TestCase):
    def test_cubic_end_to_end(self):
        params  = bls6_6()
        F       = params.Fr
        circuit = Circuit.compile(CUBIC, params)

        instance = circuit.solve({'x': 3})
        self.assertEqual(instance, cubic_instance(F))

        r1cs = build_r1cs(circuit.template, instance)
        r1cs.validate()

        wires = circuit.wires(r1cs)
        crs   = setup(circuit.qap, params)
        proof = prove(crs, wires)

        self.assertTrue(verify(proof, crs, wires.statement()))


    def test_fixed_trapdoor(self):
        params  = bls6_6()
        F       = params.Fr
        circuit = Circuit.compile(CUBIC, params)
        wires   = circuit.wires(circuit.build_r1cs(cubic_instance(F)))

        st    = Trapdoor(F(2), F(3), F(5), F(7), F(11))
        crs   = CRS.generate(circuit.qap, params, st)
        proof = Groth16Proof.generate(crs, wires, r=F(4), s=F(6))

        self.assertEqual((crs.l, crs.m, crs.n), (2, 6, 5))
        self.assertEqual(len(crs.g1.uvw_stmt), 3)
        self.assertEqual(len(crs.g1.uvw_wit), 4)
        self.assertEqual(len(crs.g1.xt_by_delta), 4)
        self.assertTrue(proof.verify(crs, wires.statement()))

        # Same blinding through the module API, with a bare witness vector
        self.assertEqual(prove(crs, wires.sv, r=F(4), s=F(6)), proof)


    def test_statement_boundary(self):
        # t1 is unconstrained when x = y = 0, so both witnesses are valid
        params  = bls6_6()
        F       = params.Fr
        circuit = Circuit.compile('(x / y) * y == 0', params)

        with self.assertRaises(WitnessException):
            circuit.solve({'x': 0, 'y': 0})

        wires = []
        for t1 in (4, 7):
            instance = {One(): F(1), Var('x'): F(0), Var('y'): F(0), TmpVar(1): F(t1), TmpVar(2): F(0), Out(): F(0)}
            r1cs     = circuit.build_r1cs(instance)
            r1cs.validate()
            wires.append(circuit.wires(r1cs))

        w_a, w_b = wires
        self.assertEqual(w_a.statement(), w_b.statement())
        self.assertNotEqual(w_a.witness(), w_b.witness())

        crs = setup(circuit.qap, params)
        self.assertTrue(verify(prove(crs, w_a), crs, w_b.statement()))
        self.assertTrue(verify(prove(crs, w_b), crs, w_a.statement()))


    def test_trapdoor_is_single_use(self):
        params  = bls6_6()
        circuit = Circuit.compile(CUBIC, params)
        st      = Trapdoor.generate(params, circuit.qap)

        self.assertFalse(st.consumed)
        CRS.generate(circuit.qap, params, st)
        self.assertTrue(st.consumed)

        with self.assertRaises(TrapdoorConsumedException):
            CRS.generate(circuit.qap, params, st)


    def test_trapdoor_root_of_t(self):
        params  = bls6_6()
        F       = params.Fr
        circuit = Circuit.compile(CUBIC, params)

        st      = Trapdoor(F(2), F(3), F(5), F(7), F(3))

        with self.assertRaises(SetupException):
            CRS.generate(circuit.qap, params, st)

        self.assertFalse(st.consumed)


    def test_setup_at_curve_limit(self):
        # 12 constraints: t(x) vanishes on every non-zero scalar of F13
        params  = bls6_6()
        circuit = Circuit.compile(LIMIT_12, params)
        self.assertEqual(circuit.qap.n, 12)

        with self.assertRaises(SetupException):
            Trapdoor.generate(params, circuit.qap)

        with self.assertRaises(SetupException):
            setup(circuit.qap, params)


    def test_setup_below_curve_limit(self):
        # 11 constraints leave x = 12 as the only choice
        params  = bls6_6()
        circuit = Circuit.compile(LIMIT_11, params)
        wires   = circuit.wires(circuit.build_r1cs(circuit.solve({'x': 1})))
        crs     = setup(circuit.qap, params)

        self.assertEqual(crs.n, 11)
        self.assertTrue(verify(prove(crs, wires), crs, wires.statement()))


    def test_random_scalars_are_non_zero(self):
        params = bls6_6()
        for _ in range(50):
            self.assertTrue(0 < int(params.random_scalar()) < params.r)


    def test_toy_curve_has_no_byte_encoding(self):
        params  = bls6_6()
        circuit = Circuit.compile(CUBIC, params)
        wires   = circuit.wires(circuit.build_r1cs(cubic_instance(params.Fr)))
        crs     = setup(circuit.qap, params)

        with self.assertRaises(SerializationException):
            prove(crs, wires).to_bytes(params)


    def test_prover_rejects_wrong_size(self):
        params  = bls6_6()
        circuit = Circuit.compile(CUBIC, params)
        crs     = setup(circuit.qap, params)

        with self.assertRaises(ProverException):
            prove(crs, SparseVec(params.Fr, 3))


    def test_verify_wrong_statement_length(self):
        params  = bls6_6()
        F       = params.Fr
        circuit = Circuit.compile(CUBIC, params)
        wires   = circuit.wires(circuit.build_r1cs(cubic_instance(F)))
        crs     = setup(circuit.qap, params)
        proof   = prove(crs, wires)

        with self.assertLogs('eqsnark.groth16', level='WARNING'):
            self.assertFalse(verify(proof, crs, SparseVec.from_list(F, [1, 3])))


    def test_solve_errors(self):
        circuit = Circuit.compile(CUBIC, bls6_6())

        with self.assertRaises(WitnessException):
            circuit.solve({})

        with self.assertRaises(WitnessException):
            circuit.solve({'x': 4})


    def test_get_curve(self):
        self.assertIs(get_curve('bls6_6'), bls6_6())

        with self.assertRaises(ConfigException):
            get_curve('secp256k1')



class BN128TestCases(TestCase):
    @classmethod
    def setUpClass(cls):
        cls.params  = bn128()
        cls.F       = cls.params.Fr
        cls.circuit = Circuit.compile('x * x == 9', cls.params)
        cls.wires   = cls.circuit.wires(cls.circuit.build_r1cs(cls.circuit.solve({'x': 3})))
        cls.crs     = setup(cls.circuit.qap, cls.params)
        cls.proof   = prove(cls.crs, cls.wires)


    def statement(self, x):
        return SparseVec.from_list(self.F, [1, x, 9])


    def test_valid_proof(self):
        self.assertEqual(ints(self.wires.statement()), [1, 3, 9])
        self.assertTrue(verify(self.proof, self.crs, self.wires.statement()))


    def test_mutated_statement_rejected(self):
        self.assertFalse(verify(self.proof, self.crs, self.statement(4)))


    def test_other_root_needs_its_own_proof(self):
        self.assertFalse(verify(self.proof, self.crs, self.statement(-3)))

        wires = self.circuit.wires(self.circuit.build_r1cs(self.circuit.solve({'x': -3})))
        self.assertTrue(verify(prove(self.crs, wires), self.crs, self.statement(-3)))


    def test_tampered_proof_rejected(self):
        proof = Groth16Proof(self.proof.A, self.proof.B, self.proof.C + self.params.g1)
        self.assertFalse(verify(proof, self.crs, self.wires.statement()))


    def test_invalid_witness_cannot_be_proven(self):
        F        = self.F
        instance = self.circuit.solve({'x': 3})
        instance[TmpVar(1)] = F(10)
        r1cs = self.circuit.build_r1cs(instance)

        with self.assertRaises(ConstraintException):
            r1cs.validate()

        with self.assertRaises(QAPException):
            prove(self.crs, self.circuit.wires(r1cs))


    def test_proofs_are_randomized(self):
        self.assertNotEqual(prove(self.crs, self.wires), prove(self.crs, self.wires))


    def test_proof_bytes(self):
        data = self.proof.to_bytes(self.params)
        self.assertEqual(len(data), 256)

        # A.x leads, 32-byte big-endian
        x, _ = optimized_curve.normalize(self.proof.A.pt)
        self.assertEqual(int.from_bytes(data[:32], 'big'), x.n)

        proof = Groth16Proof.from_bytes(data, self.params)
        self.assertEqual(proof, self.proof)
        self.assertTrue(verify(proof, self.crs, self.wires.statement()))


    def test_point_encoding(self):
        params = self.params

        self.assertEqual(BN128Codec.encode(params.zero1), b'\x00' * 64)
        self.assertEqual(BN128Codec.encode(params.zero2), b'\x00' * 128)
        self.assertEqual(BN128Codec.decode(b'\x00' * 128, g2=True), params.zero2)

        g2 = params.g2*5
        self.assertEqual(BN128Codec.decode(BN128Codec.encode(g2), g2=True), g2)


    def test_bad_proof_bytes(self):
        data = self.proof.to_bytes(self.params)

        with self.assertRaises(SerializationException):
            Groth16Proof.from_bytes(data[:-1], self.params)

        # A.y off by one bit
        bad      = bytearray(data)
        bad[63] ^= 1
        with self.assertRaises(SerializationException):
            Groth16Proof.from_bytes(bytes(bad), self.params)

        # A.x = p is not reduced
        bad = optimized_bn128_FQ.field_modulus.to_bytes(32, 'big') + data[32:]
        with self.assertRaises(SerializationException):
            Groth16Proof.from_bytes(bad, self.params)



class CLITestCases(TestCase):
    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))

        return code, out.getvalue(), err.getvalue()


    def test_accepts(self):
        code, out, _ = self.run_cli(CUBIC, 'x=3')

        self.assertEqual(code, 0)
        self.assertIn('t1 = x * x', out)
        self.assertIn('Verified: True', out)


    def test_user_errors(self):
        for argv in [('x + == 3', 'x=1'), (CUBIC, 'x=4'), (CUBIC, 'y=3'), (LIMIT_12, 'x=1')]:
            code, _, err = self.run_cli(*argv)
            self.assertEqual(code, 2, argv)
            self.assertIn('error:', err)


    def test_bn128_prints_proof_bytes(self):
        code, out, _ = self.run_cli('x * x == 9', 'x=3', '--curve', 'bn128')

        self.assertEqual(code, 0)
        line = [l for l in out.splitlines() if l.startswith('Proof bytes:')][0]
        self.assertEqual(len(line.split()[-1]), 512)


    def test_bad_assignment(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli(CUBIC, 'x')

        self.assertEqual(ctx.exception.code, 2)
