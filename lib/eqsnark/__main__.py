from eqsnark.circuit import Circuit
from eqsnark.curves import CURVES, get_curve
from eqsnark.exceptions import ParseException, WitnessException, ConstraintException, QAPException, SetupException
from eqsnark.groth16 import setup, prove, verify
import argparse
import logging
import sys


def parse_assignment(text: str):
    name, sep, value = text.partition('=')
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")

    try:
        return name, int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"value of '{name}' is not an integer: '{value}'")


def eprint(*args):
    print(*args, file=sys.stderr)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='eqsnark',
                                     description="Prove knowledge of a solution to an arithmetic equation with Groth16")
    parser.add_argument("equation", help="Equation to prove, e.g. '(x*x*x) + x + 5 == 35'")
    parser.add_argument("inputs", nargs='+', type=parse_assignment, metavar="NAME=VALUE",
                        help="Value of each variable in the equation")
    parser.add_argument("--curve", choices=sorted(CURVES), default='bls6_6',
                        help="Pairing curve preset (default: bls6_6)")
    parser.add_argument("-v", "--verbose", action='store_true', help="Log pipeline progress")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    params = get_curve(args.curve)

    try:
        circuit  = Circuit.compile(args.equation, params)
        instance = circuit.solve(dict(args.inputs))
        r1cs     = circuit.build_r1cs(instance)
        r1cs.validate()
        crs      = setup(circuit.qap, params)
    except (ParseException, WitnessException, ConstraintException, QAPException, SetupException) as e:
        eprint(f"error: {e}")
        return 2

    print("Gates:")
    for gate in circuit.gates:
        print(f"  {gate!r}")

    wires     = circuit.wires(r1cs)
    statement = wires.statement()
    print("Statement:", [int(v) for v in statement.to_list()])

    proof = prove(crs, wires)
    print("Proof:")
    print(f"  A = {proof.A}")
    print(f"  B = {proof.B}")
    print(f"  C = {proof.C}")

    if params.codec is not None:
        print("Proof bytes:", proof.to_bytes(params).hex())

    accepted = verify(proof, crs, statement)
    print("Verified:", accepted)

    return 0 if accepted else 1


if __name__ == "__main__":
    sys.exit(main())
