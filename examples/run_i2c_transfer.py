import argparse
import logging
import sys
from pathlib import Path

# Ensure local repo package is used even if another "circuitsim" is on PYTHONPATH.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from circuitsim import Circuit, Simulator
from circuitsim.elements import Resistor, VoltageSource
from circuitsim.twi import TwiMode, TwiModule, TwiState


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write bytes from a TWI master to a slave.")
    parser.add_argument("data", nargs="*", type=lambda s: int(s, 0), default=[0x12, 0x34])
    parser.add_argument("--address", type=lambda s: int(s, 0), default=0x50)
    parser.add_argument("--slave-address", type=lambda s: int(s, 0), default=None)
    parser.add_argument("--freq-khz", type=float, default=100.0)
    parser.add_argument("--pull-up", type=float, default=4700.0, help="Pull-up ohms")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args()


def wait_twint(sim: Simulator, twi: TwiModule, timeout_ps: int) -> TwiState:
    deadline = sim.circ_time + timeout_ps
    while not twi.twint:
        if sim.circ_time >= deadline:
            raise TimeoutError(f"{twi.name}: no status within {timeout_ps} ps")
        sim.run_step()
    return twi.twi_state


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    sim = Simulator()
    vcc = VoltageSource("vcc", sim, voltage=5.0)
    r_sda = Resistor("r-sda", sim, args.pull_up)
    r_scl = Resistor("r-scl", sim, args.pull_up)
    master = TwiModule("master", sim, mode=TwiMode.MASTER, freq_khz=args.freq_khz)
    slave_address = args.address if args.slave_address is None else args.slave_address
    slave = TwiModule("slave", sim, mode=TwiMode.SLAVE, address=slave_address)

    circuit = Circuit(sim)
    circuit.add(vcc, r_sda, r_scl, master, slave)
    circuit.connect(vcc.pin, r_sda.pin_a, r_scl.pin_a)
    circuit.connect(r_sda.pin_b, master.sda, slave.sda)
    circuit.connect(r_scl.pin_b, master.scl, slave.scl)
    circuit.build()
    sim.start()
    sim.run_for(2 * master.period)

    timeout = 30 * master.period

    master.master_start()
    logging.info("START      -> 0x%02X", wait_twint(sim, master, timeout))

    master.master_write(args.address << 1, is_addr=True)
    status = wait_twint(sim, master, timeout)
    logging.info("SLA+W 0x%02X -> 0x%02X", args.address, status)

    if status == TwiState.MTX_ADR_ACK:
        for byte in args.data:
            master.master_write(byte & 0xFF)
            status = wait_twint(sim, master, timeout)
            logging.info(
                "DATA  0x%02X -> 0x%02X (slave 0x%02X, TWDR 0x%02X)",
                byte,
                status,
                slave.twi_state,
                slave.data,
            )
            if status != TwiState.MTX_DATA_ACK:
                break

    master.master_stop()
    logging.info("STOP       -> 0x%02X", wait_twint(sim, master, timeout))

    print(f"master registers: {master.snapshot()}")
    print(f"slave registers:  {slave.snapshot()}")
    return 0 if status == TwiState.MTX_DATA_ACK else 1


if __name__ == "__main__":
    sys.exit(main())
