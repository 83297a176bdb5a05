import argparse
import logging
import sys
from pathlib import Path

# Ensure local repo package is used even if another "circuitsim" is on PYTHONPATH.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from circuitsim import Circuit, Simulator
from circuitsim.usart import UsartModule


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send bytes through a wired UART loopback.")
    parser.add_argument(
        "message",
        nargs="?",
        default="hello",
        help="Text to send (one frame per character)",
    )
    parser.add_argument("--baud", type=int, default=9600, help="Baud rate")
    parser.add_argument("--data-bits", type=int, default=8, choices=range(5, 10))
    parser.add_argument("--parity", default="none", choices=["none", "even", "odd"])
    parser.add_argument("--stop-bits", type=int, default=1, choices=[1, 2])
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    sim = Simulator()
    uart = UsartModule(
        "uart0",
        sim,
        baud_rate=args.baud,
        data_bits=args.data_bits,
        parity=args.parity,
        stop_bits=args.stop_bits,
    )
    circuit = Circuit(sim)
    circuit.add(uart)
    circuit.connect(uart.tx_pin, uart.rx_pin)
    circuit.build()
    sim.start()

    received = []
    for char in args.message.encode("ascii"):
        while not uart.write_byte(char):
            sim.run_step()
        sim.run_for(uart.frame_time)
        while uart.data_available:
            received.append(uart.read_byte())
            if uart.parity_error or uart.frame_error:
                logging.warning("Error on byte 0x%02X", received[-1])

    sim.run_for(2 * uart.frame_time)
    while uart.data_available:
        received.append(uart.read_byte())

    sent = list(args.message.encode("ascii"))
    print(f"sent     {' '.join(f'{b:02X}' for b in sent)}")
    print(f"received {' '.join(f'{b:02X}' for b in received)}")
    print(f"time     {sim.circ_time / 1e9:.3f} ms")
    return 0 if received == [b & ((1 << args.data_bits) - 1) for b in sent] else 1


if __name__ == "__main__":
    sys.exit(main())
