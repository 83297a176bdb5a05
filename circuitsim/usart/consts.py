"""USART enumerations, frame tags and status register bits."""

from enum import IntEnum


class UartState(IntEnum):
    STOPPED = 0
    IDLE = 1
    TRANSMIT = 2
    TXEND = 3
    RECEIVE = 4
    RXEND = 5


class Parity(IntEnum):
    NONE = 0
    EVEN = 1
    ODD = 2

    @classmethod
    def from_name(cls, name: str) -> "Parity":
        return cls[name.upper()]


class UsartConsts:
    """Bit definitions shared by the receiver, transmitter and module."""

    # Error tags or'ed into a received frame above the data/parity/stop bits
    PARITY_ERROR = 1 << 12
    FRAME_ERROR = 1 << 13

    # Status register (UCSRA)
    RXC = 1 << 7
    """Receive complete: unread data in the receive FIFO."""
    TXC = 1 << 6
    """Transmit complete: frame shifted out and nothing buffered."""
    UDRE = 1 << 5
    """Data register empty: transmit buffer can take a byte."""
    FE = 1 << 4
    """Frame error on the frame last read."""
    DOR = 1 << 3
    """Data overrun: a frame was dropped because the FIFO was full."""
    UPE = 1 << 2
    """Parity error on the frame last read."""

    # Control register (UCSRB)
    RXEN = 1 << 4
    TXEN = 1 << 3
    RXB8 = 1 << 1
    TXB8 = 1 << 0

    # Interrupt vectors raised by UsartModule
    RX_VECTOR = 0
    UDRE_VECTOR = 1
    TX_VECTOR = 2

    FIFO_DEPTH = 2
    IN_BUFFER_LIMIT = 1000
