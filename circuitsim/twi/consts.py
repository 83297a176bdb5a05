"""TWI (I2C) enumerations and AVR status codes."""

from enum import IntEnum


class TwiMode(IntEnum):
    OFF = 0
    MASTER = 1
    SLAVE = 2


class I2CState(IntEnum):
    """Bus phase tracked by the state machine."""

    IDLE = 0
    START = 1
    STOP = 2
    READ = 3
    WRITE = 4
    ACK = 5
    ENDACK = 6
    READACK = 7


class TwiState(IntEnum):
    """TWSR status codes (prescaler bits masked out)."""

    # Master
    START = 0x08
    REP_START = 0x10
    ARB_LOST = 0x38

    # Master transmitter
    MTX_ADR_ACK = 0x18
    MTX_ADR_NACK = 0x20
    MTX_DATA_ACK = 0x28
    MTX_DATA_NACK = 0x30

    # Master receiver
    MRX_ADR_ACK = 0x40
    MRX_ADR_NACK = 0x48
    MRX_DATA_ACK = 0x50
    MRX_DATA_NACK = 0x58

    # Slave transmitter
    STX_ADR_ACK = 0xA8
    STX_ADR_ACK_M_ARB_LOST = 0xB0
    STX_DATA_ACK = 0xB8
    STX_DATA_NACK = 0xC0
    STX_DATA_ACK_LAST_BYTE = 0xC8

    # Slave receiver
    SRX_ADR_ACK = 0x60
    SRX_ADR_ACK_M_ARB_LOST = 0x68
    SRX_GEN_ACK = 0x70
    SRX_GEN_ACK_M_ARB_LOST = 0x78
    SRX_ADR_DATA_ACK = 0x80
    SRX_ADR_DATA_NACK = 0x88
    SRX_GEN_DATA_ACK = 0x90
    SRX_GEN_DATA_NACK = 0x98
    SRX_STOP_RESTART = 0xA0

    # Misc
    NO_STATE = 0xF8
    BUS_ERROR = 0x00


class TwiConsts:
    """TWCR bits and interrupt vector."""

    TWINT = 1 << 7
    """Set by hardware on every status change, cleared by the next command."""
    TWEN = 1 << 2

    TWI_VECTOR = 0
    ADDR_BITS = 7
