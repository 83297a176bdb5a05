"""Serial (USART) peripheral: receiver, transmitter and module."""

from circuitsim.usart.consts import Parity, UartState, UsartConsts
from circuitsim.usart.uart_rx import UartRx
from circuitsim.usart.uart_tr import UartTR
from circuitsim.usart.uart_tx import UartTx
from circuitsim.usart.usart_module import UsartModule

__all__ = [
    "Parity",
    "UartState",
    "UsartConsts",
    "UartTR",
    "UartRx",
    "UartTx",
    "UsartModule",
]
