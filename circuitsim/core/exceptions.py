"""Custom exceptions used throughout the circuitsim package."""

from typing import Any, Optional


class SimulatorError(Exception):
    """Base exception for all simulator errors.

    All circuitsim-specific exceptions inherit from this class, so callers
    can catch every kernel error with a single except clause.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """

        super().__init__(message)
        self.details = details or {}


class ConfigurationError(SimulatorError):
    """Raised when there's an error in configuration.

    This includes:
    - Invalid configuration value
    - Missing required configuration
    - Configuration validation failures
    """

    def __init__(
        self,
        config_key: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize configuration error.

        Args:
            config_key: The configuration key that caused the error
            message: Description of what's wrong. If omitted, config_key is
                treated as the message and the key defaults to "configuration".
            details: Additional context
        """
        if message is None:
            message = config_key or "Invalid configuration"
            config_key = "configuration"
        if config_key is None:
            config_key = "configuration"

        full_message = f"Configuration error for '{config_key}': {message}"
        super().__init__(message=full_message, details=details)
        self.config_key = config_key


class CircuitError(SimulatorError):
    """Raised when the connectivity graph cannot be turned into a network.

    Examples:
    - A pin wired into a net whose owner was never added to the circuit
    - Connecting a pin to itself or an empty connection
    - Building a circuit while the simulation is running

    These are caught at build time, never while stepping.
    """

    def __init__(
        self,
        message: str,
        pin_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        if pin_id is not None:
            details = details or {}
            details["pin"] = pin_id

        super().__init__(message=message, details=details)
        self.pin_id = pin_id


class SimulationStateError(SimulatorError):
    """Raised when an operation is not valid in the current simulator state.

    Examples:
    - Stepping a simulator that was never started
    - Resuming a simulator that is not paused
    """

    def __init__(
        self,
        operation: str,
        state: str,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"Cannot {operation} while simulator is {state}"
        super().__init__(message=message, details=details)
        self.operation = operation
        self.state = state
