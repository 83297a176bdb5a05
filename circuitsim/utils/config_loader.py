"""Helpers for loading and validating simulation kernel configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Literal
import threading

import yaml  # type: ignore[import-untyped]

from circuitsim.core.exceptions import ConfigurationError

ParityMode = Literal["none", "even", "odd"]


@dataclass(frozen=True)
class SimulationConfig:
    step_size_ps: int = 1_000_000
    steps_per_frame: int = 1_000
    min_admittance: float = 1e-30
    volt_tolerance: float = 1e-6
    max_solver_iterations: int = 100


@dataclass(frozen=True)
class IoPinConfig:
    input_high_v: float = 2.5
    input_low_v: float = 2.5
    output_high_v: float = 5.0
    output_low_v: float = 0.0
    input_imp: float = 1e14
    output_imp: float = 40.0
    open_imp: float = 1e28


@dataclass(frozen=True)
class UsartConfig:
    baud_rate: int = 9600
    data_bits: int = 8
    parity: ParityMode = "none"
    stop_bits: int = 1


@dataclass(frozen=True)
class TwiConfig:
    freq_khz: float = 100.0
    address: int = 0
    general_call: bool = False


@dataclass(frozen=True)
class KernelConfig:
    simulation: SimulationConfig
    iopin: IoPinConfig
    usart: UsartConfig
    twi: TwiConfig


# Configuration cache with thread safety
_LOADER_CACHE: dict[str, KernelConfig] = {}
_CACHE_LOCK = threading.RLock()

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"


def _get_config_path(path: Optional[str] = None) -> str:
    if path is None:
        path = str(_DEFAULT_CONFIG_PATH)

    return path


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except Exception as exc:
        raise ConfigurationError(f"Failed to parse config: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("top level of config must be a mapping")
    return raw


def _build_simulation_cfg(raw: dict[str, Any]) -> SimulationConfig:
    return SimulationConfig(
        step_size_ps=int(raw.get("step_size_ps", SimulationConfig.step_size_ps)),
        steps_per_frame=int(raw.get("steps_per_frame", SimulationConfig.steps_per_frame)),
        min_admittance=float(raw.get("min_admittance", SimulationConfig.min_admittance)),
        volt_tolerance=float(raw.get("volt_tolerance", SimulationConfig.volt_tolerance)),
        max_solver_iterations=int(
            raw.get("max_solver_iterations", SimulationConfig.max_solver_iterations)
        ),
    )


def _build_iopin_cfg(raw: dict[str, Any]) -> IoPinConfig:
    return IoPinConfig(**{k: float(v) for k, v in raw.items()})


def _build_usart_cfg(raw: dict[str, Any]) -> UsartConfig:
    parity = str(raw.get("parity", UsartConfig.parity)).lower()
    return UsartConfig(
        baud_rate=int(raw.get("baud_rate", UsartConfig.baud_rate)),
        data_bits=int(raw.get("data_bits", UsartConfig.data_bits)),
        parity=parity,  # type: ignore[arg-type]
        stop_bits=int(raw.get("stop_bits", UsartConfig.stop_bits)),
    )


def _build_twi_cfg(raw: dict[str, Any]) -> TwiConfig:
    return TwiConfig(
        freq_khz=float(raw.get("freq_khz", TwiConfig.freq_khz)),
        address=int(raw.get("address", TwiConfig.address)),
        general_call=bool(raw.get("general_call", TwiConfig.general_call)),
    )


def _parse_kernel_cfg_from_dict(raw: dict[str, Any]) -> KernelConfig:
    try:
        cfg = KernelConfig(
            simulation=_build_simulation_cfg(raw.get("simulation") or {}),
            iopin=_build_iopin_cfg(raw.get("iopin") or {}),
            usart=_build_usart_cfg(raw.get("usart") or {}),
            twi=_build_twi_cfg(raw.get("twi") or {}),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config schema: {exc}") from exc

    _validate_simulation_config(cfg.simulation)
    _validate_iopin_config(cfg.iopin)
    _validate_usart_config(cfg.usart)
    _validate_twi_config(cfg.twi)
    return cfg


def _validate_simulation_config(sim: SimulationConfig) -> None:
    """Basic sanity checks so a bad config fails before the simulation starts."""
    if sim.step_size_ps <= 0:
        raise ConfigurationError("simulation.step_size_ps", "must be positive")
    if sim.steps_per_frame <= 0:
        raise ConfigurationError("simulation.steps_per_frame", "must be positive")
    if sim.min_admittance <= 0:
        raise ConfigurationError("simulation.min_admittance", "must be positive")
    if sim.volt_tolerance < 0:
        raise ConfigurationError("simulation.volt_tolerance", "must be >= 0")
    if sim.max_solver_iterations <= 0:
        raise ConfigurationError("simulation.max_solver_iterations", "must be positive")


def _validate_iopin_config(pin: IoPinConfig) -> None:
    if pin.input_low_v > pin.input_high_v:
        raise ConfigurationError("iopin.input_low_v", "must not exceed input_high_v")
    for key in ("input_imp", "output_imp", "open_imp"):
        if getattr(pin, key) <= 0:
            raise ConfigurationError(f"iopin.{key}", "impedance must be positive")


def _validate_usart_config(usart: UsartConfig) -> None:
    if usart.baud_rate <= 0:
        raise ConfigurationError("usart.baud_rate", "must be positive")
    if not 5 <= usart.data_bits <= 9:
        raise ConfigurationError("usart.data_bits", "must be between 5 and 9")
    if usart.parity not in ("none", "even", "odd"):
        raise ConfigurationError("usart.parity", "must be 'none', 'even' or 'odd'")
    if usart.stop_bits not in (1, 2):
        raise ConfigurationError("usart.stop_bits", "must be 1 or 2")


def _validate_twi_config(twi: TwiConfig) -> None:
    if twi.freq_khz <= 0:
        raise ConfigurationError("twi.freq_khz", "must be positive")
    if not 0 <= twi.address <= 0x7F:
        raise ConfigurationError("twi.address", "must be a 7-bit address")


def load_config(path: Optional[str] = None) -> KernelConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Optional path to YAML config. If None, load the bundled
            circuitsim/config.yaml. Missing sections fall back to defaults.

    Returns:
        KernelConfig instance

    Raises:
        ConfigurationError: on parse or validation errors
    """

    p = Path(_get_config_path(path=path))
    raw = _load_yaml_file(p)

    return _parse_kernel_cfg_from_dict(raw=raw)


def get_config(path: Optional[str] = None) -> KernelConfig:
    """Return the loaded config for path, loading and caching if necessary.

    Configs are cached per resolved path; repeated calls return the cached
    instance without re-reading the YAML file.

    THREAD SAFETY: This function is thread-safe.
    """
    key = _get_config_path(path=path)
    with _CACHE_LOCK:
        if key not in _LOADER_CACHE:
            _LOADER_CACHE[key] = load_config(path=key)
        return _LOADER_CACHE[key]


def clear_config_cache() -> None:
    """Clear all cached configurations.

    All subsequent calls to get_config() will reload from disk.
    """
    with _CACHE_LOCK:
        _LOADER_CACHE.clear()
