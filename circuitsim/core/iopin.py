"""Digital I/O pin bridging logic levels and node voltages.

An IoPin presents its node with a Thevenin equivalent derived from two
admittances: one towards output_high_v ("vdd") and one towards ground
("gnd"). Each pin mode picks that pair:

  SOURCE          vdd = 1/CERO_DOUB      gnd = CERO_DOUB
  INPUT           vdd = 0                gnd = 1/input_imp
  OUTPUT          vdd = 1/output_imp     gnd = CERO_DOUB
  OPEN_COLLECTOR  vdd = 0                gnd = 1/output_imp (low)
                                         gnd = 1/open_imp   (released)

External pull-up / pull-down admittances are added on top. The commanded
output voltage lives in a shadow node owned by the pin, so the shared node
only ever sees the stamped pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.enode import ENode
from circuitsim.core.epin import EPin
from circuitsim.interfaces.pin_enums import PinMode
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class IoPin(EPin, BaseElement):
    """Digital pin with mode, hysteresis, inversion and tri-state."""

    def __init__(
        self,
        pin_id: str,
        sim: "Simulator",
        owner: object | None = None,
        mode: PinMode = PinMode.INPUT,
    ):
        EPin.__init__(self, pin_id, owner)
        BaseElement.__init__(self, pin_id, sim)

        cfg = sim.config.iopin
        self._shadow = ENode(f"{pin_id}-shadow")

        self._out_state = False
        self._inp_state = False
        self._state_z = False
        self._inverted = False

        self._inp_high_v = cfg.input_high_v
        self._inp_low_v = cfg.input_low_v
        self._out_high_v = cfg.output_high_v
        self._out_low_v = cfg.output_low_v
        self._out_volt = 0.0

        self._vdd_admit = 0.0
        self._gnd_admit = ConstUtils.CERO_DOUB
        self._vdd_adm_ex = 0.0
        self._gnd_adm_ex = 0.0

        self._input_imp = cfg.input_imp
        self._open_imp = cfg.open_imp
        self._output_imp = cfg.output_imp
        self._imp = ConstUtils.HIGH_IMP

        self._out_ctrl = False
        self._dir_ctrl = False
        self._old_pin_mode = PinMode.UNDEFINED

        self._pin_mode = PinMode.UNDEFINED
        self.set_pin_mode(mode)

    # ==========================================================
    # Element lifecycle
    # ==========================================================

    @property
    def pins(self) -> list[EPin]:
        return [self]

    def initialize(self) -> None:
        self._out_ctrl = False
        self._dir_ctrl = False
        self._inp_state = False
        self._out_state = False

        # Re-apply the current mode so the stamped pair matches the reset state
        mode = self._pin_mode
        self._pin_mode = PinMode.UNDEFINED
        self.set_pin_mode(mode)
        if self._state_z:
            self.set_state_z(True)

    def stamp(self) -> None:
        self._stamp_all()

    def _stamp_all(self) -> None:
        self.stamp_admittance(1.0 / self._imp)
        self._stamp_output()

    def _stamp_output(self) -> None:
        self._shadow.set_volt(self._out_volt)
        self.stamp_current(self._out_volt / self._imp)

    # ==========================================================
    # Mode handling
    # ==========================================================

    @property
    def pin_mode(self) -> PinMode:
        return self._pin_mode

    def set_pin_mode(self, mode: PinMode) -> None:
        if self._pin_mode == mode:
            return
        self._pin_mode = mode

        if mode == PinMode.SOURCE:
            self._vdd_admit = 1.0 / ConstUtils.CERO_DOUB
            self._gnd_admit = ConstUtils.CERO_DOUB
        elif mode == PinMode.INPUT:
            self._vdd_admit = 0.0
            self._gnd_admit = 1.0 / self._input_imp
        elif mode == PinMode.OUTPUT:
            self._vdd_admit = 1.0 / self._output_imp
            self._gnd_admit = ConstUtils.CERO_DOUB
        elif mode == PinMode.OPEN_COLLECTOR:
            self._vdd_admit = 0.0
        elif not self._state_z:
            # UNDEFINED presents nothing to the node
            self._out_volt = 0.0
            self._set_imp(ConstUtils.OPEN_IMP)
            return

        # While tri-stated only the admittance pair is recorded
        if self._state_z or mode == PinMode.UNDEFINED:
            return

        self._updt_state()
        if mode in (PinMode.OUTPUT, PinMode.OPEN_COLLECTOR):
            self.set_out_state(self._out_state)

    def _updt_state(self) -> None:
        vdd_admit = self._vdd_admit + self._vdd_adm_ex
        gnd_admit = self._gnd_admit + self._gnd_adm_ex
        rth = 1.0 / (vdd_admit + gnd_admit)

        self._out_volt = self._out_high_v * vdd_admit * rth
        self._set_imp(rth)

    def _set_imp(self, imp: float) -> None:
        self._imp = imp
        self._stamp_all()

    def control_pin(self, out_ctrl: bool, dir_ctrl: bool) -> None:
        """Let a peripheral take (or release) control of this pin.

        Taking direction control remembers the current mode; releasing it
        restores that mode.
        """
        self._out_ctrl = out_ctrl

        if dir_ctrl and not self._dir_ctrl:
            self._old_pin_mode = self._pin_mode
        elif not dir_ctrl and self._dir_ctrl:
            self.set_pin_mode(self._old_pin_mode)
        self._dir_ctrl = dir_ctrl

    @property
    def out_ctrl(self) -> bool:
        return self._out_ctrl

    @property
    def dir_ctrl(self) -> bool:
        return self._dir_ctrl

    # ==========================================================
    # Logic levels
    # ==========================================================

    def get_volt(self) -> float:
        if not self.is_connected:
            return self._shadow.volt
        return super().get_volt()

    def get_inp_state(self) -> bool:
        """Schmitt-trigger read of the node voltage."""
        volt = self.get_volt()

        if volt > self._inp_high_v:
            self._inp_state = True
        elif volt < self._inp_low_v:
            self._inp_state = False

        return not self._inp_state if self._inverted else self._inp_state

    @property
    def out_state(self) -> bool:
        return self._out_state

    def set_out_state(self, out: bool, stamp: bool = True) -> None:
        """Drive the pin high or low (ignored while tri-stated)."""
        self._out_state = out
        if self._inverted:
            out = not out

        if self._state_z:
            return

        if self._pin_mode == PinMode.OPEN_COLLECTOR:
            self._gnd_admit = 1.0 / self._open_imp if out else 1.0 / self._output_imp
            if stamp:
                self._updt_state()
        else:
            self._out_volt = self._out_high_v if out else self._out_low_v
            if stamp:
                self._stamp_output()

    @property
    def state_z(self) -> bool:
        return self._state_z

    def set_state_z(self, z: bool) -> None:
        self._state_z = z
        if z:
            self._out_volt = self._out_low_v
            self._set_imp(self._open_imp)
        else:
            mode = self._pin_mode
            self._pin_mode = PinMode.UNDEFINED
            self.set_pin_mode(mode)

    @property
    def inverted(self) -> bool:
        return self._inverted

    def set_inverted(self, inverted: bool) -> None:
        if inverted == self._inverted:
            return
        self._inverted = inverted

        if self._pin_mode in (PinMode.OUTPUT, PinMode.OPEN_COLLECTOR):
            self.set_out_state(self._out_state)

    # ==========================================================
    # Electrical parameters
    # ==========================================================

    @property
    def out_volt(self) -> float:
        """Commanded output voltage held by the shadow node."""
        return self._shadow.volt

    @property
    def impedance(self) -> float:
        return self._imp

    def set_input_high_v(self, volt: float) -> None:
        self._inp_high_v = volt

    def set_input_low_v(self, volt: float) -> None:
        self._inp_low_v = volt

    def set_out_high_v(self, volt: float) -> None:
        self._out_high_v = volt
        self._refresh_output()

    def set_out_low_v(self, volt: float) -> None:
        self._out_low_v = volt
        self._refresh_output()

    def set_input_imp(self, imp: float) -> None:
        self._input_imp = imp
        if self._pin_mode == PinMode.INPUT:
            self._gnd_admit = 1.0 / imp
            if not self._state_z:
                self._updt_state()

    def set_output_imp(self, imp: float) -> None:
        self._output_imp = imp
        if self._pin_mode == PinMode.OUTPUT:
            self._vdd_admit = 1.0 / imp
            if not self._state_z:
                self._updt_state()
                self.set_out_state(self._out_state)

    def set_pull_up(self, admit: float) -> None:
        """Add an admittance towards output_high_v (0 removes it)."""
        self._vdd_adm_ex = admit
        self._refresh_output()

    def set_pull_down(self, admit: float) -> None:
        """Add an admittance towards ground (0 removes it)."""
        self._gnd_adm_ex = admit
        self._refresh_output()

    def _refresh_output(self) -> None:
        if self._state_z or self._pin_mode == PinMode.UNDEFINED:
            return
        self._updt_state()
        if self._pin_mode in (PinMode.OUTPUT, PinMode.OPEN_COLLECTOR):
            self.set_out_state(self._out_state)
