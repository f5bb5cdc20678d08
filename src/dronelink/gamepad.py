"""pygame-backed ``GamepadSource``.

Install with ``pip install dronelink[gamepad]``. SDL's dummy video driver
is selected unless one is already configured: the event queue needs the
video subsystem, but no window is ever opened.
"""

from __future__ import annotations

import logging
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_JOYSTICK_ALLOW_BACKGROUND_EVENTS", "1")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from dronelink.driver import DeviceConnected, DeviceDisconnected, DeviceEvent, GamepadState

logger = logging.getLogger("dronelink.gamepad")


class PygameGamepad:
    """Reads joysticks through pygame's joystick module.

    Devices present at startup are reported as ``DeviceConnected`` on the
    first poll, like devices plugged in later.
    """

    def __init__(self) -> None:
        pygame.display.init()
        pygame.joystick.init()
        self._joysticks: dict[int, pygame.joystick.JoystickType] = {}
        logger.debug("pygame %s, %d joystick(s)", pygame.version.ver, pygame.joystick.get_count())

    def poll_events(self) -> list[DeviceEvent]:
        events: list[DeviceEvent] = []
        for event in pygame.event.get():
            match event.type:
                case pygame.JOYDEVICEADDED:
                    joystick = pygame.joystick.Joystick(event.device_index)
                    instance_id = joystick.get_instance_id()
                    self._joysticks[instance_id] = joystick
                    logger.debug("device added: %s", joystick.get_name())
                    events.append(DeviceConnected(instance_id))
                case pygame.JOYDEVICEREMOVED:
                    self._joysticks.pop(event.instance_id, None)
                    events.append(DeviceDisconnected(event.instance_id))
                case _:
                    pass
        return events

    def read_state(self, device_id: int) -> GamepadState | None:
        joystick = self._joysticks.get(device_id)
        if joystick is None:
            return None
        return GamepadState(
            buttons=tuple(bool(joystick.get_button(i)) for i in range(joystick.get_numbuttons())),
            axes=tuple(joystick.get_axis(i) for i in range(joystick.get_numaxes())),
        )

    def close(self) -> None:
        self._joysticks.clear()
        pygame.joystick.quit()
        pygame.display.quit()
