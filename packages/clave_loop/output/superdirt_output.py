"""
Clave Loop SuperDirt Output

Sends triggers to SuperDirt as timestamped OSC bundles, so SuperDirt's
own scheduler starts each sound at the committed time. The audio clock
is time.perf_counter(); bundle timetags are the matching wall-clock time.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pythonosc import osc_bundle_builder, osc_message_builder, udp_client

logger = logging.getLogger(__name__)


class SuperDirtOutput:
    """Timestamped OSC triggers for SuperDirt (/dirt/play)"""

    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 57120  # SuperDirt default port
    DEFAULT_ADDRESS = "/dirt/play"  # SuperDirt default address
    DEFAULT_SOUNDS = {"note": "cp", "kick": "bd"}

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        address: str = DEFAULT_ADDRESS,
        sounds: dict[str, str] | None = None,
        orbit: int = 0,
    ):
        self._host = host
        self._port = port
        self._address = address
        self._sounds = dict(sounds) if sounds is not None else dict(self.DEFAULT_SOUNDS)
        self._orbit = orbit
        self._client: udp_client.SimpleUDPClient | None = None

    def connect(self) -> None:
        """Initialize OSC client"""
        if self._client is not None:
            return
        self._client = udp_client.SimpleUDPClient(self._host, self._port)
        logger.info(f"OSC client connected to {self._host}:{self._port}")

    def disconnect(self) -> None:
        """Close OSC client"""
        self._client = None
        logger.info("OSC client disconnected")

    def resume(self) -> bool:
        """Connect if needed (idempotent)"""
        if self._client is None:
            try:
                self.connect()
            except OSError as e:
                logger.error(f"OSC connect error: {e}")
                return False
        return True

    def build_params(self, sound_name: str, gain: float) -> dict[str, Any] | None:
        """SuperDirt parameters for a logical sound, or None if unmapped."""
        sample = self._sounds.get(sound_name)
        if sample is None:
            return None
        return {"s": sample, "gain": float(gain), "orbit": self._orbit}

    def timetag_for(self, when: float) -> float:
        """Wall-clock (epoch seconds) time for an audio-clock time."""
        return time.time() + (when - time.perf_counter())

    def trigger(self, sound_name: str, gain: float, when: float) -> None:
        """Send one bundle timestamped for `when`"""
        if not self._client:
            logger.warning("OSC client not connected")
            return

        params = self.build_params(sound_name, gain)
        if params is None:
            logger.error(f"Trigger dropped: no SuperDirt sound mapped for '{sound_name}'")
            return

        try:
            message = osc_message_builder.OscMessageBuilder(address=self._address)
            for key, value in params.items():
                message.add_arg(key)
                message.add_arg(value)

            bundle = osc_bundle_builder.OscBundleBuilder(self.timetag_for(when))
            bundle.add_content(message.build())
            self._client.send(bundle.build())
        except Exception as e:
            logger.error(f"OSC send error: {e}")

    @property
    def current_time(self) -> float:
        return time.perf_counter()

    @property
    def is_connected(self) -> bool:
        return self._client is not None
