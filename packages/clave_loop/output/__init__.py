"""Clave Loop Output Adapters

DeviceOutput is imported from .device_output directly (it needs PortAudio).
"""

from .sound_bank import SoundBank
from .superdirt_output import SuperDirtOutput
from .voices import Voice, mix_voices

__all__ = ["SoundBank", "SuperDirtOutput", "Voice", "mix_voices"]
