from pathlib import Path
from kivy.core.audio import SoundLoader


class SoundSystem:
    """Play the alert sounds bundled in ``assets/sounds``.

    Sounds are loaded lazily and cached. When ``enabled`` is false nothing is
    loaded or played.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._base = Path(__file__).resolve().parent
        self._cache: dict[str, object] = {}

    def _load(self, name: str):
        snd = self._cache.get(name)
        if snd is None:
            path = self._base / f"{name}.wav"
            snd = SoundLoader.load(str(path))
            self._cache[name] = snd
        return snd

    def play(self, name: str) -> None:
        """Play a named sound if sound is on and the file could be loaded."""
        if not self.enabled:
            return
        snd = self._load(name)
        if snd:
            snd.stop()
            snd.play()

    def alert(self, *args) -> None:
        """Countdown reached zero."""
        self.play("alert")
