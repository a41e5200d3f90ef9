import assets.sounds as sounds_module
from assets.sounds import SoundSystem


class FakeSound:
    def __init__(self):
        self.calls = []

    def stop(self):
        self.calls.append("stop")

    def play(self):
        self.calls.append("play")


def test_alert_plays_bundled_file(monkeypatch):
    loaded = []
    sound = FakeSound()

    def fake_load(path):
        loaded.append(path)
        return sound

    monkeypatch.setattr(sounds_module.SoundLoader, "load", fake_load)
    system = SoundSystem()
    system.alert()
    system.alert()

    assert len(loaded) == 1
    assert loaded[0].endswith("alert.wav")
    assert sound.calls == ["stop", "play", "stop", "play"]


def test_disabled_system_stays_silent(monkeypatch):
    loaded = []
    monkeypatch.setattr(sounds_module.SoundLoader, "load", loaded.append)
    SoundSystem(enabled=False).alert()
    assert loaded == []


def test_missing_sound_is_ignored(monkeypatch):
    monkeypatch.setattr(sounds_module.SoundLoader, "load", lambda path: None)
    SoundSystem().play("missing")
