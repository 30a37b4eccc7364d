from xptooltip.backend.config import load_settings
from xptooltip.backend.display import DisplayOptions, Viewport

_ENV_NAMES = [
    "XPTOOLTIP_HOST",
    "XPTOOLTIP_PORT",
    "XPTOOLTIP_TOGGLE_KEY",
    "XPTOOLTIP_MARGIN",
    "XPTOOLTIP_LIFT",
    "XPTOOLTIP_VIEWPORT_WIDTH",
    "XPTOOLTIP_VIEWPORT_HEIGHT",
    "XPTOOLTIP_THOUSANDS_SEPARATOR",
    "XPTOOLTIP_LOG_LEVEL",
]


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("XPTOOLTIP_HOST", "0.0.0.0")
    monkeypatch.setenv("XPTOOLTIP_PORT", "9000")
    monkeypatch.setenv("XPTOOLTIP_TOGGLE_KEY", "x")
    monkeypatch.setenv("XPTOOLTIP_MARGIN", "12")
    monkeypatch.setenv("XPTOOLTIP_LIFT", "30")
    monkeypatch.setenv("XPTOOLTIP_VIEWPORT_WIDTH", "1920")
    monkeypatch.setenv("XPTOOLTIP_VIEWPORT_HEIGHT", "1080")
    monkeypatch.setenv("XPTOOLTIP_THOUSANDS_SEPARATOR", ",")
    monkeypatch.setenv("XPTOOLTIP_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.host == "0.0.0.0"
    assert settings.port == 9000
    assert settings.toggle_key == "x"
    assert settings.log_level == "DEBUG"
    assert settings.viewport() == Viewport(width=1920, height=1080)
    assert settings.display_options() == DisplayOptions(thousands_separator=",", margin=12, lift=30)


def test_load_settings_applies_defaults(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.toggle_key == "z"
    assert settings.log_level == "INFO"
    assert settings.viewport() == Viewport(width=1280, height=720)
    assert settings.display_options() == DisplayOptions(thousands_separator=" ", margin=10, lift=40)
