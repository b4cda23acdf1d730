import pytest

pytest_plugins = [
    "tests.accounts.fixtures",
    "tests.telegram_bot.fixtures",
]


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Keep uploaded photos out of the project tree."""
    settings.MEDIA_ROOT = tmp_path / "media"
    return settings.MEDIA_ROOT
