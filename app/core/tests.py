from pathlib import Path

from django.conf import settings
from django.test import SimpleTestCase


class SettingsTests(SimpleTestCase):
    def test_env_file_is_read_from_the_repository_root(self):
        repository_root = Path(settings.BASE_DIR).parent
        self.assertEqual(settings.ENV_FILE, repository_root / ".env")
        self.assertTrue((repository_root / "pyproject.toml").exists())
