"""Tests for configuration and API key resolution."""

import sys
import unittest
from pathlib import Path

# Add src to path so we can import metrohero
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from metrohero.config import DEFAULT_API_URL, Settings, require_api_key, resolve_api_key
from metrohero.errors import ConfigurationError


class TestApiKey(unittest.TestCase):
    """Test API key precedence."""

    def test_cli_value_overrides_environment(self):
        """Test that --api-key wins over METROHERO_API_KEY."""
        environ = {"METROHERO_API_KEY": "from-env"}
        self.assertEqual(resolve_api_key("from-cli", environ), "from-cli")

    def test_environment_used_without_cli_value(self):
        """Test the environment fallback."""
        self.assertEqual(resolve_api_key(None, {"METROHERO_API_KEY": "from-env"}), "from-env")

    def test_blank_values_are_missing(self):
        """Test that blank values count as missing."""
        self.assertEqual(resolve_api_key("  ", {"METROHERO_API_KEY": "from-env"}), "from-env")
        self.assertIsNone(resolve_api_key("", {"METROHERO_API_KEY": "   "}))

    def test_missing_key(self):
        """Test that no key anywhere is a configuration error."""
        self.assertIsNone(resolve_api_key(None, {}))
        with self.assertRaises(ConfigurationError):
            require_api_key(None, {})


class TestSettings(unittest.TestCase):
    """Test settings read from the environment."""

    def test_defaults(self):
        """Test the defaults with an empty environment."""
        settings = Settings.from_env(environ={})
        self.assertIsNone(settings.api_key)
        self.assertEqual(settings.base_url, DEFAULT_API_URL)
        self.assertEqual(settings.timeout, 10.0)

    def test_overrides(self):
        """Test URL and timeout overrides, and trailing slash removal."""
        settings = Settings.from_env(
            api_key="from-cli",
            environ={
                "METROHERO_API_KEY": "from-env",
                "METROHERO_API_URL": "http://localhost:8080/api/v1/",
                "METROHERO_TIMEOUT": "2.5",
            },
        )
        self.assertEqual(settings.api_key, "from-cli")
        self.assertEqual(settings.base_url, "http://localhost:8080/api/v1")
        self.assertEqual(settings.timeout, 2.5)

    def test_invalid_timeout(self):
        """Test that non-numeric and non-positive timeouts are rejected."""
        with self.assertRaises(ConfigurationError):
            Settings.from_env(environ={"METROHERO_TIMEOUT": "soon"})
        with self.assertRaises(ConfigurationError):
            Settings.from_env(environ={"METROHERO_TIMEOUT": "0"})


if __name__ == "__main__":
    unittest.main()
