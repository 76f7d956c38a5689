import logging
import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from idraccsr.core.config import (
    DEFAULT_CSR_FILENAME,
    LocalConfig,
    LocalConfigError,
    RedfishSettings,
    SubjectError,
    build_subject,
    load_local_config,
    resolve_connection,
    resolve_csr_path,
)

LOGGER = logging.getLogger("idraccsr.test")


class LocalConfigTests(unittest.TestCase):
    def _write(self, tmpdir: str, content: str) -> Path:
        path = Path(tmpdir) / "local.yml"
        path.write_text(content, encoding="utf-8")
        return path

    def test_missing_file_yields_defaults(self) -> None:
        with TemporaryDirectory() as tmpdir:
            config = load_local_config(Path(tmpdir) / "absent.yml", LOGGER)

        self.assertIsNone(config.redfish.host)
        self.assertIsNone(config.redfish.verify_tls)
        self.assertIsNone(config.csr_file)

    def test_reads_redfish_and_output_sections(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                """logging:
  level: DEBUG
redfish:
  host: 192.168.0.120
  username: root
  verify_tls: false
  timeout: 30
output:
  csr_file: /tmp/csr/idrac.csr
""",
            )
            config = load_local_config(path, LOGGER)

        self.assertEqual("192.168.0.120", config.redfish.host)
        self.assertEqual("root", config.redfish.username)
        self.assertFalse(config.redfish.verify_tls)
        self.assertEqual(30.0, config.redfish.timeout)
        self.assertEqual(Path("/tmp/csr/idrac.csr"), config.csr_file)

    def test_secrets_are_rejected(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "redfish:\n  host: 10.0.0.1\n  password: calvin\n")
            with self.assertRaises(LocalConfigError):
                load_local_config(path, LOGGER)

    def test_invalid_types_are_rejected(self) -> None:
        with TemporaryDirectory() as tmpdir:
            for content in (
                "redfish:\n  verify_tls: 'no'\n",
                "redfish:\n  timeout: -5\n",
                "redfish: [1, 2]\n",
                "- just\n- a list\n",
            ):
                path = self._write(tmpdir, content)
                with self.assertRaises(LocalConfigError, msg=content):
                    load_local_config(path, LOGGER)


class ResolveConnectionTests(unittest.TestCase):
    def test_cli_overrides_local_config(self) -> None:
        local = LocalConfig(redfish=RedfishSettings(host="10.0.0.1", verify_tls=True, timeout=10.0))

        connection = resolve_connection("10.0.0.2", True, 5.0, local, LOGGER)

        self.assertEqual("10.0.0.2", connection.host)
        self.assertFalse(connection.verify_tls)
        self.assertEqual(5.0, connection.timeout)

    def test_local_config_then_defaults(self) -> None:
        local = LocalConfig(redfish=RedfishSettings(host="10.0.0.1", verify_tls=False))

        connection = resolve_connection(None, False, None, local, LOGGER)

        self.assertEqual("10.0.0.1", connection.host)
        self.assertFalse(connection.verify_tls)
        self.assertIsNone(connection.timeout)

    def test_verification_defaults_to_on(self) -> None:
        connection = resolve_connection("10.0.0.2", False, None, LocalConfig(redfish=RedfishSettings()), LOGGER)

        self.assertTrue(connection.verify_tls)

    def test_host_is_required(self) -> None:
        with self.assertRaises(LocalConfigError):
            resolve_connection(None, False, None, LocalConfig(redfish=RedfishSettings()), LOGGER)

    def test_csr_path_priority(self) -> None:
        local = LocalConfig(redfish=RedfishSettings(), csr_file=Path("/srv/csr.txt"))

        self.assertEqual(Path("/tmp/out.txt"), resolve_csr_path(Path("/tmp/out.txt"), local))
        self.assertEqual(Path("/srv/csr.txt"), resolve_csr_path(None, local))
        self.assertEqual(
            Path.cwd() / DEFAULT_CSR_FILENAME,
            resolve_csr_path(None, LocalConfig(redfish=RedfishSettings())),
        )


class BuildSubjectTests(unittest.TestCase):
    VALUES = {
        "city": "Austin",
        "state": "Texas",
        "country": "US",
        "commonname": "Test",
        "org": "Test group",
        "orgunit": "lab",
        "email": None,
    }

    def test_maps_cli_values(self) -> None:
        subject = build_subject({**self.VALUES, "email": "tester@email.com"})

        self.assertEqual("Test", subject.common_name)
        self.assertEqual("Test group", subject.organization)
        self.assertEqual("lab", subject.organizational_unit)
        self.assertEqual("tester@email.com", subject.email)

    def test_empty_email_is_absent(self) -> None:
        self.assertIsNone(build_subject({**self.VALUES, "email": ""}).email)

    def test_reports_all_missing_fields(self) -> None:
        with self.assertRaises(SubjectError) as ctx:
            build_subject({**self.VALUES, "city": None, "orgunit": ""})

        self.assertIn("--city", str(ctx.exception))
        self.assertIn("--orgunit", str(ctx.exception))
        self.assertNotIn("--state", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
