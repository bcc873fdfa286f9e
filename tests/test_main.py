"""Tests for the command line entry point."""

import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from remotefs import __main__ as cli
from remotefs.config import Config, RemoteConfig, RemoteNotFoundError, ValidationError
from remotefs.session import SessionManager
from tests.fixtures.fakes import FakeConnector, TempDirs, build_tree


class TestResolveRemote(unittest.TestCase):
    def setUp(self):
        self.config = Config(
            remotes={"build": RemoteConfig(name="build", host="build.example.com", port=2222)}
        )

    def test_named_remote(self):
        remote = cli.resolve_remote(self.config, "build")
        self.assertEqual(remote.host, "build.example.com")
        self.assertEqual(remote.port, 2222)

    def test_unknown_name(self):
        with self.assertRaises(RemoteNotFoundError):
            cli.resolve_remote(self.config, "staging")

    def test_address_forms(self):
        cases = {
            "example.com": ("example.com", 22, ""),
            "deploy@example.com": ("example.com", 22, "deploy"),
            "deploy@example.com:2200": ("example.com", 2200, "deploy"),
            "sftp://root@10.0.0.1:22": ("10.0.0.1", 22, "root"),
            "localhost:2022": ("localhost", 2022, ""),
        }
        for address, (host, port, username) in cases.items():
            with self.subTest(address=address):
                remote = cli.resolve_remote(self.config, address)
                self.assertEqual((remote.host, remote.port, remote.username), (host, port, username))

    def test_invalid_port(self):
        with self.assertRaises(ValidationError):
            cli.resolve_remote(self.config, "example.com:notaport")


class TestMain(unittest.TestCase):
    def setUp(self):
        self.dirs = TempDirs()
        self.remote_root = self.dirs.make()
        build_tree(self.remote_root)
        self.connector = FakeConnector(self.remote_root)

        config_dir = self.dirs.make()
        self.config_path = config_dir / "remotefs.toml"
        self.config_path.write_text(
            '[remotes.fake]\nhost = "fake.example.com"\nusername = "tester"\n'
        )

        patchers = [
            patch.object(
                cli,
                "SessionManager",
                lambda settings: SessionManager(connector=self.connector, settings=settings),
            ),
            patch.object(cli.getpass, "getpass", return_value="hunter2"),
            patch("logging.basicConfig"),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self):
        self.dirs.cleanup()

    def run_main(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(["--config", str(self.config_path), *argv])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_ls(self):
        code, out, _ = self.run_main("fake", "ls", "/docs")

        self.assertEqual(code, 0)
        entries = json.loads(out)
        self.assertEqual(
            sorted(entries, key=lambda e: e["name"]),
            [
                {"type": "dir", "name": "api"},
                {"type": "file", "name": "guide.md", "size": 8},
            ],
        )
        self.assertTrue(self.connector.last_transport.closed)

    def test_get(self):
        target = self.dirs.make()

        code, out, _ = self.run_main("fake", "get", "/readme.txt", str(target))

        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "OK")
        self.assertEqual((target / "readme.txt").read_text(), "top level file\n")

    def test_remote_error_exit_code(self):
        code, out, _ = self.run_main("fake", "rm", "/missing.txt")

        self.assertEqual(code, 1)
        self.assertTrue(out.startswith("ERR: "))

    def test_login_failure(self):
        with patch.object(cli.getpass, "getpass", return_value="wrong"):
            code, out, _ = self.run_main("fake", "ls", "/")

        self.assertEqual(code, 1)
        self.assertEqual(out.strip(), "ERR: Authentication failed.")

    def test_wrong_argument_count(self):
        code, _, err = self.run_main("fake", "mv", "/readme.txt")

        self.assertEqual(code, 2)
        self.assertIn("'mv' takes 2 argument(s)", err)
        self.assertEqual(self.connector.dials, 0)

    def test_unknown_remote(self):
        code, _, err = self.run_main("staging", "ls", "/")

        self.assertEqual(code, 2)
        self.assertIn("Remote 'staging' not found", err)

    def test_bad_config(self):
        self.config_path.write_text("[session]\nbuffer_size = 0\n")

        code, _, err = self.run_main("fake", "ls", "/")

        self.assertEqual(code, 2)
        self.assertIn("Configuration error", err)


if __name__ == "__main__":
    unittest.main()
