"""Tests for the text-returning bridge."""

import json
import unittest
from unittest.mock import Mock, patch

from paramiko.message import Message

from remotefs import bridge
from remotefs.bridge import Bridge, is_error
from remotefs.clients.client import Connector, Transport
from remotefs.clients.sftpclient import SftpFileSession
from remotefs.probe import LivenessProber
from remotefs.session import SessionManager
from tests.fixtures.fakes import FakeConnector, TempDirs


class TestBridge(unittest.TestCase):
    def setUp(self):
        self.dirs = TempDirs()
        self.remote_root = self.dirs.make()
        self.connector = FakeConnector(self.remote_root)
        self.bridge = Bridge(SessionManager(connector=self.connector))

    def tearDown(self):
        self.bridge.manager.close()
        self.dirs.cleanup()

    def login(self):
        return self.bridge.login("localhost", "22", "tester", "hunter2")

    def test_not_logged_in(self):
        """Without a login every operation answers with the same error text."""
        local = str(self.dirs.make())
        results = [
            self.bridge.list("/"),
            self.bridge.download("/a", local),
            self.bridge.upload("/a", local),
            self.bridge.delete("/a"),
            self.bridge.rename("/a", "b"),
            self.bridge.disconnect(),
        ]
        self.assertEqual(results, ["ERR: not logged in"] * len(results))

    def test_login_results(self):
        self.assertEqual(self.login(), "OK")
        self.assertEqual(self.login(), "NOTE: Connected")

    def test_login_error_text(self):
        result = self.bridge.login("localhost", "22", "tester", "nope")
        self.assertEqual(result, "ERR: Authentication failed.")

    def test_login_invalid_port(self):
        result = self.bridge.login("localhost", "ssh", "tester", "hunter2")
        self.assertTrue(is_error(result))
        self.assertIn("invalid port", result)
        self.assertEqual(self.connector.dials, 0)

    def test_login_invalid_port_while_connected(self):
        self.assertEqual(self.login(), "OK")
        self.assertEqual(
            self.bridge.login("localhost", "0", "tester", "hunter2"), "NOTE: Connected"
        )

    def test_local_path_with_nul_byte(self):
        (self.remote_root / "a.txt").write_text("x")
        local = str(self.dirs.make())
        self.login()

        self.assertTrue(is_error(self.bridge.download("/a.txt", local + "/dir\0x")))
        self.assertTrue(is_error(self.bridge.upload("/a.txt", local + "/up\0load")))

    def test_list_undecodable_name(self):
        """A remote name that is not UTF-8 is reported, not raised."""
        def listdir_attr(path):
            message = Message()
            message.add_string(b"caf\xe9.txt")
            message.rewind()
            return [message.get_text()]

        sftp = Mock()
        sftp.listdir_attr.side_effect = listdir_attr
        transport = Mock(spec=Transport)
        transport.open_file_session.return_value = SftpFileSession(sftp)
        connector = Mock(spec=Connector)
        connector.dial.return_value = transport
        prober = Mock(spec=LivenessProber)
        prober.is_alive.return_value = True
        sftp_bridge = Bridge(SessionManager(connector=connector, prober=prober))

        self.assertEqual(sftp_bridge.login("localhost", "22", "tester", "hunter2"), "OK")
        result = sftp_bridge.list("/")

        self.assertTrue(result.startswith("ERR: 'utf-8' codec can't decode"))

    def test_list_json(self):
        """Listings are JSON; directories have no size key."""
        (self.remote_root / "a.txt").write_bytes(b"abc")
        (self.remote_root / "empty.txt").write_bytes(b"")
        (self.remote_root / "sub").mkdir()
        self.login()

        result = json.loads(self.bridge.list("/"))

        by_name = {item["name"]: item for item in result}
        self.assertEqual(by_name["a.txt"], {"type": "file", "name": "a.txt", "size": 3})
        self.assertEqual(by_name["empty.txt"]["size"], 0)
        self.assertEqual(by_name["sub"], {"type": "dir", "name": "sub"})

    def test_list_empty_directory(self):
        self.login()
        self.assertEqual(self.bridge.list("/"), "[]")

    def test_list_non_ascii_names(self):
        (self.remote_root / "résumé.txt").write_text("x")
        self.login()
        self.assertIn("résumé.txt", self.bridge.list("/"))

    def test_list_error(self):
        self.login()
        self.assertTrue(self.bridge.list("/missing").startswith("ERR: "))

    def test_transfer_and_rename(self):
        source = self.dirs.make() / "up.txt"
        source.write_text("payload")
        target = self.dirs.make()
        self.login()

        self.assertEqual(self.bridge.upload("/up.txt", str(source)), "OK")
        self.assertEqual(self.bridge.download("/up.txt", str(target)), "OK")
        self.assertEqual((target / "up.txt").read_text(), "payload")

        (self.remote_root / "taken.txt").write_text("x")
        self.assertEqual(self.bridge.rename("/up.txt", "taken.txt"), "ERR: exist path")
        self.assertEqual(self.bridge.rename("/up.txt", "moved.txt"), "OK")
        self.assertEqual(self.bridge.delete("/moved.txt"), "OK")
        self.assertTrue(self.bridge.delete("/moved.txt").startswith("ERR: "))

    def test_disconnect(self):
        self.login()
        self.assertEqual(self.bridge.disconnect(), "OK")
        self.assertEqual(self.bridge.disconnect(), "OK")

    def test_programming_errors_propagate(self):
        """Only library errors become ERR strings."""
        with patch.object(self.bridge.manager, "list", side_effect=TypeError("bug")):
            with self.assertRaises(TypeError):
                self.bridge.list("/")


class TestModuleFunctions(unittest.TestCase):
    def setUp(self):
        self.dirs = TempDirs()
        self.connector = FakeConnector(self.dirs.make())
        self._saved = bridge._default_bridge
        bridge._default_bridge = Bridge(SessionManager(connector=self.connector))

    def tearDown(self):
        bridge._default_bridge.manager.close()
        bridge._default_bridge = self._saved
        self.dirs.cleanup()

    def test_functions_share_one_session(self):
        self.assertEqual(bridge.disconnect(), "ERR: not logged in")
        self.assertEqual(bridge.ssh_login("localhost", "22", "tester", "hunter2"), "OK")
        self.assertEqual(bridge.ssh_login("localhost", "22", "tester", "hunter2"), "NOTE: Connected")
        self.assertEqual(bridge.sftp_list("/"), "[]")
        self.assertEqual(bridge.sftp_rename("/missing", "x")[:5], "ERR: ")
        self.assertEqual(bridge.disconnect(), "OK")
        self.assertEqual(self.connector.dials, 1)

    def test_default_bridge_is_cached(self):
        self.assertIs(bridge.default_bridge(), bridge.default_bridge())


if __name__ == "__main__":
    unittest.main()
