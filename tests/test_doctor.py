import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from defconbot.tasks import doctor

GOOD_ENV = {
    "DEFCON_OAUTH_TOKEN": "ck:cs:ak:as",
    "DEFCON_REPORT_PAGE": "User:DefconBot/defcon",
    "SERVER_LOG_EVERY_ACTION": "0",
}


class TestDoctor(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        tmp = Path(self.tmp.name)
        for patcher in (
            mock.patch("defconbot.tasks.doctor.LOG_DIR", tmp / "logs"),
            mock.patch("defconbot.tasks.doctor.KILL_SWITCH_FILE", tmp / "kill.switch"),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)

    @mock.patch.dict(os.environ, GOOD_ENV, clear=True)
    def test_healthy_configuration(self):
        ok, warnings, critical = doctor.run_checks()
        self.assertEqual(critical, [])
        self.assertEqual(warnings, [])
        self.assertTrue(any(line.startswith("settings:") for line in ok))

    def test_malformed_credential_is_critical(self):
        for raw in ("just-a-token", "ck::cs:ak:as"):
            with self.subTest(raw=raw), mock.patch.dict(os.environ, {**GOOD_ENV, "DEFCON_OAUTH_TOKEN": raw}, clear=True):
                _, _, critical = doctor.run_checks()
                self.assertEqual(len(critical), 1)
                self.assertTrue(critical[0].startswith("settings: OAuth credential"))

    @mock.patch.dict(os.environ, {"SERVER_LOG_EVERY_ACTION": "0"}, clear=True)
    def test_missing_settings_fail_main(self):
        with mock.patch("defconbot.tasks.doctor.load_dotenv"), mock.patch(
            "defconbot.tasks.doctor.configure_root_logging"
        ), mock.patch("defconbot.tasks.doctor.send_task_report") as report:
            self.assertEqual(doctor.main(), 1)
        self.assertEqual(report.call_args.kwargs["status"], "FAILED")

    @mock.patch.dict(os.environ, {**GOOD_ENV, "DISCORD_WEBHOOK_MAIN": "https://example.com/x"}, clear=True)
    def test_bad_webhook_is_a_warning(self):
        _, warnings, critical = doctor.run_checks()
        self.assertEqual(critical, [])
        self.assertEqual(len(warnings), 1)


    @mock.patch.dict(
        os.environ, {**GOOD_ENV, "DISCORD_WEBHOOK_MAIN": "https://discord.com/api/webhooks/your_webhook_here"}, clear=True
    )
    def test_placeholder_webhook_is_a_warning(self):
        _, warnings, critical = doctor.run_checks()
        self.assertEqual(critical, [])
        self.assertEqual(len(warnings), 1)
        self.assertTrue(warnings[0].startswith("DISCORD_WEBHOOK_MAIN"))

if __name__ == "__main__":
    unittest.main()
