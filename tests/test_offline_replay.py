import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from activebody.__main__ import main
from activebody.core.constants import JOINT_COUNT, Joint
from activebody.core.offline import OfflineProcessor, ReplayFrameSource
from activebody.models.config import AppConfig, SessionConfig


def body_payload(body_id, hand_raised=False, z=2000.0):
    joints = []
    for idx in range(JOINT_COUNT):
        y = 0.0
        if idx == Joint.HEAD:
            y = -600.0
        elif idx == Joint.HAND_RIGHT and hand_raised:
            y = -900.0
        joints.append({"position": [0.0, y, z], "orientation": [1.0, 0.0, 0.0, 0.0]})
    return {"id": body_id, "joints": joints}


def write_recording(path: Path) -> None:
    payload = {
        "frames": [
            {"timestamp": 0.0, "bodies": [body_payload(1, z=1000.0), body_payload(2, z=3000.0)]},
            {"timestamp": 0.1, "bodies": [body_payload(1, z=1000.0), body_payload(2, hand_raised=True, z=3000.0)]},
            {"timestamp": 0.2, "bodies": [body_payload(1, z=1000.0), body_payload(2, z=3000.0)]},
        ]
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


class ReplayTests(unittest.TestCase):
    def test_replay_source_yields_frames_in_order(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rec.json"
            write_recording(path)
            source = ReplayFrameSource(path)
            self.assertTrue(source.open())
            stamps = []
            while True:
                frame = source.read_frame()
                if frame is None:
                    break
                stamps.append(frame.timestamp)
                self.assertEqual(len(frame.bodies[0].joints), JOINT_COUNT)
            source.close()
            self.assertEqual(stamps, [0.0, 0.1, 0.2])

    def test_invalid_recording_does_not_open(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rec.json"
            path.write_text(json.dumps({"frames": [{"bodies": []}]}), encoding="utf-8")
            self.assertFalse(ReplayFrameSource(path).open())
            result = OfflineProcessor(AppConfig()).run(path)
            self.assertFalse(result["ok"])
            self.assertIn("invalid", result["message"])

    def test_missing_recording(self):
        result = OfflineProcessor(AppConfig()).run(Path("does/not/exist.json"))
        self.assertFalse(result["ok"])
        self.assertIn("missing", result["message"])

    def test_wave_replay_reports_changes(self):
        cfg = AppConfig(session=SessionConfig(selection_mode="wave_last_raised"))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rec.json"
            write_recording(path)
            result = OfflineProcessor(cfg).run(path)
        self.assertTrue(result["ok"])
        self.assertEqual(result["frames"], 3)
        self.assertEqual(
            [(c["old_id"], c["new_id"]) for c in result["active_changes"]],
            [(-1, 1), (1, 2)],
        )
        self.assertEqual(result["final_active_id"], 2)

    def test_cli_replay(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rec.json"
            write_recording(path)
            out = io.StringIO()
            with redirect_stdout(out):
                code = main(
                    [
                        "replay",
                        str(path),
                        "--config",
                        str(Path(tmp) / "cfg.yaml"),
                        "--mode",
                        "closest",
                    ]
                )
            self.assertEqual(code, 0)
            result = json.loads(out.getvalue())
            self.assertEqual(result["final_active_id"], 1)


if __name__ == "__main__":
    unittest.main()
