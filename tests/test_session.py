import unittest

import numpy as np

from activebody.core.constants import JOINT_COUNT, NO_ACTIVE_BODY, Joint
from activebody.core.events import ACTIVE_BODY_CHANGED, FRAME_PROCESSED, EventBus
from activebody.core.selector import body_sample_from_record, find_closest_body_id
from activebody.core.session import BodyTrackingSession
from activebody.core.types import BodyFrame, BodyRecord, CameraPlacement, JointSample
from activebody.models.config import AppConfig, SessionConfig


def make_body(body_id, pelvis_z=2000.0, hand_raised=False, x_offset=0.0):
    joints = []
    for idx in range(JOINT_COUNT):
        pos = np.array([x_offset, 0.0, pelvis_z])
        if idx == Joint.HEAD:
            pos = np.array([x_offset, -600.0, pelvis_z])
        elif idx in (Joint.HAND_LEFT, Joint.HAND_RIGHT):
            pos = np.array([x_offset, -900.0 if hand_raised and idx == Joint.HAND_LEFT else 0.0, pelvis_z])
        joints.append(JointSample(joint_index=idx, position_mm=pos))
    return BodyRecord(body_id=body_id, joints=joints)


def wave_config(fallback=True):
    return AppConfig(session=SessionConfig(selection_mode="wave_last_raised", fallback_to_closest=fallback))


class ClosestBodyTests(unittest.TestCase):
    def test_nearest_pelvis_wins(self):
        bodies = [make_body(1, pelvis_z=3000.0), make_body(2, pelvis_z=1500.0), make_body(3, pelvis_z=2500.0)]
        self.assertEqual(find_closest_body_id(bodies), 2)

    def test_first_of_equal_distances_wins(self):
        bodies = [make_body(4, x_offset=100.0), make_body(5, x_offset=-100.0)]
        self.assertEqual(find_closest_body_id(bodies), 4)

    def test_no_bodies(self):
        self.assertEqual(find_closest_body_id([]), NO_ACTIVE_BODY)

    def test_negative_ids_and_missing_pelvis_are_skipped(self):
        no_pelvis = make_body(6, pelvis_z=100.0)
        no_pelvis.joints[Joint.PELVIS] = None
        bodies = [make_body(-1, pelvis_z=10.0), no_pelvis, make_body(7, pelvis_z=4000.0)]
        self.assertEqual(find_closest_body_id(bodies), 7)

    def test_body_sample_extraction(self):
        sample = body_sample_from_record(make_body(3, hand_raised=True), 1.5)
        self.assertEqual(sample.body_id, 3)
        self.assertEqual(sample.head_y_mm, -600.0)
        self.assertEqual(sample.left_hand_y_mm, -900.0)
        self.assertEqual(sample.right_hand_y_mm, 0.0)
        self.assertEqual(sample.observed_at, 1.5)


class SessionTests(unittest.TestCase):
    def test_closest_mode_follows_nearest_body(self):
        session = BodyTrackingSession(AppConfig())
        frame = BodyFrame(0.0, [make_body(1, pelvis_z=3000.0), make_body(2, pelvis_z=1000.0)])
        self.assertEqual(session.process_frame(frame), 2)
        self.assertEqual(session.tracked_body_id, 2)
        self.assertEqual(session.tracked_body_count, 2)
        frame = BodyFrame(0.1, [make_body(1, pelvis_z=800.0), make_body(2, pelvis_z=1000.0)])
        self.assertEqual(session.process_frame(frame), 1)

    def test_wave_mode_prefers_raised_hand_over_closest(self):
        session = BodyTrackingSession(wave_config())
        frame = BodyFrame(0.0, [make_body(1, pelvis_z=1000.0), make_body(2, pelvis_z=3000.0, hand_raised=True)])
        self.assertEqual(session.process_frame(frame), 2)
        self.assertEqual(session.tracked_body_id, 1)

    def test_wave_mode_falls_back_to_closest(self):
        session = BodyTrackingSession(wave_config())
        frame = BodyFrame(0.0, [make_body(1, pelvis_z=3000.0), make_body(2, pelvis_z=1000.0)])
        self.assertEqual(session.process_frame(frame), 2)

    def test_fallback_to_unsampled_closest_body_reports_one_change(self):
        bus = EventBus()
        changes = []
        bus.subscribe(ACTIVE_BODY_CHANGED, changes.append)
        session = BodyTrackingSession(wave_config(), bus)
        for t in (0.0, 0.1, 0.2):
            pelvis_only = make_body(3)
            pelvis_only.joints[Joint.EAR_RIGHT] = None
            self.assertEqual(session.process_frame(BodyFrame(t, [pelvis_only])), 3)
        self.assertEqual([(c.old_id, c.new_id) for c in changes], [(-1, 3)])
        self.assertEqual(session.status()["active_changes"], 1)

    def test_wave_mode_without_fallback_stays_empty(self):
        session = BodyTrackingSession(wave_config(fallback=False))
        frame = BodyFrame(0.0, [make_body(1), make_body(2)])
        self.assertEqual(session.process_frame(frame), NO_ACTIVE_BODY)
        self.assertFalse(session.has_active)

    def test_missing_frame_clears_active(self):
        session = BodyTrackingSession(AppConfig())
        session.process_frame(BodyFrame(0.0, [make_body(1)]))
        self.assertEqual(session.process_frame(None), NO_ACTIVE_BODY)
        self.assertEqual(session.tracked_body_count, 0)
        self.assertIsNone(session.get_active_body_skeleton())

    def test_events_are_published(self):
        bus = EventBus()
        changes, frames = [], []
        bus.subscribe(ACTIVE_BODY_CHANGED, changes.append)
        bus.subscribe(FRAME_PROCESSED, frames.append)
        session = BodyTrackingSession(wave_config(fallback=False), bus)
        session.process_frame(BodyFrame(0.0, [make_body(4, hand_raised=True)]))
        session.process_frame(BodyFrame(0.1, [make_body(4)]))
        session.process_frame(BodyFrame(2.5, []))
        self.assertEqual([(c.old_id, c.new_id) for c in changes], [(-1, 4), (4, -1)])
        self.assertEqual(len(frames), 3)
        self.assertEqual(frames[0].active_body_id, 4)
        self.assertEqual(session.status()["active_changes"], 2)

    def test_active_skeleton_is_mapped_with_camera_placement(self):
        session = BodyTrackingSession(AppConfig())
        session.set_camera_placement(CameraPlacement(translation=np.array([10.0, 20.0, 30.0])))
        session.process_frame(BodyFrame(0.0, [make_body(8, pelvis_z=2000.0)]))
        joints = session.get_active_body_skeleton()
        self.assertEqual(len(joints), JOINT_COUNT)
        np.testing.assert_allclose(joints[Joint.PELVIS].position_world, [210.0, 20.0, 30.0])
        np.testing.assert_allclose(joints[Joint.HEAD].position_world, [210.0, 20.0, -30.0])

    def test_unknown_or_incomplete_body_has_no_skeleton(self):
        session = BodyTrackingSession(AppConfig())
        broken = make_body(2)
        broken.joints[Joint.FOOT_LEFT] = None
        session.process_frame(BodyFrame(0.0, [make_body(1), broken]))
        self.assertIsNone(session.get_body_skeleton(99))
        self.assertIsNone(session.get_body_skeleton(2))
        self.assertIsNotNone(session.get_closest_body_skeleton())

    def test_incomplete_body_is_not_sampled_in_wave_mode(self):
        session = BodyTrackingSession(wave_config(fallback=False))
        broken = make_body(2, hand_raised=True)
        broken.joints[Joint.FOOT_LEFT] = None
        self.assertEqual(session.process_frame(BodyFrame(0.0, [broken])), NO_ACTIVE_BODY)

    def test_mode_switch_and_reset(self):
        session = BodyTrackingSession(AppConfig())
        session.process_frame(BodyFrame(0.0, [make_body(1)]))
        session.set_selection_mode("wave_last_raised")
        self.assertEqual(session.status()["selection_mode"], "wave_last_raised")
        with self.assertRaises(ValueError):
            session.set_selection_mode("loudest")
        session.reset()
        self.assertEqual(session.active_body_id, NO_ACTIVE_BODY)
        self.assertIsNone(session.status()["last_timestamp"])


if __name__ == "__main__":
    unittest.main()
