import os
import tempfile
import unittest

from straightskel import DEFAULT_SETTINGS, Settings, SkeletonSettings, build_exterior_skeleton
from straightskel.settings import SECTION


class TestSettings(unittest.TestCase):
    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.filename = os.path.join(self.directory.name, "skeleton.ini")

    def tearDown(self):
        self.directory.cleanup()

    def test_defaults(self):
        settings = SkeletonSettings()
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertEqual(settings.epsilon, 1e-9)
        self.assertEqual(settings.exterior_margin_factor, 1.0)
        self.assertEqual(settings.max_events_factor, 8)
        self.assertAlmostEqual(settings.sin_parallel, 1e-9)
        self.assertIn("epsilon", repr(settings))

    def test_unknown_setting(self):
        self.assertRaises(TypeError, lambda: SkeletonSettings(tolerance=1.0))

    def test_save_and_load(self):
        settings = SkeletonSettings(epsilon=1e-7, exterior_margin_factor=2.5, max_events_factor=3)
        settings.save(self.filename)
        loaded = SkeletonSettings.load(self.filename)
        self.assertEqual(loaded, settings)
        self.assertIsInstance(loaded.max_events_factor, int)
        self.assertNotEqual(loaded, DEFAULT_SETTINGS)

    def test_load_missing_file(self):
        loaded = SkeletonSettings.load(os.path.join(self.directory.name, "missing.ini"))
        self.assertEqual(loaded, SkeletonSettings())
        self.assertEqual(SkeletonSettings.load(None), SkeletonSettings())

    def test_partial_and_bad_values(self):
        with open(self.filename, "w", encoding="utf-8") as f:
            f.write(f"[{SECTION}]\nexterior_margin_factor = 0.25\nepsilon = lots\nunused = 4\n")
        loaded = SkeletonSettings.load(self.filename)
        self.assertEqual(loaded.exterior_margin_factor, 0.25)
        self.assertEqual(loaded.epsilon, 1e-9)
        skeleton = build_exterior_skeleton([(0, 0), (4, 0), (4, 3), (0, 3)], settings=loaded)
        self.assertAlmostEqual(skeleton.max_distance, 1.25)

    def test_not_an_ini_file(self):
        with open(self.filename, "w", encoding="utf-8") as f:
            f.write("epsilon = 1\n")
        self.assertEqual(SkeletonSettings.load(self.filename), SkeletonSettings())

    def test_persistent_storage(self):
        settings = Settings(self.filename, ignore_settings=True)
        settings.write_persistent(SECTION, "max_events_factor", 12)
        settings.write_persistent(SECTION, "parallel_tolerance", 1e-6)
        settings.write_persistent(SECTION, "exterior_margin_factor", "150%")
        settings.write_configuration()

        reread = Settings(self.filename)
        self.assertEqual(reread.read_persistent(int, SECTION, "max_events_factor"), 12)
        self.assertEqual(reread.read_persistent(float, SECTION, "parallel_tolerance"), 1e-6)
        self.assertEqual(reread.read_persistent(str, SECTION, "exterior_margin_factor"), "150%")
        # Values that do not convert fall back to the default.
        self.assertEqual(reread.read_persistent(float, SECTION, "exterior_margin_factor", 1.0), 1.0)
        self.assertEqual(reread.read_persistent(float, SECTION, "epsilon", 1e-9), 1e-9)
        self.assertIsNone(reread.read_persistent(int, "other", "max_events_factor"))

        loaded = SkeletonSettings.load(self.filename)
        self.assertEqual(loaded.max_events_factor, 12)
        self.assertEqual(loaded.parallel_tolerance, 1e-6)
        self.assertEqual(loaded.exterior_margin_factor, 1.0)

    def test_unwritable_location(self):
        missing = os.path.join(self.directory.name, "no", "such", "dir.ini")
        SkeletonSettings(epsilon=1e-6).save(missing)
        self.assertFalse(os.path.exists(missing))
