import os
import tempfile
import unittest

from blitz.infrastructure._config import BlitzConfig, get_config, set_config


class TestBlitzConfig(unittest.TestCase):
    def tearDown(self) -> None:
        set_config(None)

    def test_defaults(self):
        cfg = BlitzConfig.from_env({})
        self.assertEqual(cfg, BlitzConfig())
        self.assertEqual(cfg.kernel, "blas")
        self.assertFalse(cfg.debug)
        self.assertIsNone(cfg.seed)
        self.assertEqual(cfg.dtype, "float32")

    def test_reads_variables(self):
        cfg = BlitzConfig.from_env(
            {
                "BLITZ_KERNEL": "asm",
                "BLITZ_DEBUG": "1",
                "BLITZ_SEED": "42",
                "BLITZ_DTYPE": "float64",
            }
        )
        self.assertEqual(cfg.kernel, "asm")
        self.assertTrue(cfg.debug)
        self.assertEqual(cfg.seed, 42)
        self.assertEqual(cfg.dtype, "float64")

    def test_debug_false_strings(self):
        for raw in ("", "0", "false", "FALSE", " False "):
            with self.subTest(raw=raw):
                self.assertFalse(BlitzConfig.from_env({"BLITZ_DEBUG": raw}).debug)
        self.assertTrue(BlitzConfig.from_env({"BLITZ_DEBUG": "yes"}).debug)

    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError):
            BlitzConfig.from_env({"BLITZ_KERNEL": "cublas"})
        with self.assertRaises(ValueError):
            BlitzConfig.from_env({"BLITZ_SEED": "abc"})
        with self.assertRaises(ValueError):
            BlitzConfig.from_env({"BLITZ_DTYPE": "int32"})

    def test_with_overrides_validates(self):
        cfg = BlitzConfig().with_overrides(kernel="asm")
        self.assertEqual(cfg.kernel, "asm")
        with self.assertRaises(ValueError):
            BlitzConfig().with_overrides(kernel="fast")

    def test_set_and_get_config(self):
        cfg = BlitzConfig(kernel="asm", seed=7)
        set_config(cfg)
        self.assertIs(get_config(), cfg)

    def test_dotenv_file_is_loaded_without_overriding(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, ".env")
            with open(path, "w", encoding="utf-8") as f:
                f.write("BLITZ_TEST_ONLY_SEED_MARKER=1\nBLITZ_SEED=99\n")
            saved = os.environ.pop("BLITZ_SEED", None)
            try:
                os.environ["BLITZ_SEED"] = "5"
                cfg = BlitzConfig.from_env(dotenv_path=path)
                self.assertEqual(cfg.seed, 5)
                self.assertEqual(os.environ.get("BLITZ_TEST_ONLY_SEED_MARKER"), "1")
            finally:
                os.environ.pop("BLITZ_TEST_ONLY_SEED_MARKER", None)
                if saved is None:
                    os.environ.pop("BLITZ_SEED", None)
                else:
                    os.environ["BLITZ_SEED"] = saved


if __name__ == "__main__":
    unittest.main()
