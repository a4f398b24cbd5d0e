import unittest

from statsd_emitter.lines import COUNT, GAUGE, TIME, UNIQUE, build_line


class TestBuildLine(unittest.TestCase):
    def test_type_tags(self):
        self.assertEqual((COUNT, GAUGE, UNIQUE, TIME), ("c", "g", "s", "ms"))

    def test_without_rate(self):
        self.assertEqual(build_line("app.hits", "1", COUNT), "app.hits:1|c")
        self.assertEqual(build_line("app.hits", "1", COUNT, 1.0), "app.hits:1|c")
        self.assertEqual(build_line("app.hits", "1", COUNT, 2.0), "app.hits:1|c")

    def test_sampled(self):
        self.assertEqual(build_line("app.db", "12", TIME, 0.1), "app.db:12|ms|@0.1")
        self.assertEqual(build_line("app.db", "12", TIME, 0.25), "app.db:12|ms|@0.25")

    def test_rate_is_not_clamped(self):
        self.assertEqual(build_line("x", "1", COUNT, -0.5), "x:1|c|@-0.5")
        self.assertEqual(build_line("x", "1", COUNT, 0), "x:1|c|@0")

    def test_custom_type_tag(self):
        self.assertEqual(build_line("x", "3", "h"), "x:3|h")


if __name__ == "__main__":
    unittest.main()
