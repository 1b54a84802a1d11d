import unittest

from wabf.utils import clean_number, estimate_duration, format_duration, format_identifier, format_link


class TestUtils(unittest.TestCase):
    def test_format_identifier(self):
        self.assertEqual(format_identifier("+1 555 0100", "wa.me"), "https://wa.me/15550100")
        self.assertEqual(format_identifier("15550100", "jid"), "15550100@c.us")
        self.assertEqual(format_identifier("15550100", "pn"), "15550100")
        self.assertEqual(format_identifier("15550100", "bogus"), "https://wa.me/15550100")

    def test_clean_number_and_link(self):
        self.assertEqual(clean_number("+44 7700 900"), "447700900")
        self.assertEqual(format_link("+44 7700"), "https://wa.me/447700")

    def test_format_duration(self):
        self.assertEqual(format_duration(59), "59s")
        self.assertEqual(format_duration(125), "2m 5s")
        self.assertEqual(format_duration(3720), "1h 2m")

    def test_estimate_duration(self):
        self.assertEqual(estimate_duration(100, 0.2, 0.2, threads=1), 30)
        self.assertEqual(estimate_duration(100, 0.2, 0.2, threads=3), 10)
        self.assertEqual(estimate_duration(100, 0, 0, threads=0), 0)


if __name__ == '__main__':
    unittest.main()
