import os
import re
import tempfile
import unittest
from unittest.mock import patch

from wabf import wabf_cli
from wabf.core.lookup import LookupClient
from wabf.core.models import Profile, Registration
from wabf.generator import PatternExpander, normalize_pattern, validate_pattern


class StaticLookup(LookupClient):
    def __init__(self, registered):
        self.registered = set(registered)
        self.closed = False

    def is_registered(self, identifier):
        return Registration(identifier=identifier, registered=identifier in self.registered)

    def get_profile(self, identifier):
        return Profile(display_name="Found")

    def get_business_info(self, identifier):
        return {}

    def get_avatar_reference(self, identifier):
        return None

    def close(self):
        self.closed = True


class TestCLI(unittest.TestCase):
    def test_parser_defaults(self):
        args = wabf_cli.create_argument_parser().parse_args(["+1", "555", "12x"])
        self.assertEqual(args.pattern, ["+1", "555", "12x"])
        self.assertEqual(args.concurrency, 1)
        self.assertEqual(args.delay, 0.2)
        self.assertEqual(args.output_format, "wa.me")

    def test_help_documents_uppercase_wildcard(self):
        epilog = wabf_cli.create_argument_parser().epilog
        self.assertIn("x or X", epilog)
        examples = re.findall(r'%\(prog\)s[^"\n]*"([^"]+)"', epilog)
        self.assertTrue(examples)
        for pattern in examples:
            with self.subTest(pattern=pattern):
                self.assertTrue(validate_pattern(normalize_pattern(pattern)))
        self.assertEqual(PatternExpander("12X").count(), 10)

    def test_list_clients(self):
        self.assertEqual(wabf_cli.main(["--list-clients"]), 0)

    def test_missing_pattern(self):
        self.assertEqual(wabf_cli.main([]), 1)

    def test_unbalanced_pattern(self):
        self.assertEqual(wabf_cli.main(["555[12"]), 1)

    def test_invalid_characters(self):
        self.assertEqual(wabf_cli.main(["555abc"]), 1)

    def test_too_many_candidates(self):
        self.assertEqual(wabf_cli.main(["--max-candidates", "50", "55xx"]), 1)

    @patch.dict(os.environ, {}, clear=True)
    def test_requires_directory_url(self):
        self.assertEqual(wabf_cli.main(["--yes", "55x"]), 1)

    @patch.object(wabf_cli, "install_signal_handlers")
    def test_full_scan(self, _mock_signals):
        lookup = StaticLookup(registered={"155503", "155517"})
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "found.txt")
            with patch.object(wabf_cli, "create_lookup_client", return_value=lookup):
                code = wabf_cli.main([
                    "--yes", "--no-banner", "--delay", "0", "--jitter", "0", "-c", "3",
                    "--directory-url", "http://bridge.local", "--output-file", out,
                    "--output-format", "pn", "+1 555", "[01]x",
                ])
            self.assertEqual(code, 0)
            with open(out, encoding="utf-8") as f:
                self.assertEqual(sorted(f.read().split()), ["155503", "155517"])
        self.assertTrue(lookup.closed)


if __name__ == '__main__':
    unittest.main()
