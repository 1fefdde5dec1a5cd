import unittest

from addrgraph.core.errors import ExplorerError, ValidationError
from addrgraph.core.validation import validate_address


class ValidateAddressTests(unittest.TestCase):
    def test_accepts_known_prefixes(self) -> None:
        for addr in (
            "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
            "3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy",
            "bc1qar0srrr7xfkvy5l643lydnw9re59gtz",
        ):
            with self.subTest(addr=addr):
                self.assertEqual(validate_address(addr), addr)

    def test_strips_whitespace(self) -> None:
        self.assertEqual(
            validate_address("  1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa\n"),
            "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
        )

    def test_rejects_bad_length(self) -> None:
        for addr in ("1abc", "1" * 25, "1" * 36):
            with self.subTest(addr=addr):
                with self.assertRaises(ValidationError):
                    validate_address(addr)

    def test_rejects_unknown_prefix(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            validate_address("0x52908400098527886E0F7030069857D2E4169EE7"[:34])
        self.assertIn("bc1", str(ctx.exception))

    def test_empty_input(self) -> None:
        with self.assertRaises(ExplorerError):
            validate_address("")
        with self.assertRaises(ExplorerError):
            validate_address(None)


if __name__ == "__main__":
    unittest.main()
