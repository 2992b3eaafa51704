# store_credits/tests/test_code_generator.py

from django.test import SimpleTestCase, override_settings

from store_credits.services import (
    CODE_ALPHABET,
    StoreCreditCodeExhaustedError,
    StoreCreditCodeGenerator,
)


def scripted_choice(chars: str):
    stream = iter(chars)
    return lambda alphabet: next(stream)


class StoreCreditCodeGeneratorTests(SimpleTestCase):
    def test_code_shape(self):
        generator = StoreCreditCodeGenerator()

        for _ in range(50):
            code = generator.generate()
            self.assertTrue(code.startswith("SC-"))
            self.assertEqual(len(code), 8)
            self.assertTrue(set(code[3:]) <= set(CODE_ALPHABET))

    def test_alphabet_has_no_ambiguous_characters(self):
        for ch in "01OI":
            self.assertNotIn(ch, CODE_ALPHABET)

    def test_regenerates_on_collision(self):
        generator = StoreCreditCodeGenerator(
            length=3, choice=scripted_choice("AAABBBCCC")
        )
        taken = {"SC-AAA", "SC-BBB"}

        code = generator.generate_unique(exists=taken.__contains__)

        self.assertEqual(code, "SC-CCC")

    def test_exhausted_after_max_attempts(self):
        generator = StoreCreditCodeGenerator(
            length=2, max_attempts=3, choice=lambda alphabet: "Z"
        )
        checked = []

        def exists(code):
            checked.append(code)
            return True

        with self.assertRaises(StoreCreditCodeExhaustedError):
            generator.generate_unique(exists=exists)

        self.assertEqual(checked, ["SC-ZZ"] * 3)

    def test_rejects_bad_configuration(self):
        with self.assertRaises(ValueError):
            StoreCreditCodeGenerator(length=0)
        with self.assertRaises(ValueError):
            StoreCreditCodeGenerator(max_attempts=0)
        with self.assertRaises(ValueError):
            StoreCreditCodeGenerator(alphabet="")

    @override_settings(
        STORE_CREDIT_CODE_PREFIX="GC-",
        STORE_CREDIT_CODE_LENGTH=8,
        STORE_CREDIT_CODE_MAX_ATTEMPTS=2,
    )
    def test_from_settings(self):
        generator = StoreCreditCodeGenerator.from_settings()

        self.assertEqual(generator.prefix, "GC-")
        self.assertEqual(generator.length, 8)
        self.assertEqual(generator.max_attempts, 2)
        self.assertEqual(len(generator.generate()), 11)

    def test_from_settings_overrides(self):
        generator = StoreCreditCodeGenerator.from_settings(prefix="", length=4)

        self.assertEqual(len(generator.generate()), 4)
