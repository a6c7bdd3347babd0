"""Tests for PII scrubbing before text leaves the service."""
import pytest

from talkitout.agents.pseudonymizer import contains_pii, mask_user_data, pseudonymize


class TestPseudonymize:
    @pytest.mark.parametrize("text", [
        "I have three exams next week and I feel behind.",
        "my friend said the quiz was easy",
        "Chapter 12 covers 1998 to 2004",
        "",
    ])
    def test_text_without_pii_is_unchanged(self, text):
        assert pseudonymize(text) == text

    @pytest.mark.parametrize("text", [
        "email me at alex@school.sg",
        "my number is 91234567",
        "I'm Sarah and my NRIC is S1234567D",
    ])
    def test_opt_out_returns_input(self, text):
        assert pseudonymize(text, allow_external_pii=True) == text

    def test_email(self):
        assert pseudonymize("write to alex.tan@school.edu.sg please") == "write to [EMAIL] please"

    def test_singapore_phone_with_and_without_prefix(self):
        assert pseudonymize("call 91234567") == "call [PHONE]"
        assert pseudonymize("call +65 61234567 now") == "call [PHONE] now"

    def test_nric(self):
        assert pseudonymize("my IC is T0123456Z") == "my IC is [ID]"

    def test_self_introduced_name(self):
        assert pseudonymize("Hi, my name is Sarah Lee.") == "Hi, my name is [NAME]."
        assert pseudonymize("I'm Sarah, and I'm tired") == "I'm [NAME], and I'm tired"

    def test_phrase_is_case_insensitive(self):
        assert pseudonymize("MY NAME IS John") == "MY NAME IS [NAME]"

    def test_lowercase_name_after_my_name_is(self):
        out = pseudonymize("hi, my name is sarah and i feel lost")
        assert "sarah" not in out
        assert out.startswith("hi, my name is [NAME]")

    def test_lowercase_word_after_im_is_not_a_name(self):
        text = "I'm excited about my math test tomorrow!"
        assert pseudonymize(text) == text


class TestHelpers:
    def test_contains_pii(self):
        assert contains_pii("reach me on 81234567")
        assert contains_pii("a@b.co")
        assert not contains_pii("nothing to see here")
        assert not contains_pii("")

    def test_mask_user_data(self):
        assert mask_user_data(email="a@b.co", name="Alex") == {
            "email": "[EMAIL]",
            "name": "[NAME]",
            "phone": None,
        }
