import unittest

from defconbot.classifier import (
    NOT_VANDALISM_KEYWORDS,
    VANDALISM_KEYWORDS,
    is_revert_of_vandalism,
    normalize_summary,
)


class TestNormalizeSummary(unittest.TestCase):
    def test_no_comment_is_only_lowercased(self):
        self.assertEqual(normalize_summary("Reverted Edits"), "reverted edits")

    def test_strips_section_comment(self):
        self.assertEqual(normalize_summary("/* History */ RV vandalism"), " rv vandalism")

    def test_strips_each_comment_minimally(self):
        self.assertEqual(normalize_summary("a /* x */ b /* y */ c"), "a  b  c")

    def test_comment_spanning_lines(self):
        self.assertEqual(normalize_summary("/* a\nb */done"), "done")

    def test_unterminated_comment_is_kept(self):
        self.assertEqual(normalize_summary("rv /* open"), "rv /* open")

    def test_empty_comment_markers_are_not_a_match(self):
        # the pattern needs at least one character between the markers
        self.assertEqual(normalize_summary("/**/ X"), "/**/ x")

    def test_non_ascii_letters_are_left_alone(self):
        self.assertEqual(normalize_summary("ÉTÉ Revert"), "ÉtÉ revert")

    def test_empty(self):
        self.assertEqual(normalize_summary(""), "")


class TestIsRevertOfVandalism(unittest.TestCase):
    def test_not_keywords_take_priority(self):
        self.assertFalse(is_revert_of_vandalism("RV vandalism, good faith edit"))

    def test_lta_revert(self):
        self.assertTrue(is_revert_of_vandalism("Reverted edits by X (LTA)"))

    def test_not_keyword_inside_section_comment_is_ignored(self):
        self.assertTrue(is_revert_of_vandalism("rv /* good faith */ vandalism"))

    def test_keyword_inside_section_comment_is_ignored(self):
        self.assertFalse(is_revert_of_vandalism("/* Reverted */ added a source"))

    def test_every_vandalism_keyword_matches(self):
        for keyword in VANDALISM_KEYWORDS:
            with self.subTest(keyword=keyword):
                self.assertTrue(is_revert_of_vandalism("x " + keyword + " y"))

    def test_every_not_keyword_overrides(self):
        for keyword in NOT_VANDALISM_KEYWORDS:
            with self.subTest(keyword=keyword):
                self.assertFalse(is_revert_of_vandalism("undid revision 1 " + keyword))

    def test_rv_needs_trailing_space(self):
        self.assertFalse(is_revert_of_vandalism("rv"))
        self.assertTrue(is_revert_of_vandalism("rv vandal"))

    def test_rvv(self):
        self.assertTrue(is_revert_of_vandalism("RVV per ANI"))

    def test_substring_without_word_boundary(self):
        self.assertTrue(is_revert_of_vandalism("Undid revision 123 by Foo"))
        self.assertFalse(is_revert_of_vandalism("Reformatted table"))

    def test_unrelated_summary(self):
        self.assertFalse(is_revert_of_vandalism("Added infobox"))

    def test_empty_summary(self):
        self.assertFalse(is_revert_of_vandalism(""))


if __name__ == "__main__":
    unittest.main()
