from __future__ import annotations

import unittest

from app.mappers.country_mapper import CountryMapper, similarity


class TestSimilarity(unittest.TestCase):
    def test_identical_strings_score_100(self) -> None:
        self.assertEqual(similarity("FRANCE", "FRANCE"), 100.0)
        self.assertEqual(similarity(" france ", "FRANCE"), 100.0)

    def test_empty_side_scores_zero(self) -> None:
        self.assertEqual(similarity("", "FRANCE"), 0.0)
        self.assertEqual(similarity("FRANCE", ""), 0.0)

    def test_single_edit_scales_by_longest_string(self) -> None:
        self.assertAlmostEqual(similarity("FRANCEE", "FRANCE"), 100.0 * 6 / 7)
        self.assertAlmostEqual(similarity("FRNCE", "FRANCE"), 100.0 * 5 / 6)
        self.assertAlmostEqual(similarity("SPAIX", "SPAIN"), 80.0)


class TestCountryMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = CountryMapper()

    def test_blank_and_missing_values_return_none(self) -> None:
        self.assertIsNone(self.mapper.normalize(None))
        self.assertIsNone(self.mapper.normalize("   "))
        self.assertEqual(self.mapper.unmatched(), [])

    def test_nan_cell_is_missing_not_pending(self) -> None:
        self.assertIsNone(self.mapper.normalize(float("nan")))
        self.assertEqual(self.mapper.unmatched(), [])

    def test_exact_name_is_case_and_whitespace_insensitive(self) -> None:
        self.assertEqual(self.mapper.normalize("  germany "), "GERMANY")

    def test_alias_wins_even_at_strict_threshold(self) -> None:
        self.assertEqual(self.mapper.normalize("USA", threshold=100), "UNITED STATES")
        self.assertEqual(self.mapper.normalize("Holland", threshold=100), "NETHERLANDS")
        self.assertEqual(self.mapper.unmatched(), [])

    def test_fuzzy_match_above_threshold(self) -> None:
        self.assertEqual(self.mapper.normalize("Francee"), "FRANCE")

    def test_below_threshold_is_kept_and_recorded(self) -> None:
        self.assertEqual(self.mapper.normalize("Frnce"), "FRNCE")
        self.assertEqual(self.mapper.normalize("FRNCE"), "FRNCE")
        self.assertEqual(self.mapper.unmatched(), ["FRNCE"])

    def test_threshold_boundary_is_inclusive(self) -> None:
        self.assertEqual(self.mapper.normalize("SPAIX", threshold=80), "SPAIN")
        self.assertEqual(self.mapper.normalize("SPAIX"), "SPAIX")

    def test_invalid_threshold_raises(self) -> None:
        with self.assertRaises(ValueError):
            self.mapper.normalize("France", threshold=101)
        with self.assertRaises(ValueError):
            CountryMapper(default_threshold=-1)

    def test_user_mapping_resolves_pending_country(self) -> None:
        self.mapper.normalize("Frnce")

        applied = self.mapper.add_mappings({"frnce": "France"})

        self.assertEqual(applied, {"FRNCE": "FRANCE"})
        self.assertEqual(self.mapper.normalize("Frnce"), "FRANCE")
        self.assertEqual(self.mapper.user_mappings(), {"FRNCE": "FRANCE"})

    def test_existing_mappings_are_not_overridden(self) -> None:
        self.mapper.add_mappings({"FRNCE": "FRANCE"})

        applied = self.mapper.add_mappings({"FRNCE": "SPAIN", "USA": "CANADA", "GERMANY": "FRANCE"})

        self.assertEqual(applied, {})
        self.assertEqual(self.mapper.normalize("FRNCE"), "FRANCE")
        self.assertEqual(self.mapper.normalize("USA"), "UNITED STATES")

    def test_mapping_to_non_canonical_name_raises(self) -> None:
        with self.assertRaises(ValueError):
            self.mapper.add_mappings({"FRNCE": "FRANKREICH"})
        self.assertEqual(self.mapper.user_mappings(), {})

    def test_reset_drops_user_mappings_and_pending_names(self) -> None:
        self.mapper.normalize("Frnce")
        self.mapper.add_mappings({"FRNCE": "FRANCE"})

        self.mapper.reset()

        self.assertEqual(self.mapper.user_mappings(), {})
        self.assertEqual(self.mapper.unmatched(), [])

    def test_region_and_iso3_lookup(self) -> None:
        self.assertEqual(self.mapper.region_for("FRANCE"), "Europe")
        self.assertEqual(self.mapper.region_for("UNITED STATES"), "North America")
        self.assertIsNone(self.mapper.region_for("FRNCE"))
        self.assertIsNone(self.mapper.region_for(None))
        self.assertEqual(self.mapper.iso3_for("GERMANY"), "DEU")


if __name__ == "__main__":
    unittest.main()
