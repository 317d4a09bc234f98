import pytest

from app.categorization.merchant_normalizer import MerchantNormalizer


@pytest.fixture
def normalizer() -> MerchantNormalizer:
    return MerchantNormalizer()


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("МАГНУМ СУПЕР АЛМАТЫ", "МАГНУМ СУПЕР"),
            ("GLOVO *1234 ALMATY KZ", "GLOVO"),
            ("ТОО МАГНУМ КЭШ ЭНД КЕРРИ", "МАГНУМ КЭШ ЭНД КЕРРИ"),
            ("POS 123456 KFC", "KFC"),
            ("starbucks 15.01.2026 14:32", "STARBUCKS"),
            ("Wolt #4521", "WOLT"),
        ],
    )
    def test_strips_noise(self, normalizer: MerchantNormalizer, raw: str, expected: str) -> None:
        assert normalizer.normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_gives_empty(self, normalizer: MerchantNormalizer, raw: str | None) -> None:
        assert normalizer.normalize(raw) == ""

    def test_falls_back_to_original_when_everything_removed(
        self, normalizer: MerchantNormalizer
    ) -> None:
        assert normalizer.normalize("12345678") == "12345678"

    def test_falls_back_to_first_word(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.normalize("ALMATY") == "ALMATY"


class TestKeywords:
    def test_drops_common_words(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.extract_keywords("THE COFFEE AND TEA HOUSE") == ["COFFEE", "TEA", "HOUSE"]

    def test_limits_to_five(self, normalizer: MerchantNormalizer) -> None:
        assert len(normalizer.extract_keywords("AA BB CC DD EE FF GG")) == 5


class TestSimilarity:
    def test_containment_is_similar(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.is_similar("MAGNUM ALMATY", "magnum")

    def test_keyword_overlap_is_similar(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.is_similar("COFFEE HOUSE CENTRAL", "CENTRAL COFFEE")

    def test_different_merchants(self, normalizer: MerchantNormalizer) -> None:
        assert not normalizer.is_similar("GLOVO", "WOLT")

    def test_blank_is_never_similar(self, normalizer: MerchantNormalizer) -> None:
        assert not normalizer.is_similar("", "GLOVO")


class TestPattern:
    def test_first_two_keywords(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.to_pattern("MAGNUM CASH AND CARRY") == "MAGNUM CASH"

    def test_blank(self, normalizer: MerchantNormalizer) -> None:
        assert normalizer.to_pattern("  ") == ""
