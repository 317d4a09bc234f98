import pytest

from app.preprocessing.models import DocumentType
from app.preprocessing.preprocessor import DocumentPreprocessor


class TestPreprocessEmpty:
    def test_blank_text_gives_empty_result(self) -> None:
        result = DocumentPreprocessor().preprocess("   \n  ")
        assert result.cleaned_lines == []
        assert result.hints.type == DocumentType.UNKNOWN
        assert result.hints.language == "en"


class TestLineFilter:
    def test_keeps_only_transaction_lines_verbatim(self) -> None:
        text = (
            "Kaspi Gold выписка\n"
            "15.01.2026 Покупка Magnum -3 700,00 ₸\n"
            "Page 1 of 2\n"
            "- 2 -\n"
            "Спасибо что выбрали нас"
        )
        result = DocumentPreprocessor().preprocess(text)
        assert result.cleaned_lines == ["15.01.2026 Покупка Magnum -3 700,00 ₸"]

    def test_keeps_keyword_lines_without_amounts(self) -> None:
        result = DocumentPreprocessor().preprocess("Перевод между своими счетами")
        assert result.cleaned_lines == ["Перевод между своими счетами"]

    def test_drops_header_and_footer_lines(self) -> None:
        text = "Generated on 15.01.2026\n15.01.2026 Coffee 4.50"
        result = DocumentPreprocessor().preprocess(text)
        assert result.cleaned_lines == ["15.01.2026 Coffee 4.50"]

    def test_keeps_original_order(self) -> None:
        text = "02.01.2026 B 2.00\n01.01.2026 A 1.00"
        result = DocumentPreprocessor().preprocess(text)
        assert result.cleaned_lines == ["02.01.2026 B 2.00", "01.01.2026 A 1.00"]
        assert result.cleaned_text == "02.01.2026 B 2.00\n01.01.2026 A 1.00"


class TestDocumentType:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Кассовый чек №15", DocumentType.RECEIPT),
            ("Invoice #42\nAmount due: $100", DocumentType.INVOICE),
            ("Order confirmation\nOrder total $20.00", DocumentType.INVOICE),
            ("Итого к оплате 5 000 ₸", DocumentType.INVOICE),
            ("Total 12.00", DocumentType.RECEIPT),
            ("Выписка по счету за период", DocumentType.BANK_STATEMENT),
            ("hello world", DocumentType.UNKNOWN),
        ],
    )
    def test_detects_type(self, text: str, expected: DocumentType) -> None:
        assert DocumentPreprocessor().detect_document_type(text) == expected


class TestLanguage:
    def test_kazakh_letters_win(self) -> None:
        assert DocumentPreprocessor().detect_language("Төлем 5000 ₸") == "kk"

    def test_mostly_cyrillic_is_russian(self) -> None:
        assert DocumentPreprocessor().detect_language("Оплата покупки в Magnum") == "ru"

    def test_mostly_latin_is_english(self) -> None:
        assert DocumentPreprocessor().detect_language("Payment to store") == "en"


class TestTokenReduction:
    def test_fraction_removed(self) -> None:
        assert DocumentPreprocessor.estimate_token_reduction("abcd", "ab") == pytest.approx(0.5)

    def test_empty_original(self) -> None:
        assert DocumentPreprocessor.estimate_token_reduction("", "") == 0.0

    def test_statement_boilerplate_is_at_least_a_third_of_the_text(self) -> None:
        transactions = [
            "15.01.2026 -3 700,00 ₸ Покупка MAGNUM ALMATY",
            "16.01.2026 +50 000,00 ₸ Пополнение с Kaspi Депозит",
            "17.01.2026 -12 500,00 ₸ Перевод Асанов А.",
            "18.01.2026 -2 150,00 ₸ Покупка Glovo",
            "20.01.2026 -8 900,00 ₸ Оплата Beeline",
        ]
        text = "\n".join(
            [
                "АО «Kaspi Bank»",
                "Выписка по карте Kaspi Gold за период",
                "Клиент: Иванов Иван Иванович",
                "Дата формирования выписки: 01.02.2026",
                "Дата Сумма Операция Детали",
                *transactions[:3],
                "- 1 -",
                "Page 1 of 2",
                *transactions[3:],
                "Generated by Kaspi Bank online service",
                "Confidential: for the account holder only",
                "Подробнее на www.kaspi.kz",
                "Служба поддержки тел: +7 727 258 59 65",
                "стр. 2",
            ]
        )
        preprocessor = DocumentPreprocessor()
        result = preprocessor.preprocess(text)
        assert result.cleaned_lines == transactions
        assert preprocessor.estimate_token_reduction(text, result.cleaned_text) >= 0.30
