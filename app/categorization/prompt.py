from collections.abc import Sequence
from pathlib import Path

from app.categorization.models import TransactionForCategorization
from app.llm.prompt_loader import load_prompt_template

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "groceries",
    "food_delivery",
    "dining",
    "coffee_shops",
    "transport",
    "utilities",
    "entertainment",
    "subscriptions",
    "shopping",
    "healthcare",
    "transfer",
    "salary",
    "other",
)

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "groceries": "supermarket, food shopping, продукты, магазин",
    "food_delivery": "Glovo, Wolt, Yandex Eats, delivery services",
    "dining": "restaurants, cafes, рестораны, кафе",
    "coffee_shops": "Starbucks, coffee houses, кофейни",
    "transport": "taxi, bus, metro, fuel, такси, транспорт",
    "utilities": "electricity, water, internet, mobile, коммуналка",
    "entertainment": "cinema, games, leisure, кино, развлечения",
    "subscriptions": "Netflix, Spotify, monthly services, подписки",
    "shopping": "online shopping, retail stores, покупки",
    "healthcare": "pharmacy, clinic, аптека, клиника",
    "transfer": "money transfers, bank transfers, переводы",
    "salary": "salary, pension, income, зарплата",
    "other": "anything that fits no other category",
}

ENGLISH_EXAMPLES: tuple[tuple[str, str], ...] = (
    ("STARBUCKS #1234", "coffee_shops"),
    ("AMAZON.COM PURCHASE", "shopping"),
    ("UBER TRIP", "transport"),
)

RUSSIAN_EXAMPLES: tuple[tuple[str, str], ...] = (
    ("МАГНУМ ТОО", "groceries"),
    ("GLOVO ДОСТАВКА", "food_delivery"),
    ("KASPI GOLD ПЕРЕВОД", "transfer"),
)


class CategorizationPromptBuilder:
    """Renders the batch categorization prompt from its template."""

    def __init__(self, prompt_dir: Path | None = None) -> None:
        self._template = load_prompt_template("categorization_prompt.txt", prompt_dir)

    def build(
        self,
        transactions: Sequence[TransactionForCategorization],
        categories: Sequence[str],
        language: str = "ru",
    ) -> str:
        return self._template.format(
            categories=self.category_hints(categories),
            examples=self.examples(language),
            transactions="\n".join(
                f'{tx.id}: "{tx.description}" {tx.amount_formatted}' for tx in transactions
            ),
        )

    @staticmethod
    def category_hints(categories: Sequence[str]) -> str:
        lines = []
        for category in categories:
            hint = CATEGORY_DESCRIPTIONS.get(category)
            lines.append(f"- {category} ({hint})" if hint else f"- {category}")
        return "\n".join(lines)

    @staticmethod
    def examples(language: str) -> str:
        pairs = RUSSIAN_EXAMPLES if language.lower() in ("ru", "kk") else ENGLISH_EXAMPLES
        return "\n".join(
            f'{index}. "{description}" -> {category}'
            for index, (description, category) in enumerate(pairs, start=1)
        )
