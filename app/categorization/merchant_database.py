"""Static merchant table for Tier 1a categorization.

Entries are evaluated in order, first match wins. Every entry names a
specific merchant or a merchant type unambiguous enough to carry at least
0.90 confidence; vaguer keywords belong to the rule layer.
"""

from app.categorization.models import CategorizationResult, CategorizationSource, MerchantPattern

# ----------------------------------------------------------------------
# Groceries
# ----------------------------------------------------------------------

GROCERY_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"MAGNUM", "groceries", 0.95, "Magnum"),
    MerchantPattern(r"МАГНУМ", "groceries", 0.95, "Magnum"),
    MerchantPattern(r"\bSMALL\b", "groceries", 0.90, "Small"),
    MerchantPattern(r"METRO\s*CASH", "groceries", 0.95, "Metro"),
    MerchantPattern(r"ANVAR", "groceries", 0.90, "Anvar"),
    MerchantPattern(r"АНВАР", "groceries", 0.90, "Anvar"),
    MerchantPattern(r"RAMSTORE", "groceries", 0.92, "Ramstore"),
    MerchantPattern(r"GALMART", "groceries", 0.90, "Galmart"),
    MerchantPattern(r"ARBUZ", "groceries", 0.95, "Arbuz.kz"),
    MerchantPattern(r"KLEVER", "groceries", 0.90, "Klever"),
    MerchantPattern(r"\bSPAR\b", "groceries", 0.90, "Spar"),
    MerchantPattern(r"FIX\s*PRICE", "groceries", 0.90, "Fix Price"),
    MerchantPattern(r"ФИКС\s*ПРАЙС", "groceries", 0.90, "Fix Price"),
    MerchantPattern(r"WHOLE\s*FOODS", "groceries", 0.95, "Whole Foods"),
    MerchantPattern(r"ПЯТЁРОЧКА|ПЯТЕРОЧКА", "groceries", 0.95, "Pyaterochka"),
    MerchantPattern(r"СУПЕРМАРКЕТ|SUPERMARKET", "groceries", 0.90),
)

# ----------------------------------------------------------------------
# Food delivery and dining
# ----------------------------------------------------------------------

FOOD_DELIVERY_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"GLOVO", "food_delivery", 0.98, "Glovo"),
    MerchantPattern(r"ГЛОВО", "food_delivery", 0.95, "Glovo"),
    MerchantPattern(r"WOLT", "food_delivery", 0.98, "Wolt"),
    MerchantPattern(r"YANDEX.*(?:EDA|EATS)", "food_delivery", 0.98, "Yandex Eats"),
    MerchantPattern(r"ЯНДЕКС.*ЕДА", "food_delivery", 0.98, "Yandex Eats"),
    MerchantPattern(r"CHOCOFOOD", "food_delivery", 0.95, "Chocofood"),
    MerchantPattern(r"DELIVERY\s*CLUB", "food_delivery", 0.95, "Delivery Club"),
    MerchantPattern(r"STARBUCKS", "coffee_shops", 0.95, "Starbucks"),
    MerchantPattern(r"COFFEE\s*BOOM", "coffee_shops", 0.92, "Coffee Boom"),
    MerchantPattern(r"MCDONALD", "dining", 0.95, "McDonald's"),
    MerchantPattern(r"\bKFC\b", "dining", 0.95, "KFC"),
    MerchantPattern(r"BURGER\s*KING", "dining", 0.95, "Burger King"),
    MerchantPattern(r"DODO\s*PIZZA|ДОДО\s*ПИЦЦА", "dining", 0.95, "Dodo Pizza"),
)

# ----------------------------------------------------------------------
# Transport
# ----------------------------------------------------------------------

TRANSPORT_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"YANDEX.*(?:TAXI|GO)\b", "transport", 0.98, "Yandex Taxi"),
    MerchantPattern(r"ЯНДЕКС.*ТАКСИ", "transport", 0.98, "Yandex Taxi"),
    MerchantPattern(r"INDRIVER|INDRIVE", "transport", 0.95, "InDriver"),
    MerchantPattern(r"\bDIDI\b", "transport", 0.95, "DiDi"),
    MerchantPattern(r"\bUBER\b", "transport", 0.98, "Uber"),
    MerchantPattern(r"МАКСИМ.*ТАКСИ", "transport", 0.90, "Maxim Taxi"),
    MerchantPattern(r"MAXIM.*TAXI", "transport", 0.90, "Maxim Taxi"),
    MerchantPattern(r"\bONAY\b", "transport", 0.95, "Onay Card"),
    MerchantPattern(r"ОНАЙ", "transport", 0.95, "Onay Card"),
    MerchantPattern(r"МЕТРО\s*АЛМАТЫ", "transport", 0.95, "Almaty Metro"),
    MerchantPattern(r"ALMATY\s*METRO", "transport", 0.95, "Almaty Metro"),
    MerchantPattern(r"\bАЗС\b", "transport", 0.90),
    MerchantPattern(r"ГАЗПРОМНЕФТЬ", "transport", 0.95, "Gazpromneft"),
    MerchantPattern(r"\bKMG\b", "transport", 0.90, "KMG"),
    MerchantPattern(r"КАЗМУНАЙГАЗ", "transport", 0.90, "KMG"),
    MerchantPattern(r"HELIOS", "transport", 0.90, "Helios"),
    MerchantPattern(r"\bSHELL\b", "transport", 0.95, "Shell"),
    MerchantPattern(r"AIR\s*ASTANA", "transport", 0.95, "Air Astana"),
    MerchantPattern(r"FLY\s*ARYSTAN", "transport", 0.95, "FlyArystan"),
)

# ----------------------------------------------------------------------
# Utilities and telecom
# ----------------------------------------------------------------------

UTILITIES_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"АЛМАТЫЭНЕРГО", "utilities", 0.98, "AlmatyEnergo"),
    MerchantPattern(r"ALMATY.*ENERG", "utilities", 0.98, "AlmatyEnergo"),
    MerchantPattern(r"АСТАНАЭНЕРГО", "utilities", 0.98, "AstanaEnergo"),
    MerchantPattern(r"КАРАГАНДА.*ЭНЕРГО", "utilities", 0.95),
    MerchantPattern(r"KEGOC", "utilities", 0.95, "KEGOC"),
    MerchantPattern(r"КАЗТРАНСГАЗ", "utilities", 0.95, "KazTransGas"),
    MerchantPattern(r"АЛМАТЫГАЗ", "utilities", 0.95, "AlmatyGas"),
    MerchantPattern(r"АЛМАТЫ\s*СУ\b", "utilities", 0.95, "AlmatySu"),
    MerchantPattern(r"ASTANA\s*SU\b", "utilities", 0.95, "AstanaSu"),
    MerchantPattern(r"ВОДОКАНАЛ", "utilities", 0.90),
    MerchantPattern(r"КАЗАХТЕЛЕКОМ", "utilities", 0.98, "Kazakhtelecom"),
    MerchantPattern(r"KAZAKHTELECOM", "utilities", 0.98, "Kazakhtelecom"),
    MerchantPattern(r"BEELINE", "utilities", 0.95, "Beeline"),
    MerchantPattern(r"БИЛАЙН", "utilities", 0.95, "Beeline"),
    MerchantPattern(r"KCELL", "utilities", 0.95, "Kcell"),
    MerchantPattern(r"\bACTIV\b", "utilities", 0.95, "Activ"),
    MerchantPattern(r"\bАКТИВ\b", "utilities", 0.95, "Activ"),
    MerchantPattern(r"TELE2", "utilities", 0.95, "Tele2"),
    MerchantPattern(r"ТЕЛЕ2", "utilities", 0.95, "Tele2"),
    MerchantPattern(r"\bALTEL\b", "utilities", 0.95, "Altel"),
    MerchantPattern(r"АЛТЕЛ", "utilities", 0.95, "Altel"),
    MerchantPattern(r"ALMA\s*TV", "utilities", 0.90, "Alma TV"),
    MerchantPattern(r"\bID\s*NET\b", "utilities", 0.90, "ID Net"),
)

# ----------------------------------------------------------------------
# Entertainment and subscriptions
# ----------------------------------------------------------------------

ENTERTAINMENT_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"KINOPARK", "entertainment", 0.95, "Kinopark"),
    MerchantPattern(r"КИНОПАРК", "entertainment", 0.95, "Kinopark"),
    MerchantPattern(r"CHAPLIN", "entertainment", 0.95, "Chaplin Cinemas"),
    MerchantPattern(r"ЧАПЛИН", "entertainment", 0.95, "Chaplin Cinemas"),
    MerchantPattern(r"CINEMAX", "entertainment", 0.95, "Cinemax"),
    MerchantPattern(r"NETFLIX", "subscriptions", 0.98, "Netflix"),
    MerchantPattern(r"SPOTIFY", "subscriptions", 0.98, "Spotify"),
    MerchantPattern(r"APPLE\s*MUSIC", "subscriptions", 0.98, "Apple Music"),
    MerchantPattern(r"YOUTUBE\s*PREMIUM", "subscriptions", 0.98, "YouTube Premium"),
    MerchantPattern(r"\bIVI\b", "subscriptions", 0.95, "IVI"),
    MerchantPattern(r"КИНОПОИСК|KINOPOISK", "subscriptions", 0.95, "Kinopoisk"),
    MerchantPattern(r"\bOKKO\b", "subscriptions", 0.95, "Okko"),
    MerchantPattern(r"MEGOGO", "subscriptions", 0.95, "Megogo"),
    MerchantPattern(r"YANDEX.*PLUS", "subscriptions", 0.95, "Yandex Plus"),
    MerchantPattern(r"ЯНДЕКС.*ПЛЮС", "subscriptions", 0.95, "Yandex Plus"),
    MerchantPattern(r"\bSTEAM\b", "entertainment", 0.95, "Steam"),
    MerchantPattern(r"PLAYSTATION", "entertainment", 0.95, "PlayStation"),
    MerchantPattern(r"\bXBOX\b", "entertainment", 0.95, "Xbox"),
    MerchantPattern(r"NINTENDO", "entertainment", 0.95, "Nintendo"),
    MerchantPattern(r"EPIC\s*GAMES", "entertainment", 0.95, "Epic Games"),
    MerchantPattern(r"АКВАПАРК", "entertainment", 0.90),
)

# ----------------------------------------------------------------------
# Shopping
# ----------------------------------------------------------------------

SHOPPING_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"KASPI\s*MAGAZIN", "shopping", 0.95, "Kaspi Magazin"),
    MerchantPattern(r"КАСПИ\s*МАГАЗИН", "shopping", 0.95, "Kaspi Magazin"),
    MerchantPattern(r"KASPI\s*SHOP", "shopping", 0.95, "Kaspi Shop"),
    MerchantPattern(r"SULPAK", "shopping", 0.95, "Sulpak"),
    MerchantPattern(r"СУЛПАК", "shopping", 0.95, "Sulpak"),
    MerchantPattern(r"TECHNODOM", "shopping", 0.95, "Technodom"),
    MerchantPattern(r"ТЕХНОДОМ", "shopping", 0.95, "Technodom"),
    MerchantPattern(r"MECHTA", "shopping", 0.95, "Mechta"),
    MerchantPattern(r"\bМЕЧТА\b", "shopping", 0.95, "Mechta"),
    MerchantPattern(r"EVRIKA", "shopping", 0.90, "Evrika"),
    MerchantPattern(r"ЭВРИКА", "shopping", 0.90, "Evrika"),
    MerchantPattern(r"ALSER", "shopping", 0.90, "Alser"),
    MerchantPattern(r"АЛСЕР", "shopping", 0.90, "Alser"),
    MerchantPattern(r"WILDBERRIES", "shopping", 0.98, "Wildberries"),
    MerchantPattern(r"\bOZON\b", "shopping", 0.98, "Ozon"),
    MerchantPattern(r"ALIEXPRESS", "shopping", 0.95, "AliExpress"),
    MerchantPattern(r"AMAZON", "shopping", 0.98, "Amazon"),
    MerchantPattern(r"FLIP\.KZ", "shopping", 0.90, "Flip.kz"),
    MerchantPattern(r"\bZARA\b", "shopping", 0.95, "Zara"),
    MerchantPattern(r"\bH&M\b", "shopping", 0.95, "H&M"),
    MerchantPattern(r"BERSHKA", "shopping", 0.90, "Bershka"),
    MerchantPattern(r"PULL.*BEAR", "shopping", 0.90, "Pull&Bear"),
    MerchantPattern(r"MASSIMO.*DUTTI", "shopping", 0.90, "Massimo Dutti"),
    MerchantPattern(r"STRADIVARIUS", "shopping", 0.90, "Stradivarius"),
    MerchantPattern(r"LC\s*WAIKIKI", "shopping", 0.90, "LC Waikiki"),
    MerchantPattern(r"DEFACTO", "shopping", 0.90, "DeFacto"),
    MerchantPattern(r"\bIKEA\b", "shopping", 0.95, "IKEA"),
    MerchantPattern(r"\bJYSK\b", "shopping", 0.90, "JYSK"),
    MerchantPattern(r"\bHOFF\b", "shopping", 0.90, "Hoff"),
    MerchantPattern(r"ЛЕРУА\s*МЕРЛЕН", "shopping", 0.95, "Leroy Merlin"),
    MerchantPattern(r"LEROY\s*MERLIN", "shopping", 0.95, "Leroy Merlin"),
)

# ----------------------------------------------------------------------
# Healthcare
# ----------------------------------------------------------------------

HEALTHCARE_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"EUROPHARMA", "healthcare", 0.95, "Europharma"),
    MerchantPattern(r"ЕВРОФАРМА", "healthcare", 0.95, "Europharma"),
    MerchantPattern(r"БИОСФЕРА", "healthcare", 0.95, "Biosfera"),
    MerchantPattern(r"BIOSFERA", "healthcare", 0.95, "Biosfera"),
    MerchantPattern(r"ДОБРАЯ\s*АПТЕКА", "healthcare", 0.90, "Dobraya Apteka"),
    MerchantPattern(r"GIPPOKRAT", "healthcare", 0.90, "Gippokrat"),
    MerchantPattern(r"АПТЕКА|PHARMACY", "healthcare", 0.90),
    MerchantPattern(r"INVIVO", "healthcare", 0.95, "Invivo"),
    MerchantPattern(r"INTERTEACH", "healthcare", 0.95, "Interteach"),
    MerchantPattern(r"KDL\s*OLYMP", "healthcare", 0.95, "KDL Olymp"),
    MerchantPattern(r"SYNEVO", "healthcare", 0.95, "Synevo"),
    MerchantPattern(r"СТОМАТОЛОГ", "healthcare", 0.90),
)

# ----------------------------------------------------------------------
# Transfers
# ----------------------------------------------------------------------

TRANSFER_PATTERNS: tuple[MerchantPattern, ...] = (
    MerchantPattern(r"KASPI.*PEREVOD", "transfer", 0.98, "Kaspi Transfer"),
    MerchantPattern(r"КАСПИ.*ПЕРЕВОД", "transfer", 0.98, "Kaspi Transfer"),
    MerchantPattern(r"KASPI.*TRANSFER", "transfer", 0.98, "Kaspi Transfer"),
    MerchantPattern(r"ПЕРЕВОД.*KASPI", "transfer", 0.95, "Kaspi Transfer"),
    MerchantPattern(r"ПЕРЕВОД.*КАРТ", "transfer", 0.90),
    MerchantPattern(r"HALYK.*PEREVOD", "transfer", 0.95, "Halyk Transfer"),
    MerchantPattern(r"ХАЛЫК.*ПЕРЕВОД", "transfer", 0.95, "Halyk Transfer"),
    MerchantPattern(r"JUSAN.*PEREVOD", "transfer", 0.95, "Jusan Transfer"),
    MerchantPattern(r"FORTE.*PEREVOD", "transfer", 0.95, "Forte Transfer"),
    MerchantPattern(r"WESTERN\s*UNION", "transfer", 0.95, "Western Union"),
    MerchantPattern(r"MONEY\s*GRAM", "transfer", 0.95, "MoneyGram"),
    MerchantPattern(r"ЗОЛОТАЯ\s*КОРОНА", "transfer", 0.95, "Zolotaya Korona"),
    MerchantPattern(r"GOLDEN\s*CROWN", "transfer", 0.95, "Golden Crown"),
)


class MerchantDatabase:
    """Ordered merchant patterns, first match wins."""

    def __init__(self, patterns: tuple[MerchantPattern, ...] | None = None) -> None:
        self._patterns = patterns if patterns is not None else (
            GROCERY_PATTERNS
            + FOOD_DELIVERY_PATTERNS
            + TRANSPORT_PATTERNS
            + UTILITIES_PATTERNS
            + ENTERTAINMENT_PATTERNS
            + SHOPPING_PATTERNS
            + HEALTHCARE_PATTERNS
            + TRANSFER_PATTERNS
        )

    def find_pattern(self, description: str) -> MerchantPattern | None:
        text = description.strip()
        if not text:
            return None
        for pattern in self._patterns:
            if pattern.matches(text):
                return pattern
        return None

    def find_match(self, description: str, transaction_id: str = "") -> CategorizationResult | None:
        pattern = self.find_pattern(description)
        if pattern is None:
            return None
        return CategorizationResult(
            transaction_id=transaction_id,
            category_id=pattern.category_id,
            confidence=pattern.confidence,
            source=CategorizationSource.MERCHANT_DATABASE,
        )

    def all_patterns(self) -> tuple[MerchantPattern, ...]:
        return self._patterns

    def category_ids(self) -> set[str]:
        return {pattern.category_id for pattern in self._patterns}

    def pattern_count_by_category(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for pattern in self._patterns:
            counts[pattern.category_id] = counts.get(pattern.category_id, 0) + 1
        return counts
