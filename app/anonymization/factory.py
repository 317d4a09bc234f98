from app.anonymization.anonymizer import RegexPIIAnonymizer
from app.anonymization.base import BaseAnonymizer
from app.config.settings import Settings


class AnonymizerFactory:
    """Creates the configured anonymizer adapter."""

    @classmethod
    def create(cls, settings: Settings) -> BaseAnonymizer:
        """Create the regex anonymizer backed by ICU transliteration."""
        _ = settings
        return RegexPIIAnonymizer()
