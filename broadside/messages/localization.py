"""Fluent message catalogue shared by every game and user."""

from pathlib import Path

from fluent_compiler.bundle import FluentBundle
from babel.lists import format_list

DEFAULT_LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"
FALLBACK_LOCALE = "en"

# Fluent wraps every placeable in FSI/PDI marks; speech output does not want them
_ISOLATION_MARKS = str.maketrans("", "", "\u2068\u2069")


class Localization:
    """
    Renders message ids from locales/<locale>/*.ftl.

    Every .ftl file of a locale is compiled into one bundle the first
    time the locale is asked for. Locales without a directory use the
    English catalogue.
    """

    _bundles: dict[str, FluentBundle] = {}
    _locales_dir: Path | None = None

    @classmethod
    def init(cls, locales_dir: Path | str | None = None) -> None:
        """Point the catalogue at a locales directory and drop compiled bundles."""
        cls._locales_dir = Path(locales_dir) if locales_dir else DEFAULT_LOCALES_DIR
        cls._bundles = {}

    @classmethod
    def _bundle(cls, locale: str) -> FluentBundle:
        bundle = cls._bundles.get(locale)
        if bundle is not None:
            return bundle

        if cls._locales_dir is None:
            raise RuntimeError("Localization.init() has not been called")

        source_locale = locale
        directory = cls._locales_dir / locale
        if not directory.is_dir():
            source_locale = FALLBACK_LOCALE
            directory = cls._locales_dir / FALLBACK_LOCALE

        sources = [p.read_text(encoding="utf-8") for p in sorted(directory.glob("*.ftl"))]
        if not sources:
            raise RuntimeError(f"no .ftl files for {locale!r} in {cls._locales_dir}")

        bundle = FluentBundle.from_string(source_locale, "\n".join(sources))
        cls._bundles[locale] = bundle
        return bundle

    @classmethod
    def get(cls, locale: str, message_id: str, /, **kwargs) -> str:
        """
        Render message_id with kwargs in locale.

        Returns the message id itself when the message is missing or
        cannot be rendered, so a gap in a catalogue is audible rather
        than fatal.
        """
        try:
            text, _errors = cls._bundle(locale).format(message_id, kwargs)
        except Exception:
            return message_id
        return text.translate(_ISOLATION_MARKS)

    @classmethod
    def format_list_and(cls, locale: str, items: list[str]) -> str:
        """["5", "4", "3"] -> "5, 4, and 3" in English."""
        return format_list(items, style="standard", locale=locale)
