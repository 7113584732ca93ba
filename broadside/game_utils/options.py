"""
Table options declared once, as dataclass fields.

Each option field carries an OptionMeta in its metadata. From that one
declaration the options can be set from text (CLI flags, lobby menus),
described in any locale, and saved with the game through mashumaro:

    @dataclass
    class BattleshipOptions(GameOptions):
        countdown_seconds: int = option_field(
            IntOption(default=5, min_val=1, max_val=30, value_key="seconds",
                      label="battleship-set-countdown",
                      change_msg="battleship-option-changed-countdown"))
"""

from dataclasses import dataclass, field, fields
from typing import Any

from mashumaro.mixins.json import DataClassJSONMixin

from ..messages.localization import Localization

META_KEY = "option_meta"


@dataclass
class OptionMeta:
    """
    How one option is parsed and described.

    label and change_msg are Fluent ids: label renders the option with
    its current value ("Countdown: 5 seconds"), change_msg is broadcast
    when the value changes.
    """

    default: Any
    label: str
    change_msg: str

    def get_label(self, locale: str, value: Any) -> str:
        return Localization.get(locale, self.label, **self.get_label_kwargs(value, locale))

    def get_label_kwargs(self, value: Any, locale: str = "en") -> dict[str, Any]:
        raise NotImplementedError

    def get_change_kwargs(self, value: Any) -> dict[str, Any]:
        return self.get_label_kwargs(value)

    def parse(self, text: str) -> tuple[bool, Any]:
        """(True, value) for acceptable text, (False, text) otherwise."""
        raise NotImplementedError


@dataclass
class IntOption(OptionMeta):
    """A whole number; out-of-range input is clamped, not refused."""

    min_val: int = 0
    max_val: int = 100
    value_key: str = "value"

    def get_label_kwargs(self, value: Any, locale: str = "en") -> dict[str, Any]:
        return {self.value_key: value}

    def parse(self, text: str) -> tuple[bool, Any]:
        try:
            number = int(text)
        except ValueError:
            return False, text
        return True, min(self.max_val, max(self.min_val, number))


@dataclass
class MenuOption(OptionMeta):
    """
    One of a fixed set of lowercase choices.

    choice_labels maps a choice to the Fluent id of its display name;
    choices without one are shown as-is.
    """

    choices: list[str] = field(default_factory=list)
    value_key: str = "choice"
    choice_labels: dict[str, str] | None = None

    def display(self, value: str, locale: str) -> str:
        key = (self.choice_labels or {}).get(value)
        return Localization.get(locale, key) if key else value

    def get_label_kwargs(self, value: Any, locale: str = "en") -> dict[str, Any]:
        return {self.value_key: self.display(value, locale)}

    def parse(self, text: str) -> tuple[bool, Any]:
        choice = text.strip().lower()
        return (True, choice) if choice in self.choices else (False, text)


def option_field(meta: OptionMeta) -> Any:
    """A dataclass field defaulting to meta.default, with meta attached."""
    return field(default=meta.default, metadata={META_KEY: meta})


def get_all_option_metas(options_class: type) -> dict[str, OptionMeta]:
    """Field name -> OptionMeta, in declaration order."""
    return {
        f.name: f.metadata[META_KEY] for f in fields(options_class) if META_KEY in f.metadata
    }


def get_option_meta(options_class: type, name: str) -> OptionMeta | None:
    return get_all_option_metas(options_class).get(name)


@dataclass
class GameOptions(DataClassJSONMixin):
    """Base for a game's options; plain fields are allowed alongside option fields."""

    def set_option(self, name: str, value: str) -> bool:
        """
        Set an option from text.

        Returns False, leaving the option unchanged, for unknown names
        and unparseable values.
        """
        meta = get_option_meta(type(self), name)
        if meta is None:
            return False
        ok, parsed = meta.parse(value)
        if ok:
            setattr(self, name, parsed)
        return ok

    def describe(self, locale: str) -> list[str]:
        """One localized line per option, e.g. "Board faces: north"."""
        return [
            meta.get_label(locale, getattr(self, name))
            for name, meta in get_all_option_metas(type(self)).items()
        ]
