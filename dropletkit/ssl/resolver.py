"""Interactive resolution of certificate request options."""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import click

from ..utils.errors import PromptExhaustedError
from .options import CertbotOptions

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class Question:
    """A single resolvable option."""

    key: str
    prompt: str
    default: Optional[str] = None
    yes_no: bool = False


SERVER_TYPE = Question("SERVER_TYPE", "Choose server type (nginx/apache/standalone/webroot)", "nginx")
DOMAINS = Question("DOMAINS", "Enter domain(s) (comma or space separated; e.g. example.com,www.example.com)")
EMAIL = Question("EMAIL", "Admin email for Let's Encrypt (important for expiry notices)")
REDIRECT = Question("REDIRECT", "Force HTTPS redirect (applicable to nginx/apache)?", "y", yes_no=True)
STAGING = Question("STAGING", "Use Let's Encrypt staging (for testing to avoid rate limits)?", "n", yes_no=True)
KEY_TYPE = Question("KEY_TYPE", "Key type (rsa/ecdsa)", "ecdsa")
EC_CURVE = Question("EC_CURVE", "ECDSA curve (secp256r1/secp384r1/secp521r1)", "secp384r1")
WEBROOT_PATH = Question("WEBROOT_PATH", "Webroot path (e.g. /var/www/html)", "/var/www/html")


class Prompter:
    """Asks the operator for a value."""

    def ask(self, text: str, default: Optional[str] = None) -> str:
        raise NotImplementedError

    def say(self, message: str) -> None:
        click.echo(message)


class ClickPrompter(Prompter):
    """Prompts on the terminal via click."""

    def ask(self, text: str, default: Optional[str] = None) -> str:
        try:
            return click.prompt(
                text,
                default=default if default is not None else "",
                show_default=bool(default),
            )
        except click.Abort:
            raise PromptExhaustedError(f"Input closed while asking: {text}")


class DefaultsPrompter(Prompter):
    """Answers every question with its default, as a closed stdin would."""

    def ask(self, text: str, default: Optional[str] = None) -> str:
        return default or ""

    def say(self, message: str) -> None:
        logger.warning(message)


class InputResolver:
    """Resolves every certificate option from pre-set values or prompts."""

    def __init__(
        self,
        preset: Mapping[str, str],
        prompter: Optional[Prompter] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initialize input resolver.

        Args:
            preset: Values supplied up front, keyed by pre-set name. Values
                are trimmed, and blank ones count as unset.
            prompter: How to ask for missing values
            max_attempts: Invalid yes/no answers tolerated per question
        """
        self.preset = {key: value.strip() for key, value in preset.items() if value and value.strip()}
        self.prompter = prompter or ClickPrompter()
        self.max_attempts = max_attempts

    def resolve_values(self) -> Dict[str, str]:
        """Collect raw string values in prompt order."""
        values: Dict[str, str] = {}

        for question in (SERVER_TYPE, DOMAINS, EMAIL, REDIRECT, STAGING, KEY_TYPE):
            values[question.key] = self._resolve(question)

        if values["KEY_TYPE"].lower() == "ecdsa":
            values[EC_CURVE.key] = self._resolve(EC_CURVE)
        if values["SERVER_TYPE"].lower() == "webroot":
            values[WEBROOT_PATH.key] = self._resolve(WEBROOT_PATH)

        return values

    def resolve(self) -> CertbotOptions:
        """Resolve values and freeze them into CertbotOptions."""
        return CertbotOptions.from_values(self.resolve_values())

    def _resolve(self, question: Question) -> str:
        if question.key in self.preset:
            return self.preset[question.key]
        if question.yes_no:
            return self._confirm(question)
        return self.prompter.ask(question.prompt, question.default).strip() or (question.default or "")

    def _confirm(self, question: Question) -> str:
        text = f"{question.prompt} (y/n)"
        for _ in range(self.max_attempts):
            answer = self.prompter.ask(text, question.default).strip() or (question.default or "")
            if answer.lower() in ("y", "n"):
                return answer.lower()
            self.prompter.say("Please answer y or n.")

        raise PromptExhaustedError(
            f"No valid answer for {question.key} after {self.max_attempts} attempts",
            suggestions=[f"Export {question.key}=y or {question.key}=n before running"],
        )
