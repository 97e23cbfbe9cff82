"""Lint rule registry and the rules shipped with netage.

A :class:`LintRule` pairs a name with a check function
``check(conf, document) -> list[LintWarning]``. Rules are registered into
the run's :class:`LinterRegistry` during the install phase and evaluated
once, by the ``netage/linter`` plugin, after every other plugin has run.

Whether a registered rule runs is decided per document by the ``lint``
mapping of the :class:`~netage.models.DocumentConfig`: only names mapped to
``True`` run, and ``lint: false`` switches linting off entirely.

Shipped rules:

* ``privsec-section`` -- the document needs a privacy and/or security
  considerations section.
* ``no-headingless-sections`` -- every section starts with a heading.
* ``local-refs-exist`` -- every ``#fragment`` link points at an existing id.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup

from netage.document import HEADING_TAGS, describe, element_children
from netage.models import DocumentConfig, LintWarning

logger = logging.getLogger(__name__)

RuleCheck = Callable[[DocumentConfig, BeautifulSoup], list[LintWarning]]


@dataclass(frozen=True)
class LintRule:
    """A named document check.

    Attributes:
        name: Key used in the configuration's ``lint`` mapping.
        description: One-line summary shown by ``netage plugins``.
        check: Callable returning the warnings found in a document.
    """

    name: str
    description: str
    check: RuleCheck

    def lint(self, conf: DocumentConfig, document: BeautifulSoup) -> list[LintWarning]:
        return self.check(conf, document)


class LinterRegistry:
    """Mapping from rule name to :class:`LintRule`.

    Registering a rule under a name that is already taken replaces the
    earlier rule.
    """

    def __init__(self) -> None:
        self._rules: dict[str, LintRule] = {}

    def register(self, *rules: LintRule) -> None:
        for rule in rules:
            if rule.name in self._rules:
                logger.debug("Replacing lint rule '%s'", rule.name)
            self._rules[rule.name] = rule

    def get(self, name: str) -> LintRule | None:
        return self._rules.get(name)

    @property
    def rules(self) -> list[LintRule]:
        return list(self._rules.values())

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def lint(self, conf: DocumentConfig, document: BeautifulSoup) -> list[LintWarning]:
        """Run every enabled rule against *document* and collect the warnings.

        Rules run in registration order. Names in ``conf.lint`` without a
        registered rule are ignored.
        """
        enabled = conf.enabled_rules()
        warnings: list[LintWarning] = []
        for rule in self._rules.values():
            if rule.name not in enabled:
                continue
            found = rule.lint(conf, document)
            logger.debug("Lint rule '%s' reported %d warning(s)", rule.name, len(found))
            warnings.extend(found)
        return warnings


# --- privsec-section ---

_PRIVACY_OR_SECURITY = re.compile(r"(privacy|security)", re.IGNORECASE)
_CONSIDERATIONS = re.compile(r"considerations", re.IGNORECASE)


def _check_privsec_section(conf: DocumentConfig, document: BeautifulSoup) -> list[LintWarning]:
    for heading in document.find_all(HEADING_TAGS):
        text = heading.get_text(" ", strip=True)
        if _PRIVACY_OR_SECURITY.search(text) and _CONSIDERATIONS.search(text):
            return []
    return [
        LintWarning(
            rule="privsec-section",
            message="Document must have a 'Privacy and/or Security' Considerations section.",
            hint=(
                "Add a privacy and/or security considerations section. "
                "See the Self-Review Questionnaire: "
                "https://w3ctag.github.io/security-questionnaire/"
            ),
        )
    ]


privsec_section_rule = LintRule(
    name="privsec-section",
    description="Require a privacy and/or security considerations section.",
    check=_check_privsec_section,
)


# --- no-headingless-sections ---

_EXEMPT_SECTION_IDS = {"abstract", "sotd"}


def _check_headingless_sections(
    conf: DocumentConfig, document: BeautifulSoup
) -> list[LintWarning]:
    offending = []
    for section in document.find_all("section"):
        if section.get("id") in _EXEMPT_SECTION_IDS:
            continue
        children = element_children(section)
        if not children or children[0].name not in HEADING_TAGS:
            offending.append(describe(section))
    if not offending:
        return []
    return [
        LintWarning(
            rule="no-headingless-sections",
            message="All sections must start with a `h2-6` element.",
            hint="Add a heading as the first element of each listed section.",
            elements=offending,
        )
    ]


no_headingless_sections_rule = LintRule(
    name="no-headingless-sections",
    description="Every section must start with a h2-h6 heading.",
    check=_check_headingless_sections,
)


# --- local-refs-exist ---


def _check_local_refs(conf: DocumentConfig, document: BeautifulSoup) -> list[LintWarning]:
    ids = {tag["id"] for tag in document.find_all(id=True)}
    names = {tag["name"] for tag in document.find_all("a", attrs={"name": True})}
    broken = []
    for anchor in document.find_all("a", href=True):
        href = anchor["href"]
        if not href.startswith("#") or href == "#":
            continue
        target = href[1:]
        if target not in ids and target not in names:
            broken.append(f"a[href='{href}']")
    if not broken:
        return []
    return [
        LintWarning(
            rule="local-refs-exist",
            message="Broken local reference found in document.",
            hint="Fix the links mentioned or add the missing ids.",
            elements=broken,
        )
    ]


local_refs_exist_rule = LintRule(
    name="local-refs-exist",
    description="Every #fragment link must point at an existing id.",
    check=_check_local_refs,
)


CORE_RULES = (no_headingless_sections_rule, local_refs_exist_rule)
"""Rules registered by the ``netage/linter`` plugin for every profile."""

SHIPPED_RULES = (privsec_section_rule, *CORE_RULES)
"""Every rule netage ships, for listings."""
