from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .models import RuleDescriptor, Severity


class DuplicateRuleError(ValueError):
    """Raised when a rule id, name or alias is registered twice."""


def normalize_rule_key(key: str) -> str:
    """Normalize a rule id, name or alias for lookups (case and `_`/`-` insensitive)."""
    return key.strip().lower().replace("_", "-")


class RuleCatalog:
    """Registry of rule descriptors keyed by id, name and alias."""

    def __init__(self, descriptors: Iterable[RuleDescriptor] = ()) -> None:
        self._descriptors: List[RuleDescriptor] = []
        self._by_key: Dict[str, RuleDescriptor] = {}
        self._frozen = False
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: RuleDescriptor) -> RuleDescriptor:
        if self._frozen:
            raise RuntimeError("Rule catalog is frozen; register rules before use.")
        keys = {normalize_rule_key(identifier) for identifier in descriptor.identifiers}
        for key in sorted(keys):
            existing = self._by_key.get(key)
            if existing is not None:
                raise DuplicateRuleError(
                    f"Rule key '{key}' of {descriptor.id} is already registered by {existing.id}."
                )
        for key in keys:
            self._by_key[key] = descriptor
        self._descriptors.append(descriptor)
        return descriptor

    def freeze(self) -> "RuleCatalog":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, id_or_alias: str | None) -> Optional[RuleDescriptor]:
        if not id_or_alias:
            return None
        return self._by_key.get(normalize_rule_key(id_or_alias))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, RuleDescriptor):
            return self.lookup(item.id) == item
        if isinstance(item, str):
            return self.lookup(item) is not None
        return False

    def all(self) -> List[RuleDescriptor]:
        return list(self._descriptors)

    def __iter__(self) -> Iterator[RuleDescriptor]:
        return iter(list(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)


def _rule(
    rule_id: str,
    name: str,
    description: str,
    enabled_by_default: bool = True,
) -> RuleDescriptor:
    return RuleDescriptor(
        id=rule_id,
        name=name,
        aliases=(name.replace("-", "_"),),
        description=description,
        default_severity=Severity.WARNING,
        enabled_by_default=enabled_by_default,
    )


# markdownlint rule set; MD002, MD006, MD008, MD015-MD017 and MD057 are retired upstream.
BUILTIN_RULES = (
    _rule("MD001", "heading-increment", "Heading levels should only increment by one level at a time"),
    _rule("MD003", "heading-style", "Heading style should be consistent"),
    _rule("MD004", "ul-style", "Unordered list style should be consistent"),
    _rule("MD005", "list-indent", "Inconsistent indentation for list items at the same level"),
    _rule("MD007", "ul-indent", "Unordered list indentation"),
    _rule("MD009", "no-trailing-spaces", "Trailing spaces"),
    _rule("MD010", "no-hard-tabs", "Hard tabs"),
    _rule("MD011", "no-reversed-links", "Reversed link syntax"),
    _rule("MD012", "no-multiple-blanks", "Multiple consecutive blank lines"),
    _rule("MD013", "line-length", "Line length"),
    _rule("MD014", "commands-show-output", "Dollar signs used before commands without showing output"),
    _rule("MD018", "no-missing-space-atx", "No space after hash on atx style heading"),
    _rule("MD019", "no-multiple-space-atx", "Multiple spaces after hash on atx style heading"),
    _rule("MD020", "no-missing-space-closed-atx", "No space inside hashes on closed atx style heading"),
    _rule("MD021", "no-multiple-space-closed-atx", "Multiple spaces inside hashes on closed atx style heading"),
    _rule("MD022", "blanks-around-headings", "Headings should be surrounded by blank lines"),
    _rule("MD023", "heading-start-left", "Headings must start at the beginning of the line"),
    _rule("MD024", "no-duplicate-heading", "Multiple headings with the same content"),
    _rule("MD025", "single-title", "Multiple top-level headings in the same document"),
    _rule("MD026", "no-trailing-punctuation", "Trailing punctuation in heading"),
    _rule("MD027", "no-multiple-space-blockquote", "Multiple spaces after blockquote symbol"),
    _rule("MD028", "no-blanks-blockquote", "Blank line inside blockquote"),
    _rule("MD029", "ol-prefix", "Ordered list item prefix"),
    _rule("MD030", "list-marker-space", "Spaces after list markers"),
    _rule("MD031", "blanks-around-fences", "Fenced code blocks should be surrounded by blank lines"),
    _rule("MD032", "blanks-around-lists", "Lists should be surrounded by blank lines"),
    _rule("MD033", "no-inline-html", "Inline HTML"),
    _rule("MD034", "no-bare-urls", "Bare URL used"),
    _rule("MD035", "hr-style", "Horizontal rule style"),
    _rule("MD036", "no-emphasis-as-heading", "Emphasis used instead of a heading"),
    _rule("MD037", "no-space-in-emphasis", "Spaces inside emphasis markers"),
    _rule("MD038", "no-space-in-code", "Spaces inside code span elements"),
    _rule("MD039", "no-space-in-links", "Spaces inside link text"),
    _rule("MD040", "fenced-code-language", "Fenced code blocks should have a language specified"),
    _rule("MD041", "first-line-heading", "First line in a file should be a top-level heading"),
    _rule("MD042", "no-empty-links", "No empty links"),
    _rule("MD043", "required-headings", "Required heading structure", enabled_by_default=False),
    _rule("MD044", "proper-names", "Proper names should have correct capitalization", enabled_by_default=False),
    _rule("MD045", "no-alt-text", "Images should have alternate text (alt text)"),
    _rule("MD046", "code-block-style", "Code block style"),
    _rule("MD047", "single-trailing-newline", "Files should end with a single newline character"),
    _rule("MD048", "code-fence-style", "Code fence style"),
    _rule("MD049", "emphasis-style", "Emphasis style should be consistent"),
    _rule("MD050", "strong-style", "Strong style should be consistent"),
    _rule("MD051", "link-fragments", "Link fragments should be valid"),
    _rule("MD052", "reference-links-images", "Reference links and images should use a label that is defined"),
    _rule("MD053", "link-image-reference-definitions", "Link and image reference definitions should be needed"),
    _rule("MD054", "link-image-style", "Link and image style"),
    _rule("MD055", "table-pipe-style", "Table pipe style"),
    _rule("MD056", "table-column-count", "Table column count"),
    _rule("MD058", "blanks-around-tables", "Tables should be surrounded by blank lines"),
)

DEFAULT_CATALOG = RuleCatalog(BUILTIN_RULES).freeze()
