"""
Trailing qualifier classification for team names.

Teams are often distinguished only by a trailing qualifier:
    "Crusaders"        men's side
    "Crusaders Women"  women's side, also seen as "Crusaders (W)" / "Crusaders W"
    "Chiefs U20"       age-group side, also "Chiefs Under 20"
    "Australia A"      development side

Qualifiers are grouped in equivalence classes. Two names may only match if
their qualifiers fall in the same class (or neither has one).
"""

from typing import Optional

from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

WOMEN_MARKER = "(W)"


class SuffixClassifier:
    """
    Classifies a name's trailing qualifier into an equivalence class.

    Args:
        tables: Reference tables providing suffix_classes
                (class id -> tokens, each token starting with a space)
    """

    def __init__(self, tables: ReferenceTables = DEFAULT_TABLES):
        self._token_class: dict[str, str] = {}
        for class_id, tokens in tables.suffix_classes.items():
            for token in tokens:
                self._token_class[token] = class_id
        # Longest first so " Women (W)" wins over " (W)"
        self._tokens = sorted(self._token_class, key=len, reverse=True)

    def suffix_of(self, name: str) -> Optional[str]:
        """Return the recognized trailing token, if any."""
        for token in self._tokens:
            if name.endswith(token) and len(name) > len(token):
                return token
        return None

    def class_of(self, name: str) -> Optional[str]:
        token = self.suffix_of(name)
        if token is None:
            return None
        return self._token_class[token]

    def strip(self, name: str) -> tuple[str, Optional[str]]:
        """
        Split a name into its base and suffix class.

        Examples:
            >>> SuffixClassifier().strip("Crusaders (W)")
            ('Crusaders', 'women')
            >>> SuffixClassifier().strip("Blues")
            ('Blues', None)
        """
        token = self.suffix_of(name)
        if token is None:
            return name, None
        return name[: -len(token)], self._token_class[token]

    def compatible(self, a: str, b: str) -> bool:
        """
        Whether two names carry interchangeable qualifiers.

        A name ending in "(W)" is compatible with any name containing
        "Women", whatever the class lookup says.
        """
        if a.endswith(WOMEN_MARKER) and "Women" in b:
            return True
        if b.endswith(WOMEN_MARKER) and "Women" in a:
            return True
        return self.class_of(a) == self.class_of(b)

    def comparison_key(self, name: str) -> tuple[str, Optional[str]]:
        """Casefolded base name plus suffix class, used for equality checks."""
        base, class_id = self.strip(name.strip())
        return " ".join(base.casefold().split()), class_id
