from __future__ import annotations

"""
Czech transcription of Japanese / Korean names -> English romanization.

ČSFD writes East Asian names the Czech way (Polivka transcription for
Japanese, Czech phonetics for Korean) while IMDb uses modified Hepburn and
Revised Romanization. "tacuja jošihara" on ČSFD is "tatsuya yoshihara" on
IMDb; converting gives the director check a second spelling to try.

Rule tables are ordered so that, among rules sharing a starting letter, the
longer pattern comes first. ``_apply_rules`` takes the first rule in table
order matching at the current position, so "šú" is consumed whole before
"š"-led shorter rules get a chance.
"""

from typing import List, Optional, Sequence, Tuple

Rule = Tuple[str, str]

# Polivka -> modified Hepburn
JAPANESE_RULES: List[Rule] = [
    # multi-char clusters
    ("šú", "shū"),
    ("šó", "shō"),
    ("čó", "chō"),
    ("čú", "chū"),
    ("džú", "jū"),
    ("džó", "jō"),
    ("cú", "tsū"),
    ("rjú", "ryū"),
    ("rjó", "ryō"),
    ("kjú", "kyū"),
    ("kjó", "kyō"),
    ("gjú", "gyū"),
    ("gjó", "gyō"),
    ("njú", "nyū"),
    ("njó", "nyō"),
    ("mjú", "myū"),
    ("mjó", "myō"),
    ("hjú", "hyū"),
    ("hjó", "hyō"),
    ("bjú", "byū"),
    ("bjó", "byō"),
    ("pjú", "pyū"),
    ("pjó", "pyō"),
    ("dži", "ji"),
    ("džu", "ju"),
    ("dže", "je"),
    ("džo", "jo"),
    ("dža", "ja"),
    ("ša", "sha"),
    ("ši", "shi"),
    ("šu", "shu"),
    ("še", "she"),
    ("šo", "sho"),
    ("ča", "cha"),
    ("či", "chi"),
    ("ču", "chu"),
    ("če", "che"),
    ("čo", "cho"),
    ("cu", "tsu"),
    ("ca", "tsa"),
    ("ce", "tse"),
    ("co", "tso"),
    ("ci", "tsi"),
    ("rja", "rya"),
    ("rji", "ryi"),
    ("rju", "ryu"),
    ("rje", "rye"),
    ("rjo", "ryo"),
    ("kja", "kya"),
    ("kji", "kyi"),
    ("kju", "kyu"),
    ("kje", "kye"),
    ("kjo", "kyo"),
    ("gja", "gya"),
    ("gji", "gyi"),
    ("gju", "gyu"),
    ("gje", "gye"),
    ("gjo", "gyo"),
    ("nja", "nya"),
    ("nji", "nyi"),
    ("nju", "nyu"),
    ("nje", "nye"),
    ("njo", "nyo"),
    ("mja", "mya"),
    ("mji", "myi"),
    ("mju", "myu"),
    ("mje", "mye"),
    ("mjo", "myo"),
    ("hja", "hya"),
    ("hji", "hyi"),
    ("hju", "hyu"),
    ("hje", "hye"),
    ("hjo", "hyo"),
    ("bja", "bya"),
    ("bji", "byi"),
    ("bju", "byu"),
    ("bje", "bye"),
    ("bjo", "byo"),
    ("pja", "pya"),
    ("pji", "pyi"),
    ("pju", "pyu"),
    ("pje", "pye"),
    ("pjo", "pyo"),
    ("jú", "yū"),
    ("jó", "yō"),
    ("ja", "ya"),
    ("ji", "yi"),
    ("ju", "yu"),
    ("je", "ye"),
    ("jo", "yo"),
    # long vowels
    ("ó", "ō"),
    ("ú", "ū"),
]

# Czech phonetic -> Revised Romanization
KOREAN_RULES: List[Rule] = [
    ("šin", "sin"),
    ("šim", "sim"),
    ("ča", "ja"),
    ("čo", "jo"),
    ("ču", "ju"),
    ("če", "je"),
    ("či", "ji"),
    ("š", "s"),
    ("č", "j"),
    ("ů", "u"),
]


def _apply_rules(text: Optional[str], rules: Sequence[Rule]) -> Optional[str]:
    if text is None or not text.strip():
        return text

    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        for pattern, replacement in rules:
            if text.startswith(pattern, i):
                out.append(replacement)
                i += len(pattern)
                break
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def japanese_to_hepburn(name: Optional[str]) -> Optional[str]:
    """Apply the Japanese table. Expects lower-cased input."""
    return _apply_rules(name, JAPANESE_RULES)


def korean_to_revised(name: Optional[str]) -> Optional[str]:
    """Apply the Korean table. Expects lower-cased input."""
    return _apply_rules(name, KOREAN_RULES)


def levenshtein_distance(s: str, t: str) -> int:
    """Classic edit distance, two rolling rows."""
    if s == t:
        return 0
    n, m = len(s), len(t)
    if n == 0:
        return m
    if m == 0:
        return n

    previous = list(range(m + 1))
    current = [0] * (m + 1)
    for i in range(1, n + 1):
        current[0] = i
        for j in range(1, m + 1):
            cost = 0 if s[i - 1] == t[j - 1] else 1
            current[j] = min(current[j - 1] + 1, previous[j] + 1, previous[j - 1] + cost)
        previous, current = current, previous
    return previous[m]


def transliterate_to_english(name: Optional[str]) -> Optional[str]:
    """
    Pick whichever of the Japanese / Korean conversions changed *name* more.

    Pure-ASCII input is returned untouched: short Czech digraphs show up in
    Western names too ("co" in "scorsese"), and without a diacritic there is
    no sign the name was transcribed the Czech way at all.
    """
    if name is None or not name.strip():
        return name
    if all(ord(ch) <= 127 for ch in name):
        return name

    japanese = japanese_to_hepburn(name) or name
    korean = korean_to_revised(name) or name

    japanese_diff = levenshtein_distance(name, japanese)
    korean_diff = levenshtein_distance(name, korean)
    if japanese_diff == 0 and korean_diff == 0:
        return name

    # ties go to Japanese
    return japanese if japanese_diff >= korean_diff else korean
