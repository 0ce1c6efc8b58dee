from __future__ import annotations

"""Country names (Czech or English, current or historical) -> ISO 3166 alpha-2."""

import re
from typing import Dict, Iterable, List

from loguru import logger

from .normalize import normalize_person_name

_CODE_RE = re.compile(r"^[A-Za-z]{2}$")

# Keys are compared after normalize_person_name (no diacritics, lower-case,
# hyphens dropped). Historical entities use their withdrawn or user-assigned codes.
COUNTRY_ALIASES: Dict[str, List[str]] = {
    # Czech lands
    "CZ": ["česko", "česká republika", "czechia", "czech republic"],
    "CS": ["československo", "czechoslovakia", "čssr", "čsr"],
    "XM": ["protektorát čechy a morava", "protectorate of bohemia and moravia", "bohemia and moravia"],
    "SK": ["slovensko", "slovakia", "slovak republic"],
    # historical
    "AH": ["rakousko-uhersko", "rakousko uhersko", "austria-hungary", "austria hungary"],
    "SU": ["sssr", "sovětský svaz", "soviet union", "ussr"],
    "YU": ["jugoslávie", "yugoslavia"],
    "DD": ["ndr", "německá demokratická republika", "východní německo", "east germany", "gdr"],
    "XR": ["německá říše", "třetí říše", "third reich", "german reich", "nazi germany"],
    "DE": [
        "německo", "germany", "spolková republika německo", "západní německo", "west germany",
        "německé císařství", "german empire",
    ],
    # Europe
    "AT": ["rakousko", "austria"],
    "PL": ["polsko", "poland"],
    "HU": ["maďarsko", "hungary"],
    "FR": ["francie", "france"],
    "IT": ["itálie", "italy"],
    "ES": ["španělsko", "spain"],
    "PT": ["portugalsko", "portugal"],
    "GB": ["velká británie", "spojené království", "united kingdom", "uk", "great britain", "anglie", "england"],
    "IE": ["irsko", "ireland"],
    "NL": ["nizozemsko", "holandsko", "netherlands"],
    "BE": ["belgie", "belgium"],
    "LU": ["lucembursko", "luxembourg"],
    "CH": ["švýcarsko", "switzerland"],
    "DK": ["dánsko", "denmark"],
    "SE": ["švédsko", "sweden"],
    "NO": ["norsko", "norway"],
    "FI": ["finsko", "finland"],
    "IS": ["island", "iceland"],
    "EE": ["estonsko", "estonia"],
    "LV": ["lotyšsko", "latvia"],
    "LT": ["litva", "lithuania"],
    "RU": ["rusko", "russia", "ruská federace"],
    "UA": ["ukrajina", "ukraine"],
    "BY": ["bělorusko", "belarus"],
    "RO": ["rumunsko", "romania"],
    "BG": ["bulharsko", "bulgaria"],
    "GR": ["řecko", "greece"],
    "TR": ["turecko", "turkey", "türkiye"],
    "SI": ["slovinsko", "slovenia"],
    "HR": ["chorvatsko", "croatia"],
    "RS": ["srbsko", "serbia"],
    "BA": ["bosna a hercegovina", "bosnia and herzegovina"],
    "MK": ["severní makedonie", "makedonie", "north macedonia", "macedonia"],
    "ME": ["černá hora", "montenegro"],
    "AL": ["albánie", "albania"],
    "GE": ["gruzie", "georgia"],
    "AM": ["arménie", "armenia"],
    "CY": ["kypr", "cyprus"],
    "MT": ["malta"],
    # Americas
    "US": ["usa", "spojené státy", "spojené státy americké", "united states", "united states of america"],
    "CA": ["kanada", "canada"],
    "MX": ["mexiko", "mexico"],
    "BR": ["brazílie", "brazil"],
    "AR": ["argentina"],
    "CL": ["chile"],
    "CO": ["kolumbie", "colombia"],
    "PE": ["peru"],
    "CU": ["kuba", "cuba"],
    "UY": ["uruguay"],
    "VE": ["venezuela"],
    # Asia / Oceania
    "JP": ["japonsko", "japan"],
    "KR": ["jižní korea", "south korea", "korea"],
    "KP": ["severní korea", "north korea"],
    "CN": ["čína", "china"],
    "HK": ["hongkong", "hong kong"],
    "TW": ["tchaj-wan", "tchajwan", "taiwan"],
    "IN": ["indie", "india"],
    "ID": ["indonésie", "indonesia"],
    "TH": ["thajsko", "thailand"],
    "VN": ["vietnam"],
    "PH": ["filipíny", "philippines"],
    "MY": ["malajsie", "malaysia"],
    "SG": ["singapur", "singapore"],
    "NP": ["nepál", "nepal"],
    "PK": ["pákistán", "pakistan"],
    "IR": ["írán", "iran"],
    "IQ": ["irák", "iraq"],
    "IL": ["izrael", "israel"],
    "LB": ["libanon", "lebanon"],
    "JO": ["jordánsko", "jordan"],
    "SA": ["saúdská arábie", "saudi arabia"],
    "AE": ["spojené arabské emiráty", "united arab emirates"],
    "QA": ["katar", "qatar"],
    "KZ": ["kazachstán", "kazakhstan"],
    "MN": ["mongolsko", "mongolia"],
    "AU": ["austrálie", "australia"],
    "NZ": ["nový zéland", "new zealand"],
    # Africa
    "EG": ["egypt"],
    "MA": ["maroko", "morocco"],
    "TN": ["tunisko", "tunisia"],
    "DZ": ["alžírsko", "algeria"],
    "NG": ["nigérie", "nigeria"],
    "ZA": ["jihoafrická republika", "jar", "south africa"],
    "KE": ["keňa", "kenya"],
    "UG": ["uganda"],
    "SN": ["senegal"],
    "ET": ["etiopie", "ethiopia"],
}


def _key(name: str) -> str:
    return normalize_person_name(name.replace("-", " "))


_NAME_TO_CODE: Dict[str, str] = {
    _key(alias): code
    for code, aliases in COUNTRY_ALIASES.items()
    for alias in aliases
}


def map_to_iso_alpha2(names: Iterable[str] | None) -> List[str]:
    """
    Map country names to codes, first-seen order, no duplicates.

    Two-letter inputs are taken as codes already. Unknown names are dropped.
    """
    codes: List[str] = []
    if not names:
        return codes

    for name in names:
        if not name or not name.strip():
            continue
        name = name.strip()
        code = _NAME_TO_CODE.get(_key(name))
        if code is None and _CODE_RE.match(name):
            code = name.upper()
        if code is None:
            logger.debug("No ISO code for country '{}'", name)
            continue
        if code not in codes:
            codes.append(code)
    return codes
