"""
app/mappers/country_reference.py

Reference data for country normalization: the canonical UN member list,
region assignments, built-in alias table and ISO3 codes.

``STANDARD_COUNTRIES`` order is fixed; fuzzy-match ties resolve to the
earliest entry.
"""

from __future__ import annotations

from typing import Final

REGION_EUROPE: Final[str] = "Europe"
REGION_ASIA_PACIFIC: Final[str] = "Asia/Pacific"
REGION_MEA: Final[str] = "Middle East & Africa"
REGION_LATAM: Final[str] = "Latin America"
REGION_NORTH_AMERICA: Final[str] = "North America"

REGIONS: tuple[str, ...] = (
    REGION_EUROPE,
    REGION_ASIA_PACIFIC,
    REGION_MEA,
    REGION_LATAM,
    REGION_NORTH_AMERICA,
)

# name -> (region, iso3)
_COUNTRY_TABLE: tuple[tuple[str, str, str], ...] = (
    ("AFGHANISTAN", REGION_ASIA_PACIFIC, "AFG"),
    ("ALBANIA", REGION_EUROPE, "ALB"),
    ("ALGERIA", REGION_MEA, "DZA"),
    ("ANDORRA", REGION_EUROPE, "AND"),
    ("ANGOLA", REGION_MEA, "AGO"),
    ("ANTIGUA AND BARBUDA", REGION_LATAM, "ATG"),
    ("ARGENTINA", REGION_LATAM, "ARG"),
    ("ARMENIA", REGION_EUROPE, "ARM"),
    ("AUSTRALIA", REGION_ASIA_PACIFIC, "AUS"),
    ("AUSTRIA", REGION_EUROPE, "AUT"),
    ("AZERBAIJAN", REGION_EUROPE, "AZE"),
    ("BAHAMAS", REGION_LATAM, "BHS"),
    ("BAHRAIN", REGION_MEA, "BHR"),
    ("BANGLADESH", REGION_ASIA_PACIFIC, "BGD"),
    ("BARBADOS", REGION_LATAM, "BRB"),
    ("BELARUS", REGION_EUROPE, "BLR"),
    ("BELGIUM", REGION_EUROPE, "BEL"),
    ("BELIZE", REGION_LATAM, "BLZ"),
    ("BENIN", REGION_MEA, "BEN"),
    ("BHUTAN", REGION_ASIA_PACIFIC, "BTN"),
    ("BOLIVIA", REGION_LATAM, "BOL"),
    ("BOSNIA AND HERZEGOVINA", REGION_EUROPE, "BIH"),
    ("BOTSWANA", REGION_MEA, "BWA"),
    ("BRAZIL", REGION_LATAM, "BRA"),
    ("BRUNEI", REGION_ASIA_PACIFIC, "BRN"),
    ("BULGARIA", REGION_EUROPE, "BGR"),
    ("BURKINA FASO", REGION_MEA, "BFA"),
    ("BURUNDI", REGION_MEA, "BDI"),
    ("CABO VERDE", REGION_MEA, "CPV"),
    ("CAMBODIA", REGION_ASIA_PACIFIC, "KHM"),
    ("CAMEROON", REGION_MEA, "CMR"),
    ("CANADA", REGION_NORTH_AMERICA, "CAN"),
    ("CENTRAL AFRICAN REPUBLIC", REGION_MEA, "CAF"),
    ("CHAD", REGION_MEA, "TCD"),
    ("CHILE", REGION_LATAM, "CHL"),
    ("CHINA", REGION_ASIA_PACIFIC, "CHN"),
    ("COLOMBIA", REGION_LATAM, "COL"),
    ("COMOROS", REGION_MEA, "COM"),
    ("CONGO (DEMOCRATIC REPUBLIC OF THE)", REGION_MEA, "COD"),
    ("CONGO (REPUBLIC OF THE)", REGION_MEA, "COG"),
    ("COSTA RICA", REGION_LATAM, "CRI"),
    ("CÔTE D'IVOIRE", REGION_MEA, "CIV"),
    ("CROATIA", REGION_EUROPE, "HRV"),
    ("CUBA", REGION_LATAM, "CUB"),
    ("CYPRUS", REGION_EUROPE, "CYP"),
    ("CZECH REPUBLIC", REGION_EUROPE, "CZE"),
    ("DENMARK", REGION_EUROPE, "DNK"),
    ("DJIBOUTI", REGION_MEA, "DJI"),
    ("DOMINICA", REGION_LATAM, "DMA"),
    ("DOMINICAN REPUBLIC", REGION_LATAM, "DOM"),
    ("ECUADOR", REGION_LATAM, "ECU"),
    ("EGYPT", REGION_MEA, "EGY"),
    ("EL SALVADOR", REGION_LATAM, "SLV"),
    ("EQUATORIAL GUINEA", REGION_MEA, "GNQ"),
    ("ERITREA", REGION_MEA, "ERI"),
    ("ESTONIA", REGION_EUROPE, "EST"),
    ("ESWATINI", REGION_MEA, "SWZ"),
    ("ETHIOPIA", REGION_MEA, "ETH"),
    ("FIJI", REGION_ASIA_PACIFIC, "FJI"),
    ("FINLAND", REGION_EUROPE, "FIN"),
    ("FRANCE", REGION_EUROPE, "FRA"),
    ("GABON", REGION_MEA, "GAB"),
    ("GAMBIA", REGION_MEA, "GMB"),
    ("GEORGIA", REGION_EUROPE, "GEO"),
    ("GERMANY", REGION_EUROPE, "DEU"),
    ("GHANA", REGION_MEA, "GHA"),
    ("GREECE", REGION_EUROPE, "GRC"),
    ("GRENADA", REGION_LATAM, "GRD"),
    ("GUATEMALA", REGION_LATAM, "GTM"),
    ("GUINEA", REGION_MEA, "GIN"),
    ("GUINEA-BISSAU", REGION_MEA, "GNB"),
    ("GUYANA", REGION_LATAM, "GUY"),
    ("HAITI", REGION_LATAM, "HTI"),
    ("HONDURAS", REGION_LATAM, "HND"),
    ("HUNGARY", REGION_EUROPE, "HUN"),
    ("ICELAND", REGION_EUROPE, "ISL"),
    ("INDIA", REGION_ASIA_PACIFIC, "IND"),
    ("INDONESIA", REGION_ASIA_PACIFIC, "IDN"),
    ("IRAN", REGION_MEA, "IRN"),
    ("IRAQ", REGION_MEA, "IRQ"),
    ("IRELAND", REGION_EUROPE, "IRL"),
    ("ISRAEL", REGION_MEA, "ISR"),
    ("ITALY", REGION_EUROPE, "ITA"),
    ("JAMAICA", REGION_LATAM, "JAM"),
    ("JAPAN", REGION_ASIA_PACIFIC, "JPN"),
    ("JORDAN", REGION_MEA, "JOR"),
    ("KAZAKHSTAN", REGION_ASIA_PACIFIC, "KAZ"),
    ("KENYA", REGION_MEA, "KEN"),
    ("KIRIBATI", REGION_ASIA_PACIFIC, "KIR"),
    ("KUWAIT", REGION_MEA, "KWT"),
    ("KYRGYZSTAN", REGION_ASIA_PACIFIC, "KGZ"),
    ("LAOS", REGION_ASIA_PACIFIC, "LAO"),
    ("LATVIA", REGION_EUROPE, "LVA"),
    ("LEBANON", REGION_MEA, "LBN"),
    ("LESOTHO", REGION_MEA, "LSO"),
    ("LIBERIA", REGION_MEA, "LBR"),
    ("LIBYA", REGION_MEA, "LBY"),
    ("LIECHTENSTEIN", REGION_EUROPE, "LIE"),
    ("LITHUANIA", REGION_EUROPE, "LTU"),
    ("LUXEMBOURG", REGION_EUROPE, "LUX"),
    ("MADAGASCAR", REGION_MEA, "MDG"),
    ("MALAWI", REGION_MEA, "MWI"),
    ("MALAYSIA", REGION_ASIA_PACIFIC, "MYS"),
    ("MALDIVES", REGION_ASIA_PACIFIC, "MDV"),
    ("MALI", REGION_MEA, "MLI"),
    ("MALTA", REGION_EUROPE, "MLT"),
    ("MARSHALL ISLANDS", REGION_ASIA_PACIFIC, "MHL"),
    ("MAURITANIA", REGION_MEA, "MRT"),
    ("MAURITIUS", REGION_MEA, "MUS"),
    ("MEXICO", REGION_LATAM, "MEX"),
    ("MICRONESIA", REGION_ASIA_PACIFIC, "FSM"),
    ("MOLDOVA", REGION_EUROPE, "MDA"),
    ("MONACO", REGION_EUROPE, "MCO"),
    ("MONGOLIA", REGION_ASIA_PACIFIC, "MNG"),
    ("MONTENEGRO", REGION_EUROPE, "MNE"),
    ("MOROCCO", REGION_MEA, "MAR"),
    ("MOZAMBIQUE", REGION_MEA, "MOZ"),
    ("MYANMAR", REGION_ASIA_PACIFIC, "MMR"),
    ("NAMIBIA", REGION_MEA, "NAM"),
    ("NAURU", REGION_ASIA_PACIFIC, "NRU"),
    ("NEPAL", REGION_ASIA_PACIFIC, "NPL"),
    ("NETHERLANDS", REGION_EUROPE, "NLD"),
    ("NEW ZEALAND", REGION_ASIA_PACIFIC, "NZL"),
    ("NICARAGUA", REGION_LATAM, "NIC"),
    ("NIGER", REGION_MEA, "NER"),
    ("NIGERIA", REGION_MEA, "NGA"),
    ("NORTH KOREA", REGION_ASIA_PACIFIC, "PRK"),
    ("NORTH MACEDONIA", REGION_EUROPE, "MKD"),
    ("NORWAY", REGION_EUROPE, "NOR"),
    ("OMAN", REGION_MEA, "OMN"),
    ("PAKISTAN", REGION_ASIA_PACIFIC, "PAK"),
    ("PALAU", REGION_ASIA_PACIFIC, "PLW"),
    ("PANAMA", REGION_LATAM, "PAN"),
    ("PAPUA NEW GUINEA", REGION_ASIA_PACIFIC, "PNG"),
    ("PARAGUAY", REGION_LATAM, "PRY"),
    ("PERU", REGION_LATAM, "PER"),
    ("PHILIPPINES", REGION_ASIA_PACIFIC, "PHL"),
    ("POLAND", REGION_EUROPE, "POL"),
    ("PORTUGAL", REGION_EUROPE, "PRT"),
    ("QATAR", REGION_MEA, "QAT"),
    ("ROMANIA", REGION_EUROPE, "ROU"),
    ("RUSSIA", REGION_EUROPE, "RUS"),
    ("RWANDA", REGION_MEA, "RWA"),
    ("SAINT KITTS AND NEVIS", REGION_LATAM, "KNA"),
    ("SAINT LUCIA", REGION_LATAM, "LCA"),
    ("SAINT VINCENT AND THE GRENADINES", REGION_LATAM, "VCT"),
    ("SAMOA", REGION_ASIA_PACIFIC, "WSM"),
    ("SAN MARINO", REGION_EUROPE, "SMR"),
    ("SAO TOME AND PRINCIPE", REGION_MEA, "STP"),
    ("SAUDI ARABIA", REGION_MEA, "SAU"),
    ("SENEGAL", REGION_MEA, "SEN"),
    ("SERBIA", REGION_EUROPE, "SRB"),
    ("SEYCHELLES", REGION_MEA, "SYC"),
    ("SIERRA LEONE", REGION_MEA, "SLE"),
    ("SINGAPORE", REGION_ASIA_PACIFIC, "SGP"),
    ("SLOVAKIA", REGION_EUROPE, "SVK"),
    ("SLOVENIA", REGION_EUROPE, "SVN"),
    ("SOLOMON ISLANDS", REGION_ASIA_PACIFIC, "SLB"),
    ("SOMALIA", REGION_MEA, "SOM"),
    ("SOUTH AFRICA", REGION_MEA, "ZAF"),
    ("SOUTH SUDAN", REGION_MEA, "SSD"),
    ("SOUTH KOREA", REGION_ASIA_PACIFIC, "KOR"),
    ("SPAIN", REGION_EUROPE, "ESP"),
    ("SRI LANKA", REGION_ASIA_PACIFIC, "LKA"),
    ("SUDAN", REGION_MEA, "SDN"),
    ("SURINAME", REGION_LATAM, "SUR"),
    ("SWEDEN", REGION_EUROPE, "SWE"),
    ("SWITZERLAND", REGION_EUROPE, "CHE"),
    ("SYRIA", REGION_MEA, "SYR"),
    ("TAJIKISTAN", REGION_ASIA_PACIFIC, "TJK"),
    ("TANZANIA", REGION_MEA, "TZA"),
    ("THAILAND", REGION_ASIA_PACIFIC, "THA"),
    ("TIMOR-LESTE", REGION_ASIA_PACIFIC, "TLS"),
    ("TOGO", REGION_MEA, "TGO"),
    ("TONGA", REGION_ASIA_PACIFIC, "TON"),
    ("TRINIDAD AND TOBAGO", REGION_LATAM, "TTO"),
    ("TUNISIA", REGION_MEA, "TUN"),
    ("TURKEY", REGION_EUROPE, "TUR"),
    ("TURKMENISTAN", REGION_ASIA_PACIFIC, "TKM"),
    ("TUVALU", REGION_ASIA_PACIFIC, "TUV"),
    ("UGANDA", REGION_MEA, "UGA"),
    ("UKRAINE", REGION_EUROPE, "UKR"),
    ("UNITED ARAB EMIRATES", REGION_MEA, "ARE"),
    ("UNITED KINGDOM", REGION_EUROPE, "GBR"),
    ("UNITED STATES", REGION_NORTH_AMERICA, "USA"),
    ("URUGUAY", REGION_LATAM, "URY"),
    ("UZBEKISTAN", REGION_ASIA_PACIFIC, "UZB"),
    ("VANUATU", REGION_ASIA_PACIFIC, "VUT"),
    ("VENEZUELA", REGION_LATAM, "VEN"),
    ("VIETNAM", REGION_ASIA_PACIFIC, "VNM"),
    ("YEMEN", REGION_MEA, "YEM"),
    ("ZAMBIA", REGION_MEA, "ZMB"),
    ("ZIMBABWE", REGION_MEA, "ZWE"),
)

STANDARD_COUNTRIES: tuple[str, ...] = tuple(name for name, _, _ in _COUNTRY_TABLE)

COUNTRY_TO_REGION: dict[str, str] = {name: region for name, region, _ in _COUNTRY_TABLE}

COUNTRY_TO_ISO3: dict[str, str] = {name: iso3 for name, _, iso3 in _COUNTRY_TABLE}

# Historical, colloquial and formal variants, plus territories folded into
# their sovereign state.
PREDEFINED_COUNTRY_MAPPINGS: dict[str, str] = {
    "BRUNEI DARUSSALAM": "BRUNEI",
    "HOLLAND": "NETHERLANDS",
    "THE NETHERLANDS": "NETHERLANDS",
    "NETHERLANDS (KINGDOM OF THE)": "NETHERLANDS",
    "SINT MAARTEN (DUTCH PART)": "NETHERLANDS",
    "ARUBA": "NETHERLANDS",
    "CURACAO": "NETHERLANDS",
    "TANZANIA, UNITED REPUBLIC OF": "TANZANIA",
    "UNITED STATES MINOR OUTLYING ISLANDS": "UNITED STATES",
    "UNITED STATES OF AMERICA": "UNITED STATES",
    "PUERTO RICO": "UNITED STATES",
    "USA": "UNITED STATES",
    "US": "UNITED STATES",
    "U.S.A.": "UNITED STATES",
    "NORTHERN IRELAND": "UNITED KINGDOM",
    "ENGLAND": "UNITED KINGDOM",
    "SCOTLAND": "UNITED KINGDOM",
    "WALES": "UNITED KINGDOM",
    "GREAT BRITAIN": "UNITED KINGDOM",
    "BRITAIN": "UNITED KINGDOM",
    "UK": "UNITED KINGDOM",
    "FALKLAND ISLANDS (MALVINAS)": "UNITED KINGDOM",
    "BERMUDA": "UNITED KINGDOM",
    "VENEZUELA (BOLIVARIAN REPUBLIC OF)": "VENEZUELA",
    "KOSOVO": "SERBIA",
    "CZECHIA": "CZECH REPUBLIC",
    "HONG KONG": "CHINA",
    "HONG KONG SAR": "CHINA",
    "MACAO": "CHINA",
    "MACAU": "CHINA",
    "TAIWAN, PROVINCE OF CHINA": "CHINA",
    "TAIWAN": "CHINA",
    "PEOPLE'S REPUBLIC OF CHINA": "CHINA",
    "CHINA, PEOPLE'S REPUBLIC OF": "CHINA",
    "BOLIVIA (PLURINATIONAL STATE OF)": "BOLIVIA",
    "GUADELOUPE": "FRANCE",
    "RÉUNION": "FRANCE",
    "REUNION": "FRANCE",
    "SAINT MARTIN (FRENCH PART)": "FRANCE",
    "FRENCH POLYNESIA": "FRANCE",
    "MARTINIQUE": "FRANCE",
    "TÜRKIYE": "TURKEY",
    "TURKIYE": "TURKEY",
    "CONGO": "CONGO (REPUBLIC OF THE)",
    "REPUBLIC OF CONGO": "CONGO (REPUBLIC OF THE)",
    "DEMOCRATIC REPUBLIC OF CONGO": "CONGO (DEMOCRATIC REPUBLIC OF THE)",
    "DRC": "CONGO (DEMOCRATIC REPUBLIC OF THE)",
    "MOLDOVA, REPUBLIC OF": "MOLDOVA",
    "KOREA": "SOUTH KOREA",
    "KOREA, SOUTH": "SOUTH KOREA",
    "KOREA, REPUBLIC OF": "SOUTH KOREA",
    "REPUBLIC OF KOREA": "SOUTH KOREA",
    "KOREA, NORTH": "NORTH KOREA",
    "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF": "NORTH KOREA",
    "SLOVAK REPUBLIC": "SLOVAKIA",
    "U.ARAB.EMIRATES": "UNITED ARAB EMIRATES",
    "UAE": "UNITED ARAB EMIRATES",
    "KSA": "SAUDI ARABIA",
    "VIET NAM": "VIETNAM",
    "RUSSIAN FEDERATION": "RUSSIA",
    "IRAN, ISLAMIC REPUBLIC OF": "IRAN",
    "SYRIAN ARAB REPUBLIC": "SYRIA",
    "LAO PEOPLE'S DEMOCRATIC REPUBLIC": "LAOS",
    "MACEDONIA": "NORTH MACEDONIA",
    "IVORY COAST": "CÔTE D'IVOIRE",
    "COTE D'IVOIRE": "CÔTE D'IVOIRE",
    "EAST TIMOR": "TIMOR-LESTE",
    "CAPE VERDE": "CABO VERDE",
    "SWAZILAND": "ESWATINI",
    "BURMA": "MYANMAR",
    "NORTH SUDAN": "SUDAN",
    "BOSNIA": "BOSNIA AND HERZEGOVINA",
    "BOSNIA HERZEGOVINA": "BOSNIA AND HERZEGOVINA",
    "SAINT KITTS": "SAINT KITTS AND NEVIS",
    "ST KITTS AND NEVIS": "SAINT KITTS AND NEVIS",
    "ST LUCIA": "SAINT LUCIA",
    "SAINT VINCENT": "SAINT VINCENT AND THE GRENADINES",
    "ST VINCENT AND THE GRENADINES": "SAINT VINCENT AND THE GRENADINES",
    "SAO TOME": "SAO TOME AND PRINCIPE",
    "TRINIDAD": "TRINIDAD AND TOBAGO",
    "ANTIGUA": "ANTIGUA AND BARBUDA",
    "FEDERATED STATES OF MICRONESIA": "MICRONESIA",
}
