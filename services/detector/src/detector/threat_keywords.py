"""
Keyword tables for the SkySentinel detector.

All tables hold lowercase stems in both Ukrainian and Russian. A stem
matches as a plain substring of the lowercased message unless the
consuming function says otherwise.

``THREAT_KEYWORDS`` order matters: specific kinds come before generic
ones, and classifier output follows this order.
"""

from __future__ import annotations

from sky_common.models import ThreatKind

THREAT_KEYWORDS: tuple[tuple[ThreatKind, tuple[str, ...]], ...] = (
    (
        ThreatKind.ALL_CLEAR,
        (
            "відбій",
            "загроза минула",
            "чисте небо",
            "дорозвідка",
            "отбой",
            "угроза миновала",
            "чистое небо",
        ),
    ),
    (
        ThreatKind.HYPERSONIC,
        (
            "гіперзвук",
            "циркон",
            "орєшнік",
            "гиперзвук",
            "орешник",
            "zircon",
            "tsirkon",
            "oreshnik",
        ),
    ),
    (
        ThreatKind.BALLISTIC,
        (
            "балістик",
            "балістичн",
            "іскандер",
            "кінжал",
            "точка-у",
            "брсд",
            "міжконтинентальн",
            "баллистик",
            "баллістик",
            "искандер",
            "кинжал",
            "межконтинентальн",
            "iskander",
            "кедр",
            "kedr",
            "рс-26",
            "rs-26",
            "рубіж",
            "рубеж",
            "rubezh",
            "кн-23",
            "kn-23",
            "кн-25",
            "kn-25",
            "фатех",
            "fateh",
            "hwasong",
            "середньої дальності",
            "средней дальности",
        ),
    ),
    (
        ThreatKind.CRUISE_MISSILE,
        (
            "крилат",
            "калібр",
            "крылат",
            "калибр",
            # Cyrillic "х"
            "х-101",
            "х-555",
            "х-22",
            "х-59",
            "х-69",
            "х-35",
            "х-31",
            "х-55",
            # Latin "x"
            "x-101",
            "x-555",
            "x-22",
            "x-59",
            "x-69",
            "x-35",
            "x-31",
            "x-55",
            "томагавк",
            "tomahawk",
        ),
    ),
    (
        ThreatKind.GUIDED_BOMB,
        (
            "керован",
            "авіабомб",
            "авіаційн бомб",
            "плануюч",
            "управляем",
            "авиабомб",
            "планирующ",
            "каб-500",
            "каб-1500",
            "каб-250",
            "каб ",
            "каб,",
            "каб.",
            "каб\n",
            "умпб",
            "умпк",
            "jdam",
            "фаб-500",
            "фаб-1500",
            "фаб-250",
            "фаб-3000",
            "фаб ",
            "фаб,",
            "фаб.",
            "фаб\n",
        ),
    ),
    (
        ThreatKind.SHAHED,
        (
            "шахед",
            "shahed",
            "герань",
            "geran",
            "мопед",
            "газонокосил",
            "ударн",
            "бпла",
            "дрон-камікадзе",
            "дрон-камикадзе",
            "камікадзе",
            "камикадзе",
            "безпілотник",
            "беспилотник",
            "mohajer",
            "мохаджер",
            "дрон ",
            "дронів",
            "дронов",
            "махаон",
        ),
    ),
    (
        ThreatKind.RECON_DRONE,
        (
            "розвідувальн",
            "разведывательн",
            "орлан",
            "zala",
            "supercam",
            "ланцет",
            "елерон",
            "элерон",
            "картограф",
            "фурія",
            "фурия",
        ),
    ),
    (
        ThreatKind.AIRCRAFT,
        (
            "авіаці",
            "стратегічн авіаці",
            "тактичн авіаці",
            "зліт",
            "авиаци",
            "стратегическ авиаци",
            "тактическ авиаци",
            "взлёт",
            "взлет",
            "ту-95",
            "ту-160",
            "ту-22",
            "міг-31",
            "міг-29",
            "миг-31",
            "миг-29",
            "су-57",
            "су-35",
            "су-34",
            "су-30",
            "су-25",
            "су-24",
            "а-50",
            "a-50",
            "іл-76",
            "ил-76",
        ),
    ),
    # No "target" words here: a bare target is resolved from channel context.
    (
        ThreatKind.MISSILE,
        (
            "ракет",
            "запуск",
            "с-300",
            "s-300",
            "с-400",
            "s-400",
            "зенітн ракет",
            "зенитн ракет",
        ),
    ),
    (
        ThreatKind.OTHER,
        (
            "загроз",
            "небезпек",
            "тривог",
            "обстріл",
            "вибух",
            "прильот",
            "влучанн",
            "уламк",
            "укриття",
            "укрытие",
            "пожеж",
            "руйнуванн",
            "зруйнов",
            "інфраструктур",
            "кассетн",
            "касетн",
            "угроз",
            "опасност",
            "тревог",
            "обстрел",
            "взрыв",
            "прилёт",
            "прилет",
            "попадани",
            "осколк",
            "пожар",
            "разрушени",
            "инфраструктур",
            "громко",
        ),
    ),
)

KIND_ORDER: tuple[ThreatKind, ...] = tuple(kind for kind, _ in THREAT_KEYWORDS)

ALL_CLEAR_KEYWORDS: tuple[str, ...] = THREAT_KEYWORDS[0][1]

# ── Urgency / nationwide ──

URGENCY_KEYWORDS: tuple[str, ...] = (
    "повторн",
    "додатково",
    "ще ціл",
    "ще вихо",
    "нові ціл",
    "нова хвил",
    "увага!",
    "терміново",
    "негайно",
    "дополнительно",
    "ещё",
    "еще",
    "ще выход",
    "новая волна",
    "внимание!",
    "срочно",
    "немедленно",
)

# The country name is required; "по всій території області" is regional.
NATIONWIDE_KEYWORDS: tuple[str, ...] = (
    "по всій території україни",
    "всю територію україни",
    "всієї території україни",
    "по всій україні",
    "всій україні",
    "по всій країні",
    "по всей территории украины",
    "всю территорию украины",
    "всей территории украины",
    "по всей украине",
    "всей украине",
    "по всей стране",
)

# ── Combo heuristics ──

CRUISE_ABBREVIATION = "кр"
CRUISE_SUPPORT_WORDS: tuple[str, ...] = (
    "курс",
    "напрям",
    "направлен",
    "вектор",
    "ракет",
    "груп",
    "пуск",
)

AIRFRAME_WORDS: tuple[str, ...] = ("борт",)
STRATEGIC_MARKER_TOKENS: tuple[str, ...] = ("са",)
STRATEGIC_MARKER_STEMS: tuple[str, ...] = (
    "стратег",
    "ту-95",
    "ту-160",
    "ту-22",
)
AIRBORNE_MARKERS: tuple[str, ...] = (
    "повітр",
    "воздух",
    "в небі",
    "в небе",
)

SPEED_MARKERS: tuple[str, ...] = ("швидкісн", "скоростн")
TARGET_STEMS: tuple[str, ...] = ("ціл", "цел")

# ── Context triggers ──

# Declension-aware so "цілком", "целом", "целиком" and "целью" stay silent.
TARGET_TRIGGER_PATTERNS: tuple[str, ...] = (
    r"\bціл(?:ь|і|ей|ям|ями|ях)\b",
    r"\bцел(?:ь|и|ей|ям|ями|ях)\b",
)
LAUNCH_TRIGGERS: tuple[str, ...] = ("вихід", "виход", "выход")

TARGET_CONTEXT_KEYWORDS: tuple[tuple[ThreatKind, tuple[str, ...]], ...] = (
    (
        ThreatKind.BALLISTIC,
        ("балістик", "баллистик", "іскандер", "искандер", "кінжал", "кинжал"),
    ),
    (
        ThreatKind.CRUISE_MISSILE,
        ("крилат", "крылат", "калібр", "калибр", "х-101", "x-101"),
    ),
    (
        ThreatKind.SHAHED,
        ("шахед", "shahed", "герань", "geran", "мопед", "дрон", "бпла"),
    ),
)

# ── Report shape ──

LIVE_MOVEMENT_MARKERS: tuple[str, ...] = (
    "курс",
    "вектор",
    "у напрямку",
    "в напрямку",
    "в направлении",
    "летить",
    "летять",
    "летит",
    "летят",
    "у бік",
    "в сторону",
    "на підльоті",
    "на подлете",
    "залітає",
    "залетает",
    "заходить",
)

RECAP_MARKERS: tuple[str, ...] = (
    "збито",
    "подавлено",
    "знешкоджено",
    "усього",
    "всього",
    "зафіксовано",
    "за попередніми даними",
    "станом на",
    "у ніч на",
    "засобів повітряного нападу",
    "сбито",
    "уничтожено",
    "всего",
    "по предварительным данным",
    "по состоянию на",
    "в ночь на",
    "средств воздушного нападения",
)

RECAP_MIN_MARKERS = 2
RECAP_MIN_LINE_BREAKS = 10
RECAP_MIN_BULLETS = 3
RECAP_MIN_DIGITS = 20
BULLET_PREFIXES: tuple[str, ...] = ("-", "•", "–", "—", "*", "▪")

NEGATIVE_STATUS_MARKERS: tuple[str, ...] = (
    "більше не спостеріга",
    "не спостеріга",
    "не фіксу",
    "поки чисто",
    "наразі чисто",
    "поки тихо",
    "наразі тихо",
    "зникл",
    "загрози немає",
    "больше не наблюда",
    "не наблюда",
    "не фиксиру",
    "пока чисто",
    "пока тихо",
    "исчезл",
    "угрозы нет",
)

# A message made of nothing but a sign-off word.
SIGN_OFF_WORDS: tuple[str, ...] = ("все", "всё", "усе")

ACTIVE_ALERT_MARKERS: tuple[str, ...] = (
    "курс",
    "вектор",
    "у напрямку",
    "в напрямку",
    "в направлении",
    "вихід",
    "виход",
    "выход",
    "пуск",
    "увага",
    "внимание",
)
ACTIVE_ALERT_TOKENS: tuple[str, ...] = ("ще", "еще", "ещё")

CAUTIOUS_STATUS_PHRASES: tuple[str, ...] = (
    "можливі повторні пуски",
    "можливі повторні виходи",
    "можливі пуски",
    "можливі виходи",
    "возможны повторные пуски",
    "возможны повторные выходы",
    "возможны пуски",
    "возможны выходы",
)

# ── Location ──

OBLAST_WORDS: tuple[str, ...] = ("област", "обл.")

# Other major regions and cities; a message naming one of these but none
# of the configured places is about somewhere else.
NON_LOCAL_REGIONS: tuple[str, ...] = (
    "київ",
    "києв",
    "киев",
    "харків",
    "харьков",
    "дніпр",
    "днепр",
    "одес",
    "одещин",
    "запоріж",
    "запорож",
    "миколаїв",
    "николаев",
    "херсон",
    "сумщин",
    "суми",
    "сумы",
    "чернігів",
    "чернигов",
    "полтав",
    "кіровоград",
    "кировоград",
    "кропивницьк",
    "кропивницк",
    "вінниц",
    "винниц",
    "житомир",
    "черкас",
    "хмельниц",
    "львів",
    "львов",
    "тернопіл",
    "тернопол",
    "рівне",
    "ровно",
    "луцьк",
    "луцк",
    "волин",
    "ужгород",
    "закарпат",
    "івано-франків",
    "ивано-франков",
    "чернівц",
    "черновц",
    "донеччин",
    "донецьк",
    "донецк",
    "краматорськ",
    "луганськ",
    "луганск",
    "ізмаїл",
    "измаил",
    "кілія",
    "килия",
    "брянськ",
    "брянск",
    "курськ",
    "курск",
    "бєлгород",
    "белгород",
    "таганрог",
    "крим",
    "крым",
)
