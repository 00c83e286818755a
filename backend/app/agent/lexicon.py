"""
Lexicon - static alias tables and regex families for the rule engine.

Pure data. Loaded once at import, never mutated.

ORDER MATTERS EVERYWHERE IN THIS FILE:
- Alias tables are scanned top to bottom, first substring hit wins.
- Regex families are tried in list order, first match wins.
Reordering an entry changes parse outcomes for ambiguous input.

KNOWN RISK: alias matching is plain substring containment, no word
boundaries. Short aliases over-match inside longer words ("acc" in
"account", "bar" in "barah", "tin" in "setting"). Kept as-is for parse
compatibility with existing drafts.
"""
import re

from ai.command_schema import GodownHint, Intent, PaymentMode, ProductCategory, UOM

# Letters of both scripts. Devanagari matras sit inside U+0900..U+097F.
LETTER = r"a-z\u0900-\u097F"
WORD_END = rf"(?![{LETTER}])"
NUMBER = r"(\d+(?:\.\d+)?)"
# A number that is really a size ("8mm", "2x2") must not be read as a price.
NOT_SIZE = r"(?![\d.]|\s*(?:mm|एमएम|मिमी|sq|rd|inch|इंच|[x×*]\s*\d))"


def _rx(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern, re.IGNORECASE)


# ==============================================================================
# ALIAS TABLES (alias -> canonical value)
# ==============================================================================

CATEGORY_ALIASES = (
    # Multi-word aliases first so they are not shadowed by "rod" / "wire"
    ("binding wire", ProductCategory.WIRE),
    ("welding rod", ProductCategory.WIRE),
    ("l-patti", ProductCategory.STRUCTURAL),
    # TMT
    ("sariya", ProductCategory.TMT), ("rod", ProductCategory.TMT), ("bar", ProductCategory.TMT),
    ("tmt", ProductCategory.TMT), ("tor", ProductCategory.TMT),
    ("सरिया", ProductCategory.TMT), ("रॉड", ProductCategory.TMT), ("टीएमटी", ProductCategory.TMT),
    # Cement
    ("cement", ProductCategory.CEMENT), ("bori", ProductCategory.CEMENT), ("bag", ProductCategory.CEMENT),
    ("katta", ProductCategory.CEMENT),
    ("सीमेंट", ProductCategory.CEMENT), ("बोरी", ProductCategory.CEMENT), ("कट्टा", ProductCategory.CEMENT),
    # Pipe
    ("pipe", ProductCategory.PIPE), ("paip", ProductCategory.PIPE), ("tube", ProductCategory.PIPE),
    ("hollow", ProductCategory.PIPE),
    ("पाइप", ProductCategory.PIPE), ("ट्यूब", ProductCategory.PIPE),
    # Sheet
    ("chaddar", ProductCategory.SHEET), ("tin", ProductCategory.SHEET), ("sheet", ProductCategory.SHEET),
    ("profile", ProductCategory.SHEET), ("roofing", ProductCategory.SHEET),
    ("चद्दर", ProductCategory.SHEET), ("टीन", ProductCategory.SHEET), ("शीट", ProductCategory.SHEET),
    # Structural
    ("angle", ProductCategory.STRUCTURAL), ("engle", ProductCategory.STRUCTURAL),
    ("channel", ProductCategory.STRUCTURAL), ("beam", ProductCategory.STRUCTURAL),
    ("flat", ProductCategory.STRUCTURAL), ("patti", ProductCategory.STRUCTURAL),
    ("patta", ProductCategory.STRUCTURAL),
    ("एंगल", ProductCategory.STRUCTURAL), ("चैनल", ProductCategory.STRUCTURAL), ("पट्टी", ProductCategory.STRUCTURAL),
    # Wire / hardware
    ("wire", ProductCategory.WIRE), ("taar", ProductCategory.WIRE), ("nut", ProductCategory.WIRE),
    ("bolt", ProductCategory.WIRE),
    ("तार", ProductCategory.WIRE), ("बाइंडिंग", ProductCategory.WIRE),
    # Service
    ("ring", ProductCategory.SERVICE), ("kanti", ProductCategory.SERVICE),
)

BRAND_ALIASES = (
    # Sub-brands before parent brands
    ("kamdhenu nxt", "Kamdhenu NXT"), ("nxt", "Kamdhenu NXT"),
    ("jindal panther", "Jindal Panther"), ("panther", "Jindal Panther"),
    ("tata tiscon", "TATA Tiscon"), ("tiscon", "TATA Tiscon"),
    ("bangur power", "Bangur Power"), ("power", "Bangur Power"),
    ("bangur megna", "Bangur Megna"), ("megna", "Bangur Megna"),
    # TMT brands
    ("kamdhenu", "Kamdhenu"), ("कामधेनु", "Kamdhenu"),
    ("kay 2", "Kay 2"), ("kay2", "Kay 2"), ("के2", "Kay 2"),
    ("ankur", "Ankur"), ("अंकुर", "Ankur"),
    ("jindal", "Jindal"), ("जिंदल", "Jindal"),
    ("singhal", "Singhal"), ("सिंघल", "Singhal"),
    ("radhe", "Radhe"), ("राधे", "Radhe"),
    ("tata", "TATA"), ("टाटा", "TATA"),
    # Cement brands
    ("bangur", "Bangur"), ("बांगड़", "Bangur"),
    ("mycem", "Mycem"), ("माईसेम", "Mycem"),
    ("dalmia", "Dalmia"), ("डालमिया", "Dalmia"),
    ("ultratech", "Ultratech"), ("अल्ट्राटेक", "Ultratech"),
    ("acc", "ACC"), ("एसीसी", "ACC"),
)

GODOWN_ALIASES = (
    # Sutrahi yard (checked first: "bada godown" must not fall to a main alias)
    ("bada godown", GodownHint.SUTRAHI), ("sutrahi", GodownHint.SUTRAHI), ("yard", GodownHint.SUTRAHI),
    ("godown", GodownHint.SUTRAHI), ("site", GodownHint.SUTRAHI), ("bahar", GodownHint.SUTRAHI),
    ("सुतरही", GodownHint.SUTRAHI), ("यार्ड", GodownHint.SUTRAHI), ("गोदाम", GodownHint.SUTRAHI),
    ("बाहर", GodownHint.SUTRAHI),
    # Main location (shop counter)
    ("calendar", GodownHint.MAIN), ("shop", GodownHint.MAIN), ("dukan", GodownHint.MAIN),
    ("counter", GodownHint.MAIN), ("main", GodownHint.MAIN), ("city", GodownHint.MAIN),
    ("tiraha", GodownHint.MAIN),
    ("दुकान", GodownHint.MAIN), ("काउंटर", GodownHint.MAIN), ("मेन", GodownHint.MAIN),
)

PAYMENT_MODE_ALIASES = (
    ("cash", PaymentMode.CASH), ("nakad", PaymentMode.CASH), ("naqad", PaymentMode.CASH),
    ("नकद", PaymentMode.CASH), ("कैश", PaymentMode.CASH),
    ("online", PaymentMode.ONLINE), ("upi", PaymentMode.ONLINE), ("gpay", PaymentMode.ONLINE),
    ("phonepe", PaymentMode.ONLINE), ("paytm", PaymentMode.ONLINE), ("ऑनलाइन", PaymentMode.ONLINE),
    ("cheque", PaymentMode.CHEQUE), ("chek", PaymentMode.CHEQUE), ("चेक से", PaymentMode.CHEQUE),
)

# ==============================================================================
# INTENT TRIGGERS
# ==============================================================================

RATE_HEURISTIC_CONFIDENCE = 0.88
KEYWORD_CONFIDENCE = 0.9
QTY_HINT_CONFIDENCE = 0.6
DEFAULT_CONFIDENCE = 0.3

# High-signal rate heuristics, tried before the phrase lists.
RATE_WORD = _rx(rf"(?<![{LETTER}])(?:rate|रेट|bhav|भाव|price|दाम|daam)")
RATE_QUERY_WORD = _rx(r"(?:kitna|kya|कितना|क्या|how much|what)")
RATE_UPDATE_VERB = _rx(r"(?:kar\s*do|kar\s*de|karo|set|change|update|lagao|लगाओ|कर\s*दो|कर\s*दे|करो)")
ANY_NUMBER = _rx(r"\d")

# Phrase lists in priority order. Meta intent (cancel) first, then the
# specific multi-word phrases, generic single words last.
INTENT_KEYWORDS = (
    (Intent.CANCEL_ACTION, ("cancel", "रद्द", "clear", "hatao", "हटाओ")),
    (Intent.GENERATE_RATE_BANNER, ("rate banner", "banner", "बैनर", "rate list")),
    (Intent.CHECK_RATE, ("rate kitna", "rate kya", "रेट कितना", "रेट क्या", "bhav", "भाव", "price check",
                         "rate check")),
    (Intent.UPDATE_RATE, ("rate kar do", "rate lagao", "रेट करो", "रेट लगाओ", "रेट कर दो", "set rate",
                          "change rate", "update rate")),
    (Intent.SHARE_LEDGER, ("reminder", "रिमाइंडर", "tagada", "तगादा", "share ledger", "khata bhejo",
                           "खाता भेजो", "hisab bhejo")),
    (Intent.SHARE_QUOTE, ("share quote", "quote bhejo", "quotation bhejo", "कोटेशन भेजो")),
    (Intent.ADD_STOCK_MANUAL, ("stock add", "add stock", "stock jodo", "स्टॉक जोड़ो", "maal add", "माल जोड़ो",
                               "inward")),
    (Intent.TRANSFER_STOCK, ("transfer", "bhejo", "भेजो", "shift", "move")),
    (Intent.CALCULATE_WEIGHT, ("weight", "wajan", "वजन", "kitna kg", "कितना किलो")),
    (Intent.CALCULATE_PRICE, ("price calculate", "kitna rupay", "कितना रुपया", "total")),
    (Intent.CHECK_LEDGER, ("ledger", "khata", "खाता", "hisab", "हिसाब", "balance", "baki", "बकाया")),
    (Intent.CHECK_STOCK, ("stock kitna", "स्टॉक कितना", "check stock", "maal kitna", "माल कितना",
                          "kitna hai")),
    (Intent.ADD_PURCHASE_DRAFT, ("purchase", "kharid", "खरीद", "maal aaya", "माल आया")),
    (Intent.CREATE_ESTIMATE, ("estimate", "bill banao", "बिल बनाओ", "quotation", "कोटेशन", "एस्टीमेट")),
    (Intent.CREATE_ORDER, ("order", "book karo", "बुक करो", "ऑर्डर")),
    (Intent.ADD_PAYMENT, ("payment", "jama", "जमा", "received", "credit", "भुगतान")),
)

# ==============================================================================
# REGEX FAMILIES
# ==============================================================================

# (family, pattern, formatter) - mm, AxB, sq, round
SIZE_PATTERNS = (
    ("TMT_MM", _rx(rf"(?<![\w.])(\d{{1,2}})\s*(?:mm|एमएम|मिमी){WORD_END}"), lambda m: f"{m.group(1)}mm"),
    ("PIPE_AXB", _rx(r"(?<![\w.])(\d+(?:\.\d+)?)\s*[x×*]\s*(\d+(?:\.\d+)?)(?![\d.])"),
     lambda m: f"{m.group(1)}x{m.group(2)}"),
    ("PIPE_SQ", _rx(rf"(?<![\w.])(\d+(?:\.\d+)?)\s*(?:sq|square|स्क्वायर){WORD_END}"), lambda m: f"{m.group(1)}sq"),
    ("PIPE_ROUND", _rx(rf"(?<![\w.])(\d+(?:\.\d+)?)\s*(?:rd|round|inch|इंच|gol|गोल){WORD_END}"),
     lambda m: f"{m.group(1)}rd"),
)

# (unit, pattern) - bag, pieces, bundle, kilograms, ton
UOM_PATTERNS = (
    (UOM.BAG, _rx(rf"(?<![\w.])(\d+)\s*(?:bori|bags|bag|katta|बोरी|कट्टा|कट्टे){WORD_END}")),
    (UOM.PCS, _rx(rf"(?<![\w.])(\d+)\s*(?:pcs|pc|pieces|piece|nos|length|len|पीस|टुकड़े){WORD_END}")),
    (UOM.BUNDLE, _rx(rf"(?<![\w.])(\d+)\s*(?:bundles|bundle|bndl|बंडल){WORD_END}")),
    (UOM.KGS, _rx(rf"(?<![\w.])(\d+(?:\.\d+)?)\s*(?:kilograms|kilogram|kgs|kg|kilo|किलो){WORD_END}")),
    (UOM.TON, _rx(rf"(?<![\w.])(\d+(?:\.\d+)?)\s*(?:tons|ton|mt|टन){WORD_END}")),
)

# Free-standing number, not glued to a unit or size ("8mm" is skipped).
BARE_NUMBER = _rx(r"(?<![\w.])(\d+(?:\.\d+)?)(?![\w.]|\s*[x×*]\s*\d)")

# Fallback estimate signal: a number glued to a unit or size word.
QTY_OR_SIZE_HINT = _rx(r"\d+\s*(?:mm|piece|pcs|bori|kg|bag|bundle|कट्टा|बोरी|किलो|बंडल)")

_VERB = r"(?:kar\s*do|kar\s*de|karo|करो|कर\s*दो|कर\s*दे|lagao|लगाओ)"
_RUPEE_WORD = r"(?:rupees|rupee|rupaye|rupay|rs\.?|₹|रुपये|रुपए|रुपया)"

PRICE_PATTERNS = (
    # "ka rate 65", "rate ko ₹65", "rate for ankur 8mm to 65"
    _rx(rf"(?:rate|रेट|price|भाव|bhav|daam|दाम)(?:\s*(?:to|ko|को|=|:)|\s.*?(?<![a-z])to(?![a-z]))?"
        rf"\s*(?:₹|rs\.?|रुपये|रुपए)?\s*{NUMBER}{NOT_SIZE}"),
    # "65 rupaye kar do"
    _rx(rf"(?<![\w.]){NUMBER}\s*{_RUPEE_WORD}\s*(?:ka\s+|का\s+)?(?:kar|karo|करो|कर|लगाओ|lagao|set)"),
    # "kar do 65", "set to 65"
    _rx(rf"(?:{_VERB}|set\s+to|change\s+to|make\s+it)\s*(?:₹|rs\.?)?\s*{NUMBER}{NOT_SIZE}"),
    # "65 kar do"
    _rx(rf"(?<![\w.]){NUMBER}\s*(?:₹|rs\.?)?\s*{_VERB}"),
)

AMOUNT_PATTERNS = (
    _rx(r"(?:₹|rs\.?|rupees?)\s*(\d+(?:\.\d+)?)"),
    _rx(rf"(?<![\w.]){NUMBER}\s*(?:{_RUPEE_WORD}|ka|का|ke|के){WORD_END}"),
)

# Any 4-10 digit run: a full number or the last digits of one
PHONE_PATTERN = _rx(r"(?<!\d)(\d{4,10})(?!\d)")

# "Rajan ka", "Rajan Yadav ko", "राजन को"
CUSTOMER_NAME_HI = _rx(
    rf"(?<![{LETTER}0-9])([{LETTER}]+(?:\s+[{LETTER}]+)?)\s+(?:ka|ke|ko|का|के|को){WORD_END}"
)
# "reminder to Ramesh", "payment for Rajan Yadav"
CUSTOMER_NAME_EN = _rx(rf"(?<![{LETTER}])(?:to|for|of)\s+([{LETTER}]+(?:\s+[{LETTER}]+)?)")
NAME_STOP_WORDS = frozenset({"please", "ji", "bhai", "sir", "now", "abhi", "jaldi", "the", "a", "rate", "do"})

# Brand fallback: first word when it precedes a category token.
BRAND_BEFORE_CATEGORY = _rx(
    rf"^([{LETTER}]+)\s+(?:tmt|टीएमटी|सरिया|sariya|cement|सीमेंट|pipe|पाइप|sheet|शीट){WORD_END}"
)
CEMENT_WORDS = _rx(r"(?:cement|सीमेंट|बोरी|कट्टा|bag|bori|katta)")

# Multi-command separator: Hindi "aur" / English "and"
CLAUSE_SPLIT = _rx(rf"\s+(?:aur|और|and){WORD_END}\s*")

# ==============================================================================
# DISPLAY
# ==============================================================================

INTENT_DISPLAY = {
    Intent.CREATE_ESTIMATE: {"en": "New Estimate", "hi": "नया एस्टीमेट"},
    Intent.CREATE_ORDER: {"en": "New Order", "hi": "नया ऑर्डर"},
    Intent.SHARE_QUOTE: {"en": "Share Quote", "hi": "कोटेशन शेयर"},
    Intent.CHECK_STOCK: {"en": "Check Stock", "hi": "स्टॉक देखें"},
    Intent.CHECK_LEDGER: {"en": "View Ledger", "hi": "खाता देखें"},
    Intent.ADD_PAYMENT: {"en": "Add Payment", "hi": "भुगतान जोड़ें"},
    Intent.SHARE_LEDGER: {"en": "Share Ledger / Reminder", "hi": "खाता शेयर / रिमाइंडर"},
    Intent.ADD_STOCK_MANUAL: {"en": "Add Stock", "hi": "स्टॉक जोड़ें"},
    Intent.ADD_PURCHASE_DRAFT: {"en": "Purchase Draft", "hi": "खरीद ड्राफ्ट"},
    Intent.TRANSFER_STOCK: {"en": "Transfer Stock", "hi": "स्टॉक ट्रांसफर"},
    Intent.CHECK_RATE: {"en": "Check Rate", "hi": "रेट देखें"},
    Intent.UPDATE_RATE: {"en": "Update Rate", "hi": "रेट अपडेट"},
    Intent.GENERATE_RATE_BANNER: {"en": "Rate Banner", "hi": "रेट बैनर"},
    Intent.CALCULATE_WEIGHT: {"en": "Calculate Weight", "hi": "वजन कैलकुलेट"},
    Intent.CALCULATE_PRICE: {"en": "Calculate Price", "hi": "दाम कैलकुलेट"},
    Intent.CANCEL_ACTION: {"en": "Cancel", "hi": "रद्द करें"},
}

GODOWN_DISPLAY = {
    GodownHint.MAIN: "Calendar (Shop)",
    GodownHint.SUTRAHI: "Sutrahi (Yard)",
}
