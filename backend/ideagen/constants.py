"""Centralized lookup tables for the generation pipeline.

Every keyword vocabulary, tier table and pattern list used by the
normalizer, context builder, feasibility engine and safeguard filter lives
here as plain data, so tuning them never requires touching the logic.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

# ── Budget tiers ────────────────────────────────────────────────────────
# Ordered micro → scale. Keys are the values the frontend form submits.

BUDGET_RANGES: Dict[str, Dict[str, object]] = {
    "under-1k": {"min": 0, "max": 1000, "label": "Micro Budget", "tier": "micro"},
    "1k-5k": {"min": 1000, "max": 5000, "label": "Small Budget", "tier": "small"},
    "5k-20k": {"min": 5000, "max": 20000, "label": "Moderate Budget", "tier": "moderate"},
    "20k-50k": {"min": 20000, "max": 50000, "label": "Growth Budget", "tier": "growth"},
    "over-50k": {"min": 50000, "max": 200000, "label": "Scale Budget", "tier": "scale"},
}

BUDGET_TIERS: List[str] = ["micro", "small", "moderate", "growth", "scale"]

# Smallest tier: vague budgets are read conservatively.
DEFAULT_BUDGET_KEY = "under-1k"

# Checked in order; first substring hit wins.
BUDGET_FUZZY_KEYWORDS: List[Tuple[str, str]] = [
    ("very low", "under-1k"),
    ("minimal", "under-1k"),
    ("almost nothing", "under-1k"),
    ("very little", "under-1k"),
    ("bootstrapping", "under-1k"),
    ("no money", "under-1k"),
    ("shoestring", "under-1k"),
    ("low", "1k-5k"),
    ("limited", "1k-5k"),
    ("tight", "1k-5k"),
    ("small", "1k-5k"),
    ("medium", "5k-20k"),
    ("moderate", "5k-20k"),
    ("reasonable", "5k-20k"),
    ("some savings", "5k-20k"),
    ("good", "20k-50k"),
    ("substantial", "20k-50k"),
    ("solid", "20k-50k"),
    ("high", "over-50k"),
    ("significant", "over-50k"),
    ("large", "over-50k"),
]

# ── Location contexts ───────────────────────────────────────────────────

LOCATION_CONTEXTS: Dict[str, Dict[str, str]] = {
    "urban": {
        "marketAccess": "high",
        "footTraffic": "high",
        "rentCost": "high",
        "digitalInfra": "strong",
        "competitionLevel": "high",
    },
    "suburban": {
        "marketAccess": "medium-high",
        "footTraffic": "medium",
        "rentCost": "medium",
        "digitalInfra": "strong",
        "competitionLevel": "medium",
    },
    "semi-urban": {
        "marketAccess": "medium",
        "footTraffic": "medium",
        "rentCost": "low-medium",
        "digitalInfra": "moderate",
        "competitionLevel": "low-medium",
    },
    "rural": {
        "marketAccess": "low",
        "footTraffic": "low",
        "rentCost": "low",
        "digitalInfra": "limited",
        "competitionLevel": "low",
    },
    "remote": {
        "marketAccess": "very-low",
        "footTraffic": "minimal",
        "rentCost": "very-low",
        "digitalInfra": "limited",
        "competitionLevel": "minimal",
    },
}

# Middle ground when the location cannot be read.
DEFAULT_LOCATION_TYPE = "semi-urban"

# Order matters: "downtown" before "town", "small city" before "city",
# "suburb" and "semi-urban" before "urban".
LOCATION_FUZZY_KEYWORDS: List[Tuple[str, str]] = [
    ("downtown", "urban"),
    ("small city", "semi-urban"),
    ("town", "semi-urban"),
    ("district", "semi-urban"),
    ("suburb", "suburban"),
    ("outskirts", "suburban"),
    ("semi-urban", "semi-urban"),
    ("semi urban", "semi-urban"),
    ("rural", "rural"),
    ("urban", "urban"),
    ("city", "urban"),
    ("metro", "urban"),
    ("village", "rural"),
    ("countryside", "rural"),
    ("farm", "rural"),
    ("agricultural", "rural"),
    ("isolated", "remote"),
    ("mountain", "remote"),
    ("island", "remote"),
]

# ── Languages ───────────────────────────────────────────────────────────

SUPPORTED_LANGUAGES: Dict[str, str] = {"en": "English", "hi": "Hindi"}
DEFAULT_LANGUAGE = "en"

LANGUAGE_ALIASES: Dict[str, str] = {
    "en": "en",
    "eng": "en",
    "english": "en",
    "hi": "hi",
    "hindi": "hi",
    "हिंदी": "hi",
    "हिन्दी": "hi",
}

# ── Skill categories (multi-label keyword classifier) ───────────────────

SKILL_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "technical": ["coding", "programming", "software", "web", "app", "data", "computer", "tech", "engineering"],
    "creative": ["design", "art", "music", "writing", "photography", "video", "content", "creative"],
    "service": ["teaching", "tutoring", "consulting", "coaching", "mentoring", "counseling", "helping"],
    "trade": ["cooking", "baking", "crafting", "sewing", "carpentry", "repair", "maintenance", "making"],
    "business": ["sales", "marketing", "accounting", "management", "organizing", "planning", "strategy"],
    "agricultural": ["farming", "gardening", "livestock", "agriculture", "cultivation", "harvest"],
    "healthcare": ["nursing", "caregiving", "health", "wellness", "fitness", "therapy"],
}

GENERAL_SKILL_CATEGORY = "general"

# ── Local economy profiles ──────────────────────────────────────────────
# Named regions are matched by substring on the normalized region text.

REGIONAL_ECONOMY_PROFILES: Dict[str, Dict[str, object]] = {
    "agra": {
        "dominantSectors": ["tourism", "handicrafts", "hospitality", "food"],
        "opportunities": [
            "Heritage walking tours",
            "Marble inlay handicraft sales",
            "Local food trails",
            "Travel photography services",
        ],
        "challenges": ["Seasonal demand", "Crowding near monuments", "Permit requirements"],
        "avgIncome": "low-moderate",
        "digitalPenetration": "moderate",
    },
    "jaipur": {
        "dominantSectors": ["tourism", "textiles", "gems and jewellery", "handicrafts"],
        "opportunities": [
            "Block-print textile workshops",
            "Curated bazaar shopping walks",
            "Home-stay hospitality",
            "Online craft storefronts",
        ],
        "challenges": ["Intense tourist-market competition", "Summer off-season", "Middleman margins"],
        "avgIncome": "moderate",
        "digitalPenetration": "moderate",
    },
    "goa": {
        "dominantSectors": ["tourism", "fisheries", "hospitality", "food"],
        "opportunities": [
            "Guided nature and beach experiences",
            "Home-cooked regional meals",
            "Rental and repair services for visitors",
            "Local produce delivery",
        ],
        "challenges": ["Monsoon off-season", "Licensing for tourism services", "Price competition"],
        "avgIncome": "moderate",
        "digitalPenetration": "high",
    },
    "kerala": {
        "dominantSectors": ["agriculture", "tourism", "wellness", "spices"],
        "opportunities": [
            "Spice and produce packaging",
            "Wellness and yoga sessions",
            "Backwater experience guiding",
            "Coconut-based craft products",
        ],
        "challenges": ["Monsoon disruption", "Certification for wellness services", "Logistics to cities"],
        "avgIncome": "moderate",
        "digitalPenetration": "high",
    },
}

GENERIC_ECONOMY_PROFILES: Dict[str, Dict[str, object]] = {
    "urban": {
        "dominantSectors": ["services", "retail", "technology", "food"],
        "opportunities": [
            "Online services",
            "Delivery-based businesses",
            "Professional consulting",
            "E-commerce",
        ],
        "challenges": ["High competition", "High rent", "Customer attention is scarce"],
        "avgIncome": "moderate-high",
        "digitalPenetration": "high",
    },
    "semi-urban": {
        "dominantSectors": ["retail", "services", "small manufacturing", "agriculture"],
        "opportunities": [
            "Local retail",
            "Service businesses",
            "Food processing",
            "Education services",
        ],
        "challenges": ["Moderate competition", "Growing but limited market"],
        "avgIncome": "low-moderate",
        "digitalPenetration": "moderate",
    },
    "rural": {
        "dominantSectors": ["agriculture", "handicrafts", "local services"],
        "opportunities": [
            "Farm-to-table products",
            "Agricultural processing",
            "Local crafts sold online",
            "Community services",
        ],
        "challenges": ["Limited market access", "Transportation", "Digital connectivity"],
        "avgIncome": "low",
        "digitalPenetration": "limited",
    },
}

LOCATION_TO_ECONOMY_PROFILE: Dict[str, str] = {
    "urban": "urban",
    "suburban": "urban",
    "semi-urban": "semi-urban",
    "rural": "rural",
    "remote": "rural",
}

# ── Audience personas ───────────────────────────────────────────────────

AUDIENCE_PERSONAS: Dict[str, Dict[str, object]] = {
    "students": {
        "keywords": ["student", "young", "college", "youth"],
        "characteristics": ["price-sensitive", "tech-savvy", "social-media-active"],
        "channels": ["Instagram", "WhatsApp", "YouTube"],
        "priceSensitivity": "high",
    },
    "professionals": {
        "keywords": ["professional", "working", "office", "employee"],
        "characteristics": ["time-constrained", "quality-focused", "convenience-seeking"],
        "channels": ["LinkedIn", "email", "Google"],
        "priceSensitivity": "moderate",
    },
    "families": {
        "keywords": ["family", "families", "parent", "mother", "father"],
        "characteristics": ["value-oriented", "safety-conscious", "trust-seeking"],
        "channels": ["Facebook", "WhatsApp groups", "local networks"],
        "priceSensitivity": "moderate",
    },
    "tourists": {
        "keywords": ["tourist", "traveler", "traveller", "visitor"],
        "characteristics": ["experience-seeking", "mobile-first", "review-dependent"],
        "channels": ["TripAdvisor", "Google Maps", "Instagram"],
        "priceSensitivity": "low",
    },
    "local-community": {
        "keywords": ["local", "community", "neighbor", "neighbour", "village"],
        "characteristics": ["relationship-driven", "word-of-mouth", "loyalty-potential"],
        "channels": ["local markets", "community boards", "WhatsApp"],
        "priceSensitivity": "moderate-high",
    },
}

# Lowest → highest; the strongest sensitivity among matched personas wins.
PRICE_SENSITIVITY_ORDER: List[str] = ["low", "moderate", "moderate-high", "high"]
DEFAULT_PRICE_SENSITIVITY = "moderate"

# Channels that only work with solid internet access.
DIGITAL_ONLY_CHANNELS: frozenset = frozenset({"Instagram", "LinkedIn", "YouTube", "TripAdvisor"})
OFFLINE_CHANNELS: List[str] = ["local word-of-mouth", "community gatherings"]

# ── Resource constraints by budget tier ─────────────────────────────────

RESOURCE_CONSTRAINTS: Dict[str, Dict[str, object]] = {
    "micro": {
        "canAfford": ["home-based setup", "free tools", "personal network marketing"],
        "shouldAvoid": ["paid advertising", "inventory investment", "rental space"],
        "recommendedApproach": "Start with zero-cost validation, grow organically",
    },
    "small": {
        "canAfford": ["basic tools", "small inventory", "social media ads"],
        "shouldAvoid": ["large inventory", "premium locations", "employees"],
        "recommendedApproach": "Lean startup approach with minimal viable products",
    },
    "moderate": {
        "canAfford": ["professional tools", "modest inventory", "basic marketing"],
        "shouldAvoid": ["over-investment", "premium real estate"],
        "recommendedApproach": "Balanced investment with room for testing",
    },
    "growth": {
        "canAfford": ["professional setup", "marketing budget", "initial team"],
        "shouldAvoid": ["over-scaling", "unnecessary overhead"],
        "recommendedApproach": "Strategic investment with clear milestones",
    },
    "scale": {
        "canAfford": ["professional setup", "marketing budget", "initial team"],
        "shouldAvoid": ["over-scaling", "unnecessary overhead"],
        "recommendedApproach": "Strategic investment with clear milestones",
    },
}

HIGH_RENT_AVOID: List[str] = ["physical retail space"]
HIGH_RENT_AFFORD: List[str] = ["shared workspace", "online-first approach"]

# ── Feasibility & simulation ────────────────────────────────────────────

SCORE_ORDER: List[str] = ["market", "execution", "capital", "risk"]
ROADMAP_PHASES: List[str] = ["Phase 1", "Phase 2", "Phase 3", "Phase 4"]

# Fractions of the budget ceiling expected as first-year revenue.
REVENUE_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "micro": {"min": 0.3, "max": 1.5},
    "small": {"min": 0.5, "max": 2.0},
    "moderate": {"min": 0.4, "max": 1.8},
    "growth": {"min": 0.3, "max": 1.5},
    "scale": {"min": 0.25, "max": 1.2},
}

REVENUE_CEILING_MULTIPLE = 5
PROFIT_MARGIN_MIN = 0.10
PROFIT_MARGIN_MAX = 0.30

MARKET_CAP_LOW_ACCESS = 70
CAPITAL_FLOOR_MICRO = 75

REVENUE_DISCLAIMER = (
    "These are rough estimates based on limited data. Actual results may vary "
    "significantly. Do not make financial decisions based solely on these projections."
)

# ── Ethical safeguards ──────────────────────────────────────────────────
# Matched case-insensitively on word boundaries. Treat as tunable.

BLOCKED_TERMS: List[str] = [
    "hate speech",
    "kill",
    "explosive",
    "explosives",
    "weapon",
    "weapons",
    "terror",
    "terrorism",
    "self-harm",
    "suicide",
    "scam",
    "fraud",
    "money laundering",
    "human trafficking",
    "trafficking",
    "child labor",
    "child labour",
    "drug dealing",
    "counterfeit",
    "illegal",
]

FLAGGED_BUSINESS_TYPES: List[str] = [
    "gambling",
    "adult content",
    "adult entertainment",
    "tobacco",
    "alcohol",
    "payday lending",
    "predatory lending",
    "multi-level marketing",
    "mlm",
]

EXPLOITATIVE_LABOR_PATTERNS: List[str] = [
    "unpaid intern",
    "unpaid work",
    "work without pay",
    "no minimum wage",
    "below minimum wage",
    "below-minimum wage",
    "volunteer labor",
    "forced labor",
    "forced labour",
    "child work",
    "child labor",
    "24/7 availability",
]

FINANCIAL_MISINFORMATION_PATTERNS: List[str] = [
    "guaranteed returns",
    "guaranteed income",
    "guaranteed profit",
    "risk-free",
    "zero risk",
    "get rich quick",
    "get-rich-quick",
    "passive income overnight",
    "100% profit",
    "cannot fail",
    "instant success",
]

# Range is "implausibly wide" above this max/min ratio.
REVENUE_RANGE_MAX_RATIO = 10
# Implied profit margin above this is flagged.
PROFIT_MARGIN_CEILING = 0.5

BIAS_PATTERNS: Dict[str, List[str]] = {
    "gender": [
        "women cannot",
        "men cannot",
        "only men can",
        "only women can",
        "men are better",
        "women are better",
        "not suitable for women",
    ],
    "age": ["only young people", "old people can't", "old people cannot", "too old to"],
    "disability": ["must be able-bodied", "requires full mobility", "no disabilities"],
    "socioeconomic": [
        "requires connections",
        "need wealthy network",
        "privileged background",
        "poor people cannot",
    ],
}
