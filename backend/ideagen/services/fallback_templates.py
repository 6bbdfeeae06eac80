"""Pre-authored fallback responses keyed by (budget key, location key).

Each template satisfies the full output contract on its own: scores in
fixed order, four labeled phases, three ideas, revenue within 5x the
tier's budget ceiling with 10-30% profit margins, disclaimer attached.
"""

from __future__ import annotations

from typing import Any, Dict

from ..constants import REVENUE_DISCLAIMER

FALLBACK_TEMPLATES: Dict[str, Dict[str, Dict[str, Any]]] = {
    # ── Micro budget ────────────────────────────────────────────────────
    "micro": {
        "urban": {
            "results": {
                "businessIdea": {
                    "title": "Neighborhood Skills Service",
                    "description": (
                        "Offer the skills you already have to people close by: tutoring, home cooking, "
                        "errands, small repairs or pet care. Start with one or two services and add more "
                        "as you learn what your neighbors ask for."
                    ),
                    "whyItFits": (
                        "Needs almost no upfront money. Your first customers can come from messaging "
                        "groups, building notice boards and people you already know."
                    ),
                },
                "feasibilityScores": [
                    {"label": "Market Demand", "value": 70, "iconKey": "market", "description": "Steady demand for local help"},
                    {"label": "Ease of Execution", "value": 78, "iconKey": "execution", "description": "Start with existing skills"},
                    {"label": "Capital Efficiency", "value": 90, "iconKey": "capital", "description": "Very little money needed"},
                    {"label": "Risk Level", "value": 68, "iconKey": "risk", "description": "Low cost to test and adjust"},
                ],
                "roadmap": [
                    {"phase": "Phase 1", "title": "Pick Your Services", "description": "Choose 2-3 services and write a short offer for local groups.", "timeframe": "Week 1"},
                    {"phase": "Phase 2", "title": "First Customers", "description": "Ask friends, family and neighbors. Offer a simple intro price.", "timeframe": "Week 2-3"},
                    {"phase": "Phase 3", "title": "Build Reputation", "description": "Collect reviews, ask for referrals and keep a customer list.", "timeframe": "Month 1-2"},
                    {"phase": "Phase 4", "title": "Focus and Grow", "description": "Keep the services people value most and raise prices gradually.", "timeframe": "Month 3-6"},
                ],
                "pitchSummary": "Turn everyday skills into steady income by serving your own neighborhood, starting this week.",
            },
            "ideas": [
                {
                    "title": "Neighborhood Skills Service",
                    "description": "Offer practical help to neighbors through local groups and word of mouth.",
                    "whyItFits": "Almost no startup cost and uses skills you already have.",
                    "localAdaptation": "Dense city blocks mean many potential customers within walking distance.",
                },
                {
                    "title": "Social Content Helper",
                    "description": "Create simple photos and posts for small shops using a smartphone.",
                    "whyItFits": "Needs only a phone and an eye for what looks good.",
                    "localAdaptation": "Many small city businesses want affordable online visibility.",
                },
                {
                    "title": "Home Tutoring Sessions",
                    "description": "Teach school subjects or practical skills in short weekly sessions.",
                    "whyItFits": "Knowledge is the main input and sessions can start at home.",
                    "localAdaptation": "City families often look for trusted tutors nearby.",
                },
            ],
            "decisionSupport": {
                "pros": [
                    "Very low upfront cost",
                    "Can start immediately with existing skills",
                    "Flexible schedule",
                ],
                "cons": [
                    "Income may be uneven at first",
                    "Needs regular outreach to find customers",
                    "Growth is limited by your own hours",
                ],
                "assumptions": [
                    "You have at least one skill people will pay for",
                    "You have a phone and basic internet access",
                    "Neighbors need everyday help",
                ],
                "risks": [
                    "Finding customers may be slow",
                    "Established providers compete on trust",
                    "Demand can change with seasons",
                ],
                "mitigations": [
                    "Start with your personal network",
                    "Stand out through reliability and friendliness",
                    "Offer more than one service",
                ],
                "revenueSimulation": {
                    "year1RevenueMin": 600,
                    "year1RevenueMax": 3000,
                    "year1ProfitMin": 60,
                    "year1ProfitMax": 900,
                    "currency": "USD",
                    "notes": "Rough estimate for part-time work of about 10 hours per week.",
                    "disclaimer": REVENUE_DISCLAIMER,
                },
                "explainability": (
                    "This suggestion puts low-cost entry first, which matches a micro budget and the "
                    "dense customer base of a city."
                ),
                "budgetSuitability": "moderate",
                "easeOfExecution": "easy",
            },
            "ethicalSafeguards": {
                "biasChecks": [
                    "Open to people of any gender, age or background",
                    "No prior business experience assumed",
                ],
                "inclusivityNotes": [
                    "Works with very limited resources",
                    "No special equipment required",
                ],
                "harmAvoidance": [
                    "Only lawful, everyday services suggested",
                    "Realistic expectations set",
                ],
            },
            "localAdaptation": {
                "regionFocus": "Urban neighborhoods",
                "localEconomyTie": "Service economy with demand for convenience",
                "accessibilityNotes": "Uses existing phone and messaging networks",
            },
        },
        "rural": {
            "results": {
                "businessIdea": {
                    "title": "Home Kitchen and Skills Classes",
                    "description": (
                        "Sell home-cooked snacks, preserves or meals to nearby families, and run small "
                        "paid classes that teach cooking or school subjects to local children and adults."
                    ),
                    "whyItFits": (
                        "Uses your own kitchen and knowledge, so the starting cost is ingredients and a "
                        "few basic supplies. Word of mouth travels quickly in small communities."
                    ),
                },
                "feasibilityScores": [
                    {"label": "Market Demand", "value": 62, "iconKey": "market", "description": "Reliable local demand for food and learning"},
                    {"label": "Ease of Execution", "value": 70, "iconKey": "execution", "description": "Builds on skills you already use"},
                    {"label": "Capital Efficiency", "value": 85, "iconKey": "capital", "description": "Can start with small batches"},
                    {"label": "Risk Level", "value": 64, "iconKey": "risk", "description": "Small amounts at stake while testing"},
                ],
                "roadmap": [
                    {"phase": "Phase 1", "title": "Test Your Offer", "description": "Cook a few samples and ask neighbors what they would buy.", "timeframe": "Week 1-2"},
                    {"phase": "Phase 2", "title": "First Sales", "description": "Sell small batches and hold one trial class at home.", "timeframe": "Week 3-4"},
                    {"phase": "Phase 3", "title": "Regular Schedule", "description": "Set weekly cooking days and class times people can rely on.", "timeframe": "Month 2-3"},
                    {"phase": "Phase 4", "title": "Reach Nearby Towns", "description": "Sell at weekly markets and take orders by phone.", "timeframe": "Month 4-6"},
                ],
                "pitchSummary": "Feed and teach your community from your own home, with costs you can cover from day one.",
            },
            "ideas": [
                {
                    "title": "Home Kitchen and Skills Classes",
                    "description": "Home-cooked food for local families plus small paid classes.",
                    "whyItFits": "Uses existing cooking and teaching skills at very low cost.",
                    "localAdaptation": "Families nearby value trusted, homemade food and local teaching.",
                },
                {
                    "title": "Village Tutoring Circle",
                    "description": "Group lessons for children after school in a shared space.",
                    "whyItFits": "Group sessions keep prices low while adding up to fair income.",
                    "localAdaptation": "Rural areas often have few tutoring options.",
                },
                {
                    "title": "Preserves and Pickles",
                    "description": "Small batches of preserves made from seasonal local produce.",
                    "whyItFits": "Local produce is cheap in season and keeps well once preserved.",
                    "localAdaptation": "Weekly markets and nearby towns are natural outlets.",
                },
            ],
            "decisionSupport": {
                "pros": [
                    "Very low startup cost",
                    "Strong community trust once known",
                    "Ingredients available locally",
                ],
                "cons": [
                    "Small local market",
                    "Travel needed to reach more buyers",
                    "Produce supply changes with seasons",
                ],
                "assumptions": [
                    "Access to a home kitchen",
                    "Basic transport to a weekly market",
                    "Some space at home for small classes",
                ],
                "risks": [
                    "Food safety rules for selling cooked food",
                    "Weather affecting produce prices",
                    "Limited buyers nearby",
                ],
                "mitigations": [
                    "Check local food-selling rules before scaling up",
                    "Keep a few dependable suppliers",
                    "Take orders by phone from nearby towns",
                ],
                "revenueSimulation": {
                    "year1RevenueMin": 300,
                    "year1RevenueMax": 1500,
                    "year1ProfitMin": 30,
                    "year1ProfitMax": 450,
                    "currency": "USD",
                    "notes": "Conservative estimate for part-time work alongside other commitments.",
                    "disclaimer": REVENUE_DISCLAIMER,
                },
                "explainability": (
                    "This suggestion builds on skills you already have and local ingredients, keeping "
                    "costs inside a micro budget in a rural setting."
                ),
                "budgetSuitability": "moderate",
                "easeOfExecution": "moderate",
            },
            "ethicalSafeguards": {
                "biasChecks": [
                    "Suitable for people with different levels of schooling",
                    "No land ownership assumed",
                ],
                "inclusivityNotes": [
                    "Works with limited digital access",
                    "Flexible hours around family and farm work",
                ],
                "harmAvoidance": [
                    "Food safety considerations flagged",
                    "Fair prices for local suppliers encouraged",
                ],
            },
            "localAdaptation": {
                "regionFocus": "Rural villages and nearby towns",
                "localEconomyTie": "Connected to local produce and community life",
                "accessibilityNotes": "Relies on word of mouth and weekly markets rather than internet",
            },
        },
    },
    # ── Small budget ────────────────────────────────────────────────────
    "small": {
        "urban": {
            "results": {
                "businessIdea": {
                    "title": "Specialized Local Service",
                    "description": (
                        "Offer a focused, higher-quality version of a common service: meal preparation, "
                        "home organization, exam tutoring or event help. Quality and reliability are the "
                        "selling points."
                    ),
                    "whyItFits": (
                        "A small budget covers good tools and a little advertising, and city customers "
                        "pay more for dependable specialists."
                    ),
                },
                "feasibilityScores": [
                    {"label": "Market Demand", "value": 72, "iconKey": "market", "description": "Good demand for dependable services"},
                    {"label": "Ease of Execution", "value": 68, "iconKey": "execution", "description": "Some skill building needed"},
                    {"label": "Capital Efficiency", "value": 78, "iconKey": "capital", "description": "Tools pay back quickly"},
                    {"label": "Risk Level", "value": 66, "iconKey": "risk", "description": "Manageable with planning"},
                ],
                "roadmap": [
                    {"phase": "Phase 1", "title": "Choose a Niche", "description": "Pick one service and the customers who need it most.", "timeframe": "Week 1-2"},
                    {"phase": "Phase 2", "title": "Set Up", "description": "Buy essential tools and create a simple online profile.", "timeframe": "Week 3-4"},
                    {"phase": "Phase 3", "title": "Launch and Learn", "description": "Serve first customers and collect feedback.", "timeframe": "Month 2"},
                    {"phase": "Phase 4", "title": "Refine and Expand", "description": "Adjust pricing and add a second related service.", "timeframe": "Month 3-6"},
                ],
                "pitchSummary": "Be the dependable specialist your city customers recommend to their friends.",
            },
            "ideas": [
                {
                    "title": "Specialized Local Service",
                    "description": "A focused, higher-quality service for one customer group.",
                    "whyItFits": "Budget covers quality tools and some marketing.",
                    "localAdaptation": "City customers support specialist pricing.",
                },
                {
                    "title": "Curated Online Shop",
                    "description": "A small selection of products chosen for one audience.",
                    "whyItFits": "Small stock levels keep money from being tied up.",
                    "localAdaptation": "Good delivery options in urban areas.",
                },
                {
                    "title": "Event Support Services",
                    "description": "Setup, decoration or catering help for local events.",
                    "whyItFits": "Budget covers basic equipment and transport.",
                    "localAdaptation": "Cities host frequent private and community events.",
                },
            ],
            "decisionSupport": {
                "pros": [
                    "Room for fair premium pricing",
                    "Clear way to stand out",
                    "Referrals drive growth",
                ],
                "cons": [
                    "Customers expect high quality",
                    "Takes time to build a reputation",
                    "Skill building needed",
                ],
                "assumptions": [
                    "Willingness to specialize",
                    "Access to basic tools",
                    "Patience to build relationships",
                ],
                "risks": [
                    "Niche may be small",
                    "Established competitors",
                    "Spending drops in hard times",
                ],
                "mitigations": [
                    "Start broad, then narrow down",
                    "Gather testimonials early",
                    "Keep a value-priced option",
                ],
                "revenueSimulation": {
                    "year1RevenueMin": 2500,
                    "year1RevenueMax": 10000,
                    "year1ProfitMin": 250,
                    "year1ProfitMax": 3000,
                    "currency": "USD",
                    "notes": "Rough estimate for a part-time start growing toward regular weekly clients.",
                    "disclaimer": REVENUE_DISCLAIMER,
                },
                "explainability": (
                    "With a small budget, investing in quality for one clear audience creates lasting "
                    "differentiation in a competitive city market."
                ),
                "budgetSuitability": "good",
                "easeOfExecution": "moderate",
            },
            "ethicalSafeguards": {
                "biasChecks": ["Accessible across demographics"],
                "inclusivityNotes": ["Works for people from various backgrounds"],
                "harmAvoidance": ["Fair, transparent pricing encouraged"],
            },
            "localAdaptation": {
                "regionFocus": "Urban residential and professional areas",
                "localEconomyTie": "Service economy focus",
                "accessibilityNotes": "Good market access and delivery options",
            },
        },
        "rural": {
            "results": {
                "businessIdea": {
                    "title": "Rural Experience Workshops",
                    "description": (
                        "Host visitors for hands-on experiences: cooking with local ingredients, craft "
                        "workshops, farm walks or nature trails. Combine hospitality with teaching."
                    ),
                    "whyItFits": (
                        "A small budget covers basic seating, supplies and some promotion, and rural "
                        "authenticity is something city visitors look for."
                    ),
                },
                "feasibilityScores": [
                    {"label": "Market Demand", "value": 64, "iconKey": "market", "description": "Growing interest in rural experiences"},
                    {"label": "Ease of Execution", "value": 60, "iconKey": "execution", "description": "Setup takes some effort"},
                    {"label": "Capital Efficiency", "value": 74, "iconKey": "capital", "description": "Uses existing space and skills"},
                    {"label": "Risk Level", "value": 58, "iconKey": "risk", "description": "Depends on seasons and weather"},
                ],
                "roadmap": [
                    {"phase": "Phase 1", "title": "Design the Experience", "description": "Decide what visitors will do, learn and take home.", "timeframe": "Week 1-2"},
                    {"phase": "Phase 2", "title": "Prepare the Space", "description": "Arrange seating, shade, water and basic safety items.", "timeframe": "Week 3-6"},
                    {"phase": "Phase 3", "title": "Launch and List", "description": "Invite a trial group, then list on local tourism pages.", "timeframe": "Month 2-3"},
                    {"phase": "Phase 4", "title": "Improve and Expand", "description": "Add new workshops based on visitor feedback.", "timeframe": "Month 4-6"},
                ],
                "pitchSummary": "Give visitors an authentic taste of rural life while earning from skills you already have.",
            },
            "ideas": [
                {
                    "title": "Rural Experience Workshops",
                    "description": "Hands-on cooking, craft and farm experiences for visitors.",
                    "whyItFits": "Uses existing space, skills and surroundings.",
                    "localAdaptation": "City residents increasingly seek rural day trips.",
                },
                {
                    "title": "Local Craft Production",
                    "description": "Handmade goods using materials found nearby.",
                    "whyItFits": "Budget covers materials and simple tools.",
                    "localAdaptation": "Unique local materials make products stand out.",
                },
                {
                    "title": "Packaged Local Specialties",
                    "description": "Regional foods packaged for shops in nearby towns.",
                    "whyItFits": "Budget covers basic packaging equipment.",
                    "localAdaptation": "Regional foods appeal to buyers beyond the village.",
                },
            ],
            "decisionSupport": {
                "pros": [
                    "Distinctive offer",
                    "Several income streams possible",
                    "Makes use of existing assets",
                ],
                "cons": [
                    "Seasonal demand",
                    "Setup takes effort",
                    "Harder to reach customers from a distance",
                ],
                "assumptions": [
                    "Space available to host small groups",
                    "Willingness to host visitors",
                    "Road access for visitors",
                ],
                "risks": [
                    "Weather dependency",
                    "Quiet off-season months",
                    "Local permits for hosting",
                ],
                "mitigations": [
                    "Offer indoor workshop options",
                    "Build direct relationships with repeat visitors",
                    "Start with simple, short experiences",
                ],
                "revenueSimulation": {
                    "year1RevenueMin": 1500,
                    "year1RevenueMax": 7500,
                    "year1ProfitMin": 150,
                    "year1ProfitMax": 2250,
                    "currency": "USD",
                    "notes": "Seasonal estimate with most income during good-weather months.",
                    "disclaimer": REVENUE_DISCLAIMER,
                },
                "explainability": (
                    "A rural location becomes an advantage through experience-based offers that a "
                    "small budget can set up."
                ),
                "budgetSuitability": "good",
                "easeOfExecution": "challenging",
            },
            "ethicalSafeguards": {
                "biasChecks": ["Welcoming to visitors of all backgrounds"],
                "inclusivityNotes": ["Accessible experience options offered"],
                "harmAvoidance": ["Respect for local environment and community encouraged"],
            },
            "localAdaptation": {
                "regionFocus": "Rural areas with visitor potential",
                "localEconomyTie": "Adds income alongside farming",
                "accessibilityNotes": "Requires road access for visitors",
            },
        },
    },
}
