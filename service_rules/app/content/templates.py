"""
Content templates and tokenized copy rendering.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..conditions.evaluator import format_value


class ContentSourceType(str, Enum):
    """Where a content tile comes from."""
    CMS = "CMS"
    TARGETED_LEAD = "TargetedLead"
    PRODUCT_RECO = "ProductReco"


@dataclass(frozen=True)
class ContentTemplate:
    """A tile layout and the tokens it exposes."""
    id: str
    name: str
    description: str
    source_type: ContentSourceType
    token_fields: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sourceType": self.source_type.value,
            "tokenFields": list(self.token_fields),
        }


CMS_TEMPLATES: Tuple[ContentTemplate, ...] = (
    ContentTemplate(
        "cms_article_card", "Article Card",
        "Standard article layout with image and summary",
        ContentSourceType.CMS,
        ("title", "summary", "author", "publishDate", "readTime", "category"),
    ),
    ContentTemplate(
        "cms_news_brief", "News Brief",
        "Compact news format with headline and key points",
        ContentSourceType.CMS,
        ("headline", "keyPoints", "source", "timestamp"),
    ),
    ContentTemplate(
        "cms_educational_tile", "Educational Tile",
        "Learning-focused content with tips and insights",
        ContentSourceType.CMS,
        ("title", "tip", "insight", "difficulty", "duration"),
    ),
)

TARGETED_LEAD_TEMPLATES: Tuple[ContentTemplate, ...] = (
    ContentTemplate(
        "lead_premium_showcase", "Premium Lead Showcase",
        "Highlighted lead opportunity with premium styling",
        ContentSourceType.TARGETED_LEAD,
        ("title", "description", "expectedReturn", "riskLevel", "minimumInvestment", "deadline"),
    ),
    ContentTemplate(
        "lead_exclusive_offer", "Exclusive Opportunity",
        "VIP-style lead presentation for high-value clients",
        ContentSourceType.TARGETED_LEAD,
        ("opportunityName", "exclusiveDetails", "potentialGains", "clientTier", "contactPerson"),
    ),
    ContentTemplate(
        "lead_personalized_match", "Personalized Match",
        "Tailored lead based on client profile and preferences",
        ContentSourceType.TARGETED_LEAD,
        ("matchReason", "leadTitle", "personalizedMessage", "relevanceScore", "nextSteps"),
    ),
)

PRODUCT_RECO_TEMPLATES: Tuple[ContentTemplate, ...] = (
    ContentTemplate(
        "product_investment_card", "Investment Product Card",
        "Standard investment product presentation",
        ContentSourceType.PRODUCT_RECO,
        ("productName", "productType", "expectedReturn", "riskRating", "minInvestment", "features"),
    ),
    ContentTemplate(
        "product_savings_offer", "Savings Product Offer",
        "Savings account or deposit product layout",
        ContentSourceType.PRODUCT_RECO,
        ("accountType", "interestRate", "benefits", "requirements", "promotionalOffer"),
    ),
    ContentTemplate(
        "product_insurance_plan", "Insurance Plan Card",
        "Insurance product with coverage details",
        ContentSourceType.PRODUCT_RECO,
        ("planName", "coverage", "premium", "benefits", "eligibility", "claimProcess"),
    ),
    ContentTemplate(
        "product_loan_option", "Loan Product Option",
        "Loan product with terms and rates",
        ContentSourceType.PRODUCT_RECO,
        ("loanType", "loanInterestRate", "maxAmount", "tenure", "eligibility", "processingTime"),
    ),
)

ALL_CONTENT_TEMPLATES: Tuple[ContentTemplate, ...] = CMS_TEMPLATES + TARGETED_LEAD_TEMPLATES + PRODUCT_RECO_TEMPLATES

SAMPLE_TOKEN_DATA: Dict[ContentSourceType, Dict[str, Any]] = {
    ContentSourceType.CMS: {
        "title": "Market Insights for Q4 2025",
        "summary": "Key trends and opportunities in the current market landscape",
        "author": "Financial Research Team",
        "publishDate": "2025-09-23",
        "readTime": "5 min",
        "category": "Market Analysis",
        "headline": "Asian Markets Show Strong Recovery",
        "keyPoints": ["Tech sector up 12%", "Banking resilience noted", "Green bonds trending"],
        "source": "KPlus Research",
        "timestamp": "2025-09-23 14:30",
        "tip": "Diversify your portfolio across multiple asset classes",
        "insight": "Historical data shows balanced portfolios outperform during volatility",
        "difficulty": "Intermediate",
        "duration": "10 minutes",
    },
    ContentSourceType.TARGETED_LEAD: {
        "title": "Exclusive REIT Opportunity",
        "description": "High-yield commercial real estate investment trust with 8.5% expected returns",
        "expectedReturn": "8.5%",
        "riskLevel": "Moderate",
        "minimumInvestment": "$50,000",
        "deadline": "2025-10-15",
        "opportunityName": "Premium Bangkok Office REIT",
        "exclusiveDetails": "Limited to top-tier clients with proven investment track record",
        "potentialGains": "Projected 12-15% total returns over 3 years",
        "clientTier": "Platinum",
        "contactPerson": "Sarah Chen, Senior Investment Advisor",
        "matchReason": "Matches your preference for real estate and moderate risk tolerance",
        "leadTitle": "Tailored Investment Opportunity",
        "personalizedMessage": "Based on your portfolio, this REIT complements your current holdings",
        "relevanceScore": "94%",
        "nextSteps": "Schedule consultation within 48 hours",
    },
    ContentSourceType.PRODUCT_RECO: {
        "productName": "KPlus Growth Fund",
        "productType": "Equity Mutual Fund",
        "expectedReturn": "7-9%",
        "riskRating": "Medium",
        "minInvestment": "$1,000",
        "features": ["Professional management", "Diversified portfolio", "Monthly SIP options"],
        "accountType": "High-Yield Savings",
        "interestRate": "4.25%",
        "benefits": ["No minimum balance", "Free transfers", "Mobile banking"],
        "requirements": ["Valid ID", "Proof of income"],
        "promotionalOffer": "Bonus 0.25% for first 6 months",
        "planName": "KPlus Life Protection Plus",
        "coverage": "Up to $500,000",
        "premium": "Starting from $89/month",
        "eligibility": "Ages 21-65",
        "claimProcess": "24/7 online claim submission",
        "loanType": "Personal Loan",
        "loanInterestRate": "5.99%",
        "maxAmount": "$100,000",
        "tenure": "Up to 7 years",
        "processingTime": "24-48 hours",
    },
}

TOKEN_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def templates_for_source(source_type: Optional[str] = None) -> List[ContentTemplate]:
    """Templates for one source type, or all of them."""
    if source_type is None:
        return list(ALL_CONTENT_TEMPLATES)
    return [t for t in ALL_CONTENT_TEMPLATES if t.source_type.value == source_type]


def get_template(template_id: str) -> Optional[ContentTemplate]:
    for template in ALL_CONTENT_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def render_tokenized_copy(
    template: str,
    source_type: ContentSourceType,
    data: Optional[Dict[str, Any]] = None,
) -> str:
    """Replace ``{{path|fallback}}`` tokens with sample data.

    The lookup key is the last dot-separated segment of ``path``. A truthy
    value wins, then a non-empty fallback; otherwise the token is kept as is.
    """
    values = SAMPLE_TOKEN_DATA.get(ContentSourceType(source_type), {}) if data is None else data

    def _substitute(match: "re.Match[str]") -> str:
        path, _, fallback = match.group(1).partition("|")
        key = path.strip().split(".")[-1]
        value = values.get(key)
        if value:
            return format_value(value)
        fallback = fallback.split("|")[0].strip()
        if fallback:
            return fallback
        return match.group(0)

    return TOKEN_PATTERN.sub(_substitute, template)
