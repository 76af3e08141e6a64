"""Starter content for new sections and the locally generated fallback page."""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...core.config import Config
from ..models import LandingPageDocument, SectionType, new_section_id
from .renderer import default_copyright

# Content given to a section added from the editor
DEFAULT_SECTION_CONTENT: Dict[str, Dict[str, Any]] = {
    SectionType.HERO.value: {
        "headline": "Main headline",
        "subheadline": "A short description of what you offer",
        "ctaText": "Get Started",
    },
    SectionType.FEATURES.value: {
        "title": "Our benefits",
        "features": [
            {"icon": "✨", "title": "Feature 1", "description": "Describe this feature"},
            {"icon": "🚀", "title": "Feature 2", "description": "Describe this feature"},
            {"icon": "💡", "title": "Feature 3", "description": "Describe this feature"},
        ],
    },
    SectionType.TESTIMONIALS.value: {
        "title": "What our customers say",
        "testimonials": [
            {"name": "Customer 1", "role": "CEO", "quote": "Excellent product!"},
        ],
    },
    SectionType.CTA.value: {
        "title": "Ready to start?",
        "subtitle": "Join thousands of happy customers",
        "ctaText": "Get Started",
        "ctaLink": "#",
    },
    SectionType.HOW_IT_WORKS.value: {
        "title": "How it works",
        "steps": [
            {"title": "Step 1", "description": "Describe the first step"},
            {"title": "Step 2", "description": "Describe the second step"},
            {"title": "Step 3", "description": "Describe the third step"},
        ],
    },
}

# Sections a stored page opens with when it has none yet
STARTER_SECTION_TYPES: List[str] = [
    SectionType.HERO.value,
    SectionType.FEATURES.value,
    SectionType.CTA.value,
]


def default_content_for_type(section_type: str) -> Dict[str, Any]:
    """Fresh copy of the starter content for ``section_type`` ({} for unknown types)."""
    return copy.deepcopy(DEFAULT_SECTION_CONTENT.get(section_type, {}))


def starter_sections() -> List[Dict[str, Any]]:
    return [
        {"id": new_section_id(t), "type": t, "content": default_content_for_type(t)}
        for t in STARTER_SECTION_TYPES
    ]


def create_personalized_fallback(
    title: str,
    description: Optional[str] = None,
    year: Optional[int] = None,
) -> LandingPageDocument:
    """
    Build a complete page from the title and description alone.

    Used when the generation service returns nothing usable. The result is
    always hero, features (4), how-it-works (3 steps), testimonials (2),
    cta and footer, with copy built around ``title`` and ``description``.
    """
    title = (title or "").strip() or "Your Project"
    description = (description or "").strip()
    year = year or datetime.now().year

    headline = title
    subheadline = description or f"Discover everything {title} can do for you and transform your experience."

    sections = [
        {
            "type": SectionType.HERO.value,
            "content": {
                "headline": headline,
                "subheadline": subheadline,
                "ctaText": "Get Started",
                "ctaLink": "#cta",
            },
        },
        {
            "type": SectionType.FEATURES.value,
            "content": {
                "title": f"Why choose {title}?",
                "features": [
                    {"icon": "🚀", "title": "Fast and efficient", "description": f"{title} delivers results in record time without cutting corners."},
                    {"icon": "💡", "title": "Innovative", "description": f"{title} brings modern ideas to the problems you face every day."},
                    {"icon": "🎯", "title": "Focused on results", "description": f"Every detail of {title} is designed around your success."},
                    {"icon": "🛡️", "title": "Safe and reliable", "description": f"Count on {title} to keep things running smoothly."},
                ],
            },
        },
        {
            "type": SectionType.HOW_IT_WORKS.value,
            "content": {
                "title": f"How {title} works",
                "steps": [
                    {"title": "Sign up", "description": f"Create your {title} account in under two minutes."},
                    {"title": "Set it up", "description": "Tailor everything to your needs."},
                    {"title": "Enjoy", "description": "Start using it and watch the results come in."},
                ],
            },
        },
        {
            "type": SectionType.TESTIMONIALS.value,
            "content": {
                "title": f"What people say about {title}",
                "testimonials": [
                    {"quote": f"{title} completely changed the way I work. Highly recommended!", "name": "Maria Silva", "role": "Entrepreneur"},
                    {"quote": f"Great results with {title} and outstanding support.", "name": "John Santos", "role": "Marketing Manager"},
                ],
            },
        },
        {
            "type": SectionType.CTA.value,
            "content": {
                "title": f"Ready to start with {title}?",
                "subtitle": description or "Join the people who are already taking advantage of it.",
                "ctaText": "Start for free",
                "ctaLink": "#",
            },
        },
        {
            "type": SectionType.FOOTER.value,
            "content": {"copyright": default_copyright(title, year)},
        },
    ]

    return LandingPageDocument.from_dict({
        "sections": sections,
        "metadata": {
            "primaryColor": Config.DEFAULT_PRIMARY_COLOR,
            "headline": headline,
            "subheadline": subheadline,
        },
    })
