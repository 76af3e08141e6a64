"""
Prompts and tool schema for landing page generation.

The tool schema is what keeps the model's answer parseable: the call forces
``generate_landing_page`` so the document arrives as a tool_use payload.
"""

from typing import Any, Dict, List

from ..models import GenerationRequest, SectionType

TOOL_NAME = "generate_landing_page"

SYSTEM_PROMPT = """You are an expert in building high-converting landing pages.

Your task is to generate a COMPLETE, PERSONALIZED landing page from the information the user provides.

IMPORTANT RULES:
1. NEVER produce generic or placeholder copy. Every line must be specific to this project.
2. If a wireframe or visual inspiration is attached, analyze its STRUCTURE and LAYOUT and create matching sections.
3. If the user provides a description or a content document, base all copy on it.
4. Write persuasive headlines and copy that converts.
5. Adapt the number and kind of sections to the project's context.
6. Pick colors that make sense for the project's niche.
7. Include at least 3-4 relevant features/benefits.
8. Testimonials must read as real and specific to the product or service.

SECTION STRUCTURE:
- hero: strong headline, persuasive subheadline, clear CTA
- features: list of benefits with emoji icons and descriptions
- how-it-works: clear steps explaining how it works
- testimonials: quotes with name and role
- cta: final call to action
- footer: copyright and legal information"""


def _item_schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "array",
        "items": {"type": "object", "properties": properties, "required": required},
    }


GENERATE_LANDING_PAGE_TOOL: Dict[str, Any] = {
    "name": TOOL_NAME,
    "description": "Generates a complete landing page structure with all sections and content.",
    "input_schema": {
        "type": "object",
        "properties": {
            "sections": {
                "type": "array",
                "description": "Landing page sections in display order",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": SectionType.values(),
                            "description": "Type of section",
                        },
                        "content": {
                            "type": "object",
                            "properties": {
                                "headline": {"type": "string", "description": "Main headline for hero section"},
                                "subheadline": {"type": "string", "description": "Subheadline or supporting text"},
                                "ctaText": {"type": "string", "description": "Call to action button text"},
                                "ctaLink": {"type": "string", "description": "Call to action link"},
                                "title": {"type": "string", "description": "Section title"},
                                "subtitle": {"type": "string", "description": "Section subtitle"},
                                "features": _item_schema(
                                    {
                                        "icon": {"type": "string", "description": "Emoji icon for the feature"},
                                        "title": {"type": "string"},
                                        "description": {"type": "string"},
                                    },
                                    ["title", "description"],
                                ),
                                "steps": _item_schema(
                                    {"title": {"type": "string"}, "description": {"type": "string"}},
                                    ["title", "description"],
                                ),
                                "testimonials": _item_schema(
                                    {
                                        "quote": {"type": "string"},
                                        "name": {"type": "string"},
                                        "role": {"type": "string"},
                                    },
                                    ["quote", "name"],
                                ),
                                "copyright": {"type": "string", "description": "Copyright text for footer"},
                            },
                        },
                    },
                    "required": ["type", "content"],
                },
            },
            "metadata": {
                "type": "object",
                "properties": {
                    "primaryColor": {"type": "string", "description": "Primary color in hex format (e.g., #6366f1)"},
                    "headline": {"type": "string", "description": "Main headline of the page"},
                    "subheadline": {"type": "string", "description": "Main subheadline"},
                },
                "required": ["primaryColor", "headline", "subheadline"],
            },
        },
        "required": ["sections", "metadata"],
    },
}


def build_user_prompt(request: GenerationRequest, has_wireframe: bool = False, has_inspiration: bool = False) -> str:
    """Text part of the user message. Image blocks are attached separately."""
    lines = [
        "Create a complete landing page for the following project:",
        "",
        f"**Title:** {request.title}",
    ]
    if request.description:
        lines.append(f"**Description:** {request.description}")
    if request.target_audience:
        lines.append(f"**Target audience:** {request.target_audience}")
    if request.tone:
        lines.append(f"**Tone of voice:** {request.tone}")
    if request.language:
        lines.append(f"**Write all copy in this language:** {request.language}")

    if has_wireframe:
        lines.append(
            "\n**IMPORTANT:** Analyze the attached wireframe/sketch. Use the STRUCTURE and ARRANGEMENT "
            "of its elements to organize the landing page sections: how many sections, their order and layout."
        )
    if has_inspiration:
        lines.append(
            "\n**IMPORTANT:** Analyze the attached inspiration image. Extract its COLORS, VISUAL STYLE and "
            "TYPOGRAPHY and apply them to the page. Use a similar color for primaryColor."
        )
    if request.doc_text:
        lines.append(
            "\n**IMPORTANT:** Use the text of this content document as the basis for the page copy:\n"
            f"<content_document>\n{request.doc_text}\n</content_document>"
        )
    elif request.content_doc_url:
        lines.append(
            f"\n**IMPORTANT:** A content document was provided ({request.content_doc_url}). "
            "Base the page copy on its information."
        )

    lines.append(
        f"\n\nGenerate the landing page with the {TOOL_NAME} tool. Include:\n"
        f'- A hero section with a strong headline based on the title "{request.title}"\n'
        "- A features/benefits section (at least 3 items)\n"
        "- A how-it-works section (3-4 steps)\n"
        "- A testimonials section (2-3 testimonials)\n"
        "- A final CTA section\n"
        "- A footer with copyright"
    )
    return "\n".join(lines)
